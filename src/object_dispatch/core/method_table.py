"""
Method Table

Per-class, immutable mapping from method name to callable.

Design principles:
- A class IS its method table (there is no separate class object)
- Built exactly once, then shared by reference by every instance
- First declaration of a name wins; later duplicates are never resolved
- Every method takes the calling instance's dispatcher as its first argument

Class modules:
    A class can be written as a plain Python module. Its public top-level
    functions are the methods (or the names listed in `__methods__`), and
    `__class_info__` / `__fields__` carry metadata and default fields:

        __class_info__ = {'name': 'Point2D', 'version': '1.0.0'}
        __fields__ = [('x', 0), ('y', 0)]

        def dot(self, other):
            return self('x') * other('x') + self('y') * other('y')

Loaded modules are cached by absolute path.
"""

import hashlib
import importlib.util
import inspect
import sys
import traceback
from pathlib import Path
from types import MappingProxyType, ModuleType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DispatchError, MethodDefinitionError


class ClassModuleError(DispatchError):
    """Base exception for class module errors"""
    pass


class ClassModuleNotFoundError(ClassModuleError):
    """Raised when class module file doesn't exist"""
    pass


class ClassModuleLoadError(ClassModuleError):
    """Raised when class module can't be loaded (syntax error, import error)"""
    pass


class MethodTable:
    """
    Immutable name -> callable table shared by all instances of a class.
    """

    def __init__(
        self,
        entries: Iterable[Tuple[Any, Callable]] = (),
        name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Build the table.

        Args:
            entries: Ordered (name, callable) pairs
            name: Class name, used in reprs and introspection
            metadata: Free-form class metadata (version, author, ...)

        Raises:
            MethodDefinitionError: If an entry is malformed or its callable
                can't take the instance as first argument
        """
        declared: List[Any] = []
        methods: Dict[Any, Callable] = {}

        for entry in entries:
            try:
                method_name, method = entry
            except (TypeError, ValueError):
                raise MethodDefinitionError(
                    f"Method entry must be a (name, callable) pair, got {entry!r}"
                )

            _check_method(method_name, method)

            declared.append(method_name)
            methods.setdefault(method_name, method)

        object.__setattr__(self, '_declared', tuple(declared))
        object.__setattr__(self, '_methods', MappingProxyType(methods))
        object.__setattr__(self, '_name', name)
        object.__setattr__(self, '_metadata', MappingProxyType(dict(metadata or {})))

    @classmethod
    def from_functions(cls, *functions: Callable, name: Optional[str] = None) -> 'MethodTable':
        """Build a table keyed by each function's __name__"""
        return cls(((fn.__name__, fn) for fn in functions), name=name)

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def metadata(self) -> MappingProxyType:
        return self._metadata

    def lookup(self, name: Any, default: Any = None) -> Any:
        """Get the callable for `name` (first declaration), or `default`"""
        return self._methods.get(name, default)

    def names(self) -> List[Any]:
        """Reachable method names in declaration order"""
        return list(self._methods)

    def declared_names(self) -> List[Any]:
        """All declared method names, unreachable duplicates included"""
        return list(self._declared)

    def __contains__(self, name: Any) -> bool:
        return name in self._methods

    def __getitem__(self, name: Any) -> Callable:
        return self._methods[name]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __setattr__(self, attr: str, value: Any) -> None:
        raise AttributeError('MethodTable is immutable')

    def __delattr__(self, attr: str) -> None:
        raise AttributeError('MethodTable is immutable')

    def __repr__(self) -> str:
        label = self._name or 'anonymous'
        return f"MethodTable({label}: {', '.join(map(str, self._methods))})"


def _check_method(name: Any, method: Any) -> None:
    """Helper: make sure a method can receive the instance first"""
    if not callable(method):
        raise MethodDefinitionError(f"Method {name!r} is not callable: {method!r}")

    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        # Some builtins don't expose a signature
        return

    params = list(signature.parameters.values())
    if any(p.kind is p.VAR_POSITIONAL for p in params):
        raise MethodDefinitionError(
            f"Method {name!r} declares *args; variadic methods are not supported"
        )

    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    if not params or params[0].kind not in positional:
        raise MethodDefinitionError(
            f"Method {name!r} must take the instance as its first positional parameter"
        )


# Class module cache
_table_cache: Dict[str, MethodTable] = {}
_cache_stats = {'hits': 0, 'misses': 0}


def load_class_module(path: str | Path) -> ModuleType:
    """
    Import a class module file.

    Args:
        path: Path to the class module .py file

    Returns:
        The loaded module object

    Raises:
        ClassModuleNotFoundError: If file doesn't exist
        ClassModuleLoadError: If file can't be loaded (syntax error, etc.)
    """
    path = Path(path)

    if not path.exists():
        raise ClassModuleNotFoundError(f"Class module not found: {path}")

    if not path.is_file():
        raise ClassModuleNotFoundError(f"Path is not a file: {path}")

    # One sys.modules entry per file; a reload replaces it
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:12]
    module_name = f"object_dispatch_class_{path.stem}_{digest}"

    try:
        spec = importlib.util.spec_from_file_location(module_name, path)

        if spec is None or spec.loader is None:
            raise ClassModuleLoadError(f"Could not create module spec for: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)

        return module

    except ClassModuleLoadError:
        sys.modules.pop(module_name, None)
        raise
    except SyntaxError as e:
        sys.modules.pop(module_name, None)
        raise ClassModuleLoadError(f"Syntax error in class module {path}: {e}")
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ClassModuleLoadError(f"Failed to load class module {path}: {e}\n{traceback.format_exc()}")


def method_table_from_module(module: ModuleType) -> MethodTable:
    """
    Build a method table from a class module.

    Methods are the names in `__methods__` when present, otherwise every
    public function defined in the module itself, in definition order.

    Raises:
        ClassModuleLoadError: If a name in __methods__ isn't defined
        MethodDefinitionError: If a method has an unusable signature
    """
    names = getattr(module, '__methods__', None)

    if names is None:
        names = [
            attr for attr, value in vars(module).items()
            if not attr.startswith('_')
            and inspect.isfunction(value)
            and value.__module__ == module.__name__
        ]

    entries = []
    for attr in names:
        if not hasattr(module, attr):
            raise ClassModuleLoadError(
                f"__methods__ lists {attr!r} but the module doesn't define it"
            )
        entries.append((attr, getattr(module, attr)))

    metadata = get_class_metadata(module)
    return MethodTable(entries, name=metadata['name'], metadata=metadata)


def load_method_table(path: str | Path, reload: bool = False) -> MethodTable:
    """
    Load a class module file and build its method table.

    Args:
        path: Path to the class module .py file
        reload: If True, bypass cache and rebuild the table

    Returns:
        The (cached) MethodTable for that file
    """
    path_str = str(Path(path).absolute())

    if not reload and path_str in _table_cache:
        _cache_stats['hits'] += 1
        return _table_cache[path_str]

    _cache_stats['misses'] += 1

    module = load_class_module(path)
    table = method_table_from_module(module)

    _table_cache[path_str] = table
    return table


def get_class_metadata(module: ModuleType) -> Dict[str, Any]:
    """
    Get metadata from a class module.

    Looks for a __class_info__ dict; missing keys get defaults.
    """
    metadata = {
        'name': module.__name__,
        'version': '0.0.0',
        'description': '',
        'author': 'unknown',
    }
    metadata.update(getattr(module, '__class_info__', {}))
    metadata['fields'] = tuple(getattr(module, '__fields__', []))
    return metadata


def clear_cache():
    """Clear the method table cache"""
    global _cache_stats
    _table_cache.clear()
    _cache_stats = {'hits': 0, 'misses': 0}


def get_cache_stats() -> Dict[str, int]:
    """
    Get cache statistics.

    Returns:
        Dict with 'hits', 'misses', 'size'
    """
    return {
        'hits': _cache_stats['hits'],
        'misses': _cache_stats['misses'],
        'size': len(_table_cache),
    }
