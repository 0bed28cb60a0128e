"""
Object Dispatch: a minimal dynamic object model.

Instances are field stores, classes are shared method tables, and every
member access goes through one message-dispatch function.

The system provides:
- Field stores (per-instance, ordered, first-match lookup)
- Method tables (per-class, immutable, shared by reference)
- Dispatchers (fields first, methods second, MISSING otherwise)
- Self-logging instances (objects log to themselves)
- Class modules (a Python file is a class)

Example:
    >>> from object_dispatch import MethodTable, construct, derive
    >>>
    >>> def dot(self, other):
    ...     return self('x') * other('x') + self('y') * other('y')
    >>>
    >>> Point2D = MethodTable.from_functions(dot, name='Point2D')
    >>> a = construct(Point2D, [('x', 1), ('y', -2)])
    >>> b = construct(Point2D, [('x', 0), ('y', derive(lambda prior: prior['x']))])
    >>> a('dot', b)
    0
    >>> b('y', 42)
    >>> b('dot', a)
    -84
"""

from .config import DispatchConfig, get_config, reload_config
from .core.dispatcher import (
    MISSING,
    Dispatcher,
    construct,
    describe,
    expect_member,
    is_missing,
)
from .core.errors import (
    ClassConflictError,
    ClassNotFoundError,
    ConfigError,
    DispatchError,
    FieldArityError,
    FieldDefinitionError,
    MemberNotFoundError,
    MethodDefinitionError,
)
from .core.field_store import FieldStore, derive
from .core.method_table import (
    ClassModuleError,
    ClassModuleLoadError,
    ClassModuleNotFoundError,
    MethodTable,
    load_method_table,
    method_table_from_module,
)
from .core.self_logger import SelfLogger
from .runtime.object_runtime import ObjectRuntime

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core primitives
    "MISSING",
    "Dispatcher",
    "FieldStore",
    "MethodTable",
    "construct",
    "derive",
    "describe",
    "expect_member",
    "is_missing",
    # Class modules
    "load_method_table",
    "method_table_from_module",
    # Ambient
    "DispatchConfig",
    "ObjectRuntime",
    "SelfLogger",
    "get_config",
    "reload_config",
    # Errors
    "ClassModuleError",
    "ClassModuleLoadError",
    "ClassModuleNotFoundError",
    "ClassConflictError",
    "ClassNotFoundError",
    "ConfigError",
    "DispatchError",
    "FieldArityError",
    "FieldDefinitionError",
    "MemberNotFoundError",
    "MethodDefinitionError",
]
