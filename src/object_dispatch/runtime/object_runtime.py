"""
Object Runtime

Integrates the core primitives into a runtime for classes and instances.

A class is:
- A method table (shared, immutable)
- Default fields (optional, from the class module's __fields__)
- Metadata (from __class_info__)

An instance is:
- Its own field store
- A dispatcher bound to the class's method table
- Optionally, its own self-logger

The runtime:
- Loads classes from class modules
- Caches one method table per class id
- Constructs instances with the runtime's config and logging
- Provides introspection
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import DispatchConfig, get_config
from ..core.dispatcher import Dispatcher, construct, describe
from ..core.errors import ClassConflictError, ClassNotFoundError, FieldDefinitionError
from ..core.field_store import derive
from ..core.method_table import MethodTable, load_method_table
from ..core.self_logger import SelfLogger


class ObjectRuntime:
    """
    Runtime for dispatch objects.

    Owns the class registry; instances are handed out as dispatchers.
    """

    def __init__(self, config: Optional[DispatchConfig] = None):
        """
        Initialize runtime.

        Args:
            config: Dispatch settings (global config if None)
        """
        self.config = config or get_config()

        # Loaded classes, and the file each class id was loaded from
        self._classes: Dict[str, MethodTable] = {}
        self._sources: Dict[str, Path] = {}

        # Instances created per class, used for logger ids
        self._counters: Dict[str, int] = {}

        # Runtime-level log (class loads, instance creation)
        self.logger = SelfLogger(object_id='runtime', base_dir=self.config.log_dir)

    def load_class(self, path: str | Path, reload: bool = False) -> MethodTable:
        """
        Load a class from a class module file.

        Args:
            path: Path to class module (.py); its stem is the class id
            reload: Rebuild the method table even if already loaded

        Returns:
            The class's MethodTable

        Raises:
            ClassConflictError: If `class_id` already belongs to another
                file or to a registered table
        """
        path = Path(path)
        class_id = path.stem  # Filename without extension
        source = path.resolve()

        if class_id in self._classes and self._sources.get(class_id) != source:
            raise ClassConflictError(
                f"Class {class_id!r} already loaded from "
                f"{self._sources.get(class_id, 'register_class()')}, not {source}"
            )

        if not reload and class_id in self._classes:
            return self._classes[class_id]

        table = load_method_table(path, reload=reload)
        self._classes[class_id] = table
        self._sources[class_id] = source

        self.logger.info(
            f'Loaded class {class_id}',
            class_id=class_id,
            methods=len(table),
            source_path=str(path),
        )
        return table

    def register_class(self, class_id: str, method_table: MethodTable) -> MethodTable:
        """Register an already-built method table under `class_id`"""
        self._classes[class_id] = method_table
        self._sources.pop(class_id, None)
        self.logger.info(
            f'Registered class {class_id}',
            class_id=class_id,
            methods=len(method_table),
        )
        return method_table

    def get_class(self, class_id: str) -> MethodTable:
        """
        Get a loaded class.

        Raises:
            ClassNotFoundError: If nothing is registered under `class_id`
        """
        try:
            return self._classes[class_id]
        except KeyError:
            raise ClassNotFoundError(
                f"Class {class_id!r} not loaded. Available: {sorted(self._classes)}"
            )

    def list_classes(self) -> List[str]:
        return sorted(self._classes)

    def new(self, class_id: str, *field_initializers: Tuple[Any, Any]) -> Dispatcher:
        """
        Construct an instance of a loaded class.

        The class's default fields come first, in their declared order; a
        given initializer with the same name takes the default's place.
        Other given initializers follow, in order.

        Args:
            class_id: Class to instantiate
            *field_initializers: (name, initializer) pairs

        Returns:
            The new instance's Dispatcher
        """
        table = self.get_class(class_id)
        initializers = _merge_fields(table.metadata.get('fields', []), field_initializers)

        count = self._counters.get(class_id, 0) + 1
        self._counters[class_id] = count

        logger = None
        if self.config.trace:
            logger = SelfLogger(
                object_id=f'{class_id}-{count}',
                base_dir=self.config.log_dir,
            )

        instance = construct(table, initializers, config=self.config, logger=logger)

        self.logger.debug(
            f'Created {class_id}-{count}',
            class_id=class_id,
            instance=count,
        )
        return instance

    def get_logs(
        self,
        instance: Dispatcher,
        level: Optional[str] = None,
        limit: Optional[int] = None,
        **filters,
    ) -> List[Dict[str, Any]]:
        """Get an instance's logs (empty when tracing is off)"""
        if instance.logger is None:
            return []
        return instance.logger.get_logs(level=level, limit=limit, **filters)

    def get_metadata(self, class_id: str) -> Dict[str, Any]:
        """Get class metadata"""
        table = self.get_class(class_id)

        metadata = dict(table.metadata)
        metadata['class_id'] = class_id
        metadata['methods'] = table.names()
        metadata['instance_count'] = self._counters.get(class_id, 0)

        return metadata

    def describe(self, instance: Dispatcher) -> Dict[str, Any]:
        """Introspect an instance"""
        return describe(instance)


def _merge_fields(defaults, given) -> List[Tuple[Any, Any]]:
    """Helper: overlay given initializers onto a class's default fields"""
    given = list(given)

    # Position of the first given initializer for each name
    first_given: Dict[Any, int] = {}
    for position, entry in enumerate(given):
        if not isinstance(entry, (tuple, list)) or len(entry) != 2:
            raise FieldDefinitionError(
                f"Field initializer must be a (name, initializer) pair, got {entry!r}"
            )
        first_given.setdefault(entry[0], position)

    merged = []
    consumed = set()
    for name, initializer in defaults:
        position = first_given.get(name)
        if position is not None and position not in consumed:
            merged.append(tuple(given[position]))
            consumed.add(position)
        elif isinstance(initializer, derive):
            merged.append((name, initializer))
        else:
            # Defaults live on the class module; each instance gets its own copy
            merged.append((name, copy.deepcopy(initializer)))

    merged.extend(
        tuple(entry) for position, entry in enumerate(given)
        if position not in consumed
    )
    return merged
