"""
Dispatcher

The single entry point of every instance.

An instance IS its dispatcher: a callable bound to one FieldStore (owned)
and one MethodTable (shared). Every member access is a message:

    point('x')          # field get
    point('x', 3)       # field set
    point('dot', other) # method call, receives `point` as self

Resolution order:
1. Fields. Zero args reads, one arg overwrites in place.
2. Methods. Called with the dispatcher itself as the first argument.
3. Otherwise the MISSING sentinel is returned. Nothing raises and nothing
   changes; callers test with `is MISSING` (or use `expect_member`).
"""

from typing import Any, Dict, Iterable, Optional, Tuple

from ..config import DispatchConfig
from .errors import FieldArityError, MemberNotFoundError
from .field_store import FieldStore
from .method_table import MethodTable
from .self_logger import SelfLogger


class _Missing:
    """Type of the member-not-found sentinel (there is only one)"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'MISSING'

    def __reduce__(self):
        return 'MISSING'


MISSING = _Missing()


class Dispatcher:
    """
    Message dispatcher for one instance.

    Calling the dispatcher sends a message; `dispatch` is the same thing
    under a name.
    """

    def __init__(
        self,
        fields: FieldStore,
        methods: MethodTable,
        config: Optional[DispatchConfig] = None,
        logger: Optional[SelfLogger] = None,
    ):
        """
        Bind a field store and a method table.

        Args:
            fields: The instance's own FieldStore (not shared)
            methods: The class's MethodTable (shared, never copied)
            config: Dispatch settings (defaults if None)
            logger: Optional SelfLogger recording every message
        """
        self._fields = fields
        self._methods = methods
        self._config = config or DispatchConfig()
        self._logger = logger

    @property
    def field_store(self) -> FieldStore:
        return self._fields

    @property
    def method_table(self) -> MethodTable:
        return self._methods

    @property
    def logger(self) -> Optional[SelfLogger]:
        return self._logger

    def __call__(self, token: Any, *args: Any) -> Any:
        # Fields shadow methods
        if token in self._fields:
            return self._field_message(token, args)

        method = self._methods.lookup(token, MISSING)
        if method is not MISSING:
            return self._call_method(token, method, args)

        if self._logger is not None:
            self._logger.warning(
                f'Member not found: {token}',
                token=str(token),
                argc=len(args),
            )
        return MISSING

    dispatch = __call__

    def _field_message(self, token: Any, args: Tuple[Any, ...]) -> Any:
        """Get or set a field"""
        if not args:
            value = self._fields.get(token)
            if self._logger is not None:
                self._logger.debug(f'get {token}', token=str(token))
            return value

        if len(args) > 1 and self._config.field_arity == 'reject':
            if self._logger is not None:
                self._logger.error(
                    f'Field {token} given {len(args)} values',
                    token=str(token),
                    argc=len(args),
                )
            raise FieldArityError(
                f"Field {token!r} takes at most one value, got {len(args)}"
            )

        # 'ignore' mode keeps only the first value
        self._fields.set(token, args[0])
        if self._logger is not None:
            self._logger.debug(f'set {token}', token=str(token))
        return None

    def _call_method(self, token: Any, method: Any, args: Tuple[Any, ...]) -> Any:
        """Invoke a method with this dispatcher as self"""
        if self._logger is not None:
            self._logger.debug(
                f'call {token}',
                token=str(token),
                argc=len(args),
            )

        try:
            return method(self, *args)
        except Exception as e:
            if self._logger is not None:
                self._logger.error(
                    f'{token} failed: {e}',
                    token=str(token),
                    error=type(e).__name__,
                )
            raise

    def __repr__(self) -> str:
        label = self._methods.name or 'object'
        return f'<{label} {self._fields!r}>'


def construct(
    method_table: MethodTable,
    field_initializers: Iterable[Tuple[Any, Any]] = (),
    config: Optional[DispatchConfig] = None,
    logger: Optional[SelfLogger] = None,
) -> Dispatcher:
    """
    Create an instance.

    Args:
        method_table: The class's shared MethodTable
        field_initializers: Ordered (name, initializer) pairs, evaluated
            left-to-right (see field_store.derive)
        config: Dispatch settings
        logger: Optional SelfLogger for the new instance

    Returns:
        The instance's Dispatcher
    """
    fields = FieldStore(field_initializers)
    return Dispatcher(fields, method_table, config=config, logger=logger)


def is_missing(value: Any) -> bool:
    """True if `value` is the member-not-found sentinel"""
    return value is MISSING


def expect_member(dispatcher: Dispatcher, token: Any, *args: Any) -> Any:
    """
    Dispatch, raising instead of returning MISSING.

    Raises:
        MemberNotFoundError: If `token` is neither a field nor a method
    """
    result = dispatcher(token, *args)
    if result is MISSING:
        raise MemberNotFoundError(token)
    return result


def describe(dispatcher: Dispatcher) -> Dict[str, Any]:
    """
    Introspect an instance.

    Returns:
        Dict with 'class', 'fields' (reachable names, declaration order),
        'methods' (reachable names) and 'metadata'
    """
    return {
        'class': dispatcher.method_table.name,
        'fields': dispatcher.field_store.names(),
        'methods': dispatcher.method_table.names(),
        'metadata': dict(dispatcher.method_table.metadata),
    }
