"""
Field Store

Per-instance storage for field values.

Design:
- Entries are created once, at instance construction, in declaration order
- Initializers are evaluated strictly left-to-right
- A derived initializer sees the bindings made before it (never the instance)
- Duplicate names are kept; lookup always resolves to the FIRST entry
- Setting a field overwrites the matched entry in place (nothing is appended)

The store never grows after construction. Writes to a name that was never
declared are refused, so the set of fields is fixed for the life of the
instance.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Tuple

from .errors import FieldDefinitionError


# Returned by FieldStore.get when the name isn't a field
_NOTHING = object()


class derive:
    """
    Initializer computed from earlier bindings.

    Wraps a function taking a read-only mapping of the fields bound so far:

        ('x', 1),
        ('y', derive(lambda prior: prior['x'] * 2)),
    """

    def __init__(self, fn: Callable[[Mapping[Any, Any]], Any]):
        if not callable(fn):
            raise FieldDefinitionError(f"derive() needs a callable, got {fn!r}")
        self.fn = fn

    def __call__(self, prior: Mapping[Any, Any]) -> Any:
        return self.fn(prior)

    def __repr__(self) -> str:
        return f"derive({self.fn!r})"


class _Slot:
    """One field entry: a name and its current value"""

    def __init__(self, name: Any, value: Any):
        self.name = name
        self.value = value


class FieldStore:
    """
    Ordered, fixed-shape field storage for one instance.

    Each instance owns exactly one FieldStore; stores are never shared.
    """

    def __init__(self, initializers: Iterable[Tuple[Any, Any]] = ()):
        """
        Build the store by evaluating initializers in order.

        Args:
            initializers: Ordered (name, initializer) pairs. An initializer is
                either a plain value or a `derive` wrapper.

        Raises:
            FieldDefinitionError: If an entry isn't a (name, initializer) pair
        """
        self._slots: List[_Slot] = []
        self._index: Dict[Any, _Slot] = {}

        # First-match view of what has been bound so far
        bound: Dict[Any, Any] = {}
        prior = MappingProxyType(bound)

        for entry in initializers:
            name, initializer = _unpack(entry)

            if isinstance(initializer, derive):
                value = initializer(prior)
            else:
                value = initializer

            slot = _Slot(name, value)
            self._slots.append(slot)

            # Later duplicates stay in the store but are never reached
            if name not in self._index:
                self._index[name] = slot
                bound[name] = value

    def __contains__(self, name: Any) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.names())

    def get(self, name: Any, default: Any = _NOTHING) -> Any:
        """
        Get the value of the first field named `name`.

        Raises:
            KeyError: If there is no such field and no default was given
        """
        slot = self._index.get(name)
        if slot is None:
            if default is _NOTHING:
                raise KeyError(name)
            return default
        return slot.value

    def set(self, name: Any, value: Any) -> None:
        """
        Overwrite the first field named `name` in place.

        Raises:
            KeyError: If `name` was never declared (fields can't be added)
        """
        slot = self._index.get(name)
        if slot is None:
            raise KeyError(name)
        slot.value = value

    def names(self) -> List[Any]:
        """Reachable field names in declaration order"""
        return list(self._index)

    def declared_names(self) -> List[Any]:
        """All declared field names, unreachable duplicates included"""
        return [slot.name for slot in self._slots]

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the reachable fields and their current values"""
        return {name: slot.value for name, slot in self._index.items()}

    def __repr__(self) -> str:
        body = ', '.join(f'{name!s}={slot.value!r}' for name, slot in self._index.items())
        return f'FieldStore({body})'


def _unpack(entry: Any) -> Tuple[Any, Any]:
    """Helper: split a (name, initializer) entry"""
    try:
        name, initializer = entry
    except (TypeError, ValueError):
        raise FieldDefinitionError(
            f"Field initializer must be a (name, initializer) pair, got {entry!r}"
        )
    return name, initializer
