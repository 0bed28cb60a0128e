"""
Unit tests for FieldStore

FieldStore:
- Built once from ordered (name, initializer) pairs
- Initializers evaluated left-to-right, seeing earlier bindings only
- First-match lookup; duplicates kept but unreachable
- Set overwrites in place; no new fields after construction
"""

import pytest


class TestFieldStoreConstruction:
    """Test building a field store from initializers"""

    def test_plain_values(self):
        """Should store plain initializer values as-is"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1), ('y', -2)])

        assert store.get('x') == 1
        assert store.get('y') == -2
        assert store.names() == ['x', 'y']

    def test_derived_sees_prior_bindings(self):
        """Should evaluate (x, 1) then (y, x*2) to y == 2"""
        from object_dispatch.core.field_store import FieldStore, derive

        store = FieldStore([
            ('x', 1),
            ('y', derive(lambda prior: prior['x'] * 2)),
        ])

        assert store.get('y') == 2

    def test_initializers_run_left_to_right(self):
        """Should evaluate initializers strictly in declaration order"""
        from object_dispatch.core.field_store import FieldStore, derive

        order = []

        def record(name, value):
            def initializer(prior):
                order.append(name)
                return value
            return derive(initializer)

        FieldStore([('a', record('a', 1)), ('b', record('b', 2)), ('c', record('c', 3))])

        assert order == ['a', 'b', 'c']

    def test_derived_cannot_see_later_bindings(self):
        """Should only expose names bound before the initializer"""
        from object_dispatch.core.field_store import FieldStore, derive

        seen = {}

        def snapshot(prior):
            seen.update(prior)
            return None

        FieldStore([('a', 1), ('probe', derive(snapshot)), ('b', 2)])

        assert seen == {'a': 1}

    def test_prior_bindings_are_read_only(self):
        """Should not let an initializer add bindings"""
        from object_dispatch.core.field_store import FieldStore, derive

        def sneaky(prior):
            prior['extra'] = 1

        with pytest.raises(TypeError):
            FieldStore([('a', derive(sneaky))])

    def test_callable_values_stored_as_is(self):
        """Should not call plain callables; only derive() runs"""
        from object_dispatch.core.field_store import FieldStore

        def handler():
            return 'called'

        store = FieldStore([('callback', handler)])

        assert store.get('callback') is handler

    def test_empty_store(self):
        """Should allow instances without fields"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore()

        assert len(store) == 0
        assert store.names() == []

    def test_malformed_entry_rejected(self):
        """Should reject entries that aren't (name, initializer) pairs"""
        from object_dispatch.core.field_store import FieldStore
        from object_dispatch.core.errors import FieldDefinitionError

        with pytest.raises(FieldDefinitionError):
            FieldStore([('x', 1, 2)])

        with pytest.raises(FieldDefinitionError):
            FieldStore([42])

    def test_derive_requires_callable(self):
        """Should reject derive() of a non-callable"""
        from object_dispatch.core.field_store import derive
        from object_dispatch.core.errors import FieldDefinitionError

        with pytest.raises(FieldDefinitionError):
            derive(5)


class TestDuplicateFields:
    """Test first-match semantics for duplicate names"""

    def test_first_duplicate_wins(self):
        """Should resolve a duplicated name to its first entry"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1), ('x', 99)])

        assert store.get('x') == 1
        assert store.names() == ['x']
        assert store.declared_names() == ['x', 'x']
        assert len(store) == 2

    def test_set_updates_first_duplicate(self):
        """Should overwrite the reachable entry in place, not append"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1), ('x', 99)])
        store.set('x', 5)

        assert store.get('x') == 5
        assert len(store) == 2

    def test_derived_sees_first_duplicate(self):
        """Should expose the first binding of a duplicated name"""
        from object_dispatch.core.field_store import FieldStore, derive

        store = FieldStore([
            ('x', 1),
            ('x', 10),
            ('y', derive(lambda prior: prior['x'])),
        ])

        assert store.get('y') == 1


class TestFieldAccess:
    """Test reading and writing fields"""

    def test_set_then_get(self):
        """Should return the value last set"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1)])
        store.set('x', 'new')

        assert store.get('x') == 'new'

    def test_get_unknown_raises(self):
        """Should raise KeyError for unknown names without a default"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1)])

        with pytest.raises(KeyError):
            store.get('z')

    def test_get_unknown_with_default(self):
        """Should return the default for unknown names"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1)])

        assert store.get('z', None) is None

    def test_set_unknown_refused(self):
        """Should not add fields after construction"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1)])

        with pytest.raises(KeyError):
            store.set('z', 1)

        assert 'z' not in store
        assert len(store) == 1

    def test_snapshot_is_a_copy(self):
        """Should return a detached copy of reachable fields"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([('x', 1), ('y', 2), ('x', 3)])
        snap = store.snapshot()
        snap['x'] = 100

        assert store.snapshot() == {'x': 1, 'y': 2}

    def test_non_string_tokens(self):
        """Should accept any hashable token as a field name"""
        from object_dispatch.core.field_store import FieldStore

        store = FieldStore([(('pos', 0), 'a'), (7, 'b')])

        assert store.get(('pos', 0)) == 'a'
        assert store.get(7) == 'b'
