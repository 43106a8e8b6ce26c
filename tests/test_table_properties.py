from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from hypothesis import given, settings, strategies as st

from sabhash.core.table import SabotagedHashTable


@dataclass(frozen=True)
class CollidingKey:
    """Key whose hash intentionally collides with peers for stress testing."""

    value: int

    def __hash__(self) -> int:  # pragma: no cover - trivial wrapper
        return 0

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"CK({self.value})"


def _key_strategy() -> st.SearchStrategy[Any]:
    small_ints = st.integers(-20, 20)
    words = st.text(alphabet="abcxyz", min_size=1, max_size=3)
    colliding = st.builds(CollidingKey, st.integers(-10, 10))
    return st.one_of(small_ints, words, colliding)


def _value_strategy() -> st.SearchStrategy[int | None]:
    # None exercises the delete-on-insert branch.
    return st.one_of(st.integers(-1_000, 1_000), st.none())


def _operation_strategy() -> st.SearchStrategy[Tuple[str, Any, int | None, bool]]:
    key = _key_strategy()
    value = _value_strategy()
    flag = st.booleans()
    insert_op = st.tuples(st.just("insert"), key, value, flag)
    lookup_op = st.tuples(st.just("lookup"), key, st.none(), flag)
    remove_op = st.tuples(st.just("remove"), key, st.none(), flag)
    return st.one_of(insert_op, lookup_op, remove_op)


@settings(max_examples=150, deadline=None)
@given(st.lists(_operation_strategy(), min_size=1, max_size=150))
def test_table_behaves_like_dict(operations: list[Tuple[str, Any, int | None, bool]]) -> None:
    table = SabotagedHashTable()
    model: Dict[Any, int] = {}
    seen_keys: set[Any] = set()

    for op, key, maybe_value, inject_cost in operations:
        seen_keys.add(key)
        size_before = len(table)
        capacity_before = table.capacity

        if op == "insert":
            table.insert(key, maybe_value, inject_cost)
            if maybe_value is None:
                model.pop(key, None)
            else:
                model[key] = maybe_value
                # Grow check ran against the size seen before the insert.
                assert size_before < table.capacity * 0.8
        elif op == "remove":
            table.remove(key, inject_cost)
            model.pop(key, None)
        else:
            assert table.lookup(key, inject_cost) == model.get(key)
            assert table.capacity == capacity_before

        if op == "remove" or (op == "insert" and maybe_value is None):
            if table.capacity > 4:
                assert len(table) > table.capacity * 0.2

        assert table.capacity >= 4
        assert len(table) == len(model)
        for candidate in seen_keys:
            assert table.lookup(candidate, False) == model.get(candidate)
        keys = table.find_all()
        assert len(keys) == len(set(keys))
        assert set(keys) == set(model)
        assert dict(table.items()) == model
        table.check_invariants()


@settings(max_examples=50, deadline=None)
@given(st.sets(st.integers(-10_000, 10_000), min_size=1, max_size=300))
def test_instrumented_and_plain_tables_agree(keys: set[int]) -> None:
    costed = SabotagedHashTable()
    plain = SabotagedHashTable()
    for key in keys:
        costed.insert(key, -key, True)
        plain.insert(key, -key, False)

    assert costed.capacity == plain.capacity
    assert dict(costed.items()) == dict(plain.items())
    assert costed.injector.calls >= len(keys)
    assert plain.injector.calls == 0
