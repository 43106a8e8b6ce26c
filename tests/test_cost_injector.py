from __future__ import annotations

import math

import pytest

from sabhash.core.cost import CostInjector, ceil_log2
from sabhash.core.table import SabotagedHashTable


@pytest.mark.parametrize(
    "n,expected",
    [(0, 0), (1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (1024, 10), (1025, 11)],
)
def test_injector_iterations(n: int, expected: int) -> None:
    injector = CostInjector()
    assert injector(n) == expected
    assert injector.iterations == expected
    assert injector.calls == 1


def test_ceil_log2_matches_float_definition() -> None:
    for n in range(2, 5000):
        assert ceil_log2(n) == math.ceil(math.log2(n))
    assert ceil_log2(1) == 0
    with pytest.raises(ValueError):
        ceil_log2(0)


def test_injector_accumulates_and_resets() -> None:
    injector = CostInjector()
    for n in (1, 2, 8, 9):
        injector(n)
    assert injector.calls == 4
    assert injector.iterations == 0 + 1 + 3 + 4
    injector.reset()
    assert (injector.calls, injector.iterations) == (0, 0)
    assert "calls=0" in repr(injector)


def test_plain_operations_never_call_injector() -> None:
    table = SabotagedHashTable()
    for i in range(20):
        table.insert(i, i, False)
    for i in range(20):
        table.lookup(i, False)
    for i in range(20):
        table.remove(i, False)
    table.find_all()
    assert table.injector.calls == 0


def test_instrumented_operations_call_injector_once_each_plus_rehash() -> None:
    table = SabotagedHashTable()
    for i in range(4):
        table.insert(f"k{i}", i, True)
    assert table.injector.calls == 4

    # The fifth insert grows 4 -> 8 and re-inserts the four existing entries.
    table.insert("k4", 4, True)
    assert table.capacity == 8
    assert table.injector.calls == 5 + 4

    table.lookup("k4", True)
    assert table.injector.calls == 10


def test_injector_uses_current_table_size() -> None:
    table = SabotagedHashTable()
    for i in range(3):
        table.insert(i, i, False)
    assert table.lookup(0, True) == 0
    assert table.injector.iterations == ceil_log2(3)


def test_rehash_charges_partially_rebuilt_size() -> None:
    table = SabotagedHashTable()
    for i in range(4):
        table.insert(i, i, False)
    table.insert(4, 4, True)
    # Outer insert sees n=4; the rebuilt table sees n=0, 1, 2, 3 while refilling.
    assert table.injector.iterations == ceil_log2(4) + 0 + 0 + ceil_log2(2) + ceil_log2(3)


def test_shrink_rehash_is_charged_too() -> None:
    table = SabotagedHashTable()
    for i in range(5):
        table.insert(i, i, False)
    for i in range(3):
        table.remove(i, False)
    table.injector.reset()

    table.remove(3, True)
    assert table.capacity == 4
    # One charge for the remove, one for the single surviving entry.
    assert table.injector.calls == 2


def test_none_value_redirect_charges_twice() -> None:
    table = SabotagedHashTable()
    table.insert("k", "v", False)
    table.insert("k", None, True)
    assert table.injector.calls == 2
    assert len(table) == 0
