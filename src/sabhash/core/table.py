from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple

from sabhash.contracts.error import InvalidArgumentError, InvariantError

from .cost import CostInjector

logger = logging.getLogger("sabhash")

_SIGN_MASK: int = 0x7FFFFFFF


@dataclass(frozen=True)
class TableConfig:
    initial_capacity: int = 4
    grow_load_factor: float = 0.8
    shrink_load_factor: float = 0.2

    def __post_init__(self) -> None:
        if self.initial_capacity < 1:
            raise ValueError("initial_capacity must be >= 1")
        if not 0.0 < self.grow_load_factor <= 1.0:
            raise ValueError("grow_load_factor must be in (0, 1]")
        if not 0.0 <= self.shrink_load_factor < self.grow_load_factor / 2:
            raise ValueError("shrink_load_factor must be in [0, grow_load_factor / 2)")


DEFAULT_TABLE_CONFIG = TableConfig()


@dataclass
class _Entry:
    key: Any
    value: Any


class SabotagedHashTable:
    """Separate-chaining hash table with an optional Θ(log n) surcharge per operation.

    ``insert``, ``remove`` and ``lookup`` take an explicit ``inject_cost`` flag.
    When it is set the table's :class:`CostInjector` runs before anything else,
    turning the natural Θ(1) amortized cost into Θ(log n). Capacity doubles when
    an insert finds ``n >= m * grow_load_factor`` and halves (down to
    ``initial_capacity``) when a remove leaves ``n <= m * shrink_load_factor``.

    A resize re-inserts every entry through ``insert`` with the flag of the
    operation that triggered it, so each rehashed entry pays the surcharge
    again and an instrumented resize costs O(n log n) rather than O(n).
    """

    __slots__ = ("cfg", "injector", "_buckets", "_n", "_m")

    def __init__(
        self,
        cfg: TableConfig = DEFAULT_TABLE_CONFIG,
        *,
        capacity: Optional[int] = None,
        injector: Optional[CostInjector] = None,
    ) -> None:
        m = cfg.initial_capacity if capacity is None else capacity
        if m < cfg.initial_capacity:
            raise ValueError(f"capacity must be >= initial_capacity ({cfg.initial_capacity})")
        self.cfg = cfg
        self.injector = injector if injector is not None else CostInjector()
        self._m = m
        self._n = 0
        self._buckets: List[List[_Entry]] = [[] for _ in range(m)]

    def __len__(self) -> int:
        return self._n

    def __contains__(self, key: Any) -> bool:
        if key is None:
            return False
        return any(entry.key == key for entry in self._buckets[self._index(key)])

    def __repr__(self) -> str:
        return f"SabotagedHashTable(n={self._n}, m={self._m})"

    @property
    def capacity(self) -> int:
        return self._m

    def load_factor(self) -> float:
        return self._n / self._m

    def _index(self, key: Any) -> int:
        return (hash(key) & _SIGN_MASK) % self._m

    def _charge(self, inject_cost: bool) -> None:
        if inject_cost:
            self.injector(self._n)

    def insert(self, key: Any, value: Any, inject_cost: bool) -> None:
        self._charge(inject_cost)
        if key is None:
            raise InvalidArgumentError("key must not be None")
        if value is None:
            # A None value deletes the key; remove() charges the injector again.
            self.remove(key, inject_cost)
            return

        if self._n >= self._m * self.cfg.grow_load_factor:
            self._resize(2 * self._m, inject_cost)

        chain = self._buckets[self._index(key)]
        for entry in chain:
            if entry.key == key:
                entry.value = value
                return
        chain.append(_Entry(key, value))
        self._n += 1

    def remove(self, key: Any, inject_cost: bool) -> None:
        self._charge(inject_cost)
        if key is None:
            raise InvalidArgumentError("key must not be None")

        chain = self._buckets[self._index(key)]
        for idx, entry in enumerate(chain):
            if entry.key == key:
                chain[idx] = chain[-1]
                chain.pop()
                self._n -= 1
                break

        # Checked even when nothing was removed.
        if self._m > self.cfg.initial_capacity and self._n <= self._m * self.cfg.shrink_load_factor:
            self._resize(self._m // 2, inject_cost)

    def lookup(self, key: Any, inject_cost: bool) -> Optional[Any]:
        self._charge(inject_cost)
        if key is None:
            raise InvalidArgumentError("key must not be None")
        for entry in self._buckets[self._index(key)]:
            if entry.key == key:
                return entry.value
        return None

    def find_all(self) -> List[Any]:
        return [entry.key for chain in self._buckets for entry in chain]

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for chain in self._buckets:
            for entry in chain:
                yield entry.key, entry.value

    def max_chain_len(self) -> int:
        return max((len(chain) for chain in self._buckets), default=0)

    def _resize(self, new_capacity: int, inject_cost: bool) -> None:
        old_capacity = self._m
        rebuilt = SabotagedHashTable(self.cfg, capacity=new_capacity, injector=self.injector)
        for chain in self._buckets:
            for entry in chain:
                rebuilt.insert(entry.key, entry.value, inject_cost)
        self._buckets = rebuilt._buckets
        self._n = rebuilt._n
        self._m = rebuilt._m
        logger.debug("Resized table %d -> %d buckets (n=%d)", old_capacity, self._m, self._n)

    def check_invariants(self) -> None:
        """Raise ``InvariantError`` on the first structural inconsistency found."""

        if self._m < self.cfg.initial_capacity:
            raise InvariantError(
                f"capacity {self._m} below initial capacity {self.cfg.initial_capacity}"
            )
        if len(self._buckets) != self._m:
            raise InvariantError(f"bucket array has {len(self._buckets)} chains, expected {self._m}")
        seen: set[Any] = set()
        count = 0
        for idx, chain in enumerate(self._buckets):
            for entry in chain:
                expected = self._index(entry.key)
                if expected != idx:
                    raise InvariantError(
                        f"key {entry.key!r} stored in bucket {idx}, expected bucket {expected}"
                    )
                if entry.key in seen:
                    raise InvariantError(f"duplicate key {entry.key!r}")
                seen.add(entry.key)
                count += 1
        if count != self._n:
            raise InvariantError(f"entry count {count} does not match size {self._n}")


__all__ = ["DEFAULT_TABLE_CONFIG", "SabotagedHashTable", "TableConfig"]
