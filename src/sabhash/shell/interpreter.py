"""Line-oriented command interpreter driving a :class:`SabotagedHashTable`."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sabhash.core.table import SabotagedHashTable

logger = logging.getLogger("sabhash")

_FIELD_SEP = re.compile(r"\s+")


@dataclass
class SessionStats:
    lines: int = 0
    executed: int = 0
    invalid: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "lines": self.lines,
            "executed": self.executed,
            "invalid": self.invalid,
            "errors": self.errors,
        }


def format_keys(keys: Iterable[Any]) -> str:
    return "[" + ", ".join(str(key) for key in keys) + "]"


class CommandInterpreter:
    """Execute ``insert``/``remove``/``lookup``/``findall`` lines against a table.

    A bad line never ends the session: unknown verbs and missing arguments print
    ``Invalid command: <line>`` and any exception raised while executing a line
    prints ``Error processing command: <line> - <message>``.
    """

    def __init__(
        self,
        table: Optional[SabotagedHashTable] = None,
        *,
        inject_cost: bool = True,
        print_fn: Callable[[str], None] = print,
    ) -> None:
        self.table = table if table is not None else SabotagedHashTable()
        self.inject_cost = inject_cost
        self.print_fn = print_fn
        self.stats = SessionStats()
        self._dispatch: Dict[str, Callable[[list[str]], bool]] = {
            "insert": self._insert,
            "remove": self._remove,
            "lookup": self._lookup,
            "findall": self._findall,
        }

    def execute(self, line: str) -> None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return
        self.stats.lines += 1
        # Leading whitespace yields an empty verb; a trailing separator yields an empty field.
        parts = _FIELD_SEP.split(line, maxsplit=2)
        handler = self._dispatch.get(parts[0].lower())
        try:
            if handler is None or not handler(parts):
                self.stats.invalid += 1
                logger.debug("Rejected command line: %r", line)
                self.print_fn(f"Invalid command: {line}")
                return
        except Exception as exc:  # noqa: BLE001 - a failing line must not end the session
            self.stats.errors += 1
            logger.debug("Command failed: %r", line, exc_info=True)
            self.print_fn(f"Error processing command: {line} - {exc}")
            return
        self.stats.executed += 1

    def run(self, stream: Iterable[str]) -> SessionStats:
        for line in stream:
            self.execute(line)
        logger.info(
            "Session finished: %d line(s), %d invalid, %d error(s); table n=%d m=%d",
            self.stats.lines,
            self.stats.invalid,
            self.stats.errors,
            len(self.table),
            self.table.capacity,
        )
        return self.stats

    def _insert(self, parts: list[str]) -> bool:
        if len(parts) < 3:
            return False
        self.table.insert(parts[1], parts[2], self.inject_cost)
        return True

    def _remove(self, parts: list[str]) -> bool:
        if len(parts) < 2:
            return False
        self.table.remove(parts[1], self.inject_cost)
        return True

    def _lookup(self, parts: list[str]) -> bool:
        if len(parts) < 2:
            return False
        value = self.table.lookup(parts[1], self.inject_cost)
        if value is not None:
            self.print_fn(str(value))
        return True

    def _findall(self, parts: list[str]) -> bool:
        del parts
        self.print_fn(format_keys(self.table.find_all()))
        return True


def run_session(
    stream: Iterable[str],
    table: Optional[SabotagedHashTable] = None,
    *,
    inject_cost: bool = True,
    print_fn: Callable[[str], None] = print,
) -> SessionStats:
    return CommandInterpreter(table, inject_cost=inject_cost, print_fn=print_fn).run(stream)


__all__ = ["CommandInterpreter", "SessionStats", "format_keys", "run_session"]
