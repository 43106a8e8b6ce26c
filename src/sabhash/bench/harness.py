"""Benchmark harness comparing instrumented and plain insert costs.

For every table size ``n`` a fresh table is pre-filled with ``n // 2`` keys,
warmed up with ``n * multiplier`` inserts and then timed over another
``n * multiplier`` inserts. The timed phase runs once with cost injection and
once without; the report lists the average nanoseconds per operation of both.
"""

from __future__ import annotations

import csv
import json
import logging
import random
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sabhash.contracts.schema import BENCH_SUMMARY_SCHEMA, validate_summary
from sabhash.core.table import DEFAULT_TABLE_CONFIG, SabotagedHashTable, TableConfig

logger = logging.getLogger("sabhash")

CSV_HEADER = ("Size", "TimeLogN", "TimeConstant")
TIME_UNIT = "ns"


@dataclass
class TimedRun:
    avg_ns: float
    operations: int
    table: SabotagedHashTable


@dataclass
class BenchRow:
    size: int
    operations: int
    time_log_n: float
    time_constant: float
    cost_calls: int = 0
    cost_iterations: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "operations": self.operations,
            "time_log_n": self.time_log_n,
            "time_constant": self.time_constant,
            "cost_calls": self.cost_calls,
            "cost_iterations": self.cost_iterations,
        }


def unique_keys(count: int, rng: random.Random) -> list[str]:
    """Return ``count`` distinct UUID4 strings drawn from ``rng``."""

    seen: set[str] = set()
    keys: list[str] = []
    while len(keys) < count:
        key = str(uuid.UUID(int=rng.getrandbits(128), version=4))
        if key in seen:
            continue
        seen.add(key)
        keys.append(key)
    return keys


def time_insertions(
    size: int,
    multiplier: int,
    inject_cost: bool,
    *,
    rng: random.Random,
    cfg: TableConfig = DEFAULT_TABLE_CONFIG,
    clock: Callable[[], int] = time.perf_counter_ns,
) -> TimedRun:
    total_ops = size * multiplier
    prefill_count = size // 2
    keys = unique_keys(prefill_count + 2 * total_ops, rng)
    prefill = keys[:prefill_count]
    warmup = keys[prefill_count : prefill_count + total_ops]
    timed = keys[prefill_count + total_ops :]

    table = SabotagedHashTable(cfg)
    for key in prefill:
        table.insert(key, "value", inject_cost)
    for key in warmup:
        table.insert(key, "new_value", inject_cost)

    # Only the timed phase counts towards the injector totals.
    table.injector.reset()
    start = clock()
    for key in timed:
        table.insert(key, "new_value", inject_cost)
    elapsed = clock() - start

    avg = elapsed / total_ops if total_ops else 0.0
    return TimedRun(avg_ns=float(avg), operations=total_ops, table=table)


def run_benchmark(
    sizes: Iterable[int],
    multiplier: int,
    *,
    seed: int | None = None,
    cfg: TableConfig = DEFAULT_TABLE_CONFIG,
    verify: bool = False,
    clock: Callable[[], int] = time.perf_counter_ns,
) -> list[BenchRow]:
    rng = random.Random(seed)
    rows: list[BenchRow] = []
    for size in sizes:
        logger.info("Benchmarking n=%d (%d timed inserts per configuration)", size, size * multiplier)
        costed = time_insertions(size, multiplier, True, rng=rng, cfg=cfg, clock=clock)
        plain = time_insertions(size, multiplier, False, rng=rng, cfg=cfg, clock=clock)
        if verify:
            costed.table.check_invariants()
            plain.table.check_invariants()
        rows.append(
            BenchRow(
                size=size,
                operations=costed.operations,
                time_log_n=costed.avg_ns,
                time_constant=plain.avg_ns,
                cost_calls=costed.table.injector.calls,
                cost_iterations=costed.table.injector.iterations,
            )
        )
        logger.debug(
            "n=%d log_n=%.1f%s constant=%.1f%s",
            size,
            costed.avg_ns,
            TIME_UNIT,
            plain.avg_ns,
            TIME_UNIT,
        )
    return rows


def write_csv_report(rows: Sequence[BenchRow], path: str | Path) -> Path:
    out_path = Path(path).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow([row.size, f"{row.time_log_n:.3f}", f"{row.time_constant:.3f}"])
    return out_path


def build_summary(rows: Sequence[BenchRow], multiplier: int, seed: int | None) -> dict[str, Any]:
    return {
        "schema": BENCH_SUMMARY_SCHEMA,
        "unit": TIME_UNIT,
        "operations_multiplier": multiplier,
        "seed": seed,
        "rows": [row.to_dict() for row in rows],
    }


def write_json_summary(summary: dict[str, Any], path: str | Path) -> Path:
    validate_summary(summary)
    out_path = Path(path).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(summary, indent=2) + "\n", encoding="utf-8")
    return out_path


def format_rows(rows: Sequence[BenchRow]) -> str:
    lines = [",".join(CSV_HEADER)]
    lines.extend(f"{row.size},{row.time_log_n:.3f},{row.time_constant:.3f}" for row in rows)
    return "\n".join(lines)


__all__ = [
    "BenchRow",
    "CSV_HEADER",
    "TIME_UNIT",
    "TimedRun",
    "build_summary",
    "format_rows",
    "run_benchmark",
    "time_insertions",
    "unique_keys",
    "write_csv_report",
    "write_json_summary",
]
