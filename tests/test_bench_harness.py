from __future__ import annotations

import csv
import itertools
import json
import random
from pathlib import Path

import pytest

from sabhash.bench.harness import (
    CSV_HEADER,
    BenchRow,
    build_summary,
    format_rows,
    run_benchmark,
    time_insertions,
    unique_keys,
    write_csv_report,
    write_json_summary,
)
from sabhash.contracts.error import InvariantError


def _step_clock(step: int = 1_000):
    counter = itertools.count(0, step)
    return lambda: next(counter)


def test_unique_keys_are_distinct_and_seeded() -> None:
    keys = unique_keys(500, random.Random(3))
    assert len(set(keys)) == 500
    assert keys == unique_keys(500, random.Random(3))
    assert all(len(key) == 36 and key[14] == "4" for key in keys)


def test_time_insertions_reports_average_per_operation() -> None:
    run = time_insertions(10, 2, True, rng=random.Random(1), clock=_step_clock(1_000))
    assert run.operations == 20
    assert run.avg_ns == pytest.approx(1_000 / 20)
    # prefill (5) + warm-up (20) + timed (20)
    assert len(run.table) == 45
    run.table.check_invariants()


def test_time_insertions_counts_only_timed_cost() -> None:
    costed = time_insertions(8, 1, True, rng=random.Random(2), clock=_step_clock())
    plain = time_insertions(8, 1, False, rng=random.Random(2), clock=_step_clock())
    assert costed.table.injector.calls >= costed.operations
    assert plain.table.injector.calls == 0


def test_run_benchmark_produces_row_per_size() -> None:
    rows = run_benchmark([4, 16], 1, seed=5, verify=True, clock=_step_clock(10))
    assert [row.size for row in rows] == [4, 16]
    assert [row.operations for row in rows] == [4, 16]
    for row in rows:
        assert row.time_log_n == pytest.approx(10 / row.operations)
        assert row.time_constant == pytest.approx(10 / row.operations)
        assert row.cost_calls >= row.operations
        assert row.cost_iterations > 0


def test_write_csv_report(tmp_path: Path) -> None:
    rows = [BenchRow(100, 200, 12.3456, 3.21), BenchRow(1000, 2000, 20.0, 3.0)]
    path = write_csv_report(rows, tmp_path / "nested" / "results.csv")
    with path.open(newline="", encoding="utf-8") as fh:
        content = list(csv.reader(fh))
    assert tuple(content[0]) == CSV_HEADER == ("Size", "TimeLogN", "TimeConstant")
    assert content[1] == ["100", "12.346", "3.210"]
    assert content[2] == ["1000", "20.000", "3.000"]


def test_json_summary_roundtrip_and_validation(tmp_path: Path) -> None:
    rows = [BenchRow(10, 20, 5.0, 1.0, cost_calls=30, cost_iterations=90)]
    summary = build_summary(rows, 2, 42)
    out = write_json_summary(summary, tmp_path / "summary.json")
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["unit"] == "ns"
    assert payload["rows"][0]["cost_calls"] == 30

    broken = build_summary(rows, 0, 42)
    with pytest.raises(InvariantError):
        write_json_summary(broken, tmp_path / "broken.json")
    assert not (tmp_path / "broken.json").exists()


def test_format_rows() -> None:
    text = format_rows([BenchRow(10, 20, 1.5, 0.5)])
    assert text.splitlines() == ["Size,TimeLogN,TimeConstant", "10,1.500,0.500"]
