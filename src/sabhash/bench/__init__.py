"""Benchmark harness for instrumented vs plain hash table inserts."""

from .harness import (
    CSV_HEADER,
    TIME_UNIT,
    BenchRow,
    TimedRun,
    build_summary,
    format_rows,
    run_benchmark,
    time_insertions,
    unique_keys,
    write_csv_report,
    write_json_summary,
)

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
