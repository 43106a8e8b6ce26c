"""Bundled JSON schema for benchmark summaries."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import Draft202012Validator

from .error import InvariantError

BENCH_SUMMARY_SCHEMA = "bench.summary.v1"


@lru_cache(maxsize=1)
def load_summary_schema() -> dict[str, Any]:
    schema_resource = resources.files("sabhash.contracts") / "bench_summary_schema.json"
    with schema_resource.open(encoding="utf-8") as stream:
        return json.load(stream)


def validate_summary(payload: dict[str, Any]) -> None:
    """Raise ``InvariantError`` listing every schema violation in ``payload``."""

    validator = Draft202012Validator(load_summary_schema())
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    if errors:
        detail = "; ".join(f"{err.message} @ {list(err.path)}" for err in errors)
        raise InvariantError(f"Benchmark summary violates {BENCH_SUMMARY_SCHEMA}: {detail}")


__all__ = ["BENCH_SUMMARY_SCHEMA", "load_summary_schema", "validate_summary"]
