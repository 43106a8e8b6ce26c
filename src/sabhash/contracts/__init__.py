"""Error contracts and report schemas for sabhash."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvalidArgumentError,
    InvariantError,
    IOErrorEnvelope,
    classify,
    die,
    guard_cli,
)
from .schema import BENCH_SUMMARY_SCHEMA, load_summary_schema, validate_summary

__all__ = [
    "BENCH_SUMMARY_SCHEMA",
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvalidArgumentError",
    "InvariantError",
    "classify",
    "IOErrorEnvelope",
    "guard_cli",
    "die",
    "load_summary_schema",
    "validate_summary",
]
