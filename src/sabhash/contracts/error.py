"""Error kinds, exit codes and the JSON error envelope for sabhash.

Every CLI handler runs under :func:`guard_cli`. A failure is classified by
walking the exception's MRO against ``_KINDS``; the first match picks the exit
code and the ``error`` label written to stderr. Anything unclassified is an
internal error and is logged with its traceback before exiting.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger("sabhash")
T = TypeVar("T")


class Exit(IntEnum):
    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    INTERNAL = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    """Machine-readable error written to stderr when a command fails."""

    error: str
    detail: str
    code: Exit
    hint: str | None = None

    def to_json(self) -> str:
        payload: dict[str, Any] = {"error": self.error, "detail": self.detail, "exit": int(self.code)}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Emit a JSON error envelope on stderr and exit with ``code``."""

    sys.stderr.write(ErrorEnvelope(kind, detail, code, hint).to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """Base exception that carries an optional hint for the error envelope."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Raised for malformed user input (config files, flags, sizes)."""


class InvalidArgumentError(BadInputError, ValueError):
    """Raised by the table when an operation receives a ``None`` key."""


class InvariantError(EnvelopeError):
    """Raised when a table fails its structural invariant check."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818 - mirrors Exit.IO
    """Raised when a report or input file cannot be read or written."""


_KINDS: dict[type[BaseException], tuple[Exit, str]] = {
    InvalidArgumentError: (Exit.BAD_INPUT, "InvalidArgument"),
    BadInputError: (Exit.BAD_INPUT, "BadInput"),
    InvariantError: (Exit.INVARIANT, "Invariant"),
    IOErrorEnvelope: (Exit.IO, "IO"),
    FileNotFoundError: (Exit.IO, "FileNotFound"),
    PermissionError: (Exit.IO, "PermissionDenied"),
    OSError: (Exit.IO, "IO"),
}


def classify(exc: BaseException) -> tuple[Exit, str]:
    """Return the exit code and envelope label for ``exc``."""

    for klass in type(exc).__mro__:
        kind = _KINDS.get(klass)
        if kind is not None:
            return kind
    return Exit.INTERNAL, "Internal"


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Decorate a CLI handler to enforce exit codes and error envelopes."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001 - every failure leaves through an envelope
            code, kind = classify(exc)
            if code is Exit.INTERNAL:
                logger.exception("Unhandled error in %s", getattr(fn, "__name__", "handler"))
            hint = exc.hint if isinstance(exc, EnvelopeError) else None
            die(code, kind, f"{type(exc).__name__}: {exc}" if code is Exit.INTERNAL else str(exc), hint)

    return _wrapped


__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvalidArgumentError",
    "InvariantError",
    "IOErrorEnvelope",
    "classify",
    "guard_cli",
    "die",
]
