"""Command-line entry point for `python -m sabhash.bench`."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from sabhash.cli.app import main as cli_main


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``bench`` subcommand; global flags are not accepted here."""

    args = list(sys.argv[1:] if argv is None else argv)
    return cli_main(["bench", *args])


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
