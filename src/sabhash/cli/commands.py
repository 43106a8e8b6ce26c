"""CLI command registration and handlers for sabhash."""

from __future__ import annotations

import argparse
import io
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from sabhash.bench.harness import (
    BenchRow,
    TIME_UNIT,
    build_summary,
    format_rows,
    write_csv_report,
    write_json_summary,
)
from sabhash.config import AppConfig, parse_sizes
from sabhash.contracts.error import BadInputError, Exit, IOErrorEnvelope
from sabhash.core.table import SabotagedHashTable
from sabhash.shell.interpreter import SessionStats


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    run_commands: Callable[..., Tuple[SessionStats, SabotagedHashTable]]
    run_benchmark: Callable[..., List[BenchRow]]
    app_config: Callable[[], AppConfig]
    logger: logging.Logger
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register(
        "run",
        "Execute insert/remove/lookup/findall commands read line by line.",
        lambda parser: _configure_run(parser, ctx),
    )
    _register(
        "bench",
        "Time instrumented vs plain inserts and write a CSV report.",
        lambda parser: _configure_bench(parser, ctx),
    )
    return handlers


def _open_input(path: Optional[str]) -> TextIO:
    # Undecodable bytes are read as U+FFFD.
    if path is None or path == "-":
        if isinstance(sys.stdin, io.TextIOWrapper):
            sys.stdin.reconfigure(errors="replace")
        return sys.stdin
    try:
        return open(path, encoding="utf-8", errors="replace")
    except FileNotFoundError as exc:
        raise IOErrorEnvelope(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise IOErrorEnvelope(str(exc)) from exc


def _configure_run(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--input",
        default=None,
        help="Command file to replay (default: stdin)",
    )
    cost = parser.add_mutually_exclusive_group()
    cost.add_argument(
        "--cost",
        dest="inject_cost",
        action="store_true",
        default=None,
        help="Charge the Θ(log n) surcharge on every operation (config default: on)",
    )
    cost.add_argument(
        "--no-cost",
        dest="inject_cost",
        action="store_false",
        help="Run operations at their natural Θ(1) amortized cost",
    )
    parser.set_defaults(inject_cost=None)

    def handler(args: argparse.Namespace) -> int:
        inject_cost = args.inject_cost
        if inject_cost is None:
            inject_cost = ctx.app_config().table.inject_cost
        stream = _open_input(args.input)
        try:
            stats, table = ctx.run_commands(stream, inject_cost=inject_cost)
        finally:
            if stream is not sys.stdin:
                stream.close()
        data: Dict[str, Any] = {
            "input": args.input or "-",
            "inject_cost": inject_cost,
            "size": len(table),
            "capacity": table.capacity,
            "cost_calls": table.injector.calls,
        }
        data.update(stats.to_dict())
        ctx.emit_success("run", data=data)
        return int(Exit.OK)

    return handler


def _configure_bench(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--sizes",
        default=None,
        help="Comma-separated table sizes (default from config: 100,1000,10000,100000)",
    )
    parser.add_argument(
        "--multiplier",
        type=int,
        default=None,
        help="Timed inserts per size are size * multiplier (default from config: 2)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for key generation")
    parser.add_argument("--out", default=None, help="CSV report path (default from config)")
    parser.add_argument(
        "--json-summary-out",
        default=None,
        help="Optional JSON summary path (schema bench.summary.v1)",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check table invariants after each timed run",
    )

    def handler(args: argparse.Namespace) -> int:
        cfg = ctx.app_config()
        policy = cfg.bench
        sizes = parse_sizes(args.sizes) if args.sizes is not None else policy.sizes
        if not sizes or any(size < 1 for size in sizes):
            raise BadInputError("--sizes entries must be integers >= 1")
        multiplier = args.multiplier if args.multiplier is not None else policy.operations_multiplier
        if multiplier < 1:
            raise BadInputError("--multiplier must be >= 1")
        seed = args.seed if args.seed is not None else policy.seed
        out = args.out or policy.report

        rows = ctx.run_benchmark(
            sizes,
            multiplier,
            seed=seed,
            cfg=cfg.table.to_table_config(),
            verify=args.verify,
        )

        try:
            report_path = write_csv_report(rows, out)
            summary = build_summary(rows, multiplier, seed)
            summary_path = (
                write_json_summary(summary, args.json_summary_out) if args.json_summary_out else None
            )
        except OSError as exc:
            raise IOErrorEnvelope(str(exc)) from exc
        ctx.logger.info("Wrote benchmark report: %s", report_path)

        data: Dict[str, Any] = {
            "report": str(report_path),
            "unit": TIME_UNIT,
            "rows": [row.to_dict() for row in rows],
        }
        if summary_path is not None:
            data["json_summary"] = str(summary_path)
        ctx.emit_success("bench", text=format_rows(rows), data=data)
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "register_subcommands"]
