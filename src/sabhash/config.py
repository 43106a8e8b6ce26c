"""Typed configuration loader for the sabhash CLI."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.table import TableConfig

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _parse_bool(raw: Any, label: str) -> bool:
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
        raise BadInputError(f"{label} must be boolean")
    return bool(raw)


def parse_sizes(raw: Any) -> tuple[int, ...]:
    """Accept ``"100,1000"`` or a sequence of integers."""

    if isinstance(raw, str):
        parts = [part.strip() for part in raw.split(",") if part.strip()]
    elif isinstance(raw, (list, tuple)):
        parts = list(raw)
    else:
        raise BadInputError("bench.sizes must be a list of integers or a comma-separated string")
    try:
        return tuple(int(part) for part in parts)
    except (TypeError, ValueError) as exc:
        raise BadInputError(f"bench.sizes contains a non-integer entry: {raw!r}") from exc


@dataclass
class TablePolicy:
    initial_capacity: int = 4
    grow_load_factor: float = 0.8
    shrink_load_factor: float = 0.2
    inject_cost: bool = True

    def validate(self) -> None:
        if self.initial_capacity < 1:
            raise BadInputError("table.initial_capacity must be >= 1")
        if not 0.0 < self.grow_load_factor <= 1.0:
            raise BadInputError("table.grow_load_factor must be in (0, 1]")
        if not 0.0 <= self.shrink_load_factor < self.grow_load_factor / 2:
            raise BadInputError(
                "table.shrink_load_factor must be >= 0 and below half of grow_load_factor",
                hint="keep the shrink threshold well under the grow threshold to avoid resize thrashing",
            )

    def to_table_config(self) -> TableConfig:
        return TableConfig(
            initial_capacity=self.initial_capacity,
            grow_load_factor=self.grow_load_factor,
            shrink_load_factor=self.shrink_load_factor,
        )


@dataclass
class BenchPolicy:
    sizes: tuple[int, ...] = (100, 1000, 10000, 100000)
    operations_multiplier: int = 2
    seed: int | None = 1337
    report: str = "hash_results.csv"

    def validate(self) -> None:
        if not self.sizes:
            raise BadInputError("bench.sizes must not be empty")
        if any(size < 1 for size in self.sizes):
            raise BadInputError("bench.sizes entries must be >= 1")
        if self.operations_multiplier < 1:
            raise BadInputError("bench.operations_multiplier must be >= 1")
        if not self.report:
            raise BadInputError("bench.report must be a file path")


@dataclass
class AppConfig:
    table: TablePolicy = field(default_factory=TablePolicy)
    bench: BenchPolicy = field(default_factory=BenchPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        table_data = data.get("table", {})
        if not isinstance(table_data, dict):
            raise BadInputError("[table] section must be a table")
        table_kwargs = dict(table_data)
        if "inject_cost" in table_kwargs:
            table_kwargs["inject_cost"] = _parse_bool(table_kwargs["inject_cost"], "table.inject_cost")
        try:
            table = TablePolicy(**table_kwargs)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [table]: {exc}") from exc

        bench_data = data.get("bench", {})
        if not isinstance(bench_data, dict):
            raise BadInputError("[bench] section must be a table")
        bench_kwargs = dict(bench_data)
        if "sizes" in bench_kwargs:
            bench_kwargs["sizes"] = parse_sizes(bench_kwargs["sizes"])
        try:
            bench = BenchPolicy(**bench_kwargs)
        except TypeError as exc:
            raise BadInputError(f"Unknown key in [bench]: {exc}") from exc
        return cls(table=table, bench=bench)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        table_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "SABHASH_INITIAL_CAPACITY": ("initial_capacity", int),
            "SABHASH_GROW_LOAD_FACTOR": ("grow_load_factor", float),
            "SABHASH_SHRINK_LOAD_FACTOR": ("shrink_load_factor", float),
        }
        for key, (attr, caster) in table_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.table, attr, value)

        raw_inject = env.get("SABHASH_INJECT_COST")
        if raw_inject is not None:
            try:
                self.table.inject_cost = _parse_bool(raw_inject, "SABHASH_INJECT_COST")
            except BadInputError as exc:
                raise BadInputError(f"Invalid env override SABHASH_INJECT_COST={raw_inject!r}") from exc

        raw_sizes = env.get("BENCH_SIZES")
        if raw_sizes is not None:
            self.bench.sizes = parse_sizes(raw_sizes)

        bench_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "BENCH_OPERATIONS_MULTIPLIER": ("operations_multiplier", int),
            "BENCH_SEED": ("seed", int),
            "BENCH_REPORT": ("report", str),
        }
        for key, (attr, caster) in bench_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.bench, attr, value)

    def validate(self) -> None:
        self.table.validate()
        self.bench.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)


__all__ = [
    "AppConfig",
    "BenchPolicy",
    "DEFAULT_CONFIG",
    "TablePolicy",
    "load_app_config",
    "parse_sizes",
]
