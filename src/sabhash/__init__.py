"""Separate-chaining hash table with an optional Θ(log n) per-operation surcharge."""

from . import bench, config, contracts, core, shell
from .core import CostInjector, SabotagedHashTable, TableConfig

__all__ = [
    "CostInjector",
    "SabotagedHashTable",
    "TableConfig",
    "bench",
    "config",
    "contracts",
    "core",
    "shell",
]
