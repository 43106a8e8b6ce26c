from .cost import CostInjector, ceil_log2
from .table import DEFAULT_TABLE_CONFIG, SabotagedHashTable, TableConfig

__all__ = [
    "CostInjector",
    "DEFAULT_TABLE_CONFIG",
    "SabotagedHashTable",
    "TableConfig",
    "ceil_log2",
]
