# ==============================================================================
# Repository Implementations
# ==============================================================================
"""Concrete implementations of the read repositories."""

from funnelcore.infrastructure.repositories.memory import (
    InMemoryCatalogRepository,
    InMemoryEventRepository,
    InMemoryTransactionRepository,
    load_dataset,
)
from funnelcore.infrastructure.repositories.postgresql import (
    PostgreSQLCatalogRepository,
    PostgreSQLEventRepository,
    PostgreSQLTransactionRepository,
)

__all__ = [
    "InMemoryCatalogRepository",
    "InMemoryEventRepository",
    "InMemoryTransactionRepository",
    "PostgreSQLCatalogRepository",
    "PostgreSQLEventRepository",
    "PostgreSQLTransactionRepository",
    "load_dataset",
]
