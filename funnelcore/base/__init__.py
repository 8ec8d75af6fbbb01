# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the ports of the funnel report.

Store access is expressed as read-only repositories; the report service
only ever depends on these ABCs, never on a concrete database or cache.
"""

from funnelcore.base.cache import Cache
from funnelcore.base.repositories import (
    CatalogRepository,
    EventRepository,
    TransactionRepository,
)

__all__ = [
    "Cache",
    "CatalogRepository",
    "EventRepository",
    "TransactionRepository",
]
