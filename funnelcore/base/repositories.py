# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Read-side repository ABCs for the funnel report.

These define the "what" (read tenant-scoped events, transactions and catalog
entries) not the "how". Concrete implementations in infrastructure/ handle
the specifics, including any retry policy.

Includes:
- EventRepository: view / add-to-cart events
- TransactionRepository: orders and bookings with their lines
- CatalogRepository: display metadata for entities

Note: Cache is in a separate module (cache.py) since it is not a collection
of domain objects.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from funnelcore.core.models import (
    EntityId,
    EntityMetadata,
    ProductEvent,
    ReportFilter,
    ReportWindow,
    TenantId,
    Transaction,
)


class EventRepository(ABC):
    """Repository for storefront events."""

    @abstractmethod
    def fetch_events(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[ProductEvent]:
        """
        Read events for a tenant within an inclusive window.

        Args:
            tenant_id: Tenant to read
            window: Inclusive time window
            report_filter: Optional entity-kind / marketing-tag restriction

        Returns:
            Matching events
        """
        ...


class TransactionRepository(ABC):
    """Repository for orders and bookings."""

    @abstractmethod
    def fetch_transactions(
        self,
        tenant_id: TenantId,
        window: ReportWindow,
        report_filter: ReportFilter | None = None,
    ) -> list[Transaction]:
        """
        Read transactions for a tenant within an inclusive window.

        With an entity-kind filter, only lines of that kind are returned and
        transactions left without lines are omitted.

        Args:
            tenant_id: Tenant to read
            window: Inclusive time window
            report_filter: Optional entity-kind / marketing-tag restriction

        Returns:
            Matching transactions with completion state already classified
        """
        ...


class CatalogRepository(ABC):
    """Repository for entity display metadata."""

    @abstractmethod
    def fetch_catalog(self, entity_ids: Iterable[EntityId]) -> dict[EntityId, EntityMetadata]:
        """
        Look up catalog entries.

        Args:
            entity_ids: Ids to look up

        Returns:
            Dict of id to metadata (ids no longer in the catalog are omitted)
        """
        ...
