# ==============================================================================
# Report Formatter - Ranked Entity Lists
# ==============================================================================
"""
Ranked views over per-entity funnel metrics.

- best_sellers: most booked units first
- most_viewed: most views first
- opportunity: plenty of traffic, little conversion
- underperforming: carted but never transacted

Every list is a stable sort with ties broken by ascending entity id, truncated
to the caller's limit. Entities no longer present in the catalog are dropped
before ranking.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from funnelcore.core.models import (
    EntityFunnelMetric,
    EntityId,
    EntityMetadata,
    RankedEntity,
    RankedLists,
)
from funnelcore.exceptions import DataInconsistency

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingThresholds:
    """Filters for the opportunity list."""

    opportunity_min_views: int = 10
    opportunity_max_conversion_rate: float = 5.0


def _top(
    rows: Iterable[RankedEntity],
    score: Callable[[EntityFunnelMetric], int],
    limit: int,
) -> list[RankedEntity]:
    ordered = sorted(rows, key=lambda row: (-score(row.metric), row.metric.entity_id))
    return ordered[:limit]


def join_catalog(
    metrics: Mapping[EntityId, EntityFunnelMetric],
    catalog: Mapping[EntityId, EntityMetadata],
) -> tuple[list[RankedEntity], list[EntityId]]:
    """
    Attach display metadata to metrics.

    Returns:
        (rows for entities found in the catalog, sorted ids of missing entities)
    """
    rows: list[RankedEntity] = []
    missing: list[EntityId] = []
    for entity_id, metric in metrics.items():
        meta = catalog.get(entity_id)
        if meta is None:
            missing.append(entity_id)
            continue
        rows.append(
            RankedEntity(metric=metric, name=meta.name, category=meta.category, image=meta.image)
        )
    return rows, sorted(missing)


def rank_entities(
    metrics: Mapping[EntityId, EntityFunnelMetric],
    catalog: Mapping[EntityId, EntityMetadata],
    limit: int,
    thresholds: RankingThresholds | None = None,
) -> tuple[RankedLists, list[EntityId]]:
    """
    Build the four ranked lists.

    Args:
        metrics: Per-entity funnel metrics
        catalog: Display metadata by entity id
        limit: Maximum entries per list
        thresholds: Opportunity filter thresholds (defaults: 10 views, 5%)

    Returns:
        (RankedLists, ids of entities dropped because they left the catalog)
    """
    thresholds = thresholds or RankingThresholds()
    rows, missing = join_catalog(metrics, catalog)
    if missing:
        inconsistency = DataInconsistency(missing)
        logger.warning(
            "Dropping from rankings: %s (%s)", inconsistency, ", ".join(missing[:10])
        )

    opportunity = [
        row
        for row in rows
        if row.metric.views >= thresholds.opportunity_min_views
        and row.metric.conversion_rate < thresholds.opportunity_max_conversion_rate
    ]
    underperforming = [
        row for row in rows if row.metric.add_to_carts > 0 and row.metric.transactions_booked == 0
    ]

    lists = RankedLists(
        best_sellers=_top(rows, lambda m: m.transactions_booked, limit),
        most_viewed=_top(rows, lambda m: m.views, limit),
        opportunity=_top(opportunity, lambda m: m.views, limit),
        underperforming=_top(underperforming, lambda m: m.add_to_carts, limit),
    )
    return lists, missing
