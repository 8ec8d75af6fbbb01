# ==============================================================================
# Funnel Analytics Exceptions
# ==============================================================================
"""
Exception taxonomy for funnel report computation.

- InputError: invalid request parameters, rejected before any store is read
- UpstreamUnavailable: an event, transaction or catalog read failed
- DataInconsistency: recoverable mismatch between stored data and the catalog.
  It is logged, never raised from the report path.

Anything else raised from the pure computation stages is a defect and
propagates unchanged.
"""


class FunnelError(Exception):
    """Base class for funnel analytics errors."""


class InputError(FunnelError, ValueError):
    """Raised when report parameters are invalid."""


class UpstreamUnavailable(FunnelError):
    """Raised when a store read fails.

    Attributes:
        source: Name of the accessor that failed ("events", "transactions", "catalog")
    """

    def __init__(self, source: str, message: str):
        super().__init__(f"{source} store unavailable: {message}")
        self.source = source


class DataInconsistency(FunnelError):
    """Stored activity references entities missing from the catalog."""

    def __init__(self, missing_ids: list[str]):
        super().__init__(f"{len(missing_ids)} entities missing from catalog")
        self.missing_ids = missing_ids
