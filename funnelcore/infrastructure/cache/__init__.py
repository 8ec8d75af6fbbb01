# ==============================================================================
# Cache Implementations
# ==============================================================================
"""Concrete implementations of the Cache interface."""

from funnelcore.infrastructure.cache.valkey import ValkeyCache, get_valkey_cache

__all__ = ["ValkeyCache", "get_valkey_cache"]
