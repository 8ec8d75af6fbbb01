# ==============================================================================
# Infrastructure Layer
# ==============================================================================
"""
Concrete adapters for the ports defined in funnelcore.base.

- repositories: PostgreSQL and in-memory stores
- cache: Valkey report cache
"""
