# ==============================================================================
# CLI Command Modules
# ==============================================================================
"""
Command implementations for the funnel CLI.

Each module holds plain functions; funnelcore.app registers them on the
typer application.
"""
