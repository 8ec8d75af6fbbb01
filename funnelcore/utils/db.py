# ==============================================================================
# Database Utilities
# ==============================================================================
"""
Database utility functions for the funnel read model.

Provides schema initialization and a connection check.
Includes retry logic with exponential backoff for network resilience.
"""

import logging
from pathlib import Path

import psycopg2
from jinja2 import Template

from funnelcore.utils.config import PostgresSettings, get_settings
from funnelcore.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_standard

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).resolve().parent.parent / "schema" / "init.sql"


def render_schema_sql(schema_name: str) -> str:
    """Render the schema SQL template with the given schema name."""
    if not SCHEMA_FILE.exists():
        raise RuntimeError(f"Schema file not found: {SCHEMA_FILE}")
    template = Template(SCHEMA_FILE.read_text())
    return template.render(schema_name=schema_name)


@retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
def ensure_schema(settings: PostgresSettings | None = None) -> None:
    """
    Create the funnel schema and tables if they do not exist.

    Retries on connection errors with exponential backoff.
    """
    settings = settings or get_settings().postgres
    sql = render_schema_sql(settings.schema_name)
    conn = psycopg2.connect(settings.connection_string)
    try:
        with conn.cursor() as cur:
            cur.execute(sql)
        conn.commit()
        logger.info("Schema '%s' is ready", settings.schema_name)
    finally:
        conn.close()


def check_db_connection(settings: PostgresSettings | None = None) -> bool:
    """
    Check if PostgreSQL is reachable.

    Returns:
        True if a connection can be opened, False otherwise
    """
    settings = settings or get_settings().postgres
    try:
        conn = psycopg2.connect(settings.connection_string)
        conn.close()
        return True
    except psycopg2.Error as e:
        logger.debug("PostgreSQL check failed: %s", e)
        return False
