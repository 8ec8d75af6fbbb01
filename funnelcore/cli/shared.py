# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities, constants, and helper functions used across CLI command modules.

This module provides:
- ANSI color codes and box-drawing characters
- Box drawing helpers for formatted output
- Option parsing (timestamps, report filters, JSON input files)
- Report service construction for database or file-backed runs
"""

import json
import re
from datetime import datetime, time
from pathlib import Path
from typing import Any

import typer

from funnelcore.core.models import EntityKind, MarketingTags, ReportFilter
from funnelcore.core.periods import ensure_aware
from funnelcore.exceptions import FunnelError

# ==============================================================================
# Constants
# ==============================================================================

# Box drawing width (unified for all commands)
BOX_WIDTH = 68


# ==============================================================================
# ANSI Colors and Box Drawing
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Box:
    """Unicode box-drawing characters."""

    H = "─"  # horizontal
    V = "│"  # vertical
    TL = "┌"  # top-left
    TR = "┐"  # top-right
    BL = "└"  # bottom-left
    BR = "┘"  # bottom-right
    LT = "├"  # left-tee
    RT = "┤"  # right-tee


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"
    ARROW = "→"


# Module-level aliases for convenience
C, B, I = Colors, Box, Icons


# ==============================================================================
# Box Drawing Helpers
# ==============================================================================

# Regex pattern for stripping ANSI escape codes
_ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def _visible_len(s: str) -> int:
    """Calculate visible length of string, ignoring ANSI escape codes."""
    return len(_ANSI_ESCAPE_PATTERN.sub("", s))


def _box_header(title: str, width: int = BOX_WIDTH) -> str:
    """Create a single-line box header."""
    inner_width = width - 2
    title_padded = f" {title} "
    left_bar = (inner_width - len(title_padded)) // 2
    right_bar = inner_width - left_bar - len(title_padded)
    return (
        f"{C.CYAN}{B.TL}{B.H * left_bar}{C.BOLD}{C.WHITE}{title_padded}"
        f"{C.RESET}{C.CYAN}{B.H * right_bar}{B.TR}{C.RESET}"
    )


def _section_header(title: str, width: int = BOX_WIDTH) -> str:
    """Create a section header inside a box."""
    inner_width = width - 2
    title_padded = f" {title} "
    bar_len = inner_width - len(title_padded) - 1  # -1 for the first H after LT
    return (
        f"{C.CYAN}{B.LT}{B.H}{C.BOLD}{title_padded}{C.RESET}{C.CYAN}{B.H * bar_len}{B.RT}{C.RESET}"
    )


def _box_line(content: str, width: int = BOX_WIDTH) -> str:
    """Create a line inside the box with proper padding to right border."""
    inner_width = width - 2
    padding = max(0, inner_width - _visible_len(content))
    return f"{C.CYAN}{B.V}{C.RESET}{content}{' ' * padding}{C.CYAN}{B.V}{C.RESET}"


def _empty_line(width: int = BOX_WIDTH) -> str:
    """Create an empty line inside the box."""
    return f"{C.CYAN}{B.V}{' ' * (width - 2)}{B.V}{C.RESET}"


def _box_bottom(width: int = BOX_WIDTH) -> str:
    """Create a box bottom border."""
    return f"{C.CYAN}{B.BL}{B.H * (width - 2)}{B.BR}{C.RESET}"


# ==============================================================================
# Option Parsing
# ==============================================================================


def parse_timestamp(value: str, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime option.

    A bare date expands to the start of that day, or to its last microsecond
    when ``end_of_day`` is set. Naive values are read as UTC.

    Raises:
        typer.BadParameter: If the value is not ISO 8601
    """
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(
            f"Invalid timestamp: '{value}'. Use YYYY-MM-DD or an ISO 8601 datetime"
        ) from e
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return ensure_aware(parsed)


def build_filter(
    kind: str | None,
    campaign: str | None,
    source: str | None,
    medium: str | None,
) -> ReportFilter | None:
    """Build a ReportFilter from CLI options, or None when no option is set."""
    entity_kind = None
    if kind is not None:
        try:
            entity_kind = EntityKind(kind.lower())
        except ValueError as e:
            raise typer.BadParameter(f"Invalid kind: '{kind}'. Use product or service") from e
    tags = MarketingTags(campaign=campaign, source=source, medium=medium)
    if entity_kind is None and tags.is_empty:
        return None
    return ReportFilter(entity_kind=entity_kind, tags=None if tags.is_empty else tags)


def load_json_file(path: Path) -> Any:
    """Read a JSON input file.

    Raises:
        typer.BadParameter: If the file is missing or not valid JSON
    """
    try:
        return json.loads(path.read_text())
    except FileNotFoundError as e:
        raise typer.BadParameter(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Invalid JSON in {path}: {e}") from e


def fail(error: FunnelError | str, json_output: bool) -> None:
    """Print an error in the requested format and exit with status 1."""
    message = str(error)
    if json_output:
        print(json.dumps({"error": message}))
    else:
        print(f"\n{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}\n")
    raise typer.Exit(1)


# ==============================================================================
# Service Construction
# ==============================================================================


def get_report_service(data_file: Path | None):
    """Build the report service for a command.

    Args:
        data_file: Exported dataset to report on. If None, reads PostgreSQL
            (with the Valkey cache when enabled).
    """
    from funnelcore.services import FunnelReportService, get_funnel_report_service

    if data_file is None:
        return get_funnel_report_service()

    from funnelcore.infrastructure.repositories import load_dataset

    events, transactions, catalog = load_dataset(load_json_file(data_file))
    return FunnelReportService(events, transactions, catalog)
