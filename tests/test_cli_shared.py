# ==============================================================================
# Tests for Shared CLI Helpers
# ==============================================================================
"""
Tests for the box drawing and option parsing helpers in funnelcore.cli.shared.
"""

from datetime import datetime, timezone

import pytest
import typer

from funnelcore.cli.shared import (
    BOX_WIDTH,
    C,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    _visible_len,
    build_filter,
    parse_timestamp,
)
from funnelcore.core.models import EntityKind


class TestBoxDrawing:
    """Every box line has the same visible width."""

    @pytest.mark.parametrize(
        "line",
        [
            _box_header("FUNNEL REPORT shop-1"),
            _section_header("Views by week"),
            _box_line(f"  {C.BRIGHT_YELLOW}colored{C.RESET} content"),
            _empty_line(),
            _box_bottom(),
        ],
    )
    def test_visible_width(self, line):
        assert _visible_len(line) == BOX_WIDTH

    def test_palette_is_only_what_commands_use(self):
        codes = {name for name in vars(C) if name.isupper()}
        assert codes == {
            "RESET", "BOLD", "DIM", "CYAN", "WHITE",
            "BRIGHT_RED", "BRIGHT_GREEN", "BRIGHT_YELLOW",
        }


class TestParseTimestamp:
    """Tests for --start / --end parsing."""

    def test_date_is_start_of_day_utc(self):
        assert parse_timestamp("2024-01-31") == datetime(2024, 1, 31, tzinfo=timezone.utc)

    def test_end_of_day(self):
        parsed = parse_timestamp("2024-01-31", end_of_day=True)
        assert parsed == datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_explicit_offset_is_kept(self):
        assert parse_timestamp("2024-01-31T10:00:00+02:00").utcoffset().total_seconds() == 7200

    def test_invalid(self):
        with pytest.raises(typer.BadParameter):
            parse_timestamp("last tuesday")


class TestBuildFilter:
    """Tests for building report filters from options."""

    def test_no_options(self):
        assert build_filter(None, None, None, None) is None

    def test_kind_is_case_insensitive(self):
        assert build_filter("Service", None, None, None).entity_kind == EntityKind.SERVICE

    def test_invalid_kind(self):
        with pytest.raises(typer.BadParameter):
            build_filter("bundle", None, None, None)
