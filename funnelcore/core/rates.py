# ==============================================================================
# Rate Rounding
# ==============================================================================
"""
Percentage helper shared by every funnel rate.

Percentages carry one decimal place: round(ratio * 1000) / 10, rounding
halves upward. The division is done in Decimal so 1/8 yields exactly 12.5
rather than a binary-float neighbour.
"""

from decimal import ROUND_HALF_UP, Decimal

_ONE = Decimal("1")
_TEN = Decimal("10")
_THOUSAND = Decimal("1000")


def percent(numerator: int | Decimal, denominator: int | Decimal) -> float:
    """
    Express numerator / denominator as a percentage with one decimal place.

    Args:
        numerator: Count (or amount) that satisfied the condition
        denominator: Population size

    Returns:
        Percentage rounded to one decimal, or 0.0 when denominator is 0
    """
    if not denominator:
        return 0.0
    scaled = (Decimal(numerator) * _THOUSAND / Decimal(denominator)).quantize(
        _ONE, rounding=ROUND_HALF_UP
    )
    return float(scaled / _TEN)
