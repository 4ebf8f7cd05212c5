"""Integer arithmetic utilities for cents-based prices.

All prices and totals are int cents. No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def line_total(unit_price: int, quantity: int) -> int:
    return unit_price * quantity
