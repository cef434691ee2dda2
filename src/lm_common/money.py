"""Integer arithmetic for order amounts.

All prices and totals are int minor units (paise). No float, no Decimal.
"""

CURRENCY_SYMBOL = "₹"


def validate_quantity(quantity: int) -> None:
    """Line-item quantities are strictly positive."""
    if quantity < 1:
        raise ValueError(f"Quantity must be at least 1, got {quantity}")


def line_total(unit_price: int, quantity: int) -> int:
    validate_quantity(quantity)
    return unit_price * quantity


def to_display(amount: int) -> str:
    """Convert minor units to display string: 50000 -> '₹500.00', -1200 -> '-₹12.00'."""
    if amount < 0:
        abs_amount = -amount
        return f"-{CURRENCY_SYMBOL}{abs_amount // 100:,}.{abs_amount % 100:02d}"
    return f"{CURRENCY_SYMBOL}{amount // 100:,}.{amount % 100:02d}"
