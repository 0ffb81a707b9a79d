"""CLI formatting helpers."""


def format_currency(amount: float) -> str:
    """Format an amount with sign, e.g. '-$1,250.00'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
