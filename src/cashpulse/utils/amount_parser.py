"""Amount parsing utilities."""

import math
import re

# Currency symbols, thousands separators and inner whitespace
_NOISE = re.compile(r"[$€£¥,\s]")


def parse_amount(amount_str: str) -> float:
    """Parse user input such as "12.50", "$1,200" or "€ 30" into a magnitude.

    Transactions carry their direction in their type, so a signed or
    parenthesised amount is rejected rather than interpreted.

    Raises:
        ValueError: If the string is empty, not a finite number, or negative
    """
    cleaned = _NOISE.sub("", amount_str or "")
    if not cleaned:
        raise ValueError("Empty amount string")

    try:
        amount = float(cleaned)
    except ValueError:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'") from None

    if not math.isfinite(amount):
        raise ValueError(f"Amount must be a finite number: '{amount_str.strip()}'")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: '{amount_str.strip()}'")
    return amount
