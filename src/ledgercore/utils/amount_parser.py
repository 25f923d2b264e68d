"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse a journal line amount into a two-place Decimal.

    Handles formats like:
    - "100"
    - "100.5"
    - "$1,234.56"

    Line amounts are always positive; the side (debit or credit) carries
    the direction.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount quantized to cents

    Raises:
        ValueError: If the string is empty, negative, zero, or has more than two decimals
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip()
    if cleaned.startswith("-") or (cleaned.startswith("(") and cleaned.endswith(")")):
        raise ValueError(f"Amount '{amount_str}' must be positive; use the other side instead")

    cleaned = re.sub(r"[$€£¥\s]", "", cleaned).replace(",", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'") from None

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount <= 0:
        raise ValueError(f"Amount '{amount_str}' must be greater than zero")
    if amount != amount.quantize(CENT):
        raise ValueError(f"Amount '{amount_str}' has more than two decimal places")
    return amount.quantize(CENT)


def parse_line_spec(spec: str) -> tuple[str, Decimal]:
    """Parse an ``ACCOUNT=AMOUNT`` journal line option.

    Args:
        spec: Line in ACCOUNT=AMOUNT form, e.g. "1000=100.00"

    Returns:
        Tuple of (account reference, amount)

    Raises:
        ValueError: If the line has no '=' or the amount is invalid
    """
    account, sep, amount = spec.rpartition("=")
    if not sep or not account.strip():
        raise ValueError(f"Line '{spec}' must look like ACCOUNT=AMOUNT")
    return account.strip(), parse_amount(amount)
