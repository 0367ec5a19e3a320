# freightbid/services/amounts.py
"""
Bid amount handling.

Amounts cross the API boundary exactly once through ``parse_amount`` and
leave it through ``amount_to_json``; in between they are ``Decimal`` values
with two places, matching the NUMERIC(10, 2) column.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
MAX_AMOUNT = Decimal('99999999.99')


def to_decimal(value):
    """Convert a stored or computed amount to a 2-place Decimal (None passes through)."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(raw):
    """
    Validate a bid amount from a request payload.

    Returns:
        tuple: (Decimal amount, None) on success or (None, error_message)
    """
    if raw is None or raw == '':
        return None, "Amount is required"

    # bool is an int subclass; true/false are not amounts
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str, Decimal)):
        return None, "Amount must be a number"

    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return None, "Amount must be a number"

    if not amount.is_finite():
        return None, "Amount must be a number"

    if amount <= 0:
        return None, "Amount must be greater than 0"
    if amount > MAX_AMOUNT:
        return None, f"Amount must not exceed {MAX_AMOUNT}"

    # Sub-cent amounts round to zero
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount == 0:
        return None, "Amount must be greater than 0"

    return amount, None


def amount_to_json(value):
    """JSON representation of an amount: a number, or None when absent."""
    value = to_decimal(value)
    return float(value) if value is not None else None
