"""Human-facing reference numbers."""

import string
from datetime import datetime

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("Only non-negative numbers can be encoded")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def make_confirmation_number(prefix: str, entity_id: str, at: datetime) -> str:
    """
    ``{prefix}-{base36 epoch ms}-{first 8 id chars}``, upper case.

    Example: ``QTE-LZ3K9Q1A-3F2B8C1D``
    """
    millis = int(at.timestamp() * 1000)
    return f"{prefix}-{to_base36(millis)}-{entity_id[:8].upper()}"


__all__ = ["make_confirmation_number", "to_base36"]
