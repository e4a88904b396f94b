"""
Quantities -- fixed-precision arithmetic for kilograms and pieces.

Responsibility:
    The single place where raw numeric input becomes a stored quantity.
    Kilograms live on a 3-decimal grid; pieces are whole numbers.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module.

Invariants enforced:
    - Every stored kg value is a ``Decimal`` quantized to 0.001.
    - Invariant comparisons use the rounded value; there is no epsilon
      tolerance beyond the 3-decimal grid.
    - Floats are accepted at the boundary only through ``str()`` so that
      0.1 becomes Decimal("0.1"), never its binary expansion.

Failure modes:
    - ValidationError for NaN, infinity, unparseable input or a value too
      large for the 3-decimal grid.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from stock_kernel.exceptions import ValidationError

KG_QUANTUM = Decimal("0.001")
ZERO_KG = Decimal("0.000")


def to_decimal(value: Any, name: str = "quantity") -> Decimal:
    """Convert a boundary value to Decimal.

    Raises:
        ValidationError: if the value is None, not numeric, NaN or infinite.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError((name,), f"{name} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValidationError((name,), f"{name} must be a finite number")
        result = Decimal(str(value))
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValidationError((name,), f"{name} must be a number") from e
    if not result.is_finite():
        raise ValidationError((name,), f"{name} must be a finite number")
    return result


def round_kg(value: Any, name: str = "quantity") -> Decimal:
    """Round a kilogram value to 3 decimals (half-up)."""
    try:
        return to_decimal(value, name).quantize(KG_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # more digits than the decimal context carries
        raise ValidationError((name,), f"{name} is out of range") from e


def round_pcs(value: Any, name: str = "quantity") -> int:
    """Floor a piece count derived from a continuous input."""
    try:
        return int(to_decimal(value, name).to_integral_value(rounding=ROUND_FLOOR))
    except InvalidOperation as e:
        raise ValidationError((name,), f"{name} is out of range") from e


def kg_or_none(value: Any, name: str) -> Decimal | None:
    """Rounded kg, or None when the field was left empty."""
    if value is None or value == "":
        return None
    return round_kg(value, name)


def pcs_or_none(value: Any, name: str) -> int | None:
    """Floored pieces, or None when the field was left empty."""
    if value is None or value == "":
        return None
    return round_pcs(value, name)


def format_kg(value: Decimal) -> str:
    """Render kg the way audit messages show it (always 3 decimals)."""
    return f"{value.quantize(KG_QUANTUM, rounding=ROUND_HALF_UP)}"
