"""
Decimal helpers for monetary values.

All amounts are handled as `Decimal` with two fractional digits, rounded
half-up (四舍五入), never as float. The arithmetic helpers mirror the
rounding wrappers finance code usually keeps next to the amount converter:
a missing operand counts as zero, and the scale defaults to two places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

MONEY_PRECISION = 2
CENT = Decimal(1).scaleb(-MONEY_PRECISION)

# 仟兆 is the highest unit there is a glyph for
MAX_MAGNITUDE = Decimal(10) ** 16


def as_money(value: Decimal | int | float | str) -> Decimal:
    """Normalize any input to a Decimal with 2 fractional digits.

    Raises:
        InvalidAmountError: If the value is unparseable, NaN/infinite,
            or too large to be written in capitalized numerals.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidAmountError(
            f"Cannot parse an amount from {value!r}", {"value": str(value)}
        ) from exc

    if not amount.is_finite():
        raise InvalidAmountError(
            f"Amount must be finite, got {amount}", {"value": str(amount)}
        )

    # Checked before quantize too: quantizing a huge value overflows the context
    if abs(amount) >= MAX_MAGNITUDE:
        raise _out_of_range(amount)

    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if abs(rounded) >= MAX_MAGNITUDE:
        raise _out_of_range(amount)
    return rounded


def _out_of_range(amount: Decimal) -> InvalidAmountError:
    return InvalidAmountError(
        f"Amount {amount} exceeds the largest writable amount "
        f"(below {MAX_MAGNITUDE:,} yuan)",
        {"value": str(amount), "limit": str(MAX_MAGNITUDE)},
    )


# ─── Rounding Arithmetic ─────────────────────────────────────────────


def _operands(first: Decimal | None, second: Decimal | None) -> tuple[Decimal, Decimal]:
    return (
        Decimal(0) if first is None else Decimal(first),
        Decimal(0) if second is None else Decimal(second),
    )


def _quantizer(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def add(
    first: Decimal | None,
    second: Decimal | None,
    rounding: str = ROUND_HALF_UP,
    scale: int = MONEY_PRECISION,
) -> Decimal:
    a, b = _operands(first, second)
    return (a + b).quantize(_quantizer(scale), rounding=rounding)


def subtract(
    first: Decimal | None,
    second: Decimal | None,
    rounding: str = ROUND_HALF_UP,
    scale: int = MONEY_PRECISION,
) -> Decimal:
    a, b = _operands(first, second)
    return (a - b).quantize(_quantizer(scale), rounding=rounding)


def multiply(
    first: Decimal | None,
    second: Decimal | None,
    rounding: str = ROUND_HALF_UP,
    scale: int = MONEY_PRECISION,
) -> Decimal:
    a, b = _operands(first, second)
    return (a * b).quantize(_quantizer(scale), rounding=rounding)


def divide(
    first: Decimal | None,
    second: Decimal | None,
    rounding: str = ROUND_HALF_UP,
    scale: int = MONEY_PRECISION,
) -> Decimal:
    """Divide and round the quotient to `scale` places.

    Raises:
        InvalidAmountError: On division by zero.
    """
    a, b = _operands(first, second)
    if b == 0:
        raise InvalidAmountError(
            f"Cannot divide {a} by zero", {"dividend": str(a)}
        )
    return (a / b).quantize(_quantizer(scale), rounding=rounding)
