"""
Convert a decimal amount to capitalized RMB notation.

Examples (from the official guidance on filling in settlement vouchers):
    1409.50   → 壹仟肆佰零玖元伍角
    6007.14   → 陆仟零柒元壹角肆分
    107000.53 → 壹拾万零柒仟元零伍角叁分
    16409.02  → 壹万陆仟肆佰零玖元零贰分
    0         → 零元整

The encoder always writes the explicit form: every internal run of zeros
gets exactly one 零, even where the rules would let it be dropped.
"""

from __future__ import annotations

from decimal import Decimal

from .lexicon import (
    DIGIT_GLYPHS,
    NEGATIVE,
    TERMINAL,
    UNIT_GLYPHS,
    ZERO,
    ZERO_AMOUNT,
    PositionalUnit,
)
from .models import MonetaryAmount, Sign


def encode(amount: Decimal | int | float | str) -> str:
    """Convert an amount to its capitalized form.

    Args:
        amount: Anything `as_money` accepts; rounded half-up to fen.

    Returns:
        e.g. "壹仟肆佰零玖元伍角" for Decimal("1409.50")

    Raises:
        InvalidAmountError: If the amount is not finite or beyond 仟兆.

    Algorithm:
        Digits are consumed least-significant first and glyphs are
        collected in reverse, then flipped at the end.
        - nonzero digit → digit glyph + unit glyph
        - zero digit    → one 零 per run, only above a nonzero digit
        - 元 is always written; 万/亿/兆 only when their group is nonzero
    """
    money = MonetaryAmount.of(amount)
    if money.sign is Sign.ZERO:
        return ZERO_AMOUNT

    glyphs = _encode_magnitude(money.integer_magnitude, money.fractional_remainder)
    if money.sign is Sign.NEGATIVE:
        glyphs.append(NEGATIVE)
    text = "".join(reversed(glyphs))

    if money.fractional_remainder == 0:
        text += TERMINAL
    return text


def _encode_magnitude(magnitude: int, fraction: int) -> list[str]:
    """Return the glyphs for `magnitude` fen, least significant first."""
    # Trailing zero 分/角 digits are skipped, not written
    if fraction == 0:
        index, number, zero_pending = PositionalUnit.YUAN, magnitude // 100, True
    elif fraction % 10 == 0:
        index, number, zero_pending = PositionalUnit.JIAO, magnitude // 10, True
    else:
        index, number, zero_pending = PositionalUnit.FEN, magnitude, False

    glyphs: list[str] = []
    zero_run = 0

    while number > 0:
        number, digit = divmod(number, 10)
        unit = PositionalUnit(index)

        if digit:
            # 仟万/仟亿/仟兆 above three zeros: the group glyph was never written
            base = unit.group_base
            if base is not None and unit - base == 3 and zero_run >= 3:
                glyphs.append(base.glyph)
            glyphs.append(UNIT_GLYPHS[unit])
            glyphs.append(DIGIT_GLYPHS[digit])
            zero_pending = False
            zero_run = 0
        else:
            zero_run += 1
            if not zero_pending:
                glyphs.append(ZERO)
            if unit is PositionalUnit.YUAN:
                glyphs.append(UNIT_GLYPHS[unit])
            elif unit.is_major and number % 100 > 0:
                glyphs.append(UNIT_GLYPHS[unit])
            zero_pending = True

        index += 1

    return glyphs
