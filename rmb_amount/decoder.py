"""
Convert capitalized RMB notation back to a Decimal amount.

Supported patterns:
    "壹仟肆佰零玖元伍角"          → 1409.50
    "壹拾万零柒仟元伍角叁分"      → 107000.53
    "陸億叁仟萬元正"              → 630000000.00  (traditional glyphs)
    "负陆仟零柒元壹角肆分"        → -6007.14

Yuan and terminal markers carry no value of their own; the position of
every digit is already implied by the unit glyph that follows it.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from .exceptions import EmptyInputError, InvalidCharacterError
from .lexicon import (
    DIGIT_VALUES,
    GROUP_UNITS,
    MINOR_UNITS,
    NEGATIVE,
    TERMINAL_VARIANTS,
    YUAN_VARIANTS,
    PositionalUnit,
)
from .money import CENT

_MARKERS = str.maketrans(dict.fromkeys(YUAN_VARIANTS + TERMINAL_VARIANTS))


class ScanState(NamedTuple):
    """Units in force while scanning from the least significant glyph.

    `active` applies to the next digit only. `major` is sticky: one 万 or
    亿 scales every digit written before it, so it survives the reset.
    """

    active: Optional[PositionalUnit] = None
    major: Optional[PositionalUnit] = None

    def position_of_digit(self) -> int:
        position = self.active if self.active is not None else PositionalUnit.YUAN
        if self.major is not None:
            position += self.major.yuan_index
        return position


def advance(state: ScanState, glyph: str) -> ScanState:
    """Fold a unit glyph into the scan state."""
    if glyph in MINOR_UNITS:
        unit = MINOR_UNITS[glyph]
        if state.active is None or unit < state.active:
            return state._replace(active=unit)
        return state
    unit = GROUP_UNITS[glyph]
    if state.major is None or unit > state.major:
        return state._replace(major=unit)
    return state


def decode(text: str) -> Decimal:
    """Convert capitalized text to a Decimal with two fractional digits.

    Args:
        text: e.g. "壹拾万零柒仟元伍角叁分"

    Returns:
        Decimal("107000.53")

    Raises:
        EmptyInputError: If the text is empty once markers are removed.
        InvalidCharacterError: If a glyph is not a digit or unit.
    """
    if not text or not text.strip():
        raise EmptyInputError("Empty text cannot be converted to an amount")

    body = text.strip()
    negative = body.startswith(NEGATIVE)
    if negative:
        body = body[len(NEGATIVE):]

    offset = len(text) - len(text.lstrip()) + (len(NEGATIVE) if negative else 0)
    glyphs = body.translate(_MARKERS)
    if not glyphs:
        raise EmptyInputError(
            f"No digits found in: {text!r}", {"text": text}
        )

    total = 0  # in fen
    state = ScanState()

    # Least significant glyph first; the original index is kept for errors
    for index in range(len(body) - 1, -1, -1):
        glyph = body[index]
        if glyph in YUAN_VARIANTS or glyph in TERMINAL_VARIANTS:
            continue
        if glyph in MINOR_UNITS or glyph in GROUP_UNITS:
            state = advance(state, glyph)
            continue
        if glyph not in DIGIT_VALUES:
            raise InvalidCharacterError(
                f"Unrecognized glyph {glyph!r} at index {offset + index} in {text!r}",
                {"glyph": glyph, "index": offset + index, "text": text},
            )
        total += DIGIT_VALUES[glyph] * 10 ** state.position_of_digit()
        state = ScanState(major=state.major)

    amount = (Decimal(total).scaleb(-2)).quantize(CENT, rounding=ROUND_HALF_UP)
    # 负 on a zero amount carries no sign
    return -amount if negative and amount else amount
