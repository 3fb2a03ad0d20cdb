"""
Deterministic rule checker for capitalized RMB amounts.

The rules come from the official guidance on writing amounts on bills and
settlement vouchers. Their purpose is anti-fraud: no digit may be slipped
into a written amount without visibly breaking its 零 pattern.

    1. Only capitalized glyphs may be used, with at least one digit.
    2. An amount that stops at 元 is closed with 整 (or 正); an amount
       with 分 never is.
    3. When 角 is zero and 分 is not, 元 is followed by 零.
    4. When 元 is written, the whole-unit digits are checked against it:
       a. more than five digits with 万 and 仟 both zero: 零 after 万
       b. 元 digit zero: no 零 between the last unit glyph and 元
       c. 元 digit nonzero: every run of zero digits shows a 零, except
          the run that ends at a nonzero 仟 (and, when that 零 is left
          out, the runs below 仟 as well)

Each check:
  - Takes the text (or its token sequence)
  - Returns a list of ValidationFinding objects (empty = all clear)
  - Is independently testable

check_amount_rules() runs the checks in order and stops at the first
violation; validate() turns that into a bool and never raises.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from .decoder import ScanState, advance, decode
from .exceptions import DecodeError
from .lexicon import (
    ALPHABET,
    DIGIT_GLYPHS,
    DIGIT_VALUES,
    GROUP_UNITS,
    MINOR_UNITS,
    NEGATIVE,
    TERMINAL,
    TERMINAL_VARIANTS,
    UNIT_GLYPHS,
    YUAN,
    YUAN_ASCENDING_UNIT_GLYPHS,
    YUAN_VARIANTS,
    ZERO,
    PositionalUnit,
    normalize,
)
from .models import MonetaryAmount, Severity, ValidationFinding
from .money import MAX_MAGNITUDE

logger = logging.getLogger(__name__)

FEN = UNIT_GLYPHS[PositionalUnit.FEN]
JIAO = UNIT_GLYPHS[PositionalUnit.JIAO]


# ─── Token Sequence ──────────────────────────────────────────────────


class Token(NamedTuple):
    """One digit glyph and the glyphs written after it, up to the next digit."""

    digit: int
    position: int  # Fen-ascending, as the decoder scales the digit
    units: str  # Unit glyphs, plus 元 where it was written

    @property
    def glyphs(self) -> str:
        return DIGIT_GLYPHS[self.digit] + self.units


def tokenize(body: str) -> list[Token]:
    """Split a normalized body into digit tokens, in written order.

    Glyphs ahead of the first digit scale nothing and are dropped.

    >>> [t.glyphs for t in tokenize("壹拾万零柒仟元伍角")]
    ['壹拾万', '零', '柒仟元', '伍角']
    """
    tokens: list[Token] = []
    state = ScanState()
    units = ""
    for glyph in reversed(body):
        if glyph in DIGIT_VALUES:
            tokens.append(Token(DIGIT_VALUES[glyph], state.position_of_digit(), units))
            state = ScanState(major=state.major)
            units = ""
            continue
        units = glyph + units
        if glyph in MINOR_UNITS or glyph in GROUP_UNITS:
            state = advance(state, glyph)
    tokens.reverse()
    return tokens


def written_positions(whole: int) -> list[int]:
    """Positions of the nonzero whole-unit digits, most significant first."""
    return [
        PositionalUnit.YUAN + exponent
        for exponent in range(len(str(whole)) - 1, -1, -1)
        if _digit_at(whole, PositionalUnit.YUAN + exponent)
    ]


def zeros_between(tokens: list[Token], higher: int, lower: int) -> int:
    """Count the 零 glyphs written between the digits at two positions."""
    upper, below = _token_index(tokens, higher), _token_index(tokens, lower)
    if upper is None or below is None:
        return 0
    start, stop = sorted((upper, below))
    return sum(1 for token in tokens[start + 1:stop] if token.digit == 0)


# ─── Orchestrator ────────────────────────────────────────────────────


def check_amount_rules(text: object) -> list[ValidationFinding]:
    """Run every rule in order; return the first violation found."""
    if not isinstance(text, str) or not text or text == NEGATIVE:
        return [_violation("EMPTY_INPUT", "No capitalized amount to check")]

    body = text[len(NEGATIVE):] if text.startswith(NEGATIVE) else text

    findings = (
        check_alphabet(text)
        or check_has_digit(body)
        or check_terminal_position(body)
        or check_yuan_then_zero(body)
        or check_whole_unit_section(body)
    )
    if findings:
        logger.debug("Rejected %r: %s", text, findings[0].code)
    return findings


def validate(text: object) -> bool:
    """True when `text` is a correctly written capitalized amount."""
    return not check_amount_rules(text)


# ─── Individual Rules ────────────────────────────────────────────────


def check_alphabet(text: str) -> list[ValidationFinding]:
    """Every glyph must be capitalized; 负 may only lead."""
    for index, glyph in enumerate(text):
        if glyph in ALPHABET or (index == 0 and glyph == NEGATIVE):
            continue
        return [
            _violation(
                "INVALID_CHARACTER",
                f"Glyph {glyph!r} at index {index} is not allowed in a capitalized amount.",
                glyph=glyph,
                index=index,
            )
        ]
    return []


def check_has_digit(body: str) -> list[ValidationFinding]:
    """Units and markers alone (整, 元整, 拾) write no amount."""
    if any(glyph in DIGIT_VALUES for glyph in body):
        return []
    return [_violation("EMPTY_INPUT", f"No digit glyph in {body!r}")]


def check_terminal_position(body: str) -> list[ValidationFinding]:
    """整/正 closes an amount that stops at 元, and never follows 分."""
    last = body[-1]
    if last in YUAN_VARIANTS:
        return [
            _violation(
                "MISSING_TERMINAL",
                f"An amount ending at {last!r} must be closed with "
                f"{TERMINAL_VARIANTS[0]!r} or {TERMINAL_VARIANTS[1]!r}.",
                last=last,
            )
        ]
    if FEN in body and last in TERMINAL_VARIANTS:
        return [
            _violation(
                "TERMINAL_AFTER_FEN",
                f"An amount written to {FEN!r} must not end with {last!r}.",
                last=last,
            )
        ]
    return []


def check_yuan_then_zero(body: str) -> list[ValidationFinding]:
    """角 is zero, 分 is not: 元 must be followed by 零, and 零角 is wrong."""
    if not body.endswith(FEN):
        return []
    try:
        amount = decode(body)
    except DecodeError as exc:
        return [_decode_failed(body, exc)]

    jiao, fen = divmod(MonetaryAmount(value=amount).fractional_remainder, 10)
    if jiao or not fen:
        return []

    normalized = normalize(body)
    if YUAN in normalized:
        following = normalized[normalized.rindex(YUAN) + 1]
        if following != ZERO:
            return [
                _violation(
                    "MISSING_ZERO_AFTER_YUAN",
                    f"角 is zero and 分 is not, so {YUAN!r} must be followed by "
                    f"{ZERO!r}, found {following!r}.",
                    following=following,
                )
            ]
    if ZERO + JIAO in normalized:
        return [
            _violation(
                "ZERO_JIAO",
                f"A zero 角 is written as {ZERO!r} alone, never {ZERO + JIAO!r}.",
            )
        ]
    return []


def check_whole_unit_section(body: str) -> list[ValidationFinding]:
    """Compare the 零 glyphs of the whole-unit section with the decoded digits.

    Only applies when a yuan glyph is written; 叁分 or 壹拾 pass untouched.
    """
    normalized = normalize(body)
    if YUAN not in normalized:
        return []

    try:
        amount = decode(body)
    except DecodeError as exc:
        return [_decode_failed(body, exc)]

    magnitude = MonetaryAmount(value=amount).integer_magnitude
    if magnitude >= MAX_MAGNITUDE * 100:
        return [
            _violation(
                "AMOUNT_OUT_OF_RANGE",
                f"{amount} is beyond the highest unit (仟兆).",
                amount=str(amount),
            )
        ]
    if magnitude == 0:
        return []

    if normalized.endswith(TERMINAL):
        normalized = normalized[:-len(TERMINAL)]
    tokens = tokenize(normalized)
    whole = magnitude // 100

    findings = check_major_group_zero(tokens, whole)
    if findings:
        return findings
    if _digit_at(whole, PositionalUnit.YUAN) == 0:
        return check_yuan_digit_zero(tokens)
    return check_zero_runs(tokens, whole)


def check_major_group_zero(tokens: list[Token], whole: int) -> list[ValidationFinding]:
    """More than five digits with 万 and 仟 both zero: 零 must follow the major unit."""
    if whole < 10 ** 5:
        return []
    if _digit_at(whole, PositionalUnit.WAN) or _digit_at(whole, PositionalUnit.QIAN):
        return []

    written = written_positions(whole)
    below = [position for position in written if position < PositionalUnit.QIAN]
    if not below:
        return []

    lower = below[0]
    higher = written[written.index(lower) - 1]
    if zeros_between(tokens, higher, lower):
        return []

    major = PositionalUnit(higher).group_base
    before = _written_at(tokens, lower)
    return [
        _violation(
            "MISSING_ZERO_AFTER_MAJOR_UNIT",
            f"Both the 万 and 仟 digits are zero; a {ZERO!r} must follow "
            f"{major.glyph!r} before {before!r}.",
            major_unit=major.glyph,
            before=before,
        )
    ]


def check_yuan_digit_zero(tokens: list[Token]) -> list[ValidationFinding]:
    """元 already stands for a zero 元 digit; no 零 between it and the unit before it."""
    marked = [index for index, token in enumerate(tokens) if YUAN in token.units]
    if not marked:
        return []

    last = marked[-1]
    bare: list[Token] = []
    for index in range(last, -1, -1):
        units = tokens[index].units
        if index == last:
            units = units[:units.rindex(YUAN)]
        if _has_unit(units):
            break
        bare.append(tokens[index])
    else:
        # No unit glyph ahead of 元 (零元伍角)
        return []

    count = sum(1 for token in bare if token.digit == 0)
    if count:
        return [
            _violation(
                "ZERO_BEFORE_YUAN",
                f"{ZERO!r} must not be written between the last unit and {YUAN!r}.",
                count=count,
            )
        ]
    return []


def check_zero_runs(tokens: list[Token], whole: int) -> list[ValidationFinding]:
    """Each run of zero digits between two written digits shows at least one 零."""
    written = written_positions(whole)
    compact = _is_compact(tokens, written)

    for higher, lower in zip(written, written[1:]):
        if higher - lower == 1:
            continue
        # 万 digit zero, 仟 digit nonzero
        if lower == PositionalUnit.QIAN:
            continue
        if compact and higher <= PositionalUnit.QIAN:
            continue
        if zeros_between(tokens, higher, lower):
            continue
        before = _written_at(tokens, lower)
        return [
            _violation(
                "MISSING_ZERO",
                f"Zero digits lie between {_unit_name(higher)} and "
                f"{_unit_name(lower)}; {ZERO!r} must precede {before!r}.",
                before=before,
            )
        ]
    return []


# ─── Helpers ─────────────────────────────────────────────────────────


def _is_compact(tokens: list[Token], written: list[int]) -> bool:
    """万 digit zero, 仟 digit nonzero, and no 零 written after 万.

    Leaving that 零 out licenses leaving out the ones below 仟 too.
    """
    if PositionalUnit.QIAN not in written:
        return False
    index = written.index(PositionalUnit.QIAN)
    if index == 0 or written[index - 1] == PositionalUnit.WAN:
        return False
    return not zeros_between(tokens, written[index - 1], PositionalUnit.QIAN)


def _digit_at(whole: int, position: int) -> int:
    return whole // 10 ** (position - PositionalUnit.YUAN) % 10


def _token_index(tokens: list[Token], position: int) -> Optional[int]:
    """Index of the last nonzero digit written at `position`."""
    for index in range(len(tokens) - 1, -1, -1):
        if tokens[index].digit and tokens[index].position == position:
            return index
    return None


def _written_at(tokens: list[Token], position: int) -> str:
    index = _token_index(tokens, position)
    return tokens[index].glyphs if index is not None else _unit_name(position)


def _has_unit(glyphs: str) -> bool:
    return any(glyph in MINOR_UNITS or glyph in GROUP_UNITS for glyph in glyphs)


def _violation(code: str, message: str, **details: object) -> ValidationFinding:
    return ValidationFinding(
        severity=Severity.ERROR, code=code, message=message, details=details
    )


def _decode_failed(body: str, exc: DecodeError) -> ValidationFinding:
    return _violation(
        "DECODE_FAILED",
        f"Could not decode {body!r}: {exc}",
        reason=exc.code,
    )


def _unit_name(position: int) -> str:
    """Name a whole-unit position by the yuan-ascending table (元, 拾, 佰, …)."""
    if position >= PositionalUnit.YUAN:
        return YUAN_ASCENDING_UNIT_GLYPHS[PositionalUnit(position).yuan_index]
    return UNIT_GLYPHS[position]
