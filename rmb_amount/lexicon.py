"""
Glyph tables for capitalized RMB amounts (人民币大写金额).

Everything here is immutable module data. The encoder, the decoder and the
validator all read from the same tables, so a glyph is defined exactly once.

Two orderings of the positional ladder exist:

    fen-ascending   分 角 元 拾 佰 仟 万 拾 佰 仟 亿 拾 佰 仟 兆 拾 佰 仟
    yuan-ascending        元 拾 佰 仟 万 拾 佰 仟 亿 拾 佰 仟 兆 拾 佰 仟

`PositionalUnit` is indexed fen-ascending; `yuan_index` maps into the other.
"""

from __future__ import annotations

from enum import IntEnum

# ─── Digits ──────────────────────────────────────────────────────────

DIGIT_GLYPHS: tuple[str, ...] = ("零", "壹", "贰", "叁", "肆", "伍", "陆", "柒", "捌", "玖")

ZERO = DIGIT_GLYPHS[0]

# Traditional forms that banks must accept (貳, 陸)
DIGIT_VALUES: dict[str, int] = {
    **{glyph: value for value, glyph in enumerate(DIGIT_GLYPHS)},
    "貳": 2,
    "陸": 6,
}


# ─── Positional Units ────────────────────────────────────────────────

UNIT_GLYPHS: tuple[str, ...] = (
    "分", "角", "元",
    "拾", "佰", "仟", "万",
    "拾", "佰", "仟", "亿",
    "拾", "佰", "仟", "兆",
    "拾", "佰", "仟",
)

YUAN_ASCENDING_UNIT_GLYPHS: tuple[str, ...] = UNIT_GLYPHS[2:]


class PositionalUnit(IntEnum):
    """Fen-ascending position of a digit within an amount."""

    FEN = 0
    JIAO = 1
    YUAN = 2
    SHI = 3
    BAI = 4
    QIAN = 5
    WAN = 6
    SHI_WAN = 7
    BAI_WAN = 8
    QIAN_WAN = 9
    YI = 10
    SHI_YI = 11
    BAI_YI = 12
    QIAN_YI = 13
    ZHAO = 14
    SHI_ZHAO = 15
    BAI_ZHAO = 16
    QIAN_ZHAO = 17

    @property
    def glyph(self) -> str:
        return UNIT_GLYPHS[self]

    @property
    def yuan_index(self) -> int:
        """Index into the yuan-ascending table (negative for 角 and 分)."""
        return self - PositionalUnit.YUAN

    @property
    def is_major(self) -> bool:
        """元, 万, 亿 and 兆 close a group of digits."""
        return self in MAJOR_UNITS

    @property
    def group_base(self) -> PositionalUnit | None:
        """The 万/亿/兆 position that owns this digit, if any."""
        if self < PositionalUnit.WAN:
            return None
        return PositionalUnit(self - (self - PositionalUnit.WAN) % 4)


MAJOR_UNITS: frozenset[PositionalUnit] = frozenset({
    PositionalUnit.YUAN, PositionalUnit.WAN, PositionalUnit.YI, PositionalUnit.ZHAO,
})

# Units a digit can carry on its own, keyed by glyph
MINOR_UNITS: dict[str, PositionalUnit] = {
    "分": PositionalUnit.FEN,
    "角": PositionalUnit.JIAO,
    "拾": PositionalUnit.SHI,
    "佰": PositionalUnit.BAI,
    "仟": PositionalUnit.QIAN,
}

# Multipliers that stay in force for every more significant digit
GROUP_UNITS: dict[str, PositionalUnit] = {
    "万": PositionalUnit.WAN,
    "萬": PositionalUnit.WAN,
    "亿": PositionalUnit.YI,
    "億": PositionalUnit.YI,
    "兆": PositionalUnit.ZHAO,
}


# ─── Markers ─────────────────────────────────────────────────────────

YUAN = "元"
YUAN_VARIANTS: tuple[str, ...] = ("元", "圆", "圓")

TERMINAL = "整"
TERMINAL_VARIANTS: tuple[str, ...] = ("整", "正")

NEGATIVE = "负"

ZERO_AMOUNT = ZERO + YUAN + TERMINAL


# ─── Alphabet & Normalization ────────────────────────────────────────

ALPHABET: frozenset[str] = frozenset(
    set(DIGIT_VALUES)
    | set(MINOR_UNITS)
    | set(GROUP_UNITS)
    | set(YUAN_VARIANTS)
    | set(TERMINAL_VARIANTS)
)

_TRADITIONAL = str.maketrans({
    "貳": "贰",
    "陸": "陆",
    "萬": "万",
    "億": "亿",
    "圆": YUAN,
    "圓": YUAN,
    "正": TERMINAL,
})


def normalize(text: str) -> str:
    """Collapse traditional and variant glyphs to their canonical simplified form."""
    return text.translate(_TRADITIONAL)
