"""
Test suite for the amount codec: glyph tables, money helpers, encoder, decoder.

Everything here is deterministic: no network, no randomness beyond a
fixed-seed sweep.

Run: pytest tests/ -v
"""

from __future__ import annotations

import random
from decimal import ROUND_DOWN, Decimal

import pytest

from rmb_amount.config import Settings, load_settings
from rmb_amount.decoder import ScanState, advance, decode
from rmb_amount.encoder import encode
from rmb_amount.exceptions import (
    DecodeError,
    EmptyInputError,
    InvalidAmountError,
    InvalidCharacterError,
)
from rmb_amount.lexicon import (
    ALPHABET,
    UNIT_GLYPHS,
    YUAN_ASCENDING_UNIT_GLYPHS,
    PositionalUnit,
    normalize,
)
from rmb_amount.models import MonetaryAmount, Sign
from rmb_amount.money import add, as_money, divide, multiply, subtract
from rmb_amount.validators import validate


# ═══════════════════════════════════════════════════════════════════════
# LEXICON
# ═══════════════════════════════════════════════════════════════════════


class TestLexicon:
    def test_unit_ladder_has_eighteen_positions(self):
        assert len(UNIT_GLYPHS) == 18
        assert UNIT_GLYPHS[0] == "分"
        assert UNIT_GLYPHS[-1] == "仟"

    def test_yuan_ascending_table_starts_at_yuan(self):
        assert YUAN_ASCENDING_UNIT_GLYPHS[0] == "元"
        assert YUAN_ASCENDING_UNIT_GLYPHS[PositionalUnit.WAN.yuan_index] == "万"

    def test_unit_glyphs(self):
        assert PositionalUnit.WAN.glyph == "万"
        assert PositionalUnit.YI.glyph == "亿"
        assert PositionalUnit.ZHAO.glyph == "兆"
        assert PositionalUnit.QIAN_YI.glyph == "仟"

    def test_yuan_index(self):
        assert PositionalUnit.YUAN.yuan_index == 0
        assert PositionalUnit.YI.yuan_index == 8
        assert PositionalUnit.FEN.yuan_index == -2

    def test_group_base(self):
        assert PositionalUnit.QIAN.group_base is None
        assert PositionalUnit.WAN.group_base is PositionalUnit.WAN
        assert PositionalUnit.QIAN_WAN.group_base is PositionalUnit.WAN
        assert PositionalUnit.SHI_ZHAO.group_base is PositionalUnit.ZHAO

    def test_major_units(self):
        majors = [unit for unit in PositionalUnit if unit.is_major]
        assert majors == [
            PositionalUnit.YUAN, PositionalUnit.WAN, PositionalUnit.YI, PositionalUnit.ZHAO,
        ]

    def test_normalize_traditional_glyphs(self):
        assert normalize("陸億貳仟萬圓正") == "陆亿贰仟万元整"

    def test_negative_marker_not_in_alphabet(self):
        assert "负" not in ALPHABET
        assert "圓" in ALPHABET


# ═══════════════════════════════════════════════════════════════════════
# MONEY HELPERS
# ═══════════════════════════════════════════════════════════════════════


class TestAsMoney:
    """Amounts are Decimal, two places, rounded half-up, never float."""

    def test_rounds_half_up(self):
        assert as_money("1409.505") == Decimal("1409.51")
        assert as_money("1409.504") == Decimal("1409.50")

    def test_negative_rounds_away_from_zero(self):
        assert as_money("-0.005") == Decimal("-0.01")

    def test_float_goes_through_str(self):
        assert as_money(1.005) == Decimal("1.01")

    def test_strips_whitespace(self):
        assert as_money(" 12 ") == Decimal("12.00")

    def test_int(self):
        assert str(as_money(7)) == "7.00"

    def test_unparseable_raises(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            as_money("abc")
        assert exc_info.value.code == "INVALID_AMOUNT"

    def test_nan_raises(self):
        with pytest.raises(InvalidAmountError, match="finite"):
            as_money("NaN")

    def test_infinity_raises(self):
        with pytest.raises(InvalidAmountError, match="finite"):
            as_money(Decimal("-Infinity"))

    def test_beyond_qian_zhao_raises(self):
        with pytest.raises(InvalidAmountError, match="exceeds"):
            as_money("1e16")

    def test_rounding_into_overflow_raises(self):
        with pytest.raises(InvalidAmountError):
            as_money("9999999999999999.995")

    def test_largest_writable_amount(self):
        assert as_money("9999999999999999.99") == Decimal("9999999999999999.99")


class TestArithmetic:
    def test_add_treats_none_as_zero(self):
        assert add(Decimal("1.005"), None) == Decimal("1.01")
        assert add(None, None) == Decimal("0.00")

    def test_subtract(self):
        assert subtract(Decimal("10"), Decimal("3.333")) == Decimal("6.67")

    def test_multiply(self):
        assert multiply(Decimal("2.5"), Decimal("0.333")) == Decimal("0.83")

    def test_divide(self):
        assert divide(Decimal("10"), Decimal("3")) == Decimal("3.33")

    def test_divide_with_scale(self):
        assert divide(Decimal("1"), Decimal("3"), scale=4) == Decimal("0.3333")

    def test_divide_with_rounding(self):
        assert divide(Decimal("2"), Decimal("3"), rounding=ROUND_DOWN) == Decimal("0.66")

    def test_divide_by_zero_raises(self):
        with pytest.raises(InvalidAmountError, match="zero"):
            divide(Decimal("1"), Decimal("0"))

    def test_divide_by_none_raises(self):
        with pytest.raises(InvalidAmountError):
            divide(Decimal("1"), None)


class TestMonetaryAmount:
    def test_derived_attributes(self):
        money = MonetaryAmount.of("-1409.50")
        assert money.sign is Sign.NEGATIVE
        assert money.integer_magnitude == 140950
        assert money.fractional_remainder == 50

    def test_rounds_to_zero(self):
        assert MonetaryAmount.of("-0.001").sign is Sign.ZERO

    def test_positive(self):
        money = MonetaryAmount.of("0.07")
        assert money.sign is Sign.POSITIVE
        assert money.fractional_remainder == 7


# ═══════════════════════════════════════════════════════════════════════
# ENCODER
# ═══════════════════════════════════════════════════════════════════════


class TestEncode:
    """Examples from the guidance on filling in settlement vouchers."""

    def test_zero_in_hundreds(self):
        assert encode(Decimal("1409.50")) == "壹仟肆佰零玖元伍角"

    def test_zero_run_in_middle(self):
        assert encode("6007.14") == "陆仟零柒元壹角肆分"

    def test_zeros_across_wan_and_yuan(self):
        assert encode("107000.53") == "壹拾万零柒仟元零伍角叁分"

    def test_zero_jiao(self):
        assert encode("16409.02") == "壹万陆仟肆佰零玖元零贰分"

    def test_explicit_zeros_everywhere(self):
        assert encode("3504096.43") == "叁佰伍拾万零肆仟零玖拾陆元肆角叁分"

    def test_whole_amount_gets_terminal(self):
        assert encode(1000) == "壹仟元整"

    def test_jiao_only(self):
        assert encode("0.5") == "伍角"

    def test_fen_only(self):
        assert encode("0.05") == "伍分"

    def test_yuan_then_zero(self):
        assert encode("1.05") == "壹元零伍分"

    def test_zero_yuan_digit_with_jiao(self):
        assert encode("100000.50") == "壹拾万元零伍角"

    def test_zero(self):
        assert encode(0) == "零元整"

    def test_negative_rounding_to_zero(self):
        assert encode("-0.001") == "零元整"

    def test_negative(self):
        assert encode(Decimal("-1409.50")) == "负" + encode(Decimal("1409.50"))

    def test_rounds_half_up_first(self):
        assert encode("1409.505") == "壹仟肆佰零玖元伍角壹分"

    def test_not_finite_raises(self):
        with pytest.raises(InvalidAmountError):
            encode("NaN")

    def test_out_of_range_raises(self):
        with pytest.raises(InvalidAmountError):
            encode(Decimal(10) ** 16)


class TestEncodeGroupBoundaries:
    """5, 6, 9 and 13 digit amounts: where 万 and 亿 appear or vanish."""

    def test_five_digits(self):
        assert encode(10000) == "壹万元整"

    def test_six_digits(self):
        assert encode(100000) == "壹拾万元整"

    def test_nine_digits(self):
        assert encode(100000000) == "壹亿元整"

    def test_thirteen_digits(self):
        assert encode(10 ** 12) == "壹兆元整"

    def test_qian_wan_restores_wan(self):
        assert encode(10000001) == "壹仟万零壹元整"

    def test_qian_wan_under_yi(self):
        assert encode(110000000) == "壹亿壹仟万元整"

    def test_empty_wan_group_not_written(self):
        assert encode(100001000) == "壹亿零壹仟元整"

    def test_wan_group_under_yi(self):
        assert encode(100010000) == "壹亿零壹万元整"

    def test_traditional_example(self):
        assert encode(630000000) == "陆亿叁仟万元整"

    def test_qian_zhao(self):
        assert encode(10 ** 15) == "壹仟兆元整"


# ═══════════════════════════════════════════════════════════════════════
# DECODER
# ═══════════════════════════════════════════════════════════════════════


class TestDecode:
    def test_official_example(self):
        assert decode("壹拾万零柒仟元伍角叁分") == Decimal("107000.53")

    def test_explicit_form(self):
        assert decode("壹拾万零柒仟元零伍角叁分") == Decimal("107000.53")

    def test_compact_form_is_read_too(self):
        assert decode("壹拾万柒仟元零伍角叁分") == Decimal("107000.53")

    def test_traditional_glyphs(self):
        assert decode("陸億叁仟萬元正") == Decimal("630000000.00")

    def test_negative(self):
        assert decode("负陆仟零柒元壹角肆分") == Decimal("-6007.14")

    def test_zhao(self):
        assert decode("壹兆元整") == Decimal("1000000000000.00")

    def test_two_decimal_places(self):
        assert str(decode("壹元整")) == "1.00"

    def test_surrounding_whitespace(self):
        assert decode("  壹元整  ") == Decimal("1.00")

    def test_zero_amount(self):
        assert decode("零元整") == Decimal("0.00")

    def test_signed_zero_is_unsigned(self):
        amount = decode("负零元整")
        assert amount == Decimal("0.00")
        assert str(amount) == "0.00"

    def test_empty_raises(self):
        with pytest.raises(EmptyInputError):
            decode("")

    def test_whitespace_only_raises(self):
        with pytest.raises(EmptyInputError):
            decode("   ")

    def test_markers_only_raises(self):
        with pytest.raises(EmptyInputError, match="No digits"):
            decode("元整")

    def test_sign_only_raises(self):
        with pytest.raises(EmptyInputError):
            decode("负")

    def test_invalid_character(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            decode("壹仟X元")
        assert exc_info.value.code == "INVALID_CHARACTER"
        assert exc_info.value.details["glyph"] == "X"
        assert exc_info.value.details["index"] == 2

    def test_sign_after_first_glyph_raises(self):
        with pytest.raises(InvalidCharacterError):
            decode("壹元负")

    def test_errors_share_a_base(self):
        with pytest.raises(DecodeError):
            decode("abc")


class TestScanState:
    def test_default_position_is_yuan(self):
        assert ScanState().position_of_digit() == PositionalUnit.YUAN

    def test_major_shifts_minor(self):
        state = ScanState(active=PositionalUnit.QIAN, major=PositionalUnit.WAN)
        assert state.position_of_digit() == PositionalUnit.QIAN_WAN

    def test_advance_keeps_lowest_minor_unit(self):
        state = advance(ScanState(active=PositionalUnit.SHI), "佰")
        assert state.active is PositionalUnit.SHI

    def test_advance_keeps_highest_major_unit(self):
        state = advance(ScanState(major=PositionalUnit.YI), "万")
        assert state.major is PositionalUnit.YI


# ═══════════════════════════════════════════════════════════════════════
# ROUND TRIP
# ═══════════════════════════════════════════════════════════════════════


def _sample_amounts() -> list[Decimal]:
    rng = random.Random(20240115)
    fen = [1, 5, 10, 99, 100, 101, 110, 1000, 1005, 10_000, 10_001, 100_050]
    fen += [10 ** k for k in range(18)]
    fen += [10 ** k + 1 for k in range(18)]
    fen += [10 ** 18 - 1]
    for digits in range(1, 19):
        fen += [rng.randrange(10 ** (digits - 1), 10 ** digits) for _ in range(25)]
    # Sparse amounts: a few nonzero digits in a sea of zeros
    for _ in range(300):
        positions = rng.sample(range(18), rng.randint(1, 4))
        fen.append(sum(rng.randint(1, 9) * 10 ** p for p in positions))
    amounts = [Decimal(f).scaleb(-2) for f in fen]
    return amounts + [-a for a in amounts[::3]]


class TestRoundTrip:
    """decode(encode(x)) == x, and encode() only ever writes valid text."""

    @pytest.mark.parametrize("amount", _sample_amounts(), ids=str)
    def test_decode_inverts_encode(self, amount: Decimal):
        assert decode(encode(amount)) == amount

    @pytest.mark.parametrize("amount", _sample_amounts(), ids=str)
    def test_encoded_text_is_valid(self, amount: Decimal):
        assert validate(encode(amount))

    def test_dense_small_amounts(self):
        for fen in range(0, 200_001, 7):
            amount = Decimal(fen).scaleb(-2)
            text = encode(amount)
            assert decode(text) == amount, text
            assert validate(text), text


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("RMB_AMOUNT_LOG_LEVEL", raising=False)
        monkeypatch.delenv("RMB_AMOUNT_MAX_TEXT_LENGTH", raising=False)
        assert load_settings() == Settings()

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RMB_AMOUNT_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("RMB_AMOUNT_MAX_TEXT_LENGTH", " 128 ")
        settings = load_settings()
        assert settings.log_level == "DEBUG"
        assert settings.max_text_length == 128

    def test_blank_value_falls_back(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RMB_AMOUNT_MAX_TEXT_LENGTH", "  ")
        assert load_settings().max_text_length == 64

    def test_malformed_integer_names_variable(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RMB_AMOUNT_MAX_TEXT_LENGTH", "lots")
        with pytest.raises(ValueError, match="RMB_AMOUNT_MAX_TEXT_LENGTH"):
            load_settings()
