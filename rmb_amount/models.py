"""
Pydantic models for amounts and validation results.

Every field is explicitly typed. A MonetaryAmount is frozen: once an amount
has been rounded to fen it is never mutated, only re-derived.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .money import as_money


# ─── Amount ─────────────────────────────────────────────────────────


class Sign(int, Enum):
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1


class MonetaryAmount(BaseModel):
    """A signed amount rounded half-up to two fractional digits.

    Build it with `MonetaryAmount.of(...)` so the rounding is applied;
    the derived attributes assume `value` is already quantized to fen.
    """

    model_config = {"frozen": True}

    value: Decimal

    @classmethod
    def of(cls, value: Decimal | int | float | str) -> MonetaryAmount:
        return cls(value=as_money(value))

    @property
    def sign(self) -> Sign:
        if self.integer_magnitude == 0:
            return Sign.ZERO
        return Sign.NEGATIVE if self.value < 0 else Sign.POSITIVE

    @property
    def integer_magnitude(self) -> int:
        """|amount| × 100, i.e. the amount counted in fen."""
        return int(abs(self.value).scaleb(2))

    @property
    def fractional_remainder(self) -> int:
        """The 角/分 digits as a two-digit integer."""
        return self.integer_magnitude % 100


# ─── Severity Levels ────────────────────────────────────────────────


class Severity(str, Enum):
    """Severity of a validation finding."""

    ERROR = "ERROR"  # The written amount must be rejected
    WARNING = "WARNING"  # Accepted, but something was adjusted
    INFO = "INFO"  # Informational observation


# ─── Validation Finding ─────────────────────────────────────────────


class ValidationFinding(BaseModel):
    """A single finding with severity, machine-readable code, and details."""

    severity: Severity
    code: str  # Machine-readable, e.g. "MISSING_ZERO"
    message: str  # Human-readable explanation
    details: dict = Field(default_factory=dict)


# ─── Validation Report ──────────────────────────────────────────────


class ValidationReport(BaseModel):
    """The outcome of checking one capitalized amount."""

    text: str
    is_valid: bool
    amount: Optional[Decimal] = None  # Decoded value, when the text decodes
    expected_amount: Optional[Decimal] = None
    canonical_text: Optional[str] = None  # What encode() writes for `amount`
    findings: list[ValidationFinding] = Field(default_factory=list)
    original_hash: str = ""  # SHA-256 of the submitted text for audit trail
