"""
Amount cross-check pipeline — reconcile a written amount with its figure.

Bills and settlement vouchers carry the amount twice: as a figure (小写,
¥1409.50) and in capitalized numerals (大写, 壹仟肆佰零玖元伍角). The
two must agree before the instrument is accepted.

Flow:
  ┌──────────────┐
  │ Written text │
  └──────┬───────┘
         │
  ┌──────▼──────┐
  │ Rule checks │   ← Alphabet, terminal, zero placement
  └──────┬──────┘
         │
  ┌──────▼──────┐
  │   Decode    │   ← Text → Decimal, canonical re-encoding
  └──────┬──────┘
         │
  ┌──────▼──────┐
  │ Cross-check │   ← Against the figure, when one is supplied
  └──────┬──────┘
         │
  ┌──────▼──────┐
  │   Report    │   ← Typed findings + pass/fail
  └─────────────┘
"""

from __future__ import annotations

import hashlib
import logging
from decimal import Decimal
from typing import Optional

from .decoder import decode
from .encoder import encode
from .exceptions import AmountError, DecodeError
from .lexicon import normalize
from .models import Severity, ValidationFinding, ValidationReport
from .money import as_money
from .validators import check_amount_rules

logger = logging.getLogger(__name__)


class AmountValidationPipeline:
    """Checks a capitalized amount and, optionally, the figure beside it.

    Usage:
        pipeline = AmountValidationPipeline()
        report = pipeline.run("壹仟肆佰零玖元伍角", expected="1409.50")
        if not report.is_valid:
            for finding in report.findings:
                print(finding)
    """

    def run(
        self, text: str, expected: Decimal | int | float | str | None = None
    ) -> ValidationReport:
        """Execute the pipeline on one written amount.

        Args:
            text: The capitalized amount as written.
            expected: The figure the text should agree with, if any.

        Returns:
            ValidationReport with findings and pass/fail verdict.
        """
        # ── Step 0: Audit hash of original input ────────────────────
        text_hash = hashlib.sha256(text.encode("utf-8")).hexdigest()

        # ── Step 1: Placement rules ─────────────────────────────────
        findings: list[ValidationFinding] = list(check_amount_rules(text))

        # ── Step 2: Decode and re-encode ────────────────────────────
        amount: Optional[Decimal] = None
        canonical: Optional[str] = None
        try:
            amount = decode(text)
            canonical = encode(amount)
        except DecodeError:
            pass  # Already reported by the rule checks
        except AmountError as exc:
            findings.append(
                ValidationFinding(
                    severity=Severity.ERROR,
                    code=exc.code,
                    message=str(exc),
                    details=exc.details,
                )
            )

        if canonical is not None and not findings and normalize(text) != canonical:
            findings.append(
                ValidationFinding(
                    severity=Severity.INFO,
                    code="NONCANONICAL_FORM",
                    message=(
                        f"Accepted, but written differently from the explicit "
                        f"form {canonical!r}."
                    ),
                    details={"canonical": canonical},
                )
            )

        # ── Step 3: Cross-check against the figure ──────────────────
        expected_amount: Optional[Decimal] = None
        if expected is not None:
            expected_amount, expected_findings = self._check_expected(expected, amount, text)
            findings.extend(expected_findings)

        has_errors = any(f.severity == Severity.ERROR for f in findings)
        logger.info(
            "Checked %r: %s (%d finding(s))",
            text,
            "valid" if not has_errors else "rejected",
            len(findings),
        )

        return ValidationReport(
            text=text,
            is_valid=not has_errors,
            amount=amount,
            expected_amount=expected_amount,
            canonical_text=canonical,
            findings=findings,
            original_hash=text_hash,
        )

    # ─── Figure Reconciliation ──────────────────────────────────────

    def _check_expected(
        self,
        expected: Decimal | int | float | str,
        amount: Optional[Decimal],
        text: str,
    ) -> tuple[Optional[Decimal], list[ValidationFinding]]:
        """Compare the written amount with the figure.

        Even a one-fen discrepancy is an error: we do NOT silently pick one.
        """
        findings: list[ValidationFinding] = []
        try:
            expected_amount = as_money(expected)
        except AmountError as exc:
            findings.append(
                ValidationFinding(
                    severity=Severity.ERROR,
                    code=exc.code,
                    message=f"Expected amount is unusable: {exc}",
                    details=exc.details,
                )
            )
            return None, findings

        if Decimal(str(expected)) != expected_amount:
            findings.append(
                ValidationFinding(
                    severity=Severity.WARNING,
                    code="EXPECTED_AMOUNT_ROUNDED",
                    message=(
                        f"Expected amount {expected} was rounded to "
                        f"{expected_amount} (two fractional digits)."
                    ),
                    details={"given": str(expected), "rounded": str(expected_amount)},
                )
            )

        if amount is not None and amount != expected_amount:
            discrepancy = abs(expected_amount - amount)
            findings.append(
                ValidationFinding(
                    severity=Severity.ERROR,
                    code="AMOUNT_MISMATCH",
                    message=(
                        f"DISCREPANCY: figure ¥{expected_amount:,.2f} does not match "
                        f"written amount {text!r} (=¥{amount:,.2f}). "
                        f"Difference: ¥{discrepancy:,.2f}."
                    ),
                    details={
                        "expected_amount": str(expected_amount),
                        "written_amount": str(amount),
                        "discrepancy": str(discrepancy),
                    },
                )
            )

        return expected_amount, findings
