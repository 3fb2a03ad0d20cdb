#!/usr/bin/env python3
"""
RMB Amount — Entry Point
=========================

Writes a figure out in capitalized numerals, or checks a written amount.

Usage:
    python main.py 1409.50                          # → 壹仟肆佰零玖元伍角
    python main.py 壹拾万零柒仟元零伍角叁分           # Validation report
    python main.py 壹仟元整 --expected 1000.00      # Cross-check with the figure
    python main.py                                  # Demo on a sample voucher
"""

from __future__ import annotations

import argparse
import sys

from rmb_amount.config import configure_logging, load_settings
from rmb_amount.encoder import encode
from rmb_amount.exceptions import AmountError
from rmb_amount.models import Severity, ValidationReport
from rmb_amount.money import as_money
from rmb_amount.pipeline import AmountValidationPipeline


# ─── Sample Voucher: Compact Style, One 零 Too Many ─────────────────

SAMPLE_TEXT = "叁佰伍拾万零肆仟玖拾陆元肆角叁分"
SAMPLE_FIGURE = "3504096.43"


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72

# Colour and margin mark per severity, worst first
_MARKS = {
    Severity.ERROR: (_RED, "✗"),
    Severity.WARNING: (_YELLOW, "!"),
    Severity.INFO: (_CYAN, "·"),
}


# ─── Report Renderer ────────────────────────────────────────────────


def _voucher_lines(report: ValidationReport) -> list[str]:
    """The written amount beside its figure, as on a settlement voucher."""
    lines = [f"  大写 {_BOLD}{report.text}{_RESET}"]
    if report.amount is not None:
        lines.append(f"  小写 ¥{report.amount:,.2f}")
    if report.expected_amount is not None:
        tick = _GREEN + "=" if report.expected_amount == report.amount else _RED + "≠"
        lines.append(f"  票面 ¥{report.expected_amount:,.2f}  {tick}{_RESET}")
    if report.canonical_text is not None and report.canonical_text != report.text:
        lines.append(f"  规范 {_DIM}{report.canonical_text}{_RESET}")
    return lines


def print_report(report: ValidationReport) -> int:
    """Print the amount, its findings worst first, and the verdict.

    Returns:
        0 if the written amount passed, 1 if rejected.
    """
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  AMOUNT VALIDATION REPORT{_RESET}"
          f"   {_DIM}sha256 {report.original_hash[:16]}{_RESET}")
    print(f"{'─' * _WIDTH}")
    print("\n".join(_voucher_lines(report)))

    ordered = sorted(report.findings, key=lambda f: list(Severity).index(f.severity))
    if ordered:
        print(f"{'─' * _WIDTH}")
    for finding in ordered:
        color, mark = _MARKS[finding.severity]
        print(f"  {color}{mark} {finding.code}{_RESET}  {finding.message}")
        if "before" in finding.details:
            print(f"      {_DIM}zero expected before {finding.details['before']}{_RESET}")

    errors = sum(1 for f in report.findings if f.severity == Severity.ERROR)
    print(f"{'=' * _WIDTH}")
    if report.is_valid:
        print(f"  {_GREEN}{_BOLD}AMOUNT PASSED ALL CHECKS{_RESET}")
    else:
        print(f"  {_RED}{_BOLD}AMOUNT REJECTED  --  {errors} error(s) found{_RESET}")
    print(f"{'=' * _WIDTH}\n")

    return 0 if report.is_valid else 1


# ─── Main ────────────────────────────────────────────────────────────


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Write or check capitalized RMB amounts (人民币大写金额)."
    )
    parser.add_argument(
        "value",
        nargs="?",
        help="A figure such as 1409.50, or a capitalized amount to check.",
    )
    parser.add_argument(
        "--expected",
        help="The figure printed beside a capitalized amount.",
    )
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> int:
    """Encode a figure or report on a written amount; return the exit code."""
    args = _parse_args(argv)
    configure_logging(load_settings().log_level)

    if args.value is None:
        print("\n  Starting RMB Amount Validator...")
        print("  Checking a sample settlement voucher...\n")
        report = AmountValidationPipeline().run(SAMPLE_TEXT, expected=SAMPLE_FIGURE)
        return print_report(report)

    try:
        figure = as_money(args.value)
    except AmountError:
        figure = None  # Not a writable figure: check it as written text

    if figure is not None:
        print(encode(figure))
        return 0

    report = AmountValidationPipeline().run(args.value.strip(), expected=args.expected)
    return print_report(report)


def main():
    """Run the CLI and exit with its status."""
    sys.exit(run())


if __name__ == "__main__":
    main()
