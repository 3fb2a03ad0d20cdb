"""
Custom exception hierarchy for capitalized-amount handling.

Each exception type carries a machine-readable code, so callers (the API,
the CLI, the pipeline) can report a failure without parsing its message.
"""

from __future__ import annotations


class AmountError(Exception):
    """Base exception for all amount conversion failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class InvalidAmountError(AmountError):
    """The numeric amount is unparseable, non-finite or beyond 仟兆."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVALID_AMOUNT", message, details)


class DecodeError(AmountError):
    """Capitalized text could not be turned into an amount."""


class InvalidCharacterError(DecodeError):
    """A glyph outside the capitalized-numeral alphabet."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("INVALID_CHARACTER", message, details)


class EmptyInputError(DecodeError):
    """Nothing left to decode once markers and whitespace are removed."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("EMPTY_INPUT", message, details)
