from __future__ import annotations

from typing import Optional


class QuizbankError(Exception):
    """Base class for quizbank failures."""


class ParseError(QuizbankError):
    """Raised when a document cannot be parsed at all."""


class EmptyInputError(ParseError):
    """Raised when no text survives preprocessing."""


class InvalidUploadError(QuizbankError):
    """Raised when an uploaded file object is missing its bytes or name."""


class UnsupportedDocumentError(QuizbankError, ValueError):
    """Raised when an input file is neither a PDF nor plain text."""


class SuggestionError(QuizbankError):
    """Raised when the AI template suggestion call fails."""


class InvalidPatternError(QuizbankError):
    """Raised when a template field does not compile as a regular expression."""

    def __init__(self, field: str, pattern: Optional[str], reason: str = '') -> None:
        self.field = field
        self.pattern = pattern
        self.reason = reason
        message = f'Field "{field}" is not a valid regular expression: {pattern}'
        if reason:
            message = f'{message} ({reason})'
        super().__init__(message)


__all__ = [
    'QuizbankError',
    'ParseError',
    'EmptyInputError',
    'InvalidUploadError',
    'UnsupportedDocumentError',
    'SuggestionError',
    'InvalidPatternError',
]
