from __future__ import annotations


class Csv2VcardError(Exception):
    """Base class for input errors reported before conversion starts."""


class UnreadableInputError(Csv2VcardError):
    """Raised when the input file is missing or cannot be read."""


class UnsupportedFormatError(Csv2VcardError):
    """Raised when the input cannot be decoded into rows."""
