"""
Custom exception hierarchy for cfi-codes.

Why a custom hierarchy:
- Callers can catch a decoding failure (DecodeError) separately from a
  broken table file (RegistryError) or a bad pipeline config
  (ConfigValidationError).
- DecodeError carries the offending text, the 1-based character position
  and an ErrorKind, so batch callers can record *why* a code was rejected
  without parsing the message.
- DecodeError is also a ValueError, so generic ``except ValueError`` code
  keeps working.
"""

from __future__ import annotations

from enum import Enum


class CfiError(Exception):
    """Base exception for all cfi-codes errors."""


class RegistryError(CfiError):
    """Raised when the classification tables cannot be loaded.

    For example a table YAML file references an unknown attribute domain,
    defines the same letter twice, or a category letter is missing.
    """


class ErrorKind(str, Enum):
    """Why a code was rejected."""

    STRUCTURAL = "structural"
    UNKNOWN_CATEGORY = "unknown_category"
    UNKNOWN_GROUP = "unknown_group"
    UNKNOWN_ATTRIBUTE = "unknown_attribute"


class DecodeError(CfiError, ValueError):
    """Raised when a text is not a valid CFI code.

    Attributes:
        text: The rejected input.
        position: 1-based position of the first offending character.
            For input that is too long this is 7 (the first extra
            character); for input that is too short it is the first
            missing position.
        positions: All offending positions (more than one only for
            character-set failures).
        kind: The ErrorKind of the failure.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        text: str,
        position: int,
        positions: tuple[int, ...] | None = None,
    ) -> None:
        super().__init__(message)
        self.text = text
        self.position = position
        self.positions = positions or (position,)


class StructuralError(DecodeError):
    """Wrong length or characters outside ``A``-``Z``."""

    kind = ErrorKind.STRUCTURAL


class UnknownCategoryError(DecodeError):
    """Character 1 is not a known category."""

    kind = ErrorKind.UNKNOWN_CATEGORY


class UnknownGroupError(DecodeError):
    """Character 2 is not a group of the decoded category."""

    kind = ErrorKind.UNKNOWN_GROUP


class UnknownAttributeError(DecodeError):
    """One of characters 3-6 is outside its attribute domain."""

    kind = ErrorKind.UNKNOWN_ATTRIBUTE


class UnknownFormatError(CfiError):
    """Raised when no column of an input table looks like CFI codes.

    The message lists the columns that were inspected.
    """


class ConfigValidationError(CfiError):
    """Raised when cficonfig.yaml fails validation.

    This can happen if:
    - The file is empty.
    - The configured code column does not exist in the source data.
    - A passthrough column in keep_columns does not exist in the source data.
    """


class ExportError(CfiError):
    """Raised when the exporter fails to write output files.

    For example, permission errors, disk full, or unsupported format.
    """
