"""
Code-column detection for input tables.

Detection algorithm:
1. A column named ``cfi``, ``cfi_code`` or ``cfi code`` (case-insensitive,
   surrounding whitespace ignored) wins outright.
2. Otherwise, score every column by the share of its non-empty values that
   are well-formed codes (6 letters A-Z; the tables are not consulted, so
   a column of mostly-unknown categories still scores).
3. The best-scoring column wins if at least half of its values qualify.
   Ties go to the leftmost column.
4. Fallback: raise UnknownFormatError.
"""

from __future__ import annotations

import logging

import pandas as pd

from cfi_codes.codec import is_well_formed
from cfi_codes.exceptions import UnknownFormatError

logger = logging.getLogger(__name__)

_PREFERRED_NAMES = {"cfi", "cfi_code", "cfi code"}

# Minimum share of well-formed values for a column to qualify
_MIN_SHARE = 0.5


def _well_formed_share(series: pd.Series) -> float:
    values = series.dropna()
    values = values[values.astype(str).str.len() > 0]
    if values.empty:
        return 0.0
    return float(values.map(is_well_formed).mean())


def detect_code_column(df: pd.DataFrame) -> str:
    """Return the name of the column holding CFI codes.

    Raises:
        UnknownFormatError: If no column is named like a CFI column and
            no column has at least half well-formed values.
    """
    if df.columns.empty:
        raise UnknownFormatError("Input table has no columns")

    for column in df.columns:
        if str(column).strip().lower() in _PREFERRED_NAMES:
            logger.info("Detected code column '%s' by name", column)
            return column

    shares = {column: _well_formed_share(df[column]) for column in df.columns}
    best = max(shares, key=shares.get)
    if shares[best] >= _MIN_SHARE:
        logger.info(
            "Detected code column '%s' (%.0f%% well-formed values)", best, shares[best] * 100
        )
        return best

    summary = ", ".join(f"{c!s}={s:.0%}" for c, s in shares.items())
    raise UnknownFormatError(
        "Could not detect a CFI code column.\n"
        f"Well-formed share per column: {summary}\n"
        "Name the column 'cfi' or set source.code_column in the config."
    )
