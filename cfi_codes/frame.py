"""
pandas views of CFI codes and of the classification tables.

- decode_series(): classify a column of codes into a flat table, one row
  per input row, recording failures per row instead of aborting.
- registry_to_frame(): flatten the category/group/attribute tables into
  one row per legal attribute letter, for export or joins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Literal

import pandas as pd

from cfi_codes.codec import decode
from cfi_codes.exceptions import DecodeError, StructuralError
from cfi_codes.registry import Registry, default_registry

logger = logging.getLogger(__name__)

MISSING = "missing"

ATTRIBUTE_COLUMNS = ["attr1", "attr2", "attr3", "attr4"]
LABEL_COLUMNS = ["category_name", "group_name"] + [f"{c}_name" for c in ATTRIBUTE_COLUMNS]

FRAME_COLUMNS = [
    "cfi", "is_valid",
    "category", "category_name", "group", "group_name",
    *ATTRIBUTE_COLUMNS,
    *[f"{c}_name" for c in ATTRIBUTE_COLUMNS],
    "error_kind", "error_position", "error",
]

REGISTRY_COLUMNS = [
    "category", "category_name", "group", "group_name",
    "position", "domain", "domain_name", "value", "value_name",
]


def _valid_row(text: str, registry: Registry) -> dict[str, Any]:
    code = decode(text, registry)
    row: dict[str, Any] = {
        "cfi": text,
        "is_valid": True,
        "category": code.category.code,
        "category_name": code.category.name,
        "group": code.group.code,
        "group_name": code.group.name,
    }
    for column, value in zip(ATTRIBUTE_COLUMNS, code.attributes):
        row[column] = value.code
        row[f"{column}_name"] = value.name
    return row


def _error_row(text: str | None, kind: str, position: int | None, message: str) -> dict[str, Any]:
    return {
        "cfi": text,
        "is_valid": False,
        "error_kind": kind,
        "error_position": position,
        "error": message,
    }


def decode_series(
    codes: pd.Series | Iterable[Any],
    registry: Registry | None = None,
    errors: Literal["coerce", "raise"] = "coerce",
) -> pd.DataFrame:
    """Decode a column of CFI codes into a classification table.

    Args:
        codes: Series (or any iterable) of code strings. Non-string values
            are converted with ``str()``; NaN/None count as missing.
        registry: Tables to decode against. Defaults to the shipped tables.
        errors: ``"coerce"`` records failures in the ``error_*`` columns
            and leaves the classification columns null. ``"raise"``
            re-raises the first DecodeError (in row order).

    Returns:
        DataFrame with FRAME_COLUMNS, one row per input row, indexed like
        *codes* when it is a Series.

    Raises:
        ValueError: If *errors* is not ``"coerce"`` or ``"raise"``.
        DecodeError: With ``errors="raise"``, for the first invalid row.
    """
    if errors not in ("coerce", "raise"):
        raise ValueError(f"errors must be 'coerce' or 'raise', got {errors!r}")
    if registry is None:
        registry = default_registry()
    series = codes if isinstance(codes, pd.Series) else pd.Series(list(codes), dtype=object)

    # Each distinct value is decoded once
    cache: dict[str, dict[str, Any]] = {}
    rows: list[dict[str, Any]] = []
    for index, value in series.items():
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            if errors == "raise":
                raise StructuralError(f"Missing CFI code at index {index!r}", "", 1)
            rows.append(_error_row(None, MISSING, None, "Missing CFI code"))
            continue
        text = value if isinstance(value, str) else str(value)
        if text not in cache:
            try:
                cache[text] = _valid_row(text, registry)
            except DecodeError as exc:
                if errors == "raise":
                    raise
                cache[text] = _error_row(text, exc.kind.value, exc.position, str(exc))
        rows.append(cache[text])

    df = pd.DataFrame(rows, index=series.index, columns=FRAME_COLUMNS)
    df = df.astype({"is_valid": bool, "error_position": "Int64"})
    invalid = int((~df["is_valid"]).sum())
    logger.info(
        "Decoded %d codes (%d distinct): %d valid, %d invalid",
        len(df), len(cache), len(df) - invalid, invalid,
    )
    return df


def registry_to_frame(registry: Registry | None = None) -> pd.DataFrame:
    """Flatten the tables: one row per (category, group, position, letter).

    Reserved categories have no tables and contribute no rows.
    """
    if registry is None:
        registry = default_registry()
    rows: list[dict[str, Any]] = []
    for category in registry.categories:
        if category.reserved:
            continue
        for group in category.groups:
            for position, domain in enumerate(group.attributes, start=3):
                for value in domain.values:
                    rows.append(
                        {
                            "category": category.code,
                            "category_name": category.name,
                            "group": group.code,
                            "group_name": group.name,
                            "position": position,
                            "domain": domain.id,
                            "domain_name": domain.name,
                            "value": value.code,
                            "value_name": value.name,
                        }
                    )
    logger.debug("Flattened registry into %d rows", len(rows))
    return pd.DataFrame(rows, columns=REGISTRY_COLUMNS)
