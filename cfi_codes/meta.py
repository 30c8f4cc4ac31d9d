"""
Meta table builder for cfi-codes.

Builds the flat _meta table that is written alongside the classified table:
one row per category found in the source, plus one row counting the codes
that did not decode (only when there are any).

The _meta table is DESCRIPTIVE -- it records what the pipeline saw
(lineage and counts), complementing cficonfig.yaml which is PRESCRIPTIVE.
Counts cover every source row, before drop_invalid is applied.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from cfi_codes.config import ClassifyConfig
from cfi_codes.models import CategoryCode

logger = logging.getLogger(__name__)

INVALID_LABEL = "(invalid)"

META_COLUMNS = [
    "source_file", "source_hash", "code_column",
    "category", "category_name", "rows", "processed_at",
]

_CATEGORY_ORDER = {c.value: i for i, c in enumerate(CategoryCode)}


def _compute_file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file for reproducibility tracking."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def build_meta_table(config: ClassifyConfig, classified: pd.DataFrame) -> pd.DataFrame:
    """Build the _meta summary for one pipeline run.

    Args:
        config: The ClassifyConfig used for this run.
        classified: Output of ``decode_series`` for the whole source column.

    Returns:
        DataFrame with META_COLUMNS, categories in CategoryCode order,
        the invalid row last.
    """
    source_path = Path(config.source.input_path)

    # Synthetic sources in tests may not exist on disk
    try:
        source_hash = _compute_file_hash(source_path)
    except FileNotFoundError:
        logger.warning("Source file not found for hashing: %s (using empty hash)", source_path)
        source_hash = ""

    processed_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    common = {
        "source_file": source_path.name,
        "source_hash": source_hash,
        "code_column": config.source.code_column,
        "processed_at": processed_at,
    }

    valid = classified[classified["is_valid"]]
    counts = valid.groupby(["category", "category_name"]).size()
    ordered = sorted(counts.items(), key=lambda item: _CATEGORY_ORDER[item[0][0]])

    rows: list[dict] = []
    for (category, category_name), n in ordered:
        rows.append({**common, "category": category, "category_name": category_name, "rows": int(n)})

    n_invalid = len(classified) - len(valid)
    if n_invalid:
        rows.append({**common, "category": None, "category_name": INVALID_LABEL, "rows": n_invalid})

    logger.info("Built _meta table: %d rows", len(rows))
    return pd.DataFrame(rows, columns=META_COLUMNS)
