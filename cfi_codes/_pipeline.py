"""
Internal pipeline orchestration for cfi-codes.

Shared by the module-level ``init()`` and ``classify()`` functions so both
run the same read -> classify -> meta -> export sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from cfi_codes.config import ClassifyConfig
from cfi_codes.exceptions import UnknownFormatError
from cfi_codes.export import export_tables
from cfi_codes.frame import LABEL_COLUMNS, decode_series
from cfi_codes.meta import build_meta_table

logger = logging.getLogger(__name__)


def read_source(path: str | Path) -> pd.DataFrame:
    """Read a CSV or Parquet source table.

    CSV cells are read as strings so codes are never coerced; empty cells
    become missing values.

    Raises:
        FileNotFoundError: If *path* does not exist.
        UnknownFormatError: If the extension is not .csv/.txt/.parquet.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in (".csv", ".txt"):
        df = pd.read_csv(
            path, dtype=str, keep_default_na=False, na_values=[""], encoding="utf-8-sig"
        )
    elif suffix == ".parquet":
        df = pd.read_parquet(path, engine="pyarrow")
    else:
        raise UnknownFormatError(
            f"Unsupported input file type '{suffix}' for {path}; expected .csv or .parquet"
        )
    logger.info("Read %s: %d rows, %d columns", path.name, len(df), len(df.columns))
    return df


def build_output_table(
    config: ClassifyConfig,
    source_df: pd.DataFrame,
    classified: pd.DataFrame,
) -> pd.DataFrame:
    """Combine passthrough columns with the classification and apply output toggles."""
    table = pd.concat([source_df[config.keep_columns], classified], axis=1)

    if config.output.drop_invalid:
        n_invalid = int((~table["is_valid"]).sum())
        if n_invalid:
            logger.warning(
                "Dropping %d of %d row(s) with invalid CFI codes", n_invalid, len(table)
            )
        table = table[table["is_valid"]]

    if not config.output.include_labels:
        table = table.drop(columns=LABEL_COLUMNS)

    return table.reset_index(drop=True)


def run_pipeline_and_export(
    config: ClassifyConfig,
    source_df: pd.DataFrame,
) -> list[str]:
    """Classify the configured column, build ``_meta``, and export to disk.

    Steps:
      1. Decode the code column (errors recorded per row).
      2. Build the result table (passthrough columns + classification).
      3. Build the ``_meta`` DataFrame.
      4. Export the result table + ``_meta`` to disk.

    Returns:
        List of output file paths that were written.
    """
    classified = decode_series(source_df[config.source.code_column], errors="coerce")
    table = build_output_table(config, source_df, classified)
    meta_df = build_meta_table(config, classified)

    written = export_tables(
        tables={config.output.table_name: table},
        meta_df=meta_df,
        output_dir=config.output.output_dir,
        output_format=config.output.output_format,
    )

    logger.info("Pipeline complete: wrote %d files", len(written))
    return written
