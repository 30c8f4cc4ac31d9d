"""
Writes classification results to disk.

Every file goes through ``write_frame()``: the format comes from the path
suffix (``.csv`` or ``.parquet``) and the parent directory is created on
demand. ``export_tables()`` lays out one pipeline run as
``<table_name>.<format>`` plus ``_meta.<format>``; ``export_registry()``
dumps the flattened tables to a single path.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import pandas as pd

from cfi_codes.exceptions import ExportError
from cfi_codes.frame import registry_to_frame
from cfi_codes.registry import Registry

logger = logging.getLogger(__name__)

_SUPPORTED_FORMATS = ("csv", "parquet")


def write_frame(df: pd.DataFrame, path: str | Path) -> str:
    """Write *df* to *path*, choosing CSV or Parquet from the suffix.

    Parquet keeps the nullable ``Int64``/``boolean`` columns of a classified
    table typed; CSV flattens them to text.

    Raises:
        ExportError: Unsupported suffix, or the write itself failed.
    """
    path = Path(path)
    output_format = path.suffix.lower().lstrip(".")
    if output_format not in _SUPPORTED_FORMATS:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {list(_SUPPORTED_FORMATS)}"
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if output_format == "csv":
            df.to_csv(path, index=False, encoding="utf-8")
        else:
            df.to_parquet(path, index=False, engine="pyarrow")
    except (OSError, ValueError, TypeError) as exc:
        raise ExportError(f"Failed to write {path.name}: {exc}") from exc

    logger.info("Wrote %s (%d rows, %d cols)", path, len(df), len(df.columns))
    return str(path)


def export_tables(
    tables: dict[str, pd.DataFrame],
    meta_df: pd.DataFrame,
    output_dir: str | Path,
    output_format: Literal["csv", "parquet"] = "parquet",
) -> list[str]:
    """Write each result table, then ``_meta``, into *output_dir*.

    Returns:
        Written paths, result tables first and ``_meta`` last.
    """
    out = Path(output_dir)
    frames = {**tables, "_meta": meta_df}
    return [write_frame(df, out / f"{name}.{output_format}") for name, df in frames.items()]


def export_registry(output_path: str | Path, registry: Registry | None = None) -> str:
    """Write ``registry_to_frame(registry)`` to *output_path*."""
    return write_frame(registry_to_frame(registry), output_path)
