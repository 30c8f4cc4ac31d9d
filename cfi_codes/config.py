"""
Configuration models and YAML I/O for cfi-codes.

This module defines the Pydantic models that map 1:1 to cficonfig.yaml,
plus helper functions for loading, saving, and auto-generating the config.

Key models:
- ClassifyConfig: Top-level config (source + output + keep_columns).
- SourceConfig: Input table path and the column holding the codes.
- OutputConfig: Output directory, format, table name and row/column toggles.

Key functions:
- load_config(path) -> ClassifyConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- generate_default_config(...) -> ClassifyConfig: Build config from a source table.
- validate_columns_against_data(config, available_columns): Cross-check config vs data.

The classification tables themselves are not configurable; the config only
describes one batch-classification job.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from cfi_codes.exceptions import ConfigValidationError
from cfi_codes.frame import FRAME_COLUMNS

logger = logging.getLogger(__name__)


class SourceConfig(BaseModel):
    """Source table information."""

    input_path: str = Field(..., description="Path to the CSV or Parquet input table")
    code_column: str = Field(..., description="Column holding the CFI codes")


class OutputConfig(BaseModel):
    """Output settings."""

    output_dir: str = Field("outputs/", description="Directory for output files")
    output_format: Literal["csv", "parquet"] = Field(
        "parquet", description="Output format"
    )
    table_name: str = Field(
        "classified", description="File name (without extension) of the result table"
    )
    include_labels: bool = Field(
        True, description="If True, keep the *_name label columns"
    )
    drop_invalid: bool = Field(
        False, description="If True, drop rows whose code does not decode"
    )


class ClassifyConfig(BaseModel):
    """Top-level configuration for cfi-codes.

    Maps 1:1 to cficonfig.yaml. This is the single source of truth
    for the pipeline on subsequent runs.
    """

    source: SourceConfig
    output: OutputConfig = Field(default_factory=OutputConfig)
    keep_columns: list[str] = Field(
        default_factory=list,
        description="Source columns copied unchanged in front of the classification",
    )

    @model_validator(mode="after")
    def _check_columns(self) -> ClassifyConfig:
        """Validate that passthrough columns cannot clash with generated ones."""
        if self.source.code_column in self.keep_columns:
            raise ValueError(
                f"keep_columns must not contain the code column "
                f"'{self.source.code_column}'; it is written as 'cfi'."
            )
        duplicates = sorted({c for c in self.keep_columns if self.keep_columns.count(c) > 1})
        if duplicates:
            raise ValueError(f"keep_columns lists columns twice: {duplicates}")
        clashes = [c for c in self.keep_columns if c in FRAME_COLUMNS]
        if clashes:
            raise ValueError(
                f"keep_columns {clashes} clash with generated columns {FRAME_COLUMNS}"
            )
        if self.output.table_name == "_meta":
            raise ValueError("output.table_name '_meta' is reserved for the summary table")
        return self


def load_config(path: str | Path) -> ClassifyConfig:
    """Load and validate cficonfig.yaml into a ClassifyConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return ClassifyConfig.model_validate(raw)


def save_config(config: ClassifyConfig, path: str | Path) -> None:
    """Serialize a ClassifyConfig to YAML, with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# cfi-codes configuration\n")
        f.write("# Edit this file to change passthrough columns, output format, etc.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)


def generate_default_config(
    input_path: str,
    code_column: str,
    available_columns: list[str],
    output_dir: str = "outputs/",
) -> ClassifyConfig:
    """Build a ClassifyConfig for a source table (used on first run).

    Every source column other than the code column is kept as a
    passthrough column, except names that clash with generated columns.

    Args:
        input_path: Path to the source table.
        code_column: The detected code column.
        available_columns: All columns of the source table, in order.
        output_dir: Where output files should be written.
    """
    keep = [c for c in available_columns if c != code_column and c not in FRAME_COLUMNS]
    skipped = [c for c in available_columns if c != code_column and c in FRAME_COLUMNS]
    if skipped:
        logger.warning(
            "Not keeping source columns %s: names clash with generated columns", skipped
        )
    return ClassifyConfig(
        source=SourceConfig(input_path=input_path, code_column=code_column),
        output=OutputConfig(output_dir=output_dir),
        keep_columns=keep,
    )


def validate_columns_against_data(
    config: ClassifyConfig, available_columns: set[str]
) -> None:
    """Cross-validate that every column referenced in config exists in the source.

    Called on subsequent runs to catch renamed or mistyped columns before
    the pipeline processes data.

    Raises:
        ConfigValidationError: If the code column or a passthrough column
            does not exist in the data.
    """
    problems: list[str] = []
    if config.source.code_column not in available_columns:
        problems.append(f"  code_column: '{config.source.code_column}'")
    missing = [c for c in config.keep_columns if c not in available_columns]
    if missing:
        problems.append(f"  keep_columns: {missing}")

    if problems:
        raise ConfigValidationError(
            "The following columns in cficonfig.yaml do not exist in the source data:\n"
            + "\n".join(problems)
            + f"\nAvailable columns: {sorted(available_columns)}"
        )
    logger.info(
        "Config validation passed: code column and %d passthrough column(s) found",
        len(config.keep_columns),
    )
