"""
cfi-codes: ISO 10962 Classification of Financial Instruments (CFI) codes.

Public API surface:

- ``decode(text)`` -> ``Code``; raises a ``DecodeError`` subclass for
  malformed text or letters outside the classification tables.
- ``encode(code)`` -> ``str``; the inverse of ``decode``.
- ``is_valid(text)`` -> ``bool``.
- ``Code`` -- immutable value with category, group and four attribute
  values, plus ``describe()``/``label`` for display.
- ``decode_series(codes)`` / ``registry_to_frame()`` -- pandas views.

Batch workflow over CSV/Parquet tables, driven by ``cficonfig.yaml``:

- ``init(...)`` -- First run. Detects the code column, generates the
  config, and optionally classifies and exports.
- ``classify(...)`` -- Subsequent runs. Loads and validates the config,
  then rebuilds the outputs.
"""

from __future__ import annotations

import logging

from cfi_codes._pipeline import read_source, run_pipeline_and_export
from cfi_codes.codec import CFI_LENGTH, decode, encode, is_valid, is_well_formed
from cfi_codes.config import (
    ClassifyConfig,
    generate_default_config,
    load_config,
    save_config,
    validate_columns_against_data,
)
from cfi_codes.detect import detect_code_column
from cfi_codes.exceptions import (
    CfiError,
    ConfigValidationError,
    DecodeError,
    ErrorKind,
    ExportError,
    RegistryError,
    StructuralError,
    UnknownAttributeError,
    UnknownCategoryError,
    UnknownFormatError,
    UnknownGroupError,
)
from cfi_codes.export import export_registry
from cfi_codes.frame import decode_series, registry_to_frame
from cfi_codes.models import CategoryCode, Code
from cfi_codes.registry import (
    AttributeDomain,
    AttributeValue,
    CategoryDef,
    GroupDef,
    Registry,
    default_registry,
    load_registry,
)

__all__ = [
    "CFI_LENGTH",
    "decode",
    "encode",
    "is_valid",
    "is_well_formed",
    "Code",
    "CategoryCode",
    "AttributeValue",
    "AttributeDomain",
    "GroupDef",
    "CategoryDef",
    "Registry",
    "load_registry",
    "default_registry",
    "decode_series",
    "registry_to_frame",
    "export_registry",
    "detect_code_column",
    "init",
    "classify",
    "CfiError",
    "RegistryError",
    "DecodeError",
    "ErrorKind",
    "StructuralError",
    "UnknownCategoryError",
    "UnknownGroupError",
    "UnknownAttributeError",
    "UnknownFormatError",
    "ConfigValidationError",
    "ExportError",
]

logger = logging.getLogger(__name__)


def init(
    input_path: str,
    output_dir: str = "outputs/",
    config_path: str = "cficonfig.yaml",
    run_immediately: bool = True,
) -> ClassifyConfig:
    """First-run entry point: detect the code column, generate config, optionally classify.

    Orchestration:
      1. ``read_source()`` -> source DataFrame
      2. ``detect_code_column()`` -> code column name
      3. ``generate_default_config()`` -> ``ClassifyConfig``
      4. ``save_config()`` to *config_path*
      5. If *run_immediately* is True, run the pipeline via
         ``run_pipeline_and_export()``.

    Args:
        input_path: Path to the CSV/Parquet table holding CFI codes.
        output_dir: Directory where output tables will be written.
        config_path: Where to write the generated cficonfig.yaml.
        run_immediately: If False, only generate the config file and stop.

    Returns:
        The generated config.

    Raises:
        UnknownFormatError: If no code column is found or the file type
            is unsupported.
    """
    logger.info("init() -- input_path=%s, output_dir=%s", input_path, output_dir)

    source_df = read_source(input_path)
    code_column = detect_code_column(source_df)

    config = generate_default_config(
        input_path=input_path,
        code_column=code_column,
        available_columns=[str(c) for c in source_df.columns],
        output_dir=output_dir,
    )
    save_config(config, config_path)

    if run_immediately:
        logger.info("run_immediately=True -- running pipeline")
        run_pipeline_and_export(config, source_df)

    return config


def classify(config_path: str = "cficonfig.yaml") -> list[str]:
    """Subsequent-run entry point: load config, validate, rebuild outputs.

    Orchestration:
      1. ``load_config()`` -> ``ClassifyConfig`` (Pydantic validation on load).
      2. ``read_source()`` on the configured input path.
      3. ``validate_columns_against_data()`` -- cross-check config vs source.
      4. ``run_pipeline_and_export()`` -- classify, build meta, export.

    Returns:
        List of output file paths that were written.

    Raises:
        FileNotFoundError: If the config or the source file does not exist.
        pydantic.ValidationError: If config fails Pydantic validation.
        ConfigValidationError: If config columns don't match the source data.
    """
    logger.info("classify() -- config_path=%s", config_path)

    config = load_config(config_path)
    source_df = read_source(config.source.input_path)
    validate_columns_against_data(config, {str(c) for c in source_df.columns})
    return run_pipeline_and_export(config, source_df)
