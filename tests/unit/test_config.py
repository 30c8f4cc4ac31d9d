"""
Unit tests for config models and YAML I/O (cfi_codes.config).

Tests Pydantic model validation, YAML serialization round-trip,
default config generation, and config-vs-data cross-validation.
"""

import pytest
from pydantic import ValidationError

from cfi_codes.config import (
    ClassifyConfig,
    OutputConfig,
    SourceConfig,
    generate_default_config,
    load_config,
    save_config,
    validate_columns_against_data,
)
from cfi_codes.exceptions import ConfigValidationError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _make_source() -> SourceConfig:
    return SourceConfig(input_path="inputs/instruments.csv", code_column="cfi_code")


def _make_config(**overrides) -> ClassifyConfig:
    defaults = {
        "source": _make_source(),
        "keep_columns": ["isin", "name"],
    }
    defaults.update(overrides)
    return ClassifyConfig(**defaults)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TestSourceConfig:
    """Tests for SourceConfig validation."""

    def test_valid(self):
        cfg = _make_source()
        assert cfg.code_column == "cfi_code"

    def test_missing_code_column(self):
        with pytest.raises(ValidationError, match="code_column"):
            SourceConfig(input_path="data.csv")


class TestOutputConfig:
    """Tests for OutputConfig defaults and format validation."""

    def test_defaults(self):
        cfg = OutputConfig()
        assert cfg.output_dir == "outputs/"
        assert cfg.output_format == "parquet"
        assert cfg.table_name == "classified"
        assert cfg.include_labels is True
        assert cfg.drop_invalid is False

    def test_csv_format(self):
        assert OutputConfig(output_format="csv").output_format == "csv"

    def test_invalid_format(self):
        with pytest.raises(ValidationError):
            OutputConfig(output_format="xlsx")


class TestClassifyConfig:
    """Tests for the top-level model validator."""

    def test_valid(self):
        cfg = _make_config()
        assert cfg.keep_columns == ["isin", "name"]

    def test_keep_columns_default_empty(self):
        assert ClassifyConfig(source=_make_source()).keep_columns == []

    def test_code_column_in_keep_columns(self):
        with pytest.raises(ValidationError, match="must not contain the code column"):
            _make_config(keep_columns=["isin", "cfi_code"])

    def test_duplicate_keep_columns(self):
        with pytest.raises(ValidationError, match="lists columns twice"):
            _make_config(keep_columns=["isin", "isin"])

    def test_keep_column_clashes_with_generated(self):
        with pytest.raises(ValidationError, match="clash with generated columns"):
            _make_config(keep_columns=["category"])

    def test_meta_table_name_reserved(self):
        with pytest.raises(ValidationError, match="reserved for the summary table"):
            _make_config(output=OutputConfig(table_name="_meta"))


# ---------------------------------------------------------------------------
# YAML I/O
# ---------------------------------------------------------------------------

class TestYamlRoundTrip:
    """save_config() then load_config() gives the same model."""

    def test_roundtrip(self, tmp_path):
        cfg = _make_config(output=OutputConfig(output_format="csv", drop_invalid=True))
        path = tmp_path / "sub" / "cficonfig.yaml"
        save_config(cfg, path)
        assert load_config(path) == cfg

    def test_header_comment(self, tmp_path):
        path = tmp_path / "cficonfig.yaml"
        save_config(_make_config(), path)
        assert path.read_text(encoding="utf-8").startswith("# cfi-codes configuration")

    def test_key_order_preserved(self, tmp_path):
        path = tmp_path / "cficonfig.yaml"
        save_config(_make_config(), path)
        text = path.read_text(encoding="utf-8")
        assert text.index("source:") < text.index("output:") < text.index("keep_columns:")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "cficonfig.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="empty"):
            load_config(path)

    def test_hand_edited_file(self, tmp_path):
        path = tmp_path / "cficonfig.yaml"
        path.write_text(
            "source:\n"
            "  input_path: data.parquet\n"
            "  code_column: CFI\n"
            "output:\n"
            "  output_format: csv\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.source.code_column == "CFI"
        assert cfg.output.output_format == "csv"
        assert cfg.output.table_name == "classified"


# ---------------------------------------------------------------------------
# generate_default_config / validate_columns_against_data
# ---------------------------------------------------------------------------

class TestGenerateDefaultConfig:
    """First-run config keeps every other column."""

    def test_keeps_other_columns(self):
        cfg = generate_default_config(
            input_path="inputs/instruments.csv",
            code_column="cfi_code",
            available_columns=["isin", "cfi_code", "name"],
            output_dir="out/",
        )
        assert cfg.keep_columns == ["isin", "name"]
        assert cfg.output.output_dir == "out/"

    def test_skips_clashing_columns(self):
        cfg = generate_default_config(
            input_path="x.csv",
            code_column="code",
            available_columns=["code", "group", "isin"],
        )
        assert cfg.keep_columns == ["isin"]


class TestValidateColumnsAgainstData:
    """Cross-check of config columns vs the source table."""

    def test_all_present(self):
        validate_columns_against_data(_make_config(), {"isin", "name", "cfi_code", "extra"})

    def test_missing_code_column(self):
        with pytest.raises(ConfigValidationError, match="code_column: 'cfi_code'"):
            validate_columns_against_data(_make_config(), {"isin", "name"})

    def test_missing_keep_column(self):
        with pytest.raises(ConfigValidationError, match=r"keep_columns: \['name'\]"):
            validate_columns_against_data(_make_config(), {"isin", "cfi_code"})
