"""
Unit tests for the _meta summary (cfi_codes.meta).
"""

from __future__ import annotations

import hashlib

from cfi_codes.config import ClassifyConfig, SourceConfig
from cfi_codes.frame import decode_series
from cfi_codes.meta import INVALID_LABEL, META_COLUMNS, build_meta_table


def _make_config(input_path: str) -> ClassifyConfig:
    return ClassifyConfig(source=SourceConfig(input_path=input_path, code_column="cfi_code"))


class TestBuildMetaTable:
    """One row per category, plus one for invalid codes."""

    def test_counts_per_category(self, tmp_path):
        classified = decode_series(["DBFTFB", "ESVUFR", "ESXXXX", "ZZZZZZ", None])
        meta = build_meta_table(_make_config(str(tmp_path / "x.csv")), classified)
        assert list(meta.columns) == META_COLUMNS
        assert meta["category"].tolist()[:2] == ["E", "D"]
        assert meta["rows"].tolist() == [2, 1, 2]
        assert meta["category_name"].tolist()[-1] == INVALID_LABEL

    def test_no_invalid_row_when_all_valid(self, tmp_path):
        classified = decode_series(["ESVUFR"])
        meta = build_meta_table(_make_config(str(tmp_path / "x.csv")), classified)
        assert meta["category_name"].tolist() == ["Equities"]

    def test_source_hash(self, tmp_path):
        source = tmp_path / "instruments.csv"
        source.write_bytes(b"cfi_code\nESVUFR\n")
        meta = build_meta_table(_make_config(str(source)), decode_series(["ESVUFR"]))
        assert meta.loc[0, "source_file"] == "instruments.csv"
        assert meta.loc[0, "source_hash"] == hashlib.sha256(b"cfi_code\nESVUFR\n").hexdigest()
        assert meta.loc[0, "code_column"] == "cfi_code"

    def test_missing_source_gives_empty_hash(self, tmp_path):
        meta = build_meta_table(_make_config(str(tmp_path / "gone.csv")), decode_series(["ESVUFR"]))
        assert meta.loc[0, "source_hash"] == ""

    def test_empty_input(self, tmp_path):
        meta = build_meta_table(_make_config(str(tmp_path / "x.csv")), decode_series([]))
        assert meta.empty
        assert list(meta.columns) == META_COLUMNS
