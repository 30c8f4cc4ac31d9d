"""
Shared test fixtures for cfi-codes tests.

Sample codes used across the suite are defined here as module-level
constants; fixtures build small source tables on disk under tmp_path.
"""

from __future__ import annotations

import pandas as pd
import pytest

from cfi_codes.registry import Registry, default_registry

# ---------------------------------------------------------------------------
# Sample codes -- one per category with modelled tables
# ---------------------------------------------------------------------------
VALID_CODES = [
    "ESVUFR",  # Equities / Common shares / Voting / Free / Fully paid / Registered
    "DBFTFB",  # Debt / Bonds / Fixed rate / Government guarantee / Fixed maturity / Bearer
    "CIOGEU",  # CIV / Mutual funds / Open-end / Accumulation / Equities / Units
    "RWSNCA",  # Entitlements / Warrants / Equities / Naked / Call / American
    "OCASPS",  # Listed options / Call / American / Stock / Physical / Standardized
    "FFICSX",  # Futures / Financial / Indices / Cash / Standardized / n/a
    "SRCCSD",  # Swaps / Rates / Fixed-floating / Constant / Single currency / Deliverable
    "HRAAVC",  # Non-listed options / Rates / Basis swap / European-Call / Vanilla / Cash
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def registry() -> Registry:
    """The shipped classification tables."""
    return default_registry()


@pytest.fixture(params=VALID_CODES)
def valid_code(request) -> str:
    """Each of VALID_CODES in turn."""
    return request.param


@pytest.fixture
def instruments_df() -> pd.DataFrame:
    """A small instrument list with valid, invalid and missing codes."""
    return pd.DataFrame(
        {
            "isin": ["US0378331005", "XS0000000001", "LU0000000002", "DE0000000003", "FR0000000004"],
            "name": ["Apple Inc", "Corp bond 2030", "Equity fund", "Broken row", "No code"],
            "cfi_code": ["ESVUFR", "DBFTFB", "CIOGEU", "EZXXXX", None],
        }
    )


@pytest.fixture
def instruments_csv(tmp_path, instruments_df) -> str:
    """instruments_df written as CSV under tmp_path."""
    path = tmp_path / "instruments.csv"
    instruments_df.to_csv(path, index=False)
    return str(path)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs the full pipeline on disk)",
    )
