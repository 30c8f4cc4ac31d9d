"""
Write the flattened CFI classification tables to CSV or Parquet.

Usage:
    python scripts/export_registry.py                                 # outputs/cfi_registry.parquet
    python scripts/export_registry.py outputs/cfi_registry.csv
"""

from __future__ import annotations

import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("export_registry")


def main() -> None:
    import cfi_codes

    output_path = sys.argv[1] if len(sys.argv) > 1 else "outputs/cfi_registry.parquet"
    written = cfi_codes.export_registry(output_path)
    log.info("Wrote %s", written)


if __name__ == "__main__":
    main()
