"""
Demo script: classify the CFI code column of one or more input tables.

Usage:
    python scripts/run_classify.py inputs/instruments.csv              # reuse config if present
    python scripts/run_classify.py inputs/instruments.csv --force      # regenerate config

Each input file gets its own output subdirectory and config under outputs/.
On first run, init() detects the code column, writes the config, and
classifies. On later runs, classify() reuses the (possibly hand-edited)
config. Pass --force to regenerate the config from the source table.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

OUTPUT_ROOT = Path("outputs")

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_classify")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import cfi_codes

    force = "--force" in sys.argv
    input_files = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not input_files:
        log.error("Usage: run_classify.py INPUT [INPUT ...] [--force]")
        sys.exit(2)

    for input_path in input_files:
        if not Path(input_path).exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        name = Path(input_path).stem
        output_dir = str(OUTPUT_ROOT / name)
        config_path = str(OUTPUT_ROOT / f"{name}.yaml")

        log.info("=" * 70)
        log.info("Processing: %s", input_path)
        log.info("  output_dir  : %s", output_dir)
        log.info("  config_path : %s", config_path)
        log.info("=" * 70)

        if force or not Path(config_path).exists():
            cfg = cfi_codes.init(input_path, output_dir=output_dir, config_path=config_path)
            log.info("  code column : %s", cfg.source.code_column)
        else:
            for path in cfi_codes.classify(config_path):
                log.info("  wrote %s", path)

        log.info("Done: %s\n", name)

    log.info("All files processed.")


if __name__ == "__main__":
    main()
