"""
CLI helper to check the Firebase project before running `firebase deploy`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.deployment import validate_deployment


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate Firebase deployment setup")
    parser.add_argument(
        "--root",
        type=Path,
        default=ROOT.parent,
        help="Firebase project root (directory holding firebase.json)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    report = validate_deployment(args.root)
    if not report.ok:
        logging.error("Validation failed with %d error(s)", len(report.errors))
        return 1
    if report.warnings:
        logging.info("Validation passed with %d warning(s)", len(report.warnings))
    else:
        logging.info("All validations passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
