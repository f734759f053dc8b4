"""Command-line entry point: run every operation in a merge configuration file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from sensor_merge.core import EngineConfig, MergeOrchestrator, SensorMergeError, load_operations
from sensor_merge.core.io import load_json_document
from sensor_merge.validation import validate_operations

logger = logging.getLogger("sensor_merge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensor-merge",
        description="Reconcile heterogeneous sensor feeds into per-device summaries.",
    )
    parser.add_argument("config", help="Path to the JSON operation configuration")
    parser.add_argument(
        "--data-dir",
        help="Directory that relative source/destination paths resolve against "
             "(default: the configuration file's directory)",
    )
    parser.add_argument("--validate-only", action="store_true", help="Check the configuration and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    config_path = Path(args.config)
    data_dir = Path(args.data_dir) if args.data_dir else config_path.parent

    if args.validate_only:
        return _validate(config_path)

    config = EngineConfig(data_dir=data_dir, trace_enabled=args.verbose)
    try:
        operations = load_operations(config_path)
        MergeOrchestrator(config).run_operations(operations)

    except SensorMergeError as e:
        logger.error("Merge failed: %s", e)
        return 1

    except (OSError, ValueError) as e:
        logger.error("I/O error: %s", e)
        return 1

    return 0


def _validate(config_path: Path) -> int:
    try:
        raw = load_json_document(config_path)
    except (OSError, ValueError) as e:
        logger.error("Cannot read configuration: %s", e)
        return 1

    ok, errors = validate_operations(raw)
    if not ok:
        logger.error("Invalid configuration:\n- %s", "\n- ".join(errors))
        return 1

    logger.info("Configuration %s is valid", config_path)
    return 0
