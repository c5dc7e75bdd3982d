from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

if __package__ in (None, ""):
    import sys

    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gamedb_validation.config import ConfigError, ValidationConfig, load_config
from gamedb_validation.engine import run_validation
from gamedb_validation.report import print_report, write_report_json


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate the assets of every game in the database.")
    parser.add_argument("--config", default=None, help="JSON file with layout and image constraints")
    parser.add_argument("--directory", default=None, help="database root, overrides the config")
    parser.add_argument("--report-json", default=None, help="also write the grouped errors as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.config is not None:
        try:
            config = load_config(Path(args.config))
        except ConfigError as exc:
            print(f"ERROR: invalid_config {exc}")
            return 1
    else:
        config = ValidationConfig()

    if args.directory is not None:
        config = replace(config, directory=Path(args.directory))

    if not config.directory.is_dir():
        print(f"ERROR: database_directory_not_found path={config.directory}")
        return 1

    collector, results = run_validation(config)
    if args.report_json is not None:
        write_report_json(Path(args.report_json), collector, results)
    return print_report(collector)


if __name__ == "__main__":
    raise SystemExit(main())
