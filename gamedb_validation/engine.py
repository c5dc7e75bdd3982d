from __future__ import annotations

import sys
import traceback
from pathlib import Path

from gamedb_validation.config import ValidationConfig
from gamedb_validation.images import validate_dir_images, validate_image
from gamedb_validation.metadata import validate_metadata
from gamedb_validation.report import ErrorCollector, GameReporter, GameResult
from gamedb_validation.saves import validate_saves
from gamedb_validation.walker import iter_games


def validate_game(game_dir: Path, config: ValidationConfig, reporter: GameReporter) -> None:
    validate_image(game_dir / config.boxart.filename, config.boxart, reporter)
    validate_image(game_dir / config.icon.filename, config.icon, reporter)
    validate_metadata(game_dir / config.data.filename, config.regions, reporter)
    validate_dir_images(game_dir / config.screenshots.dirname, config.screenshots, reporter)
    validate_saves(game_dir / config.saves.dirname, reporter)


class ValidationRunner:
    def __init__(self, config: ValidationConfig, collector: ErrorCollector | None = None) -> None:
        self.config = config
        self.collector = collector if collector is not None else ErrorCollector()

    def run_game(self, game: str) -> GameResult:
        reporter = self.collector.for_game(game)
        try:
            validate_game(self.config.directory / game, self.config, reporter)
        except Exception as exc:
            print(f"WARN: {game} has encountered an unexpected error.", file=sys.stderr)
            traceback.print_exc(file=sys.stderr)
            return GameResult(game=game, error=f"{type(exc).__name__}: {exc}")
        return GameResult(game=game)

    def run(self) -> list[GameResult]:
        return [
            self.run_game(game)
            for game in iter_games(self.config.directory, self.config.reserved_names)
        ]


def run_validation(
    config: ValidationConfig, collector: ErrorCollector | None = None
) -> tuple[ErrorCollector, list[GameResult]]:
    runner = ValidationRunner(config, collector)
    results = runner.run()
    return runner.collector, results
