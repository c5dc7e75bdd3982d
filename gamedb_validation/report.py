from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(frozen=True)
class ValidationError:
    game: str
    message: str


@dataclass(frozen=True)
class GameResult:
    game: str
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.error is None


class GameReporter:
    """Records errors against a single game."""

    def __init__(self, collector: ErrorCollector, game: str) -> None:
        self.collector = collector
        self.game = game

    def error(self, message: str) -> None:
        self.collector.record(self.game, message)


class ErrorCollector:
    def __init__(self) -> None:
        self.errors: list[ValidationError] = []

    def __len__(self) -> int:
        return len(self.errors)

    def record(self, game: str, message: str) -> None:
        self.errors.append(ValidationError(game=game, message=message))

    def for_game(self, game: str) -> GameReporter:
        return GameReporter(self, game)

    def messages(self, game: str) -> list[str]:
        return [error.message for error in self.errors if error.game == game]

    def grouped(self) -> dict[str, list[str]]:
        groups: dict[str, list[str]] = {}
        for error in self.errors:
            groups.setdefault(error.game, []).append(error.message)
        return groups


def print_report(collector: ErrorCollector) -> int:
    if not collector.errors:
        print("Validation completed without errors.")
        return 0

    print("Validation completed with errors.")
    for game, messages in collector.grouped().items():
        print(f"  {game}:")
        for message in messages:
            print(f"   - {message}")
    return 1


def write_report_json(path: Path, collector: ErrorCollector, results: list[GameResult]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "error_count": len(collector),
                "errors": collector.grouped(),
                "games": [asdict(result) for result in results],
            },
            ensure_ascii=True,
            indent=2,
        ),
        encoding="utf-8",
    )
