from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from gamedb_validation.images import read_chunk
from gamedb_validation.metadata import FieldChecker, load_document
from gamedb_validation.report import GameReporter
from gamedb_validation.walker import list_files

ZIP_SIGNATURE = b"PK\x03\x04"


def save_groups(filenames: Iterable[str]) -> list[str]:
    """Extension-less basenames in first-seen order."""
    groups: list[str] = []
    for name in filenames:
        stem = Path(name).stem
        if stem not in groups:
            groups.append(stem)
    return groups


def validate_save_document(path: Path, reporter: GameReporter) -> None:
    document = load_document(path, reporter)
    if document is None:
        return
    fields = FieldChecker(document, reporter, prefix="Game save data: ")
    fields.not_empty("title")
    fields.not_empty("description")
    fields.not_empty("author")
    fields.title_id("title_id")


def validate_save_archive(path: Path, reporter: GameReporter) -> None:
    if read_chunk(path, len(ZIP_SIGNATURE)) != ZIP_SIGNATURE:
        reporter.error(f"File {path.name} is not a .zip!")


def _require_file(path: Path, reporter: GameReporter) -> bool:
    if not path.is_file():
        reporter.error(f'"{path}" does not exist!')
        return False
    return True


def validate_saves(path: Path, reporter: GameReporter) -> None:
    if not path.is_dir():
        return

    for group in save_groups(list_files(path)):
        document = path / f"{group}.dat"
        if _require_file(document, reporter):
            validate_save_document(document, reporter)
        archive = path / f"{group}.zip"
        if _require_file(archive, reporter):
            validate_save_archive(archive, reporter)
