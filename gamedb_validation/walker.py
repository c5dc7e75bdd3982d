from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path


def list_directories(root: Path) -> list[str]:
    return [p.name for p in root.iterdir() if p.is_dir() and not p.is_symlink()]


def list_files(root: Path) -> list[str]:
    return [p.name for p in root.iterdir() if p.is_file() and not p.is_symlink()]


def iter_games(root: Path, reserved_names: Iterable[str]) -> Iterator[str]:
    reserved = set(reserved_names)
    for name in list_directories(root):
        if name in reserved:
            continue
        yield name
