from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


DEFAULT_REGIONS = (
    "Worldwide",
    "Europe",
    "Japan",
    "North America",
    "Australia",
    "Korea",
    "China",
    "Taiwan",
)
RESERVED_NAMES = (".git", "_validation")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True)
class ImageConstraint:
    filename: str
    width: int
    height: int
    mime_type: str = "image/png"


@dataclass(frozen=True)
class ImageDirConstraint:
    dirname: str
    width: int
    height: int
    mime_type: str = "image/png"


@dataclass(frozen=True)
class DocumentSpec:
    filename: str = "game.dat"


@dataclass(frozen=True)
class SavesSpec:
    dirname: str = "saves"


@dataclass(frozen=True)
class ValidationConfig:
    directory: Path = Path("..")
    boxart: ImageConstraint = field(
        default_factory=lambda: ImageConstraint(filename="boxart.png", width=328, height=300)
    )
    icon: ImageConstraint = field(
        default_factory=lambda: ImageConstraint(filename="icon.png", width=48, height=48)
    )
    data: DocumentSpec = field(default_factory=DocumentSpec)
    screenshots: ImageDirConstraint = field(
        default_factory=lambda: ImageDirConstraint(dirname="screenshots", width=400, height=480)
    )
    saves: SavesSpec = field(default_factory=SavesSpec)
    regions: tuple[str, ...] = DEFAULT_REGIONS
    reserved_names: tuple[str, ...] = RESERVED_NAMES


def _section(raw: dict[str, Any], key: str, path: Path) -> dict[str, Any] | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigError(f"{path}: '{key}' must be an object")
    return value


def _image_constraint(
    section: dict[str, Any] | None, default: ImageConstraint, key: str, path: Path
) -> ImageConstraint:
    if section is None:
        return default
    try:
        return ImageConstraint(
            filename=str(section.get("filename", default.filename)),
            width=int(section.get("width", default.width)),
            height=int(section.get("height", default.height)),
            mime_type=str(section.get("type", default.mime_type)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{path}: invalid '{key}' constraint ({exc})") from exc


def _image_dir_constraint(
    section: dict[str, Any] | None, default: ImageDirConstraint, path: Path
) -> ImageDirConstraint:
    if section is None:
        return default
    try:
        return ImageDirConstraint(
            dirname=str(section.get("dirname", default.dirname)),
            width=int(section.get("width", default.width)),
            height=int(section.get("height", default.height)),
            mime_type=str(section.get("type", default.mime_type)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{path}: invalid 'screenshots' constraint ({exc})") from exc


def config_from_dict(raw: dict[str, Any], path: Path, base: ValidationConfig | None = None) -> ValidationConfig:
    """Build a config from a JSON-style mapping, falling back to ``base`` for absent keys.

    Image constraints use the keys ``filename``, ``width``, ``height`` and
    ``type`` (the expected MIME type). A relative ``directory`` is resolved
    against the folder holding the configuration file.
    """
    base = base or ValidationConfig()

    directory = base.directory
    if "directory" in raw:
        directory = Path(str(raw["directory"]))
        if not directory.is_absolute():
            directory = path.parent / directory

    data = _section(raw, "data", path)
    saves = _section(raw, "saves", path)

    regions = base.regions
    if "regions" in raw:
        raw_regions = raw["regions"]
        if not isinstance(raw_regions, list) or not all(isinstance(r, str) for r in raw_regions):
            raise ConfigError(f"{path}: 'regions' must be a list of strings")
        regions = tuple(raw_regions)

    return ValidationConfig(
        directory=directory,
        boxart=_image_constraint(_section(raw, "boxart", path), base.boxart, "boxart", path),
        icon=_image_constraint(_section(raw, "icon", path), base.icon, "icon", path),
        data=DocumentSpec(filename=str(data.get("filename", base.data.filename))) if data else base.data,
        screenshots=_image_dir_constraint(_section(raw, "screenshots", path), base.screenshots, path),
        saves=SavesSpec(dirname=str(saves.get("dirname", base.saves.dirname))) if saves else base.saves,
        regions=regions,
        reserved_names=base.reserved_names,
    )


def load_config(path: Path) -> ValidationConfig:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"{path}: cannot read config ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: config must be a JSON object")
    return config_from_dict(raw, path)
