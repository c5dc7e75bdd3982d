from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from gamedb_validation.config import ImageConstraint, ImageDirConstraint
from gamedb_validation.report import GameReporter
from gamedb_validation.walker import list_files

# Enough for '\x89PNG', 'RIFF....WEBP' and the other container signatures.
SNIFF_BYTES = 12

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
BMP_SIGNATURE = b"BM"
TIFF_SIGNATURES = (b"II*\x00", b"MM\x00*")
ICO_SIGNATURE = b"\x00\x00\x01\x00"


def read_chunk(path: Path, size: int) -> bytes:
    with path.open("rb") as handle:
        return handle.read(size)


def sniff_mime_type(chunk: bytes) -> str | None:
    if chunk.startswith(PNG_SIGNATURE):
        return "image/png"
    if chunk.startswith(JPEG_SIGNATURE):
        return "image/jpeg"
    if chunk.startswith(GIF_SIGNATURES):
        return "image/gif"
    if chunk[0:4] == b"RIFF" and chunk[8:12] == b"WEBP":
        return "image/webp"
    if chunk.startswith(TIFF_SIGNATURES):
        return "image/tiff"
    if chunk.startswith(ICO_SIGNATURE):
        return "image/x-icon"
    if chunk.startswith(BMP_SIGNATURE):
        return "image/bmp"
    return None


def read_dimensions(path: Path) -> tuple[int, int] | None:
    # Only the header is read, so the pixel-count guard does not apply.
    max_pixels = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = None
    try:
        with Image.open(path) as image:
            return image.size
    except (UnidentifiedImageError, OSError):
        return None
    finally:
        Image.MAX_IMAGE_PIXELS = max_pixels


def validate_image(
    path: Path,
    constraint: ImageConstraint | ImageDirConstraint,
    reporter: GameReporter,
) -> None:
    if not path.exists():
        reporter.error(f'Image "{path.name}" was not found at {path}.')
        return

    mime_type = sniff_mime_type(read_chunk(path, SNIFF_BYTES))
    if mime_type != constraint.mime_type:
        reporter.error(
            f'Incorrect format of image "{path.name}" '
            f"({mime_type or 'unknown'} != {constraint.mime_type})"
        )

    dimensions = read_dimensions(path)
    if dimensions is None:
        reporter.error(f'Image "{path.name}" could not be decoded.')
        return
    width, height = dimensions
    if width != constraint.width or height != constraint.height:
        reporter.error(
            f'Image "{path.name}"\'s dimensions are {width} x {height} '
            f"instead of the required {constraint.width} x {constraint.height}."
        )


def validate_dir_images(path: Path, constraint: ImageDirConstraint, reporter: GameReporter) -> None:
    if not path.is_dir():
        return
    for name in list_files(path):
        validate_image(path / name, constraint, reporter)
