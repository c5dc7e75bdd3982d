from __future__ import annotations

import re
import tomllib
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import Any

from gamedb_validation.report import GameReporter

DATE_PATTERN = re.compile(r"[0-9]{4}-((0[1-9])|(1[0-2]))-((0[1-9])|([1-2][0-9])|(3[0-1]))")
ALNUM_PATTERN = re.compile(r"[a-zA-Z0-9]+")
TITLE_ID_LENGTH = 16
VERSION_LENGTH = 12
VERSION_PREFIX = "HEAD-"
RESOURCE_FLAGS_THRESHOLD = 5
RESOURCE_FLAGS = ("needs_system_files", "needs_shared_font")


def _parse_error_line(exc: tomllib.TOMLDecodeError) -> int | None:
    lineno = getattr(exc, "lineno", None)
    if isinstance(lineno, int):
        return lineno
    match = re.search(r"at line (\d+)", str(exc))
    return int(match.group(1)) if match else None


def load_document(path: Path, reporter: GameReporter) -> dict[str, Any] | None:
    """Parse a TOML document, recording a single error if it is malformed."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        message = getattr(exc, "msg", None) or str(exc)
        reporter.error(f"TOML parse error ({_parse_error_line(exc)}): {message}")
    except UnicodeDecodeError as exc:
        reporter.error(f"TOML parse error (None): file is not valid UTF-8 ({exc.reason})")
    return None


class FieldChecker:
    """Field-level checks over one table of a parsed document.

    ``prefix`` is prepended to every message so errors from list sections
    can be traced back to their entry (``Release #2: ...``).
    """

    def __init__(self, table: dict[str, Any], reporter: GameReporter, prefix: str = "") -> None:
        self.table = table
        self.reporter = reporter
        self.prefix = prefix

    def error(self, message: str) -> None:
        self.reporter.error(f"{self.prefix}{message}")

    def require(self, name: str) -> bool:
        if name not in self.table:
            self.error(f'Field "{name}" missing')
            return False
        return True

    def check(self, name: str, test: Callable[[Any], None]) -> None:
        if self.require(name):
            test(self.table[name])

    def not_empty(self, name: str) -> None:
        def test(value: Any) -> None:
            if not isinstance(value, str):
                self.error(f'Field "{name}" is not a string')
            elif value == "":
                self.error(f'Field "{name}" is empty')

        self.check(name, test)

    def boolean(self, name: str) -> None:
        def test(value: Any) -> None:
            if not isinstance(value, bool):
                self.error(f'Field "{name}" is not a boolean')

        self.check(name, test)

    def date(self, name: str) -> None:
        def test(value: Any) -> None:
            if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
                self.error(f'"{name}" is not a valid date ("{value}").')

        self.check(name, test)

    def title_id(self, name: str) -> None:
        def test(value: Any) -> None:
            if not isinstance(value, str):
                self.error(f'Field "{name}" is not a string')
                return
            if len(value) != TITLE_ID_LENGTH:
                self.error("Game title ID has an invalid length")
            if not ALNUM_PATTERN.fullmatch(value):
                self.error("Game title ID is not a hexadecimal ID")

        self.check(name, test)


def _tables(
    section: Any, label: str, entry_label: str, reporter: GameReporter
) -> Iterator[tuple[int, dict[str, Any]]]:
    if not isinstance(section, list):
        reporter.error(f'Field "{label}" is not a list')
        return
    for index, entry in enumerate(section, start=1):
        if not isinstance(entry, dict):
            reporter.error(f"{entry_label} #{index}: entry is not a table")
            continue
        yield index, entry


def validate_github_issues(document: dict[str, Any], reporter: GameReporter) -> None:
    if "github_issues" not in document:
        return
    issues = document["github_issues"]
    if not isinstance(issues, list):
        reporter.error("Github issues field is not an array!")
        return
    for entry in issues:
        if not isinstance(entry, int) or isinstance(entry, bool):
            reporter.error("Github issues entry is not a number!")


def validate_releases(document: dict[str, Any], regions: Iterable[str], reporter: GameReporter) -> None:
    if "releases" not in document:
        reporter.error("No releases.")
        return

    allowed = set(regions)
    for index, release in _tables(document["releases"], "releases", "Release", reporter):
        fields = FieldChecker(release, reporter, prefix=f"Release #{index}: ")
        fields.title_id("title")

        def check_region(value: Any, fields: FieldChecker = fields) -> None:
            if not isinstance(value, str) or value not in allowed:
                fields.error(f"Invalid region {value}")

        fields.check("region", check_region)
        fields.date("release_date")


def parse_compatibility(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def validate_testcases(document: dict[str, Any], reporter: GameReporter) -> int | None:
    """Validate every test case and return the lowest compatibility score seen."""
    if "testcases" not in document:
        reporter.error("No testcases.")
        return None

    lowest: int | None = None
    for index, testcase in _tables(document["testcases"], "testcases", "Testcase", reporter):
        fields = FieldChecker(testcase, reporter, prefix=f"Testcase #{index}: ")

        fields.not_empty("compatibility")
        if testcase.get("compatibility", "") != "":
            compatibility = parse_compatibility(testcase["compatibility"])
            if compatibility is None:
                fields.error(f'Compatibility "{testcase["compatibility"]}" is not an integer')
            elif lowest is None or compatibility < lowest:
                lowest = compatibility

        fields.date("date")

        def check_version(value: Any, fields: FieldChecker = fields) -> None:
            if not isinstance(value, str):
                fields.error('Field "version" is not a string')
                return
            if len(value) != VERSION_LENGTH:
                fields.error("Version is of incorrect length")
            if not value.startswith(VERSION_PREFIX):
                fields.error("Unknown version commit source")

        fields.check("version", check_version)
        fields.not_empty("author")
    return lowest


def validate_metadata(path: Path, regions: Iterable[str], reporter: GameReporter) -> None:
    if not path.exists():
        reporter.error(f"TOML was not found at {path}.")
        return

    document = load_document(path, reporter)
    if document is None:
        return

    header = FieldChecker(document, reporter)
    header.not_empty("title")
    header.not_empty("description")
    validate_github_issues(document, reporter)
    validate_releases(document, regions, reporter)

    lowest = validate_testcases(document, reporter)
    # Resource needs are unknowable for games that do not run.
    if lowest is not None and lowest < RESOURCE_FLAGS_THRESHOLD:
        for name in RESOURCE_FLAGS:
            header.boolean(name)
