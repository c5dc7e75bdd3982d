from __future__ import annotations

import tempfile
import textwrap
import unittest
from pathlib import Path

from gamedb_validation.config import DEFAULT_REGIONS
from gamedb_validation.metadata import (
    FieldChecker,
    validate_metadata,
    validate_testcases,
)
from gamedb_validation.report import ErrorCollector

VALID_DOCUMENT = """
title = "Example Quest"
description = "A small adventure."
github_issues = [101, 202]
needs_system_files = false
needs_shared_font = true

[[releases]]
title = "0004000000030800"
region = "Europe"
release_date = "2014-11-21"

[[testcases]]
compatibility = "2"
date = "2018-01-02"
version = "HEAD-1a2b3c4"
author = "tester"
"""


class MetadataTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.collector = ErrorCollector()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def validate(self, text: str) -> list[str]:
        path = self.root / "game.dat"
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        validate_metadata(path, DEFAULT_REGIONS, self.collector.for_game("Game"))
        return self.collector.messages("Game")


class ValidateMetadataTest(MetadataTestCase):
    def test_valid_document(self) -> None:
        self.assertEqual(self.validate(VALID_DOCUMENT), [])

    def test_missing_document(self) -> None:
        validate_metadata(self.root / "game.dat", DEFAULT_REGIONS, self.collector.for_game("Game"))
        messages = self.collector.messages("Game")
        self.assertEqual(len(messages), 1)
        self.assertIn("TOML was not found", messages[0])

    def test_parse_error_stops_validation(self) -> None:
        messages = self.validate('title = "x"\ndescription = = 1\n')
        self.assertEqual(len(messages), 1)
        self.assertTrue(messages[0].startswith("TOML parse error (2)"), msg=messages[0])

    def test_missing_releases_reported_once(self) -> None:
        text = VALID_DOCUMENT.replace("[[releases]]", "[extra]")
        messages = self.validate(text)
        self.assertEqual(messages, ["No releases."])

    def test_missing_testcases(self) -> None:
        text = (
            VALID_DOCUMENT.split("[[testcases]]")[0]
            .replace("needs_system_files = false\n", "")
            .replace("needs_shared_font = true\n", "")
        )
        self.assertEqual(self.validate(text), ["No testcases."])

    def test_empty_testcases_do_not_require_resource_flags(self) -> None:
        header, releases = VALID_DOCUMENT.split("[[testcases]]")[0].split("[[releases]]")
        header = header.replace("needs_system_files = false\n", "").replace("needs_shared_font = true\n", "")
        text = header + "testcases = []\n\n[[releases]]" + releases
        self.assertEqual(self.validate(text), [])

    def test_region_must_be_a_string(self) -> None:
        messages = self.validate(VALID_DOCUMENT.replace('region = "Europe"', 'region = ["Europe"]'))
        self.assertEqual(messages, ["Release #1: Invalid region ['Europe']"])

    def test_non_table_entries_use_entry_prefix(self) -> None:
        header = VALID_DOCUMENT.split("[[releases]]")[0]
        messages = self.validate(header + 'releases = ["x"]\ntestcases = [1]\n')
        self.assertEqual(
            messages,
            ["Release #1: entry is not a table", "Testcase #1: entry is not a table"],
        )

    def test_header_fields(self) -> None:
        messages = self.validate(
            VALID_DOCUMENT.replace('title = "Example Quest"', "title = 7").replace(
                'description = "A small adventure."', 'description = ""'
            )
        )
        self.assertEqual(messages, ['Field "title" is not a string', 'Field "description" is empty'])

    def test_github_issues_each_bad_entry_reported(self) -> None:
        messages = self.validate(VALID_DOCUMENT.replace("[101, 202]", '["a", 3, "b"]'))
        self.assertEqual(messages, ["Github issues entry is not a number!"] * 2)

    def test_github_issues_not_a_list(self) -> None:
        messages = self.validate(VALID_DOCUMENT.replace("[101, 202]", "12"))
        self.assertEqual(messages, ["Github issues field is not an array!"])

    def test_short_title_and_unknown_region(self) -> None:
        text = VALID_DOCUMENT.replace('"0004000000030800"', '"short"').replace('"Europe"', '"ZZ"')
        messages = self.validate(text)
        self.assertEqual(
            messages,
            ["Release #1: Game title ID has an invalid length", "Release #1: Invalid region ZZ"],
        )

    def test_title_id_length_and_pattern_both_fire(self) -> None:
        text = VALID_DOCUMENT.replace('"0004000000030800"', '"bad-id"')
        messages = self.validate(text)
        self.assertEqual(
            messages,
            [
                "Release #1: Game title ID has an invalid length",
                "Release #1: Game title ID is not a hexadecimal ID",
            ],
        )

    def test_release_date_pattern(self) -> None:
        for bad in ("2014-13-01", "2014-00-10", "2014-01-32", "14-01-01", "2014-11-21 extra"):
            with self.subTest(value=bad):
                self.collector = ErrorCollector()
                messages = self.validate(VALID_DOCUMENT.replace('"2014-11-21"', f'"{bad}"'))
                self.assertEqual(messages, [f'Release #1: "release_date" is not a valid date ("{bad}").'])

    def test_testcase_version_rules(self) -> None:
        messages = self.validate(VALID_DOCUMENT.replace('"HEAD-1a2b3c4"', '"abcde1a2b3c4"'))
        self.assertEqual(messages, ["Testcase #1: Unknown version commit source"])

        self.collector = ErrorCollector()
        messages = self.validate(VALID_DOCUMENT.replace('"HEAD-1a2b3c4"', '"HEAD-1a"'))
        self.assertEqual(messages, ["Testcase #1: Version is of incorrect length"])

    def test_testcase_missing_fields(self) -> None:
        text = VALID_DOCUMENT.replace('author = "tester"', "").replace('date = "2018-01-02"', "")
        messages = self.validate(text)
        self.assertEqual(messages, ['Testcase #1: Field "date" missing', 'Testcase #1: Field "author" missing'])

    def test_resource_flags_required_below_threshold(self) -> None:
        text = VALID_DOCUMENT.replace("needs_system_files = false\n", "").replace(
            "needs_shared_font = true", 'needs_shared_font = "yes"'
        )
        messages = self.validate(text)
        self.assertEqual(
            messages,
            ['Field "needs_system_files" missing', 'Field "needs_shared_font" is not a boolean'],
        )

    def test_resource_flags_optional_at_threshold(self) -> None:
        text = (
            VALID_DOCUMENT.replace("needs_system_files = false\n", "")
            .replace("needs_shared_font = true\n", "")
            .replace('compatibility = "2"', 'compatibility = "5"')
        )
        self.assertEqual(self.validate(text), [])

    def test_non_integer_compatibility_is_reported(self) -> None:
        text = VALID_DOCUMENT.replace("needs_system_files = false\n", "").replace(
            'compatibility = "2"', 'compatibility = "great"'
        )
        messages = self.validate(text)
        self.assertEqual(messages, ['Testcase #1: Compatibility "great" is not an integer'])

    def test_releases_must_be_tables(self) -> None:
        text = VALID_DOCUMENT.split("[[releases]]")[0] + 'releases = "none"\n'
        messages = self.validate(text)
        self.assertEqual(messages[0], 'Field "releases" is not a list')


class ValidateTestcasesTest(unittest.TestCase):
    def lowest(self, values: list[str]) -> int | None:
        document = {
            "testcases": [
                {"compatibility": value, "date": "2018-01-01", "version": "HEAD-0000000", "author": "a"}
                for value in values
            ]
        }
        collector = ErrorCollector()
        result = validate_testcases(document, collector.for_game("Game"))
        self.assertEqual(len(collector), 0)
        return result

    def test_minimum_is_order_independent(self) -> None:
        self.assertEqual(self.lowest(["8", "3", "4"]), 3)
        self.assertEqual(self.lowest(["3", "4", "8"]), 3)
        self.assertEqual(self.lowest(["4", "8", "3"]), 3)

    def test_empty_list_has_no_minimum(self) -> None:
        self.assertIsNone(self.lowest([]))


class FieldCheckerTest(unittest.TestCase):
    def test_predicate_only_runs_when_field_exists(self) -> None:
        collector = ErrorCollector()
        seen: list[object] = []
        fields = FieldChecker({"present": 1}, collector.for_game("Game"), prefix="T: ")
        fields.check("present", seen.append)
        fields.check("absent", seen.append)
        self.assertEqual(seen, [1])
        self.assertEqual(collector.messages("Game"), ['T: Field "absent" missing'])

    def test_boolean_rejects_truthy_values(self) -> None:
        collector = ErrorCollector()
        fields = FieldChecker({"a": True, "b": 1, "c": "true"}, collector.for_game("Game"))
        for name in ("a", "b", "c"):
            fields.boolean(name)
        self.assertEqual(
            collector.messages("Game"),
            ['Field "b" is not a boolean', 'Field "c" is not a boolean'],
        )


if __name__ == "__main__":
    unittest.main()
