"""
Tests for CLI entry points.

These tests focus on:
- Basic CLI argument validation (create requires a name and a known semester)
- Command output against a mocked backend client
  (no network access during tests)
"""

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from weekplanner.api import ApiError
from weekplanner.cli import main
from weekplanner.model import Subject, Week


def _subject() -> Subject:
    weeks = [
        Week(id=1, week_number=1, content="Relational model and SQL basics"),
        Week(id=2, week_number=2, content="Relational model and SQL basics"),
        Week(id=3, week_number=3, content=""),
    ]
    return Subject(
        id=7, name="Databases", semester="2nd", start_week=1, end_week=3,
        weeks=weeks, semester_start_date="2025-03-03",
    )


def _run(argv: list[str], client: mock.MagicMock) -> tuple[object, str]:
    client.__enter__.return_value = client
    # a truthy __exit__ would swallow the SystemExit
    client.__exit__.return_value = False
    out = io.StringIO()
    code = None
    with mock.patch("weekplanner.cli._make_client", return_value=client), redirect_stdout(out):
        try:
            main(argv)
        except SystemExit as e:
            code = e.code
    return code, out.getvalue()


class TestCLI(unittest.TestCase):
    def test_create_requires_name(self) -> None:
        client = mock.MagicMock()
        code, out = _run(["create", "  "], client)
        self.assertNotEqual(code, 0)
        self.assertIn("Subject name is required", out)
        client.create_subject.assert_not_called()

    def test_create_rejects_unknown_semester(self) -> None:
        code, out = _run(["create", "Databases", "--semester", "summer"], mock.MagicMock())
        self.assertEqual(code, 1)
        self.assertIn("Invalid semester", out)

    def test_subjects_lists_progress(self) -> None:
        client = mock.MagicMock()
        client.list_subjects.return_value = [_subject()]
        code, out = _run(["subjects"], client)
        self.assertEqual(code, 0)
        self.assertIn("Databases", out)
        self.assertIn("2/3 done", out)

    def test_subjects_load_failure(self) -> None:
        client = mock.MagicMock()
        client.list_subjects.side_effect = ApiError("boom")
        code, out = _run(["subjects"], client)
        self.assertEqual(code, 1)
        self.assertIn("Failed to load subjects", out)

    def test_show_reports_repeated_content(self) -> None:
        client = mock.MagicMock()
        client.get_subject.return_value = _subject()
        code, out = _run(["show", "7"], client)
        self.assertEqual(code, 0)
        self.assertIn("Week 1 (Mar 3 - Mar 10, 2025)", out)
        self.assertIn("weeks 1, 2", out)

    def test_edit_unchanged_content_is_noop(self) -> None:
        client = mock.MagicMock()
        client.get_subject.return_value = _subject()
        code, out = _run(["edit", "7", "1", "Relational model and SQL basics"], client)
        self.assertEqual(code, 0)
        self.assertIn("No changes.", out)
        client.update_week.assert_not_called()

    def test_edit_saves_by_week_number(self) -> None:
        client = mock.MagicMock()
        client.get_subject.return_value = _subject()
        code, _ = _run(["edit", "7", "3", "Normalization"], client)
        self.assertEqual(code, 0)
        client.update_week.assert_called_once_with(3, "Normalization")

    def test_edit_unknown_week(self) -> None:
        client = mock.MagicMock()
        client.get_subject.return_value = _subject()
        code, out = _run(["edit", "7", "9", "x"], client)
        self.assertEqual(code, 1)
        self.assertIn("Week 9 not found.", out)

    def test_export_writes_file(self) -> None:
        client = mock.MagicMock()
        client.get_subject.return_value = _subject()
        client.export_subject.return_value = b"xlsx"
        with tempfile.TemporaryDirectory() as d:
            code, out = _run(["export", "7", "--out-dir", d], client)
            self.assertEqual(code, 0)
            self.assertTrue((Path(d) / "Databases-planning.xlsx").exists())

    def test_client_is_closed_on_exit(self) -> None:
        client = mock.MagicMock()
        client.list_subjects.return_value = []
        _run(["subjects"], client)
        client.__exit__.assert_called_once()


if __name__ == "__main__":
    unittest.main()
