"""
Tests for the planner controllers (subject list + week wizard).

A small in-memory FakeClient stands in for the backend so the
"mutate, then reload" flow can be checked end to end.
"""

import tempfile
import unittest
from datetime import date
from pathlib import Path

from weekplanner.api import ApiError
from weekplanner.dates import WeekRange
from weekplanner.model import Resource, Subject, Week
from weekplanner.planner import SubjectListController, SubjectPlanner, content_preview


class FakeClient:
    def __init__(self, subjects: list[Subject]) -> None:
        self.subjects = {s.id: s for s in subjects}
        self.calls: list[tuple] = []
        self.fail: set[str] = set()

    def _maybe_fail(self, name: str) -> None:
        self.calls.append((name,))
        if name in self.fail:
            raise ApiError(f"{name} failed", status_code=500)

    def _week(self, week_id: int) -> Week:
        for s in self.subjects.values():
            for w in s.weeks:
                if w.id == week_id:
                    return w
        raise ApiError("week not found", status_code=404)

    def list_subjects(self) -> list[Subject]:
        self._maybe_fail("list_subjects")
        return list(self.subjects.values())

    def get_subject(self, subject_id: int) -> Subject:
        self._maybe_fail("get_subject")
        return self.subjects[subject_id]

    def create_subject(self, name: str, semester: str) -> Subject:
        self._maybe_fail("create_subject")
        new_id = max(self.subjects, default=0) + 1
        subject = Subject(id=new_id, name=name, semester=semester, start_week=1, end_week=14)
        self.subjects[new_id] = subject
        return subject

    def delete_subject(self, subject_id: int) -> None:
        self._maybe_fail("delete_subject")
        del self.subjects[subject_id]

    def update_week(self, week_id: int, content: str) -> Week:
        self._maybe_fail("update_week")
        week = self._week(week_id)
        week.content = content
        return week

    def create_resource(self, week_id, url, title=None, description=None) -> Resource:
        self._maybe_fail("create_resource")
        res = Resource(id=900 + len(self.calls), url=url, title=title, description=description)
        self._week(week_id).resources.append(res)
        return res

    def delete_resource(self, resource_id: int) -> None:
        self._maybe_fail("delete_resource")
        for s in self.subjects.values():
            for w in s.weeks:
                w.resources = [r for r in w.resources if r.id != resource_id]

    def export_subject(self, subject_id: int) -> bytes:
        self._maybe_fail("export_subject")
        return b"xlsx-bytes"

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


def _subject() -> Subject:
    # stored out of order and not starting at 1
    weeks = [
        Week(id=3, week_number=19, content=""),
        Week(id=1, week_number=17, content="Intro and course logistics"),
        Week(id=2, week_number=18, content="", resources=[Resource(id=50, url="https://example.org")]),
    ]
    return Subject(id=1, name="Algorithms", semester="1st", start_week=17, end_week=19, weeks=weeks)


class TestSubjectPlanner(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeClient([_subject()])
        self.planner = SubjectPlanner(self.client, 1)
        self.assertTrue(self.planner.load())

    def test_load_starts_at_first_incomplete_week(self) -> None:
        self.assertEqual(self.planner.current_week_number, 18)
        self.assertEqual(self.planner.week_numbers, [17, 18, 19])
        self.assertEqual(self.planner.completed_weeks, [17])

    def test_load_all_complete_starts_at_first_week(self) -> None:
        subject = _subject()
        for w in subject.weeks:
            w.content = "filled in"
        planner = SubjectPlanner(FakeClient([subject]), 1)
        planner.load()
        self.assertEqual(planner.current_week_number, 17)
        self.assertTrue(planner.all_completed)

    def test_save_unchanged_content_makes_no_request(self) -> None:
        self.assertTrue(self.planner.save_week("Binary search trees"))
        self.assertEqual(self.client.count("update_week"), 1)
        self.assertEqual(self.planner.current_week.content, "Binary search trees")

        # second save with the same content is a no-op
        self.assertFalse(self.planner.save_week("Binary search trees"))
        self.assertEqual(self.client.count("update_week"), 1)

    def test_every_mutation_reloads(self) -> None:
        loads = self.client.count("get_subject")
        self.planner.save_week("Heaps")
        self.planner.add_resource("https://heaps.test", "Notes")
        self.planner.delete_resource(50)
        self.assertEqual(self.client.count("get_subject"), loads + 3)

    def test_reload_keeps_position(self) -> None:
        self.planner.select_week(17)
        self.planner.save_week("Intro, logistics and grading")
        self.assertEqual(self.planner.current_week_number, 17)

    def test_failed_save_sets_error(self) -> None:
        self.client.fail.add("update_week")
        self.assertFalse(self.planner.save_week("Heaps"))
        self.assertEqual(self.planner.error, "Failed to update week")
        self.planner.dismiss_error()
        self.assertIsNone(self.planner.error)

    def test_save_and_continue_moves_by_week_number(self) -> None:
        self.assertTrue(self.planner.save_and_continue("Sorting"))
        self.assertEqual(self.planner.current_week_number, 19)
        self.assertTrue(self.planner.is_last_week)
        self.assertFalse(self.planner.next_week())

    def test_save_and_continue_stays_on_failure(self) -> None:
        self.client.fail.add("update_week")
        self.assertFalse(self.planner.save_and_continue("Sorting"))
        self.assertEqual(self.planner.current_week_number, 18)

    def test_select_week_uses_week_numbers(self) -> None:
        self.assertTrue(self.planner.select_week(19))
        self.assertEqual(self.planner.current_week.id, 3)
        self.assertFalse(self.planner.select_week(1))

    def test_add_resource_requires_url(self) -> None:
        self.assertFalse(self.planner.add_resource("   "))
        self.assertEqual(self.client.count("create_resource"), 0)

        self.assertTrue(self.planner.add_resource("https://slides.test", title="Slides"))
        urls = [r.url for r in self.planner.current_week.resources]
        self.assertIn("https://slides.test", urls)

    def test_failed_resource_delete_keeps_resource(self) -> None:
        self.client.fail.add("delete_resource")
        self.assertFalse(self.planner.delete_resource(50))
        self.assertEqual(self.planner.error, "Failed to delete resource")
        self.assertEqual([r.id for r in self.planner.current_week.resources], [50])

    def test_failed_load(self) -> None:
        self.client.fail.add("get_subject")
        planner = SubjectPlanner(self.client, 1)
        self.assertFalse(planner.load())
        self.assertEqual(planner.error, "Failed to load subject")
        self.assertIsNone(planner.current_week)

    def test_repeated_content(self) -> None:
        self.planner.save_week("Intro and course logistics")
        groups = self.planner.repeated_content()
        self.assertEqual(len(groups), 1)
        self.assertEqual(sorted(groups[0].week_numbers), [17, 18])

    def test_calendar_lists_completed_weeks_with_dates(self) -> None:
        self.planner.select_week(19)
        self.planner.save_week("x" * 200)

        entries = self.planner.calendar_entries(today=date(2026, 10, 16))
        self.assertEqual([e.week_number for e in entries], [17, 19])
        self.assertEqual(entries[0].dates, WeekRange(start=date(2026, 4, 23), end=date(2026, 4, 30)))
        self.assertEqual(entries[0].excerpt, "Intro and course logistics")
        self.assertEqual(entries[1].excerpt, "x" * 150 + "...")

    def test_calendar_uses_semester_start(self) -> None:
        subject = _subject()
        subject.semester_start_date = "2025-03-03"
        planner = SubjectPlanner(FakeClient([subject]), 1)
        planner.load()
        entries = planner.calendar_entries(today=date(2026, 10, 16))
        self.assertEqual(entries[0].dates.start, date(2025, 6, 23))

    def test_export_writes_named_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = self.planner.export(Path(d) / "out")
            self.assertIsNotNone(path)
            assert path is not None
            self.assertEqual(path.name, "Algorithms-planning.xlsx")
            self.assertEqual(path.read_bytes(), b"xlsx-bytes")

    def test_export_failure(self) -> None:
        self.client.fail.add("export_subject")
        with tempfile.TemporaryDirectory() as d:
            self.assertIsNone(self.planner.export(d))
        self.assertEqual(self.planner.error, "Failed to export subject")


class TestSubjectList(unittest.TestCase):
    def test_load_and_progress(self) -> None:
        ctrl = SubjectListController(FakeClient([_subject()]))
        self.assertTrue(ctrl.load())
        self.assertEqual(ctrl.progress(ctrl.subjects[0]), (1, 3))

    def test_create_requires_name(self) -> None:
        client = FakeClient([])
        ctrl = SubjectListController(client)
        self.assertIsNone(ctrl.create("   "))
        self.assertEqual(ctrl.error, "Subject name is required")
        self.assertEqual(client.count("create_subject"), 0)

    def test_create_reloads_list(self) -> None:
        ctrl = SubjectListController(FakeClient([]))
        subject = ctrl.create(" Databases ", "2nd")
        self.assertIsNotNone(subject)
        self.assertEqual([s.name for s in ctrl.subjects], ["Databases"])

    def test_delete_failure_sets_error(self) -> None:
        client = FakeClient([_subject()])
        client.fail.add("delete_subject")
        ctrl = SubjectListController(client)
        self.assertFalse(ctrl.delete(1))
        self.assertEqual(ctrl.error, "Failed to delete subject")

    def test_load_failure_sets_error(self) -> None:
        client = FakeClient([])
        client.fail.add("list_subjects")
        ctrl = SubjectListController(client)
        self.assertFalse(ctrl.load())
        self.assertEqual(ctrl.error, "Failed to load subjects")


class TestContentPreview(unittest.TestCase):
    def test_preview(self) -> None:
        self.assertEqual(content_preview("  "), "No content yet")
        self.assertEqual(content_preview("short"), "short")
        self.assertEqual(content_preview("x" * 120), "x" * 100 + "...")


if __name__ == "__main__":
    unittest.main()
