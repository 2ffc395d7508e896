"""
Planner controllers.

These classes hold the state behind the subject list and the week wizard.
They are UI-agnostic: both the CLI and the interactive session drive them.

Rules shared by all actions:
- every mutation is followed by a full reload of the parent (no local merge)
- API failures are caught here, logged, and turned into a short `error`
  message that the UI shows until dismissed; nothing is retried
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from weekplanner.api import ApiError, PlannerClient
from weekplanner.dates import WeekRange, week_date_range
from weekplanner.duplicates import RepeatedContent, find_repeated_content
from weekplanner.export import write_export
from weekplanner.model import SEMESTER_FIRST, Subject, Week, completed_week_numbers, sorted_weeks

log = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
CALENDAR_EXCERPT_LENGTH = 150


@dataclass(frozen=True)
class CalendarEntry:
    week_number: int
    dates: WeekRange
    excerpt: str


def content_preview(content: str, max_length: int = PREVIEW_LENGTH) -> str:
    """
    Short preview of week content for list views.
    """
    if not content.strip():
        return "No content yet"
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."


class SubjectListController:
    """
    State behind the subject overview: list, create, delete.
    """

    def __init__(self, client: PlannerClient) -> None:
        self.client = client
        self.subjects: list[Subject] = []
        self.error: Optional[str] = None

    def dismiss_error(self) -> None:
        self.error = None

    def load(self) -> bool:
        try:
            self.subjects = self.client.list_subjects()
        except ApiError as e:
            log.error("Failed to load subjects: %s", e)
            self.error = "Failed to load subjects"
            return False
        self.error = None
        return True

    def create(self, name: str, semester: str = SEMESTER_FIRST) -> Optional[Subject]:
        self.error = None
        if not name.strip():
            self.error = "Subject name is required"
            return None
        try:
            subject = self.client.create_subject(name.strip(), semester)
        except ApiError as e:
            log.error("Failed to create subject: %s", e)
            self.error = "Failed to create subject"
            return None
        self.load()
        return subject

    def delete(self, subject_id: int) -> bool:
        try:
            self.client.delete_subject(subject_id)
        except ApiError as e:
            log.error("Failed to delete subject %s: %s", subject_id, e)
            self.error = "Failed to delete subject"
            return False
        return self.load()

    @staticmethod
    def progress(subject: Subject) -> tuple[int, int]:
        """
        (completed weeks, total weeks in the subject's range)
        """
        return len(completed_week_numbers(subject.weeks)), subject.total_weeks


class SubjectPlanner:
    """
    The week-by-week wizard for a single subject.

    The wizard position is tracked by week number, never by list index,
    because week lists may be unordered and non-contiguous.
    """

    def __init__(self, client: PlannerClient, subject_id: int) -> None:
        self.client = client
        self.subject_id = subject_id
        self.subject: Optional[Subject] = None
        self.current_week_number: Optional[int] = None
        self.error: Optional[str] = None

    def dismiss_error(self) -> None:
        self.error = None

    # ------------------------------------------------------------------
    # Loading & derived state
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Fetch the subject with its weeks.

        On the first load the wizard starts at the first incomplete week
        (by week number), or at the first week when everything is filled in.
        Reloads keep the current position while that week still exists.
        """
        try:
            subject = self.client.get_subject(self.subject_id)
        except ApiError as e:
            log.error("Failed to load subject %s: %s", self.subject_id, e)
            self.error = "Failed to load subject"
            return False

        self.subject = subject
        self.error = None

        numbers = {w.week_number for w in subject.weeks}
        if self.current_week_number not in numbers:
            self.current_week_number = self._initial_week_number()
        return True

    def _initial_week_number(self) -> Optional[int]:
        ordered = self.ordered_weeks
        if not ordered:
            return None
        for week in ordered:
            if not week.is_complete:
                return week.week_number
        return ordered[0].week_number

    @property
    def weeks(self) -> list[Week]:
        return list(self.subject.weeks) if self.subject else []

    @property
    def ordered_weeks(self) -> list[Week]:
        return sorted_weeks(self.weeks)

    @property
    def week_numbers(self) -> list[int]:
        return [w.week_number for w in self.ordered_weeks]

    @property
    def current_week(self) -> Optional[Week]:
        for week in self.weeks:
            if week.week_number == self.current_week_number:
                return week
        return None

    @property
    def completed_weeks(self) -> list[int]:
        return completed_week_numbers(self.weeks)

    @property
    def all_completed(self) -> bool:
        weeks = self.weeks
        return bool(weeks) and all(w.is_complete for w in weeks)

    @property
    def is_last_week(self) -> bool:
        numbers = self.week_numbers
        return bool(numbers) and self.current_week_number == numbers[-1]

    def repeated_content(self) -> list[RepeatedContent]:
        return find_repeated_content(self.weeks)

    def calendar_entries(self, today: date) -> list[CalendarEntry]:
        """
        Completed weeks in week-number order with their projected dates,
        for the summary shown once every week is filled in.
        """
        subject = self.subject
        if subject is None:
            return []
        out: list[CalendarEntry] = []
        for week in self.ordered_weeks:
            if not week.is_complete:
                continue
            excerpt = week.content.strip()
            if len(excerpt) > CALENDAR_EXCERPT_LENGTH:
                excerpt = excerpt[:CALENDAR_EXCERPT_LENGTH] + "..."
            out.append(
                CalendarEntry(
                    week_number=week.week_number,
                    dates=week_date_range(week.week_number, subject.semester_start_date, today=today),
                    excerpt=excerpt,
                )
            )
        return out

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_week(self, week_number: int) -> bool:
        if week_number not in self.week_numbers:
            return False
        self.current_week_number = week_number
        return True

    def next_week(self) -> bool:
        """
        Advance to the next week by week number. Returns False on the last week.
        """
        numbers = self.week_numbers
        if self.current_week_number not in numbers:
            return False
        idx = numbers.index(self.current_week_number)
        if idx >= len(numbers) - 1:
            return False
        self.current_week_number = numbers[idx + 1]
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save_week(self, content: str) -> bool:
        """
        Save the current week's content. Unchanged content (compared with
        the last fetched value) makes no request. Returns True if a save
        request succeeded.
        """
        week = self.current_week
        if week is None or content == week.content:
            return False
        try:
            self.client.update_week(week.id, content)
        except ApiError as e:
            log.error("Failed to update week %s: %s", week.week_number, e)
            self.error = "Failed to update week"
            return False
        self.load()
        return True

    def save_and_continue(self, content: str) -> bool:
        """
        Save if changed, then move to the next week. A failed save keeps the
        wizard on the current week.
        """
        week = self.current_week
        if week is None:
            return False
        if content != week.content and not self.save_week(content):
            return False
        return self.next_week()

    def add_resource(self, url: str, title: str | None = None, description: str | None = None) -> bool:
        week = self.current_week
        if week is None or not url.strip():
            return False
        try:
            self.client.create_resource(week.id, url.strip(), title or None, description or None)
        except ApiError as e:
            log.error("Failed to add resource to week %s: %s", week.week_number, e)
            self.error = "Failed to add resource"
            return False
        self.load()
        return True

    def delete_resource(self, resource_id: int) -> bool:
        try:
            self.client.delete_resource(resource_id)
        except ApiError as e:
            log.error("Failed to delete resource %s: %s", resource_id, e)
            self.error = "Failed to delete resource"
            return False
        self.load()
        return True

    def export(self, out_dir: str | Path) -> Optional[Path]:
        """
        Download the spreadsheet export into out_dir.
        """
        name = self.subject.name if self.subject else ""
        try:
            payload = self.client.export_subject(self.subject_id)
            return write_export(payload, name, out_dir)
        except (ApiError, OSError) as e:
            log.error("Failed to export subject %s: %s", self.subject_id, e)
            self.error = "Failed to export subject"
            return None
