"""
Central data model definitions used across the project.

This module defines the canonical structure of Subject, Week and Resource
objects so that:
- the API client, the planner controller and the UI layers share the same field names
- backend JSON (camelCase) is converted in exactly one place

All entities are owned by the backend. Objects here are read-derived copies
that are rebuilt after every fetch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

# Wire values used by the backend for the semester tag
SEMESTER_FIRST = "1st"
SEMESTER_SECOND = "2nd"
SEMESTER_YEARLY = "yearly"
SEMESTERS = (SEMESTER_FIRST, SEMESTER_SECOND, SEMESTER_YEARLY)

_SEMESTER_ALIASES = {
    "1st": SEMESTER_FIRST,
    "first": SEMESTER_FIRST,
    "2nd": SEMESTER_SECOND,
    "second": SEMESTER_SECOND,
    "yearly": SEMESTER_YEARLY,
}


def normalize_semester(value: str) -> str:
    """
    Map user input ('first', '1st', 'Second', ...) to the backend wire value.
    Raises ValueError for unknown semester tags.
    """
    key = str(value or "").strip().lower()
    if key not in _SEMESTER_ALIASES:
        raise ValueError(f"Invalid semester: {value!r} (expected one of: first, second, yearly)")
    return _SEMESTER_ALIASES[key]


def _opt_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x)
    return s if s.strip() else None


@dataclass
class Resource:
    """
    A URL-based reference attached to a week.
    """

    id: int
    url: str
    title: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Resource":
        return cls(
            id=int(data["id"]),
            url=str(data.get("url", "")),
            title=_opt_str(data.get("title")),
            description=_opt_str(data.get("description")),
        )


@dataclass
class Week:
    """
    One unit of content + resources within a subject.

    Week numbers are unique within a subject but not necessarily contiguous,
    and the backend does not guarantee any storage order.
    """

    id: int
    week_number: int
    content: str = ""
    resources: List[Resource] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        # completion is derived, never stored
        return bool(self.content.strip())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Week":
        resources = data.get("resources") or []
        return cls(
            id=int(data["id"]),
            week_number=int(data["weekNumber"]),
            content=str(data.get("content") or ""),
            resources=[Resource.from_dict(r) for r in resources],
        )


@dataclass
class Subject:
    """
    A user-defined planning unit spanning an inclusive week range.
    """

    id: int
    name: str
    semester: str
    start_week: int
    end_week: int
    weeks: List[Week] = field(default_factory=list)
    semester_start_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        if self.end_week < self.start_week:
            raise ValueError(f"Invalid week range: {self.start_week}-{self.end_week}")

    @property
    def total_weeks(self) -> int:
        return self.end_week - self.start_week + 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subject":
        weeks = data.get("weeks") or []
        start_week = int(data.get("startWeek", 1))
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            semester=str(data.get("semester", "")),
            start_week=start_week,
            end_week=int(data.get("endWeek", start_week)),
            weeks=[Week.from_dict(w) for w in weeks],
            semester_start_date=_opt_str(data.get("semesterStartDate")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


def sorted_weeks(weeks: Iterable[Week]) -> list[Week]:
    """
    Return weeks ordered by week number (storage order is arbitrary).
    """
    return sorted(weeks, key=lambda w: w.week_number)


def completed_week_numbers(weeks: Iterable[Week]) -> list[int]:
    """
    Week numbers (not list indices) of all weeks with non-blank content.
    """
    return [w.week_number for w in weeks if w.is_complete]
