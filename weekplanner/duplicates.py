"""
Repeated content detection.

Given the weeks of a subject, find content that appears in two or more weeks.
Rule:
    normalized = content.strip().lower()
    only normalized strings longer than MIN_CONTENT_LENGTH are considered
    grouping is by exact equality (no fuzzy matching)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from weekplanner.model import Week

# Short strings like "tbd" or "no class" repeat legitimately
MIN_CONTENT_LENGTH = 20


@dataclass
class RepeatedContent:
    normalized_content: str
    week_numbers: list[int]


def normalize_content(content: str) -> str:
    return (content or "").strip().lower()


def find_repeated_content(weeks: Iterable[Week]) -> list[RepeatedContent]:
    """
    Return one group per normalized content shared by >= 2 distinct week numbers.

    Groups are ordered by first occurrence in `weeks`; week numbers inside a
    group keep input order.
    """
    # dicts keep insertion order -> deterministic output in one pass
    groups: dict[str, list[int]] = {}
    for week in weeks:
        normalized = normalize_content(week.content)
        if len(normalized) <= MIN_CONTENT_LENGTH:
            continue
        numbers = groups.setdefault(normalized, [])
        if week.week_number not in numbers:
            numbers.append(week.week_number)

    return [
        RepeatedContent(normalized_content=text, week_numbers=numbers)
        for text, numbers in groups.items()
        if len(numbers) > 1
    ]
