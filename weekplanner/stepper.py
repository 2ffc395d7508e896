"""
Step navigation.

A horizontal row of week steps that may be wider than its viewport. The
widget is an explicit state machine with two states:

    idle  --scroll()-->  scrolling  --(cooldown elapsed)-->  idle

Layout is computed in abstract width units (terminal columns for the
interactive UI). All geometry helpers are pure functions so they can be
tested without any rendering.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

STATE_IDLE = "idle"
STATE_SCROLLING = "scrolling"

STEP_WIDTH = 14
CONNECTOR_WIDTH = 4

# keeps the scroll affordances from flickering right at the edges
SCROLL_THRESHOLD = 2
SCROLL_FRACTION = 0.8
SCROLL_COOLDOWN = 0.5


@dataclass(frozen=True)
class ScrollMetrics:
    scroll_left: float
    scroll_width: float
    client_width: float


@dataclass(frozen=True)
class StepView:
    week_number: int
    is_current: bool
    is_completed: bool
    connector_completed: Optional[bool]  # None for the last step


def scroll_flags(metrics: ScrollMetrics, threshold: float = SCROLL_THRESHOLD) -> tuple[bool, bool]:
    """
    Return (can_scroll_left, can_scroll_right) for the given viewport metrics.
    """
    can_left = metrics.scroll_left > threshold
    can_right = metrics.scroll_left < metrics.scroll_width - metrics.client_width - threshold
    return can_left, can_right


def connector_completed(steps: list[int], index: int, current: int, completed: Iterable[int]) -> bool:
    """
    Style of the connector between steps[index] and steps[index + 1].

    Completed if the next step is completed, or if its week number lies
    before the current week (weeks already passed count as done).
    """
    nxt = steps[index + 1]
    return nxt in set(completed) or nxt < current


def center_offset(
    elem_left: float, elem_right: float, view_left: float, view_right: float
) -> Optional[float]:
    """
    Scroll delta that centers the element in the viewport, or None when the
    element is already fully visible.
    """
    if elem_left >= view_left and elem_right <= view_right:
        return None
    elem_center = (elem_left + elem_right) / 2
    view_center = (view_left + view_right) / 2
    return elem_center - view_center


class Stepper:
    """
    Stateful step navigation for one mounted instance.

    `on_select` receives the week number of the chosen step, so callers can
    map back to non-contiguous week lists (e.g. [17, 18, 19]).
    """

    def __init__(
        self,
        week_numbers: Iterable[int],
        current: int,
        completed: Iterable[int] = (),
        on_select: Optional[Callable[[int], None]] = None,
        client_width: float = 80,
        step_width: float = STEP_WIDTH,
        connector_width: float = CONNECTOR_WIDTH,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.steps: list[int] = list(week_numbers) or [1]
        self.current = current
        self.completed: set[int] = set(completed)
        self.on_select = on_select
        self.client_width = float(client_width)
        self.step_width = float(step_width)
        self.connector_width = float(connector_width)
        self._clock = clock

        self.scroll_left = 0.0
        self.can_scroll_left = False
        self.can_scroll_right = False
        self._scrolling_until: Optional[float] = None

        self.check_scroll()
        self.scroll_to_current()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def scroll_width(self) -> float:
        n = len(self.steps)
        return n * self.step_width + (n - 1) * self.connector_width

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.scroll_width - self.client_width)

    def metrics(self) -> ScrollMetrics:
        return ScrollMetrics(self.scroll_left, self.scroll_width, self.client_width)

    def element_bounds(self, index: int) -> tuple[float, float]:
        left = index * (self.step_width + self.connector_width)
        return left, left + self.step_width

    def visible_indexes(self) -> list[int]:
        """
        Indexes of steps at least partially inside the viewport.
        """
        view_left = self.scroll_left
        view_right = self.scroll_left + self.client_width
        out: list[int] = []
        for i in range(len(self.steps)):
            left, right = self.element_bounds(i)
            if right > view_left and left < view_right:
                out.append(i)
        return out

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        if self._scrolling_until is not None and self._clock() < self._scrolling_until:
            return STATE_SCROLLING
        return STATE_IDLE

    @property
    def is_scrolling(self) -> bool:
        return self.state == STATE_SCROLLING

    def check_scroll(self) -> None:
        """
        Recompute the derived scroll flags. Called after every layout change.
        """
        self.can_scroll_left, self.can_scroll_right = scroll_flags(self.metrics())

    def _scroll_by(self, delta: float) -> None:
        self.scroll_left = min(max(self.scroll_left + delta, 0.0), self.max_scroll)
        self.check_scroll()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def scroll(self, direction: str) -> bool:
        """
        Scroll by 80% of the viewport width. Ignored while a previous scroll
        is still cooling down. Returns True if the request was applied.
        """
        if direction not in ("left", "right"):
            raise ValueError(f"Invalid scroll direction: {direction!r}")
        if self.is_scrolling:
            return False

        amount = self.client_width * SCROLL_FRACTION
        self._scrolling_until = self._clock() + SCROLL_COOLDOWN
        self._scroll_by(-amount if direction == "left" else amount)
        return True

    def scroll_to_current(self) -> bool:
        """
        Center the current step if it is not fully visible.
        Returns True if the viewport moved.
        """
        if self.current not in self.steps:
            return False
        left, right = self.element_bounds(self.steps.index(self.current))
        offset = center_offset(left, right, self.scroll_left, self.scroll_left + self.client_width)
        if offset is None:
            return False
        before = self.scroll_left
        self._scroll_by(offset)
        return self.scroll_left != before

    def set_current(self, week_number: int) -> bool:
        """
        Change the current step. Only a change triggers scroll-to-current.
        """
        if week_number == self.current:
            return False
        self.current = week_number
        return self.scroll_to_current()

    def set_steps(self, week_numbers: Iterable[int], completed: Iterable[int] = ()) -> None:
        self.steps = list(week_numbers) or [1]
        self.completed = set(completed)
        self._scroll_by(0)

    def resize(self, client_width: float) -> None:
        self.client_width = float(client_width)
        self._scroll_by(0)

    def select(self, week_number: int) -> bool:
        """
        Invoke the selection callback with the week number (not the index).
        """
        if self.on_select is None or week_number not in self.steps:
            return False
        self.on_select(week_number)
        return True

    # ------------------------------------------------------------------
    # Rendering data
    # ------------------------------------------------------------------

    def steps_view(self) -> list[StepView]:
        out: list[StepView] = []
        last = len(self.steps) - 1
        for i, week in enumerate(self.steps):
            out.append(
                StepView(
                    week_number=week,
                    is_current=week == self.current,
                    is_completed=week in self.completed,
                    connector_completed=(
                        None if i == last else connector_completed(self.steps, i, self.current, self.completed)
                    ),
                )
            )
        return out
