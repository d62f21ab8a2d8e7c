"""
Week buckets and the weekly facts the grading rules depend on.

Rehearsal and sectional rules are scoped to Sunday-aligned weeks: missing
the week's rehearsal voids gig credit, and only one missed sectional per
week is penalized. The facts are computed once per week here instead of
rescanning the week for every event.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterator, Sequence

from .context import AttendanceContext
from .models import Event, EventType

logger = logging.getLogger(__name__)

WEEK = timedelta(weeks=1)

EventWithContext = tuple[Event, AttendanceContext]


@dataclass(frozen=True)
class WeeklyContext:
    """Aggregate attendance facts for one week."""
    missed_rehearsal: bool = False
    first_missed_sectional_time: datetime | None = None
    attended_first_sectional: bool = False
    last_sectional_time: datetime | None = None
    attended_sectional: bool = False


@dataclass
class WeekOfAttendances:
    """Events whose call date falls in [sunday, sunday + 7 days)."""
    sunday: date
    events: list[EventWithContext] = field(default_factory=list)

    @property
    def next_sunday(self) -> date:
        return self.sunday + WEEK

    def __iter__(self):
        return iter(self.events)

    def __len__(self):
        return len(self.events)


def sunday_on_or_before(day: date) -> date:
    """
    Return the Sunday starting the week that contains ``day``.

    Examples:
        >>> sunday_on_or_before(date(2024, 9, 4))  # a Wednesday
        datetime.date(2024, 9, 1)
        >>> sunday_on_or_before(date(2024, 9, 1))
        datetime.date(2024, 9, 1)
    """
    days_after_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_after_sunday)


def partition_weeks(
    events: Sequence[EventWithContext],
    semester_start: date,
    semester_end: date,
) -> Iterator[WeekOfAttendances]:
    """
    Split (event, context) pairs into consecutive Sunday-aligned weeks.

    The span runs from the first event's call date to the last event's call
    date, or from semester start to semester end when there are no events.
    Weeks without events are still produced so the sequence is contiguous.

    Args:
        events: (event, context) pairs sorted by call time
        semester_start: First day of the semester
        semester_end: Last day of the semester

    Yields:
        WeekOfAttendances in chronological order
    """
    if events:
        first_day = min(event.call_time.date() for event, _ in events)
        last_day = max(event.call_time.date() for event, _ in events)
    else:
        first_day, last_day = semester_start, semester_end

    first_sunday = sunday_on_or_before(first_day)
    buckets: dict[int, list[EventWithContext]] = {}
    for event, context in events:
        index = (event.call_time.date() - first_sunday).days // 7
        buckets.setdefault(index, []).append((event, context))

    sunday = first_sunday
    index = 0
    while sunday <= last_day:
        week = WeekOfAttendances(sunday=sunday, events=buckets.get(index, []))
        logger.debug(f"Week of {sunday.isoformat()}: {len(week)} event(s)")
        yield week
        sunday += WEEK
        index += 1


def analyze_week(week: Sequence[EventWithContext]) -> WeeklyContext:
    """
    Compute the weekly facts used by the classifier in a single pass.

    Args:
        week: The week's (event, context) pairs sorted by call time

    Returns:
        WeeklyContext for the week
    """
    missed_rehearsal = False
    first_missed_sectional_time = None
    first_sectional_attended = None
    last_sectional_time = None
    attended_sectional = False

    for event, context in week:
        if event.type == EventType.REHEARSAL:
            missed_rehearsal = missed_rehearsal or context.deny_credit
        elif event.type == EventType.SECTIONAL:
            if first_sectional_attended is None:
                first_sectional_attended = context.did_attend
            if context.deny_credit and first_missed_sectional_time is None:
                first_missed_sectional_time = event.call_time
            attended_sectional = attended_sectional or context.did_attend
            last_sectional_time = event.call_time

    return WeeklyContext(
        missed_rehearsal=missed_rehearsal,
        first_missed_sectional_time=first_missed_sectional_time,
        attended_first_sectional=bool(first_sectional_attended),
        last_sectional_time=last_sectional_time,
        attended_sectional=attended_sectional,
    )
