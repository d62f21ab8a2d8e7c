"""
Semester grade computation.

This module folds the per-event rules over a member's semester, week by
week and in call-time order, producing the final grade together with an
explanation for every event.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator

from .classifier import MAX_GRADE, classify, clamp_grade
from .context import AttendanceContext, build_attendance_contexts
from .errors import ClockDependencyError, UnknownSemesterError
from .models import Event, EventType
from .snapshot import SemesterSnapshot
from .week import WeeklyContext, analyze_week, partition_weeks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GradeChange:
    """Grade change incurred by one event."""
    reason: str
    change: float
    partial_score: float  # Grade after this event

    def to_dict(self) -> dict:
        return {
            "reason": self.reason,
            "change": self.change,
            "partial_score": self.partial_score,
        }


@dataclass(frozen=True)
class EventWithGradeChange:
    """An event and the grade change it caused."""
    event: Event
    change: GradeChange

    def to_dict(self) -> dict:
        return {"event": self.event.to_dict(), "change": self.change.to_dict()}


@dataclass
class GradeReport:
    """A member's grade for a semester with the full audit trail."""
    grade: float
    events_with_changes: list[EventWithGradeChange] = field(default_factory=list)
    volunteer_gigs_attended: int = 0

    def gig_requirement_met(self, requirement: int) -> bool:
        return self.volunteer_gigs_attended >= requirement

    def to_dict(self) -> dict:
        return {
            "grade": self.grade,
            "events_with_changes": [entry.to_dict() for entry in self.events_with_changes],
            "volunteer_gigs_attended": self.volunteer_gigs_attended,
        }


@dataclass(frozen=True)
class GradeItem:
    """One step of the fold: an event with its member and week context."""
    event: Event
    context: AttendanceContext
    week: WeeklyContext


@dataclass(frozen=True)
class FoldState:
    """Accumulator threaded through the fold."""
    grade: float = MAX_GRADE
    volunteer_gigs_attended: int = 0


def counts_as_volunteer_gig(item: GradeItem) -> bool:
    """Attended a volunteer gig that counts, during a week whose rehearsal was not missed."""
    return (
        item.context.did_attend
        and not item.week.missed_rehearsal
        and item.event.type == EventType.VOLUNTEER_GIG
        and item.event.counts_toward_gig_requirement
    )


def grade_step(state: FoldState, item: GradeItem, now: datetime) -> tuple[FoldState, EventWithGradeChange]:
    """
    Apply one event to the running state.

    Args:
        state: Grade and gig count before the event
        item: The event with its contexts
        now: Current time

    Returns:
        Tuple of (new state, audit entry for the event)
    """
    change, reason = classify(item.event, item.context, item.week, state.grade, now)
    partial_score = clamp_grade(state.grade + change)
    gigs = state.volunteer_gigs_attended + (1 if counts_as_volunteer_gig(item) else 0)

    logger.debug(
        f"Event {item.event.id} ({item.event.type.value}): {change:+.2f} -> {partial_score:.2f} ({reason})"
    )

    new_state = FoldState(grade=partial_score, volunteer_gigs_attended=gigs)
    entry = EventWithGradeChange(
        event=item.event,
        change=GradeChange(reason=reason, change=change, partial_score=partial_score),
    )
    return new_state, entry


def fold_grades(items: Iterable[GradeItem], now: datetime) -> GradeReport:
    """
    Left-fold grade_step over the items in the order given.

    The fold is order sensitive: each step sees the clamped grade of the
    previous one. Callers are responsible for chronological ordering.
    """
    state = FoldState()
    entries = []
    for item in items:
        state, entry = grade_step(state, item, now)
        entries.append(entry)

    return GradeReport(
        grade=state.grade,
        events_with_changes=entries,
        volunteer_gigs_attended=state.volunteer_gigs_attended,
    )


def chronological(events: Iterable[Event]) -> list[Event]:
    """Sort events by call time, breaking ties by id."""
    return sorted(events, key=lambda event: (event.call_time, event.id))


def grade_items(member: str, snapshot: SemesterSnapshot) -> Iterator[GradeItem]:
    """
    Flatten a member's semester into fold items, week by week.

    Weekly context is computed once per week and shared by its events.
    """
    pairs = build_attendance_contexts(
        member,
        chronological(snapshot.events),
        snapshot.attendance_for(member),
        snapshot.absence_requests_for(member),
        is_active=snapshot.is_active(member),
    )

    for week in partition_weeks(pairs, snapshot.semester.start_date, snapshot.semester.end_date):
        weekly = analyze_week(week.events)
        for event, context in week:
            yield GradeItem(event=event, context=context, week=weekly)


def compute_grades(
    member: str,
    snapshot: SemesterSnapshot | None,
    now: datetime | None,
) -> GradeReport:
    """
    Compute a member's attendance grade for a semester.

    Args:
        member: Member identifier (email)
        snapshot: Loaded semester data, None if no semester was selected
        now: Current time, supplied by the caller

    Returns:
        GradeReport with the final grade and per-event changes

    Raises:
        ConfigurationError: No semester was selected
        ClockDependencyError: No current time was supplied
        DataIntegrityError: The member's attendance records are incomplete
    """
    if snapshot is None:
        raise UnknownSemesterError("No current semester set")
    if now is None:
        raise ClockDependencyError("Current time is required to compute grades")

    # Materialize first so a data error leaves no partial report behind
    items = list(grade_items(member, snapshot))
    report = fold_grades(items, now)

    logger.info(
        f"Computed grade {report.grade:.2f} for {member} in {snapshot.semester.name} "
        f"({len(report.events_with_changes)} events, {report.volunteer_gigs_attended} volunteer gigs)"
    )
    return report


def compute_grades_for_members(
    members: Iterable[str],
    snapshot: SemesterSnapshot | None,
    now: datetime | None,
) -> dict[str, GradeReport]:
    """
    Grade several members from one loaded snapshot.

    Each member is graded independently; any failure aborts the whole batch.
    """
    return {member: compute_grades(member, snapshot, now) for member in members}
