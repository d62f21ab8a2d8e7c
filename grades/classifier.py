"""
Grade change rules for a single event.

This module contains pure functions deciding how attending, missing or
arriving late to an event changes a member's running grade. Nothing here
reads the clock; the current time is always passed in.
"""
from datetime import datetime

from .context import AttendanceContext
from .models import Event, EventType
from .week import WeeklyContext

MAX_GRADE = 100.0
MIN_GRADE = 0.0

# Used when an event has no usable release time
DEFAULT_EVENT_DURATION_MINUTES = 60.0


def format_points(points: float) -> str:
    """
    Format a point value without a trailing ".0".

    Examples:
        >>> format_points(10.0)
        '10'
        >>> format_points(2.5)
        '2.5'
    """
    return f"{points:g}"


def clamp_grade(grade: float) -> float:
    """
    Restrict a grade to [0, 100].

    Examples:
        >>> clamp_grade(104.0)
        100.0
        >>> clamp_grade(-3.0)
        0.0
    """
    return max(MIN_GRADE, min(MAX_GRADE, grade))


def event_duration_minutes(event: Event) -> float:
    """Length of the event in minutes, 60 when the release time is missing or not after call."""
    if event.release_time is None or event.release_time <= event.call_time:
        return DEFAULT_EVENT_DURATION_MINUTES
    return (event.release_time - event.call_time).total_seconds() / 60


def points_lost_for_lateness(event: Event, minutes_late: int) -> float:
    """
    Points lost for arriving late, proportional to the share of the event missed.

    The result is not capped at the event's point value.

    Examples:
        >>> from datetime import datetime
        >>> from grades.models import Event, EventType
        >>> rehearsal = Event(1, "Rehearsal", "Fall 2024", EventType.REHEARSAL,
        ...                   datetime(2024, 9, 3, 18, 0), 10)
        >>> points_lost_for_lateness(rehearsal, 15)
        2.5
    """
    return (minutes_late / event_duration_minutes(event)) * event.points


def is_bonus_event(event: Event, context: AttendanceContext, week: WeeklyContext) -> bool:
    """
    Whether attending the event adds points instead of only avoiding a deduction.

    A sectional counts as a bonus once the week's first sectional was attended.
    """
    if event.type in (EventType.VOLUNTEER_GIG, EventType.OMBUDS):
        return True
    if event.type == EventType.OTHER:
        return not context.should_attend
    if event.type == EventType.SECTIONAL:
        return week.attended_first_sectional
    return False


def event_hasnt_happened_yet() -> tuple[float, str]:
    return 0.0, "Event hasn't happened yet"


def attended_normal_event() -> tuple[float, str]:
    return 0.0, "No point change for attending required event"


def didnt_need_to_attend() -> tuple[float, str]:
    return 0.0, "Did not attend and not expected to"


def missed_rehearsal(event: Event) -> tuple[float, str]:
    """Gig attended during a week whose rehearsal was missed without excuse."""
    if event.type == EventType.VOLUNTEER_GIG:
        return (
            0.0,
            f"{format_points(event.points)}-point bonus denied because this week's rehearsal was missed",
        )
    return -event.points, "Full deduction for unexcused absence from this week's rehearsal"


def late_for_event(
    event: Event,
    context: AttendanceContext,
    grade: float,
    bonus_event: bool,
) -> tuple[float, str]:
    """
    Grade change for attending an event late.

    Args:
        event: The event attended
        context: The member's attendance context for the event
        grade: Running grade before this event
        bonus_event: Whether the event is a bonus event for the member

    Returns:
        Tuple of (change, reason)
    """
    lost = points_lost_for_lateness(event, context.minutes_late)
    points = format_points(event.points)

    if bonus_event:
        if grade + event.points - lost > MAX_GRADE:
            return (
                MAX_GRADE - grade,
                f"Event would grant {points}-point bonus, "
                f"but {lost:.2f} points deducted for lateness (capped at 100%)",
            )
        return (
            event.points - lost,
            f"Event would grant {points}-point bonus, but {lost:.2f} points deducted for lateness",
        )

    if context.should_attend:
        return -lost, f"{lost:.2f} points deducted for lateness to required event"

    return attended_normal_event()


def attended_bonus_event(event: Event, grade: float) -> tuple[float, str]:
    """Volunteer gigs, ombuds events and extra sectionals earn points back."""
    if grade + event.points > MAX_GRADE:
        return (
            MAX_GRADE - grade,
            f"Event grants {format_points(event.points)}-point bonus, but grade is capped at 100%",
        )
    return event.points, "Full bonus awarded for attending volunteer or extra event"


def should_have_attended(
    event: Event,
    context: AttendanceContext,
    week: WeeklyContext,
    now: datetime,
) -> tuple[float, str]:
    """
    Grade change for missing an event the member was expected at.

    Checks run in priority order; the first match decides.
    """
    if event.type == EventType.OMBUDS:
        return 0.0, "You do not lose points for missing an ombuds event"

    if event.type == EventType.SECTIONAL:
        if week.attended_sectional:
            return 0.0, "No deduction because you attended a different sectional this week"

        first_missed = week.first_missed_sectional_time
        if first_missed is not None and first_missed < event.call_time:
            return 0.0, "No deduction because you already lost points for one sectional this week"

        last_sectional = week.last_sectional_time
        if last_sectional is not None and last_sectional > event.call_time and last_sectional > now:
            return 0.0, "No deduction because not all sectionals occurred yet"

    if context.approved_absence:
        return 0.0, "No deduction because an absence request was submitted and approved"

    return -event.points, "Full deduction for unexcused absence from event"


def classify(
    event: Event,
    context: AttendanceContext,
    week: WeeklyContext,
    grade: float,
    now: datetime,
) -> tuple[float, str]:
    """
    Decide the grade change for one event.

    Args:
        event: The event being graded
        context: The member's attendance context for the event
        week: Facts about the event's week
        grade: Running grade before this event
        now: Current time; events after it are not graded yet

    Returns:
        Tuple of (change, reason). The change is not clamped here.
    """
    if event.call_time > now:
        return event_hasnt_happened_yet()

    if context.did_attend:
        if week.missed_rehearsal and event.is_gig:
            return missed_rehearsal(event)
        bonus_event = is_bonus_event(event, context, week)
        if context.minutes_late > 0 and event.type != EventType.OMBUDS:
            return late_for_event(event, context, grade, bonus_event)
        if bonus_event:
            return attended_bonus_event(event, grade)
        return attended_normal_event()

    if context.should_attend:
        return should_have_attended(event, context, week, now)

    return didnt_need_to_attend()
