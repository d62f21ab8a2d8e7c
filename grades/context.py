"""
Per-event attendance context for one member.

Joins every event of a semester to the member's attendance record and
optional absence request so the grading rules can look at a single object.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from .errors import DataIntegrityError
from .models import AbsenceRequest, Attendance, Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceContext:
    """Attendance record and absence request of one member at one event."""
    attendance: Attendance
    absence_request: AbsenceRequest | None = None

    @property
    def should_attend(self) -> bool:
        return self.attendance.should_attend

    @property
    def did_attend(self) -> bool:
        return self.attendance.did_attend

    @property
    def confirmed(self) -> bool:
        return self.attendance.confirmed

    @property
    def minutes_late(self) -> int:
        return self.attendance.minutes_late

    @property
    def approved_absence(self) -> bool:
        return self.absence_request is not None and self.absence_request.approved

    @property
    def deny_credit(self) -> bool:
        """Expected, absent and not excused."""
        return self.should_attend and not self.did_attend and not self.approved_absence


def build_attendance_contexts(
    member: str,
    events: Iterable[Event],
    attendance: Mapping[int, Attendance],
    absence_requests: Mapping[int, AbsenceRequest],
    is_active: bool = True,
) -> list[tuple[Event, AttendanceContext]]:
    """
    Pair each event with the member's attendance context.

    Args:
        member: Member identifier (email)
        events: Events of the semester, in the order they should be returned
        attendance: The member's attendance rows keyed by event id
        absence_requests: The member's absence requests keyed by event id
        is_active: Whether the member is active during the semester

    Returns:
        List of (event, context) pairs, one per event

    Raises:
        DataIntegrityError: An active member has no attendance row for an event
    """
    pairs = []
    for event in events:
        row = attendance.get(event.id)
        if row is None:
            if is_active:
                logger.error(f"No attendance record for active member {member} at event {event.id}")
                raise DataIntegrityError(
                    f"No attendance for member {member} at event with id {event.id}"
                )
            # Inactive members have no obligations during the semester
            row = Attendance(member=member, event=event.id, should_attend=False)

        pairs.append((event, AttendanceContext(
            attendance=row,
            absence_request=absence_requests.get(event.id),
        )))

    known_ids = {event.id for event, _ in pairs}
    stray = sorted(set(attendance) - known_ids)
    if stray:
        logger.error(f"Attendance for member {member} references unknown events: {stray}")
        raise DataIntegrityError(
            f"Attendance for member {member} references events outside the semester: {stray}"
        )
    orphaned = sorted(set(absence_requests) - known_ids)
    if orphaned:
        logger.warning(f"Ignoring absence requests of {member} for unknown events: {orphaned}")

    return pairs
