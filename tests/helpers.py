"""Builders for grading test data."""
from datetime import date, datetime

from grades.context import AttendanceContext
from grades.models import (
    AbsenceRequest,
    AbsenceRequestState,
    Attendance,
    Event,
    EventType,
    Semester,
)
from grades.snapshot import SemesterSnapshot

MEMBER = "member@example.com"
OTHER_MEMBER = "other@example.com"

# 2024-09-01 is a Sunday
SEMESTER = Semester(
    name="Fall 2024",
    start_date=date(2024, 8, 25),
    end_date=date(2024, 12, 14),
    gig_requirement=5,
    current=True,
)
NOW = datetime(2024, 12, 1, 12, 0)


def make_event(
    event_id: int,
    event_type: EventType,
    call_time: datetime,
    points: float = 10,
    release_time: datetime | None = None,
    gig_count: bool = False,
) -> Event:
    return Event(
        id=event_id,
        name=f"{event_type.value} {event_id}",
        semester=SEMESTER.name,
        type=event_type,
        call_time=call_time,
        points=points,
        release_time=release_time,
        counts_toward_gig_requirement=gig_count,
    )


def make_attendance(
    event: Event,
    should_attend: bool = True,
    did_attend: bool = False,
    minutes_late: int = 0,
    member: str = MEMBER,
) -> Attendance:
    return Attendance(
        member=member,
        event=event.id,
        should_attend=should_attend,
        did_attend=did_attend,
        confirmed=should_attend,
        minutes_late=minutes_late,
    )


def make_absence_request(
    event: Event,
    state: AbsenceRequestState = AbsenceRequestState.APPROVED,
    member: str = MEMBER,
) -> AbsenceRequest:
    return AbsenceRequest(
        member=member,
        event=event.id,
        state=state,
        reason="Out of town",
        time=datetime(2024, 8, 30, 9, 0),
    )


def make_context(
    should_attend: bool = True,
    did_attend: bool = False,
    minutes_late: int = 0,
    absence_state: AbsenceRequestState | None = None,
) -> AttendanceContext:
    attendance = Attendance(
        member=MEMBER,
        event=1,
        should_attend=should_attend,
        did_attend=did_attend,
        minutes_late=minutes_late,
    )
    request = None
    if absence_state is not None:
        request = AbsenceRequest(member=MEMBER, event=1, state=absence_state)
    return AttendanceContext(attendance=attendance, absence_request=request)


def make_snapshot(
    events: list[Event],
    attendance: list[Attendance],
    absence_requests: list[AbsenceRequest] = (),
    members: tuple[str, ...] = (MEMBER,),
    semester: Semester = SEMESTER,
) -> SemesterSnapshot:
    rows: dict[str, dict[int, Attendance]] = {}
    for row in attendance:
        rows.setdefault(row.member, {})[row.event] = row

    requests: dict[str, dict[int, AbsenceRequest]] = {}
    for request in absence_requests:
        requests.setdefault(request.member, {})[request.event] = request

    return SemesterSnapshot(
        semester=semester,
        events=tuple(events),
        attendance=rows,
        absence_requests=requests,
        active_members=frozenset(members),
    )
