"""
Loaded semester data handed to the grading engine.

A SemesterSnapshot holds everything the engine needs for one semester:
the events, every member's attendance rows and absence requests, and the
set of active members. ``parse_snapshot`` builds one from the parsed YAML
structure of a semester file, validated by the models in ``schema``.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .errors import ConfigurationError, DataIntegrityError
from .models import AbsenceRequest, Attendance, Event, Semester
from .schema import load_semester_file

logger = logging.getLogger(__name__)

EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class SemesterSnapshot:
    """Read-only view of one semester's grading data."""
    semester: Semester
    events: tuple[Event, ...]
    attendance: Mapping[str, Mapping[int, Attendance]] = field(default_factory=dict)
    absence_requests: Mapping[str, Mapping[int, AbsenceRequest]] = field(default_factory=dict)
    active_members: frozenset[str] = frozenset()

    def attendance_for(self, member: str) -> Mapping[int, Attendance]:
        return self.attendance.get(member, EMPTY)

    def absence_requests_for(self, member: str) -> Mapping[int, AbsenceRequest]:
        return self.absence_requests.get(member, EMPTY)

    def is_active(self, member: str) -> bool:
        return member in self.active_members

    def has_member(self, member: str) -> bool:
        """Active this semester, or has at least one attendance row."""
        return self.is_active(member) or member in self.attendance

    @property
    def members(self) -> list[str]:
        return sorted(self.active_members)


def parse_snapshot(data: Any, current: bool = False) -> SemesterSnapshot:
    """
    Build a SemesterSnapshot from a parsed semester file.

    Args:
        data: Parsed YAML with 'semester', 'members', 'events',
              'attendance' and 'absence-requests' keys
        current: Whether the index marks this semester as current

    Returns:
        SemesterSnapshot

    Raises:
        ConfigurationError: Missing keys, wrongly typed values or unknown enum values
        DataIntegrityError: Duplicate attendance records or absence requests
    """
    if not isinstance(data, Mapping) or "semester" not in data:
        raise ConfigurationError("Invalid semester file structure: missing 'semester' key")

    semester_file = load_semester_file(data)
    semester = semester_file.semester.to_semester(current)
    events = tuple(entry.to_event(semester.name) for entry in semester_file.events)

    event_ids = [event.id for event in events]
    if len(event_ids) != len(set(event_ids)):
        duplicates = sorted({x for x in event_ids if event_ids.count(x) > 1})
        raise ConfigurationError(f"Duplicate event ids in {semester.name}: {duplicates}")

    attendance: dict[str, dict[int, Attendance]] = {}
    for entry in semester_file.attendance:
        record = entry.to_attendance()
        member_rows = attendance.setdefault(record.member, {})
        if record.event in member_rows:
            raise DataIntegrityError(
                f"Duplicate attendance for member {record.member} at event with id {record.event}"
            )
        member_rows[record.event] = record

    absence_requests: dict[str, dict[int, AbsenceRequest]] = {}
    for entry in semester_file.absence_requests:
        request = entry.to_absence_request()
        member_requests = absence_requests.setdefault(request.member, {})
        if request.event in member_requests:
            raise DataIntegrityError(
                f"Duplicate absence request for member {request.member} at event with id {request.event}"
            )
        member_requests[request.event] = request

    active_members = frozenset(semester_file.members)

    logger.debug(
        f"Parsed semester {semester.name}: {len(events)} events, "
        f"{len(active_members)} active members, {len(attendance)} members with attendance"
    )

    return SemesterSnapshot(
        semester=semester,
        events=events,
        attendance=MappingProxyType({m: MappingProxyType(rows) for m, rows in attendance.items()}),
        absence_requests=MappingProxyType(
            {m: MappingProxyType(rows) for m, rows in absence_requests.items()}
        ),
        active_members=active_members,
    )
