"""
Domain records consumed by the grading engine.

These are plain, immutable snapshots of what the membership backend stores:
events, attendance rows, absence requests and semesters. The engine never
mutates them.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .errors import ConfigurationError


class EventType(Enum):
    """Closed set of event types the grading rules know about."""
    REHEARSAL = "Rehearsal"
    SECTIONAL = "Sectional"
    VOLUNTEER_GIG = "Volunteer Gig"
    TUTTI_GIG = "Tutti Gig"
    OMBUDS = "Ombuds"
    OTHER = "Other"

    @property
    def is_gig(self) -> bool:
        return self in (EventType.VOLUNTEER_GIG, EventType.TUTTI_GIG)

    @classmethod
    def from_string(cls, value: str) -> "EventType":
        """
        Parse an event type name.

        Accepts the display names ("Volunteer Gig") as well as the enum
        names ("VOLUNTEER_GIG", "volunteer_gig").

        Examples:
            >>> EventType.from_string("Tutti Gig")
            <EventType.TUTTI_GIG: 'Tutti Gig'>
            >>> EventType.from_string("sectional")
            <EventType.SECTIONAL: 'Sectional'>
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("_", " ")
        for event_type in cls:
            if event_type.value.lower() == normalized:
                return event_type
        raise ConfigurationError(f"Unknown event type: {value!r}")


class AbsenceRequestState(Enum):
    """Review state of an absence request."""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    @classmethod
    def from_string(cls, value: str) -> "AbsenceRequestState":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown absence request state: {value!r}") from None


@dataclass(frozen=True)
class Event:
    """A scheduled event that members may be expected to attend."""
    id: int
    name: str
    semester: str
    type: EventType
    call_time: datetime
    points: float
    release_time: datetime | None = None
    counts_toward_gig_requirement: bool = False
    default_attend: bool = True
    location: str | None = None

    @property
    def is_gig(self) -> bool:
        return self.type.is_gig

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "semester": self.semester,
            "type": self.type.value,
            "call_time": self.call_time.isoformat(),
            "release_time": self.release_time.isoformat() if self.release_time else None,
            "points": self.points,
            "gig_count": self.counts_toward_gig_requirement,
            "default_attend": self.default_attend,
            "location": self.location,
        }


@dataclass(frozen=True)
class Attendance:
    """A member's attendance record for one event."""
    member: str
    event: int
    should_attend: bool
    did_attend: bool = False
    confirmed: bool = False
    minutes_late: int = 0


@dataclass(frozen=True)
class AbsenceRequest:
    """A member's request to be excused from one event."""
    member: str
    event: int
    state: AbsenceRequestState
    reason: str = ""
    time: datetime | None = None

    @property
    def approved(self) -> bool:
        return self.state == AbsenceRequestState.APPROVED


@dataclass(frozen=True)
class Semester:
    """A semester and its volunteer gig requirement."""
    name: str
    start_date: date
    end_date: date
    gig_requirement: int = 5
    current: bool = False
