"""
Pydantic models for the YAML semester files.

Field names mirror the kebab-case keys of the files through aliases.
Booleans and numbers are strict: a quoted "false" or a points value of
"ten" is rejected instead of being coerced.
"""
from datetime import date, datetime, time
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from .errors import ConfigurationError
from .models import AbsenceRequest, AbsenceRequestState, Attendance, Event, EventType, Semester


def parse_datetime(value: Any) -> datetime:
    """
    Parse a timestamp into a naive local datetime.

    Timezone-aware values are converted to local time; dates become midnight.

    Examples:
        >>> parse_datetime("2024-09-03T18:00:00")
        datetime.datetime(2024, 9, 3, 18, 0)
        >>> parse_datetime(date(2024, 9, 3))
        datetime.datetime(2024, 9, 3, 0, 0)
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise ConfigurationError(f"Invalid timestamp: {value!r}") from None
    else:
        raise ConfigurationError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def parse_date(value: Any) -> date:
    """Parse a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ConfigurationError(f"Invalid date: {value!r}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid date: {value!r}") from None


Timestamp = Annotated[datetime, BeforeValidator(parse_datetime)]
CalendarDate = Annotated[date, BeforeValidator(parse_date)]
Points = Union[StrictInt, StrictFloat]
LateMinutes = Annotated[StrictInt, Field(ge=0)]


class FileModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SemesterEntry(FileModel):
    name: StrictStr
    start_date: CalendarDate = Field(alias="start-date")
    end_date: CalendarDate = Field(alias="end-date")
    gig_requirement: StrictInt = Field(default=5, alias="gig-requirement", ge=0)
    current: Optional[StrictBool] = None

    def to_semester(self, current: bool) -> Semester:
        return Semester(
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            gig_requirement=self.gig_requirement,
            current=current if self.current is None else self.current,
        )


class EventEntry(FileModel):
    id: StrictInt
    name: Optional[StrictStr] = None
    type: EventType
    call_time: Timestamp = Field(alias="call-time")
    release_time: Optional[Timestamp] = Field(default=None, alias="release-time")
    points: Points = 0
    gig_count: StrictBool = Field(default=False, alias="gig-count")
    default_attend: StrictBool = Field(default=True, alias="default-attend")
    location: Optional[StrictStr] = None

    @field_validator("type", mode="before")
    @classmethod
    def _event_type(cls, value):
        return EventType.from_string(value)

    def to_event(self, semester: str) -> Event:
        return Event(
            id=self.id,
            name=self.name or "",
            semester=semester,
            type=self.type,
            call_time=self.call_time,
            release_time=self.release_time,
            points=float(self.points),
            counts_toward_gig_requirement=self.gig_count,
            default_attend=self.default_attend,
            location=self.location,
        )


class AttendanceEntry(FileModel):
    member: StrictStr
    event: StrictInt
    should_attend: StrictBool = Field(default=True, alias="should-attend")
    did_attend: StrictBool = Field(default=False, alias="did-attend")
    confirmed: StrictBool = False
    minutes_late: Optional[LateMinutes] = Field(default=0, alias="minutes-late")

    def to_attendance(self) -> Attendance:
        return Attendance(
            member=self.member,
            event=self.event,
            should_attend=self.should_attend,
            did_attend=self.did_attend,
            confirmed=self.confirmed,
            minutes_late=self.minutes_late or 0,
        )


class AbsenceRequestEntry(FileModel):
    member: StrictStr
    event: StrictInt
    state: AbsenceRequestState = AbsenceRequestState.PENDING
    reason: Optional[StrictStr] = None
    time: Optional[Timestamp] = None

    @field_validator("state", mode="before")
    @classmethod
    def _state(cls, value):
        return AbsenceRequestState.from_string(value)

    def to_absence_request(self) -> AbsenceRequest:
        return AbsenceRequest(
            member=self.member,
            event=self.event,
            state=self.state,
            reason=self.reason or "",
            time=self.time,
        )


# Top-level structure of a semester file
class SemesterFile(FileModel):
    semester: SemesterEntry
    members: List[StrictStr] = Field(default_factory=list)
    events: List[EventEntry] = Field(default_factory=list)
    attendance: List[AttendanceEntry] = Field(default_factory=list)
    absence_requests: List[AbsenceRequestEntry] = Field(default_factory=list, alias="absence-requests")

    @field_validator("members", "events", "attendance", "absence_requests", mode="before")
    @classmethod
    def _missing_list(cls, value):
        return [] if value is None else value


def describe_validation_error(error: ValidationError) -> str:
    """
    Render a pydantic error as one line naming each bad field.

    For example:
        "events.0.points: Input should be a valid integer; attendance.2.did-attend: ..."
    """
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    )


def load_semester_file(data: Any) -> SemesterFile:
    """
    Validate a parsed semester file.

    Raises:
        ConfigurationError: The file does not match the expected structure
    """
    try:
        return SemesterFile.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid semester file: {describe_validation_error(e)}") from e
