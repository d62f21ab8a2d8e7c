"""
Attendance grading engine.

This package turns a semester's events, attendance records and absence
requests into a member's running grade with a per-event explanation:
- models: events, attendance, absence requests, semesters
- context: per-event attendance context for one member
- week: Sunday-aligned week buckets and weekly facts
- classifier: grade change rules for a single event
- grader: the semester fold and the public compute_grades operation
- schema: pydantic models validating the YAML semester files
- snapshot: loaded semester data built from a validated file
- store: YAML-backed semester store
- clock: sources of the current time
"""

from .errors import (
    EngineError,
    DataIntegrityError,
    ConfigurationError,
    ClockDependencyError,
    UnknownSemesterError,
    UnknownMemberError,
)

from .models import (
    EventType,
    Event,
    Attendance,
    AbsenceRequest,
    AbsenceRequestState,
    Semester,
)

from .context import (
    AttendanceContext,
    build_attendance_contexts,
)

from .week import (
    WeeklyContext,
    WeekOfAttendances,
    partition_weeks,
    analyze_week,
    sunday_on_or_before,
)

from .classifier import (
    classify,
    is_bonus_event,
    points_lost_for_lateness,
    clamp_grade,
)

from .snapshot import (
    SemesterSnapshot,
    parse_snapshot,
)

from .grader import (
    GradeChange,
    EventWithGradeChange,
    GradeReport,
    GradeItem,
    fold_grades,
    compute_grades,
    compute_grades_for_members,
)

from .store import CURRENT_SEMESTER, SemesterStore

from .clock import (
    SystemClock,
    FixedClock,
    resolve_now,
)

__all__ = [
    # errors
    "EngineError",
    "DataIntegrityError",
    "ConfigurationError",
    "ClockDependencyError",
    "UnknownSemesterError",
    "UnknownMemberError",
    # models
    "EventType",
    "Event",
    "Attendance",
    "AbsenceRequest",
    "AbsenceRequestState",
    "Semester",
    # context
    "AttendanceContext",
    "build_attendance_contexts",
    # week
    "WeeklyContext",
    "WeekOfAttendances",
    "partition_weeks",
    "analyze_week",
    "sunday_on_or_before",
    # classifier
    "classify",
    "is_bonus_event",
    "points_lost_for_lateness",
    "clamp_grade",
    # snapshot
    "SemesterSnapshot",
    "parse_snapshot",
    # grader
    "GradeChange",
    "EventWithGradeChange",
    "GradeReport",
    "GradeItem",
    "fold_grades",
    "compute_grades",
    "compute_grades_for_members",
    # store
    "CURRENT_SEMESTER",
    "SemesterStore",
    # clock
    "SystemClock",
    "FixedClock",
    "resolve_now",
]
