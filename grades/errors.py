"""Exceptions raised by the grading engine."""


class EngineError(Exception):
    """Base class for every grading engine failure."""


class DataIntegrityError(EngineError):
    """Source data violates an invariant the engine relies on.

    Raised when an active member has no attendance record for an event of
    the semester, or a record points at an event outside the semester.
    """


class ConfigurationError(EngineError):
    """No usable semester was selected, or the data uses unknown values."""


class ClockDependencyError(EngineError):
    """The caller did not supply the current time."""


class UnknownSemesterError(ConfigurationError):
    """The requested semester does not exist, or none is marked current."""


class UnknownMemberError(ConfigurationError):
    """The member is neither active in the semester nor has any attendance."""
