from contextlib import asynccontextmanager
from datetime import datetime
import os
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from dotenv import load_dotenv

from grades import (
    CURRENT_SEMESTER,
    ClockDependencyError,
    ConfigurationError,
    DataIntegrityError,
    EngineError,
    GradeReport,
    SemesterStore,
    SystemClock,
    UnknownMemberError,
    UnknownSemesterError,
    compute_grades,
    compute_grades_for_members,
    resolve_now,
)
from grades.schema import parse_datetime

# Read .env before any configuration below
load_dotenv()

# Configure logging to both file and console
LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

# Set log level from environment (default: INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, LOG_LEVEL, logging.INFO)

log_formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

root_logger = logging.getLogger()
root_logger.setLevel(log_level)

# Console handler (for docker logs)
console_handler = logging.StreamHandler()
console_handler.setFormatter(log_formatter)
root_logger.addHandler(console_handler)

# File handler (persistent logs)
log_file = os.path.join(LOG_DIR, "grades.log")
file_handler = logging.FileHandler(log_file, encoding='utf-8')
file_handler.setFormatter(log_formatter)
root_logger.addHandler(file_handler)

# Route uvicorn loggers through the same handlers
for uvicorn_logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
    logging.getLogger(uvicorn_logger_name).handlers = [console_handler, file_handler]

logger = logging.getLogger(__name__)
logger.info(f"Logging initialized. Log file: {log_file}")

SEMESTERS_DIR = os.getenv("SEMESTERS_DIR", "semesters")

clock = SystemClock()


def get_store() -> SemesterStore:
    return SemesterStore(SEMESTERS_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Validating semester index in {SEMESTERS_DIR}")
    problems = get_store().validate()
    if problems:
        for problem in problems:
            logger.error(f"❌ {problem}")
        raise RuntimeError("Semester index validation failed. Please fix index.yaml before starting.")
    logger.info("✅ Semester index validated successfully")
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class EventModel(BaseModel):
    id: int
    name: str
    semester: str
    type: str
    call_time: datetime
    release_time: datetime | None = None
    points: float
    gig_count: bool
    default_attend: bool
    location: str | None = None


class GradeChangeModel(BaseModel):
    reason: str
    change: float
    partial_score: float


class EventWithGradeChangeModel(BaseModel):
    event: EventModel
    change: GradeChangeModel


class GradesResponse(BaseModel):
    member: str
    semester: str
    grade: float
    events_with_changes: list[EventWithGradeChangeModel]
    volunteer_gigs_attended: int
    gig_requirement: int
    gig_requirement_met: bool


class SemesterSummary(BaseModel):
    name: str
    current: bool


def to_response(member: str, semester: str, gig_requirement: int, report: GradeReport) -> GradesResponse:
    return GradesResponse(
        member=member,
        semester=semester,
        gig_requirement=gig_requirement,
        gig_requirement_met=report.gig_requirement_met(gig_requirement),
        **report.to_dict(),
    )


def engine_error_to_http(e: EngineError) -> HTTPException:
    """Map grading engine errors to HTTP status codes."""
    if isinstance(e, (UnknownSemesterError, UnknownMemberError)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DataIntegrityError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (ConfigurationError, ClockDependencyError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


def request_time(now: datetime | None) -> datetime:
    """Use the caller's time if given, otherwise read the server clock once."""
    if now is not None:
        return parse_datetime(now)
    return resolve_now(None, clock)


@app.get("/semesters")
def list_semesters() -> list[SemesterSummary]:
    try:
        entries = get_store().entries()
    except EngineError as e:
        logger.error(f"Failed to load semester index: {e}")
        raise engine_error_to_http(e)

    return [
        SemesterSummary(name=entry["name"], current=bool(entry.get("current", False)))
        for entry in entries
        if "name" in entry
    ]


@app.get("/semesters/{semester}/members/{member}/grades")
def get_member_grades(semester: str, member: str, now: datetime | None = None) -> GradesResponse:
    """
    Compute a member's attendance grade.

    Use "current" as the semester to grade the semester marked current.
    """
    semester_name = None if semester == CURRENT_SEMESTER else semester
    logger.info(f"Grades requested - Semester: {semester}, Member: {member}, now: {now}")

    try:
        snapshot = get_store().get_snapshot(semester_name)
        if not snapshot.has_member(member):
            raise UnknownMemberError(f"No member {member} in {snapshot.semester.name}")
        report = compute_grades(member, snapshot, request_time(now))
    except EngineError as e:
        logger.warning(f"Grade computation failed for {member} in {semester}: {e}")
        raise engine_error_to_http(e)
    except Exception as e:
        logger.exception(f"Unexpected error during grade computation: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return to_response(member, snapshot.semester.name, snapshot.semester.gig_requirement, report)


@app.get("/semesters/{semester}/grades")
def get_semester_grades(semester: str, now: datetime | None = None) -> dict[str, GradesResponse]:
    """Compute grades for every active member of the semester."""
    semester_name = None if semester == CURRENT_SEMESTER else semester
    logger.info(f"Semester grades requested - Semester: {semester}, now: {now}")

    try:
        snapshot = get_store().get_snapshot(semester_name)
        reports = compute_grades_for_members(snapshot.members, snapshot, request_time(now))
    except EngineError as e:
        logger.warning(f"Grade computation failed for {semester}: {e}")
        raise engine_error_to_http(e)
    except Exception as e:
        logger.exception(f"Unexpected error during grade computation: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return {
        member: to_response(member, snapshot.semester.name, snapshot.semester.gig_requirement, report)
        for member, report in reports.items()
    }
