"""Listings and submissions read from, and written to, the MariaDB schema."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field

from ...config import Settings
from ...utils.logging import get_logger
from .. import queries
from ..db import ConnectionFactory, DatabaseError, execute, fetch_all
from ..dependencies import get_connect_db, get_settings
from ..errors import error_response

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["database"])


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assignment_id: int | None = Field(default=None, alias="assignmentId")
    user_id: int | None = Field(default=None, alias="userId")
    submission_text: str | None = Field(default=None, alias="submissionText")
    files: list[Any] = Field(default_factory=list)


def _database_failure(action: str, error: DatabaseError):
    logger.error(f"Database error ({action}): {error}")
    return error_response(500, f"Failed to {action}", str(error))


@router.get("/assignments")
def list_assignments(
    course_id: str | None = Query(default=None, alias="courseId"),
    user_id: str | None = Query(default=None, alias="userId"),
    settings: Settings = Depends(get_settings),
    connect: ConnectionFactory = Depends(get_connect_db),
):
    """Assignments of one course, ordered by due date."""
    if not course_id:
        return error_response(400, "Course ID required")

    user = user_id or settings.default_user_id
    logger.debug(f"Loading assignments of course {course_id} for user {user}")

    try:
        rows = fetch_all(connect, queries.ASSIGNMENTS_FOR_COURSE, [course_id])
    except DatabaseError as e:
        return _database_failure("fetch assignments", e)

    return {
        "success": True,
        "assignments": jsonable_encoder(rows),
        "message": "Assignments loaded from database",
    }


@router.post("/assignments")
def create_submission(
    payload: SubmissionRequest | None = None,
    connect: ConnectionFactory = Depends(get_connect_db),
):
    """Record a submission, replacing any earlier one by the same user."""
    if payload is None or not payload.assignment_id or not payload.user_id:
        return error_response(400, "Assignment ID and User ID required")

    try:
        execute(
            connect,
            queries.UPSERT_SUBMISSION,
            [payload.assignment_id, payload.user_id, payload.submission_text or ""],
        )
    except DatabaseError as e:
        return _database_failure("submit assignment", e)

    logger.info(f"Stored submission of assignment {payload.assignment_id} by user {payload.user_id}")
    return {"success": True, "message": "Assignment submitted successfully"}


@router.get("/courses")
def list_courses(connect: ConnectionFactory = Depends(get_connect_db)):
    try:
        rows = fetch_all(connect, queries.VISIBLE_COURSES)
    except DatabaseError as e:
        return _database_failure("fetch courses", e)

    return {
        "success": True,
        "courses": jsonable_encoder(rows),
        "message": "Courses loaded from database",
    }


@router.get("/search")
def search(
    q: str = "",
    course_id: str | None = Query(default=None, alias="courseId"),
    connect: ConnectionFactory = Depends(get_connect_db),
):
    sql, params = queries.search_contents(q, course_id)
    try:
        rows = fetch_all(connect, sql, params)
    except DatabaseError as e:
        logger.error(f"Database error (search): {e}")
        return error_response(500, "Search failed", str(e))

    return {
        "success": True,
        "results": jsonable_encoder(rows),
        "query": q,
        "message": "Search completed",
    }
