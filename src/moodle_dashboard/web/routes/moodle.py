"""Moodle operations on behalf of the logged-in user.

Reads go through the session's query cache; writes invalidate the reads
they affect.
"""

import time
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from ...moodle import NOTIFICATION_FILTERS, FileUpload
from ...utils.logging import get_logger
from ..dependencies import require_session
from ..sessions import SessionContext

logger = get_logger(__name__)

router = APIRouter(prefix="/moodle", tags=["moodle"])


class NewPostRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(min_length=1)
    parent_id: int | None = Field(default=None, alias="parentId")
    subject: str | None = None


class NewDiscussionRequest(BaseModel):
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)


class QuizAnswersRequest(BaseModel):
    answers: dict[int, Any]


class ProfileUpdateRequest(BaseModel):
    updates: dict[str, Any]


def _to_upload(file: UploadFile) -> FileUpload:
    return FileUpload(
        filename=file.filename or "upload",
        content=file.file.read(),
        mimetype=file.content_type or "application/octet-stream",
    )


def _parse_ids(value: str) -> list[int]:
    try:
        return [int(v) for v in value.split(",") if v.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="courseIds must be a comma-separated list of integers")


# -----------------------------------------------------------------------------
# User and courses
# -----------------------------------------------------------------------------


@router.get("/site-info")
def site_info(ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(("get_site_info",), ctx.api.get_site_info)


@router.get("/courses")
def courses(ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_user_courses", ctx.user_id),
        lambda: ctx.api.get_user_courses(ctx.user_id),
    )


@router.get("/courses/lookup")
def courses_by_field(
    field: str = "ids",
    value: str = "",
    ctx: SessionContext = Depends(require_session),
):
    """Courses matched on one field (``ids``, ``shortname``, ...); every course when value is empty."""
    return ctx.cache.get_or_fetch(
        ("get_courses_by_field", field, value),
        lambda: ctx.api.get_courses_by_field(field, value),
    )


@router.get("/courses/{courseid}/contents")
def course_contents(courseid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_course_contents", courseid),
        lambda: ctx.api.get_course_contents(courseid),
    )


# -----------------------------------------------------------------------------
# Assignments
# -----------------------------------------------------------------------------


@router.get("/assignments")
def assignments(
    course_ids: str | None = Query(default=None, alias="courseIds"),
    ctx: SessionContext = Depends(require_session),
):
    """Assignments of the given courses, or of every enrolled course."""
    if course_ids:
        ids = _parse_ids(course_ids)
    else:
        enrolled = ctx.cache.get_or_fetch(
            ("get_user_courses", ctx.user_id),
            lambda: ctx.api.get_user_courses(ctx.user_id),
        )
        ids = [c.id for c in enrolled]

    key = ("get_assignments", tuple(sorted(ids)))
    return ctx.cache.get_or_fetch(key, lambda: ctx.api.get_assignments(ids))


@router.get("/assignments/{assignid}/status")
def submission_status(assignid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_submission_status", assignid),
        lambda: ctx.api.get_submission_status(assignid, ctx.user_id),
    )


@router.post("/assignments/{assignmentid}/submit")
def submit_assignment(
    assignmentid: int,
    files: list[UploadFile] = File(default=[]),
    submissiontext: str | None = Form(default=None),
    ctx: SessionContext = Depends(require_session),
):
    if not files and not submissiontext:
        raise HTTPException(status_code=400, detail="Add a file or some text to submit")

    logger.info(f"User {ctx.user_id} submitting assignment {assignmentid} ({len(files)} file(s))")
    result = ctx.api.submit_assignment(assignmentid, [_to_upload(f) for f in files], submissiontext)
    ctx.cache.invalidate("get_assignments", "get_submission_status")
    return result


# -----------------------------------------------------------------------------
# Search and grades
# -----------------------------------------------------------------------------


@router.get("/search")
def search(
    q: str = Query(min_length=1),
    course_id: int | None = Query(default=None, alias="courseId"),
    ctx: SessionContext = Depends(require_session),
):
    return ctx.cache.get_or_fetch(
        ("search_content", q, course_id),
        lambda: ctx.api.search_content(q, course_id),
    )


@router.get("/grades/overview")
def grade_overview(ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_grade_overview", ctx.user_id),
        lambda: ctx.api.get_grade_overview(ctx.user_id),
    )


@router.get("/grades/{courseid}")
def grades(courseid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_user_grades", courseid, ctx.user_id),
        lambda: ctx.api.get_user_grades(courseid, ctx.user_id),
    )


# -----------------------------------------------------------------------------
# Calendar
# -----------------------------------------------------------------------------


@router.get("/calendar")
def calendar(
    timestart: int | None = None,
    timeend: int | None = None,
    course_id: int | None = Query(default=None, alias="courseId"),
    ctx: SessionContext = Depends(require_session),
):
    """Events in a window; defaults to the next 30 days."""
    if timestart is None:
        timestart = int(time.time())
    if timeend is None:
        timeend = timestart + 30 * 86400
    if timeend < timestart:
        raise HTTPException(status_code=400, detail="timeend must not be before timestart")

    return ctx.cache.get_or_fetch(
        ("get_calendar_events", timestart, timeend, course_id),
        lambda: ctx.api.get_calendar_events(timestart, timeend, course_id),
    )


# -----------------------------------------------------------------------------
# Forums
# -----------------------------------------------------------------------------


@router.get("/courses/{courseid}/forums")
def forums(courseid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(("get_forums", courseid), lambda: ctx.api.get_forums(courseid))


@router.get("/forums/{forumid}/discussions")
def forum_discussions(forumid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_forum_discussions", forumid),
        lambda: ctx.api.get_forum_discussions(forumid),
    )


@router.post("/forums/{forumid}/discussions")
def create_discussion(
    forumid: int,
    payload: NewDiscussionRequest,
    ctx: SessionContext = Depends(require_session),
):
    result = ctx.api.create_forum_discussion(forumid, payload.subject, payload.message)
    ctx.cache.invalidate("get_forum_discussions", "get_forums")
    return result


@router.get("/discussions/{discussionid}/posts")
def forum_posts(discussionid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_forum_posts", discussionid),
        lambda: ctx.api.get_forum_posts(discussionid),
    )


@router.post("/discussions/{discussionid}/posts")
def create_post(
    discussionid: int,
    payload: NewPostRequest,
    ctx: SessionContext = Depends(require_session),
):
    result = ctx.api.create_forum_post(discussionid, payload.message, payload.parent_id, payload.subject)
    ctx.cache.invalidate("get_forum_posts", "get_forum_discussions")
    return result


# -----------------------------------------------------------------------------
# Quizzes
# -----------------------------------------------------------------------------


@router.get("/courses/{courseid}/quizzes")
def quizzes(courseid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(("get_quizzes", courseid), lambda: ctx.api.get_quizzes(courseid))


@router.get("/quizzes/{quizid}/attempts")
def quiz_attempts(quizid: int, ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_quiz_attempts", quizid, ctx.user_id),
        lambda: ctx.api.get_quiz_attempts(quizid, ctx.user_id),
    )


@router.post("/quizzes/{quizid}/attempts")
def start_attempt(quizid: int, ctx: SessionContext = Depends(require_session)):
    attempt = ctx.api.start_quiz_attempt(quizid)
    ctx.cache.invalidate("get_quiz_attempts")
    return attempt


@router.get("/attempts/{attemptid}/questions")
def attempt_questions(
    attemptid: int,
    page: int = Query(default=0, ge=0),
    ctx: SessionContext = Depends(require_session),
):
    return ctx.cache.get_or_fetch(
        ("get_quiz_questions", attemptid, page),
        lambda: ctx.api.get_quiz_questions(attemptid, page),
    )


@router.post("/attempts/{attemptid}/submit")
def submit_attempt(
    attemptid: int,
    payload: QuizAnswersRequest,
    ctx: SessionContext = Depends(require_session),
):
    result = ctx.api.submit_quiz_attempt(attemptid, payload.answers)
    ctx.cache.invalidate("get_quiz_attempts", "get_user_grades", "get_grade_overview")
    return result


# -----------------------------------------------------------------------------
# Profile
# -----------------------------------------------------------------------------


@router.get("/profile")
def profile(ctx: SessionContext = Depends(require_session)):
    return ctx.cache.get_or_fetch(
        ("get_user_profile", ctx.user_id),
        lambda: ctx.api.get_user_profile(ctx.user_id),
    )


@router.patch("/profile")
def update_profile(payload: ProfileUpdateRequest, ctx: SessionContext = Depends(require_session)):
    if not payload.updates:
        raise HTTPException(status_code=400, detail="No profile fields to update")
    result = ctx.api.update_user_profile(ctx.user_id, payload.updates)
    ctx.cache.invalidate("get_user_profile")
    return result


@router.post("/profile/picture")
def upload_picture(file: UploadFile = File(...), ctx: SessionContext = Depends(require_session)):
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Profile picture must be an image")
    result = ctx.api.upload_profile_image(ctx.user_id, _to_upload(file))
    ctx.cache.invalidate("get_user_profile")
    return result


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------


@router.get("/notifications")
def notifications(filter: str = "all", ctx: SessionContext = Depends(require_session)):
    if filter not in NOTIFICATION_FILTERS:
        raise HTTPException(status_code=400, detail=f"filter must be one of {', '.join(NOTIFICATION_FILTERS)}")
    return ctx.cache.get_or_fetch(
        ("get_notifications", ctx.user_id, filter),
        lambda: ctx.api.get_notifications(ctx.user_id, filter),
    )


@router.post("/notifications/read-all")
def mark_all_read(ctx: SessionContext = Depends(require_session)):
    result = ctx.api.mark_all_notifications_read(ctx.user_id)
    ctx.cache.invalidate("get_notifications")
    return result


@router.post("/notifications/{notificationid}/read")
def mark_read(notificationid: int, ctx: SessionContext = Depends(require_session)):
    result = ctx.api.mark_notification_read(notificationid)
    ctx.cache.invalidate("get_notifications")
    return result


@router.delete("/notifications/{notificationid}")
def delete_notification(notificationid: int, ctx: SessionContext = Depends(require_session)):
    result = ctx.api.delete_notification(notificationid, ctx.user_id)
    ctx.cache.invalidate("get_notifications")
    return result
