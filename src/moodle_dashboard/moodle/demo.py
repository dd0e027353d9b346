"""Demo-mode Moodle client serving fixtures after a simulated network delay."""

import random
import time
from typing import Any

from ..config.models import MoodleConfig
from ..utils.logging import get_logger
from . import fixtures
from .api import MoodleAPI, filter_notifications
from .models import (
    CalendarEvent,
    FileUpload,
    Forum,
    ForumDiscussion,
    ForumPost,
    GradeItem,
    GradeOverview,
    MoodleAssignment,
    MoodleCourse,
    Notification,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    SearchResult,
    UserProfile,
)

logger = get_logger(__name__)


class DemoMoodleAPI(MoodleAPI):
    """Moodle client backed by static fixtures; never touches the network."""

    def __init__(self, config: MoodleConfig, latency_scale: float = 1.0):
        """
        Args:
            config: Session config (base URL and token are ignored)
            latency_scale: Multiplier for the simulated delays; 0 disables them
        """
        super().__init__(config)
        self.latency_scale = latency_scale
        self._submitted: set[int] = set()
        logger.info("Demo mode: using fixture data")

    def _delay(self, seconds: float) -> None:
        if self.latency_scale > 0:
            time.sleep(seconds * self.latency_scale)

    @staticmethod
    def _new_id() -> int:
        return int(time.time() * 1000)

    def get_site_info(self) -> dict[str, Any]:
        self._delay(0.3)
        return fixtures.demo_site_info()

    def get_user_courses(self, userid: int | None = None) -> list[MoodleCourse]:
        self._delay(0.4)
        return list(fixtures.DEMO_COURSES)

    def get_course_contents(self, courseid: int) -> list[dict[str, Any]]:
        self._delay(0.4)
        return fixtures.demo_course_contents(courseid)

    def get_courses_by_field(self, field: str = "ids", value: str = "") -> list[MoodleCourse]:
        self._delay(0.4)
        courses = list(fixtures.DEMO_COURSES)
        if not value:
            return courses
        if field in ("id", "ids"):
            wanted = {int(v) for v in str(value).split(",") if v.strip()}
            return [c for c in courses if c.id in wanted]
        if field == "shortname":
            return [c for c in courses if c.shortname == value]
        return courses

    def get_assignments(self, courseids: list[int]) -> list[MoodleAssignment]:
        self._delay(0.6)
        wanted = set(courseids)
        return [a for a in fixtures.DEMO_ASSIGNMENTS if a.course in wanted]

    def get_submission_status(self, assignid: int, userid: int | None = None) -> dict[str, Any]:
        self._delay(0.3)
        status = "submitted" if assignid in self._submitted else "new"
        return {
            "lastattempt": {
                "submission": {"assignment": assignid, "userid": userid or fixtures.DEMO_USER.id, "status": status},
                "cansubmit": True,
                "caneditowner": True,
            },
            "warnings": [],
        }

    def upload_file(self, file: FileUpload, itemid: int = 0) -> dict[str, Any]:
        self._delay(0.5)
        return {
            "component": "user",
            "filearea": "draft",
            "itemid": itemid or self._new_id(),
            "filepath": "/",
            "filename": file.filename,
        }

    def submit_assignment(
        self,
        assignmentid: int,
        files: list[FileUpload],
        submissiontext: str | None = None,
    ) -> dict[str, Any]:
        self._delay(1.0)
        self._submitted.add(assignmentid)
        logger.info(
            f"Demo: assignment {assignmentid} submitted with files {[f.filename for f in files]}"
        )
        return {"success": True, "message": "Assignment submitted successfully (Demo Mode)"}

    def search_content(self, query: str, courseid: int | None = None) -> list[SearchResult]:
        self._delay(0.8)
        term = query.lower()
        return [
            r
            for r in fixtures.DEMO_SEARCH_RESULTS
            if (term in r.title.lower() or term in r.content.lower())
            and (not courseid or r.courseid == courseid)
        ]

    def get_user_grades(self, courseid: int, userid: int) -> list[GradeItem]:
        self._delay(0.4)
        return fixtures.demo_grade_items()

    def get_grade_overview(self, userid: int) -> GradeOverview:
        self._delay(0.3)
        return fixtures.DEMO_GRADE_OVERVIEW

    def get_calendar_events(
        self,
        timestart: int,
        timeend: int,
        courseid: int | None = None,
    ) -> list[CalendarEvent]:
        self._delay(0.5)
        return fixtures.demo_calendar_events(courseid)

    def get_forums(self, courseid: int) -> list[Forum]:
        self._delay(0.4)
        return fixtures.demo_forums(courseid)

    def get_forum_discussions(self, forumid: int) -> list[ForumDiscussion]:
        self._delay(0.3)
        return fixtures.demo_forum_discussions(forumid)

    def get_forum_posts(self, discussionid: int) -> list[ForumPost]:
        self._delay(0.3)
        return fixtures.demo_forum_posts(discussionid)

    def create_forum_post(
        self,
        discussionid: int,
        message: str,
        parentid: int | None = None,
        subject: str | None = None,
    ) -> dict[str, Any]:
        self._delay(0.8)
        return {"success": True, "postid": self._new_id()}

    def create_forum_discussion(self, forumid: int, subject: str, message: str) -> dict[str, Any]:
        self._delay(1.0)
        return {"success": True, "discussionid": self._new_id()}

    def get_quizzes(self, courseid: int) -> list[Quiz]:
        self._delay(0.5)
        return fixtures.demo_quizzes(courseid)

    def get_quiz_attempts(self, quizid: int, userid: int) -> list[QuizAttempt]:
        self._delay(0.3)
        return fixtures.demo_quiz_attempts(quizid, userid)

    def get_quiz_questions(self, attemptid: int, page: int = 0) -> list[QuizQuestion]:
        self._delay(0.4)
        return list(fixtures.DEMO_QUIZ_QUESTIONS)

    def start_quiz_attempt(self, quizid: int) -> QuizAttempt:
        self._delay(0.8)
        return QuizAttempt(
            id=self._new_id(),
            quiz=quizid,
            userid=fixtures.DEMO_USER.id,
            attempt=1,
            state="inprogress",
            timestart=time.time(),
        )

    def submit_quiz_attempt(self, attemptid: int, answers: dict[int, Any]) -> dict[str, Any]:
        self._delay(1.2)
        return {"success": True, "grade": random.randint(60, 99)}

    def get_user_profile(self, userid: int) -> UserProfile:
        self._delay(0.3)
        return fixtures.demo_user_profile()

    def update_user_profile(self, userid: int, updates: dict[str, Any]) -> dict[str, Any]:
        self._delay(0.6)
        return {"success": True}

    def upload_profile_image(self, userid: int, file: FileUpload) -> dict[str, Any]:
        self._delay(1.0)
        return {"success": True, "url": f"{fixtures.DEMO_BASE_URL}/pluginfile.php/user/icon/{file.filename}"}

    def get_notifications(self, userid: int, filter: str = "all") -> list[Notification]:
        self._delay(0.2)
        return filter_notifications(fixtures.demo_notifications(), filter)

    def mark_notification_read(self, notificationid: int) -> dict[str, Any]:
        self._delay(0.2)
        return {"success": True}

    def mark_all_notifications_read(self, userid: int) -> dict[str, Any]:
        self._delay(0.5)
        return {"success": True}

    def delete_notification(self, notificationid: int, userid: int | None = None) -> dict[str, Any]:
        self._delay(0.3)
        return {"success": True}
