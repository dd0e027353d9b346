"""
Moodle client interface.

`MoodleAPI` names every logical operation the dashboard needs. Two
implementations exist: `LiveMoodleAPI` talks to Moodle's Web Services REST
API, `DemoMoodleAPI` serves fixtures. Callers obtain one through
`create_moodle_api()` and never branch on demo mode themselves.

Moodle Web Services Documentation:
https://docs.moodle.org/dev/Web_service_API_functions
"""

from abc import ABC, abstractmethod
from typing import Any

from ..config.models import MoodleConfig
from ..utils.logging import get_logger
from .exceptions import MoodleAPIError
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
    MoodleUser,
    Notification,
    Quiz,
    QuizAttempt,
    QuizQuestion,
    SearchResult,
    UserProfile,
)

logger = get_logger(__name__)

NOTIFICATION_FILTERS = ("all", "unread", "read")


class MoodleAPI(ABC):
    """
    Operations offered by a Moodle session.

    Usage:
        api = create_moodle_api(MoodleConfig(base_url="https://moodle.example.edu", token="..."))
        courses = api.get_user_courses()
    """

    def __init__(self, config: MoodleConfig):
        self.config = config

    @property
    def demo_mode(self) -> bool:
        return self.config.demo_mode

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self) -> "MoodleAPI":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Authentication and user
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_site_info(self) -> dict[str, Any]:
        """Site and current-user information (core_webservice_get_site_info)."""

    def get_user_info(self) -> MoodleUser:
        """The user the token belongs to."""
        return MoodleUser.from_site_info(self.get_site_info())

    def validate_token(self) -> bool:
        """Check that the configured token is accepted by the site."""
        try:
            self.get_site_info()
        except MoodleAPIError as e:
            logger.warning(f"Token validation failed: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_user_courses(self, userid: int | None = None) -> list[MoodleCourse]:
        """Courses the user is enrolled in."""

    @abstractmethod
    def get_course_contents(self, courseid: int) -> list[dict[str, Any]]:
        """Sections of a course with their modules, as Moodle returns them."""

    @abstractmethod
    def get_courses_by_field(self, field: str = "ids", value: str = "") -> list[MoodleCourse]:
        """Courses matching a field (``id``, ``ids``, ``shortname``, ...)."""

    # -------------------------------------------------------------------------
    # Assignments and files
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_assignments(self, courseids: list[int]) -> list[MoodleAssignment]:
        """Assignments of the given courses."""

    @abstractmethod
    def get_submission_status(self, assignid: int, userid: int | None = None) -> dict[str, Any]:
        """Submission status of an assignment for a user."""

    @abstractmethod
    def upload_file(self, file: FileUpload, itemid: int = 0) -> dict[str, Any]:
        """Upload a file into a draft area and return the upload record."""

    @abstractmethod
    def submit_assignment(
        self,
        assignmentid: int,
        files: list[FileUpload],
        submissiontext: str | None = None,
    ) -> dict[str, Any]:
        """Upload files and save them, with optional online text, as a submission."""

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    @abstractmethod
    def search_content(self, query: str, courseid: int | None = None) -> list[SearchResult]:
        """Search site content, optionally restricted to one course."""

    # -------------------------------------------------------------------------
    # Grades
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_user_grades(self, courseid: int, userid: int) -> list[GradeItem]:
        """Grade items of one course for a user."""

    @abstractmethod
    def get_grade_overview(self, userid: int) -> GradeOverview:
        """Summary of the user's grades across courses."""

    # -------------------------------------------------------------------------
    # Calendar
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_calendar_events(
        self,
        timestart: int,
        timeend: int,
        courseid: int | None = None,
    ) -> list[CalendarEvent]:
        """Events between two timestamps, optionally for one course."""

    # -------------------------------------------------------------------------
    # Forums
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_forums(self, courseid: int) -> list[Forum]:
        """Forums of a course."""

    @abstractmethod
    def get_forum_discussions(self, forumid: int) -> list[ForumDiscussion]:
        """Discussions of a forum."""

    @abstractmethod
    def get_forum_posts(self, discussionid: int) -> list[ForumPost]:
        """Posts of a discussion."""

    @abstractmethod
    def create_forum_post(
        self,
        discussionid: int,
        message: str,
        parentid: int | None = None,
        subject: str | None = None,
    ) -> dict[str, Any]:
        """Reply inside a discussion."""

    @abstractmethod
    def create_forum_discussion(self, forumid: int, subject: str, message: str) -> dict[str, Any]:
        """Start a new discussion in a forum."""

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_quizzes(self, courseid: int) -> list[Quiz]:
        """Quizzes of a course."""

    @abstractmethod
    def get_quiz_attempts(self, quizid: int, userid: int) -> list[QuizAttempt]:
        """A user's attempts at a quiz."""

    @abstractmethod
    def get_quiz_questions(self, attemptid: int, page: int = 0) -> list[QuizQuestion]:
        """Questions of one page of an attempt."""

    @abstractmethod
    def start_quiz_attempt(self, quizid: int) -> QuizAttempt:
        """Start a new attempt."""

    @abstractmethod
    def submit_quiz_attempt(self, attemptid: int, answers: dict[int, Any]) -> dict[str, Any]:
        """Save answers (keyed by question slot) and finish the attempt."""

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_user_profile(self, userid: int) -> UserProfile:
        """Full profile of a user."""

    @abstractmethod
    def update_user_profile(self, userid: int, updates: dict[str, Any]) -> dict[str, Any]:
        """Update profile fields of a user."""

    @abstractmethod
    def upload_profile_image(self, userid: int, file: FileUpload) -> dict[str, Any]:
        """Replace the user's picture."""

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_notifications(self, userid: int, filter: str = "all") -> list[Notification]:
        """Popup notifications, optionally only the read or unread ones."""

    @abstractmethod
    def mark_notification_read(self, notificationid: int) -> dict[str, Any]:
        """Mark one notification as read."""

    @abstractmethod
    def mark_all_notifications_read(self, userid: int) -> dict[str, Any]:
        """Mark every notification of a user as read."""

    @abstractmethod
    def delete_notification(self, notificationid: int, userid: int | None = None) -> dict[str, Any]:
        """Delete a notification."""


def check_notification_filter(filter: str) -> None:
    """Reject notification filters other than all/unread/read."""
    if filter not in NOTIFICATION_FILTERS:
        raise ValueError(f"Unknown notification filter {filter!r}; expected one of {', '.join(NOTIFICATION_FILTERS)}")


def filter_notifications(notifications: list[Notification], filter: str) -> list[Notification]:
    """Keep notifications matching the read-state filter."""
    check_notification_filter(filter)
    if filter == "unread":
        return [n for n in notifications if not n.read]
    if filter == "read":
        return [n for n in notifications if n.read]
    return list(notifications)
