"""
Moodle integration module.

Handles communication with Moodle LMS via its web services API, or with
fixture data in demo mode.
"""

from .api import MoodleAPI, NOTIFICATION_FILTERS
from .cache import QueryCache
from .demo import DemoMoodleAPI
from .exceptions import (
    MoodleAPIError,
    MoodleAuthError,
    MoodleNetworkError,
    MoodleNotFoundError,
    MoodleValidationError,
)
from .factory import create_moodle_api
from .live import LiveMoodleAPI
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

__all__ = [
    # API client
    "MoodleAPI",
    "LiveMoodleAPI",
    "DemoMoodleAPI",
    "create_moodle_api",
    "QueryCache",
    "NOTIFICATION_FILTERS",
    # Exceptions
    "MoodleAPIError",
    "MoodleAuthError",
    "MoodleNetworkError",
    "MoodleNotFoundError",
    "MoodleValidationError",
    # Models
    "CalendarEvent",
    "FileUpload",
    "Forum",
    "ForumDiscussion",
    "ForumPost",
    "GradeItem",
    "GradeOverview",
    "MoodleAssignment",
    "MoodleCourse",
    "MoodleUser",
    "Notification",
    "Quiz",
    "QuizAttempt",
    "QuizQuestion",
    "SearchResult",
    "UserProfile",
]
