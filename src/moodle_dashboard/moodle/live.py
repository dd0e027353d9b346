"""
Moodle REST API client.

Translates every `MoodleAPI` operation into a call to Moodle's Web Services
REST endpoint. All functions handle authentication, error handling, and
response parsing.
"""

import time
from typing import Any

import httpx

from ..config.models import MoodleConfig
from ..utils.logging import get_logger
from .api import MoodleAPI, check_notification_filter, filter_notifications
from .exceptions import (
    MoodleAPIError,
    MoodleNetworkError,
    MoodleNotFoundError,
    error_from_payload,
)
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


class LiveMoodleAPI(MoodleAPI):
    """
    Moodle REST API client.

    Handles HTTP requests, authentication, and error handling for
    Moodle's Web Services API.

    Usage:
        api = LiveMoodleAPI(MoodleConfig(
            base_url="https://moodle.example.edu",
            token="your_webservice_token",
        ))
        courses = api.get_user_courses()
    """

    # Request timeout in seconds
    DEFAULT_TIMEOUT = 30.0

    # Moodle web service response format
    RESPONSE_FORMAT = "json"

    REST_PATH = "/webservice/rest/server.php"
    UPLOAD_PATH = "/webservice/upload.php"

    def __init__(
        self,
        config: MoodleConfig,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize the Moodle API client.

        Args:
            config: Base URL and web services token of the session
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            http_client: Pre-built client to use instead of creating one.
                It stays open on close(); its owner closes it.
        """
        super().__init__(config)
        self.base_url = config.base_url.rstrip("/")
        self.token = config.token
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._client: httpx.Client | None = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                headers={"Accept": "application/json"},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    # -------------------------------------------------------------------------
    # Core API Methods
    # -------------------------------------------------------------------------

    def _call(self, wsfunction: str, **params: Any) -> Any:
        """
        Make a call to the Moodle Web Services API.

        Args:
            wsfunction: The Moodle web service function name
            **params: Function parameters

        Returns:
            Parsed JSON response data

        Raises:
            MoodleAPIError: If the API returns an error
            MoodleAuthError: If authentication fails
            MoodleNetworkError: If the site cannot be reached
        """
        endpoint = f"{self.base_url}{self.REST_PATH}"

        request_params = {
            "wsfunction": wsfunction,
            "wstoken": self.token,
            "moodlewsrestformat": self.RESPONSE_FORMAT,
            **self._flatten_params(params),
        }

        logger.debug(f"Calling Moodle API: {wsfunction}")

        try:
            response = self.client.get(endpoint, params=request_params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling {wsfunction}: {e}")
            raise MoodleAPIError(f"HTTP {e.response.status_code}: {e.response.text}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Request error calling {wsfunction}: {e}")
            raise MoodleNetworkError(f"Network error: {e}") from e

        data = self._parse_json(response, wsfunction)
        self._check_error(data, wsfunction)
        return data

    def _parse_json(self, response: httpx.Response, wsfunction: str) -> Any:
        """Decode a response body, reporting non-JSON bodies as API errors."""
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {wsfunction}: {response.text[:200]}")
            raise MoodleAPIError(f"Invalid response from Moodle for {wsfunction}") from e

    def _flatten_params(self, params: dict[str, Any], prefix: str = "") -> dict[str, Any]:
        """
        Flatten nested parameters for Moodle's expected format.

        Moodle expects array parameters in the format:
        param[0][key] = value

        Args:
            params: Parameters to flatten
            prefix: Current parameter prefix

        Returns:
            Flattened parameter dictionary
        """
        result = {}

        for key, value in params.items():
            full_key = f"{prefix}[{key}]" if prefix else key

            if value is None:
                continue
            elif isinstance(value, dict):
                result.update(self._flatten_params(value, full_key))
            elif isinstance(value, (list, tuple)):
                for i, item in enumerate(value):
                    if isinstance(item, dict):
                        result.update(self._flatten_params(item, f"{full_key}[{i}]"))
                    elif isinstance(item, bool):
                        result[f"{full_key}[{i}]"] = int(item)
                    else:
                        result[f"{full_key}[{i}]"] = item
            elif isinstance(value, bool):
                result[full_key] = int(value)
            else:
                result[full_key] = value

        return result

    def _check_error(self, data: Any, wsfunction: str) -> None:
        """
        Check API response for errors.

        Args:
            data: Parsed response data
            wsfunction: The function that was called

        Raises:
            MoodleAuthError: If authentication/authorization failed
            MoodleNotFoundError: If resource was not found
            MoodleValidationError: If validation failed
            MoodleAPIError: For other errors
        """
        if not isinstance(data, dict):
            return

        if "exception" in data or "errorcode" in data:
            error = error_from_payload(data)
            logger.error(f"Moodle API error in {wsfunction}: [{error.error_code}] {error.message}")
            raise error

    # -------------------------------------------------------------------------
    # Authentication and user
    # -------------------------------------------------------------------------

    def get_site_info(self) -> dict[str, Any]:
        return self._call("core_webservice_get_site_info")

    def _current_user_id(self) -> int:
        return self.get_site_info().get("userid", 0)

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def get_user_courses(self, userid: int | None = None) -> list[MoodleCourse]:
        """
        Get the courses a user is enrolled in.

        Uses: core_enrol_get_users_courses

        Args:
            userid: The user ID. Defaults to the token's owner

        Returns:
            List of MoodleCourse objects
        """
        if userid is None:
            userid = self._current_user_id()

        logger.info(f"Fetching courses for user {userid}")
        response = self._call("core_enrol_get_users_courses", userid=userid)
        return [MoodleCourse.from_api_response(c) for c in response or []]

    def get_course_contents(self, courseid: int) -> list[dict[str, Any]]:
        logger.info(f"Fetching contents of course {courseid}")
        return self._call("core_course_get_contents", courseid=courseid) or []

    def get_courses_by_field(self, field: str = "ids", value: str = "") -> list[MoodleCourse]:
        response = self._call("core_course_get_courses_by_field", field=field, value=value)
        return [MoodleCourse.from_api_response(c) for c in response.get("courses", [])]

    # -------------------------------------------------------------------------
    # Assignments and files
    # -------------------------------------------------------------------------

    def get_assignments(self, courseids: list[int]) -> list[MoodleAssignment]:
        """
        Get assignments for a set of courses.

        Uses: mod_assign_get_assignments

        Args:
            courseids: Course IDs to look in

        Returns:
            Assignments of all requested courses, in Moodle's order
        """
        logger.info(f"Fetching assignments for courses {courseids}")
        response = self._call("mod_assign_get_assignments", courseids=list(courseids))

        assignments = []
        for course_data in response.get("courses", []):
            for assign_data in course_data.get("assignments", []):
                assign_data.setdefault("course", course_data.get("id", 0))
                assignments.append(MoodleAssignment.from_api_response(assign_data))

        logger.info(f"Found {len(assignments)} assignments")
        return assignments

    def get_submission_status(self, assignid: int, userid: int | None = None) -> dict[str, Any]:
        return self._call("mod_assign_get_submission_status", assignid=assignid, userid=userid)

    def upload_file(self, file: FileUpload, itemid: int = 0) -> dict[str, Any]:
        """
        Upload a file into the user's draft area.

        Uses: webservice/upload.php (multipart form)

        Args:
            file: The file to upload
            itemid: Draft area to add to; 0 lets Moodle allocate a new one

        Returns:
            Upload record; its ``itemid`` names the draft area
        """
        endpoint = f"{self.base_url}{self.UPLOAD_PATH}"
        form = {
            "token": self.token,
            "component": "user",
            "filearea": "draft",
            "itemid": str(itemid),
            "filepath": "/",
            "filename": file.filename,
        }

        logger.info(f"Uploading {file.filename} ({len(file.content)} bytes)")

        try:
            response = self.client.post(
                endpoint,
                data=form,
                files={"file_1": (file.filename, file.content, file.mimetype)},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error uploading {file.filename}: {e}")
            raise MoodleAPIError(f"HTTP {e.response.status_code}: {e.response.text}") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.error(f"Request error uploading {file.filename}: {e}")
            raise MoodleNetworkError(f"Network error: {e}") from e

        data = self._parse_json(response, "upload")
        if isinstance(data, dict) and ("exception" in data or "error" in data):
            error = error_from_payload(data)
            logger.error(f"Moodle upload error: {error.message}")
            raise error

        if isinstance(data, list):
            if not data:
                raise MoodleAPIError(f"Upload of {file.filename} returned no file record")
            return data[0]
        return data

    def submit_assignment(
        self,
        assignmentid: int,
        files: list[FileUpload],
        submissiontext: str | None = None,
    ) -> dict[str, Any]:
        """
        Submit files and/or online text for an assignment.

        Uses: webservice/upload.php + mod_assign_save_submission

        All files go into one draft area; the item id of the first upload is
        reused for the rest and then referenced by the submission.
        """
        logger.info(f"Submitting assignment {assignmentid} with {len(files)} file(s)")

        itemid = 0
        for file in files:
            record = self.upload_file(file, itemid=itemid)
            itemid = int(record.get("itemid", itemid))

        if not itemid:
            # Online text needs a draft area even without files
            itemid = int(time.time() * 1000)

        warnings = self._call(
            "mod_assign_save_submission",
            assignmentid=assignmentid,
            plugindata={
                "files_filemanager": itemid,
                "onlinetext_editor": {
                    "text": submissiontext or "",
                    "format": 1,
                    "itemid": itemid,
                },
            },
        ) or []

        if warnings:
            logger.warning(f"Submission of assignment {assignmentid} returned warnings: {warnings}")
            return {"success": False, "itemid": itemid, "warnings": warnings}
        return {
            "success": True,
            "itemid": itemid,
            "message": "Assignment submitted successfully",
            "warnings": [],
        }

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search_content(self, query: str, courseid: int | None = None) -> list[SearchResult]:
        """
        Search site content.

        Uses: core_search_get_results

        When global search fails (disabled, no permission, ...) and a course
        was given, falls back to matching that course's modules locally.
        """
        filters = {"courseids": [courseid]} if courseid else None

        try:
            response = self._call("core_search_get_results", q=query, filters=filters)
        except MoodleAPIError as e:
            if not courseid:
                raise
            logger.warning(f"Global search failed ({e}); searching contents of course {courseid}")
            contents = self.get_course_contents(courseid)
            return search_course_contents(contents, query, courseid)

        return [SearchResult.from_api_response(r) for r in response.get("results", [])]

    # -------------------------------------------------------------------------
    # Grades
    # -------------------------------------------------------------------------

    def get_user_grades(self, courseid: int, userid: int) -> list[GradeItem]:
        response = self._call("gradereport_user_get_grade_items", courseid=courseid, userid=userid)
        items = []
        for usergrade in response.get("usergrades", []):
            items.extend(GradeItem.from_api_response(item) for item in usergrade.get("gradeitems", []))
        return items

    def get_grade_overview(self, userid: int) -> GradeOverview:
        """
        Summarise a user's course totals.

        Uses: gradereport_overview_get_course_grades

        Moodle has no GPA or credits, so those stay None.
        """
        response = self._call("gradereport_overview_get_course_grades", userid=userid)
        grades = response.get("grades", [])

        raw = []
        for grade in grades:
            try:
                raw.append(float(grade.get("rawgrade")))
            except (TypeError, ValueError):
                continue

        return GradeOverview(
            gpa=None,
            total_courses=len(grades),
            average_grade=round(sum(raw) / len(raw), 2) if raw else None,
            credits_earned=None,
        )

    # -------------------------------------------------------------------------
    # Calendar
    # -------------------------------------------------------------------------

    def get_calendar_events(
        self,
        timestart: int,
        timeend: int,
        courseid: int | None = None,
    ) -> list[CalendarEvent]:
        response = self._call(
            "core_calendar_get_calendar_events",
            events={"courseids": [courseid]} if courseid else None,
            options={"timestart": int(timestart), "timeend": int(timeend)},
        )
        return [CalendarEvent.from_api_response(e) for e in response.get("events", [])]

    # -------------------------------------------------------------------------
    # Forums
    # -------------------------------------------------------------------------

    def get_forums(self, courseid: int) -> list[Forum]:
        response = self._call("mod_forum_get_forums_by_courses", courseids=[courseid])
        return [Forum.from_api_response(f) for f in response or []]

    def get_forum_discussions(self, forumid: int) -> list[ForumDiscussion]:
        response = self._call("mod_forum_get_forum_discussions", forumid=forumid)
        return [ForumDiscussion.from_api_response(d) for d in response.get("discussions", [])]

    def get_forum_posts(self, discussionid: int) -> list[ForumPost]:
        response = self._call(
            "mod_forum_get_discussion_posts",
            discussionid=discussionid,
            sortby="created",
            sortdirection="ASC",
        )
        return [ForumPost.from_api_response(p) for p in response.get("posts", [])]

    def create_forum_post(
        self,
        discussionid: int,
        message: str,
        parentid: int | None = None,
        subject: str | None = None,
    ) -> dict[str, Any]:
        """
        Reply inside a discussion.

        Uses: mod_forum_add_discussion_post

        Without ``parentid`` the reply goes to the discussion's first post.
        """
        if not parentid:
            posts = self.get_forum_posts(discussionid)
            if not posts:
                raise MoodleNotFoundError(f"Discussion {discussionid} has no posts", "cannotfindrecord")
            root = next((p for p in posts if not p.parent), posts[0])
            parentid = root.id
            subject = subject or f"Re: {root.subject}"

        response = self._call(
            "mod_forum_add_discussion_post",
            postid=parentid,
            subject=subject or "Re:",
            message=message,
            messageformat=1,
        )
        return {"success": True, "postid": response.get("postid")}

    def create_forum_discussion(self, forumid: int, subject: str, message: str) -> dict[str, Any]:
        response = self._call(
            "mod_forum_add_discussion",
            forumid=forumid,
            subject=subject,
            message=message,
            groupid=0,
        )
        return {"success": True, "discussionid": response.get("discussionid")}

    # -------------------------------------------------------------------------
    # Quizzes
    # -------------------------------------------------------------------------

    def get_quizzes(self, courseid: int) -> list[Quiz]:
        response = self._call("mod_quiz_get_quizzes_by_courses", courseids=[courseid])
        return [Quiz.from_api_response(q) for q in response.get("quizzes", [])]

    def get_quiz_attempts(self, quizid: int, userid: int) -> list[QuizAttempt]:
        response = self._call("mod_quiz_get_user_attempts", quizid=quizid, userid=userid, status="all")
        return [QuizAttempt.from_api_response(a) for a in response.get("attempts", [])]

    def get_quiz_questions(self, attemptid: int, page: int = 0) -> list[QuizQuestion]:
        response = self._call("mod_quiz_get_attempt_data", attemptid=attemptid, page=page)
        return [QuizQuestion.from_api_response(q) for q in response.get("questions", [])]

    def start_quiz_attempt(self, quizid: int) -> QuizAttempt:
        response = self._call("mod_quiz_start_attempt", quizid=quizid)
        return QuizAttempt.from_api_response(response["attempt"])

    def submit_quiz_attempt(self, attemptid: int, answers: dict[int, Any]) -> dict[str, Any]:
        """
        Save answers and finish an attempt.

        Uses: mod_quiz_get_attempt_data + mod_quiz_process_attempt

        Answer field names are ``q<uniqueid>:<slot>_answer``, so the attempt's
        question-usage id is looked up first.
        """
        attempt_data = self._call("mod_quiz_get_attempt_data", attemptid=attemptid, page=0)
        uniqueid = attempt_data.get("attempt", {}).get("uniqueid", attemptid)

        data = [
            {"name": f"q{uniqueid}:{slot}_answer", "value": value}
            for slot, value in answers.items()
        ]
        response = self._call(
            "mod_quiz_process_attempt",
            attemptid=attemptid,
            data=data,
            finishattempt=True,
        )
        return {"success": True, "state": response.get("state"), "warnings": response.get("warnings", [])}

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    def get_user_profile(self, userid: int) -> UserProfile:
        response = self._call("core_user_get_users_by_field", field="id", values=[userid])
        if not response:
            raise MoodleNotFoundError(f"User {userid} not found", "invalidrecord")
        return UserProfile.from_api_response(response[0])

    def update_user_profile(self, userid: int, updates: dict[str, Any]) -> dict[str, Any]:
        logger.info(f"Updating profile of user {userid}: {sorted(updates)}")
        response = self._call("core_user_update_users", users=[{**updates, "id": userid}])
        warnings = (response or {}).get("warnings", [])
        return {"success": not warnings, "warnings": warnings}

    def upload_profile_image(self, userid: int, file: FileUpload) -> dict[str, Any]:
        record = self.upload_file(file)
        response = self._call(
            "core_user_update_picture",
            draftitemid=record.get("itemid"),
            userid=userid,
        )
        return {"success": bool(response.get("success", True)), "url": response.get("profileimageurl")}

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def get_notifications(self, userid: int, filter: str = "all") -> list[Notification]:
        check_notification_filter(filter)
        response = self._call(
            "message_popup_get_popup_notifications",
            useridto=userid,
            newestfirst=True,
            limit=0,
            offset=0,
        )
        notifications = [Notification.from_api_response(n) for n in response.get("notifications", [])]
        return filter_notifications(notifications, filter)

    def mark_notification_read(self, notificationid: int) -> dict[str, Any]:
        self._call(
            "core_message_mark_notification_read",
            notificationid=notificationid,
            timeread=int(time.time()),
        )
        return {"success": True}

    def mark_all_notifications_read(self, userid: int) -> dict[str, Any]:
        response = self._call("core_message_mark_all_notifications_as_read", useridto=userid)
        return {"success": bool(response)}

    def delete_notification(self, notificationid: int, userid: int | None = None) -> dict[str, Any]:
        if userid is None:
            userid = self._current_user_id()
        response = self._call("core_message_delete_message", messageid=notificationid, userid=userid)
        return {"success": bool((response or {}).get("status", True))}


def search_course_contents(contents: list[dict[str, Any]], query: str, courseid: int) -> list[SearchResult]:
    """Modules of a course whose name or description contains ``query``, ignoring case."""
    term = query.lower()
    results = []
    for section in contents:
        for module in section.get("modules", []):
            name = (module.get("name") or "").lower()
            description = (module.get("description") or "").lower()
            if term in name or term in description:
                results.append(SearchResult.from_course_module(module, courseid))
    return results
