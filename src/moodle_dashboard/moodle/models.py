"""Moodle data models.

Records are flat snapshots of Moodle web-service responses. Field names
follow Moodle's JSON so ``to_dict()`` yields what the front end consumes.
"""

from dataclasses import asdict, dataclass, field
from typing import Any


class MoodleRecord:
    """Mixin giving every record a JSON-ready dict form."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileUpload:
    """A file held in memory, ready to be sent to Moodle's upload endpoint."""

    filename: str
    content: bytes
    mimetype: str = "application/octet-stream"


@dataclass(frozen=True)
class MoodleUser(MoodleRecord):
    """The authenticated user."""

    id: int
    username: str
    firstname: str
    lastname: str
    fullname: str
    email: str
    profileimageurl: str | None = None

    @classmethod
    def from_site_info(cls, data: dict[str, Any]) -> "MoodleUser":
        """Create a MoodleUser from a core_webservice_get_site_info response."""
        return cls(
            id=data.get("userid", 0),
            username=data.get("username", ""),
            firstname=data.get("firstname", ""),
            lastname=data.get("lastname", ""),
            fullname=data.get("fullname", ""),
            email=data.get("useremail", ""),
            profileimageurl=data.get("userpictureurl"),
        )


@dataclass(frozen=True)
class UserProfile(MoodleRecord):
    """Full profile of a user, as returned by core_user_get_users_by_field."""

    id: int
    username: str
    firstname: str
    lastname: str
    fullname: str
    email: str
    profileimageurl: str | None = None
    description: str = ""
    city: str = ""
    country: str = ""
    timezone: str = ""
    firstaccess: int = 0
    lastaccess: int = 0
    lastlogin: int = 0
    currentlogin: int = 0
    lang: str = "en"
    theme: str = ""
    mailformat: int = 1
    maildigest: int = 0
    maildisplay: int = 1
    autosubscribe: bool = False
    trackforums: bool = False
    suspended: bool = False
    confirmed: bool = True
    customfields: list[dict[str, Any]] = field(default_factory=list)
    preferences: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "UserProfile":
        """Create a UserProfile from Moodle API response data."""
        return cls(
            id=data["id"],
            username=data.get("username", ""),
            firstname=data.get("firstname", ""),
            lastname=data.get("lastname", ""),
            fullname=data.get("fullname", ""),
            email=data.get("email", ""),
            profileimageurl=data.get("profileimageurl"),
            description=data.get("description", ""),
            city=data.get("city", ""),
            country=data.get("country", ""),
            timezone=data.get("timezone", ""),
            firstaccess=data.get("firstaccess", 0),
            lastaccess=data.get("lastaccess", 0),
            lastlogin=data.get("lastlogin", 0),
            currentlogin=data.get("currentlogin", 0),
            lang=data.get("lang", "en"),
            theme=data.get("theme", ""),
            mailformat=data.get("mailformat", 1),
            maildigest=data.get("maildigest", 0),
            maildisplay=data.get("maildisplay", 1),
            autosubscribe=bool(data.get("autosubscribe", False)),
            trackforums=bool(data.get("trackforums", False)),
            suspended=bool(data.get("suspended", False)),
            confirmed=bool(data.get("confirmed", True)),
            customfields=data.get("customfields", []),
            preferences=data.get("preferences", []),
        )


@dataclass(frozen=True)
class MoodleCourse(MoodleRecord):
    """A course the user is enrolled in."""

    id: int
    fullname: str
    shortname: str
    categoryid: int = 0
    summary: str = ""
    summaryformat: int = 1
    format: str = "topics"
    showgrades: bool = True
    lang: str = ""
    enablecompletion: bool = False
    completionhascriteria: bool = False
    completionusertracked: bool = False
    category: str = ""
    progress: float | None = None
    completed: bool | None = None
    marker: int | None = None
    lastaccess: int | None = None
    isfavourite: bool | None = None
    hidden: bool | None = None
    overviewfiles: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MoodleCourse":
        """Create a MoodleCourse from Moodle API response data.

        core_enrol_get_users_courses sends the category id as ``category``;
        core_course_get_courses_by_field sends ``categoryid``/``categoryname``.
        """
        category = data.get("category")
        return cls(
            id=data["id"],
            fullname=data.get("fullname", ""),
            shortname=data.get("shortname", ""),
            categoryid=data.get("categoryid", category if isinstance(category, int) else 0),
            summary=data.get("summary", ""),
            summaryformat=data.get("summaryformat", 1),
            format=data.get("format", "topics"),
            showgrades=bool(data.get("showgrades", True)),
            lang=data.get("lang", ""),
            enablecompletion=bool(data.get("enablecompletion", False)),
            completionhascriteria=bool(data.get("completionhascriteria", False)),
            completionusertracked=bool(data.get("completionusertracked", False)),
            category=data.get("categoryname", category if isinstance(category, str) else ""),
            progress=data.get("progress"),
            completed=data.get("completed"),
            marker=data.get("marker"),
            lastaccess=data.get("lastaccess"),
            isfavourite=data.get("isfavourite"),
            hidden=data.get("hidden"),
            overviewfiles=data.get("overviewfiles", []),
        )


@dataclass(frozen=True)
class MoodleAssignment(MoodleRecord):
    """An assignment activity (mod_assign)."""

    id: int
    course: int
    name: str
    intro: str = ""
    introformat: int = 1
    alwaysshowdescription: bool = True
    nosubmissions: bool = False
    submissiondrafts: bool = False
    sendnotifications: bool = False
    sendlatenotifications: bool = False
    sendstudentnotifications: bool = True
    duedate: int = 0
    allowsubmissionsfromdate: int = 0
    grade: float = 100
    timemodified: int = 0
    completionsubmit: bool = False
    cutoffdate: int = 0
    gradingduedate: int = 0
    teamsubmission: bool = False
    requireallteammemberssubmit: bool = False
    teamsubmissiongroupingid: int = 0
    blindmarking: bool = False
    hidegrader: bool = False
    revealidentities: bool = False
    attemptreopenmethod: str = "none"
    maxattempts: int = -1
    markingworkflow: bool = False
    markingallocation: bool = False
    requiresubmissionstatement: bool = False
    preventsubmissionnotingroup: bool = False
    configs: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MoodleAssignment":
        """Create a MoodleAssignment from mod_assign_get_assignments data."""
        return cls(
            id=data["id"],
            course=data.get("course", 0),
            name=data.get("name", ""),
            intro=data.get("intro", ""),
            introformat=data.get("introformat", 1),
            alwaysshowdescription=bool(data.get("alwaysshowdescription", True)),
            nosubmissions=bool(data.get("nosubmissions", False)),
            submissiondrafts=bool(data.get("submissiondrafts", False)),
            sendnotifications=bool(data.get("sendnotifications", False)),
            sendlatenotifications=bool(data.get("sendlatenotifications", False)),
            sendstudentnotifications=bool(data.get("sendstudentnotifications", True)),
            duedate=data.get("duedate", 0),
            allowsubmissionsfromdate=data.get("allowsubmissionsfromdate", 0),
            grade=data.get("grade", 100),
            timemodified=data.get("timemodified", 0),
            completionsubmit=bool(data.get("completionsubmit", False)),
            cutoffdate=data.get("cutoffdate", 0),
            gradingduedate=data.get("gradingduedate", 0),
            teamsubmission=bool(data.get("teamsubmission", False)),
            requireallteammemberssubmit=bool(data.get("requireallteammemberssubmit", False)),
            teamsubmissiongroupingid=data.get("teamsubmissiongroupingid", 0),
            blindmarking=bool(data.get("blindmarking", False)),
            hidegrader=bool(data.get("hidegrader", False)),
            revealidentities=bool(data.get("revealidentities", False)),
            attemptreopenmethod=data.get("attemptreopenmethod", "none"),
            maxattempts=data.get("maxattempts", -1),
            markingworkflow=bool(data.get("markingworkflow", False)),
            markingallocation=bool(data.get("markingallocation", False)),
            requiresubmissionstatement=bool(data.get("requiresubmissionstatement", False)),
            preventsubmissionnotingroup=bool(data.get("preventsubmissionnotingroup", False)),
            configs=data.get("configs", []),
        )


@dataclass(frozen=True)
class SearchResult(MoodleRecord):
    """A single hit from global search or the course-contents fallback."""

    areaid: str
    courseid: int
    title: str
    content: str
    contextid: int
    type: str
    url: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SearchResult":
        """Create a SearchResult from a core_search_get_results entry."""
        areaid = data.get("areaid", "")
        return cls(
            areaid=areaid,
            courseid=data.get("courseid", 0),
            title=data.get("title", ""),
            content=data.get("content", ""),
            contextid=data.get("contextid", 0),
            type=data.get("componentname", areaid.split("-")[0]) or "",
            url=data.get("docurl", data.get("url", "#")),
        )

    @classmethod
    def from_course_module(cls, module: dict[str, Any], courseid: int) -> "SearchResult":
        """Create a SearchResult from a core_course_get_contents module."""
        modname = module.get("modname", "")
        return cls(
            areaid=f"mod_{modname}",
            courseid=courseid,
            title=module.get("name", ""),
            content=module.get("description") or "",
            contextid=module.get("id", 0),
            type=modname,
            url=module.get("url") or "#",
        )


@dataclass(frozen=True)
class GradeItem(MoodleRecord):
    """One grade item of a course's user report."""

    id: int
    itemname: str
    categoryid: int | None = None
    categoryname: str = ""
    gradedategraded: float | None = None
    gradedatesubmitted: float | None = None
    gradeformatted: str = ""
    graderaw: float | None = None
    grademax: float = 100
    grademin: float = 0
    percentageformatted: str = ""
    feedback: str = ""
    locked: bool = False
    hidden: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GradeItem":
        """Create a GradeItem from a gradereport_user_get_grade_items entry."""
        return cls(
            id=data.get("id", 0),
            itemname=data.get("itemname") or "",
            categoryid=data.get("categoryid"),
            categoryname=data.get("categoryname", ""),
            gradedategraded=data.get("gradedategraded"),
            gradedatesubmitted=data.get("gradedatesubmitted"),
            gradeformatted=data.get("gradeformatted", ""),
            graderaw=data.get("graderaw"),
            grademax=data.get("grademax", 100),
            grademin=data.get("grademin", 0),
            percentageformatted=data.get("percentageformatted", ""),
            feedback=data.get("feedback", ""),
            locked=bool(data.get("locked", False)),
            hidden=bool(data.get("gradeishidden", data.get("hidden", False))),
        )


@dataclass(frozen=True)
class GradeOverview(MoodleRecord):
    """Summary across all of a user's courses."""

    gpa: float | None
    total_courses: int
    average_grade: float | None
    credits_earned: int | None


@dataclass(frozen=True)
class CalendarEvent(MoodleRecord):
    """A calendar event (due date, quiz close, site event, ...)."""

    id: int
    name: str
    description: str = ""
    timestart: float = 0
    timeduration: int = 0
    courseid: int | None = None
    coursename: str = ""
    eventtype: str = ""
    location: str = ""
    url: str = "#"

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CalendarEvent":
        """Create a CalendarEvent from core_calendar_get_calendar_events data."""
        course = data.get("course") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            timestart=data.get("timestart", 0),
            timeduration=data.get("timeduration", 0),
            courseid=data.get("courseid", course.get("id")),
            coursename=course.get("fullname", data.get("coursename", "")),
            eventtype=data.get("modulename") or data.get("eventtype", ""),
            location=data.get("location", ""),
            url=data.get("url", "#"),
        )


@dataclass(frozen=True)
class Forum(MoodleRecord):
    """A forum activity."""

    id: int
    course: int
    name: str
    intro: str = ""
    discussions: int = 0
    posts: int = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Forum":
        """Create a Forum from mod_forum_get_forums_by_courses data."""
        return cls(
            id=data["id"],
            course=data.get("course", 0),
            name=data.get("name", ""),
            intro=data.get("intro", ""),
            discussions=data.get("numdiscussions", data.get("discussions", 0)),
            posts=data.get("posts", 0),
        )


@dataclass(frozen=True)
class ForumDiscussion(MoodleRecord):
    """A discussion thread inside a forum."""

    id: int
    forum: int
    name: str
    course: int = 0
    firstpost: int = 0
    userid: int = 0
    groupid: int = 0
    timemodified: float = 0
    userfullname: str = ""
    numreplies: int = 0
    pinned: bool = False
    locked: bool = False
    starred: bool = False
    canreply: bool = True
    message: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ForumDiscussion":
        """Create a ForumDiscussion from mod_forum_get_forum_discussions data."""
        return cls(
            id=data.get("discussion", data.get("id", 0)),
            forum=data.get("forum", 0),
            name=data.get("name", data.get("subject", "")),
            course=data.get("course", 0),
            firstpost=data.get("firstpost", data.get("id", 0)),
            userid=data.get("userid", 0),
            groupid=data.get("groupid", 0),
            timemodified=data.get("timemodified", 0),
            userfullname=data.get("userfullname", ""),
            numreplies=int(data.get("numreplies", 0)),
            pinned=bool(data.get("pinned", False)),
            locked=bool(data.get("locked", False)),
            starred=bool(data.get("starred", False)),
            canreply=bool(data.get("canreply", True)),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class ForumPost(MoodleRecord):
    """A post within a discussion."""

    id: int
    discussion: int
    parent: int
    userid: int
    created: float
    modified: float
    subject: str
    message: str
    userfullname: str = ""
    userpictureurl: str = ""
    totalscore: int = 0
    replies: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ForumPost":
        """Create a ForumPost from Moodle API response data.

        Accepts both the legacy flat shape and the newer one where author
        details sit under ``author``.
        """
        author = data.get("author") or {}
        return cls(
            id=data.get("id", 0),
            discussion=data.get("discussion", data.get("discussionid", 0)),
            parent=data.get("parent", data.get("parentid") or 0),
            userid=data.get("userid", author.get("id", 0)),
            created=data.get("created", data.get("timecreated", 0)),
            modified=data.get("modified", data.get("timemodified", data.get("timecreated", 0))),
            subject=data.get("subject", ""),
            message=data.get("message", ""),
            userfullname=data.get("userfullname", author.get("fullname", "")),
            userpictureurl=data.get("userpictureurl", author.get("urls", {}).get("profileimage", "")),
            totalscore=data.get("totalscore", 0),
            replies=data.get("replies", []),
        )


@dataclass(frozen=True)
class Quiz(MoodleRecord):
    """A quiz activity."""

    id: int
    course: int
    name: str
    intro: str = ""
    timeopen: float = 0
    timeclose: float = 0
    timelimit: int = 0
    attempts: int = 0
    grade: float = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Quiz":
        """Create a Quiz from mod_quiz_get_quizzes_by_courses data."""
        return cls(
            id=data["id"],
            course=data.get("course", 0),
            name=data.get("name", ""),
            intro=data.get("intro", ""),
            timeopen=data.get("timeopen", 0),
            timeclose=data.get("timeclose", 0),
            timelimit=data.get("timelimit", 0),
            attempts=data.get("attempts", 0),
            grade=data.get("grade", 0),
        )


@dataclass(frozen=True)
class QuizAttempt(MoodleRecord):
    """One attempt at a quiz."""

    id: int
    quiz: int
    userid: int
    attempt: int
    state: str
    timestart: float = 0
    timefinish: float = 0
    sumgrades: float | None = None
    uniqueid: int | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "QuizAttempt":
        """Create a QuizAttempt from mod_quiz attempt data."""
        return cls(
            id=data["id"],
            quiz=data.get("quiz", 0),
            userid=data.get("userid", 0),
            attempt=data.get("attempt", 1),
            state=data.get("state", ""),
            timestart=data.get("timestart", 0),
            timefinish=data.get("timefinish", 0),
            sumgrades=data.get("sumgrades"),
            uniqueid=data.get("uniqueid"),
        )


@dataclass(frozen=True)
class QuizQuestion(MoodleRecord):
    """A question as presented inside an attempt."""

    id: int
    name: str
    questiontext: str
    qtype: str
    defaultmark: float = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "QuizQuestion":
        """Create a QuizQuestion from a mod_quiz_get_attempt_data question."""
        slot = data.get("slot", data.get("id", 0))
        return cls(
            id=slot,
            name=f"Question {data.get('number') or slot}",
            questiontext=data.get("html", data.get("questiontext", "")),
            qtype=data.get("type", data.get("qtype", "")),
            defaultmark=data.get("maxmark", data.get("defaultmark", 0)),
        )


@dataclass(frozen=True)
class Notification(MoodleRecord):
    """A popup notification."""

    id: int
    subject: str
    smallmessage: str = ""
    eventtype: str = ""
    component: str = ""
    timecreated: float = 0
    timeread: float | None = None
    read: bool = False
    contexturl: str | None = None
    contexturlname: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Notification":
        """Create a Notification from message_popup_get_popup_notifications data."""
        return cls(
            id=data["id"],
            subject=data.get("subject", ""),
            smallmessage=data.get("smallmessage", ""),
            eventtype=data.get("eventtype", ""),
            component=data.get("component", ""),
            timecreated=data.get("timecreated", 0),
            timeread=data.get("timeread"),
            read=bool(data.get("read", False)),
            contexturl=data.get("contexturl"),
            contexturlname=data.get("contexturlname"),
        )
