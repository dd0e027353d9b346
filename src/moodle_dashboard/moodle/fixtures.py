"""Static demo data served when a session runs in demo mode.

Module-level records are built once at import; anything that has to stay
relative to "now" (events, attempts, notifications) is built per call.
"""

import time

from .models import (
    CalendarEvent,
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

DAY = 86400
WEEK = 7 * DAY

DEMO_BASE_URL = "https://demo.moodle.localhost"
DEMO_TOKEN = "demo_token_for_testing_12345678901234567890"

_LOADED_AT = int(time.time())

DEMO_USER = MoodleUser(
    id=1,
    username="demo_user",
    firstname="Demo",
    lastname="User",
    fullname="Demo User",
    email="demo@example.com",
    profileimageurl="https://via.placeholder.com/64x64/4F46E5/FFFFFF?text=DU",
)

DEMO_COURSES: tuple[MoodleCourse, ...] = (
    MoodleCourse(
        id=1,
        fullname="Introduction to Web Development",
        shortname="WEB101",
        categoryid=1,
        summary=(
            "Learn the basics of HTML, CSS, and JavaScript. This comprehensive course "
            "covers modern web development techniques and best practices."
        ),
        summaryformat=1,
        format="topics",
        showgrades=True,
        lang="en",
        enablecompletion=True,
        completionhascriteria=True,
        completionusertracked=True,
        category="Programming",
        progress=75,
        completed=False,
        lastaccess=_LOADED_AT - DAY,
        isfavourite=True,
        hidden=False,
    ),
    MoodleCourse(
        id=2,
        fullname="Advanced React Development",
        shortname="REACT201",
        categoryid=1,
        summary=(
            "Master advanced React concepts including hooks, context, state management, "
            "and performance optimization."
        ),
        summaryformat=1,
        format="topics",
        showgrades=True,
        lang="en",
        enablecompletion=True,
        completionhascriteria=True,
        completionusertracked=True,
        category="Programming",
        progress=45,
        completed=False,
        lastaccess=_LOADED_AT - 2 * DAY,
        isfavourite=False,
        hidden=False,
    ),
    MoodleCourse(
        id=3,
        fullname="Database Design and SQL",
        shortname="DB101",
        categoryid=2,
        summary="Learn database design principles, SQL queries, and database optimization techniques.",
        summaryformat=1,
        format="topics",
        showgrades=True,
        lang="en",
        enablecompletion=True,
        completionhascriteria=False,
        completionusertracked=False,
        category="Database",
        progress=90,
        completed=True,
        lastaccess=_LOADED_AT - 3 * DAY,
        isfavourite=False,
        hidden=False,
    ),
)

DEMO_ASSIGNMENTS: tuple[MoodleAssignment, ...] = (
    MoodleAssignment(
        id=1,
        course=1,
        name="Personal Portfolio Website",
        intro=(
            "Create a personal portfolio website using HTML, CSS, and JavaScript. "
            "Include at least 3 pages: Home, About, and Projects."
        ),
        submissiondrafts=True,
        sendnotifications=True,
        sendlatenotifications=True,
        duedate=_LOADED_AT + WEEK,
        allowsubmissionsfromdate=_LOADED_AT - DAY,
        timemodified=_LOADED_AT,
        completionsubmit=True,
        cutoffdate=_LOADED_AT + 2 * WEEK,
        gradingduedate=_LOADED_AT + 3 * WEEK,
        attemptreopenmethod="none",
        maxattempts=3,
        requiresubmissionstatement=True,
    ),
    MoodleAssignment(
        id=2,
        course=2,
        name="React Todo App with Hooks",
        intro=(
            "Build a todo application using React hooks (useState, useEffect, useContext). "
            "Include features: add, edit, delete, and filter todos."
        ),
        submissiondrafts=True,
        sendnotifications=True,
        sendlatenotifications=True,
        duedate=_LOADED_AT + 2 * WEEK,
        allowsubmissionsfromdate=_LOADED_AT,
        timemodified=_LOADED_AT,
        completionsubmit=True,
        cutoffdate=_LOADED_AT + 3 * WEEK,
        gradingduedate=_LOADED_AT + 4 * WEEK,
        attemptreopenmethod="manual",
        maxattempts=5,
        requiresubmissionstatement=True,
    ),
    MoodleAssignment(
        id=3,
        course=3,
        name="Database Schema Design",
        intro=(
            "Design a complete database schema for an e-commerce system. "
            "Include tables, relationships, indexes, and sample queries."
        ),
        submissiondrafts=False,
        sendnotifications=True,
        sendlatenotifications=True,
        duedate=_LOADED_AT - DAY,
        allowsubmissionsfromdate=_LOADED_AT - 2 * WEEK,
        timemodified=_LOADED_AT,
        completionsubmit=True,
        cutoffdate=_LOADED_AT + DAY,
        gradingduedate=_LOADED_AT + WEEK,
        teamsubmission=True,
        requireallteammemberssubmit=True,
        teamsubmissiongroupingid=1,
        attemptreopenmethod="manual",
        maxattempts=2,
        markingworkflow=True,
        preventsubmissionnotingroup=True,
    ),
)

DEMO_SEARCH_RESULTS: tuple[SearchResult, ...] = (
    SearchResult(
        areaid="mod_resource",
        courseid=1,
        title="HTML Basics Tutorial",
        content=(
            "Learn the fundamentals of HTML including tags, attributes, and semantic markup. "
            "This comprehensive guide covers everything you need to know."
        ),
        contextid=101,
        type="resource",
        url="#",
    ),
    SearchResult(
        areaid="mod_forum",
        courseid=1,
        title="CSS Grid vs Flexbox Discussion",
        content=(
            "Community discussion about when to use CSS Grid versus Flexbox for layout. "
            "Multiple perspectives and real-world examples."
        ),
        contextid=102,
        type="forum",
        url="#",
    ),
    SearchResult(
        areaid="mod_video",
        courseid=2,
        title="React Hooks Introduction Video",
        content=(
            "Video tutorial explaining useState, useEffect, and custom hooks with practical "
            "examples and common patterns."
        ),
        contextid=201,
        type="video",
        url="#",
    ),
    SearchResult(
        areaid="mod_quiz",
        courseid=3,
        title="SQL Joins Practice Quiz",
        content=(
            "Test your knowledge of SQL joins including INNER, LEFT, RIGHT, and FULL OUTER "
            "joins with practical scenarios."
        ),
        contextid=301,
        type="quiz",
        url="#",
    ),
)

DEMO_GRADE_OVERVIEW = GradeOverview(gpa=3.85, total_courses=12, average_grade=87.5, credits_earned=45)


def demo_site_info() -> dict:
    """Site info payload matching core_webservice_get_site_info."""
    return {
        "sitename": "Demo Moodle Site",
        "username": DEMO_USER.username,
        "firstname": DEMO_USER.firstname,
        "lastname": DEMO_USER.lastname,
        "fullname": DEMO_USER.fullname,
        "userid": DEMO_USER.id,
        "useremail": DEMO_USER.email,
        "userpictureurl": DEMO_USER.profileimageurl,
        "siteurl": DEMO_BASE_URL,
        "release": "4.3+ (Demo)",
    }


def demo_course_contents(courseid: int) -> list[dict]:
    """One section per course listing that course's searchable resources."""
    modules = [
        {
            "id": result.contextid,
            "name": result.title,
            "description": result.content,
            "modname": result.type,
            "url": result.url,
        }
        for result in DEMO_SEARCH_RESULTS
        if result.courseid == courseid
    ]
    return [{"id": courseid, "name": "General", "section": 0, "modules": modules}]


def demo_grade_items() -> list[GradeItem]:
    now = time.time()
    return [
        GradeItem(
            id=1,
            itemname="Assignment 1",
            categoryid=1,
            categoryname="Assignments",
            gradedategraded=now,
            gradedatesubmitted=now - DAY,
            gradeformatted="85/100",
            graderaw=85,
            grademax=100,
            grademin=0,
            percentageformatted="85%",
            feedback="Good work! Well structured and clear.",
        ),
        GradeItem(
            id=2,
            itemname="Quiz 1",
            categoryid=2,
            categoryname="Quizzes",
            gradedategraded=now - DAY,
            gradedatesubmitted=now - DAY,
            gradeformatted="92/100",
            graderaw=92,
            grademax=100,
            grademin=0,
            percentageformatted="92%",
            feedback="Excellent understanding of the material.",
        ),
    ]


def demo_calendar_events(courseid: int | None = None) -> list[CalendarEvent]:
    now = time.time()
    return [
        CalendarEvent(
            id=1,
            name="Assignment 2 Due",
            description="Submit your research paper on renewable energy",
            timestart=now + 3 * DAY,
            timeduration=0,
            courseid=courseid or 1,
            coursename="Environmental Science",
            eventtype="assignment",
            location="Online",
        ),
        CalendarEvent(
            id=2,
            name="Midterm Exam",
            description="Comprehensive midterm covering chapters 1-5",
            timestart=now + WEEK,
            timeduration=7200,
            courseid=courseid or 2,
            coursename="Computer Science",
            eventtype="quiz",
            location="Room 101",
        ),
    ]


def demo_forums(courseid: int) -> list[Forum]:
    return [
        Forum(
            id=1,
            course=courseid,
            name="General Discussion",
            intro="General course discussion and questions",
            discussions=15,
            posts=87,
        ),
        Forum(
            id=2,
            course=courseid,
            name="Assignment Help",
            intro="Get help with assignments and projects",
            discussions=8,
            posts=45,
        ),
    ]


def demo_forum_discussions(forumid: int) -> list[ForumDiscussion]:
    return [
        ForumDiscussion(
            id=1,
            course=1,
            forum=forumid,
            name="Welcome to the course!",
            firstpost=1,
            userid=2,
            groupid=0,
            timemodified=time.time() - DAY,
            userfullname="Dr. Smith",
            numreplies=12,
            pinned=True,
            message="Welcome everyone to our course. Please introduce yourselves!",
        )
    ]


def demo_forum_posts(discussionid: int) -> list[ForumPost]:
    posted = time.time() - DAY
    return [
        ForumPost(
            id=1,
            discussion=discussionid,
            parent=0,
            userid=2,
            created=posted,
            modified=posted,
            subject="Welcome to the course!",
            message=(
                "Welcome everyone to our course. Please introduce yourselves and share "
                "what you hope to learn!"
            ),
            userfullname="Dr. Smith",
            totalscore=5,
        )
    ]


def demo_quizzes(courseid: int) -> list[Quiz]:
    now = time.time()
    return [
        Quiz(
            id=1,
            course=courseid,
            name="Chapter 1 Quiz",
            intro="Test your understanding of the first chapter concepts",
            timeopen=now - WEEK,
            timeclose=now + WEEK,
            timelimit=1800,
            attempts=2,
            grade=100,
        )
    ]


def demo_quiz_attempts(quizid: int, userid: int) -> list[QuizAttempt]:
    started = time.time() - DAY
    return [
        QuizAttempt(
            id=1,
            quiz=quizid,
            userid=userid,
            attempt=1,
            state="finished",
            timestart=started,
            timefinish=started + 1500,
            sumgrades=85,
        )
    ]


DEMO_QUIZ_QUESTIONS: tuple[QuizQuestion, ...] = (
    QuizQuestion(
        id=1,
        name="Question 1",
        questiontext="What is the capital of France?",
        qtype="multichoice",
        defaultmark=10,
    ),
    QuizQuestion(
        id=2,
        name="Question 2",
        questiontext="Explain the concept of photosynthesis.",
        qtype="essay",
        defaultmark=20,
    ),
)


def demo_user_profile() -> UserProfile:
    now = int(time.time())
    return UserProfile(
        id=DEMO_USER.id,
        username=DEMO_USER.username,
        firstname=DEMO_USER.firstname,
        lastname=DEMO_USER.lastname,
        fullname=DEMO_USER.fullname,
        email=DEMO_USER.email,
        profileimageurl=DEMO_USER.profileimageurl,
        description="Passionate learner interested in technology and science.",
        city="San Francisco",
        country="United States",
        timezone="America/Los_Angeles",
        firstaccess=now - 365 * DAY,
        lastaccess=now - 3600,
        lastlogin=now - DAY,
        currentlogin=now,
        lang="en",
        theme="standard",
        mailformat=1,
        maildigest=0,
        maildisplay=1,
        autosubscribe=True,
        trackforums=True,
        suspended=False,
        confirmed=True,
    )


def demo_notifications() -> list[Notification]:
    now = time.time()
    return [
        Notification(
            id=1,
            subject="New assignment posted",
            smallmessage="Assignment 3 has been posted in Environmental Science",
            eventtype="assign",
            component="mod_assign",
            timecreated=now - 3600,
            timeread=0,
            read=False,
            contexturl="#",
            contexturlname="View Assignment",
        ),
        Notification(
            id=2,
            subject="Grade updated",
            smallmessage="Your grade for Quiz 1 has been updated",
            eventtype="grade",
            component="core_grades",
            timecreated=now - 7200,
            timeread=now - 3600,
            read=True,
            contexturl="#",
            contexturlname="View Grade",
        ),
    ]
