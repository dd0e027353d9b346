"""SQL run by the database-backed routes."""

ASSIGNMENTS_FOR_COURSE = """
    SELECT
      a.id,
      a.name,
      a.intro AS description,
      FROM_UNIXTIME(a.duedate) AS due_date,
      a.grade AS max_grade,
      FROM_UNIXTIME(a.timemodified) AS created_at,
      NULL AS submission_id,
      'not_submitted' AS submission_status,
      NULL AS grade,
      NULL AS submitted_at,
      NULL AS graded_at
    FROM mdl_assign a
    JOIN mdl_course_modules cm ON a.id = cm.instance
    JOIN mdl_modules m ON cm.module = m.id AND m.name = 'assign'
    WHERE cm.course = %s
    ORDER BY a.duedate ASC
"""

UPSERT_SUBMISSION = """
    INSERT INTO submissions (assignment_id, user_id, submission_text, status, submitted_at)
    VALUES (%s, %s, %s, 'submitted', NOW())
    ON DUPLICATE KEY UPDATE
      submission_text = VALUES(submission_text),
      status = 'submitted',
      submitted_at = NOW()
"""

# Course 1 is Moodle's site-level course
VISIBLE_COURSES = """
    SELECT
      c.id,
      c.shortname,
      c.fullname,
      c.summary AS description,
      'enrolled' AS role,
      FROM_UNIXTIME(c.timecreated) AS enrolled_at
    FROM mdl_course c
    WHERE c.visible = 1 AND c.id != 1
    ORDER BY c.fullname
"""

SEARCH_CONTENTS = """
    SELECT
      c.id,
      c.title,
      c.content_type,
      c.content_url,
      c.content_text,
      c.created_at,
      co.fullname AS course_name,
      co.shortname AS course_shortname
    FROM contents c
    JOIN courses co ON c.course_id = co.id
    WHERE (c.title LIKE %s OR c.content_text LIKE %s)
"""

SEARCH_COURSE_FILTER = " AND c.course_id = %s"

SEARCH_ORDER = " ORDER BY c.created_at DESC LIMIT 50"


def search_contents(query: str, course_id: str | None) -> tuple[str, list]:
    """SQL and parameters for a content search, optionally within one course."""
    pattern = f"%{query}%"
    sql = SEARCH_CONTENTS
    params: list = [pattern, pattern]
    if course_id:
        sql += SEARCH_COURSE_FILTER
        params.append(course_id)
    return sql + SEARCH_ORDER, params
