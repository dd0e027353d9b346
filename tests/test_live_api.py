"""Tests for the Moodle REST client."""

import httpx
import pytest

from moodle_dashboard.config import MoodleConfig
from moodle_dashboard.moodle import (
    FileUpload,
    LiveMoodleAPI,
    MoodleAPIError,
    MoodleAuthError,
    MoodleNetworkError,
    MoodleNotFoundError,
    MoodleValidationError,
)

from .conftest import MOODLE_URL, SITE_INFO


class TestCall:
    """Request building and error detection shared by every operation."""

    def test_request_carries_token_function_and_format(self, live_api, fake_moodle):
        live_api.get_site_info()
        call = fake_moodle.calls[0]
        assert call["wsfunction"] == "core_webservice_get_site_info"
        assert call["wstoken"] == "secret-token"
        assert call["moodlewsrestformat"] == "json"

    def test_flatten_params(self, live_api):
        flat = live_api._flatten_params(
            {
                "courseids": [3, 5],
                "options": {"timestart": 10, "enabled": True},
                "users": [{"id": 7, "city": "Quito"}],
                "skipped": None,
            }
        )
        assert flat == {
            "courseids[0]": 3,
            "courseids[1]": 5,
            "options[timestart]": 10,
            "options[enabled]": 1,
            "users[0][id]": 7,
            "users[0][city]": "Quito",
        }

    def test_exception_payload_raises_with_its_message(self, live_api, fake_moodle):
        fake_moodle.responses["core_enrol_get_users_courses"] = {
            "exception": "moodle_exception",
            "errorcode": "somethingwrong",
            "message": "Something went wrong on the server",
        }
        with pytest.raises(MoodleAPIError) as excinfo:
            live_api.get_user_courses(7)
        assert str(excinfo.value) == "Something went wrong on the server"
        assert excinfo.value.error_code == "somethingwrong"

    @pytest.mark.parametrize(
        "errorcode, expected",
        [
            ("invalidtoken", MoodleAuthError),
            ("invalidrecord", MoodleNotFoundError),
            ("invalidparameter", MoodleValidationError),
        ],
    )
    def test_error_codes_map_to_exception_types(self, live_api, fake_moodle, errorcode, expected):
        fake_moodle.responses["core_webservice_get_site_info"] = {
            "exception": "webservice_access_exception",
            "errorcode": errorcode,
            "message": "Nope",
        }
        with pytest.raises(expected):
            live_api.get_site_info()

    def test_validate_token_false_on_error(self, live_api, fake_moodle):
        fake_moodle.responses["core_webservice_get_site_info"] = {
            "exception": "moodle_exception",
            "errorcode": "invalidtoken",
            "message": "Invalid token - token not found",
        }
        assert live_api.validate_token() is False

    def test_unreachable_site_raises_network_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(refuse))
        api = LiveMoodleAPI(MoodleConfig(base_url=MOODLE_URL, token="t"), http_client=client)
        with pytest.raises(MoodleNetworkError):
            api.get_site_info()

    def test_http_error_status(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500, text="oops")))
        api = LiveMoodleAPI(MoodleConfig(base_url=MOODLE_URL, token="t"), http_client=client)
        with pytest.raises(MoodleAPIError, match="HTTP 500"):
            api.get_site_info()

    def test_non_json_body(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>")))
        api = LiveMoodleAPI(MoodleConfig(base_url=MOODLE_URL, token="t"), http_client=client)
        with pytest.raises(MoodleAPIError, match="Invalid response"):
            api.get_site_info()

    def test_injected_client_stays_open(self, fake_moodle):
        client = fake_moodle.client()
        api = LiveMoodleAPI(MoodleConfig(base_url=MOODLE_URL, token="t"), http_client=client)
        api.close()
        assert not client.is_closed


class TestOperations:
    """wsfunction mapping and response parsing."""

    def test_user_info_from_site_info(self, live_api):
        user = live_api.get_user_info()
        assert user.id == SITE_INFO["userid"]
        assert user.fullname == "Ada Lovelace"
        assert user.email == "ada@example.edu"

    def test_user_courses_default_to_token_owner(self, live_api, fake_moodle):
        fake_moodle.responses["core_enrol_get_users_courses"] = [
            {"id": 3, "fullname": "Physics", "shortname": "PHY", "category": 2, "progress": 40.0},
        ]
        courses = live_api.get_user_courses()
        assert [c.shortname for c in courses] == ["PHY"]
        assert fake_moodle.functions() == ["core_webservice_get_site_info", "core_enrol_get_users_courses"]
        assert fake_moodle.calls[1]["userid"] == "7"

    def test_assignments_flattened_across_courses(self, live_api, fake_moodle):
        fake_moodle.responses["mod_assign_get_assignments"] = {
            "courses": [
                {"id": 3, "assignments": [{"id": 11, "name": "Lab 1", "duedate": 100}]},
                {"id": 4, "assignments": [{"id": 12, "name": "Essay", "duedate": 200}]},
            ]
        }
        assignments = live_api.get_assignments([3, 4])
        assert [(a.id, a.course) for a in assignments] == [(11, 3), (12, 4)]
        call = fake_moodle.calls[-1]
        assert call["courseids[0]"] == "3"
        assert call["courseids[1]"] == "4"

    def test_submit_uploads_then_saves_with_itemid(self, live_api, fake_moodle):
        fake_moodle.responses["mod_assign_save_submission"] = []
        files = [
            FileUpload("essay.pdf", b"%PDF-1.4", "application/pdf"),
            FileUpload("notes.txt", b"notes", "text/plain"),
        ]

        result = live_api.submit_assignment(11, files, "See attached")

        assert result["success"] is True
        assert result["itemid"] == fake_moodle.upload_itemid
        assert len(fake_moodle.uploads) == 2
        # The second upload reuses the draft area of the first
        assert b'name="itemid"\r\n\r\n555' in fake_moodle.uploads[1].content

        save = fake_moodle.calls[-1]
        assert save["wsfunction"] == "mod_assign_save_submission"
        assert save["assignmentid"] == "11"
        assert save["plugindata[files_filemanager]"] == "555"
        assert save["plugindata[onlinetext_editor][text]"] == "See attached"

    def test_submit_with_warnings_is_not_success(self, live_api, fake_moodle):
        fake_moodle.responses["mod_assign_save_submission"] = [{"item": "submission", "message": "Locked"}]
        result = live_api.submit_assignment(11, [], "text only")
        assert result["success"] is False
        assert fake_moodle.uploads == []

    def test_grade_overview_averages_raw_grades(self, live_api, fake_moodle):
        fake_moodle.responses["gradereport_overview_get_course_grades"] = {
            "grades": [
                {"courseid": 3, "grade": "80.00", "rawgrade": "80"},
                {"courseid": 4, "grade": "90.00", "rawgrade": "90"},
                {"courseid": 5, "grade": "-", "rawgrade": None},
            ]
        }
        overview = live_api.get_grade_overview(7)
        assert overview.total_courses == 3
        assert overview.average_grade == 85.0
        assert overview.gpa is None

    def test_reply_defaults_to_root_post(self, live_api, fake_moodle):
        fake_moodle.responses["mod_forum_get_discussion_posts"] = {
            "posts": [
                {"id": 40, "discussionid": 9, "parentid": 0, "subject": "Welcome", "message": "Hi"},
                {"id": 41, "discussionid": 9, "parentid": 40, "subject": "Re: Welcome", "message": "Hello"},
            ]
        }
        fake_moodle.responses["mod_forum_add_discussion_post"] = {"postid": 42}

        result = live_api.create_forum_post(9, "Thanks!")

        assert result == {"success": True, "postid": 42}
        add = fake_moodle.calls[-1]
        assert add["postid"] == "40"
        assert add["subject"] == "Re: Welcome"

    def test_quiz_answers_use_question_usage_id(self, live_api, fake_moodle):
        fake_moodle.responses["mod_quiz_get_attempt_data"] = {"attempt": {"id": 5, "uniqueid": 77}, "questions": []}
        fake_moodle.responses["mod_quiz_process_attempt"] = {"state": "finished", "warnings": []}

        result = live_api.submit_quiz_attempt(5, {1: "2", 2: "1"})

        assert result["state"] == "finished"
        process = fake_moodle.calls[-1]
        assert process["data[0][name]"] == "q77:1_answer"
        assert process["data[1][value]"] == "1"
        assert process["finishattempt"] == "1"

    def test_notifications_filtered_locally(self, live_api, fake_moodle):
        fake_moodle.responses["message_popup_get_popup_notifications"] = {
            "notifications": [
                {"id": 1, "subject": "New", "read": False},
                {"id": 2, "subject": "Old", "read": True, "timeread": 100},
            ]
        }
        unread = live_api.get_notifications(7, "unread")
        assert [n.id for n in unread] == [1]

    def test_unknown_notification_filter(self, live_api):
        with pytest.raises(ValueError):
            live_api.get_notifications(7, "starred")


class TestSearch:
    def test_global_search_results(self, live_api, fake_moodle):
        fake_moodle.responses["core_search_get_results"] = {
            "totalcount": 1,
            "results": [{"areaid": "mod_page-activity", "courseid": 3, "title": "Kinematics", "contextid": 9}],
        }
        results = live_api.search_content("kine", 3)
        assert [r.title for r in results] == ["Kinematics"]
        call = fake_moodle.calls[-1]
        assert call["q"] == "kine"
        assert call["filters[courseids][0]"] == "3"

    def test_falls_back_to_course_contents(self, live_api, fake_moodle):
        fake_moodle.responses["core_search_get_results"] = {
            "exception": "moodle_exception",
            "errorcode": "globalsearchdisabled",
            "message": "Global search is disabled.",
        }
        fake_moodle.responses["core_course_get_contents"] = [
            {
                "id": 1,
                "modules": [
                    {"id": 21, "name": "Vectors worksheet", "modname": "resource", "url": "/mod/resource/21"},
                    {"id": 22, "name": "Week 2", "description": "Newton's VECTOR laws", "modname": "page"},
                    {"id": 23, "name": "Attendance", "modname": "attendance"},
                ],
            }
        ]

        results = live_api.search_content("vector", 3)

        assert [r.contextid for r in results] == [21, 22]
        assert all(r.courseid == 3 for r in results)
        assert results[0].areaid == "mod_resource"

    def test_failure_without_course_propagates(self, live_api, fake_moodle):
        fake_moodle.responses["core_search_get_results"] = {
            "exception": "moodle_exception",
            "errorcode": "globalsearchdisabled",
            "message": "Global search is disabled.",
        }
        with pytest.raises(MoodleAPIError, match="Global search is disabled."):
            live_api.search_content("vector")
        assert "core_course_get_contents" not in fake_moodle.functions()


class TestCoursesAndCalendar:
    def test_courses_by_field(self, live_api, fake_moodle):
        fake_moodle.responses["core_course_get_courses_by_field"] = {
            "courses": [{"id": 3, "fullname": "Physics", "shortname": "PHY", "categoryid": 2, "categoryname": "Science"}],
            "warnings": [],
        }
        courses = live_api.get_courses_by_field("shortname", "PHY")

        assert [(c.id, c.categoryid, c.category) for c in courses] == [(3, 2, "Science")]
        call = fake_moodle.calls[-1]
        assert call["wsfunction"] == "core_course_get_courses_by_field"
        assert call["field"] == "shortname"
        assert call["value"] == "PHY"

    def test_calendar_events_for_a_course(self, live_api, fake_moodle):
        fake_moodle.responses["core_calendar_get_calendar_events"] = {
            "events": [
                {
                    "id": 4,
                    "name": "Midterm",
                    "timestart": 1500,
                    "modulename": "quiz",
                    "course": {"id": 3, "fullname": "Physics"},
                }
            ]
        }
        events = live_api.get_calendar_events(1000, 2000, 3)

        assert events[0].courseid == 3
        assert events[0].coursename == "Physics"
        assert events[0].eventtype == "quiz"
        call = fake_moodle.calls[-1]
        assert call["events[courseids][0]"] == "3"
        assert call["options[timestart]"] == "1000"
        assert call["options[timeend]"] == "2000"

    def test_calendar_events_without_course(self, live_api, fake_moodle):
        fake_moodle.responses["core_calendar_get_calendar_events"] = {"events": []}
        assert live_api.get_calendar_events(1000, 2000) == []
        assert not any(k.startswith("events[") for k in fake_moodle.calls[-1])


class TestProfile:
    def test_get_profile(self, live_api, fake_moodle):
        fake_moodle.responses["core_user_get_users_by_field"] = [
            {"id": 7, "username": "student7", "fullname": "Ada Lovelace", "city": "London", "autosubscribe": 1},
        ]
        profile = live_api.get_user_profile(7)

        assert profile.city == "London"
        assert profile.autosubscribe is True
        call = fake_moodle.calls[-1]
        assert call["field"] == "id"
        assert call["values[0]"] == "7"

    def test_unknown_user(self, live_api, fake_moodle):
        fake_moodle.responses["core_user_get_users_by_field"] = []
        with pytest.raises(MoodleNotFoundError):
            live_api.get_user_profile(99)

    def test_update_profile(self, live_api, fake_moodle):
        fake_moodle.responses["core_user_update_users"] = {"warnings": []}
        result = live_api.update_user_profile(7, {"city": "Paris"})

        assert result == {"success": True, "warnings": []}
        call = fake_moodle.calls[-1]
        assert call["wsfunction"] == "core_user_update_users"
        assert call["users[0][id]"] == "7"
        assert call["users[0][city]"] == "Paris"

    def test_update_with_warnings(self, live_api, fake_moodle):
        warning = {"item": "user", "itemid": 7, "warningcode": "invalidfield", "message": "Bad field"}
        fake_moodle.responses["core_user_update_users"] = {"warnings": [warning]}
        assert live_api.update_user_profile(7, {"city": ""})["success"] is False

    def test_upload_picture_then_set_it(self, live_api, fake_moodle):
        fake_moodle.responses["core_user_update_picture"] = {
            "success": True,
            "profileimageurl": f"{MOODLE_URL}/pluginfile.php/5/user/icon/f1",
        }
        result = live_api.upload_profile_image(7, FileUpload("me.png", b"\x89PNG", "image/png"))

        assert result == {"success": True, "url": f"{MOODLE_URL}/pluginfile.php/5/user/icon/f1"}
        assert len(fake_moodle.uploads) == 1
        call = fake_moodle.calls[-1]
        assert call["wsfunction"] == "core_user_update_picture"
        assert call["draftitemid"] == str(fake_moodle.upload_itemid)
        assert call["userid"] == "7"


class TestNotificationMutations:
    def test_mark_read(self, live_api, fake_moodle):
        fake_moodle.responses["core_message_mark_notification_read"] = {"notificationid": 12, "warnings": []}
        assert live_api.mark_notification_read(12) == {"success": True}

        call = fake_moodle.calls[-1]
        assert call["notificationid"] == "12"
        assert int(call["timeread"]) > 0

    def test_mark_all_read(self, live_api, fake_moodle):
        fake_moodle.responses["core_message_mark_all_notifications_as_read"] = True
        assert live_api.mark_all_notifications_read(7) == {"success": True}
        assert fake_moodle.calls[-1]["useridto"] == "7"

    def test_delete(self, live_api, fake_moodle):
        fake_moodle.responses["core_message_delete_message"] = {"status": True, "warnings": []}
        assert live_api.delete_notification(12, 7) == {"success": True}

        call = fake_moodle.calls[-1]
        assert call["wsfunction"] == "core_message_delete_message"
        assert call["messageid"] == "12"
        assert call["userid"] == "7"

    def test_delete_defaults_to_token_owner(self, live_api, fake_moodle):
        fake_moodle.responses["core_message_delete_message"] = {"status": True, "warnings": []}
        live_api.delete_notification(12)

        assert fake_moodle.functions() == ["core_webservice_get_site_info", "core_message_delete_message"]
        assert fake_moodle.calls[-1]["userid"] == "7"
