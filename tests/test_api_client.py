import asyncio
import json

import pytest
import requests

from services.api_client import ApiError, FocusFlowApi


class FakeResponse:
    def __init__(self, status_code=200, payload=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw.encode("utf-8")
        elif payload is not None:
            self.content = json.dumps(payload).encode("utf-8")
        else:
            self.content = b""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def request(self, method, url, json=None, timeout=None):
        self.requests.append((method, url, json, timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


TASK_ROW = {
    "id": 1,
    "user_id": "u1",
    "title": "Write tests",
    "is_completed": 0,
    "repeat": "none",
    "repeatDetail": None,
    "goalPoints": 1,
}


def make_api(*responses, token=None):
    session = FakeSession(*responses)
    return FocusFlowApi("http://api.test/", session=session, timeout=5, token=token), session


def test_list_tasks_parses_rows():
    api, session = make_api(FakeResponse(200, [TASK_ROW]))

    tasks = asyncio.run(api.list_tasks())

    assert [t.title for t in tasks] == ["Write tests"]
    assert tasks[0].goalPoints == 1
    assert session.requests == [("GET", "http://api.test/api/tasks", None, 5)]


def test_token_sets_bearer_header():
    _, session = make_api(token="secret")
    assert session.headers["Authorization"] == "Bearer secret"
    assert session.headers["Accept"] == "application/json"


def test_http_error_becomes_api_error():
    api, _ = make_api(FakeResponse(500, {"error": "boom"}))

    with pytest.raises(ApiError) as info:
        asyncio.run(api.list_tasks())

    assert str(info.value) == "Failed to fetch tasks"
    assert info.value.status == 500


def test_transport_error_has_no_status():
    api, _ = make_api(requests.ConnectionError("offline"))

    with pytest.raises(ApiError) as info:
        asyncio.run(api.create_task({"title": "x"}))

    assert str(info.value) == "Failed to create task"
    assert info.value.status is None


def test_malformed_row_is_a_generic_failure():
    api, _ = make_api(FakeResponse(200, [{"title": "no id"}]))

    with pytest.raises(ApiError) as info:
        asyncio.run(api.list_tasks())

    assert str(info.value) == "Failed to fetch tasks"


def test_invalid_json_is_a_generic_failure():
    api, _ = make_api(FakeResponse(200, raw="<html>"))

    with pytest.raises(ApiError):
        asyncio.run(api.get_settings())


def test_update_and_delete_paths():
    api, session = make_api(
        FakeResponse(200, dict(TASK_ROW, is_completed=1)),
        FakeResponse(204),
    )

    updated = asyncio.run(api.update_task(1, {"is_completed": 1}))
    asyncio.run(api.delete_task(1))

    assert updated.done is True
    assert session.requests[0][:3] == ("PATCH", "http://api.test/api/tasks/1", {"is_completed": 1})
    assert session.requests[1][:2] == ("DELETE", "http://api.test/api/tasks/1")


def test_session_endpoints():
    api, session = make_api(
        FakeResponse(201, {"id": 7, "start_time": "2024-05-01T09:00:00.000Z"}),
        FakeResponse(200, {"id": 7, "start_time": "2024-05-01T09:00:00.000Z", "end_time": "2024-05-01T09:25:00.000Z"}),
        FakeResponse(201, {"success": True}),
    )

    started = asyncio.run(api.start_session({"start_time": "2024-05-01T09:00:00.000Z"}))
    ended = asyncio.run(api.end_session(7, {"end_time": "2024-05-01T09:25:00.000Z"}))
    asyncio.run(api.record_distraction("tab_switch", 12))

    assert started.is_open is True
    assert ended.is_open is False
    assert session.requests[1][1] == "http://api.test/api/focus-sessions/7"
    assert session.requests[2][1:3] == (
        "http://api.test/api/focus-distractions",
        {"distraction_type": "tab_switch", "duration_seconds": 12},
    )


def test_settings_round_trip_fields():
    api, session = make_api(FakeResponse(200, {"focus_duration_minutes": 50, "cycles_before_long_break": 3}))

    settings = asyncio.run(api.update_settings({"focus_duration_minutes": 50}))

    assert settings.focus_duration_minutes == 50
    assert settings.short_break_minutes == 5
    assert session.requests[0][0] == "PATCH"


def test_close_closes_session():
    api, session = make_api()
    api.close()
    assert session.closed is True
