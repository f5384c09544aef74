import json
from datetime import datetime, timezone

import pytest

from lunartrack.api import ApiHandler, DebugInfo, MessageResponse
from lunartrack.models import MessageContent, MessageType, RocketMessage
from lunartrack.web import Request


def make_message(channel, number, message_type):
    content = MessageContent()
    if message_type == MessageType.ROCKET_LAUNCHED:
        content = MessageContent(type="Falcon Heavy", mission="Test Mission", launch_speed=1000)
    elif message_type == MessageType.ROCKET_SPEED_INCREASED:
        content = MessageContent(by=500)
    elif message_type == MessageType.ROCKET_SPEED_DECREASED:
        content = MessageContent(by=300)
    elif message_type == MessageType.ROCKET_EXPLODED:
        content = MessageContent(reason="Engine failure")
    elif message_type == MessageType.ROCKET_MISSION_CHANGED:
        content = MessageContent(new_mission="New Mission")
    return RocketMessage(
        channel=channel,
        message_number=number,
        message_time=datetime.now(timezone.utc),
        message_type=str(message_type),
        message=content,
    )


def post(handler, payload):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    request = Request(
        method="POST", path="/messages", headers={"Content-Type": "application/json"}, body=body
    )
    return handler.handle_message(request)


def get_with_id(method, rocket_id):
    return method(Request(path="/rockets/" + rocket_id, path_params={"id": rocket_id}))


def test_handle_message_success():
    handler = ApiHandler()
    response = post(handler, make_message("test-rocket-1", 1, MessageType.ROCKET_LAUNCHED).to_dict())
    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    body = response.json()
    assert body["status"] == "success"
    assert body["rocketId"] == "test-rocket-1"
    assert body["messageNumber"] == 1
    assert body["message"] == "Message processed successfully"


def test_handle_message_invalid_json():
    response = post(ApiHandler(), b"invalid json")
    assert response.status == 400
    assert response.json()["error"]["message"] == "Invalid JSON format"


def test_handle_message_json_string_is_rejected():
    response = post(ApiHandler(), "invalid json")
    assert response.status == 400
    assert response.json()["error"]["code"] == 400


def test_handle_message_empty_body():
    response = post(ApiHandler(), b"")
    assert response.status == 400
    assert response.json()["error"]["details"] == "EOF"


def test_handle_message_validation_error():
    msg = make_message("", 1, MessageType.ROCKET_LAUNCHED)
    response = post(ApiHandler(), msg.to_dict())
    assert response.status == 400
    error = response.json()["error"]
    assert error["message"] == "Validation failed"
    assert error["field"] == "channel"


def test_handle_message_processing_failure():
    handler = ApiHandler()
    post(handler, make_message("fail-rocket", 1, MessageType.ROCKET_LAUNCHED).to_dict())
    post(handler, make_message("fail-rocket", 2, MessageType.ROCKET_EXPLODED).to_dict())
    response = post(handler, make_message("fail-rocket", 3, MessageType.ROCKET_SPEED_INCREASED).to_dict())
    assert response.status == 400
    error = response.json()["error"]
    assert error["message"] == "Message processing failed"
    assert error["rocketId"] == "fail-rocket"
    assert error["messageNumber"] == 3
    assert error["messageType"] == "RocketSpeedIncreased"


def test_handle_get_rockets_empty_list():
    response = ApiHandler().handle_get_rockets(Request(path="/rockets"))
    assert response.status == 200
    assert response.json() == []


def test_handle_get_rockets_with_rockets():
    handler = ApiHandler()
    ids = ["rocket-1", "rocket-2", "rocket-3"]
    for rocket_id in ids:
        handler.repository.process_message(make_message(rocket_id, 1, MessageType.ROCKET_LAUNCHED))
    response = handler.handle_get_rockets(Request(path="/rockets"))
    assert response.status == 200
    rockets = response.json()
    assert [r["id"] for r in rockets] == ids


def test_handle_get_rockets_sorted_by_speed_desc():
    handler = ApiHandler()
    for rocket_id, speed in [("rocket-a", 10), ("rocket-b", 30), ("rocket-c", 20)]:
        msg = make_message(rocket_id, 1, MessageType.ROCKET_LAUNCHED)
        msg.message.launch_speed = speed
        handler.repository.process_message(msg)
    response = handler.handle_get_rockets(
        Request(path="/rockets", query_string="sortBy=speed&sortOrder=desc")
    )
    assert [r["speed"] for r in response.json()] == [30, 20, 10]


@pytest.mark.parametrize(
    "query, message",
    [("sortBy=color", "Invalid sort field"), ("sortOrder=sideways", "Invalid sort order")],
)
def test_handle_get_rockets_invalid_sorting(query, message):
    response = ApiHandler().handle_get_rockets(Request(path="/rockets", query_string=query))
    assert response.status == 400
    assert response.json()["error"]["message"] == message


def test_handle_get_rocket_success():
    handler = ApiHandler()
    handler.repository.process_message(make_message("test-rocket-1", 1, MessageType.ROCKET_LAUNCHED))
    response = get_with_id(handler.handle_get_rocket, "test-rocket-1")
    assert response.status == 200
    rocket = response.json()
    assert rocket["id"] == "test-rocket-1"
    assert rocket["type"] == "Falcon Heavy"
    assert "lastProcessedMessageNumber" not in rocket


def test_handle_get_rocket_not_found():
    response = get_with_id(ApiHandler().handle_get_rocket, "non-existent-rocket")
    assert response.status == 404
    error = response.json()["error"]
    assert error["message"] == "Rocket not found"
    assert error["details"] == "No rocket found with ID: non-existent-rocket"


def test_handle_get_rocket_three_character_id_is_not_found():
    response = get_with_id(ApiHandler().handle_get_rocket, "abc")
    assert response.status == 404
    assert response.json()["error"]["code"] == 404


def test_handle_get_rocket_short_id_is_bad_request():
    response = get_with_id(ApiHandler().handle_get_rocket, "ab")
    assert response.status == 400
    assert response.json()["error"]["field"] == "rocketId"


def test_handle_debug_rocket_success():
    handler = ApiHandler()
    handler.repository.process_message(make_message("test-rocket-1", 1, MessageType.ROCKET_LAUNCHED))
    handler.repository.process_message(make_message("test-rocket-1", 3, MessageType.ROCKET_SPEED_INCREASED))
    response = get_with_id(handler.handle_debug_rocket, "test-rocket-1")
    assert response.status == 200
    info = response.json()
    assert info["rocketId"] == "test-rocket-1"
    assert info["processedMessageCount"] == 1
    assert info["pendingMessageCount"] == 1
    assert info["pendingMessageNumbers"] == [3]
    assert info["lastProcessedMessage"] == 1


def test_handle_debug_rocket_not_found():
    response = get_with_id(ApiHandler().handle_debug_rocket, "missing-rocket")
    assert response.status == 404


def test_handle_debug_all_success():
    handler = ApiHandler()
    ids = ["rocket-1", "rocket-2"]
    for rocket_id in ids:
        handler.repository.process_message(make_message(rocket_id, 1, MessageType.ROCKET_LAUNCHED))
    response = handler.handle_debug_all(Request(path="/debug/rockets"))
    assert response.status == 200
    infos = response.json()
    assert {info["rocketId"] for info in infos} == set(ids)
    assert all(info["lastProcessedMessage"] == 1 for info in infos)
    assert all(info["pendingMessageNumbers"] is None for info in infos)


def test_message_processing_flow():
    handler = ApiHandler()
    kinds = [
        MessageType.ROCKET_LAUNCHED,
        MessageType.ROCKET_SPEED_INCREASED,
        MessageType.ROCKET_SPEED_DECREASED,
        MessageType.ROCKET_MISSION_CHANGED,
        MessageType.ROCKET_EXPLODED,
    ]
    for number, kind in enumerate(kinds, start=1):
        response = post(handler, make_message("test-rocket-flow", number, kind).to_dict())
        assert response.status == 200, kind

    rocket = get_with_id(handler.handle_get_rocket, "test-rocket-flow")
    assert rocket.status == 200
    assert rocket.json()["exploded"] is True

    debug = get_with_id(handler.handle_debug_rocket, "test-rocket-flow")
    assert debug.status == 200
    assert debug.json()["lastProcessedMessage"] == 5


def test_message_response_to_dict():
    assert MessageResponse(rocket_id="r-1", message_number=4).to_dict() == {
        "status": "success",
        "message": "Message processed successfully",
        "rocketId": "r-1",
        "messageNumber": 4,
    }


def test_debug_info_to_dict_empty_pending_is_null():
    assert DebugInfo(rocket_id="r-1", last_processed_message=2).to_dict() == {
        "rocketId": "r-1",
        "processedMessageCount": 0,
        "pendingMessageCount": 0,
        "pendingMessageNumbers": None,
        "lastProcessedMessage": 2,
    }