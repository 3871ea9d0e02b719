"""End-to-end tests for the webhook relay application."""

import httpx
from fastapi.testclient import TestClient

from alertmanager_hookshot.app import FAILURE_MESSAGE, SUCCESS_MESSAGE, create_app


def _client(settings, upstream):
    return TestClient(create_app(settings, transport=upstream.transport))


def test_health(settings, recorder):
    with _client(settings, recorder) as client:
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").status_code == 200


def test_null_alerts_forwards_empty_record(settings, recorder):
    with _client(settings, recorder) as client:
        res = client.post("/webhook/abc", json={"alerts": None})

    assert res.status_code == 200
    assert res.text == SUCCESS_MESSAGE
    assert [str(request.url) for request in recorder.requests] == [f"{settings.upstream}/abc"]
    assert recorder.bodies == [{"version": "v2", "empty": True, "msgtype": "m.text"}]


def test_firing_critical_alert(settings, recorder, make_group, critical_alert):
    with _client(settings, recorder) as client:
        res = client.post("/webhook/xyz", json=make_group([critical_alert]))

    assert res.status_code == 200
    assert str(recorder.requests[0].url) == f"{settings.upstream}/xyz"
    body = recorder.bodies[0]
    assert body["version"] == "v2"
    assert body["msgtype"] == "m.text"
    assert "empty" not in body
    assert "FIRING - CRITICAL" in body["plain"]
    assert "DiskFull" in body["plain"]
    assert "severity: critical" in body["plain"]
    assert "summary: disk at 95%" in body["plain"]
    assert f"[Silence]({settings.silence_url}?matcher=" in body["plain"]
    assert "<font color='red'><b>FIRING - CRITICAL" in body["html"]
    assert "Create Silence" in body["html"]


def test_two_alerts_any_failure_fails_request(settings, make_upstream, make_group, critical_alert, resolved_alert):
    upstream = make_upstream(lambda request, index: httpx.Response(500 if index == 0 else 200))

    with _client(settings, upstream) as client:
        res = client.post("/webhook/room", json=make_group([critical_alert, resolved_alert]))

    assert len(upstream.requests) == 2
    assert "DiskFull" in upstream.bodies[0]["plain"]
    assert "HighLatency" in upstream.bodies[1]["plain"]
    assert res.status_code == 500
    assert res.text == FAILURE_MESSAGE


def test_two_alerts_delivered(settings, recorder, make_group, critical_alert, resolved_alert):
    with _client(settings, recorder) as client:
        res = client.post("/webhook/room", json=make_group([critical_alert, resolved_alert]))

    assert res.status_code == 200
    assert len(recorder.requests) == 2


def test_unreachable_upstream(settings, make_upstream, make_group, critical_alert):
    def responder(request, index):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(settings, make_upstream(responder)) as client:
        res = client.post("/webhook/room", json=make_group([critical_alert]))

    assert res.status_code == 500
    assert res.text == FAILURE_MESSAGE
    assert "connection refused" not in res.text


def test_upstream_error_detail_not_leaked(settings, make_upstream):
    upstream = make_upstream(lambda request, index: httpx.Response(403, text="secret token rejected"))

    with _client(settings, upstream) as client:
        res = client.post("/webhook/room", json={"alerts": None})

    assert res.status_code == 500
    assert "secret" not in res.text


def test_invalid_json(settings, recorder):
    with _client(settings, recorder) as client:
        res = client.post(
            "/webhook/room",
            content="not json",
            headers={"content-type": "application/json"},
        )

    assert res.status_code == 500
    assert res.text == FAILURE_MESSAGE
    assert recorder.requests == []


def test_payload_with_wrong_shape(settings, recorder):
    with _client(settings, recorder) as client:
        res = client.post("/webhook/room", json={"alerts": "not-a-list"})

    assert res.status_code == 500
    assert recorder.requests == []


def test_route_id_forwarded_verbatim(settings, recorder):
    with _client(settings, recorder) as client:
        client.post("/webhook/Ab_12-x", json={"alerts": None})

    assert str(recorder.requests[0].url) == f"{settings.upstream}/Ab_12-x"
