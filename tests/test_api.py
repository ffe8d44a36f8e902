# Third-party imports
from fastapi.testclient import TestClient
import pytest

# Local application imports
from main import create_app
from tests.conftest import FakeChatModel, FakeWeatherClient, InMemoryChangeFeed
from waterwatch.core.backend import BackendClient
from waterwatch.core.db import create_async_engine
from waterwatch.models.issues.water_issue import ANONYMOUS_USER_ID
from waterwatch.services.chat.model_client import ModelCallError
from waterwatch.services.geo import ClientReportedPosition
from waterwatch.settings import settings

API = settings.API_V1_STR
REPORT = {"issue_type": "leak", "description": "pipe burst", "severity": "high", "location": [28.61, 77.21]}


@pytest.fixture
def chat_model() -> FakeChatModel:
    return FakeChatModel(["Stay safe and report the leak on the map."])


@pytest.fixture
def client(database_url, chat_model):
    app = create_app(
        backend_factory=lambda: BackendClient(create_async_engine(database_url), InMemoryChangeFeed()),
        chat_model=chat_model,
        weather_client=FakeWeatherClient(),
        position_provider_factory=lambda request: ClientReportedPosition(),
    )
    with TestClient(app) as test_client:
        yield test_client


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _sign_up(client: TestClient, email: str = "citizen@example.com") -> str:
    response = client.post(f"{API}/auth/signup", json={"email": email, "password": "s3cret-pass"})
    assert response.status_code == 201, response.text
    return response.json()["data"]["access_token"]


def _admin_token(client: TestClient) -> str:
    response = client.post(
        f"{API}/auth/signin", json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["is_admin"] is True
    return response.json()["data"]["access_token"]


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


def test_sign_up_session_and_sign_out(client):
    token = _sign_up(client)

    session = client.get(f"{API}/auth/session", headers=_auth(token))
    assert session.status_code == 200
    assert session.json()["data"]["user"]["email"] == "citizen@example.com"

    assert client.post(f"{API}/auth/signout", headers=_auth(token)).status_code == 200

    after = client.get(f"{API}/auth/session", headers=_auth(token))
    assert after.status_code == 401
    assert after.json() == {
        "ok": False,
        "error": {"code": "invalid_token", "message": "Could not validate credentials", "details": None},
    }


def test_session_requires_token(client):
    response = client.get(f"{API}/auth/session")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "sign_in_required"


def test_anonymous_report_and_listing(client):
    created = client.post(f"{API}/issues", json=REPORT)
    assert created.status_code == 201
    issue = created.json()["data"]
    assert issue["user_id"] == str(ANONYMOUS_USER_ID)
    assert issue["status"] == "pending"
    assert issue["location"] == [28.61, 77.21]

    listed = client.get(f"{API}/issues").json()["data"]
    assert [item["id"] for item in listed] == [issue["id"]]

    stats = client.get(f"{API}/issues/stats").json()["data"]
    assert stats["total"] == 1
    assert stats["status_counts"]["pending"] == 1
    assert stats["resolution_rate"] == 0


def test_report_validation_errors(client):
    blank = client.post(f"{API}/issues", json={**REPORT, "description": "  "})
    assert blank.status_code == 400
    assert blank.json()["error"]["code"] == "empty_description"

    bad_type = client.post(f"{API}/issues", json={**REPORT, "issue_type": "volcano"})
    assert bad_type.status_code == 400
    error = bad_type.json()["error"]
    assert error["code"] == "bad_request"
    assert error["message"].startswith("issue_type: ")
    assert [detail.split(":")[0] for detail in error["details"]] == ["issue_type"]


def test_admin_status_change_reorders_triage(client):
    older = client.post(f"{API}/issues", json={**REPORT, "description": "older"}).json()["data"]
    client.post(f"{API}/issues", json={**REPORT, "description": "newer"})

    citizen = _sign_up(client)
    forbidden = client.patch(f"{API}/issues/{older['id']}/status", json={"status": "urgent"}, headers=_auth(citizen))
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "admin_required"

    admin = _admin_token(client)
    changed = client.patch(f"{API}/issues/{older['id']}/status", json={"status": "urgent"}, headers=_auth(admin))
    assert changed.status_code == 200
    assert changed.json()["data"]["status"] == "urgent"

    listed = client.get(f"{API}/issues").json()["data"]
    assert listed[0]["id"] == older["id"]
    assert [item["id"] for item in client.get(f"{API}/issues", params={"status": "urgent"}).json()["data"]] == [
        older["id"]
    ]


def test_my_reports(client):
    token = _sign_up(client)
    mine = client.post(f"{API}/issues", json=REPORT, headers=_auth(token)).json()["data"]
    client.post(f"{API}/issues", json=REPORT)

    listed = client.get(f"{API}/issues/mine", headers=_auth(token)).json()["data"]
    assert [item["id"] for item in listed] == [mine["id"]]


def test_anonymous_map_session(client):
    issue = client.post(f"{API}/issues", json=REPORT).json()["data"]

    opened = client.post(f"{API}/map/sessions", json={"latitude": 19.076, "longitude": 72.8777})
    assert opened.status_code == 201
    snapshot = opened.json()["data"]
    assert snapshot["center"] == [19.076, 72.8777]
    assert snapshot["state"] == "ready"
    assert snapshot["weather"] is None
    assert snapshot["weather_error"]
    session_id = snapshot["session_id"]

    markers = client.get(f"{API}/map/sessions/{session_id}/markers").json()["data"]
    popup = markers["layers"]["issues"][0]["popup"]
    assert popup["upvote_action"] == "sign_in"

    upvote = client.post(f"{API}/map/sessions/{session_id}/issues/{issue['id']}/upvote")
    assert upvote.status_code == 401
    assert upvote.json()["error"]["code"] == "sign_in_required"

    assert client.get(f"{API}/issues").json()["data"][0]["upvote_count"] == 0


def test_map_session_denied_location_uses_default_center(client):
    snapshot = client.post(f"{API}/map/sessions", json={"location_denied": True}).json()["data"]
    assert snapshot["center"] == list(settings.DEFAULT_CENTER)
    assert snapshot["geolocation_failure"] == "permission_denied"


def test_map_viewport_controls(client):
    session_id = client.post(f"{API}/map/sessions").json()["data"]["session_id"]
    base = f"{API}/map/sessions/{session_id}"

    assert client.put(f"{base}/zoom", json={"zoom": 25}).json()["data"]["zoom"] == settings.DEFAULT_ZOOM
    assert client.put(f"{base}/zoom", json={"zoom": 12.5}).json()["data"]["zoom"] == 13

    rejected = client.put(f"{base}/center", json={"center": [999, 0]}).json()["data"]
    assert rejected["accepted"] is False
    assert rejected["center"] == list(settings.DEFAULT_CENTER)

    layers = client.put(f"{base}/layers", json={"name": "weather", "visible": True}).json()["data"]
    assert layers["weather"] is True

    missing = client.put(f"{base}/selection", json={"issue_id": "nope"})
    assert missing.status_code == 404

    assert client.delete(base).status_code == 200
    assert client.get(base).status_code == 404


def test_signed_in_upvote_toggle_through_map(client):
    issue = client.post(f"{API}/issues", json=REPORT).json()["data"]
    token = _sign_up(client)
    session_id = client.post(f"{API}/map/sessions", json={"location_denied": True}, headers=_auth(token)).json()[
        "data"
    ]["session_id"]
    url = f"{API}/map/sessions/{session_id}/issues/{issue['id']}/upvote"

    on = client.post(url, headers=_auth(token)).json()["data"]
    assert on == {"issue_id": issue["id"], "has_upvoted": True, "upvote_count": 1}

    snapshot = client.get(f"{API}/map/sessions/{session_id}", headers=_auth(token)).json()["data"]
    assert snapshot["issues"][0]["has_upvoted"] is True

    off = client.post(url, headers=_auth(token)).json()["data"]
    assert off == {"issue_id": issue["id"], "has_upvoted": False, "upvote_count": 0}

    # Another caller cannot use this session
    assert client.get(f"{API}/map/sessions/{session_id}").status_code == 404


def test_sign_out_closes_map_sessions(client):
    token = _sign_up(client)
    session_id = client.post(f"{API}/map/sessions", json={"location_denied": True}, headers=_auth(token)).json()[
        "data"
    ]["session_id"]

    stores = client.app.state.stores
    assert len(stores) == 1

    client.post(f"{API}/auth/signout", headers=_auth(token))
    assert len(stores) == 0
    assert client.get(f"{API}/map/sessions/{session_id}").status_code == 404


def test_notifications(client):
    citizen = _sign_up(client)
    denied = client.post(f"{API}/notifications", json={"message": "Boil water"}, headers=_auth(citizen))
    assert denied.status_code == 403

    admin = _admin_token(client)
    created = client.post(
        f"{API}/notifications", json={"message": "Boil water", "severity": "high"}, headers=_auth(admin)
    )
    assert created.status_code == 201
    notification_id = created.json()["data"]["id"]

    listed = client.get(f"{API}/notifications").json()["data"]
    assert [item["message"] for item in listed] == ["Boil water"]

    assert client.delete(f"{API}/notifications/{notification_id}", headers=_auth(admin)).status_code == 200
    assert client.delete(f"{API}/notifications/{notification_id}", headers=_auth(admin)).status_code == 404


def test_chat_conversation_flow(client, chat_model):
    created = client.post(f"{API}/chat/conversations")
    assert created.status_code == 201
    conversation = created.json()["data"]
    assert conversation["state"] == "ready"
    assert len(conversation["quick_actions"]) == 4
    base = f"{API}/chat/conversations/{conversation['id']}"

    sent = client.post(f"{base}/messages", json={"message": "There is a leak"}).json()["data"]
    assert [(m["role"], m["status"]) for m in sent["messages"]] == [("user", "sent"), ("assistant", "sent")]
    assert sent["messages"][1]["content"] == "Stay safe and report the leak on the map."

    prefill = client.post(
        f"{API}/chat/conversations/prefill",
        json={"conversation_id": conversation["id"], "query": "Status of issue 42?"},
    )
    assert prefill.json()["data"]["delivered"] == 1
    assert client.get(base).json()["data"]["draft"] == "Status of issue 42?"


def test_chat_failure_then_retry(client, chat_model):
    conversation_id = client.post(f"{API}/chat/conversations").json()["data"]["id"]
    base = f"{API}/chat/conversations/{conversation_id}"

    chat_model.errors.append(ModelCallError("upstream 500", status_code=500))
    failed = client.post(f"{base}/messages", json={"message": "hello"}).json()["data"]
    assert failed["state"] == "error"
    assert failed["messages"][-1]["status"] == "error"
    assert failed["error"]["kind"] == "service_error"

    recovered = client.post(f"{base}/retry").json()["data"]
    assert recovered["state"] == "ready"
    assert recovered["error"] is None


def test_unknown_conversation(client):
    response = client.get(f"{API}/chat/conversations/missing")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "conversation_not_found"


def test_closing_a_conversation_drops_its_history(client):
    conversation_id = client.post(f"{API}/chat/conversations").json()["data"]["id"]
    base = f"{API}/chat/conversations/{conversation_id}"

    assert client.delete(base).json()["data"] == {"conversation_id": conversation_id, "closed": True}
    assert client.get(base).status_code == 404


def test_signed_in_conversation_is_private(client):
    token = _sign_up(client)
    conversation_id = client.post(f"{API}/chat/conversations", headers=_auth(token)).json()["data"]["id"]

    assert client.get(f"{API}/chat/conversations/{conversation_id}", headers=_auth(token)).status_code == 200
    assert client.get(f"{API}/chat/conversations/{conversation_id}").status_code == 404


def test_action_plan_tips(client):
    quality = client.get(f"{API}/action-plan/tips", params={"category": "quality"}).json()["data"]
    assert quality["category"] == "quality"
    assert [tip["id"] for tip in quality["tips"]] == [7, 8, 9]

    found = client.get(f"{API}/action-plan/tips", params={"category": "quality", "q": "Rainwater"}).json()["data"]
    assert found["query"] == "Rainwater"
    assert found["category"] is None
    assert [tip["title"] for tip in found["tips"]] == ["Rainwater harvesting basics"]

    unknown = client.get(f"{API}/action-plan/tips", params={"category": "fire"})
    assert unknown.status_code == 400
    assert unknown.json()["error"]["code"] == "bad_request"

    plan = client.get(f"{API}/action-plan").json()["data"]
    assert plan["water_score"] == 87
    assert plan["suggested_searches"][0] == "how to fix a leak"
