import pytest

from hackmate.infra.jwt import encode_access
from hackmate.settings import settings


def _as(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


async def _invite(api_client, sender: str, receiver: str, message: str | None = None):
    return await api_client.post(
        "/invitations",
        json={"receiver_id": receiver, "message": message},
        headers=_as(sender),
    )


@pytest.mark.asyncio
async def test_create_invitation(users, api_client):
    response = await _invite(api_client, "alice", "bob", "Want to build something at the hackathon?")
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["sender_id"] == "alice"
    assert body["receiver"]["display_name"] == "Bob Okafor"
    assert response.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_duplicate_invitation_conflict(users, api_client):
    assert (await _invite(api_client, "alice", "bob")).status_code == 201
    response = await _invite(api_client, "alice", "bob")
    assert response.status_code == 409
    assert response.json()["detail"] == "already_sent"
    assert response.json()["kind"] == "CONFLICT"


@pytest.mark.asyncio
async def test_self_invitation_rejected(users, api_client):
    response = await _invite(api_client, "alice", "alice")
    assert response.status_code == 400
    assert response.json()["detail"] == "self_invite"


@pytest.mark.asyncio
async def test_invalid_payload_is_bad_request(users, api_client):
    response = await api_client.post("/invitations", json={"message": "hi"}, headers=_as("alice"))
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "validation_error"
    assert body["kind"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_missing_credentials(users, api_client):
    response = await api_client.post("/invitations", json={"receiver_id": "bob"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["kind"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_dev_header_ignored_outside_dev(users, api_client, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    response = await api_client.get("/invitations", headers=_as("alice"))
    assert response.status_code == 401

    token = encode_access({"sub": "alice"})
    response = await api_client.get("/invitations", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_bad_bearer_token(users, api_client):
    response = await api_client.get("/invitations", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "invalid_token"


@pytest.mark.asyncio
async def test_accept_then_second_response_is_invalid_state(users, api_client):
    invite_id = (await _invite(api_client, "alice", "bob")).json()["id"]

    response = await api_client.patch(f"/invitations/{invite_id}", json={"status": "ACCEPTED"}, headers=_as("bob"))
    assert response.status_code == 200
    assert response.json()["status"] == "ACCEPTED"

    response = await api_client.patch(f"/invitations/{invite_id}", json={"status": "REJECTED"}, headers=_as("bob"))
    assert response.status_code == 409
    assert response.json()["kind"] == "INVALID_STATE"
    assert response.json()["detail"] == "already_processed"

    matches = await api_client.get("/matches", headers=_as("alice"))
    assert [m["user"]["id"] for m in matches.json()] == ["bob"]


@pytest.mark.asyncio
async def test_sender_cannot_respond(users, api_client):
    invite_id = (await _invite(api_client, "alice", "bob")).json()["id"]
    response = await api_client.patch(f"/invitations/{invite_id}", json={"status": "ACCEPTED"}, headers=_as("alice"))
    assert response.status_code == 403
    assert response.json()["detail"] == "not_recipient"


@pytest.mark.asyncio
async def test_respond_to_missing_invitation(users, api_client):
    response = await api_client.patch("/invitations/nope", json={"status": "ACCEPTED"}, headers=_as("bob"))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_pending_is_not_a_valid_response(users, api_client):
    invite_id = (await _invite(api_client, "alice", "bob")).json()["id"]
    response = await api_client.patch(f"/invitations/{invite_id}", json={"status": "PENDING"}, headers=_as("bob"))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_by_box(users, api_client):
    await _invite(api_client, "alice", "bob")
    await _invite(api_client, "carol", "bob")

    inbox = await api_client.get("/invitations", params={"box": "inbox"}, headers=_as("bob"))
    assert {i["sender_id"] for i in inbox.json()} == {"alice", "carol"}

    outbox = await api_client.get("/invitations", params={"box": "outbox"}, headers=_as("bob"))
    assert outbox.json() == []

    bad = await api_client.get("/invitations", params={"box": "trash"}, headers=_as("bob"))
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_invitation_rate_limit(users, api_client, monkeypatch):
    monkeypatch.setattr(settings, "invite_per_minute", 1)
    assert (await _invite(api_client, "alice", "bob")).status_code == 201

    response = await _invite(api_client, "alice", "carol")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.json()["kind"] == "TOO_MANY_REQUESTS"


@pytest.mark.asyncio
async def test_padded_message_within_limit_after_trimming_is_accepted(users, api_client):
    response = await _invite(api_client, "alice", "bob", "  " + "x" * 500 + "  ")
    assert response.status_code == 201
    assert response.json()["message"] == "x" * 500


@pytest.mark.asyncio
async def test_message_over_limit_reports_message_too_long(users, api_client):
    response = await _invite(api_client, "alice", "bob", "x" * 501)
    assert response.status_code == 400
    assert response.json()["detail"] == "message_too_long"
    assert response.json()["kind"] == "INVALID_REQUEST"
