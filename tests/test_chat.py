from careconnect.models import Message, Notification, User
from careconnect.services import chat_service

from conftest import create_vital


def _chat_url(vital: dict, guardian: dict) -> str:
    return f"/api/chat/{vital['id']}-{guardian['id']}"


async def test_send_and_list_messages(client, pair):
    vital_headers, vital, guardian_headers, guardian = pair
    url = _chat_url(vital, guardian)

    sent = await client.post(url, json={"message": "  Hello, are you free Monday?  "}, headers=vital_headers)
    assert sent.status_code == 201
    body = sent.json()
    assert body["message"] == "Hello, are you free Monday?"
    assert body["sender_role"] == "VITAL"
    assert body["sender_name"] == "Victor Perera"
    assert body["chat_id"] == f"{vital['id']}-{guardian['id']}"

    reply = await client.post(url, json={"message": "Yes, from 8am."}, headers=guardian_headers)
    assert reply.status_code == 201

    history = await client.get(url, headers=guardian_headers)
    assert history.status_code == 200
    assert [m["message"] for m in history.json()] == ["Hello, are you free Monday?", "Yes, from 8am."]
    assert history.json()[1]["sender_name"] == "Grace Silva"

    note = await Notification.find_one(Notification.type == "MESSAGE")
    assert note.message == "New message from Vital"

    single = await client.get(f"/api/messages/{body['id']}", headers=guardian_headers)
    assert single.status_code == 200
    assert single.json()["message"] == "Hello, are you free Monday?"


async def test_blank_message_rejected(client, pair):
    vital_headers, vital, _, guardian = pair
    resp = await client.post(_chat_url(vital, guardian), json={"message": "   "}, headers=vital_headers)
    assert resp.status_code == 422
    assert await Message.find_all().count() == 0


async def test_chat_access_is_limited_to_its_parties(client, pair):
    _, vital, _, guardian = pair
    stranger_headers, _ = await create_vital(client, email="stranger@example.com")
    url = _chat_url(vital, guardian)

    assert (await client.get(url, headers=stranger_headers)).status_code == 403
    assert (await client.post(url, json={"message": "hi"}, headers=stranger_headers)).status_code == 403

    assert (await client.get("/api/chat/not-a-chat-id", headers=stranger_headers)).status_code == 400
    assert (await client.get("/api/chat/garbage", headers=stranger_headers)).status_code == 400
    missing = f"/api/chat/{vital['id']}-000000000000000000000000"
    assert (await client.get(missing, headers=stranger_headers)).status_code == 404


async def test_message_send_survives_notification_failure(client, pair, monkeypatch):
    vital_headers, vital, _, guardian = pair

    async def broken_notify(**kwargs):
        raise RuntimeError("notifications down")

    monkeypatch.setattr(chat_service, "notify_user", broken_notify)
    resp = await client.post(_chat_url(vital, guardian), json={"message": "Still delivered"}, headers=vital_headers)
    assert resp.status_code == 201
    assert await Message.find_all().count() == 1
    assert await Notification.find_all().count() == 0


async def test_conversations_and_read_state(client, pair):
    vital_headers, vital, guardian_headers, guardian = pair
    url = _chat_url(vital, guardian)
    await client.post(url, json={"message": "First"}, headers=vital_headers)
    await client.post(url, json={"message": "Second"}, headers=vital_headers)

    convos = await client.get("/api/chat", headers=guardian_headers)
    assert convos.status_code == 200
    [convo] = convos.json()
    assert convo["counterpart_name"] == "Victor Perera"
    assert convo["unread_count"] == 2
    assert convo["last_message"] == "Second"

    # the sender has nothing unread
    assert (await client.get("/api/chat", headers=vital_headers)).json()[0]["unread_count"] == 0

    marked = await client.patch(f"{url}/read", headers=guardian_headers)
    assert marked.status_code == 200
    assert (await client.get("/api/chat", headers=guardian_headers)).json()[0]["unread_count"] == 0


async def test_mark_messages_read_is_scoped_to_own_chats(client, pair):
    vital_headers, vital, guardian_headers, guardian = pair
    sent = await client.post(_chat_url(vital, guardian), json={"message": "Hi"}, headers=vital_headers)
    message_id = sent.json()["id"]

    await create_vital(client, email="stranger@example.com")
    stranger = await User.find_one(User.email == "stranger@example.com")
    assert await chat_service.mark_messages_read(stranger, [message_id, "bad-id"]) == 0

    guardian_user = await User.find_one(User.email == "guardian@example.com")
    assert await chat_service.mark_messages_read(guardian_user, [message_id]) == 1
    assert (await Message.find_one()).read is True
