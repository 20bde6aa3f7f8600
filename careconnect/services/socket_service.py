"""
Socket.IO event handlers for real-time chat.

Clients authenticate on connect with their access token and are placed in
their personal room ("user_<id>") for notifications; chat rooms are
"chat-<vitalId>-<guardianId>".
"""
from http.cookies import SimpleCookie
from typing import Dict

import socketio
from fastapi import HTTPException

from careconnect.config import get_settings
from careconnect.models import User
from careconnect.security import user_from_token
from careconnect.services import chat_service
from careconnect.services.realtime import sio, user_room, chat_room
from careconnect.utils.logger import get_logger

settings = get_settings()
logger = get_logger("socket")

# socketId -> authenticated user
socket_users: Dict[str, User] = {}


def _token_from_environ(environ: dict, auth: dict | None) -> str | None:
    if auth and auth.get("token"):
        return auth["token"]
    header = (environ or {}).get("HTTP_AUTHORIZATION", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):]
    raw_cookie = (environ or {}).get("HTTP_COOKIE")
    if raw_cookie:
        cookie = SimpleCookie()
        cookie.load(raw_cookie)
        morsel = cookie.get(settings.SESSION_COOKIE_NAME)
        if morsel:
            return morsel.value
    return None


def _error_detail(e: Exception) -> str:
    if isinstance(e, HTTPException):
        return str(e.detail)
    return "Failed to send message"


@sio.on("connect")
async def connect(sid: str, environ: dict, auth: dict | None = None):
    user = await user_from_token(_token_from_environ(environ, auth))
    if not user:
        logger.info(f"❌ Connection rejected for {sid}: not authenticated")
        return False
    socket_users[sid] = user
    await sio.enter_room(sid, user_room(user.id))
    logger.info(f"✅ User connected: {user.id} - Socket: {sid}")
    return True


@sio.on("disconnect")
async def disconnect(sid: str, *args):
    user = socket_users.pop(sid, None)
    logger.info(f"User disconnected: {user.id if user else '-'} - Socket: {sid}")


@sio.on("join-room")
async def join_room(sid: str, data: dict):
    user = socket_users.get(sid)
    chat_id = (data or {}).get("chatId")
    if not user or not chat_id:
        await sio.emit("room-error", {"error": "Failed to join room"}, room=sid)
        return
    try:
        chat = await chat_service.resolve_chat(chat_id, user)
    except HTTPException as e:
        await sio.emit("room-error", {"error": str(e.detail)}, room=sid)
        return

    room_name = chat_room(chat.chat_id)
    await sio.enter_room(sid, room_name)
    logger.info(f"👤 User {user.id} joined room: {room_name}")
    await sio.emit("room-joined", {"roomName": room_name, "chatId": chat.chat_id}, room=sid)


@sio.on("send-message")
async def send_message(sid: str, data: dict):
    user = socket_users.get(sid)
    data = data or {}
    if not user:
        await sio.emit("message-error", {"error": "Unauthorized"}, room=sid)
        return
    chat_id = data.get("chatId")
    if not chat_id and data.get("vitalId") and data.get("guardianId"):
        chat_id = f"{data['vitalId']}-{data['guardianId']}"
    if not chat_id or not data.get("message"):
        await sio.emit("message-error", {"error": "Missing required fields"}, room=sid)
        return

    try:
        chat = await chat_service.resolve_chat(chat_id, user)
        message = await chat_service.send_message(chat, user, data["message"])
    except Exception as e:
        if not isinstance(e, HTTPException):
            logger.error(f"❌ Error sending message: {e}", exc_info=True)
        await sio.emit("message-error", {"error": _error_detail(e)}, room=sid)
        return

    await sio.emit("message-sent", {"messageId": message.id}, room=sid)


@sio.on("mark-read")
async def mark_read(sid: str, data: dict):
    user = socket_users.get(sid)
    message_ids = (data or {}).get("messageIds")
    if not user or not isinstance(message_ids, list):
        return
    count = await chat_service.mark_messages_read(user, message_ids)
    logger.info(f"Marked {count} message(s) as read for user {user.id}")


def get_socket_app():
    """Socket.IO ASGI app, mounted at /socket.io."""
    return socketio.ASGIApp(sio, socketio_path="socket.io")
