"""
Socket.IO server instance plus the emit helpers used from HTTP handlers.

Event handlers live in socket_service; keeping the server here lets chat and
notification code emit without importing the handlers.
"""
import asyncio
from typing import Set

import httpx
import socketio

from careconnect.config import get_settings
from careconnect.utils.logger import get_logger

settings = get_settings()
logger = get_logger("realtime")

sio = socketio.AsyncServer(
    cors_allowed_origins=settings.cors_origins or "*",
    async_mode="asgi",
    logger=False,
    engineio_logger=False,
)

# strong refs so pending relay tasks aren't garbage collected
_pending: Set[asyncio.Task] = set()


def user_room(user_id) -> str:
    return f"user_{user_id}"


def chat_room(chat_id: str) -> str:
    return f"chat-{chat_id}"


async def emit_message_to_chat(chat_id: str, message_data: dict) -> None:
    """Broadcast a stored message to everyone in the chat room."""
    try:
        await sio.emit("receive-message", message_data, room=chat_room(chat_id))
    except Exception as e:
        logger.warning(f"⚠️ Failed to emit message to chat {chat_id}: {e}")


async def _post_to_relay(user_id: str, payload: dict) -> None:
    url = f"{settings.SOCKET_RELAY_URL.rstrip('/')}/notify"
    async with httpx.AsyncClient(timeout=settings.NOTIFY_RELAY_TIMEOUT_SECONDS) as client:
        resp = await client.post(url, json={"userId": user_id, "notification": payload})
        resp.raise_for_status()


async def relay_notification(user_id: str, payload: dict) -> None:
    """Push a notification to the user's live sockets.

    Goes through the companion relay when SOCKET_RELAY_URL is set, otherwise
    emits in-process. Bounded by NOTIFY_RELAY_TIMEOUT_SECONDS; errors are
    logged, never raised.
    """
    try:
        if settings.SOCKET_RELAY_URL:
            coro = _post_to_relay(user_id, payload)
        else:
            coro = sio.emit("notification", payload, room=user_room(user_id))
        await asyncio.wait_for(coro, timeout=settings.NOTIFY_RELAY_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning(f"⚠️ Notification relay timed out for user {user_id}")
    except Exception as e:
        logger.warning(f"⚠️ Notification relay failed for user {user_id}: {e}")


def schedule_relay(user_id: str, payload: dict) -> None:
    """Fire-and-forget relay_notification."""
    task = asyncio.create_task(relay_notification(user_id, payload))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
