"""
Vital <-> Guardian chat.

A conversation has no document of its own: it is the set of messages for a
(vital profile, guardian profile) pair, addressed as "<vitalId>-<guardianId>".
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, List

from beanie import PydanticObjectId as OID
from beanie.operators import In, Set
from fastapi import HTTPException

from careconnect.constants import NotificationType, Role
from careconnect.models import GuardianProfile, Message, User, VitalProfile
from careconnect.schemas import ConversationOut, MessageOut
from careconnect.services.notification_service import notify_user
from careconnect.services.realtime import emit_message_to_chat
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import chat_id_for, message_out

logger = get_logger("chat_service")


@dataclass
class Chat:
    vital: VitalProfile
    guardian: GuardianProfile

    @property
    def chat_id(self) -> str:
        return chat_id_for(self.vital.id, self.guardian.id)

    def role_of(self, user: User) -> Role:
        return Role.VITAL if self.vital.user_id == user.id else Role.GUARDIAN

    def sender_name(self, role: Role) -> str:
        return self.vital.name if role == Role.VITAL else self.guardian.name


def parse_chat_id(chat_id: str) -> tuple[OID, OID]:
    parts = (chat_id or "").split("-")
    if len(parts) != 2:
        raise HTTPException(status_code=400, detail="Invalid chat ID")
    try:
        return OID(parts[0]), OID(parts[1])
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid chat ID")


async def resolve_chat(chat_id: str, user: User) -> Chat:
    """Load both profiles of a chat and make sure the user is one of them."""
    vital_id, guardian_id = parse_chat_id(chat_id)
    vital = await VitalProfile.get(vital_id)
    guardian = await GuardianProfile.get(guardian_id)
    if not vital or not guardian:
        raise HTTPException(status_code=404, detail="Chat not found")

    if user.id not in (vital.user_id, guardian.user_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    return Chat(vital=vital, guardian=guardian)


async def send_message(chat: Chat, user: User, text: str) -> MessageOut:
    """Persist, broadcast to the chat room, then notify the other party."""
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message is required")

    role = chat.role_of(user)
    message = Message(
        vital_id=chat.vital.id,
        guardian_id=chat.guardian.id,
        sender_id=user.id,
        sender_role=role,
        message=text,
    )
    await message.insert()

    out = message_out(message, sender_name=chat.sender_name(role))
    await emit_message_to_chat(chat.chat_id, out.model_dump(mode="json"))

    recipient_user_id = chat.guardian.user_id if role == Role.VITAL else chat.vital.user_id
    try:
        await notify_user(
            user_id=recipient_user_id,
            type=NotificationType.MESSAGE,
            message=f"New message from {'Vital' if role == Role.VITAL else 'Guardian'}",
            related_id=message.id,
        )
    except Exception as e:
        # the message is already stored and delivered
        logger.error(f"Error creating message notification for {message.id}: {e}", exc_info=True)

    return out


async def list_messages(chat: Chat) -> List[MessageOut]:
    messages = await Message.find(
        Message.vital_id == chat.vital.id,
        Message.guardian_id == chat.guardian.id,
    ).sort(+Message.created_at, +Message.id).to_list()
    return [message_out(m, sender_name=chat.sender_name(m.sender_role)) for m in messages]


async def mark_read(chat: Chat, user: User) -> None:
    """Mark everything the other party sent in this chat as read."""
    await Message.find(
        Message.vital_id == chat.vital.id,
        Message.guardian_id == chat.guardian.id,
        Message.sender_id != user.id,
        Message.read == False,  # noqa: E712
    ).update(Set({Message.read: True}))


async def mark_messages_read(user: User, message_ids: Iterable[str]) -> int:
    """Mark specific messages as read, limited to chats the user belongs to."""
    ids = []
    for raw in message_ids or []:
        try:
            ids.append(OID(raw))
        except Exception:
            continue
    if not ids:
        return 0

    if user.role == Role.VITAL:
        profile = await VitalProfile.find_one(VitalProfile.user_id == user.id)
        scope = Message.vital_id == profile.id if profile else None
    else:
        profile = await GuardianProfile.find_one(GuardianProfile.user_id == user.id)
        scope = Message.guardian_id == profile.id if profile else None
    if scope is None:
        return 0

    query = Message.find(In(Message.id, ids), scope, Message.sender_id != user.id)
    count = await query.count()
    await query.update(Set({Message.read: True}))
    return count


async def get_message_for_party(user: User, message_id: OID) -> MessageOut:
    message = await Message.get(message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    vital = await VitalProfile.get(message.vital_id)
    guardian = await GuardianProfile.get(message.guardian_id)
    if not vital or not guardian:
        raise HTTPException(status_code=404, detail="Message not found")
    chat = Chat(vital=vital, guardian=guardian)
    if user.id not in (vital.user_id, guardian.user_id):
        raise HTTPException(status_code=403, detail="Forbidden")
    return message_out(message, sender_name=chat.sender_name(message.sender_role))


async def list_conversations(user: User) -> List[ConversationOut]:
    """One row per counterpart with the last message and this user's unread count."""
    if user.role == Role.VITAL:
        me = await VitalProfile.find_one(VitalProfile.user_id == user.id)
        if not me:
            return []
        messages = await Message.find(Message.vital_id == me.id).sort(-Message.created_at, -Message.id).to_list()
        key = lambda m: m.guardian_id  # noqa: E731
        others = await GuardianProfile.find(In(GuardianProfile.id, list({m.guardian_id for m in messages}))).to_list()
    else:
        me = await GuardianProfile.find_one(GuardianProfile.user_id == user.id)
        if not me:
            return []
        messages = await Message.find(Message.guardian_id == me.id).sort(-Message.created_at, -Message.id).to_list()
        key = lambda m: m.vital_id  # noqa: E731
        others = await VitalProfile.find(In(VitalProfile.id, list({m.vital_id for m in messages}))).to_list()

    by_id = {o.id: o for o in others}
    grouped = defaultdict(list)
    for m in messages:
        grouped[key(m)].append(m)

    conversations = []
    for other_id, msgs in grouped.items():
        last = msgs[0]  # newest first
        other = by_id.get(other_id)
        conversations.append(ConversationOut(
            chat_id=chat_id_for(last.vital_id, last.guardian_id),
            vital_id=str(last.vital_id),
            guardian_id=str(last.guardian_id),
            counterpart_name=other.name if other else None,
            counterpart_photo=(other.profile_photo or None) if other else None,
            last_message=last.message,
            last_message_time=last.created_at,
            unread_count=sum(1 for m in msgs if not m.read and m.sender_id != user.id),
        ))
    return conversations
