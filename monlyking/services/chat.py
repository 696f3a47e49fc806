"""Two-party chat rooms with contact-information filtering."""
import re
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.exceptions import InvalidRequestError, NotFoundError, PermissionDeniedError
from monlyking.core.metrics import MESSAGES_SENT
from monlyking.core.redis import redis_client, chat_channel
from monlyking.models.chat import ChatMessage, MessageType
from monlyking.models.user import User

logger = structlog.get_logger(__name__)

SUPPORT_ROOM_PREFIX = "admin-support_"
SUPPORT_SENDER_NAME = "admin-support"

CONTACT_INFO_REGEX = re.compile(
    r"@|\.com|phone|discord|skype|telegram|whatsapp|email|gmail|yahoo|hotmail"
    r"|\+\d{1,3}[-.\s]?\d|call\s*me|text\s*me|contact\s*me",
    re.IGNORECASE,
)
CONTACT_INFO_REASON = "Contact information detected"
WITHHELD_CONTENT = "[message hidden: contact information is not allowed]"


def room_key(user_a: int, user_b: int) -> str:
    """Order-independent key for the room between two users."""
    return "_".join(sorted([str(user_a), str(user_b)]))


def support_room(user_id: int) -> str:
    return f"{SUPPORT_ROOM_PREFIX}{user_id}"


def room_members(room: str) -> list[int]:
    """User ids that may read ``room``."""
    if room.startswith(SUPPORT_ROOM_PREFIX):
        return [int(room[len(SUPPORT_ROOM_PREFIX):])]
    return [int(part) for part in room.split("_")]


def other_member(room: str, user_id: int) -> Optional[int]:
    if room.startswith(SUPPORT_ROOM_PREFIX):
        return None
    others = [member for member in room_members(room) if member != user_id]
    return others[0] if others else None


def contains_contact_info(text: Optional[str]) -> bool:
    if not text:
        return False
    return CONTACT_INFO_REGEX.search(text) is not None


def visible_content(message: ChatMessage, viewer_id: Optional[int], reveal: bool = False) -> str:
    """Filtered messages are only readable by their sender and by moderators."""
    if message.is_filtered and not reveal and message.sender_id != viewer_id:
        return WITHHELD_CONTENT
    return message.content


def message_payload(message: ChatMessage, viewer_id: Optional[int] = None, reveal: bool = False) -> dict:
    return {
        "id": message.id,
        "room": message.room,
        "sender_id": message.sender_id,
        "sender_name": message.sender_name,
        "type": message.type,
        "content": visible_content(message, viewer_id, reveal),
        "offer_price": message.offer_price,
        "original_price": message.original_price,
        "product_id": message.product_id,
        "image_url": message.image_url,
        "read_by": list(message.read_by or []),
        "is_filtered": message.is_filtered,
        "filtered_reason": message.filtered_reason,
        "created_at": message.created_at,
    }


async def send_message(
    db: AsyncSession,
    sender: User,
    recipient_id: int,
    *,
    type: MessageType = MessageType.TEXT,
    content: str = "",
    offer_price=None,
    original_price=None,
    product_id: Optional[int] = None,
    image_url: Optional[str] = None,
) -> ChatMessage:
    """
    Store a message in the room shared by ``sender`` and ``recipient_id``.

    Messages that look like contact details are kept but flagged, and the
    recipient only ever sees a placeholder.
    """
    if recipient_id == sender.id:
        raise InvalidRequestError("Cannot send message to yourself")

    recipient = await db.get(User, recipient_id)
    if not recipient:
        raise NotFoundError("User", recipient_id)

    filtered = contains_contact_info(content)

    message = ChatMessage(
        room=room_key(sender.id, recipient_id),
        sender_id=sender.id,
        sender_name=sender.display_name or sender.username,
        type=type,
        content=content,
        offer_price=offer_price,
        original_price=original_price,
        product_id=product_id,
        image_url=image_url,
        read_by=[sender.id],
        is_filtered=filtered,
        filtered_reason=CONTACT_INFO_REASON if filtered else None,
        created_at=datetime.utcnow(),
    )
    db.add(message)
    await db.flush()

    MESSAGES_SENT.labels(type=type.value, filtered=str(filtered).lower()).inc()
    if filtered:
        logger.warning("chat_message_filtered", message_id=message.id, sender_id=sender.id, room=message.room)
    else:
        logger.info("chat_message_sent", message_id=message.id, sender_id=sender.id, room=message.room)
    return message


async def post_support_message(db: AsyncSession, user_id: int, text: str) -> ChatMessage:
    """Post a staff reply into the user's support room."""
    message = ChatMessage(
        room=support_room(user_id),
        sender_id=None,
        sender_name=SUPPORT_SENDER_NAME,
        type=MessageType.TEXT,
        content=f"Support Response: {text}",
        read_by=[],
        is_filtered=False,
        created_at=datetime.utcnow(),
    )
    db.add(message)
    await db.flush()

    MESSAGES_SENT.labels(type=MessageType.TEXT.value, filtered="false").inc()
    logger.info("support_message_posted", message_id=message.id, user_id=user_id)
    return message


async def publish_message(message: ChatMessage) -> None:
    await redis_client.publish(chat_channel(message.room), message_payload(message))


async def room_history(
    db: AsyncSession,
    room: str,
    viewer_id: int,
    mark_read: bool = True,
) -> list[ChatMessage]:
    """Messages in ``room`` oldest first; marks them read by the viewer."""
    if viewer_id not in room_members(room):
        raise PermissionDeniedError("Not a member of this chat")

    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.room == room)
        .order_by(ChatMessage.created_at, ChatMessage.id)
    )
    messages = list(result.scalars().all())

    if mark_read:
        marked = 0
        for message in messages:
            readers = list(message.read_by or [])
            if viewer_id not in readers:
                # Reassign so the JSON column registers the change
                message.read_by = readers + [viewer_id]
                marked += 1
        if marked:
            await db.flush()
            logger.debug("chat_messages_read", room=room, user_id=viewer_id, count=marked)

    return messages


async def _rooms_of(db: AsyncSession, user_id: int) -> list:
    """(room, last_id) rows for every room the user belongs to."""
    uid = str(user_id)
    result = await db.execute(
        select(ChatMessage.room, func.max(ChatMessage.id).label("last_id"))
        .where(
            (ChatMessage.room.like(f"{uid}\\_%", escape="\\"))
            | (ChatMessage.room.like(f"%\\_{uid}", escape="\\"))
        )
        .group_by(ChatMessage.room)
    )
    return [row for row in result.all() if user_id in room_members(row.room)]


async def user_rooms(db: AsyncSession, user_id: int) -> list[dict]:
    """Rooms the user belongs to, most recent activity first."""
    rooms = await _rooms_of(db, user_id)

    summaries = []
    for row in rooms:
        messages = (await db.execute(
            select(ChatMessage).where(ChatMessage.room == row.room)
        )).scalars().all()
        last = next(m for m in messages if m.id == row.last_id)
        unread = sum(1 for m in messages if user_id not in (m.read_by or []))
        summaries.append({
            "room": row.room,
            "other_user_id": other_member(row.room, user_id),
            "last_message": message_payload(last, user_id),
            "unread_count": unread,
        })

    summaries.sort(key=lambda s: s["last_message"]["id"], reverse=True)
    return summaries


async def user_transcripts(db: AsyncSession, user_id: int) -> list[dict]:
    """
    Every room of a user with its full history, for moderation.

    Filtered messages are returned unredacted and nothing is marked read.
    """
    transcripts = []
    for row in await _rooms_of(db, user_id):
        messages = (await db.execute(
            select(ChatMessage)
            .where(ChatMessage.room == row.room)
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )).scalars().all()
        transcripts.append({
            "room": row.room,
            "other_user_id": other_member(row.room, user_id),
            "last_message_id": row.last_id,
            "filtered_count": sum(1 for m in messages if m.is_filtered),
            "messages": [message_payload(m, reveal=True) for m in messages],
        })

    transcripts.sort(key=lambda t: t["last_message_id"], reverse=True)
    return transcripts
