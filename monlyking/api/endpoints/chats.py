"""Chat endpoints and the realtime relay."""
import asyncio

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from monlyking.core.database import get_db, AsyncSessionLocal
from monlyking.core.redis import redis_client, chat_channel
from monlyking.core.security import get_current_user, decode_token
from monlyking.models.user import User
from monlyking.schemas.chat import MessageCreate, MessageResponse, ChatRoomSummary
from monlyking.services import chat as chat_service

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/", response_model=list[ChatRoomSummary])
async def list_rooms(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Chats of the current user with their last message and unread count."""
    return await chat_service.user_rooms(db, user.id)


@router.get("/support", response_model=list[MessageResponse])
async def support_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Replies from the support team."""
    messages = await chat_service.room_history(db, chat_service.support_room(user.id), user.id)
    await db.commit()
    return [chat_service.message_payload(m, user.id) for m in messages]


@router.get("/{other_user_id}/messages", response_model=list[MessageResponse])
async def get_messages(
    other_user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Conversation with another user, oldest first. Marks it as read."""
    room = chat_service.room_key(user.id, other_user_id)
    messages = await chat_service.room_history(db, room, user.id)
    await db.commit()
    return [chat_service.message_payload(m, user.id) for m in messages]


@router.post("/{other_user_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    other_user_id: int,
    message_data: MessageCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    message = await chat_service.send_message(
        db,
        user,
        other_user_id,
        type=message_data.type,
        content=message_data.content,
        offer_price=message_data.offer_price,
        original_price=message_data.original_price,
        product_id=message_data.product_id,
        image_url=message_data.image_url,
    )
    await db.commit()
    await db.refresh(message)

    await chat_service.publish_message(message)
    return chat_service.message_payload(message, user.id)


@router.websocket("/ws/{other_user_id}")
async def chat_stream(
    websocket: WebSocket,
    other_user_id: int,
    token: str = Query(...),
):
    """Relay new messages of a room to the connected client."""
    user_id = decode_token(token)
    if user_id is None or user_id == other_user_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    async with AsyncSessionLocal() as db:
        user = await db.get(User, user_id)
    if not user or not user.is_active:
        logger.info("chat_stream_refused", user_id=user_id)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    room = chat_service.room_key(user_id, other_user_id)
    await websocket.accept()
    logger.info("chat_stream_opened", user_id=user_id, room=room)

    async def forward():
        async for event in redis_client.subscribe(chat_channel(room)):
            await websocket.send_json(event)

    relay = asyncio.create_task(forward())
    try:
        # Client frames are ignored; receiving detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        relay.cancel()
        try:
            await relay
        except asyncio.CancelledError:
            pass
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning("chat_relay_failed", user_id=user_id, room=room, error=str(e))
        logger.info("chat_stream_closed", user_id=user_id, room=room)
