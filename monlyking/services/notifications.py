"""Realtime notifications pushed to users over Redis pub/sub."""
from datetime import datetime

import structlog

from monlyking.core.redis import redis_client, notification_channel

logger = structlog.get_logger(__name__)


async def notify(user_id: int, event: str, **payload) -> None:
    """Publish ``event`` on the user's notification channel."""
    delivered = await redis_client.publish(
        notification_channel(user_id),
        {"event": event, "at": datetime.utcnow().isoformat(), **payload},
    )
    logger.debug("notification_published", user_id=user_id, event=event, subscribers=delivered)
