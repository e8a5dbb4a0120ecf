"""Redis-backed persistence of notification feeds and welcome flags.

Storage is best effort: when Redis is unavailable reads fall back to an empty
feed and writes report failure instead of raising. Callers that load, modify
and save a feed hold ``feed_lock`` for the whole cycle.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID, uuid4

from pydantic import TypeAdapter, ValidationError

from api.schemas.notification import Notification
from configs.redis import get_redis_client
from configs.settings import get_settings
from services.exceptions import FeedLockTimeoutError

logger = logging.getLogger(__name__)

_feed_adapter = TypeAdapter(list[Notification])


def _feed_key(user_id: UUID | str) -> str:
    return f"{get_settings().NOTIFICATION_KEY_PREFIX}:notifications:{user_id}"


def _welcomed_key(user_id: UUID | str) -> str:
    return f"{get_settings().NOTIFICATION_KEY_PREFIX}:welcomed:{user_id}"


async def load_notifications(user_id: UUID | str) -> list[Notification]:
    """
    Load the persisted feed for a user.

    Returns:
        The stored notifications, or an empty list on miss or error
    """
    try:
        redis_client = await get_redis_client()
        raw = await redis_client.get(_feed_key(user_id))
        if not raw:
            return []
        return _feed_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding unreadable notification feed for {user_id}: {e}")
        return []
    except RuntimeError as e:
        logger.warning(f"Redis not available for notification lookup: {e}")
        return []
    except Exception as e:
        logger.warning(f"Notification lookup failed for {user_id}: {e}")
        return []


async def save_notifications(
    user_id: UUID | str,
    notifications: list[Notification],
) -> bool:
    """
    Persist a user's feed.

    Returns:
        True if stored, False on error
    """
    try:
        redis_client = await get_redis_client()
        await redis_client.set(
            _feed_key(user_id),
            _feed_adapter.dump_json(notifications),
            ex=get_settings().NOTIFICATION_TTL_SECONDS,
        )
        return True
    except RuntimeError as e:
        logger.warning(f"Redis not available for notification save: {e}")
        return False
    except Exception as e:
        logger.warning(f"Notification save failed for {user_id}: {e}")
        return False


async def delete_notifications(user_id: UUID | str) -> bool:
    try:
        redis_client = await get_redis_client()
        await redis_client.delete(_feed_key(user_id))
        return True
    except RuntimeError as e:
        logger.warning(f"Redis not available for notification delete: {e}")
        return False
    except Exception as e:
        logger.warning(f"Notification delete failed for {user_id}: {e}")
        return False


async def is_welcomed(user_id: UUID | str) -> bool:
    """Whether the welcome notification was already issued.

    Unknown state is reported as welcomed so an outage never re-sends it.
    """
    try:
        redis_client = await get_redis_client()
        return bool(await redis_client.exists(_welcomed_key(user_id)))
    except Exception as e:
        logger.warning(f"Welcome flag lookup failed for {user_id}: {e}")
        return True


async def mark_welcomed(user_id: UUID | str) -> bool:
    try:
        redis_client = await get_redis_client()
        await redis_client.set(_welcomed_key(user_id), "true")
        return True
    except Exception as e:
        logger.warning(f"Welcome flag save failed for {user_id}: {e}")
        return False


def _lock_key(user_id: UUID | str) -> str:
    return f"{get_settings().NOTIFICATION_KEY_PREFIX}:notifications:lock:{user_id}"


async def acquire_feed_lock(
    user_id: UUID | str, token: str, ttl: Optional[int] = None
) -> bool:
    """Try to take the per-user feed lock.

    Uses Redis SET NX so only one writer holds the lock at a time. The TTL
    frees the lock if its holder dies mid-update.

    Returns:
        True if acquired, False if another writer holds it
    """
    ttl = ttl or get_settings().NOTIFICATION_LOCK_TTL_SECONDS
    try:
        redis_client = await get_redis_client()
        acquired = await redis_client.set(_lock_key(user_id), token, nx=True, ex=ttl)
        return bool(acquired)
    except RuntimeError as e:
        logger.warning(f"Redis not available for feed lock: {e}")
        return True
    except Exception as e:
        logger.warning(f"Feed lock acquisition failed for {user_id}: {e}")
        return True


async def release_feed_lock(user_id: UUID | str, token: str) -> bool:
    """Release the feed lock if ``token`` still owns it."""
    try:
        redis_client = await get_redis_client()
        key = _lock_key(user_id)
        if await redis_client.get(key) != token:
            return False
        await redis_client.delete(key)
        return True
    except RuntimeError as e:
        logger.warning(f"Redis not available for feed lock release: {e}")
        return False
    except Exception as e:
        logger.warning(f"Feed lock release failed for {user_id}: {e}")
        return False


@asynccontextmanager
async def feed_lock(user_id: UUID | str):
    """Serialize load-modify-save cycles on one user's feed.

    Usage:
        async with feed_lock(user_id):
            feed = await load_notifications(user_id)
            ...
            await save_notifications(user_id, feed)

    Raises:
        FeedLockTimeoutError: if the lock stays held past the wait budget
    """
    settings = get_settings()
    token = uuid4().hex
    deadline = time.monotonic() + settings.NOTIFICATION_LOCK_WAIT_SECONDS
    while not await acquire_feed_lock(user_id, token):
        if time.monotonic() >= deadline:
            raise FeedLockTimeoutError(user_id)
        await asyncio.sleep(settings.NOTIFICATION_LOCK_RETRY_SECONDS)
    try:
        yield
    finally:
        await release_feed_lock(user_id, token)
