import asyncio
import json
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from api.schemas import Notification
from configs.settings import Settings
from services import notification_store
from services.exceptions import FeedLockTimeoutError


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def sample_feed():
    return [
        Notification(
            id="cert-expiry-1",
            title="Certification Expiring Soon",
            message="Your CKA certification expires in 5 days",
            timestamp=datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc),
            read=True,
            metadata={"days_until_expiry": 5},
        )
    ]


class TestKeys:
    def test_feed_key_format(self, user_id):
        assert (
            notification_store._feed_key(user_id)
            == f"skillmatrix:notifications:{user_id}"
        )

    def test_welcomed_key_format(self, user_id):
        assert notification_store._welcomed_key(user_id) == f"skillmatrix:welcomed:{user_id}"


class TestLoadNotifications:
    @pytest.mark.asyncio
    async def test_returns_empty_on_miss(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.get.return_value = None

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            result = await notification_store.load_notifications(user_id)

        assert result == []

    @pytest.mark.asyncio
    async def test_round_trips_saved_feed(self, user_id, sample_feed):
        mock_redis = AsyncMock()

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            saved = await notification_store.save_notifications(user_id, sample_feed)
            stored = mock_redis.set.call_args.args[1]
            mock_redis.get.return_value = stored
            loaded = await notification_store.load_notifications(user_id)

        assert saved is True
        assert loaded == sample_feed
        assert loaded[0].read is True

    @pytest.mark.asyncio
    async def test_discards_unreadable_payload(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.get.return_value = json.dumps([{"id": "missing-fields"}])

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            result = await notification_store.load_notifications(user_id)

        assert result == []

    @pytest.mark.asyncio
    async def test_returns_empty_when_redis_not_initialized(self, user_id):
        with patch.object(
            notification_store,
            "get_redis_client",
            side_effect=RuntimeError("not initialized"),
        ):
            result = await notification_store.load_notifications(user_id)

        assert result == []

    @pytest.mark.asyncio
    async def test_returns_empty_on_redis_error(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.get.side_effect = Exception("Connection lost")

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            result = await notification_store.load_notifications(user_id)

        assert result == []


class TestSaveNotifications:
    @pytest.mark.asyncio
    async def test_sets_ttl(self, user_id, sample_feed):
        mock_redis = AsyncMock()

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            await notification_store.save_notifications(user_id, sample_feed)

        assert mock_redis.set.call_args.kwargs["ex"] == 60 * 60 * 24 * 90

    @pytest.mark.asyncio
    async def test_returns_false_on_error(self, user_id, sample_feed):
        mock_redis = AsyncMock()
        mock_redis.set.side_effect = Exception("Connection lost")

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            result = await notification_store.save_notifications(user_id, sample_feed)

        assert result is False

    @pytest.mark.asyncio
    async def test_returns_false_when_redis_not_initialized(
        self, user_id, sample_feed
    ):
        with patch.object(
            notification_store,
            "get_redis_client",
            side_effect=RuntimeError("not initialized"),
        ):
            result = await notification_store.save_notifications(user_id, sample_feed)

        assert result is False


class TestDeleteNotifications:
    @pytest.mark.asyncio
    async def test_deletes_feed_key(self, user_id):
        mock_redis = AsyncMock()

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            result = await notification_store.delete_notifications(user_id)

        assert result is True
        mock_redis.delete.assert_awaited_once_with(
            f"skillmatrix:notifications:{user_id}"
        )

    @pytest.mark.asyncio
    async def test_returns_false_on_error(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.delete.side_effect = Exception("Connection lost")

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            assert await notification_store.delete_notifications(user_id) is False


class TestWelcomeFlag:
    @pytest.mark.asyncio
    async def test_not_welcomed_when_key_absent(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.exists.return_value = 0

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            assert await notification_store.is_welcomed(user_id) is False

    @pytest.mark.asyncio
    async def test_welcomed_after_mark(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.exists.return_value = 1

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            assert await notification_store.mark_welcomed(user_id) is True
            assert await notification_store.is_welcomed(user_id) is True

        mock_redis.set.assert_awaited_once_with(
            f"skillmatrix:welcomed:{user_id}", "true"
        )

    @pytest.mark.asyncio
    async def test_unknown_state_counts_as_welcomed(self, user_id):
        with patch.object(
            notification_store,
            "get_redis_client",
            side_effect=RuntimeError("not initialized"),
        ):
            assert await notification_store.is_welcomed(user_id) is True
            assert await notification_store.mark_welcomed(user_id) is False


class TestFeedLock:
    @pytest.fixture
    def quick_settings(self, monkeypatch):
        settings = Settings(
            _env_file=None,
            NOTIFICATION_LOCK_WAIT_SECONDS=0.1,
            NOTIFICATION_LOCK_RETRY_SECONDS=0.01,
        )
        monkeypatch.setattr(notification_store, "get_settings", lambda: settings)
        return settings

    @pytest.mark.asyncio
    async def test_acquire_uses_set_nx_with_ttl(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.set.return_value = True

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            acquired = await notification_store.acquire_feed_lock(user_id, "tok")

        assert acquired is True
        mock_redis.set.assert_awaited_once_with(
            f"skillmatrix:notifications:lock:{user_id}", "tok", nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_reports_held_lock(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.set.return_value = None

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            assert await notification_store.acquire_feed_lock(user_id, "tok") is False

    @pytest.mark.asyncio
    async def test_acquire_proceeds_without_redis(self, user_id):
        with patch.object(
            notification_store,
            "get_redis_client",
            side_effect=RuntimeError("not initialized"),
        ):
            assert await notification_store.acquire_feed_lock(user_id, "tok") is True

    @pytest.mark.asyncio
    async def test_release_leaves_foreign_lock(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.get.return_value = "someone-else"

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            released = await notification_store.release_feed_lock(user_id, "tok")

        assert released is False
        mock_redis.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_release_own_lock(self, user_id):
        mock_redis = AsyncMock()
        mock_redis.get.return_value = "tok"

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            assert await notification_store.release_feed_lock(user_id, "tok") is True

        mock_redis.delete.assert_awaited_once_with(
            f"skillmatrix:notifications:lock:{user_id}"
        )

    @pytest.mark.asyncio
    async def test_second_holder_waits_for_release(self, user_id, quick_settings):
        events = []
        mock_redis = AsyncMock()
        holder = {}

        async def fake_set(key, value, nx=False, ex=None):
            if key in holder:
                return None
            holder[key] = value
            return True

        async def fake_get(key):
            return holder.get(key)

        async def fake_delete(key):
            holder.pop(key, None)

        mock_redis.set.side_effect = fake_set
        mock_redis.get.side_effect = fake_get
        mock_redis.delete.side_effect = fake_delete

        async def worker(name, pause):
            async with notification_store.feed_lock(user_id):
                events.append(f"{name}-in")
                await asyncio.sleep(pause)
                events.append(f"{name}-out")

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            first = asyncio.create_task(worker("first", 0.03))
            await asyncio.sleep(0)
            await asyncio.gather(first, worker("second", 0))

        assert events == ["first-in", "first-out", "second-in", "second-out"]
        assert holder == {}

    @pytest.mark.asyncio
    async def test_lock_wait_times_out(self, user_id, quick_settings):
        mock_redis = AsyncMock()
        mock_redis.set.return_value = None

        with patch.object(
            notification_store, "get_redis_client", return_value=mock_redis
        ):
            with pytest.raises(FeedLockTimeoutError):
                async with notification_store.feed_lock(user_id):
                    pass
