"""Tests for NotificationDispatcher: durable write, then best-effort push."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from src.lm_common.enums import NotificationKind
from src.lm_common.errors import InternalError, NotificationNotFoundError
from src.lm_notification.application.dispatcher import NotificationDispatcher
from src.lm_notification.domain.presence import PresenceRegistry
from tests.fakes import (
    BrokenHandle,
    FakeSession,
    InMemoryNotificationRepository,
    RecordingHandle,
    StalledHandle,
)


@pytest.fixture
def presence() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
def repo() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def dispatcher(
    presence: PresenceRegistry, repo: InMemoryNotificationRepository
) -> NotificationDispatcher:
    return NotificationDispatcher(presence, repo=repo)


async def _emit(dispatcher: NotificationDispatcher, db: FakeSession, recipient: str = "u1"):
    return await dispatcher.emit(
        db,
        recipient_id=recipient,
        kind=NotificationKind.ORDER_UPDATE,
        title="Order Confirmed",
        message="Your order #000001 was updated to: Confirmed",
        metadata={"order_id": "o-1", "status": "Confirmed"},
    )


class TestEmit:
    async def test_offline_recipient_is_persisted_only(
        self, dispatcher: NotificationDispatcher, repo: InMemoryNotificationRepository
    ) -> None:
        db = FakeSession()
        notification = await _emit(dispatcher, db)
        assert db.commits == 1
        assert [n.id for n in repo.rows] == [notification.id]
        assert notification.is_read is False
        assert notification.kind == "ORDER_UPDATE"

    async def test_every_open_channel_gets_the_push(
        self, dispatcher: NotificationDispatcher, presence: PresenceRegistry
    ) -> None:
        phone, laptop = RecordingHandle(), RecordingHandle()
        presence.join("u1", phone)
        presence.join("u1", laptop)
        notification = await _emit(dispatcher, FakeSession())
        for handle in (phone, laptop):
            assert len(handle.sent) == 1
            event = handle.sent[0]
            assert event["event"] == "notification"
            assert event["data"]["id"] == notification.id
            assert event["data"]["order_id"] == "o-1"
            assert event["data"]["metadata"] == {"order_id": "o-1", "status": "Confirmed"}

    async def test_left_channel_gets_nothing(
        self, dispatcher: NotificationDispatcher, presence: PresenceRegistry
    ) -> None:
        stays, goes = RecordingHandle(), RecordingHandle()
        presence.join("u1", stays)
        presence.join("u1", goes)
        presence.leave(goes)
        await _emit(dispatcher, FakeSession())
        assert len(stays.sent) == 1
        assert goes.sent == []

    async def test_other_users_channels_untouched(
        self, dispatcher: NotificationDispatcher, presence: PresenceRegistry
    ) -> None:
        bystander = RecordingHandle()
        presence.join("u2", bystander)
        await _emit(dispatcher, FakeSession(), recipient="u1")
        assert bystander.sent == []

    async def test_failed_push_drops_handle_and_keeps_row(
        self,
        dispatcher: NotificationDispatcher,
        presence: PresenceRegistry,
        repo: InMemoryNotificationRepository,
    ) -> None:
        broken, healthy = BrokenHandle(), RecordingHandle()
        presence.join("u1", broken)
        presence.join("u1", healthy)
        await _emit(dispatcher, FakeSession())
        assert broken.attempts == 1
        assert len(healthy.sent) == 1
        assert presence.channels_for("u1") == {healthy}
        assert len(repo.rows) == 1

    async def test_stalled_channel_is_bounded_and_dropped(
        self, presence: PresenceRegistry, repo: InMemoryNotificationRepository
    ) -> None:
        dispatcher = NotificationDispatcher(presence, repo=repo, push_timeout=0.05)
        stalled, healthy = StalledHandle(), RecordingHandle()
        presence.join("u1", stalled)
        presence.join("u1", healthy)
        notification = await asyncio.wait_for(_emit(dispatcher, FakeSession()), timeout=2)
        assert stalled.attempts == 1
        assert stalled.cancelled
        assert len(healthy.sent) == 1
        assert presence.channels_for("u1") == {healthy}
        assert [n.id for n in repo.rows] == [notification.id]

    async def test_persist_failure_raises_internal_error_without_push(
        self, presence: PresenceRegistry
    ) -> None:
        failing_repo = AsyncMock()
        failing_repo.save.side_effect = OperationalError("INSERT", {}, Exception("db down"))
        dispatcher = NotificationDispatcher(presence, repo=failing_repo)
        handle = RecordingHandle()
        presence.join("u1", handle)
        db = FakeSession()
        with pytest.raises(InternalError):
            await _emit(dispatcher, db)
        assert db.rollbacks == 1
        assert handle.sent == []


class TestBacklog:
    async def test_newest_first_including_read(
        self, dispatcher: NotificationDispatcher
    ) -> None:
        db = FakeSession()
        first = await _emit(dispatcher, db)
        second = await _emit(dispatcher, db)
        await dispatcher.mark_read(db, "u1", first.id)
        backlog = await dispatcher.fetch_backlog(db, "u1")
        assert [n.id for n in backlog] == [second.id, first.id]
        assert backlog[1].is_read is True
        assert await dispatcher.unread_count(db, "u1") == 1

    async def test_mark_read_is_idempotent(self, dispatcher: NotificationDispatcher) -> None:
        db = FakeSession()
        n = await _emit(dispatcher, db)
        assert (await dispatcher.mark_read(db, "u1", n.id)).is_read
        assert (await dispatcher.mark_read(db, "u1", n.id)).is_read

    async def test_mark_read_of_someone_elses_notification(
        self, dispatcher: NotificationDispatcher
    ) -> None:
        db = FakeSession()
        n = await _emit(dispatcher, db, recipient="u1")
        with pytest.raises(NotificationNotFoundError):
            await dispatcher.mark_read(db, "u2", n.id)
        assert db.rollbacks == 1

    async def test_mark_all_read(self, dispatcher: NotificationDispatcher) -> None:
        db = FakeSession()
        for _ in range(3):
            await _emit(dispatcher, db)
        assert await dispatcher.mark_all_read(db, "u1") == 3
        assert await dispatcher.mark_all_read(db, "u1") == 0
        assert await dispatcher.unread_count(db, "u1") == 0
