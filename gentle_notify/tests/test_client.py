"""Tests for the caller-facing notification client."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from gentle_notify.center import SchedulerNotificationCenter
from gentle_notify.client import (
    DEFAULT_PREVIEW_PLACEHOLDER,
    NotificationClient,
    create_default_client,
)
from gentle_notify.categories import NotificationCategory
from gentle_notify.config import NotifyConfig
from gentle_notify.enums import InterruptionLevel
from gentle_notify.errors import DuplicateIdentifier
from gentle_notify.gateway import NotificationCenter
from gentle_notify.models import (
    NotificationContent,
    NotificationItem,
    NotificationRequest,
    TimeInterval,
)
from gentle_notify.policy import PolicyEngine
from gentle_notify.triggers import IntervalTrigger
from gentle_notify.tests.fakes import InMemoryNotificationStore


class TestSchedule:
    @pytest.mark.asyncio
    async def test_returns_identifier(self):
        store = InMemoryNotificationStore()
        client = NotificationClient(store)
        request = NotificationRequest(
            identifier="abc",
            content=NotificationContent(title="t", body="b"),
            schedule=TimeInterval(10),
        )

        assert await client.schedule(request) == "abc"
        assert await client.pending() == [NotificationItem("abc")]

    @pytest.mark.asyncio
    async def test_propagates_rejections(self):
        store = InMemoryNotificationStore(pending=[NotificationItem("abc")])
        client = NotificationClient(store)
        request = NotificationRequest(
            identifier="abc",
            content=NotificationContent(title="t", body="b"),
            schedule=TimeInterval(10),
        )

        with pytest.raises(DuplicateIdentifier):
            await client.schedule(request)

    @pytest.mark.asyncio
    async def test_uses_given_engine(self):
        store = InMemoryNotificationStore()
        engine = PolicyEngine(store)
        engine.admit = AsyncMock(
            return_value=MagicMock(request=MagicMock(identifier="from-engine"))
        )

        client = NotificationClient(store, engine=engine)
        request = NotificationRequest(
            content=NotificationContent(title="t", body="b"), schedule=TimeInterval(10)
        )

        assert await client.schedule(request) == "from-engine"
        engine.admit.assert_awaited_once_with(request)

    @pytest.mark.asyncio
    async def test_schedule_simple(self):
        store = InMemoryNotificationStore()
        client = NotificationClient(store)

        identifier = await client.schedule_simple(
            "Stretch",
            "Stand up for a minute",
            offset=timedelta(minutes=20),
            thread_id="health",
            interruption_level=InterruptionLevel.passive,
        )

        request, trigger = store.added[0]
        assert request.identifier == identifier
        assert request.content.thread_id == "health"
        assert request.content.interruption_level is InterruptionLevel.passive
        assert request.content.hidden_preview_placeholder == DEFAULT_PREVIEW_PLACEHOLDER
        assert request.content.body == "Stand up for a minute"
        assert trigger == IntervalTrigger(seconds=1200.0, repeats=False)

    @pytest.mark.asyncio
    async def test_schedule_simple_coalesces_thread(self):
        store = InMemoryNotificationStore()
        client = NotificationClient(store)

        await client.schedule_simple("One", "first", thread_id="t")
        second = await client.schedule_simple("Two", "second", thread_id="t")

        assert await client.pending() == [NotificationItem(second, "t")]


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_removes_pending(self):
        store = InMemoryNotificationStore(
            pending=[NotificationItem("a"), NotificationItem("b")]
        )

        await NotificationClient(store).cancel(["a", "zzz"])

        assert store.pending == [NotificationItem("b")]

    @pytest.mark.asyncio
    async def test_cancel_nothing_is_noop(self):
        store = InMemoryNotificationStore(pending=[NotificationItem("a")])

        await NotificationClient(store).cancel([])

        assert store.calls == []

    @pytest.mark.asyncio
    async def test_cancel_all_returns_count(self):
        store = InMemoryNotificationStore(
            pending=[NotificationItem("a"), NotificationItem("b")],
            delivered=[NotificationItem("d")],
        )

        assert await NotificationClient(store).cancel_all() == 2
        assert store.pending == []
        assert store.delivered == [NotificationItem("d")]

    @pytest.mark.asyncio
    async def test_cancel_all_when_empty(self):
        store = InMemoryNotificationStore()

        assert await NotificationClient(store).cancel_all() == 0
        assert "remove_pending" not in store.calls


class TestCategories:
    @pytest.mark.asyncio
    async def test_register_and_list(self):
        client = NotificationClient(InMemoryNotificationStore())

        await client.register_categories(
            NotificationCategory("a"), NotificationCategory("b")
        )

        assert [c.identifier for c in await client.categories()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_delivered_passthrough(self):
        store = InMemoryNotificationStore(delivered=[NotificationItem("d", "t")])

        assert await NotificationClient(store).delivered() == [NotificationItem("d", "t")]


class TestCreateDefaultClient:
    def test_builds_scheduler_center(self):
        config = NotifyConfig(timezone_name="Europe/Amsterdam")

        client, center = create_default_client(config)

        assert isinstance(center, SchedulerNotificationCenter)
        assert client.center is center
        assert client.engine.tz_name == "Europe/Amsterdam"
        assert center.running is False

    def test_centers_satisfy_protocol(self):
        _, center = create_default_client(NotifyConfig())

        assert isinstance(center, NotificationCenter)
        assert isinstance(InMemoryNotificationStore(), NotificationCenter)
