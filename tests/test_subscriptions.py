"""Tests for the auth status subscription registry."""

from __future__ import annotations

import asyncio

import pytest

from vv_auth import AuthState, StatusRegistry


LOGGED_IN = AuthState(user={"id": 1, "username": "alice"})


class TestStatusRegistry:
    @pytest.mark.asyncio
    async def test_subscribe_delivers_current_status(self) -> None:
        registry = StatusRegistry()
        received: list[AuthState] = []

        await registry.subscribe(received.append, AuthState())

        assert received == [AuthState()]
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_broadcast_until_unsubscribed(self) -> None:
        registry = StatusRegistry()
        received: list[AuthState] = []
        unsubscribe = await registry.subscribe(received.append, AuthState())

        await registry.broadcast(LOGGED_IN)
        unsubscribe()
        await registry.broadcast(AuthState())

        assert received == [AuthState(), LOGGED_IN]
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_async_subscriber(self) -> None:
        registry = StatusRegistry()
        received: list[AuthState] = []

        async def deliver(status: AuthState) -> None:
            received.append(status)

        await registry.subscribe(deliver, AuthState())
        await registry.broadcast(LOGGED_IN)

        assert received == [AuthState(), LOGGED_IN]

    @pytest.mark.asyncio
    async def test_failing_subscriber_removed_others_still_delivered(self) -> None:
        registry = StatusRegistry()
        before: list[AuthState] = []
        after: list[AuthState] = []
        calls = 0

        async def flaky(status: AuthState) -> None:
            nonlocal calls
            calls += 1
            if calls > 1:
                raise ConnectionError("stream closed")

        await registry.subscribe(before.append, AuthState())
        await registry.subscribe(flaky, AuthState())
        await registry.subscribe(after.append, AuthState())

        await registry.broadcast(LOGGED_IN)
        await registry.broadcast(AuthState())

        assert before == after == [AuthState(), LOGGED_IN, AuthState()]
        assert calls == 2
        assert len(registry) == 2

    @pytest.mark.asyncio
    async def test_same_callback_subscribed_twice(self) -> None:
        registry = StatusRegistry()
        received: list[AuthState] = []

        first = await registry.subscribe(received.append, AuthState())
        await registry.subscribe(received.append, AuthState())
        first()
        await registry.broadcast(LOGGED_IN)

        assert received.count(LOGGED_IN) == 1

    @pytest.mark.asyncio
    async def test_stream(self) -> None:
        registry = StatusRegistry()
        stream = await registry.stream(AuthState())

        assert await stream.__anext__() == AuthState()
        await registry.broadcast(LOGGED_IN)
        assert await stream.__anext__() == LOGGED_IN

        await stream.aclose()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_stream_keeps_updates_sent_before_first_read(self) -> None:
        registry = StatusRegistry()
        stream = await registry.stream(AuthState())

        await registry.broadcast(LOGGED_IN)
        await registry.broadcast(AuthState())

        assert await stream.__anext__() == AuthState()
        assert await asyncio.wait_for(stream.__anext__(), timeout=1) == LOGGED_IN
        assert await asyncio.wait_for(stream.__anext__(), timeout=1) == AuthState()
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_unread_stream_unsubscribes_on_close(self) -> None:
        registry = StatusRegistry()
        stream = await registry.stream(AuthState())
        assert len(registry) == 1

        await stream.aclose()

        assert len(registry) == 0


class TestAuthStatePayload:
    def test_to_dict(self) -> None:
        assert AuthState().to_dict() == {}
        assert LOGGED_IN.to_dict() == {"user": {"id": 1, "username": "alice"}}
