"""Auth status subscriptions

Subscribers receive the current AuthState once on subscribe and then every
broadcast until they unsubscribe. A subscriber whose delivery raises is
dropped; the others still get the update.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Optional

from .models import AuthState

logger = logging.getLogger(__name__)

Deliver = Callable[[AuthState], Optional[Awaitable[None]]]


class _Subscription:
    """Identity-hashed wrapper so the same callback can subscribe twice"""

    def __init__(self, deliver: Deliver):
        self.deliver = deliver


class StatusStream:
    """Async iterator over statuses queued for one subscription"""

    def __init__(self, queue: "asyncio.Queue[AuthState]", unsubscribe: Callable[[], None]):
        self._queue = queue
        self._unsubscribe = unsubscribe

    def __aiter__(self) -> "StatusStream":
        return self

    async def __anext__(self) -> AuthState:
        return await self._queue.get()

    async def aclose(self) -> None:
        self._unsubscribe()


class StatusRegistry:
    """Observer registry owned by one auth service"""

    def __init__(self):
        self._subscriptions: List[_Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    async def _send(self, subscription: _Subscription, status: AuthState) -> bool:
        try:
            result = subscription.deliver(status)
            if inspect.isawaitable(result):
                await result
            return True
        except Exception as e:
            logger.error(f"Failed to send auth status update: {e}")
            self._remove(subscription)
            return False

    def _remove(self, subscription: _Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def subscribe(self, deliver: Deliver, current: AuthState) -> Callable[[], None]:
        """Register a delivery callback and send it the current status

        Args:
            deliver: Sync or async callable taking an AuthState
            current: Status to deliver immediately

        Returns:
            Function that cancels the subscription
        """
        subscription = _Subscription(deliver)
        self._subscriptions.append(subscription)
        await self._send(subscription, current)

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    async def broadcast(self, status: AuthState) -> None:
        """Deliver a status to every live subscriber"""
        for subscription in list(self._subscriptions):
            await self._send(subscription, status)

    async def stream(self, current: AuthState) -> StatusStream:
        """Subscribe now and return an iterator over the queued statuses

        The subscription is registered before this returns, so broadcasts
        made before the first iteration are still yielded. Closing the
        iterator unsubscribes.
        """
        queue: "asyncio.Queue[AuthState]" = asyncio.Queue()
        unsubscribe = await self.subscribe(queue.put_nowait, current)
        return StatusStream(queue, unsubscribe)
