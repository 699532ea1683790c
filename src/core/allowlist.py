"""
Allowlist Cache
===============

Process-wide set of subject identifiers permitted to use protected
operations, kept fresh by a long-lived subscription.

- ``AllowlistCache`` holds an immutable snapshot; readers do a plain
  attribute read and a ``frozenset`` membership test.
- ``AllowlistSubscription`` runs two background tasks: one drains an
  ``AllowlistSource`` into a single-slot ``LatestValueChannel``, the other is
  the cache's only writer and swaps each received snapshot in.
- ``RedisAllowlistSource`` reloads the full allowlist from the database on
  connect, on every Redis notification and on a resync interval.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Callable, FrozenSet, Generic, Iterable, List, Optional, TypeVar

import redis
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.models.enums import EmptyAllowlistPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================================================
# Cache
# ============================================================================

@dataclass(frozen=True)
class AllowlistSnapshot:
    """One complete view of the allowlist."""
    subjects: FrozenSet[str]
    received_at: Optional[float] = None

    @property
    def loaded(self) -> bool:
        return self.received_at is not None


class AllowlistCache:
    """
    Volatile allowlist shared by every request.

    The visible snapshot is replaced wholesale by ``replace``; it is never
    mutated in place, so a reader sees either the old or the new set.
    """

    def __init__(self, empty_policy: EmptyAllowlistPolicy = EmptyAllowlistPolicy.open):
        self.empty_policy = EmptyAllowlistPolicy(empty_policy)
        self._snapshot = AllowlistSnapshot(subjects=frozenset())

    @property
    def snapshot(self) -> AllowlistSnapshot:
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot.loaded

    def __len__(self) -> int:
        return len(self._snapshot.subjects)

    def replace(self, subjects: Iterable[str]) -> None:
        """Publish a new complete set. Only the subscription writer calls this."""
        self._snapshot = AllowlistSnapshot(
            subjects=frozenset(subjects),
            received_at=time.time(),
        )

    def is_allowed(self, subject_id: str) -> bool:
        """Membership check honouring the empty-allowlist policy."""
        snapshot = self._snapshot
        if not snapshot.subjects:
            return self.empty_policy == EmptyAllowlistPolicy.open
        return subject_id in snapshot.subjects


# ============================================================================
# Delivery
# ============================================================================

class LatestValueChannel(Generic[T]):
    """Single-slot channel; a newer value overwrites one not yet received."""

    def __init__(self):
        self._value: Optional[T] = None
        self._event = asyncio.Event()

    def publish(self, value: T) -> None:
        self._value = value
        self._event.set()

    async def receive(self) -> T:
        await self._event.wait()
        self._event.clear()
        return self._value


class AllowlistSource(ABC):
    """Stream of complete allowlist snapshots."""

    @abstractmethod
    def snapshots(self) -> AsyncIterator[FrozenSet[str]]:
        """Yield a full snapshot every time the allowlist may have changed."""
        pass


class RedisAllowlistSource(AllowlistSource):
    """Reloads the allowlist whenever a change is announced on a Redis channel."""

    def __init__(
        self,
        loader: Callable[[], Iterable[str]],
        redis_url: str,
        channel: str,
        resync_interval: float = 300.0,
    ):
        """
        Args:
            loader: Blocking callable returning every allowlisted subject id
            redis_url: Redis connection URL
            channel: Pub/sub channel writers publish to after a change
            resync_interval: Reload at least this often even without notifications
        """
        self.loader = loader
        self.redis_url = redis_url
        self.channel = channel
        self.resync_interval = resync_interval

    async def _load(self) -> FrozenSet[str]:
        return frozenset(await asyncio.to_thread(self.loader))

    async def snapshots(self) -> AsyncIterator[FrozenSet[str]]:
        client = aioredis.from_url(self.redis_url, decode_responses=True)
        pubsub = client.pubsub()
        try:
            await pubsub.subscribe(self.channel)
            logger.info(f"Subscribed to allowlist channel {self.channel}")
            yield await self._load()
            while True:
                # None on timeout: resync anyway
                await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self.resync_interval,
                )
                yield await self._load()
        finally:
            await pubsub.aclose()
            await client.aclose()


class AllowlistNotifier:
    """Announces allowlist changes to every running gateway process."""

    def __init__(self, redis_url: str, channel: str):
        self.redis_url = redis_url
        self.channel = channel

    def publish(self) -> None:
        """Best effort: subscribers also resync periodically."""
        try:
            client = redis.Redis.from_url(self.redis_url)
            try:
                client.publish(self.channel, "changed")
            finally:
                client.close()
        except RedisError as e:
            logger.error(f"Failed to publish allowlist change: {e}")


# ============================================================================
# Subscription lifecycle
# ============================================================================

class AllowlistSubscription:
    """Owns the background tasks that keep an ``AllowlistCache`` current."""

    def __init__(
        self,
        cache: AllowlistCache,
        source: AllowlistSource,
        initial_backoff: float = 1.0,
        max_backoff: float = 60.0,
    ):
        self.cache = cache
        self.source = source
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self._channel: LatestValueChannel[FrozenSet[str]] = LatestValueChannel()
        self._ready = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._receive_loop(), name="allowlist-receive"),
            asyncio.create_task(self._apply_loop(), name="allowlist-apply"),
        ]

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def wait_ready(self, timeout: Optional[float] = None) -> bool:
        """Wait for the first snapshot to be applied. False on timeout."""
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def _receive_loop(self) -> None:
        backoff = self.initial_backoff
        while True:
            try:
                async for subjects in self.source.snapshots():
                    self._channel.publish(frozenset(subjects))
                    backoff = self.initial_backoff
                logger.warning("Allowlist stream ended, reconnecting")
            except Exception as e:
                logger.error(
                    f"Error listening to allowlist, keeping {len(self.cache)} cached users: {e}"
                )
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, self.max_backoff)

    async def _apply_loop(self) -> None:
        while True:
            subjects = await self._channel.receive()
            self.cache.replace(subjects)
            self._ready.set()
            logger.info(f"Updated allowlist: {len(subjects)} users")
