# backend/services/realtime_service.py
"""
In-process change feed.

Writers publish a snapshot on a channel ("order:<id>", "conversation:<id>")
right after their transaction commits; every open Subscription on that
channel receives it in commit order. Delivery is at-most-once: nothing is
buffered for subscribers that are not open, so a consumer that lost its
connection re-fetches full state instead of expecting a replay.
"""

import logging
import queue
import threading
from typing import Any, Dict, Iterator, Optional, Set

logger = logging.getLogger(__name__)

_CLOSED = object()


def order_channel(order_id: str) -> str:
    return f"order:{order_id}"


def conversation_channel(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


class Subscription:
    """
    A lazy, infinite, non-restartable stream of snapshots for one channel.

    Iterating blocks until the next snapshot arrives and stops once the
    subscription is closed. Use it as a context manager so the channel is
    always released, including when the consumer raises.
    """

    def __init__(self, hub: "ChangeFeedHub", channel: str):
        self.hub = hub
        self.channel = channel
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, snapshot: Any) -> None:
        with self._lock:
            if self._closed:
                return
            self._queue.put_nowait(snapshot)

    def poll(self, timeout: Optional[float] = None) -> Optional[Any]:
        """Next snapshot, or None on timeout or once closed."""
        if self._closed and self._queue.empty():
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            # keep the sentinel so later reads also see the end
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def __iter__(self) -> Iterator[Any]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                self._queue.put_nowait(_CLOSED)
                return
            yield item

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # drop anything not consumed yet, then wake a blocked reader
            while not self._queue.empty():
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            self._queue.put_nowait(_CLOSED)
        self.hub._release(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ChangeFeedHub:
    """
    Thread-safe registry of channel subscriptions.

    Snapshots that carry a ``version`` (order snapshots) are only delivered
    when newer than the last one published on their channel. Two writers
    commit in version order but may reach publish in either order; the
    late, older snapshot is dropped so no subscriber ever regresses.
    """

    def __init__(self):
        self._channels: Dict[str, Set[Subscription]] = {}
        self._versions: Dict[str, int] = {}
        self._lock = threading.Lock()

    def subscribe(self, channel: str) -> Subscription:
        sub = Subscription(self, channel)
        with self._lock:
            self._channels.setdefault(channel, set()).add(sub)
        logger.debug(f"Subscribed to {channel}")
        return sub

    def _release(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._channels.get(sub.channel)
            if subs is None:
                return
            subs.discard(sub)
            if not subs:
                del self._channels[sub.channel]
        logger.debug(f"Released subscription on {sub.channel}")

    def publish(self, channel: str, snapshot: Any) -> int:
        """Push a snapshot to every open subscriber. Returns the number reached."""
        version = getattr(snapshot, "version", None)
        # the lock is held across delivery so two publishers on one channel
        # cannot interleave and every subscriber sees the same order
        with self._lock:
            if version is not None:
                last = self._versions.get(channel)
                if last is not None and version <= last:
                    logger.info(f"Dropped stale snapshot v{version} on {channel} (already at v{last})")
                    return 0
                self._versions[channel] = version
            subs = list(self._channels.get(channel, ()))
            for sub in subs:
                sub._deliver(snapshot)
        if subs:
            logger.debug(f"Published on {channel} to {len(subs)} subscriber(s)")
        return len(subs)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._channels.get(channel, ()))


change_feed = ChangeFeedHub()
