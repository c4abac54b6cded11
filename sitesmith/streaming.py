"""
Live stream aggregation.
========================
Holds the single-slot view of whatever model call is currently in flight
and publishes snapshots to observers through an async iterator.
"""
import asyncio
import copy
from typing import AsyncIterator, List, Optional, Set

from .domain import LiveStreamState
from .thinking import strip_thinking, new_thoughts


class LiveStream:
    """
    Aggregates streamed model output for display.

    `begin()` starts a new step and discards the previous one. `feed()`
    appends a chunk and re-extracts reasoning from the whole buffer, since
    reasoning markers can straddle chunk boundaries. `history` only grows
    with thought strings that were not seen earlier in the step.
    """

    def __init__(self, max_queue: int = 256):
        self._state = LiveStreamState()
        self._seen: Set[str] = set()
        self._subscribers: List[asyncio.Queue] = []
        self._max_queue = max_queue
        self._closed = False

    @property
    def state(self) -> LiveStreamState:
        return self._state

    def begin(self, phase: str, label: str = ""):
        self._state = LiveStreamState(phase=phase, label=label)
        self._seen = set()
        self._publish()

    def feed(self, chunk: str):
        if not chunk:
            return
        state = self._state
        state.raw += chunk
        extraction = strip_thinking(state.raw)
        state.cleaned = extraction.cleaned
        state.thoughts = extraction.thoughts
        state.history.extend(new_thoughts(extraction.thoughts, self._seen))
        self._publish()

    def snapshot(self) -> LiveStreamState:
        return copy.deepcopy(self._state)

    def is_current(self, phase: str, label: str = "") -> bool:
        return self._state.phase == phase and self._state.label == label

    def _publish(self):
        if not self._subscribers:
            return
        snap = self.snapshot()
        for queue in self._subscribers:
            if queue.full():
                # Slow observers only need the latest state.
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(snap)

    async def updates(self) -> AsyncIterator[LiveStreamState]:
        """Yields a snapshot after every begin/feed until close() is called."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue)
        self._subscribers.append(queue)
        try:
            while True:
                if self._closed and queue.empty():
                    return
                item: Optional[LiveStreamState] = await queue.get()
                if item is None:
                    return
                yield item
        finally:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

    def close(self):
        """Ends every observer iterator."""
        self._closed = True
        for queue in self._subscribers:
            if queue.full():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(None)
