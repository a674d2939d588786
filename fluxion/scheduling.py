"""
Fluxion Scheduling - Deferred Callback Execution
================================================

A scheduler is any callable of shape ``(callback) -> None`` that promises to run
``callback`` later, at some cadence of its own. ``fluxion.operators.throttle``
depends on nothing else, so hosts can plug in whatever clock they have.

Implementations:
    ManualScheduler: queues callbacks until ``flush()`` is called
    immediate: runs the callback right away
    LoopScheduler: asyncio ``call_soon`` / ``call_later`` ("next tick")
    FrameScheduler: asyncio, fires on the next boundary of a fixed frame clock

``Ticker`` is the periodic counterpart: it calls a callback every ``interval``
seconds, which is how coeffect triggers such as a clock are usually driven.
"""

import asyncio
import logging
import math
from collections import deque
from typing import Callable, Deque, Optional

from .config import CONFIG

logger = logging.getLogger(__name__)

Callback = Callable[[], None]
Scheduler = Callable[[Callback], None]


def immediate(callback: Callback) -> None:
    """Run ``callback`` synchronously."""
    callback()


class ManualScheduler:
    """
    Scheduler that only runs callbacks when told to.

    Callbacks queued while a flush is in progress wait for the next flush, so
    one ``flush()`` corresponds to exactly one scheduling window. Every callback
    of the window runs even if an earlier one raises; the first error is
    re-raised once the window is done and any later ones are logged.
    """

    def __init__(self) -> None:
        self._queue: Deque[Callback] = deque()

    def __call__(self, callback: Callback) -> None:
        self._queue.append(callback)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def flush(self) -> int:
        """Run the callbacks queued so far. Returns how many ran."""
        batch = self._queue
        self._queue = deque()
        first_error: Optional[Exception] = None
        for callback in batch:
            try:
                callback()
            except Exception as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.exception("Scheduled callback %r failed", callback)
        if first_error is not None:
            raise first_error
        return len(batch)


class LoopScheduler:
    """Schedule callbacks on an asyncio event loop."""

    def __init__(
        self,
        delay: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.delay = CONFIG.tick_delay if delay is None else delay
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def __call__(self, callback: Callback) -> None:
        loop = self._get_loop()
        if self.delay:
            loop.call_later(self.delay, callback)
        else:
            loop.call_soon(callback)


class FrameScheduler(LoopScheduler):
    """
    Schedule callbacks on the next frame boundary.

    Frames are the instants ``k / frame_rate`` of the loop's monotonic clock.
    Everything scheduled within one frame runs together at its end.
    """

    def __init__(
        self,
        frame_rate: Optional[float] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        super().__init__(delay=0.0, loop=loop)
        self.frame_rate = CONFIG.frame_rate if frame_rate is None else frame_rate
        if self.frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.frame_rate

    def next_frame_at(self, now: float) -> float:
        """The first frame boundary strictly after ``now``."""
        interval = self.frame_interval
        return (math.floor(now / interval) + 1) * interval

    def __call__(self, callback: Callback) -> None:
        loop = self._get_loop()
        loop.call_at(self.next_frame_at(loop.time()), callback)


class Ticker:
    """
    Call ``callback`` every ``interval`` seconds on an asyncio loop.

    ```python
    clock, tick = make_coeffect(time.time)
    ticker = Ticker(1.0, tick)
    ticker.start()
    ```
    """

    def __init__(
        self,
        interval: float,
        callback: Callback,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Begin ticking. The first call happens one interval from now."""
        if self._handle is not None:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._schedule()

    def stop(self) -> None:
        """Stop ticking. Safe to call when not running."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self.interval, self._tick)

    def _tick(self) -> None:
        # Reschedule first so a failing callback does not stop the clock
        self._schedule()
        try:
            self.callback()
        except Exception:
            logger.exception("Ticker callback %r failed", self.callback)
