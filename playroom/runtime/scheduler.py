"""
Scheduler - The cooperative dispatcher behind every timer.

There is one logical thread of control. "Concurrency" means interleaving of
independently scheduled callbacks:
- one-shot timers (call_later)
- periodic callbacks (call_every)
- per-frame callbacks (call_next_frame)

Two implementations share the same contract:
- ManualScheduler: a deterministic virtual clock, advanced explicitly.
  Used by tests and the CLI.
- AsyncioScheduler: maps the contract onto the running asyncio loop.
  Used by the HTTP shell.

Cancellation is immediate and idempotent. A callback that is already
running is never preempted; it is the caller's job to check whether its
owner is still alive.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import asyncio
import heapq
import itertools
import math

ErrorHandler = Callable[[BaseException], None]

DEFAULT_FRAME_INTERVAL_MS = 16.0
MIN_INTERVAL_MS = 1.0


class TimerKind(Enum):
    """Kinds of scheduled callbacks."""
    ONCE = "once"
    PERIODIC = "periodic"
    FRAME = "frame"


@dataclass(eq=False)
class TimerToken:
    """
    A scheduled callback.

    Tokens compare by identity. `backend` holds the implementation's own
    handle (an asyncio TimerHandle for AsyncioScheduler).
    """
    token_id: int
    kind: TimerKind
    callback: Callable[..., Any]
    due: float
    interval: float = 0.0
    cancelled: bool = False
    fired: bool = False
    backend: Any = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        """True while the callback may still run."""
        if self.cancelled:
            return False
        if self.kind == TimerKind.PERIODIC:
            return True
        return not self.fired


class Scheduler:
    """
    Base scheduler contract.

    Subclasses implement `_arm` (hand the token to the clock) and
    `_disarm` (withdraw it). Dispatch and error routing are shared.
    """

    def __init__(
        self,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
        error_handler: ErrorHandler | None = None,
    ):
        if frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be positive")
        self.frame_interval_ms = frame_interval_ms
        self.error_handler = error_handler
        self._ids = itertools.count(1)
        self._live: dict[int, TimerToken] = {}

    # =========================================================================
    # Public API
    # =========================================================================

    def now(self) -> float:
        """Current time in milliseconds."""
        raise NotImplementedError

    def call_later(self, delay_ms: float, callback: Callable[[], Any]) -> TimerToken:
        """Run callback once after delay_ms (negative delays run next)."""
        delay_ms = max(0.0, float(delay_ms))
        token = TimerToken(
            token_id=next(self._ids),
            kind=TimerKind.ONCE,
            callback=callback,
            due=self.now() + delay_ms,
        )
        return self._register(token)

    def call_every(self, interval_ms: float, callback: Callable[[], Any]) -> TimerToken:
        """Run callback every interval_ms until cancelled."""
        interval_ms = max(MIN_INTERVAL_MS, float(interval_ms))
        token = TimerToken(
            token_id=next(self._ids),
            kind=TimerKind.PERIODIC,
            callback=callback,
            due=self.now() + interval_ms,
            interval=interval_ms,
        )
        return self._register(token)

    def call_next_frame(self, callback: Callable[[float], Any]) -> TimerToken:
        """Run callback(timestamp_ms) on the next rendering tick."""
        token = TimerToken(
            token_id=next(self._ids),
            kind=TimerKind.FRAME,
            callback=callback,
            due=self._next_frame_time(),
        )
        return self._register(token)

    def cancel(self, token: TimerToken):
        """Cancel a token. Cancelling twice, or after it fired, is a no-op."""
        if token.cancelled:
            return
        token.cancelled = True
        if self._live.pop(token.token_id, None) is not None:
            self._disarm(token)

    def pending_count(self) -> int:
        """Number of tokens that may still fire."""
        return len(self._live)

    # =========================================================================
    # Internals
    # =========================================================================

    def _next_frame_time(self) -> float:
        interval = self.frame_interval_ms
        return (math.floor(self.now() / interval) + 1) * interval

    def _register(self, token: TimerToken) -> TimerToken:
        self._live[token.token_id] = token
        self._arm(token)
        return token

    def _arm(self, token: TimerToken):
        raise NotImplementedError

    def _disarm(self, token: TimerToken):
        raise NotImplementedError

    def _dispatch(self, token: TimerToken, now: float):
        """Run a due token. Periodic tokens are re-armed before the call."""
        if token.cancelled:
            return

        if token.kind == TimerKind.PERIODIC:
            token.due = now + token.interval
            self._arm(token)
        else:
            token.fired = True
            self._live.pop(token.token_id, None)

        if token.kind == TimerKind.FRAME:
            self._invoke(token.callback, now)
        else:
            self._invoke(token.callback)

    def _invoke(self, callback: Callable[..., Any], *args: Any):
        try:
            callback(*args)
        except Exception as exc:
            if self.error_handler is None:
                raise
            self.error_handler(exc)


class ManualScheduler(Scheduler):
    """
    Deterministic virtual-clock scheduler.

    Usage:
        scheduler = ManualScheduler()
        scheduler.call_every(1500, spawn)
        scheduler.advance(3000)   # spawn ran twice

    Entries run in (due time, registration order). Time only moves inside
    advance() / step_frame() / run_until_idle().
    """

    def __init__(
        self,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
        error_handler: ErrorHandler | None = None,
        start_ms: float = 0.0,
    ):
        super().__init__(frame_interval_ms=frame_interval_ms, error_handler=error_handler)
        self._now = float(start_ms)
        self._queue: list[tuple[float, int, TimerToken]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def advance(self, ms: float) -> int:
        """
        Move the clock forward by ms, dispatching everything that falls due.

        Returns the number of callbacks dispatched.
        """
        if ms < 0:
            raise ValueError("Cannot move the clock backwards")
        return self._run_until(self._now + ms)

    def advance_to(self, when_ms: float) -> int:
        """Move the clock to an absolute time."""
        return self.advance(max(0.0, when_ms - self._now))

    def step_frame(self) -> int:
        """Advance to the next frame boundary."""
        return self._run_until(self._next_frame_time())

    def run_until_idle(self, limit_ms: float = 60_000.0) -> int:
        """
        Dispatch one-shot and frame work until nothing but periodic
        callbacks remain, or limit_ms of virtual time has passed.
        """
        deadline = self._now + limit_ms
        dispatched = 0
        while self._now < deadline:
            upcoming = [
                t for t in self._live.values() if t.kind != TimerKind.PERIODIC
            ]
            if not upcoming:
                break
            next_due = min(t.due for t in upcoming)
            dispatched += self._run_until(min(next_due, deadline))
        return dispatched

    def _arm(self, token: TimerToken):
        heapq.heappush(self._queue, (token.due, next(self._seq), token))

    def _disarm(self, token: TimerToken):
        # Lazy removal: cancelled entries are skipped when popped.
        pass

    def _run_until(self, target: float) -> int:
        dispatched = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, token = heapq.heappop(self._queue)
            if token.cancelled or token.due != due:
                continue
            self._now = max(self._now, due)
            self._dispatch(token, due)
            dispatched += 1
        self._now = max(self._now, target)
        return dispatched


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    The loop is resolved lazily with asyncio.get_running_loop(), so the
    scheduler can be created before the server starts.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
        error_handler: ErrorHandler | None = None,
    ):
        super().__init__(frame_interval_ms=frame_interval_ms, error_handler=error_handler)
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def _arm(self, token: TimerToken):
        delay = max(0.0, token.due - self.now()) / 1000.0
        token.backend = self.loop.call_later(delay, self._fire, token)

    def _disarm(self, token: TimerToken):
        if token.backend is not None:
            token.backend.cancel()
            token.backend = None

    def _fire(self, token: TimerToken):
        token.backend = None
        self._dispatch(token, self.now())
