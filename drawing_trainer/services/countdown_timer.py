"""
Countdown Timer — a restartable, pausable countdown driven by a QTimer.

Remaining time is always recomputed from a deadline on the clock, never by
decrementing a counter, so ticks can arrive late without the countdown drifting.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from PySide6.QtCore import QTimer

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 100


class CountdownTimer:
    """
    Counts down from a duration, reporting progress on every tick.

    Observers:
        on_tick(remaining_seconds): every interval while running; the last
            tick before elapsing always reports 0.
        on_elapsed(): exactly once when the countdown reaches zero while
            running. stop() never fires it.
    """

    def __init__(
        self,
        interval_ms: int = TICK_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        on_tick: Optional[Callable[[float], None]] = None,
        on_elapsed: Optional[Callable[[], None]] = None,
    ) -> None:
        self._clock = clock
        self.on_tick = on_tick
        self.on_elapsed = on_elapsed

        self.remaining: float = 0.0
        self.is_paused = False
        self._running = False
        self._deadline: Optional[float] = None
        self._remaining_when_paused = 0.0

        self._timer = QTimer()
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    # ── Public API ──────────────────────────────────────────────────────────

    def start(self, duration: float) -> None:
        """Start (or restart) counting down from duration seconds."""
        duration = max(0.0, float(duration))
        self.is_paused = False
        self.remaining = duration
        self._deadline = self._clock() + duration
        self._running = True
        self._timer.start()

    def pause(self) -> None:
        if not self._running:
            return
        self._remaining_when_paused = max(0.0, self._deadline - self._clock())
        self.remaining = self._remaining_when_paused
        self.is_paused = True
        self._running = False
        self._timer.stop()

    def resume(self) -> None:
        if not self.is_paused:
            return
        self.is_paused = False
        self._deadline = self._clock() + self._remaining_when_paused
        self._running = True
        self._timer.start()

    def stop(self) -> None:
        self.is_paused = False
        self._running = False
        self._timer.stop()
        self.remaining = 0.0
        self._deadline = None

    # ── Timer callback ──────────────────────────────────────────────────────

    def _on_timeout(self) -> None:
        # A timeout already queued before stop()/pause() must not leak through
        if not self._running:
            return
        self.remaining = self._deadline - self._clock()
        if self.remaining <= 0:
            self.remaining = 0.0
            self._running = False
            self._deadline = None
            self._timer.stop()
            if self.on_tick:
                self.on_tick(0.0)
            if self.on_elapsed:
                self.on_elapsed()
        elif self.on_tick:
            self.on_tick(self.remaining)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Wraps a repeating QTimer (100 ms) in a countdown with start / pause /
#   resume / stop. Each QTimer timeout recomputes "deadline - now".
#
# Key points:
#   - Pause snapshots the remaining time; resume builds a fresh deadline
#     from it. Resume right after pause therefore loses at most one tick.
#   - _running is tracked separately from QTimer.isActive() so the logic is
#     the same whether or not a Qt event loop is spinning (tests call
#     _on_timeout() directly with a fake clock).
#   - The elapsed path flips _running off BEFORE calling observers, so an
#     on_elapsed handler may immediately start() the timer again (that is how
#     the session chains drawing -> break -> drawing).
#
# Data flow:
#   QTimer.timeout -> _on_timeout() -> on_tick(remaining) ... on_tick(0)
#   -> on_elapsed() -> PracticeSession decides what runs next.
