from __future__ import annotations

from typing import Optional

from .core import GameSession, SessionStatus


class TickDriver:
    """Turns host time into gravity ticks for a ``GameSession``.

    The host calls ``advance`` with the milliseconds elapsed since its last
    call (a pygame clock, a UI timer, a test). A tick fires once per full
    interval while the session is playing. Leaving the playing state halts the
    driver and drops any partial interval, so nothing fires into a paused,
    finished or restarted session, even when the pause and resume both
    happen between two calls.
    """

    def __init__(self, session: GameSession, interval_ms: Optional[int] = None) -> None:
        self.session = session
        self.interval_ms = int(interval_ms if interval_ms is not None else session.config.tick_interval_ms)
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.elapsed_ms = 0
        self.running = session.status is SessionStatus.PLAYING
        self._status_changes = session.status_changes

    def halt(self) -> None:
        self.running = False
        self.elapsed_ms = 0

    def advance(self, elapsed_ms: int) -> int:
        """Feed elapsed time; return the number of ticks fired."""
        if self.session.status is not SessionStatus.PLAYING:
            self.halt()
            return 0
        if not self.running or self._status_changes != self.session.status_changes:
            # Resume with a fresh interval.
            self.running = True
            self.elapsed_ms = 0
            self._status_changes = self.session.status_changes
            return 0
        self.elapsed_ms += int(elapsed_ms)
        fired = 0
        while self.elapsed_ms >= self.interval_ms:
            self.elapsed_ms -= self.interval_ms
            self.session.tick()
            fired += 1
            if self.session.status is not SessionStatus.PLAYING:
                self.halt()
                break
        return fired
