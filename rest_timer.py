import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RestTimer:
    """Single countdown between sets.

    Each ``start`` begins a new generation and cancels the previous one, so a
    tick scheduled for an old countdown is ignored. ``on_expire`` fires once
    when the countdown reaches zero and never after ``cancel``.

    With ``auto_tick`` a daemon thread ticks once per ``interval`` seconds;
    otherwise the owner calls :meth:`tick` itself.
    """

    def __init__(
        self,
        on_expire: Optional[Callable[[], None]] = None,
        on_tick: Optional[Callable[[int], None]] = None,
        *,
        auto_tick: bool = False,
        interval: float = 1.0,
    ) -> None:
        self.on_expire = on_expire
        self.on_tick = on_tick
        self.auto_tick = auto_tick
        self.interval = interval
        self._lock = threading.RLock()
        self._generation = 0
        self._remaining = 0
        self._active = False
        self._ticker: Optional[_Ticker] = None

    @property
    def active(self) -> bool:
        return self._active

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        self.cancel()
        with self._lock:
            self._generation += 1
            self._remaining = seconds
            self._active = True
            generation = self._generation
        logger.debug("rest timer %d started with %ds", generation, seconds)
        if seconds == 0:
            self.tick(generation)
        elif self.auto_tick:
            self._ticker = _Ticker(self, generation, self.interval)
            self._ticker.start()
        return generation

    def tick(self, generation: Optional[int] = None) -> bool:
        """Advance the countdown by one second.

        Returns ``False`` when the tick is stale or the timer is idle.
        """
        with self._lock:
            if not self._active:
                return False
            if generation is not None and generation != self._generation:
                return False
            if self._remaining > 0:
                self._remaining -= 1
            remaining = self._remaining
            current = self._generation
        if self.on_tick is not None:
            self.on_tick(remaining)
        if remaining == 0:
            self._expire(current)
        return True

    def _expire(self, generation: int) -> None:
        # on_expire runs under the lock so a cancel that has returned can
        # never be followed by an alert
        with self._lock:
            if not self._active or generation != self._generation:
                return
            self._active = False
            logger.debug("rest timer %d expired", generation)
            if self.on_expire is not None:
                self.on_expire()

    def cancel(self) -> None:
        with self._lock:
            was_active = self._active
            self._active = False
            self._remaining = 0
            self._generation += 1
            ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.stop()
        if was_active:
            logger.debug("rest timer cancelled")

    @staticmethod
    def format(seconds: int) -> str:
        """Return ``m:ss`` for display."""
        mins, secs = divmod(max(seconds, 0), 60)
        return f"{mins}:{secs:02d}"


class _Ticker(threading.Thread):
    """Background thread ticking one timer generation."""

    def __init__(self, timer: RestTimer, generation: int, interval: float) -> None:
        super().__init__(daemon=True)
        self.timer = timer
        self.generation = generation
        self.interval = interval
        self._stopped = threading.Event()

    def run(self) -> None:
        while not self._stopped.wait(self.interval):
            if not self.timer.tick(self.generation):
                break

    def stop(self) -> None:
        self._stopped.set()
