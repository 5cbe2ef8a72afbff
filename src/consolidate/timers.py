"""Single-shot countdown timers driven by the running event loop."""

from asyncio import TimerHandle, get_running_loop
from collections.abc import Callable


class Timer:
    """Restartable single-shot timer with a "fired" flag.

    The timer schedules itself with ``loop.call_later``. When it elapses it
    raises its fired flag and calls *on_fire*, which only has to wake whoever
    polls :meth:`consume`. The flag stays up until consumed, stopped or reset,
    so a timer that fired but was not yet observed can be re-armed without
    producing a spurious fire.

    All methods must be called from the event loop thread.

    Args:
        duration: Countdown in seconds.
        on_fire: Zero-argument wake-up hook called when the timer elapses.
    """

    __slots__ = ("_fired", "_handle", "_loop", "_on_fire", "duration")

    def __init__(self, duration: float, on_fire: Callable[[], None]) -> None:
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration}")

        self.duration = duration
        self._on_fire = on_fire
        self._handle: TimerHandle | None = None
        self._fired = False
        self._loop = None

    def _get_loop(self):
        if self._loop is None:
            self._loop = get_running_loop()
        return self._loop

    @property
    def armed(self) -> bool:
        """True while the timer is counting down or has fired but not been consumed."""
        return self._handle is not None

    @property
    def fired(self) -> bool:
        return self._fired

    def start(self) -> None:
        """Arm the timer if it is not already armed."""
        if self._handle is None:
            self.reset()

    def reset(self) -> None:
        """(Re)arm the timer for a full ``duration`` from now."""
        self.stop()
        self._handle = self._get_loop().call_later(self.duration, self._fire)

    def stop(self) -> None:
        """Disarm the timer and drop any unconsumed fire."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._fired = False

    def consume(self) -> bool:
        """Return True exactly once per fire, disarming the timer."""
        if not self._fired:
            return False
        self._fired = False
        self._handle = None
        return True

    def _fire(self) -> None:
        self._fired = True
        self._on_fire()

    def __repr__(self) -> str:
        return f"Timer(duration={self.duration}, armed={self.armed}, fired={self._fired})"


class TimerPair:
    """The trailing (``delay``) and ceiling (``max_delay``) timers of one consolidator."""

    __slots__ = ("ceiling", "trailing")

    def __init__(self, delay: float, max_delay: float, on_fire: Callable[[], None]) -> None:
        self.trailing = Timer(delay, on_fire)
        self.ceiling = Timer(max_delay, on_fire)

    def stop(self) -> None:
        self.trailing.stop()
        self.ceiling.stop()

    def __repr__(self) -> str:
        return f"TimerPair(trailing={self.trailing!r}, ceiling={self.ceiling!r})"
