"""Shared test helpers for LanePace."""


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def tick(owner, clock: FakeClock, dt: float, times: int = 1) -> None:
    """Move *clock* by *dt* and fire the owner's scheduler, *times* times.

    A pending zero-delta first tick is fired before the clock moves, as
    the event loop would right after a start.
    """
    scheduler = getattr(owner, "scheduler", owner)
    for _ in range(times):
        if scheduler.awaiting_first_tick:
            scheduler._on_timeout()
        clock.advance(dt)
        scheduler._on_timeout()


def signals_of(collector: SignalCollector, kind) -> list:
    """Emissions of ``signal_requested`` for one SignalKind."""
    return [item for item in collector.items if item[0] == kind]
