"""Shared test helpers for FocusFlow."""

from focusflow.timer.engine import TimerEngine


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
    """Controllable wall clock (epoch seconds)."""

    def __init__(self, start: float = 1_760_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSounds:
    def __init__(self):
        self.played: list[str] = []
        self.volume = None
        self.enabled = True

    def play(self, name: str) -> None:
        self.played.append(name)

    def set_volume(self, level: int) -> None:
        self.volume = level

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled


class FakeNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def __call__(self, title: str, body: str, category: str) -> None:
        self.sent.append((title, body, category))


class FakeRecorder:
    def __init__(self):
        self.records: list = []

    def record(self, record) -> None:
        self.records.append(record)


def run_ticks(engine: TimerEngine, clock: FakeClock, count: int, step: float = 1.0) -> None:
    """Advance the clock by *step* and tick, *count* times."""
    for _ in range(count):
        clock.advance(step)
        engine.tick()


def finish_phase(engine: TimerEngine, clock: FakeClock) -> None:
    """Jump straight to the end of the current phase and tick once."""
    clock.advance(engine.remaining)
    engine.tick()
