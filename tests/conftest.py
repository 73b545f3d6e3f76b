import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so `import barrelkeep...` works locally
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_latest(self):
        self.timers[-1].fire()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def write_tree():
    """Create files under a root from a {relative path: content} mapping."""

    def _write(root: Path, files):
        for rel, content in files.items():
            path = root / rel
            if rel.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write
