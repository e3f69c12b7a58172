"""Shared test fixtures."""

from pathlib import Path

import pytest

from clipsplit.engine import EngineError
from clipsplit.errors import EngineNotReady
from clipsplit.models import SourceVideo

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeEngine:
    """In-memory stand-in for MediaEngine.

    Each exec call writes ``b"<output name>:<start>:<length>"`` as the output
    and reports progress 0.5 then 1.0. ``fail_at`` makes the invocation with
    that 0-based position fail; ``fail_read_at`` fails the read-back instead.
    """

    def __init__(self, ready: bool = True, fail_at: int | None = None, fail_read_at: int | None = None):
        self.ready = ready
        self.fail_at = fail_at
        self.fail_read_at = fail_read_at
        self.files: dict[str, bytes] = {}
        self.calls: list[list[str]] = []
        self.durations: list[float | None] = []
        self.removed: list[str] = []
        self.load_calls = 0
        self.before_exec = None

    def load(self) -> None:
        self.load_calls += 1
        self.ready = True

    def write_input(self, name, data) -> None:
        if not self.ready:
            raise EngineNotReady()
        self.files[name] = data.read_bytes() if isinstance(data, Path) else data

    def exec(self, args, duration=None, on_progress=None) -> None:
        if self.before_exec:
            self.before_exec(len(self.calls))
        position = len(self.calls)
        self.calls.append(list(args))
        self.durations.append(duration)
        if on_progress:
            on_progress(0.5)
        if position == self.fail_at:
            raise EngineError("ffmpeg failed (rc=1): Invalid data found")
        output = args[-1]
        start = args[args.index("-ss") + 1]
        length = args[args.index("-t") + 1]
        self.files[output] = f"{output}:{start}:{length}".encode()
        if on_progress:
            on_progress(1.0)

    def read_output(self, name) -> bytes:
        if len(self.calls) - 1 == self.fail_read_at:
            raise FileNotFoundError(name)
        return self.files[name]

    def remove(self, name) -> None:
        self.removed.append(name)
        self.files.pop(name, None)


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_source(tmp_path: Path):
    def _make(duration: int, name: str = "clip.mp4") -> SourceVideo:
        path = tmp_path / name
        path.write_bytes(b"SOURCE")
        return SourceVideo(path=path, duration=duration, name=name)
    return _make


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"
