"""Media engine, a single ffmpeg executor bound to a working directory.

The engine is loaded once, then runs one ffmpeg invocation at a time
against files staged in its working directory. Callers stage inputs with
``write_input``, run commands with ``exec`` and collect results with
``read_output``.
"""

import logging
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Callable

from clipsplit import ffutil
from clipsplit.errors import EngineNotReady

logger = logging.getLogger(__name__)


class EngineError(RuntimeError):
    """An ffmpeg invocation failed."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class EngineBusy(EngineError):
    """Another invocation is already running on this engine."""


def _check_name(name: str) -> str:
    if not name or Path(name).name != name or name in (".", ".."):
        raise ValueError(f"Invalid engine file name: {name!r}")
    return name


class MediaEngine:
    def __init__(self, work_dir: Path, ffmpeg: str = "ffmpeg") -> None:
        self.work_dir = Path(work_dir)
        self.ffmpeg = ffmpeg
        self.version: str | None = None
        self._ready = threading.Event()
        self._load_lock = threading.Lock()
        self._exec_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def load(self) -> None:
        """Verify ffmpeg is usable and prepare the working directory.

        Safe to call more than once; later calls return immediately.
        """
        with self._load_lock:
            if self._ready.is_set():
                return
            ffutil.check_ffmpeg()
            self.version = ffutil.ffmpeg_version()
            self.work_dir.mkdir(parents=True, exist_ok=True)
            self._ready.set()
        logger.info("Media engine loaded (%s) in %s", self.version, self.work_dir)

    def wait_ready(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    def _require_ready(self) -> None:
        if not self._ready.is_set():
            raise EngineNotReady()

    def write_input(self, name: str, data: bytes | Path) -> Path:
        """Stage *data* (bytes or a file path) under *name*."""
        self._require_ready()
        target = self.work_dir / _check_name(name)
        if isinstance(data, Path):
            shutil.copyfile(data, target)
        else:
            target.write_bytes(data)
        logger.debug("Staged %s (%d bytes)", name, target.stat().st_size)
        return target

    def read_output(self, name: str) -> bytes:
        self._require_ready()
        return (self.work_dir / _check_name(name)).read_bytes()

    def remove(self, name: str) -> None:
        self._require_ready()
        (self.work_dir / _check_name(name)).unlink(missing_ok=True)

    def exec(
        self,
        args: list[str],
        duration: float | None = None,
        on_progress: Callable[[float], None] | None = None,
    ) -> None:
        """Run one ffmpeg invocation inside the working directory.

        Args:
            args: ffmpeg arguments (inputs, options, outputs).
            duration: Expected output duration in seconds, used to turn
                ffmpeg's ``out_time_ms`` into a fraction.
            on_progress: Optional callback(fraction) with values in [0, 1].

        Raises:
            EngineNotReady: ``load()`` has not completed.
            EngineBusy: another invocation is in flight.
            EngineError: ffmpeg exited non-zero.
        """
        self._require_ready()
        if not self._exec_lock.acquire(blocking=False):
            raise EngineBusy("Media engine is already running a command")
        try:
            self._run(args, duration, on_progress)
        finally:
            self._exec_lock.release()

    def _run(
        self,
        args: list[str],
        duration: float | None,
        on_progress: Callable[[float], None] | None,
    ) -> None:
        cmd = [
            self.ffmpeg, "-y",
            "-hide_banner",
            "-nostats",
            "-loglevel", "error",
            "-progress", "pipe:1",
            *args,
        ]
        logger.debug("exec: %s", " ".join(cmd))

        def _progress(frac: float) -> None:
            if on_progress:
                on_progress(frac)

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=self.work_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise EngineError(f"could not start ffmpeg: {e}") from e

        if proc.stdout is None:
            proc.kill()
            proc.wait()
            raise EngineError("ffmpeg progress stream unavailable")

        # stderr is drained concurrently so a chatty ffmpeg cannot fill the pipe
        # while stdout is being read.
        stderr_chunks: list[str] = []
        drain = None
        if proc.stderr is not None:
            drain = threading.Thread(
                target=lambda: stderr_chunks.append(proc.stderr.read()), daemon=True
            )
            drain.start()

        _progress(0.0)
        for raw in proc.stdout:
            parsed = ffutil.parse_progress_line(raw)
            if parsed is None:
                continue
            key, value = parsed
            if key == "out_time_ms":
                frac = ffutil.progress_fraction(value, duration)
                if frac is not None:
                    _progress(frac)
            elif key == "progress" and value == "end":
                _progress(1.0)

        rc = proc.wait()
        if drain is not None:
            drain.join()
        stderr = "".join(stderr_chunks)
        for line in stderr.splitlines():
            logger.debug("ffmpeg: %s", line)

        if rc != 0:
            tail = stderr.strip()[-500:]
            raise EngineError(
                f"ffmpeg failed (rc={rc}): {tail}" if tail else f"ffmpeg failed (rc={rc})",
                returncode=rc,
                stderr=stderr,
            )
