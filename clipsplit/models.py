"""Shared data types used across ClipSplit."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RunStatus(str, Enum):
    """Lifecycle of a split run."""

    IDLE = "Idle"
    STARTING = "Starting"
    PROCESSING = "Processing"
    COMPLETE = "Complete"
    ERROR = "Error"

    @property
    def active(self) -> bool:
        return self in (RunStatus.STARTING, RunStatus.PROCESSING)


@dataclass(frozen=True)
class SourceVideo:
    """A probed input video. Duration is in whole seconds."""

    path: Path
    duration: int
    name: str = ""


@dataclass(frozen=True)
class SegmentDescriptor:
    """One planned segment: ``[start, start + length)`` in seconds.

    ``length`` is the nominal slice length. The final segment of a plan may
    run past the end of the source; ffmpeg stops copying at end-of-stream, so
    its real duration is ``actual_length(total)``.
    """

    index: int
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def actual_length(self, total_duration: int) -> int:
        return max(0, min(self.length, total_duration - self.start))


@dataclass(frozen=True)
class Artifact:
    """A produced segment file, addressed by its content hash."""

    name: str
    ref: str
    size: int

    def to_dict(self) -> dict:
        return {"name": self.name, "ref": self.ref, "size": self.size}


@dataclass
class SplitRun:
    """Mutable state of one split execution."""

    status: RunStatus = RunStatus.IDLE
    slice_seconds: int = 0
    total: int = 0
    completed: int = 0
    progress: int = 0
    artifacts: list[Artifact] = field(default_factory=list)
    error: str | None = None
    failed_index: int | None = None


@dataclass(frozen=True)
class StatusReport:
    """Read-only snapshot of a SplitRun for status consumers."""

    status: RunStatus
    progress: int
    completed: int
    total: int
    artifacts: tuple[Artifact, ...] = ()
    error: str | None = None
    failed_index: int | None = None

    @property
    def message(self) -> str:
        if self.status is RunStatus.ERROR and self.error:
            return f"Error: {self.error}"
        return self.status.value

    @property
    def terminal(self) -> bool:
        return self.status in (RunStatus.COMPLETE, RunStatus.ERROR)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "progress": self.progress,
            "completed": self.completed,
            "total": self.total,
            "artifacts": [a.to_dict() for a in self.artifacts],
            "error": self.error,
            "failed_index": self.failed_index,
        }


@dataclass
class ProbeResult:
    """Metadata extracted from a media file via ffprobe."""

    duration: float
    width: int
    height: int
    fps: float
    codec_video: str
    codec_audio: str | None = None
    audio_sample_rate: int | None = None
