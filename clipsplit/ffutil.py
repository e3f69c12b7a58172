"""FFmpeg/ffprobe subprocess helpers."""

import json
import shutil
import subprocess
from pathlib import Path

from clipsplit.models import ProbeResult


class FFmpegNotFoundError(RuntimeError):
    pass


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg/ffprobe are not on PATH."""
    for cmd in ("ffmpeg", "ffprobe"):
        if shutil.which(cmd) is None:
            raise FFmpegNotFoundError(f"{cmd} not found on PATH")


def ffmpeg_version() -> str:
    """Return the first line of ``ffmpeg -version``."""
    result = subprocess.run(
        ["ffmpeg", "-version"], capture_output=True, text=True, check=True
    )
    lines = result.stdout.splitlines()
    return lines[0] if lines else ""


def probe(input_path: Path) -> ProbeResult:
    """Extract media metadata via ffprobe."""
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(input_path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    data = json.loads(result.stdout)

    video_stream = next(
        (s for s in data["streams"] if s["codec_type"] == "video"), None
    )
    audio_stream = next(
        (s for s in data["streams"] if s["codec_type"] == "audio"), None
    )

    if video_stream is None:
        raise ValueError(f"No video stream found in {input_path}")

    duration = data["format"].get("duration")
    if duration is None:
        raise ValueError(f"Could not determine duration of {input_path}")

    # Parse fps from r_frame_rate (e.g. "30/1")
    num, den = video_stream["r_frame_rate"].split("/")
    fps = int(num) / int(den) if int(den) else 0.0

    return ProbeResult(
        duration=float(duration),
        width=int(video_stream["width"]),
        height=int(video_stream["height"]),
        fps=fps,
        codec_video=video_stream["codec_name"],
        codec_audio=audio_stream["codec_name"] if audio_stream else None,
        audio_sample_rate=int(audio_stream["sample_rate"]) if audio_stream else None,
    )


def trim_args(input_name: str, start: int, length: int, output_name: str) -> list[str]:
    """Arguments for a lossless stream-copy of ``[start, start + length)``.

    ``-ss`` goes after ``-i`` so the seek is applied to the decoded
    timeline. ``-t`` past end-of-stream just stops at EOF.
    """
    return [
        "-i", input_name,
        "-ss", str(start),
        "-t", str(length),
        "-c", "copy",
        output_name,
    ]


def parse_progress_line(line: str) -> tuple[str, str] | None:
    """Split one ``-progress`` output line into ``(key, value)``."""
    line = line.strip()
    if not line or "=" not in line:
        return None
    key, value = line.split("=", 1)
    return key.strip(), value.strip()


def progress_fraction(out_time_us: str, duration: float | None) -> float | None:
    """Map an ``out_time_ms`` value (microseconds) to a fraction of *duration*."""
    if not duration or duration <= 0:
        return None
    try:
        seconds = float(out_time_us) / 1_000_000.0
    except ValueError:
        return None
    return min(1.0, max(0.0, seconds / duration))
