"""Loading source videos."""

import math
from pathlib import Path

from clipsplit import ffutil
from clipsplit.models import SourceVideo


def open_source(path: Path, name: str | None = None) -> SourceVideo:
    """Probe *path* and return a SourceVideo with its duration in whole seconds."""
    path = Path(path)
    probe_result = ffutil.probe(path)
    return SourceVideo(
        path=path,
        duration=int(math.floor(probe_result.duration)),
        name=name or path.name,
    )


def format_duration(seconds: int) -> str:
    """Render a duration as ``"<m>m <s>s"``."""
    return f"{seconds // 60}m {seconds % 60}s"
