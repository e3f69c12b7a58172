"""JSON manifest schema — the contract between CLI and orchestrator."""

import json
from dataclasses import dataclass
from pathlib import Path

from clipsplit.planner import parse_slice_seconds

DEFAULT_SLICE_SECONDS = 60
DEFAULT_CONTAINER = "mp4"


@dataclass
class SplitManifest:
    """Top-level split manifest."""

    input: Path
    output_dir: Path
    slice_seconds: int = DEFAULT_SLICE_SECONDS
    container: str = DEFAULT_CONTAINER
    version: str = "1"


def load_manifest(path: str | Path) -> SplitManifest:
    """Load and validate a manifest from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    if "input" not in data or "output_dir" not in data:
        raise ValueError("Manifest must contain 'input' and 'output_dir' fields")

    container = str(data.get("container", DEFAULT_CONTAINER)).lstrip(".")
    if not container:
        raise ValueError("Manifest 'container' cannot be empty")

    return SplitManifest(
        version=data.get("version", "1"),
        input=Path(data["input"]),
        output_dir=Path(data["output_dir"]),
        slice_seconds=parse_slice_seconds(data.get("slice_seconds", DEFAULT_SLICE_SECONDS)),
        container=container,
    )
