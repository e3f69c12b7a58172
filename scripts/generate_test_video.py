#!/usr/bin/env python3
"""Generate a synthetic test video for ClipSplit testing.

Produces a video of the requested length (default 125 s) with a test-pattern
picture and a 440 Hz tone, encoded with a 1 s keyframe interval so stream-copy
cuts land close to whole seconds.
"""

import subprocess
import sys
from pathlib import Path


def generate_test_video(output: Path, duration: int = 125) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", f"testsrc=s=160x120:r=10:d={duration}",
        "-f", "lavfi", "-i", f"sine=f=440:d={duration}",
        "-c:v", "libx264",
        "-g", "10",
        "-c:a", "aac",
        "-shortest",
        str(output),
    ]
    subprocess.run(cmd, check=True, capture_output=True)
    print(f"Generated: {output}")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic.mp4")
    seconds = int(sys.argv[2]) if len(sys.argv) > 2 else 125
    generate_test_video(out, seconds)
