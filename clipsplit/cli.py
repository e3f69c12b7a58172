"""Thin CLI entry point — builds a SplitManifest and runs the orchestrator."""

import argparse
import logging
import subprocess
import sys
import tempfile
from pathlib import Path

from clipsplit.engine import MediaEngine
from clipsplit.errors import SplitError
from clipsplit.ffutil import FFmpegNotFoundError
from clipsplit.manifest import (
    DEFAULT_CONTAINER,
    DEFAULT_SLICE_SECONDS,
    SplitManifest,
    load_manifest,
)
from clipsplit.models import StatusReport
from clipsplit.orchestrator import SplitOrchestrator
from clipsplit.planner import parse_slice_seconds
from clipsplit.source import format_duration, open_source


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="clipsplit",
        description="ClipSplit — split a video into fixed-length segments.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    split = sub.add_parser("split", help="Split a video file")
    split.add_argument("video", nargs="?", type=Path, help="Input video file")
    split.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    split.add_argument("--output-dir", "-o", type=Path, help="Directory for output segments")
    split.add_argument("--slice", "-s", default=DEFAULT_SLICE_SECONDS, help="Seconds per segment")
    split.add_argument("--container", default=DEFAULT_CONTAINER, help="Output container extension")

    serve = sub.add_parser("serve", help="Launch the web UI")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from clipsplit.web import create_app
        app = create_app()
        print(f"ClipSplit web UI: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False, threaded=True)
        return

    try:
        if args.manifest:
            m = load_manifest(args.manifest)
        elif args.video:
            m = SplitManifest(
                input=args.video,
                output_dir=args.output_dir or args.video.with_name(args.video.stem + "_segments"),
                slice_seconds=parse_slice_seconds(args.slice),
                container=args.container.lstrip("."),
            )
        else:
            print("Error: provide either a VIDEO argument or --manifest.", file=sys.stderr)
            sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(run_split(m))


def run_split(m: SplitManifest) -> int:
    """Split according to *m* and write segments into ``m.output_dir``."""
    try:
        source = open_source(m.input)
    except (subprocess.CalledProcessError, OSError, ValueError) as e:
        print(f"Error: could not read {m.input}: {e}", file=sys.stderr)
        return 1
    print(f"Source: {source.name} ({format_duration(source.duration)})")

    with tempfile.TemporaryDirectory(prefix="clipsplit_") as tmpdir:
        engine = MediaEngine(Path(tmpdir))
        try:
            engine.load()
        except FFmpegNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        orchestrator = SplitOrchestrator(engine, container=m.container)
        last = {"completed": -1, "progress": -1}

        def on_update(report: StatusReport) -> None:
            if (report.completed, report.progress) == (last["completed"], last["progress"]):
                return
            last["completed"], last["progress"] = report.completed, report.progress
            segment = min(report.completed + 1, report.total)
            print(f"  [{report.progress:3d}%] segment {segment}/{report.total} {report.message}")

        try:
            report = orchestrator.split(source, m.slice_seconds, on_update=on_update)
        except SplitError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        m.output_dir.mkdir(parents=True, exist_ok=True)
        for artifact in report.artifacts:
            (m.output_dir / artifact.name).write_bytes(orchestrator.store.get(artifact.ref))

    print()
    print(f"Done! {len(report.artifacts)} segment(s) in {m.output_dir}")
    for artifact in report.artifacts:
        print(f"  {artifact.name} ({artifact.size} bytes)")
    return 0
