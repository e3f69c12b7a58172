"""Flask application factory for ClipSplit web UI."""

import logging
import queue
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path

from flask import Flask, jsonify

from clipsplit.engine import MediaEngine
from clipsplit.ffutil import FFmpegNotFoundError
from clipsplit.manifest import DEFAULT_CONTAINER, DEFAULT_SLICE_SECONDS
from clipsplit.models import SourceVideo
from clipsplit.orchestrator import SplitOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class SplitterState:
    """Per-app state: the shared engine, its orchestrator and the current source."""

    engine: MediaEngine
    orchestrator: SplitOrchestrator
    source: SourceVideo | None = None
    progress_queue: queue.Queue | None = None
    stale_uploads: list[Path] = field(default_factory=list)


def _load_engine(engine: MediaEngine) -> None:
    try:
        engine.load()
    except (FFmpegNotFoundError, OSError) as e:
        logger.error("Media engine failed to load: %s", e)


def create_app(work_dir: Path | None = None, engine: MediaEngine | None = None) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="clipsplit_"))
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024 * 1024  # 10 GB
    app.config["SLICE_SECONDS"] = DEFAULT_SLICE_SECONDS
    app.config["CONTAINER"] = DEFAULT_CONTAINER

    engine = engine or MediaEngine(Path(app.config["WORK_DIR"]) / "engine")
    app.extensions["clipsplit"] = SplitterState(
        engine=engine,
        orchestrator=SplitOrchestrator(engine, container=app.config["CONTAINER"]),
    )
    # Split requests are rejected with 503 until this finishes.
    threading.Thread(target=_load_engine, args=(engine,), daemon=True).start()

    from clipsplit.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "File too large"}), 413

    return app
