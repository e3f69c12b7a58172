"""Web UI routes for ClipSplit."""

import io
import json
import logging
import queue
import shutil
import subprocess
import threading
import uuid
from pathlib import Path

from flask import (
    Blueprint,
    Response,
    current_app,
    jsonify,
    render_template,
    request,
    send_file,
)

from clipsplit.errors import Conflict, InvalidInput, NotReady, SplitError
from clipsplit.models import StatusReport
from clipsplit.source import format_duration, open_source

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__, template_folder="templates")


def _state():
    return current_app.extensions["clipsplit"]


def _uploads_root() -> Path:
    return Path(current_app.config["WORK_DIR"]) / "uploads"


def _remove_stale_uploads(state, uploads_root: Path) -> None:
    """Delete upload dirs of replaced sources, unless a run may still read them."""
    if state.orchestrator.report().status.active:
        return
    while state.stale_uploads:
        stale = state.stale_uploads.pop()
        if stale.parent != uploads_root:
            continue
        try:
            shutil.rmtree(stale)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove old upload %s: %s", stale, e)


@bp.route("/")
def index():
    return render_template("index.html")


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    upload_dir = _uploads_root() / uuid.uuid4().hex[:12]
    upload_dir.mkdir(parents=True, exist_ok=True)

    ext = Path(f.filename).suffix or f".{current_app.config['CONTAINER']}"
    input_path = upload_dir / f"input{ext}"
    f.save(input_path)

    try:
        source = open_source(input_path, name=f.filename)
    except (subprocess.CalledProcessError, OSError, ValueError) as e:
        logger.warning("Could not probe upload %s: %s", f.filename, e)
        shutil.rmtree(upload_dir, ignore_errors=True)
        return jsonify({"error": f"Could not read video: {f.filename}"}), 422

    state = _state()
    previous = state.source
    state.source = source
    if previous is not None:
        state.stale_uploads.append(previous.path.parent)
    _remove_stale_uploads(state, _uploads_root())

    return jsonify({
        "filename": f.filename,
        "duration": source.duration,
        "duration_display": format_duration(source.duration),
    })


@bp.route("/api/split", methods=["POST"])
def start_split():
    state = _state()
    config = request.get_json(silent=True) or {}
    slice_seconds = config.get("slice_seconds", current_app.config["SLICE_SECONDS"])
    source = state.source

    try:
        segments = state.orchestrator.prepare(source, slice_seconds)
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    except NotReady as e:
        return jsonify({"error": str(e)}), 503
    except Conflict as e:
        return jsonify({"error": str(e)}), 409

    progress_queue: queue.Queue = queue.Queue()
    state.progress_queue = progress_queue
    uploads_root = _uploads_root()

    def run():
        try:
            state.orchestrator.execute(source, segments, on_update=progress_queue.put)
        except SplitError as e:
            logger.warning("Split failed: %s", e)
        except Exception:
            logger.exception("Unexpected error during split")
        finally:
            _remove_stale_uploads(state, uploads_root)
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"status": "started", "total": len(segments)})


@bp.route("/api/progress")
def progress_stream():
    state = _state()
    q = state.progress_queue

    if q is None:
        return jsonify({"error": "No split in progress"}), 409

    report = state.orchestrator.report()
    if report.terminal and q.empty():
        # Stream of this run was already drained; send the final state only.
        return Response(
            f"data: {json.dumps(report.to_dict())}\n\n", mimetype="text/event-stream"
        )

    def generate():
        while True:
            try:
                msg: StatusReport | None = q.get(timeout=120)
            except queue.Empty:
                yield "data: {\"error\": \"timeout\"}\n\n"
                break
            if msg is None:
                data = json.dumps(state.orchestrator.report().to_dict())
                yield f"data: {data}\n\n"
                break
            yield f"data: {json.dumps(msg.to_dict())}\n\n"

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/status")
def status():
    state = _state()
    resp = state.orchestrator.report().to_dict()
    if state.source is not None:
        resp["source"] = {
            "filename": state.source.name,
            "duration": state.source.duration,
        }
    return jsonify(resp)


@bp.route("/api/artifacts/<name>")
def download_artifact(name: str):
    try:
        artifact, data = _state().orchestrator.artifact(name)
    except KeyError:
        return jsonify({"error": "Artifact not found"}), 404
    except LookupError:
        return jsonify({"error": "Split not complete"}), 409

    return send_file(
        io.BytesIO(data),
        mimetype="video/mp4" if name.endswith(".mp4") else "application/octet-stream",
        as_attachment=True,
        download_name=artifact.name,
    )
