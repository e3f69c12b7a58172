"""Orchestrator — runs a split plan against the media engine."""

import logging
import threading
from typing import Callable

from clipsplit import ffutil
from clipsplit.artifacts import ArtifactStore
from clipsplit.engine import MediaEngine
from clipsplit.errors import (
    EngineNotReady,
    NoSourceLoaded,
    RunInProgress,
    RunNotPrepared,
    SegmentExecutionFailed,
    StagingFailed,
)
from clipsplit.models import (
    Artifact,
    RunStatus,
    SegmentDescriptor,
    SourceVideo,
    SplitRun,
    StatusReport,
)
from clipsplit.planner import output_name, parse_slice_seconds, plan

logger = logging.getLogger(__name__)

Listener = Callable[[StatusReport], None]


class SplitOrchestrator:
    """Drives one split run at a time through a shared MediaEngine.

    Segments are executed strictly in order; each invocation's output is
    read back before the next one starts. Progress reported while a run is
    processing is the latest value of the in-flight invocation, so it drops
    back toward 0 whenever a new segment starts.

    A failed run exposes no artifacts, even for segments that finished
    before the failure.
    """

    def __init__(
        self,
        engine: MediaEngine,
        store: ArtifactStore | None = None,
        container: str = "mp4",
    ) -> None:
        self.engine = engine
        self.store = store if store is not None else ArtifactStore()
        self.container = container
        self._run = SplitRun()
        self._executing = False
        self._lock = threading.Lock()

    def report(self) -> StatusReport:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> StatusReport:
        run = self._run
        return StatusReport(
            status=run.status,
            progress=run.progress,
            completed=run.completed,
            total=run.total,
            artifacts=tuple(run.artifacts),
            error=run.error,
            failed_index=run.failed_index,
        )

    def artifact(self, name: str) -> tuple[Artifact, bytes]:
        """Look up an artifact of the current complete run by name."""
        with self._lock:
            if self._run.status is not RunStatus.COMPLETE:
                raise LookupError("No complete run")
            for a in self._run.artifacts:
                if a.name == name:
                    return a, self.store.get(a.ref)
        raise KeyError(name)

    def _update(self, listeners: list[Listener], **changes) -> StatusReport:
        with self._lock:
            for key, value in changes.items():
                setattr(self._run, key, value)
            report = self._snapshot()
        for listener in listeners:
            listener(report)
        return report

    def prepare(self, source: SourceVideo | None, slice_seconds: object) -> list[SegmentDescriptor]:
        """Validate a split request and reset the run to ``Starting``.

        Nothing is changed if any check fails.

        Raises:
            NoSourceLoaded: *source* is None.
            InvalidSliceLength: *slice_seconds* is not a positive integer.
            EngineNotReady: the engine has not finished loading.
            RunInProgress: another run is starting or processing.
        """
        if source is None:
            raise NoSourceLoaded()
        slice_len = parse_slice_seconds(slice_seconds)
        segments = plan(source.duration, slice_len)
        if not self.engine.ready:
            raise EngineNotReady()

        with self._lock:
            if self._run.status.active:
                raise RunInProgress(self._run.status.value)
            self.store.clear()
            self._run = SplitRun(
                status=RunStatus.STARTING,
                slice_seconds=slice_len,
                total=len(segments),
            )
        logger.info(
            "Split of %s (%ds) into %d segment(s) starting",
            source.name or source.path, source.duration, len(segments),
        )
        return segments

    def execute(
        self,
        source: SourceVideo,
        segments: list[SegmentDescriptor],
        on_update: Listener | None = None,
    ) -> StatusReport:
        """Run a prepared plan to completion.

        Raises:
            RunNotPrepared: the run was not moved to ``Starting`` by
                ``prepare``, or another ``execute`` already claimed it.
            StagingFailed: the source could not be written to the engine.
            SegmentExecutionFailed: an invocation or its read-back failed.
        """
        with self._lock:
            if self._run.status is not RunStatus.STARTING or self._executing:
                raise RunNotPrepared(self._run.status.value)
            self._executing = True
        try:
            return self._execute(source, segments, [on_update] if on_update else [])
        finally:
            with self._lock:
                self._executing = False

    def _execute(
        self,
        source: SourceVideo,
        segments: list[SegmentDescriptor],
        listeners: list[Listener],
    ) -> StatusReport:
        self._update(listeners)

        suffix = source.path.suffix or f".{self.container}"
        input_name = f"input{suffix}"
        try:
            self.engine.write_input(input_name, source.path)
        except Exception as e:
            self._fail(listeners, None, str(e))
            raise StagingFailed(str(e)) from e

        try:
            self._update(listeners, status=RunStatus.PROCESSING)
            for seg in segments:
                self._run_segment(source, seg, input_name, listeners)
        finally:
            self._remove_quietly(input_name)

        report = self._update(listeners, status=RunStatus.COMPLETE, progress=100)
        logger.info("Split complete: %d artifact(s)", len(report.artifacts))
        return report

    def split(
        self,
        source: SourceVideo | None,
        slice_seconds: object,
        on_update: Listener | None = None,
    ) -> StatusReport:
        segments = self.prepare(source, slice_seconds)
        return self.execute(source, segments, on_update=on_update)

    def _run_segment(
        self,
        source: SourceVideo,
        seg: SegmentDescriptor,
        input_name: str,
        listeners: list[Listener],
    ) -> None:
        name = output_name(seg.index, self.container)
        self._update(listeners, progress=0)

        def on_progress(frac: float) -> None:
            self._update(listeners, progress=round(frac * 100))

        logger.debug("Segment %d: %ds +%ds -> %s", seg.index + 1, seg.start, seg.length, name)
        try:
            self.engine.exec(
                ffutil.trim_args(input_name, seg.start, seg.length, name),
                duration=seg.actual_length(source.duration),
                on_progress=on_progress,
            )
            data = self.engine.read_output(name)
        except Exception as e:
            self._remove_quietly(name)
            self._fail(listeners, seg.index, str(e))
            raise SegmentExecutionFailed(seg.index, str(e)) from e
        self._remove_quietly(name)

        ref = self.store.put(data)
        with self._lock:
            self._run.artifacts.append(Artifact(name=name, ref=ref, size=len(data)))
            completed = self._run.completed + 1
        self._update(listeners, completed=completed)

    def _fail(self, listeners: list[Listener], index: int | None, cause: str) -> None:
        with self._lock:
            refs = [a.ref for a in self._run.artifacts]
        self.store.discard(refs)
        self._update(
            listeners,
            status=RunStatus.ERROR,
            artifacts=[],
            error=cause,
            failed_index=index,
        )
        if index is None:
            logger.error("Split failed while staging source: %s", cause)
        else:
            logger.error("Split failed at segment %d: %s", index + 1, cause)

    def _remove_quietly(self, name: str) -> None:
        try:
            self.engine.remove(name)
        except OSError as e:
            logger.warning("Could not remove %s from engine: %s", name, e)
