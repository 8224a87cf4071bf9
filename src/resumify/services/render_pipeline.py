"""Background compose → render → publish → reconcile pipeline.

Writes to the document store submit a snapshot here and return at once.
Each job runs on a bounded thread pool and produces a typed
:class:`RenderOutcome`; failures are logged with the stage they happened in
and never propagate to the request that triggered them.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for
from dataclasses import dataclass
from enum import StrEnum

from resumify.config import get_settings
from resumify.exceptions import RenderError
from resumify.markup.compositor import compose_resume
from resumify.services.artifact_publisher import ArtifactTriple, discard_asset, publish_pdf
from resumify.services.object_store import ObjectStore, get_object_store
from resumify.services.reconciliation import apply_artifacts
from resumify.services.render_engine import RenderEngine, get_render_engine
from resumify.services.resume_data import ResumeData

logger = logging.getLogger(__name__)

__all__ = [
    "OutcomeStatus",
    "RenderOutcome",
    "RenderPipeline",
    "Stage",
    "get_render_pipeline",
    "set_render_pipeline",
]


class Stage(StrEnum):
    COMPOSE = "compose"
    RENDER = "render"
    PUBLISH = "publish"
    RECONCILE = "reconcile"


class OutcomeStatus(StrEnum):
    PUBLISHED = "published"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderOutcome:
    """Result of one background job."""

    resume_id: str
    revision: int
    status: OutcomeStatus
    stage: Stage | None = None
    error: str | None = None
    retryable: bool = False
    timed_out: bool = False
    artifacts: ArtifactTriple | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.PUBLISHED


class RenderPipeline:
    """Runs render jobs on a bounded pool of worker threads."""

    def __init__(
        self,
        *,
        engine: RenderEngine | None = None,
        store: ObjectStore | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._engine = engine
        self._store = store
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or get_settings().render_concurrency,
            thread_name_prefix="resumify-render",
        )
        self._pending: set[Future[RenderOutcome]] = set()
        self._lock = threading.Lock()

    @property
    def engine(self) -> RenderEngine:
        return self._engine or get_render_engine()

    @property
    def store(self) -> ObjectStore:
        return self._store or get_object_store()

    def submit(self, snapshot: ResumeData) -> Future[RenderOutcome]:
        """Queue a render of *snapshot* and return without waiting."""
        future = self._executor.submit(self.run, snapshot)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        logger.debug(
            "Queued render for resume %s at revision %s",
            snapshot.get("id"),
            snapshot.get("revision"),
        )
        return future

    def _forget(self, future: Future[RenderOutcome]) -> None:
        with self._lock:
            self._pending.discard(future)

    def run(self, snapshot: ResumeData) -> RenderOutcome:
        """Run one job synchronously; never raises for pipeline failures."""
        resume_id = snapshot.get("id", "")
        revision = int(snapshot.get("revision", 0))

        try:
            html = compose_resume(snapshot).dumps()
        except Exception as exc:
            return self._failed(resume_id, revision, Stage.COMPOSE, exc, retryable=False)

        try:
            pdf = self.engine.render_pdf(html)
        except RenderError as exc:
            return self._failed(resume_id, revision, Stage.RENDER, exc, retryable=exc.retryable)
        except Exception as exc:
            return self._failed(resume_id, revision, Stage.RENDER, exc, retryable=True)

        try:
            artifacts = publish_pdf(
                pdf,
                resume_id=resume_id,
                revision=revision,
                owner_id=snapshot.get("owner_id", ""),
                store=self.store,
            )
        except Exception as exc:
            return self._failed(resume_id, revision, Stage.PUBLISH, exc, retryable=True)

        try:
            applied = apply_artifacts(resume_id, revision, artifacts)
        except Exception as exc:
            # The new asset is left as an orphan; the record is not touched.
            return self._failed(resume_id, revision, Stage.RECONCILE, exc, retryable=True)

        if not applied:
            discard_asset(artifacts.pdf_asset_id, store=self.store)
            return RenderOutcome(
                resume_id=resume_id,
                revision=revision,
                status=OutcomeStatus.STALE,
                stage=Stage.RECONCILE,
            )

        logger.info(
            "Published resume %s revision %d as %s",
            resume_id,
            revision,
            artifacts.pdf_asset_id,
        )
        return RenderOutcome(
            resume_id=resume_id,
            revision=revision,
            status=OutcomeStatus.PUBLISHED,
            artifacts=artifacts,
        )

    def _failed(
        self,
        resume_id: str,
        revision: int,
        stage: Stage,
        exc: Exception,
        *,
        retryable: bool,
    ) -> RenderOutcome:
        logger.error(
            "Render pipeline failed for resume %s revision %d at stage %s: %s",
            resume_id,
            revision,
            stage,
            exc,
            exc_info=exc,
        )
        return RenderOutcome(
            resume_id=resume_id,
            revision=revision,
            status=OutcomeStatus.FAILED,
            stage=stage,
            error=str(exc),
            retryable=retryable,
            timed_out=getattr(exc, "timed_out", False),
        )

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued job has finished; True if none remain."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _done, not_done = wait_for(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_pipeline: RenderPipeline | None = None
_pipeline_lock = threading.Lock()


def get_render_pipeline() -> RenderPipeline:
    """Return the process-wide pipeline, creating it on first use."""
    global _pipeline
    with _pipeline_lock:
        if _pipeline is None:
            _pipeline = RenderPipeline()
        return _pipeline


def set_render_pipeline(pipeline: RenderPipeline | None) -> RenderPipeline | None:
    """Install *pipeline* (or reset with ``None``) and return the previous one."""
    global _pipeline
    with _pipeline_lock:
        previous = _pipeline
        _pipeline = pipeline
        return previous
