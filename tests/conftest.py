from __future__ import annotations

import threading
from collections.abc import Iterator
from pathlib import Path

import fitz  # PyMuPDF
import pytest

import resumify.data.db as app_db
from resumify.config import get_settings
from resumify.data.db import init_db
from resumify.services.object_store import LocalObjectStore, set_object_store
from resumify.services.render_pipeline import RenderPipeline, set_render_pipeline

PUBLIC_BASE_URL = "http://testserver/assets"


def make_pdf(text: str = "Resume", pages: int = 1) -> bytes:
    """Build a small real PDF so the local store can rasterize it."""
    doc = fitz.open()
    for number in range(pages):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), f"{text} page {number + 1}")
    data = doc.tobytes()
    doc.close()
    return data


class FakeRenderEngine:
    """Stands in for Chromium: records the markup and returns a real PDF.

    ``gate`` lets a test hold a render in flight; ``error`` makes every
    render fail with that exception.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.gate: threading.Event | None = None
        self.started = threading.Event()
        self._lock = threading.Lock()

    def render_pdf(self, html: str) -> bytes:
        with self._lock:
            self.calls.append(html)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=10)
        if self.error is not None:
            raise self.error
        return make_pdf()


@pytest.fixture
def fake_engine() -> FakeRenderEngine:
    return FakeRenderEngine()


@pytest.fixture
def local_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "storage", PUBLIC_BASE_URL)


@pytest.fixture
def api_db(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    fake_engine: FakeRenderEngine,
    local_store: LocalObjectStore,
) -> Iterator[RenderPipeline]:
    """Temporary SQLite DB and storage, with renders going to the fake engine."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("RESUMIFY_STORAGE_DIR", local_store.root.as_posix())
    monkeypatch.setenv("RESUMIFY_PUBLIC_BASE_URL", PUBLIC_BASE_URL)
    get_settings.cache_clear()
    app_db.dispose_db()
    init_db()

    set_object_store(local_store)
    pipeline = RenderPipeline(engine=fake_engine, store=local_store, max_workers=2)
    previous = set_render_pipeline(pipeline)
    yield pipeline

    if fake_engine.gate is not None:
        fake_engine.gate.set()
    pipeline.wait_idle(timeout=10)
    pipeline.shutdown()
    set_render_pipeline(previous)
    set_object_store(None)
    # Dispose engine to release connections
    app_db.dispose_db()
    get_settings.cache_clear()


@pytest.fixture
def pipeline(api_db: RenderPipeline) -> RenderPipeline:
    return api_db


@pytest.fixture(autouse=True)
def _api_db_for_api_tests(request: pytest.FixtureRequest) -> None:
    """Automatically use the api_db fixture in API test files."""
    # Check if test file name contains "api" (case-insensitive)
    test_file_path = Path(str(request.node.fspath))
    if "api" in test_file_path.stem.lower():
        request.getfixturevalue("api_db")


@pytest.fixture
def pdf_factory():
    """``make_pdf`` for tests that need PDF bytes of their own."""
    return make_pdf
