"""Headless-browser render engine.

Turns a fully self-contained HTML page into PDF bytes using Playwright's
Chromium.  Every render launches its own browser and closes it in a
``finally`` block, so a crashed or timed-out render never leaks a process.
A bounded semaphore caps how many browsers run at once across both the
background pipeline and the on-demand download surface.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from resumify.config import get_settings
from resumify.exceptions import RenderError

logger = logging.getLogger(__name__)

__all__ = [
    "PAGE_FORMAT",
    "PAGE_MARGINS",
    "ChromiumRenderEngine",
    "RenderEngine",
    "get_render_engine",
    "set_render_engine",
]

PAGE_FORMAT = "A4"
PAGE_MARGINS = {"top": "0", "right": "0", "bottom": "0", "left": "0"}

_CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class RenderEngine(Protocol):
    """Anything that can turn a markup page into PDF bytes."""

    def render_pdf(self, html: str) -> bytes: ...


class ChromiumRenderEngine:
    """Render engine backed by a fresh Chromium per call."""

    def __init__(
        self,
        *,
        timeout_ms: int,
        concurrency: int,
        executable_path: str | None = None,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.concurrency = concurrency
        self.executable_path = executable_path
        self._slots = threading.BoundedSemaphore(concurrency)

    def render_pdf(self, html: str) -> bytes:
        """Render *html* to PDF.

        The render timeout bounds the whole call.  Time spent waiting for a
        free browser slot counts against it, and each browser step only gets
        whatever is left.

        Raises:
            RenderError: On launch failure, crash, timeout, or empty output.
        """
        deadline = time.monotonic() + self.timeout_ms / 1000
        if not self._slots.acquire(timeout=self._remaining_ms(deadline) / 1000):
            raise RenderError("No render slot became free before the timeout", timed_out=True)
        try:
            return self._render(html, deadline)
        finally:
            self._slots.release()

    def _remaining_ms(self, deadline: float) -> int:
        remaining = int((deadline - time.monotonic()) * 1000)
        if remaining <= 0:
            raise RenderError(f"Render timed out after {self.timeout_ms} ms", timed_out=True)
        return remaining

    def _render(self, html: str, deadline: float) -> bytes:
        started = time.monotonic()
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(
                    headless=True,
                    executable_path=self.executable_path,
                    args=_CHROMIUM_ARGS,
                    timeout=self._remaining_ms(deadline),
                )
                try:
                    page = browser.new_page()
                    page.set_default_timeout(self._remaining_ms(deadline))
                    # Web fonts must be loaded before printing.
                    page.set_content(
                        html, wait_until="networkidle", timeout=self._remaining_ms(deadline)
                    )
                    page.emulate_media(media="print")
                    # page.pdf takes no timeout of its own; it gets the page default.
                    page.set_default_timeout(self._remaining_ms(deadline))
                    pdf = page.pdf(
                        format=PAGE_FORMAT,
                        print_background=True,
                        margin=PAGE_MARGINS,
                    )
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise RenderError(
                f"Render timed out after {self.timeout_ms} ms", timed_out=True
            ) from exc
        except PlaywrightError as exc:
            raise RenderError(f"Browser render failed: {exc}") from exc

        if not pdf:
            raise RenderError("Browser produced an empty PDF")

        logger.debug(
            "Rendered PDF (%d bytes) in %.0f ms", len(pdf), (time.monotonic() - started) * 1000
        )
        return pdf


_engine: RenderEngine | None = None
_engine_lock = threading.Lock()


def get_render_engine() -> RenderEngine:
    """Return the process-wide render engine, building it from settings on first use."""
    global _engine
    with _engine_lock:
        if _engine is None:
            settings = get_settings()
            _engine = ChromiumRenderEngine(
                timeout_ms=settings.render_timeout_ms,
                concurrency=settings.render_concurrency,
                executable_path=settings.chromium_path,
            )
        return _engine


def set_render_engine(engine: RenderEngine | None) -> None:
    """Replace (or with ``None`` reset) the process-wide render engine."""
    global _engine
    with _engine_lock:
        _engine = engine
