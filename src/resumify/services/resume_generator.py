"""On-demand PDF generation.

Composes the current state of a resume and renders it synchronously, for
callers that need guaranteed-fresh output rather than the last published
artifact.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from resumify.markup.compositor import compose_resume
from resumify.services.render_engine import RenderEngine, get_render_engine

if TYPE_CHECKING:
    from resumify.services.resume_data import ResumeData

logger = logging.getLogger(__name__)

__all__ = ["generate_resume_html", "generate_resume_pdf", "pdf_filename"]

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def generate_resume_html(data: ResumeData, *, standalone: bool = True) -> str:
    """Full page (``standalone``) or live-preview fragment for *data*."""
    return compose_resume(data).dumps(standalone=standalone)


def generate_resume_pdf(data: ResumeData, engine: RenderEngine | None = None) -> bytes:
    """Compose and render *data* to PDF bytes.

    Raises:
        CompositionError: *data* is not a resume mapping.
        RenderError: The browser failed or timed out.
    """
    engine = engine or get_render_engine()
    html = generate_resume_html(data)
    pdf = engine.render_pdf(html)
    logger.info("Rendered on-demand PDF for resume %s (%d bytes)", data.get("id"), len(pdf))
    return pdf


def pdf_filename(data: ResumeData) -> str:
    """``First_Last_Resume.pdf``, falling back to ``Resume.pdf``."""
    info = data.get("personal_info") or {}
    parts = [
        _FILENAME_UNSAFE.sub("", str(info.get(key) or "").strip().replace(" ", "_"))
        for key in ("first_name", "last_name")
    ]
    parts = [p for p in parts if p]
    return "_".join([*parts, "Resume"]) + ".pdf"
