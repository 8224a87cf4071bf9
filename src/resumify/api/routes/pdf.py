"""PDF routes: on-demand render, synchronous publish and share download."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi import Path as PathParam

from resumify.api.dependencies import get_current_user_id, get_pipeline
from resumify.api.schemas.resumes import ArtifactResponse
from resumify.exceptions import CompositionError, RenderError, ResumeNotFoundError
from resumify.services.render_pipeline import RenderPipeline, Stage
from resumify.services.resume import get_resume
from resumify.services.resume_generator import generate_resume_pdf, pdf_filename
from resumify.services.share import resolve_share

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pdf/resume", tags=["pdf"])

UserId = Annotated[str, Depends(get_current_user_id)]
Pipeline = Annotated[RenderPipeline, Depends(get_pipeline)]

_PDF_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"content": {"application/pdf": {}}},
    404: {"description": "Resume not found"},
    502: {"description": "Render failed"},
    503: {"description": "Render timed out"},
}


def _render(resume: dict[str, Any], pipeline: RenderPipeline) -> bytes:
    try:
        return generate_resume_pdf(resume, pipeline.engine)
    except RenderError as exc:
        logger.exception("On-demand render failed for resume %s", resume.get("id"))
        if exc.timed_out:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="PDF rendering timed out. Please try again.",
            ) from exc
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="PDF rendering failed.",
        ) from exc
    except CompositionError as exc:
        logger.exception("Could not compose resume %s", resume.get("id"))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Resume could not be composed.",
        ) from exc


def _pdf_response(pdf: bytes, filename: str, *, inline: bool) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )


def _owned_resume(resume_id: str, user_id: str) -> dict[str, Any]:
    resume = get_resume(resume_id, user_id)
    if resume is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    return resume


@router.get("/{resume_id}/download", responses=_PDF_RESPONSES)
def download_resume_pdf(
    resume_id: Annotated[str, PathParam(description="Resume ID")],
    user_id: UserId,
    pipeline: Pipeline,
) -> Response:
    """Render the current state and return it as an attachment."""
    resume = _owned_resume(resume_id, user_id)
    return _pdf_response(_render(resume, pipeline), pdf_filename(resume), inline=False)


@router.get("/{resume_id}/preview", responses=_PDF_RESPONSES)
def preview_resume_pdf(
    resume_id: Annotated[str, PathParam(description="Resume ID")],
    user_id: UserId,
    pipeline: Pipeline,
) -> Response:
    """Render the current state for inline viewing."""
    resume = _owned_resume(resume_id, user_id)
    return _pdf_response(_render(resume, pipeline), pdf_filename(resume), inline=True)


@router.post("/{resume_id}/upload", response_model=ArtifactResponse)
def publish_resume_pdf(
    resume_id: Annotated[str, PathParam(description="Resume ID")],
    user_id: UserId,
    pipeline: Pipeline,
) -> ArtifactResponse:
    """Render, publish and reconcile within the request."""
    resume = _owned_resume(resume_id, user_id)
    outcome = pipeline.run(resume)

    if outcome.ok:
        artifacts = outcome.artifacts
        return ArtifactResponse(
            status=outcome.status,
            revision=outcome.revision,
            pdf_url=artifacts.pdf_url,
            pdf_asset_id=artifacts.pdf_asset_id,
            preview_url=artifacts.preview_url,
            view_url=artifacts.view_url,
        )
    if outcome.error is None:
        # Superseded by a newer revision; report what is stored now.
        current = _owned_resume(resume_id, user_id)
        return ArtifactResponse(
            status=outcome.status,
            revision=outcome.revision,
            pdf_url=current["pdf_url"],
            pdf_asset_id=current["pdf_asset_id"],
            preview_url=current["preview_url"],
            view_url=current["view_url"],
        )
    if outcome.timed_out:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="PDF rendering timed out. Please try again.",
        )
    detail = {
        Stage.RENDER: "PDF rendering failed.",
        Stage.PUBLISH: "Failed to upload PDF.",
        Stage.RECONCILE: "Failed to save PDF links.",
    }.get(outcome.stage, "Failed to publish PDF.")
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


@router.get("/share/{share_id}", responses=_PDF_RESPONSES)
def download_shared_resume_pdf(
    share_id: Annotated[str, PathParam(description="Public share ID")],
    pipeline: Pipeline,
) -> Response:
    """Render a public resume for anyone holding its share link."""
    try:
        resume = resolve_share(share_id)
    except ResumeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _pdf_response(_render(resume, pipeline), pdf_filename(resume), inline=False)
