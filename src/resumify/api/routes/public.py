"""Public share routes; no authentication, public resumes only."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, status
from fastapi import Path as PathParam
from fastapi.responses import HTMLResponse

from resumify.api.schemas.resumes import PublicResumeResponse
from resumify.exceptions import ResumeNotFoundError
from resumify.services.resume_generator import generate_resume_html
from resumify.services.share import public_view, resolve_share

router = APIRouter(prefix="/resumes/public", tags=["public"])

ShareId = Annotated[str, PathParam(description="Public share ID")]


def _resolve(share_id: str) -> dict:
    try:
        return resolve_share(share_id)
    except ResumeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{share_id}", response_model=PublicResumeResponse)
def get_public_resume(share_id: ShareId) -> PublicResumeResponse:
    """Read-only view of a shared resume."""
    return PublicResumeResponse.model_validate(public_view(_resolve(share_id)))


@router.get("/{share_id}/html", response_class=HTMLResponse)
def get_public_resume_html(share_id: ShareId) -> HTMLResponse:
    """The shared resume as a standalone page."""
    return HTMLResponse(generate_resume_html(_resolve(share_id)))
