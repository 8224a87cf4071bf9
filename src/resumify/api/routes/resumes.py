"""Resume document routes for the API.

Every write persists the fields, queues a background render of the new
state and returns immediately; the response never waits for the PDF.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi import Path as PathParam
from fastapi.responses import HTMLResponse

from resumify.api.dependencies import get_current_user_id, get_pipeline
from resumify.api.schemas.resumes import (
    ResumeContent,
    ResumeCountResponse,
    ResumeCreateRequest,
    ResumeResponse,
    ResumeUpdateRequest,
    VisibilityRequest,
)
from resumify.exceptions import AssetError, PublishError, ValidationError
from resumify.services.profile_photo import clear_profile_photo, set_profile_photo
from resumify.services.render_pipeline import RenderPipeline
from resumify.services.resume import (
    count_resumes,
    create_resume,
    delete_resume,
    duplicate_resume,
    get_resume,
    list_resumes,
    regenerate_share_id,
    set_visibility,
    update_resume,
)
from resumify.services.resume_generator import generate_resume_html

router = APIRouter(prefix="/resumes", tags=["resumes"])

UserId = Annotated[str, Depends(get_current_user_id)]
Pipeline = Annotated[RenderPipeline, Depends(get_pipeline)]
ResumeId = Annotated[str, PathParam(description="Resume ID")]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _respond(resume: dict[str, Any] | None) -> ResumeResponse:
    if resume is None:
        raise _not_found()
    return ResumeResponse.model_validate(resume)


# --- fixed paths MUST come before /{resume_id} to avoid path conflicts ---


@router.get("/stats/count", response_model=ResumeCountResponse)
def get_resume_count(user_id: UserId) -> ResumeCountResponse:
    """Number of resumes owned by the caller."""
    return ResumeCountResponse(count=count_resumes(user_id))


@router.post("", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
def create_resume_endpoint(
    data: ResumeCreateRequest, user_id: UserId, pipeline: Pipeline
) -> ResumeResponse:
    """Create a resume and queue its first render."""
    try:
        resume = create_resume(user_id, data.model_dump())
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    pipeline.submit(resume)
    return _respond(resume)


@router.get("", response_model=list[ResumeResponse])
def list_resumes_endpoint(user_id: UserId) -> list[ResumeResponse]:
    """List the caller's resumes, most recently updated first."""
    return [ResumeResponse.model_validate(r) for r in list_resumes(user_id)]


@router.get("/{resume_id}", response_model=ResumeResponse)
def get_resume_endpoint(resume_id: ResumeId, user_id: UserId) -> ResumeResponse:
    return _respond(get_resume(resume_id, user_id))


@router.put("/{resume_id}", response_model=ResumeResponse)
def replace_resume_endpoint(
    resume_id: ResumeId, data: ResumeContent, user_id: UserId, pipeline: Pipeline
) -> ResumeResponse:
    """Replace every editable field; visibility and share id are kept."""
    try:
        resume = update_resume(resume_id, user_id, data.model_dump())
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    if resume is None:
        raise _not_found()
    pipeline.submit(resume)
    return _respond(resume)


@router.patch("/{resume_id}", response_model=ResumeResponse)
def update_resume_endpoint(
    resume_id: ResumeId, data: ResumeUpdateRequest, user_id: UserId, pipeline: Pipeline
) -> ResumeResponse:
    """Update only the fields present in the request body."""
    fields = data.model_dump(exclude_unset=True)
    try:
        resume = update_resume(resume_id, user_id, fields)
    except ValidationError as exc:
        raise _bad_request(exc) from exc
    if resume is None:
        raise _not_found()
    if set(fields) - {"visibility"}:
        pipeline.submit(resume)
    return _respond(resume)


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume_endpoint(resume_id: ResumeId, user_id: UserId) -> Response:
    if not delete_resume(resume_id, user_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{resume_id}/duplicate",
    response_model=ResumeResponse,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_resume_endpoint(
    resume_id: ResumeId, user_id: UserId, pipeline: Pipeline
) -> ResumeResponse:
    """Copy a resume as a new private document."""
    resume = duplicate_resume(resume_id, user_id)
    if resume is None:
        raise _not_found()
    pipeline.submit(resume)
    return _respond(resume)


@router.patch("/{resume_id}/visibility", response_model=ResumeResponse)
def set_visibility_endpoint(
    resume_id: ResumeId,
    user_id: UserId,
    data: VisibilityRequest | None = None,
) -> ResumeResponse:
    """Set visibility, or flip it when no value is given."""
    visibility = data.visibility if data else None
    return _respond(set_visibility(resume_id, user_id, visibility))


@router.patch("/{resume_id}/regenerate-share-id", response_model=ResumeResponse)
def regenerate_share_id_endpoint(resume_id: ResumeId, user_id: UserId) -> ResumeResponse:
    """Issue a new share id; links using the old one stop working."""
    return _respond(regenerate_share_id(resume_id, user_id))


@router.put(
    "/{resume_id}/photo",
    response_model=ResumeResponse,
    summary="Upload a profile photo",
    responses={
        400: {"description": "Invalid photo upload"},
        404: {"description": "Resume not found"},
        502: {"description": "Object store rejected the upload"},
    },
)
async def upload_profile_photo(
    resume_id: ResumeId,
    file: Annotated[UploadFile, File(description="PNG, JPEG, WebP or GIF up to 5 MiB")],
    user_id: UserId,
    pipeline: Pipeline,
) -> ResumeResponse:
    data = await file.read()
    try:
        resume = set_profile_photo(
            resume_id, user_id, content_type=file.content_type, data=data
        )
    except AssetError as exc:
        raise _bad_request(exc) from exc
    except PublishError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to store photo."
        ) from exc
    if resume is None:
        raise _not_found()
    pipeline.submit(resume)
    return _respond(resume)


@router.delete("/{resume_id}/photo", response_model=ResumeResponse)
def delete_profile_photo(
    resume_id: ResumeId, user_id: UserId, pipeline: Pipeline
) -> ResumeResponse:
    resume = clear_profile_photo(resume_id, user_id)
    if resume is None:
        raise _not_found()
    pipeline.submit(resume)
    return _respond(resume)


@router.get("/{resume_id}/markup", response_class=HTMLResponse)
def get_resume_markup(
    resume_id: ResumeId,
    user_id: UserId,
    template: Annotated[str | None, Query(description="Preview with another template")] = None,
    theme: Annotated[str | None, Query(description="Preview with another colour theme")] = None,
) -> HTMLResponse:
    """Live-preview fragment of the stored resume.

    ``template`` and ``theme`` let the editor preview a choice before saving
    it; unknown ids fall back to the defaults.
    """
    resume = get_resume(resume_id, user_id)
    if resume is None:
        raise _not_found()
    settings = dict(resume["template_settings"])
    if template:
        settings["template"] = template
    if theme:
        settings["color_theme"] = theme
    resume["template_settings"] = settings
    return HTMLResponse(generate_resume_html(resume, standalone=False))
