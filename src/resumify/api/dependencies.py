"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Header, HTTPException, status

from resumify.services.render_pipeline import RenderPipeline, get_render_pipeline


def get_current_user_id(
    x_user_id: Annotated[
        str | None,
        Header(
            description=(
                "Opaque identity of the caller, supplied by the authentication "
                "layer in front of this service."
            )
        ),
    ] = None,
) -> str:
    """Get the current user id from request context.

    Args:
        x_user_id: User id from the X-User-Id header.

    Returns:
        str: Authenticated user id.

    Raises:
        HTTPException: If authentication is missing (401).
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication. Please provide X-User-Id header.",
        )
    return x_user_id.strip()


def get_pipeline() -> RenderPipeline:
    """The background render pipeline; overridable in tests."""
    return get_render_pipeline()
