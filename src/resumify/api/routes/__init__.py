"""Route handlers for the API."""

from resumify.api.routes import assets, catalog, health, pdf, public, resumes

__all__ = [
    "assets",
    "catalog",
    "health",
    "pdf",
    "public",
    "resumes",
]
