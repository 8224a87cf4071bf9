"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- Resume: a resume document with its structured fields and artifact pointers

All models inherit from the shared Base declarative class defined in data.db.
"""

from resumify.data.db import Base
from resumify.data.models.resume import Resume

__all__ = ["Base", "Resume"]
