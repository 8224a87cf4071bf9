"""Markup compositor and HTML serializer shared by print and live preview."""

from resumify.markup.compositor import compose, compose_resume
from resumify.markup.tree import MarkupTree, SectionKind

__all__ = ["MarkupTree", "SectionKind", "compose", "compose_resume"]
