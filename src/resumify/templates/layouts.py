"""Registered resume layouts, in registration order."""

from __future__ import annotations

from resumify.templates.base import (
    FontFamily,
    HeaderTreatment,
    SectionDivider,
    Spacing,
    TemplateDescriptor,
)

__all__ = ["LAYOUTS"]

LAYOUTS: tuple[TemplateDescriptor, ...] = (
    TemplateDescriptor(
        id="classic",
        name="Classic",
        description="Traditional resume format with clear sections",
        header=HeaderTreatment.BORDERED,
        header_rule="2px solid",
        divider=SectionDivider.UNDERLINE,
        font_family=FontFamily.SERIF,
    ),
    TemplateDescriptor(
        id="modern",
        name="Modern",
        description="Contemporary design with bold headers",
        header=HeaderTreatment.GRADIENT,
        divider=SectionDivider.LEFT_BAR,
    ),
    TemplateDescriptor(
        id="minimal",
        name="Minimal",
        description="Clean and simple layout",
        header=HeaderTreatment.BORDERED,
        divider=SectionDivider.PLAIN,
    ),
    TemplateDescriptor(
        id="professional",
        name="Professional",
        description="Corporate-friendly design",
        header=HeaderTreatment.SOLID,
        divider=SectionDivider.RULE,
    ),
    TemplateDescriptor(
        id="creative",
        name="Creative",
        description="Unique layout for creative fields",
        header=HeaderTreatment.BORDERED,
        header_rule="4px dashed",
        divider=SectionDivider.PANEL,
    ),
    TemplateDescriptor(
        id="executive",
        name="Executive",
        description="Sophisticated design for senior positions",
        header=HeaderTreatment.BORDERED,
        divider=SectionDivider.RULE,
        font_family=FontFamily.SERIF,
        uppercase_headings=True,
    ),
    TemplateDescriptor(
        id="compact",
        name="Compact",
        description="Space-efficient layout",
        header=HeaderTreatment.BORDERED,
        divider=SectionDivider.RULE,
        spacing=Spacing.COMPACT,
    ),
)
