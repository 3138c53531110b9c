"""
DataDAO Wizard Templates Module

Contains the template substitution engine and the bundled project templates
(contracts.env, refiner.env, ui.env).
"""

from .engine import (
    BUNDLED_TEMPLATES_DIR,
    RenderJob,
    RenderResult,
    TemplateEngine,
    TemplateNotFoundError,
    TemplateValidation,
    bindings_from_record,
    format_value,
)

__all__ = [
    "TemplateEngine",
    "TemplateValidation",
    "TemplateNotFoundError",
    "RenderJob",
    "RenderResult",
    "BUNDLED_TEMPLATES_DIR",
    "bindings_from_record",
    "format_value",
]
