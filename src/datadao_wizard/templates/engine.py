#!/usr/bin/env python3
"""
Template substitution engine.

Renders text templates containing ``{{ name }}`` placeholders from a flat
binding map. Placeholders without a binding are left in place and logged, so
a template can be rendered in several passes as more values become known.
Rendering is a pure function of (content, bindings).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from ..settings.models import NetworkConfig
    from ..state.record import DeploymentRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{([^}]+)\}\}")

BUNDLED_TEMPLATES_DIR = Path(__file__).parent / "files"

# deployment.json network keys -> network binding names
RECORD_NETWORK_BINDINGS = {
    "network": "NETWORK",
    "rpcUrl": "RPC_URL",
    "chainId": "CHAIN_ID",
}


class TemplateNotFoundError(FileNotFoundError):
    """Raised when a template file does not exist."""


@dataclass
class TemplateValidation:
    """
    Pre-flight check of a template against a binding map.

    Attributes:
        all_satisfied: True if every placeholder has a binding
        missing_names: Placeholders without a binding, in first-occurrence order
        all_required_names: Every placeholder, in first-occurrence order
    """
    all_satisfied: bool
    missing_names: list[str] = field(default_factory=list)
    all_required_names: list[str] = field(default_factory=list)


@dataclass
class RenderJob:
    """One template of a batch. ``bindings`` override the batch-wide ones."""
    template: str
    target: Path
    bindings: dict[str, Any] = field(default_factory=dict)


@dataclass
class RenderResult:
    """Outcome of one RenderJob."""
    template: str
    target: Path
    success: bool
    error: str | None = None


def format_value(value: Any) -> str:
    """Text a bound value renders as. Booleans are lowercase, None is empty."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def bindings_from_record(
    record: DeploymentRecord,
    network: NetworkConfig | None = None,
) -> dict[str, Any]:
    """
    Build a binding map from a deployment record.

    Network defaults come first. The network recorded in the project
    (``network``, ``rpcUrl``, ``chainId``) then overrides them, under both
    its own key and the network binding name (``RPC_URL`` etc.).
    """
    bindings: dict[str, Any] = {}
    if network is not None:
        bindings.update(network.to_bindings())

    flat = record.flat_fields()
    bindings.update(flat)
    for key, binding in RECORD_NETWORK_BINDINGS.items():
        if key in flat:
            bindings[binding] = flat[key]
    return bindings


class TemplateEngine:
    """Renders placeholder templates from strings or from a templates directory."""

    def __init__(self, templates_dir: Path | None = None):
        """
        Initialize the engine.

        Args:
            templates_dir: Directory template paths are resolved against.
                Defaults to the templates bundled with the package.
        """
        self.templates_dir = Path(templates_dir) if templates_dir else BUNDLED_TEMPLATES_DIR

    # ========== String Operations ==========

    def render(self, content: str, bindings: Mapping[str, Any]) -> str:
        """
        Substitute every placeholder that has a binding.

        Names are matched exactly (after trimming whitespace inside the
        braces). Falsy values such as 0, False and "" are substituted like
        any other. Unbound placeholders are kept verbatim and logged.

        Args:
            content: Template text
            bindings: Placeholder name -> value

        Returns:
            Rendered text
        """
        def substitute(match: re.Match[str]) -> str:
            name = match.group(1).strip()
            if name in bindings:
                return format_value(bindings[name])
            logger.warning(f"Variable '{name}' not found, keeping placeholder")
            return match.group(0)

        return PLACEHOLDER_RE.sub(substitute, content)

    def extract_placeholders(self, content: str) -> list[str]:
        """Get the distinct placeholder names, in order of first occurrence."""
        names: list[str] = []
        for match in PLACEHOLDER_RE.finditer(content):
            name = match.group(1).strip()
            if name not in names:
                names.append(name)
        return names

    def validate(self, content: str, bindings: Mapping[str, Any]) -> TemplateValidation:
        """Check which placeholders a binding map leaves unresolved, without rendering."""
        required = self.extract_placeholders(content)
        missing = [name for name in required if name not in bindings]
        return TemplateValidation(
            all_satisfied=not missing,
            missing_names=missing,
            all_required_names=required,
        )

    # ========== File Operations ==========

    def template_path(self, template: str) -> Path:
        """Resolve a template name against the templates directory."""
        return self.templates_dir / template

    def read_template(self, template: str) -> str:
        """
        Read a template file.

        Raises:
            TemplateNotFoundError: the template does not exist
        """
        path = self.template_path(template)
        if not path.is_file():
            raise TemplateNotFoundError(f"Template file not found: {path}")
        return path.read_text(encoding="utf-8")

    def list_templates(self) -> list[str]:
        """Get the names of all templates in the templates directory."""
        if not self.templates_dir.is_dir():
            return []
        return sorted(
            str(p.relative_to(self.templates_dir))
            for p in self.templates_dir.rglob("*")
            if p.is_file()
        )

    def render_file(self, template: str, bindings: Mapping[str, Any]) -> str:
        """Render a template file and return the text."""
        return self.render(self.read_template(template), bindings)

    def validate_file(self, template: str, bindings: Mapping[str, Any]) -> TemplateValidation:
        """Pre-flight check of a template file."""
        return self.validate(self.read_template(template), bindings)

    def render_to_file(self, template: str, target: Path, bindings: Mapping[str, Any]) -> Path:
        """
        Render a template file and write the result.

        Creates the target's parent directories as needed.
        """
        content = self.render_file(template, bindings)
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.debug(f"Rendered {template} -> {target}")
        return target

    def render_many(
        self,
        jobs: list[RenderJob],
        global_bindings: Mapping[str, Any] | None = None,
    ) -> list[RenderResult]:
        """
        Render a batch of templates.

        A failing job does not stop the batch; its error is reported in its
        result instead.
        """
        results = []
        for job in jobs:
            merged = {**(global_bindings or {}), **job.bindings}
            try:
                self.render_to_file(job.template, job.target, merged)
                results.append(RenderResult(template=job.template, target=Path(job.target), success=True))
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Failed to render {job.template}: {e}")
                results.append(
                    RenderResult(
                        template=job.template,
                        target=Path(job.target),
                        success=False,
                        error=str(e),
                    )
                )
        return results
