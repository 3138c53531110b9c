"""
CLI Context for the DataDAO Wizard

Provides a context object for sharing the project directory and settings
across CLI commands. Store, state machine and advisor are created on first
use.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..settings.models import WizardSettings
    from ..state.recovery import ErrorRecoveryAdvisor
    from ..state.state_store import StateStore
    from ..state.step_machine import StepStateMachine
    from ..templates.engine import TemplateEngine


@dataclass
class CLIContext:
    """
    Context object for CLI commands.

    Attributes:
        project_root: Directory of the generated project
        settings: Wizard settings loaded from ~/.datadao-wizard/config.yaml
    """
    project_root: Path = field(default_factory=Path.cwd)
    settings: "WizardSettings | None" = None

    _store: "StateStore | None" = field(default=None, repr=False)
    _machine: "StepStateMachine | None" = field(default=None, repr=False)
    _advisor: "ErrorRecoveryAdvisor | None" = field(default=None, repr=False)
    _engine: "TemplateEngine | None" = field(default=None, repr=False)

    def get_settings(self) -> "WizardSettings":
        """Get the settings, falling back to defaults."""
        if self.settings is None:
            from ..settings.models import WizardSettings

            self.settings = WizardSettings()
        return self.settings

    def get_store(self) -> "StateStore":
        """Get or create the StateStore for the project directory."""
        if self._store is None:
            from ..state.state_store import StateStore

            self._store = StateStore(self.project_root, self.get_settings())
        return self._store

    def get_machine(self) -> "StepStateMachine":
        """Get or create the StepStateMachine."""
        if self._machine is None:
            from ..state.step_machine import StepStateMachine

            self._machine = StepStateMachine(self.get_store())
        return self._machine

    def get_advisor(self) -> "ErrorRecoveryAdvisor":
        """Get or create the ErrorRecoveryAdvisor."""
        if self._advisor is None:
            from ..state.recovery import ErrorRecoveryAdvisor

            self._advisor = ErrorRecoveryAdvisor(self.get_store())
        return self._advisor

    def get_engine(self) -> "TemplateEngine":
        """
        Get or create the TemplateEngine.

        A relative templates_dir setting is resolved against the project root.
        """
        if self._engine is None:
            from ..templates.engine import TemplateEngine

            templates_dir = self.get_settings().templates_dir
            if templates_dir:
                path = Path(templates_dir).expanduser()
                if not path.is_absolute():
                    path = self.project_root / path
                self._engine = TemplateEngine(path)
            else:
                self._engine = TemplateEngine()
        return self._engine

    @classmethod
    def from_options(
        cls,
        project_root: Path | None = None,
        settings: "WizardSettings | None" = None,
    ) -> "CLIContext":
        """
        Create a CLIContext from CLI options.

        Args:
            project_root: Project directory (defaults to cwd)
            settings: Loaded wizard settings

        Returns:
            Configured CLIContext instance.
        """
        return cls(
            project_root=Path(project_root) if project_root else Path.cwd(),
            settings=settings,
        )


def get_cli_context(ctx) -> CLIContext:
    """
    Extract CLIContext from a Typer context.

    Args:
        ctx: Typer Context object (typer.Context).

    Returns:
        CLIContext from ctx.obj, or a new default CLIContext if not set.
    """
    if ctx.obj is None or not isinstance(ctx.obj, CLIContext):
        return CLIContext()
    return ctx.obj
