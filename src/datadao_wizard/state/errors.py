"""
Exceptions raised by the deployment state layer.

Structural problems with deployment.json (absent, unparsable) are fatal and
propagate to the CLI. Semantic problems (configuration issues, failed steps)
are reported as data instead and never raised from here.
"""

from __future__ import annotations

from pathlib import Path


class DeploymentStateError(Exception):
    """Base exception for deployment state errors."""


class NotFoundError(DeploymentStateError, FileNotFoundError):
    """Raised when the deployment state file does not exist."""

    def __init__(self, path: Path, message: str | None = None):
        """
        Initialize the error.

        Args:
            path: Path that was expected to hold the state file
            message: Optional override for the default message
        """
        self.path = Path(path)
        super().__init__(
            message
            or f"{self.path.name} not found at {self.path.parent}. "
            "Generate a project with 'datadao-wizard init' and run deployment steps in order."
        )


class ParseError(DeploymentStateError):
    """Raised when the deployment state file cannot be parsed."""

    def __init__(self, path: Path, reason: str, backup_path: Path | None = None):
        self.path = Path(path)
        self.reason = reason
        self.backup_path = backup_path
        message = f"Could not parse {self.path}: {reason}"
        if backup_path is not None:
            message += f". The previous version is kept at {backup_path}"
        super().__init__(message)


class MissingFieldsError(DeploymentStateError):
    """Raised when a step's required fields are absent. Lists all of them."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class StepNotReadyError(DeploymentStateError):
    """Raised when a step is started before the steps it depends on."""

    def __init__(self, step: str, pending: list[str]):
        self.step = step
        self.pending = list(pending)
        super().__init__(
            f"Cannot run {step} yet. Complete these steps first: {', '.join(self.pending)}"
        )
