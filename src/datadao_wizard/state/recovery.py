"""
Error recording and recovery suggestions for deployment steps.

A failed external action (a reverted transaction, a failed push, an
unreachable pinning service) is recorded against the step that ran it rather
than raised out of the state layer. Only the latest failure per step is kept.
Later, get_recovery_suggestions() turns the recorded failures into targeted
remediation advice so the operator can see everything that went wrong before
choosing what to do.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .record import DeploymentRecord, DeploymentStep, ErrorEntry

if TYPE_CHECKING:
    from .state_store import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoveryAdvice:
    """Catalogue entry: how to recover from a failure of one step."""
    display_name: str
    description: str
    solutions: tuple[str, ...]


RECOVERY_CATALOGUE: dict[DeploymentStep, RecoveryAdvice] = {
    DeploymentStep.CONTRACTS_DEPLOYED: RecoveryAdvice(
        display_name="Contract Deployment",
        description="Smart contract deployment failed",
        solutions=(
            "Check wallet balance (need VANA tokens)",
            "Get testnet VANA from https://faucet.vana.org",
            "Verify network connectivity to the RPC endpoint",
            "Retry with: npm run deploy:contracts",
        ),
    ),
    DeploymentStep.DATADAO_REGISTERED: RecoveryAdvice(
        display_name="DataDAO Registration",
        description="DataDAO registration failed",
        solutions=(
            "Check you have 1 VANA for registration fee",
            "Try a different DataDAO name (the name may already be taken)",
            "Confirm the contracts were deployed and proxyAddress is set",
            "Retry with: npm run register:datadao",
        ),
    ),
    DeploymentStep.PROOF_CONFIGURED: RecoveryAdvice(
        display_name="Proof Configuration",
        description="Proof of Contribution setup failed",
        solutions=(
            "Ensure GitHub repository is set up",
            "Check the proof repository was forked under your GitHub account",
            "Verify git credentials allow pushing to the repository",
            "Retry with: npm run deploy:proof",
        ),
    ),
    DeploymentStep.REFINER_CONFIGURED: RecoveryAdvice(
        display_name="Refiner Configuration",
        description="Data Refiner setup failed",
        solutions=(
            "Ensure GitHub repository is set up",
            "Check your Pinata API key and secret",
            "Verify git credentials allow pushing to the repository",
            "Retry with: npm run deploy:refiner",
        ),
    ),
}


@dataclass
class RecoverySuggestion:
    """
    Recovery advice for one recorded failure.

    Attributes:
        step: The step that failed
        display_name: Human-readable step name
        description: Short description of the failure class
        message: The recorded error message
        timestamp: When the error was recorded
        solutions: Suggested remediation, most likely first
    """
    step: DeploymentStep
    display_name: str
    description: str
    message: str
    timestamp: str
    solutions: list[str] = field(default_factory=list)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ErrorRecoveryAdvisor:
    """Records step failures on a DeploymentRecord and suggests remediation."""

    def __init__(self, store: StateStore):
        """
        Initialize the advisor.

        Args:
            store: Store every recorded change is persisted through
        """
        self.store = store

    def record_error(
        self,
        record: DeploymentRecord,
        step: DeploymentStep | str,
        error: BaseException | str,
    ) -> ErrorEntry:
        """
        Record the failure of a step, replacing any earlier failure of it.

        Args:
            record: Record to update
            step: Step that failed
            error: The exception raised by the external action, or a message

        Returns:
            The stored entry
        """
        step = DeploymentStep.parse(step)

        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            stack = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        else:
            message = str(error)
            stack = None

        entry = ErrorEntry(message=message, timestamp=_utc_timestamp(), stack=stack)
        record.errors[step.value] = entry
        self.store.save(record)

        logger.warning(f"Recorded error for {step.value}: {message}")
        return entry

    def clear_error(self, record: DeploymentRecord, step: DeploymentStep | str) -> bool:
        """
        Forget the recorded failure of a step.

        Returns:
            True if an entry was removed (and the record saved), False if
            there was nothing to clear
        """
        key = step.value if isinstance(step, DeploymentStep) else str(step)
        if key not in record.errors:
            return False

        del record.errors[key]
        self.store.save(record)
        logger.debug(f"Cleared error for {key}")
        return True

    def has_errors(self, record: DeploymentRecord) -> bool:
        return bool(record.errors)

    def get_recovery_suggestions(self, record: DeploymentRecord) -> list[RecoverySuggestion]:
        """
        Build recovery advice for every recorded failure.

        Failures of steps without a catalogue entry are left out. Suggestions
        follow step execution order.
        """
        suggestions = []
        for step in DeploymentStep.get_order():
            entry = record.errors.get(step.value)
            advice = RECOVERY_CATALOGUE.get(step)
            if entry is None or advice is None:
                continue
            suggestions.append(
                RecoverySuggestion(
                    step=step,
                    display_name=advice.display_name,
                    description=advice.description,
                    message=entry.message,
                    timestamp=entry.timestamp,
                    solutions=list(advice.solutions),
                )
            )
        return suggestions
