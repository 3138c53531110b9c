#!/usr/bin/env python3
"""
Deployment Step State Machine for the DataDAO wizard

Tracks the seven provisioning steps of a generated project:

    contractsDeployed -> dataDAORegistered -> proofConfigured -> proofPublished   -> uiConfigured
                                           -> refinerConfigured -> refinerPublished ->

The proof and refiner tracks are siblings: both wait for registration and
neither waits for the other. The UI step waits for both.

Every operation takes the DeploymentRecord it works on and returns it; the
only state the machine holds is the store it persists through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from .errors import MissingFieldsError, StepNotReadyError
from .outcomes import StepOutcome, outcome_for
from .record import DeploymentRecord, DeploymentStep, default_step_state

if TYPE_CHECKING:
    from .state_store import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepDefinition:
    """
    Static description of one deployment step.

    Attributes:
        step: The step
        display_name: Label shown in progress listings
        command: Command that runs the step inside the generated project
        depends_on: Steps that must be complete first
        required_fields: deployment.json keys that must be set before starting
    """
    step: DeploymentStep
    display_name: str
    command: str
    depends_on: tuple[DeploymentStep, ...] = ()
    required_fields: tuple[str, ...] = field(default_factory=tuple)


STEP_DEFINITIONS: dict[DeploymentStep, StepDefinition] = {
    DeploymentStep.CONTRACTS_DEPLOYED: StepDefinition(
        step=DeploymentStep.CONTRACTS_DEPLOYED,
        display_name="Smart Contracts Deployed",
        command="npm run deploy:contracts",
        required_fields=("dlpName", "tokenName", "tokenSymbol", "privateKey", "address"),
    ),
    DeploymentStep.DATADAO_REGISTERED: StepDefinition(
        step=DeploymentStep.DATADAO_REGISTERED,
        display_name="DataDAO Registered",
        command="npm run register:datadao",
        depends_on=(DeploymentStep.CONTRACTS_DEPLOYED,),
        required_fields=("proxyAddress", "address", "dlpName"),
    ),
    DeploymentStep.PROOF_CONFIGURED: StepDefinition(
        step=DeploymentStep.PROOF_CONFIGURED,
        display_name="Proof of Contribution Configured",
        command="npm run deploy:proof",
        depends_on=(DeploymentStep.DATADAO_REGISTERED,),
        required_fields=("dlpId", "githubUsername"),
    ),
    DeploymentStep.PROOF_PUBLISHED: StepDefinition(
        step=DeploymentStep.PROOF_PUBLISHED,
        display_name="Proof of Contribution Published",
        command="npm run deploy:proof",
        depends_on=(DeploymentStep.PROOF_CONFIGURED,),
        required_fields=("dlpId", "proofRepo"),
    ),
    DeploymentStep.REFINER_CONFIGURED: StepDefinition(
        step=DeploymentStep.REFINER_CONFIGURED,
        display_name="Data Refiner Configured",
        command="npm run deploy:refiner",
        depends_on=(DeploymentStep.DATADAO_REGISTERED,),
        required_fields=("dlpId", "githubUsername", "pinataApiKey", "pinataApiSecret"),
    ),
    DeploymentStep.REFINER_PUBLISHED: StepDefinition(
        step=DeploymentStep.REFINER_PUBLISHED,
        display_name="Data Refiner Published",
        command="npm run deploy:refiner",
        depends_on=(DeploymentStep.REFINER_CONFIGURED,),
        required_fields=("dlpId", "refinerRepo"),
    ),
    DeploymentStep.UI_CONFIGURED: StepDefinition(
        step=DeploymentStep.UI_CONFIGURED,
        display_name="UI Configured",
        command="npm run deploy:ui",
        depends_on=(DeploymentStep.PROOF_PUBLISHED, DeploymentStep.REFINER_PUBLISHED),
        required_fields=("proofUrl", "refinerId"),
    ),
}


@dataclass(frozen=True)
class NextAction:
    """What the operator should run next. ``step`` is None once everything is done."""
    step: DeploymentStep | None
    description: str
    command: str


@dataclass(frozen=True)
class StepProgress:
    """One row of a progress listing."""
    step: DeploymentStep
    display_name: str
    completed: bool


# Steps that share one command are announced together, as the generated
# project's status script does.
_NEXT_ACTIONS: list[tuple[tuple[DeploymentStep, ...], str, str]] = [
    ((DeploymentStep.CONTRACTS_DEPLOYED,), "Deploy smart contracts", "npm run deploy:contracts"),
    ((DeploymentStep.DATADAO_REGISTERED,), "Register DataDAO on-chain", "npm run register:datadao"),
    (
        (DeploymentStep.PROOF_CONFIGURED, DeploymentStep.PROOF_PUBLISHED),
        "Configure and publish Proof of Contribution",
        "npm run deploy:proof",
    ),
    (
        (DeploymentStep.REFINER_CONFIGURED, DeploymentStep.REFINER_PUBLISHED),
        "Configure and publish Data Refiner",
        "npm run deploy:refiner",
    ),
    ((DeploymentStep.UI_CONFIGURED,), "Configure UI", "npm run deploy:ui"),
]


def _step_key(step: DeploymentStep | str) -> str:
    return step.value if isinstance(step, DeploymentStep) else str(step)


class StepStateMachine:
    """Completion tracking and precondition checks over a DeploymentRecord."""

    def __init__(self, store: StateStore):
        """
        Initialize the state machine.

        Args:
            store: Store every state transition is persisted through
        """
        self.store = store

    @staticmethod
    def definition(step: DeploymentStep | str) -> StepDefinition:
        """Get the static definition of a step."""
        return STEP_DEFINITIONS[DeploymentStep.parse(step)]

    def is_completed(self, record: DeploymentRecord, step: DeploymentStep | str) -> bool:
        """Check whether a step is flagged complete. Unknown keys are never complete."""
        return bool(record.state.get(_step_key(step), False))

    def mark_completed(
        self,
        record: DeploymentRecord,
        step: DeploymentStep | str,
        resource_updates: StepOutcome | Mapping[str, Any] | None = None,
    ) -> DeploymentRecord:
        """
        Flag a step complete and store the resources it produced.

        The updates are validated against the step's outcome model before
        anything changes. The flag, the resources and the removal of any
        recorded error for the step are written in a single save, so the
        backup keeps the state from before completion.

        Args:
            record: Record to update
            step: Step that finished
            resource_updates: Outcome model or deployment.json-keyed mapping

        Returns:
            The updated record
        """
        step = DeploymentStep.parse(step)
        outcome = outcome_for(step, resource_updates)

        outcome.apply(record)
        record.state[step.value] = True
        record.errors.pop(step.value, None)
        self.store.save(record)

        logger.info(f"Step {step.value} marked complete")
        return record

    def get_next_incomplete_step(self, record: DeploymentRecord) -> DeploymentStep | None:
        """
        Get the first incomplete step in execution order.

        Returns:
            The step to resume from, or None if every step is complete
        """
        for step in DeploymentStep.get_order():
            if not self.is_completed(record, step):
                return step
        return None

    def next_action(self, record: DeploymentRecord) -> NextAction:
        """Describe the next command to run."""
        for steps, description, command in _NEXT_ACTIONS:
            for step in steps:
                if not self.is_completed(record, step):
                    return NextAction(step=step, description=description, command=command)
        return NextAction(
            step=None,
            description="Start the UI and test your DataDAO",
            command="cd ui && npm run dev",
        )

    def missing_prerequisites(
        self, record: DeploymentRecord, step: DeploymentStep | str
    ) -> list[DeploymentStep]:
        """Get the direct dependencies of ``step`` that are not complete yet."""
        return [
            dep for dep in self.definition(step).depends_on
            if not self.is_completed(record, dep)
        ]

    def can_start(self, record: DeploymentRecord, step: DeploymentStep | str) -> bool:
        """Check whether every dependency of ``step`` is complete."""
        return not self.missing_prerequisites(record, step)

    def check_preconditions(self, record: DeploymentRecord, step: DeploymentStep | str) -> None:
        """
        Verify a step may start.

        Raises:
            StepNotReadyError: a dependency step is not complete
            MissingFieldsError: a field the step needs is absent
        """
        step = DeploymentStep.parse(step)
        pending = self.missing_prerequisites(record, step)
        if pending:
            raise StepNotReadyError(step.value, [dep.value for dep in pending])

        self.validate_required_fields(record, self.definition(step).required_fields)

    def validate_required_fields(self, record: DeploymentRecord, names: list[str] | tuple[str, ...]) -> None:
        """
        Check that every named field is set.

        Any falsy value (None, "", 0, False) counts as missing.

        Raises:
            MissingFieldsError: listing every missing field, in the order given
        """
        missing = [name for name in names if not record.lookup(name)]
        if missing:
            raise MissingFieldsError(missing)

    def reset(self, record: DeploymentRecord) -> DeploymentRecord:
        """
        Start the deployment over.

        Clears the step flags, every acquired resource and the error log.
        Identity, credentials and network settings are kept.
        """
        record.state = default_step_state()
        record.clear_resources()
        record.errors.clear()
        self.store.save(record)

        logger.info("Deployment state reset")
        return record

    def progress(self, record: DeploymentRecord) -> list[StepProgress]:
        """Get every step with its completion flag, in execution order."""
        return [
            StepProgress(
                step=step,
                display_name=STEP_DEFINITIONS[step].display_name,
                completed=self.is_completed(record, step),
            )
            for step in DeploymentStep.get_order()
        ]
