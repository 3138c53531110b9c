"""
Step outcome models.

Each deployment step reports its result through one model listing exactly the
fields that step may produce. Payloads are validated when completion is
reported, so a typo'd key or a malformed address fails at the step that
produced it instead of surfacing later in a generated script.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .record import DeploymentRecord, DeploymentStep

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"


class StepOutcome(BaseModel):
    """Base class for step outcomes. Subclasses set ``step``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    step: ClassVar[DeploymentStep]

    def apply(self, record: DeploymentRecord) -> None:
        """Copy the reported fields onto the record. Unset fields are left alone."""
        record.update_fields(self.model_dump(by_alias=True, exclude_none=True))


class ContractsDeployed(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.CONTRACTS_DEPLOYED

    token_address: str = Field(alias="tokenAddress", pattern=ADDRESS_PATTERN)
    proxy_address: str = Field(alias="proxyAddress", pattern=ADDRESS_PATTERN)
    vesting_address: Optional[str] = Field(default=None, alias="vestingAddress", pattern=ADDRESS_PATTERN)
    dlp_address: Optional[str] = Field(default=None, alias="dlpAddress", pattern=ADDRESS_PATTERN)


class DataDAORegistered(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.DATADAO_REGISTERED

    dlp_id: int = Field(alias="dlpId", ge=0)


class ProofConfigured(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.PROOF_CONFIGURED

    proof_repo: Optional[str] = Field(default=None, alias="proofRepo", min_length=1)


class ProofPublished(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.PROOF_PUBLISHED

    proof_url: str = Field(alias="proofUrl", min_length=1)


class RefinerConfigured(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.REFINER_CONFIGURED

    refiner_repo: Optional[str] = Field(default=None, alias="refinerRepo", min_length=1)


class RefinerPublished(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.REFINER_PUBLISHED

    refiner_url: str = Field(alias="refinerUrl", min_length=1)
    schema_url: Optional[str] = Field(default=None, alias="schemaUrl", min_length=1)
    refiner_id: Optional[int] = Field(default=None, alias="refinerId", ge=0)


class UIConfigured(StepOutcome):
    step: ClassVar[DeploymentStep] = DeploymentStep.UI_CONFIGURED


OUTCOME_TYPES: dict[DeploymentStep, type[StepOutcome]] = {
    outcome.step: outcome
    for outcome in (
        ContractsDeployed,
        DataDAORegistered,
        ProofConfigured,
        ProofPublished,
        RefinerConfigured,
        RefinerPublished,
        UIConfigured,
    )
}


def outcome_for(
    step: DeploymentStep | str,
    resource_updates: StepOutcome | Mapping[str, Any] | None = None,
) -> StepOutcome:
    """
    Build and validate the outcome of ``step``.

    Args:
        step: Step being completed
        resource_updates: An outcome instance, or a mapping of deployment.json
            keys (``{"dlpId": 7}``) to validate against the step's model

    Raises:
        ValueError: an outcome instance of another step was passed
        pydantic.ValidationError: the mapping does not fit the step's model
    """
    step = DeploymentStep.parse(step)
    outcome_type = OUTCOME_TYPES[step]

    if isinstance(resource_updates, StepOutcome):
        if not isinstance(resource_updates, outcome_type):
            raise ValueError(
                f"{type(resource_updates).__name__} cannot complete step {step.value}"
            )
        return resource_updates

    return outcome_type.model_validate(dict(resource_updates or {}))
