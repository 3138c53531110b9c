"""
DataDAO Wizard State Module

Contains the persistent deployment state:
- DeploymentRecord: In-memory form of deployment.json
- StateStore: Load/save with one-generation backup and schema migration
- RecordMigration: Schema normalization of deployment.json
- StepStateMachine: Step completion, resume point and precondition checks
- Step outcomes: Validated per-step resource payloads
- ErrorRecoveryAdvisor: Per-step error log and recovery suggestions
"""

from .errors import (
    DeploymentStateError,
    MissingFieldsError,
    NotFoundError,
    ParseError,
    StepNotReadyError,
)
from .migration import RecordMigration, UnsupportedVersionError
from .outcomes import (
    ContractsDeployed,
    DataDAORegistered,
    ProofConfigured,
    ProofPublished,
    RefinerConfigured,
    RefinerPublished,
    StepOutcome,
    UIConfigured,
    outcome_for,
)
from .record import ContractAddresses, DeploymentRecord, DeploymentStep, ErrorEntry
from .recovery import ErrorRecoveryAdvisor, RecoverySuggestion
from .state_store import StateStore
from .step_machine import NextAction, StepDefinition, StepProgress, StepStateMachine

__all__ = [
    # Errors
    "DeploymentStateError",
    "NotFoundError",
    "ParseError",
    "MissingFieldsError",
    "StepNotReadyError",
    "UnsupportedVersionError",
    # Record
    "DeploymentRecord",
    "DeploymentStep",
    "ContractAddresses",
    "ErrorEntry",
    # Persistence
    "StateStore",
    "RecordMigration",
    # Steps
    "StepStateMachine",
    "StepDefinition",
    "StepProgress",
    "NextAction",
    "StepOutcome",
    "ContractsDeployed",
    "DataDAORegistered",
    "ProofConfigured",
    "ProofPublished",
    "RefinerConfigured",
    "RefinerPublished",
    "UIConfigured",
    "outcome_for",
    # Recovery
    "ErrorRecoveryAdvisor",
    "RecoverySuggestion",
]
