"""
DataDAO Wizard - deployment state for generated DataDAO projects

A generated DataDAO project deploys in several independent steps (contracts,
on-chain registration, proof of contribution, data refiner, UI), each run as
its own process. The wizard keeps the shared state those steps need in
deployment.json and provides:

    - StateStore: Load/save deployment.json with a one-generation backup
    - StepStateMachine: Step completion, resume point and preconditions
    - ConfigurationValidator: Non-fatal configuration checks
    - ErrorRecoveryAdvisor: Per-step error log and recovery advice
    - TemplateEngine: {{ placeholder }} substitution for generated files

Example usage:
    from datadao_wizard import StateStore, StepStateMachine

    store = StateStore(project_root)
    record = store.load()

    machine = StepStateMachine(store)
    machine.check_preconditions(record, "dataDAORegistered")
    machine.mark_completed(record, "dataDAORegistered", {"dlpId": 42})
"""

__version__ = "0.3.0"

from .settings import NetworkConfig, SettingsStorage, WizardSettings
from .state import (
    DeploymentRecord,
    DeploymentStateError,
    DeploymentStep,
    ErrorRecoveryAdvisor,
    MissingFieldsError,
    NotFoundError,
    ParseError,
    StateStore,
    StepNotReadyError,
    StepStateMachine,
)
from .templates import TemplateEngine, bindings_from_record
from .validation import ConfigurationValidator

__all__ = [
    "__version__",
    # State
    "DeploymentRecord",
    "DeploymentStep",
    "StateStore",
    "StepStateMachine",
    "ErrorRecoveryAdvisor",
    # Errors
    "DeploymentStateError",
    "NotFoundError",
    "ParseError",
    "MissingFieldsError",
    "StepNotReadyError",
    # Validation
    "ConfigurationValidator",
    # Templates
    "TemplateEngine",
    "bindings_from_record",
    # Settings
    "NetworkConfig",
    "WizardSettings",
    "SettingsStorage",
]
