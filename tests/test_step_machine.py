"""Tests for the deployment step state machine and step outcomes."""

import pytest
from pydantic import ValidationError

from datadao_wizard.state import (
    ContractsDeployed,
    DataDAORegistered,
    DeploymentStep,
    ErrorEntry,
    MissingFieldsError,
    StepNotReadyError,
    outcome_for,
)
from datadao_wizard.state.step_machine import STEP_DEFINITIONS

TOKEN = "0x" + "a" * 40
PROXY = "0x" + "b" * 40


class TestDeploymentStep:
    """Tests for the DeploymentStep enum."""

    def test_order(self):
        """Test the execution order of the seven steps."""
        assert DeploymentStep.keys() == [
            "contractsDeployed",
            "dataDAORegistered",
            "proofConfigured",
            "proofPublished",
            "refinerConfigured",
            "refinerPublished",
            "uiConfigured",
        ]

    def test_parse(self):
        """Test parsing step keys."""
        assert DeploymentStep.parse("proofPublished") is DeploymentStep.PROOF_PUBLISHED
        assert DeploymentStep.parse(DeploymentStep.UI_CONFIGURED) is DeploymentStep.UI_CONFIGURED

    def test_parse_unknown(self):
        """Test that unknown keys are rejected with the valid ones listed."""
        with pytest.raises(ValueError) as exc_info:
            DeploymentStep.parse("deployEverything")

        assert "contractsDeployed" in str(exc_info.value)

    def test_every_step_defined(self):
        """Test that every step has a definition."""
        assert set(STEP_DEFINITIONS) == set(DeploymentStep)


class TestStepCompletion:
    """Tests for completion tracking."""

    def test_next_incomplete_step(self, machine, sample_record):
        """Test the resume point on a fresh record and after the first step."""
        assert machine.get_next_incomplete_step(sample_record) == DeploymentStep.CONTRACTS_DEPLOYED

        machine.mark_completed(
            sample_record,
            DeploymentStep.CONTRACTS_DEPLOYED,
            {"tokenAddress": TOKEN, "proxyAddress": PROXY},
        )

        assert machine.get_next_incomplete_step(sample_record) == DeploymentStep.DATADAO_REGISTERED

    def test_all_complete(self, machine, sample_record):
        """Test that a fully deployed record has no next step."""
        for key in DeploymentStep.keys():
            sample_record.state[key] = True

        assert machine.get_next_incomplete_step(sample_record) is None
        action = machine.next_action(sample_record)
        assert action.step is None
        assert action.command == "cd ui && npm run dev"

    def test_mark_completed_persists(self, machine, store, sample_record):
        """Test that the flag and the resources are saved together."""
        machine.mark_completed(sample_record, "dataDAORegistered", {"dlpId": 42})

        loaded = store.load()
        assert loaded.state["dataDAORegistered"] is True
        assert loaded.dlp_id == 42

    def test_mark_completed_idempotent(self, machine, store, sample_record):
        """Test that completing a step twice with the same outcome changes nothing."""
        updates = {"tokenAddress": TOKEN, "proxyAddress": PROXY}
        machine.mark_completed(sample_record, "contractsDeployed", updates)
        after_first = sample_record.to_dict()
        file_after_first = store.path.read_text()

        machine.mark_completed(sample_record, "contractsDeployed", updates)

        assert sample_record.to_dict() == after_first
        assert store.path.read_text() == file_after_first

    def test_mark_completed_clears_error_in_one_save(self, machine, store, sample_record):
        """Test that completing a failed step drops its error and keeps the prior state as backup."""
        sample_record.errors["contractsDeployed"] = ErrorEntry(
            message="out of gas", timestamp="2026-01-01T00:00:00Z"
        )
        store.save(sample_record)
        before = store.path.read_text()

        machine.mark_completed(
            sample_record, "contractsDeployed", {"tokenAddress": TOKEN, "proxyAddress": PROXY}
        )

        assert sample_record.errors == {}
        assert store.load().errors == {}
        assert store.backup_path.read_text() == before

    def test_mark_completed_with_model(self, machine, sample_record):
        """Test completing a step with an outcome instance."""
        outcome = ContractsDeployed(tokenAddress=TOKEN, proxyAddress=PROXY)
        machine.mark_completed(sample_record, DeploymentStep.CONTRACTS_DEPLOYED, outcome)

        assert sample_record.contracts.token_address == TOKEN
        assert sample_record.contracts.proxy_address == PROXY

    def test_is_completed_unknown_key(self, machine, sample_record):
        """Test that unknown step keys are never complete."""
        assert machine.is_completed(sample_record, "somethingElse") is False

    def test_progress(self, machine, sample_record):
        """Test the progress listing."""
        sample_record.state["contractsDeployed"] = True
        rows = machine.progress(sample_record)

        assert len(rows) == 7
        assert rows[0].display_name == "Smart Contracts Deployed"
        assert rows[0].completed is True
        assert rows[1].completed is False

    def test_next_action_groups_proof_steps(self, machine, sample_record):
        """Test that proof configuration and publishing share one command."""
        sample_record.state["contractsDeployed"] = True
        sample_record.state["dataDAORegistered"] = True
        sample_record.state["proofConfigured"] = True

        action = machine.next_action(sample_record)

        assert action.step == DeploymentStep.PROOF_PUBLISHED
        assert action.command == "npm run deploy:proof"


class TestStepOutcomes:
    """Tests for validation of reported step outcomes."""

    def test_invalid_address_rejected(self, machine, store, sample_record):
        """Test that a malformed address fails before anything changes."""
        with pytest.raises(ValidationError):
            machine.mark_completed(
                sample_record,
                "contractsDeployed",
                {"tokenAddress": "0x123", "proxyAddress": PROXY},
            )

        assert sample_record.state["contractsDeployed"] is False
        assert store.load().state["contractsDeployed"] is False

    def test_field_of_other_step_rejected(self):
        """Test that a step cannot report another step's resources."""
        with pytest.raises(ValidationError):
            outcome_for("dataDAORegistered", {"dlpId": 1, "proofUrl": "https://x"})

    def test_missing_required_outcome_field(self):
        """Test that required outcome fields are enforced."""
        with pytest.raises(ValidationError):
            outcome_for("proofPublished", {})

    def test_dlp_id_coerced(self):
        """Test that numeric strings are accepted for integer ids."""
        outcome = outcome_for("dataDAORegistered", {"dlpId": "7"})

        assert outcome.dlp_id == 7

    def test_wrong_outcome_type(self):
        """Test that an outcome of another step is rejected."""
        with pytest.raises(ValueError):
            outcome_for("contractsDeployed", DataDAORegistered(dlpId=1))

    def test_step_without_resources(self):
        """Test that the UI step takes no resources."""
        assert outcome_for("uiConfigured").model_dump() == {}


class TestPreconditions:
    """Tests for precondition and required-field checks."""

    def test_all_missing_fields_reported(self, machine, sample_record):
        """Test that every missing field is listed, in the order given."""
        sample_record.dlp_name = None
        sample_record.token_symbol = ""

        with pytest.raises(MissingFieldsError) as exc_info:
            machine.validate_required_fields(
                sample_record, ["dlpName", "tokenName", "tokenSymbol", "dlpId"]
            )

        assert exc_info.value.missing == ["dlpName", "tokenSymbol", "dlpId"]
        assert str(exc_info.value) == "Missing required fields: dlpName, tokenSymbol, dlpId"

    def test_zero_counts_as_missing(self, machine, sample_record):
        """Test that falsy values count as missing."""
        sample_record.dlp_id = 0

        with pytest.raises(MissingFieldsError) as exc_info:
            machine.validate_required_fields(sample_record, ["dlpId"])

        assert exc_info.value.missing == ["dlpId"]

    def test_contract_fields_resolved(self, machine, sample_record):
        """Test that contract addresses are found wherever they were stored."""
        sample_record.contracts.proxy_address = PROXY

        machine.validate_required_fields(sample_record, ["proxyAddress", "address"])

    def test_dependency_not_complete(self, machine, sample_record):
        """Test that a step cannot start before its dependencies."""
        with pytest.raises(StepNotReadyError) as exc_info:
            machine.check_preconditions(sample_record, "dataDAORegistered")

        assert exc_info.value.pending == ["contractsDeployed"]
        assert not machine.can_start(sample_record, "dataDAORegistered")

    def test_first_step_ready(self, machine, sample_record):
        """Test that the first step can start on a generated record."""
        machine.check_preconditions(sample_record, "contractsDeployed")

    def test_ui_requires_proof_url_and_refiner_id(self, machine, sample_record):
        """Test the UI step's required fields."""
        for key in DeploymentStep.keys()[:-1]:
            sample_record.state[key] = True

        with pytest.raises(MissingFieldsError) as exc_info:
            machine.check_preconditions(sample_record, "uiConfigured")

        assert exc_info.value.missing == ["proofUrl", "refinerId"]


class TestReset:
    """Tests for resetting deployment progress."""

    def test_reset_keeps_identity(self, machine, store, sample_record):
        """Test that reset clears progress and resources but keeps identity."""
        machine.mark_completed(
            sample_record, "contractsDeployed", {"tokenAddress": TOKEN, "proxyAddress": PROXY}
        )
        machine.mark_completed(sample_record, "dataDAORegistered", {"dlpId": 9})

        machine.reset(sample_record)
        loaded = store.load()

        assert not any(loaded.state.values())
        assert loaded.dlp_id is None
        assert not loaded.contracts.has_any()
        assert loaded.dlp_name == "WeatherDAO"
        assert loaded.private_key == sample_record.private_key
        assert loaded.rpc_url == "https://rpc.moksha.vana.org"
