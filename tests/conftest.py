"""Pytest configuration and fixtures for DataDAO wizard tests."""

import json
import pytest
from pathlib import Path

from datadao_wizard.state import DeploymentRecord, StateStore, StepStateMachine
from datadao_wizard.state.recovery import ErrorRecoveryAdvisor


@pytest.fixture
def sample_document():
    """A freshly generated deployment.json document (no steps run)."""
    return {
        "dlpName": "WeatherDAO",
        "tokenName": "WeatherToken",
        "tokenSymbol": "WTH",
        "privateKey": "0x" + "f" * 64,
        "address": "0x" + "1" * 40,
        "publicKey": "0x04" + "e" * 128,
        "pinataApiKey": "pinata-key",
        "pinataApiSecret": "pinata-secret",
        "googleClientId": "client-id.apps.googleusercontent.com",
        "googleClientSecret": "google-secret",
        "githubUsername": "octocat",
        "network": "moksha",
        "rpcUrl": "https://rpc.moksha.vana.org",
        "chainId": 14800,
        "state": {
            "contractsDeployed": False,
            "dataDAORegistered": False,
            "proofConfigured": False,
            "proofPublished": False,
            "refinerConfigured": False,
            "refinerPublished": False,
            "uiConfigured": False,
        },
        "errors": {},
        "schemaVersion": "1.0.0",
    }


@pytest.fixture
def sample_record(sample_document):
    """DeploymentRecord built from sample_document."""
    return DeploymentRecord.from_dict(sample_document)


@pytest.fixture
def project_dir(tmp_path, sample_document):
    """Project directory containing sample_document as deployment.json."""
    project = tmp_path / "my-dao"
    project.mkdir()
    with open(project / "deployment.json", "w", encoding="utf-8") as f:
        json.dump(sample_document, f, indent=2)
    return project


@pytest.fixture
def store(project_dir):
    """StateStore over project_dir."""
    return StateStore(project_dir)


@pytest.fixture
def machine(store):
    """StepStateMachine over store."""
    return StepStateMachine(store)


@pytest.fixture
def advisor(store):
    """ErrorRecoveryAdvisor over store."""
    return ErrorRecoveryAdvisor(store)