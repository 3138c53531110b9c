"""
Deployment record data model.

One DeploymentRecord describes one generated project: who owns it, what the
wallet is, which resources the deployment steps have produced so far, which
steps are done and which last failed.

deployment.json has carried contract addresses in two shapes over time:

    legacy:  {"tokenAddress": ..., "proxyAddress": ..., "dlpAddress": ...}
    current: {"contracts": {"tokenAddress": ..., "proxyAddress": ..., "vestingAddress": ...}}

from_dict() folds both into a single ContractAddresses value and to_dict()
writes both back out, so nothing past the (de)serialization boundary has to
know about the legacy field names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DeploymentStep(str, Enum):
    """
    Deployment steps, keyed by their stable identifiers.

    The values are used both as StepState keys and as ErrorLog keys in
    deployment.json, so they must never change.
    """
    CONTRACTS_DEPLOYED = "contractsDeployed"
    DATADAO_REGISTERED = "dataDAORegistered"
    PROOF_CONFIGURED = "proofConfigured"
    PROOF_PUBLISHED = "proofPublished"
    REFINER_CONFIGURED = "refinerConfigured"
    REFINER_PUBLISHED = "refinerPublished"
    UI_CONFIGURED = "uiConfigured"

    @classmethod
    def get_order(cls) -> list["DeploymentStep"]:
        """Get steps in execution order."""
        return [
            cls.CONTRACTS_DEPLOYED,
            cls.DATADAO_REGISTERED,
            cls.PROOF_CONFIGURED,
            cls.PROOF_PUBLISHED,
            cls.REFINER_CONFIGURED,
            cls.REFINER_PUBLISHED,
            cls.UI_CONFIGURED,
        ]

    @classmethod
    def keys(cls) -> list[str]:
        """Get the stable step keys in execution order."""
        return [step.value for step in cls.get_order()]

    @classmethod
    def parse(cls, value: "DeploymentStep | str") -> "DeploymentStep":
        """Convert a step key to a DeploymentStep (accepts members unchanged)."""
        if isinstance(value, DeploymentStep):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown step '{value}'. Valid steps: {', '.join(cls.keys())}"
            ) from None


# deployment.json key -> DeploymentRecord attribute
IDENTITY_FIELDS = {
    "dlpName": "dlp_name",
    "tokenName": "token_name",
    "tokenSymbol": "token_symbol",
}

CREDENTIAL_FIELDS = {
    "privateKey": "private_key",
    "address": "address",
    "publicKey": "public_key",
    "pinataApiKey": "pinata_api_key",
    "pinataApiSecret": "pinata_api_secret",
    "googleClientId": "google_client_id",
    "googleClientSecret": "google_client_secret",
    "githubUsername": "github_username",
}

NETWORK_FIELDS = {
    "network": "network",
    "rpcUrl": "rpc_url",
    "chainId": "chain_id",
}

RESOURCE_FIELDS = {
    "dlpId": "dlp_id",
    "refinerId": "refiner_id",
    "proofRepo": "proof_repo",
    "refinerRepo": "refiner_repo",
    "proofUrl": "proof_url",
    "schemaUrl": "schema_url",
    "refinerUrl": "refiner_url",
}

CONTRACT_FIELDS = {
    "tokenAddress": "token_address",
    "proxyAddress": "proxy_address",
    "vestingAddress": "vesting_address",
    "dlpAddress": "dlp_address",
}

LEGACY_CONTRACT_KEYS = ("tokenAddress", "proxyAddress", "dlpAddress")
NESTED_CONTRACT_KEYS = ("tokenAddress", "proxyAddress", "vestingAddress")

SCALAR_FIELDS = {**IDENTITY_FIELDS, **CREDENTIAL_FIELDS, **NETWORK_FIELDS, **RESOURCE_FIELDS}

_RESERVED_KEYS = set(SCALAR_FIELDS) | set(CONTRACT_FIELDS) | {
    "contracts",
    "state",
    "errors",
    "schemaVersion",
}


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


@dataclass
class ContractAddresses:
    """
    Addresses of the deployed contracts, whichever shape they came from.

    Keys of the nested ``contracts`` object this model does not know about
    are kept in ``extra`` and written back unchanged.
    """
    token_address: str | None = None
    proxy_address: str | None = None
    vesting_address: str | None = None
    dlp_address: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def has_any(self) -> bool:
        """True if at least one contract address is known."""
        return any(getattr(self, attr) for attr in CONTRACT_FIELDS.values())

    def has_core(self) -> bool:
        """True if the token and the DLP contract (proxy or legacy dlpAddress) are known."""
        return bool(self.token_address) and bool(self.proxy_address or self.dlp_address)

    def clear(self) -> None:
        for attr in CONTRACT_FIELDS.values():
            setattr(self, attr, None)
        self.extra.clear()

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "ContractAddresses":
        """Merge nested and flat address fields. Nested values win, flat ones fill gaps."""
        nested = data.get("contracts")
        if not isinstance(nested, dict):
            nested = {}
        return cls(
            **{
                attr: _first_present(nested.get(key), data.get(key))
                for key, attr in CONTRACT_FIELDS.items()
            },
            extra={k: v for k, v in nested.items() if k not in CONTRACT_FIELDS},
        )


@dataclass
class ErrorEntry:
    """
    The most recent failure of one step.

    Attributes:
        message: Error message reported by the failing action
        timestamp: ISO-8601 time the error was recorded
        stack: Formatted traceback, if one was available
    """
    message: str
    timestamp: str
    stack: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message": self.message,
            "timestamp": self.timestamp,
            "stack": self.stack,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorEntry":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            message=str(data.get("message", "")),
            timestamp=str(data.get("timestamp", "")),
            stack=data.get("stack"),
        )


def default_step_state() -> dict[str, bool]:
    """A StepState map with every step incomplete."""
    return {key: False for key in DeploymentStep.keys()}


@dataclass
class DeploymentRecord:
    """
    In-memory form of deployment.json.

    Attribute names are snake_case; the document keys are camelCase. Use
    lookup() to read a field by its document key. Keys this model does not
    know about are kept in ``extra`` and written back unchanged.
    """

    # Identity
    dlp_name: str | None = None
    token_name: str | None = None
    token_symbol: str | None = None

    # Credentials (sensitive)
    private_key: str | None = None
    address: str | None = None
    public_key: str | None = None
    pinata_api_key: str | None = None
    pinata_api_secret: str | None = None
    google_client_id: str | None = None
    google_client_secret: str | None = None
    github_username: str | None = None

    # Network
    network: str | None = None
    rpc_url: str | None = None
    chain_id: int | None = None

    # Resources produced by deployment steps
    contracts: ContractAddresses = field(default_factory=ContractAddresses)
    dlp_id: int | None = None
    refiner_id: int | None = None
    proof_repo: str | None = None
    refiner_repo: str | None = None
    proof_url: str | None = None
    schema_url: str | None = None
    refiner_url: str | None = None

    state: dict[str, bool] = field(default_factory=default_step_state)
    errors: dict[str, ErrorEntry] = field(default_factory=dict)
    schema_version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def lookup(self, name: str) -> Any:
        """
        Read a field by its deployment.json key.

        Contract address keys resolve against the merged ContractAddresses,
        so ``tokenAddress`` is found whichever shape it was stored in.
        """
        if name in SCALAR_FIELDS:
            return getattr(self, SCALAR_FIELDS[name])
        if name in CONTRACT_FIELDS:
            return getattr(self.contracts, CONTRACT_FIELDS[name])
        return self.extra.get(name)

    def update_fields(self, updates: dict[str, Any]) -> None:
        """Set fields by their deployment.json keys. Unknown keys go to ``extra``."""
        for name, value in updates.items():
            if name in SCALAR_FIELDS:
                setattr(self, SCALAR_FIELDS[name], value)
            elif name in CONTRACT_FIELDS:
                setattr(self.contracts, CONTRACT_FIELDS[name], value)
            elif name in _RESERVED_KEYS:
                raise ValueError(f"'{name}' cannot be set as a plain field")
            else:
                self.extra[name] = value

    def clear_resources(self) -> None:
        """Drop every resource acquired by deployment steps."""
        self.contracts.clear()
        for attr in RESOURCE_FIELDS.values():
            setattr(self, attr, None)

    def flat_fields(self) -> dict[str, Any]:
        """
        Flat key -> value view of every set field.

        Includes all four contract addresses at top level. Used to build
        template bindings.
        """
        flat: dict[str, Any] = {}
        for key, attr in SCALAR_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                flat[key] = value
        for key, attr in CONTRACT_FIELDS.items():
            value = getattr(self.contracts, attr)
            if value is not None:
                flat[key] = value
        for key, value in self.extra.items():
            if isinstance(value, (str, int, float, bool)):
                flat.setdefault(key, value)
        return flat

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the deployment.json document.

        Contract addresses are written in the nested ``contracts`` object and
        mirrored to the legacy flat keys.
        """
        result: dict[str, Any] = {}

        for mapping in (IDENTITY_FIELDS, CREDENTIAL_FIELDS, NETWORK_FIELDS):
            for key, attr in mapping.items():
                value = getattr(self, attr)
                if value is not None:
                    result[key] = value

        for key in LEGACY_CONTRACT_KEYS:
            value = getattr(self.contracts, CONTRACT_FIELDS[key])
            if value is not None:
                result[key] = value

        nested = {
            key: getattr(self.contracts, CONTRACT_FIELDS[key])
            for key in NESTED_CONTRACT_KEYS
            if getattr(self.contracts, CONTRACT_FIELDS[key]) is not None
        }
        for key, value in self.contracts.extra.items():
            nested.setdefault(key, value)
        if nested:
            result["contracts"] = nested

        for key, attr in RESOURCE_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value

        result["state"] = dict(self.state)
        result["errors"] = {step: entry.to_dict() for step, entry in self.errors.items()}
        if self.schema_version is not None:
            result["schemaVersion"] = self.schema_version

        for key, value in self.extra.items():
            result.setdefault(key, value)

        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploymentRecord":
        """Create from a (migrated) deployment.json document."""
        kwargs: dict[str, Any] = {
            attr: data.get(key) for key, attr in SCALAR_FIELDS.items()
        }

        state = data.get("state")
        errors = data.get("errors")
        if not isinstance(errors, dict):
            errors = {}

        return cls(
            **kwargs,
            contracts=ContractAddresses.from_document(data),
            state=dict(state) if isinstance(state, dict) else default_step_state(),
            errors={
                step: ErrorEntry.from_dict(entry)
                for step, entry in errors.items()
                if isinstance(entry, dict)
            },
            schema_version=data.get("schemaVersion"),
            extra={k: v for k, v in data.items() if k not in _RESERVED_KEYS},
        )
