"""
Configuration validation for deployment records.

Checks a DeploymentRecord for problems an operator can fix:
- Required identity and wallet fields
- Paired external-service credentials
- Step flags that claim work whose results are not recorded
- Address and public key formats

Problems are returned as a list of strings, never raised, so every issue can
be shown in one pass before the operator decides what to fix.
"""

import re
from typing import List

from .state.record import DeploymentRecord, DeploymentStep

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class ConfigurationValidator:
    """
    Configuration validator for deployment records.

    Each check runs on its own; a failing check never hides the result of
    another.
    """

    REQUIRED_FIELDS = ("dlpName", "tokenName", "tokenSymbol", "privateKey", "address")

    # (label, fields that must be set together)
    CREDENTIAL_PAIRS = (
        ("Pinata credentials", ("pinataApiKey", "pinataApiSecret")),
        ("Google OAuth credentials", ("googleClientId", "googleClientSecret")),
    )

    def validate_configuration(self, record: DeploymentRecord) -> List[str]:
        """
        Validate a deployment record.

        Args:
            record: Record to validate.

        Returns:
            Issue messages, empty if the record is consistent.
        """
        issues: List[str] = []
        issues.extend(self._check_required_fields(record))
        issues.extend(self._check_credential_pairs(record))
        issues.extend(self._check_step_consistency(record))
        issues.extend(self._check_formats(record))
        return issues

    def _check_required_fields(self, record: DeploymentRecord) -> List[str]:
        return [
            f"Missing {name}" for name in self.REQUIRED_FIELDS
            if not record.lookup(name)
        ]

    def _check_credential_pairs(self, record: DeploymentRecord) -> List[str]:
        issues = []
        for label, names in self.CREDENTIAL_PAIRS:
            if not all(record.lookup(name) for name in names):
                issues.append(f"Missing {label}")
        return issues

    def _check_step_consistency(self, record: DeploymentRecord) -> List[str]:
        """
        Check that completed steps have their results recorded.

        Contract addresses count whether they were stored in the nested
        ``contracts`` object or in the legacy flat fields.
        """
        issues = []
        state = record.state

        if state.get(DeploymentStep.CONTRACTS_DEPLOYED.value) and not record.contracts.has_any():
            issues.append("Marked as deployed but missing contract addresses")

        if state.get(DeploymentStep.DATADAO_REGISTERED.value) and record.dlp_id is None:
            issues.append("Marked as registered but missing dlpId")

        if state.get(DeploymentStep.PROOF_PUBLISHED.value) and not record.proof_url:
            issues.append("Marked as proof published but missing proofUrl")

        if state.get(DeploymentStep.REFINER_PUBLISHED.value) and not record.refiner_url:
            issues.append("Marked as refiner published but missing refinerUrl")

        return issues

    def _check_formats(self, record: DeploymentRecord) -> List[str]:
        issues = []

        if record.address and not ADDRESS_RE.match(str(record.address)):
            issues.append(
                "Invalid address format. Must be a 0x-prefixed 40-character hex string"
            )

        if record.public_key and not str(record.public_key).startswith("0x"):
            issues.append("Invalid public key format. Must be a 0x-prefixed hex string")

        return issues
