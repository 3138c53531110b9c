"""
Schema normalization for deployment.json.

Unversioned documents come from the first project generator, which kept no
step-state map; progress was implied by which resource fields were filled
in. Any document lacking the map, whatever its version, gets one rebuilt
from those fields. Documents from a newer wizard are refused rather than
rewritten, so an older wizard never downgrades them.
"""

import logging
from typing import Any, Dict

from .record import ContractAddresses, DeploymentStep

logger = logging.getLogger(__name__)


class UnsupportedVersionError(ValueError):
    """Raised for a schemaVersion this wizard cannot read."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"unsupported schemaVersion {version!r} "
            f"(this wizard reads up to {RecordMigration.CURRENT_VERSION})"
        )


class RecordMigration:
    """
    Brings deployment.json documents to the current schema.

    Attributes:
        CURRENT_VERSION: Schema version written by this wizard.
        LEGACY_VERSION: Version reported for documents without schemaVersion.
    """

    CURRENT_VERSION: str = "1.0.0"
    LEGACY_VERSION: str = "0"

    @classmethod
    def get_version(cls, data: Dict[str, Any]) -> str:
        """Get the schema version, "0" for unversioned documents."""
        return str(data.get("schemaVersion", cls.LEGACY_VERSION))

    @classmethod
    def is_supported(cls, data: Dict[str, Any]) -> bool:
        return cls.get_version(data) in (cls.LEGACY_VERSION, cls.CURRENT_VERSION)

    @classmethod
    def needs_migration(cls, data: Dict[str, Any]) -> bool:
        """
        Check if a document has to be rewritten before use.

        True for unversioned documents and for any document whose step-state
        map is missing or incomplete.
        """
        if cls.get_version(data) != cls.CURRENT_VERSION:
            return True
        state = data.get("state")
        if not isinstance(state, dict):
            return True
        return any(key not in state for key in DeploymentStep.keys())

    @classmethod
    def migrate(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Normalize a document to the current schema.

        Args:
            data: Deployment document. Not modified.

        Returns:
            A new document at CURRENT_VERSION with a complete step-state map.

        Raises:
            UnsupportedVersionError: the document was written by a newer wizard
        """
        version = cls.get_version(data)
        if not cls.is_supported(data):
            raise UnsupportedVersionError(version)

        migrated = data.copy()
        migrated["state"] = cls._step_state(migrated)
        if not isinstance(migrated.get("errors"), dict):
            migrated["errors"] = {}
        migrated["schemaVersion"] = cls.CURRENT_VERSION

        logger.info(f"Migrated deployment record from version {version} to {cls.CURRENT_VERSION}")
        return migrated

    @staticmethod
    def _step_state(data: Dict[str, Any]) -> Dict[str, bool]:
        """Complete an existing state map, or rebuild one from the resource fields."""
        state = data.get("state")
        if isinstance(state, dict):
            state = dict(state)
            for key in DeploymentStep.keys():
                state.setdefault(key, False)
            return state

        contracts = ContractAddresses.from_document(data)
        state = {key: False for key in DeploymentStep.keys()}
        state[DeploymentStep.CONTRACTS_DEPLOYED.value] = contracts.has_core()
        state[DeploymentStep.DATADAO_REGISTERED.value] = data.get("dlpId") is not None
        logger.info("Synthesized step state from existing deployment fields")
        return state
