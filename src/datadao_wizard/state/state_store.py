"""
Persistent store for deployment.json.

Each deployment step runs as its own process: load the record, do the
external work, report the outcome, save. The store keeps exactly one backup
generation next to the primary file. Every save first copies the current
primary to the backup and then rewrites the primary in full, so after a crash
mid-write the backup still holds the last state that was written completely.
Restoring from it is left to the caller (see restore_backup).

There is no locking. Invocations against one project are expected to be
serialized by the operator; concurrent writers are last-writer-wins.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from ..settings.models import WizardSettings
from .errors import NotFoundError, ParseError
from .migration import RecordMigration, UnsupportedVersionError
from .record import DeploymentRecord

logger = logging.getLogger(__name__)


class StateStore:
    """Loads and saves the deployment record of one project directory."""

    def __init__(self, project_root: Path, settings: WizardSettings | None = None):
        """
        Initialize the store.

        Args:
            project_root: Directory of the generated project
            settings: Wizard settings (file names). Defaults are used if omitted.
        """
        self.project_root = Path(project_root)
        self.settings = settings or WizardSettings()
        self.path = self.project_root / self.settings.state_file
        self.backup_path = self.project_root / self.settings.backup_file

    def exists(self) -> bool:
        """Check whether the deployment record exists."""
        return self.path.exists()

    def has_backup(self) -> bool:
        """Check whether a backup generation exists."""
        return self.backup_path.exists()

    def load(self) -> DeploymentRecord:
        """
        Load the deployment record.

        Older documents are migrated to the current schema and written back
        immediately, so the migration runs at most once per file.

        Returns:
            The deployment record

        Raises:
            NotFoundError: deployment.json does not exist
            ParseError: deployment.json is not a valid JSON object, or was
                written by a newer wizard
        """
        if not self.path.exists():
            raise NotFoundError(self.path)

        data = self._read_document(self.path, self._backup_hint())

        if RecordMigration.needs_migration(data):
            logger.info(f"{self.path.name} needs migration")
            try:
                migrated = RecordMigration.migrate(data)
            except UnsupportedVersionError as e:
                raise ParseError(self.path, str(e)) from e
            record = DeploymentRecord.from_dict(migrated)
            self.save(record)
            return record

        return DeploymentRecord.from_dict(data)

    def save(self, record: DeploymentRecord) -> None:
        """
        Save the deployment record.

        The file currently on disk becomes the backup before the new document
        is written. Stamps the record with the current schema version.

        Args:
            record: Record to persist
        """
        record.schema_version = RecordMigration.CURRENT_VERSION
        document = record.to_dict()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                shutil.copyfile(self.path, self.backup_path)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
                f.write("\n")
        except OSError as e:
            raise OSError(f"Could not write {self.path}: {e}") from e

        logger.debug(f"Saved {self.path}")

    def create(self, record: DeploymentRecord, overwrite: bool = False) -> DeploymentRecord:
        """
        Write the initial deployment record of a newly generated project.

        Args:
            record: Initial record (normally identity, credentials and network only)
            overwrite: Replace an existing deployment.json

        Raises:
            FileExistsError: deployment.json exists and overwrite is False
        """
        if self.path.exists() and not overwrite:
            raise FileExistsError(f"{self.path} already exists")

        self.save(record)
        logger.info(f"Created {self.path}")
        return record

    def restore_backup(self) -> DeploymentRecord:
        """
        Replace deployment.json with its backup and load the result.

        Raises:
            NotFoundError: there is no backup to restore
            ParseError: the backup itself is unreadable; deployment.json is
                left untouched
        """
        if not self.backup_path.exists():
            raise NotFoundError(
                self.backup_path,
                f"No backup found at {self.backup_path}; nothing to restore.",
            )

        data = self._read_document(self.backup_path)
        if not RecordMigration.is_supported(data):
            version = RecordMigration.get_version(data)
            raise ParseError(self.backup_path, str(UnsupportedVersionError(version)))

        try:
            shutil.copyfile(self.backup_path, self.path)
        except OSError as e:
            raise OSError(f"Could not restore {self.path} from backup: {e}") from e

        logger.info(f"Restored {self.path.name} from {self.backup_path.name}")
        return self.load()

    def _read_document(self, path: Path, backup_hint: Path | None = None) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(path, str(e), backup_hint) from e
        except OSError as e:
            raise OSError(f"Could not read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ParseError(
                path,
                f"expected a JSON object, got {type(data).__name__}",
                backup_hint,
            )

        return data

    def _backup_hint(self) -> Path | None:
        return self.backup_path if self.backup_path.exists() else None
