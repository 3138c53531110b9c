"""Tests for the deployment.json store and schema migration."""

import json
import pytest
from pathlib import Path

from datadao_wizard.settings import WizardSettings
from datadao_wizard.state import (
    DeploymentRecord,
    DeploymentStateError,
    DeploymentStep,
    NotFoundError,
    ParseError,
    RecordMigration,
    StateStore,
    UnsupportedVersionError,
)


def read_json(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class TestStateStoreLoad:
    """Tests for loading deployment.json."""

    def test_load_existing(self, store):
        """Test loading the generated record."""
        record = store.load()

        assert record.dlp_name == "WeatherDAO"
        assert record.token_symbol == "WTH"
        assert record.chain_id == 14800
        assert record.state["contractsDeployed"] is False
        assert record.errors == {}

    def test_load_missing_file(self, tmp_path):
        """Test that a missing file raises NotFoundError telling the user to generate a project."""
        store = StateStore(tmp_path)

        with pytest.raises(NotFoundError) as exc_info:
            store.load()

        assert "deployment.json" in str(exc_info.value)
        assert "init" in str(exc_info.value)

    def test_not_found_is_file_not_found(self, tmp_path):
        """Test that NotFoundError can be caught as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            StateStore(tmp_path).load()

    def test_load_invalid_json(self, tmp_path):
        """Test that unparsable JSON raises ParseError."""
        (tmp_path / "deployment.json").write_text("{not json")

        with pytest.raises(ParseError) as exc_info:
            StateStore(tmp_path).load()

        assert exc_info.value.backup_path is None
        assert isinstance(exc_info.value, DeploymentStateError)

    def test_parse_error_points_at_backup(self, tmp_path):
        """Test that ParseError mentions the backup when one exists."""
        (tmp_path / "deployment.json").write_text("{not json")
        (tmp_path / "deployment.json.backup").write_text("{}")

        with pytest.raises(ParseError) as exc_info:
            StateStore(tmp_path).load()

        assert exc_info.value.backup_path == tmp_path / "deployment.json.backup"
        assert "deployment.json.backup" in str(exc_info.value)

    def test_load_non_object(self, tmp_path):
        """Test that a JSON array is rejected."""
        (tmp_path / "deployment.json").write_text("[1, 2, 3]")

        with pytest.raises(ParseError) as exc_info:
            StateStore(tmp_path).load()

        assert "list" in str(exc_info.value)

    def test_custom_file_names(self, tmp_path):
        """Test that file names come from settings."""
        settings = WizardSettings(state_file="state.json", backup_suffix=".bak")
        store = StateStore(tmp_path, settings)

        assert store.path == tmp_path / "state.json"
        assert store.backup_path == tmp_path / "state.json.bak"


class TestStateStoreSave:
    """Tests for saving deployment.json."""

    def test_round_trip(self, store):
        """Test that save then load returns an equal document."""
        record = store.load()
        record.dlp_id = 42
        record.contracts.token_address = "0x" + "a" * 40
        store.save(record)

        loaded = store.load()

        assert loaded.to_dict() == record.to_dict()
        assert read_json(store.path) == record.to_dict()

    def test_first_save_creates_no_backup_from_nothing(self, tmp_path, sample_record):
        """Test that saving into an empty directory leaves no backup."""
        store = StateStore(tmp_path)
        store.save(sample_record)

        assert store.exists()
        assert not store.has_backup()

    def test_backup_lags_one_generation(self, store):
        """Test that the backup equals the document as it was before the latest save."""
        record = store.load()
        record.dlp_id = 1
        store.save(record)
        after_first = read_json(store.path)

        record.dlp_id = 2
        store.save(record)

        assert read_json(store.backup_path) == after_first
        assert read_json(store.path)["dlpId"] == 2

    def test_save_stamps_schema_version(self, tmp_path):
        """Test that saved documents carry the current schema version."""
        store = StateStore(tmp_path)
        store.save(DeploymentRecord(dlp_name="X"))

        assert read_json(store.path)["schemaVersion"] == RecordMigration.CURRENT_VERSION

    def test_save_writes_both_contract_shapes(self, tmp_path):
        """Test that contract addresses are written nested and as legacy flat keys."""
        store = StateStore(tmp_path)
        record = DeploymentRecord()
        record.contracts.token_address = "0x" + "a" * 40
        record.contracts.proxy_address = "0x" + "b" * 40
        record.contracts.vesting_address = "0x" + "c" * 40
        store.save(record)

        data = read_json(store.path)
        assert data["contracts"] == {
            "tokenAddress": "0x" + "a" * 40,
            "proxyAddress": "0x" + "b" * 40,
            "vestingAddress": "0x" + "c" * 40,
        }
        assert data["tokenAddress"] == "0x" + "a" * 40
        assert data["proxyAddress"] == "0x" + "b" * 40

    def test_unknown_keys_preserved(self, project_dir):
        """Test that keys the wizard does not know survive a load/save cycle."""
        path = project_dir / "deployment.json"
        data = read_json(path)
        data["customNote"] = {"owner": "ops"}
        path.write_text(json.dumps(data))

        store = StateStore(project_dir)
        store.save(store.load())

        assert read_json(path)["customNote"] == {"owner": "ops"}

    def test_unknown_contract_keys_preserved(self, project_dir):
        """Test that unknown keys inside the contracts object survive a load/save cycle."""
        path = project_dir / "deployment.json"
        data = read_json(path)
        data["contracts"] = {"tokenAddress": "0x" + "a" * 40, "teePoolAddress": "0x" + "e" * 40}
        path.write_text(json.dumps(data))

        store = StateStore(project_dir)
        store.save(store.load())

        contracts = read_json(path)["contracts"]
        assert contracts["teePoolAddress"] == "0x" + "e" * 40
        assert contracts["tokenAddress"] == "0x" + "a" * 40

    def test_create_refuses_overwrite(self, store, sample_record):
        """Test that create does not replace an existing record by default."""
        with pytest.raises(FileExistsError):
            store.create(sample_record)

    def test_create_with_overwrite(self, store):
        """Test that create replaces an existing record when asked."""
        store.create(DeploymentRecord(dlp_name="OtherDAO"), overwrite=True)

        assert store.load().dlp_name == "OtherDAO"


class TestRestoreBackup:
    """Tests for restoring the backup generation."""

    def test_restore_backup(self, store):
        """Test that restore_backup brings back the previous generation."""
        record = store.load()
        record.dlp_id = 7
        store.save(record)

        # Simulate a crash that left a truncated primary
        store.path.write_text('{"dlpName": "Weath')

        restored = store.restore_backup()

        assert restored.dlp_name == "WeatherDAO"
        assert restored.dlp_id is None

    def test_restore_without_backup(self, tmp_path):
        """Test that restoring with no backup raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            StateStore(tmp_path).restore_backup()

        assert "No backup found" in str(exc_info.value)

    def test_corrupt_backup_leaves_primary(self, store):
        """Test that an unreadable backup is not copied over a good primary."""
        store.backup_path.write_text("{corrupt")
        before = store.path.read_text()

        with pytest.raises(ParseError):
            store.restore_backup()

        assert store.path.read_text() == before
        assert store.load().dlp_name == "WeatherDAO"

    def test_newer_backup_not_restored(self, store):
        """Test that a backup written by a newer wizard is refused."""
        store.backup_path.write_text(json.dumps({"schemaVersion": "2.0.0"}))
        before = store.path.read_text()

        with pytest.raises(ParseError):
            store.restore_backup()

        assert store.path.read_text() == before


class TestRecordMigration:
    """Tests for schema migration of deployment.json."""

    def test_get_version_legacy(self):
        """Test that documents without schemaVersion are version 0."""
        assert RecordMigration.get_version({"dlpName": "X"}) == "0"

    def test_needs_migration(self):
        """Test migration detection."""
        complete_state = {key: False for key in DeploymentStep.keys()}

        assert RecordMigration.needs_migration({})
        assert RecordMigration.needs_migration({"schemaVersion": RecordMigration.CURRENT_VERSION})
        assert not RecordMigration.needs_migration({
            "schemaVersion": RecordMigration.CURRENT_VERSION,
            "state": complete_state,
        })

    def test_newer_version_refused(self):
        """Test that documents from a newer wizard are not migrated."""
        with pytest.raises(UnsupportedVersionError) as exc_info:
            RecordMigration.migrate({"schemaVersion": "2.0.0"})

        assert exc_info.value.version == "2.0.0"

    def test_migrate_synthesizes_state(self):
        """Test that a v0 document without state gets one inferred from its fields."""
        legacy = {
            "dlpName": "OldDAO",
            "tokenAddress": "0x" + "a" * 40,
            "dlpAddress": "0x" + "d" * 40,
            "dlpId": 0,
        }

        migrated = RecordMigration.migrate(legacy)

        assert migrated["state"]["contractsDeployed"] is True
        assert migrated["state"]["dataDAORegistered"] is True
        assert migrated["state"]["proofConfigured"] is False
        assert migrated["errors"] == {}
        assert migrated["schemaVersion"] == RecordMigration.CURRENT_VERSION
        assert "state" not in legacy

    def test_migrate_fills_missing_step_keys(self):
        """Test that an existing state map only gains the keys it lacks."""
        migrated = RecordMigration.migrate({"state": {"contractsDeployed": True}})

        assert migrated["state"]["contractsDeployed"] is True
        assert migrated["state"]["uiConfigured"] is False
        assert len(migrated["state"]) == 7

    def test_migrate_is_idempotent(self):
        """Test that migrating a migrated document changes nothing."""
        once = RecordMigration.migrate({"dlpName": "X", "dlpId": 3})
        twice = RecordMigration.migrate(once)

        assert twice == once

    def test_load_persists_migration(self, tmp_path):
        """Test that loading a legacy file writes the migrated document back once."""
        path = tmp_path / "deployment.json"
        path.write_text(json.dumps({"dlpName": "OldDAO", "dlpId": 5}))

        store = StateStore(tmp_path)
        record = store.load()

        assert record.state["dataDAORegistered"] is True
        data = read_json(path)
        assert data["schemaVersion"] == RecordMigration.CURRENT_VERSION
        assert read_json(store.backup_path) == {"dlpName": "OldDAO", "dlpId": 5}

        first = path.read_text()
        store.load()
        assert path.read_text() == first

    def test_load_rebuilds_missing_state_at_current_version(self, tmp_path):
        """Test that a current-version document without a state map gets one rebuilt and saved."""
        path = tmp_path / "deployment.json"
        path.write_text(json.dumps({
            "schemaVersion": RecordMigration.CURRENT_VERSION,
            "tokenAddress": "0x" + "a" * 40,
            "proxyAddress": "0x" + "b" * 40,
            "dlpId": 5,
        }))

        record = StateStore(tmp_path).load()

        assert record.state["contractsDeployed"] is True
        assert record.state["dataDAORegistered"] is True
        assert record.state["proofConfigured"] is False
        assert read_json(path)["state"]["dataDAORegistered"] is True

    def test_load_newer_version_refused(self, tmp_path):
        """Test that loading a document from a newer wizard fails without rewriting it."""
        path = tmp_path / "deployment.json"
        original = json.dumps({"schemaVersion": "2.0.0", "dlpName": "FutureDAO"})
        path.write_text(original)
        store = StateStore(tmp_path)

        with pytest.raises(ParseError) as exc_info:
            store.load()

        assert "2.0.0" in str(exc_info.value)
        assert path.read_text() == original
        assert not store.has_backup()
