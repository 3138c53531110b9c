"""
Settings storage management for the DataDAO wizard.

This module provides YAML-based configuration file persistence with:
- Automatic directory creation
- Dataclass to dict conversion for serialization
- Default WizardSettings when no configuration exists
"""

import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any

import yaml

from .models import NetworkConfig, WizardSettings

logger = logging.getLogger(__name__)


class SettingsStorage:
    """
    Settings storage manager.

    Handles loading and saving WizardSettings objects to YAML configuration
    files. Configuration is stored at ~/.datadao-wizard/config.yaml by default.

    Attributes:
        config_dir: Directory path for configuration files.
        config_file: Path to the main configuration file.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """
        Initialize the settings storage.

        Args:
            config_dir: Optional path to configuration directory.
                       Defaults to ~/.datadao-wizard/
        """
        self.config_dir = config_dir or Path.home() / ".datadao-wizard"
        self.config_file = self.config_dir / "config.yaml"

    def load(self) -> WizardSettings:
        """
        Load settings from the configuration file.

        Returns:
            WizardSettings loaded from the config file, or defaults if the
            configuration file does not exist.
        """
        if not self.config_file.exists():
            return WizardSettings()

        with open(self.config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed settings file {self.config_file}")
            return WizardSettings()

        return self._dict_to_settings(data)

    def save(self, settings: WizardSettings) -> None:
        """
        Save settings to the configuration file.

        Creates the configuration directory if it does not exist.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w", encoding="utf-8") as f:
            yaml.dump(
                asdict(settings),
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )

    def _dict_to_settings(self, data: dict[str, Any]) -> WizardSettings:
        """
        Convert a dictionary to a WizardSettings object.

        Unknown keys are ignored so older wizard versions can read newer files.
        """
        defaults = WizardSettings()

        network_data = data.get("network") or {}
        if not isinstance(network_data, dict):
            logger.warning(f"Ignoring malformed network section in {self.config_file}")
            network_data = {}
        known_network = {f.name for f in fields(NetworkConfig)}
        network = NetworkConfig(
            **{k: v for k, v in network_data.items() if k in known_network}
        )

        return WizardSettings(
            state_file=data.get("state_file", defaults.state_file),
            backup_suffix=data.get("backup_suffix", defaults.backup_suffix),
            templates_dir=data.get("templates_dir", defaults.templates_dir) or "",
            network=network,
        )
