"""
Settings management module for the DataDAO wizard.

This module provides configuration management including:
- Settings data models (NetworkConfig, WizardSettings)
- YAML-based configuration storage
"""

from .models import NetworkConfig, WizardSettings
from .storage import SettingsStorage

__all__ = [
    # Models
    "NetworkConfig",
    "WizardSettings",
    # Storage
    "SettingsStorage",
]
