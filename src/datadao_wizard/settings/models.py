"""
Settings data models for the DataDAO wizard.

This module defines all configuration-related data classes including:
- NetworkConfig: Vana network endpoints and core contract addresses
- WizardSettings: Main settings class aggregating all configuration options
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class NetworkConfig:
    """
    Network the generated project deploys to.

    Defaults target the Moksha testnet.

    Attributes:
        name: Network name written into new deployment records.
        rpc_url: JSON-RPC endpoint.
        chain_id: EVM chain id.
        api_url: Block explorer API endpoint.
        browser_url: Block explorer web UI.
        dlp_registry_address: DLP registry contract.
        data_registry_address: Data registry contract.
        tee_pool_address: TEE pool contract.
        dat_factory_address: DAT factory contract.
        trusted_forwarder_address: Meta-transaction forwarder (zero address when unused).
    """

    name: str = "moksha"
    rpc_url: str = "https://rpc.moksha.vana.org"
    chain_id: int = 14800
    api_url: str = "https://moksha.vanascan.io/api"
    browser_url: str = "https://moksha.vanascan.io"
    dlp_registry_address: str = "0x4D59880a924526d1dD33260552Ff4328b1E18a43"
    data_registry_address: str = "0x8C8788f98385F6ba1adD4234e551ABba0f82Cb7C"
    tee_pool_address: str = "0xE8EC6BD73b23Ad40E6B9a6f4bD343FAc411bD99A"
    dat_factory_address: str = "0xcc63F29C559fF2420B0C525F28eD6e9801C9CAfB"
    trusted_forwarder_address: str = "0x0000000000000000000000000000000000000000"

    def to_bindings(self) -> Dict[str, object]:
        """Template bindings for the network, keyed the way the templates expect."""
        return {
            "NETWORK": self.name,
            "RPC_URL": self.rpc_url,
            "CHAIN_ID": self.chain_id,
            "API_URL": self.api_url,
            "BROWSER_URL": self.browser_url,
            "DLP_REGISTRY_CONTRACT_ADDRESS": self.dlp_registry_address,
            "DATA_REGISTRY_CONTRACT_ADDRESS": self.data_registry_address,
            "TEE_POOL_CONTRACT_ADDRESS": self.tee_pool_address,
            "DAT_FACTORY_CONTRACT_ADDRESS": self.dat_factory_address,
            "TRUSTED_FORWARDER_ADDRESS": self.trusted_forwarder_address,
        }


@dataclass
class WizardSettings:
    """
    Global settings for the DataDAO wizard.

    Attributes:
        state_file: Name of the deployment record inside a project directory.
        backup_suffix: Suffix appended to state_file for the one-generation backup.
        templates_dir: Directory holding text templates (empty for the bundled ones).
        network: Network defaults for new projects and template bindings.
    """

    state_file: str = "deployment.json"
    backup_suffix: str = ".backup"
    templates_dir: str = ""
    network: NetworkConfig = field(default_factory=NetworkConfig)

    @property
    def backup_file(self) -> str:
        """Name of the backup file next to state_file."""
        return f"{self.state_file}{self.backup_suffix}"
