"""
Deployment Configuration
Builds an explicit DeployConfig from .env and config/networks.json
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from dotenv import load_dotenv
from loguru import logger

from blockchain.exceptions import ConfigurationError

load_dotenv()

# Resolved against the project root so the console script works from any directory
DEFAULT_NETWORKS_PATH = str(Path(__file__).resolve().parent.parent / "config" / "networks.json")
DEFAULT_CONTRACT_NAME = "ContextIDVault"
DEFAULT_NETWORK = "localhost"
VERIFIABLE_NETWORK = "injEVM"
VERIFICATION_DELAY_SECONDS = 30.0


@dataclass(frozen=True)
class NetworkConfig:
    """Connection details for a single network"""

    name: str
    rpc_url: str
    chain_id: Optional[int] = None
    explorer_api_url: Optional[str] = None
    explorer_url: Optional[str] = None

    @property
    def has_explorer(self) -> bool:
        return bool(self.explorer_api_url)


@dataclass(frozen=True)
class DeployConfig:
    """Everything a deployment run needs, resolved up front"""

    network: NetworkConfig
    contract_name: str = DEFAULT_CONTRACT_NAME
    constructor_arguments: Tuple[Any, ...] = ()
    artifacts_dir: str = "artifacts"
    private_keys: List[str] = field(default_factory=list, repr=False)
    verifiable_network: str = VERIFIABLE_NETWORK
    verification_delay: float = VERIFICATION_DELAY_SECONDS
    explorer_api_key: Optional[str] = field(default=None, repr=False)
    poll_interval: float = 5.0
    max_status_checks: int = 12
    record_path: Optional[str] = None

    @property
    def network_name(self) -> str:
        return self.network.name

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        networks_path: Optional[str] = None
    ) -> "DeployConfig":
        """
        Build configuration from environment variables

        Args:
            environ: Mapping to read from (defaults to os.environ)
            networks_path: Path to the networks JSON file (defaults to
                NETWORKS_CONFIG, then the project's config/networks.json)

        Returns:
            DeployConfig for the network named by DEPLOY_NETWORK

        Raises:
            ConfigurationError: If the network is unknown or a value is malformed
        """
        env = os.environ if environ is None else environ

        network_name = env.get('DEPLOY_NETWORK', DEFAULT_NETWORK)
        if networks_path is None:
            networks_path = env.get('NETWORKS_CONFIG') or DEFAULT_NETWORKS_PATH
        networks = load_networks(networks_path, env)

        if network_name not in networks:
            raise ConfigurationError(
                f"Unknown network '{network_name}'. "
                f"Configured networks: {', '.join(sorted(networks))}"
            )

        record_path = env.get('DEPLOYMENT_RECORD_PATH')
        if record_path is None:
            record_path = f"deployments/{network_name}.json"

        return cls(
            network=networks[network_name],
            contract_name=env.get('CONTRACT_NAME', DEFAULT_CONTRACT_NAME),
            artifacts_dir=env.get('ARTIFACTS_DIR', 'artifacts'),
            private_keys=_split_keys(env.get('DEPLOYER_PRIVATE_KEY', '')),
            verifiable_network=env.get('VERIFIABLE_NETWORK', VERIFIABLE_NETWORK),
            verification_delay=_parse_float(
                env, 'VERIFICATION_DELAY_SECONDS', VERIFICATION_DELAY_SECONDS
            ),
            explorer_api_key=env.get('EXPLORER_API_KEY') or None,
            poll_interval=_parse_float(env, 'VERIFY_POLL_INTERVAL_SECONDS', 5.0),
            max_status_checks=int(_parse_float(env, 'VERIFY_MAX_STATUS_CHECKS', 12)),
            record_path=record_path or None
        )


def load_networks(
    networks_path: str = DEFAULT_NETWORKS_PATH,
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, NetworkConfig]:
    """
    Load network definitions

    An ``rpc_url_env`` entry lets an environment variable override the
    file's ``rpc_url``.

    Raises:
        ConfigurationError: If the file is missing or not valid JSON
    """
    env = os.environ if environ is None else environ
    path = Path(networks_path)

    try:
        with open(path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Network config not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid network config {path}: {e}") from e

    networks = {}
    for name, data in raw.get('networks', {}).items():
        rpc_url = data.get('rpc_url')
        rpc_env = data.get('rpc_url_env')
        if rpc_env and env.get(rpc_env):
            rpc_url = env[rpc_env]

        if not rpc_url:
            logger.warning(f"Network {name} has no RPC URL - skipping")
            continue

        networks[name] = NetworkConfig(
            name=name,
            rpc_url=rpc_url,
            chain_id=data.get('chain_id'),
            explorer_api_url=data.get('explorer_api_url'),
            explorer_url=data.get('explorer_url')
        )

    return networks


def _split_keys(value: str) -> List[str]:
    return [key.strip() for key in value.split(',') if key.strip()]


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value == '':
        return default

    try:
        parsed = float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e

    if parsed < 0:
        raise ConfigurationError(f"{name} must not be negative")

    return parsed
