"""
Network Provider
Resolves signers and contract factories for the active network
"""

from typing import List, Optional

from web3 import Web3
from web3.exceptions import Web3Exception
from eth_account import Account
from loguru import logger

from .contract_factory import ContractFactory, load_artifact
from .exceptions import ConfigurationError, NetworkError
from .models import Signer


class NetworkProvider:
    """
    Network collaborator for a single deployment run

    Signers come from configured private keys when present, otherwise
    from the node's own accounts (a local Hardhat node exposes twenty
    unlocked ones).
    """

    def __init__(
        self,
        w3: Web3,
        network,
        private_keys: Optional[List[str]] = None,
        artifacts_dir: str = "artifacts"
    ):
        """
        Initialize Network Provider

        Args:
            w3: Web3 instance connected to the network
            network: NetworkConfig of the active network
            private_keys: Hex private keys, first one deploys
            artifacts_dir: Hardhat artifacts directory
        """
        self.w3 = w3
        self.network = network
        self.private_keys = private_keys or []
        self.artifacts_dir = artifacts_dir
        self._signers = None

    @classmethod
    def from_config(cls, config) -> "NetworkProvider":
        """Connect over HTTP using a DeployConfig"""
        w3 = Web3(Web3.HTTPProvider(config.network.rpc_url))
        logger.debug(f"Connecting to {config.network.name} at {config.network.rpc_url}")

        return cls(
            w3,
            config.network,
            private_keys=config.private_keys,
            artifacts_dir=config.artifacts_dir
        )

    @property
    def network_name(self) -> str:
        return self.network.name

    def get_signers(self) -> List[Signer]:
        """
        Enumerate available signers

        Returns:
            Signers in configuration order (may be empty)

        Raises:
            ConfigurationError: If a configured private key is malformed
            NetworkError: If the node cannot be asked for its accounts
        """
        if self._signers is not None:
            return self._signers

        if self.private_keys:
            signers = []
            for index, key in enumerate(self.private_keys):
                try:
                    account = Account.from_key(key)
                except Exception as e:
                    # Never echo the key itself
                    raise ConfigurationError(
                        f"Private key #{index} is not a valid secp256k1 key"
                    ) from e
                signers.append(Signer(address=account.address, account=account))
        else:
            try:
                accounts = self.w3.eth.accounts
            except (Web3Exception, ConnectionError, OSError, ValueError) as e:
                raise NetworkError(
                    f"Could not list accounts on {self.network_name}: {e}"
                ) from e
            signers = [
                Signer(address=Web3.to_checksum_address(address))
                for address in accounts
            ]

        self._signers = signers
        return signers

    def get_contract_factory(self, contract_name: str) -> ContractFactory:
        """
        Contract factory for a compiled artifact

        Raises:
            ArtifactNotFoundError: If the artifact does not exist
        """
        artifact = load_artifact(self.artifacts_dir, contract_name)
        return ContractFactory(self.w3, artifact, chain_id=self.network.chain_id)

    def get_balance(self, address: str):
        """Native balance in ether"""
        balance = self.w3.eth.get_balance(address)
        return self.w3.from_wei(balance, 'ether')

    def is_connected(self) -> bool:
        try:
            return self.w3.is_connected()
        except Exception:
            return False
