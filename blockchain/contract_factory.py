"""
Contract Factory
Loads compiled Hardhat artifacts and submits contract-creation transactions
"""

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from loguru import logger

from .exceptions import ArtifactNotFoundError, NetworkError
from .models import Signer

DEFAULT_GAS_LIMIT = 3000000
GAS_BUFFER = 1.2


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as written by ``npx hardhat compile``"""

    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]] = field(repr=False)
    bytecode: str = field(repr=False)
    path: Path

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    def build_info(self) -> Dict[str, Any]:
        """
        Load the build info referenced by the artifact's debug file

        Returns:
            Build info dict with ``solcLongVersion`` and ``input`` keys

        Raises:
            ArtifactNotFoundError: If the debug file or build info is missing
        """
        dbg_path = self.path.with_name(f"{self.contract_name}.dbg.json")

        try:
            with open(dbg_path, 'r') as f:
                dbg = json.load(f)
            build_info_path = (dbg_path.parent / dbg['buildInfo']).resolve()
            with open(build_info_path, 'r') as f:
                return json.load(f)
        except (FileNotFoundError, KeyError) as e:
            raise ArtifactNotFoundError(
                f"Build info for {self.contract_name} not found next to {self.path}. "
                "Run 'npx hardhat compile' first"
            ) from e


def load_artifact(artifacts_dir: str, contract_name: str) -> ContractArtifact:
    """
    Find a compiled artifact by contract name

    Args:
        artifacts_dir: Hardhat artifacts directory
        contract_name: Contract name, or fully qualified ``path/File.sol:Name``

    Returns:
        ContractArtifact

    Raises:
        ArtifactNotFoundError: If no artifact, or more than one, matches
    """
    root = Path(artifacts_dir)

    if ':' in contract_name:
        source_name, name = contract_name.rsplit(':', 1)
        candidates = [root / source_name / f"{name}.json"]
        candidates = [path for path in candidates if path.exists()]
    else:
        name = contract_name
        candidates = [
            path for path in root.rglob(f"{name}.json")
            if 'build-info' not in path.parts
        ]

    if not candidates:
        raise ArtifactNotFoundError(
            f"Contract artifact not found for {contract_name} in {root}. "
            "Run 'npx hardhat compile' first"
        )

    if len(candidates) > 1:
        found = ', '.join(sorted(str(path.relative_to(root)) for path in candidates))
        raise ArtifactNotFoundError(
            f"Multiple artifacts named {name}: {found}. Use a fully qualified name"
        )

    path = candidates[0]
    with open(path, 'r') as f:
        contract_json = json.load(f)

    bytecode = contract_json.get('bytecode') or '0x'
    if bytecode == '0x':
        raise ArtifactNotFoundError(
            f"{contract_name} has no bytecode (abstract contract or interface?)"
        )

    return ContractArtifact(
        contract_name=contract_json.get('contractName', name),
        source_name=contract_json.get('sourceName', ''),
        abi=contract_json['abi'],
        bytecode=bytecode,
        path=path
    )


class PendingDeployment:
    """Broadcast contract creation awaiting inclusion"""

    def __init__(self, w3: Web3, tx_hash, contract_name: str):
        self.w3 = w3
        self.tx_hash = tx_hash
        self.contract_name = contract_name
        self.receipt = None

    @property
    def transaction_hash(self) -> str:
        return Web3.to_hex(self.tx_hash)

    async def wait_for_deployment(self):
        """
        Wait until the creation transaction is mined

        Uses the provider's default receipt timeout.

        Returns:
            Transaction receipt

        Raises:
            NetworkError: If the receipt times out or the transaction reverted
        """
        if self.receipt is not None:
            return self.receipt

        loop = asyncio.get_running_loop()

        try:
            receipt = await loop.run_in_executor(
                None,
                self.w3.eth.wait_for_transaction_receipt,
                self.tx_hash
            )
        except TimeExhausted as e:
            raise NetworkError(
                f"{self.contract_name} deployment {self.transaction_hash} not confirmed: {e}"
            ) from e
        except (Web3Exception, ConnectionError, OSError, ValueError) as e:
            raise NetworkError(
                f"Error waiting for {self.contract_name} deployment {self.transaction_hash}: {e}"
            ) from e

        if receipt['status'] != 1:
            raise NetworkError(
                f"{self.contract_name} deployment reverted in transaction {self.transaction_hash}"
            )

        self.receipt = receipt
        return receipt

    def get_address(self) -> str:
        """Deployed contract address (only after confirmation)"""
        if self.receipt is None:
            raise NetworkError(f"{self.contract_name} deployment not confirmed yet")

        return Web3.to_checksum_address(self.receipt['contractAddress'])


class ContractFactory:
    """
    Builds and submits creation transactions for one artifact

    Signs locally when the signer holds a key, otherwise lets the node
    sign with its unlocked account.
    """

    def __init__(self, w3: Web3, artifact: ContractArtifact, chain_id: Optional[int] = None):
        self.w3 = w3
        self.artifact = artifact
        self.chain_id = chain_id
        self.contract = w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    async def deploy(self, *constructor_args, signer: Signer) -> PendingDeployment:
        """
        Submit the contract-creation transaction

        Args:
            constructor_args: Constructor arguments, in ABI order
            signer: Account paying for and authorizing the deployment

        Returns:
            PendingDeployment for the broadcast transaction

        Raises:
            NetworkError: If the transaction cannot be built or broadcast
        """
        constructor = self.contract.constructor(*constructor_args)

        loop = asyncio.get_running_loop()

        try:
            tx_hash = await loop.run_in_executor(None, self._send, constructor, signer)
        except (Web3Exception, ConnectionError, OSError, ValueError) as e:
            raise NetworkError(
                f"Failed to broadcast {self.artifact.contract_name} deployment: {e}"
            ) from e

        logger.info(f"Transaction sent: {Web3.to_hex(tx_hash)}")
        return PendingDeployment(self.w3, tx_hash, self.artifact.contract_name)

    def _send(self, constructor, signer: Signer):
        if not signer.is_local:
            return constructor.transact({'from': signer.address})

        return self._send_signed(constructor, signer)

    def _send_signed(self, constructor, signer: Signer):
        """Build, sign and send a raw creation transaction"""
        gas_limit = self._estimate_gas(constructor, signer.address)
        gas_price = self.w3.eth.gas_price

        logger.debug(f"Gas limit: {gas_limit}")
        logger.debug(f"Gas price: {self.w3.from_wei(gas_price, 'gwei')} gwei")

        tx_params = {
            'from': signer.address,
            'nonce': self.w3.eth.get_transaction_count(signer.address),
            'gas': gas_limit,
            'gasPrice': gas_price
        }
        if self.chain_id is not None:
            tx_params['chainId'] = self.chain_id

        transaction = constructor.build_transaction(tx_params)
        signed_tx = signer.account.sign_transaction(transaction)

        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    def _estimate_gas(self, constructor, address: str) -> int:
        try:
            gas_estimate = constructor.estimate_gas({'from': address})
            return int(gas_estimate * GAS_BUFFER)
        except (Web3Exception, ValueError) as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            return DEFAULT_GAS_LIMIT
