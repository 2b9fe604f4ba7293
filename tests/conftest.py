"""Shared pytest fixtures for deployer tests."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from loguru import logger

from blockchain.models import Signer, VerificationStatus
from utils.clock import ZeroDelayClock
from utils.config import DeployConfig, NetworkConfig

HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
HARDHAT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEPLOYED_ADDRESS = "0xaBc0000000000000000000000000000000000001"
TX_HASH = "0x" + "12" * 32


@pytest.fixture
def localhost_network():
    return NetworkConfig(name="localhost", rpc_url="http://127.0.0.1:8545", chain_id=31337)


@pytest.fixture
def inj_network():
    return NetworkConfig(
        name="injEVM",
        rpc_url="https://k8s.testnet.json-rpc.injective.network/",
        chain_id=1439,
        explorer_api_url="https://testnet.blockscout-api.injective.network/api",
        explorer_url="https://testnet.blockscout.injective.network"
    )


@pytest.fixture
def make_config(tmp_path: Path):
    """Build a DeployConfig for a network with test-friendly defaults."""

    def _make(network, **overrides):
        values = {
            'network': network,
            'artifacts_dir': str(tmp_path / "artifacts"),
            'record_path': None,
        }
        values.update(overrides)
        return DeployConfig(**values)

    return _make


@pytest.fixture
def clock():
    return ZeroDelayClock()


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Write a Hardhat-style artifact tree for ContextIDVault."""
    root = tmp_path / "artifacts"
    contract_dir = root / "contracts" / "ContextIDVault.sol"
    build_info_dir = root / "build-info"
    contract_dir.mkdir(parents=True)
    build_info_dir.mkdir(parents=True)

    artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": "ContextIDVault",
        "sourceName": "contracts/ContextIDVault.sol",
        "abi": [
            {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
            {
                "inputs": [],
                "name": "owner",
                "outputs": [{"internalType": "address", "name": "", "type": "address"}],
                "stateMutability": "view",
                "type": "function"
            }
        ],
        "bytecode": "0x6080604052348015600f57600080fd5b50",
        "deployedBytecode": "0x6080604052600080fd"
    }
    with open(contract_dir / "ContextIDVault.json", "w") as f:
        json.dump(artifact, f)

    with open(contract_dir / "ContextIDVault.dbg.json", "w") as f:
        json.dump({"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/abc123.json"}, f)

    build_info = {
        "_format": "hh-sol-build-info-1",
        "solcVersion": "0.8.20",
        "solcLongVersion": "0.8.20+commit.a1b79de6",
        "input": {
            "language": "Solidity",
            "sources": {"contracts/ContextIDVault.sol": {"content": "contract ContextIDVault {}"}},
            "settings": {"optimizer": {"enabled": True, "runs": 200}}
        }
    }
    with open(build_info_dir / "abc123.json", "w") as f:
        json.dump(build_info, f)

    return root


@pytest.fixture
def signer():
    return Signer(address=HARDHAT_ADDRESS)


@pytest.fixture
def pending_deployment():
    pending = Mock()
    pending.transaction_hash = TX_HASH
    pending.wait_for_deployment = AsyncMock(
        return_value={'status': 1, 'contractAddress': DEPLOYED_ADDRESS, 'blockNumber': 7}
    )
    pending.get_address = Mock(return_value=DEPLOYED_ADDRESS)
    return pending


@pytest.fixture
def provider(signer, pending_deployment):
    """Network provider with one signer and a factory that always succeeds."""
    factory = Mock()
    factory.deploy = AsyncMock(return_value=pending_deployment)

    provider = Mock()
    provider.get_signers = Mock(return_value=[signer])
    provider.get_contract_factory = Mock(return_value=factory)
    return provider


@pytest.fixture
def verifier():
    verifier = Mock()
    verifier.verify = AsyncMock(return_value=VerificationStatus.VERIFIED)
    return verifier


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
