"""
Blockchain Interaction Package
Handles contract deployment, signer resolution and explorer verification
"""

from .contract_deployer import Deployer
from .contract_factory import ContractFactory, PendingDeployment, load_artifact
from .explorer_verifier import ExplorerVerifier
from .provider import NetworkProvider

__all__ = [
    'Deployer',
    'ContractFactory',
    'PendingDeployment',
    'load_artifact',
    'ExplorerVerifier',
    'NetworkProvider'
]
