"""
System Check Script
Verifies configuration, RPC connection, signer and artifacts before deploying
Run from the repository root: python -m scripts.check_system
"""

import sys

from loguru import logger

from blockchain.contract_factory import load_artifact
from blockchain.exceptions import DeployerError
from blockchain.provider import NetworkProvider
from utils.config import DeployConfig

MIN_BALANCE = 0.01


def check_configuration():
    """Load DeployConfig from the environment"""
    logger.info("Checking configuration...")

    try:
        config = DeployConfig.from_env()
    except DeployerError as e:
        logger.error(f"  ✗ {e}")
        return None

    logger.success(f"  ✓ Network: {config.network_name} ({config.network.rpc_url})")

    if config.network_name == config.verifiable_network and not config.network.has_explorer:
        logger.warning(f"  ⚠ {config.network_name} has no explorer_api_url - verification will fail")

    return config


def check_rpc_connection(provider: NetworkProvider, config: DeployConfig) -> bool:
    """Check RPC connection and chain id"""
    logger.info("Checking RPC connection...")

    if not provider.is_connected():
        logger.error(f"  ✗ Cannot reach {config.network.rpc_url}")
        return False

    try:
        chain_id = provider.w3.eth.chain_id
        block = provider.w3.eth.block_number
    except Exception as e:
        logger.error(f"  ✗ {e}")
        return False

    expected = config.network.chain_id
    if expected is not None and chain_id != expected:
        logger.error(f"  ✗ Chain id {chain_id} does not match configured {expected}")
        return False

    logger.success(f"  ✓ Connected (Chain: {chain_id}, Block: {block})")
    return True


def check_signer(provider: NetworkProvider) -> bool:
    """Check that a signer exists and can pay for gas"""
    logger.info("Checking deployer account...")

    try:
        signers = provider.get_signers()
    except DeployerError as e:
        logger.error(f"  ✗ {e}")
        return False

    if not signers:
        logger.error("  ✗ No signer available (set DEPLOYER_PRIVATE_KEY)")
        return False

    address = signers[0].address

    try:
        balance = provider.get_balance(address)
    except Exception as e:
        logger.error(f"  Error checking balance of {address}: {e}")
        return False

    logger.info(f"  Deployer: {address} ({balance:.4f})")

    if balance < MIN_BALANCE:
        logger.warning(f"  ⚠ Deployer balance low (need at least {MIN_BALANCE})")
    else:
        logger.success("  ✓ Deployer balance sufficient")

    return True


def check_artifacts(config: DeployConfig) -> bool:
    """Check the compiled artifact and its build info"""
    logger.info("Checking contract artifacts...")

    try:
        artifact = load_artifact(config.artifacts_dir, config.contract_name)
        artifact.build_info()
    except DeployerError as e:
        logger.error(f"  ✗ {e}")
        return False

    logger.success(f"  ✓ {artifact.fully_qualified_name}")
    return True


def main() -> int:
    """Run all checks"""
    logger.info("=" * 70)
    logger.info("Deployment System Check")
    logger.info("=" * 70)

    config = check_configuration()
    if config is None:
        return 1

    provider = NetworkProvider.from_config(config)

    checks = [
        check_artifacts(config),
        check_rpc_connection(provider, config),
    ]
    if checks[-1]:
        checks.append(check_signer(provider))

    logger.info("=" * 70)
    if all(checks):
        logger.success("✅ All checks passed - ready to deploy")
        return 0

    logger.error("❌ Some checks failed - fix the issues above before deploying")
    return 1


if __name__ == "__main__":
    sys.exit(main())
