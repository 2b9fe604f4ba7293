"""
ContextIDVault Deployer - Main Entry Point
Deploys the contract to DEPLOY_NETWORK and verifies it on the explorer
"""

import asyncio
import sys
from pathlib import Path

from loguru import logger

from blockchain.contract_deployer import Deployer
from blockchain.deployment_record import append_deployment_record
from blockchain.explorer_verifier import ExplorerVerifier
from blockchain.provider import NetworkProvider
from utils.clock import AsyncioClock
from utils.config import DeployConfig


def configure_logging(log_file: str = "data/logs/deploy.log"):
    """Progress to stdout, errors to stderr, everything to a rotating file"""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="INFO",
        filter=lambda record: record["level"].no < logger.level("ERROR").no
    )
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="ERROR"
    )
    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
            level="DEBUG"
        )


class DeploymentRunner:
    """Runs one deployment and reports its outcome"""

    def __init__(self, deployer: Deployer, record_path=None):
        self.deployer = deployer
        self.record_path = record_path

    @classmethod
    def from_config(cls, config: DeployConfig, clock=None) -> "DeploymentRunner":
        """Wire the real provider and explorer verifier"""
        clock = clock or AsyncioClock()
        provider = NetworkProvider.from_config(config)

        verifier = None
        if config.network.has_explorer:
            verifier = ExplorerVerifier.from_config(config, clock=clock)

        deployer = Deployer(config, provider, verifier=verifier, clock=clock)
        return cls(deployer, record_path=config.record_path)

    async def run(self):
        """
        Deploy, then verify on the designated network

        Deployment errors propagate. Verification errors are logged and
        the run still completes.

        Returns:
            (DeploymentResult, VerificationOutcome)
        """
        network_name = self.deployer.config.network_name

        result = await self.deployer.deploy()
        outcome = await self.deployer.verify(result, network_name)

        if outcome.attempted:
            if outcome.ok:
                logger.success("Contract verified successfully.")
            else:
                logger.error(f"Verification failed: {outcome.error}")

        if self.record_path:
            try:
                append_deployment_record(Path(self.record_path), result, outcome)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not record deployment in {self.record_path}: {e}")

        logger.success("Deployment completed successfully.")
        return result, outcome


async def main():
    """Main entry point"""
    config = DeployConfig.from_env()
    logger.info(f"Network: {config.network_name}")

    runner = DeploymentRunner.from_config(config)
    await runner.run()


def run() -> int:
    """Run the deployment and return the process exit code"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        return 1
    except Exception as e:
        logger.opt(exception=e).error(f"Deployment failed: {e}")
        return 1

    return 0


def cli():
    configure_logging()
    sys.exit(run())


if __name__ == "__main__":
    cli()
