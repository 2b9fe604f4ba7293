"""
Contract Deployer
Deploys a single contract, waits for confirmation and optionally
requests block-explorer verification
"""

from loguru import logger

from utils.clock import AsyncioClock

from .exceptions import ConfigurationError
from .models import (
    DeploymentResult,
    VerificationOutcome,
    VerificationRequest,
    VerificationStatus,
)


class Deployer:
    """
    Deploys one contract per call to ``deploy``

    Collaborators are passed in explicitly: the network provider for
    signers and factories, the verifier for explorer verification and a
    clock for the propagation delay before verifying.
    """

    def __init__(self, config, provider, verifier=None, clock=None):
        """
        Initialize Deployer

        Args:
            config: DeployConfig for this run
            provider: NetworkProvider (get_signers, get_contract_factory)
            verifier: Object with async verify(address, constructor_arguments)
            clock: Delay strategy (defaults to asyncio.sleep)
        """
        self.config = config
        self.provider = provider
        self.verifier = verifier
        self.clock = clock or AsyncioClock()

    async def deploy(self) -> DeploymentResult:
        """
        Submit the contract-creation transaction and wait for it

        Returns:
            DeploymentResult of the confirmed deployment

        Raises:
            ConfigurationError: If no signer or artifact is available
            NetworkError: If the transaction cannot be broadcast or confirmed
        """
        contract_name = self.config.contract_name
        constructor_arguments = tuple(self.config.constructor_arguments)

        signers = self.provider.get_signers()
        if not signers:
            raise ConfigurationError(
                f"No signer available on {self.config.network_name}. "
                "Set DEPLOYER_PRIVATE_KEY or use a node with unlocked accounts"
            )

        deployer = signers[0]
        logger.info(f"Deploying {contract_name} with account: {deployer.address}")

        factory = self.provider.get_contract_factory(contract_name)
        pending = await factory.deploy(*constructor_arguments, signer=deployer)

        logger.info("Waiting for confirmation...")
        receipt = await pending.wait_for_deployment()

        result = DeploymentResult(
            contract_name=contract_name,
            contract_address=pending.get_address(),
            transaction_hash=pending.transaction_hash,
            transaction_receipt=receipt,
            deployer=deployer.address,
            network=self.config.network_name,
            constructor_arguments=constructor_arguments
        )

        logger.success(f"{contract_name} deployed at: {result.contract_address}")
        return result

    async def verify(self, result: DeploymentResult, network_name: str) -> VerificationOutcome:
        """
        Verify the deployed source on the designated network only

        Waits for the configured grace period first so the explorer has
        indexed the new contract. Never raises: failures come back as a
        FAILED outcome for the caller to log.

        Args:
            result: DeploymentResult from deploy()
            network_name: Name of the network the contract lives on

        Returns:
            VerificationOutcome
        """
        if network_name != self.config.verifiable_network:
            return VerificationOutcome.skipped()

        logger.info("Verifying contract on block explorer...")
        await self.clock.sleep(self.config.verification_delay)

        request = VerificationRequest(
            address=result.contract_address,
            constructor_arguments=tuple(result.constructor_arguments)
        )

        if self.verifier is None:
            return VerificationOutcome.failed(
                request, ConfigurationError(f"No verifier configured for {network_name}")
            )

        try:
            status = await self.verifier.verify(
                request.address,
                list(request.constructor_arguments)
            )
        except Exception as e:
            return VerificationOutcome.failed(request, e)

        if status is not VerificationStatus.ALREADY_VERIFIED:
            status = VerificationStatus.VERIFIED

        return VerificationOutcome(status=status, request=request)
