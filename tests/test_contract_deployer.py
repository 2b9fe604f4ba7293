"""
Unit Tests for the Contract Deployer
"""

import pytest
from unittest.mock import AsyncMock

from blockchain.contract_deployer import Deployer
from blockchain.exceptions import ConfigurationError, NetworkError, VerificationError
from blockchain.models import DeploymentResult, Signer, VerificationStatus

from conftest import DEPLOYED_ADDRESS, HARDHAT_ADDRESS, TX_HASH


@pytest.fixture
def inj_deployer(make_config, inj_network, provider, verifier, clock):
    return Deployer(make_config(inj_network), provider, verifier=verifier, clock=clock)


@pytest.fixture
def local_deployer(make_config, localhost_network, provider, verifier, clock):
    return Deployer(make_config(localhost_network), provider, verifier=verifier, clock=clock)


class TestDeploy:
    """Test Deployer.deploy"""

    @pytest.mark.asyncio
    async def test_returns_confirmed_result(self, local_deployer, provider):
        """Test deployment result carries address, hash and deployer"""
        result = await local_deployer.deploy()

        assert isinstance(result, DeploymentResult)
        assert result.contract_address == DEPLOYED_ADDRESS
        assert result.transaction_hash == TX_HASH
        assert result.deployer == HARDHAT_ADDRESS
        assert result.network == "localhost"
        assert result.constructor_arguments == ()
        assert result.block_number == 7
        provider.get_contract_factory.assert_called_once_with("ContextIDVault")

    @pytest.mark.asyncio
    async def test_uses_first_signer(self, local_deployer, provider, signer):
        """Test the first resolvable signer authorizes the deployment"""
        provider.get_signers.return_value = [signer, Signer(address="0x" + "22" * 20)]

        await local_deployer.deploy()

        factory = provider.get_contract_factory.return_value
        factory.deploy.assert_awaited_once_with(signer=signer)

    @pytest.mark.asyncio
    async def test_no_signer_raises_configuration_error(self, local_deployer, provider):
        """Test deployment fails before touching the factory without a signer"""
        provider.get_signers.return_value = []

        with pytest.raises(ConfigurationError):
            await local_deployer.deploy()

        provider.get_contract_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_confirmation_failure_propagates(self, local_deployer, pending_deployment):
        """Test a failed confirmation surfaces as NetworkError"""
        pending_deployment.wait_for_deployment = AsyncMock(side_effect=NetworkError("timed out"))

        with pytest.raises(NetworkError):
            await local_deployer.deploy()

    @pytest.mark.asyncio
    async def test_each_call_produces_new_result(self, local_deployer, provider, pending_deployment):
        """Test re-running deploys again instead of reusing a result"""
        first = await local_deployer.deploy()
        pending_deployment.get_address.return_value = "0x" + "33" * 20
        second = await local_deployer.deploy()

        assert first is not second
        assert first.contract_address != second.contract_address
        factory = provider.get_contract_factory.return_value
        assert factory.deploy.await_count == 2

    @pytest.mark.asyncio
    async def test_logs_deployer_and_address(self, local_deployer, log_messages):
        """Test progress lines name the account and the deployed address"""
        await local_deployer.deploy()

        assert f"Deploying ContextIDVault with account: {HARDHAT_ADDRESS}" in log_messages
        assert f"ContextIDVault deployed at: {DEPLOYED_ADDRESS}" in log_messages


class TestVerify:
    """Test Deployer.verify"""

    @pytest.mark.asyncio
    async def test_skips_other_networks(self, local_deployer, verifier, clock, log_messages):
        """Test nothing happens off the designated network"""
        result = await local_deployer.deploy()
        log_messages.clear()

        outcome = await local_deployer.verify(result, "localhost")

        assert outcome.status is VerificationStatus.SKIPPED
        assert outcome.ok
        assert not outcome.attempted
        verifier.verify.assert_not_called()
        assert clock.sleeps == []
        assert log_messages == []

    @pytest.mark.asyncio
    async def test_verifies_designated_network_after_delay(self, inj_deployer, verifier, clock):
        """Test one verify call with empty constructor arguments after 30s"""
        result = await inj_deployer.deploy()

        outcome = await inj_deployer.verify(result, "injEVM")

        assert outcome.status is VerificationStatus.VERIFIED
        assert outcome.request.address == DEPLOYED_ADDRESS
        assert outcome.request.constructor_arguments == ()
        verifier.verify.assert_awaited_once_with(DEPLOYED_ADDRESS, [])
        assert clock.total_slept >= 30

    @pytest.mark.asyncio
    async def test_delay_happens_before_verification(self, inj_deployer, verifier, clock):
        """Test the grace period elapses before the explorer is called"""
        observed = []

        async def record_time(address, constructor_arguments):
            observed.append(clock.time())
            return VerificationStatus.VERIFIED

        verifier.verify = AsyncMock(side_effect=record_time)
        result = await inj_deployer.deploy()

        await inj_deployer.verify(result, "injEVM")

        assert observed == [30.0]

    @pytest.mark.asyncio
    async def test_configured_delay(self, make_config, inj_network, provider, verifier, clock):
        """Test the grace period comes from configuration"""
        deployer = Deployer(
            make_config(inj_network, verification_delay=2.5),
            provider,
            verifier=verifier,
            clock=clock
        )
        result = await deployer.deploy()

        await deployer.verify(result, "injEVM")

        assert clock.sleeps == [2.5]

    @pytest.mark.asyncio
    async def test_failure_is_returned_not_raised(self, inj_deployer, verifier):
        """Test a failing explorer becomes a FAILED outcome"""
        error = VerificationError("Fail - Unable to verify")
        verifier.verify = AsyncMock(side_effect=error)
        result = await inj_deployer.deploy()

        outcome = await inj_deployer.verify(result, "injEVM")

        assert outcome.status is VerificationStatus.FAILED
        assert not outcome.ok
        assert outcome.error is error
        assert outcome.request.address == DEPLOYED_ADDRESS

    @pytest.mark.asyncio
    async def test_unexpected_error_is_captured(self, inj_deployer, verifier):
        """Test even non-library errors do not escape verify"""
        verifier.verify = AsyncMock(side_effect=RuntimeError("boom"))
        result = await inj_deployer.deploy()

        outcome = await inj_deployer.verify(result, "injEVM")

        assert outcome.status is VerificationStatus.FAILED

    @pytest.mark.asyncio
    async def test_already_verified(self, inj_deployer, verifier):
        """Test a duplicate request is reported as already verified"""
        verifier.verify = AsyncMock(return_value=VerificationStatus.ALREADY_VERIFIED)
        result = await inj_deployer.deploy()

        outcome = await inj_deployer.verify(result, "injEVM")

        assert outcome.status is VerificationStatus.ALREADY_VERIFIED
        assert outcome.ok

    @pytest.mark.asyncio
    async def test_missing_verifier_fails(self, make_config, inj_network, provider, clock):
        """Test a network without explorer configuration fails verification softly"""
        deployer = Deployer(make_config(inj_network), provider, verifier=None, clock=clock)
        result = await deployer.deploy()

        outcome = await deployer.verify(result, "injEVM")

        assert outcome.status is VerificationStatus.FAILED
        assert isinstance(outcome.error, ConfigurationError)

    @pytest.mark.asyncio
    async def test_passes_creation_arguments(self, make_config, inj_network, provider, verifier, clock):
        """Test verification reuses the exact constructor arguments"""
        deployer = Deployer(
            make_config(inj_network, constructor_arguments=(42, "vault")),
            provider,
            verifier=verifier,
            clock=clock
        )
        result = await deployer.deploy()

        await deployer.verify(result, "injEVM")

        factory = provider.get_contract_factory.return_value
        assert factory.deploy.await_args.args == (42, "vault")
        verifier.verify.assert_awaited_once_with(DEPLOYED_ADDRESS, [42, "vault"])
