"""
Explorer Verifier
Publishes contract source to an Etherscan-compatible block explorer API
(Etherscan, Blockscout) using Hardhat build info as standard JSON input
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from eth_abi import encode
from loguru import logger

from utils.clock import AsyncioClock

from .contract_factory import ContractArtifact, load_artifact
from .exceptions import VerificationError
from .models import VerificationStatus

PENDING_RESULTS = ("pending in queue", "in progress")
ALREADY_VERIFIED_MARKERS = ("already verified",)


class ExplorerVerifier:
    """
    Verification collaborator for one contract artifact

    Flow:
    1. Ask the explorer whether the address already has source
    2. Submit standard JSON input with ABI-encoded constructor arguments
    3. Poll the returned GUID until the explorer reports a verdict
    """

    def __init__(
        self,
        api_url: str,
        artifacts_dir: str,
        contract_name: str,
        api_key: Optional[str] = None,
        clock=None,
        poll_interval: float = 5.0,
        max_status_checks: int = 12,
        request_timeout: float = 30.0
    ):
        """
        Initialize Explorer Verifier

        Args:
            api_url: Explorer API endpoint (ends in /api)
            artifacts_dir: Hardhat artifacts directory
            contract_name: Artifact to verify
            api_key: Explorer API key (Blockscout accepts any value)
            clock: Delay strategy used between status checks
            poll_interval: Seconds between status checks
            max_status_checks: Status checks before giving up
            request_timeout: Per-request HTTP timeout in seconds
        """
        self.api_url = api_url
        self.artifacts_dir = artifacts_dir
        self.contract_name = contract_name
        self.api_key = api_key or ""
        self.clock = clock or AsyncioClock()
        self.poll_interval = poll_interval
        self.max_status_checks = max_status_checks
        self.request_timeout = request_timeout

    @classmethod
    def from_config(cls, config, clock=None) -> "ExplorerVerifier":
        """Verifier for the configured network's explorer"""
        return cls(
            api_url=config.network.explorer_api_url,
            artifacts_dir=config.artifacts_dir,
            contract_name=config.contract_name,
            api_key=config.explorer_api_key,
            clock=clock,
            poll_interval=config.poll_interval,
            max_status_checks=config.max_status_checks
        )

    async def verify(self, address: str, constructor_arguments: Sequence[Any]) -> VerificationStatus:
        """
        Verify deployed source for ``address``

        Args:
            address: Deployed contract address
            constructor_arguments: Arguments used at creation, in ABI order

        Returns:
            VerificationStatus.VERIFIED or VerificationStatus.ALREADY_VERIFIED

        Raises:
            VerificationError: If the explorer rejects the source or is unreachable
        """
        if not self.api_url:
            raise VerificationError("No explorer API URL configured for this network")

        artifact = load_artifact(self.artifacts_dir, self.contract_name)
        build_info = artifact.build_info()
        encoded_args = encode_constructor_arguments(artifact, constructor_arguments)

        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                if await self._is_verified(session, address):
                    logger.info(f"{artifact.contract_name} at {address} is already verified")
                    return VerificationStatus.ALREADY_VERIFIED

                guid = await self._submit(session, address, artifact, build_info, encoded_args)
                if guid is None:
                    return VerificationStatus.ALREADY_VERIFIED

                logger.debug(f"Verification submitted, GUID: {guid}")
                return await self._wait_for_verdict(session, guid)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise VerificationError(f"Explorer request failed: {e!r}") from e

    async def _is_verified(self, session: aiohttp.ClientSession, address: str) -> bool:
        response = await self._get(session, {
            'module': 'contract',
            'action': 'getsourcecode',
            'address': address
        })

        result = response.get('result')
        if not isinstance(result, list) or not result:
            return False

        return bool(result[0].get('SourceCode'))

    async def _submit(
        self,
        session: aiohttp.ClientSession,
        address: str,
        artifact: ContractArtifact,
        build_info: Dict,
        encoded_args: str
    ) -> Optional[str]:
        """
        Submit a verification request

        Returns:
            GUID to poll, or None when the explorer says it is already verified
        """
        response = await self._post(session, {
            'module': 'contract',
            'action': 'verifysourcecode',
            'contractaddress': address,
            'sourceCode': json.dumps(build_info['input']),
            'codeformat': 'solidity-standard-json-input',
            'contractname': artifact.fully_qualified_name,
            'compilerversion': f"v{build_info['solcLongVersion']}",
            # Misspelling is part of the Etherscan API
            'constructorArguements': encoded_args
        })

        result = str(response.get('result', ''))

        if _is_already_verified(result):
            return None

        if str(response.get('status')) != '1':
            raise VerificationError(
                f"Explorer rejected verification: {response.get('message')} - {result}"
            )

        return result

    async def _wait_for_verdict(self, session: aiohttp.ClientSession, guid: str) -> VerificationStatus:
        for _ in range(self.max_status_checks):
            await self.clock.sleep(self.poll_interval)

            response = await self._get(session, {
                'module': 'contract',
                'action': 'checkverifystatus',
                'guid': guid
            })
            result = str(response.get('result', ''))
            lowered = result.lower()

            if lowered.startswith('pass'):
                return VerificationStatus.VERIFIED

            if _is_already_verified(result):
                return VerificationStatus.ALREADY_VERIFIED

            if any(marker in lowered for marker in PENDING_RESULTS):
                logger.debug(f"Verification {guid}: {result}")
                continue

            raise VerificationError(f"Verification failed: {result}")

        raise VerificationError(
            f"Verification {guid} still pending after {self.max_status_checks} checks"
        )

    async def _get(self, session: aiohttp.ClientSession, params: Dict) -> Dict:
        params = dict(params, apikey=self.api_key)
        async with session.get(self.api_url, params=params) as response:
            return await self._read_json(response)

    async def _post(self, session: aiohttp.ClientSession, data: Dict) -> Dict:
        data = dict(data, apikey=self.api_key)
        async with session.post(self.api_url, data=data) as response:
            return await self._read_json(response)

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> Dict:
        if response.status != 200:
            raise VerificationError(f"Explorer returned HTTP {response.status}")

        try:
            data = await response.json(content_type=None)
        except json.JSONDecodeError as e:
            raise VerificationError(f"Explorer returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise VerificationError(
                f"Explorer returned unexpected payload: {type(data).__name__}"
            )

        return data


def encode_constructor_arguments(artifact: ContractArtifact, arguments: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments as hex without 0x prefix

    Raises:
        VerificationError: If the argument count does not match the ABI
    """
    inputs: List[Dict] = []
    for entry in artifact.abi:
        if entry.get('type') == 'constructor':
            inputs = entry.get('inputs', [])
            break

    if len(inputs) != len(arguments):
        raise VerificationError(
            f"{artifact.contract_name} constructor takes {len(inputs)} arguments, "
            f"got {len(arguments)}"
        )

    if not inputs:
        return ""

    types = [_abi_type(item) for item in inputs]
    return encode(types, list(arguments)).hex()


def _abi_type(item: Dict) -> str:
    abi_type = item['type']
    if abi_type.startswith('tuple'):
        inner = ','.join(_abi_type(component) for component in item['components'])
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def _is_already_verified(result: str) -> bool:
    lowered = result.lower()
    return any(marker in lowered for marker in ALREADY_VERIFIED_MARKERS)
