"""
Deployment Data Types
Signer, deployment result and verification request/outcome
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from eth_account.signers.local import LocalAccount


@dataclass(frozen=True)
class Signer:
    """Account able to authorize a transaction."""

    address: str
    # None when the node manages the key (unlocked dev accounts)
    account: Optional[LocalAccount] = field(default=None, repr=False, compare=False)

    @property
    def is_local(self) -> bool:
        return self.account is not None


@dataclass(frozen=True)
class DeploymentResult:
    """Confirmed contract creation."""

    contract_name: str
    contract_address: str
    transaction_hash: str
    transaction_receipt: Any = field(repr=False, compare=False)
    deployer: str
    network: str
    constructor_arguments: Tuple[Any, ...] = ()

    @property
    def block_number(self) -> Optional[int]:
        try:
            return self.transaction_receipt['blockNumber']
        except (KeyError, TypeError):
            return None


@dataclass(frozen=True)
class VerificationRequest:
    """Source verification request handed to the block explorer."""

    address: str
    constructor_arguments: Tuple[Any, ...] = ()


class VerificationStatus(Enum):
    SKIPPED = "skipped"
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationOutcome:
    """
    Result of a verification attempt

    The deployer never raises on verification; callers inspect ``ok``
    and decide whether to log and continue.
    """

    status: VerificationStatus
    request: Optional[VerificationRequest] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is not VerificationStatus.FAILED

    @property
    def attempted(self) -> bool:
        return self.status is not VerificationStatus.SKIPPED

    @classmethod
    def skipped(cls) -> "VerificationOutcome":
        return cls(status=VerificationStatus.SKIPPED)

    @classmethod
    def failed(cls, request: VerificationRequest, error: BaseException) -> "VerificationOutcome":
        return cls(status=VerificationStatus.FAILED, request=request, error=error)
