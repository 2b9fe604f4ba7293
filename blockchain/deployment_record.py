"""
Deployment Record
Append-only JSON ledger of deployments, one file per network
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .models import DeploymentResult, VerificationOutcome


def load_deployment_records(record_path: Path) -> List[Dict[str, Any]]:
    """
    Load existing records or return an empty list

    Args:
        record_path: Path to the network's deployments JSON file

    Returns:
        List of record dicts, oldest first
    """
    try:
        with open(record_path) as f:
            records = json.load(f)
    except FileNotFoundError:
        return []

    if not isinstance(records, list):
        raise ValueError(f"Deployment record {record_path} is not a JSON list")

    return records


def append_deployment_record(
    record_path: Path,
    result: DeploymentResult,
    outcome: Optional[VerificationOutcome] = None
) -> Dict[str, Any]:
    """
    Append a deployment to the record file

    Creates parent directories if they don't exist. Earlier entries are
    kept as they are.

    Returns:
        The record that was written
    """
    record_path = Path(record_path)
    records = load_deployment_records(record_path)

    record = {
        'contract': result.contract_name,
        'address': result.contract_address,
        'transaction_hash': result.transaction_hash,
        'deployer': result.deployer,
        'network': result.network,
        'block_number': result.block_number,
        'constructor_arguments': [str(arg) for arg in result.constructor_arguments],
        'timestamp': int(time.time()),
        'verification': outcome.status.value if outcome else None
    }
    records.append(record)

    record_path.parent.mkdir(parents=True, exist_ok=True)
    with open(record_path, 'w') as f:
        json.dump(records, f, indent=2)

    logger.debug(f"Recorded deployment in {record_path}")
    return record
