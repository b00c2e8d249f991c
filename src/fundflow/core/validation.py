from __future__ import annotations

import logging
import re

from fundflow.config import settings
from fundflow.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_EVM_TX_HASH_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


def validate_address(address: object, network: str = settings.DEFAULT_NETWORK) -> str:
    """
    Reject empty / non-string addresses. On EVM networks a malformed address
    only warns, so partial identifiers still work against test ledgers.
    """
    if not isinstance(address, str) or not address.strip():
        raise InvalidInputError("Address must be a non-empty string")

    if network in settings.EVM_NETWORKS and len(address) > 5 and not _EVM_ADDRESS_RE.match(address):
        logger.warning("Address %s may not be a valid %s address", address, network)
    return address


def validate_tx_hash(tx_hash: object, network: str = settings.DEFAULT_NETWORK) -> str:
    if not isinstance(tx_hash, str) or not tx_hash.strip():
        raise InvalidInputError("Transaction hash must be a non-empty string")

    if network in settings.EVM_NETWORKS and len(tx_hash) > 5 and not _EVM_TX_HASH_RE.match(tx_hash):
        logger.warning("Transaction hash %s may not be a valid %s transaction hash", tx_hash, network)
    return tx_hash


def validate_limit(name: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{name} must be an integer")
    if value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum} (got {value})")
    return value
