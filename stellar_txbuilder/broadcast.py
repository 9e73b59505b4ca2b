"""Submit a signed envelope to Horizon."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from stellar_sdk import Server, TransactionEnvelope, exceptions

from .errors import InvalidInputError, NetworkError, SubmissionRejectedError

logger = logging.getLogger(__name__)


@dataclass
class SubmitResult:
    hash: str
    ledger: Any


def decode_envelope(xdr: str, network_passphrase: str) -> TransactionEnvelope:
    xdr = (xdr or "").strip()
    if not xdr:
        raise InvalidInputError("A signed transaction envelope is required.")
    try:
        return TransactionEnvelope.from_xdr(xdr, network_passphrase)
    except Exception as e:
        raise InvalidInputError(f"Could not decode transaction envelope: {e}") from e


def submit_envelope(server: Server, xdr: str, network_passphrase: str) -> SubmitResult:
    envelope = decode_envelope(xdr, network_passphrase)
    if not envelope.signatures:
        logger.warning("Submitting an envelope without signatures")

    try:
        response: Dict[str, Any] = server.submit_transaction(envelope)
    except exceptions.BadRequestError as e:
        result_codes = (e.extras or {}).get("result_codes")
        if result_codes:
            raise SubmissionRejectedError(result_codes) from e
        raise NetworkError(f"Transaction submission failed: {e.message}") from e
    except exceptions.BaseHorizonError as e:
        raise NetworkError(f"Transaction submission failed: {e.message}") from e
    except exceptions.SdkError as e:
        raise NetworkError(f"Transaction submission failed: {e}") from e

    logger.info("Transaction %s included in ledger %s", response.get("hash"), response.get("ledger"))
    return SubmitResult(hash=response.get("hash", "N/A"), ledger=response.get("ledger", "N/A"))


def format_result_codes(result_codes: Dict[str, Any]) -> str:
    lines = ["Transaction failed with result codes:"]
    lines.append(f"  transaction: {result_codes.get('transaction', 'N/A')}")
    operations = result_codes.get("operations")
    if operations:
        lines.append(f"  operations:  {', '.join(str(op) for op in operations)}")
    for key, value in result_codes.items():
        if key not in ("transaction", "operations"):
            lines.append(f"  {key}: {value}")
    return "\n".join(lines)
