"""Transaction assembly against a Horizon server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from stellar_sdk import Asset, Memo, NoneMemo, Server, TransactionBuilder, exceptions

from .config import NetworkConfig
from .errors import AccountNotFoundError, NetworkError
from .validation import describe_memo

logger = logging.getLogger(__name__)

PAYMENT = "payment"
CREATE_ACCOUNT = "create_account"


@dataclass
class TransactionData:
    xdr: str
    network_id: bytes
    details: Dict[str, Any]


def account_exists(server: Server, account_id: str) -> bool:
    """Return True if ``account_id`` is active on the network."""
    try:
        server.load_account(account_id)
    except exceptions.NotFoundError:
        logger.debug("Account %s not found", account_id)
        return False
    except exceptions.SdkError as e:
        raise NetworkError(f"Failed to check account {account_id}: {e}") from e
    return True


def choose_operation(destination_exists: bool, auto_create_account: bool) -> str:
    if auto_create_account and not destination_exists:
        return CREATE_ACCOUNT
    return PAYMENT


def build_transaction(
    server: Server,
    network: NetworkConfig,
    source_account_id: str,
    destination: str,
    amount: str,
    operation: str = PAYMENT,
    memo: Optional[Memo] = None,
    timeout: int = 30,
) -> TransactionData:
    """Load the source account and return the unsigned envelope.

    ``amount`` must already be formatted to 7 decimals. A ``timeout`` of 0
    builds a transaction with no expiration.
    """
    try:
        source_account = server.load_account(source_account_id)
    except exceptions.NotFoundError:
        raise AccountNotFoundError(source_account_id, network.name) from None
    except exceptions.SdkError as e:
        raise NetworkError(f"Failed to build transaction: {e}") from e

    sequence = source_account.sequence + 1
    logger.debug("Loaded %s at sequence %s", source_account_id, source_account.sequence)

    try:
        builder = TransactionBuilder(
            source_account=source_account,
            network_passphrase=network.passphrase,
            base_fee=network.base_fee,
        )
        if operation == CREATE_ACCOUNT:
            builder.append_create_account_op(destination=destination, starting_balance=amount)
        else:
            builder.append_payment_op(destination=destination, asset=Asset.native(), amount=amount)

        if memo is not None and not isinstance(memo, NoneMemo):
            builder.add_memo(memo)

        if timeout > 0:
            builder.set_timeout(timeout)
        else:
            builder.add_time_bounds(0, 0)

        envelope = builder.build()
        xdr = envelope.to_xdr()
    except exceptions.SdkError as e:
        raise NetworkError(f"Failed to build transaction: {e}") from e
    except ValueError as e:
        raise NetworkError(f"Failed to build transaction: {e}") from e

    logger.info("Built %s transaction for %s at sequence %s", operation, destination, sequence)

    return TransactionData(
        xdr=xdr,
        network_id=network.network_id,
        details={
            "source": source_account_id,
            "destination": destination,
            "operation": operation,
            "amount": amount,
            "memo": describe_memo(memo) if memo is not None else None,
            "fee": network.base_fee,
            "sequence": str(sequence),
            "timeout": timeout,
        },
    )


def format_details(tx_data: TransactionData) -> str:
    d = tx_data.details
    lines = [
        "=" * 60,
        "TRANSACTION SUMMARY",
        "=" * 60,
        f"From:      {d['source']}",
        f"To:        {d['destination']}",
        f"Operation: {d['operation']}",
        f"Amount:    {d['amount']}",
        f"Memo:      {d['memo'] or '(none)'}",
        f"Fee:       {d['fee']} stroops",
        f"Sequence:  {d['sequence']}",
        f"Timeout:   {d['timeout'] or 'none'}",
        f"Network:   {tx_data.network_id.hex()}",
        "=" * 60,
    ]
    return "\n".join(lines)
