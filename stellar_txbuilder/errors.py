"""Error types raised by the transaction builder."""

from typing import Any, Dict, Optional


class TxBuilderError(Exception):
    """Base class for every error the CLI reports to the user."""


class InvalidInputError(TxBuilderError):
    """Address, amount, memo or envelope failed validation."""


class AccountNotFoundError(TxBuilderError):
    """The source account does not exist on the selected network."""

    def __init__(self, account_id: str, network_name: str):
        super().__init__(
            f"Source account {account_id} not found on {network_name}. Fund it first!"
        )
        self.account_id = account_id
        self.network_name = network_name


class NetworkError(TxBuilderError):
    """A Horizon request failed."""


class SubmissionRejectedError(TxBuilderError):
    """Horizon rejected the transaction with structured result codes."""

    def __init__(self, result_codes: Dict[str, Any], message: Optional[str] = None):
        super().__init__(message or "Transaction failed with result codes")
        self.result_codes = result_codes
