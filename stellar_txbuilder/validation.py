"""Field validation for addresses, amounts and memos."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from stellar_sdk import HashMemo, IdMemo, Keypair, Memo, NoneMemo, ReturnHashMemo, TextMemo
from stellar_sdk.exceptions import Ed25519PublicKeyInvalidError

from .errors import InvalidInputError

# 1 unit = 10^7 stroops
STROOP = Decimal("0.0000001")
MAX_AMOUNT = Decimal("922337203685.4775807")

MAX_TEXT_MEMO_BYTES = 28
MAX_ID_MEMO = 2**64 - 1
HASH_MEMO_HEX_LENGTH = 64

MEMO_TYPES = ("none", "text", "id", "hash", "return")

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_DIGITS_RE = re.compile(r"^[0-9]+$")


def is_valid_address(address: str) -> bool:
    """Check that ``address`` is a well-formed G... account id."""
    if not isinstance(address, str) or not address:
        return False
    try:
        Keypair.from_public_key(address)
    except (Ed25519PublicKeyInvalidError, ValueError, TypeError):
        return False
    return True


def format_amount(amount: Union[str, Decimal]) -> str:
    """Format to the network's 7 decimal places."""
    return format(Decimal(amount).quantize(STROOP, rounding=ROUND_HALF_UP), "f")


def parse_amount(amount_str: str, minimum: Optional[Decimal] = None) -> str:
    """Validate a user-entered amount and return it formatted to 7 decimals.

    ``minimum`` applies to create-account operations, where the new account
    must start with at least the reserve balance.
    """
    text = (amount_str or "").strip()
    if not text:
        raise InvalidInputError("Amount is required.")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidInputError(f"Invalid amount '{text}': not a number.") from None

    if not amount.is_finite():
        raise InvalidInputError(f"Invalid amount '{text}': must be a finite number.")
    if amount <= 0:
        raise InvalidInputError(f"Invalid amount '{text}': must be greater than zero.")
    if amount > MAX_AMOUNT:
        raise InvalidInputError(f"Invalid amount '{text}': must not exceed {MAX_AMOUNT}.")

    formatted = format_amount(amount)
    if Decimal(formatted) <= 0:
        raise InvalidInputError(f"Invalid amount '{text}': smaller than one stroop ({STROOP}).")

    if minimum is not None and Decimal(formatted) < minimum:
        raise InvalidInputError(
            f"Starting balance must be at least {format_amount(minimum)} to create an account."
        )
    return formatted


def _hash_bytes(value: str, kind: str) -> bytes:
    if len(value) != HASH_MEMO_HEX_LENGTH or not _HEX_RE.match(value):
        raise InvalidInputError(
            f"{kind} memo must be exactly {HASH_MEMO_HEX_LENGTH} hex characters (32 bytes), "
            f"got {len(value)} characters."
        )
    return bytes.fromhex(value)


def build_memo(memo_type: str, value: str = "") -> Memo:
    """Validate ``value`` for ``memo_type`` and return the SDK memo object."""
    memo_type = (memo_type or "none").strip().lower()
    value = value or ""

    if memo_type == "none":
        return NoneMemo()

    if memo_type == "text":
        size = len(value.encode("utf-8"))
        if size > MAX_TEXT_MEMO_BYTES:
            raise InvalidInputError(
                f"Text memo must be at most {MAX_TEXT_MEMO_BYTES} bytes (UTF-8), got {size}."
            )
        return TextMemo(value)

    if memo_type == "id":
        value = value.strip()
        if not _DIGITS_RE.match(value):
            raise InvalidInputError(f"ID memo must be an integer between 0 and {MAX_ID_MEMO}.")
        memo_id = int(value)
        if memo_id > MAX_ID_MEMO:
            raise InvalidInputError(f"ID memo must be an integer between 0 and {MAX_ID_MEMO}.")
        return IdMemo(memo_id)

    if memo_type == "hash":
        return HashMemo(_hash_bytes(value.strip(), "Hash"))

    if memo_type == "return":
        return ReturnHashMemo(_hash_bytes(value.strip(), "Return"))

    raise InvalidInputError(f"Unknown memo type '{memo_type}'. Choose one of: {', '.join(MEMO_TYPES)}")


def infer_memo(value: str) -> Memo:
    """Pick the memo type from the shape of the input.

    Empty means no memo, up to 19 digits is an ID memo, anything else is text.
    """
    value = (value or "").strip()
    if not value:
        return NoneMemo()
    if _DIGITS_RE.match(value) and len(value) <= 19:
        return build_memo("id", value)
    return build_memo("text", value)


def describe_memo(memo: Memo) -> Optional[str]:
    """Human readable memo for summaries, None when there is no memo."""
    if isinstance(memo, TextMemo):
        return f"text:{memo.memo_text.decode('utf-8')}"
    if isinstance(memo, IdMemo):
        return f"id:{memo.memo_id}"
    if isinstance(memo, HashMemo):
        return f"hash:{memo.memo_hash.hex()}"
    if isinstance(memo, ReturnHashMemo):
        return f"return:{memo.memo_return.hex()}"
    return None
