"""
Network presets and runtime settings.

Settings are read from the environment (``STELLAR_TX_*``) and can be
overridden by command-line options in ``cli``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from stellar_sdk import Network

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

ENV_PREFIX = "STELLAR_TX_"

DEFAULT_TIMEOUT = 30
DEFAULT_MIN_STARTING_BALANCE = Decimal("1")
MEMO_MODES = ("menu", "infer")


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    horizon_url: str
    passphrase: str
    base_fee: int = 100
    friendbot_url: Optional[str] = None
    is_public: bool = False

    @property
    def network_id(self) -> bytes:
        """SHA-256 of the passphrase, the hash signers commit to."""
        return Network(self.passphrase).network_id()


NETWORKS: Dict[str, NetworkConfig] = {
    "testnet": NetworkConfig(
        name="testnet",
        horizon_url="https://horizon-testnet.stellar.org",
        passphrase=Network.TESTNET_NETWORK_PASSPHRASE,
        friendbot_url="https://friendbot.stellar.org",
    ),
    "mainnet": NetworkConfig(
        name="mainnet",
        horizon_url="https://horizon.stellar.org",
        passphrase=Network.PUBLIC_NETWORK_PASSPHRASE,
        is_public=True,
    ),
    "pi-testnet": NetworkConfig(
        name="pi-testnet",
        horizon_url="https://api.testnet.minepi.com",
        passphrase="Pi Testnet",
        base_fee=1_000_000,
    ),
    "pi-mainnet": NetworkConfig(
        name="pi-mainnet",
        horizon_url="https://api.mainnet.minepi.com",
        passphrase="Pi Network",
        base_fee=1_000_000,
        is_public=True,
    ),
}


def get_network(name: str) -> NetworkConfig:
    try:
        return NETWORKS[name.strip().lower()]
    except KeyError:
        choices = ", ".join(NETWORKS)
        raise InvalidInputError(f"Unknown network '{name}'. Choose one of: {choices}") from None


def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise InvalidInputError(f"{ENV_PREFIX}{name} must be true or false, got '{value}'")


def _parse_int(name: str, value: str, minimum: int = 0) -> int:
    try:
        number = int(value)
    except ValueError:
        raise InvalidInputError(f"{ENV_PREFIX}{name} must be an integer, got '{value}'") from None
    if number < minimum:
        raise InvalidInputError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {number}")
    return number


@dataclass
class Settings:
    network: Optional[str] = None
    source_account: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT
    base_fee: Optional[int] = None
    memo_mode: str = "menu"
    auto_create_account: bool = True
    min_starting_balance: Decimal = field(default=DEFAULT_MIN_STARTING_BALANCE)
    horizon_url: Optional[str] = None
    log_level: str = "WARNING"

    @classmethod
    def from_environment(cls) -> "Settings":
        settings = cls()

        network = _env("NETWORK")
        if network:
            settings.network = get_network(network).name

        settings.source_account = _env("SOURCE_ACCOUNT")

        timeout = _env("TIMEOUT")
        if timeout is not None:
            settings.timeout = _parse_int("TIMEOUT", timeout)

        base_fee = _env("BASE_FEE")
        if base_fee is not None:
            settings.base_fee = _parse_int("BASE_FEE", base_fee, minimum=100)

        memo_mode = _env("MEMO_MODE")
        if memo_mode is not None:
            settings.memo_mode = memo_mode.lower()
            if settings.memo_mode not in MEMO_MODES:
                raise InvalidInputError(
                    f"{ENV_PREFIX}MEMO_MODE must be one of {', '.join(MEMO_MODES)}, got '{memo_mode}'"
                )

        auto_create = _env("AUTO_CREATE")
        if auto_create is not None:
            settings.auto_create_account = _parse_bool("AUTO_CREATE", auto_create)

        min_balance = _env("MIN_STARTING_BALANCE")
        if min_balance is not None:
            try:
                minimum = Decimal(min_balance)
            except InvalidOperation:
                minimum = None
            if minimum is None or not minimum.is_finite() or minimum <= 0:
                raise InvalidInputError(
                    f"{ENV_PREFIX}MIN_STARTING_BALANCE must be a positive number, got '{min_balance}'"
                )
            settings.min_starting_balance = minimum

        settings.horizon_url = _env("HORIZON_URL")
        settings.log_level = (_env("LOG_LEVEL") or settings.log_level).upper()

        logger.debug("Loaded settings from environment: %s", settings)
        return settings

    def resolve_network(self, name: Optional[str] = None) -> NetworkConfig:
        """Return the preset for ``name`` (or the configured network) with overrides applied."""
        network = get_network(name or self.network or "testnet")
        overrides = {}
        if self.horizon_url:
            overrides["horizon_url"] = self.horizon_url
        if self.base_fee is not None:
            overrides["base_fee"] = self.base_fee
        if overrides:
            network = replace(network, **overrides)
        return network
