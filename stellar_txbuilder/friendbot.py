"""Fund test accounts through a network's friendbot."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import NetworkConfig
from .errors import InvalidInputError, NetworkError

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 30


def make_session() -> requests.Session:
    s = requests.Session()
    retry = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


def fund_account(
    network: NetworkConfig,
    account_id: str,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """Ask friendbot to create and fund ``account_id``. Returns the Horizon response."""
    if not network.friendbot_url:
        raise InvalidInputError(f"Network {network.name} has no friendbot.")

    session = session or make_session()
    logger.info("Funding %s via %s", account_id, network.friendbot_url)
    try:
        r = session.get(network.friendbot_url, params={"addr": account_id}, timeout=TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise NetworkError(f"Friendbot request failed: {e}") from e

    if r.status_code != 200:
        raise NetworkError(f"Friendbot returned HTTP {r.status_code}: {r.text[:300]}")
    return r.json()
