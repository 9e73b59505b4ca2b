import json
import os
from unittest.mock import MagicMock

import pytest
from stellar_sdk import Account, Keypair, exceptions
from stellar_sdk.client.response import Response

from stellar_txbuilder.config import NETWORKS

SOURCE_SEQUENCE = 123456789


def horizon_response(status_code, payload):
    """Fake Horizon HTTP response for building SDK exceptions"""
    return Response(
        status_code=status_code,
        text=json.dumps(payload),
        headers={},
        url="https://horizon-testnet.stellar.org/",
    )


def not_found_error():
    return exceptions.NotFoundError(
        horizon_response(404, {"title": "Resource Missing", "status": 404})
    )


def bad_request_error(extras=None):
    payload = {"title": "Transaction Failed", "status": 400}
    if extras is not None:
        payload["extras"] = extras
    return exceptions.BadRequestError(horizon_response(400, payload))


@pytest.fixture
def testnet():
    """Fixture providing the testnet preset"""
    return NETWORKS["testnet"]


@pytest.fixture
def source_keypair():
    return Keypair.random()


@pytest.fixture
def destination():
    """Fixture providing a random valid destination address"""
    return Keypair.random().public_key


@pytest.fixture
def make_server(source_keypair):
    """Build a mocked Horizon server.

    ``existing`` lists the account ids that load successfully; the source
    account is always present with SOURCE_SEQUENCE.
    """

    def _make(existing=(), source_exists=True, sequence=SOURCE_SEQUENCE):
        known = set(existing)

        def load_account(account_id):
            if account_id == source_keypair.public_key:
                if not source_exists:
                    raise not_found_error()
                return Account(account_id, sequence)
            if account_id in known:
                return Account(account_id, 1)
            raise not_found_error()

        server = MagicMock()
        server.load_account.side_effect = load_account
        return server

    return _make


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep STELLAR_TX_* settings from the developer's shell out of tests"""
    for key in list(os.environ):
        if key.startswith("STELLAR_TX_"):
            monkeypatch.delenv(key, raising=False)
