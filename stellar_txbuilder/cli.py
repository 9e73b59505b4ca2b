"""
Interactive Stellar transaction builder.

Builds an unsigned payment / create-account envelope for off-line signing,
or broadcasts an envelope that has already been signed.

    stellar-tx                      # fully interactive
    stellar-tx --network testnet --build --source G...
    stellar-tx --network mainnet --yes --broadcast < signed.xdr
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import IO, Callable, List, Optional

from stellar_sdk import Server

from . import __version__
from .broadcast import format_result_codes, submit_envelope
from .builder import CREATE_ACCOUNT, account_exists, build_transaction, choose_operation, format_details
from .config import MEMO_MODES, NETWORKS, NetworkConfig, Settings
from .errors import InvalidInputError, SubmissionRejectedError, TxBuilderError
from .friendbot import fund_account
from .prompts import Prompter
from .validation import is_valid_address

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

OPERATIONS = [
    ("build", "Build unsigned transaction"),
    ("broadcast", "Broadcast signed transaction"),
]


class UserCancelled(Exception):
    pass


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="stellar-tx",
        description="Build unsigned Stellar payment transactions or broadcast signed ones.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--network", choices=list(NETWORKS), help="Network to use (default: ask)")

    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--build", dest="operation", action="store_const", const="build",
                      help="Build an unsigned transaction")
    mode.add_argument("--broadcast", dest="operation", action="store_const", const="broadcast",
                      help="Broadcast a signed transaction read from stdin")

    ap.add_argument("--source", help="Source account public key (env: STELLAR_TX_SOURCE_ACCOUNT)")
    ap.add_argument("--timeout", type=int, help="Transaction validity window in seconds, 0 for none (default: 30)")
    ap.add_argument("--base-fee", type=int, help="Base fee in stroops (default: network preset)")
    ap.add_argument("--memo-mode", choices=MEMO_MODES, help="Memo input style (default: menu)")
    ap.add_argument("--no-auto-create", dest="auto_create", action="store_false", default=None,
                    help="Always use a payment operation, even for inactive destinations")
    ap.add_argument("--fund-source", action="store_true", help="Fund the source account with friendbot first")
    ap.add_argument("--details", action="store_true", help="Print a transaction summary to stderr")
    ap.add_argument("-y", "--yes", action="store_true", help="Skip the mainnet confirmation")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_environment()
    if args.network:
        settings.network = args.network
    if args.source:
        settings.source_account = args.source.strip()
    if args.timeout is not None:
        if args.timeout < 0:
            raise InvalidInputError("--timeout must be >= 0")
        settings.timeout = args.timeout
    if args.base_fee is not None:
        if args.base_fee < 100:
            raise InvalidInputError("--base-fee must be at least 100 stroops")
        settings.base_fee = args.base_fee
    if args.memo_mode:
        settings.memo_mode = args.memo_mode
    if args.auto_create is not None:
        settings.auto_create_account = args.auto_create
    if args.verbose:
        settings.log_level = "DEBUG"
    return settings


def setup_logging(level: str, stream: IO[str]) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format=LOG_FORMAT, stream=stream)


def select_network(prompter: Prompter, settings: Settings, assume_yes: bool = False) -> NetworkConfig:
    name = settings.network
    if not name:
        name = prompter.choose("Network:", [(key, key) for key in NETWORKS])
    network = settings.resolve_network(name)

    if network.is_public and not assume_yes:
        prompter.say(f"WARNING: {network.name} transactions move real funds.")
        if not prompter.confirm(f"Continue on {network.name}?"):
            raise UserCancelled
    return network


def run_build(
    prompter: Prompter,
    server: Server,
    network: NetworkConfig,
    settings: Settings,
    fund_source: bool = False,
    details: bool = False,
    stderr: Optional[IO[str]] = None,
) -> None:
    source = settings.source_account
    if source is None:
        source = prompter.ask_address("Source account: ")
    elif not is_valid_address(source):
        raise InvalidInputError(f"Configured source account '{source}' is not a valid public key.")

    if fund_source:
        fund_account(network, source)
        prompter.say(f"✓ Funded {source} via friendbot")

    destination = prompter.ask_address()
    exists = account_exists(server, destination)
    operation = choose_operation(exists, settings.auto_create_account)

    if operation == CREATE_ACCOUNT:
        prompter.say("Destination account is not active yet; using a create-account operation.")
        amount = prompter.ask_amount("Starting balance: ", minimum=settings.min_starting_balance)
    else:
        if not exists:
            prompter.say("Warning: destination account is not active; the payment will fail unless it is created first.")
        amount = prompter.ask_amount("Amount: ")

    memo = prompter.ask_memo(settings.memo_mode)

    tx_data = build_transaction(
        server,
        network,
        source,
        destination,
        amount,
        operation=operation,
        memo=memo,
        timeout=settings.timeout,
    )
    print(tx_data.xdr, file=prompter.stdout)
    if details:
        print(format_details(tx_data), file=stderr or sys.stderr)


def run_broadcast(prompter: Prompter, server: Server, network: NetworkConfig) -> None:
    xdr = prompter.ask("Signed transaction XDR: ")
    result = submit_envelope(server, xdr, network.passphrase)
    prompter.say("Transaction successful!")
    prompter.say(f"Hash:   {result.hash}")
    prompter.say(f"Ledger: {result.ledger}")


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
    stderr: Optional[IO[str]] = None,
    server_factory: Callable[[str], Server] = Server,
) -> int:
    args = parse_args(argv)
    stderr = stderr or sys.stderr

    try:
        settings = load_settings(args)
    except TxBuilderError as e:
        print(f"Error: {e}", file=stderr)
        return 1
    setup_logging(settings.log_level, stderr)

    with Prompter(stdin, stdout) as prompter:
        try:
            network = select_network(prompter, settings, assume_yes=args.yes)
            logger.debug("Using %s at %s", network.name, network.horizon_url)
            server = server_factory(network.horizon_url)

            operation = args.operation or prompter.choose("Operation:", OPERATIONS)
            if operation == "build":
                run_build(
                    prompter,
                    server,
                    network,
                    settings,
                    fund_source=args.fund_source,
                    details=args.details,
                    stderr=stderr,
                )
            else:
                run_broadcast(prompter, server, network)
        except (UserCancelled, EOFError, KeyboardInterrupt):
            prompter.say()
            prompter.say("Cancelled.")
            return 0
        except SubmissionRejectedError as e:
            prompter.say(format_result_codes(e.result_codes))
            return 1
        except TxBuilderError as e:
            print(f"Error: {e}", file=stderr)
            return 1
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            print(f"Error: {e}", file=stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
