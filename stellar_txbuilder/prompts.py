"""Interactive prompts with validate-and-retry loops."""

from __future__ import annotations

import sys
from decimal import Decimal
from typing import IO, Callable, List, Optional, Sequence, Tuple, TypeVar

from stellar_sdk import Memo

from .errors import InvalidInputError
from .validation import build_memo, infer_memo, is_valid_address, parse_amount

T = TypeVar("T")

MEMO_MENU: List[Tuple[str, str]] = [
    ("none", "No memo"),
    ("text", "Text (up to 28 bytes)"),
    ("id", "ID (unsigned 64-bit integer)"),
    ("hash", "Hash (64 hex characters)"),
    ("return", "Return hash (64 hex characters)"),
]


class Prompter:
    """Reads answers from one input stream for the lifetime of the process.

    Use as a context manager so the stream is closed on every exit path.
    """

    def __init__(self, stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.closed = False

    def __enter__(self) -> "Prompter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.stdin.close()

    def say(self, message: str = "") -> None:
        print(message, file=self.stdout)

    def ask(self, prompt: str, required: bool = True) -> str:
        while True:
            self.stdout.write(prompt)
            self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                raise EOFError
            value = line.strip()
            if required and not value:
                self.say("This field is required. Please enter a value.")
                continue
            return value

    def ask_valid(self, prompt: str, convert: Callable[[str], T], required: bool = True) -> T:
        """Ask until ``convert`` accepts the answer."""
        while True:
            value = self.ask(prompt, required=required)
            try:
                return convert(value)
            except InvalidInputError as e:
                self.say(f"Invalid input: {e}")

    def choose(self, title: str, options: Sequence[Tuple[str, str]]) -> str:
        """Numbered menu; returns the key of the chosen option."""
        self.say(title)
        for i, (_, label) in enumerate(options, start=1):
            self.say(f"  {i}. {label}")
        keys = [key for key, _ in options]
        while True:
            answer = self.ask(f"Select [1-{len(options)}]: ").lower()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return keys[int(answer) - 1]
            if answer in keys:
                return answer
            self.say(f"Please enter a number between 1 and {len(options)}.")

    def confirm(self, prompt: str) -> bool:
        while True:
            answer = self.ask(f"{prompt} (yes/no): ").lower()
            if answer in ("yes", "y"):
                return True
            if answer in ("no", "n"):
                return False
            self.say("Please enter 'yes' or 'no'.")

    def ask_address(self, prompt: str = "Destination address: ") -> str:
        while True:
            address = self.ask(prompt)
            if is_valid_address(address):
                return address
            self.say("Invalid address. Expected a 56 character public key starting with 'G'.")

    def ask_amount(self, prompt: str = "Amount: ", minimum: Optional[Decimal] = None) -> str:
        return self.ask_valid(prompt, lambda value: parse_amount(value, minimum=minimum))

    def ask_memo(self, mode: str = "menu") -> Memo:
        if mode == "infer":
            return self.ask_valid("Memo (optional): ", infer_memo, required=False)

        memo_type = self.choose("Memo type:", MEMO_MENU)
        if memo_type == "none":
            return build_memo("none")
        return self.ask_valid(
            f"Memo {memo_type} value: ",
            lambda value: build_memo(memo_type, value),
        )
