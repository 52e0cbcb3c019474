"""
Utility functions for the Trello to GitHub migration tool.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

_PASS_PATH_PATTERN = re.compile(r"[A-Za-z0-9_-]+(?:/[A-Za-z0-9_-]+)*")


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass entry does not exist."""


class PassphraseRequiredError(PassError):
    """Raised when a GPG passphrase is required but cannot be read."""


def setup_logging(*, verbose: bool = False) -> None:
    """Configure logging for the migration process."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler("migration.log", mode="a")],
    )


def join_words(items: Sequence[str]) -> str:
    """Join items as an English list: "a", "a and b", "a, b, and c"."""
    if len(items) <= 2:
        return " and ".join(items)
    return ", ".join(items[:-1]) + f", and {items[-1]}"


def _run_pass(pass_path: str, *, passphrase: str | None = None) -> subprocess.CompletedProcess[str]:
    env = None
    if passphrase is not None:
        env = os.environ.copy() | {"PASSWORD_STORE_GPG_OPTS": "--pinentry-mode=loopback --passphrase-fd 0"}
    return subprocess.run(  # noqa: S603
        ["pass", pass_path], input=passphrase, capture_output=True, text=True, check=True, env=env
    )


def _describe_failure(pass_path: str, error: subprocess.CalledProcessError) -> str:
    return (
        f"Failed to get value from pass at '{pass_path}'.\n"
        f"Output: {error.stdout.strip()}\n"
        f"Error: {error.stderr.strip()}\n"
        f"Return code: {error.returncode}"
    )


def get_pass_value(pass_path: str) -> str:
    """Read a secret from the `pass` password store.

    Raises:
        ValueError: If the path contains characters pass does not accept
        InvalidPassPathError: If there is no entry at the path
        PassphraseRequiredError: If GPG needs a passphrase that cannot be read
        PassError: For any other pass failure
    """
    if not _PASS_PATH_PATTERN.fullmatch(pass_path):
        msg = f"Invalid pass path: {pass_path}"
        raise ValueError(msg)

    try:
        return _run_pass(pass_path).stdout.strip()
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.lower()
        if e.returncode == 1 and "not in the password store" in stderr:
            msg = f"Pass path '{pass_path}' not found or invalid."
            raise InvalidPassPathError(msg) from e
        if e.returncode != 2 or "public key decryption failed" not in stderr:
            raise PassError(_describe_failure(pass_path, e)) from e

    # GPG agent could not unlock the key on its own; ask once and feed it through loopback.
    try:
        passphrase = input("Enter passphrase for GPG key used by pass: ")
    except EOFError as e:
        msg = "Passphrase input was interrupted. Please run the command in an interactive session."
        raise PassphraseRequiredError(msg) from e

    try:
        return _run_pass(pass_path, passphrase=passphrase).stdout.strip()
    except subprocess.CalledProcessError as e:
        raise PassphraseRequiredError(_describe_failure(pass_path, e)) from e
