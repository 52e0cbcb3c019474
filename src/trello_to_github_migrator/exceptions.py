"""
Custom exception classes for the Trello to GitHub migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class InputFormatError(MigrationError):
    """Raised when a Trello export or map file does not match the expected shape."""


class TransportError(MigrationError):
    """Raised when a GitHub call fails for a reason the migration does not tolerate."""


class LabelAlreadyExistsError(MigrationError):
    """Raised when creating a label that GitHub already has."""


class UserNotFoundError(MigrationError):
    """Raised when a GitHub user lookup returns 404."""


class MigrationCancelledError(MigrationError):
    """Raised when the operator declines to continue after a warning."""
