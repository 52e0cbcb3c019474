"""
Trello to GitHub Migration Tool

Imports a Trello board into GitHub Issues and a GitHub Project, mapping
labels, lists, milestones, statuses and members through a map file.
"""

from __future__ import annotations

from .cli import main
from .exceptions import MigrationCancelledError, MigrationError, TransportError
from .github_target import GitHubTarget
from .orchestrator import MigrationResult, Migrator, plan_and_run
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "GitHubTarget",
    "MigrationCancelledError",
    "MigrationError",
    "MigrationResult",
    "Migrator",
    "TransportError",
    "main",
    "plan_and_run",
    "setup_logging",
]
