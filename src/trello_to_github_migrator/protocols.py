"""Protocols for the GitHub side of the migration.

The resolvers and the orchestrator only talk to GitHub through
`TargetClient`, so they can be exercised against mocks and so the
PyGithub-backed implementation stays the only place that knows about
REST endpoints and GraphQL documents.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Protocol

if TYPE_CHECKING:
    from .models import (
        CreatedIssue,
        ProjectInfo,
        ProjectItemsPage,
        TargetLabel,
        TargetMilestone,
        TargetUser,
    )

OwnerType = Literal["organization", "user"]


class Identifiable(Protocol):
    """Anything a map reference can be resolved against.

    Candidates may additionally carry a `number` (milestones do); the
    matcher reads it when present.
    """

    @property
    def id(self) -> int | str: ...

    @property
    def name(self) -> str: ...


class TargetClient(Protocol):
    """Operations the migration needs from GitHub.

    Every method is a single synchronous round-trip. Failures other than
    the two documented signals surface as `TransportError`.
    """

    def list_labels(self) -> list[TargetLabel]:
        """Return all labels of the target repository."""
        ...

    def list_milestones(self) -> list[TargetMilestone]:
        """Return the open milestones of the target repository."""
        ...

    def create_label(self, name: str, color: str | None) -> None:
        """Create a label.

        Raises:
            LabelAlreadyExistsError: If GitHub already has a label with that name
        """
        ...

    def get_user(self, username: str) -> TargetUser:
        """Look up a GitHub account.

        Raises:
            UserNotFoundError: If no such user exists
        """
        ...

    def get_project(self, owner_type: OwnerType, owner: str, number: int) -> ProjectInfo:
        """Fetch a project's node ID, title and Status field options."""
        ...

    def create_issue(
        self,
        title: str,
        body: str,
        labels: list[str],
        assignees: list[str],
        milestone_number: int | None = None,
    ) -> CreatedIssue:
        """Create an issue and return its number and node ID."""
        ...

    def create_comment(self, issue_number: int, body: str) -> None:
        """Add a comment to an issue."""
        ...

    def add_to_project(self, project_id: str, content_id: str) -> str:
        """Add an issue (by node ID) to a project and return the item ID."""
        ...

    def set_item_status(self, project_id: str, item_id: str, field_id: str, option_id: str) -> None:
        """Set a project item's single-select field to the given option."""
        ...

    def get_project_items_page(
        self,
        owner_type: OwnerType,
        owner: str,
        number: int,
        *,
        first: int,
        after: str | None = None,
    ) -> ProjectItemsPage:
        """Fetch one page of project items linked to issues."""
        ...
