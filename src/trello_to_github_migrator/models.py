"""Data models shared by the resolvers, the plan, and the GitHub target.

Target-side records mirror what GitHub returns for labels, milestones and
Projects (v2). Resolution results are small tagged variants: every consumer
matches on the concrete class and ends with `assert_never`, so adding a
variant breaks loudly instead of being skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas import Reference, TrelloLabel, TrelloList


# --- GitHub snapshot ---


@dataclass(frozen=True)
class TargetLabel:
    id: int
    name: str
    color: str = ""


@dataclass(frozen=True)
class TargetMilestone:
    id: int
    number: int
    title: str

    @property
    def name(self) -> str:
        return self.title


@dataclass(frozen=True)
class StatusOption:
    """One option of a project's single-select Status field.

    Color is one of GitHub's named colors (BLUE, GRAY, GREEN, ...).
    """

    id: str
    name: str
    color: str = ""


@dataclass(frozen=True)
class ProjectInfo:
    id: str  # GraphQL node ID
    number: int
    title: str
    status_field_id: str
    status_options: list[StatusOption] = field(default_factory=list)


@dataclass(frozen=True)
class TargetUser:
    login: str
    id: int


@dataclass(frozen=True)
class TargetSnapshot:
    """GitHub state fetched once at the start of a run.

    Never refreshed: every resolution decision is made against this copy.
    """

    labels: list[TargetLabel]
    milestones: list[TargetMilestone]
    project: ProjectInfo | None = None


@dataclass(frozen=True)
class CreatedIssue:
    number: int
    node_id: str


@dataclass(frozen=True)
class ExistingProjectItem:
    id: str
    issue_number: int
    issue_title: str
    current_status: str | None


@dataclass(frozen=True)
class ProjectItemsPage:
    items: list[ExistingProjectItem]
    end_cursor: str | None
    has_next_page: bool


# --- Label resolution ---


@dataclass(frozen=True)
class SkippedLabel:
    """Trello label with no map rule; it is not transferred."""

    source: TrelloLabel


@dataclass(frozen=True)
class LabelToCreate:
    source: TrelloLabel
    name: str
    color: str | None = None


@dataclass(frozen=True)
class MappedLabel:
    source: TrelloLabel
    target: TargetLabel


@dataclass(frozen=True)
class MissingLabel:
    source: TrelloLabel
    reference: Reference


@dataclass(frozen=True)
class ListMappedLabel:
    """Label applied to every card of a Trello list."""

    source_list: TrelloList
    target: TargetLabel


@dataclass(frozen=True)
class MissingListLabel:
    source_list: TrelloList
    reference: Reference


ResolvedLabel = SkippedLabel | LabelToCreate | MappedLabel | MissingLabel | ListMappedLabel | MissingListLabel


# --- Member resolution ---


@dataclass(frozen=True)
class VerifiedMember:
    trello_name: str
    github: TargetUser


@dataclass(frozen=True)
class UnverifiedMember:
    """A `users` rule whose GitHub username does not exist."""

    trello_name: str
    github_name: str


ResolvedMember = VerifiedMember | UnverifiedMember


# --- Status / milestone resolution ---


@dataclass(frozen=True)
class PendingStatus:
    """Status option the operator asked for (`create = true`) but must add by hand."""

    list_id: str
    name: str


# --- Card transformation ---


@dataclass
class IssueDraft:
    """Everything needed to create one GitHub issue from a Trello card."""

    card_id: str
    list_id: str
    title: str
    body: str
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    milestone_number: int | None = None
    comments: list[str] = field(default_factory=list)
