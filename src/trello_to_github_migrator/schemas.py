"""Input records: the Trello board export and the user-authored map file.

Both are validated once at load time and treated as read-only afterwards.
Field names follow Python conventions; the Trello/TOML spellings are
accepted through aliases.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

NonEmptyStr = Annotated[str, Field(min_length=1)]
Reference = int | NonEmptyStr
"""A reference to a GitHub entity: an integer ID/number or a name."""

HEX_COLOR_PATTERN = r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# --- Trello board export ---


class TrelloList(_Record):
    id: str
    name: str
    closed: bool = False


class TrelloMember(_Record):
    id: str
    full_name: str = Field(alias="fullName")
    username: str


class TrelloLabel(_Record):
    id: str
    name: str
    color: str | None = None
    uses: int = 0


class TrelloAttachment(_Record):
    id: str
    name: str
    url: str


class TrelloCard(_Record):
    id: str
    name: str
    url: str
    # Shown as "archived" in the Trello web UI
    closed: bool = False
    desc: str = ""
    checklist_ids: list[str] = Field(default_factory=list, alias="idChecklists")
    list_id: str = Field(alias="idList")
    member_ids: list[str] = Field(default_factory=list, alias="idMembers")
    labels: list[TrelloLabel] = Field(default_factory=list)
    attachments: list[TrelloAttachment] = Field(default_factory=list)


class CheckItem(_Record):
    id: str
    name: str
    state: Literal["complete", "incomplete"]


class TrelloChecklist(_Record):
    id: str
    name: str
    card_id: str = Field(alias="idCard")
    check_items: list[CheckItem] = Field(default_factory=list, alias="checkItems")


class CommentAuthor(_Record):
    id: str
    username: str


class CommentData(_Record):
    card_id: str = Field(alias="idCard")
    text: str


class CommentAction(_Record):
    id: str
    type: Literal["commentCard"]
    member_creator: CommentAuthor = Field(alias="memberCreator")
    data: CommentData
    date: dt.datetime


class Board(_Record):
    """Snapshot of a Trello board export."""

    name: str
    lists: list[TrelloList]
    members: list[TrelloMember] = Field(default_factory=list)
    comment_actions: list[CommentAction] = Field(default_factory=list, alias="actions")
    cards: list[TrelloCard]
    labels: list[TrelloLabel] = Field(default_factory=list)
    checklists: list[TrelloChecklist] = Field(default_factory=list)

    @field_validator("comment_actions", mode="before")
    @classmethod
    def _keep_comments(cls, value: Any) -> Any:
        # Exports carry every board action; only card comments are migrated.
        if not isinstance(value, list):
            return value
        return [action for action in value if isinstance(action, dict) and action.get("type") == "commentCard"]


# --- Map file ---


class RepoOwner(_Record):
    type: Literal["organization", "user"]
    login: NonEmptyStr


class RepoTarget(_Record):
    owner: RepoOwner | NonEmptyStr
    repo: NonEmptyStr

    @property
    def owner_login(self) -> str:
        return self.owner if isinstance(self.owner, str) else self.owner.login

    @property
    def owner_type(self) -> Literal["organization", "user"]:
        """A bare login string is treated as a user account."""
        return "user" if isinstance(self.owner, str) else self.owner.type

    @property
    def full_name(self) -> str:
        return f"{self.owner_login}/{self.repo}"


class LookupLabelRule(_Record):
    """Map a Trello label onto an existing GitHub label (by name or ID)."""

    trello: NonEmptyStr
    github: Reference
    create: Literal[False] = False


class CreateLabelRule(_Record):
    """Map a Trello label onto a GitHub label the migration creates."""

    trello: NonEmptyStr
    github: NonEmptyStr
    create: Literal[True]
    color: Annotated[str, Field(pattern=HEX_COLOR_PATTERN)] | None = None


LabelRule = CreateLabelRule | LookupLabelRule


class UserRule(_Record):
    trello: NonEmptyStr
    github: NonEmptyStr

    @field_validator("trello", "github")
    @classmethod
    def _strip_at(cls, value: str) -> str:
        stripped = value.removeprefix("@")
        if not stripped:
            msg = "username must not be empty"
            raise ValueError(msg)
        return stripped


class ListRule(_Record):
    """What cards of one Trello list turn into on the GitHub side.

    `create` only applies to `status`.
    """

    list: NonEmptyStr
    status: Reference | None = None
    create: bool = False
    label: Reference | None = None
    milestone: Reference | None = None


class SkipRules(_Record):
    lists: list[NonEmptyStr] = Field(default_factory=list)


class MappingConfig(_Record):
    repo: RepoTarget
    project: int | None = None
    labels: list[LabelRule] = Field(default_factory=list)
    users: list[UserRule] = Field(default_factory=list)
    lists: list[ListRule] = Field(default_factory=list)
    skip: SkipRules = Field(default_factory=SkipRules)
