"""
Pytest configuration and fixtures.

The board fixture is a trimmed Trello export in its raw JSON shape, so the
schema aliases are exercised by every test that uses it.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any
from unittest.mock import Mock

import pytest

from trello_to_github_migrator.github_target import GitHubTarget
from trello_to_github_migrator.models import (
    CreatedIssue,
    ProjectInfo,
    ProjectItemsPage,
    StatusOption,
    TargetLabel,
    TargetMilestone,
    TargetUser,
)
from trello_to_github_migrator.schemas import Board, MappingConfig

if TYPE_CHECKING:
    from collections.abc import Callable

BOARD_EXPORT: dict[str, Any] = {
    "name": "Roadmap",
    "lists": [
        {"id": "list-todo", "name": "Todo", "closed": False},
        {"id": "list-done", "name": "Done", "closed": False},
        {"id": "list-archived", "name": "Old stuff", "closed": True},
        {"id": "list-ideas", "name": "Ideas", "closed": False},
    ],
    "members": [
        {"id": "member-alice", "fullName": "Alice Smith", "username": "alice"},
        {"id": "member-bob", "fullName": "Bob Jones", "username": "bob"},
    ],
    "labels": [
        {"id": "label-bug", "name": "bug", "color": "red", "uses": 1},
        {"id": "label-feature", "name": "feature", "color": "green", "uses": 1},
        {"id": "label-wontfix", "name": "wontfix", "color": None, "uses": 0},
    ],
    "cards": [
        {
            "id": "card-fix",
            "name": "Fix bug",
            "url": "https://trello.com/c/fix",
            "closed": False,
            "desc": "It crashes on start.",
            "idChecklists": ["checklist-steps"],
            "idList": "list-todo",
            "idMembers": ["member-alice"],
            "labels": [{"id": "label-bug", "name": "bug", "color": "red", "uses": 1}],
            "attachments": [{"id": "att-1", "name": "trace.log", "url": "https://trello.com/a/trace.log"}],
        },
        {
            "id": "card-feature",
            "name": "Add feature",
            "url": "https://trello.com/c/feature",
            "closed": False,
            "desc": "",
            "idChecklists": [],
            "idList": "list-done",
            "idMembers": ["member-bob"],
            "labels": [{"id": "label-feature", "name": "feature", "color": "green", "uses": 1}],
            "attachments": [],
        },
        {
            "id": "card-closed",
            "name": "Archived card",
            "url": "https://trello.com/c/closed",
            "closed": True,
            "desc": "",
            "idChecklists": [],
            "idList": "list-todo",
            "idMembers": [],
            "labels": [],
            "attachments": [],
        },
        {
            "id": "card-in-archived-list",
            "name": "Forgotten",
            "url": "https://trello.com/c/forgotten",
            "closed": False,
            "desc": "",
            "idChecklists": [],
            "idList": "list-archived",
            "idMembers": [],
            "labels": [],
            "attachments": [],
        },
        {
            "id": "card-idea",
            "name": "Someday",
            "url": "https://trello.com/c/someday",
            "closed": False,
            "desc": "Maybe later.",
            "idChecklists": [],
            "idList": "list-ideas",
            "idMembers": [],
            "labels": [],
            "attachments": [],
        },
    ],
    "checklists": [
        {
            "id": "checklist-steps",
            "name": "Steps",
            "idCard": "card-fix",
            "checkItems": [
                {"id": "item-1", "name": "Reproduce", "state": "complete"},
                {"id": "item-2", "name": "Patch", "state": "incomplete"},
            ],
        }
    ],
    "actions": [
        {
            "id": "action-3",
            "type": "commentCard",
            "memberCreator": {"id": "member-bob", "username": "bob"},
            "data": {"idCard": "card-fix", "text": "third"},
            "date": "2024-03-03T12:00:00.000Z",
        },
        {
            "id": "action-1",
            "type": "commentCard",
            "memberCreator": {"id": "member-alice", "username": "alice"},
            "data": {"idCard": "card-fix", "text": "first"},
            "date": "2024-03-01T12:00:00.000Z",
        },
        {
            "id": "action-move",
            "type": "updateCard",
            "data": {"listBefore": {"id": "list-todo"}, "listAfter": {"id": "list-done"}},
            "date": "2024-03-01T13:00:00.000Z",
        },
        {
            "id": "action-2",
            "type": "commentCard",
            "memberCreator": {"id": "member-bob", "username": "bob"},
            "data": {"idCard": "card-fix", "text": "second"},
            "date": "2024-03-02T12:00:00.000Z",
        },
    ],
}

STATUS_TODO = StatusOption(id="opt-todo", name="Todo", color="GRAY")
STATUS_IN_PROGRESS = StatusOption(id="opt-progress", name="In Progress", color="YELLOW")
STATUS_DONE = StatusOption(id="opt-done", name="Done", color="GREEN")


@pytest.fixture
def board_export() -> dict[str, Any]:
    return copy.deepcopy(BOARD_EXPORT)


@pytest.fixture
def board(board_export: dict[str, Any]) -> Board:
    return Board.model_validate(board_export)


@pytest.fixture
def make_mapping() -> Callable[..., MappingConfig]:
    """Build a MappingConfig from map.toml-shaped keyword arguments."""

    def _make(**overrides: Any) -> MappingConfig:
        data: dict[str, Any] = {"repo": {"owner": "octo", "repo": "tracker"}}
        data.update(overrides)
        return MappingConfig.model_validate(data)

    return _make


@pytest.fixture
def github_labels() -> list[TargetLabel]:
    return [TargetLabel(1, "bug", "d73a4a"), TargetLabel(2, "enhancement", "a2eeef"), TargetLabel(3, "triage", "ededed")]


@pytest.fixture
def github_milestones() -> list[TargetMilestone]:
    return [TargetMilestone(id=1001, number=1, title="v1.0"), TargetMilestone(id=1002, number=2, title="v2.0")]


@pytest.fixture
def project() -> ProjectInfo:
    return ProjectInfo(
        id="PVT_project",
        number=7,
        title="Roadmap",
        status_field_id="PVTSSF_status",
        status_options=[STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE],
    )


@pytest.fixture
def target(
    github_labels: list[TargetLabel], github_milestones: list[TargetMilestone], project: ProjectInfo
) -> Mock:
    """A GitHub target whose reads succeed and whose writes are recorded."""
    mock = Mock(spec=GitHubTarget)
    mock.list_labels.return_value = github_labels
    mock.list_milestones.return_value = github_milestones
    mock.get_project.return_value = project
    mock.get_user.side_effect = lambda username: TargetUser(login=username, id=abs(hash(username)) % 10_000)
    mock.get_project_items_page.return_value = ProjectItemsPage(items=[], end_cursor=None, has_next_page=False)

    issue_numbers = iter(range(1, 1000))

    def _create_issue(*_args: Any, **_kwargs: Any) -> CreatedIssue:
        number = next(issue_numbers)
        return CreatedIssue(number=number, node_id=f"I_{number}")

    mock.create_issue.side_effect = _create_issue
    mock.add_to_project.side_effect = lambda _project_id, content_id: f"PVTI_{content_id}"
    return mock
