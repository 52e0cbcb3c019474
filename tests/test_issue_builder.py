"""Tests for building issue fields from Trello cards."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

import pytest

from trello_to_github_migrator.issue_builder import (
    assignees_for_card,
    build_checklist_section,
    build_issue_body,
    build_issue_draft,
    comments_for_card,
    format_timestamp,
    labels_for_card,
)
from trello_to_github_migrator.models import (
    LabelToCreate,
    ListMappedLabel,
    MappedLabel,
    MissingLabel,
    SkippedLabel,
    TargetLabel,
    TargetSnapshot,
    TargetUser,
    UnverifiedMember,
    VerifiedMember,
)
from trello_to_github_migrator.plan import build_plan

if TYPE_CHECKING:
    from collections.abc import Callable

    from trello_to_github_migrator.models import TargetMilestone
    from trello_to_github_migrator.schemas import Board, MappingConfig, TrelloCard


def _card(board: Board, card_id: str) -> TrelloCard:
    return next(card for card in board.cards if card.id == card_id)


@pytest.mark.unit
class TestFormatTimestamp:
    def test_utc(self) -> None:
        assert format_timestamp(dt.datetime(2024, 1, 15, 10, 30, 45, 123000, tzinfo=dt.UTC)) == "2024-01-15 10:30:45Z"

    def test_non_utc_offset(self) -> None:
        tz = dt.timezone(dt.timedelta(hours=5, minutes=30))
        assert format_timestamp(dt.datetime(2024, 1, 15, 10, 30, 45, tzinfo=tz)) == "2024-01-15 10:30:45+05:30"


@pytest.mark.unit
class TestBuildIssueBody:
    def test_full_body(self, board: Board) -> None:
        body = build_issue_body(_card(board, "card-fix"), board.checklists)
        assert body == (
            "It crashes on start."
            "\n\n---\n\n"
            "## Checklists\n### Steps\n- [x] Reproduce\n- [ ] Patch"
            "\n\n---\n\n"
            "> Migrated from [Trello Card](https://trello.com/c/fix)\n"
            "- [trace.log](https://trello.com/a/trace.log)"
        )

    def test_empty_description_with_checklist_and_attachment(self, board: Board) -> None:
        card = _card(board, "card-fix").model_copy(update={"desc": ""})
        body = build_issue_body(card, board.checklists)

        assert body.startswith("## Checklists")
        assert body.count("---") == 1
        assert "\n\n---\n\n> Migrated from [Trello Card](https://trello.com/c/fix)\n" in body
        assert body.endswith("- [trace.log](https://trello.com/a/trace.log)")

    def test_only_footer(self, board: Board) -> None:
        body = build_issue_body(_card(board, "card-feature"), board.checklists)
        assert body == "> Migrated from [Trello Card](https://trello.com/c/feature)\n"

    def test_description_without_checklist(self, board: Board) -> None:
        body = build_issue_body(_card(board, "card-idea"), board.checklists)
        assert body == "Maybe later.\n\n---\n\n> Migrated from [Trello Card](https://trello.com/c/someday)\n"

    def test_unknown_checklist_ids_are_ignored(self, board: Board) -> None:
        card = _card(board, "card-feature").model_copy(update={"checklist_ids": ["does-not-exist"]})
        assert build_checklist_section(card, board.checklists) == ""


@pytest.mark.unit
class TestLabelsForCard:
    def test_card_and_list_labels(self, board: Board) -> None:
        bug, feature, wontfix = board.labels
        todo = board.lists[0]
        resolved = [
            MappedLabel(bug, TargetLabel(1, "type: bug")),
            LabelToCreate(feature, "feature"),
            SkippedLabel(wontfix),
            ListMappedLabel(todo, TargetLabel(3, "triage")),
            ListMappedLabel(todo, TargetLabel(4, "second-list-label")),
        ]
        assert labels_for_card(_card(board, "card-fix"), resolved) == ["type: bug", "triage"]
        assert labels_for_card(_card(board, "card-feature"), resolved) == ["feature"]

    def test_missing_labels_are_not_applied(self, board: Board) -> None:
        resolved = [MissingLabel(board.labels[0], 99)]
        assert labels_for_card(_card(board, "card-fix"), resolved) == []


@pytest.mark.unit
class TestAssignees:
    def test_only_verified_members_are_assigned(self, board: Board) -> None:
        card = _card(board, "card-fix").model_copy(update={"member_ids": ["member-alice", "member-bob", "x"]})
        resolved = [VerifiedMember("Alice Smith", TargetUser("alice-gh", 1)), UnverifiedMember("bob", "ghost")]
        assert assignees_for_card(card, board.members, resolved) == ["alice-gh"]


@pytest.mark.unit
class TestComments:
    def test_comments_are_sorted_oldest_first(self, board: Board) -> None:
        comments = comments_for_card(_card(board, "card-fix"), board.comment_actions, board.members, [])
        assert [comment.splitlines()[1] for comment in comments] == ["first", "second", "third"]

    def test_comment_header_names_author(self, board: Board) -> None:
        resolved = [VerifiedMember("alice", TargetUser("alice-gh", 1))]
        comments = comments_for_card(_card(board, "card-fix"), board.comment_actions, board.members, resolved)
        assert comments[0] == "## @alice-gh • 2024-03-01 12:00:00Z\nfirst"
        # Unmapped authors are quoted so GitHub does not mention someone else
        assert comments[1] == "## `@bob` • 2024-03-02 12:00:00Z\nsecond"

    def test_other_cards_have_no_comments(self, board: Board) -> None:
        assert comments_for_card(_card(board, "card-feature"), board.comment_actions, board.members, []) == []


@pytest.mark.unit
class TestBuildIssueDraft:
    def test_draft_uses_list_milestone(
        self,
        board: Board,
        make_mapping: Callable[..., MappingConfig],
        github_labels: list[TargetLabel],
        github_milestones: list[TargetMilestone],
    ) -> None:
        mapping = make_mapping(
            labels=[{"trello": "bug", "github": "bug"}],
            lists=[{"list": "Todo", "milestone": 2, "label": "triage"}],
        )
        snapshot = TargetSnapshot(labels=github_labels, milestones=github_milestones)
        members = [VerifiedMember("alice", TargetUser("alice-gh", 1))]
        plan = build_plan(board, mapping, snapshot, members)

        draft = build_issue_draft(_card(board, "card-fix"), plan.board, plan)

        assert draft.title == "Fix bug"
        assert draft.labels == ["bug", "triage"]
        assert draft.assignees == ["alice-gh"]
        assert draft.milestone_number == 2
        assert len(draft.comments) == 3
        assert draft.list_id == "list-todo"
