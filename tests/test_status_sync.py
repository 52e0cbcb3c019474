"""Tests for syncing the Status of issues already on the project."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, call

import pytest

from trello_to_github_migrator.models import ExistingProjectItem, ProjectItemsPage, StatusOption
from trello_to_github_migrator.status_sync import PAGE_SIZE, fetch_existing_items, sync_existing_statuses

if TYPE_CHECKING:
    from trello_to_github_migrator.models import ProjectInfo
    from trello_to_github_migrator.schemas import Board

STATUS_TODO = StatusOption(id="opt-todo", name="Todo")
STATUS_IN_PROGRESS = StatusOption(id="opt-progress", name="In Progress")
STATUS_DONE = StatusOption(id="opt-done", name="Done")

@pytest.mark.unit
class TestFetchExistingItems:
    def test_follows_cursor_until_last_page(self) -> None:
        first = ExistingProjectItem("PVTI_1", 1, "One", None)
        second = ExistingProjectItem("PVTI_2", 2, "Two", "Todo")
        target = Mock()
        target.get_project_items_page.side_effect = [
            ProjectItemsPage(items=[first], end_cursor="c1", has_next_page=True),
            ProjectItemsPage(items=[second], end_cursor="c2", has_next_page=False),
        ]

        items = fetch_existing_items(target, "organization", "acme", 7)

        assert items == [first, second]
        assert target.get_project_items_page.call_args_list == [
            call("organization", "acme", 7, first=PAGE_SIZE, after=None),
            call("organization", "acme", 7, first=PAGE_SIZE, after="c1"),
        ]

    def test_stops_on_missing_cursor(self) -> None:
        target = Mock()
        target.get_project_items_page.return_value = ProjectItemsPage(items=[], end_cursor=None, has_next_page=True)

        assert fetch_existing_items(target, "user", "octo", 1) == []
        target.get_project_items_page.assert_called_once()


@pytest.mark.unit
class TestSyncExistingStatuses:
    @pytest.fixture
    def statuses(self) -> dict:
        return {"list-todo": STATUS_IN_PROGRESS, "list-done": STATUS_DONE}

    def test_only_differing_items_are_updated(self, board: Board, project: ProjectInfo, statuses: dict) -> None:
        items = [
            ExistingProjectItem("PVTI_fix", 10, "Fix bug", STATUS_TODO.name),
            ExistingProjectItem("PVTI_feature", 11, "Add feature", STATUS_DONE.name),
        ]
        target = Mock()

        result = sync_existing_statuses(target, project, items, board.cards, statuses)

        target.set_item_status.assert_called_once_with(
            project.id, "PVTI_fix", project.status_field_id, STATUS_IN_PROGRESS.id
        )
        assert result.updated == 1
        assert result.skipped == 1

    def test_second_run_makes_no_changes(self, board: Board, project: ProjectInfo, statuses: dict) -> None:
        items = [
            ExistingProjectItem("PVTI_fix", 10, "Fix bug", STATUS_IN_PROGRESS.name),
            ExistingProjectItem("PVTI_feature", 11, "Add feature", STATUS_DONE.name),
        ]
        target = Mock()

        result = sync_existing_statuses(target, project, items, board.cards, statuses)

        target.set_item_status.assert_not_called()
        assert result.updated == 0
        assert result.skipped == 2

    def test_items_without_matching_card_are_skipped(
        self, board: Board, project: ProjectInfo, statuses: dict
    ) -> None:
        items = [
            ExistingProjectItem("PVTI_x", 12, "Renamed on GitHub", None),
            ExistingProjectItem("PVTI_idea", 13, "Someday", None),
        ]
        target = Mock()

        result = sync_existing_statuses(target, project, items, board.cards, statuses)

        # "Someday" matches a card, but its list has no status mapping
        target.set_item_status.assert_not_called()
        assert result.skipped == 2

    def test_item_without_status_gets_one(self, board: Board, project: ProjectInfo, statuses: dict) -> None:
        items = [ExistingProjectItem("PVTI_feature", 11, "Add feature", None)]
        target = Mock()

        result = sync_existing_statuses(target, project, items, board.cards, statuses)

        target.set_item_status.assert_called_once_with(
            project.id, "PVTI_feature", project.status_field_id, STATUS_DONE.id
        )
        assert result.updated == 1
