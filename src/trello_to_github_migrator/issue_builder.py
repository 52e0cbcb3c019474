"""Build GitHub issue fields from Trello card data."""

from __future__ import annotations

from typing import TYPE_CHECKING, assert_never

from .labels import target_label_name
from .members import map_member
from .models import (
    IssueDraft,
    LabelToCreate,
    ListMappedLabel,
    MappedLabel,
    MissingLabel,
    MissingListLabel,
    SkippedLabel,
)

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import Sequence

    from .models import ResolvedLabel, ResolvedMember
    from .plan import MigrationPlan
    from .schemas import Board, CommentAction, TrelloCard, TrelloChecklist, TrelloMember

SECTION_SEPARATOR = "\n\n---\n\n"


def format_timestamp(timestamp: dt.datetime) -> str:
    """Format a timestamp for comment headers.

    Returns:
        Formatted timestamp (e.g., "2024-01-15 10:30:45Z"); non-UTC offsets
        are kept as-is.
    """
    formatted = timestamp.isoformat(sep=" ", timespec="seconds")
    return formatted.replace("+00:00", "Z")


def build_checklist_section(card: TrelloCard, checklists: Sequence[TrelloChecklist]) -> str:
    """Render the card's checklists as GitHub task lists, in card order."""
    by_id = {checklist.id: checklist for checklist in checklists}
    linked = [by_id[checklist_id] for checklist_id in card.checklist_ids if checklist_id in by_id]
    if not linked:
        return ""

    lines = ["## Checklists"]
    for checklist in linked:
        lines.append(f"### {checklist.name}")
        for item in checklist.check_items:
            marker = "x" if item.state == "complete" else " "
            lines.append(f"- [{marker}] {item.name}")
    return "\n".join(lines)


def build_issue_body(card: TrelloCard, checklists: Sequence[TrelloChecklist]) -> str:
    """Build the GitHub issue body for a card.

    Sections are the description, the checklists, and a footer linking back
    to the Trello card with its attachments. Empty sections are left out
    together with their separator.
    """
    footer = f"> Migrated from [Trello Card]({card.url})\n"
    footer += "\n".join(f"- [{attachment.name}]({attachment.url})" for attachment in card.attachments)

    sections = [card.desc, build_checklist_section(card, checklists), footer]
    return SECTION_SEPARATOR.join(section for section in sections if section)


def labels_for_card(card: TrelloCard, resolved: Sequence[ResolvedLabel]) -> list[str]:
    """GitHub label names for a card: its own mapped labels plus at most one from its list."""
    card_label_names = {label.name for label in card.labels}
    names: list[str] = []
    list_label: str | None = None

    for label in resolved:
        match label:
            case LabelToCreate() | MappedLabel():
                if label.source.name in card_label_names:
                    name = target_label_name(label)
                    if name is not None and name not in names:
                        names.append(name)
            case ListMappedLabel():
                if list_label is None and label.source_list.id == card.list_id:
                    list_label = label.target.name
            case SkippedLabel() | MissingLabel() | MissingListLabel():
                pass
            case _:
                assert_never(label)

    if list_label is not None and list_label not in names:
        names.append(list_label)
    return names


def assignees_for_card(
    card: TrelloCard, trello_members: Sequence[TrelloMember], resolved: Sequence[ResolvedMember]
) -> list[str]:
    """GitHub logins for the card's members; unmapped members are dropped."""
    logins: list[str] = []
    for member_id in card.member_ids:
        login = map_member(member_id, trello_members, resolved)
        if login is not None and login not in logins:
            logins.append(login)
    return logins


def build_comment(
    action: CommentAction, trello_members: Sequence[TrelloMember], resolved: Sequence[ResolvedMember]
) -> str:
    login = map_member(action.member_creator.id, trello_members, resolved)
    author = f"@{login}" if login else f"`@{action.member_creator.username}`"
    return f"## {author} • {format_timestamp(action.date)}\n{action.data.text}"


def comments_for_card(
    card: TrelloCard,
    comment_actions: Sequence[CommentAction],
    trello_members: Sequence[TrelloMember],
    resolved: Sequence[ResolvedMember],
) -> list[str]:
    """Render the card's comments, oldest first."""
    actions = [action for action in comment_actions if action.data.card_id == card.id]
    actions.sort(key=lambda action: action.date)
    return [build_comment(action, trello_members, resolved) for action in actions]


def build_issue_draft(card: TrelloCard, board: Board, plan: MigrationPlan) -> IssueDraft:
    """Turn one Trello card into everything needed to create its issue."""
    milestone = plan.milestones.by_list.get(card.list_id)
    return IssueDraft(
        card_id=card.id,
        list_id=card.list_id,
        title=card.name,
        body=build_issue_body(card, board.checklists),
        labels=labels_for_card(card, plan.labels),
        assignees=assignees_for_card(card, board.members, plan.members),
        milestone_number=milestone.number if milestone else None,
        comments=comments_for_card(card, board.comment_actions, board.members, plan.members),
    )
