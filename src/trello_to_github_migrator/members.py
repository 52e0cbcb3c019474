"""Verify `users[]` rules against GitHub and map Trello members to logins."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import UserNotFoundError
from .models import UnverifiedMember, VerifiedMember

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import ResolvedMember
    from .protocols import TargetClient
    from .schemas import TrelloMember, UserRule

logger: logging.Logger = logging.getLogger(__name__)


def resolve_members(target: TargetClient, user_rules: Sequence[UserRule]) -> list[ResolvedMember]:
    """Look up each mapped GitHub user, one request per rule.

    A 404 marks the rule unverified; any other failure propagates.
    """
    resolved: list[ResolvedMember] = []
    for rule in user_rules:
        try:
            user = target.get_user(rule.github)
        except UserNotFoundError:
            logger.debug(f"GitHub user @{rule.github} (for Trello @{rule.trello}) does not exist")
            resolved.append(UnverifiedMember(rule.trello, rule.github))
            continue
        resolved.append(VerifiedMember(rule.trello, user))
    return resolved


def map_member(
    member_id: str,
    trello_members: Sequence[TrelloMember],
    resolved: Sequence[ResolvedMember],
) -> str | None:
    """Return the GitHub login for a Trello member ID, if one is verified.

    A rule's Trello name may be the member's ID, username or full name.
    """
    trello_member = next((m for m in trello_members if m.id == member_id), None)
    if trello_member is None:
        return None

    keys = {trello_member.id, trello_member.username, trello_member.full_name}
    for member in resolved:
        if isinstance(member, VerifiedMember) and member.trello_name in keys:
            return member.github.login
    return None
