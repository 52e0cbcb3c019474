"""Resolve map references (a name or a numeric ID) against candidate entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .protocols import Identifiable
    from .schemas import Reference

T = TypeVar("T", bound="Identifiable")


def matches(reference: Reference, candidate: Identifiable) -> bool:
    """Check whether a reference points at a candidate.

    Integers match the candidate's ID or number. Strings match the name, or
    the ID when the candidate has string IDs (Trello lists, Project options).
    Comparison is exact: no case folding or trimming.
    """
    if isinstance(reference, bool):
        return False
    if reference == candidate.id:
        return True
    if isinstance(reference, int):
        return reference == getattr(candidate, "number", None)
    return reference == candidate.name


def find_match(reference: Reference, candidates: Iterable[T]) -> T | None:
    """Return the first candidate the reference points at, or None."""
    for candidate in candidates:
        if matches(reference, candidate):
            return candidate
    return None
