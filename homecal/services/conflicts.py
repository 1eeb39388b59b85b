"""Service for detecting scheduling conflicts between occurrences."""

from __future__ import annotations

from collections.abc import Sequence

from homecal.domain.models import ConflictPair, ConflictType, Occurrence


def has_time_conflict(first: Occurrence, second: Occurrence) -> bool:
    """Return True when the two intervals share some duration.

    Overlap rule: first.start_at < second.end_at AND second.start_at < first.end_at.
    Exact boundary touches (end == start) are NOT overlaps.
    """
    return first.start_at < second.end_at and second.start_at < first.end_at


def is_adjacent(first: Occurrence, second: Occurrence) -> bool:
    """Return True when one interval ends exactly where the other starts."""
    return first.end_at == second.start_at or second.end_at == first.start_at


def find_conflicts(occurrences: Sequence[Occurrence]) -> list[ConflictPair]:
    """Compare every unordered pair of occurrences once.

    Overlapping pairs are classified ``overlap``, pairs that only touch are
    ``adjacent``. Occurrences of the same recurring event are compared like
    any other pair; two entries with the same occurrence id are not.
    """
    conflicts: list[ConflictPair] = []
    for i, first in enumerate(occurrences):
        for second in occurrences[i + 1:]:
            if first.id == second.id:
                continue
            if has_time_conflict(first, second):
                conflict_type = ConflictType.OVERLAP
            elif is_adjacent(first, second):
                conflict_type = ConflictType.ADJACENT
            else:
                continue
            conflicts.append(
                ConflictPair(first=first, second=second, conflict_type=conflict_type)
            )
    return conflicts
