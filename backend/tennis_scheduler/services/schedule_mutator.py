"""
Schedule Mutator: validate and apply manual (court, order) reassignments.

Checks run in a fixed order and the first failure wins:

1. **Duplicate targets**: a match id may appear only once per batch
2. **Court range**: every proposed court must be within [1, max_courts]
3. **Membership**: every match id must exist in the current schedule
4. **Position conflicts**: after overlaying the batch on the full schedule,
   no (court, order) position may hold two matches

Nothing is mutated unless every check passes; the caller's snapshot is never
touched. Persisting the accepted batch is the caller's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchPosition:
    """Snapshot of one scheduled match's position."""
    id: Hashable
    court_number: int
    match_order_on_court: int


@dataclass(frozen=True)
class MatchPositionUpdate:
    match_id: Hashable
    court_number: int
    match_order_on_court: int


@dataclass
class PositionConflict:
    court_number: int
    match_order_on_court: int
    match_ids: List[Hashable] = field(default_factory=list)


@dataclass
class AppliedUpdates:
    updated_match_ids: List[Hashable]
    matches: List[MatchPosition]


# ============================================================================
# Errors
# ============================================================================


class ScheduleUpdateError(Exception):
    """Base exception for rejected schedule updates"""

    kind = "ScheduleUpdateError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def detail_fields(self) -> Dict[str, Any]:
        return {}

    def to_detail(self) -> Dict[str, Any]:
        """JSON-safe error body for API responses."""
        detail: Dict[str, Any] = {"error": self.kind, "message": self.message}
        for key, value in self.detail_fields().items():
            detail[key] = _json_safe(value)
        return detail


class ScheduleNotFoundError(ScheduleUpdateError):
    kind = "ScheduleNotFound"

    def __init__(self, schedule_id: Hashable):
        super().__init__(f"Schedule {schedule_id} not found")
        self.schedule_id = schedule_id

    def detail_fields(self) -> Dict[str, Any]:
        return {"schedule_id": self.schedule_id}


class PersistenceFailureError(ScheduleUpdateError):
    """The store rejected a write; nothing was committed."""

    kind = "PersistenceFailure"


class DuplicateUpdateTargetError(ScheduleUpdateError):
    kind = "DuplicateUpdateTarget"

    def __init__(self, match_id: Hashable):
        super().__init__(f"Duplicate match ID in updates: {match_id}")
        self.match_id = match_id

    def detail_fields(self) -> Dict[str, Any]:
        return {"match_id": self.match_id}


class CourtOutOfRangeError(ScheduleUpdateError):
    kind = "CourtOutOfRange"

    def __init__(self, match_id: Hashable, court_number: int, max_courts: int):
        super().__init__(f"Invalid court_number {court_number} for match {match_id}: must be between 1 and {max_courts}")
        self.match_id = match_id
        self.court_number = court_number
        self.max_courts = max_courts

    def detail_fields(self) -> Dict[str, Any]:
        return {"match_id": self.match_id, "court_number": self.court_number, "max_courts": self.max_courts}


class UnknownMatchError(ScheduleUpdateError):
    kind = "UnknownMatch"

    def __init__(self, match_id: Hashable):
        super().__init__(f"Match {match_id} does not belong to schedule")
        self.match_id = match_id

    def detail_fields(self) -> Dict[str, Any]:
        return {"match_id": self.match_id}


class PositionConflictError(ScheduleUpdateError):
    kind = "PositionConflict"

    def __init__(self, conflict: PositionConflict):
        super().__init__(
            f"Conflict: Court {conflict.court_number}, Order {conflict.match_order_on_court} is already occupied"
        )
        self.conflict = conflict

    def detail_fields(self) -> Dict[str, Any]:
        return {
            "court_number": self.conflict.court_number,
            "match_order_on_court": self.conflict.match_order_on_court,
            "match_ids": self.conflict.match_ids,
        }


def _json_safe(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


# ============================================================================
# Checks
# ============================================================================


def find_duplicate_match_id(updates: Sequence[MatchPositionUpdate]) -> Optional[Hashable]:
    """First match id that appears a second time, or None."""
    seen = set()
    for update in updates:
        if update.match_id in seen:
            return update.match_id
        seen.add(update.match_id)
    return None


def find_court_out_of_range(updates: Sequence[MatchPositionUpdate], max_courts: int) -> Optional[MatchPositionUpdate]:
    for update in updates:
        if update.court_number < 1 or update.court_number > max_courts:
            return update
    return None


def find_unknown_match_id(
    current_matches: Sequence[MatchPosition], updates: Sequence[MatchPositionUpdate]
) -> Optional[Hashable]:
    known = {m.id for m in current_matches}
    for update in updates:
        if update.match_id not in known:
            return update.match_id
    return None


def simulate_positions(
    current_matches: Sequence[MatchPosition], updates: Sequence[MatchPositionUpdate]
) -> List[MatchPosition]:
    """Hypothetical final state: updated matches moved, everything else in place."""
    updates_by_id = {u.match_id: u for u in updates}
    final: List[MatchPosition] = []
    for match in current_matches:
        update = updates_by_id.get(match.id)
        if update is None:
            final.append(match)
        else:
            final.append(
                replace(match, court_number=update.court_number, match_order_on_court=update.match_order_on_court)
            )
    return final


def detect_conflicts(
    current_matches: Sequence[MatchPosition], updates: Sequence[MatchPositionUpdate]
) -> Optional[PositionConflict]:
    """
    First (court, order) position held by two or more matches after the
    batch is applied, in snapshot order. Unchanged matches count too.
    """
    occupants: Dict[Tuple[int, int], List[Hashable]] = {}
    first_clash: Optional[Tuple[int, int]] = None
    for match in simulate_positions(current_matches, updates):
        key = (match.court_number, match.match_order_on_court)
        occupants.setdefault(key, []).append(match.id)
        if first_clash is None and len(occupants[key]) > 1:
            first_clash = key

    if first_clash is None:
        return None
    return PositionConflict(
        court_number=first_clash[0],
        match_order_on_court=first_clash[1],
        match_ids=occupants[first_clash],
    )


def apply_updates(
    current_matches: Sequence[MatchPosition],
    proposed_updates: Sequence[MatchPositionUpdate],
    max_courts: int,
) -> AppliedUpdates:
    """
    Validate a batch against a schedule snapshot and return the new state.

    Raises:
        DuplicateUpdateTargetError, CourtOutOfRangeError, UnknownMatchError,
        PositionConflictError (checked in that order)
    """
    try:
        duplicate = find_duplicate_match_id(proposed_updates)
        if duplicate is not None:
            raise DuplicateUpdateTargetError(duplicate)

        out_of_range = find_court_out_of_range(proposed_updates, max_courts)
        if out_of_range is not None:
            raise CourtOutOfRangeError(out_of_range.match_id, out_of_range.court_number, max_courts)

        unknown = find_unknown_match_id(current_matches, proposed_updates)
        if unknown is not None:
            raise UnknownMatchError(unknown)

        conflict = detect_conflicts(current_matches, proposed_updates)
        if conflict is not None:
            raise PositionConflictError(conflict)
    except ScheduleUpdateError as e:
        logger.info("Rejected schedule update batch (%d updates): %s", len(proposed_updates), e.kind)
        raise

    return AppliedUpdates(
        updated_match_ids=[u.match_id for u in proposed_updates],
        matches=simulate_positions(current_matches, proposed_updates),
    )
