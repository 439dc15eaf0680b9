"""
Tests for manual schedule edits: check order, conflict detection, atomicity.
"""

import uuid

import pytest

from tennis_scheduler.services.schedule_mutator import (
    CourtOutOfRangeError,
    DuplicateUpdateTargetError,
    MatchPosition,
    MatchPositionUpdate,
    PositionConflictError,
    UnknownMatchError,
    apply_updates,
    detect_conflicts,
    find_duplicate_match_id,
)


def _snapshot() -> list[MatchPosition]:
    # court 1: m1, m2, m3   court 2: m4, m5
    return [
        MatchPosition(id="m1", court_number=1, match_order_on_court=1),
        MatchPosition(id="m2", court_number=1, match_order_on_court=2),
        MatchPosition(id="m3", court_number=1, match_order_on_court=3),
        MatchPosition(id="m4", court_number=2, match_order_on_court=1),
        MatchPosition(id="m5", court_number=2, match_order_on_court=2),
    ]


def _positions(matches) -> dict:
    return {m.id: (m.court_number, m.match_order_on_court) for m in matches}


class TestAcceptedUpdates:
    def test_move_to_free_position(self):
        current = _snapshot()
        result = apply_updates(current, [MatchPositionUpdate("m3", 2, 3)], max_courts=4)

        assert result.updated_match_ids == ["m3"]
        assert _positions(result.matches)["m3"] == (2, 3)
        assert _positions(result.matches)["m1"] == (1, 1)

    def test_swap_within_court(self):
        result = apply_updates(
            _snapshot(),
            [MatchPositionUpdate("m1", 1, 2), MatchPositionUpdate("m2", 1, 1)],
            max_courts=2,
        )
        positions = _positions(result.matches)
        assert positions["m1"] == (1, 2)
        assert positions["m2"] == (1, 1)

    def test_swap_across_courts(self):
        result = apply_updates(
            _snapshot(),
            [MatchPositionUpdate("m1", 2, 1), MatchPositionUpdate("m4", 1, 1)],
            max_courts=2,
        )
        positions = _positions(result.matches)
        assert positions["m1"] == (2, 1)
        assert positions["m4"] == (1, 1)

    def test_three_way_rotation(self):
        result = apply_updates(
            _snapshot(),
            [
                MatchPositionUpdate("m1", 1, 2),
                MatchPositionUpdate("m2", 1, 3),
                MatchPositionUpdate("m3", 1, 1),
            ],
            max_courts=2,
        )
        assert [_positions(result.matches)[i] for i in ("m1", "m2", "m3")] == [(1, 2), (1, 3), (1, 1)]

    def test_no_op_update(self):
        result = apply_updates(_snapshot(), [MatchPositionUpdate("m2", 1, 2)], max_courts=2)
        assert result.updated_match_ids == ["m2"]
        assert _positions(result.matches) == _positions(_snapshot())

    def test_input_is_not_mutated(self):
        current = _snapshot()
        before = list(current)
        result = apply_updates(current, [MatchPositionUpdate("m1", 2, 5)], max_courts=2)

        assert current == before
        assert result.matches is not current
        assert _positions(current)["m1"] == (1, 1)

    def test_orders_may_leave_gaps(self):
        result = apply_updates(_snapshot(), [MatchPositionUpdate("m5", 2, 10)], max_courts=2)
        assert _positions(result.matches)["m5"] == (2, 10)

    def test_uuid_ids(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        current = [MatchPosition(a, 1, 1), MatchPosition(b, 1, 2)]
        result = apply_updates(current, [MatchPositionUpdate(a, 1, 2), MatchPositionUpdate(b, 1, 1)], 1)
        assert result.updated_match_ids == [a, b]


class TestRejectedUpdates:
    def test_conflict_with_unmoved_match(self):
        current = _snapshot()
        with pytest.raises(PositionConflictError) as exc_info:
            apply_updates(current, [MatchPositionUpdate("m2", 1, 1)], max_courts=2)

        conflict = exc_info.value.conflict
        assert (conflict.court_number, conflict.match_order_on_court) == (1, 1)
        assert conflict.match_ids == ["m1", "m2"]
        assert _positions(current)["m2"] == (1, 2)

    def test_conflict_between_two_updates(self):
        with pytest.raises(PositionConflictError) as exc_info:
            apply_updates(
                _snapshot(),
                [MatchPositionUpdate("m1", 2, 9), MatchPositionUpdate("m2", 2, 9)],
                max_courts=2,
            )
        assert exc_info.value.conflict.match_ids == ["m1", "m2"]

    def test_duplicate_match_id(self):
        with pytest.raises(DuplicateUpdateTargetError) as exc_info:
            apply_updates(
                _snapshot(),
                [MatchPositionUpdate("m1", 1, 5), MatchPositionUpdate("m1", 1, 6)],
                max_courts=2,
            )
        assert exc_info.value.match_id == "m1"

    @pytest.mark.parametrize("court", [0, 5])
    def test_court_out_of_range(self, court):
        with pytest.raises(CourtOutOfRangeError) as exc_info:
            apply_updates(_snapshot(), [MatchPositionUpdate("m1", court, 1)], max_courts=4)
        assert exc_info.value.court_number == court
        assert exc_info.value.max_courts == 4

    def test_unknown_match(self):
        with pytest.raises(UnknownMatchError) as exc_info:
            apply_updates(_snapshot(), [MatchPositionUpdate("nope", 1, 9)], max_courts=2)
        assert exc_info.value.match_id == "nope"


class TestCheckOrder:
    def test_duplicate_before_court_range(self):
        with pytest.raises(DuplicateUpdateTargetError):
            apply_updates(
                _snapshot(),
                [MatchPositionUpdate("m1", 9, 1), MatchPositionUpdate("m1", 9, 2)],
                max_courts=2,
            )

    def test_court_range_before_membership(self):
        with pytest.raises(CourtOutOfRangeError):
            apply_updates(_snapshot(), [MatchPositionUpdate("nope", 9, 1)], max_courts=2)

    def test_membership_before_conflicts(self):
        with pytest.raises(UnknownMatchError):
            apply_updates(
                _snapshot(),
                [MatchPositionUpdate("m2", 1, 1), MatchPositionUpdate("nope", 1, 7)],
                max_courts=2,
            )


class TestHelpers:
    def test_find_duplicate_match_id(self):
        assert find_duplicate_match_id([]) is None
        updates = [MatchPositionUpdate("a", 1, 1), MatchPositionUpdate("b", 1, 2), MatchPositionUpdate("a", 1, 3)]
        assert find_duplicate_match_id(updates) == "a"

    def test_detect_conflicts_none(self):
        assert detect_conflicts(_snapshot(), []) is None

    def test_error_detail_is_json_safe(self):
        a = uuid.uuid4()
        with pytest.raises(PositionConflictError) as exc_info:
            apply_updates([MatchPosition(a, 1, 1), MatchPosition("b", 1, 2)], [MatchPositionUpdate("b", 1, 1)], 1)
        error = exc_info.value
        detail = error.to_detail()
        assert detail["error"] == "PositionConflict"
        assert detail["court_number"] == 1
        assert detail["match_order_on_court"] == 1
        assert detail["match_ids"] == [str(a), "b"]
        assert "message" in detail
