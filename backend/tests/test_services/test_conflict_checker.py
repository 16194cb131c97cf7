"""Tests for the pure admission rules of the conflict checker."""

from datetime import date, timedelta

import pytest

from staydesk.errors import ConflictError, ValidationError
from staydesk.services.calendar_index import DateOccupancy
from staydesk.services.conflict_checker import (
    AT_CAPACITY,
    BLOCKED,
    check_availability,
    conflict_error,
    decide_date,
)

JUN_1 = date(2031, 6, 1)


def _index(start: date, days: int, **overrides: DateOccupancy) -> dict[date, DateOccupancy]:
    index = {start + timedelta(days=i): DateOccupancy() for i in range(days)}
    for offset, occupancy in overrides.items():
        index[start + timedelta(days=int(offset.lstrip("d")))] = occupancy
    return index


class TestDecideDate:
    """Single-date decisions."""

    def test_free_date_is_admitted(self):
        decision = decide_date(JUN_1, DateOccupancy(), 1, 1)
        assert decision.admitted is True
        assert decision.remaining_capacity == 1
        assert decision.reason is None

    def test_party_that_exactly_fills_capacity_is_admitted(self):
        decision = decide_date(JUN_1, DateOccupancy(booked_units=7), 3, 10)
        assert decision.admitted is True
        assert decision.remaining_capacity == 3

    def test_over_capacity_is_rejected(self):
        decision = decide_date(JUN_1, DateOccupancy(booked_units=8), 3, 10)
        assert decision.admitted is False
        assert decision.reason == AT_CAPACITY
        assert decision.remaining_capacity == 2

    def test_block_wins_over_free_capacity(self):
        """A blocked date is rejected even when nothing is booked on it."""
        decision = decide_date(JUN_1, DateOccupancy(blocked=True, block_reason="maintenance"), 1, 10)
        assert decision.admitted is False
        assert decision.reason == BLOCKED
        assert decision.remaining_capacity == 0
        assert decision.block_reason == "maintenance"


class TestCheckAvailability:
    """Whole-range decisions."""

    def test_all_dates_free(self):
        index = _index(JUN_1, 3)
        decision = check_availability(index, JUN_1, JUN_1 + timedelta(days=3), 1, 1)
        assert decision.admitted is True
        assert decision.first_conflict is None
        assert len(decision.dates) == 3

    def test_single_conflicting_night_rejects_whole_range(self):
        index = _index(JUN_1, 3, d1=DateOccupancy(booked_units=1))
        decision = check_availability(index, JUN_1, JUN_1 + timedelta(days=3), 1, 1)
        assert decision.admitted is False
        assert decision.first_conflict.date == JUN_1 + timedelta(days=1)
        assert decision.reason == AT_CAPACITY

    def test_first_conflict_is_earliest_date(self):
        index = _index(
            JUN_1,
            4,
            d1=DateOccupancy(blocked=True),
            d3=DateOccupancy(booked_units=1),
        )
        decision = check_availability(index, JUN_1, JUN_1 + timedelta(days=4), 1, 1)
        assert decision.first_conflict.date == JUN_1 + timedelta(days=1)
        assert decision.reason == BLOCKED

    def test_missing_dates_count_as_free(self):
        decision = check_availability({}, JUN_1, JUN_1 + timedelta(days=2), 1, 1)
        assert decision.admitted is True

    def test_inverted_range_is_validation_error(self):
        with pytest.raises(ValidationError):
            check_availability({}, JUN_1, JUN_1 - timedelta(days=1), 1, 1)

    def test_empty_range_is_validation_error(self):
        with pytest.raises(ValidationError):
            check_availability({}, JUN_1, JUN_1, 1, 1)

    @pytest.mark.parametrize("party_size", [0, -2])
    def test_non_positive_party_is_validation_error(self, party_size):
        with pytest.raises(ValidationError):
            check_availability({}, JUN_1, JUN_1 + timedelta(days=1), party_size, 1)

    def test_over_long_range_is_validation_error(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            check_availability({}, JUN_1, JUN_1 + timedelta(days=400), 1, 1)


class TestConflictError:
    """User-facing conflict errors."""

    def test_capacity_message_names_date_and_remaining(self):
        index = _index(JUN_1, 1, d0=DateOccupancy(booked_units=9))
        decision = check_availability(index, JUN_1, JUN_1 + timedelta(days=1), 3, 10)

        error = conflict_error(decision, 3)

        assert isinstance(error, ConflictError)
        assert "2031-06-01" in error.message
        assert "1 left, 3 requested" in error.message
        assert error.to_detail() == {
            "message": error.message,
            "date": "2031-06-01",
            "reason": AT_CAPACITY,
            "remaining_capacity": 1,
            "requested": 3,
        }

    def test_blocked_message_includes_note(self):
        index = _index(JUN_1, 1, d0=DateOccupancy(blocked=True, block_reason="owner use"))
        decision = check_availability(index, JUN_1, JUN_1 + timedelta(days=1), 1, 1)

        error = conflict_error(decision, 1)

        assert error.reason == BLOCKED
        assert "is blocked (owner use)" in error.message

    def test_admitted_decision_cannot_be_turned_into_error(self):
        decision = check_availability({}, JUN_1, JUN_1 + timedelta(days=1), 1, 1)
        with pytest.raises(ValueError):
            conflict_error(decision, 1)
