"""
Tests for slot calculator.
"""

import pendulum
import pytest

from slotbook.domain.exceptions import ConfigurationError, InvalidInputError
from slotbook.domain.models import Booking, TimeSlot
from slotbook.domain.slot_calculator import (
    SlotCalculator,
    compute_available_slots,
    generate_candidate_slots,
)

DAY = "2024-11-25"


def _booking(hhmm: str, duration=None, day: str = DAY, tz: str = "UTC") -> Booking:
    return Booking(start=pendulum.parse(f"{day} {hhmm}", tz=tz), duration_minutes=duration)


def _all_except(*excluded: str):
    return [slot for slot in generate_candidate_slots(30) if slot not in excluded]


class TestGenerateCandidateSlots:
    """Tests for the day partition."""

    def test_default_granularity(self):
        slots = generate_candidate_slots()

        assert len(slots) == 48
        assert slots[0] == "00:00"
        assert slots[1] == "00:30"
        assert slots[-1] == "23:30"

    @pytest.mark.parametrize("granularity", [1, 5, 10, 15, 20, 30, 45, 60, 90, 120, 720, 1440])
    def test_count_and_order(self, granularity):
        slots = generate_candidate_slots(granularity)

        assert len(slots) == 1440 // granularity
        assert slots[0] == "00:00"
        assert all(a < b for a, b in zip(slots, slots[1:]))

    @pytest.mark.parametrize("granularity", [0, -30, 7, 1441, 2880])
    def test_invalid_granularity(self, granularity):
        with pytest.raises(ConfigurationError):
            generate_candidate_slots(granularity)

    def test_non_integer_granularity(self):
        with pytest.raises(ConfigurationError):
            generate_candidate_slots(30.0)


class TestComputeAvailableSlots:
    """Tests for overlap filtering."""

    def test_no_bookings_everything_free(self):
        assert compute_available_slots(DAY, []) == generate_candidate_slots(30)

    def test_one_hour_booking(self):
        """10:00 for 60 minutes blocks 10:00 and 10:30 only."""
        available = compute_available_slots(DAY, [_booking("10:00", 60)])

        assert "10:00" not in available
        assert "10:30" not in available
        assert "09:30" in available
        assert "11:00" in available
        assert available == _all_except("10:00", "10:30")

    def test_booking_filling_one_slot(self):
        available = compute_available_slots(DAY, [_booking("10:00", 30)])

        assert available == _all_except("10:00")

    def test_back_to_back_bookings(self):
        """The shared boundary does not block a slot on its own."""
        bookings = [_booking("10:00", 60), _booking("11:00", 30)]

        available = compute_available_slots(DAY, bookings)

        assert available == _all_except("10:00", "10:30", "11:00")
        assert "09:30" in available
        assert "11:30" in available

    def test_missing_duration_uses_default(self):
        available = compute_available_slots(DAY, [_booking("10:00", None)])

        assert available == _all_except("10:00", "10:30")

    def test_custom_default_duration(self):
        available = compute_available_slots(
            DAY, [_booking("10:00", None)], default_duration_minutes=90
        )

        assert available == _all_except("10:00", "10:30", "11:00")

    def test_unaligned_booking_blocks_both_touched_slots(self):
        available = compute_available_slots(DAY, [_booking("10:15", 30)])

        assert available == _all_except("10:00", "10:30")

    def test_end_to_end_day(self):
        bookings = [_booking("10:00", 60), _booking("14:00", 30)]

        available = compute_available_slots(DAY, bookings, granularity_minutes=30)

        expected = (
            [s for s in generate_candidate_slots(30) if s <= "09:30"]
            + [s for s in generate_candidate_slots(30) if "11:00" <= s <= "13:30"]
            + [s for s in generate_candidate_slots(30) if s >= "14:30"]
        )
        assert available == expected
        assert len(available) == 45

    def test_fully_booked_day(self):
        available = compute_available_slots(DAY, [_booking("00:00", 1440)])

        assert available == []

    def test_result_is_subset_and_idempotent(self):
        bookings = [_booking("08:10", 25), _booking("12:00", 120), _booking("20:45", None)]

        first = compute_available_slots(DAY, bookings, granularity_minutes=15)
        second = compute_available_slots(DAY, bookings, granularity_minutes=15)

        assert first == second
        assert set(first) <= set(generate_candidate_slots(15))
        assert first == sorted(first)

    def test_coarser_granularity(self):
        available = compute_available_slots(DAY, [_booking("10:30", 30)], granularity_minutes=60)

        assert "10:00" not in available
        assert "11:00" in available
        assert len(available) == 23

    def test_booking_order_does_not_matter(self):
        bookings = [_booking("14:00", 30), _booking("10:00", 60)]

        assert compute_available_slots(DAY, bookings) == compute_available_slots(DAY, bookings[::-1])

    def test_timezone_is_applied_to_bookings(self):
        """A booking at 09:00 UTC occupies 10:00 Berlin time."""
        booking = Booking(start=pendulum.datetime(2024, 11, 25, 9, 0, tz="UTC"), duration_minutes=30)

        available = compute_available_slots(DAY, [booking], timezone="Europe/Berlin")

        assert available == _all_except("10:00")

    def test_booking_from_previous_evening_spills_into_day(self):
        booking = _booking("23:30", 90, day="2024-11-24")

        available = compute_available_slots(DAY, [booking])

        assert available == _all_except("00:00", "00:30")

    def test_booking_on_next_day_blocks_nothing(self):
        booking = _booking("00:00", 60, day="2024-11-26")

        assert compute_available_slots(DAY, [booking]) == generate_candidate_slots(30)

    def test_malformed_day(self):
        with pytest.raises(InvalidInputError):
            compute_available_slots("25/11/2024x", [])

    def test_invalid_default_duration(self):
        with pytest.raises(ConfigurationError):
            compute_available_slots(DAY, [], default_duration_minutes=0)


class TestRequestedDurationLookahead:
    """Tests for the opt-in check that a whole appointment fits."""

    def test_single_window_by_default(self):
        """Without a requested duration, 10:30 is offered right before an 11:00 booking."""
        available = compute_available_slots(DAY, [_booking("11:00", 60)])

        assert "10:00" in available
        assert "10:30" in available

    def test_long_appointment_needs_room(self):
        available = compute_available_slots(
            DAY, [_booking("11:00", 60)], requested_duration_minutes=90
        )

        assert "09:30" in available
        assert "10:00" not in available
        assert "10:30" not in available
        assert "11:00" not in available
        assert "11:30" not in available
        assert "12:00" in available

    def test_short_request_behaves_like_default(self):
        bookings = [_booking("11:00", 60)]

        assert compute_available_slots(
            DAY, bookings, requested_duration_minutes=15
        ) == compute_available_slots(DAY, bookings)

    def test_requested_appointment_ends_by_midnight(self):
        available = compute_available_slots(DAY, [], requested_duration_minutes=90)

        assert available[-1] == "22:30"
        assert "23:00" not in available
        assert "23:30" not in available
        assert len(available) == 46


class TestSlotCalculator:
    """Tests for the configured engine."""

    def test_invalid_configuration_fails_at_construction(self):
        with pytest.raises(ConfigurationError):
            SlotCalculator(granularity_minutes=25)

        with pytest.raises(ConfigurationError):
            SlotCalculator(default_duration_minutes=-1)

    def test_candidate_slots(self):
        calculator = SlotCalculator(granularity_minutes=15)

        assert len(calculator.candidate_slots()) == 96

    def test_booked_slots_sorted_with_default_duration(self):
        calculator = SlotCalculator(timezone="Europe/Berlin")
        bookings = [
            _booking("14:00", 30, tz="Europe/Berlin"),
            _booking("10:00", None, tz="Europe/Berlin"),
        ]

        booked = calculator.booked_slots(DAY, bookings)

        assert booked == [
            TimeSlot(time="10:00", duration_minutes=60),
            TimeSlot(time="14:00", duration_minutes=30),
        ]

    def test_available_slots_matches_function(self):
        calculator = SlotCalculator(granularity_minutes=30, default_duration_minutes=60)
        bookings = [_booking("10:00", 60), _booking("14:00", 30)]

        assert calculator.available_slots(DAY, bookings) == compute_available_slots(DAY, bookings)
