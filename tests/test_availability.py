"""Tests for slot generation.

generate_slots() is pure; get_venue_slots() is tested with a mocked cursor
and patched repository functions.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from courtly.domain.availability import (
    day_of_week,
    generate_slots,
    get_venue_slots,
    is_day_closed,
)
from courtly.domain.models import BlockedDate, BookedInterval, OperatingHours
from courtly.domain.timeslots import intervals_overlap
from courtly.domain.venues import VenueNotFound
from helpers import make_venue

# 2025-03-10 is a Monday
MONDAY = date(2025, 3, 10)
SUNDAY = date(2025, 3, 9)


def _hours(open_time=9 * 60, close_time=22 * 60, dow=1, is_closed=False):
    return OperatingHours(day_of_week=dow, open_time=open_time, close_time=close_time, is_closed=is_closed)


def _booking(start, duration=60, status="confirmed", booking_id="b-1"):
    return BookedInterval(id=booking_id, start_time=start, duration_minutes=duration, status=status)


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(SUNDAY) == 0

    def test_monday_is_one(self):
        assert day_of_week(MONDAY) == 1

    def test_saturday_is_six(self):
        assert day_of_week(date(2025, 3, 15)) == 6


class TestClosedDays:
    def test_no_hours_row(self):
        assert generate_slots(MONDAY, None, [], []) == []

    def test_closed_flag(self):
        assert generate_slots(MONDAY, _hours(is_closed=True), [], []) == []

    def test_blocked_date(self):
        blocked = [BlockedDate(id="bd-1", blocked_date=MONDAY, reason="Maintenance")]
        assert generate_slots(MONDAY, _hours(), blocked, []) == []

    def test_other_blocked_dates_ignored(self):
        blocked = [BlockedDate(id="bd-1", blocked_date=date(2025, 3, 11))]
        assert generate_slots(MONDAY, _hours(), blocked, []) != []
        assert not is_day_closed(MONDAY, _hours(), blocked)


class TestSlotLayout:
    def test_nine_to_twenty_two_gives_thirteen_hourly_slots(self):
        slots = generate_slots(MONDAY, _hours(), [], [])

        assert len(slots) == 13
        assert slots[0].as_dict() == {"start_time": "09:00", "end_time": "10:00", "available": True}
        assert slots[-1].as_dict() == {"start_time": "21:00", "end_time": "22:00", "available": True}

    def test_partial_final_slot_not_emitted(self):
        slots = generate_slots(MONDAY, _hours(open_time=9 * 60, close_time=11 * 60 + 30), [], [])
        assert [s.start_time for s in slots] == [540, 600]

    def test_slots_are_ordered_and_contiguous(self):
        slots = generate_slots(MONDAY, _hours(), [], [], slot_minutes=30)
        starts = [s.start_time for s in slots]
        assert starts == sorted(starts)
        assert all(b - a == 30 for a, b in zip(starts, starts[1:]))

    def test_closing_at_midnight(self):
        slots = generate_slots(MONDAY, _hours(open_time=22 * 60, close_time=24 * 60), [], [])
        assert [s.as_dict()["end_time"] for s in slots] == ["23:00", "24:00"]

    def test_slot_longer_than_opening_window(self):
        assert generate_slots(MONDAY, _hours(open_time=600, close_time=630), [], []) == []

    @pytest.mark.parametrize("slot_minutes", [0, -30, 1441])
    def test_invalid_slot_length(self, slot_minutes):
        with pytest.raises(ValueError):
            generate_slots(MONDAY, _hours(), [], [], slot_minutes=slot_minutes)

    def test_hours_for_wrong_weekday(self):
        with pytest.raises(ValueError):
            generate_slots(MONDAY, _hours(dow=3), [], [])


class TestAvailabilityMarking:
    def test_booking_marks_its_slot_taken(self):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(600)])
        taken = [s.start_time for s in slots if not s.available]
        assert taken == [600]

    def test_ninety_minute_booking_takes_two_slots(self):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(600, duration=90)])
        taken = [s.start_time for s in slots if not s.available]
        assert taken == [600, 660]

    def test_offset_booking_blocks_both_neighbours(self):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(630, duration=60)])
        taken = [s.start_time for s in slots if not s.available]
        assert taken == [600, 660]

    def test_booking_ending_at_slot_start_does_not_block(self):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(540, duration=60)])
        by_start = {s.start_time: s.available for s in slots}
        assert by_start[540] is False
        assert by_start[600] is True

    def test_cancelled_booking_ignored(self):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(600, status="cancelled")])
        assert all(s.available for s in slots)

    @pytest.mark.parametrize("status", ["pending", "confirmed", "completed"])
    def test_non_cancelled_statuses_block(self, status):
        slots = generate_slots(MONDAY, _hours(), [], [_booking(600, status=status)])
        assert not next(s for s in slots if s.start_time == 600).available

    def test_available_iff_no_overlap(self):
        bookings = [
            _booking(570, duration=90, booking_id="b-1"),
            _booking(780, duration=30, booking_id="b-2"),
            _booking(1200, duration=120, booking_id="b-3", status="cancelled"),
        ]
        slots = generate_slots(MONDAY, _hours(), [], bookings, slot_minutes=30)

        active = [b.interval for b in bookings if b.status != "cancelled"]
        for slot in slots:
            overlaps = any(intervals_overlap(slot.interval, iv) for iv in active)
            assert slot.available is not overlaps


@pytest.fixture
def cur():
    return MagicMock()


_VENUE = make_venue()


class TestGetVenueSlots:
    def test_loads_inputs_and_generates(self, cur):
        with (
            patch("courtly.domain.availability.load_venue", return_value=_VENUE),
            patch("courtly.domain.availability.get_operating_hours", return_value=_hours()) as hours,
            patch("courtly.domain.availability.list_blocked_dates", return_value=[]),
            patch(
                "courtly.domain.availability.list_active_bookings",
                return_value=[_booking(600)],
            ),
        ):
            slots = get_venue_slots("venue-1", MONDAY, slot_minutes=60, cur=cur)

        hours.assert_called_once_with(cur, venue_id="venue-1", day_of_week=1)
        assert len(slots) == 13
        assert [s.start_time for s in slots if not s.available] == [600]

    def test_closed_day_skips_booking_query(self, cur):
        with (
            patch("courtly.domain.availability.load_venue", return_value=_VENUE),
            patch("courtly.domain.availability.get_operating_hours", return_value=None),
            patch("courtly.domain.availability.list_blocked_dates", return_value=[]),
            patch("courtly.domain.availability.list_active_bookings") as bookings,
        ):
            assert get_venue_slots("venue-1", MONDAY, cur=cur) == []

        bookings.assert_not_called()

    def test_slot_length_defaults_to_setting(self, cur):
        with (
            patch.dict("os.environ", {"COURTLY_SLOT_MINUTES": "30"}),
            patch("courtly.domain.availability.load_venue", return_value=_VENUE),
            patch("courtly.domain.availability.get_operating_hours", return_value=_hours()),
            patch("courtly.domain.availability.list_blocked_dates", return_value=[]),
            patch("courtly.domain.availability.list_active_bookings", return_value=[]),
        ):
            slots = get_venue_slots("venue-1", MONDAY, cur=cur)

        assert len(slots) == 26

    def test_unknown_venue(self, cur):
        with patch("courtly.domain.availability.load_venue", side_effect=VenueNotFound("nope")):
            with pytest.raises(VenueNotFound):
                get_venue_slots("nope", MONDAY, cur=cur)
