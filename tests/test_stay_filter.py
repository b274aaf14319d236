"""Unit tests for stay predicates."""

from datetime import date

import pytest

from occupancy_sync.engine import (
    TestBookingDetector,
    is_active_today,
    is_checking_out_today,
    is_eligible_status,
    is_likely_test_booking,
    qualifies_for_occupancy,
)
from occupancy_sync.models.occupancy import LifecycleStatus


class TestActiveToday:
    """Active means arrival <= today < departure."""

    def test_arriving_today_is_active(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert is_active_today(stay, date(2024, 1, 10))

    def test_mid_stay_is_active(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert is_active_today(stay, date(2024, 1, 11))

    def test_departure_day_is_not_active(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert not is_active_today(stay, date(2024, 1, 12))

    def test_future_stay_is_not_active(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert not is_active_today(stay, date(2024, 1, 9))


class TestCheckingOutToday:
    def test_departure_day_flags_checkout(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert is_checking_out_today(stay, date(2024, 1, 12))

    def test_mid_stay_is_not_checkout(self, make_stay):
        stay = make_stay(arrival_date=date(2024, 1, 10), departure_date=date(2024, 1, 12))
        assert not is_checking_out_today(stay, date(2024, 1, 11))


class TestLikelyTestBooking:
    """Whole-word, case-insensitive test-booking heuristic."""

    @pytest.mark.parametrize(
        "guest_name,expected",
        [
            ("", True),
            ("   ", True),
            (None, True),
            ("John Smith", False),
            ("Test Guest", True),
            ("TESTING", True),
            ("New Guest", True),
            ("guests", True),
            ("Testa Rossi", False),
            ("Guestini Marco", False),
            ("Newman Family", False),
        ],
    )
    def test_guest_names(self, guest_name, expected):
        assert is_likely_test_booking(guest_name) is expected

    def test_comment_marks_test(self, make_stay):
        stay = make_stay(guest_name="Sara Lee", comment="testing the channel manager")
        assert is_likely_test_booking(stay)

    def test_guest_note_marks_test(self, make_stay):
        stay = make_stay(guest_name="Sara Lee", guest_note="New guest placeholder")
        assert is_likely_test_booking(stay)

    def test_note_word_list_is_narrower_than_name_list(self, make_stay):
        stay = make_stay(guest_name="Sara Lee", comment="Guest requested early check-in")
        assert not is_likely_test_booking(stay)

    def test_real_booking(self, make_stay):
        stay = make_stay(guest_name="Sara Lee", comment="Airport pickup", guest_note="Two kids")
        assert not is_likely_test_booking(stay)

    def test_custom_detector(self, make_stay):
        detector = TestBookingDetector(guest_name_tokens=["dummy"], note_tokens=[])
        assert is_likely_test_booking(make_stay(guest_name="Dummy Booking"), detector)
        assert not is_likely_test_booking(make_stay(guest_name="Test Guest"), detector)


class TestEligibility:
    @pytest.mark.parametrize(
        "status,expected",
        [
            (LifecycleStatus.NEW, True),
            (LifecycleStatus.MODIFIED, True),
            (LifecycleStatus.CANCELLED, False),
            (LifecycleStatus.OTHER, False),
        ],
    )
    def test_status(self, make_stay, status, expected):
        assert is_eligible_status(make_stay(lifecycle_status=status)) is expected


class TestQualifiesForOccupancy:
    def test_active_real_stay_qualifies(self, make_stay, today):
        assert qualifies_for_occupancy(make_stay(), today)

    def test_cancelled_stay_does_not_qualify(self, make_stay, today):
        assert not qualifies_for_occupancy(
            make_stay(lifecycle_status=LifecycleStatus.CANCELLED), today
        )

    def test_test_booking_does_not_qualify(self, make_stay, today):
        assert not qualifies_for_occupancy(make_stay(guest_name="Test Guest"), today)

    def test_precomputed_test_flag_is_respected(self, make_stay, today):
        assert not qualifies_for_occupancy(make_stay(is_likely_test=True), today)
