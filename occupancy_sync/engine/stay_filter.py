"""Stay predicates: active today, checking out today, test booking, eligibility."""

import re
from datetime import date
from functools import lru_cache
from typing import Iterable, Optional, Union

from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import LifecycleStatus, Stay

ELIGIBLE_STATUSES = frozenset({LifecycleStatus.NEW, LifecycleStatus.MODIFIED})


def is_active_today(stay: Stay, today: date) -> bool:
    """A stay occupies the unit from arrival up to, not including, departure."""
    return stay.arrival_date <= today < stay.departure_date


def is_checking_out_today(stay: Stay, today: date) -> bool:
    return stay.departure_date == today


def is_eligible_status(stay: Stay) -> bool:
    """Only new and modified reservations count towards occupancy."""
    return stay.lifecycle_status in ELIGIBLE_STATUSES


def _token_pattern(tokens: Iterable[str]) -> Optional[re.Pattern[str]]:
    """Compile a whole-word, case-insensitive alternation of tokens.

    Multi-word tokens match with any run of whitespace between words.
    Longer tokens are tried first so "test guest" wins over "test".
    """
    parts = [
        r"\s+".join(re.escape(word) for word in token.split())
        for token in sorted({t.strip().lower() for t in tokens if t.strip()}, key=len, reverse=True)
    ]
    if not parts:
        return None
    return re.compile(r"\b(?:" + "|".join(parts) + r")\b", re.IGNORECASE)


class TestBookingDetector:
    """Heuristic detector for placeholder or test reservations.

    A booking is a likely test when the guest name is empty, or matches the
    guest-name word list, or the comment/guest note match the narrower note
    word list. Matching is whole-word and case-insensitive, so "Testa" or
    "Guestini" are real guests.
    """

    __test__ = False  # Not a pytest test class

    def __init__(
        self,
        guest_name_tokens: Optional[Iterable[str]] = None,
        note_tokens: Optional[Iterable[str]] = None,
    ):
        self.name_pattern = _token_pattern(
            guest_name_tokens
            if guest_name_tokens is not None
            else settings.stay_filter.guest_name_tokens
        )
        self.note_pattern = _token_pattern(
            note_tokens if note_tokens is not None else settings.stay_filter.note_tokens
        )

    def is_test_guest_name(self, guest_name: Optional[str]) -> bool:
        name = (guest_name or "").strip()
        if not name:
            return True
        return bool(self.name_pattern and self.name_pattern.search(name))

    def is_test_note(self, text: Optional[str]) -> bool:
        if not text or self.note_pattern is None:
            return False
        return bool(self.note_pattern.search(text))

    def is_likely_test(
        self,
        guest_name: Optional[str],
        comment: Optional[str] = None,
        guest_note: Optional[str] = None,
    ) -> bool:
        return (
            self.is_test_guest_name(guest_name)
            or self.is_test_note(comment)
            or self.is_test_note(guest_note)
        )


@lru_cache(maxsize=1)
def _get_default_detector() -> TestBookingDetector:
    return TestBookingDetector()


def is_likely_test_booking(
    stay: Union[Stay, str, None],
    detector: Optional[TestBookingDetector] = None,
) -> bool:
    """Check a stay (or a bare guest name) against the test-booking heuristic.

    Args:
        stay: Stay to check, or just a guest name
        detector: Detector to use; defaults to one built from settings

    Returns:
        True if the booking looks like a test or placeholder
    """
    detector = detector or _get_default_detector()
    if stay is None or isinstance(stay, str):
        return detector.is_test_guest_name(stay)
    return detector.is_likely_test(stay.guest_name, stay.comment, stay.guest_note)


def qualifies_for_occupancy(
    stay: Stay,
    today: date,
    detector: Optional[TestBookingDetector] = None,
) -> bool:
    """Eligible status, not a test booking, and active today."""
    if not is_eligible_status(stay):
        return False
    if stay.is_likely_test or is_likely_test_booking(stay, detector):
        return False
    return is_active_today(stay, today)
