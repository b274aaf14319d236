"""Bedroom category classification for rental units.

Classification is a first-match-wins cascade of strategy functions. Each
strategy inspects one signal and returns a Category, or None to defer to the
next strategy. Units that no strategy recognises are Unknown.
"""

import re
from typing import Callable, Iterable, Optional

from occupancy_sync.config import settings
from occupancy_sync.models.occupancy import Category, RentalUnit

# Strategy signature: (unit, premium_ids) -> Category or None
CategoryStrategy = Callable[[RentalUnit, frozenset[str]], Optional[Category]]

_NUMBER_WORDS = {1: "one", 2: "two", 3: "three"}


def _bedroom_pattern(count: int) -> re.Pattern[str]:
    """Match "2BR", "2 BR", "2-BR", "(2B)", "2 bedroom", "2-bedroom", "two bedroom"."""
    word = _NUMBER_WORDS[count]
    return re.compile(
        rf"(?<!\d){count}\s*-?\s*br\b"
        rf"|\(\s*{count}\s*br?\s*\)"
        rf"|(?:(?<!\d){count}|\b{word})[\s-]*bed(?:room)?s?\b",
        re.IGNORECASE,
    )


_STUDIO_PATTERN = re.compile(r"\bstudio\b|\(\s*s\s*\)", re.IGNORECASE)
_BEDROOM_PATTERNS = {count: _bedroom_pattern(count) for count in (3, 2, 1)}


def _two_bedroom(unit: RentalUnit, premium_ids: frozenset[str]) -> Category:
    return Category.TWO_BR_PREMIUM if unit.id in premium_ids else Category.TWO_BR


def classify_by_bedroom_count(
    unit: RentalUnit, premium_ids: frozenset[str]
) -> Optional[Category]:
    """Use the explicit bedroom count. Negative or absent counts defer."""
    count = unit.bedroom_count
    if count is None or count < 0:
        return None
    if count == 0:
        return Category.STUDIO
    if count == 1:
        return Category.ONE_BR
    if count == 2:
        return _two_bedroom(unit, premium_ids)
    return Category.THREE_BR


def classify_by_name_tokens(
    unit: RentalUnit, premium_ids: frozenset[str]
) -> Optional[Category]:
    """Look for bedroom tokens in the display name, then the public name."""
    for name in (unit.display_name, unit.name):
        if not name:
            continue
        if _STUDIO_PATTERN.search(name):
            return Category.STUDIO
        if _BEDROOM_PATTERNS[3].search(name):
            return Category.THREE_BR
        if _BEDROOM_PATTERNS[2].search(name):
            return _two_bedroom(unit, premium_ids)
        if _BEDROOM_PATTERNS[1].search(name):
            return Category.ONE_BR
    return None


def classify_by_guest_capacity(
    unit: RentalUnit, premium_ids: frozenset[str]
) -> Optional[Category]:
    """Infer from guest capacity: <=2 Studio, <=4 1BR, <=6 2BR, else 3BR."""
    capacity = unit.guest_capacity
    if capacity is None or capacity <= 0:
        return None
    if capacity <= 2:
        return Category.STUDIO
    if capacity <= 4:
        return Category.ONE_BR
    if capacity <= 6:
        return _two_bedroom(unit, premium_ids)
    return Category.THREE_BR


DEFAULT_STRATEGIES: tuple[CategoryStrategy, ...] = (
    classify_by_bedroom_count,
    classify_by_name_tokens,
    classify_by_guest_capacity,
)


class CategoryClassifier:
    """Maps unit metadata to a bedroom category. Pure and deterministic."""

    def __init__(
        self,
        premium_unit_ids: Optional[Iterable[str | int]] = None,
        strategies: Optional[Iterable[CategoryStrategy]] = None,
    ):
        """Initialize the classifier.

        Args:
            premium_unit_ids: Unit ids whose two-bedroom category is Premium.
                Defaults to CLASSIFIER_PREMIUM_UNIT_IDS.
            strategies: Ordered strategy functions. Defaults to bedroom
                count, then name tokens, then guest capacity.
        """
        ids = (
            premium_unit_ids
            if premium_unit_ids is not None
            else settings.classifier.premium_unit_ids
        )
        self.premium_ids = frozenset(str(unit_id) for unit_id in ids)
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def classify(self, unit: RentalUnit) -> Category:
        """Return the first category any strategy recognises, else Unknown."""
        for strategy in self.strategies:
            category = strategy(unit, self.premium_ids)
            if category is not None:
                return category
        return Category.UNKNOWN

    def is_premium(self, unit: RentalUnit) -> bool:
        return unit.id in self.premium_ids
