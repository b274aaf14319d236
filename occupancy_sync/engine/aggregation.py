"""Roll per-unit statuses up into category and portfolio totals."""

from collections import Counter
from typing import Iterable, Mapping, Optional

from occupancy_sync.models.occupancy import (
    CATEGORY_ORDER,
    Category,
    CategorySnapshot,
    OccupancyStatus,
    UnitOccupancy,
)


def occupancy_rate(reserved: int, total: int) -> int:
    """Whole-percent reserved/total, rounded half up. Zero when total is 0.

    Integer arithmetic keeps exact halves (e.g. 1/8 = 12.5%) from falling
    prey to float rounding or banker's rounding.
    """
    if total <= 0:
        return 0
    return (reserved * 200 + total) // (2 * total)


def _snapshot(category: Optional[Category], counts: Counter) -> CategorySnapshot:
    available = counts[OccupancyStatus.AVAILABLE]
    reserved = counts[OccupancyStatus.RESERVED]
    blocked = counts[OccupancyStatus.BLOCKED]
    total = available + reserved + blocked
    return CategorySnapshot(
        category=category,
        available=available,
        reserved=reserved,
        blocked=blocked,
        total=total,
        occupancy_rate=occupancy_rate(reserved, total),
    )


def aggregate(
    per_unit_status: Mapping[str, OccupancyStatus],
    per_unit_category: Mapping[str, Category],
) -> dict[Category, CategorySnapshot]:
    """Count statuses per category.

    Every reporting category appears, even when empty. Unknown appears only
    when at least one unit is unclassified.

    Args:
        per_unit_status: Unit id to status
        per_unit_category: Unit id to category; missing ids count as Unknown

    Returns:
        Ordered mapping of category to its snapshot
    """
    counts: dict[Category, Counter] = {category: Counter() for category in CATEGORY_ORDER}
    for unit_id, status in per_unit_status.items():
        category = per_unit_category.get(unit_id, Category.UNKNOWN)
        counts.setdefault(category, Counter())[status] += 1

    return {category: _snapshot(category, counter) for category, counter in counts.items()}


def portfolio_total(
    per_unit_status: Mapping[str, OccupancyStatus],
) -> CategorySnapshot:
    """Totals across every unit regardless of category."""
    return _snapshot(None, Counter(per_unit_status.values()))


def aggregate_units(
    units: Iterable[UnitOccupancy],
) -> tuple[dict[Category, CategorySnapshot], CategorySnapshot]:
    """Convenience wrapper over reconciled units.

    Returns:
        Tuple of (per-category snapshots, portfolio total)
    """
    units = list(units)
    per_unit_status = {unit.unit_id: unit.status for unit in units}
    per_unit_category = {unit.unit_id: unit.category for unit in units}
    return aggregate(per_unit_status, per_unit_category), portfolio_total(per_unit_status)
