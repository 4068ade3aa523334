"""
Who is coming: nationality, branch, unit, participation mode / location.

Each breakdown is a single group-count-sort. Percentages are 1-decimal
floats over the denominator that belongs to that breakdown:
- nationality, unit: every record
- branch: members with a branch only
- mode: every record; location: onsite records only
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from registration_reports.models.analytics import (
    CategoryCount,
    CategoryDistribution,
    ModeLocationStats,
    NationalityBreakdown,
)
from registration_reports.models.registration import AttendeeRecord, LocationType
from registration_reports.utils.config import EventSettings


def _pct(count: int, denominator: int) -> float:
    return round(count / denominator * 100, 1) if denominator else 0.0


def _count_sorted(names: Iterable[str]) -> Tuple[Tuple[str, int], ...]:
    """Count names; most frequent first, ties kept in first-seen order."""
    counts: Dict[str, int] = {}
    for name in names:
        counts[name] = counts.get(name, 0) + 1
    # sorted() is stable and dicts keep insertion order
    return tuple(sorted(counts.items(), key=lambda kv: kv[1], reverse=True))


def _distribution(names: Sequence[str]) -> CategoryDistribution:
    total = len(names)
    return CategoryDistribution(
        categories=tuple(
            CategoryCount(name=name, count=count, percentage=_pct(count, total))
            for name, count in _count_sorted(names)
        ),
        total=total,
    )


def calculate_nationality_breakdown(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
) -> NationalityBreakdown:
    settings = settings or EventSettings()
    home = settings.home_country

    names = [r.nationality or home for r in records]
    dist = _distribution(names)
    local_count = sum(1 for n in names if n == home)

    return NationalityBreakdown(
        countries=dist.categories,
        total=dist.total,
        total_countries=len(dist.categories),
        local_count=local_count,
        international_count=dist.total - local_count,
    )


def calculate_branch_distribution(records: Sequence[AttendeeRecord]) -> CategoryDistribution:
    # Guests and members without a branch are out of the denominator too
    return _distribution([r.branch for r in records if r.is_member and r.branch])


def calculate_unit_distribution(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
) -> CategoryDistribution:
    settings = settings or EventSettings()
    return _distribution([r.church_unit or settings.unassigned_unit_label for r in records])


def calculate_mode_location_stats(records: Sequence[AttendeeRecord]) -> ModeLocationStats:
    total = len(records)
    online = sum(1 for r in records if r.is_online)
    onsite_records = [r for r in records if r.is_onsite]
    onsite = len(onsite_records)

    within = sum(1 for r in onsite_records if r.location_type is LocationType.WITHIN_ZARIA)
    outside = sum(1 for r in onsite_records if r.location_type is LocationType.OUTSIDE_ZARIA)

    return ModeLocationStats(
        total=total,
        online_count=online,
        onsite_count=onsite,
        within_zaria_count=within,
        outside_zaria_count=outside,
        online_percentage=_pct(online, total),
        onsite_percentage=_pct(onsite, total),
        within_zaria_percentage=_pct(within, onsite),
        outside_zaria_percentage=_pct(outside, onsite),
    )
