from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


# ------------------------------------------------------------
# Registration trend
# ------------------------------------------------------------
@dataclass(frozen=True)
class TrendBucket:
    date: str
    online_count: int
    onsite_count: int
    total: int


@dataclass(frozen=True)
class RegistrationTrend:
    daily_counts: Tuple[TrendBucket, ...]
    total_registrations: int
    total_online: int
    total_onsite: int
    peak_day: Optional[TrendBucket]
    current_rate: float        # mean total of the last 7 buckets present
    days_until_event: int
    projection: int


# ------------------------------------------------------------
# Arrivals
# ------------------------------------------------------------
@dataclass(frozen=True)
class ArrivalBucket:
    date: str
    count: int
    general: int
    hotel: int
    with_meals: int
    within_zaria: int
    outside_zaria: int


@dataclass(frozen=True)
class DailyArrivals:
    arrivals_by_date: Tuple[ArrivalBucket, ...]
    total_arrivals: int        # every onsite registrant, dated or not
    arrivals_with_date: int
    peak_arrival: Optional[ArrivalBucket]


# ------------------------------------------------------------
# Meals
# ------------------------------------------------------------
@dataclass(frozen=True)
class MealDay:
    date: str
    attendees: int
    breakfast: int
    lunch: int
    dinner: int

    @property
    def total(self) -> int:
        return self.breakfast + self.lunch + self.dinner


@dataclass(frozen=True)
class MealRequirements:
    daily_meals: Tuple[MealDay, ...]
    eligible_attendees: int
    total_breakfast: int
    total_lunch: int
    total_dinner: int
    total_meals: int
    average_meals_per_day: float


# ------------------------------------------------------------
# Accommodation
# ------------------------------------------------------------
@dataclass(frozen=True)
class OccupancyBucket:
    date: str
    general: int
    hotel: int
    total: int


@dataclass(frozen=True)
class AccommodationStats:
    general_requests: int
    hotel_requests: int
    nightly_occupancy: Tuple[OccupancyBucket, ...]
    peak_occupancy: Optional[OccupancyBucket]
    average_stay_nights: float


# ------------------------------------------------------------
# Category breakdowns
# ------------------------------------------------------------
@dataclass(frozen=True)
class CategoryCount:
    name: str
    count: int
    percentage: float


@dataclass(frozen=True)
class CategoryDistribution:
    categories: Tuple[CategoryCount, ...]
    total: int                 # denominator used for the percentages


@dataclass(frozen=True)
class NationalityBreakdown:
    countries: Tuple[CategoryCount, ...]
    total: int
    total_countries: int
    local_count: int
    international_count: int


@dataclass(frozen=True)
class ModeLocationStats:
    total: int
    online_count: int
    onsite_count: int
    within_zaria_count: int
    outside_zaria_count: int
    online_percentage: float
    onsite_percentage: float
    within_zaria_percentage: float     # of onsite
    outside_zaria_percentage: float    # of onsite


# ------------------------------------------------------------
# Everything at once (dashboard / analytics workbook)
# ------------------------------------------------------------
@dataclass(frozen=True)
class DashboardSummary:
    trend: RegistrationTrend
    arrivals: DailyArrivals
    meals: MealRequirements
    accommodation: AccommodationStats
    nationality: NationalityBreakdown
    branches: CategoryDistribution
    units: CategoryDistribution
    mode_location: ModeLocationStats
