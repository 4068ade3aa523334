"""
Onsite logistics: arrivals, meals, accommodation.

Rules:
- Onsite records only; Online registrants never count toward logistics
- Meals count DAYS PRESENT: arrival..departure, both ends included
- Accommodation counts NIGHTS OCCUPIED: arrival..departure, departure excluded
- A record without both stay dates is left out of every per-day bucket
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from registration_reports.models.analytics import (
    AccommodationStats,
    ArrivalBucket,
    DailyArrivals,
    MealDay,
    MealRequirements,
    OccupancyBucket,
)
from registration_reports.models.registration import (
    AccommodationType,
    AttendeeRecord,
    LocationType,
)
from registration_reports.utils.config import EventSettings
from registration_reports.utils.dates import event_days
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)


def _peak(buckets, attr: str):
    """First bucket with the strictly highest value; None when all are zero."""
    peak = None
    for b in buckets:
        if getattr(b, attr) > (getattr(peak, attr) if peak else 0):
            peak = b
    return peak


# ============================================================
# ARRIVALS
# ============================================================

def calculate_daily_arrivals(records: Sequence[AttendeeRecord]) -> DailyArrivals:
    onsite = [r for r in records if r.is_onsite]

    arrivals: Dict[str, Dict[str, int]] = {}
    for rec in onsite:
        if rec.arrival_date is None:
            continue

        key = rec.arrival_date.isoformat()
        if key not in arrivals:
            arrivals[key] = {
                "count": 0,
                "general": 0,
                "hotel": 0,
                "with_meals": 0,
                "within_zaria": 0,
                "outside_zaria": 0,
            }

        bucket = arrivals[key]
        bucket["count"] += 1
        if rec.accommodation_type is AccommodationType.GENERAL:
            bucket["general"] += 1
        elif rec.accommodation_type is AccommodationType.HOTEL:
            bucket["hotel"] += 1

        if rec.location_type is LocationType.OUTSIDE_ZARIA:
            bucket["outside_zaria"] += 1
            bucket["with_meals"] += 1
        elif rec.location_type is LocationType.WITHIN_ZARIA:
            bucket["within_zaria"] += 1

    by_date: List[ArrivalBucket] = [
        ArrivalBucket(date=key, **vals) for key, vals in sorted(arrivals.items())
    ]

    return DailyArrivals(
        arrivals_by_date=tuple(by_date),
        total_arrivals=len(onsite),
        arrivals_with_date=sum(b.count for b in by_date),
        peak_arrival=_peak(by_date, "count"),
    )


# ============================================================
# MEALS
# ============================================================

def calculate_meal_requirements(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
) -> MealRequirements:
    settings = settings or EventSettings()

    eligible = [r for r in records if r.meals_eligible and r.has_stay_window]
    skipped = sum(1 for r in records if r.meals_eligible and not r.has_stay_window)
    if skipped:
        logger.debug("%d meal-eligible registrations lack a stay window", skipped)

    days: List[MealDay] = []
    for day in event_days(settings.event_start, settings.event_end):
        present = sum(
            1 for r in eligible if r.arrival_date <= day <= r.departure_date
        )
        days.append(
            MealDay(
                date=day.isoformat(),
                attendees=present,
                breakfast=present,
                lunch=present,
                dinner=present,
            )
        )

    total_breakfast = sum(d.breakfast for d in days)
    total_lunch = sum(d.lunch for d in days)
    total_dinner = sum(d.dinner for d in days)
    total_meals = total_breakfast + total_lunch + total_dinner

    return MealRequirements(
        daily_meals=tuple(days),
        eligible_attendees=len(eligible),
        total_breakfast=total_breakfast,
        total_lunch=total_lunch,
        total_dinner=total_dinner,
        total_meals=total_meals,
        average_meals_per_day=round(total_meals / len(days), 1) if days else 0.0,
    )


# ============================================================
# ACCOMMODATION
# ============================================================

def calculate_accommodation_stats(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
) -> AccommodationStats:
    settings = settings or EventSettings()

    onsite = [r for r in records if r.is_onsite]
    staying = [r for r in onsite if r.has_stay_window]

    general_requests = sum(1 for r in onsite if r.accommodation_type is AccommodationType.GENERAL)
    hotel_requests = sum(1 for r in onsite if r.accommodation_type is AccommodationType.HOTEL)

    # ------------------------------------------------------------
    # Nightly occupancy (checkout day is not a night)
    # ------------------------------------------------------------
    nights: List[OccupancyBucket] = []
    for night in event_days(settings.event_start, settings.event_end):
        general = hotel = total = 0
        for r in staying:
            if not (r.arrival_date <= night < r.departure_date):
                continue
            total += 1
            if r.accommodation_type is AccommodationType.GENERAL:
                general += 1
            elif r.accommodation_type is AccommodationType.HOTEL:
                hotel += 1
        nights.append(
            OccupancyBucket(date=night.isoformat(), general=general, hotel=hotel, total=total)
        )

    # ------------------------------------------------------------
    # Mean stay length in nights
    # ------------------------------------------------------------
    stay_lengths = [(r.departure_date - r.arrival_date).days for r in staying]
    average_stay = (
        round(sum(stay_lengths) / len(stay_lengths), 1) if stay_lengths else 0.0
    )

    return AccommodationStats(
        general_requests=general_requests,
        hotel_requests=hotel_requests,
        nightly_occupancy=tuple(nights),
        peak_occupancy=_peak(nights, "total"),
        average_stay_nights=average_stay,
    )
