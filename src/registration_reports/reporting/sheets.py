# src/registration_reports/reporting/sheets.py
"""
Row builders: turn records and aggregates into uniform row dicts.

Presentation-layer only:
- No file I/O
- No aggregation rules of their own (counts come from analytics/)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from registration_reports.analytics.logistics import calculate_daily_arrivals
from registration_reports.models.analytics import (
    AccommodationStats,
    CategoryDistribution,
    DailyArrivals,
    DashboardSummary,
    MealRequirements,
    ModeLocationStats,
    NationalityBreakdown,
    RegistrationTrend,
)
from registration_reports.models.registration import AttendeeRecord
from registration_reports.utils.dates import format_timestamp

Row = Dict[str, object]


@dataclass(frozen=True)
class SheetData:
    """One named sheet: uniform rows plus the header order."""
    name: str
    rows: Sequence[Row]
    columns: Optional[Sequence[str]] = field(default=None)


def _or(value, default: str):
    return value if value else default


def _enum_value(member) -> str:
    return member.value if member is not None else ""


# ------------------------------------------------------------
# Column orders (so an empty dataset still gets its headers)
# ------------------------------------------------------------
REGISTRATION_COLUMNS = [
    "Full Name", "Email", "Phone", "Gender", "Type", "Mode", "Location",
    "Branch", "Unit", "Member Status", "Accommodation",
    "Arrival Date", "Departure Date", "Registered At",
]
ACCOMMODATION_COLUMNS = [
    "Full Name", "Gender", "Phone", "Type", "Arrival", "Departure", "Special Needs",
]
MEAL_PLANNING_COLUMNS = ["Full Name", "Dietary Requirements", "Arrival", "Departure"]
DAILY_ARRIVAL_COLUMNS = ["Date", "Total Arrivals", "General Accom", "Hotel Accom", "Names"]
CONTACT_COLUMNS = ["Name", "Phone", "Email", "Branch"]
BADGE_MANIFEST_COLUMNS = [
    "Badge Number", "Full Name", "Email", "Phone", "Unit", "Branch",
    "Location", "Meal Ticket", "Badge URL", "Generated At",
]
ARRIVAL_SUMMARY_COLUMNS = ["Date", "Total Arrivals", "With Meals", "Without Meals"]
MEAL_PLAN_COLUMNS = ["Date", "Breakfast", "Lunch", "Dinner", "Total"]


# ============================================================
# RECORD-LEVEL ROWS
# ============================================================

def registration_rows(records: Sequence[AttendeeRecord], tz: Optional[str] = None) -> List[Row]:
    return [
        {
            "Full Name": r.full_name or "",
            "Email": r.email or "",
            "Phone": r.phone or "",
            "Gender": r.gender or "",
            "Type": r.registration_type or "",
            "Mode": _enum_value(r.participation_mode),
            "Location": _enum_value(r.location_type),
            "Branch": _or(r.branch, "N/A"),
            "Unit": _or(r.church_unit, "N/A"),
            "Member Status": "Member" if r.is_member else "Non-Member",
            "Accommodation": _enum_value(r.accommodation_type) or "None",
            "Arrival Date": r.arrival_date.isoformat() if r.arrival_date else "N/A",
            "Departure Date": r.departure_date.isoformat() if r.departure_date else "N/A",
            "Registered At": format_timestamp(r.created_at, tz),
        }
        for r in records
    ]


def accommodation_rows(records: Sequence[AttendeeRecord]) -> List[Row]:
    return [
        {
            "Full Name": r.full_name or "",
            "Gender": r.gender or "",
            "Phone": r.phone or "",
            "Type": _enum_value(r.accommodation_type),
            "Arrival": r.arrival_date.isoformat() if r.arrival_date else "",
            "Departure": r.departure_date.isoformat() if r.departure_date else "",
            "Special Needs": _or(r.special_needs, "None"),
        }
        for r in records
        if r.needs_accommodation
    ]


def meal_planning_rows(records: Sequence[AttendeeRecord]) -> List[Row]:
    return [
        {
            "Full Name": r.full_name or "",
            "Dietary Requirements": _or(r.dietary_requirements, "None"),
            "Arrival": r.arrival_date.isoformat() if r.arrival_date else "",
            "Departure": r.departure_date.isoformat() if r.departure_date else "",
        }
        for r in records
        if r.meals_eligible
    ]


def daily_arrival_rows(records: Sequence[AttendeeRecord]) -> List[Row]:
    arrivals = calculate_daily_arrivals(records)

    names_by_date: Dict[str, List[str]] = {}
    for r in records:
        if r.is_onsite and r.arrival_date is not None:
            names_by_date.setdefault(r.arrival_date.isoformat(), []).append(r.full_name or r.id)

    return [
        {
            "Date": b.date,
            "Total Arrivals": b.count,
            "General Accom": b.general,
            "Hotel Accom": b.hotel,
            "Names": ", ".join(names_by_date.get(b.date, [])),
        }
        for b in arrivals.arrivals_by_date
    ]


def contact_rows(records: Sequence[AttendeeRecord]) -> List[Row]:
    return [
        {
            "Name": r.full_name or "",
            "Phone": r.phone or "",
            "Email": r.email or "",
            "Branch": _or(r.branch, "N/A"),
        }
        for r in records
    ]


def badge_manifest_rows(
    records: Sequence[AttendeeRecord],
    generated_at: Optional[datetime] = None,
) -> List[Row]:
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return [
        {
            "Badge Number": r.badge_number,
            "Full Name": r.full_name or "",
            "Email": r.email or "",
            "Phone": r.phone or "",
            "Unit": r.church_unit or "",
            "Branch": _or(r.branch, "N/A"),
            "Location": _enum_value(r.location_type),
            "Meal Ticket": "Yes" if r.meals_eligible else "No",
            "Badge URL": r.badge_url or "",
            "Generated At": stamp,
        }
        for r in records
        if r.badge_number
    ]


# ============================================================
# AGGREGATE ROWS
# ============================================================

def arrival_summary_rows(arrivals: DailyArrivals) -> List[Row]:
    return [
        {
            "Date": b.date,
            "Total Arrivals": b.count,
            "With Meals": b.with_meals,
            "Without Meals": b.count - b.with_meals,
        }
        for b in arrivals.arrivals_by_date
    ]


def meal_plan_rows(meals: MealRequirements) -> List[Row]:
    rows: List[Row] = [
        {
            "Date": d.date,
            "Breakfast": d.breakfast,
            "Lunch": d.lunch,
            "Dinner": d.dinner,
            "Total": d.total,
        }
        for d in meals.daily_meals
    ]
    if rows:
        rows.append({
            "Date": "Total",
            "Breakfast": meals.total_breakfast,
            "Lunch": meals.total_lunch,
            "Dinner": meals.total_dinner,
            "Total": meals.total_meals,
        })
    return rows


def trend_rows(trend: RegistrationTrend) -> List[Row]:
    return [
        {"Date": b.date, "Online": b.online_count, "Onsite": b.onsite_count, "Total": b.total}
        for b in trend.daily_counts
    ]


def occupancy_rows(stats: AccommodationStats) -> List[Row]:
    return [
        {"Night": b.date, "General": b.general, "Hotel": b.hotel, "Total": b.total}
        for b in stats.nightly_occupancy
    ]


def category_rows(dist: CategoryDistribution | NationalityBreakdown, label: str) -> List[Row]:
    categories = dist.countries if isinstance(dist, NationalityBreakdown) else dist.categories
    return [
        {label: c.name, "Count": c.count, "Percentage": c.percentage}
        for c in categories
    ]


def mode_location_rows(stats: ModeLocationStats) -> List[Row]:
    return [
        {"Group": "Online", "Count": stats.online_count, "Percentage": stats.online_percentage},
        {"Group": "Onsite", "Count": stats.onsite_count, "Percentage": stats.onsite_percentage},
        {"Group": "Within Zaria (onsite)", "Count": stats.within_zaria_count,
         "Percentage": stats.within_zaria_percentage},
        {"Group": "Outside Zaria (onsite)", "Count": stats.outside_zaria_count,
         "Percentage": stats.outside_zaria_percentage},
    ]


def analytics_sheets(summary: DashboardSummary) -> List[SheetData]:
    """One sheet per aggregate, in dashboard order."""
    return [
        SheetData("Registration Trend", trend_rows(summary.trend), ["Date", "Online", "Onsite", "Total"]),
        SheetData("Arrivals", arrival_summary_rows(summary.arrivals), ARRIVAL_SUMMARY_COLUMNS),
        SheetData("Meals", meal_plan_rows(summary.meals), MEAL_PLAN_COLUMNS),
        SheetData("Occupancy", occupancy_rows(summary.accommodation), ["Night", "General", "Hotel", "Total"]),
        SheetData("Nationality", category_rows(summary.nationality, "Country"), ["Country", "Count", "Percentage"]),
        SheetData("Branches", category_rows(summary.branches, "Branch"), ["Branch", "Count", "Percentage"]),
        SheetData("Units", category_rows(summary.units, "Unit"), ["Unit", "Count", "Percentage"]),
        SheetData("Mode & Location", mode_location_rows(summary.mode_location), ["Group", "Count", "Percentage"]),
    ]
