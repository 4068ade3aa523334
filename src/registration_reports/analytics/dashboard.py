from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from registration_reports.analytics.demographics import (
    calculate_branch_distribution,
    calculate_mode_location_stats,
    calculate_nationality_breakdown,
    calculate_unit_distribution,
)
from registration_reports.analytics.logistics import (
    calculate_accommodation_stats,
    calculate_daily_arrivals,
    calculate_meal_requirements,
)
from registration_reports.analytics.trends import calculate_registration_trends
from registration_reports.models.analytics import DashboardSummary
from registration_reports.models.registration import AttendeeRecord
from registration_reports.utils.config import EventSettings
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)


def build_dashboard(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
    today: Optional[date] = None,
) -> DashboardSummary:
    """
    Run every calculator over one snapshot of registrations.
    """
    settings = settings or EventSettings()
    logger.info("Building dashboard | registrations=%d", len(records))

    return DashboardSummary(
        trend=calculate_registration_trends(records, settings, today=today),
        arrivals=calculate_daily_arrivals(records),
        meals=calculate_meal_requirements(records, settings),
        accommodation=calculate_accommodation_stats(records, settings),
        nationality=calculate_nationality_breakdown(records, settings),
        branches=calculate_branch_distribution(records),
        units=calculate_unit_distribution(records, settings),
        mode_location=calculate_mode_location_stats(records),
    )
