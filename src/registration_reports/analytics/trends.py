"""
Registration Trend

Purpose:
- Daily registration counts (online / onsite split)
- Peak registration day
- Recent rate and a naive linear projection to the event date

Important:
- The "7-day" rate averages the last 7 buckets PRESENT, not the last 7
  calendar days. Days without registrations have no bucket, so sparse data
  pushes the average up. Dashboards have always shown this number; keep it.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

from registration_reports.models.analytics import RegistrationTrend, TrendBucket
from registration_reports.models.registration import AttendeeRecord
from registration_reports.utils.config import EventSettings
from registration_reports.utils.dates import parse_date
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

RATE_WINDOW = 7


def calculate_registration_trends(
    records: Sequence[AttendeeRecord],
    settings: Optional[EventSettings] = None,
    today: Optional[date] = None,
) -> RegistrationTrend:
    settings = settings or EventSettings()
    today = today or date.today()

    # ------------------------------------------------------------
    # Bucket by local registration day
    # ------------------------------------------------------------
    daily: Dict[str, Dict[str, int]] = {}
    for rec in records:
        day = parse_date(rec.created_at, settings.timezone)
        if day is None:
            logger.debug("Registration %s has no usable created_at; not bucketed", rec.id)
            continue

        key = day.isoformat()
        if key not in daily:
            daily[key] = {"online": 0, "onsite": 0, "total": 0}

        daily[key]["total"] += 1
        if rec.is_online:
            daily[key]["online"] += 1
        elif rec.is_onsite:
            daily[key]["onsite"] += 1

    buckets: List[TrendBucket] = [
        TrendBucket(
            date=key,
            online_count=vals["online"],
            onsite_count=vals["onsite"],
            total=vals["total"],
        )
        for key, vals in sorted(daily.items())
    ]

    # ------------------------------------------------------------
    # Peak (first bucket wins ties)
    # ------------------------------------------------------------
    peak: Optional[TrendBucket] = None
    for b in buckets:
        if peak is None or b.total > peak.total:
            peak = b

    # ------------------------------------------------------------
    # Rate + projection
    # ------------------------------------------------------------
    recent = buckets[-RATE_WINDOW:]
    current_rate = (
        round(sum(b.total for b in recent) / len(recent), 1)
        if recent
        else 0.0
    )

    days_until_event = max(0, (settings.projection_event_date - today).days)
    total_registrations = len(records)
    projection = int(round(total_registrations + current_rate * days_until_event))

    return RegistrationTrend(
        daily_counts=tuple(buckets),
        total_registrations=total_registrations,
        total_online=sum(1 for r in records if r.is_online),
        total_onsite=sum(1 for r in records if r.is_onsite),
        peak_day=peak,
        current_rate=current_rate,
        days_until_event=days_until_event,
        projection=projection,
    )
