# src/registration_reports/utils/config.py
"""
Event settings, loaded from the environment / .env, passed around explicitly.

Every calculator and service takes an ``EventSettings`` argument. Callers that
omit it get a fresh default instance; there is no module-level singleton.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class EventSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    event_name: str = "GREAT DAYS 2025"
    badge_prefix: str = "GD2025"

    # Days the venue is open (meals / nightly occupancy are counted over this range)
    event_start: date = date(2025, 1, 24)
    event_end: date = date(2025, 1, 31)

    # Target date for the naive linear registration projection
    projection_event_date: date = date(2025, 4, 16)

    home_country: str = "Nigeria"
    timezone: str = "Africa/Lagos"
    unassigned_unit_label: str = "Unassigned"

    output_dir: str = "output"

    # Object storage for badge images
    storage_bucket: str = "event-files"
    storage_endpoint_url: Optional[str] = None
    storage_region: Optional[str] = None
    storage_public_base_url: Optional[str] = None

    # SQLAlchemy URL of the registrations database
    database_url: Optional[str] = None

    def __repr__(self):
        return f"<EventSettings event={self.event_name!r} {self.event_start}..{self.event_end}>"
