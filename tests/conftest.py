from __future__ import annotations

from datetime import date

import pytest

from registration_reports.models.registration import (
    AccommodationType,
    AttendeeRecord,
    LocationType,
    ParticipationMode,
)
from registration_reports.utils.config import EventSettings


@pytest.fixture()
def settings() -> EventSettings:
    """Event window 2025-01-10..2025-01-14, projection target 2025-01-20."""
    return EventSettings(
        event_start=date(2025, 1, 10),
        event_end=date(2025, 1, 14),
        projection_event_date=date(2025, 1, 20),
        timezone="Africa/Lagos",
    )


@pytest.fixture()
def make_record():
    counter = {"n": 0}

    def _make(
        created_at: str = "2025-01-01T09:00:00",
        mode: ParticipationMode | None = ParticipationMode.ONSITE,
        location: LocationType | None = LocationType.OUTSIDE_ZARIA,
        accommodation: AccommodationType | None = None,
        arrival: date | None = None,
        departure: date | None = None,
        **extra,
    ) -> AttendeeRecord:
        counter["n"] += 1
        fields = dict(
            id=extra.pop("id", f"reg-{counter['n']}"),
            created_at=created_at,
            participation_mode=mode,
            location_type=location,
            accommodation_type=accommodation,
            arrival_date=arrival,
            departure_date=departure,
        )
        fields.update(extra)
        return AttendeeRecord(**fields)

    return _make


@pytest.fixture()
def sample_records(make_record):
    """Small mixed snapshot: 3 onsite (2 outside Zaria), 2 online."""
    return [
        make_record(
            "2025-01-01T08:00:00",
            accommodation=AccommodationType.GENERAL,
            arrival=date(2025, 1, 10),
            departure=date(2025, 1, 12),
            full_name="Ada Obi",
            email="ada@example.com",
            nationality="Nigeria",
            is_member=True,
            branch="Zaria",
            church_unit="Choir",
        ),
        make_record(
            "2025-01-01T15:30:00",
            accommodation=AccommodationType.HOTEL,
            arrival=date(2025, 1, 11),
            departure=date(2025, 1, 13),
            full_name="Kwame Mensah",
            nationality="Ghana",
            is_member=False,
            church_unit="Ushering",
        ),
        make_record(
            "2025-01-02T10:00:00",
            location=LocationType.WITHIN_ZARIA,
            arrival=date(2025, 1, 10),
            full_name="Musa Bello",
            is_member=True,
            branch="Kaduna",
        ),
        make_record(
            "2025-01-02T11:00:00",
            mode=ParticipationMode.ONLINE,
            location=None,
            full_name="Grace Eze",
            is_member=True,
            branch="Zaria",
            church_unit="Choir",
        ),
        make_record(
            "2025-01-03T12:00:00",
            mode=ParticipationMode.ONLINE,
            location=None,
            full_name="John Doe",
            nationality="Kenya",
        ),
    ]
