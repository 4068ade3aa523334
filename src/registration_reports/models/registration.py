from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

import pandas as pd

from registration_reports.utils.dates import parse_date


def _normalize_token(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


class _LenientEnum(Enum):
    """Enum that parses store values regardless of case, spaces or underscores."""

    @classmethod
    def parse(cls, value: Any):
        if value is None or isinstance(value, cls):
            return value
        token = _normalize_token(str(value))
        for member in cls:
            if token in (_normalize_token(member.value), _normalize_token(member.name)):
                return member
        return None


class ParticipationMode(_LenientEnum):
    ONLINE = "Online"
    ONSITE = "Onsite"


class LocationType(_LenientEnum):
    WITHIN_ZARIA = "Within Zaria"
    OUTSIDE_ZARIA = "Outside Zaria"


class AccommodationType(_LenientEnum):
    GENERAL = "General"
    HOTEL = "Hotel"


# Store column → field name (the store has been through a few naming schemes)
_ALIASES = {
    "createdAt": "created_at",
    "participationMode": "participation_mode",
    "mode_of_participation": "participation_mode",
    "mode": "participation_mode",
    "locationType": "location_type",
    "location": "location_type",
    "accommodationType": "accommodation_type",
    "arrivalDate": "arrival_date",
    "departureDate": "departure_date",
    "isMember": "is_member",
    "church_branch": "branch",
    "churchUnit": "church_unit",
    "unit": "church_unit",
    "fullName": "full_name",
    "phone_number": "phone",
    "badgeNumber": "badge_number",
    "badgeUrl": "badge_url",
}


def _missing(value: Any) -> bool:
    """None, NaN, NaT or pd.NA."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like values are never "missing" as a whole
        return False


def _text(value: Any) -> Optional[str]:
    if _missing(value):
        return None
    text = str(value).strip()
    return text or None


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    if _missing(value):
        return False
    return bool(value)


@dataclass(frozen=True)
class AttendeeRecord:
    """One registration, as fetched from the store. Never mutated by the core."""

    id: str
    created_at: Union[str, datetime]
    participation_mode: Optional[ParticipationMode] = None
    location_type: Optional[LocationType] = None
    accommodation_type: Optional[AccommodationType] = None
    arrival_date: Optional[date] = None
    departure_date: Optional[date] = None
    nationality: Optional[str] = None
    is_member: bool = False
    branch: Optional[str] = None
    church_unit: Optional[str] = None

    # Contact / badge details (exports and badges only)
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    registration_type: Optional[str] = None
    title: Optional[str] = None
    church_ministry: Optional[str] = None
    special_needs: Optional[str] = None
    dietary_requirements: Optional[str] = None
    profile_photo: Optional[str] = None
    badge_number: Optional[str] = None
    badge_url: Optional[str] = None
    badge_generated: bool = False
    meals_included: bool = False

    @property
    def is_onsite(self) -> bool:
        return self.participation_mode is ParticipationMode.ONSITE

    @property
    def is_online(self) -> bool:
        return self.participation_mode is ParticipationMode.ONLINE

    @property
    def meals_eligible(self) -> bool:
        return self.is_onsite and self.location_type is LocationType.OUTSIDE_ZARIA

    @property
    def needs_accommodation(self) -> bool:
        return self.is_onsite and self.accommodation_type is not None

    @property
    def has_stay_window(self) -> bool:
        return self.arrival_date is not None and self.departure_date is not None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "AttendeeRecord":
        """
        Build a record from a store row or export line.

        Optional fields are parsed leniently: unknown enum values and
        unparseable dates become None. Only ``id`` and ``created_at`` are
        required.
        """
        data = {}
        for key, value in row.items():
            data[_ALIASES.get(key, key)] = value

        missing = [f for f in ("id", "created_at") if _text(data.get(f)) is None]
        if missing:
            raise ValueError(f"Registration row missing required fields: {', '.join(missing)}")

        return cls(
            id=str(data["id"]),
            created_at=data["created_at"],
            participation_mode=ParticipationMode.parse(_text(data.get("participation_mode"))),
            location_type=LocationType.parse(_text(data.get("location_type"))),
            accommodation_type=AccommodationType.parse(_text(data.get("accommodation_type"))),
            arrival_date=parse_date(data.get("arrival_date")),
            departure_date=parse_date(data.get("departure_date")),
            nationality=_text(data.get("nationality")),
            is_member=_flag(data.get("is_member", False)),
            branch=_text(data.get("branch")),
            church_unit=_text(data.get("church_unit")),
            full_name=_text(data.get("full_name")),
            email=_text(data.get("email")),
            phone=_text(data.get("phone")),
            gender=_text(data.get("gender")),
            registration_type=_text(data.get("registration_type")),
            title=_text(data.get("title")),
            church_ministry=_text(data.get("church_ministry")),
            special_needs=_text(data.get("special_needs")),
            dietary_requirements=_text(data.get("dietary_requirements")),
            profile_photo=_text(data.get("profile_photo")),
            badge_number=_text(data.get("badge_number")),
            badge_url=_text(data.get("badge_url")),
            badge_generated=_flag(data.get("badge_generated", False)),
            meals_included=_flag(data.get("meals_included", False)),
        )
