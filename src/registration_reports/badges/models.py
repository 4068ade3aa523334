from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from registration_reports.models.registration import AttendeeRecord


class BadgeState(Enum):
    NOT_GENERATED = "NOT_GENERATED"
    GENERATED = "GENERATED"
    REGENERATED = "REGENERATED"


class BadgeError(RuntimeError):
    """A badge operation was refused or could not complete."""


class RasterizeError(BadgeError):
    """HTML -> PNG conversion failed."""


class BadgeUploadError(BadgeError):
    """Object storage rejected the badge image."""


@dataclass(frozen=True)
class BadgeResult:
    badge_number: str
    badge_url: str
    meals_included: bool
    state: BadgeState
    record: AttendeeRecord     # copy of the input record with the badge fields applied
