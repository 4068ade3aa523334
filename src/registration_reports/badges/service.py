"""
Badge Service

States: NOT_GENERATED -> GENERATED -> REGENERATED

Rules:
- generate: onsite registrations without a badge number only
- regenerate: same number, image overwritten, stored URL cache-busted
- download: render + save locally, nothing persisted
- Any failing step aborts the operation and propagates; the record is only
  marked generated once the database update succeeds. No retries.
"""

from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from registration_reports.badges.models import BadgeError, BadgeResult, BadgeState
from registration_reports.badges.numbering import BadgeNumberAllocator
from registration_reports.badges.renderer import BadgeRenderer
from registration_reports.badges.repository import BadgeRepository
from registration_reports.badges.storage import BadgeStorage, badge_storage_key
from registration_reports.models.registration import AttendeeRecord
from registration_reports.utils.config import EventSettings
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)


def badge_state(record: AttendeeRecord) -> BadgeState:
    if not record.badge_generated or not record.badge_number:
        return BadgeState.NOT_GENERATED
    if record.badge_url and "?t=" in record.badge_url:
        return BadgeState.REGENERATED
    return BadgeState.GENERATED


def cache_busted(url: str, millis: int) -> str:
    return f"{url}?t={millis}"


class BadgeService:
    def __init__(
        self,
        repository: BadgeRepository,
        storage: BadgeStorage,
        renderer: Optional[BadgeRenderer] = None,
        allocator: Optional[BadgeNumberAllocator] = None,
        settings: Optional[EventSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or EventSettings()
        self.repository = repository
        self.storage = storage
        self.renderer = renderer or BadgeRenderer(self.settings)
        self.allocator = allocator or BadgeNumberAllocator(repository, self.settings.badge_prefix)
        self._clock = clock

    # ============================================================
    # GENERATE
    # ============================================================

    def generate(self, record: AttendeeRecord) -> BadgeResult:
        if not record.is_onsite:
            raise BadgeError(f"Registration {record.id} does not qualify for a badge (not onsite)")
        if record.badge_number:
            raise BadgeError(
                f"Registration {record.id} already has badge {record.badge_number}; regenerate it instead"
            )

        badge_number = self.allocator.next_number()
        meals = record.meals_eligible

        try:
            png = self.renderer.render_png(record, badge_number)
            badge_url = self.storage.upload(badge_number, png)
        except Exception:
            logger.error("Badge generation failed for %s (%s)", record.id, badge_number, exc_info=True)
            raise

        try:
            self.repository.save_badge(record.id, badge_number, badge_url, meals)
        except Exception:
            # The image is already in storage; nothing references it now.
            logger.warning(
                "Orphaned badge image %s: saving registration %s failed",
                badge_storage_key(badge_number), record.id,
            )
            logger.error("Badge generation failed for %s (%s)", record.id, badge_number, exc_info=True)
            raise

        logger.info("Generated badge %s for registration %s", badge_number, record.id)
        return BadgeResult(
            badge_number=badge_number,
            badge_url=badge_url,
            meals_included=meals,
            state=BadgeState.GENERATED,
            record=replace(
                record,
                badge_number=badge_number,
                badge_url=badge_url,
                badge_generated=True,
                meals_included=meals,
            ),
        )

    # ============================================================
    # REGENERATE
    # ============================================================

    def regenerate(self, record: AttendeeRecord) -> BadgeResult:
        if not record.badge_number:
            raise BadgeError(f"Registration {record.id} does not have a badge number")

        badge_number = record.badge_number
        meals = record.meals_eligible

        try:
            png = self.renderer.render_png(record, badge_number)
            url = self.storage.upload(badge_number, png)
            # Same storage path as before, so the URL needs a cache buster
            badge_url = cache_busted(url, int(self._clock() * 1000))
            self.repository.update_badge_url(record.id, badge_url, meals)
        except Exception:
            logger.error("Badge regeneration failed for %s (%s)", record.id, badge_number, exc_info=True)
            raise

        logger.info("Regenerated badge %s for registration %s", badge_number, record.id)
        return BadgeResult(
            badge_number=badge_number,
            badge_url=badge_url,
            meals_included=meals,
            state=BadgeState.REGENERATED,
            record=replace(record, badge_url=badge_url, badge_generated=True, meals_included=meals),
        )

    # ============================================================
    # DOWNLOAD
    # ============================================================

    def download(self, record: AttendeeRecord, output_dir: Path) -> Path:
        if not record.badge_number:
            raise BadgeError(f"Registration {record.id} does not have a badge number")

        png = self.renderer.render_png(record, record.badge_number)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{record.badge_number}.png"
        path.write_bytes(png)

        logger.info("Saved badge %s to %s", record.badge_number, path)
        return path
