# src/registration_reports/badges/repository.py
"""
Badge fields on the registrations table (SQLAlchemy Core, any dialect).
"""

from __future__ import annotations

from typing import List, Protocol

from sqlalchemy import column, select, table, update
from sqlalchemy.engine import Engine

from registration_reports.badges.models import BadgeError

registrations = table(
    "registrations",
    column("id"),
    column("badge_number"),
    column("badge_url"),
    column("badge_generated"),
    column("meals_included"),
)


class BadgeRepository(Protocol):
    def issued_badge_numbers(self, prefix: str) -> List[str]:
        ...

    def save_badge(self, registration_id: str, badge_number: str, badge_url: str,
                   meals_included: bool) -> None:
        ...

    def update_badge_url(self, registration_id: str, badge_url: str, meals_included: bool) -> None:
        ...


class SqlBadgeRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def issued_badge_numbers(self, prefix: str) -> List[str]:
        stmt = select(registrations.c.badge_number).where(
            registrations.c.badge_number.like(f"{prefix}-%")
        )
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]

    def _update(self, registration_id: str, **values) -> None:
        stmt = (
            update(registrations)
            .where(registrations.c.id == registration_id)
            .values(**values)
        )
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
        if result.rowcount == 0:
            raise BadgeError(f"Registration {registration_id} not found")

    def save_badge(self, registration_id: str, badge_number: str, badge_url: str,
                   meals_included: bool) -> None:
        self._update(
            registration_id,
            badge_number=badge_number,
            badge_url=badge_url,
            badge_generated=True,
            meals_included=meals_included,
        )

    def update_badge_url(self, registration_id: str, badge_url: str, meals_included: bool) -> None:
        self._update(registration_id, badge_url=badge_url, meals_included=meals_included)
