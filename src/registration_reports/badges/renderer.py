"""
Badge Renderer

- Fills badge.html.j2 with one attendee's details
- QR code (reportlab) carries identity + meal eligibility as JSON
- Rasterizes the HTML to PNG (wkhtmltoimage via imgkit by default)
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Optional, Protocol

import imgkit
from jinja2 import Environment, FileSystemLoader, select_autoescape
from reportlab.graphics import renderSVG
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing

from registration_reports.badges.models import RasterizeError
from registration_reports.models.registration import AttendeeRecord, LocationType
from registration_reports.utils.config import EventSettings
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "badge.html.j2"

BADGE_WIDTH = 1200
BADGE_HEIGHT = 900
QR_SIZE = 200
AVATAR_SIZE = 180

MEMBER_ACCENT = "#2563eb"   # blue
GUEST_ACCENT = "#9333ea"    # purple


class Rasterizer(Protocol):
    def to_png(self, html: str) -> bytes:
        ...


class ImgkitRasterizer:
    """HTML -> PNG through wkhtmltoimage."""

    def __init__(self, wkhtmltoimage_path: Optional[str] = None, zoom: float = 2.0):
        self._config = imgkit.config(wkhtmltoimage=wkhtmltoimage_path) if wkhtmltoimage_path else None
        self._options = {
            "format": "png",
            "width": str(BADGE_WIDTH),
            "height": str(BADGE_HEIGHT),
            "zoom": str(zoom),
            "encoding": "UTF-8",
            "quiet": "",
        }

    def to_png(self, html: str) -> bytes:
        try:
            png = imgkit.from_string(html, False, options=self._options, config=self._config)
        except (OSError, ValueError) as e:
            raise RasterizeError(f"Badge rasterization failed: {e}") from e
        if not png:
            raise RasterizeError("Badge rasterization produced no image")
        return png


# ------------------------------------------------------------
# Pieces
# ------------------------------------------------------------

def accent_color(is_member: bool) -> str:
    return MEMBER_ACCENT if is_member else GUEST_ACCENT


def initials(name: Optional[str]) -> str:
    words = (name or "").split()
    return "".join(w[0] for w in words).upper()[:2] or "?"


def country_flag(nationality: Optional[str], home_code: str = "NG") -> str:
    """Flag emoji for a 2-letter country code; home flag when missing."""
    code = (nationality or home_code).strip().upper()
    if len(code) != 2 or not code.isalpha():
        code = home_code if not nationality else ""
    if not code:
        return ""
    return "".join(chr(127397 + ord(c)) for c in code)


def _svg_data_uri(svg: str) -> str:
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")


def initials_avatar(name: Optional[str], accent: str, size: int = AVATAR_SIZE) -> str:
    half = size // 2
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}">'
        f'<circle cx="{half}" cy="{half}" r="{half}" fill="{accent}"/>'
        f'<text x="50%" y="50%" dominant-baseline="central" text-anchor="middle" '
        f'font-family="Inter, sans-serif" font-weight="bold" font-size="64" fill="#FFFFFF">'
        f'{initials(name)}</text></svg>'
    )
    return _svg_data_uri(svg)


def qr_payload(record: AttendeeRecord, badge_number: str) -> dict:
    return {
        "badge_number": badge_number,
        "registration_id": record.id,
        "full_name": record.full_name,
        "email": record.email,
        "mode": record.participation_mode.value.lower() if record.participation_mode else None,
        "meals": record.meals_eligible,
    }


def qr_code_data_uri(payload: dict, size: int = QR_SIZE) -> str:
    widget = QrCodeWidget(json.dumps(payload), barLevel="H")
    x1, y1, x2, y2 = widget.getBounds()
    width, height = x2 - x1, y2 - y1
    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(widget)
    return _svg_data_uri(renderSVG.drawToString(drawing))


# ------------------------------------------------------------
# Renderer
# ------------------------------------------------------------

class BadgeRenderer:
    def __init__(
        self,
        settings: Optional[EventSettings] = None,
        rasterizer: Optional[Rasterizer] = None,
    ):
        self.settings = settings or EventSettings()
        self.rasterizer = rasterizer or ImgkitRasterizer()
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        )

    def render_html(self, record: AttendeeRecord, badge_number: str) -> str:
        accent = accent_color(record.is_member)
        event_name = self.settings.event_name

        context = {
            "accent": accent,
            "logo_text": initials(event_name),
            "event_name": event_name,
            "photo_src": record.profile_photo or initials_avatar(record.full_name, accent),
            "full_name": record.full_name or "",
            "title": record.title,
            "church_ministry": record.church_ministry,
            "unit": record.church_unit,
            "branch": record.branch if record.is_member else None,
            "flag": country_flag(record.nationality),
            "nationality": record.nationality or self.settings.home_country,
            "outside_zaria": record.location_type is LocationType.OUTSIDE_ZARIA,
            "meals_included": record.meals_eligible,
            "qr_src": qr_code_data_uri(qr_payload(record, badge_number)),
            "badge_number": badge_number,
        }
        return self._env.get_template(TEMPLATE_NAME).render(**context)

    def render_png(self, record: AttendeeRecord, badge_number: str) -> bytes:
        html = self.render_html(record, badge_number)
        png = self.rasterizer.to_png(html)
        logger.debug("Rendered badge %s (%d bytes)", badge_number, len(png))
        return png
