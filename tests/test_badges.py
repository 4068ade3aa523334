"""
Badge pipeline tests.

No wkhtmltoimage, S3 or database here: the rasterizer, storage client and
repository are in-memory fakes.
"""

from __future__ import annotations

import base64
import json
from dataclasses import replace
from datetime import date

import pytest
from botocore.exceptions import ClientError

from registration_reports.badges.models import BadgeError, BadgeState, BadgeUploadError
from registration_reports.badges.renderer import (
    GUEST_ACCENT,
    MEMBER_ACCENT,
    BadgeRenderer,
    country_flag,
    initials,
    qr_code_data_uri,
    qr_payload,
)
from registration_reports.badges.service import BadgeService, badge_state
from registration_reports.badges.storage import S3BadgeStorage, badge_storage_key
from registration_reports.models.registration import LocationType, ParticipationMode

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeRasterizer:
    def __init__(self):
        self.calls = []

    def to_png(self, html: str) -> bytes:
        self.calls.append(html)
        return FAKE_PNG


class FakeStorage:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads = {}

    def upload(self, badge_number: str, png: bytes) -> str:
        if self.fail:
            raise BadgeUploadError("bucket unavailable")
        self.uploads[badge_number] = png
        return f"https://cdn.example.com/{badge_storage_key(badge_number)}"


class FakeRepository:
    def __init__(self, issued=None, fail_save: bool = False):
        self.issued = list(issued or [])
        self.fail_save = fail_save
        self.saved = {}
        self.url_updates = {}

    def issued_badge_numbers(self, prefix):
        return list(self.issued) + [v[0] for v in self.saved.values()]

    def save_badge(self, registration_id, badge_number, badge_url, meals_included):
        if self.fail_save:
            raise BadgeError("database unavailable")
        self.saved[registration_id] = (badge_number, badge_url, meals_included)

    def update_badge_url(self, registration_id, badge_url, meals_included):
        self.url_updates[registration_id] = (badge_url, meals_included)


class StubS3Client:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = []

    def put_object(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)
        return {}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def rasterizer():
    return FakeRasterizer()


@pytest.fixture()
def renderer(settings, rasterizer):
    return BadgeRenderer(settings, rasterizer)


@pytest.fixture()
def attendee(make_record):
    return make_record(
        id="r1",
        full_name="Ada Obi",
        email="ada@example.com",
        title="Pastor",
        church_unit="Choir",
        branch="Zaria",
        is_member=True,
        arrival=date(2025, 1, 10),
        departure=date(2025, 1, 12),
    )


def _service(settings, renderer, storage=None, repository=None, clock=lambda: 1737000000.5):
    return BadgeService(
        repository=repository or FakeRepository(),
        storage=storage or FakeStorage(),
        renderer=renderer,
        settings=settings,
        clock=clock,
    )


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TestRendererPieces:
    def test_initials(self):
        assert initials("Ada Obi") == "AO"
        assert initials("GREAT DAYS 2025") == "GD"
        assert initials(None) == "?"

    def test_country_flag(self):
        assert country_flag("NG") == "\U0001F1F3\U0001F1EC"
        assert country_flag(None) == "\U0001F1F3\U0001F1EC"
        assert country_flag("Ghana") == ""

    def test_qr_payload(self, attendee):
        payload = qr_payload(attendee, "GD2025-0001")
        assert payload == {
            "badge_number": "GD2025-0001",
            "registration_id": "r1",
            "full_name": "Ada Obi",
            "email": "ada@example.com",
            "mode": "onsite",
            "meals": True,
        }
        json.dumps(payload)

    def test_qr_is_svg_data_uri(self, attendee):
        uri = qr_code_data_uri(qr_payload(attendee, "GD2025-0001"))
        prefix = "data:image/svg+xml;base64,"
        assert uri.startswith(prefix)
        assert b"<svg" in base64.b64decode(uri[len(prefix):])


class TestRenderHtml:
    def test_member_badge(self, renderer, attendee):
        html = renderer.render_html(attendee, "GD2025-0001")

        assert "Ada Obi" in html
        assert "GD2025-0001" in html
        assert "Pastor" in html
        assert "Zaria Branch" in html
        assert MEMBER_ACCENT in html
        assert "Meals<br>Included" in html

    def test_guest_within_zaria(self, renderer, make_record):
        guest = make_record(full_name="Kwame", location=LocationType.WITHIN_ZARIA, branch="Zaria")
        html = renderer.render_html(guest, "GD2025-0002")

        assert GUEST_ACCENT in html
        assert "Zaria Branch" not in html
        assert "Meals<br>Included" not in html
        assert "Within Zaria" in html

    def test_text_is_escaped(self, renderer, make_record):
        html = renderer.render_html(make_record(full_name="<script>x</script>"), "GD2025-0003")
        assert "<script>x</script>" not in html

    def test_render_png_uses_rasterizer(self, renderer, rasterizer, attendee):
        assert renderer.render_png(attendee, "GD2025-0001") == FAKE_PNG
        assert len(rasterizer.calls) == 1


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class TestS3Storage:
    def test_upload_returns_public_url(self, settings):
        client = StubS3Client()
        url = S3BadgeStorage(settings, client=client).upload("GD2025-0001", FAKE_PNG)

        assert url == "https://event-files.s3.amazonaws.com/badges/GD2025-0001.png"
        assert client.calls[0]["Key"] == "badges/GD2025-0001.png"
        assert client.calls[0]["ContentType"] == "image/png"
        assert client.calls[0]["Body"] == FAKE_PNG

    def test_public_base_url(self, settings):
        custom = settings.model_copy(update={"storage_public_base_url": "https://files.example.com/"})
        storage = S3BadgeStorage(custom, client=StubS3Client())
        assert storage.upload("GD2025-0001", FAKE_PNG) == "https://files.example.com/badges/GD2025-0001.png"

    def test_client_error_wrapped(self, settings):
        error = ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        storage = S3BadgeStorage(settings, client=StubS3Client(error))
        with pytest.raises(BadgeUploadError):
            storage.upload("GD2025-0001", FAKE_PNG)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_first_badge(self, settings, renderer, attendee):
        repo = FakeRepository()
        storage = FakeStorage()
        result = _service(settings, renderer, storage, repo).generate(attendee)

        assert result.badge_number == "GD2025-0001"
        assert result.state is BadgeState.GENERATED
        assert result.meals_included is True
        assert result.badge_url.endswith("badges/GD2025-0001.png")
        assert repo.saved["r1"] == ("GD2025-0001", result.badge_url, True)
        assert storage.uploads["GD2025-0001"] == FAKE_PNG
        assert result.record.badge_generated is True
        assert attendee.badge_number is None

    def test_sequential_numbers(self, settings, renderer, make_record):
        service = _service(settings, renderer)
        first = service.generate(make_record(id="a"))
        second = service.generate(make_record(id="b"))
        assert (first.badge_number, second.badge_number) == ("GD2025-0001", "GD2025-0002")

    def test_online_rejected(self, settings, renderer, make_record):
        storage = FakeStorage()
        with pytest.raises(BadgeError):
            _service(settings, renderer, storage).generate(make_record(mode=ParticipationMode.ONLINE))
        assert storage.uploads == {}

    def test_existing_badge_rejected(self, settings, renderer, make_record):
        with pytest.raises(BadgeError, match="regenerate"):
            _service(settings, renderer).generate(make_record(badge_number="GD2025-0005"))

    def test_upload_failure_not_persisted(self, settings, renderer, attendee):
        repo = FakeRepository()
        with pytest.raises(BadgeUploadError):
            _service(settings, renderer, FakeStorage(fail=True), repo).generate(attendee)
        assert repo.saved == {}

    def test_persist_failure_propagates(self, settings, renderer, attendee):
        storage = FakeStorage()
        with pytest.raises(BadgeError, match="database"):
            _service(settings, renderer, storage, FakeRepository(fail_save=True)).generate(attendee)
        assert "GD2025-0001" in storage.uploads


class TestRegenerate:
    def test_same_number_cache_busted_url(self, settings, renderer, attendee):
        badged = replace(
            attendee,
            badge_number="GD2025-0007",
            badge_url="https://cdn.example.com/badges/GD2025-0007.png",
            badge_generated=True,
        )
        repo = FakeRepository()
        result = _service(settings, renderer, repository=repo).regenerate(badged)

        assert result.badge_number == "GD2025-0007"
        assert result.state is BadgeState.REGENERATED
        assert result.badge_url == "https://cdn.example.com/badges/GD2025-0007.png?t=1737000000500"
        assert repo.url_updates["r1"] == (result.badge_url, True)
        assert badge_state(result.record) is BadgeState.REGENERATED

    def test_requires_badge_number(self, settings, renderer, attendee):
        with pytest.raises(BadgeError):
            _service(settings, renderer).regenerate(attendee)


class TestDownload:
    def test_writes_png_without_persisting(self, settings, renderer, make_record, tmp_path):
        repo = FakeRepository()
        storage = FakeStorage()
        record = make_record(badge_number="GD2025-0003")

        path = _service(settings, renderer, storage, repo).download(record, tmp_path / "badges")

        assert path.name == "GD2025-0003.png"
        assert path.read_bytes() == FAKE_PNG
        assert repo.saved == {} and repo.url_updates == {}
        assert storage.uploads == {}


class TestBadgeState:
    def test_states(self, make_record):
        assert badge_state(make_record()) is BadgeState.NOT_GENERATED
        assert badge_state(
            make_record(badge_number="GD2025-0001", badge_url="u", badge_generated=True)
        ) is BadgeState.GENERATED
        assert badge_state(
            make_record(badge_number="GD2025-0001", badge_url="u?t=1", badge_generated=True)
        ) is BadgeState.REGENERATED
