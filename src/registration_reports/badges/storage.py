# src/registration_reports/badges/storage.py
from __future__ import annotations

from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from registration_reports.badges.models import BadgeUploadError
from registration_reports.utils.config import EventSettings
from registration_reports.utils.logger import get_logger

logger = get_logger(__name__)


def badge_storage_key(badge_number: str) -> str:
    return f"badges/{badge_number}.png"


class BadgeStorage(Protocol):
    def upload(self, badge_number: str, png: bytes) -> str:
        """Store the image (overwriting) and return its public URL."""
        ...


def get_s3_client(settings: EventSettings):
    """
    S3 client; points at a custom endpoint (MinIO / S3-compatible storage)
    when one is configured.
    """
    if settings.storage_endpoint_url:
        return boto3.client(
            "s3",
            endpoint_url=settings.storage_endpoint_url,
            region_name=settings.storage_region,
        )
    return boto3.client("s3", region_name=settings.storage_region)


class S3BadgeStorage:
    def __init__(self, settings: Optional[EventSettings] = None, client=None):
        self.settings = settings or EventSettings()
        self.bucket = self.settings.storage_bucket
        self._client = client or get_s3_client(self.settings)

    def public_url(self, key: str) -> str:
        if self.settings.storage_public_base_url:
            return f"{self.settings.storage_public_base_url.rstrip('/')}/{key}"
        if self.settings.storage_endpoint_url:
            return f"{self.settings.storage_endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(self, badge_number: str, png: bytes) -> str:
        key = badge_storage_key(badge_number)
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=png,
                ContentType="image/png",
            )
        except (ClientError, BotoCoreError) as e:
            raise BadgeUploadError(f"Failed to upload {key} to {self.bucket}: {e}") from e

        logger.info("Uploaded badge image %s/%s", self.bucket, key)
        return self.public_url(key)
