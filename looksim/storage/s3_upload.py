"""S3 upload of hairstyle reference images.

Objects are written under `<prefix><file_name>` with a one-year cache header
and served from the bucket's public regional endpoint.

Credentials:
    Resolved by boto3's default chain (`AWS_ACCESS_KEY_ID` /
    `AWS_SECRET_ACCESS_KEY` from the environment, shared config, instance
    roles). Nothing is checked up front; a missing credential surfaces as an
    upload failure.

Retries:
    SDK retries are disabled so a failed upload is reported on the first
    attempt.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config

from looksim.config.provider_config import AWS_REGION, S3_BUCKET, S3_CACHE_CONTROL, S3_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"


class S3Uploader:
    def __init__(self, bucket: str, prefix: str = "", region: Optional[str] = None, client: Any = None):
        bucket = (bucket or "").strip()
        if not bucket:
            raise RuntimeError("S3_BUCKET is required for reference uploads")

        prefix = (prefix or "").strip().lstrip("/")
        if prefix and not prefix.endswith("/"):
            prefix = prefix + "/"

        self.bucket = bucket
        self.prefix = prefix
        self.region = (region or "").strip() or AWS_REGION
        self._client = client

    @classmethod
    def from_env(cls) -> "S3Uploader":
        return cls(bucket=S3_BUCKET, prefix=S3_PREFIX, region=AWS_REGION)

    @property
    def client(self):
        if self._client is None:
            cfg = Config(
                retries={"total_max_attempts": 1, "mode": "standard"},
                region_name=self.region,
            )
            self._client = boto3.client("s3", config=cfg)
        return self._client

    def key_for(self, file_name: str) -> str:
        return f"{self.prefix}{file_name.lstrip('/')}"

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, file_name: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store `data` and return its public URL."""
        key = self.key_for(file_name)
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type or DEFAULT_CONTENT_TYPE,
            CacheControl=S3_CACHE_CONTROL,
        )
        logger.info("Uploaded %d bytes to s3://%s/%s", len(data), self.bucket, key)
        return self.public_url(key)
