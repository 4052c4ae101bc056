from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docworker.processor.exceptions import FetchError
from docworker.storage.base import BaseStorage

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


class S3Storage(BaseStorage):
    """S3 / MinIO object storage. ``endpoint_url`` points at MinIO when set."""

    def __init__(self, bucket: str, client: Any) -> None:
        self._bucket = bucket
        self._client = client

    @classmethod
    def from_credentials(
        cls,
        *,
        bucket: str,
        endpoint_url: str | None,
        access_key: str | None,
        secret_key: str | None,
        region: str,
    ) -> "S3Storage":
        client = boto3.client(
            "s3",
            endpoint_url=endpoint_url or None,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            region_name=region,
        )
        return cls(bucket=bucket, client=client)

    def fetch(self, storage_key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=storage_key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _MISSING_CODES:
                raise FetchError(f"Object not found: s3://{self._bucket}/{storage_key}") from exc
            raise FetchError(f"S3 read failed for {storage_key}: {code or exc}") from exc
        except BotoCoreError as exc:
            raise FetchError(f"S3 read failed for {storage_key}: {exc}") from exc

    def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> None:
        extra: dict[str, str] = {}
        if content_type:
            extra["ContentType"] = content_type
        self._client.put_object(Bucket=self._bucket, Key=storage_key, Body=data, **extra)
