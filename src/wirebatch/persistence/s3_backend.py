"""S3 artifact store for published reconciliation exports."""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from wirebatch.core.exceptions import FileStoreError

logger = logging.getLogger(__name__)


class S3FileStore:
    """IFileStore that puts each export as one server-side encrypted object.

    Exports carry payee names and amounts, so objects are always written
    with SSE and never made public.
    """

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        sse: str = "AES256",
    ) -> None:
        self.bucket = bucket
        self._sse = sse
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
                ServerSideEncryption=self._sse,
            )
        except (ClientError, BotoCoreError) as exc:
            raise FileStoreError(f"Failed to write s3://{self.bucket}/{path}: {exc}") from exc
        logger.debug("stored artifact", extra={"bucket": self.bucket, "key": path, "size": len(data)})
        return path
