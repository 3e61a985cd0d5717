import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import Settings
from core.exceptions import StorageError

logger = logging.getLogger(__name__)


def build_s3_client(settings: Settings):
    """
    Creates the process-wide S3 client from settings.

    Credentials come from the usual boto3 chain (env vars, shared config,
    instance profile), so none are read here.
    """
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.S3_ENDPOINT_URL,
    )


class S3BlobStore:
    """Thin write-only wrapper around an S3 client."""

    def __init__(self, s3_client):
        self.s3_client = s3_client

    def put(self, bucket: str, key: str, content: bytes | str, content_type: str) -> None:
        """
        Writes one object to the bucket. No retry and no read-back.

        :param bucket: The bucket name.
        :param key: The full object key (e.g., 'uploads/1700000000000-a.png').
        :param content: Raw bytes, or text which is stored as UTF-8.
        :param content_type: The MIME type stored with the object.
        :raises StorageError: If S3 rejects the write or the transport fails.
        """
        body = content.encode("utf-8") if isinstance(content, str) else content
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Error uploading {key} to {bucket}: {e}", stage="storage") from e
