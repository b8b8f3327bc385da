from typing import Optional
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from phdhub.core.config import settings
from phdhub.core.exceptions import StorageError
from phdhub.core.logging_config import logger


def file_extension(file_name: str) -> str:
    """Extension after the last dot, or the whole name when there is none"""
    return file_name.rsplit(".", 1)[-1]


class StorageClient:
    """
    S3 presigned-URL issuer.

    The API never moves file bytes: clients PUT to and GET from the bucket
    directly with short-lived URLs scoped to one object key.
    """

    def __init__(self, bucket_name: Optional[str] = None):
        self._client = None
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME

    def _get_client(self):
        """Lazy initialization of the S3 client"""
        if self._client is None:
            kwargs = {
                "region_name": settings.AWS_REGION,
                "config": Config(signature_version="s3v4"),
            }
            if settings.S3_ENDPOINT_URL:
                kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
            else:
                logger.info("S3 client using default credential chain")
            self._client = boto3.client("s3", **kwargs)
        return self._client

    @staticmethod
    def resource_key(group_id: str, file_name: str) -> str:
        """Object key for a research-group resource upload"""
        return f"resources/{group_id}/{uuid.uuid4()}.{file_extension(file_name)}"

    @staticmethod
    def banner_key(file_name: str) -> str:
        """Object key for a community banner upload"""
        return f"banners/{uuid.uuid4()}.{file_extension(file_name)}"

    def generate_upload_url(self, key: str, content_type: str, expiry: Optional[int] = None) -> str:
        """
        Presigned PUT URL for one object key

        Args:
            key: Object key in the bucket
            content_type: MIME type the client must send
            expiry: Seconds until the URL stops working (default UPLOAD_URL_EXPIRY)
        """
        try:
            url = self._get_client().generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket_name, "Key": key, "ContentType": content_type},
                ExpiresIn=expiry or settings.UPLOAD_URL_EXPIRY,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating upload URL for {key}: {e}")
            raise StorageError("Failed to generate upload URL", key=key)

        logger.info(f"Generated upload URL for {key}")
        return url

    def generate_download_url(self, key: str, expiry: Optional[int] = None) -> str:
        """Presigned GET URL for one object key"""
        try:
            url = self._get_client().generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiry or settings.DOWNLOAD_URL_EXPIRY,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating download URL for {key}: {e}")
            raise StorageError("Failed to generate download URL", key=key)

        logger.info(f"Generated download URL for {key}")
        return url

    def public_url(self, key: str) -> str:
        """Unsigned object URL, for publicly readable prefixes such as banners"""
        if settings.S3_ENDPOINT_URL:
            return f"{settings.S3_ENDPOINT_URL.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


# Create singleton instance
storage_client = StorageClient()
