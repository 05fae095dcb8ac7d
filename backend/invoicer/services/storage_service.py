import os
from datetime import datetime, timezone
from typing import Optional
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from invoicer.config import Settings
from invoicer.exceptions import StorageError

logger = logging.getLogger(__name__)

LOGO_CONTENT_TYPES = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'gif': 'image/gif',
    'webp': 'image/webp',
    'svg': 'image/svg+xml',
}


def build_s3_client(settings: Settings):
    """S3-compatible client, or None when no credential pair is configured"""
    if not (settings.storage_access_key_id and settings.storage_secret_access_key):
        logger.info("Logo storage: no S3 credentials, writing to the local filesystem")
        return None

    options = {
        'aws_access_key_id': settings.storage_access_key_id,
        'aws_secret_access_key': settings.storage_secret_access_key,
        'region_name': settings.storage_region,
    }
    if settings.storage_endpoint_url:
        options['endpoint_url'] = settings.storage_endpoint_url

    try:
        client = boto3.client('s3', **options)
    except (BotoCoreError, ValueError) as e:
        logger.warning(f"Logo storage: S3 client unavailable ({e}), writing to the local filesystem")
        return None
    logger.info(f"Logo storage: S3 bucket '{settings.storage_bucket_name}'")
    return client


class StorageService:
    """Company logos, kept in an S3-compatible bucket or under a local directory"""

    def __init__(self, settings: Settings, s3_client=None):
        self.bucket_name = settings.storage_bucket_name
        self.max_logo_bytes = settings.max_logo_bytes
        self.local_storage_dir = os.path.abspath(settings.local_storage_dir)
        self.s3_client = s3_client if s3_client is not None else build_s3_client(settings)

    def get_content_type(self, filename: str) -> Optional[str]:
        ext = os.path.splitext(filename.lower())[1].lstrip('.')
        return LOGO_CONTENT_TYPES.get(ext)

    def validate_logo(self, filename: str, size: int):
        if self.get_content_type(filename) is None:
            allowed = ', '.join(sorted(LOGO_CONTENT_TYPES)).upper()
            raise ValueError(f"File type not supported. Allowed types: {allowed}")
        if size > self.max_logo_bytes:
            raise ValueError(f"Logo too large. Maximum size is {self.max_logo_bytes // 1024} KB")

    def upload_logo(self, file_content: bytes, filename: str, owner_id: str) -> str:
        """
        Store a logo for one user.

        Returns the storage key, ``logos/<owner_id>/<timestamp>_<filename>``,
        which is the same for S3 and the local directory.
        """
        self.validate_logo(filename, len(file_content))

        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        storage_key = f"logos/{owner_id}/{stamp}_{os.path.basename(filename).replace(' ', '_')}"

        if self.s3_client:
            try:
                self.s3_client.put_object(
                    Bucket=self.bucket_name,
                    Key=storage_key,
                    Body=file_content,
                    ContentType=self.get_content_type(filename)
                )
            except ClientError as e:
                raise StorageError(f"Logo upload failed: {e}") from e
            return storage_key

        local_path = self._local_path(storage_key)
        os.makedirs(os.path.dirname(local_path), exist_ok=True)
        with open(local_path, 'wb') as f:
            f.write(file_content)
        logger.info(f"Logo written to {local_path}")
        return storage_key

    def download(self, storage_key: str) -> bytes:
        """Raises FileNotFoundError for unknown keys"""
        if self.s3_client:
            try:
                obj = self.s3_client.get_object(Bucket=self.bucket_name, Key=storage_key)
            except ClientError as e:
                if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                    raise FileNotFoundError(storage_key) from e
                raise StorageError(f"Logo download failed: {e}") from e
            return obj['Body'].read()

        local_path = self._local_path(storage_key)
        if not os.path.isfile(local_path):
            raise FileNotFoundError(storage_key)
        with open(local_path, 'rb') as f:
            return f.read()

    def _local_path(self, storage_key: str) -> str:
        # Keys must stay inside the storage directory
        local_path = os.path.abspath(os.path.join(self.local_storage_dir, storage_key))
        if not local_path.startswith(self.local_storage_dir + os.sep):
            raise FileNotFoundError(storage_key)
        return local_path
