"""S3 storage service for derived images (sketches)."""
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError
from typing import Optional, Dict
import logging

from src.app.config import settings

logger = logging.getLogger(__name__)


class S3ServiceError(Exception):
    """Custom exception for S3 service errors."""
    pass


class S3Service:
    """Service for S3 operations with comprehensive error handling."""

    def __init__(self, bucket_name: Optional[str] = None, public_base_url: Optional[str] = None):
        """Initialize S3 client with configuration."""
        try:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.S3_REGION,
                config=Config(
                    signature_version='s3v4',
                    s3={'addressing_style': 'virtual'}
                )
            )
            self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
            self.public_base_url = public_base_url or settings.S3_PUBLIC_BASE_URL
            logger.info(f"S3 Service initialized for bucket: {self.bucket_name}")
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to initialize S3 client: {e}")
            raise S3ServiceError(f"S3 initialization failed: {str(e)}")

    @staticmethod
    def sketch_key(poem_id: str) -> str:
        """S3 key for a poem's sketch: sketches/{poem_id}.png"""
        return f"sketches/{poem_id}.png"

    def public_url(self, s3_key: str) -> str:
        """
        Public URL of an object.

        Uses S3_PUBLIC_BASE_URL (e.g. a CDN) when configured, otherwise the
        virtual-hosted bucket URL.
        """
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{s3_key}"
        return f"https://{self.bucket_name}.s3.{settings.S3_REGION}.amazonaws.com/{s3_key}"

    def upload_file(
        self,
        file_data: bytes,
        s3_key: str,
        content_type: str = 'application/octet-stream',
        metadata: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Upload file bytes directly to S3.

        Args:
            file_data: File content as bytes
            s3_key: S3 object key
            content_type: MIME type
            metadata: Optional metadata dict

        Returns:
            Public URL of the uploaded object

        Raises:
            S3ServiceError: If upload fails
        """
        try:
            params = {
                'Bucket': self.bucket_name,
                'Key': s3_key,
                'Body': file_data,
                'ContentType': content_type
            }

            if metadata:
                params['Metadata'] = metadata

            self.s3_client.put_object(**params)
            logger.info(f"Uploaded {len(file_data)} bytes to: {s3_key}")
            return self.public_url(s3_key)

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading file: {e}")
            raise S3ServiceError(f"Failed to upload file: {str(e)}")
