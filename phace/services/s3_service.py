"""
S3 Service
Presigned upload URLs and public URLs for product images

Uploads go straight from the browser to S3; this app never touches the bytes.
"""
import logging

from phace.core.aws import get_s3_client
from phace.core.config import settings

logger = logging.getLogger(__name__)

UPLOAD_URL_EXPIRY_SECONDS = 3600
CACHE_CONTROL = "max-age=31536000"


class S3Service:
    """Service for product image storage"""

    def __init__(self, bucket: str = None, region: str = None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self.region = region or settings.AWS_REGION
        if not self.bucket:
            raise ValueError("S3 not configured. Set S3_BUCKET_NAME")

    def get_upload_url(self, file_name: str, content_type: str) -> str:
        """
        Presigned PUT URL for a public-read object

        Args:
            file_name: Object key
            content_type: MIME type the browser must send

        Returns:
            URL valid for one hour
        """
        client = get_s3_client()
        url = client.generate_presigned_url(
            'put_object',
            Params={
                'Bucket': self.bucket,
                'Key': file_name,
                'ContentType': content_type,
                'ACL': 'public-read',
                'CacheControl': CACHE_CONTROL,
            },
            ExpiresIn=UPLOAD_URL_EXPIRY_SECONDS
        )
        logger.info(f"Issued upload URL for {file_name}")
        return url

    def delete_image(self, key: str) -> None:
        get_s3_client().delete_object(Bucket=self.bucket, Key=key)

    def get_image_url(self, key: str) -> str:
        if not key:
            raise ValueError("Image key is required")
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
