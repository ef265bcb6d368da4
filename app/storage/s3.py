import boto3
from typing import Optional
from urllib.parse import quote
from app.settings import settings
import logging

log = logging.getLogger(__name__)

# -------------------------
# S3 Service
# -------------------------
class S3Service:
    def __init__(self):
        session = boto3.session.Session(region_name=settings.aws_region)
        kwargs = {
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
        }
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url

        self.client = session.client("s3", **kwargs)
        log.info("Initialized S3 client")

    def public_url(self, key: str) -> str:
        """URL the proxy fetches the object bytes from."""
        if settings.s3_public_url:
            return f"{settings.s3_public_url.rstrip('/')}/{quote(key.lstrip('/'))}"
        return self.generate_presigned_url(key)

    def generate_presigned_url(self, key: str, expires_in: Optional[int] = None) -> str:
        expires = expires_in or settings.presign_expire_seconds
        url = self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": settings.s3_bucket, "Key": key},
            ExpiresIn=expires,
        )
        if settings.external_endpoint and settings.aws_endpoint_url:
            url = url.replace(settings.aws_endpoint_url, settings.external_endpoint)
        return url

    def close(self):
        self.client.close()
        log.info("Closed S3 client")
