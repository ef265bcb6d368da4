from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    aws_region: str = Field("us-east-1", env="AWS_REGION")
    s3_bucket: str = Field("asset-proxy-bucket", env="S3_BUCKET")
    dynamodb_table: str = Field("Assets", env="DYNAMODB_TABLE")
    aws_endpoint_url: Optional[str] = Field(None, env="AWS_ENDPOINT_URL")
    external_endpoint: Optional[str] = Field(None, env="EXTERNAL_ENDPOINT")
    presign_expire_seconds: int = Field(900, env="PRESIGN_EXPIRE_SECONDS")

    # Public base URL of the bucket (e.g. a CDN); presigned URLs are used when unset
    s3_public_url: Optional[str] = Field(None, env="S3_PUBLIC_URL")

    aws_access_key_id: str = Field("test", env="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str = Field("test", env="AWS_SECRET_ACCESS_KEY")

    proxy_prefix: str = Field("a", env="PROXY_PREFIX")
    fetch_timeout_seconds: float = Field(30.0, env="FETCH_TIMEOUT_SECONDS")

    app_title: str = Field("Asset Proxy", env="APP_TITLE")

    class Config:
        env_file = ".env"
        extra = "allow"  # tolerate unknown vars if needed

settings = Settings()
