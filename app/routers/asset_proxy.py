from fastapi import APIRouter, Depends, Request
from typing import Optional
import logging
import httpx

from app.storage.dynamodb import DynamoDBService
from app.storage.s3 import S3Service
from app.dependencies.dependencies import get_s3_service, get_dynamodb_service, get_http_client
from app.asset_proxy.service import serve_asset
from app.settings import settings

log = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"/{settings.proxy_prefix.strip('/')}",
    tags=["asset-proxy"]
)

@router.api_route("/{token}/{name:path}", methods=["GET", "HEAD"])
async def get_asset(
    token: str,
    name: str,
    request: Request,
    db: DynamoDBService = Depends(get_dynamodb_service),
    s3: Optional[S3Service] = Depends(get_s3_service),
    http: httpx.AsyncClient = Depends(get_http_client)
):
    """
    Serves an asset by its base62 token.

    The name segment is cosmetic; stale names get a 301 to the canonical URL.
    Image assets can be resized and re-encoded with width, height and quality.
    """
    return await serve_asset(
        token=token,
        requested_name=name,
        query_params=request.query_params,
        query_string=request.url.query,
        db=db,
        s3=s3,
        http=http,
        prefix=settings.proxy_prefix.strip("/"),
    )
