"""
    Asset proxy request pipeline.

    decode token -> catalog lookup -> canonical name check -> object store
    fetch -> optional image transform -> response.

    Each stage raises an APIException subclass to end the request early;
    the application's exception handlers turn those into responses.
"""
from typing import AsyncIterator, Mapping, Optional
import logging

import httpx
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.responses import Response, StreamingResponse
from starlette.concurrency import run_in_threadpool

from app.asset_proxy.codec import CodecError, base62_to_uuid
from app.asset_proxy.models import AssetRecord, TransformRequest
from app.asset_proxy.paths import IMAGES, get_asset_proxy_name, get_asset_proxy_url, is_asset_of_type, is_canonical_name
from app.asset_proxy.transform import OUTPUT_MIME_TYPE, TranscodingError, parse_transform_params, transcode_image
from app.exceptions import (
    APIException,
    AssetNotFoundException,
    DynamoDBException,
    InternalErrorException,
    InvalidTokenException,
    StorageUnavailableException,
    TranscodingException,
    UpstreamFetchException,
)
from app.storage.dynamodb import DynamoDBService
from app.storage.s3 import S3Service

log = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
SECURITY_HEADERS = {"X-Content-Type-Options": "nosniff"}

def decode_asset_id(token: str) -> str:
    """Decodes a path token to an asset ID."""
    try:
        return base62_to_uuid(token)
    except CodecError:
        raise InvalidTokenException(token)

def lookup_asset(db: DynamoDBService, asset_id: str) -> AssetRecord:
    """Gets the asset record from the catalog. It must point at a stored object."""
    try:
        item = db.get_metadata(asset_id)
    except (BotoCoreError, ClientError) as e:
        log.error(f"DynamoDB get_metadata failed: {e}")
        raise DynamoDBException(f"Failed to get asset metadata: {e}")

    if not item:
        raise AssetNotFoundException(asset_id)
    record = AssetRecord.model_validate({**item, "asset_id": asset_id})
    if not record.storage_path:
        raise AssetNotFoundException(asset_id, reason=f"Asset '{asset_id}' has no storage path")
    return record

def get_redirect_target(
    record: AssetRecord,
    requested_name: str,
    query_string: str,
    prefix: str
) -> Optional[str]:
    """Canonical URL to redirect to, or None when the requested name is current."""
    canonical_path = get_asset_proxy_url(record, prefix)
    if canonical_path is None:
        return None
    if is_canonical_name(requested_name, get_asset_proxy_name(record)):
        return None
    return f"{canonical_path}?{query_string}" if query_string else canonical_path

def redirect_response(target: str) -> Response:
    # Location is set as-is so the query string goes back exactly as sent
    return Response(status_code=301, headers={"Location": target})

async def fetch_asset(
    s3: Optional[S3Service],
    http: httpx.AsyncClient,
    storage_path: str
) -> httpx.Response:
    """Opens a streaming GET on the object's public URL. The caller closes it."""
    if s3 is None:
        raise StorageUnavailableException()

    url = s3.public_url(storage_path)
    upstream = await http.send(http.build_request("GET", url), stream=True)
    if not upstream.is_success:
        await upstream.aclose()
        raise UpstreamFetchException(f"Object store returned {upstream.status_code} for '{storage_path}'")
    return upstream

async def transformed_response(upstream: httpx.Response, transform: TransformRequest) -> Response:
    try:
        data = await upstream.aread()
    finally:
        await upstream.aclose()

    try:
        body = await run_in_threadpool(transcode_image, data, transform)
    except TranscodingError as e:
        raise TranscodingException(str(e))

    return Response(
        content=body,
        media_type=OUTPUT_MIME_TYPE,
        headers={"Content-Length": str(len(body)), **SECURITY_HEADERS},
    )

async def stream_upstream(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Yields the upstream body, closing it even if the client goes away."""
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    finally:
        await upstream.aclose()

def passthrough_response(upstream: httpx.Response, mime_type: Optional[str]) -> StreamingResponse:
    return StreamingResponse(
        stream_upstream(upstream),
        media_type=mime_type or DEFAULT_MIME_TYPE,
        headers=SECURITY_HEADERS,
    )

async def serve_asset(
    token: str,
    requested_name: str,
    query_params: Mapping[str, str],
    query_string: str,
    db: DynamoDBService,
    s3: Optional[S3Service],
    http: httpx.AsyncClient,
    prefix: str
) -> Response:
    """Runs the full pipeline for one proxied asset request."""
    try:
        asset_id = decode_asset_id(token)
        record = await run_in_threadpool(lookup_asset, db, asset_id)

        target = get_redirect_target(record, requested_name, query_string, prefix)
        if target is not None:
            log.debug("Redirecting %s to %s", requested_name, target)
            return redirect_response(target)

        upstream = await fetch_asset(s3, http, record.storage_path)

        transform = parse_transform_params(query_params)
        if transform is not None and is_asset_of_type(record.mime_type, IMAGES):
            return await transformed_response(upstream, transform)
        return passthrough_response(upstream, record.mime_type)
    except APIException:
        raise
    except Exception as e:
        log.exception("Unexpected error serving asset %s", token)
        raise InternalErrorException(f"Unexpected error serving asset '{token}': {e}") from e
