from typing import Optional
import httpx
from fastapi import Request
from app.storage.dynamodb import DynamoDBService
from app.storage.s3 import S3Service

def get_s3_service(request: Request) -> Optional[S3Service]:
    """Dependency provider for S3Service, None when the client failed to start"""
    return request.app.state.s3

def get_dynamodb_service(request: Request) -> DynamoDBService:
    """Dependency provider for DynamoDBService"""
    return request.app.state.db

def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency provider for the object store HTTP client"""
    return request.app.state.http
