from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager
from botocore.exceptions import BotoCoreError
import httpx
import uvicorn
import logging

from app.storage.dynamodb import DynamoDBService
from app.storage.s3 import S3Service
from app.settings import settings
from app.routers.asset_proxy import router as asset_proxy_router
from app.exceptions import add_exception_handlers

logging.basicConfig(level=logging.INFO)
log = logging.getLogger("asset-proxy")

def create_s3_service():
    """The proxy keeps running without an object store client and answers 503."""
    try:
        return S3Service()
    except BotoCoreError as e:
        log.error("Failed to initialize S3 client: %s", e)
        return None

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
        Async context manager for FastAPI application lifecycle events.
        Initializes and closes resources (S3, DynamoDB, HTTP client) for the application.
    """
    # Initialize resources
    app.state.s3 = create_s3_service()
    app.state.db = DynamoDBService()
    app.state.http = httpx.AsyncClient(timeout=settings.fetch_timeout_seconds, follow_redirects=True)
    yield
    # Cleanup resources
    await app.state.http.aclose()
    if app.state.s3 is not None:
        app.state.s3.close()
    app.state.db.close()

# Initialize App
app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    description="Asset Proxy Service",
)

# Add exception handlers
add_exception_handlers(app)

# CORS - Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=["GET", "HEAD"],
    allow_headers=["*"],
)

# Add the routers
app.include_router(asset_proxy_router)

# Check Health
@app.get("/", response_class=PlainTextResponse)
def read_root():
    """
        Default end point

    """
    return "Asset Proxy Service is running."

if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
