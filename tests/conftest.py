import os
import pytest
import httpx
from fastapi.testclient import TestClient

# Set test environment variables BEFORE importing app modules
os.environ["TESTING"] = "true"

# Dummy AWS credentials for moto
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["S3_BUCKET"] = "asset-proxy-bucket"
os.environ["DYNAMODB_TABLE"] = "Assets"
os.environ["PROXY_PREFIX"] = "a"
# Clear endpoints so moto mocks are used instead of localstack
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("S3_PUBLIC_URL", None)

from app.main import app
from app.dependencies.dependencies import get_s3_service, get_dynamodb_service, get_http_client

PUBLIC_BASE_URL = "https://objects.test/asset-proxy-bucket"


class ObjectStore:
    """In-memory object store served over an httpx mock transport."""
    def __init__(self):
        self.objects = {}
        self.requests = []

    def put(self, key: str, data: bytes):
        self.objects[f"{PUBLIC_BASE_URL}/{key}"] = data

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        data = self.objects.get(str(request.url))
        if data is None:
            return httpx.Response(404, content=b"<Error>NoSuchKey</Error>")
        return httpx.Response(200, content=data)


@pytest.fixture(scope="function")
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"


@pytest.fixture
def catalog():
    """asset_id -> catalog item"""
    return {}


@pytest.fixture
def object_store():
    return ObjectStore()


@pytest.fixture
def fake_db(mocker, catalog):
    db = mocker.Mock()
    db.get_metadata.side_effect = lambda asset_id: catalog.get(asset_id)
    return db


@pytest.fixture
def fake_s3(mocker):
    s3 = mocker.Mock()
    s3.public_url.side_effect = lambda key: f"{PUBLIC_BASE_URL}/{key}"
    return s3


@pytest.fixture
def http_client(object_store):
    return httpx.AsyncClient(transport=httpx.MockTransport(object_store.handler))


@pytest.fixture(scope="function")
def test_client(fake_db, fake_s3, http_client):
    app.dependency_overrides[get_dynamodb_service] = lambda: fake_db
    app.dependency_overrides[get_s3_service] = lambda: fake_s3
    app.dependency_overrides[get_http_client] = lambda: http_client

    with TestClient(app, follow_redirects=False) as client:
        yield client

    app.dependency_overrides.clear()
