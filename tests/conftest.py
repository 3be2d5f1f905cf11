"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides test database, client, remote endpoint and scan service fixtures.

==============================================================================
"""

import os

# Keep the application's own engine off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import numpy as np
import pytest
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from scanrelay.main import app
from scanrelay.db.database import Base, get_db
from scanrelay.config import StaticConfigurationProvider
from scanrelay.scanner import DeliveryDispatcher, ScanEventStore
from scanrelay.services.scan_service import ScanService, get_scan_service


ENDPOINT_URL = "http://scan-server.test:5000/scan"


# ============================================================================
# ASYNC BACKEND
# ============================================================================

@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

# In-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ============================================================================
# REMOTE ENDPOINT FIXTURES
# ============================================================================

class RecordingEndpoint:
    """
    Stand-in for the remote scan server.

    Records every request and answers with a fixed status code, or raises
    a transport error when one is set.
    """

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.error: Exception = None
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def endpoint() -> RecordingEndpoint:
    """Remote endpoint answering HTTP 200."""
    return RecordingEndpoint()


@pytest.fixture
def http_client(endpoint: RecordingEndpoint) -> httpx.AsyncClient:
    """Async client routed to the recording endpoint."""
    return httpx.AsyncClient(transport=httpx.MockTransport(endpoint))


@pytest.fixture
def config() -> StaticConfigurationProvider:
    return StaticConfigurationProvider(endpoint_url=ENDPOINT_URL, device_info="Test Scanner")


@pytest.fixture
def store() -> ScanEventStore:
    return ScanEventStore()


@pytest.fixture
def dispatcher(
    config: StaticConfigurationProvider,
    http_client: httpx.AsyncClient
) -> DeliveryDispatcher:
    return DeliveryDispatcher(config, client=http_client, timeout_seconds=5.0)


@pytest.fixture
def scan_service(dispatcher: DeliveryDispatcher, store: ScanEventStore) -> ScanService:
    """Scan service delivering to the recording endpoint."""
    return ScanService(dispatcher, store=store)


# ============================================================================
# CAMERA DOUBLES
# ============================================================================

class FakeCapture:
    """cv2.VideoCapture stand-in serving a fixed number of black frames."""

    def __init__(self, frames: int):
        self.remaining = frames
        self.released = False

    def isOpened(self):
        return True

    def read(self):
        if self.remaining <= 0:
            return False, None
        self.remaining -= 1
        return True, np.zeros((10, 10, 3), dtype=np.uint8)

    def release(self):
        self.released = True


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def client(db: Session, scan_service: ScanService) -> Generator[TestClient, None, None]:
    """Create test client with database and scan service overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_scan_service] = lambda: scan_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
