import pytest
import structlog
from fastapi.testclient import TestClient

from abadvisor.main import app


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
