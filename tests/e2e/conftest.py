"""Fixtures for end-to-end tests against the full app with mocked providers."""

import pytest
from dishka import AsyncContainer
from fastapi.testclient import TestClient

from skullking.interface.api.app import create_app
from tests.di import build_test_container


@pytest.fixture
def container() -> AsyncContainer:
    return build_test_container()


@pytest.fixture
def client(container: AsyncContainer):
    """Test client over an app backed by the in-memory store."""
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client
