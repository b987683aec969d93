"""Pytest fixtures for mimo-client tests."""

import os
from unittest.mock import patch

import httpx
import pytest

from mimo_client.client import MimoClient
from mimo_client.config import ClientConfig, Settings


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "MIMO_API_KEY": "test-api-key",
        "MIMO_BASE_URL": "http://mimo.test/v1",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def settings(mock_env_vars) -> Settings:
    """Create Settings instance with mocked environment."""
    return Settings()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(api_key="test-api-key", base_url="http://mimo.test/v1", timeout=5.0)


@pytest.fixture
def make_client(client_config):
    """Factory building a MimoClient whose HTTP calls go to ``handler``."""

    def _make(handler) -> MimoClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return MimoClient(client_config, http_client=http_client)

    return _make
