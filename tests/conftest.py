"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - fake_backend: Scripted model backend for the session controller
    - fake_agent_service: Scripted agent service for API routes
    - app: FastAPI app with the agent service overridden
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.agent.chat_agent import get_agent_service
from src.api.app import create_app
from tests.fakes import FakeAgentService, FakeBackend


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Backend that streams a short greeting."""
    return FakeBackend(chunks=("Hi there!",))


@pytest.fixture
def fake_agent_service() -> FakeAgentService:
    return FakeAgentService()


@pytest.fixture
def app(fake_agent_service: FakeAgentService) -> FastAPI:
    """Create the API with the agent service replaced by a fake.

    Returns:
        FastAPI application that never reaches a real model.
    """
    application = create_app()
    application.dependency_overrides[get_agent_service] = lambda: fake_agent_service
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
