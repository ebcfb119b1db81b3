"""Shared test fixtures for mr-decorator."""

from __future__ import annotations

import pytest
import respx
from factories import TEST_SLUG, TEST_TOKEN, TEST_URL

from mr_decorator.client import GitLabClient
from mr_decorator.config import DecoratorConfig


@pytest.fixture
def config() -> DecoratorConfig:
    return DecoratorConfig(
        api_url=TEST_URL,
        repository_slug=TEST_SLUG,
        token=TEST_TOKEN,
        public_root_url="https://sonar.example.com",
    )


@pytest.fixture
def client(config: DecoratorConfig) -> GitLabClient:
    return GitLabClient(config)


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=TEST_URL, assert_all_called=False) as router:
        yield router
