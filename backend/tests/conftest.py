"""Shared test configuration, fixtures and pytest markers."""

import pytest

from database import Database
from fakes import SAMPLE_CV_JSON, FakeGemini, FakeTaxonomyClient
from services.gemini_client import GeminiClient


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: talks to the live ESCO API (slow, needs network)"
    )


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def taxonomy():
    return FakeTaxonomyClient()


@pytest.fixture
def gemini():
    return FakeGemini(json_response=SAMPLE_CV_JSON)


@pytest.fixture
def offline_gemini():
    return GeminiClient(api_key="")
