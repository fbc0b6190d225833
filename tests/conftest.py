"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add backend/ and tests/ to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "backend"))
sys.path.insert(0, str(Path(__file__).parent))

from app.config import Settings  # noqa: E402
from app.db import InMemoryDB  # noqa: E402
from fakes import FakeMessenger  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        verify_token="verify-me",
        meta_token="meta-token",
        phone_number_id="1234567890",
        owner_whatsapp="8801999999999",
        supabase_url="https://example.supabase.co",
        supabase_service_role="service-role",
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def memory_db() -> InMemoryDB:
    return InMemoryDB()


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()
