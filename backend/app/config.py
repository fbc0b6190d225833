import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    # Webhook / WhatsApp Cloud API
    verify_token: Optional[str] = None
    meta_token: Optional[str] = None
    phone_number_id: Optional[str] = None
    graph_api_version: str = "v20.0"
    owner_whatsapp: Optional[str] = None
    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role: Optional[str] = None
    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash-latest"


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings() -> Settings:
    """Build the process-wide settings from the environment (and .env if present)."""
    load_dotenv()
    return Settings(
        verify_token=_env("META_VERIFY_TOKEN"),
        meta_token=_env("META_TOKEN"),
        phone_number_id=_env("META_PHONE_NUMBER_ID"),
        graph_api_version=_env("META_GRAPH_VERSION") or "v20.0",
        owner_whatsapp=_env("OWNER_WHATSAPP"),
        supabase_url=_env("SUPABASE_URL"),
        supabase_service_role=_env("SUPABASE_SERVICE_ROLE"),
        gemini_api_key=_env("GEMINI_API_KEY"),
        gemini_model=_env("GEMINI_MODEL") or "gemini-1.5-flash-latest",
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """FastAPI dependency; settings are loaded once per process."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
