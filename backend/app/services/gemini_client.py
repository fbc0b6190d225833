import httpx
import logging
from typing import Any, Dict, Optional

from ..config import Settings

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiClient:
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self.model = settings.gemini_model
        self._http = http_client

    @property
    def url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self.model}:generateContent"

    async def generate(self, system: str, user: str) -> str:
        """Return the first candidate's text, or "" when the call or the response shape fails."""
        payload: Dict[str, Any] = {
            "contents": [
                {"role": "user", "parts": [{"text": f"{system}\n\nUSER:\n{user}"}]}
            ],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": 300},
        }
        params = {"key": self.settings.gemini_api_key or ""}

        try:
            if self._http is not None:
                response = await self._http.post(self.url, params=params, json=payload, timeout=30.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, params=params, json=payload, timeout=30.0)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini call failed: {type(e).__name__}: {str(e)}")
            return ""

        if not response.is_success:
            logger.warning(f"Gemini returned {response.status_code}: {response.text[:500]}")

        return _first_candidate_text(data)


def _first_candidate_text(data: Any) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""
