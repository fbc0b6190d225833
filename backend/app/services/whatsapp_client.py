import httpx
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..config import Settings

# Set up logger
logger = logging.getLogger(__name__)


class SendStatus(str, Enum):
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True)
class SendResult:
    """Outcome of one outbound send. Failures are logged, never raised."""
    status: SendStatus
    to: str
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.DELIVERED


class WhatsAppClient:
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self.base_url = f"https://graph.facebook.com/{settings.graph_api_version}"
        self._http = http_client

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.settings.phone_number_id}/messages"

    async def send_text(self, to: str, body: str) -> SendResult:
        """Send a session text message to `to`. Fire-and-forget from the caller's point of view."""
        headers = {
            "Authorization": f"Bearer {self.settings.meta_token}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": body},
        }

        try:
            if self._http is not None:
                response = await self._http.post(self.messages_url, headers=headers, json=payload, timeout=30.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.messages_url, headers=headers, json=payload, timeout=30.0)
        except httpx.HTTPError as e:
            logger.error(f"Send WA failed (transport) to {to}: {str(e)}")
            return SendResult(status=SendStatus.FAILED, to=to, detail=str(e))

        if response.is_success:
            logger.info(f"Sent WA text to {to}: {response.status_code}")
            return SendResult(status=SendStatus.DELIVERED, to=to, status_code=response.status_code)

        logger.error(f"Send WA failed: {response.text}")
        return SendResult(
            status=SendStatus.FAILED,
            to=to,
            status_code=response.status_code,
            detail=response.text,
        )
