"""Inbound WhatsApp message pipeline.

One delivery runs straight through: upsert customer, store the inbound
message, classify, reply or escalate, then refresh the conversation summary.
Every remote call is awaited in order. Database errors propagate to the
caller; LLM and send failures are absorbed here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from ..config import Settings
from ..schemas.pydantic_schemas import Classification, InboundMessage
from .conversation_summary import refresh_conversation_summary
from .escalation import HOLDING_MESSAGE, needs_escalation, owner_alert_text
from .triage import TextGenerator, classify_message
from .whatsapp_client import SendResult, SendStatus

logger = logging.getLogger(__name__)

NO_MESSAGE_NOTE = "non-text or no msg"


class Messenger(Protocol):
    async def send_text(self, to: str, body: str) -> SendResult:
        ...


@dataclass
class ProcessingOutcome:
    handled: bool
    note: Optional[str] = None
    customer_id: Optional[str] = None
    classification: Optional[Classification] = None
    escalated: bool = False
    sends: List[SendResult] = field(default_factory=list)
    summary: Optional[Dict[str, Any]] = None


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def parse_inbound(payload: Any) -> Optional[InboundMessage]:
    """Pick the first text message of the first change of the first entry, if any."""
    if not isinstance(payload, dict):
        return None
    entry = _first(payload.get("entry"))
    change = _first((entry or {}).get("changes")) if isinstance(entry, dict) else None
    value = (change or {}).get("value") if isinstance(change, dict) else None
    if not isinstance(value, dict):
        return None

    msg = _first(value.get("messages"))
    contact = _first(value.get("contacts"))
    if not isinstance(msg, dict) or msg.get("type") != "text":
        return None
    contact = contact if isinstance(contact, dict) else {}

    sender = msg.get("from")
    phone = contact.get("wa_id") or sender
    if not phone:
        return None

    body = (msg.get("text") or {}).get("body") if isinstance(msg.get("text"), dict) else None
    name = (contact.get("profile") or {}).get("name") if isinstance(contact.get("profile"), dict) else None
    return InboundMessage(
        phone=str(phone),
        name=name if isinstance(name, str) and name else None,
        text=body.strip() if isinstance(body, str) else "",
        sender=str(sender or phone),
        raw=payload,
    )


class InboundProcessor:
    def __init__(self, settings: Settings, db, messenger: Messenger, llm: TextGenerator) -> None:
        self.settings = settings
        self.db = db
        self.messenger = messenger
        self.llm = llm

    async def process(self, payload: Any) -> ProcessingOutcome:
        message = parse_inbound(payload)
        if message is None:
            return ProcessingOutcome(handled=False, note=NO_MESSAGE_NOTE)
        return await self.handle(message)

    async def handle(self, message: InboundMessage) -> ProcessingOutcome:
        logger.info(f"Inbound text from {message.phone}: '{message.text[:50]}{'...' if len(message.text) > 50 else ''}'")

        customer = self.db.upsert_customer(phone=message.phone, name=message.name)
        customer_id = str(customer["id"])
        self.db.insert_message(customer_id, direction="inbound", message_text=message.text, raw=message.raw)

        classification = await classify_message(self.llm, message.text)
        logger.info(f"Classified {customer_id}: intent={classification.intent} confidence={classification.confidence}")

        outcome = ProcessingOutcome(handled=True, customer_id=customer_id, classification=classification)

        if needs_escalation(classification):
            outcome.escalated = True
            outcome.sends.append(await self._notify_owner(message))
            outcome.sends.append(await self.messenger.send_text(message.sender, HOLDING_MESSAGE))
        else:
            outcome.sends.append(await self.messenger.send_text(message.sender, classification.reply))
            self.db.insert_message(customer_id, direction="outbound", message_text=classification.reply)

        outcome.summary = await refresh_conversation_summary(self.db, self.llm, customer_id)
        return outcome

    async def _notify_owner(self, message: InboundMessage) -> SendResult:
        owner = self.settings.owner_whatsapp
        if not owner:
            logger.error("OWNER_WHATSAPP is not configured; owner alert not sent")
            return SendResult(status=SendStatus.FAILED, to="", detail="owner number not configured")
        return await self.messenger.send_text(owner, owner_alert_text(message))
