from ..schemas.pydantic_schemas import Classification, InboundMessage

CONFIDENCE_THRESHOLD = 0.6

HOLDING_MESSAGE = "Thanks for your message! A team member will get back to you shortly."


def needs_escalation(classification: Classification) -> bool:
    return classification.confidence < CONFIDENCE_THRESHOLD or classification.intent == "other"


def owner_alert_text(message: InboundMessage) -> str:
    return f"⚠️ New message needs attention from {message.display_name}:\n\"{message.text}\""
