import logging
from typing import Any, Dict, List, Protocol

from pydantic import ValidationError

from ..schemas.pydantic_schemas import Classification, ConversationDigest, ConversationInsights
from .json_block import extract_json_block

logger = logging.getLogger(__name__)


TRIAGE_SYSTEM_PROMPT = (
    "You are a triage agent for a small food brand's WhatsApp.\n"
    "Classify the customer's message into one of: [\"info_request\",\"complaint\",\"recommendation\",\"other\"].\n"
    "Provide:\n"
    "- \"intent\"\n"
    "- \"confidence\" (0-1)\n"
    "- \"reply\" (a short polite reply fitting the intent; if \"other\", ask for clarification)\n\n"
    "Assume the brand sells waffles, drinks; keep replies friendly and brief.\n"
    "Return pure JSON."
)

SUMMARY_SYSTEM_PROMPT = (
    "You are a concise CRM assistant. Produce:\n"
    "- \"summary\": 2-4 sentences summarizing the conversation.\n"
    "- \"insights\": an object with keys {sentiment, topic, urgency, actionable_points[]}.\n\n"
    "Return pure JSON."
)

CLARIFICATION_REPLY = "Could you share a bit more detail so I can help you better?"


class TextGenerator(Protocol):
    async def generate(self, system: str, user: str) -> str:
        ...


def default_classification() -> Classification:
    return Classification(intent="other", confidence=0.0, reply=CLARIFICATION_REPLY)


async def classify_message(llm: TextGenerator, text: str) -> Classification:
    out = await llm.generate(TRIAGE_SYSTEM_PROMPT, text)
    parsed = extract_json_block(out)
    if not isinstance(parsed, dict):
        logger.info("Classification unparseable; using default")
        return default_classification()
    try:
        return Classification.model_validate(parsed)
    except ValidationError as e:
        logger.warning(f"Classification invalid ({e.error_count()} errors); using default")
        return default_classification()


def render_thread(messages: List[Dict[str, Any]]) -> str:
    return "\n".join(
        f"{'Customer' if m.get('direction') == 'inbound' else 'You'}: {m.get('message_text')}"
        for m in messages
    )


async def summarize_thread(llm: TextGenerator, messages: List[Dict[str, Any]]) -> ConversationDigest:
    out = await llm.generate(SUMMARY_SYSTEM_PROMPT, render_thread(messages))
    parsed = extract_json_block(out)
    if not isinstance(parsed, dict):
        return ConversationDigest()

    summary = parsed.get("summary")
    insights = parsed.get("insights")
    if isinstance(insights, dict):
        try:
            insights = ConversationInsights.model_validate(insights).model_dump(exclude_none=True)
        except ValidationError:
            insights = {}
    else:
        insights = {}
    return ConversationDigest(summary=summary if isinstance(summary, str) else "", insights=insights)
