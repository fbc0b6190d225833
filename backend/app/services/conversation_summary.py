import logging
from typing import Any, Dict

from ..db import THREAD_LIMIT
from .triage import TextGenerator, summarize_thread

logger = logging.getLogger(__name__)


async def refresh_conversation_summary(db, llm: TextGenerator, customer_id: str, limit: int = THREAD_LIMIT) -> Dict[str, Any]:
    """Recompute the rolling summary for one customer from the message log and store it."""
    messages = db.list_thread(customer_id, limit=limit)
    digest = await summarize_thread(llm, messages or [])
    row = db.upsert_summary(customer_id, summary=digest.summary, insights=digest.insights)
    logger.info(f"Stored summary for customer {customer_id} from {len(messages or [])} messages")
    return row
