from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
from uuid import UUID
import logging

from ..config import Settings, get_settings
from ..db import THREAD_LIMIT, get_db
from ..schemas.pydantic_schemas import MessageRead, SummaryRead
from ..services.conversation_summary import refresh_conversation_summary
from ..services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(settings: Settings = Depends(get_settings)):
    return get_db(settings)


def get_llm(settings: Settings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(settings)


@router.get("/{customer_id}/messages", response_model=List[MessageRead])
async def list_messages(customer_id: UUID, limit: int = Query(default=THREAD_LIMIT, ge=1, le=500), db=Depends(get_store)):
    return db.list_thread(str(customer_id), limit=limit)


@router.get("/{customer_id}/summary", response_model=SummaryRead)
async def get_summary(customer_id: UUID, db=Depends(get_store)):
    row = db.get_summary(str(customer_id))
    if not row:
        raise HTTPException(status_code=404, detail="Summary not found")
    return row


@router.post("/{customer_id}/summarize", response_model=SummaryRead)
async def summarize_customer(customer_id: UUID, db=Depends(get_store), llm: GeminiClient = Depends(get_llm)):
    logger.info(f"Recomputing summary for customer {customer_id}")
    return await refresh_conversation_summary(db, llm, str(customer_id))
