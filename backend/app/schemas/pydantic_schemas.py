from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any, Literal

INTENTS = ("info_request", "complaint", "recommendation", "other")

Intent = Literal["info_request", "complaint", "recommendation", "other"]


class InboundMessage(BaseModel):
    phone: str
    name: Optional[str] = None
    text: str = ""
    sender: str
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.phone


class Classification(BaseModel):
    intent: Intent = "other"
    confidence: float = 0.0
    reply: str = ""

    @field_validator("intent", mode="before")
    @classmethod
    def _unknown_intent_is_other(cls, v: Any) -> str:
        return v if v in INTENTS else "other"

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        if isinstance(v, bool):
            return 0.0
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if value != value:  # NaN
            return 0.0
        return min(max(value, 0.0), 1.0)

    @field_validator("reply", mode="before")
    @classmethod
    def _reply_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class ConversationInsights(BaseModel):
    model_config = ConfigDict(extra="allow")

    sentiment: Optional[str] = None
    topic: Optional[str] = None
    urgency: Optional[str] = None
    actionable_points: Optional[List[str]] = None

    @field_validator("actionable_points", mode="before")
    @classmethod
    def _points_as_list(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        if isinstance(v, str):
            return [v]
        if isinstance(v, list):
            return [str(p) for p in v]
        return None


class ConversationDigest(BaseModel):
    summary: str = ""
    insights: Dict[str, Any] = Field(default_factory=dict)


class MessageRead(BaseModel):
    direction: Literal["inbound", "outbound"]
    message_text: Optional[str] = None
    created_at: Optional[str] = None


class SummaryRead(BaseModel):
    customer_id: str
    last_summary: str = ""
    last_insights: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[str] = None

