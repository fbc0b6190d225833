from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4
from datetime import datetime, timezone

# Thin adapter over the Supabase client. InMemoryDB mirrors the same surface as a test double.
from supabase import create_client, Client

from .config import Settings

THREAD_LIMIT = 30


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class InMemoryDB:
    def __init__(self) -> None:
        self.customers: Dict[str, Dict[str, Any]] = {}
        self.messages: List[Dict[str, Any]] = []
        self.summaries: Dict[str, Dict[str, Any]] = {}

    # Customers
    def upsert_customer(self, phone: str, name: Optional[str]) -> Dict[str, Any]:
        existing = next((c for c in self.customers.values() if c["phone"] == phone), None)
        if existing is None:
            existing = {"id": str(uuid4()), "phone": phone, "created_at": _now()}
            self.customers[existing["id"]] = existing
        existing["name"] = name
        existing["last_seen_at"] = _now()
        return dict(existing)

    # Messages
    def insert_message(self, customer_id: str, direction: str, message_text: str, raw: Optional[Dict[str, Any]] = None) -> None:
        if customer_id not in self.customers:
            raise KeyError(f"Unknown customer {customer_id}")
        row = {
            "id": str(uuid4()),
            "customer_id": customer_id,
            "direction": direction,
            "message_text": message_text,
            "created_at": _now(),
        }
        if raw is not None:
            row["raw"] = raw
        self.messages.append(row)

    def list_thread(self, customer_id: str, limit: int = THREAD_LIMIT) -> List[Dict[str, Any]]:
        # Ascending, then limited: the oldest `limit` rows, same as the Supabase query.
        rows = [m for m in self.messages if m["customer_id"] == customer_id]
        rows.sort(key=lambda m: m["created_at"])
        return [
            {"direction": m["direction"], "message_text": m["message_text"], "created_at": m["created_at"]}
            for m in rows[:limit]
        ]

    # Summaries
    def upsert_summary(self, customer_id: str, summary: str, insights: Dict[str, Any]) -> Dict[str, Any]:
        row = {
            "customer_id": customer_id,
            "last_summary": summary,
            "last_insights": insights,
            "updated_at": _now(),
        }
        self.summaries[customer_id] = row
        return dict(row)

    def get_summary(self, customer_id: str) -> Optional[Dict[str, Any]]:
        row = self.summaries.get(str(customer_id))
        return dict(row) if row else None


class SupabaseDB:
    def __init__(self, client: Client) -> None:
        self.client = client

    # Customers
    def upsert_customer(self, phone: str, name: Optional[str]) -> Dict[str, Any]:
        res = (
            self.client.table("customers")
            .upsert({"phone": phone, "name": name, "last_seen_at": _now()}, on_conflict="phone")
            .execute()
        )
        rows = res.data or []
        if not rows:
            raise RuntimeError(f"Customer upsert returned no row for {phone}")
        return rows[0]

    # Messages
    def insert_message(self, customer_id: str, direction: str, message_text: str, raw: Optional[Dict[str, Any]] = None) -> None:
        row: Dict[str, Any] = {
            "customer_id": customer_id,
            "direction": direction,
            "message_text": message_text,
        }
        if raw is not None:
            row["raw"] = raw
        self.client.table("messages").insert(row).execute()

    def list_thread(self, customer_id: str, limit: int = THREAD_LIMIT) -> List[Dict[str, Any]]:
        res = (
            self.client.table("messages")
            .select("direction,message_text,created_at")
            .eq("customer_id", customer_id)
            .order("created_at", desc=False)
            .limit(limit)
            .execute()
        )
        return res.data or []

    # Summaries
    def upsert_summary(self, customer_id: str, summary: str, insights: Dict[str, Any]) -> Dict[str, Any]:
        row = {
            "customer_id": customer_id,
            "last_summary": summary,
            "last_insights": insights,
            "updated_at": _now(),
        }
        res = self.client.table("conversation_summaries").upsert(row, on_conflict="customer_id").execute()
        return (res.data or [row])[0]

    def get_summary(self, customer_id: str) -> Optional[Dict[str, Any]]:
        res = (
            self.client.table("conversation_summaries")
            .select("*")
            .eq("customer_id", str(customer_id))
            .limit(1)
            .execute()
        )
        return res.data[0] if res.data else None


_db_instance: Optional[SupabaseDB] = None
_db_credentials: Optional[Tuple[str, str]] = None


def get_db(settings: Settings) -> SupabaseDB:
    """Process-wide Supabase adapter, rebuilt when the credentials change.

    Missing credentials surface as a client error here.
    """
    global _db_instance, _db_credentials
    credentials = (settings.supabase_url or "", settings.supabase_service_role or "")
    if _db_instance is None or _db_credentials != credentials:
        _db_instance = SupabaseDB(create_client(*credentials))
        _db_credentials = credentials
    return _db_instance
