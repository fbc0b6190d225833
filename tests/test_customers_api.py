"""
Customer read / maintenance route tests
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from app.api.customers import get_llm, get_store
from app.main import app
from fakes import FakeLLM


@pytest.fixture
def llm():
    return FakeLLM(summary='{"summary":"Wants a dozen waffles.","insights":{"sentiment":"positive","urgency":"high"}}')


@pytest.fixture
def client(memory_db, llm):
    app.dependency_overrides[get_store] = lambda: memory_db
    app.dependency_overrides[get_llm] = lambda: llm
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer(memory_db):
    row = memory_db.upsert_customer("8801711000000", "Rahim")
    memory_db.insert_message(row["id"], direction="inbound", message_text="Can I order 12 waffles?")
    memory_db.insert_message(row["id"], direction="outbound", message_text="Of course!")
    return row


def test_list_messages(client, customer):
    resp = client.get(f"/api/customers/{customer['id']}/messages")

    assert resp.status_code == 200
    assert [(m["direction"], m["message_text"]) for m in resp.json()] == [
        ("inbound", "Can I order 12 waffles?"),
        ("outbound", "Of course!"),
    ]


def test_list_messages_limit(client, customer):
    resp = client.get(f"/api/customers/{customer['id']}/messages", params={"limit": 1})
    assert [m["message_text"] for m in resp.json()] == ["Can I order 12 waffles?"]


def test_summary_missing_is_404(client):
    resp = client.get(f"/api/customers/{uuid.uuid4()}/summary")
    assert resp.status_code == 404


def test_summarize_then_read(client, customer, llm):
    resp = client.post(f"/api/customers/{customer['id']}/summarize")

    assert resp.status_code == 200
    body = resp.json()
    assert body["customer_id"] == customer["id"]
    assert body["last_summary"] == "Wants a dozen waffles."
    assert body["last_insights"] == {"sentiment": "positive", "urgency": "high"}
    assert llm.calls[0][1] == "Customer: Can I order 12 waffles?\nYou: Of course!"

    again = client.get(f"/api/customers/{customer['id']}/summary")
    assert again.json()["last_summary"] == "Wants a dozen waffles."


def test_invalid_customer_id(client):
    assert client.get("/api/customers/not-a-uuid/summary").status_code == 422
