import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.chat_gateway import ChatGateway, get_chat_gateway
from src.app import app
from src.leads import get_lead_intake
from src.policy import ConversationPolicyEngine, get_policy_engine
from src.site_knowledge import get_site_knowledge

SITE_KNOWLEDGE = {"pages": ["/services", "/portfolio"]}
BACKEND_REPLY = {
    "id": "msg_01",
    "type": "message",
    "role": "assistant",
    "content": [{"type": "text", "text": "We build websites."}],
}


class FakeBackend:
    """httpx.MockTransport handler standing in for the Messages API."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = BACKEND_REPLY
        self.error = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def gateway(backend):
    return ChatGateway(api_key="test-key", transport=httpx.MockTransport(backend))


@pytest.fixture
def engine(ledger):
    return ConversationPolicyEngine(ledger=ledger)


@pytest.fixture
def client(engine, gateway, intake):
    app.dependency_overrides[get_policy_engine] = lambda: engine
    app.dependency_overrides[get_chat_gateway] = lambda: gateway
    app.dependency_overrides[get_lead_intake] = lambda: intake
    app.dependency_overrides[get_site_knowledge] = lambda: SITE_KNOWLEDGE
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
