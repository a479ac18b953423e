import os

# Required before any src module is imported (config validates on import).
os.environ.setdefault("CLAUDE_API_KEY", "test-claude-key")
for var in ("EMAIL_USER", "EMAIL_APP_PASSWORD", "WHATSAPP_ACCESS_TOKEN", "WHATSAPP_PHONE_NUMBER_ID"):
    os.environ[var] = ""

import pytest

from src.leads import LeadIntake, LeadStore
from src.notifications import NotificationDispatcher
from src.throttle_ledger import ThrottleLedger


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSender:
    """Async collaborator stand-in that records calls and can be told to fail."""

    def __init__(self, error: Exception = None):
        self.calls = []
        self.error = error

    async def __call__(self, *args):
        self.calls.append(args)
        if self.error:
            raise self.error
        return {"ok": True}



@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return ThrottleLedger(block_duration=3600, clock=clock)


@pytest.fixture
def email_sender():
    return RecordingSender()


@pytest.fixture
def whatsapp_sender():
    return RecordingSender()


@pytest.fixture
def leads_path(tmp_path):
    return tmp_path / "leads.json"


@pytest.fixture
def intake(leads_path, email_sender, whatsapp_sender):
    dispatcher = NotificationDispatcher(send_email=email_sender, send_whatsapp=whatsapp_sender)
    return LeadIntake(store=LeadStore(str(leads_path)), dispatcher=dispatcher)
