import asyncio
import json

import httpx
import pytest

from src.api import email_sender as email_module
from src.api import whatsapp as whatsapp_module
from src.notifications import NotificationDispatcher

LEAD = {
    "name": "Omar <b>",
    "email": "omar@example.com",
    "companyName": "Omar & Sons",
    "mobileNumber": "+20 100 000 0000",
    "service": "Web Development",
}


@pytest.fixture
def dispatcher(email_sender, whatsapp_sender):
    return NotificationDispatcher(send_email=email_sender, send_whatsapp=whatsapp_sender)


def test_notify_sends_email_and_whatsapp(dispatcher, email_sender, whatsapp_sender):
    result = asyncio.run(dispatcher.notify(LEAD))

    assert result == {"email": True, "whatsapp": True}
    assert email_sender.calls[0][1] == "3alaFekra - Web Development Inquiry"
    number, text = whatsapp_sender.calls[0]
    assert number == "+20 100 000 0000"
    assert "Web Development" in text


def test_email_failure_does_not_block_whatsapp(dispatcher, email_sender, whatsapp_sender):
    email_sender.error = OSError("connection refused")

    result = asyncio.run(dispatcher.notify(LEAD))

    assert result == {"email": False, "whatsapp": True}
    assert len(whatsapp_sender.calls) == 1


def test_whatsapp_failure_does_not_block_email(dispatcher, email_sender, whatsapp_sender):
    whatsapp_sender.error = RuntimeError("HTTP 401")

    result = asyncio.run(dispatcher.notify(LEAD))

    assert result == {"email": True, "whatsapp": False}
    assert len(email_sender.calls) == 1


def test_whatsapp_skipped_without_phone(dispatcher, whatsapp_sender):
    result = asyncio.run(dispatcher.notify({"name": "A", "email": "a@example.com"}))
    assert result == {"email": True, "whatsapp": False}
    assert whatsapp_sender.calls == []


def test_email_skipped_without_address(dispatcher, email_sender):
    result = asyncio.run(dispatcher.notify({"mobileNumber": "201000000000"}))
    assert result == {"email": False, "whatsapp": True}
    assert email_sender.calls == []


def test_email_template_escapes_lead_values():
    body = email_module.create_estimate_email_template(LEAD)
    assert "Omar &lt;b&gt;" in body
    assert "Omar &amp; Sons" in body


def test_email_subject_defaults_to_service():
    assert email_module.build_email_subject({}) == "3alaFekra - Service Inquiry"


def test_send_email_requires_configuration():
    with pytest.raises(RuntimeError):
        asyncio.run(email_module.send_email("a@example.com", "subject", "<p>hi</p>"))


def test_whatsapp_template_without_service():
    text = whatsapp_module.create_whatsapp_template({"name": "Ali"})
    assert text.startswith("Hello Ali!")
    assert "We received your message." in text


def test_unconfigured_dispatcher_absorbs_errors():
    # Default collaborators raise because SMTP and WhatsApp are not configured.
    result = asyncio.run(NotificationDispatcher().notify(LEAD))
    assert result == {"email": False, "whatsapp": False}


def test_whatsapp_send_message_posts_to_cloud_api(monkeypatch):
    monkeypatch.setattr(whatsapp_module, "WHATSAPP_ACCESS_TOKEN", "wa-token")
    monkeypatch.setattr(whatsapp_module, "WHATSAPP_PHONE_NUMBER_ID", "12345")
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    result = asyncio.run(
        whatsapp_module.send_message("+20 100 000 0000", "hello", transport=httpx.MockTransport(handler))
    )

    assert result == {"messages": [{"id": "wamid.1"}]}
    request = seen[0]
    assert request.url.path.endswith("/12345/messages")
    assert request.headers["Authorization"] == "Bearer wa-token"
    assert json.loads(request.content) == {
        "messaging_product": "whatsapp",
        "to": "201000000000",
        "type": "text",
        "text": {"body": "hello"},
    }


def test_whatsapp_send_message_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(whatsapp_module, "WHATSAPP_ACCESS_TOKEN", "wa-token")
    monkeypatch.setattr(whatsapp_module, "WHATSAPP_PHONE_NUMBER_ID", "12345")
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"error": "bad token"}))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(whatsapp_module.send_message("201000000000", "hello", transport=transport))
