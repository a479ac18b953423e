"""
WhatsApp Cloud API helper.
Sends text messages to leads via the Graph API.
"""
import httpx
import logging
from typing import Any, Dict, Optional
from src.config import COMPANY_NAME, WHATSAPP_ACCESS_TOKEN, WHATSAPP_API_VERSION, WHATSAPP_PHONE_NUMBER_ID

logger = logging.getLogger(__name__)
GRAPH_BASE_URL = "https://graph.facebook.com"


def _messages_url() -> str:
    return f"{GRAPH_BASE_URL}/{WHATSAPP_API_VERSION}/{WHATSAPP_PHONE_NUMBER_ID}/messages"


def normalize_phone_number(number: Any) -> str:
    """Strip formatting so the Cloud API gets digits only (country code included)."""
    return "".join(ch for ch in str(number).strip() if ch.isdigit())


def create_whatsapp_template(lead: Dict[str, Any]) -> str:
    name = lead.get("name") or "there"
    service = lead.get("service")
    lines = [f"Hello {name}! Thank you for reaching out to {COMPANY_NAME}."]
    if service:
        lines.append(f"We received your request about {service}.")
    else:
        lines.append("We received your message.")
    lines.append("Our team will contact you shortly with more details.")
    return "\n".join(lines)


async def send_message(recipient: str, text: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> dict:
    """
    Send a text message to a WhatsApp user (single attempt).

    Args:
        recipient: Phone number in international format
        text: Message body (truncated to 4096 chars)

    Returns:
        API response JSON

    Raises:
        RuntimeError: If WhatsApp credentials are not configured
        httpx.HTTPError: On network or HTTP failure
    """
    if not WHATSAPP_ACCESS_TOKEN or not WHATSAPP_PHONE_NUMBER_ID:
        raise RuntimeError("WhatsApp is not configured (WHATSAPP_ACCESS_TOKEN/WHATSAPP_PHONE_NUMBER_ID)")

    to = normalize_phone_number(recipient)
    headers = {
        "Authorization": f"Bearer {WHATSAPP_ACCESS_TOKEN}",
        "Content-Type": "application/json",
    }
    payload = {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "text",
        "text": {"body": text[:4096]},  # Cloud API text limit
    }

    async with httpx.AsyncClient(timeout=15.0, transport=transport) as client:
        response = await client.post(_messages_url(), json=payload, headers=headers)
        response.raise_for_status()
    logger.info("[WHATSAPP] Message sent to %s", to[-6:])
    return response.json()
