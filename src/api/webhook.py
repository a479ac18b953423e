"""
FastAPI webhook router for the WhatsApp Cloud API.

GET  /api/v1/whatsapp-webhook  –  Meta webhook verification (challenge handshake)
POST /api/v1/whatsapp-webhook  –  Receive WhatsApp messaging events
"""
import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from src.config import WHATSAPP_VERIFY_TOKEN
from src.leads import LeadIntake, get_lead_intake
from src.models import WebhookMessage

logger = logging.getLogger(__name__)
router = APIRouter()


def _extract_message(body: Any) -> Optional[Tuple[str, str]]:
    """
    Pull (sender, text) from the first message of a Cloud API payload:
    entry[0].changes[0].value.messages[0]. Returns None for status updates
    and anything that is not a text message.
    """
    if not isinstance(body, dict):
        return None
    try:
        value = body["entry"][0]["changes"][0]["value"]
        message = value["messages"][0]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(message, dict):
        return None

    sender = message.get("from", "")
    text_field = message.get("text")
    text = text_field.get("body", "") if isinstance(text_field, dict) else ""
    if not sender or not text:
        return None
    return sender, text


# --------------------------------------------------------------------------- #
# GET /api/v1/whatsapp-webhook – Meta verification                             #
# --------------------------------------------------------------------------- #

@router.get("/api/v1/whatsapp-webhook")
async def verify_webhook(
    hub_mode: str = Query(None, alias="hub.mode"),
    hub_challenge: str = Query(None, alias="hub.challenge"),
    hub_verify_token: str = Query(None, alias="hub.verify_token"),
):
    """
    Meta sends a GET request with hub.challenge when you register the webhook.
    We must reply with hub.challenge if the verify_token matches.
    """
    if hub_mode == "subscribe" and hub_verify_token == WHATSAPP_VERIFY_TOKEN:
        logger.info("[WEBHOOK] Verified successfully")
        return PlainTextResponse(hub_challenge or "")

    logger.warning("[WEBHOOK] Verification failed: mode=%s", hub_mode)
    raise HTTPException(status_code=403, detail="Verification token mismatch")


# --------------------------------------------------------------------------- #
# POST /api/v1/whatsapp-webhook – Receive and process messages                 #
# --------------------------------------------------------------------------- #

@router.post("/api/v1/whatsapp-webhook")
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    intake: LeadIntake = Depends(get_lead_intake),
):
    """
    Receives WhatsApp messaging events and always acknowledges with 200,
    whatever happens while processing. The message is handled after the response.
    """
    try:
        body = await request.json()
    except ValueError:
        logger.warning("[WEBHOOK] Ignoring payload that is not JSON")
        return {"success": True}

    logger.debug("[WEBHOOK] Payload: %s", body)
    extracted = _extract_message(body)
    if extracted:
        sender, text = extracted
        logger.info("[RECV] from=%s text=%s", sender[-6:], text[:80])
        background_tasks.add_task(handle_incoming_message, intake, sender, text)

    return {"success": True}


async def handle_incoming_message(intake: LeadIntake, sender: str, text: str) -> bool:
    """
    Record an inbound WhatsApp message as a lead; the intake's notification
    fan-out sends the acknowledgement back to the sender.
    """
    short_id = sender[-6:]
    try:
        message = WebhookMessage(sender_id=sender, text=text)
    except ValidationError as e:
        logger.error("[%s] Invalid message format: %s", short_id, e)
        return False

    try:
        return await intake.submit_lenient(
            {"mobileNumber": message.sender_id, "message": message.text, "source": "whatsapp"}
        )
    except Exception as exc:
        logger.error("[%s] Error handling WhatsApp message: %s", short_id, exc, exc_info=True)
        return False
