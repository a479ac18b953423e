"""
FastAPI router for the website chat widget.

POST /v1/messages        –  Moderated chat turn forwarded to the language model
GET  /assistant-profile  –  Persona shown by the widget (also served at /amanda-profile)
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.api.chat_gateway import ChatGateway, ChatGatewayError, get_chat_gateway
from src.models import AssistantProfile, ChatRequest
from src.policy import (
    BLOCKED_MESSAGE,
    BLOCKED_NAVIGATE_TO,
    NEWLY_BLOCKED_MESSAGE,
    ConversationPolicyEngine,
    OutcomeKind,
    get_policy_engine,
)
from src.prompts import build_default_profile
from src.site_knowledge import get_site_knowledge

logger = logging.getLogger(__name__)
router = APIRouter()

_profile = build_default_profile()


def get_assistant_profile() -> AssistantProfile:
    return _profile


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def block_body(text: str) -> Dict[str, Any]:
    return {
        "block_chat": True,
        "content": [{"text": text}],
        "navigate_to": BLOCKED_NAVIGATE_TO,
    }


@router.get("/assistant-profile")
@router.get("/amanda-profile")
async def assistant_profile(profile: AssistantProfile = Depends(get_assistant_profile)):
    return profile.model_dump(by_alias=True)


@router.post("/v1/messages")
async def create_message(
    request: Request,
    engine: ConversationPolicyEngine = Depends(get_policy_engine),
    gateway: ChatGateway = Depends(get_chat_gateway),
    profile: AssistantProfile = Depends(get_assistant_profile),
    site_knowledge: Dict[str, Any] = Depends(get_site_knowledge),
):
    client_id = client_identity(request)
    short_id = client_id[-6:]

    try:
        body = await request.json()
        chat_request = ChatRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.info("[%s] Invalid chat payload: %s", short_id, e)
        return JSONResponse(status_code=400, content={"error": "Invalid chat payload"})

    outcome = engine.evaluate(client_id, chat_request.latest_text)

    if outcome.kind == OutcomeKind.BLOCKED:
        content = {"error": "Chat access is blocked", **block_body(BLOCKED_MESSAGE)}
        return JSONResponse(status_code=403, content=content)

    if outcome.kind == OutcomeKind.NEWLY_BLOCKED:
        return JSONResponse(status_code=200, content=block_body(NEWLY_BLOCKED_MESSAGE))

    try:
        data = await gateway.send(
            profile,
            site_knowledge,
            outcome,
            chat_request.messages,
            extra=chat_request.passthrough_fields(),
        )
    except ChatGatewayError as e:
        logger.error("[%s] Error in /v1/messages: %s", short_id, e)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    return JSONResponse(content=data)
