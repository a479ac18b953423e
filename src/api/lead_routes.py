"""
FastAPI router for lead capture and chat unblocking.

POST /api/v1/leads    –  Strict lead form (all contact fields required)
POST /v1/leads        –  Lenient lead capture from the chat assistant
GET  /api/v1/leads    –  All stored leads
POST /api/v1/unblock  –  Lift the off-topic block for the calling address
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.chat import client_identity
from src.leads import LeadIntake, LeadStorageError, LeadValidationError, get_lead_intake
from src.policy import ConversationPolicyEngine, get_policy_engine

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_body(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


def _save_result(success: bool) -> JSONResponse:
    if success:
        return JSONResponse(content={"success": True, "message": "Lead saved successfully"})
    return JSONResponse(status_code=500, content={"error": "Failed to save lead"})


@router.post("/api/v1/leads")
async def create_lead(request: Request, intake: LeadIntake = Depends(get_lead_intake)):
    lead_data = await _read_body(request)
    logger.info("[LEAD] Received lead form submission")
    try:
        success = await intake.submit_strict(lead_data)
    except LeadValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return _save_result(success)


@router.post("/v1/leads")
async def capture_lead(request: Request, intake: LeadIntake = Depends(get_lead_intake)):
    lead_data = await _read_body(request)
    logger.info("[LEAD] Received lead from assistant")
    try:
        success = await intake.submit_lenient(lead_data)
    except LeadValidationError as e:
        logger.info("[LEAD] Invalid lead data received")
        return JSONResponse(status_code=400, content={"error": str(e)})
    return _save_result(success)


@router.get("/api/v1/leads")
async def list_leads(intake: LeadIntake = Depends(get_lead_intake)):
    try:
        leads = await intake.list_leads()
    except LeadStorageError as e:
        logger.error("[LEAD] Error reading leads: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to retrieve leads"})
    logger.info("[LEAD] Found %d leads", len(leads))
    return leads


@router.post("/api/v1/unblock")
async def unblock_chat(request: Request, engine: ConversationPolicyEngine = Depends(get_policy_engine)):
    if engine.unblock(client_identity(request)):
        message = "Chat has been unblocked successfully."
    else:
        message = "Chat was not blocked."
    return {"success": True, "message": message}
