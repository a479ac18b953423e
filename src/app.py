import sys
if hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.chat import router as chat_router
from src.api.email_sender import is_email_configured
from src.api.lead_routes import router as leads_router
from src.api.webhook import router as webhook_router
from src.config import CORS_ALLOW_ORIGINS, EMAIL_APP_PASSWORD, EMAIL_HOST, EMAIL_PORT, EMAIL_USER
from src.site_knowledge import get_site_knowledge

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_site_knowledge()
    yield


app = FastAPI(
    title="Website Assistant Gateway",
    description="Chat, lead capture and WhatsApp webhook backend for the website assistant",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("Received request: %s %s", request.method, request.url.path)
    return await call_next(request)


app.include_router(chat_router)
app.include_router(leads_router)
app.include_router(webhook_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/check-email-config")
async def check_email_config():
    return {
        "config": {
            "service": "gmail" if EMAIL_HOST == "smtp.gmail.com" else "smtp",
            "host": EMAIL_HOST,
            "port": EMAIL_PORT,
            "secure": EMAIL_PORT == 465,
            "auth": {"user": EMAIL_USER, "hasPassword": bool(EMAIL_APP_PASSWORD)},
        },
        "envVarsPresent": {
            "EMAIL_USER": bool(EMAIL_USER),
            "EMAIL_APP_PASSWORD": bool(EMAIL_APP_PASSWORD),
        },
        "configured": is_email_configured(),
    }
