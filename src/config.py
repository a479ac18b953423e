import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Validate required environment variables
def _validate_env_vars():
    """Validate that required environment variables are set."""
    required_vars = ["CLAUDE_API_KEY"]
    missing_vars = [var for var in required_vars if not os.getenv(var)]

    if missing_vars:
        logger.error("Missing required environment variables: %s", ", ".join(missing_vars))
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing_vars)}")

    # Warn if optional but important vars are not set
    if not os.getenv("EMAIL_USER") or not os.getenv("EMAIL_APP_PASSWORD"):
        logger.warning("EMAIL_USER/EMAIL_APP_PASSWORD not set - confirmation emails will not be sent")
    if not os.getenv("WHATSAPP_ACCESS_TOKEN"):
        logger.warning("WHATSAPP_ACCESS_TOKEN not set - WhatsApp messages will not be sent")

    logger.info("Environment variables validated successfully")


# Language-model backend
CLAUDE_API_KEY = (os.getenv("CLAUDE_API_KEY") or "").strip()
ANTHROPIC_API_URL = os.getenv("ANTHROPIC_API_URL", "https://api.anthropic.com/v1/messages")
ANTHROPIC_VERSION = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
CHAT_MODEL = os.getenv("CHAT_MODEL", "claude-3-5-sonnet-20241022")
CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "1024"))
BACKEND_TIMEOUT_SECONDS = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "60"))

# Assistant persona
ASSISTANT_NAME = os.getenv("ASSISTANT_NAME", "Amanda")
COMPANY_NAME = os.getenv("COMPANY_NAME", "3alaFekra")
FOUNDER_NAME = os.getenv("FOUNDER_NAME", "Saef")
FOUNDER_PHONE = os.getenv("FOUNDER_PHONE", "01000494040")

# Off-topic moderation
OFF_TOPIC_THRESHOLD = int(os.getenv("OFF_TOPIC_THRESHOLD", "3"))
BLOCK_DURATION_SECONDS = int(os.getenv("BLOCK_DURATION_SECONDS", "3600"))

# Storage
WEBSITE_CONTEXT_PATH = os.getenv("WEBSITE_CONTEXT_PATH", "website_context.json")
LEADS_FILE_PATH = os.getenv("LEADS_FILE_PATH", "leads.json")

# Email (SMTP)
EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_USER = (os.getenv("EMAIL_USER") or "").strip()
EMAIL_APP_PASSWORD = (os.getenv("EMAIL_APP_PASSWORD") or "").strip()
EMAIL_FROM = os.getenv("EMAIL_FROM", "") or EMAIL_USER

# WhatsApp Cloud API
WHATSAPP_ACCESS_TOKEN = (os.getenv("WHATSAPP_ACCESS_TOKEN") or "").strip()
WHATSAPP_PHONE_NUMBER_ID = (os.getenv("WHATSAPP_PHONE_NUMBER_ID") or "").strip()
WHATSAPP_API_VERSION = os.getenv("WHATSAPP_API_VERSION", "v21.0")
WHATSAPP_VERIFY_TOKEN = (os.getenv("WHATSAPP_VERIFY_TOKEN") or "amanda3alafekra").strip()

# Infra
CORS_ALLOW_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()
]

# Validate on import
try:
    _validate_env_vars()
except RuntimeError as e:
    logger.error("Configuration error: %s", e)
    raise
