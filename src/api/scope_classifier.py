"""
Lexical classifier for deciding whether a chat message is about the website and its services.

Matching is plain case-insensitive substring containment: no tokenization and
no stemming, so "friendly" matches "friend" and "network" matches "work".
"""
import logging

from src.config import COMPANY_NAME

logger = logging.getLogger(__name__)

RELEVANT_KEYWORDS = (
    "website", "services", "web", "development", "seo",
    "company", COMPANY_NAME.lower(), "business", "contact", "price",
    "project", "work", "portfolio", "about", "ai consultant",
    "email", "send", "message", "estimate", "quote",
    "information", "details", "whatsapp",
)

# Exclusions win over any topical keyword.
EXCLUDED_PATTERNS = (
    "kiss", "date", "meet", "relationship", "personal",
    "inappropriate", "private", "chat", "friend",
)


def is_relevant(message: str) -> bool:
    """
    Returns True when the message talks about the website or the business.
    Empty or whitespace-only messages are never relevant.
    """
    lowered = (message or "").lower()

    for pattern in EXCLUDED_PATTERNS:
        if pattern in lowered:
            logger.debug("Message excluded by pattern '%s'", pattern)
            return False

    return any(keyword in lowered for keyword in RELEVANT_KEYWORDS)


def is_out_of_scope(message: str) -> bool:
    return not is_relevant(message)
