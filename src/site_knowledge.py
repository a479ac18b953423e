import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from src.config import WEBSITE_CONTEXT_PATH

logger = logging.getLogger(__name__)

_site_knowledge: Optional[Dict[str, Any]] = None


def load_site_knowledge(path: str = WEBSITE_CONTEXT_PATH) -> Dict[str, Any]:
    """
    Load website information injected into the system prompt.
    Returns an empty mapping when the file is missing or invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Error loading website context from %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.error("Website context in %s is not a JSON object, ignoring", path)
        return {}

    logger.info("Website context loaded successfully (%d keys)", len(data))
    return data


def get_site_knowledge() -> Dict[str, Any]:
    global _site_knowledge
    if _site_knowledge is None:
        _site_knowledge = load_site_knowledge()
    return _site_knowledge
