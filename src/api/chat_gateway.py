"""
Anthropic Messages API helper.
Forwards the visitor's conversation with the composed system prompt and relays the response body.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from src.config import (
    ANTHROPIC_API_URL,
    ANTHROPIC_VERSION,
    BACKEND_TIMEOUT_SECONDS,
    CHAT_MAX_TOKENS,
    CHAT_MODEL,
    CLAUDE_API_KEY,
)
from src.models import AssistantProfile, ChatTurn
from src.policy import PolicyOutcome
from src.prompts import build_system_prompt

logger = logging.getLogger(__name__)


class ChatGatewayError(RuntimeError):
    """Raised when the language-model backend is unreachable or answers with an error."""


class ChatGateway:
    def __init__(
        self,
        api_key: str = CLAUDE_API_KEY,
        api_url: str = ANTHROPIC_API_URL,
        api_version: str = ANTHROPIC_VERSION,
        model: str = CHAT_MODEL,
        max_tokens: int = CHAT_MAX_TOKENS,
        timeout: float = BACKEND_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.api_version = api_version
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    def build_payload(
        self,
        system_prompt: str,
        history: List[ChatTurn],
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "max_tokens": self.max_tokens}
        payload.update(extra or {})
        payload["system"] = system_prompt
        payload["messages"] = [turn.to_backend() for turn in history]
        return payload

    async def send(
        self,
        persona: AssistantProfile,
        site_knowledge: Dict[str, Any],
        outcome: PolicyOutcome,
        history: List[ChatTurn],
        extra: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send the conversation to the backend in a single attempt.

        Args:
            persona: Assistant profile used for the system prompt
            site_knowledge: Website information injected into the prompt
            outcome: Policy decision for the latest message (warnings augment the prompt)
            history: Conversation turns in original order
            extra: Additional request fields supplied by the caller (model, temperature...)

        Returns:
            Parsed backend response body, unchanged

        Raises:
            ChatGatewayError: On network failure, error status or non-JSON body
        """
        system_prompt = build_system_prompt(persona, site_knowledge, outcome)
        payload = self.build_payload(system_prompt, history, extra)
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }

        logger.info("[CHAT] Forwarding %d turns to backend (outcome=%s)", len(history), outcome.kind.value)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error("[CHAT] Backend timed out after %.0fs: %s", self.timeout, e)
            raise ChatGatewayError("Language model backend timed out") from e
        except httpx.HTTPError as e:
            logger.error("[CHAT] Backend request failed: %s", e)
            raise ChatGatewayError("Language model backend unreachable") from e

        if response.status_code >= 400:
            logger.error("[CHAT] Backend error HTTP %d: %s", response.status_code, response.text[:500])
            raise ChatGatewayError(f"Language model backend returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            logger.error("[CHAT] Backend returned a non-JSON body: %s", response.text[:200])
            raise ChatGatewayError("Language model backend returned an invalid body") from e


# Global instance
_gateway: Optional[ChatGateway] = None


def get_chat_gateway() -> ChatGateway:
    global _gateway
    if _gateway is None:
        _gateway = ChatGateway()
    return _gateway
