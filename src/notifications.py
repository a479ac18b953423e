"""
Best-effort notification fan-out for new leads.

Email and WhatsApp run concurrently and fail independently: an error in one
is logged and never reaches the caller or the other channel.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from src.api import email_sender, whatsapp

logger = logging.getLogger(__name__)

EmailSender = Callable[[str, str, str], Awaitable[Any]]
WhatsAppSender = Callable[[str, str], Awaitable[Any]]


class NotificationDispatcher:
    def __init__(
        self,
        send_email: Optional[EmailSender] = None,
        send_whatsapp: Optional[WhatsAppSender] = None,
    ):
        self._send_email = send_email or email_sender.send_email
        self._send_whatsapp = send_whatsapp or whatsapp.send_message

    async def notify(self, lead: Dict[str, Any]) -> Dict[str, bool]:
        """
        Send the lead confirmation on every available channel.

        Returns:
            Per-channel delivery flags, e.g. {"email": True, "whatsapp": False}
        """
        email_sent, whatsapp_sent = await asyncio.gather(
            self._notify_email(lead),
            self._notify_whatsapp(lead),
        )
        return {"email": email_sent, "whatsapp": whatsapp_sent}

    async def _notify_email(self, lead: Dict[str, Any]) -> bool:
        to = str(lead.get("email") or "").strip()
        if not to:
            logger.info("[EMAIL] Lead has no email address, skipping confirmation")
            return False
        try:
            await self._send_email(
                to,
                email_sender.build_email_subject(lead),
                email_sender.create_estimate_email_template(lead),
            )
            return True
        except Exception as exc:
            logger.error("[EMAIL] Failed to send confirmation to %s: %s", to, exc, exc_info=True)
            return False

    async def _notify_whatsapp(self, lead: Dict[str, Any]) -> bool:
        number = str(lead.get("mobileNumber") or "").strip()
        if not number:
            return False
        try:
            await self._send_whatsapp(number, whatsapp.create_whatsapp_template(lead))
            return True
        except Exception as exc:
            logger.error("[WHATSAPP] Failed to message %s: %s", number[-6:], exc, exc_info=True)
            return False
