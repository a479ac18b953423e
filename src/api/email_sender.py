"""
SMTP email helper for lead confirmation emails.
"""
import asyncio
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict

from src.config import COMPANY_NAME, EMAIL_APP_PASSWORD, EMAIL_FROM, EMAIL_HOST, EMAIL_PORT, EMAIL_USER

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


def is_email_configured() -> bool:
    return bool(EMAIL_USER and EMAIL_APP_PASSWORD)


def build_email_subject(lead: Dict[str, Any]) -> str:
    return f"{COMPANY_NAME} - {lead.get('service') or 'Service'} Inquiry"


def create_estimate_email_template(lead: Dict[str, Any]) -> str:
    """Render the HTML confirmation sent to a new lead."""

    def field(key: str, default: str = "-") -> str:
        value = lead.get(key)
        return html.escape(str(value)) if value not in (None, "") else default

    name = field("name", "there")
    rows = "".join(
        f"<tr><td style=\"padding:4px 12px 4px 0\"><strong>{label}</strong></td><td>{field(key)}</td></tr>"
        for label, key in (
            ("Company", "companyName"),
            ("Mobile", "mobileNumber"),
            ("Service", "service"),
            ("Details", "message"),
        )
    )
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Thank you for contacting {html.escape(COMPANY_NAME)}, {name}!</h2>
      <p>We have received your request and our team will get back to you with an estimate shortly.</p>
      <table>{rows}</table>
      <p>If you need anything else in the meantime, just reply to this email.</p>
      <p>Best regards,<br>The {html.escape(COMPANY_NAME)} team</p>
    </div>
    """


def _send_email_sync(to: str, subject: str, html_body: str) -> Dict[str, Any]:
    message = MIMEMultipart("alternative")
    message["From"] = EMAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.attach(MIMEText(html_body, "html", "utf-8"))

    with smtplib.SMTP(EMAIL_HOST, EMAIL_PORT, timeout=SMTP_TIMEOUT_SECONDS) as server:
        server.starttls()
        server.login(EMAIL_USER, EMAIL_APP_PASSWORD)
        refused = server.send_message(message)
    return {"to": to, "refused": refused}


async def send_email(to: str, subject: str, html_body: str) -> Dict[str, Any]:
    """
    Send an HTML email through the configured SMTP server (single attempt).

    Raises:
        RuntimeError: If SMTP credentials are not configured
        smtplib.SMTPException / OSError: On delivery failure
    """
    if not is_email_configured():
        raise RuntimeError("Email service is not configured (EMAIL_USER/EMAIL_APP_PASSWORD)")

    result = await asyncio.to_thread(_send_email_sync, to, subject, html_body)
    logger.info("[EMAIL] Sent '%s' to %s", subject, to)
    return result
