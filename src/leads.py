"""
Lead intake: validates lead submissions, persists them to the leads JSON file
and triggers the notification fan-out.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.config import LEADS_FILE_PATH
from src.models import REQUIRED_LEAD_FIELDS
from src.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


class LeadValidationError(ValueError):
    """Raised when a lead submission is rejected; the message is shown to the caller."""


class LeadStorageError(RuntimeError):
    """Raised when the leads file cannot be read or written."""


class LeadFileFormatError(LeadStorageError):
    """Raised when the leads file parses but does not hold a JSON array."""


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LeadStore:
    """
    Whole-file JSON snapshot of all leads, in insertion order.
    Every append re-reads and rewrites the file; concurrent writers can lose updates.
    """

    def __init__(self, path: str = LEADS_FILE_PATH):
        self.path = Path(path)

    def load(self) -> List[Dict[str, Any]]:
        """
        Read all leads.

        Raises:
            LeadStorageError: If the file is missing, unreadable or not a JSON array
        """
        try:
            leads = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise LeadStorageError(f"Failed to read leads from {self.path}: {e}") from e
        if not isinstance(leads, list):
            raise LeadFileFormatError(f"Leads file {self.path} does not contain a JSON array")
        return leads

    def append(self, lead: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append a timestamped copy of the lead and return it.
        A missing or unparseable file starts a new collection; any other content is left untouched.

        Raises:
            LeadStorageError: If the file holds something other than a JSON array, or cannot be written
        """
        try:
            leads = self.load()
        except LeadFileFormatError:
            raise
        except LeadStorageError as e:
            logger.info("[LEAD] Starting new leads file (%s)", e)
            leads = []

        stamped = {**lead, "timestamp": utc_timestamp()}
        leads.append(stamped)

        try:
            self.path.write_text(json.dumps(leads, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise LeadStorageError(f"Failed to write leads to {self.path}: {e}") from e
        return stamped


class LeadIntake:
    def __init__(
        self,
        store: Optional[LeadStore] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.store = store or LeadStore()
        self.dispatcher = dispatcher or NotificationDispatcher()

    @staticmethod
    def validate_strict(lead_data: Any) -> Dict[str, Any]:
        if not isinstance(lead_data, dict):
            raise LeadValidationError("No data provided")
        missing = [field for field in REQUIRED_LEAD_FIELDS if not lead_data.get(field)]
        if missing:
            raise LeadValidationError(f"Missing required fields: {', '.join(missing)}")
        return lead_data

    @staticmethod
    def validate_lenient(lead_data: Any) -> Dict[str, Any]:
        if not isinstance(lead_data, dict) or not lead_data:
            raise LeadValidationError("Invalid lead data")
        return lead_data

    async def submit_strict(self, lead_data: Any) -> bool:
        """Save a lead that carries all required contact fields."""
        return await self.submit(self.validate_strict(lead_data))

    async def submit_lenient(self, lead_data: Any) -> bool:
        """Save any non-empty lead record."""
        return await self.submit(self.validate_lenient(lead_data))

    async def submit(self, lead_data: Dict[str, Any]) -> bool:
        """
        Persist the lead, then notify. Notification failures never affect the result.

        Returns:
            True if the lead was persisted, False otherwise
        """
        logger.info("[LEAD] Saving lead name=%s service=%s", lead_data.get("name"), lead_data.get("service"))
        try:
            stamped = await asyncio.to_thread(self.store.append, lead_data)
        except LeadStorageError as e:
            logger.error("[LEAD] %s", e)
            return False

        try:
            delivered = await self.dispatcher.notify(stamped)
            logger.info("[LEAD] Notifications delivered: %s", delivered)
        except Exception as e:
            logger.error("[LEAD] Notification fan-out failed: %s", e, exc_info=True)

        return True

    async def list_leads(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.store.load)


# Global instance
_intake: Optional[LeadIntake] = None


def get_lead_intake() -> LeadIntake:
    global _intake
    if _intake is None:
        _intake = LeadIntake()
    return _intake
