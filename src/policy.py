"""
Conversation policy: decides for each incoming chat message whether it is
blocked, allowed with an off-topic warning, or allowed as-is.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.api.scope_classifier import is_out_of_scope
from src.config import OFF_TOPIC_THRESHOLD
from src.throttle_ledger import ThrottleLedger

logger = logging.getLogger(__name__)

BLOCKED_NAVIGATE_TO = "/blocked"
BLOCKED_MESSAGE = (
    "Your access is currently blocked due to multiple off-topic messages. Please try again later."
)
NEWLY_BLOCKED_MESSAGE = (
    "I apologize, but we need to stay focused on website-related topics. "
    "This conversation has been blocked due to multiple off-topic messages."
)


class OutcomeKind(str, Enum):
    BLOCKED = "blocked"
    NEWLY_BLOCKED = "newly_blocked"
    WARN = "warn"
    PROCEED = "proceed"


@dataclass(frozen=True)
class PolicyOutcome:
    kind: OutcomeKind
    level: int = 0

    @property
    def reaches_backend(self) -> bool:
        return self.kind in (OutcomeKind.WARN, OutcomeKind.PROCEED)

    @classmethod
    def blocked(cls) -> "PolicyOutcome":
        return cls(OutcomeKind.BLOCKED)

    @classmethod
    def newly_blocked(cls) -> "PolicyOutcome":
        return cls(OutcomeKind.NEWLY_BLOCKED)

    @classmethod
    def warn(cls, level: int) -> "PolicyOutcome":
        return cls(OutcomeKind.WARN, level)

    @classmethod
    def proceed(cls) -> "PolicyOutcome":
        return cls(OutcomeKind.PROCEED)


class ConversationPolicyEngine:
    """
    Combines the relevance classifier with the throttle ledger.

    Off-topic counts 1 and 2 produce warnings, reaching the threshold blocks
    the client. The blocked check runs before classification, so a message
    arriving after a block lapsed is evaluated from a clean counter.
    """

    def __init__(
        self,
        ledger: Optional[ThrottleLedger] = None,
        classify_off_topic: Callable[[str], bool] = is_out_of_scope,
        threshold: int = OFF_TOPIC_THRESHOLD,
    ):
        self.ledger = ledger or ThrottleLedger()
        self._classify_off_topic = classify_off_topic
        self.threshold = threshold
        # Guards the check-then-update sequence when handlers run on worker threads.
        self._lock = threading.Lock()

    def evaluate(self, client_id: str, latest_message: str) -> PolicyOutcome:
        short_id = client_id[-6:]
        with self._lock:
            if self.ledger.is_blocked(client_id):
                remaining = self.ledger.get_remaining_block_time(client_id)
                logger.info(
                    "[BLOCK] Rejected message from blocked client %s (%.0f sec remaining)",
                    short_id,
                    remaining or 0,
                )
                return PolicyOutcome.blocked()

            off_topic = self._classify_off_topic(latest_message)
            count = self.ledger.record_turn(client_id, off_topic)

            if count >= self.threshold:
                self.ledger.block(client_id)
                logger.info("[BLOCK] %s reached %d off-topic messages", short_id, count)
                return PolicyOutcome.newly_blocked()

        if count > 0:
            logger.info("[POLICY] Off-topic message %d/%d from %s", count, self.threshold, short_id)
            return PolicyOutcome.warn(min(count, 2))
        return PolicyOutcome.proceed()

    def unblock(self, client_id: str) -> bool:
        """Clear block and counter for a client. Returns True if it was blocked."""
        with self._lock:
            was_blocked = self.ledger.unblock(client_id)
        if was_blocked:
            logger.info("[UNBLOCK] Chat unblocked for %s", client_id[-6:])
        else:
            logger.info("[UNBLOCK] %s was not blocked", client_id[-6:])
        return was_blocked


# Global instance
_engine: Optional[ConversationPolicyEngine] = None


def get_policy_engine() -> ConversationPolicyEngine:
    """Get or create the process-wide ConversationPolicyEngine."""
    global _engine
    if _engine is None:
        _engine = ConversationPolicyEngine()
    return _engine
