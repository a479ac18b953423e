"""
Throttle ledger: per-client off-topic counters and temporary blocks.
State lives in process memory only; expired blocks are cleared lazily on the next check.
"""
import logging
import time
from typing import Callable, Dict, Optional

from src.config import BLOCK_DURATION_SECONDS

logger = logging.getLogger(__name__)


class ThrottleLedger:
    """Tracks consecutive off-topic turns and block timestamps per client address."""

    def __init__(
        self,
        block_duration: float = BLOCK_DURATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            block_duration: Seconds a block stays active
            clock: Returns the current time in seconds
        """
        self.block_duration = block_duration
        self._clock = clock
        self._off_topic_counters: Dict[str, int] = {}
        self._blocked_at: Dict[str, float] = {}

    def is_blocked(self, client_id: str) -> bool:
        """
        Check if a client is currently blocked.
        A block older than the block duration is removed together with the client's counter.

        Args:
            client_id: Client network address

        Returns:
            True if the client is blocked, False otherwise
        """
        blocked_at = self._blocked_at.get(client_id)
        if blocked_at is None:
            return False

        if self._clock() - blocked_at > self.block_duration:
            del self._blocked_at[client_id]
            self._off_topic_counters.pop(client_id, None)
            logger.info("[BLOCK] Block expired for %s", client_id[-6:])
            return False

        return True

    def record_turn(self, client_id: str, was_off_topic: bool) -> int:
        """
        Record one conversational turn.

        Args:
            client_id: Client network address
            was_off_topic: Whether the turn was classified off-topic

        Returns:
            Consecutive off-topic count after this turn (0 after an on-topic turn)
        """
        if was_off_topic:
            count = self._off_topic_counters.get(client_id, 0) + 1
        else:
            count = 0
        self._off_topic_counters[client_id] = count
        return count

    def block(self, client_id: str) -> None:
        self._blocked_at[client_id] = self._clock()
        logger.info("[BLOCK] %s blocked for %d sec", client_id[-6:], self.block_duration)

    def unblock(self, client_id: str) -> bool:
        """
        Remove the block and counter for a client. Safe to call for unknown clients.

        Returns:
            True if a block record existed
        """
        was_blocked = self._blocked_at.pop(client_id, None) is not None
        self._off_topic_counters.pop(client_id, None)
        return was_blocked

    def off_topic_count(self, client_id: str) -> int:
        return self._off_topic_counters.get(client_id, 0)

    def get_remaining_block_time(self, client_id: str) -> Optional[float]:
        """
        Get remaining block time in seconds, or None if not blocked.
        Does not expire stale records.
        """
        blocked_at = self._blocked_at.get(client_id)
        if blocked_at is None:
            return None
        remaining = self.block_duration - (self._clock() - blocked_at)
        return remaining if remaining > 0 else None
