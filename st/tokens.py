import base64
import logging
import secrets
import threading
import time
from typing import Dict, Optional

from st.errors import TokenGenerationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token() -> str:
    """Returns 256 random bits, base64 encoded."""
    try:
        raw = secrets.token_bytes(TOKEN_BYTES)
    except (OSError, NotImplementedError) as e:
        raise TokenGenerationError(f"random source unavailable: {e}") from e
    return base64.b64encode(raw).decode("ascii")


class TokenRegistry:
    """Anti-forgery tokens handed out with the add form, each good for one use.

    Tokens live in memory only and are forgotten on restart. By default they
    never expire; pass ``max_age`` (seconds) to drop tokens that were never
    submitted.
    """

    def __init__(self, max_age: Optional[float] = None):
        self.max_age = max_age
        self._issued: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._issued)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._issued

    def issue_token(self) -> str:
        """Generates a fresh token and records it as valid."""
        token = generate_token()
        now = time.monotonic()
        with self._lock:
            if self.max_age is not None:
                self._evict_expired(now)
            self._issued[token] = now
        return token

    def consume_token(self, token: Optional[str]) -> bool:
        """Returns True and forgets ``token`` if it is valid, False otherwise."""
        if not token:
            return False
        with self._lock:
            issued_at = self._issued.pop(token, None)
        if issued_at is None:
            return False
        if self.max_age is not None and time.monotonic() - issued_at > self.max_age:
            logger.info("csrf token expired")
            return False
        return True

    def _evict_expired(self, now: float) -> None:
        # caller holds the lock
        expired = [t for t, issued_at in self._issued.items() if now - issued_at > self.max_age]
        for token in expired:
            del self._issued[token]
        if expired:
            logger.debug("Evicted %d expired csrf tokens", len(expired))
