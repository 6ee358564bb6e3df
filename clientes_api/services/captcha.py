from collections import OrderedDict
from dataclasses import dataclass
import secrets
import threading
import time
from typing import Any, Callable, Optional

from clientes_api.config import settings
from clientes_api.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaptchaChallenge:
    answer: str
    expires_at: float


@dataclass(frozen=True)
class CaptchaQuestion:
    id: str
    question: str


class CaptchaStore:
    """Bounded in-process map of pending challenges.

    ``take`` removes and returns a record atomically, so two concurrent
    verifications of the same id can never both observe it. Expired records
    are swept lazily on every insert, and the oldest entries are evicted once
    ``max_entries`` is reached.
    """

    def __init__(
        self,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CaptchaChallenge]" = OrderedDict()
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def put(self, challenge_id: str, challenge: CaptchaChallenge) -> None:
        with self._lock:
            self._sweep_expired(self._clock())
            while len(self._entries) >= self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.warning("captcha_evicted", captcha_id=evicted)
            self._entries[challenge_id] = challenge

    def take(self, challenge_id: str) -> Optional[CaptchaChallenge]:
        with self._lock:
            return self._entries.pop(challenge_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_expired(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]


class CaptchaService:
    def __init__(self, store: CaptchaStore, ttl_seconds: int) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds

    def create(self) -> CaptchaQuestion:
        first = secrets.randbelow(9) + 1
        second = secrets.randbelow(9) + 1
        challenge_id = secrets.token_hex(16)
        self._store.put(
            challenge_id,
            CaptchaChallenge(
                answer=str(first + second),
                expires_at=self._store.now() + self._ttl_seconds,
            ),
        )
        return CaptchaQuestion(id=challenge_id, question=f"How much is {first} + {second}?")

    def verify(self, challenge_id: Optional[str], answer: Any) -> bool:
        if not challenge_id:
            return False
        challenge = self._store.take(challenge_id)
        if challenge is None or answer is None:
            return False
        if self._store.now() >= challenge.expires_at:
            return False
        return challenge.answer == str(answer).strip()


captcha_store = CaptchaStore(settings.captcha_max_entries)
captcha_service = CaptchaService(captcha_store, settings.captcha_ttl_seconds)
