"""Request signing and per-caller rate limiting for the HTTP boundary."""

import hashlib
import hmac
import json
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def stable_stringify(body: Any) -> str:
    """
    Serialize a JSON body with recursively sorted keys and no whitespace.

    Signer and verifier must produce byte-identical text for the same body.
    """
    return json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_signature(secret: str, timestamp: str, body: Any) -> str:
    """Hex HMAC-SHA256 over ``timestamp + "." + stable_stringify(body)``."""
    message = f"{timestamp}.{stable_stringify(body)}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(
    secret: str,
    body: Any,
    timestamp: Optional[str],
    signature: Optional[str],
    max_skew_seconds: float = 300,
    clock: Clock = time.time,
) -> bool:
    """
    Check a request signature.

    ``timestamp`` is epoch milliseconds as sent by the client. Signatures
    outside the skew window in either direction are rejected.
    """
    if not timestamp or not signature:
        return False

    try:
        sent_ms = float(timestamp)
    except ValueError:
        return False
    if not math.isfinite(sent_ms):
        return False
    if abs(clock() * 1000 - sent_ms) > max_skew_seconds * 1000:
        return False

    expected = compute_signature(secret, timestamp, body)
    return hmac.compare_digest(expected, signature.lower())


@dataclass
class Bucket:
    tokens: float
    updated_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: Optional[int] = None  # seconds


class InMemoryBucketStore:
    """Process-local bucket storage guarded by a fixed set of striped locks."""

    def __init__(self, stripes: int = 64):
        self._buckets: dict[str, Bucket] = {}
        self._locks = [threading.Lock() for _ in range(stripes)]

    def __len__(self) -> int:
        return len(self._buckets)

    def lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def keys(self) -> list[str]:
        return list(self._buckets)

    def get(self, key: str) -> Optional[Bucket]:
        return self._buckets.get(key)

    def put(self, key: str, bucket: Bucket) -> None:
        self._buckets[key] = bucket

    def discard(self, key: str) -> None:
        self._buckets.pop(key, None)


class TokenBucketLimiter:
    """
    Token bucket refilled linearly over a fixed window.

    A full bucket holds ``capacity`` tokens and refills at
    ``capacity / window_seconds`` tokens per second. The read-modify-write of
    each bucket happens under that key's lock. Buckets idle for a whole
    window are full again, so they are swept from the store at most once
    per window.
    """

    def __init__(
        self,
        capacity: int,
        window_seconds: float = 60.0,
        clock: Clock = time.monotonic,
        store: Optional[InMemoryBucketStore] = None,
    ):
        self.capacity = capacity
        self.window_seconds = window_seconds
        self.clock = clock
        self.store = store or InMemoryBucketStore()
        self._sweep_lock = threading.Lock()
        self._last_sweep: Optional[float] = None

    def acquire(self, key: str) -> RateLimitDecision:
        with self.store.lock_for(key):
            now = self.clock()
            decision = self._take(key, now)

        self._maybe_sweep(now)
        return decision

    def _take(self, key: str, now: float) -> RateLimitDecision:
        bucket = self.store.get(key) or Bucket(tokens=float(self.capacity), updated_at=now)

        elapsed = max(0.0, now - bucket.updated_at)
        refill = elapsed * self.capacity / self.window_seconds
        bucket = Bucket(tokens=min(float(self.capacity), bucket.tokens + refill), updated_at=now)

        if bucket.tokens >= 1:
            bucket.tokens -= 1
            self.store.put(key, bucket)
            return RateLimitDecision(allowed=True)

        self.store.put(key, bucket)
        retry_after = math.ceil((1 - bucket.tokens) * self.window_seconds / self.capacity)
        return RateLimitDecision(allowed=False, retry_after=max(1, retry_after))

    def _maybe_sweep(self, now: float) -> None:
        with self._sweep_lock:
            if self._last_sweep is None:
                self._last_sweep = now
                return
            if now - self._last_sweep < self.window_seconds:
                return
            self._last_sweep = now
        self.evict_idle(now)

    def evict_idle(self, now: Optional[float] = None) -> int:
        """Drop buckets untouched for a full window. Returns how many were dropped."""
        now = self.clock() if now is None else now
        evicted = 0
        for key in self.store.keys():
            with self.store.lock_for(key):
                bucket = self.store.get(key)
                if bucket is not None and now - bucket.updated_at >= self.window_seconds:
                    self.store.discard(key)
                    evicted += 1
        if evicted:
            logger.debug(f"Evicted {evicted} idle rate-limit buckets")
        return evicted
