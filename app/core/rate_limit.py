"""
Rate Limiter - fixed window, in memory, keyed by client IP.

Two rules are installed by default:
- general: every /api/ request (GETs skipped in development)
- strict: /api/auth, plus writes to /api/jobs and /api/referrals

Each matching rule counts the request. The first rule over its limit
answers with 429; otherwise the last matching rule's RateLimit-* headers
are added to the response.

Counters live in the process, so each serverless instance limits on its own.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import Settings

WRITE_METHODS = frozenset({"POST", "PUT", "DELETE"})
STRICT_WINDOW_SECONDS = 15 * 60
_PRUNE_THRESHOLD = 10_000


class FixedWindowCounter:
    """Counts hits per key inside windows of window_seconds."""

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        # key -> (window_start, count)
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> Tuple[int, float]:
        """Record one hit. Returns (count in current window, seconds until reset)."""
        now = self._clock()
        if len(self._windows) > _PRUNE_THRESHOLD:
            self._prune(now)

        start, count = self._windows.get(key, (now, 0))
        if now - start >= self.window_seconds:
            start, count = now, 0
        count += 1
        self._windows[key] = (start, count)
        return count, max(0.0, start + self.window_seconds - now)

    def reset(self) -> None:
        self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in expired:
            del self._windows[key]


@dataclass
class RateLimitRule:
    name: str
    prefixes: Tuple[str, ...]
    max_requests: int
    window_seconds: float
    message: str
    retry_after_minutes: int
    methods: Optional[FrozenSet[str]] = None  # None means every method
    skip_methods: FrozenSet[str] = frozenset()
    counter: FixedWindowCounter = field(init=False)

    def __post_init__(self):
        self.counter = FixedWindowCounter(self.window_seconds)

    def matches(self, method: str, path: str) -> bool:
        if method in self.skip_methods:
            return False
        if self.methods is not None and method not in self.methods:
            return False
        for prefix in self.prefixes:
            base = prefix.rstrip("/")
            if path == base or path.startswith(base + "/"):
                return True
        return False


def build_rate_limit_rules(settings: Settings) -> List[RateLimitRule]:
    """General and strict rules for the configured environment."""
    general = RateLimitRule(
        name="general",
        prefixes=("/api/",),
        max_requests=settings.rate_limit_max,
        window_seconds=settings.rate_limit_window_seconds,
        message="Too many requests from this IP, please try again later.",
        retry_after_minutes=settings.rate_limit_retry_after_minutes,
        skip_methods=frozenset({"GET"}) if settings.is_development else frozenset(),
    )
    strict_auth = RateLimitRule(
        name="strict",
        prefixes=("/api/auth",),
        max_requests=settings.strict_rate_limit_max,
        window_seconds=STRICT_WINDOW_SECONDS,
        message="Too many sensitive operations from this IP, please try again later.",
        retry_after_minutes=15,
    )
    strict_writes = RateLimitRule(
        name="strict-writes",
        prefixes=("/api/jobs", "/api/referrals"),
        max_requests=settings.strict_rate_limit_max,
        window_seconds=STRICT_WINDOW_SECONDS,
        message="Too many sensitive operations from this IP, please try again later.",
        retry_after_minutes=15,
        methods=WRITE_METHODS,
    )
    # writes to jobs/referrals share the strict budget with auth
    strict_writes.counter = strict_auth.counter
    return [general, strict_auth, strict_writes]


def _client_key(scope: Scope) -> str:
    client = scope.get("client")
    return client[0] if client else "unknown"


def _limit_headers(rule: RateLimitRule, count: int, reset_in: float) -> List[Tuple[bytes, bytes]]:
    remaining = max(0, rule.max_requests - count)
    return [
        (b"ratelimit-limit", str(rule.max_requests).encode()),
        (b"ratelimit-remaining", str(remaining).encode()),
        (b"ratelimit-reset", str(math.ceil(reset_in)).encode()),
    ]


class RateLimitMiddleware:
    """ASGI middleware applying RateLimitRules in order."""

    def __init__(self, app: ASGIApp, rules: List[RateLimitRule]):
        self.app = app
        self.rules = rules

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope["method"].upper()
        path = scope["path"]
        key = _client_key(scope)
        headers: List[Tuple[bytes, bytes]] = []

        for rule in self.rules:
            if not rule.matches(method, path):
                continue
            count, reset_in = rule.counter.hit(key)
            headers = _limit_headers(rule, count, reset_in)
            if count > rule.max_requests:
                response = JSONResponse(
                    status_code=429,
                    content={
                        "success": False,
                        "message": rule.message,
                        "retryAfter": rule.retry_after_minutes,
                    },
                )
                response.raw_headers.extend(headers)
                response.raw_headers.append((b"retry-after", str(math.ceil(reset_in)).encode()))
                await response(scope, receive, send)
                return

        if not headers:
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + headers
            await send(message)

        await self.app(scope, receive, send_with_headers)
