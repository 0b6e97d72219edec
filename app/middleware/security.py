"""Security middleware: HTTP headers, rate limiting, body size enforcement.

All three are implemented as pure ASGI middleware (no BaseHTTPMiddleware)
so they are compatible with streaming responses.
"""

import base64
import json
import time

import structlog
import redis.asyncio as aioredis
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger()

# ── 1. Security Headers ───────────────────────────────────────────────────────


class SecurityHeadersMiddleware:
    """Append security headers to every HTTP response."""

    _STATIC_HEADERS = [
        ("x-content-type-options", "nosniff"),
        ("x-frame-options", "DENY"),
        ("x-xss-protection", "0"),
        ("referrer-policy", "strict-origin-when-cross-origin"),
        ("cross-origin-opener-policy", "same-origin"),
    ]
    _HSTS_HEADER = ("strict-transport-security", "max-age=63072000; includeSubDomains")

    def __init__(self, app: ASGIApp, is_production: bool = False) -> None:
        self.app = app
        self._headers = list(self._STATIC_HEADERS)
        if is_production:
            self._headers.append(self._HSTS_HEADER)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def _send(message: dict) -> None:
            if message["type"] == "http.response.start":
                raw = MutableHeaders(scope=message)
                for name, value in self._headers:
                    raw.append(name, value)
            await send(message)

        await self.app(scope, receive, _send)


# ── 2. Request Body Size Limiter ──────────────────────────────────────────────


class RequestBodySizeLimitMiddleware:
    """Reject requests whose Content-Length exceeds max_bytes before they hit handlers."""

    def __init__(self, app: ASGIApp, max_bytes: int = 16_384) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        raw_cl = headers.get(b"content-length")
        if raw_cl:
            try:
                too_large = int(raw_cl) > self.max_bytes
            except ValueError:
                too_large = False  # Malformed header — let downstream handle it
            if too_large:
                body = json.dumps(
                    {"detail": f"Request body too large. Maximum {self.max_bytes} bytes."}
                ).encode()
                await send(
                    {
                        "type": "http.response.start",
                        "status": 413,
                        "headers": [
                            (b"content-type", b"application/json"),
                            (b"content-length", str(len(body)).encode()),
                        ],
                    }
                )
                await send({"type": "http.response.body", "body": body, "more_body": False})
                return

        await self.app(scope, receive, send)


# ── 3. Redis Sliding-Window Rate Limiter ──────────────────────────────────────


# (path_prefix, requests_allowed, window_seconds)
# More specific prefixes must come before generic ones.
_RATE_RULES: list[tuple[str, int, int]] = [
    ("/auth/", 20, 60),          # Login / register: 20/min per IP (brute-force protection)
]
_DEFAULT_RATE: tuple[int, int] = (100, 900)  # 100 requests per 15 min per IP

# Per-user ceiling for authenticated requests, on top of the IP limit.
_USER_RATE: tuple[int, int] = (300, 900)

_SKIP_PATHS: frozenset[str] = frozenset(
    ["/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"]
)


class RateLimitMiddleware:
    """IP-based + user-based sliding-window rate limiter backed by Redis.

    The user id is taken by peeking at the access token payload (no
    verification — auth happens in the route dependency).

    Fails *open* if Redis is unavailable. Rate-limit headers are added to all
    passing responses.
    """

    def __init__(self, app: ASGIApp, redis_url: str, enabled: bool = True) -> None:
        self.app = app
        self.enabled = enabled
        self._redis_url = redis_url
        self._redis: aioredis.Redis | None = None

    def _client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=0.5,
                socket_timeout=0.5,
            )
        return self._redis

    @staticmethod
    def _extract_user_id(headers: dict[bytes, bytes]) -> str | None:
        """Peek at the bearer token (or accessToken cookie) for its subject claim.

        Returns None if no token is present or it is malformed.
        """
        try:
            auth = headers.get(b"authorization", b"").decode()
            if auth.startswith("Bearer "):
                token = auth[7:]
            else:
                cookies = headers.get(b"cookie", b"").decode()
                token = next(
                    (
                        part.split("=", 1)[1]
                        for part in cookies.split("; ")
                        if part.startswith("accessToken=")
                    ),
                    "",
                )
            if not token:
                return None
            payload_b64 = token.split(".")[1]
            payload_b64 += "=" * (-len(payload_b64) % 4)
            claims = json.loads(base64.urlsafe_b64decode(payload_b64))
            return claims.get("sub")
        except Exception:  # noqa: BLE001
            return None

    @staticmethod
    async def _sliding_window(
        redis: aioredis.Redis,
        key: str,
        limit: int,
        window: int,
    ) -> tuple[bool, int]:
        """Execute sliding-window counter. Returns (allowed, remaining)."""
        now = time.time()
        pipe = redis.pipeline()
        pipe.zadd(key, {str(now): now})
        pipe.zremrangebyscore(key, 0, now - window)
        pipe.zcard(key)
        pipe.expire(key, window + 1)
        results = await pipe.execute()
        count: int = results[2]
        return count <= limit, max(0, limit - count)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.enabled:
            await self.app(scope, receive, send)
            return

        path: str = scope.get("path", "")
        if path in _SKIP_PATHS:
            await self.app(scope, receive, send)
            return

        raw_headers: dict[bytes, bytes] = {k: v for k, v in scope.get("headers", [])}

        xff = raw_headers.get(b"x-forwarded-for", b"").decode()
        ip = xff.split(",")[0].strip() if xff else (scope.get("client") or ["unknown"])[0]

        # Strip /v1 prefix for consistent rule matching
        effective_path = path[3:] if path.startswith("/v1") else path

        # ── IP-level check ─────────────────────────────────────────────────────
        ip_limit, ip_window = _DEFAULT_RATE
        for prefix, r_lim, r_win in _RATE_RULES:
            if effective_path.startswith(prefix):
                ip_limit, ip_window = r_lim, r_win
                break

        segment = effective_path.strip("/").split("/")[0] or "root"
        ip_allowed = True
        ip_remaining = ip_limit
        try:
            ip_allowed, ip_remaining = await self._sliding_window(
                self._client(), f"rl:ip:{ip}:{segment}", ip_limit, ip_window
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("rate_limit.ip_redis_error", error=str(exc))

        if not ip_allowed:
            return await self._send_429(send, ip_limit, ip_window, reason="ip_limit_exceeded")

        # ── User-level check (requests carrying a token only) ──────────────────
        user_id = self._extract_user_id(raw_headers)
        if user_id:
            user_limit, user_window = _USER_RATE
            try:
                user_allowed, _ = await self._sliding_window(
                    self._client(), f"rl:user:{user_id}", user_limit, user_window
                )
                if not user_allowed:
                    return await self._send_429(
                        send, user_limit, user_window, reason="user_limit_exceeded"
                    )
            except Exception as exc:  # noqa: BLE001
                logger.warning("rate_limit.user_redis_error", error=str(exc))

        async def _send_with_rl_headers(message: dict) -> None:
            if message["type"] == "http.response.start":
                h = MutableHeaders(scope=message)
                h.append("x-ratelimit-limit", str(ip_limit))
                h.append("x-ratelimit-remaining", str(ip_remaining))
                h.append("x-ratelimit-window", str(ip_window))
            await send(message)

        await self.app(scope, receive, _send_with_rl_headers)

    @staticmethod
    async def _send_429(
        send: Send,
        limit: int,
        window: int,
        reason: str = "rate_limit_exceeded",
    ) -> None:
        body = json.dumps(
            {"detail": "Too many requests from this IP, please try again later.", "reason": reason}
        ).encode()
        headers: list[tuple[bytes, bytes]] = [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
            (b"retry-after", str(window).encode()),
            (b"x-ratelimit-limit", str(limit).encode()),
            (b"x-ratelimit-remaining", b"0"),
            (b"x-ratelimit-window", str(window).encode()),
        ]
        await send({"type": "http.response.start", "status": 429, "headers": headers})
        await send({"type": "http.response.body", "body": body, "more_body": False})
