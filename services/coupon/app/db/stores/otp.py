import json
from datetime import datetime
from typing import Callable

from redis.asyncio import Redis

from libs.common import Clock, ensure_utc, now_utc
from services.coupon.app.core.OtpSessionStore import OtpSession, OtpSessionStorePort


class RedisOtpSessionStore(OtpSessionStorePort):
    """
    OTP sessions shared between service instances. Keys outlive the session
    expiry by a grace period so verification can still report expiry; Redis
    drops them afterwards, so sweeping is a no-op.
    """

    KEY_PREFIX = "coupon:otp:"
    EXPIRY_GRACE_MS = 60_000

    def __init__(
        self,
        redis_factory: Callable[[], Redis],
        clock: Clock = now_utc,
    ):
        self._redis_factory = redis_factory
        self._redis: Redis | None = None
        self._clock = clock

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = self._redis_factory()
        return self._redis

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def get(self, session_id: str) -> OtpSession | None:
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        data = json.loads(raw)
        return OtpSession(
            session_id=data["session_id"],
            code=data["code"],
            phone=data["phone"],
            invoice_number=data["invoice_number"],
            expires_at=ensure_utc(datetime.fromisoformat(data["expires_at"])),
        )

    async def put(self, session: OtpSession) -> None:
        payload = json.dumps(
            {
                "session_id": session.session_id,
                "code": session.code,
                "phone": session.phone,
                "invoice_number": session.invoice_number,
                "expires_at": session.expires_at.isoformat(),
            }
        )
        ttl_ms = int((session.expires_at - self._clock()).total_seconds() * 1000)
        await self.redis.set(
            self._key(session.session_id),
            payload,
            px=max(ttl_ms, 0) + self.EXPIRY_GRACE_MS,
        )

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))

    async def sweep(self, now: datetime) -> int:
        return 0
