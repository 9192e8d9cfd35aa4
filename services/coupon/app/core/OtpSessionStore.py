"""
Transient OTP session storage used by the coupon issuance flow.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Protocol

from libs.common import Clock, now_utc

logger = logging.getLogger(__name__)


@dataclass
class OtpSession:
    session_id: str
    code: str
    phone: str
    invoice_number: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class OtpSessionStorePort(Protocol):
    async def get(self, session_id: str) -> OtpSession | None: ...

    async def put(self, session: OtpSession) -> None: ...

    async def delete(self, session_id: str) -> None: ...

    async def sweep(self, now: datetime) -> int: ...


class InMemoryOtpSessionStore(OtpSessionStorePort):
    """
    Process-local store. Sessions are lost on restart and are not shared
    between server instances.
    """

    def __init__(self):
        self._store: Dict[str, OtpSession] = {}

    async def get(self, session_id: str) -> OtpSession | None:
        # expired sessions stay visible until swept so verification can report them
        return self._store.get(session_id)

    async def put(self, session: OtpSession) -> None:
        self._store[session.session_id] = session

    async def delete(self, session_id: str) -> None:
        self._store.pop(session_id, None)

    async def sweep(self, now: datetime) -> int:
        expired = [sid for sid, session in self._store.items() if session.is_expired(now)]
        for session_id in expired:
            del self._store[session_id]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)


async def run_session_sweeper(
    store: OtpSessionStorePort,
    interval_seconds: float,
    clock: Clock = now_utc,
) -> None:
    """
    Removes expired sessions every interval until cancelled.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await store.sweep(clock())
        except Exception:
            logger.exception("OTP session sweep failed")
            continue
        if removed:
            logger.debug("Swept %d expired OTP sessions", removed)
