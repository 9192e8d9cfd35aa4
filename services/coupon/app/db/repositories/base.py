import asyncio
from datetime import datetime
from typing import Callable

from libs.common import ensure_utc
from services.coupon.app.db.session import session_scope


def to_db_datetime(dt: datetime) -> datetime:
    """Naive UTC value for DATETIME columns."""
    return ensure_utc(dt).replace(tzinfo=None)


class SQLRepositoryBase:
    """Base class for SQL repositories"""
    def __init__(self, session_factory: Callable = session_scope):
        self._session_factory = session_factory

    async def _run_in_thread(self, func: Callable):
        """Runs a blocking function off the event loop"""
        return await asyncio.to_thread(func)
