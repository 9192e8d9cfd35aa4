"""
Shared library for the coupon platform services.
Provides time, logging and other cross-service helpers.
"""

from libs.common.log import configure_logging, mask_phone
from libs.common.money import format_amount
from libs.common.timezone import UTC_TIMEZONE, Clock, ensure_utc, now_utc

__all__ = [
    "configure_logging",
    "mask_phone",
    "format_amount",
    "UTC_TIMEZONE",
    "Clock",
    "ensure_utc",
    "now_utc",
]
