"""
Coupon code generation.
"""
import logging
import secrets
import string
from typing import Awaitable, Callable, Sequence

from services.coupon.app.core.errors import GenerationExhaustedError

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 10


def format_code(raw: str) -> str:
    """Groups a 10 character code as XXXX-XXXX-XX; other lengths pass through."""
    if len(raw) != DEFAULT_CODE_LENGTH:
        return raw
    return f"{raw[:4]}-{raw[4:8]}-{raw[8:]}"


def normalize_code(code: str) -> str:
    """Lookup form of a user supplied code (codes are case-insensitive)."""
    return (code or "").strip().upper()


class CouponCodeGenerator:
    """
    Draws random coupon codes and checks them against storage for uniqueness.
    """

    def __init__(
        self,
        code_exists: Callable[[str], Awaitable[bool]],
        alphabet: Sequence[str] = CODE_ALPHABET,
        choice: Callable[[Sequence[str]], str] = secrets.choice,
    ):
        """
        Args:
            code_exists: async predicate telling whether a code is already stored
            alphabet: characters to draw from
            choice: random choice function (cryptographically strong by default)
        """
        self._code_exists = code_exists
        self._alphabet = alphabet
        self._choice = choice

    def generate_code(self, length: int = DEFAULT_CODE_LENGTH) -> str:
        raw = "".join(self._choice(self._alphabet) for _ in range(length))
        return format_code(raw)

    async def generate_unique_code(
        self,
        max_retries: int = 5,
        length: int = DEFAULT_CODE_LENGTH,
    ) -> str:
        """
        Generates a code that does not exist in storage yet.

        Raises:
            GenerationExhaustedError: every attempt collided with a stored code
        """
        for attempt in range(1, max_retries + 1):
            code = self.generate_code(length)
            if not await self._code_exists(code):
                return code
            logger.warning("Coupon code collision (attempt %d/%d)", attempt, max_retries)

        raise GenerationExhaustedError(
            f"Failed to generate unique coupon code after {max_retries} attempts"
        )
