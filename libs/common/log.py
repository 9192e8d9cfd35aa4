"""
Process-wide logging setup shared by the services.
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configures the root logger once at application start.

    Args:
        level: logging level name (e.g. "DEBUG", "INFO")
    """
    root = logging.getLogger()
    if root.handlers:
        # uvicorn or pytest already installed handlers; only adjust the level
        root.setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def mask_phone(phone: str) -> str:
    """Hides the last four digits of a phone number for log output."""
    if len(phone) < 4:
        return "*" * len(phone)
    return f"{phone[:-4]}****"
