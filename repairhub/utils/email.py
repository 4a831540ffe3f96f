import logging

from repairhub.config import settings

logger = logging.getLogger(__name__)


def send_reset_code_email(to_email: str, name: str | None, reset_code: str) -> bool:
    """
    SMTP disabled - the reset code is logged instead of mailed.
    The code itself is only written to the log outside production.
    """
    logger.info(f"[RESET EMAIL] To={to_email} | Name={name or '-'}")
    if not settings.is_production:
        logger.info(f"[RESET CODE]  >>> {reset_code}")
    return True


def send_truck_ready_email(to_email: str, name: str | None, license_plate: str) -> bool:
    logger.info(f"[TRUCK READY EMAIL] To={to_email} | Truck={license_plate}")
    return True
