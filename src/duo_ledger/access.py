"""Member whitelist checks."""

import logging

from .config import Settings

logger = logging.getLogger(__name__)


def warn_if_unrestricted(settings: Settings) -> bool:
    """Log a warning when no whitelist is configured. Returns True if so."""
    if settings.allowed_user_id_list:
        return False
    logger.warning("No allowed user ids configured; allowing all users")
    return True


def is_user_allowed(user_id: str | int, settings: Settings) -> bool:
    """
    Check whether a member id may use the ledger.

    An empty whitelist allows everyone (development mode).
    """
    allowed = settings.allowed_user_id_list
    if not allowed:
        return True

    permitted = str(user_id) in allowed
    if not permitted:
        logger.info(f"Rejected message from non-whitelisted user {user_id}")
    return permitted
