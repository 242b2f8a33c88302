"""Role and ownership checks enforced by the services (not by the store)."""

from __future__ import annotations

import logging

from shiftplan.config import SchedulerConfig
from shiftplan.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)


def require_admin(actor, cfg: SchedulerConfig, action: str) -> None:
    """Raise PermissionDeniedError unless ``actor.role`` is the configured admin role."""
    role = getattr(actor, "role", None)
    if role != cfg.admin_role:
        logger.warning("Rejected %s by %s (role=%s)", action, getattr(actor, "id", None), role)
        raise PermissionDeniedError(f"Only admins can {action}")


def require_owner(actor, record, action: str) -> None:
    """Raise PermissionDeniedError unless ``actor`` owns ``record``."""
    if getattr(actor, "id", None) != record.user_id:
        logger.warning("Rejected %s by %s on record owned by %s", action, getattr(actor, "id", None), record.user_id)
        raise PermissionDeniedError(f"Only the owner can {action}")
