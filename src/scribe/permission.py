"""
Microphone-permission messages posted by the isolated permission frame.
Nothing in the engine reacts to them yet; receipt is only logged.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

MICROPHONE_PERMISSION_GRANTED = "MICROPHONE_PERMISSION_GRANTED"


def is_permission_granted(message: Any) -> bool:
    """True for a {"type": "MICROPHONE_PERMISSION_GRANTED"} message."""
    return isinstance(message, dict) and message.get("type") == MICROPHONE_PERMISSION_GRANTED


def log_permission_message(message: Any) -> bool:
    if is_permission_granted(message):
        logger.info("Microphone permission granted")
        return True
    return False
