"""Size guard — refuses oversized input before any parsing work starts."""

import structlog

from jsonrescue.errors import SizeLimitExceededError
from jsonrescue.observability import RECOVERY_REJECTED

logger = structlog.get_logger(__name__)


def check_size(text: str, max_length: int) -> None:
    """
    Raise `SizeLimitExceededError` if ``text`` is longer than ``max_length``.

    Length is measured in code points (``len(text)``).
    """
    if max_length <= 0:
        raise ValueError(f"max_length must be positive, got {max_length}")

    length = len(text)
    if length > max_length:
        RECOVERY_REJECTED.inc()
        logger.warning("input_size_rejected", length=length, max_length=max_length)
        raise SizeLimitExceededError(
            "Input exceeds maximum allowed size",
            length=length,
            max_length=max_length,
            detail=f"{length} characters > {max_length}",
        )
