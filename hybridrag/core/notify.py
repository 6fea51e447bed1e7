"""
Observer notification helper.

Notifications are a side channel: a failing observer is logged and
ignored, the retrieval carries on.
"""

import structlog
from typing import Any, Optional

from hybridrag.core.interfaces import Observer

log = structlog.get_logger()


def notify(observer: Optional[Observer], event: str, *args: Any) -> None:
    """Call `observer.<event>(*args)` if an observer is configured."""
    if observer is None:
        return

    try:
        getattr(observer, event)(*args)
    except Exception as e:
        log.warning(
            "Observer notification failed",
            observer=type(observer).__name__,
            callback=event,
            error=str(e)
        )
