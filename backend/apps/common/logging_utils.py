import logging
from typing import Any, Dict, Optional

from apps.common.correlation import get_correlation_id


def build_log_extra(
    session_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Assemble an ``extra=`` payload tagged with the request correlation id."""
    extra: Dict[str, Any] = {}
    resolved_correlation_id = correlation_id or get_correlation_id()
    if resolved_correlation_id:
        extra["correlation_id"] = resolved_correlation_id
    if session_id:
        extra["session_id"] = session_id
    extra.update(kwargs)
    return extra


class CorrelationIdFilter(logging.Filter):
    """Guarantee ``%(correlation_id)s`` and ``%(session_id)s`` resolve in formatters."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "-"
        if not hasattr(record, "session_id"):
            record.session_id = "-"
        return True
