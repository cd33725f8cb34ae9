"""
Error Handling Utility

Collects and categorizes failures encountered during a crawl so that
isolated per-URL failures can be reported after traversal finishes.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


NAVIGATION_ERROR = 'navigation_error'
DISCOVERY_ERROR = 'discovery_error'
CRAWL_ERROR = 'crawl_error'


@dataclass
class ErrorRecord:
    """Represents an error encountered during crawling."""
    error_type: str
    message: str
    url: str
    timestamp: float
    context: Dict[str, Any] = field(default_factory=dict)
    severity: str = 'medium'  # low, medium, high, critical

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error_type': self.error_type,
            'message': self.message,
            'url': self.url,
            'timestamp': self.timestamp,
            'context': self.context,
            'severity': self.severity,
        }


class ErrorHandler:
    """
    Centralized error tracking for one crawl invocation.

    Every failure is isolated to the URL (or selector expression) it occurred
    on; the handler only records it so traversal can continue.
    """

    def __init__(self):
        self.records: List[ErrorRecord] = []

        self.severity_rules = {
            'high': ['net::err_name_not_resolved', 'net::err_connection_refused', 'crash'],
            'medium': ['timeout', 'http 5'],
            'low': ['http 4', 'no matches'],
        }

    def handle_navigation_error(self, url: str, message: str, attempts: int) -> ErrorRecord:
        """Record a navigation that failed after exhausting its attempts."""
        record = self._record(
            NAVIGATION_ERROR, message, url,
            context={'attempts': attempts}
        )
        logger.error(f"🚫 Navigation failed after {attempts} attempt(s): {url} ({message})")
        return record

    def handle_discovery_error(self, url: str, expression: str, message: str) -> ErrorRecord:
        """Record a selector expression that could not be queried."""
        record = self._record(
            DISCOVERY_ERROR, message, url,
            context={'expression': expression}
        )
        logger.debug(f"Discovery error for {expression!r} on {url}: {message}")
        return record

    def handle_crawl_error(self, url: str, error: BaseException) -> ErrorRecord:
        """Record an unexpected failure while processing a URL."""
        record = self._record(
            CRAWL_ERROR, f"{type(error).__name__}: {error}", url,
            severity='high'
        )
        logger.error(f"💥 Unexpected error while crawling {url}: {error}", exc_info=error)
        return record

    def _record(self, error_type: str, message: str, url: str,
                context: Optional[Dict[str, Any]] = None,
                severity: Optional[str] = None) -> ErrorRecord:
        record = ErrorRecord(
            error_type=error_type,
            message=message,
            url=url,
            timestamp=time.time(),
            context=context or {},
            severity=severity or self._categorize_error_severity(message)
        )
        self.records.append(record)
        return record

    def _categorize_error_severity(self, message: str) -> str:
        """Categorize error severity from its message."""
        lowered = message.lower()
        for severity, patterns in self.severity_rules.items():
            if any(pattern in lowered for pattern in patterns):
                return severity
        return 'medium'

    def get_error_summary(self) -> Dict[str, Any]:
        """Summarize recorded errors by type and severity."""
        return {
            'total_errors': len(self.records),
            'by_type': dict(Counter(r.error_type for r in self.records)),
            'by_severity': dict(Counter(r.severity for r in self.records)),
        }
