"""
REST Transport Strategy Data Structures

Common data structures used by REST transport strategies.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Any


@dataclass(frozen=True)
class RequestContext:
    """Request configuration context."""
    base_url: str
    timeout: float
    max_concurrent: int
    connection_timeout: float = 5.0
    keepalive_timeout: float = 60.0
    default_headers: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class AuthenticationData:
    """Authentication data containing headers, parameters, and optional request body."""
    headers: Dict[str, str]
    params: Dict[str, Any]
    data: Optional[str] = None


@dataclass
class RequestMetrics:
    """Request counters kept by the REST manager."""
    total_requests: int = 0
    successful_requests: int = 0
    rejected_requests: int = 0
    transport_errors: int = 0
    malformed_responses: int = 0
    unexpected_errors: int = 0
    avg_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    @property
    def failed_requests(self) -> int:
        return (self.rejected_requests + self.transport_errors
                + self.malformed_responses + self.unexpected_errors)
