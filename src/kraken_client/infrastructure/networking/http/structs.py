from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import msgspec


class HTTPMethod(Enum):
    """HTTP methods used by the REST transport."""
    GET = "GET"
    POST = "POST"


class ApiClassification(Enum):
    """Rate limit bucket a request draws from."""
    PUBLIC = "public"
    PRIVATE = "private"
    ORDER = "order"


@dataclass(frozen=True)
class RequestSpec:
    """
    Description of one REST call handed to ``RestManager.execute``.

    Attributes:
        method: HTTP method
        path: URI path below the base URL, e.g. "/0/public/Time"
        params: Query parameters (GET) or form fields (POST)
        classification: Rate limit bucket
        private: Whether the call must be signed
        response_type: Optional type the ``result`` field is converted to
    """
    method: HTTPMethod
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    classification: ApiClassification = ApiClassification.PUBLIC
    private: bool = False
    response_type: Optional[Any] = None

    @classmethod
    def public(cls, path: str, params: Optional[Dict[str, Any]] = None,
               response_type: Optional[Any] = None) -> "RequestSpec":
        return cls(HTTPMethod.GET, path, params or {}, ApiClassification.PUBLIC,
                   False, response_type)

    @classmethod
    def private_call(cls, path: str, params: Optional[Dict[str, Any]] = None,
                     classification: ApiClassification = ApiClassification.PRIVATE,
                     response_type: Optional[Any] = None) -> "RequestSpec":
        return cls(HTTPMethod.POST, path, params or {}, classification, True, response_type)


class ResponseEnvelope(msgspec.Struct):
    """Kraken REST envelope: ``{"error": [...], "result": ...}``."""
    error: List[str]
    result: Any = None
