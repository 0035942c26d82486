import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import ERROR_CODES, EXCEPTIONS_BY_KIND, ExchangeError
from .utils import safe_string, safe_value

logger = logging.getLogger("StrongholdLib.Classifier")


@dataclass
class Envelope:
    """Outer wrapper shared by every venue response."""
    success: bool
    status_code: Optional[int] = None
    request_id: Optional[str] = None
    timestamp: Any = None # ISO-8601 string on most routes, integer micros on utilities/time
    error_code: Optional[str] = None
    result: Any = None
    body: Optional[str] = None

    @classmethod
    def from_response(cls, response: Mapping[str, Any], body: Optional[str] = None) -> "Envelope":
        status = safe_value(response, 'statusCode')
        return cls(
            success=bool(safe_value(response, 'success', False)),
            status_code=int(status) if isinstance(status, (int, str)) and str(status).isdigit() else None,
            request_id=safe_string(response, 'requestId'),
            timestamp=safe_value(response, 'timestamp'),
            error_code=safe_string(response, 'errorCode'),
            result=response.get('result'),
            body=body,
        )


def classify_response(body: Optional[str], response: Any) -> Optional[Envelope]:
    """
    Raise the typed error a response stands for, or return its envelope.

    Returns None when there is no decoded body to look at; the transport layer
    decides what that means. A known error code wins over the success flag.
    """
    if response is None:
        return None
    if not isinstance(response, Mapping):
        # decoded, but not an envelope: no success flag to go on
        raise ExchangeError(f"stronghold {body}", body=body)
    error_code = safe_string(response, 'errorCode')
    if error_code in ERROR_CODES:
        kind = ERROR_CODES[error_code]
        logger.debug(f"Classified {error_code} as {kind.value}")
        raise EXCEPTIONS_BY_KIND[kind](f"stronghold {body}", code=error_code, body=body)
    if not safe_value(response, 'success', False):
        raise ExchangeError(f"stronghold {body}", code=error_code, body=body)
    return Envelope.from_response(response, body)
