import base64
import binascii
import hashlib
import hmac
import json
import logging
import re
import threading
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .config import Credentials, VenueConfig
from .errors import ConfigurationError
from .models import SignedRequest

logger = logging.getLogger("StrongholdLib.Signer")

_PLACEHOLDER = re.compile(r'\{([^}]+)\}')


def extract_params(path: str) -> List[str]:
    """Names of the {placeholders} in a route template."""
    return _PLACEHOLDER.findall(path)


def implode_params(path: str, params: Dict[str, Any]) -> str:
    def _sub(match):
        name = match.group(1)
        if name not in params or params[name] is None:
            raise ConfigurationError(f"Missing path parameter '{name}' for {path}")
        return str(params[name])
    return _PLACEHOLDER.sub(_sub, path)


class NonceSource:
    """
    Integer-seconds nonce that never repeats or goes backwards.

    Share one instance between every signer using the same credential; the
    venue rejects out-of-order values with TIME_INVALID.
    """
    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self, now: Optional[float] = None) -> int:
        seconds = int(self._clock() if now is None else now)
        with self._lock:
            self._last = max(seconds, self._last + 1)
            return self._last

    @classmethod
    def for_credential(cls, api_key: Optional[str]) -> "NonceSource":
        """Process-wide source for one api key; keyless (public) signers get their own."""
        if not api_key:
            return cls()
        with _registry_lock:
            source = _registry.get(api_key)
            if source is None:
                source = _registry[api_key] = cls()
            return source


_registry: Dict[str, NonceSource] = {}
_registry_lock = threading.Lock()


class RequestSigner:
    def __init__(self, credentials: Credentials, config: Optional[VenueConfig] = None,
                 nonce_source: Optional[NonceSource] = None):
        self.credentials = credentials
        self.config = config or VenueConfig()
        self.nonce_source = nonce_source or NonceSource.for_credential(credentials.api_key)
        self._secret: Optional[bytes] = None

    def check_required_credentials(self):
        missing = self.credentials.missing()
        if missing:
            raise ConfigurationError(f"stronghold requires credentials: {', '.join(missing)}")

    def _secret_bytes(self) -> bytes:
        if self._secret is None:
            try:
                self._secret = base64.b64decode(self.credentials.secret, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ConfigurationError("stronghold secret is not valid base64") from e
        return self._secret

    def signature(self, payload: str) -> str:
        digest = hmac.new(self._secret_bytes(), payload.encode('utf-8'), hashlib.sha256).digest()
        return base64.b64encode(digest).decode('ascii')

    def sign(
        self,
        path: str,
        api: str = 'public',
        method: str = 'GET',
        params: Optional[Dict[str, Any]] = None,
        now: Optional[float] = None,
    ) -> SignedRequest:
        """
        Build the request for a route template.

        path: template relative to the version, e.g. 'venues/{venueId}/markets'
        api: 'public' or 'private'; only private calls get auth headers
        params: path parameters plus query/body fields
        now: clock override in seconds, used for the nonce
        """
        params = params or {}
        method = method.upper()
        request_path = '/' + self.config.version + '/' + implode_params(path, params)
        consumed = set(extract_params(path))
        query = {k: v for k, v in params.items() if k not in consumed}
        url = self.config.base_url + request_path
        body = None
        if method == 'GET' and query:
            url += '?' + urlencode(query)
        else:
            body = json.dumps(query, separators=(',', ':'))

        headers = None
        if api == 'private':
            self.check_required_credentials()
            timestamp = str(self.nonce_source.next(now))
            payload = timestamp + method + request_path
            if body is not None:
                payload += body
            headers = {
                'SH-CRED-ID': self.credentials.api_key,
                'SH-CRED-SIG': self.signature(payload),
                'SH-CRED-TIME': timestamp,
                'SH-CRED-PASS': self.credentials.password,
                'Content-Type': 'application/json',
            }
            logger.debug(f"Signed {method} {request_path} nonce={timestamp}")
        return SignedRequest(url=url, method=method, path=request_path, body=body, headers=headers)
