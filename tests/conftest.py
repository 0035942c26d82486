import base64
import json
from typing import Any, Dict, List, Tuple

import pytest

from stronghold_lib.exchanges.stronghold import StrongholdExchange
from stronghold_lib.models import SignedRequest
from stronghold_lib.signer import NonceSource

SECRET = base64.b64encode(b"stronghold-test-secret").decode("ascii")

CREDENTIALS = {
    "api_key": "cred-123",
    "secret": SECRET,
    "password": "hunter2",
}


def envelope(result: Any, success: bool = True, status: int = 200, **extra) -> Dict[str, Any]:
    body = {
        "requestId": "6de8f506-ad9d-4d0d-94f3-ec4d55dfcdb9",
        "timestamp": "2019-01-31T21:59:06.696855Z",
        "success": success,
        "statusCode": status,
        "result": result,
    }
    body.update(extra)
    return body


MARKETS = [
    {
        "id": "SHXUSD",
        "baseAssetId": "SHX/stronghold.co",
        "counterAssetId": "USD/stronghold.co",
        "minimumOrderSize": "1.0000000",
        "minimumOrderIncrement": "1.0000000",
        "minimumPriceIncrement": "0.00010000",
        "displayDecimalsPrice": 4,
        "displayDecimalsAmount": 0,
    },
    {
        "id": "XLMUSD",
        "baseAssetId": "XLM/native",
        "counterAssetId": "USD/stronghold.co",
        "minimumOrderSize": "0.0000001",
        "displayDecimalsPrice": 6,
        "displayDecimalsAmount": 7,
    },
]

ASSETS = [
    {"id": "XLM/native", "alias": "", "code": "XLM", "name": "", "displayDecimalsFull": 7, "displayDecimalsSignificant": 2},
    {"id": "BTC/stronghold.co", "alias": "", "code": "BTC", "name": "", "displayDecimalsFull": 8, "displayDecimalsSignificant": 2},
    {"id": "USD/stronghold.co", "alias": "", "code": "USD", "name": "", "displayDecimalsFull": 2, "displayDecimalsSignificant": 2},
]


class StubExchange(StrongholdExchange):
    """StrongholdExchange with canned responses instead of HTTP."""

    def __init__(self, responses: Dict[Tuple[str, str], Any], config=None):
        super().__init__(config, nonce_source=NonceSource(clock=lambda: 1549046661))
        self.responses = responses
        self.requests: List[SignedRequest] = []

    async def _fetch(self, request: SignedRequest) -> Tuple[int, str]:
        self.requests.append(request)
        canned = self.responses[(request.method, request.path)]
        if isinstance(canned, tuple):
            return canned
        if isinstance(canned, str):
            return 200, canned
        return 200, json.dumps(canned)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("STRONGHOLD_API_KEY", "STRONGHOLD_SECRET", "STRONGHOLD_PASSPHRASE", "STRONGHOLD_ACCOUNT_ID"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalog_responses() -> Dict[Tuple[str, str], Any]:
    return {
        ("GET", "/v1/venues/trade-public/markets"): envelope(MARKETS),
        ("GET", "/v1/venues/trade-public/assets"): envelope(ASSETS),
    }


@pytest.fixture
def make_exchange(catalog_responses):
    def _make(responses=None, **config):
        merged = dict(catalog_responses)
        merged.update(responses or {})
        cfg = dict(CREDENTIALS)
        cfg.update(config)
        return StubExchange(merged, cfg)
    return _make
