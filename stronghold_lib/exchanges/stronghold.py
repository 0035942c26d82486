import asyncio
import json
import logging
from typing import Dict, List, Optional, Any, Tuple

import aiohttp

from ..base import AbstractExchange, Number
from ..classifier import Envelope, classify_response
from ..config import Credentials, VenueConfig, VenueSelector
from ..errors import ArgumentsRequired, NetworkError, NotSupported, ParseError
from ..models import (
    Market, Currency, OrderBook, Trade, Order, OrderType, OrderSide, Balance,
    Transaction, DepositAddress, SignedRequest,
)
from ..parsers import (
    parse_balances, parse_currencies, parse_deposit_address, parse_markets,
    parse_order, parse_order_book, parse_orders, parse_trades, parse_transaction,
    parse_transactions,
)
from ..signer import NonceSource, RequestSigner
from ..utils import decimal_to_precision, parse8601, safe_value

logger = logging.getLogger("StrongholdLib.Stronghold")


class StrongholdExchange(AbstractExchange):
    """
    Stronghold implementation of AbstractExchange.

    Every response goes through classify_response before it is parsed, so venue
    error codes surface as typed exceptions. No retries are made here.
    """
    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 nonce_source: Optional[NonceSource] = None):
        super().__init__(config)
        self.credentials = Credentials(
            api_key=self.config.get('api_key'),
            secret=self.config.get('secret'),
            password=self.config.get('password'),
        )
        self.venue_config = VenueConfig.from_dict(self.config)
        self.venues = VenueSelector(self.venue_config)
        self.signer = RequestSigner(self.credentials, self.venue_config, nonce_source)
        self.session: Optional[aiohttp.ClientSession] = None
        if self.config.get('sandbox'):
            self.set_sandbox_mode(True)

    async def initialize(self):
        await self.load_markets()
        await self.fetch_currencies()
        self.is_initialized = True
        logger.info(f"Stronghold Initialized (venue={self.venues.active}).")

    async def close(self):
        if self.session is not None:
            await self.session.close()
            self.session = None
        self.is_initialized = False

    def set_sandbox_mode(self, enabled: bool):
        self.venues.set_sandbox_mode(enabled)
        # market and asset ids can differ between venues
        self.markets = {}
        self.markets_by_id = {}
        self.currencies = {}

    # --- Transport ---

    def sign(self, path: str, api: str = 'public', method: str = 'GET',
             params: Optional[Dict[str, Any]] = None) -> SignedRequest:
        params = dict(params or {})
        with self.venues.locked() as venue_id:
            if '{venueId}' in path:
                params.setdefault('venueId', venue_id)
            return self.signer.sign(path, api, method, params)

    async def _fetch(self, request: SignedRequest) -> Tuple[int, str]:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.venue_config.timeout)
            )
        try:
            async with self.session.request(
                request.method, request.url, data=request.body, headers=request.headers
            ) as resp:
                return resp.status, await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"stronghold {request.method} {request.path} failed: {e}") from e

    @staticmethod
    def _decode(body: str) -> Any:
        if not body:
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None

    async def _request(self, path: str, api: str = 'public', method: str = 'GET',
                       params: Optional[Dict[str, Any]] = None) -> Envelope:
        request = self.sign(path, api, method, params)
        logger.debug(f"{request.method} {request.url}")
        status, body = await self._fetch(request)
        envelope = classify_response(body, self._decode(body))
        if envelope is None:
            raise NetworkError(f"stronghold {request.method} {request.path} HTTP {status}: {body!r}")
        return envelope

    def _account_params(self, method_name: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        request = {'accountId': self.venue_config.account_id}
        request.update(params or {})
        if not request.get('accountId'):
            raise ArgumentsRequired(
                f"stronghold {method_name} requires either the 'accountId' parameter or config['account_id']."
            )
        return request

    @staticmethod
    def _result_list(envelope: Envelope, key: Optional[str] = None) -> List[Any]:
        data = envelope.result
        if key is not None:
            data = safe_value(data, key)
        if not isinstance(data, list):
            raise ParseError(f"stronghold expected a list in result{'.' + key if key else ''}, got {data!r}")
        return data

    # --- Market Data ---

    async def fetch_time(self) -> Optional[int]:
        envelope = await self._request('utilities/time')
        return parse8601(safe_value(envelope.result, 'timestamp'))

    async def fetch_markets(self) -> Dict[str, Market]:
        envelope = await self._request('venues/{venueId}/markets')
        return parse_markets(self._result_list(envelope))

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        markets = await super().load_markets(reload)
        logger.info(f"Stronghold Markets Loaded: {len(markets)}")
        return markets

    async def fetch_currencies(self) -> Dict[str, Currency]:
        envelope = await self._request('venues/{venueId}/assets')
        self.currencies = parse_currencies(self._result_list(envelope))
        return self.currencies

    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        await self.load_markets()
        market = self.market(symbol)
        envelope = await self._request(
            'venues/{venueId}/markets/{marketId}/orderbook', params={'marketId': market.id}
        )
        timestamp = envelope.timestamp if isinstance(envelope.timestamp, str) else None
        book = parse_order_book(envelope.result, timestamp, symbol)
        if limit:
            book.bids = book.bids[:limit]
            book.asks = book.asks[:limit]
        return book

    async def fetch_trades(self, symbol: str, since: Optional[int] = None, limit: Optional[int] = None) -> List[Trade]:
        await self.load_markets()
        market = self.market(symbol)
        envelope = await self._request(
            'venues/{venueId}/markets/{marketId}/trades', params={'marketId': market.id}
        )
        return parse_trades(self._result_list(envelope, 'trades'), market, self.markets_by_id, since, limit)

    # --- Account ---

    async def fetch_balance(self) -> Dict[str, Balance]:
        request = self._account_params('fetch_balance')
        envelope = await self._request('venues/{venueId}/accounts/{accountId}', 'private', 'GET', request)
        return parse_balances(self._result_list(envelope, 'balances'))

    async def fetch_my_trades(self, symbol: Optional[str] = None, since: Optional[int] = None,
                              limit: Optional[int] = None) -> List[Trade]:
        await self.load_markets()
        market = self.market(symbol) if symbol else None
        request = self._account_params('fetch_my_trades')
        envelope = await self._request('venues/{venueId}/accounts/{accountId}/trades', 'private', 'GET', request)
        return parse_trades(self._result_list(envelope), market, self.markets_by_id, since, limit)

    async def fetch_transactions(self, code: Optional[str] = None, since: Optional[int] = None,
                                 limit: Optional[int] = None) -> List[Transaction]:
        request = self._account_params('fetch_transactions')
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/transactions', 'private', 'GET', request
        )
        return parse_transactions(self._result_list(envelope), code, limit)

    def _payment_method(self, method_name: str, code: str) -> str:
        method = self.venue_config.payment_methods.get(code)
        if method is None:
            supported = ', '.join(sorted(self.venue_config.payment_methods))
            raise NotSupported(f"stronghold {method_name} requires code to be one of {supported}")
        return method

    async def _ensure_currencies(self):
        if not self.currencies:
            await self.fetch_currencies()

    async def create_deposit_address(self, code: str) -> DepositAddress:
        payment_method = self._payment_method('create_deposit_address', code)
        await self._ensure_currencies()
        request = self._account_params('create_deposit_address', {
            'assetId': self.currency(code).id,
            'paymentMethod': payment_method,
        })
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/deposit', 'private', 'POST', request
        )
        return parse_deposit_address(envelope.result, code)

    async def withdraw(self, code: str, amount: Number, address: str, tag: Optional[str] = None) -> Transaction:
        payment_method = self._payment_method('withdraw', code)
        await self._ensure_currencies()
        currency = self.currency(code)
        request = self._account_params('withdraw', {
            'assetId': currency.id,
            'amount': decimal_to_precision(amount, currency.precision, truncate=True),
            'paymentMethod': payment_method,
            'paymentMethodDetails': {
                'withdrawal_address': address,
            },
        })
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/withdrawal', 'private', 'POST', request
        )
        return parse_transaction(envelope.result)

    async def fetch_accounts(self):
        raise NotSupported("stronghold fetch_accounts is not implemented on the exchange side.")

    # --- Trading ---

    async def create_order(self, symbol, type, side, amount, price=None, params=None) -> Order:
        await self.load_markets()
        market = self.market(symbol)
        t_str = type.value if isinstance(type, OrderType) else str(type)
        s_str = side.value if isinstance(side, OrderSide) else str(side)
        request = {
            'marketID': market.id,
            'type': t_str,
            'side': s_str,
            'size': decimal_to_precision(amount, market.amount_precision, truncate=True),
        }
        if price is not None:
            request['price'] = decimal_to_precision(price, market.price_precision)
        request.update(params or {})
        request = self._account_params('create_order', request)
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/orders', 'private', 'POST', request
        )
        order = parse_order(envelope.result, market, self.markets_by_id)
        logger.info(f"Stronghold order placed {symbol} {s_str} {request['size']} id={order.id}")
        return order

    async def cancel_order(self, id: str, symbol: Optional[str] = None) -> bool:
        request = self._account_params('cancel_order', {'orderId': id})
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/orders/{orderId}', 'private', 'DELETE', request
        )
        return envelope.success

    async def fetch_open_orders(self, symbol: Optional[str] = None, since: Optional[int] = None,
                                limit: Optional[int] = None) -> List[Order]:
        await self.load_markets()
        market = self.market(symbol) if symbol else None
        request = self._account_params('fetch_open_orders')
        envelope = await self._request(
            'venues/{venueId}/accounts/{accountId}/orders', 'private', 'GET', request
        )
        orders = parse_orders(self._result_list(envelope), None, self.markets_by_id, since)
        if market is not None:
            orders = [o for o in orders if o.symbol == market.symbol]
        return orders[:limit] if limit else orders
