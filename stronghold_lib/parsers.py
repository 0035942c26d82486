"""
Venue JSON -> canonical records.

Each function handles one raw entity. Numeric and date fields are parsed
strictly: malformed values raise ParseError rather than turning into zero.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .errors import ParseError
from .models import (
    Balance, Currency, DepositAddress, Market, MarketLimits, Order, OrderBook,
    OrderBookLevel, OrderSide, OrderType, TakerOrMaker, Trade, Transaction,
    TransactionType,
)
from .utils import (
    asset_code, parse8601, safe_decimal, safe_integer, safe_string, safe_value,
    to_decimal,
)

logger = logging.getLogger("StrongholdLib.Parsers")

MarketIndex = Mapping[str, Market]


def _side(value: Any) -> Optional[OrderSide]:
    try:
        return OrderSide(str(value).lower())
    except ValueError:
        return None


def _order_type(value: Any) -> Optional[OrderType]:
    try:
        return OrderType(str(value).lower())
    except ValueError:
        return None


def _precision(entry: Mapping[str, Any], key: str) -> Optional[int]:
    digits = safe_integer(entry, key)
    if digits is not None and digits < 0:
        raise ParseError(f"{key}: precision must be non-negative, got {digits}")
    return digits


def _non_negative(value: Any, name: str) -> Decimal:
    number = to_decimal(value, name)
    if number < 0:
        raise ParseError(f"{name}: expected a non-negative number, got {value!r}")
    return number


# --- Catalog ---

def parse_market(entry: Mapping[str, Any]) -> Market:
    #     {
    #         id: 'SHXUSD',
    #         baseAssetId: 'SHX/stronghold.co',
    #         counterAssetId: 'USD/stronghold.co',
    #         minimumOrderSize: '1.0000000',
    #         minimumOrderIncrement: '1.0000000',
    #         minimumPriceIncrement: '0.00010000',
    #         displayDecimalsPrice: 4,
    #         displayDecimalsAmount: 0
    #     }
    market_id = safe_string(entry, 'id')
    base_id = safe_string(entry, 'baseAssetId')
    quote_id = safe_string(entry, 'counterAssetId')
    if not market_id or not base_id or not quote_id:
        raise ParseError(f"market entry is missing id/baseAssetId/counterAssetId: {entry!r}")
    base = asset_code(base_id)
    quote = asset_code(quote_id)
    return Market(
        symbol=f"{base}/{quote}",
        id=market_id,
        base=base,
        quote=quote,
        base_id=base_id,
        quote_id=quote_id,
        amount_precision=_precision(entry, 'displayDecimalsAmount'),
        price_precision=_precision(entry, 'displayDecimalsPrice'),
        limits=MarketLimits(amount_min=safe_decimal(entry, 'minimumOrderSize')),
        info=dict(entry),
    )


def parse_markets(entries: Iterable[Mapping[str, Any]]) -> Dict[str, Market]:
    """Markets keyed by canonical symbol."""
    result: Dict[str, Market] = {}
    for entry in entries:
        market = parse_market(entry)
        result[market.symbol] = market
    return result


def index_markets(markets: Iterable[Market]) -> Dict[str, Market]:
    """Venue market id -> Market, for resolving ids found in trades and orders."""
    return {m.id: m for m in markets}


def parse_currency(entry: Mapping[str, Any]) -> Currency:
    #     { id: 'XLM/native', alias: '', code: 'XLM', name: '', displayDecimalsFull: 7, displayDecimalsSignificant: 2 }
    currency_id = safe_string(entry, 'id') or safe_string(entry, 'code')
    if not currency_id:
        raise ParseError(f"asset entry has no id: {entry!r}")
    return Currency(
        code=asset_code(currency_id),
        id=currency_id,
        precision=_precision(entry, 'displayDecimalsFull'),
        info=dict(entry),
    )


def parse_currencies(entries: Iterable[Mapping[str, Any]]) -> Dict[str, Currency]:
    result: Dict[str, Currency] = {}
    for entry in entries:
        currency = parse_currency(entry)
        result[currency.code] = currency
    return result


# --- Order book ---

def _parse_levels(levels: Any, side: str) -> List[OrderBookLevel]:
    if levels is None:
        return []
    if not isinstance(levels, (list, tuple)):
        raise ParseError(f"{side}: expected a list of levels, got {type(levels).__name__}")
    parsed = []
    for level in levels:
        if not isinstance(level, (list, tuple)) or len(level) < 2:
            raise ParseError(f"{side}: malformed level {level!r}")
        parsed.append(OrderBookLevel(
            price=_non_negative(level[0], f"{side} price"),
            size=_non_negative(level[1], f"{side} size"),
        ))
    return parsed


def parse_order_book(result: Mapping[str, Any], timestamp: Optional[str] = None,
                     symbol: Optional[str] = None) -> OrderBook:
    """
    result: the envelope's result, { marketId, bids: [[price, size], ...], asks: [...] }
    timestamp: the envelope-level ISO-8601 timestamp
    """
    # Venue sends bids descending and asks ascending; keep that order as-is.
    return OrderBook(
        symbol=symbol,
        bids=_parse_levels(safe_value(result, 'bids'), 'bids'),
        asks=_parse_levels(safe_value(result, 'asks'), 'asks'),
        timestamp=parse8601(timestamp),
        info=dict(result) if isinstance(result, Mapping) else None,
    )


# --- Trades ---

@dataclass
class TupleTrade:
    """Public trade feed entry: [price, amount, side, executedAt]."""
    price: Any
    amount: Any
    side: Any
    executed_at: Any

    @staticmethod
    def matches(raw: Any) -> bool:
        return isinstance(raw, (list, tuple))

    @classmethod
    def from_raw(cls, raw: Sequence[Any]) -> "TupleTrade":
        if len(raw) < 4:
            raise ParseError(f"trade tuple needs 4 fields, got {len(raw)}: {raw!r}")
        return cls(raw[0], raw[1], raw[2], raw[3])


@dataclass
class ObjectTrade:
    """Private trade history entry."""
    id: Optional[str]
    order_id: Optional[str]
    market_id: Optional[str]
    side: Any
    size: Any
    price: Any
    settled: Optional[bool]
    maker: Optional[bool]
    executed_at: Optional[str]

    @staticmethod
    def matches(raw: Any) -> bool:
        return isinstance(raw, Mapping)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "ObjectTrade":
        return cls(
            id=safe_string(raw, 'id'),
            order_id=safe_string(raw, 'orderId'),
            market_id=safe_string(raw, 'marketId'),
            side=raw.get('side'),
            size=raw.get('size'),
            price=raw.get('price'),
            settled=raw.get('settled'),
            maker=raw.get('maker'),
            executed_at=safe_string(raw, 'executedAt'),
        )


RawTrade = Union[TupleTrade, ObjectTrade]


def _trade_from_tuple(raw: TupleTrade, info: Any, market: Optional[Market]) -> Trade:
    return Trade(
        price=_non_negative(raw.price, 'price'),
        amount=_non_negative(raw.amount, 'amount'),
        side=_side(raw.side),
        timestamp=parse8601(raw.executed_at),
        symbol=market.symbol if market else None,
        info=info,
    )


def _trade_from_object(raw: ObjectTrade, info: Any, market: Optional[Market],
                       markets_by_id: Optional[MarketIndex]) -> Trade:
    if markets_by_id and raw.market_id in markets_by_id:
        market = markets_by_id[raw.market_id]
    taker_or_maker = None
    if raw.maker is not None:
        taker_or_maker = TakerOrMaker.MAKER if raw.maker else TakerOrMaker.TAKER
    return Trade(
        price=_non_negative(raw.price, 'price'),
        amount=_non_negative(raw.size, 'size'),
        side=_side(raw.side),
        timestamp=parse8601(raw.executed_at),
        symbol=market.symbol if market else None,
        id=raw.id,
        order=raw.order_id,
        taker_or_maker=taker_or_maker,
        info=info,
    )


def parse_trade(raw: Any, market: Optional[Market] = None,
                markets_by_id: Optional[MarketIndex] = None) -> Trade:
    if TupleTrade.matches(raw):
        return _trade_from_tuple(TupleTrade.from_raw(raw), raw, market)
    if ObjectTrade.matches(raw):
        return _trade_from_object(ObjectTrade.from_raw(raw), raw, market, markets_by_id)
    raise ParseError(f"unrecognized trade shape: {type(raw).__name__}")


def parse_trades(raws: Iterable[Any], market: Optional[Market] = None,
                 markets_by_id: Optional[MarketIndex] = None,
                 since: Optional[int] = None, limit: Optional[int] = None) -> List[Trade]:
    trades = [parse_trade(raw, market, markets_by_id) for raw in raws]
    if market is not None:
        trades = [t for t in trades if t.symbol in (None, market.symbol)]
    if since is not None:
        trades = [t for t in trades if t.timestamp is not None and t.timestamp >= since]
    trades.sort(key=lambda t: t.timestamp or 0)
    return trades[:limit] if limit else trades


# --- Orders ---

def parse_order(raw: Mapping[str, Any], market: Optional[Market] = None,
                markets_by_id: Optional[MarketIndex] = None) -> Order:
    if not isinstance(raw, Mapping):
        raise ParseError(f"order must be an object, got {type(raw).__name__}")
    market_id = safe_string(raw, 'marketId')
    if markets_by_id and market_id in markets_by_id:
        market = markets_by_id[market_id]
    amount = to_decimal(raw.get('size'), 'size')
    filled = to_decimal(raw.get('sizeFilled'), 'sizeFilled')
    order = Order(
        id=safe_string(raw, 'id'),
        amount=amount,
        filled=filled,
        symbol=market.symbol if market else None,
        side=_side(raw.get('side')),
        type=_order_type(raw.get('type')),
        price=safe_decimal(raw, 'price'),
        timestamp=parse8601(safe_string(raw, 'placedAt')),
        info=dict(raw),
    )
    if amount < 0 or filled < 0 or filled > amount:
        logger.warning(f"Order {order.id} reports size={amount} sizeFilled={filled}")
    return order


def parse_orders(raws: Iterable[Mapping[str, Any]], market: Optional[Market] = None,
                 markets_by_id: Optional[MarketIndex] = None,
                 since: Optional[int] = None, limit: Optional[int] = None) -> List[Order]:
    orders = [parse_order(raw, market, markets_by_id) for raw in raws]
    if since is not None:
        orders = [o for o in orders if o.timestamp is not None and o.timestamp >= since]
    return orders[:limit] if limit else orders


# --- Balances ---

def parse_balance(entry: Mapping[str, Any]) -> Balance:
    asset_id = safe_string(entry, 'assetId')
    if not asset_id:
        raise ParseError(f"balance entry has no assetId: {entry!r}")
    balance = Balance(
        currency=asset_code(asset_id),
        total=safe_decimal(entry, 'amount', Decimal(0)),
        available=safe_decimal(entry, 'availableForTrade', Decimal(0)),
    )
    if balance.free < 0:
        logger.warning(
            f"{balance.currency}: availableForTrade {balance.available} exceeds amount {balance.total}"
        )
    return balance


def parse_balances(entries: Iterable[Mapping[str, Any]]) -> Dict[str, Balance]:
    result: Dict[str, Balance] = {}
    for entry in entries:
        balance = parse_balance(entry)
        result[balance.currency] = balance
    return result


# --- Transactions ---

def parse_transaction(raw: Mapping[str, Any]) -> Transaction:
    #     {
    #         "id": "5be48892-1b6e-4431-a3cf-34b38811e82c",
    #         "assetId": "BTC/stronghold.co",
    #         "amount": "10",
    #         "feeAmount": "0.01",
    #         "paymentMethod": "bitcoin",
    #         "paymentMethodDetails": { "withdrawal_address": "1vHysJeXYV6nqhroBaGi52QWFarbJ1dmQ" },
    #         "direction": "withdrawal",
    #         "status": "pending"
    #     }
    if not isinstance(raw, Mapping):
        raise ParseError(f"transaction must be an object, got {type(raw).__name__}")
    asset_id = safe_string(raw, 'assetId')
    direction = safe_string(raw, 'direction')
    try:
        tx_type = TransactionType(direction) if direction else None
    except ValueError:
        tx_type = None
    details = safe_value(raw, 'paymentMethodDetails', {})
    instructions = safe_value(raw, 'paymentMethodInstructions', {})
    address = safe_string(details, 'withdrawal_address') or safe_string(instructions, 'deposit_address')
    return Transaction(
        id=safe_string(raw, 'id'),
        currency=asset_code(asset_id) if asset_id else None,
        amount=to_decimal(raw.get('amount'), 'amount'),
        type=tx_type,
        fee=safe_decimal(raw, 'feeAmount'),
        status=safe_string(raw, 'status'),
        address=address,
        payment_method=safe_string(raw, 'paymentMethod'),
        info=dict(raw),
    )


def parse_transactions(raws: Iterable[Mapping[str, Any]], code: Optional[str] = None,
                       limit: Optional[int] = None) -> List[Transaction]:
    txs = [parse_transaction(raw) for raw in raws]
    if code is not None:
        txs = [t for t in txs if t.currency == code]
    return txs[:limit] if limit else txs


def parse_deposit_address(result: Mapping[str, Any], code: str) -> DepositAddress:
    #     {
    #         assetId: 'BTC/stronghold.co',
    #         paymentMethod: 'bitcoin',
    #         paymentMethodInstructions: { deposit_address: 'mzMT9Cfw8JXVWK7rMonrpGfY9tt57ytHt4' },
    #         direction: 'deposit',
    #     }
    address = safe_string(safe_value(result, 'paymentMethodInstructions', {}), 'deposit_address')
    if not address:
        raise ParseError(f"deposit response has no deposit_address: {result!r}")
    return DepositAddress(currency=code, address=address, info=dict(result))
