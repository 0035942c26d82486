from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List, Dict, Any
from enum import Enum

from .utils import iso8601

class OrderSide(Enum):
    BUY = 'buy'
    SELL = 'sell'

class OrderType(Enum):
    MARKET = 'market'
    LIMIT = 'limit'

class TakerOrMaker(Enum):
    MAKER = 'maker'
    TAKER = 'taker'

class TransactionType(Enum):
    DEPOSIT = 'deposit'
    WITHDRAWAL = 'withdrawal'

@dataclass
class MarketLimits:
    """Trading bounds. Only what the venue reports is set."""
    amount_min: Optional[Decimal] = None
    amount_max: Optional[Decimal] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    cost_min: Optional[Decimal] = None
    cost_max: Optional[Decimal] = None

@dataclass
class Market:
    """Metadata about a trading pair."""
    symbol: str # BASE/QUOTE
    id: str # venue market id, e.g. SHXUSD
    base: str
    quote: str
    base_id: str # e.g. SHX/stronghold.co
    quote_id: str
    amount_precision: Optional[int] = None # decimal digits, None = unspecified
    price_precision: Optional[int] = None
    limits: MarketLimits = field(default_factory=MarketLimits)
    info: Optional[dict] = None

@dataclass
class Currency:
    code: str
    id: str
    precision: Optional[int] = None
    info: Optional[dict] = None

@dataclass
class OrderBookLevel:
    price: Decimal
    size: Decimal

@dataclass
class OrderBook:
    """Snapshot of one market's book. Levels are kept in venue order."""
    symbol: Optional[str]
    bids: List[OrderBookLevel]
    asks: List[OrderBookLevel]
    timestamp: Optional[int] = None # ms
    info: Optional[dict] = None

    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)

@dataclass
class Trade:
    price: Decimal
    amount: Decimal
    timestamp: Optional[int] = None # ms
    side: Optional[OrderSide] = None # None when the venue value is unrecognized
    symbol: Optional[str] = None
    id: Optional[str] = None
    order: Optional[str] = None
    taker_or_maker: Optional[TakerOrMaker] = None
    cost: Optional[Decimal] = None # only when reported
    info: Any = None

    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)

@dataclass
class Order:
    """Standardized Order Return."""
    id: Optional[str]
    amount: Decimal
    filled: Decimal
    symbol: Optional[str] = None
    side: Optional[OrderSide] = None
    type: Optional[OrderType] = None
    price: Optional[Decimal] = None
    timestamp: Optional[int] = None # placement, ms
    info: Optional[dict] = None

    @property
    def remaining(self) -> Decimal:
        return self.amount - self.filled

    @property
    def datetime(self) -> Optional[str]:
        return iso8601(self.timestamp)

@dataclass
class Balance:
    """Account Balance.

    The venue reports ``availableForTrade`` as the part committed to trading,
    so ``free`` is what remains of ``total`` after it.
    """
    currency: str
    total: Decimal = Decimal(0)
    available: Decimal = Decimal(0)

    @property
    def free(self) -> Decimal:
        return self.total - self.available

@dataclass
class Transaction:
    id: Optional[str]
    currency: Optional[str]
    amount: Decimal
    type: Optional[TransactionType] = None
    fee: Optional[Decimal] = None
    status: Optional[str] = None
    address: Optional[str] = None
    payment_method: Optional[str] = None
    info: Optional[dict] = None

@dataclass
class DepositAddress:
    currency: str
    address: str
    info: Optional[dict] = None

@dataclass
class SignedRequest:
    """Everything needed to put one request on the wire."""
    url: str
    method: str
    path: str # canonical, e.g. /v1/venues/trade-public/markets
    body: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
