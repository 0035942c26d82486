from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Dict, Any, Union
from .errors import BadSymbol
from .parsers import index_markets
from .models import (
    Market, Currency, OrderBook, Trade, Order, Balance, OrderType, OrderSide,
    Transaction, DepositAddress,
)

Number = Union[Decimal, float, int, str]

class AbstractExchange(ABC):
    """
    Standardized Abstract Base Class for spot venues.
    Follows a CCXT-like interface pattern.
    """
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.markets: Dict[str, Market] = {} # Key: symbol (Standardized, e.g. SHX/USD)
        self.markets_by_id: Dict[str, Market] = {} # Key: venue market id (e.g. SHXUSD)
        self.currencies: Dict[str, Currency] = {}
        self.is_initialized = False

    @abstractmethod
    async def initialize(self):
        """Open the session and load necessary market data."""
        pass

    @abstractmethod
    async def close(self):
        """Cleanup resources (sessions)."""
        pass

    # --- Market Data ---

    @abstractmethod
    async def fetch_markets(self) -> Dict[str, Market]:
        """Fetch market rules (precision, minimum size) for all symbols."""
        pass

    @abstractmethod
    async def fetch_currencies(self) -> Dict[str, Currency]:
        pass

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """Fetch markets once and cache them by symbol and by venue id."""
        if self.markets and not reload:
            return self.markets
        self.markets = await self.fetch_markets()
        self.markets_by_id = index_markets(self.markets.values())
        return self.markets

    @abstractmethod
    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        """Fetch order book (bids/asks)."""
        pass

    @abstractmethod
    async def fetch_trades(self, symbol: str, since: Optional[int] = None, limit: Optional[int] = None) -> List[Trade]:
        """Fetch the public trade feed."""
        pass

    # --- Account ---

    @abstractmethod
    async def fetch_balance(self) -> Dict[str, Balance]:
        """Fetch account balances key by currency."""
        pass

    @abstractmethod
    async def fetch_my_trades(self, symbol: Optional[str] = None, since: Optional[int] = None,
                              limit: Optional[int] = None) -> List[Trade]:
        pass

    async def fetch_transactions(self, code: Optional[str] = None, since: Optional[int] = None,
                                 limit: Optional[int] = None) -> List[Transaction]:
        raise NotImplementedError("fetch_transactions not implemented")

    async def create_deposit_address(self, code: str) -> DepositAddress:
        raise NotImplementedError("create_deposit_address not implemented")

    async def withdraw(self, code: str, amount: Number, address: str, tag: Optional[str] = None) -> Transaction:
        raise NotImplementedError("withdraw not implemented")

    # --- Trading ---

    @abstractmethod
    async def create_order(
        self,
        symbol: str,
        type: OrderType,
        side: OrderSide,
        amount: Number,
        price: Optional[Number] = None,
        params: Optional[Dict] = None
    ) -> Order:
        """
        Create a new order.
        type: MARKET or LIMIT
        side: BUY or SELL
        amount: Quantity in Base Asset
        price: Limit Price (required for LIMIT)
        params: Extra request fields
        """
        pass

    @abstractmethod
    async def cancel_order(self, id: str, symbol: Optional[str] = None) -> bool:
        """Cancel an order by ID."""
        pass

    @abstractmethod
    async def fetch_open_orders(self, symbol: Optional[str] = None, since: Optional[int] = None,
                                limit: Optional[int] = None) -> List[Order]:
        """Fetch all open orders."""
        pass

    # --- Utils ---

    def market(self, symbol: str) -> Market:
        """Helper to get market info from cache."""
        if symbol not in self.markets:
            raise BadSymbol(f"Market {symbol} not loaded or invalid.")
        return self.markets[symbol]

    def currency(self, code: str) -> Currency:
        if code not in self.currencies:
            raise BadSymbol(f"Currency {code} not loaded or invalid.")
        return self.currencies[code]
