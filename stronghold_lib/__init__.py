from .classifier import Envelope, classify_response
from .config import Credentials, VenueConfig, VenueSelector, load_env
from .errors import (
    ErrorKind, ExchangeError, NetworkError, AuthenticationError, InvalidNonce,
    InsufficientFunds, ParseError, ConfigurationError, ArgumentsRequired,
    NotSupported, BadSymbol,
)
from .exchanges.stronghold import StrongholdExchange
from .factory import ExchangeFactory, ExchangeType
from .models import (
    Market, MarketLimits, Currency, OrderBook, OrderBookLevel, Trade, Order,
    Balance, Transaction, DepositAddress, SignedRequest, OrderSide, OrderType,
    TakerOrMaker, TransactionType,
)
from .signer import NonceSource, RequestSigner

__version__ = "0.1.0"
