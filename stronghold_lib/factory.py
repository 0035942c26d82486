from enum import Enum
from typing import Dict, Any, Optional

from .exchanges.stronghold import StrongholdExchange
from .base import AbstractExchange as ExchangeBase
from .config import Credentials
from .signer import NonceSource

class ExchangeType(Enum):
    STRONGHOLD = "STRONGHOLD"

class ExchangeFactory:
    @staticmethod
    def create_exchange(exchange_type: ExchangeType, config: Optional[Dict[str, Any]] = None,
                        nonce_source: Optional[NonceSource] = None) -> ExchangeBase:
        """
        Factory method to create exchange instances.

        Args:
            exchange_type (ExchangeType): Type of exchange (STRONGHOLD)
            config (Dict): Configuration dictionary (credentials, account_id, sandbox, ...)
            nonce_source (NonceSource): Override; by default adapters sharing an
                api key share one source

        Returns:
            ExchangeBase: Instance of the exchange
        """
        if config is None:
            config = {}

        if exchange_type == ExchangeType.STRONGHOLD:
            return StrongholdExchange(config, nonce_source=nonce_source)
        else:
            raise ValueError(f"Unknown exchange type: {exchange_type}")

    @staticmethod
    def from_env(exchange_type: ExchangeType = ExchangeType.STRONGHOLD,
                 nonce_source: Optional[NonceSource] = None, **overrides) -> ExchangeBase:
        """Build an exchange from STRONGHOLD_* environment variables."""
        creds = Credentials.from_env()
        config: Dict[str, Any] = {
            'api_key': creds.api_key,
            'secret': creds.secret,
            'password': creds.password,
        }
        config.update(overrides)
        return ExchangeFactory.create_exchange(exchange_type, config, nonce_source)
