import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from dotenv import load_dotenv

logger = logging.getLogger("StrongholdLib.Config")

DEFAULT_BASE_URL = 'https://api.stronghold.co'
DEFAULT_VENUE_ID = 'trade-public'
DEFAULT_SANDBOX_VENUE_ID = 'sandbox-public'

DEFAULT_PAYMENT_METHODS = {
    'ETH': 'ethereum',
    'BTC': 'bitcoin',
    'XLM': 'stellar',
}


def load_env(env_path: Optional[Path] = None) -> bool:
    """Load STRONGHOLD_* variables from a .env file (cwd lookup when no path)."""
    return load_dotenv(env_path) if env_path else load_dotenv()


@dataclass(frozen=True)
class Credentials:
    api_key: Optional[str] = None
    secret: Optional[str] = None # base64 encoded
    password: Optional[str] = None # passphrase

    def missing(self) -> List[str]:
        return [name for name in ('api_key', 'secret', 'password') if not getattr(self, name)]

    @classmethod
    def from_env(cls) -> "Credentials":
        return cls(
            api_key=os.getenv("STRONGHOLD_API_KEY"),
            secret=os.getenv("STRONGHOLD_SECRET"),
            password=os.getenv("STRONGHOLD_PASSPHRASE"),
        )

    def __repr__(self) -> str:
        # never print the secret or passphrase
        return f"Credentials(api_key={self.api_key!r}, secret=***, password=***)"


@dataclass(frozen=True)
class VenueConfig:
    """Static connector settings, read from the adapter's config dict."""
    base_url: str = DEFAULT_BASE_URL
    version: str = 'v1'
    venue_id: str = DEFAULT_VENUE_ID
    sandbox_venue_id: str = DEFAULT_SANDBOX_VENUE_ID
    account_id: Optional[str] = None
    timeout: float = 10.0
    payment_methods: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PAYMENT_METHODS))

    @classmethod
    def from_dict(cls, config: Optional[Dict[str, Any]] = None) -> "VenueConfig":
        cfg = config or {}
        return cls(
            base_url=cfg.get('base_url') or DEFAULT_BASE_URL,
            venue_id=cfg.get('venue_id') or DEFAULT_VENUE_ID,
            sandbox_venue_id=cfg.get('sandbox_venue_id') or DEFAULT_SANDBOX_VENUE_ID,
            account_id=cfg.get('account_id') or os.getenv("STRONGHOLD_ACCOUNT_ID"),
            timeout=float(cfg.get('timeout', 10.0)),
            payment_methods=dict(cfg.get('payment_methods') or DEFAULT_PAYMENT_METHODS),
        )


class VenueSelector:
    """
    Owner of the active venue id.

    Enabling sandbox mode saves the live venue in a backup slot and switches to
    the sandbox venue; disabling restores the saved value. The lock is shared
    with request signing so a swap never lands in the middle of a request build.
    """
    def __init__(self, config: VenueConfig):
        self._config = config
        self._active = config.venue_id
        self._backup: Optional[str] = None
        self._lock = threading.RLock()

    @property
    def active(self) -> str:
        with self._lock:
            return self._active

    @property
    def backup(self) -> Optional[str]:
        with self._lock:
            return self._backup

    @property
    def sandbox(self) -> bool:
        with self._lock:
            return self._backup is not None

    @contextmanager
    def locked(self) -> Iterator[str]:
        with self._lock:
            yield self._active

    def set_sandbox_mode(self, enabled: bool):
        with self._lock:
            if enabled:
                if self._backup is None:
                    self._backup = self._active
                self._active = self._config.sandbox_venue_id
            elif self._backup is not None:
                self._active = self._backup
                self._backup = None
            logger.info(f"Active venue: {self._active} (sandbox={enabled})")
