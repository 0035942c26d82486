from enum import Enum
from typing import Dict, Optional, Type


class ErrorKind(Enum):
    AUTHENTICATION = 'authentication'
    INVALID_NONCE = 'invalid_nonce'
    INSUFFICIENT_FUNDS = 'insufficient_funds'
    VENUE = 'venue'
    TRANSPORT = 'transport'
    PARSE = 'parse'
    CONFIGURATION = 'configuration'
    ARGUMENTS_REQUIRED = 'arguments_required'
    NOT_SUPPORTED = 'not_supported'
    BAD_SYMBOL = 'bad_symbol'


class ExchangeError(Exception):
    """Base exception for all exchange related errors.

    Also raised as-is for venue failures that carry no recognized error code.
    """
    kind = ErrorKind.VENUE

    def __init__(self, message: str = "", code: Optional[str] = None, body: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.body = body

class NetworkError(ExchangeError):
    """Raised when a network error occurs or the body cannot be decoded."""
    kind = ErrorKind.TRANSPORT

class AuthenticationError(ExchangeError):
    """Raised when the credential, passphrase or signature is rejected."""
    kind = ErrorKind.AUTHENTICATION

class InvalidNonce(ExchangeError):
    """Raised when the venue rejects a stale or out-of-order timestamp."""
    kind = ErrorKind.INVALID_NONCE

class InsufficientFunds(ExchangeError):
    """Raised when balance is insufficient."""
    kind = ErrorKind.INSUFFICIENT_FUNDS

class ParseError(ExchangeError):
    """Raised when a numeric or date field of a response cannot be interpreted."""
    kind = ErrorKind.PARSE

class ConfigurationError(ExchangeError):
    """Raised when required credentials are missing."""
    kind = ErrorKind.CONFIGURATION

class ArgumentsRequired(ExchangeError):
    """Raised when a call is missing a required argument (e.g. account id)."""
    kind = ErrorKind.ARGUMENTS_REQUIRED

class NotSupported(ExchangeError):
    """Raised for operations the venue does not offer."""
    kind = ErrorKind.NOT_SUPPORTED

class BadSymbol(ExchangeError):
    """Raised when symbol is invalid or not supported."""
    kind = ErrorKind.BAD_SYMBOL


EXCEPTIONS_BY_KIND: Dict[ErrorKind, Type[ExchangeError]] = {
    cls.kind: cls
    for cls in (
        ExchangeError,
        NetworkError,
        AuthenticationError,
        InvalidNonce,
        InsufficientFunds,
        ParseError,
        ConfigurationError,
        ArgumentsRequired,
        NotSupported,
        BadSymbol,
    )
}

# Venue error codes. Anything not listed falls back to the success flag.
ERROR_CODES: Dict[str, ErrorKind] = {
    'CREDENTIAL_MISSING': ErrorKind.AUTHENTICATION,
    'CREDENTIAL_INVALID': ErrorKind.AUTHENTICATION,
    'CREDENTIAL_REVOKED': ErrorKind.AUTHENTICATION,
    'CREDENTIAL_NO_IDENTITY': ErrorKind.AUTHENTICATION,
    'PASSPHRASE_INVALID': ErrorKind.AUTHENTICATION,
    'SIGNATURE_INVALID': ErrorKind.AUTHENTICATION,
    'TIME_INVALID': ErrorKind.INVALID_NONCE,
    'BYPASS_INVALID': ErrorKind.AUTHENTICATION,
    'INSUFFICIENT_FUNDS': ErrorKind.INSUFFICIENT_FUNDS,
}
