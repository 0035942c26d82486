import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional

from .errors import ParseError

# Venue asset ids look like "SHX/stronghold.co" or "XLM/native".
ASSET_ID_SEPARATOR = '/'

COMMON_CURRENCIES: Dict[str, str] = {
    'XBT': 'BTC',
    'BCC': 'BCH',
    'DRK': 'DASH',
    'BCHABC': 'BCH',
    'BCHSV': 'BSV',
}

_ISO8601 = re.compile(
    r'^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2})'
    r'(?:\.(?P<frac>\d+))?'
    r'(?P<tz>Z|[+-]\d{2}:?\d{2})?$'
)


def common_currency_code(currency_id: str, aliases: Optional[Mapping[str, str]] = None) -> str:
    """Map a venue currency id onto the code the unified client uses."""
    aliases = COMMON_CURRENCIES if aliases is None else aliases
    code = currency_id.upper()
    return aliases.get(code, code)


def asset_code(asset_id: str) -> str:
    """Leading segment of a venue asset id, canonicalised."""
    return common_currency_code(asset_id.split(ASSET_ID_SEPARATOR, 1)[0])


def safe_value(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        value = obj.get(key)
        if value is not None:
            return value
    return default


def safe_string(obj: Any, key: str, default: Optional[str] = None) -> Optional[str]:
    value = safe_value(obj, key)
    if value is None:
        return default
    return str(value)


def to_decimal(value: Any, name: str = 'value') -> Decimal:
    """Strict numeric parse. Garbage raises ParseError instead of becoming zero."""
    if isinstance(value, bool) or value is None:
        raise ParseError(f"{name}: expected a number, got {value!r}")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ParseError(f"{name}: cannot parse {value!r} as a number") from e
    if not result.is_finite():
        raise ParseError(f"{name}: {value!r} is not finite")
    return result


def safe_decimal(obj: Any, key: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Absent -> default; present but malformed -> ParseError."""
    value = safe_value(obj, key)
    if value is None or value == '':
        return default
    return to_decimal(value, key)


def safe_integer(obj: Any, key: str, default: Optional[int] = None) -> Optional[int]:
    value = safe_value(obj, key)
    if value is None or value == '':
        return default
    number = to_decimal(value, key)
    if number != number.to_integral_value():
        raise ParseError(f"{key}: expected an integer, got {value!r}")
    return int(number)


def parse8601(value: Optional[str]) -> Optional[int]:
    """ISO-8601 string to epoch milliseconds. None passes through."""
    if value is None:
        return None
    match = _ISO8601.match(str(value).strip())
    if not match:
        raise ParseError(f"cannot parse {value!r} as an ISO-8601 timestamp")
    frac = (match.group('frac') or '')[:6].ljust(6, '0')
    tz = match.group('tz') or 'Z'
    if tz == 'Z':
        tz = '+00:00'
    elif ':' not in tz:
        tz = tz[:3] + ':' + tz[3:]
    try:
        dt = datetime.fromisoformat(f"{match.group('base').replace(' ', 'T')}.{frac}{tz}")
    except ValueError as e:
        raise ParseError(f"cannot parse {value!r} as an ISO-8601 timestamp") from e
    delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def iso8601(timestamp: Optional[int]) -> Optional[str]:
    if timestamp is None:
        return None
    dt = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{timestamp % 1000:03d}Z"


def decimal_to_precision(value: Any, digits: Optional[int], truncate: bool = False) -> str:
    """Format a number with ``digits`` decimals; amounts are truncated, prices rounded."""
    number = to_decimal(value)
    if digits is None:
        return format(number.normalize(), 'f')
    exp = Decimal(1).scaleb(-digits)
    rounding = ROUND_DOWN if truncate else ROUND_HALF_UP
    return format(number.quantize(exp, rounding=rounding), 'f')
