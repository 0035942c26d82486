from decimal import Decimal

import pytest

from stronghold_lib.config import Credentials, VenueConfig, VenueSelector
from stronghold_lib.errors import ParseError
from stronghold_lib.utils import (
    asset_code, common_currency_code, decimal_to_precision, iso8601, parse8601,
    safe_decimal, safe_integer, to_decimal,
)


class TestTimestamps:
    @pytest.mark.parametrize("value,expected", [
        ("2019-01-27T23:02:04Z", 1548630124000),
        ("2019-01-27T23:02:04.5Z", 1548630124500),
        ("2019-01-27T23:02:04.123456789Z", 1548630124123),
        ("2019-01-28T00:02:04+01:00", 1548630124000),
        ("2019-01-27T23:02:04", 1548630124000),
    ])
    def test_parse8601(self, value, expected):
        assert parse8601(value) == expected

    def test_none_passes_through(self):
        assert parse8601(None) is None
        assert iso8601(None) is None

    @pytest.mark.parametrize("value", ["", "1548630124", "2019-13-01T00:00:00Z", "soon"])
    def test_bad_timestamps(self, value):
        with pytest.raises(ParseError):
            parse8601(value)

    def test_iso8601(self):
        assert iso8601(1548630124500) == "2019-01-27T23:02:04.500Z"


class TestNumbers:
    def test_to_decimal(self):
        assert to_decimal("0.10440600") == Decimal("0.104406")
        assert to_decimal(3) == Decimal(3)

    @pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "Infinity"])
    def test_to_decimal_rejects(self, value):
        with pytest.raises(ParseError):
            to_decimal(value)

    def test_safe_accessors(self):
        entry = {"a": "1.5", "b": None, "c": "4", "d": "4.5"}
        assert safe_decimal(entry, "a") == Decimal("1.5")
        assert safe_decimal(entry, "b", Decimal(0)) == Decimal(0)
        assert safe_decimal(entry, "missing") is None
        assert safe_integer(entry, "c") == 4
        with pytest.raises(ParseError):
            safe_integer(entry, "d")

    @pytest.mark.parametrize("value,digits,truncate,expected", [
        ("1.23456", 2, True, "1.23"),
        ("1.235", 2, False, "1.24"),
        ("5", 0, True, "5"),
        ("0.000100", None, False, "0.0001"),
        ("10", None, False, "10"),
    ])
    def test_decimal_to_precision(self, value, digits, truncate, expected):
        assert decimal_to_precision(value, digits, truncate) == expected


class TestCurrencyCodes:
    def test_aliases(self):
        assert common_currency_code("xbt") == "BTC"
        assert common_currency_code("SHX") == "SHX"
        assert common_currency_code("XBT", aliases={}) == "XBT"

    def test_asset_code_uses_leading_segment(self):
        assert asset_code("SHX/stronghold.co") == "SHX"
        assert asset_code("XLM/native") == "XLM"
        assert asset_code("ETH") == "ETH"


class TestConfig:
    def test_defaults(self):
        cfg = VenueConfig.from_dict({})
        assert cfg.venue_id == "trade-public"
        assert cfg.sandbox_venue_id == "sandbox-public"
        assert cfg.account_id is None
        assert cfg.payment_methods == {"ETH": "ethereum", "BTC": "bitcoin", "XLM": "stellar"}

    def test_venue_config_is_immutable(self):
        cfg = VenueConfig()
        with pytest.raises(Exception):
            cfg.venue_id = "other"

    def test_selector_round_trip(self):
        selector = VenueSelector(VenueConfig(venue_id="live", sandbox_venue_id="sand"))
        selector.set_sandbox_mode(True)
        selector.set_sandbox_mode(True)
        assert selector.active == "sand"
        assert selector.backup == "live"
        selector.set_sandbox_mode(False)
        assert selector.active == "live"
        assert not selector.sandbox

    def test_disable_without_enable_is_noop(self):
        selector = VenueSelector(VenueConfig())
        selector.set_sandbox_mode(False)
        assert selector.active == "trade-public"

    def test_credentials_missing(self):
        assert Credentials(api_key="k").missing() == ["secret", "password"]
        assert Credentials("k", "s", "p").missing() == []
