import json

import pytest

from stronghold_lib.classifier import Envelope, classify_response
from stronghold_lib.errors import (
    ERROR_CODES, EXCEPTIONS_BY_KIND, AuthenticationError, ErrorKind, ExchangeError,
    InsufficientFunds, InvalidNonce,
)


def classify(response):
    return classify_response(json.dumps(response), response)


def test_success_passes_through():
    response = {
        "requestId": "3e7d17ab-b316-4721-b5aa-f7e6497eeab9",
        "timestamp": "2019-01-31T21:59:06.696855Z",
        "success": True,
        "statusCode": 200,
        "result": [],
    }
    env = classify(response)
    assert isinstance(env, Envelope)
    assert env.success is True
    assert env.status_code == 200
    assert env.request_id == "3e7d17ab-b316-4721-b5aa-f7e6497eeab9"
    assert env.timestamp == "2019-01-31T21:59:06.696855Z"
    assert env.result == []
    assert env.error_code is None


def test_minimal_success_envelope():
    env = classify({"success": True, "statusCode": 200, "result": []})
    assert env.result == []


def test_insufficient_funds():
    with pytest.raises(InsufficientFunds) as info:
        classify({"success": False, "statusCode": 400, "errorCode": "INSUFFICIENT_FUNDS"})
    assert info.value.code == "INSUFFICIENT_FUNDS"
    assert info.value.kind is ErrorKind.INSUFFICIENT_FUNDS
    assert "INSUFFICIENT_FUNDS" in info.value.body
    assert str(info.value).startswith("stronghold ")


def test_unknown_code_is_generic():
    with pytest.raises(ExchangeError) as info:
        classify({"success": False, "statusCode": 400, "errorCode": "UNKNOWN_X"})
    assert type(info.value) is ExchangeError
    assert info.value.kind is ErrorKind.VENUE
    assert info.value.code == "UNKNOWN_X"


def test_failure_without_code_is_generic():
    with pytest.raises(ExchangeError) as info:
        classify({"success": False})
    assert type(info.value) is ExchangeError


def test_missing_success_flag_counts_as_failure():
    with pytest.raises(ExchangeError):
        classify({"statusCode": 200, "result": []})


def test_known_code_wins_over_success_flag():
    with pytest.raises(AuthenticationError):
        classify({"success": True, "statusCode": 200, "errorCode": "SIGNATURE_INVALID"})


def test_time_invalid_is_distinct_from_auth():
    with pytest.raises(InvalidNonce) as info:
        classify({"success": False, "statusCode": 401, "errorCode": "TIME_INVALID"})
    assert not isinstance(info.value, AuthenticationError)


@pytest.mark.parametrize("code", [
    "CREDENTIAL_MISSING",
    "CREDENTIAL_INVALID",
    "CREDENTIAL_REVOKED",
    "CREDENTIAL_NO_IDENTITY",
    "PASSPHRASE_INVALID",
    "SIGNATURE_INVALID",
    "BYPASS_INVALID",
])
def test_authentication_codes(code):
    with pytest.raises(AuthenticationError):
        classify({"success": False, "statusCode": 401, "errorCode": code})


def test_error_table_is_closed():
    assert set(ERROR_CODES) == {
        "CREDENTIAL_MISSING", "CREDENTIAL_INVALID", "CREDENTIAL_REVOKED",
        "CREDENTIAL_NO_IDENTITY", "PASSPHRASE_INVALID", "SIGNATURE_INVALID",
        "TIME_INVALID", "BYPASS_INVALID", "INSUFFICIENT_FUNDS",
    }
    for kind in ErrorKind:
        assert EXCEPTIONS_BY_KIND[kind].kind is kind


def test_undecodable_body_is_not_classified():
    assert classify_response("", None) is None
    assert classify_response("<html>Bad Gateway</html>", None) is None


@pytest.mark.parametrize("response", [{}, [], "text", 0])
def test_decoded_non_envelope_is_generic(response):
    with pytest.raises(ExchangeError) as info:
        classify_response(json.dumps(response), response)
    assert type(info.value) is ExchangeError
    assert info.value.kind is ErrorKind.VENUE
