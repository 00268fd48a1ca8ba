import pytest

from common.cookies import (CredentialContext, is_valid_party_cookie, mask, parse_cookie,
                            steam_id_from_cookie, validate_party_cookie)
from common.errors import InvalidCookieError, MissingTokenError


def test_extract_csrf_token():
    ctx = CredentialContext("a=1; csrf_token=XYZ; b=2")
    assert ctx.extract_csrf_token() == "XYZ"
    assert ctx.csrf_token == "XYZ"


def test_missing_csrf_token():
    ctx = CredentialContext("a=1; session=abc")
    assert ctx.csrf_token is None
    with pytest.raises(MissingTokenError):
        ctx.extract_csrf_token()


def test_empty_csrf_token_counts_as_missing():
    assert CredentialContext("csrf_token=; a=1").csrf_token is None


def test_parse_cookie_keeps_first_and_skips_junk():
    parsed = parse_cookie(" a=1 ;junk; b = x=y ; a=2;")
    assert parsed == {"a": "1", "b": "x=y"}


def test_repr_hides_cookie():
    ctx = CredentialContext("csrf_token=SECRETSECRETSECRET")
    assert "SECRETSECRETSECRET" not in repr(ctx)


def test_context_is_read_only():
    ctx = CredentialContext("csrf_token=XYZ")
    with pytest.raises(AttributeError):
        ctx.raw_cookie = "other"


@pytest.mark.parametrize("cookie", [
    "",
    "sessionid=abc; browserid=1",
    "steamLoginSecure=76561199502763263token123",
    "steamLoginSecure=76561199502763263||token123",
])
def test_invalid_party_cookies(cookie):
    assert is_valid_party_cookie(cookie) is False
    with pytest.raises(InvalidCookieError):
        validate_party_cookie(cookie)


def test_valid_party_cookie():
    cookie = "steamLoginSecure=76561199502763263%7C%7Ctoken123"
    assert is_valid_party_cookie(cookie) is True
    assert validate_party_cookie(cookie) == "76561199502763263%7C%7Ctoken123"


def test_missing_key_reason():
    with pytest.raises(InvalidCookieError, match="missing"):
        validate_party_cookie("sessionid=abc")


def test_steam_id_from_cookie():
    assert steam_id_from_cookie("a=1; steamLoginSecure=76561199502763263%7C%7Ctok") == "76561199502763263"
    assert steam_id_from_cookie("a=1") is None


def test_mask():
    assert mask(None) == "<empty>"
    assert mask("abc") == "***"
    assert mask("abcdefghijkl").startswith("abcdef...")
    assert "ghijkl" not in mask("abcdefghijkl")
