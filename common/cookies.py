from dataclasses import dataclass, field
from typing import Dict, Optional

from common.errors import InvalidCookieError, MissingTokenError

CSRF_KEY = "csrf_token"
STEAM_LOGIN_KEY = "steamLoginSecure"
STEAM_DELIM = "%7C%7C"   # url-encoded "||" between steam id and signed token


def parse_cookie(raw: str) -> Dict[str, str]:
    '''
    This function splits a cookie header string into its key=value pairs.
    Input:
        - raw: cookie string such as "a=1; csrf_token=XYZ; b=2"
    Output: dict of cookie values; the first occurrence of a key wins
    '''
    pairs: Dict[str, str] = {}
    for part in (raw or "").split(";"):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip()
        if key and key not in pairs:
            pairs[key] = value.strip()
    return pairs


def mask(secret: Optional[str], keep: int = 6) -> str:
    ''' This function hides all but the first few characters of a secret for logging '''
    if not secret:
        return "<empty>"
    if len(secret) <= keep:
        return "*" * len(secret)
    return secret[:keep] + "..." + f"({len(secret)} chars)"


@dataclass(frozen=True)
class CredentialContext:
    '''
    Read-only holder of the seller's marketplace session cookie.
    Safe to share between threads working on different orders.
    '''
    raw_cookie: str = field(repr=False)

    def get(self, name: str) -> Optional[str]:
        return parse_cookie(self.raw_cookie).get(name)

    @property
    def csrf_token(self) -> Optional[str]:
        ''' The csrf_token value, or None when the cookie has none '''
        return self.get(CSRF_KEY) or None

    def extract_csrf_token(self) -> str:
        token = self.csrf_token
        if token is None:
            raise MissingTokenError()
        return token

    def __repr__(self) -> str:
        return f"CredentialContext(raw_cookie={mask(self.raw_cookie)!r})"


def validate_party_cookie(cookie: str) -> str:
    '''
    This function checks the shape of a Steam login cookie before it is sealed and sent.
    It does not verify the token itself, only that steamLoginSecure exists and holds
    "<steamid>%7C%7C<token>".
    Input:
        - cookie: the party's cookie string
    Output: the steamLoginSecure value
    Raises InvalidCookieError with the reason when the shape is wrong.
    '''
    value = parse_cookie(cookie).get(STEAM_LOGIN_KEY)
    if value is None:
        raise InvalidCookieError("steamLoginSecure cookie is missing")
    if STEAM_DELIM not in value:
        raise InvalidCookieError("steamLoginSecure is malformed: missing %7C%7C delimiter")
    return value


def is_valid_party_cookie(cookie: str) -> bool:
    try:
        validate_party_cookie(cookie)
    except InvalidCookieError:
        return False
    return True


def steam_id_from_cookie(cookie: str) -> Optional[str]:
    ''' Steam id in front of the delimiter of steamLoginSecure, or None '''
    try:
        value = validate_party_cookie(cookie)
    except InvalidCookieError:
        return None
    steam_id = value.split(STEAM_DELIM, 1)[0]
    return steam_id or None
