from unittest.mock import MagicMock

import pytest

from common import protocol
from common.cookies import CredentialContext
from common.crypto import rsa_generate

BUFF_COOKIE = ("Device-Id=J2RIEoaJAQot7YGwdspm; session=1-abc; game=csgo; "
               "csrf_token=ImExOWRlZjZi.aLVbcg.-sApbuRoHA20vcCW")
STEAM_COOKIE = ("steamLoginSecure=76561199502763263%7C%7CeyAidHlwIjogIkpXVCJ9.token123; "
                "browserid=46845232153325394; sessionid=764b0d66a344a201b30fcc71")
SELLER_ID = "76561199502763263"


def json_response(body, status=200):
    ''' MagicMock standing in for a requests.Response '''
    resp = MagicMock()
    resp.status_code = status
    resp.raise_for_status.return_value = None
    resp.json.return_value = body
    return resp


class FakeHttp:
    ''' Records every call and answers with queued responses (or raises queued exceptions) '''
    def __init__(self):
        self.posts = []
        self.gets = []
        self.post_replies = []
        self.get_replies = []

    @staticmethod
    def _next(replies):
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply if isinstance(reply, MagicMock) else json_response(reply)

    @staticmethod
    def _send_headers(headers):
        # http.client encodes header values as latin-1 before anything goes out
        for value in (headers or {}).values():
            value.encode("latin-1")

    def post(self, url, data=None, headers=None, timeout=None, **kwargs):
        self._send_headers(headers)
        self.posts.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        return self._next(self.post_replies)

    def get(self, url, params=None, headers=None, timeout=None, **kwargs):
        self._send_headers(headers)
        self.gets.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return self._next(self.get_replies)


@pytest.fixture
def http(monkeypatch):
    fake = FakeHttp()
    monkeypatch.setattr(protocol.requests, "post", fake.post)
    monkeypatch.setattr(protocol.requests, "get", fake.get)
    return fake


@pytest.fixture(scope="session")
def rsa_key():
    return rsa_generate(2048)


@pytest.fixture
def ctx():
    return CredentialContext(BUFF_COOKIE)
