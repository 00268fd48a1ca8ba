import json
from typing import Any, Dict, Optional

import requests

from common.errors import TransportError

ENC = "utf-8"   # encoding for JSON text


def send_json(url: str, obj: dict, headers: Dict[str, str], timeout: Optional[float] = None) -> dict:
    '''
    The function POSTs an object as a JSON body and returns the decoded JSON reply.
    Inputs:
        - url: endpoint URL
        - obj: dict - the object to be sent
        - headers: request headers
        - timeout: seconds before giving up (None waits forever)
    Output: dict - the JSON object returned by the server
    Exactly one request is made; failures raise TransportError.
    '''
    data = json.dumps(obj, ensure_ascii=False).encode(ENC)
    try:
        resp = requests.post(url, data=data, headers=headers, timeout=timeout)
    except (requests.RequestException, ValueError) as e:
        # ValueError covers header values http.client cannot encode as latin-1
        raise TransportError(f"POST {url} failed: {e}") from e
    return _decode(resp, "POST", url)

def recv_json(url: str, params: Dict[str, Any], headers: Dict[str, str],
              timeout: Optional[float] = None) -> dict:
    '''
    The function GETs a URL with query parameters and returns the decoded JSON reply.
    Inputs:
        - url: endpoint URL
        - params: query string parameters
        - headers: request headers
        - timeout: seconds before giving up (None waits forever)
    Output: dict - the JSON object returned by the server
    '''
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout)
    except (requests.RequestException, ValueError) as e:
        raise TransportError(f"GET {url} failed: {e}") from e
    return _decode(resp, "GET", url)

def _decode(resp, method: str, url: str) -> dict:
    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        raise TransportError(f"{method} {url} returned HTTP {resp.status_code}",
                             {"status": resp.status_code}) from e
    try:
        body = resp.json()
    except ValueError as e:
        raise TransportError(f"{method} {url} returned a non-JSON body") from e
    if not isinstance(body, dict):
        raise TransportError(f"{method} {url} returned {type(body).__name__}, expected an object")
    return body
