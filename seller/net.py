from typing import Dict, Optional

from common import config
from common.cookies import CredentialContext, mask, validate_party_cookie
from common.crypto import BUFF_PUBLIC_KEY, PublicKeyLike, seal
from common.errors import StatusQueryError, SubmissionRejectedError, TransportError
from common.log import get_logger
from common.messages import OK, Order, OrderStatusSnapshot
from common.protocol import recv_json, send_json

log = get_logger(__name__)

USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
              "(KHTML, like Gecko) Chrome/105.0.0.0 Safari/537.36")


def base_headers(ctx: CredentialContext, csrf_token: Optional[str], base_url: str,
                 seller_steam_id: Optional[str] = None) -> Dict[str, str]:
    ''' Headers every marketplace call needs: session cookie, CSRF token and a sell-page referer '''
    referer = f"{base_url}/market/sell_order/create?game=csgo"
    if seller_steam_id:
        referer += f"&steamid={seller_steam_id}"
    headers = {
        "User-Agent": USER_AGENT,
        "X-Requested-With": "XMLHttpRequest",
        "Referer": referer,
        "Cookie": ctx.raw_cookie,
    }
    if csrf_token:
        headers["X-CSRFToken"] = csrf_token
    return headers


class OfferSubmitter:
    ''' Sends the "seller sends Steam offer" request for one order '''
    def __init__(self, base_url: str = config.BASE_URL,
                 public_key: PublicKeyLike = BUFF_PUBLIC_KEY,
                 timeout: Optional[float] = config.TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.public_key = public_key
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.base_url + config.SEND_OFFER_PATH

    def build_body(self, order: Order, party_cookie: str) -> dict:
        '''
        This function checks the Steam cookie and seals it into the request body.
        Input:
            - order: the order being fulfilled
            - party_cookie: the seller's Steam login cookie, in plaintext
        Output: dict ready to be sent as JSON
        '''
        validate_party_cookie(party_cookie)
        # field names are the ones the live endpoint reads
        return {
            "seller_info": seal(party_cookie, self.public_key),
            "bill_orders": [order.order_id],   # endpoint takes a batch; always one order here
            "steamid": order.seller_steam_id,
        }

    def submit(self, order: Order, party_cookie: str, ctx: CredentialContext) -> dict:
        '''
        This function submits one offer.
        Input:
            - order: order id and seller steam id
            - party_cookie: Steam login cookie to seal and send
            - ctx: seller's marketplace session
        Output: the server's JSON reply (code == "OK")
        Raises MissingTokenError, InvalidCookieError, EncryptionError before any
        network call; TransportError or SubmissionRejectedError after it.
        '''
        # CSRF token first: no token, no request
        csrf_token = ctx.extract_csrf_token()
        # Check the Steam cookie and seal it with the marketplace key
        body = self.build_body(order, party_cookie)

        # Same session headers as the sell page, plus JSON content headers
        headers = base_headers(ctx, csrf_token, self.base_url, order.seller_steam_id)
        headers["Content-Type"] = "application/json"
        headers["Accept"] = "application/json"

        log.info("sending offer for order %s (csrf %s)", order.order_id, mask(csrf_token))
        reply = send_json(self.url, body, headers, timeout=self.timeout)

        # Anything but "OK" is a rejection; msg carries the reason
        code = str(reply.get("code", ""))
        if code != OK:
            msg = reply.get("msg") or "unknown error"
            log.warning("order %s rejected: code=%s msg=%s", order.order_id, code, msg)
            raise SubmissionRejectedError(code, str(msg))
        log.info("order %s accepted", order.order_id)
        return reply


class OrderStatusPoller:
    ''' Reads an order's state to learn the Steam trade offer id '''
    def __init__(self, base_url: str = config.BASE_URL,
                 timeout: Optional[float] = config.TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.base_url + config.ORDER_STATUS_PATH

    def fetch_status(self, order_id: str, ctx: CredentialContext) -> OrderStatusSnapshot:
        '''
        This function queries the order once.
        Input:
            - order_id: bill order id
            - ctx: seller's marketplace session
        Output: OrderStatusSnapshot; its trade_offer_id is None while Steam hasn't
        created the offer yet, which is not an error
        Raises StatusQueryError on transport failure or a non-OK code.
        '''
        headers = base_headers(ctx, ctx.csrf_token, self.base_url)
        # One GET; a transport failure is reported, never fatal to the caller
        try:
            reply = recv_json(self.url, {"bill_orders": order_id}, headers, timeout=self.timeout)
        except TransportError as e:
            raise StatusQueryError(f"order status query failed: {e}", e.details) from e

        snapshot = OrderStatusSnapshot.from_json(reply)
        if snapshot.code != OK:
            msg = reply.get("msg") or "unknown error"
            raise StatusQueryError(f"order status query returned {snapshot.code}: {msg}",
                                   {"code": snapshot.code})
        log.debug("order %s status: %d item(s), trade offer %s",
                  order_id, len(snapshot.items), snapshot.trade_offer_id)
        return snapshot
