"""
End-to-end "send Steam offer" workflow for one order.

    INIT -> SUBMITTING -> SUBMITTED -> POLLING -> RESOLVED
                 \\
                  -> SUBMIT_FAILED

Exactly one submission and one status check per run; nothing is retried.
Every run ends in an OfferOutcome, errors included. A failed status check
after an accepted submission still counts as success.
"""
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Optional, Sequence

from common.cookies import CredentialContext
from common.errors import StatusQueryError, SubmissionError
from common.log import get_logger
from common.messages import OfferOutcome, Order

from .net import OfferSubmitter, OrderStatusPoller

log = get_logger(__name__)

MSG_SENT = "offer sent"
MSG_PENDING = "accepted, pending"
MSG_FAILED = "offer failed"


class OfferState(Enum):
    INIT = "init"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    POLLING = "polling"
    RESOLVED = "resolved"
    SUBMIT_FAILED = "submit_failed"


StateCallback = Callable[[Order, OfferState], None]


class OfferOrchestrator:
    ''' Drives submit -> poll -> resolve. Holds no per-order state, so one instance can serve many threads. '''
    def __init__(self, ctx: CredentialContext,
                 submitter: Optional[OfferSubmitter] = None,
                 poller: Optional[OrderStatusPoller] = None,
                 on_state: Optional[StateCallback] = None):
        self.ctx = ctx
        self.submitter = submitter or OfferSubmitter()
        self.poller = poller or OrderStatusPoller()
        self.on_state = on_state

    def _enter(self, order: Order, state: OfferState) -> OfferState:
        log.debug("order %s -> %s", order.order_id, state.name)
        if self.on_state:
            self.on_state(order, state)
        return state

    def send_offer(self, order: Order, party_cookie: str) -> OfferOutcome:
        '''
        Run the workflow for one order.
        Input:
            - order: order id and seller steam id
            - party_cookie: the seller's Steam login cookie (plaintext)
        Output: OfferOutcome; never raises for submission or status errors
        '''
        self._enter(order, OfferState.INIT)
        # Step 1: submit once; any failure here ends the run
        self._enter(order, OfferState.SUBMITTING)
        try:
            self.submitter.submit(order, party_cookie, self.ctx)
        except SubmissionError as e:
            self._enter(order, OfferState.SUBMIT_FAILED)
            log.error("order %s: offer failed: %s", order.order_id, e)
            return OfferOutcome(success=False, order_id=order.order_id, message=MSG_FAILED,
                                error=str(e), details={"kind": type(e).__name__, **e.details})

        # Step 2: the offer is placed; one status check for the trade offer id
        self._enter(order, OfferState.SUBMITTED)
        self._enter(order, OfferState.POLLING)
        try:
            snapshot = self.poller.fetch_status(order.order_id, self.ctx)
        except StatusQueryError as e:
            self._enter(order, OfferState.RESOLVED)
            log.warning("order %s: offer accepted but status check failed: %s", order.order_id, e)
            return OfferOutcome(success=True, order_id=order.order_id, message=MSG_PENDING,
                                error=str(e), details={"kind": type(e).__name__, **e.details})

        self._enter(order, OfferState.RESOLVED)
        trade_offer_id = snapshot.trade_offer_id
        if trade_offer_id is None:   # Steam has not created the offer yet
            log.info("order %s: offer accepted, trade offer not created yet", order.order_id)
            return OfferOutcome(success=True, order_id=order.order_id, message=MSG_PENDING)

        log.info("order %s: steam trade offer %s", order.order_id, trade_offer_id)
        return OfferOutcome(success=True, order_id=order.order_id, message=MSG_SENT,
                            trade_offer_id=trade_offer_id)

    def send_offers(self, orders: Sequence[Order], party_cookie: str,
                    max_workers: int = 4) -> List[OfferOutcome]:
        '''
        Run send_offer for several distinct orders on a thread pool.
        Output: outcomes in the same order as the input
        '''
        if not orders:
            return []
        workers = max(1, min(max_workers, len(orders)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="order") as pool:
            return list(pool.map(lambda o: self.send_offer(o, party_cookie), orders))
