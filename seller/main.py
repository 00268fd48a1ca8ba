"""
Command line entry point: send Steam offers for BUFF sell orders.

    python -m seller.main 250901T3544557626 --config config.json

Cookies come from --buff-cookie/--steam-cookie, BUFF_COOKIE/STEAM_COOKIE,
or config.json. One JSON outcome is printed per order.
"""
import argparse
import json
import sys
from typing import List, Optional

from common import config
from common.cookies import CredentialContext, steam_id_from_cookie
from common.errors import ConfigError
from common.log import get_logger, setup_logging
from common.messages import Order

from .net import OfferSubmitter, OrderStatusPoller
from .offer import OfferOrchestrator

log = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="buff-seller-offer",
                                 description="Send Steam trade offers for BUFF sell orders")
    ap.add_argument("order_ids", nargs="+", metavar="ORDER_ID", help="BUFF bill order id")
    ap.add_argument("--buff-cookie", help="BUFF session cookie (must contain csrf_token)")
    ap.add_argument("--steam-cookie", help="Steam cookie (must contain steamLoginSecure)")
    ap.add_argument("--seller-id", dest="seller_steam_id",
                    help="Seller steam id (default: taken from steamLoginSecure)")
    ap.add_argument("--config", default=config.CONFIG_FILE, help="JSON config file")
    ap.add_argument("--timeout", type=float, help="Seconds per request")
    ap.add_argument("--base-url", help="Marketplace base URL")
    ap.add_argument("--workers", type=int, default=1, help="Orders processed in parallel")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, resolve settings and run one workflow per order.

    Step 1: merge flags, environment and config file
    Step 2: check that both cookies are present
    Step 3: send the offers and print the outcomes
    """
    args = build_parser().parse_args(argv)
    overrides = {
        "buff_cookie": args.buff_cookie,
        "steam_cookie": args.steam_cookie,
        "seller_steam_id": args.seller_steam_id,
        "timeout": args.timeout,
        "base_url": args.base_url,
        "log_level": args.log_level,
    }
    try:
        settings = config.load_settings(args.config, overrides)
    except ConfigError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    setup_logging(settings.log_level)

    if not settings.buff_cookie:
        print("configuration error: no BUFF cookie (use --buff-cookie or BUFF_COOKIE)", file=sys.stderr)
        return EXIT_CONFIG
    if not settings.steam_cookie:
        print("configuration error: no Steam cookie (use --steam-cookie or STEAM_COOKIE)", file=sys.stderr)
        return EXIT_CONFIG

    seller_id = settings.seller_steam_id or steam_id_from_cookie(settings.steam_cookie)
    if not seller_id:
        print("configuration error: seller steam id unknown (use --seller-id)", file=sys.stderr)
        return EXIT_CONFIG

    ctx = CredentialContext(settings.buff_cookie)
    orchestrator = OfferOrchestrator(
        ctx,
        OfferSubmitter(settings.base_url, timeout=settings.timeout),
        OrderStatusPoller(settings.base_url, timeout=settings.timeout),
    )
    orders = [Order(order_id, seller_id) for order_id in args.order_ids]
    log.info("sending %d offer(s) as seller %s", len(orders), seller_id)
    outcomes = orchestrator.send_offers(orders, settings.steam_cookie, max_workers=args.workers)

    for outcome in outcomes:
        print(json.dumps(outcome.to_dict(), ensure_ascii=False))
    return EXIT_OK if all(o.success for o in outcomes) else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
