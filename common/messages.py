from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

OK = "OK"   # success sentinel used by every marketplace endpoint


@dataclass(frozen=True)
class Order:
    order_id: str          # marketplace bill order id, e.g. "250901T3544557626"
    seller_steam_id: str   # seller's 64-bit steam id


@dataclass(frozen=True)
class StatusItem:
    tradeofferid: Optional[str] = None


@dataclass(frozen=True)
class OrderStatusSnapshot:
    code: str
    items: Tuple[StatusItem, ...] = ()

    @property
    def trade_offer_id(self) -> Optional[str]:
        ''' Trade offer id of the first item, or None while Steam hasn't created it yet '''
        if not self.items:
            return None
        return self.items[0].tradeofferid or None

    @classmethod
    def from_json(cls, body: Dict[str, Any]) -> "OrderStatusSnapshot":
        data = body.get("data")
        raw_items = data.get("items") if isinstance(data, dict) else None
        items = []
        for raw in raw_items if isinstance(raw_items, list) else []:
            tid = raw.get("tradeofferid") if isinstance(raw, dict) else None
            items.append(StatusItem(tradeofferid=str(tid) if tid else None))
        return cls(code=str(body.get("code", "")), items=tuple(items))


@dataclass(frozen=True)
class OfferOutcome:
    success: bool
    order_id: str
    message: str
    trade_offer_id: Optional[str] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        ''' JSON shape printed by the CLI; absent fields are left out '''
        out: Dict[str, Any] = {"success": self.success, "orderId": self.order_id}
        if self.trade_offer_id is not None:
            out["tradeOfferId"] = self.trade_offer_id
        out["message"] = self.message
        if self.error is not None:
            out["error"] = self.error
        return out
