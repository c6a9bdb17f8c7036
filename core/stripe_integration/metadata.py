"""
Checkout session metadata.

Stripe metadata is a flat ``str → str`` map and is the only link between a
checkout session and our orders once the webhook arrives. ``CheckoutMetadata``
keeps it typed inside the code base; stringification happens only in
``to_stripe`` / ``from_stripe``.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from core.exceptions import InvalidMetadata


@dataclass(frozen=True)
class CheckoutMetadata:
    user_id: str
    order_ids: List[int] = field(default_factory=list)
    total_original: int = 0
    total_final: int = 0
    has_discount: bool = False

    @property
    def total_savings(self) -> int:
        return self.total_original - self.total_final

    def to_stripe(self) -> Dict[str, str]:
        data = {
            "userId": str(self.user_id),
            "orderIds": ",".join(str(order_id) for order_id in self.order_ids),
            "totalOriginal": str(self.total_original),
            "totalFinal": str(self.total_final),
            "hasDiscount": "true" if self.has_discount else "false",
        }
        if self.has_discount:
            data["totalSavings"] = str(self.total_savings)
        return data

    @classmethod
    def from_stripe(cls, metadata: Optional[Mapping[str, str]]) -> "CheckoutMetadata":
        """
        Parse session metadata. ``userId`` and ``orderIds`` are mandatory.

        Raises:
            InvalidMetadata: a mandatory key is missing or malformed
        """
        metadata = metadata or {}
        user_id = metadata.get("userId")
        raw_order_ids = metadata.get("orderIds")
        if not user_id or not raw_order_ids:
            raise InvalidMetadata(details={"metadata": dict(metadata)})

        try:
            order_ids = [int(part) for part in raw_order_ids.split(",") if part.strip()]
            total_original = int(metadata.get("totalOriginal") or 0)
            total_final = int(metadata.get("totalFinal") or 0)
        except ValueError as exc:
            raise InvalidMetadata(details={"metadata": dict(metadata)}) from exc
        if not order_ids:
            raise InvalidMetadata(details={"metadata": dict(metadata)})

        return cls(
            user_id=str(user_id),
            order_ids=order_ids,
            total_original=total_original,
            total_final=total_final,
            has_discount=str(metadata.get("hasDiscount", "")).lower() == "true",
        )
