"""
Access Evaluator

Decides whether a user currently has access to a product. The decision is
computed from the entitlement store on every call and never cached, since
expiry is relative to the moment of the check.

Checks, in order, stopping at the first failure:
1. No entitlement record          → not_purchased
2. Record deactivated             → inactive
3. Record active but expired      → expired
4. Otherwise                      → valid

Fail-closed: any error while looking up the record or the owning product
yields ``not_purchased``.

Modules and materials carry no access information of their own. They are
resolved to their owning product (material → module → product) and the
product's verdict applies.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from django.utils import timezone

from storefront.catalog.models import ProductMaterial, ProductModule
from storefront.purchases.store import EntitlementStore

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("storefront.access")

VALID = "valid"
NOT_PURCHASED = "not_purchased"
EXPIRED = "expired"
INACTIVE = "inactive"


@dataclass(frozen=True)
class AccessVerdict:
    """
    Result of an access check.

    Attributes:
        has_access: True only for ``reason == "valid"``
        reason: One of valid, not_purchased, expired, inactive
        expiry_date: Expiry of the deciding entitlement, if one exists
        is_active: Active flag of the deciding entitlement, if one exists
        entitlement_id: Primary key of the deciding entitlement, if one exists
        product_id: Product the verdict was computed for
    """

    has_access: bool
    reason: str
    expiry_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    entitlement_id: Optional[int] = None
    product_id: Optional[int] = None

    @classmethod
    def denied(cls, product_id=None) -> "AccessVerdict":
        return cls(has_access=False, reason=NOT_PURCHASED, product_id=product_id)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"hasAccess": self.has_access, "reason": self.reason}
        if self.expiry_date is not None:
            body["expiryDate"] = self.expiry_date.isoformat()
        if self.is_active is not None:
            body["isActive"] = self.is_active
        if self.entitlement_id is not None:
            body["entitlementId"] = self.entitlement_id
        return body


class AccessEvaluator:
    """
    Product-level access decision over an ``EntitlementStore``.

    Holds no per-request state, so one instance may serve concurrent requests.
    """

    def __init__(
        self,
        store: Optional[EntitlementStore] = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.store = store or EntitlementStore()
        self.clock = clock

    def evaluate(self, user_id, product_id) -> AccessVerdict:
        try:
            verdict = self._decide(user_id, product_id)
        except Exception:
            logger.exception("Access check failed for user %s product %s", user_id, product_id)
            verdict = AccessVerdict.denied(product_id)
        self._audit(user_id, "product", product_id, verdict)
        return verdict

    def evaluate_module(self, user_id, module_id) -> AccessVerdict:
        try:
            product_id = (
                ProductModule.objects.filter(pk=module_id).values_list("product_id", flat=True).first()
            )
        except Exception:
            logger.exception("Could not resolve module %s", module_id)
            product_id = None
        return self._evaluate_resolved(user_id, "module", module_id, product_id)

    def evaluate_material(self, user_id, material_id) -> AccessVerdict:
        try:
            product_id = (
                ProductMaterial.objects.filter(pk=material_id)
                .values_list("module__product_id", flat=True)
                .first()
            )
        except Exception:
            logger.exception("Could not resolve material %s", material_id)
            product_id = None
        return self._evaluate_resolved(user_id, "material", material_id, product_id)

    def _evaluate_resolved(self, user_id, resource: str, resource_id, product_id) -> AccessVerdict:
        if product_id is None:
            verdict = AccessVerdict.denied()
            self._audit(user_id, resource, resource_id, verdict)
            return verdict
        return self.evaluate(user_id, product_id)

    def _decide(self, user_id, product_id) -> AccessVerdict:
        if user_id is None or product_id is None:
            return AccessVerdict.denied(product_id)

        asset = self.store.find(user_id, product_id)
        if asset is None:
            return AccessVerdict.denied(product_id)

        context = {
            "expiry_date": asset.expiry_date,
            "entitlement_id": asset.pk,
            "product_id": asset.product_id,
        }
        if not asset.is_active:
            return AccessVerdict(has_access=False, reason=INACTIVE, is_active=False, **context)
        if asset.expiry_date <= self.clock():
            return AccessVerdict(has_access=False, reason=EXPIRED, is_active=True, **context)
        return AccessVerdict(has_access=True, reason=VALID, is_active=True, **context)

    def _audit(self, user_id, resource: str, resource_id, verdict: AccessVerdict) -> None:
        if verdict.has_access:
            audit_logger.info(
                "ACCESS_GRANTED user=%s %s=%s expires=%s",
                user_id,
                resource,
                resource_id,
                verdict.expiry_date.isoformat() if verdict.expiry_date else "-",
            )
        else:
            audit_logger.info(
                "ACCESS_DENIED user=%s %s=%s reason=%s", user_id, resource, resource_id, verdict.reason
            )
