"""
Authorization Guards

Composable checks for request handlers. Each guard either returns a success
context or raises a DRF exception that renders the error response:

- require_authenticated → SessionUser, or 401 ``NotAuthenticated``
- require_product_access → ProductAccessContext, or 401 / 403 ``AccessDenied`` with reason
- require_admin          → SessionUser, or 401 / 403 ``AccessDenied``

The user is always the verified session identity. Guards never read a user id
from query parameters or the request body.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated
from rest_framework.request import Request

from storefront.users.identity import SessionUser
from .evaluator import AccessEvaluator, AccessVerdict, EXPIRED, INACTIVE, NOT_PURCHASED

logger = logging.getLogger(__name__)

DENIAL_MESSAGES = {
    NOT_PURCHASED: _("You do not have access to this product."),
    EXPIRED: _("Your access to this product has expired."),
    INACTIVE: _("Your access to this product is inactive."),
}


class AccessDenied(APIException):
    """
    403 response carrying ``{"error", "code": "FORBIDDEN", "reason"?}``.

    ``reason`` is set for entitlement denials so the client can tell
    "buy" from "renew" from "contact support".
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Access denied.")
    default_code = "FORBIDDEN"

    def __init__(self, message=None, reason: Optional[str] = None):
        self.reason = reason
        body = {"error": str(message or self.default_detail), "code": self.default_code}
        if reason:
            body["reason"] = reason
        super().__init__(detail=body, code=self.default_code)

    @classmethod
    def for_verdict(cls, verdict: AccessVerdict) -> "AccessDenied":
        reason = verdict.reason if verdict.reason in DENIAL_MESSAGES else NOT_PURCHASED
        return cls(DENIAL_MESSAGES[reason], reason=reason)


@dataclass(frozen=True)
class ProductAccessContext:
    user: SessionUser
    verdict: AccessVerdict

    @property
    def user_id(self):
        return self.user.id


def require_authenticated(request: Request) -> SessionUser:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise NotAuthenticated(_("Authentication required."))
    return user


def require_product_access(
    request: Request,
    product_id,
    evaluator: Optional[AccessEvaluator] = None,
) -> ProductAccessContext:
    return require_resource_access(request, "product", product_id, evaluator)


def require_resource_access(
    request: Request,
    resource: str,
    resource_id,
    evaluator: Optional[AccessEvaluator] = None,
) -> ProductAccessContext:
    """
    Product access for a product, module or material id.

    Modules and materials are gated by the product that owns them.
    """
    user = require_authenticated(request)
    evaluator = evaluator or AccessEvaluator()
    checks = {
        "product": evaluator.evaluate,
        "module": evaluator.evaluate_module,
        "material": evaluator.evaluate_material,
    }
    if resource not in checks:
        raise ValueError(f"Unknown protected resource type: {resource}")

    verdict = checks[resource](user.id, resource_id)
    if not verdict.has_access:
        raise AccessDenied.for_verdict(verdict)
    return ProductAccessContext(user=user, verdict=verdict)


def require_admin(request: Request) -> SessionUser:
    user = require_authenticated(request)
    if not getattr(user, "is_admin", False):
        logger.warning("User %s attempted an admin action without permission", user.id)
        raise AccessDenied(_("Only administrators can perform this action."))
    return user
