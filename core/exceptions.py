"""
Storefront Custom Exceptions

This module provides the typed error taxonomy of the checkout and settlement
flows and the DRF exception handler that renders it. The exceptions follow a
hierarchical structure so callers can catch a whole family (``StorefrontError``)
or a single condition (``AlreadyOwned``).

Every error carries the HTTP status it maps to, so views never translate
errors by hand: they raise, and ``storefront_exception_handler`` renders
``{"error": ..., "code": ..., "details": ...}``.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging
from typing import Optional, Dict, Any

from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    """
    Base exception class for all storefront business errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code the error maps to
        error_code (str): Stable machine-readable identifier
        details (Dict[str, Any]): Additional error details

    Example:
        >>> try:
        ...     orchestrator.create_checkout(user_id, product_ids)
        ... except StorefrontError as e:
        ...     logger.error("Checkout failed: %s (%s)", e.message, e.error_code)
    """

    default_message = "Request could not be processed"
    default_status_code = 400
    default_error_code = "STOREFRONT_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to the response body.

        Returns:
            Dictionary with ``error`` and ``code``, plus ``details`` when present
        """
        body: Dict[str, Any] = {"error": self.message, "code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


# --- Authentication ---


class InvalidCredentials(StorefrontError):
    """Login with an unknown email or a wrong password."""

    default_message = "Incorrect email or password"
    default_status_code = 401
    default_error_code = "UNAUTHORIZED"


# --- Checkout ---


class CheckoutValidationError(StorefrontError):
    """Malformed checkout input, e.g. an empty ``productIds`` list."""

    default_message = "Invalid checkout parameters"
    default_error_code = "INVALID_PARAMS"


class NoValidProducts(StorefrontError):
    """None of the requested products exists and is active."""

    default_message = "No valid products found"
    default_error_code = "NO_VALID_PRODUCTS"


class AlreadyOwned(StorefrontError):
    """
    The user already holds valid access to one or more requested products.

    ``details["products"]`` names the offending products so the UI can show
    them to the user.
    """

    default_message = "You already own some of these products"
    default_status_code = 409
    default_error_code = "ALREADY_OWNED"

    def __init__(self, product_names, message: Optional[str] = None) -> None:
        self.product_names = list(product_names)
        super().__init__(
            message or f"You already own: {', '.join(self.product_names)}",
            details={"products": self.product_names},
        )


class PaymentProviderError(StorefrontError):
    """The payment provider refused or failed to create the hosted session."""

    default_message = "Payment provider error"
    default_status_code = 502
    default_error_code = "PAYMENT_PROVIDER_ERROR"


# --- Settlement ---


class InvalidSignature(StorefrontError):
    """Missing or invalid webhook signature, or an unparsable webhook body."""

    default_message = "Invalid webhook signature"
    default_error_code = "INVALID_SIGNATURE"


class InvalidMetadata(StorefrontError):
    """The checkout session carries no usable ``userId``/``orderIds`` metadata."""

    default_message = "Invalid checkout session metadata"
    default_error_code = "INVALID_METADATA"


class OrdersNotFound(StorefrontError):
    """No order references the settled checkout session."""

    default_message = "No orders found for this checkout session"
    default_status_code = 500
    default_error_code = "ORDERS_NOT_FOUND"


class DuplicateSettlement(StorefrontError):
    """
    A concurrent delivery of the same checkout session already wrote its
    processed-webhook marker. The losing settlement is rolled back entirely.
    """

    default_message = "Checkout session is already being processed"
    default_status_code = 409
    default_error_code = "DUPLICATE_SETTLEMENT"


def storefront_exception_handler(exc, context):
    """
    DRF exception handler rendering ``StorefrontError`` subclasses.

    Any other exception is left to DRF's default handler, so validation
    errors, ``NotAuthenticated`` and ``AccessDenied`` keep their own bodies.
    """
    if isinstance(exc, StorefrontError):
        view = context.get("view")
        logger.warning(
            "%s in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view is not None else "unknown view",
            exc.message,
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
