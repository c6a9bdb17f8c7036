"""
Storefront Authentication Views

Views:
- RegisterView: Self-service registration, opens a session immediately
- LoginView: Email/password login issuing the session cookie
- LogoutView: Clears the session cookie

The session token lives only in an HTTP-only cookie and is never returned in
the response body. There is no refresh flow: once the token expires the user
logs in again.

Author: Storefront Development Team
Version: 1.0.0
"""

import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..identity import Role
from ..serializers import LoginSerializer, RegistrationSerializer
from ..tokens import clear_session_cookie, display_name, issue_session_token, set_session_cookie

logger = logging.getLogger(__name__)


def _user_payload(user) -> dict:
    return {
        "id": user.id,
        "name": display_name(user),
        "email": user.email,
        "role": getattr(getattr(user, "profile", None), "role", Role.FREE),
    }


class RegisterView(APIView):
    """
    API endpoint for customer self-registration.

    Response (success, 201):
        {"success": true, "user": {"id": ..., "name": ..., "email": ..., "role": "CUSTOMER"}}
    Response (validation error, 400):
        {"email": ["This email is already registered."]}
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("Registered user %s", user.id)
        response = Response(
            {"success": True, "user": _user_payload(user)},
            status=status.HTTP_201_CREATED,
        )
        return set_session_cookie(response, issue_session_token(user))


class LoginView(APIView):
    """
    Validates email and password and stores a signed session token in the
    HTTP-only cookie. Wrong credentials answer 401 without revealing which
    half was wrong.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        logger.info("User %s logged in", user.id)
        response = Response({"success": True, "user": _user_payload(user)})
        return set_session_cookie(response, issue_session_token(user))


class LogoutView(APIView):
    """Always succeeds; deletes the session cookie from the client."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        response = Response({"detail": _("Successfully logged out.")}, status=status.HTTP_200_OK)
        return clear_session_cookie(response)
