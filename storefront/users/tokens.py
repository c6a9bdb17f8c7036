"""
Session token issuance.

A session token is a simplejwt ``AccessToken`` enriched with the identity
claims the rest of the system reads back through ``SessionUser``.
"""

from django.conf import settings
from django.http import HttpResponse
from rest_framework_simplejwt.tokens import AccessToken

from .identity import Role
from .models import Profile


def display_name(user) -> str:
    return user.get_full_name() or user.username


def issue_session_token(user) -> str:
    """Sign a 7-day session token carrying ``user_id``, ``email``, ``name`` and ``role``."""
    try:
        role = user.profile.role
    except Profile.DoesNotExist:
        role = Profile.objects.create(user=user).role

    token = AccessToken.for_user(user)
    token["email"] = user.email
    token["name"] = display_name(user)
    token["role"] = role or Role.FREE
    return str(token)


def set_session_cookie(response: HttpResponse, token: str) -> HttpResponse:
    """
    Store the session token in an HTTP-only cookie.
    - httponly=True → prevents JavaScript access (mitigates XSS attacks)
    - secure → only over HTTPS outside of DEBUG
    - samesite="Lax" → sent on top-level navigations back from the hosted checkout
    """
    response.set_cookie(
        settings.SESSION_TOKEN_COOKIE,
        token,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="Lax",
        path="/",
        max_age=int(settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
    )
    return response


def clear_session_cookie(response: HttpResponse) -> HttpResponse:
    response.delete_cookie(settings.SESSION_TOKEN_COOKIE, path="/")
    return response
