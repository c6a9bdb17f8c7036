from typing import Optional

from django.conf import settings
from rest_framework import HTTP_HEADER_ENCODING
from rest_framework.request import Request

from rest_framework_simplejwt.authentication import JWTStatelessUserAuthentication
from rest_framework_simplejwt.tokens import Token

from storefront.users.identity import SessionUser


class JWTCookieAuthentication(JWTStatelessUserAuthentication):
    """
    Stateless JWT authentication that reads the session token from the HTTP-only
    cookie first and falls back to the Authorization header. The identity is built
    from the verified claims alone, no database lookup is made.
    """

    www_authenticate_realm = "api"
    media_type = "application/json"

    def authenticate(self, request: Request) -> Optional[tuple[SessionUser, Token]]:
        cookie = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE) or None
        if cookie is None:
            return super().authenticate(request)

        raw_token = cookie.encode(HTTP_HEADER_ENCODING)
        validated_token = self.get_validated_token(raw_token)

        return self.get_user(validated_token), validated_token
