"""
Storefront Current User View

Returns the identity of the current session. The identity comes exclusively
from the verified session token, never from query parameters.
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from storefront.access.permissions import IsSessionAuthenticated


class CurrentUserView(APIView):
    permission_classes = [IsSessionAuthenticated]

    def get(self, request):
        return Response({"user": request.user.as_payload()})
