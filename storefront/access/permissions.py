"""
DRF permission classes built on the authorization guards.

Usage:
    class ModuleMaterialsView(APIView):
        permission_classes = [HasProductAccess]
        access_resource = "module"
        access_lookup_kwarg = "module_id"

The permission raises the guard's exception instead of returning False, so
the response keeps the denial reason.
"""

from rest_framework.permissions import BasePermission

from .evaluator import AccessEvaluator
from .guards import require_admin, require_authenticated, require_resource_access


class IsSessionAuthenticated(BasePermission):
    def has_permission(self, request, view):
        require_authenticated(request)
        return True


class HasProductAccess(BasePermission):
    """
    Requires ``valid`` access to the product behind the URL.

    Reads ``view.access_resource`` ("product", "module" or "material", default
    "product") and the id from ``view.kwargs[view.access_lookup_kwarg]``
    (default "pk"). The granted verdict is stored on ``request.access``.
    """

    def has_permission(self, request, view):
        resource = getattr(view, "access_resource", "product")
        lookup = getattr(view, "access_lookup_kwarg", "pk")
        evaluator = getattr(view, "access_evaluator", None) or AccessEvaluator()

        context = require_resource_access(request, resource, view.kwargs.get(lookup), evaluator)
        request.access = context.verdict
        return True


class IsAdminRole(BasePermission):
    def has_permission(self, request, view):
        require_admin(request)
        return True
