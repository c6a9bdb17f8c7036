from django.urls import path

from .catalog.views import (
    ActiveDiscountView,
    DiscountView,
    MaterialDetailView,
    ModuleMaterialsView,
    ProductAccessView,
    ProductModulesView,
)
from .purchases.views import AllOrdersView, MyOrdersView
from .users.views import CurrentUserView, LoginView, LogoutView, RegisterView

app_name = "storefront"

urlpatterns = [
    # --- Session ---
    path("auth/register/", RegisterView.as_view(), name="auth-register"),
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", CurrentUserView.as_view(), name="auth-me"),
    # --- Protected content ---
    path("products/<int:product_id>/access/", ProductAccessView.as_view(), name="product-access"),
    path("products/<int:product_id>/modules/", ProductModulesView.as_view(), name="product-modules"),
    path("modules/<int:module_id>/materials/", ModuleMaterialsView.as_view(), name="module-materials"),
    path("materials/<int:material_id>/", MaterialDetailView.as_view(), name="material-detail"),
    # --- Orders ---
    path("orders/me/", MyOrdersView.as_view(), name="orders-me"),
    path("orders/", AllOrdersView.as_view(), name="orders-all"),
    # --- Discounts ---
    path("discounts/", DiscountView.as_view(), name="discounts"),
    path("discounts/active/", ActiveDiscountView.as_view(), name="discounts-active"),
]
