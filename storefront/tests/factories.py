"""
Test data helpers shared by the storefront and payment test suites.
"""

from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.utils import timezone

from storefront.catalog.models import Product, ProductMaterial, ProductModule
from storefront.purchases.models import Order, OrderStatus, UserAsset
from storefront.users.identity import Role
from storefront.users.tokens import issue_session_token


def make_user(email="maria@example.com", role=Role.CUSTOMER, password="secret123", name="Maria"):
    user = User.objects.create_user(username=email, email=email, password=password, first_name=name)
    user.profile.role = role
    user.profile.save(update_fields=["role"])
    return user


def make_product(name="Curso de Python", price=5000, category="Programming", **extra):
    slug = extra.pop("slug", name.lower().replace(" ", "-"))
    return Product.objects.create(name=name, slug=slug, price=price, category=category, **extra)


def make_module(product, title="Introduction", order=1):
    return ProductModule.objects.create(product=product, title=title, order=order)


def make_material(module, title="Welcome video", order=1):
    return ProductMaterial.objects.create(
        module=module,
        type="video",
        title=title,
        video_url="https://videos.example.com/welcome",
        order=order,
    )


def make_order(user, product, amount=None, status=OrderStatus.PENDING, session_id=""):
    return Order.objects.create(
        user=user,
        product=product,
        amount=product.price if amount is None else amount,
        status=status,
        checkout_session_id=session_id,
    )


def make_entitlement(user, product, expires_in=timedelta(days=30), is_active=True, now=None):
    now = now or timezone.now()
    order = make_order(user, product, status=OrderStatus.PAID)
    return UserAsset.objects.create(
        user=user,
        product=product,
        order=order,
        purchase_date=now - timedelta(days=1),
        expiry_date=now + expires_in,
        is_active=is_active,
    )


def login(client, user):
    """Put a freshly signed session token into the test client's cookie jar."""
    client.cookies[settings.SESSION_TOKEN_COOKIE] = issue_session_token(user)
    return client
