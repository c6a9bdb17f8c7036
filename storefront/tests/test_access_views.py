from datetime import timedelta

from django.conf import settings
from django.test import TestCase
from rest_framework import status

from storefront.users.identity import Role

from .factories import (
    login,
    make_entitlement,
    make_material,
    make_module,
    make_product,
    make_user,
)


class ProtectedContentTests(TestCase):
    """Every content endpoint is gated by the session user's entitlement."""

    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()
        cls.module = make_module(cls.product)
        cls.material = make_material(cls.module)
        make_material(cls.module, title="Slides", order=2)

    def test_anonymous_request_is_unauthenticated(self):
        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_garbage_session_cookie_is_unauthenticated(self):
        self.client.cookies[settings.SESSION_TOKEN_COOKIE] = "not-a-jwt"
        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_not_purchased_is_forbidden_with_reason(self):
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        body = response.json()
        self.assertEqual(body["code"], "FORBIDDEN")
        self.assertEqual(body["reason"], "not_purchased")
        self.assertTrue(body["error"])

    def test_expired_access_is_forbidden_with_reason(self):
        make_entitlement(self.user, self.product, expires_in=-timedelta(days=1))
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["reason"], "expired")

    def test_deactivated_access_is_forbidden_with_reason(self):
        make_entitlement(self.user, self.product, is_active=False)
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/materials/{self.material.id}/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["reason"], "inactive")

    def test_valid_access_lists_modules_with_materials(self):
        make_entitlement(self.user, self.product)
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        modules = response.json()
        self.assertEqual(len(modules), 1)
        self.assertEqual([m["title"] for m in modules[0]["materials"]], ["Welcome video", "Slides"])

    def test_module_materials_are_gated_by_the_owning_product(self):
        login(self.client, self.user)
        url = f"/api/storefront/modules/{self.module.id}/materials/"

        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        make_entitlement(self.user, self.product)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.json()), 2)

    def test_material_detail_with_valid_access(self):
        make_entitlement(self.user, self.product)
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/materials/{self.material.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["video_url"], "https://videos.example.com/welcome")

    def test_unknown_material_is_forbidden_not_leaked(self):
        login(self.client, self.user)
        response = self.client.get("/api/storefront/materials/999999/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["reason"], "not_purchased")

    def test_another_users_entitlement_grants_nothing(self):
        owner = make_user(email="owner@example.com")
        make_entitlement(owner, self.product)
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/products/{self.product.id}/modules/?userId={owner.id}")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProductAccessEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.product = make_product()

    def test_requires_a_session(self):
        response = self.client.get(f"/api/storefront/products/{self.product.id}/access/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_reports_the_verdict_with_200(self):
        asset = make_entitlement(self.user, self.product, expires_in=-timedelta(hours=1))
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/products/{self.product.id}/access/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertFalse(body["hasAccess"])
        self.assertEqual(body["reason"], "expired")
        self.assertTrue(body["isActive"])
        self.assertEqual(body["entitlementId"], asset.id)

    def test_bearer_header_is_accepted(self):
        from storefront.users.tokens import issue_session_token

        make_entitlement(self.user, self.product)
        response = self.client.get(
            f"/api/storefront/products/{self.product.id}/access/",
            HTTP_AUTHORIZATION=f"Bearer {issue_session_token(self.user)}",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.json()["hasAccess"])


class OrderHistoryTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.other = make_user(email="joao@example.com")
        cls.admin = make_user(email="admin@example.com", role=Role.ADMIN)
        cls.course = make_product()
        cls.templates = make_product(name="Templates Pack", category="Design", price=2000)

    def test_my_orders_only_lists_the_session_users_products(self):
        make_entitlement(self.user, self.course)
        make_entitlement(self.user, self.templates, expires_in=-timedelta(days=2))
        make_entitlement(self.other, self.course)
        login(self.client, self.user)

        response = self.client.get(f"/api/storefront/orders/me/?userId={self.other.id}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = {row["product"]["name"]: row for row in response.json()}
        self.assertEqual(set(rows), {"Curso de Python", "Templates Pack"})
        self.assertTrue(rows["Curso de Python"]["hasValidAccess"])
        self.assertFalse(rows["Curso de Python"]["isExpired"])
        self.assertFalse(rows["Templates Pack"]["hasValidAccess"])
        self.assertTrue(rows["Templates Pack"]["isExpired"])
        self.assertEqual(rows["Templates Pack"]["amount"], 2000)

    def test_my_orders_requires_a_session(self):
        self.assertEqual(self.client.get("/api/storefront/orders/me/").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_all_orders_is_admin_only(self):
        make_entitlement(self.user, self.course)

        login(self.client, self.user)
        denied = self.client.get("/api/storefront/orders/")
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(denied.json()["code"], "FORBIDDEN")
        self.assertNotIn("reason", denied.json())

        login(self.client, self.admin)
        allowed = self.client.get("/api/storefront/orders/")
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertEqual(len(allowed.json()), 1)
