from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from core.exceptions import DuplicateSettlement, InvalidMetadata, InvalidSignature, OrdersNotFound
from core.stripe_integration.checkout import CheckoutOrchestrator
from core.stripe_integration.gateway import StripeGateway
from core.stripe_integration.settlement import SettlementProcessor
from storefront.access.evaluator import AccessEvaluator
from storefront.purchases.ledger import WebhookLedger
from storefront.purchases.models import Order, OrderStatus, ProcessedWebhook, UserAsset
from storefront.purchases.store import EntitlementStore, OrderStore
from storefront.tests.factories import make_entitlement, make_order, make_product, make_user

from .helpers import WEBHOOK_SECRET, FakeGateway, checkout_completed, sign

NOW = timezone.now().replace(microsecond=0)


class MissingProductStore(OrderStore):
    """Behaves as if one product vanished from the catalog."""

    def __init__(self, missing_product_id):
        self.missing_product_id = missing_product_id

    def product_for(self, order):
        if order.product_id == self.missing_product_id:
            return None
        return super().product_for(order)


class ExplodingEntitlementStore(EntitlementStore):
    def __init__(self, product_id):
        self.product_id = product_id

    def grant_or_extend(self, *, order, duration_days, now):
        if order.product_id == self.product_id:
            raise RuntimeError("disk full")
        return super().grant_or_extend(order=order, duration_days=duration_days, now=now)


class BlindLedger(WebhookLedger):
    """Misses the marker on the read check, as a racing delivery would."""

    def is_processed(self, session_id):
        return False


class SettlementProcessorTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.course = make_product(name="Curso de Python", price=5000, access_duration=365)
        cls.templates = make_product(name="Templates Pack", price=3000, category="Design", access_duration=30)

    def _processor(self, **kwargs):
        return SettlementProcessor(StripeGateway(api_key="sk_test", webhook_secret=WEBHOOK_SECRET), clock=lambda: NOW, **kwargs)

    def _deliver(self, payload, processor=None):
        return (processor or self._processor()).handle(payload.encode("utf-8"), sign(payload))

    def test_paid_session_settles_orders_and_grants_access(self):
        order = make_order(self.user, self.course, session_id="cs_1")

        result = self._deliver(checkout_completed("cs_1", self.user.id, [order.id]))

        self.assertEqual(result.to_dict(), {"received": True, "processed": True, "ordersProcessed": 1})
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PAID)
        self.assertEqual(order.stripe_payment_intent_id, "pi_test_123")
        self.assertEqual(order.purchase_date, NOW)
        self.assertEqual(order.expiry_date, NOW + timedelta(days=365))

        asset = UserAsset.objects.get()
        self.assertTrue(asset.is_active)
        self.assertEqual(asset.order, order)
        self.assertEqual(asset.purchase_date, NOW)
        self.assertEqual(asset.expiry_date, NOW + timedelta(days=365))
        self.assertTrue(ProcessedWebhook.objects.filter(pk="cs_1").exists())

    def test_replays_are_acknowledged_without_side_effects(self):
        order = make_order(self.user, self.course, session_id="cs_1")
        payload = checkout_completed("cs_1", self.user.id, [order.id])
        processor = self._processor()

        first = self._deliver(payload, processor)
        expiry = UserAsset.objects.get().expiry_date
        replays = [self._deliver(payload, processor) for _ in range(3)]

        self.assertEqual(first.orders_processed, 1)
        for replay in replays:
            self.assertEqual(replay.to_dict(), {"received": True, "alreadyProcessed": True})
        self.assertEqual(UserAsset.objects.count(), 1)
        self.assertEqual(UserAsset.objects.get().expiry_date, expiry)
        self.assertEqual(ProcessedWebhook.objects.count(), 1)

    def test_repeat_purchase_extends_the_active_entitlement(self):
        existing = make_entitlement(self.user, self.course, expires_in=timedelta(days=100), now=NOW)
        order = make_order(self.user, self.course, session_id="cs_2")

        self._deliver(checkout_completed("cs_2", self.user.id, [order.id]))

        self.assertEqual(UserAsset.objects.filter(user=self.user, product=self.course).count(), 1)
        existing.refresh_from_db()
        self.assertEqual(existing.expiry_date, NOW + timedelta(days=100) + timedelta(days=365))
        self.assertNotEqual(existing.order_id, order.id)

    def test_renewal_after_lapse_counts_from_settlement(self):
        lapsed = make_entitlement(self.user, self.course, expires_in=-timedelta(days=10), now=NOW)
        order = make_order(self.user, self.course, session_id="cs_3")

        self._deliver(checkout_completed("cs_3", self.user.id, [order.id]))

        lapsed.refresh_from_db()
        self.assertEqual(lapsed.expiry_date, NOW + timedelta(days=365))
        self.assertEqual(AccessEvaluator(clock=lambda: NOW).evaluate(self.user.id, self.course.id).reason, "valid")

    def test_deactivated_entitlement_is_not_extended(self):
        revoked = make_entitlement(self.user, self.course, is_active=False, now=NOW)
        order = make_order(self.user, self.course, session_id="cs_4")

        self._deliver(checkout_completed("cs_4", self.user.id, [order.id]))

        revoked.refresh_from_db()
        self.assertFalse(revoked.is_active)
        fresh = UserAsset.objects.get(is_active=True)
        self.assertEqual(fresh.expiry_date, NOW + timedelta(days=365))

    def test_missing_access_duration_defaults_to_a_year(self):
        product = make_product(name="Prompts", category="AI", access_duration=0)
        order = make_order(self.user, product, session_id="cs_5")

        self._deliver(checkout_completed("cs_5", self.user.id, [order.id]))

        self.assertEqual(UserAsset.objects.get(product=product).expiry_date, NOW + timedelta(days=365))

    def test_partial_batch_failure_settles_the_rest(self):
        order_a = make_order(self.user, self.course, session_id="cs_6")
        order_b = make_order(self.user, self.templates, session_id="cs_6")
        processor = self._processor(orders=MissingProductStore(self.course.id))

        with self.assertLogs("core.stripe_integration.settlement", level="ERROR"):
            result = self._deliver(checkout_completed("cs_6", self.user.id, [order_a.id, order_b.id]), processor)

        self.assertEqual(result.to_dict(), {"received": True, "processed": True, "ordersProcessed": 1})
        order_a.refresh_from_db()
        order_b.refresh_from_db()
        self.assertEqual(order_a.status, OrderStatus.PENDING)
        self.assertEqual(order_b.status, OrderStatus.PAID)
        self.assertEqual(list(UserAsset.objects.values_list("product_id", flat=True)), [self.templates.id])
        self.assertTrue(ProcessedWebhook.objects.filter(pk="cs_6").exists())

    def test_failing_order_is_rolled_back_alone(self):
        order_a = make_order(self.user, self.course, session_id="cs_7")
        order_b = make_order(self.user, self.templates, session_id="cs_7")
        processor = self._processor(entitlements=ExplodingEntitlementStore(self.course.id))

        with self.assertLogs("core.stripe_integration.settlement", level="ERROR") as logs:
            result = self._deliver(checkout_completed("cs_7", self.user.id, [order_a.id, order_b.id]), processor)

        self.assertEqual(result.orders_processed, 1)
        self.assertIn("disk full", "\n".join(logs.output))
        order_a.refresh_from_db()
        # PAID was written in the same savepoint as the failed grant
        self.assertEqual(order_a.status, OrderStatus.PENDING)
        self.assertTrue(ProcessedWebhook.objects.filter(pk="cs_7").exists())

    def test_order_count_mismatch_is_only_a_warning(self):
        order = make_order(self.user, self.course, session_id="cs_8")

        with self.assertLogs("core.stripe_integration.settlement", level="WARNING") as logs:
            result = self._deliver(checkout_completed("cs_8", self.user.id, [order.id, 424242]))

        self.assertEqual(result.orders_processed, 1)
        self.assertTrue(any("mismatch" in line for line in logs.output))

    def test_tampered_signature_changes_nothing(self):
        order = make_order(self.user, self.course, session_id="cs_9")
        payload = checkout_completed("cs_9", self.user.id, [order.id])
        header = sign(payload, secret="whsec_attacker")

        with self.assertRaises(InvalidSignature):
            self._processor().handle(payload.encode("utf-8"), header)

        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertFalse(UserAsset.objects.exists())
        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_body_changed_after_signing_is_rejected(self):
        order = make_order(self.user, self.course, session_id="cs_10")
        header = sign(checkout_completed("cs_10", self.user.id, [order.id]))
        forged = checkout_completed("cs_10", self.user.id + 1, [order.id])

        with self.assertRaises(InvalidSignature):
            self._processor().handle(forged.encode("utf-8"), header)
        self.assertFalse(UserAsset.objects.exists())

    def test_missing_signature_is_rejected(self):
        with self.assertRaises(InvalidSignature):
            self._processor().handle(b"{}", None)

    def test_other_event_types_are_acknowledged(self):
        payload = checkout_completed("cs_11", self.user.id, [1], event_type="payment_intent.succeeded")

        result = self._deliver(payload)

        self.assertEqual(result.to_dict(), {"received": True})
        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_unpaid_session_grants_nothing(self):
        order = make_order(self.user, self.course, session_id="cs_12")

        result = self._deliver(checkout_completed("cs_12", self.user.id, [order.id], payment_status="unpaid"))

        self.assertEqual(result.to_dict(), {"received": True})
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_missing_metadata_is_an_error_without_marker(self):
        make_order(self.user, self.course, session_id="cs_13")

        with self.assertRaises(InvalidMetadata):
            self._deliver(checkout_completed("cs_13", self.user.id, [], metadata={}))

        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_unknown_session_is_an_error_without_marker(self):
        with self.assertRaises(OrdersNotFound):
            self._deliver(checkout_completed("cs_unknown", self.user.id, [1]))

        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_racing_duplicate_is_rolled_back(self):
        order = make_order(self.user, self.course, session_id="cs_14")
        ProcessedWebhook.objects.create(id="cs_14", event_type="checkout.session.completed")
        processor = self._processor(ledger=BlindLedger())

        with self.assertRaises(DuplicateSettlement):
            self._deliver(checkout_completed("cs_14", self.user.id, [order.id]), processor)

        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertFalse(UserAsset.objects.exists())


class EntitlementStoreRaceTests(TestCase):
    def test_losing_create_falls_back_to_extension(self):
        user = make_user()
        product = make_product()
        winner = make_entitlement(user, product, expires_in=timedelta(days=10), now=NOW)
        order = make_order(user, product)

        class RacingStore(EntitlementStore):
            calls = 0

            def find_active(self, *args, **kwargs):
                self.calls += 1
                if self.calls == 1:
                    return None
                return super().find_active(*args, **kwargs)

        asset, created = RacingStore().grant_or_extend(order=order, duration_days=30, now=NOW)

        self.assertFalse(created)
        self.assertEqual(asset.pk, winner.pk)
        self.assertEqual(asset.expiry_date, NOW + timedelta(days=40))
        self.assertEqual(UserAsset.objects.filter(is_active=True).count(), 1)


@override_settings(STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET, STRIPE_SECRET_KEY="sk_test_123")
class WebhookEndpointTests(TestCase):
    url = "/api/payments/stripe/webhook/"

    @classmethod
    def setUpTestData(cls):
        cls.user = make_user()
        cls.course = make_product()

    def _post(self, payload, signature=None):
        headers = {"HTTP_STRIPE_SIGNATURE": signature if signature is not None else sign(payload)}
        return self.client.post(self.url, data=payload, content_type="application/json", **headers)

    def test_checkout_to_access_end_to_end(self):
        result = CheckoutOrchestrator(FakeGateway()).create_checkout(self.user.id, [self.course.id])
        order = Order.objects.get()
        self.assertEqual(order.amount, 5000)
        self.assertEqual(order.status, OrderStatus.PENDING)

        payload = checkout_completed(result.session_id, self.user.id, result.order_ids)
        response = self._post(payload)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"received": True, "processed": True, "ordersProcessed": 1})
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PAID)
        asset = UserAsset.objects.get()
        self.assertAlmostEqual(
            asset.expiry_date, asset.purchase_date + timedelta(days=365), delta=timedelta(seconds=1)
        )
        self.assertEqual(AccessEvaluator().evaluate(self.user.id, self.course.id).reason, "valid")

        replay = self._post(payload)
        self.assertEqual(replay.json(), {"received": True, "alreadyProcessed": True})
        self.assertEqual(UserAsset.objects.count(), 1)

    def test_bad_signature_is_a_bad_request(self):
        order = make_order(self.user, self.course, session_id="cs_bad")
        payload = checkout_completed("cs_bad", self.user.id, [order.id])

        response = self._post(payload, signature="t=1,v1=deadbeef")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "INVALID_SIGNATURE")
        self.assertFalse(UserAsset.objects.exists())

    def test_missing_signature_header_is_a_bad_request(self):
        response = self.client.post(self.url, data="{}", content_type="application/json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_undecodable_body_is_a_bad_request(self):
        response = self.client.post(
            self.url,
            data=b"\xff\xfe{}",
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE="t=1,v1=deadbeef",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "INVALID_SIGNATURE")
        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_session_cookie_is_not_needed(self):
        self.client.cookies["access_token"] = "garbage"
        payload = checkout_completed("cs_x", self.user.id, [1], event_type="customer.created")

        response = self._post(payload)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"received": True})

    def test_orders_not_found_asks_stripe_to_retry(self):
        response = self._post(checkout_completed("cs_missing", self.user.id, [1]))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json()["code"], "ORDERS_NOT_FOUND")
        self.assertFalse(ProcessedWebhook.objects.exists())

    def test_invalid_metadata_is_a_bad_request(self):
        response = self._post(checkout_completed("cs_meta", self.user.id, [], metadata={"userId": "1"}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "INVALID_METADATA")
