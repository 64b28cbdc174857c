import json
from decimal import Decimal
from unittest.mock import patch
from urllib.parse import urlencode

from django.core.exceptions import ImproperlyConfigured
from django.test import RequestFactory, TestCase, override_settings
from django.urls import reverse

from orders.models import Order
from payments.models import Payment, PaymentGateway

from .access import check_callback_access
from .utils import make_hash

PAYTR_TEST = {
    "MERCHANT_ID": "123456",
    "MERCHANT_KEY": "test-key",
    "MERCHANT_SALT": "test-salt",
    "ACCESS_CHECK": False,
}


class CallbackTestMixin:
    def setUp(self):
        self.gateway = PaymentGateway.objects.create(id="paytr", label="PayTR")
        self.order = Order.objects.create(
            id=1024,
            state="draft",
            total_price=Decimal("150.00"),
            payment_gateway=self.gateway,
            locked=True,
        )

    def _payload(self, status="success", merchant_oid="SP1024DR0001", total_amount="150.00", **overrides):
        data = {
            "merchant_oid": merchant_oid,
            "status": status,
            "total_amount": total_amount,
            "hash": make_hash(merchant_oid, status, total_amount, "test-salt", "test-key"),
        }
        data.update(overrides)
        return data

    def _post(self, payload: dict):
        return self.client.post(
            reverse("paytr:callback"),
            data=json.dumps(payload),
            content_type="application/json",
        )

    def _post_form(self, payload: dict):
        return self.client.post(
            reverse("paytr:callback"),
            data=urlencode(payload),
            content_type="application/x-www-form-urlencoded",
        )


@override_settings(PAYTR=PAYTR_TEST)
class PaytrCallbackTests(CallbackTestMixin, TestCase):
    def test_success_creates_and_completes_payment(self):
        resp = self._post(self._payload())

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"OK")
        self.assertEqual(resp["Content-Type"], "text/plain")
        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.state, "completed")
        self.assertEqual(payment.remote_id, "SP1024DR0001")
        self.assertEqual(payment.remote_state, "success")
        self.assertEqual(payment.amount, Decimal("150.00"))
        self.assertEqual(payment.payment_gateway, self.gateway)
        self.assertIsNotNone(payment.completed_at)
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "completed")
        self.assertIsNotNone(self.order.placed_at)
        self.assertFalse(self.order.locked)

    def test_form_encoded_success(self):
        resp = self._post_form(self._payload())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Payment.objects.get(order=self.order).state, "completed")

    def test_tampered_hash_leaves_payment_pending(self):
        with self.assertLogs("paytr", level="WARNING") as cm:
            resp = self._post(self._payload(hash="dGFtcGVyZWQ="))

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"OK")
        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.state, "authorization")
        self.assertEqual(payment.remote_id, "")
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "draft")
        self.assertTrue(self.order.locked)
        self.assertTrue(any("hash verification failed" in line for line in cm.output))
        self.assertTrue(any("dGFtcGVyZWQ=" in line for line in cm.output))

    def test_failed_status_keeps_order_untouched(self):
        resp = self._post(self._payload(status="failed"))

        self.assertEqual(resp.status_code, 200)
        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.state, "authorization")
        self.assertEqual(payment.remote_id, "SP1024DR0001")
        self.assertEqual(payment.remote_state, "failed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "draft")
        self.assertTrue(self.order.locked)

    def test_empty_merchant_oid_is_invalid_order_id(self):
        with self.assertLogs("paytr", level="ERROR"):
            resp = self._post(self._payload(merchant_oid=""))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.content, b"Invalid order ID")

    def test_non_numeric_merchant_oid_is_invalid_order_id(self):
        resp = self._post(self._payload(merchant_oid="SPabcDR1"))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.content, b"Invalid order ID")

    def test_missing_required_parameters(self):
        payload = self._payload()
        del payload["hash"]
        with self.assertLogs("paytr", level="ERROR"):
            resp = self._post(payload)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.content, b"Missing required parameters")
        self.assertFalse(Payment.objects.exists())

    def test_unknown_order(self):
        with self.assertLogs("paytr", level="ERROR") as cm:
            resp = self._post(self._payload(merchant_oid="SP9999DR0001"))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.content, b"Order not found")
        self.assertTrue(any("9999" in line for line in cm.output))

    def test_order_without_gateway(self):
        Order.objects.create(id=2048, state="draft", total_price=Decimal("10.00"))
        resp = self._post(self._payload(merchant_oid="SP2048DR0001"))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.content, b"Payment gateway not found")
        self.assertFalse(Payment.objects.exists())

    def test_replay_is_idempotent(self):
        real_apply = Order.apply_transition
        with patch.object(Order, "apply_transition", autospec=True, side_effect=real_apply) as applied:
            first = self._post(self._payload())
            second = self._post(self._payload())

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(applied.call_count, 1)
        self.assertEqual(Payment.objects.filter(order=self.order).count(), 1)
        self.assertEqual(Payment.objects.get(order=self.order).state, "completed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "completed")

    def test_completed_payment_is_not_downgraded(self):
        self._post(self._payload())
        completed_at = Payment.objects.get(order=self.order).completed_at

        self._post(self._payload(status="failed", merchant_oid="SP1024DR0002"))
        self._post(self._payload(hash="bogus"))

        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.state, "completed")
        self.assertEqual(payment.remote_id, "SP1024DR0001")
        self.assertEqual(payment.completed_at, completed_at)

    def test_existing_payment_from_return_flow_is_reused(self):
        existing = Payment.objects.create(
            order=self.order, payment_gateway=self.gateway, amount=Decimal("150.00"), remote_state="pending",
        )
        self._post(self._payload())
        self.assertEqual(Payment.objects.count(), 1)
        existing.refresh_from_db()
        self.assertEqual(existing.state, "completed")

    def test_failure_then_retry_success(self):
        self._post(self._payload(status="failed"))
        self._post(self._payload(merchant_oid="SP1024DR0002"))

        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.state, "completed")
        self.assertEqual(payment.remote_id, "SP1024DR0002")

    def test_already_completed_order_is_not_transitioned(self):
        Order.objects.filter(pk=self.order.pk).update(state="completed")
        with patch.object(Order, "apply_transition") as applied:
            resp = self._post(self._payload())
        self.assertEqual(resp.status_code, 200)
        applied.assert_not_called()
        self.assertEqual(Payment.objects.get(order=self.order).state, "completed")
        self.order.refresh_from_db()
        self.assertFalse(self.order.locked)

    def test_validation_workflow_places_once(self):
        Order.objects.filter(pk=self.order.pk).update(workflow="order_default_validation")
        self._post(self._payload())
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "validation")

        with self.assertLogs("paytr", level="INFO") as cm:
            self._post(self._payload())
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "validation")
        self.assertTrue(any("not available" in line for line in cm.output))

    def test_unlocked_order_stays_unlocked(self):
        Order.objects.filter(pk=self.order.pk).update(locked=False)
        with patch("orders.lock.OrderLock.unlock") as unlock:
            self._post(self._payload())
        unlock.assert_not_called()

    def test_get_not_allowed(self):
        resp = self.client.get(reverse("paytr:callback"))
        self.assertEqual(resp.status_code, 405)

    def test_missing_credentials_fail_loudly(self):
        with override_settings(PAYTR={**PAYTR_TEST, "MERCHANT_KEY": ""}):
            with self.assertRaises(ImproperlyConfigured):
                self._post(self._payload())


@override_settings(PAYTR={**PAYTR_TEST, "ACCESS_CHECK": True})
class CallbackAccessTests(CallbackTestMixin, TestCase):
    def test_existing_order_is_admitted(self):
        resp = self._post(self._payload())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Payment.objects.get(order=self.order).state, "completed")

    def test_unknown_order_is_forbidden(self):
        with self.assertLogs("paytr", level="ERROR") as cm:
            resp = self._post(self._payload(merchant_oid="SP9999DR0001"))
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Payment.objects.exists())
        self.assertTrue(any("9999" in line for line in cm.output))

    def test_empty_merchant_oid_is_forbidden(self):
        with self.assertLogs("paytr", level="ERROR"):
            resp = self._post(self._payload(merchant_oid=""))
        self.assertEqual(resp.status_code, 403)

    def test_form_encoded_request_is_admitted(self):
        resp = self._post_form(self._payload())
        self.assertEqual(resp.status_code, 200)

    def test_gate_and_handler_agree_on_unresolvable_ids(self):
        factory = RequestFactory()
        for oid in ("SPabcDR1", "DR1024", "SP0DR1"):
            with self.subTest(merchant_oid=oid):
                request = factory.post(
                    "/paytr/callback", data=json.dumps(self._payload(merchant_oid=oid)),
                    content_type="application/json",
                )
                with self.assertLogs("paytr", level="ERROR"):
                    self.assertFalse(check_callback_access(request))

    def test_gate_resolves_suffixed_oid(self):
        request = RequestFactory().post(
            "/paytr/callback", data=json.dumps(self._payload(merchant_oid="SP1024DR77")),
            content_type="application/json",
        )
        self.assertTrue(check_callback_access(request))
