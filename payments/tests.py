from decimal import Decimal
from unittest.mock import patch

from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings

from orders.models import Order

from .credentials import credentials_for_payment, get_credentials
from .models import Payment, PaymentGateway
from .services import MissingPaymentGateway, locate_or_create_payment

PAYTR_TEST = {"MERCHANT_ID": "123456", "MERCHANT_KEY": "settings-key", "MERCHANT_SALT": "settings-salt"}


@override_settings(PAYTR=PAYTR_TEST)
class LocateOrCreatePaymentTests(TestCase):
    def setUp(self):
        self.gateway = PaymentGateway.objects.create(id="paytr", label="PayTR")
        self.order = Order.objects.create(total_price=Decimal("99.90"), currency="TRY", payment_gateway=self.gateway)

    def test_creates_pending_payment_from_order(self):
        payment = locate_or_create_payment(self.order)

        self.assertEqual(payment.state, "authorization")
        self.assertEqual(payment.amount, Decimal("99.90"))
        self.assertEqual(payment.currency, "TRY")
        self.assertEqual(payment.payment_gateway_id, "paytr")
        self.assertEqual(payment.remote_state, "pending")
        self.assertEqual(payment.remote_id, "")

    def test_returns_existing_payment(self):
        first = locate_or_create_payment(self.order)
        second = locate_or_create_payment(self.order)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Payment.objects.count(), 1)

    def test_concurrent_creator_falls_back_to_existing_row(self):
        winner = Payment.objects.create(order=self.order, payment_gateway=self.gateway, amount=Decimal("99.90"))

        # the loser looked before the winner's insert became visible
        with patch("payments.services.find_payment", return_value=None):
            with self.assertLogs("payments", level="INFO") as cm:
                payment = locate_or_create_payment(self.order)

        self.assertEqual(payment.pk, winner.pk)
        self.assertEqual(Payment.objects.filter(order=self.order).count(), 1)
        self.assertTrue(any("created concurrently" in line for line in cm.output))

    def test_order_without_gateway(self):
        order = Order.objects.create(total_price=Decimal("1.00"))
        with self.assertRaises(MissingPaymentGateway):
            locate_or_create_payment(order)
        self.assertFalse(Payment.objects.exists())


class CredentialsTests(TestCase):
    def setUp(self):
        self.gateway = PaymentGateway.objects.create(id="paytr", label="PayTR")

    @override_settings(PAYTR=PAYTR_TEST)
    def test_falls_back_to_settings(self):
        creds = get_credentials(self.gateway)
        self.assertEqual(creds.merchant_key, "settings-key")
        self.assertEqual(creds.merchant_salt, "settings-salt")
        self.assertEqual(creds.merchant_id, "123456")

    @override_settings(PAYTR=PAYTR_TEST)
    def test_gateway_values_win(self):
        self.gateway.merchant_key = "gw-key"
        self.gateway.merchant_salt = "gw-salt"
        self.gateway.save()
        order = Order.objects.create(total_price=Decimal("1.00"), payment_gateway=self.gateway)
        payment = Payment.objects.create(order=order, payment_gateway=self.gateway, amount=Decimal("1.00"))

        creds = credentials_for_payment(payment)
        self.assertEqual((creds.merchant_key, creds.merchant_salt), ("gw-key", "gw-salt"))

    @override_settings(PAYTR={"MERCHANT_KEY": "", "MERCHANT_SALT": ""})
    def test_missing_secrets_raise(self):
        with self.assertLogs("payments", level="ERROR"):
            with self.assertRaises(ImproperlyConfigured):
                get_credentials(self.gateway)


