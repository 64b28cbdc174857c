from decimal import Decimal

from django.test import TestCase

from .lock import order_lock
from .models import Order
from .workflow import WorkflowError


class OrderWorkflowTests(TestCase):
    def setUp(self):
        self.order = Order.objects.create(total_price=Decimal("10.00"))

    def test_place_from_draft(self):
        self.assertIn("place", [t.id for t in self.order.allowed_transitions()])
        self.order.apply_transition("place")
        self.order.save()
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, "completed")
        self.assertIsNotNone(self.order.placed_at)

    def test_place_from_pending(self):
        self.order.state = "pending"
        self.order.apply_transition("place")
        self.assertEqual(self.order.state, "completed")

    def test_place_not_allowed_twice(self):
        self.order.apply_transition("place")
        self.assertEqual(self.order.allowed_transitions(), [])
        with self.assertRaises(WorkflowError):
            self.order.apply_transition("place")

    def test_unknown_transition(self):
        with self.assertRaises(WorkflowError):
            self.order.apply_transition("ship")

    def test_validation_workflow(self):
        self.order.workflow = "order_default_validation"
        self.order.apply_transition("place")
        self.assertEqual(self.order.state, "validation")
        self.assertEqual([t.id for t in self.order.allowed_transitions()], ["validate", "cancel"])
        self.order.apply_transition("validate")
        self.assertEqual(self.order.state, "completed")

    def test_unknown_workflow(self):
        self.order.workflow = "nope"
        with self.assertRaises(WorkflowError):
            self.order.allowed_transitions()


class OrderLockTests(TestCase):
    def test_lock_and_unlock(self):
        order = Order.objects.create(total_price=Decimal("10.00"))
        self.assertFalse(order_lock.is_locked(order))

        order_lock.lock(order)
        order.refresh_from_db()
        self.assertTrue(order_lock.is_locked(order))

        order_lock.unlock(order)
        order.refresh_from_db()
        self.assertFalse(order_lock.is_locked(order))
