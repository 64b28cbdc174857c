import logging

from django.db import IntegrityError, transaction

from .models import Payment

logger = logging.getLogger(__name__)


class MissingPaymentGateway(Exception): pass


def find_payment(order):
    return Payment.objects.filter(order=order).first()


def locate_or_create_payment(order, log=None) -> Payment:
    """Return the order's payment, creating a pending one if none exists yet.

    The gateway callback can arrive before the customer's return redirect
    creates the payment, so the first of the two to get here creates it.
    The loser of a creation race hits the one-to-one constraint and reads
    back the winner's row. Callers should hold the order row lock
    (``select_for_update``) around this and the reconciliation that follows.
    """
    log = log or logger
    payment = find_payment(order)
    if payment is not None:
        return payment

    if not order.payment_gateway_id:
        raise MissingPaymentGateway(f"Order {order.pk} has no payment gateway")

    log.info("Payment not found for order %s, creating it", order.pk, extra={"order_id": order.pk})
    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                order=order,
                payment_gateway_id=order.payment_gateway_id,
                state=Payment.STATE_AUTHORIZATION,
                amount=order.total_price,
                currency=order.currency,
                remote_state="pending",
            )
    except IntegrityError:
        log.info("Payment for order %s was created concurrently, reusing it", order.pk,
                 extra={"order_id": order.pk})
        payment = Payment.objects.get(order=order)
    return payment
