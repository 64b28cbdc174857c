import logging

logger = logging.getLogger(__name__)


class OrderLock:
    """Checkout-time editing lock stored on the order row."""

    def is_locked(self, order) -> bool:
        return bool(order.locked)

    def lock(self, order):
        order.locked = True
        order.save(update_fields=["locked", "updated_at"])
        logger.debug("Order %s locked", order.pk)

    def unlock(self, order):
        order.locked = False
        order.save(update_fields=["locked", "updated_at"])
        logger.debug("Order %s unlocked", order.pk)


order_lock = OrderLock()
