from django.http import HttpResponse


class CallbackError(Exception):
    """A callback that is rejected before reconciliation.

    Each subclass fixes the HTTP status and the plain-text body the gateway
    gets back.
    """

    status_code = 400
    message = "Bad request"

    def __init__(self, detail: str = "", **context):
        super().__init__(detail or self.message)
        self.context = context

    def as_response(self) -> HttpResponse:
        return HttpResponse(self.message, status=self.status_code, content_type="text/plain")


class MalformedRequest(CallbackError):
    status_code = 400
    message = "Missing required parameters"


class MissingField(MalformedRequest): pass


class UnresolvableOrderId(CallbackError):
    status_code = 400
    message = "Invalid order ID"


class OrderNotFound(CallbackError):
    status_code = 404
    message = "Order not found"


class GatewayNotFound(CallbackError):
    status_code = 404
    message = "Payment gateway not found"
