import logging

from django.http import HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .access import callback_access_required
from .exceptions import CallbackError
from .payload import parse_request
from .services import handle_callback

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
@callback_access_required
def paytr_callback(request):
    """PayTR server-to-server payment notification.

    Answers ``OK`` once the notification has been reconciled, whether the
    payment succeeded or not; PayTR keeps redelivering anything else. Only
    requests that cannot be tied to an order get a 400/404.
    """
    log = getattr(request, "logger", None) or logger
    payload = parse_request(request)
    try:
        handle_callback(payload, log=log)
    except CallbackError as e:
        log.error("PayTR callback rejected (%s): %s", e.status_code, e,
                  extra={"merchant_oid": payload.merchant_oid, "status": payload.status, **e.context})
        return e.as_response()
    return HttpResponse("OK", content_type="text/plain")
