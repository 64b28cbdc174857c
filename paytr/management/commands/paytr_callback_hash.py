from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from payments.credentials import get_credentials
from payments.models import PaymentGateway
from paytr.utils import make_hash


class Command(BaseCommand):
    help = "Print the hash PayTR would send in a callback for the given fields"

    def add_arguments(self, parser):
        parser.add_argument("merchant_oid")
        parser.add_argument("status")
        parser.add_argument("total_amount", nargs="?", default="")
        parser.add_argument("--gateway", default="paytr", help="PaymentGateway id whose credentials to use")

    def handle(self, *args, **opts):
        try:
            gateway = PaymentGateway.objects.get(pk=opts["gateway"])
        except PaymentGateway.DoesNotExist:
            raise CommandError(f"Payment gateway {opts['gateway']!r} does not exist")

        try:
            creds = get_credentials(gateway)
        except ImproperlyConfigured as e:
            raise CommandError(str(e))
        self.stdout.write(make_hash(
            opts["merchant_oid"], opts["status"], opts["total_amount"],
            creds.merchant_salt, creds.merchant_key,
        ))
