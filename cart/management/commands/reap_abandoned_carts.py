from cart.services import reap_abandoned_carts
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Delete carts that have not been updated within the retention window"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Override CART_RETENTION_DAYS for this run",
        )

    def handle(self, *args, **options):
        count = reap_abandoned_carts(older_than_days=options["days"])
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} abandoned carts."))
