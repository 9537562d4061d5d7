# foodlink/management/commands/expire_donations.py
from django.core.management.base import BaseCommand

from foodlink.lifecycle import expire_overdue_donations


class Command(BaseCommand):
    help = 'Mark open donations past their expiry date as expired and cancel their pickups'

    def handle(self, *args, **options):
        expired = expire_overdue_donations()
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} donation(s)"))
