from django.core.management.base import BaseCommand

from apps.ledger.services import LedgerService


class Command(BaseCommand):
    help = "Compare cached balances with their transaction records, optionally rewriting them."

    def add_arguments(self, parser):
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Rewrite drifted balances from the live records.",
        )

    def handle(self, *args, **options):
        apply = options["apply"]
        drifts = LedgerService.reconcile(apply=apply)

        for drift in drifts:
            self.stdout.write(
                f"{drift.entity}#{drift.entity_id} {drift.field}: stored={drift.stored} expected={drift.expected}"
            )

        if not drifts:
            self.stdout.write(self.style.SUCCESS("Ledger is consistent."))
        elif apply:
            self.stdout.write(self.style.SUCCESS(f"Fixed {len(drifts)} drifted balance(s)."))
        else:
            self.stdout.write(self.style.WARNING(f"Found {len(drifts)} drifted balance(s). Re-run with --apply to fix."))
