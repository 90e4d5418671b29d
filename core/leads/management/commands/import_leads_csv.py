from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from core.leads.importer import import_leads
from core.leads.outcomes import ImportSucceeded, RowErrors


class Command(BaseCommand):
    help = "Import leads from a CSV file (same rules as the upload endpoint, no rate limit)"

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV file with the 14 lead columns")
        parser.add_argument("--owner", required=True, help="owner id for the imported leads")

    def handle(self, *args, **options):
        path = Path(options["path"])
        if not path.exists():
            raise CommandError(f"CSV file not found at {path}")

        outcome = import_leads(content=path.read_bytes(), owner_id=options["owner"])

        if isinstance(outcome, ImportSucceeded):
            self.stdout.write(self.style.SUCCESS(f"Import complete: {outcome.imported} leads created"))
            return

        if isinstance(outcome, RowErrors):
            for err in outcome.errors:
                self.stdout.write(self.style.ERROR(f"Row {err.row}: {err.message}"))

        raise CommandError(outcome.to_error()["error"]["message"])
