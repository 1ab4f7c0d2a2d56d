from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.logbook.import_service import LogEntryImportService


class Command(BaseCommand):
    help = "Remove open log entry import sessions that were started too long ago."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=settings.LOG_IMPORT_EXPIRY_DAYS,
            help="Expire open sessions started at least this many days ago.",
        )

    def handle(self, *args, **options):
        older_than = timezone.now() - timedelta(days=options["days"])
        expired = LogEntryImportService().expire_imports(older_than)
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} import session(s)."))
