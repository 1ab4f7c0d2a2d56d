import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import transaction

from apps.core.exceptions import InvalidStateTransition
from apps.logbook.importer import LogEntryImporter
from apps.logbook.imports import LogEntryImport
from apps.logbook.models import LogEntry, LogEntryImportSession, LogNumberMode


logger = logging.getLogger(__name__)

UNKNOWN_IMPORT_ERROR = "An unknown error occurred and the import was aborted."


@dataclass
class ListResult:
    data: list[LogEntryImport]
    total_count: int


class LogEntryImportService:
    def __init__(self, importer: LogEntryImporter | None = None):
        self.importer = importer or LogEntryImporter()

    def create_import(self, owner, device=None, device_id=None, bookmark=None) -> LogEntryImport:
        session = LogEntryImportSession.objects.create(
            owner=owner,
            device=device or None,
            device_id=device_id or None,
            bookmark=bookmark or None,
        )
        logger.info("Created import session %s for %s", session.id, owner.username)
        return LogEntryImport(session)

    def get_import(self, import_id, owner=None) -> LogEntryImport | None:
        queryset = LogEntryImportSession.objects.select_related("owner").filter(pk=import_id)
        if owner is not None:
            queryset = queryset.filter(owner=owner)
        session = queryset.first()
        return LogEntryImport(session) if session else None

    def list_imports(self, owner, show_finalized: bool = False, skip: int = 0, limit: int = 10) -> ListResult:
        queryset = LogEntryImportSession.objects.select_related("owner").filter(owner=owner)
        if not show_finalized:
            queryset = queryset.filter(finalized__isnull=True)
        total_count = queryset.count()
        sessions = queryset.order_by("-date", "id")[skip : skip + limit]
        return ListResult(data=[LogEntryImport(session) for session in sessions], total_count=total_count)

    def finalize_import(
        self,
        import_: LogEntryImport,
        log_number_mode: str = LogNumberMode.NONE,
        starting_log_number: int | None = None,
    ) -> list[LogEntry] | None:
        try:
            with transaction.atomic():
                if not import_.finalize():
                    return None
                return self.importer.commit(
                    import_,
                    log_number_mode=log_number_mode,
                    starting_log_number=starting_log_number,
                )
        except InvalidStateTransition:
            raise
        except Exception as exc:
            import_.refresh()
            logger.error("Error committing import session %s. Rolled back: %s", import_.id, exc)
            if not import_.canceled:
                import_.record_error(str(exc) or UNKNOWN_IMPORT_ERROR)
            raise

    def expire_imports(self, older_than: datetime) -> int:
        with transaction.atomic():
            _, deleted = LogEntryImportSession.objects.filter(finalized__isnull=True, date__lte=older_than).delete()
        expired = deleted.get(LogEntryImportSession._meta.label, 0)
        logger.info("Expired %d open import sessions older than %s", expired, older_than.isoformat())
        return expired
