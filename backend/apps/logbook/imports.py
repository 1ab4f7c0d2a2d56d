import json
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Any

from django.db import transaction
from django.db.models import Exists, Max, OuterRef
from django.utils import timezone

from apps.core.exceptions import InvalidStateTransition
from apps.logbook.models import LogEntryImportRecord, LogEntryImportSession


logger = logging.getLogger(__name__)


class LogEntryImport:
    """An import session: a batch of raw dive records awaiting finalize or cancel.

    The session is open while ``finalized`` is null and its row exists. Both
    terminal transitions are checked against the stored row, not only against
    the in-memory copy, so that concurrent callers observe the same outcomes.
    """

    def __init__(self, data: LogEntryImportSession):
        self._data = data
        self._canceled = False

    @property
    def id(self):
        return self._data.id

    @property
    def owner(self):
        return self._data.owner

    @property
    def date(self) -> datetime:
        return self._data.date

    @property
    def finalized(self) -> bool:
        return self._data.finalized is not None

    @property
    def finalized_at(self) -> datetime | None:
        return self._data.finalized

    @property
    def canceled(self) -> bool:
        return self._canceled

    @property
    def device(self) -> str | None:
        return self._data.device or None

    @property
    def device_id(self) -> str | None:
        return self._data.device_id or None

    @property
    def bookmark(self) -> str | None:
        return self._data.bookmark or None

    @property
    def error(self) -> str | None:
        return self._data.error or None

    @property
    def failed(self) -> bool:
        return bool(self._data.error)

    def _records(self):
        return LogEntryImportRecord.objects.filter(import_session_id=self.id)

    def _stored_state(self, lock: bool = False) -> tuple[bool, datetime | None]:
        queryset = LogEntryImportSession.objects.filter(pk=self.id)
        if lock:
            queryset = queryset.select_for_update()
        rows = list(queryset.values_list("finalized", flat=True)[:1])
        if not rows:
            return False, None
        return True, rows[0]

    def _sync(self, exists: bool, finalized: datetime | None) -> None:
        if not exists:
            self._canceled = True
        elif finalized is not None:
            self._data.finalized = finalized

    def get_record_count(self) -> int:
        return self._records().count()

    def iter_records(self, batch_size: int = 100) -> Iterator[str]:
        return (
            self._records()
            .order_by("sequence")
            .values_list("data", flat=True)
            .iterator(chunk_size=batch_size)
        )

    def add_records(self, records: Iterable[Any]) -> int:
        if self.canceled:
            raise InvalidStateTransition("Unable to add new records to an import session that has been canceled.")
        if self.finalized:
            raise InvalidStateTransition(
                "Unable to add new records to an import session that has already been finalized."
            )

        payloads = [json.dumps(record, default=str) for record in records]

        with transaction.atomic():
            exists, finalized = self._stored_state(lock=True)
            if exists and finalized is None:
                # Session row lock serializes concurrent appends.
                last = self._records().aggregate(last=Max("sequence"))["last"] or 0
                LogEntryImportRecord.objects.bulk_create(
                    LogEntryImportRecord(import_session_id=self.id, sequence=last + offset, data=data)
                    for offset, data in enumerate(payloads, start=1)
                )

        self._sync(exists, finalized)
        if not exists:
            raise InvalidStateTransition("Unable to add new records to an import session that has been canceled.")
        if finalized is not None:
            raise InvalidStateTransition(
                "Unable to add new records to an import session that has already been finalized."
            )

        logger.debug("Added %d records to import session %s", len(payloads), self.id)
        return len(payloads)

    def cancel(self) -> bool:
        if self.finalized:
            logger.warning("Refused to cancel finalized import session %s", self.id)
            raise InvalidStateTransition("Cannot cancel an import that has already been finalized.")
        if self.canceled:
            return False

        logger.debug("Canceling import session %s...", self.id)
        deleted_records = 0
        with transaction.atomic():
            exists, finalized = self._stored_state(lock=True)
            if exists and finalized is None:
                deleted_records, _ = self._records().delete()
                LogEntryImportSession.objects.filter(pk=self.id).delete()

        self._sync(exists, finalized)
        if finalized is not None:
            logger.warning("Refused to cancel finalized import session %s", self.id)
            raise InvalidStateTransition("Cannot cancel an import that has already been finalized.")
        if not exists:
            return False

        self._canceled = True
        logger.info("Canceled import session %s (%d records discarded)", self.id, deleted_records)
        return True

    def finalize(self) -> bool:
        if self.finalized:
            return False
        if self.canceled:
            raise InvalidStateTransition("Unable to finalize an import that has been canceled.")

        finalized = max(timezone.now(), self.date)
        has_records = Exists(LogEntryImportRecord.objects.filter(import_session=OuterRef("pk")))
        updated = (
            LogEntryImportSession.objects.filter(pk=self.id, finalized__isnull=True)
            .filter(has_records)
            .update(finalized=finalized, error=None)
        )
        if updated:
            self._data.finalized = finalized
            self._data.error = None
            logger.info("Import session %s finalized", self.id)
            return True

        exists, stored = self._stored_state()
        self._sync(exists, stored)
        if stored is not None:
            return False
        if not exists:
            raise InvalidStateTransition("Unable to finalize an import that has been canceled.")

        logger.warning("Attempted to finalize import session %s with no records", self.id)
        raise InvalidStateTransition("Cannot finalize an import that has no import records attached.")

    def record_error(self, message: str) -> None:
        LogEntryImportSession.objects.filter(pk=self.id).update(error=message)
        self._data.error = message

    def refresh(self) -> None:
        try:
            self._data.refresh_from_db()
        except LogEntryImportSession.DoesNotExist:
            self._canceled = True

    def to_json(self) -> dict[str, Any]:
        data = {
            "id": str(self.id),
            "owner": self.owner.username,
            "date": self.date,
            "finalized": self.finalized,
            "failed": self.failed,
        }
        optional = {
            "device": self.device,
            "device_id": self.device_id,
            "bookmark": self.bookmark,
            "error": self.error,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data
