import json
import logging
from datetime import datetime, timezone as dt_timezone
from typing import Any
from zoneinfo import ZoneInfo

from django.db import transaction

from apps.logbook.api.v1.serializers import ENTRY_TIME_FORMAT, LogEntryRecordSerializer
from apps.logbook.imports import LogEntryImport
from apps.logbook.models import LogEntry, LogEntryAir, LogEntrySample, LogNumberMode


logger = logging.getLogger(__name__)

ENTRY_BATCH_SIZE = 20
SAMPLE_BATCH_SIZE = 1000
AIR_BATCH_SIZE = 100


class ImportRecordError(Exception):
    def __init__(self, message: str, errors: Any = None):
        super().__init__(message)
        self.errors = errors


def summarize_depths(samples: list[dict[str, Any]]) -> tuple[float | None, float | None]:
    depths = [sample["depth"] for sample in samples if sample.get("depth")]
    if not depths:
        return None, None
    return max(depths), sum(depths) / len(depths)


class LogEntryImporter:
    """Commits the records of a finalized import session as log entries."""

    def __init__(
        self,
        entry_batch_size: int = ENTRY_BATCH_SIZE,
        sample_batch_size: int = SAMPLE_BATCH_SIZE,
        air_batch_size: int = AIR_BATCH_SIZE,
    ):
        self.entry_batch_size = entry_batch_size
        self.sample_batch_size = sample_batch_size
        self.air_batch_size = air_batch_size

    def parse_record(
        self, import_: LogEntryImport, raw: str, index: int
    ) -> tuple[LogEntry, list[LogEntrySample], list[LogEntryAir]]:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ImportRecordError(f"Import record #{index + 1} is not valid JSON.") from exc

        serializer = LogEntryRecordSerializer(data=payload)
        if not serializer.is_valid():
            raise ImportRecordError(f"Import record #{index + 1} is not a valid log entry.", serializer.errors)

        data = serializer.validated_data
        timing = data["timing"]
        entry_time = timing["entry_time"]
        local_time = datetime.strptime(entry_time["date"], ENTRY_TIME_FORMAT).replace(
            tzinfo=ZoneInfo(entry_time["timezone"])
        )
        depths = data.get("depths") or {}
        conditions = data.get("conditions") or {}
        samples = data.get("samples") or []

        max_depth = depths.get("max_depth")
        average_depth = depths.get("average_depth")
        if samples and (max_depth is None or average_depth is None):
            sampled_max, sampled_average = summarize_depths(samples)
            max_depth = max_depth if max_depth is not None else sampled_max
            average_depth = average_depth if average_depth is not None else sampled_average

        entry = LogEntry(
            owner=import_.owner,
            import_session_id=import_.id,
            log_number=data.get("log_number"),
            entry_time=entry_time["date"],
            timezone=entry_time["timezone"],
            timestamp=local_time.astimezone(dt_timezone.utc),
            duration=timing["duration"],
            bottom_time=timing.get("bottom_time"),
            max_depth=max_depth,
            average_depth=average_depth,
            depth_unit=depths.get("depth_unit"),
            air_temperature=conditions.get("air_temperature"),
            surface_temperature=conditions.get("surface_temperature"),
            bottom_temperature=conditions.get("bottom_temperature"),
            temperature_unit=conditions.get("temperature_unit"),
            visibility=conditions.get("visibility"),
            weather=conditions.get("weather"),
            notes=data.get("notes") or None,
            tags=data.get("tags") or [],
            device_id=import_.device_id,
            device_name=import_.device,
        )
        entry_samples = [
            LogEntrySample(
                log_entry=entry,
                time_offset=sample["offset"],
                depth=sample["depth"],
                temperature=sample.get("temperature"),
                latitude=(sample.get("gps") or {}).get("lat"),
                longitude=(sample.get("gps") or {}).get("lng"),
            )
            for sample in samples
        ]
        entry_air = [
            LogEntryAir(
                log_entry=entry,
                ordinal=ordinal,
                name=tank["name"],
                material=tank["material"],
                volume=tank["volume"],
                working_pressure=tank["working_pressure"],
                count=tank["count"],
                start_pressure=tank["start_pressure"],
                end_pressure=tank["end_pressure"],
                pressure_unit=tank["pressure_unit"],
                o2_percent=tank.get("o2_percent"),
                he_percent=tank.get("he_percent"),
            )
            for ordinal, tank in enumerate(data.get("air") or [], start=1)
        ]
        return entry, entry_samples, entry_air

    def commit(
        self,
        import_: LogEntryImport,
        log_number_mode: str = LogNumberMode.NONE,
        starting_log_number: int | None = None,
    ) -> list[LogEntry]:
        parsed = [
            self.parse_record(import_, raw, index)
            for index, raw in enumerate(import_.iter_records(batch_size=self.entry_batch_size))
        ]
        if not parsed:
            raise ImportRecordError("Cannot commit an import that has no import records attached.")

        parsed.sort(key=lambda item: item[0].timestamp)
        if log_number_mode == LogNumberMode.ALL:
            for offset, (entry, _, _) in enumerate(parsed):
                entry.log_number = (starting_log_number or 1) + offset

        entries = [entry for entry, _, _ in parsed]
        samples = [sample for _, entry_samples, _ in parsed for sample in entry_samples]
        air = [tank for _, _, entry_air in parsed for tank in entry_air]

        with transaction.atomic():
            for start in range(0, len(entries), self.entry_batch_size):
                batch = entries[start : start + self.entry_batch_size]
                logger.debug("Saving batch of %d imported log entries...", len(batch))
                LogEntry.objects.bulk_create(batch)
            for start in range(0, len(air), self.air_batch_size):
                batch = air[start : start + self.air_batch_size]
                logger.debug("Saving batch of %d log entry air data...", len(batch))
                LogEntryAir.objects.bulk_create(batch)
            for start in range(0, len(samples), self.sample_batch_size):
                batch = samples[start : start + self.sample_batch_size]
                logger.debug("Saving batch of %d log entry data samples...", len(batch))
                LogEntrySample.objects.bulk_create(batch)

        logger.info(
            "Committed %d log entries (%d samples, %d tanks) from import session %s",
            len(entries),
            len(samples),
            len(air),
            import_.id,
        )
        return entries
