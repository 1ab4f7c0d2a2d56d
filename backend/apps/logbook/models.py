import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class DepthUnit(models.TextChoices):
    METERS = "m", "m"
    FEET = "ft", "ft"


class TemperatureUnit(models.TextChoices):
    CELSIUS = "C", "C"
    FAHRENHEIT = "F", "F"


class PressureUnit(models.TextChoices):
    BAR = "bar", "bar"
    PSI = "psi", "psi"


class TankMaterial(models.TextChoices):
    ALUMINUM = "al", "aluminum"
    STEEL = "fe", "steel"


class LogNumberMode(models.TextChoices):
    NONE = "none", "none"
    ALL = "all", "all"


class LogEntryImportSession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="log_entry_imports",
    )
    date = models.DateTimeField(default=timezone.now, db_index=True)
    finalized = models.DateTimeField(blank=True, null=True)
    device = models.CharField(max_length=200, blank=True, null=True)
    device_id = models.CharField(max_length=200, blank=True, null=True)
    bookmark = models.CharField(max_length=200, blank=True, null=True)
    error = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "logbook_import_session"
        ordering = ["-date"]

    def __str__(self) -> str:
        state = "finalized" if self.finalized else "open"
        return f"{self.owner_id}:{self.date:%Y-%m-%d %H:%M}:{state}"


class LogEntryImportRecord(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    import_session = models.ForeignKey(
        LogEntryImportSession,
        on_delete=models.CASCADE,
        related_name="records",
    )
    sequence = models.PositiveIntegerField()
    timestamp = models.DateTimeField(default=timezone.now)
    data = models.TextField()

    class Meta:
        db_table = "logbook_import_record"
        ordering = ["sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["import_session", "sequence"],
                name="uq_logbook_record_session_seq",
            )
        ]

    def __str__(self) -> str:
        return f"{self.import_session_id}:{self.id}"


class LogEntry(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="log_entries",
    )
    import_session = models.ForeignKey(
        LogEntryImportSession,
        on_delete=models.RESTRICT,
        related_name="log_entries",
        blank=True,
        null=True,
    )
    log_number = models.PositiveIntegerField(blank=True, null=True)
    entry_time = models.CharField(max_length=19)
    timezone = models.CharField(max_length=50)
    timestamp = models.DateTimeField(db_index=True)
    duration = models.FloatField()
    bottom_time = models.FloatField(blank=True, null=True)
    max_depth = models.FloatField(blank=True, null=True)
    average_depth = models.FloatField(blank=True, null=True)
    depth_unit = models.CharField(max_length=2, choices=DepthUnit.choices, blank=True, null=True)
    air_temperature = models.FloatField(blank=True, null=True)
    surface_temperature = models.FloatField(blank=True, null=True)
    bottom_temperature = models.FloatField(blank=True, null=True)
    temperature_unit = models.CharField(max_length=1, choices=TemperatureUnit.choices, blank=True, null=True)
    visibility = models.FloatField(blank=True, null=True)
    weather = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    device_id = models.CharField(max_length=200, blank=True, null=True)
    device_name = models.CharField(max_length=200, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "logbook_log_entry"
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["owner", "log_number"], name="idx_logbook_entry_owner_num"),
        ]

    def __str__(self) -> str:
        return f"{self.owner_id}:{self.entry_time} ({self.timezone})"


class LogEntrySample(models.Model):
    log_entry = models.ForeignKey(LogEntry, on_delete=models.CASCADE, related_name="samples")
    time_offset = models.PositiveIntegerField()
    depth = models.FloatField()
    temperature = models.FloatField(blank=True, null=True)
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)

    class Meta:
        db_table = "logbook_log_entry_sample"
        ordering = ["log_entry", "time_offset"]
        constraints = [
            models.UniqueConstraint(
                fields=["log_entry", "time_offset"],
                name="uq_logbook_sample_entry_offset",
            )
        ]

    def __str__(self) -> str:
        return f"{self.log_entry_id}@{self.time_offset}s: {self.depth}"


class LogEntryAir(models.Model):
    log_entry = models.ForeignKey(LogEntry, on_delete=models.CASCADE, related_name="air")
    ordinal = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=100)
    material = models.CharField(max_length=2, choices=TankMaterial.choices)
    volume = models.FloatField()
    working_pressure = models.FloatField()
    count = models.PositiveSmallIntegerField(default=1)
    start_pressure = models.FloatField()
    end_pressure = models.FloatField()
    pressure_unit = models.CharField(max_length=3, choices=PressureUnit.choices)
    o2_percent = models.FloatField(blank=True, null=True)
    he_percent = models.FloatField(blank=True, null=True)

    class Meta:
        db_table = "logbook_log_entry_air"
        ordering = ["log_entry", "ordinal"]
        constraints = [
            models.UniqueConstraint(
                fields=["log_entry", "ordinal"],
                name="uq_logbook_air_entry_ordinal",
            )
        ]

    def __str__(self) -> str:
        return f"{self.log_entry_id}#{self.ordinal}: {self.count}x {self.name}"
