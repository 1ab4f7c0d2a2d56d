import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="LogEntryImportSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("finalized", models.DateTimeField(blank=True, null=True)),
                ("device", models.CharField(blank=True, max_length=200, null=True)),
                ("device_id", models.CharField(blank=True, max_length=200, null=True)),
                ("bookmark", models.CharField(blank=True, max_length=200, null=True)),
                ("error", models.TextField(blank=True, null=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="log_entry_imports",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "logbook_import_session",
                "ordering": ["-date"],
            },
        ),
        migrations.CreateModel(
            name="LogEntryImportRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sequence", models.PositiveIntegerField()),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                ("data", models.TextField()),
                (
                    "import_session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="records",
                        to="logbook.logentryimportsession",
                    ),
                ),
            ],
            options={
                "db_table": "logbook_import_record",
                "ordering": ["sequence"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("import_session", "sequence"),
                        name="uq_logbook_record_session_seq",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="LogEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("log_number", models.PositiveIntegerField(blank=True, null=True)),
                ("entry_time", models.CharField(max_length=19)),
                ("timezone", models.CharField(max_length=50)),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("duration", models.FloatField()),
                ("bottom_time", models.FloatField(blank=True, null=True)),
                ("max_depth", models.FloatField(blank=True, null=True)),
                ("average_depth", models.FloatField(blank=True, null=True)),
                (
                    "depth_unit",
                    models.CharField(blank=True, choices=[("m", "m"), ("ft", "ft")], max_length=2, null=True),
                ),
                ("air_temperature", models.FloatField(blank=True, null=True)),
                ("surface_temperature", models.FloatField(blank=True, null=True)),
                ("bottom_temperature", models.FloatField(blank=True, null=True)),
                (
                    "temperature_unit",
                    models.CharField(blank=True, choices=[("C", "C"), ("F", "F")], max_length=1, null=True),
                ),
                ("visibility", models.FloatField(blank=True, null=True)),
                ("weather", models.CharField(blank=True, max_length=100, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("device_id", models.CharField(blank=True, max_length=200, null=True)),
                ("device_name", models.CharField(blank=True, max_length=200, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "import_session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="log_entries",
                        to="logbook.logentryimportsession",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="log_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "logbook_log_entry",
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(fields=["owner", "log_number"], name="idx_logbook_entry_owner_num"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LogEntrySample",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("time_offset", models.PositiveIntegerField()),
                ("depth", models.FloatField()),
                ("temperature", models.FloatField(blank=True, null=True)),
                ("latitude", models.FloatField(blank=True, null=True)),
                ("longitude", models.FloatField(blank=True, null=True)),
                (
                    "log_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="samples",
                        to="logbook.logentry",
                    ),
                ),
            ],
            options={
                "db_table": "logbook_log_entry_sample",
                "ordering": ["log_entry", "time_offset"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("log_entry", "time_offset"),
                        name="uq_logbook_sample_entry_offset",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="LogEntryAir",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ordinal", models.PositiveSmallIntegerField()),
                ("name", models.CharField(max_length=100)),
                ("material", models.CharField(choices=[("al", "aluminum"), ("fe", "steel")], max_length=2)),
                ("volume", models.FloatField()),
                ("working_pressure", models.FloatField()),
                ("count", models.PositiveSmallIntegerField(default=1)),
                ("start_pressure", models.FloatField()),
                ("end_pressure", models.FloatField()),
                ("pressure_unit", models.CharField(choices=[("bar", "bar"), ("psi", "psi")], max_length=3)),
                ("o2_percent", models.FloatField(blank=True, null=True)),
                ("he_percent", models.FloatField(blank=True, null=True)),
                (
                    "log_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="air",
                        to="logbook.logentry",
                    ),
                ),
            ],
            options={
                "db_table": "logbook_log_entry_air",
                "ordering": ["log_entry", "ordinal"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("log_entry", "ordinal"),
                        name="uq_logbook_air_entry_ordinal",
                    )
                ],
            },
        ),
    ]
