from django.contrib import admin

from apps.logbook.models import LogEntry, LogEntryAir, LogEntryImportRecord, LogEntryImportSession, LogEntrySample


@admin.register(LogEntryImportSession)
class LogEntryImportSessionAdmin(admin.ModelAdmin):
    list_display = ("id", "owner", "date", "finalized", "device", "device_id")
    search_fields = ("owner__username", "device", "device_id", "bookmark")
    list_filter = ("finalized",)


@admin.register(LogEntryImportRecord)
class LogEntryImportRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "import_session", "sequence", "timestamp")
    search_fields = ("import_session__id",)


@admin.register(LogEntry)
class LogEntryAdmin(admin.ModelAdmin):
    list_display = ("owner", "log_number", "entry_time", "timezone", "duration", "max_depth", "device_name")
    search_fields = ("owner__username", "notes", "device_name", "device_id")
    list_filter = ("depth_unit", "temperature_unit")


@admin.register(LogEntrySample)
class LogEntrySampleAdmin(admin.ModelAdmin):
    list_display = ("log_entry", "time_offset", "depth", "temperature")


@admin.register(LogEntryAir)
class LogEntryAirAdmin(admin.ModelAdmin):
    list_display = ("log_entry", "ordinal", "name", "count", "start_pressure", "end_pressure", "pressure_unit")
