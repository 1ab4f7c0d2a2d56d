from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rest_framework import serializers

from apps.logbook.models import DepthUnit, LogEntry, LogEntryAir, LogNumberMode, PressureUnit, TankMaterial, TemperatureUnit


ENTRY_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class CreateLogEntryImportSerializer(serializers.Serializer):
    device = serializers.CharField(max_length=200, required=False)
    device_id = serializers.CharField(max_length=200, required=False)
    bookmark = serializers.CharField(max_length=200, required=False)


class ListLogEntryImportsSerializer(serializers.Serializer):
    show_finalized = serializers.BooleanField(required=False, default=False)
    skip = serializers.IntegerField(required=False, min_value=0, default=0)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=10)


class FinalizeLogEntryImportSerializer(serializers.Serializer):
    log_number_mode = serializers.ChoiceField(choices=LogNumberMode.choices, required=False, default=LogNumberMode.NONE)
    starting_log_number = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if attrs["log_number_mode"] == LogNumberMode.ALL and not attrs.get("starting_log_number"):
            raise serializers.ValidationError(
                {"starting_log_number": "starting_log_number is required when log_number_mode is 'all'."}
            )
        return attrs


class EntryTimeSerializer(serializers.Serializer):
    date = serializers.CharField(max_length=19)
    timezone = serializers.CharField(max_length=50)

    def validate_date(self, value):
        try:
            datetime.strptime(value, ENTRY_TIME_FORMAT)
        except ValueError as exc:
            raise serializers.ValidationError("date must be formatted as YYYY-MM-DDTHH:MM:SS.") from exc
        return value

    def validate_timezone(self, value):
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise serializers.ValidationError(f"Unknown timezone '{value}'.") from exc
        return value


class TimingSerializer(serializers.Serializer):
    entry_time = EntryTimeSerializer()
    duration = serializers.FloatField(min_value=0, max_value=86400)
    bottom_time = serializers.FloatField(required=False, min_value=0)

    def validate(self, attrs):
        if attrs["duration"] <= 0:
            raise serializers.ValidationError({"duration": "duration must be positive."})
        bottom_time = attrs.get("bottom_time")
        if bottom_time is not None and bottom_time > attrs["duration"]:
            raise serializers.ValidationError({"bottom_time": "bottom_time cannot exceed duration."})
        return attrs


class DepthsSerializer(serializers.Serializer):
    depth_unit = serializers.ChoiceField(choices=DepthUnit.choices, required=False)
    average_depth = serializers.FloatField(required=False, min_value=0)
    max_depth = serializers.FloatField(required=False, min_value=0)


class ConditionsSerializer(serializers.Serializer):
    air_temperature = serializers.FloatField(required=False)
    surface_temperature = serializers.FloatField(required=False)
    bottom_temperature = serializers.FloatField(required=False)
    temperature_unit = serializers.ChoiceField(choices=TemperatureUnit.choices, required=False)
    visibility = serializers.FloatField(required=False, min_value=0)
    weather = serializers.CharField(required=False, max_length=100)


class GpsSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class AirSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    material = serializers.ChoiceField(choices=TankMaterial.choices)
    volume = serializers.FloatField(min_value=0)
    working_pressure = serializers.FloatField(min_value=0)
    count = serializers.IntegerField(min_value=1, max_value=10, required=False, default=1)
    start_pressure = serializers.FloatField(min_value=0)
    end_pressure = serializers.FloatField(min_value=0)
    pressure_unit = serializers.ChoiceField(choices=PressureUnit.choices)
    o2_percent = serializers.FloatField(min_value=0, max_value=100, required=False)
    he_percent = serializers.FloatField(min_value=0, max_value=100, required=False)

    def validate(self, attrs):
        max_pressure = 300 if attrs["pressure_unit"] == PressureUnit.BAR else 4400
        if attrs["start_pressure"] > max_pressure:
            raise serializers.ValidationError(
                {"start_pressure": "Start pressure cannot be more than 300bar / 4400psi."}
            )
        if attrs["end_pressure"] >= attrs["start_pressure"]:
            raise serializers.ValidationError({"end_pressure": "End pressure must be lower than start pressure."})
        if attrs.get("o2_percent", 0) + attrs.get("he_percent", 0) > 100:
            raise serializers.ValidationError("O2 and He percentages cannot add to more than 100%.")
        return attrs


class SampleSerializer(serializers.Serializer):
    offset = serializers.IntegerField(min_value=0)
    depth = serializers.FloatField(min_value=0)
    temperature = serializers.FloatField(required=False)
    gps = GpsSerializer(required=False)


class LogEntryRecordSerializer(serializers.Serializer):
    log_number = serializers.IntegerField(required=False, min_value=1)
    timing = TimingSerializer()
    depths = DepthsSerializer(required=False)
    conditions = ConditionsSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=5000)
    tags = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    air = AirSerializer(many=True, required=False)
    samples = SampleSerializer(many=True, required=False)

    def validate_samples(self, value):
        offsets = [sample["offset"] for sample in value]
        if len(offsets) != len(set(offsets)):
            raise serializers.ValidationError("Sample offsets must be unique.")
        return value


class LogEntryAirSerializer(serializers.ModelSerializer):
    class Meta:
        model = LogEntryAir
        fields = (
            "ordinal",
            "name",
            "material",
            "volume",
            "working_pressure",
            "count",
            "start_pressure",
            "end_pressure",
            "pressure_unit",
            "o2_percent",
            "he_percent",
        )


class LogEntrySerializer(serializers.ModelSerializer):
    owner = serializers.CharField(source="owner.username", read_only=True)
    import_session = serializers.UUIDField(source="import_session_id", read_only=True)
    air = LogEntryAirSerializer(many=True, read_only=True)

    class Meta:
        model = LogEntry
        fields = (
            "id",
            "owner",
            "import_session",
            "log_number",
            "entry_time",
            "timezone",
            "timestamp",
            "duration",
            "bottom_time",
            "max_depth",
            "average_depth",
            "depth_unit",
            "air_temperature",
            "surface_temperature",
            "bottom_temperature",
            "temperature_unit",
            "visibility",
            "weather",
            "notes",
            "tags",
            "air",
            "device_id",
            "device_name",
            "created_at",
        )
