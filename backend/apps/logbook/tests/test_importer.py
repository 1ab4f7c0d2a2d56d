from datetime import datetime, timezone as dt_timezone

from django.test import TestCase

from apps.logbook.importer import ImportRecordError, LogEntryImporter, summarize_depths
from apps.logbook.models import LogEntry, LogEntryAir, LogEntryImportRecord, LogEntrySample, LogNumberMode
from apps.logbook.tests.factories import create_import, create_user, dive_profile, log_entry_record, tank


class SummarizeDepthsTests(TestCase):
    def test_zero_depths_are_ignored(self):
        samples = [{"depth": 0}, {"depth": 10}, {"depth": 20}, {"depth": 0}]

        self.assertEqual(summarize_depths(samples), (20, 15))

    def test_no_usable_depths(self):
        self.assertEqual(summarize_depths([{"depth": 0}]), (None, None))
        self.assertEqual(summarize_depths([]), (None, None))


class LogEntryImporterTests(TestCase):
    def setUp(self):
        self.owner = create_user()
        self.importer = LogEntryImporter()

    def test_commit_creates_entries_for_session_owner(self):
        import_ = create_import(self.owner, device="Suunto D5", device_id="SN-42")
        import_.add_records([log_entry_record(date="2026-06-14T09:30:00", timezone="Europe/Rome")])

        entries = self.importer.commit(import_)

        self.assertEqual(len(entries), 1)
        entry = LogEntry.objects.get()
        self.assertEqual(entry.owner, self.owner)
        self.assertEqual(entry.import_session_id, import_.id)
        self.assertEqual(entry.entry_time, "2026-06-14T09:30:00")
        self.assertEqual(entry.timezone, "Europe/Rome")
        self.assertEqual(entry.timestamp, datetime(2026, 6, 14, 7, 30, tzinfo=dt_timezone.utc))
        self.assertEqual(entry.duration, 2700)
        self.assertEqual(entry.max_depth, 24.5)
        self.assertEqual(entry.average_depth, 14.2)
        self.assertEqual(entry.tags, ["reef", "wall"])
        self.assertEqual(entry.device_name, "Suunto D5")
        self.assertEqual(entry.device_id, "SN-42")
        self.assertIsNone(entry.log_number)

    def test_depths_are_computed_from_samples_when_missing(self):
        import_ = create_import(self.owner)
        samples = [
            {"offset": 0, "depth": 0},
            {"offset": 60, "depth": 10},
            {"offset": 120, "depth": 20, "gps": {"lat": 43.1, "lng": 9.8}},
            {"offset": 180, "depth": 0},
        ]
        import_.add_records([log_entry_record(depths={"depth_unit": "m"}, samples=samples)])

        self.importer.commit(import_)

        entry = LogEntry.objects.get()
        self.assertEqual(entry.max_depth, 20)
        self.assertEqual(entry.average_depth, 15)
        self.assertEqual(entry.samples.count(), 4)
        sample = LogEntrySample.objects.get(log_entry=entry, time_offset=120)
        self.assertEqual((sample.latitude, sample.longitude), (43.1, 9.8))

    def test_recorded_depths_win_over_samples(self):
        import_ = create_import(self.owner)
        import_.add_records([log_entry_record(samples=dive_profile(max_depth=30))])

        self.importer.commit(import_)

        entry = LogEntry.objects.get()
        self.assertEqual(entry.max_depth, 24.5)
        self.assertEqual(entry.average_depth, 14.2)
        self.assertEqual(entry.samples.count(), len(dive_profile(max_depth=30)))

    def test_tanks_are_committed_in_order(self):
        import_ = create_import(self.owner)
        import_.add_records(
            [
                log_entry_record(air=[tank(), tank(name="Deco 40", volume=5.7, o2_percent=50, count=1)]),
                log_entry_record(date="2026-06-15T10:00:00"),
            ]
        )

        self.importer.commit(import_)

        entry = LogEntry.objects.get(entry_time="2026-06-14T09:30:00")
        tanks = list(entry.air.order_by("ordinal"))
        self.assertEqual([(t.ordinal, t.name) for t in tanks], [(1, "AL80"), (2, "Deco 40")])
        self.assertEqual(tanks[0].count, 2)
        self.assertEqual((tanks[0].start_pressure, tanks[0].end_pressure), (207, 50))
        self.assertEqual(tanks[0].pressure_unit, "bar")
        self.assertIsNone(tanks[0].o2_percent)
        self.assertEqual(tanks[1].o2_percent, 50)
        self.assertFalse(LogEntry.objects.get(entry_time="2026-06-15T10:00:00").air.exists())

    def test_small_air_batches_save_every_tank(self):
        importer = LogEntryImporter(air_batch_size=2)
        import_ = create_import(self.owner)
        import_.add_records(
            log_entry_record(date=f"2026-08-{day:02d}T08:00:00", air=[tank(), tank(name="Pony")]) for day in range(1, 4)
        )

        importer.commit(import_)

        self.assertEqual(LogEntryAir.objects.count(), 6)

    def test_log_numbers_follow_dive_order(self):
        import_ = create_import(self.owner)
        import_.add_records(
            [
                log_entry_record(date="2026-06-03T10:00:00"),
                log_entry_record(date="2026-06-01T10:00:00"),
                log_entry_record(date="2026-06-02T10:00:00"),
            ]
        )

        self.importer.commit(import_, log_number_mode=LogNumberMode.ALL, starting_log_number=100)

        numbered = list(LogEntry.objects.order_by("timestamp").values_list("entry_time", "log_number"))
        self.assertEqual(
            numbered,
            [
                ("2026-06-01T10:00:00", 100),
                ("2026-06-02T10:00:00", 101),
                ("2026-06-03T10:00:00", 102),
            ],
        )

    def test_record_log_number_kept_without_numbering(self):
        import_ = create_import(self.owner)
        import_.add_records([log_entry_record(log_number=7)])

        self.importer.commit(import_, log_number_mode=LogNumberMode.NONE)

        self.assertEqual(LogEntry.objects.get().log_number, 7)

    def test_small_batches_save_every_entry(self):
        importer = LogEntryImporter(entry_batch_size=2, sample_batch_size=5)
        import_ = create_import(self.owner)
        import_.add_records(
            log_entry_record(date=f"2026-07-{day:02d}T08:00:00", samples=dive_profile()) for day in range(1, 6)
        )

        entries = importer.commit(import_)

        self.assertEqual(len(entries), 5)
        self.assertEqual(LogEntry.objects.count(), 5)
        self.assertEqual(LogEntrySample.objects.count(), 5 * len(dive_profile()))

    def test_invalid_record_raises_with_field_errors(self):
        import_ = create_import(self.owner)
        record = log_entry_record()
        record["timing"]["entry_time"]["timezone"] = "Mars/Olympus_Mons"
        import_.add_records([log_entry_record(date="2026-06-01T10:00:00")])
        import_.add_records([record])

        with self.assertRaises(ImportRecordError) as ctx:
            self.importer.commit(import_)

        self.assertIn("#2", str(ctx.exception))
        self.assertIn("timing", ctx.exception.errors)
        self.assertEqual(LogEntry.objects.count(), 0)

    def test_malformed_json_raises(self):
        import_ = create_import(self.owner)
        LogEntryImportRecord.objects.create(import_session_id=import_.id, sequence=1, data="{not json")

        with self.assertRaises(ImportRecordError):
            self.importer.commit(import_)

    def test_commit_without_records_raises(self):
        import_ = create_import(self.owner)

        with self.assertRaises(ImportRecordError):
            self.importer.commit(import_)
