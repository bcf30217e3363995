"""
Unit tests for PartitionEngine — grouping rules, file naming, progress and failure handling.
"""
from unittest.mock import Mock

import pytest

from mameutility.core.models import MachineRecord, PartitionMode, RecordSet
from mameutility.core.parser import parse_catalog, read_record_set
from mameutility.core.partition import PartitionEngine, passes_manufacturer_filter
from mameutility.core.progress import CancellationToken
from mameutility.errors import DirectoryNotFound


def machine(name, **kwargs):
    kwargs.setdefault("emulation_status", "good")
    return MachineRecord(name=name, **kwargs)


class TestManufacturerGrouping:

    def test_bootleg_group_and_clone_excluded(self, manufacturer_catalog):
        """Acme keeps only 'a' (b is a clone); Bootleg Inc produces no file at all."""
        groups = PartitionEngine().group(parse_catalog(manufacturer_catalog), PartitionMode.MANUFACTURER)

        assert list(groups) == ["Acme"]
        assert groups["Acme"].pairs() == [("a", "A")]

    def test_member_filter(self):
        assert passes_manufacturer_filter(machine("ok", description="Fine Game"))
        assert not passes_manufacturer_filter(machine("x", emulation_status="preliminary"))
        assert not passes_manufacturer_filter(machine("x", clone_of="parent"))
        assert not passes_manufacturer_filter(machine("neogeo_bios"))
        assert not passes_manufacturer_filter(machine("x", description="Game (BOOTLEG)"))
        assert not passes_manufacturer_filter(machine("x", description="Game (prototype)"))
        assert not passes_manufacturer_filter(machine("x", description="PlayChoice-10 Game"))

    def test_prototype_only_checked_in_description(self):
        assert passes_manufacturer_filter(machine("prototype_name", description="Released"))

    def test_group_left_empty_is_skipped(self, temp_dir):
        records = [machine("a", manufacturer="Acme", clone_of="z")]
        report = PartitionEngine().run(records, PartitionMode.MANUFACTURER, temp_dir / "out")

        assert report.written == {}
        assert report.skipped == ["Acme"]
        assert list((temp_dir / "out").iterdir()) == []

    def test_values_normalized(self):
        records = [machine("sf2", description="Street  Fighter &amp; Co", manufacturer="Capcom")]
        groups = PartitionEngine().group(records, PartitionMode.MANUFACTURER)
        assert groups["Capcom"].pairs() == [("sf2", "Street Fighter & Co")]


class TestYearAndSourceGrouping:

    def test_year_groups_keep_every_machine(self, sample_catalog):
        groups = PartitionEngine().group(parse_catalog(sample_catalog), PartitionMode.YEAR)

        assert list(groups) == ["1980", "1991", "198X"]
        assert groups["1980"].names() == ["pacman", "puckman"]
        assert groups["198X"].names() == ["mystery"]

    def test_source_file_groups(self, sample_catalog):
        groups = PartitionEngine().group(parse_catalog(sample_catalog), PartitionMode.SOURCE_FILE)
        assert list(groups) == ["pacman", "cps1", "mystery"]

    def test_blank_and_missing_keys_excluded(self):
        records = [machine("a", year="  "), machine("b"), machine("c", year="1999")]
        engine = PartitionEngine()
        plan = engine.plan(records, PartitionMode.YEAR)
        assert [g.raw_key for g in plan] == ["1999"]

    def test_colliding_file_names_made_unique(self):
        records = [machine("a", year="19??"), machine("b", year="19XX")]
        groups = PartitionEngine().group(records, PartitionMode.YEAR)
        assert list(groups) == ["19XX", "19XX_1"]


class TestFullList:

    def test_full_list_is_verbatim(self, temp_dir, sample_catalog):
        output = temp_dir / "full" / "mame_full.xml"
        report = PartitionEngine().run(parse_catalog(sample_catalog), PartitionMode.FULL, output)

        shape, records = read_record_set(output)
        assert report.total_groups == 1
        assert len(records) == 4
        assert records.entries[2].description == "Street Fighter II:   The World Warrior"


class TestPartitionRun:

    def test_writes_one_file_per_group(self, temp_dir, sample_catalog):
        out = temp_dir / "by_year"
        report = PartitionEngine().run(parse_catalog(sample_catalog), PartitionMode.YEAR, out)

        assert sorted(p.name for p in out.iterdir()) == ["1980.xml", "1991.xml", "198X.xml"]
        assert report.total_groups == 3
        assert report.processed_groups == 3
        assert read_record_set(out / "1991.xml")[1].pairs() == [("sf2", "Street Fighter II: The World Warrior")]

    def test_progress_after_each_group(self, temp_dir, sample_catalog):
        progress = Mock()
        PartitionEngine().run(parse_catalog(sample_catalog), PartitionMode.YEAR, temp_dir, progress=progress)
        assert [c.args[0] for c in progress.call_args_list] == [33, 66, 100]

    def test_failed_write_does_not_stop_remaining_groups(self, temp_dir):
        written = []

        def flaky_writer(path, records, shape):
            if path.endswith("1980.xml"):
                raise OSError("disk full")
            written.append(path)

        records = [machine("a", year="1980"), machine("b", year="1981"), machine("c", year="1982")]
        log = Mock()
        report = PartitionEngine(writer=flaky_writer).run(records, PartitionMode.YEAR, temp_dir, log=log)

        assert report.failed == ["1980"]
        assert len(written) == 2
        assert len(report.errors) == 1
        log.exception.assert_called_once()

    def test_cancel_before_group(self, temp_dir):
        token = CancellationToken()
        writer = Mock(side_effect=lambda *a: token.cancel())
        records = [machine("a", year="1980"), machine("b", year="1981")]

        report = PartitionEngine(writer=writer).run(records, PartitionMode.YEAR, temp_dir, cancel=token)

        assert report.cancelled is True
        assert writer.call_count == 1

    def test_uncreatable_output_folder_is_fatal(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("x")
        with pytest.raises(DirectoryNotFound) as exc:
            PartitionEngine().run([machine("a", year="1980")], PartitionMode.YEAR, blocker / "sub", log=Mock())
        assert exc.value.fatal is True

    def test_empty_catalog_completes(self, temp_dir):
        progress = Mock()
        report = PartitionEngine().run([], PartitionMode.YEAR, temp_dir, progress=progress)
        assert report.total_groups == 0
        progress.assert_called_once_with(100)

    def test_group_returns_record_sets(self):
        groups = PartitionEngine().group([machine("a", source_file="x.cpp")], PartitionMode.SOURCE_FILE)
        assert isinstance(groups["x"], RecordSet)
