from datetime import datetime, timezone
from pathlib import Path

from config import BackupJob, SecurityProfile
from discovery.scanner import FileRecord
from duplicates import DestinationIndex
from organization import MERGED_TREE_NAME, build_copy_operation, build_copy_plan


def make_record(name: str, relative: str, category: str = "General", is_photo: bool = False) -> FileRecord:
    return FileRecord(
        source_path=Path("/sources/drive") / relative,
        relative_path=Path("drive") / relative,
        extension=Path(name).suffix.lower(),
        size=42,
        last_write_utc=datetime(2019, 3, 9, 8, 30, tzinfo=timezone.utc),
        category=category,
        is_photo=is_photo,
    )


def make_job(output_root: Path, **overrides) -> BackupJob:
    return BackupJob(sources=(Path("/sources/drive"),), output_root=output_root, **overrides)


def test_primary_destination_mirrors_relative_path(tmp_path: Path) -> None:
    record = make_record("notes.txt", "work/notes.txt")

    operation = build_copy_operation(make_job(tmp_path), record, DestinationIndex())

    assert operation.primary_destination == tmp_path / MERGED_TREE_NAME / "drive" / "work" / "notes.txt"
    assert operation.photo_destination is None
    assert operation.quarantine_destination is None
    assert operation.duplicate_hint is False
    assert operation.fan_out() == []


def test_photo_mirror_uses_year_and_month(tmp_path: Path) -> None:
    record = make_record("beach.jpg", "pics/2019/beach.jpg", is_photo=True)

    enabled = build_copy_operation(make_job(tmp_path), record, DestinationIndex())
    disabled = build_copy_operation(make_job(tmp_path, enable_photo_mirror=False), record, DestinationIndex())

    assert enabled.photo_destination == tmp_path / "Photo-Database" / "2019" / "03" / "beach.jpg"
    assert disabled.photo_destination is None


def test_quarantine_only_for_installers(tmp_path: Path) -> None:
    installer = make_record("setup.MSI", "apps/setup.MSI", category="Software")
    library = make_record("helper.dll", "apps/helper.dll", category="Software")
    job = make_job(tmp_path, security=SecurityProfile(quarantine_folder="Jail"))

    operation = build_copy_operation(job, installer, DestinationIndex())

    assert operation.quarantine_destination == tmp_path / "Jail" / "Software" / "setup.MSI"
    assert build_copy_operation(job, library, DestinationIndex()).quarantine_destination is None
    assert operation.fan_out() == [operation.quarantine_destination]


def test_duplicate_hint_follows_fast_check_toggle(tmp_path: Path) -> None:
    record = make_record("notes.txt", "notes.txt")
    index = DestinationIndex({(42, "notes.txt"): [tmp_path / "old" / "notes.txt"]})

    assert build_copy_operation(make_job(tmp_path), record, index).duplicate_hint is True
    assert (
        build_copy_operation(make_job(tmp_path, fast_duplicate_check=False), record, index).duplicate_hint
        is False
    )


def test_build_copy_plan_keeps_record_order(tmp_path: Path) -> None:
    records = [make_record("a.txt", "a.txt"), make_record("b.txt", "b.txt")]

    plan = build_copy_plan(make_job(tmp_path), records, DestinationIndex())

    assert [operation.record for operation in plan] == records
