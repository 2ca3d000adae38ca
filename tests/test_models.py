import dataclasses

import pytest

from addondebug.core.models import LABELS, ClassificationRecord, FileVersion, ModuleFacts


def test_file_version_from_fixed_info_words() -> None:
    version = FileVersion.from_ms_ls(0x00010002, 0x00030004)
    assert version == FileVersion(1, 2, 3, 4)
    assert str(version) == "1.2.3.4"


def test_file_version_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        FileVersion(1, 70000, 0, 0)
    with pytest.raises(ValueError):
        FileVersion(-1, 0, 0, 0)


def test_facts_normalise_exports_to_tuple() -> None:
    facts = ModuleFacts(exported_names=["a", "b"], raw_bytes=b"")
    assert facts.exported_names == ("a", "b")
    assert hash(facts) == hash(ModuleFacts(exported_names=("a", "b"), raw_bytes=b""))


def test_record_is_immutable() -> None:
    record = ClassificationRecord()
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.is_stats_module = True  # type: ignore[misc]


def test_record_formatting() -> None:
    record = ClassificationRecord(is_stats_module=True, file_version=FileVersion(7, 0, 0, 1))
    text = str(record)
    assert text.startswith("is_stats_module: True, is_stats_addon: False")
    assert text.endswith("file_version: 7.0.0.1")
    assert "file_version: unknown" in str(ClassificationRecord())

    payload = record.to_dict()
    assert list(payload)[: len(LABELS)] == list(LABELS)
    assert payload["file_version"] == "7.0.0.1"
    assert record.true_labels() == ["is_stats_module"]
