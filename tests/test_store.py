"""Tests for the JSON file store."""

import json
from pathlib import Path

import pytest

from devby.common.exceptions import CorruptStoreException
from devby.common.sorting import SortKey, SortOrder, SortSpec
from devby.store import JsonStore


def write_json(path: Path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestOpening:
    def test_empty_store_writes_nothing(self, output_path):
        store = JsonStore.empty(output_path)

        assert len(store) == 0
        assert not output_path.exists()

    def test_reset_truncates_immediately(self, output_path):
        write_json(output_path, [{"url": "a"}])

        store = JsonStore.reset(output_path)

        assert len(store) == 0
        assert json.loads(output_path.read_text(encoding="utf-8")) == []

    def test_load_keeps_order_and_fields(self, output_path):
        write_json(output_path, [{"url": "b", "extra": 1}, {"url": "a"}])

        store = JsonStore.load(output_path)

        assert [r["url"] for r in store] == ["b", "a"]
        assert store.get("b") == {"url": "b", "extra": 1}
        assert store.contains("a")

    def test_load_missing_file(self, output_path):
        with pytest.raises(FileNotFoundError):
            JsonStore.load(output_path)

    @pytest.mark.parametrize(
        "content",
        ["{not json", '{"url": "a"}', '[{"name": "no url"}]', '["a"]'],
    )
    def test_load_corrupt_file(self, output_path, content):
        """Anything but an array of records with urls shall be rejected."""
        output_path.write_text(content, encoding="utf-8")

        with pytest.raises(CorruptStoreException) as exc_info:
            JsonStore.load(output_path)

        assert exc_info.value.path == output_path
        assert "Only forcing is available" in str(exc_info.value)

    def test_load_non_utf8_file(self, output_path):
        output_path.write_bytes(b'[{"url": "\xff\xfe"}]')

        with pytest.raises(CorruptStoreException) as exc_info:
            JsonStore.load(output_path)

        assert "UTF-8" in str(exc_info.value)


class TestCollection:
    def test_append_does_not_persist_until_flush(self, output_path):
        store = JsonStore.empty(output_path)
        store.append({"url": "a"})

        assert store.contains("a")
        assert not output_path.exists()

        store.flush()

        assert json.loads(output_path.read_text(encoding="utf-8")) == [{"url": "a"}]

    def test_flush_overwrites_whole_file(self, output_path):
        write_json(output_path, [{"url": "a"}])
        store = JsonStore.load(output_path)
        store.append({"url": "b"})
        store.flush()
        store.append({"url": "c"})
        store.flush()

        saved = json.loads(output_path.read_text(encoding="utf-8"))
        assert [r["url"] for r in saved] == ["a", "b", "c"]
        # No temp files left next to the output
        assert [p.name for p in output_path.parent.iterdir()] == [output_path.name]

    def test_flush_keeps_non_ascii(self, output_path):
        store = JsonStore.empty(output_path)
        store.append({"url": "a", "legalName": 'ООО "Бета"'})
        store.flush()

        assert 'ООО \\"Бета\\"' in output_path.read_text(encoding="utf-8")

    def test_sort_in_place(self, output_path):
        store = JsonStore(
            output_path,
            [
                {"url": "1", "name": "b", "rating": 3},
                {"url": "2", "name": "A", "rating": None},
                {"url": "3", "name": "c", "rating": 5},
            ],
        )

        store.sort_in_place(SortSpec(SortKey.NAME, SortOrder.ASC))
        assert [r["name"] for r in store] == ["A", "b", "c"]

        store.sort_in_place(SortSpec(SortKey.RATING, SortOrder.DESC))
        assert [r["url"] for r in store] == ["3", "1", "2"]

    def test_records_is_a_copy(self, output_path):
        store = JsonStore(output_path, [{"url": "a"}])

        records = store.records
        records.append({"url": "b"})

        assert store.records == [{"url": "a"}]
        assert len(store) == 1
