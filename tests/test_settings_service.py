"""
Tests for the client-local settings document (groups and acupoints).
"""
import json
import threading
from unittest import mock

import pytest

from core.errors import TransientStoreError, ValidationError
from services.settings_service import (
    ACUPOINTS_KEY,
    DEFAULT_GROUPS,
    GROUPS_KEY,
    JsonFileSettingsStore,
    add_group,
    clamp_acupoint_count,
    delete_group,
    format_acupoints,
    load_acupoint_settings,
    load_groups,
    rename_group,
    resize_acupoint_names,
    save_acupoint_settings,
    save_groups,
    sort_acupoints,
)


class TestJsonFileSettingsStore:

    def test_missing_file_returns_default(self, settings_store):
        assert settings_store.get("anything", "fallback") == "fallback"

    def test_put_replaces_whole_document_for_key(self, settings_store):
        settings_store.put(GROUPS_KEY, ["A", "B"])
        settings_store.put(GROUPS_KEY, ["C"])
        settings_store.put("other", 1)

        with open(settings_store.path, encoding="utf-8") as f:
            data = json.load(f)
        assert data == {GROUPS_KEY: ["C"], "other": 1}

    def test_corrupt_file_falls_back_to_defaults(self, settings_store):
        with open(settings_store.path, "w", encoding="utf-8") as f:
            f.write("{not json")

        assert load_groups(settings_store) == DEFAULT_GROUPS

    def test_creates_parent_directory(self, tmp_path):
        store = JsonFileSettingsStore(str(tmp_path / "nested" / "settings.json"))
        store.put("k", "v")

        assert store.get("k") == "v"

    def test_write_failure_is_transient(self, settings_store, tmp_path):
        with mock.patch("services.settings_service.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(TransientStoreError):
                settings_store.put("k", "v")

        assert [p.name for p in tmp_path.iterdir() if p.suffix == ".tmp"] == []
        assert settings_store.get("k") is None

    def test_put_leaves_no_temp_files(self, settings_store, tmp_path):
        settings_store.put("k", "v")

        assert [p.name for p in tmp_path.iterdir() if p.suffix == ".tmp"] == []

    def test_concurrent_puts_keep_every_key(self, settings_store):
        keys = [f"key-{n}" for n in range(20)]
        threads = [threading.Thread(target=settings_store.put, args=(key, key)) for key in keys]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for key in keys:
            assert settings_store.get(key) == key


class TestGroups:

    def test_defaults(self, settings_store):
        groups = load_groups(settings_store)

        assert len(groups) == 10
        assert groups[0] == "Group 1"

    def test_add_rename_delete(self, settings_store):
        add_group(settings_store, "  Night shift ")
        assert load_groups(settings_store)[-1] == "Night shift"

        rename_group(settings_store, 0, "Morning")
        assert load_groups(settings_store)[0] == "Morning"

        delete_group(settings_store, 0)
        groups = load_groups(settings_store)
        assert "Morning" not in groups
        assert len(groups) == 10

    def test_empty_name_rejected(self, settings_store):
        with pytest.raises(ValidationError):
            add_group(settings_store, "   ")

    def test_duplicate_name_rejected(self, settings_store):
        with pytest.raises(ValidationError):
            add_group(settings_store, "Group 1")

    def test_rename_out_of_range(self, settings_store):
        with pytest.raises(ValidationError):
            rename_group(settings_store, 42, "Nope")

    def test_last_group_cannot_be_deleted(self, settings_store):
        save_groups(settings_store, ["Only"])

        with pytest.raises(ValidationError):
            delete_group(settings_store, 0)
        assert load_groups(settings_store) == ["Only"]


class TestAcupoints:

    def test_defaults(self, settings_store):
        settings = load_acupoint_settings(settings_store)

        assert settings.count == 40
        assert settings.names[0] == "1"
        assert settings.names[-1] == "40"

    @pytest.mark.parametrize("raw, expected", [(0, 1), (-5, 1), (1, 1), (200, 200), (500, 200), ("abc", 1)])
    def test_count_is_clamped(self, raw, expected):
        assert clamp_acupoint_count(raw) == expected

    def test_resize_pads_with_numbers(self):
        assert resize_acupoint_names(["Hegu", "Zusanli"], 4) == ["Hegu", "Zusanli", "3", "4"]

    def test_resize_truncates(self):
        assert resize_acupoint_names(["a", "b", "c"], 2) == ["a", "b"]

    def test_save_and_load(self, settings_store):
        save_acupoint_settings(settings_store, [" Hegu ", "Zusanli", "3"])

        settings = load_acupoint_settings(settings_store)

        assert settings.count == 3
        assert settings.names == ["Hegu", "Zusanli", "3"]

    def test_blank_name_rejected(self, settings_store):
        with pytest.raises(ValidationError):
            save_acupoint_settings(settings_store, ["1", " "])
        assert settings_store.get(ACUPOINTS_KEY) is None

    def test_empty_list_rejected(self, settings_store):
        with pytest.raises(ValidationError):
            save_acupoint_settings(settings_store, [])

    def test_sort_numeric_first(self):
        assert sort_acupoints(["10", "Hegu", "2", "Baihui", "1"]) == ["1", "2", "10", "Baihui", "Hegu"]

    def test_format(self):
        assert format_acupoints(["12", "5", "1"]) == "1, 5, 12"
        assert format_acupoints([]) == ""
