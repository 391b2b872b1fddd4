"""Tests for calendar settings and the settings blob."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from task_calendar.errors import SettingsError
from task_calendar.settings import (
    DEFAULT_SETTINGS,
    CalendarSettings,
    load_settings,
    normalize_week_tag_prefix,
    save_settings,
    settings_from_dict,
)


def test_defaults():
    assert DEFAULT_SETTINGS.show_file_name is True
    assert DEFAULT_SETTINGS.start_week_on_sunday is True
    assert DEFAULT_SETTINGS.week_tag_prefix == "#week"
    assert DEFAULT_SETTINGS.text_direction == "ltr"
    assert DEFAULT_SETTINGS.enable_rtl is False


@pytest.mark.parametrize("raw, expected", [
    ("#sprint", "#sprint"),
    ("sprint", "#sprint"),
    ("  #wk  ", "#wk"),
    ("#", "#week"),
    ("", "#week"),
    ("   ", "#week"),
])
def test_normalize_week_tag_prefix(raw, expected):
    assert normalize_week_tag_prefix(raw) == expected


def test_prefix_normalized_on_construction():
    assert CalendarSettings(week_tag_prefix="sprint").week_tag_prefix == "#sprint"
    assert CalendarSettings(week_tag_prefix="").week_tag_prefix == "#week"


def test_invalid_text_direction():
    with pytest.raises(ValueError):
        CalendarSettings(text_direction="up")


def test_blob_merges_over_defaults():
    settings = settings_from_dict({"showFileName": False, "weekTagPrefix": "wk", "mySetting": "ignored"})
    assert settings.show_file_name is False
    assert settings.week_tag_prefix == "#wk"
    assert settings.start_week_on_sunday is True


def test_legacy_enable_rtl_maps_to_text_direction():
    assert settings_from_dict({"enableRtl": True}).text_direction == "rtl"
    assert settings_from_dict({"enableRtl": True, "textDirection": "ltr"}).text_direction == "ltr"


def test_load_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "missing.json") == DEFAULT_SETTINGS


def test_save_and_load(tmp_path):
    path = tmp_path / "plugin" / "data.json"
    settings = CalendarSettings(show_file_name=False, start_week_on_sunday=False, text_direction="rtl")

    save_settings(path, settings)

    blob = json.loads(path.read_text(encoding="utf-8"))
    assert blob["showFileName"] is False
    assert blob["enableRtl"] is True
    assert load_settings(path) == settings
    assert list(path.parent.iterdir()) == [path]


def test_load_rejects_non_object(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


@pytest.mark.parametrize("contents", ["{not json", '{"textDirection": "up"}'])
def test_load_rejects_bad_blob(tmp_path, contents):
    path = tmp_path / "data.json"
    path.write_text(contents, encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)
