import json
import logging

import pytest

from pagemark.core.annotations import StampKind
from pagemark.core.session import AnnotationSession
from pagemark.utils import AppConfig, load_config, save_config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "settings.json")
    assert config == AppConfig()
    assert config.marquee_threshold_px == 5
    assert config.min_box_px == 20
    assert config.image_max_px == 200
    assert config.history_limit is None


def test_values_override_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"default_color": "red", "history_limit": 50}))
    config = load_config(path)
    assert config.default_color == "red"
    assert config.history_limit == 50
    assert config.default_font == "Noto Sans JP"


def test_unknown_keys_are_logged_and_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark", "min_box_px": 30}))
    with caplog.at_level(logging.WARNING):
        config = load_config(path)
    assert config.min_box_px == 30
    assert "theme" in caplog.text


def test_unreadable_json_gives_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        assert load_config(path) == AppConfig()
    assert "Failed to read settings" in caplog.text


def test_non_object_json_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]")
    assert load_config(path) == AppConfig()


def test_saved_settings_load_back(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    config = AppConfig(default_stamp="fix", export_dir=str(tmp_path))
    assert save_config(config, path)
    assert load_config(path) == config


def test_values_of_the_wrong_type_keep_their_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "marquee_threshold_px": "5",
        "default_point_size": 12.5,
        "history_limit": True,
        "default_font": 3,
        "image_max_px": 150,
    }))
    with caplog.at_level(logging.WARNING):
        config = load_config(path)

    assert config.marquee_threshold_px == 5
    assert config.default_point_size == 12
    assert config.history_limit is None
    assert config.default_font == "Noto Sans JP"
    assert config.image_max_px == 150
    assert "marquee_threshold_px" in caplog.text


@pytest.mark.parametrize("key, value", [
    ("min_box_px", 0),
    ("image_max_px", -10),
    ("history_limit", 0),
    ("marquee_threshold_px", -1),
    ("page_margin_px", float("inf")),
])
def test_out_of_range_numbers_keep_their_defaults(tmp_path, key, value):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({key: value}))
    assert getattr(load_config(path), key) == getattr(AppConfig(), key)


def test_zero_threshold_and_nullable_values_are_accepted(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"marquee_threshold_px": 0, "history_limit": None, "export_dir": None}))
    config = load_config(path)
    assert config.marquee_threshold_px == 0
    assert config.history_limit is None


def test_unknown_color_and_stamp_fall_back_when_the_session_starts(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"default_stamp": "approve", "default_color": "green"}))

    with caplog.at_level(logging.WARNING):
        session = AnnotationSession(load_config(path))

    assert session.settings.stamp_kind is StampKind.OK
    assert session.settings.color == "blue"
    assert "approve" in caplog.text
    assert "green" in caplog.text


def test_configured_color_and_stamp_are_used(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"default_stamp": "review", "default_color": "red"}))
    session = AnnotationSession(load_config(path))
    assert session.settings.stamp_kind is StampKind.REVIEW
    assert session.settings.color == "red"
