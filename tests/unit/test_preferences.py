from pathlib import Path

import pytest

from pdf_catalog.config import Preferences


def test_threshold_defaults_to_eight(tmp_path: Path) -> None:
    preferences = Preferences(tmp_path / "prefs.json")
    assert preferences.get_threshold() == 8


def test_threshold_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "prefs" / "prefs.json"
    assert Preferences(path).set_threshold(3) is True

    assert Preferences(path).get_threshold() == 3


def test_negative_threshold_rejected(tmp_path: Path) -> None:
    preferences = Preferences(tmp_path / "prefs.json")
    with pytest.raises(ValueError):
        preferences.set_threshold(-1)


def test_corrupt_preferences_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")

    assert Preferences(path).get_threshold() == 8


def test_invalid_stored_threshold_ignored(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text('{"similarity.threshold": "high"}', encoding="utf-8")

    assert Preferences(path).get_threshold() == 8


def test_threshold_above_fingerprint_width_rejected(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    preferences = Preferences(path)
    with pytest.raises(ValueError):
        preferences.set_threshold(65)

    path.write_text('{"similarity.threshold": 99}', encoding="utf-8")
    assert Preferences(path).get_threshold() == 8
