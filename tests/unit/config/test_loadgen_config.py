"""
Unit tests for LoadGenConfig, load_settings and save_settings.

This module tests:
- defaults applied to a missing or partial [LOADGEN] section
- value type conversion
- INI and JSON round trip through LoadGenSettings
"""

import json

import pytest

from avena_loadgen.config import LoadGenConfig, LoadGenSettings, load_settings, save_settings
from avena_loadgen.engine import WorkerBackend
from avena_loadgen.profile import FixedLoad, RangeLoad, TimeOfDayRangeLoad


@pytest.fixture
def ini_file(tmp_path):
    path = tmp_path / "loadgen.ini"
    path.write_text(
        "[LOADGEN]\n"
        "min_cpu_load_percentage = 0.2\n"
        "max_cpu_load_percentage = 0.4\n"
        "duration = 60\n"
        "quiet_start_hour = 22\n"
        "quiet_end_hour = 6\n"
    )
    return path


class TestLoadGenConfig:
    """Plik INI z sekcją [LOADGEN]."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = LoadGenConfig(str(tmp_path / "missing.ini"))

        assert config.get("min_cpu_load_percentage") == 0.3
        assert config.get("max_cpu_load_percentage") == 0.5
        assert config.get("duration") == 0
        assert config.get("alternating") is False
        assert config.get("backend") == "process"
        assert config.get("cpu_load_percentage") is None

    def test_values_are_converted(self, ini_file):
        config = LoadGenConfig(str(ini_file))

        assert config.get("duration") == 60
        assert isinstance(config.get("duration"), int)
        assert config.get("min_cpu_load_percentage") == 0.2
        assert config.get("quiet_start_hour") == 22

    def test_configuration_merges_defaults(self, ini_file):
        values = LoadGenConfig(str(ini_file)).get_loadgen_configuration()

        assert values["max_cpu_load_percentage"] == 0.4
        assert values["segments"] == 1
        assert values["quiet_min_cpu_load_percentage"] == 0.24

    def test_to_settings(self, ini_file):
        settings = LoadGenConfig(str(ini_file)).to_settings()

        assert settings.duration == 60
        profile = settings.to_profile()
        assert isinstance(profile, TimeOfDayRangeLoad)
        assert profile.normal == RangeLoad(0.2, 0.4)
        assert profile.quiet_start_hour == 22
        assert profile.quiet_end_hour == 6

    def test_set_none_removes_option(self, tmp_path):
        config = LoadGenConfig(str(tmp_path / "x.ini"), read_only=False)
        config.set("cpu_load_percentage", 0.7)
        assert config.get("cpu_load_percentage") == 0.7

        config.set("cpu_load_percentage", None)

        assert config.get("cpu_load_percentage") is None

    def test_bool_written_lowercase(self, tmp_path):
        config = LoadGenConfig(str(tmp_path / "x.ini"), read_only=False)

        config.set("alternating", True)

        assert config.config.get("LOADGEN", "alternating") == "true"
        assert config.get("alternating") is True


class TestLoadSettings:
    """Wczytywanie ustawień z pliku."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.ini")

    def test_ini(self, ini_file):
        settings = load_settings(ini_file)

        assert settings.min_cpu_load_percentage == 0.2
        assert settings.duration_ms == 60_000

    def test_json_camel_case(self, tmp_path):
        path = tmp_path / "loadgen.json"
        path.write_text(
            json.dumps(
                {
                    "minCpuLoadPercentage": 0.1,
                    "maxCpuLoadPercentage": 0.9,
                    "duration": 5,
                    "backend": "THREAD",
                }
            )
        )

        settings = load_settings(path)

        assert settings.min_cpu_load_percentage == 0.1
        assert settings.max_cpu_load_percentage == 0.9
        assert settings.duration == 5
        assert settings.backend is WorkerBackend.THREAD

    def test_json_without_duration_is_unbounded(self, tmp_path):
        path = tmp_path / "loadgen.json"
        path.write_text(json.dumps({"duration": None}))

        assert load_settings(path).duration == 0

    def test_invalid_json_value_rejected(self, tmp_path):
        path = tmp_path / "loadgen.json"
        path.write_text(json.dumps({"duration": -5}))

        with pytest.raises(ValueError):
            load_settings(path)


class TestSaveSettings:
    """Zapis ustawień do pliku."""

    @pytest.fixture
    def settings(self):
        return LoadGenSettings(
            cpu_load_percentage=0.8, alternating=True, segments=4, duration=30
        )

    def test_ini_round_trip(self, tmp_path, settings):
        path = tmp_path / "saved.ini"

        save_settings(settings, path)

        content = path.read_text()
        assert content.startswith("[LOADGEN]")
        assert "alternating = true" in content
        loaded = load_settings(path)
        assert loaded == settings
        assert loaded.to_profile() == FixedLoad(0.8)

    def test_json_round_trip(self, tmp_path, settings):
        path = tmp_path / "saved.json"

        save_settings(settings, path)

        assert json.loads(path.read_text())["segments"] == 4
        assert load_settings(path) == settings
