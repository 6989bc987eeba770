import json
import os
from configparser import ConfigParser
from pathlib import Path

from .common import Config
from .settings import LoadGenSettings

LOADGEN_DEFAULTS = {
    "min_cpu_load_percentage": "0.3",
    "max_cpu_load_percentage": "0.5",
    "duration": "0",
    "alternating": "false",
    "segments": "1",
    "period_ms": "100",
    "quiet_min_cpu_load_percentage": "0.24",
    "quiet_max_cpu_load_percentage": "0.26",
    "backend": "process",
}


class LoadGenConfig(Config):
    """Plik INI generatora obciążenia z sekcją `[LOADGEN]`.

    Przykład:

        [LOADGEN]
        min_cpu_load_percentage = 0.3
        max_cpu_load_percentage = 0.5
        duration = 60
        quiet_start_hour = 21
        quiet_end_hour = 7
    """

    SECTION = "LOADGEN"

    def __init__(self, config_file, read_only=True):
        super().__init__(config_file, read_only)
        self.config = ConfigParser(defaults=LOADGEN_DEFAULTS)
        if self.exists():
            super().read_from_file()
        if not self.config.has_section(self.SECTION):
            self.config.add_section(self.SECTION)

    def get(self, key):
        """Zwraca wartość klucza z konwersją typu (int, float, bool, string).

        Brakujący klucz (bez wartości domyślnej) zwraca None.
        """
        element = self.config.get(self.SECTION, key, fallback=None)
        if element is None:
            return None
        try:
            return int(element)
        except ValueError:
            pass

        try:
            return float(element)
        except ValueError:
            pass

        lowered = element.strip().lower()
        if lowered in ConfigParser.BOOLEAN_STATES:
            return ConfigParser.BOOLEAN_STATES[lowered]
        return element

    def set(self, key, value):
        if value is None:
            self.config.remove_option(self.SECTION, key)
        else:
            self.config.set(self.SECTION, key, str(value).lower() if isinstance(value, bool) else str(value))

    def get_loadgen_configuration(self) -> dict:
        return {key: self.get(key) for key in self.config[self.SECTION]}

    def to_settings(self) -> LoadGenSettings:
        return LoadGenSettings.model_validate(self.get_loadgen_configuration())

    def update_from_settings(self, settings: LoadGenSettings):
        for key, value in settings.model_dump(mode="json").items():
            self.set(key, value)
        return self


def load_settings(path) -> LoadGenSettings:
    """Wczytuje ustawienia z pliku JSON (`.json`) lub INI (pozostałe rozszerzenia)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Brak pliku konfiguracyjnego: {path}")
    if path.suffix.lower() == ".json":
        return LoadGenSettings.model_validate_json(path.read_text(encoding="utf-8"))
    return LoadGenConfig(str(path)).to_settings()


def save_settings(settings: LoadGenSettings, path) -> None:
    """Zapisuje ustawienia do pliku JSON (`.json`) lub INI."""
    if os.path.splitext(str(path))[1].lower() == ".json":
        Path(path).write_text(
            json.dumps(settings.model_dump(mode="json"), indent=2), encoding="utf-8"
        )
        return
    LoadGenConfig(str(path), read_only=False).update_from_settings(settings).save_to_file()
