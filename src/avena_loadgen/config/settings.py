"""Ustawienia generatora obciążenia (model Pydantic).

Odpowiedzialność:
- Walidacja i wartości domyślne parametrów uruchomienia
- Budowa profilu obciążenia i `RunRequest` dla wykrytej architektury

Nazwy pól przyjmowane są w postaci snake_case (plik INI, CLI) oraz camelCase
(dokument JSON, np. `minCpuLoadPercentage`). Granice obciążenia nie są
sprawdzane przez model: weryfikuje je profil przy konstrukcji
(`InvalidProfileError`), zanim zostanie uruchomiony jakikolwiek worker.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from avena_loadgen.engine.request import (
    DEFAULT_PERIOD_MS,
    DutyCycleMode,
    RunRequest,
    WorkerBackend,
)
from avena_loadgen.profile import (
    DEFAULT_QUIET_MAX_LOAD,
    DEFAULT_QUIET_MIN_LOAD,
    FixedLoad,
    LoadProfile,
    RangeLoad,
    TimeOfDayRangeLoad,
)

DEFAULT_CPU_MIN_LOAD = 0.3
DEFAULT_CPU_MAX_LOAD = 0.5
# 0 - praca do momentu zatrzymania
DEFAULT_DURATION = 0


def _aliases(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel)


class LoadGenSettings(BaseModel):
    """Parametry generatora obciążenia.

    Attributes:
        min_cpu_load_percentage (float): Dolna granica zakresu obciążenia.
        max_cpu_load_percentage (float): Górna granica zakresu obciążenia.
        cpu_load_percentage (float | None): Stałe obciążenie; gdy ustawione, zakres jest pomijany.
        duration (int): Czas trwania w sekundach (0 lub brak - bez limitu).
        alternating (bool): Tryb naprzemienny (wymaga `cpu_load_percentage`).
        segments (int): Liczba segmentów okresu w trybie naprzemiennym.
        period_ms (int): Okres cyklu praca/sen.
        quiet_start_hour (int | None): Początek cichych godzin.
        quiet_end_hour (int | None): Koniec cichych godzin.
        quiet_min_cpu_load_percentage (float): Dolna granica w cichych godzinach.
        quiet_max_cpu_load_percentage (float): Górna granica w cichych godzinach.
        backend (WorkerBackend): Procesy lub wątki.
    """

    min_cpu_load_percentage: float = Field(
        DEFAULT_CPU_MIN_LOAD,
        validation_alias=_aliases("min_cpu_load_percentage", "minCpuLoadPercentage"),
    )
    max_cpu_load_percentage: float = Field(
        DEFAULT_CPU_MAX_LOAD,
        validation_alias=_aliases("max_cpu_load_percentage", "maxCpuLoadPercentage"),
    )
    cpu_load_percentage: Optional[float] = Field(
        None, validation_alias=_aliases("cpu_load_percentage", "cpuLoadPercentage")
    )
    duration: int = Field(DEFAULT_DURATION, ge=0)
    alternating: bool = False
    segments: int = Field(1, ge=1)
    period_ms: int = Field(
        DEFAULT_PERIOD_MS, ge=1, validation_alias=_aliases("period_ms", "periodMs")
    )
    quiet_start_hour: Optional[int] = Field(
        None,
        ge=0,
        le=23,
        validation_alias=_aliases("quiet_start_hour", "quietStartHour"),
    )
    quiet_end_hour: Optional[int] = Field(
        None,
        ge=0,
        le=23,
        validation_alias=_aliases("quiet_end_hour", "quietEndHour"),
    )
    quiet_min_cpu_load_percentage: float = Field(
        DEFAULT_QUIET_MIN_LOAD,
        validation_alias=_aliases(
            "quiet_min_cpu_load_percentage", "quietMinCpuLoadPercentage"
        ),
    )
    quiet_max_cpu_load_percentage: float = Field(
        DEFAULT_QUIET_MAX_LOAD,
        validation_alias=_aliases(
            "quiet_max_cpu_load_percentage", "quietMaxCpuLoadPercentage"
        ),
    )
    backend: WorkerBackend = WorkerBackend.PROCESS

    @field_validator("duration", mode="before")
    @classmethod
    def validate_duration(cls, v):
        """Brak czasu trwania traktowany jest jak 0 (bez limitu)."""
        if v is None or v == "":
            return DEFAULT_DURATION
        return v

    @field_validator("backend", mode="before")
    @classmethod
    def validate_backend(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_quiet_hours(self):
        if (self.quiet_start_hour is None) != (self.quiet_end_hour is None):
            raise ValueError(
                "quiet_start_hour i quiet_end_hour musza byc podane razem"
            )
        return self

    @model_validator(mode="after")
    def validate_segments(self):
        if self.segments > self.period_ms:
            raise ValueError(
                f"segments ({self.segments}) nie moze przekraczac period_ms ({self.period_ms})"
            )
        return self

    @property
    def duration_ms(self) -> int:
        return self.duration * 1000

    @property
    def mode(self) -> DutyCycleMode:
        return DutyCycleMode.ALTERNATING if self.alternating else DutyCycleMode.CONTINUOUS

    def to_profile(self) -> LoadProfile:
        """Buduje profil obciążenia.

        Raises:
            InvalidProfileError: Gdy granice są poza [0, 1] lub min > max.
        """
        if self.cpu_load_percentage is not None:
            return FixedLoad(self.cpu_load_percentage)
        normal = RangeLoad(self.min_cpu_load_percentage, self.max_cpu_load_percentage)
        if self.quiet_start_hour is None:
            return normal
        return TimeOfDayRangeLoad(
            normal=normal,
            quiet=RangeLoad(
                self.quiet_min_cpu_load_percentage, self.quiet_max_cpu_load_percentage
            ),
            quiet_start_hour=self.quiet_start_hour,
            quiet_end_hour=self.quiet_end_hour,
        )

    def to_run_request(self, arch_info) -> RunRequest:
        """Buduje `RunRequest` dla podanej architektury (`ProcessorArchInfo`)."""
        return RunRequest.for_host(
            arch_info,
            self.to_profile(),
            self.duration_ms,
            mode=self.mode,
            segments=self.segments,
            period_ms=self.period_ms,
        )

