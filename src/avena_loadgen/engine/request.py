"""Parametry uruchomienia generatora obciążenia."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from avena_loadgen.profile import FixedLoad, LoadProfile

DEFAULT_PERIOD_MS = 100


class DutyCycleMode(Enum):
    CONTINUOUS = "continuous"
    ALTERNATING = "alternating"


class WorkerBackend(Enum):
    """Sposób uruchamiania workerów.

    PROCESS - osobny proces na workera (obciąża wiele rdzeni mimo GIL).
    THREAD - wątki w bieżącym procesie.
    """

    PROCESS = "process"
    THREAD = "thread"


@dataclass(frozen=True)
class RunRequest:
    """Żądanie wygenerowania obciążenia.

    Attributes:
        num_cores (int): Liczba rdzeni fizycznych do obciążenia.
        num_threads_per_core (int): Liczba wątków sprzętowych na rdzeń.
        duration_ms (int | None): Czas trwania w ms; 0 lub None oznacza pracę
            do momentu zatrzymania.
        profile (LoadProfile): Profil obciążenia.
        mode (DutyCycleMode): Tryb cyklu pracy.
        segments (int): Liczba segmentów okresu w trybie naprzemiennym.
        period_ms (int): Okres cyklu praca/sen.
    """

    num_cores: int
    num_threads_per_core: int
    duration_ms: Optional[int]
    profile: LoadProfile
    mode: DutyCycleMode = DutyCycleMode.CONTINUOUS
    segments: int = 1
    period_ms: int = DEFAULT_PERIOD_MS

    def __post_init__(self):
        if self.num_cores < 1:
            raise ValueError("num_cores musi byc >= 1")
        if self.num_threads_per_core < 1:
            raise ValueError("num_threads_per_core musi byc >= 1")
        if self.duration_ms is not None and self.duration_ms < 0:
            raise ValueError("duration_ms nie moze byc ujemne")
        if self.segments < 1:
            raise ValueError("segments musi byc >= 1")
        if self.period_ms < 1:
            raise ValueError("period_ms musi byc dodatni")
        if self.segments > self.period_ms:
            raise ValueError(
                f"segments ({self.segments}) nie moze przekraczac period_ms ({self.period_ms})"
            )
        if self.mode is DutyCycleMode.ALTERNATING and not isinstance(
            self.profile, FixedLoad
        ):
            raise ValueError("tryb naprzemienny wymaga profilu FixedLoad")

    @property
    def worker_count(self) -> int:
        return self.num_cores * self.num_threads_per_core

    @property
    def bounded(self) -> bool:
        return bool(self.duration_ms)

    @classmethod
    def for_host(cls, arch_info, profile: LoadProfile, duration_ms: Optional[int], **kwargs) -> "RunRequest":
        """Tworzy żądanie dla wykrytej architektury procesora (`ProcessorArchInfo`)."""
        return cls(
            num_cores=arch_info.num_cores,
            num_threads_per_core=arch_info.num_threads_per_core,
            duration_ms=duration_ms,
            profile=profile,
            **kwargs,
        )
