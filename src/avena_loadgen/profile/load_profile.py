"""Profile obciążenia CPU.

Odpowiedzialność:
- Opis docelowego obciążenia w danej chwili (stałe, zakres, zakres zależny od godziny)
- Wyznaczanie pojedynczej wartości docelowej w [0, 1] na kolejny cykl pracy

Eksponuje:
- `FixedLoad`, `RangeLoad`, `TimeOfDayRangeLoad`
- `LoadProfileKind` (znacznik wariantu)

Profile są niemutowalne po utworzeniu, więc wiele workerów może je czytać
równolegle bez synchronizacji. Losowanie odbywa się na generatorze
przekazanym przez wywołującego (każdy worker ma własny `random.Random`).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from avena_loadgen.errors import InvalidProfileError

# Domyślne "ciche godziny" (21:00 - 07:00) i wąski zakres obciążenia w tym czasie.
DEFAULT_QUIET_START_HOUR = 21
DEFAULT_QUIET_END_HOUR = 7
DEFAULT_QUIET_MIN_LOAD = 0.24
DEFAULT_QUIET_MAX_LOAD = 0.26


class LoadProfileKind(Enum):
    FIXED = "fixed"
    RANGE = "range"
    TIME_OF_DAY_RANGE = "time_of_day_range"


def _check_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise InvalidProfileError(f"{name} musi byc w zakresie [0, 1], podano {value}")


def _check_hour(name: str, value: int) -> None:
    if not 0 <= value <= 23:
        raise InvalidProfileError(f"{name} musi byc w zakresie 0..23, podano {value}")


@dataclass(frozen=True)
class FixedLoad:
    """Stałe obciążenie.

    Attributes:
        load (float): Docelowe obciążenie w [0, 1].
    """

    load: float

    def __post_init__(self):
        _check_fraction("load", self.load)

    @property
    def kind(self) -> LoadProfileKind:
        return LoadProfileKind.FIXED

    def resolve(
        self, now: Optional[datetime] = None, rng: Optional[random.Random] = None
    ) -> float:
        return self.load

    def describe(self) -> str:
        return f"{self.load:.2f}"


@dataclass(frozen=True)
class RangeLoad:
    """Obciążenie losowane w każdym cyklu z przedziału [min_load, max_load].

    Średnia z wielu cykli dąży do środka przedziału. Dla `min_load == max_load`
    profil zachowuje się jak `FixedLoad`.

    Attributes:
        min_load (float): Dolna granica obciążenia.
        max_load (float): Górna granica obciążenia.
    """

    min_load: float
    max_load: float

    def __post_init__(self):
        _check_fraction("min_load", self.min_load)
        _check_fraction("max_load", self.max_load)
        if self.min_load > self.max_load:
            raise InvalidProfileError(
                f"min_load ({self.min_load}) nie moze byc wieksze od max_load ({self.max_load})"
            )

    @property
    def kind(self) -> LoadProfileKind:
        return LoadProfileKind.RANGE

    def resolve(
        self, now: Optional[datetime] = None, rng: Optional[random.Random] = None
    ) -> float:
        if self.min_load == self.max_load:
            return self.min_load
        draw = (rng or random).random()
        return self.min_load + (self.max_load - self.min_load) * draw

    def describe(self) -> str:
        return f"{self.min_load:.2f} ~ {self.max_load:.2f}"


@dataclass(frozen=True)
class TimeOfDayRangeLoad:
    """Zakres obciążenia zależny od godziny (lokalnej).

    W "cichych godzinach" losowanie odbywa się z zakresu `quiet`, poza nimi
    z zakresu `normal`. Pasmo ciche może przechodzić przez północ
    (`quiet_start_hour > quiet_end_hour`, np. 21 -> 7): wtedy godzina jest
    cicha gdy `hour >= quiet_start_hour` lub `hour <= quiet_end_hour`.
    Dla `quiet_start_hour <= quiet_end_hour` pasmo jest ciągłe
    (`quiet_start_hour <= hour <= quiet_end_hour`). Warunek
    `hour >= quiet_start_hour or hour <= quiet_end_hour` stosowany jest tylko
    dla pasma przez północ; dla pasma ciągłego uznałby każdą godzinę za cichą.

    Attributes:
        normal (RangeLoad): Zakres poza cichymi godzinami.
        quiet (RangeLoad): Zakres w cichych godzinach.
        quiet_start_hour (int): Początek cichych godzin (włącznie).
        quiet_end_hour (int): Koniec cichych godzin (włącznie).
    """

    normal: RangeLoad
    quiet: RangeLoad = RangeLoad(DEFAULT_QUIET_MIN_LOAD, DEFAULT_QUIET_MAX_LOAD)
    quiet_start_hour: int = DEFAULT_QUIET_START_HOUR
    quiet_end_hour: int = DEFAULT_QUIET_END_HOUR

    def __post_init__(self):
        if not isinstance(self.normal, RangeLoad) or not isinstance(
            self.quiet, RangeLoad
        ):
            raise InvalidProfileError("normal i quiet musza byc typu RangeLoad")
        _check_hour("quiet_start_hour", self.quiet_start_hour)
        _check_hour("quiet_end_hour", self.quiet_end_hour)

    @property
    def kind(self) -> LoadProfileKind:
        return LoadProfileKind.TIME_OF_DAY_RANGE

    def is_quiet(self, hour: int) -> bool:
        if self.quiet_start_hour > self.quiet_end_hour:
            return hour >= self.quiet_start_hour or hour <= self.quiet_end_hour
        return self.quiet_start_hour <= hour <= self.quiet_end_hour

    def active_range(self, now: Optional[datetime] = None) -> RangeLoad:
        """Zwraca zakres obowiązujący w chwili `now` (domyślnie teraz, czas lokalny)."""
        hour = (now or datetime.now()).hour
        return self.quiet if self.is_quiet(hour) else self.normal

    def resolve(
        self, now: Optional[datetime] = None, rng: Optional[random.Random] = None
    ) -> float:
        return self.active_range(now).resolve(now, rng)

    def describe(self) -> str:
        return (
            f"{self.normal.describe()} "
            f"(quiet {self.quiet_start_hour:02d}:00-{self.quiet_end_hour:02d}:59: "
            f"{self.quiet.describe()})"
        )


LoadProfile = Union[FixedLoad, RangeLoad, TimeOfDayRangeLoad]
