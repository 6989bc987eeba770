"""Worker generujący obciążenie cyklem praca/sen."""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from avena_loadgen.engine.request import DEFAULT_PERIOD_MS, DutyCycleMode
from avena_loadgen.errors import WorkerInterruptedError
from avena_loadgen.profile import FixedLoad, LoadProfile
from avena_loadgen.util.logger import debug, error


class WorkerStatus(Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"
    INTERRUPTED = "interrupted"


@dataclass
class WorkerReport:
    """Raport workera przekazywany do koordynatora.

    Attributes:
        index (int): Indeks workera.
        name (str): Nazwa workera.
        status (WorkerStatus): Sposób zakończenia pracy.
        periods (int): Liczba rozpoczętych okresów.
        busy_ns (int): Łączny czas pracy (bez snu).
        sleep_ns (int): Łączny czas snu.
        overruns (int): Liczba okresów pominiętych po przekroczeniu.
        error (str | None): Opis przerwania.
    """

    index: int
    name: str
    status: WorkerStatus
    periods: int = 0
    busy_ns: int = 0
    sleep_ns: int = 0
    overruns: int = 0
    error: Optional[str] = None

    @property
    def achieved_load(self) -> Optional[float]:
        total = self.busy_ns + self.sleep_ns
        if total == 0:
            return None
        return self.busy_ns / total


class DutyCycleWorker:
    """Przybliża docelowe obciążenie `u` cyklem: sen `floor((1 - u) * P)` ms, reszta okresu praca.

    Okresy wyznaczane są od jawnego znacznika początku okresu, a nie testem
    modulo na zegarze, więc opóźnienia planisty nie gubią granic okresów.
    Okres spóźniony o więcej niż cały okres jest pomijany (powrót do taktu).

    W trybie ciągłym cel jest wyznaczany z profilu raz na okres. W trybie
    naprzemiennym okres dzielony jest na `segments` równych segmentów
    (`floor(P / segments)` ms), a każdy segment stosuje to samo stałe obciążenie.

    Praca kończy się gdy:
    - minie `duration_ms` (COMPLETED),
    - zostanie ustawione wspólne zdarzenie stop (STOPPED),
    - zostanie ustawione zdarzenie przerwania workera lub wystąpi błąd (INTERRUPTED).
    """

    # maksymalne opóźnienie reakcji na przerwanie w fazie snu
    INTERRUPT_POLL_NS = 10_000_000

    def __init__(
        self,
        index: int,
        profile: LoadProfile,
        duration_ms: Optional[int],
        *,
        period_ms: int = DEFAULT_PERIOD_MS,
        mode: DutyCycleMode = DutyCycleMode.CONTINUOUS,
        segments: int = 1,
        message_logger=None,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        if mode is DutyCycleMode.ALTERNATING and not isinstance(profile, FixedLoad):
            raise ValueError("tryb naprzemienny wymaga profilu FixedLoad")
        if period_ms < 1:
            raise ValueError("period_ms musi byc dodatni")
        if mode is DutyCycleMode.ALTERNATING and not 1 <= segments <= period_ms:
            # segment krótszy niż 1 ms nie ma fazy snu ani pracy
            raise ValueError(
                f"segments musi byc w zakresie 1..{period_ms}, otrzymano {segments}"
            )

        self.index = index
        self.name = f"worker-{index}"
        self.profile = profile
        self.duration_ms = duration_ms or 0
        self.period_ms = period_ms
        self.mode = mode
        self.segments = segments if mode is DutyCycleMode.ALTERNATING else 1
        self.message_logger = message_logger
        self._clock = clock

        self.periods = 0
        self.overruns = 0
        self.busy_ns = 0
        self.sleep_ns = 0
        self.last_load: Optional[float] = None
        self._interrupt_requested = False

    @property
    def segment_ms(self) -> int:
        return self.period_ms // self.segments

    def run(self, stop_event, interrupt_event) -> WorkerReport:
        """Wykonuje pętlę cyklu pracy i zwraca raport.

        Przerwanie nie jest ponawiane: jest logowane i zamieniane na raport INTERRUPTED.
        """
        rng = random.Random()
        if self.mode is DutyCycleMode.ALTERNATING:

            def resolve_target():
                return self.profile.load

        else:

            def resolve_target():
                return self.profile.resolve(rng=rng)

        error_message = None
        try:
            status = self._loop(resolve_target, stop_event, interrupt_event)
        except WorkerInterruptedError as e:
            status = WorkerStatus.INTERRUPTED
            error_message = e.message
            error(f"{self.name}: {e.message}", message_logger=self.message_logger)
        except Exception as e:
            status = WorkerStatus.INTERRUPTED
            error_message = f"{type(e).__name__}: {e}"
            error(
                f"{self.name}: przerwany przez blad {error_message}",
                message_logger=self.message_logger,
            )

        debug(f"{self} [{status.value}]", message_logger=self.message_logger)
        return WorkerReport(
            index=self.index,
            name=self.name,
            status=status,
            periods=self.periods,
            busy_ns=self.busy_ns,
            sleep_ns=self.sleep_ns,
            overruns=self.overruns,
            error=error_message,
        )

    def _loop(self, resolve_target, stop_event, interrupt_event) -> WorkerStatus:
        segment_ns = self.segment_ms * 1_000_000
        period_ns = segment_ns * self.segments

        start_ns = self._clock()
        deadline_ns = start_ns + self.duration_ms * 1_000_000 if self.duration_ms else None
        period_start_ns = start_ns

        while True:
            now_ns = self._clock()
            if deadline_ns is not None and now_ns >= deadline_ns:
                return WorkerStatus.COMPLETED
            if stop_event.is_set():
                return WorkerStatus.STOPPED
            self._check_interrupt(interrupt_event)

            if now_ns - period_start_ns >= period_ns:
                # spóźnienie o cały okres - powrót do taktu
                self.overruns += 1
                period_start_ns = now_ns

            load = resolve_target()
            self.last_load = load
            self.periods += 1

            for segment in range(self.segments):
                segment_start_ns = period_start_ns + segment * segment_ns
                sleep_ns = math.floor((1 - load) * self.segment_ms) * 1_000_000
                if not self._sleep_until(
                    self._clip(segment_start_ns + sleep_ns, deadline_ns),
                    stop_event,
                    interrupt_event,
                ):
                    return WorkerStatus.STOPPED
                if not self._busy_until(
                    self._clip(segment_start_ns + segment_ns, deadline_ns),
                    stop_event,
                    interrupt_event,
                ):
                    return WorkerStatus.STOPPED

            period_start_ns += period_ns

    @staticmethod
    def _clip(target_ns: int, deadline_ns: Optional[int]) -> int:
        if deadline_ns is None:
            return target_ns
        return min(target_ns, deadline_ns)

    def _sleep_until(self, target_ns: int, stop_event, interrupt_event) -> bool:
        """Śpi do `target_ns` na zdarzeniu stop. Zwraca False gdy zatrzymano.

        Sen dzielony jest na odcinki `INTERRUPT_POLL_NS`, między którymi
        sprawdzane jest przerwanie workera.
        """
        begin_ns = self._clock()
        if target_ns <= begin_ns:
            return True
        try:
            while True:
                remaining_ns = target_ns - self._clock()
                if remaining_ns <= 0:
                    return True
                if stop_event.wait(min(remaining_ns, self.INTERRUPT_POLL_NS) * 1e-9):
                    return False
                self._check_interrupt(interrupt_event)
        finally:
            self.sleep_ns += self._clock() - begin_ns

    def _busy_until(self, target_ns: int, stop_event, interrupt_event) -> bool:
        """Aktywnie odpytuje zegar do `target_ns`. Zwraca False gdy zatrzymano."""
        begin_ns = self._clock()
        try:
            while self._clock() < target_ns:
                if stop_event.is_set():
                    return False
                self._check_interrupt(interrupt_event)
            return True
        finally:
            self.busy_ns += self._clock() - begin_ns

    def request_interrupt(self) -> None:
        """Zgłasza przerwanie z wnętrza procesu workera (np. z obsługi SIGTERM)."""
        self._interrupt_requested = True

    def _check_interrupt(self, interrupt_event) -> None:
        if self._interrupt_requested or interrupt_event.is_set():
            raise WorkerInterruptedError(self.index, f"{self.name} interrupted")

    def achieved_load(self) -> Optional[float]:
        total = self.busy_ns + self.sleep_ns
        if total == 0:
            return None
        return self.busy_ns / total

    def __str__(self) -> str:
        achieved = self.achieved_load()
        if achieved is None:
            return f"{self.name.upper()}, periods: {self.periods}, not yet measured"
        return (
            f"{self.name.upper()}, periods: {self.periods}, overruns: {self.overruns}, "
            f"busy: {self.busy_ns / 1e6:.1f}ms, sleep: {self.sleep_ns / 1e6:.1f}ms, "
            f"achieved load: {achieved:.3f}"
        )
