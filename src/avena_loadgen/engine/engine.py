"""Koordynator workerów generujących obciążenie CPU.

Odpowiedzialność:
- Rozwinięcie `RunRequest` w `num_cores * num_threads_per_core` workerów
- Uruchomienie wszystkich workerów i oczekiwanie na zakończenie każdego z nich
- Zatrzymanie (wspólne zdarzenie stop) i przerwanie pojedynczego workera
- Zebranie raportów i zgłoszenie `AggregateRunFailure` przy przerwaniach

Eksponuje:
- Klasa `LoadEngine`
- Klasy `RunResult`, `RunOutcome`
"""

from __future__ import annotations

import multiprocessing
import queue
import signal
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from avena_loadgen.errors import AggregateRunFailure
from avena_loadgen.util.logger import debug, error, info, warning

from .duty_cycle import DutyCycleWorker, WorkerReport, WorkerStatus
from .request import RunRequest, WorkerBackend


class RunOutcome(Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"


@dataclass
class RunResult:
    """Wynik uruchomienia.

    Attributes:
        outcome (RunOutcome): COMPLETED po upływie czasu, STOPPED po zatrzymaniu.
        reports (list[WorkerReport]): Raporty workerów w kolejności indeksów.
        elapsed_ms (float): Czas od uruchomienia workerów do zebrania raportów.
    """

    outcome: RunOutcome
    reports: List[WorkerReport] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def interrupted(self) -> List[WorkerReport]:
        return [r for r in self.reports if r.status is WorkerStatus.INTERRUPTED]

    @property
    def achieved_load(self) -> Optional[float]:
        loads = [r.achieved_load for r in self.reports if r.achieved_load is not None]
        if not loads:
            return None
        return sum(loads) / len(loads)


def _run_in_thread(worker: DutyCycleWorker, stop_event, interrupt_event, reports):
    reports.put(worker.run(stop_event, interrupt_event))


def _run_in_process(worker: DutyCycleWorker, stop_event, interrupt_event, reports):
    # SIGINT obsługuje koordynator (ustawia stop); SIGTERM przerywa tego workera
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGTERM, lambda signum, frame: worker.request_interrupt())
    reports.put(worker.run(stop_event, interrupt_event))


class LoadEngine:
    """Uruchamia workerów cyklu pracy i czeka na ich zakończenie.

    Każdy worker działa niezależnie; jedyny stan współdzielony to niemutowalny
    profil i zdarzenie stop. Przerwanie jednego workera nie zatrzymuje
    pozostałych - koordynator czeka na wszystkich, a następnie zgłasza
    `AggregateRunFailure` z listą przerwanych.

    `stop()` można wywołać z innego wątku (lub przez Ctrl+C w wątku
    wywołującym `run`). Zatrzymanie przed `run` powoduje natychmiastowe
    zakończenie kolejnego uruchomienia.
    """

    JOIN_POLL_S = 0.05
    DRAIN_TIMEOUT_S = 0.5

    def __init__(
        self,
        backend: WorkerBackend = WorkerBackend.PROCESS,
        *,
        message_logger=None,
        mp_context: Optional[str] = None,
    ) -> None:
        """Tworzy koordynatora.

        Args:
            backend: Procesy (domyślnie) lub wątki.
            message_logger: Opcjonalny logger; przekazywany tylko workerom wątkowym.
            mp_context: Metoda startu procesów (`fork`, `spawn`, `forkserver`);
                `None` oznacza domyślną dla platformy.
        """
        self.backend = backend
        self.message_logger = message_logger
        self._ctx = (
            multiprocessing.get_context(mp_context)
            if backend is WorkerBackend.PROCESS
            else None
        )
        self._guard = threading.Lock()
        self._running = False
        self._stop_event = self._new_event()
        self._interrupt_events = []
        self._workers: List[DutyCycleWorker] = []
        self._handles = []

    @property
    def running(self) -> bool:
        return self._running

    @property
    def workers(self) -> tuple:
        """Workerzy bieżącego (lub ostatniego) uruchomienia.

        Dla backendu procesowego są to kopie w procesie koordynatora;
        statystyki pracy znajdują się w raportach.
        """
        return tuple(self._workers)

    def run(self, request: RunRequest) -> RunResult:
        """Generuje obciążenie zgodnie z `request` i blokuje do zakończenia workerów.

        Returns:
            RunResult: Wynik z outcome COMPLETED lub STOPPED.

        Raises:
            AggregateRunFailure: Gdy co najmniej jeden worker został przerwany.
            RuntimeError: Gdy silnik już pracuje.
        """
        with self._guard:
            if self._running:
                raise RuntimeError("LoadEngine juz generuje obciazenie")
            self._running = True
        try:
            return self._run(request)
        finally:
            with self._guard:
                self._running = False
                self._stop_event = self._new_event()
                self._interrupt_events = []
                self._handles = []

    def stop(self) -> None:
        """Ustawia wspólne zdarzenie stop; workerzy kończą w ciągu jednego okresu."""
        debug("LoadEngine: stop requested", message_logger=self.message_logger)
        self._stop_event.set()

    def interrupt(self, index: int) -> None:
        """Przerywa pojedynczego workera bez wpływu na pozostałych."""
        events = self._interrupt_events
        if not 0 <= index < len(events):
            raise ValueError(f"brak workera o indeksie {index}")
        warning(f"LoadEngine: interrupting worker-{index}", message_logger=self.message_logger)
        events[index].set()

    def _new_event(self):
        return self._ctx.Event() if self._ctx is not None else threading.Event()

    def _new_queue(self):
        return self._ctx.Queue() if self._ctx is not None else queue.Queue()

    def _run(self, request: RunRequest) -> RunResult:
        duration_label = (
            f"{request.duration_ms / 1000:g} seconds" if request.bounded else "unbounded"
        )
        info(
            f"Generating {request.profile.describe()} CPU load ({request.mode.value}) on "
            f"{request.worker_count} workers ({request.num_cores} cores x "
            f"{request.num_threads_per_core} threads) for {duration_label}",
            message_logger=self.message_logger,
        )

        worker_logger = (
            self.message_logger if self.backend is WorkerBackend.THREAD else None
        )
        self._interrupt_events = [
            self._new_event() for _ in range(request.worker_count)
        ]
        self._workers = [
            DutyCycleWorker(
                index,
                request.profile,
                request.duration_ms,
                period_ms=request.period_ms,
                mode=request.mode,
                segments=request.segments,
                message_logger=worker_logger,
            )
            for index in range(request.worker_count)
        ]
        reports_queue = self._new_queue()

        if self.backend is WorkerBackend.PROCESS:
            factory, target = self._ctx.Process, _run_in_process
        else:
            factory, target = threading.Thread, _run_in_thread

        self._handles = [
            factory(
                target=target,
                args=(worker, self._stop_event, interrupt_event, reports_queue),
                name=worker.name,
                daemon=True,
            )
            for worker, interrupt_event in zip(self._workers, self._interrupt_events)
        ]

        started = time.monotonic()
        for handle in self._handles:
            handle.start()
        collected = self._join_all(reports_queue)
        elapsed_ms = (time.monotonic() - started) * 1000

        reports = [
            collected.get(index) or self._missing_report(index, handle)
            for index, handle in enumerate(self._handles)
        ]
        for report in reports:
            load = report.achieved_load
            debug(
                f"{report.name}: {report.status.value}, periods={report.periods}, "
                f"overruns={report.overruns}, achieved load="
                f"{'n/a' if load is None else f'{load:.3f}'}",
                message_logger=self.message_logger,
            )

        stopped = any(r.status is WorkerStatus.STOPPED for r in reports)
        result = RunResult(
            outcome=RunOutcome.STOPPED if stopped else RunOutcome.COMPLETED,
            reports=reports,
            elapsed_ms=elapsed_ms,
        )

        failed = result.interrupted
        if failed:
            failure = AggregateRunFailure(failed, result)
            error(f"LoadEngine: {failure.message}", message_logger=self.message_logger)
            raise failure

        if result.outcome is RunOutcome.STOPPED:
            info(
                f"Stopped generating CPU load after {elapsed_ms / 1000:.1f} seconds",
                message_logger=self.message_logger,
            )
        else:
            info("Done generating CPU load!", message_logger=self.message_logger)
        return result

    def _join_all(self, reports_queue) -> Dict[int, WorkerReport]:
        collected: Dict[int, WorkerReport] = {}
        try:
            self._wait_for_workers(reports_queue, collected)
        except KeyboardInterrupt:
            warning(
                "LoadEngine: przerwano z klawiatury, zatrzymywanie workerow",
                message_logger=self.message_logger,
            )
            self.stop()
            self._wait_for_workers(reports_queue, collected)

        for handle in self._handles:
            handle.join()
        while len(collected) < len(self._handles):
            if not self._collect(reports_queue, collected, self.DRAIN_TIMEOUT_S):
                break
        return collected

    def _wait_for_workers(self, reports_queue, collected) -> None:
        # Raporty odbierane w trakcie oczekiwania, aby proces workera nie
        # blokował się na opróżnianiu kolejki przy zakończeniu.
        while any(handle.is_alive() for handle in self._handles):
            self._collect(reports_queue, collected, self.JOIN_POLL_S)

    @staticmethod
    def _collect(reports_queue, collected, timeout: float) -> bool:
        try:
            report = reports_queue.get(timeout=timeout)
        except queue.Empty:
            return False
        collected[report.index] = report
        return True

    @staticmethod
    def _missing_report(index: int, handle) -> WorkerReport:
        exitcode = getattr(handle, "exitcode", None)
        return WorkerReport(
            index=index,
            name=f"worker-{index}",
            status=WorkerStatus.INTERRUPTED,
            error=f"worker exited without report (exitcode={exitcode})",
        )
