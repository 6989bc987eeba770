"""Wyjątki generatora obciążenia CPU."""

from typing import List, Optional


class LoadGenError(Exception):
    """Base exception for load generator errors.

    Attributes:
        error_type: Type of error (e.g., "invalid_profile", "worker_interrupted").
        message: Human-readable error message.
    """

    def __init__(self, error_type: str, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(f"[{error_type}] {message}")


class InvalidProfileError(LoadGenError, ValueError):
    """Profil obciążenia z niepoprawnymi granicami (odrzucany przy konstrukcji)."""

    def __init__(self, message: str):
        super().__init__(error_type="invalid_profile", message=message)


class WorkerInterruptedError(LoadGenError):
    """Przerwanie pojedynczego workera (zewnętrzne przerwanie lub błąd).

    Attributes:
        index: Indeks workera w obrębie uruchomienia.
        original_exception: Wyjątek, który spowodował przerwanie (opcjonalny).
    """

    def __init__(
        self,
        index: int,
        message: str = "worker interrupted",
        original_exception: Optional[Exception] = None,
    ):
        self.index = index
        self.original_exception = original_exception
        super().__init__(error_type="worker_interrupted", message=message)


class AggregateRunFailure(LoadGenError):
    """Zgłaszany przez koordynatora, gdy co najmniej jeden worker został przerwany.

    Attributes:
        failed: Raporty przerwanych workerów.
        result: Pełny wynik uruchomienia (wszystkie raporty).
    """

    def __init__(self, failed: List, result):
        self.failed = failed
        self.result = result
        names = ", ".join(report.name for report in failed)
        super().__init__(
            error_type="aggregate_run_failure",
            message=f"{len(failed)}/{len(result.reports)} workers interrupted: {names}",
        )

    @property
    def failed_indexes(self) -> List[int]:
        return [report.index for report in self.failed]
