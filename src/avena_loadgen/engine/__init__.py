"""
#### Moduł Engine - Generowanie Obciążenia CPU

Rozwija żądanie w workerów (jeden na wątek sprzętowy), z których każdy
realizuje cykl praca/sen przybliżający docelowe obciążenie.

#### Komponenty:
- `RunRequest`: Parametry uruchomienia (rdzenie, wątki, czas, profil, tryb)
- `DutyCycleWorker`: Pętla cyklu pracy pojedynczego workera
- `LoadEngine`: Koordynator - start, oczekiwanie, stop, przerwanie workera

#### Przykład użycia:
```python
from avena_loadgen.engine import LoadEngine, RunRequest
from avena_loadgen.profile import RangeLoad

engine = LoadEngine()
result = engine.run(
    RunRequest(num_cores=2, num_threads_per_core=2, duration_ms=5000,
               profile=RangeLoad(0.3, 0.5))
)
```
"""

from .duty_cycle import DutyCycleWorker, WorkerReport, WorkerStatus
from .engine import LoadEngine, RunOutcome, RunResult
from .request import DEFAULT_PERIOD_MS, DutyCycleMode, RunRequest, WorkerBackend

__all__ = [
    "DEFAULT_PERIOD_MS",
    "DutyCycleMode",
    "DutyCycleWorker",
    "LoadEngine",
    "RunOutcome",
    "RunRequest",
    "RunResult",
    "WorkerBackend",
    "WorkerReport",
    "WorkerStatus",
]
