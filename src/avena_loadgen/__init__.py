"""
Avena Loadgen
===================================================

Generator syntetycznego obciążenia CPU do testowania systemów reagujących
na obciążenie (autoskalery, monitoring, planiści zadań). Obciążenie jest
przybliżane w pętli otwartej cyklem praca/sen, po jednym workerze na każdy
wątek sprzętowy procesora.

## Uruchomienie

    avena-loadgen --min 0.3 --max 0.5 --duration 60
    avena-loadgen --config loadgen.ini
    python -m avena_loadgen --load 0.8 --alternating --segments 4

Zmienne środowiskowe (również z pliku `.env`):
    LOADGEN_CONFIG      - domyślna ścieżka pliku konfiguracyjnego
    LOADGEN_LOG_FILE    - domyślny plik logu

## Moduły

#### profile - Profile Obciążenia
- `FixedLoad`, `RangeLoad`, `TimeOfDayRangeLoad`: Cel obciążenia w danej chwili

#### engine - Generowanie Obciążenia
- `RunRequest`: Parametry uruchomienia
- `DutyCycleWorker`: Cykl praca/sen pojedynczego workera
- `LoadEngine`: Koordynator workerów (start, oczekiwanie, stop)

#### config - Konfiguracja
- `LoadGenConfig`: Plik INI z sekcją `[LOADGEN]`
- `LoadGenSettings`: Model Pydantic parametrów

#### util - Narzędzia Pomocnicze
- `logger`: Logowanie na konsolę i do pliku
- `host`: Architektura procesora (psutil)
"""

__version__ = "0.1.0"
