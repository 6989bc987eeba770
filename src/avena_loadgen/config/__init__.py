"""
#### Moduł Config - Konfiguracja Generatora Obciążenia

Wczytywanie i walidacja parametrów z plików INI lub JSON.

#### Komponenty:
- `Config`: Klasa bazowa pliku INI
- `LoadGenConfig`: Plik INI z sekcją `[LOADGEN]` i konwersją typów
- `LoadGenSettings`: Model Pydantic z wartościami domyślnymi i budową `RunRequest`

#### Przykład użycia:
```python
from avena_loadgen.config import load_settings
from avena_loadgen.util import get_processor_arch_info

settings = load_settings("loadgen.ini")
request = settings.to_run_request(get_processor_arch_info())
```
"""

from .common import Config
from .loadgen import LoadGenConfig, load_settings, save_settings
from .settings import LoadGenSettings

__all__ = ["Config", "LoadGenConfig", "LoadGenSettings", "load_settings", "save_settings"]
