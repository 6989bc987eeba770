"""
#### Moduł Profile - Profile Obciążenia CPU

Polityka określająca docelowe obciążenie workera w danej chwili.

#### Komponenty:
- `FixedLoad`: Stałe obciążenie
- `RangeLoad`: Obciążenie losowane z przedziału w każdym cyklu
- `TimeOfDayRangeLoad`: Przedział zależny od godziny ("ciche godziny")

#### Przykład użycia:
```python
from avena_loadgen.profile import RangeLoad, TimeOfDayRangeLoad

profile = TimeOfDayRangeLoad(normal=RangeLoad(0.3, 0.5))
target = profile.resolve()  # wartość w [0, 1] na kolejny cykl
```
"""

from .load_profile import (
    DEFAULT_QUIET_END_HOUR,
    DEFAULT_QUIET_MAX_LOAD,
    DEFAULT_QUIET_MIN_LOAD,
    DEFAULT_QUIET_START_HOUR,
    FixedLoad,
    LoadProfile,
    LoadProfileKind,
    RangeLoad,
    TimeOfDayRangeLoad,
)

__all__ = [
    "DEFAULT_QUIET_END_HOUR",
    "DEFAULT_QUIET_MAX_LOAD",
    "DEFAULT_QUIET_MIN_LOAD",
    "DEFAULT_QUIET_START_HOUR",
    "FixedLoad",
    "LoadProfile",
    "LoadProfileKind",
    "RangeLoad",
    "TimeOfDayRangeLoad",
]
