"""
#### Utility Module

Narzędzia pomocnicze generatora obciążenia.

#### Główne komponenty:
- `logger`: Logowanie komunikatów na konsolę lub do pliku (osobny proces)
- `host`: Informacje o architekturze procesora (`ProcessorArchInfo`)
"""

from .host import ProcessorArchInfo, get_processor_arch_info
from .logger import LoggerPolicyPeriod, LogLevelType, MessageLogger

__all__ = [
    "LogLevelType",
    "LoggerPolicyPeriod",
    "MessageLogger",
    "ProcessorArchInfo",
    "get_processor_arch_info",
]
