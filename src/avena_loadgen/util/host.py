"""Informacje o architekturze procesora hosta."""

from dataclasses import dataclass

import psutil

from .logger import warning


@dataclass(frozen=True)
class ProcessorArchInfo:
    """Liczba rdzeni fizycznych i wątków sprzętowych na rdzeń."""

    num_cores: int
    num_threads_per_core: int

    @property
    def logical_cpus(self) -> int:
        return self.num_cores * self.num_threads_per_core

    def __str__(self) -> str:
        return (
            f"ProcessorArchInfo(cores={self.num_cores}, "
            f"threads_per_core={self.num_threads_per_core})"
        )


def get_processor_arch_info(message_logger=None) -> ProcessorArchInfo:
    """Odczytuje architekturę procesora przez psutil.

    Gdy liczba rdzeni fizycznych jest niedostępna (np. w części kontenerów),
    przyjmuje jeden wątek na rdzeń.
    """
    logical = psutil.cpu_count(logical=True) or 1
    physical = psutil.cpu_count(logical=False)
    if not physical or physical > logical:
        warning(
            f"Brak liczby rdzeni fizycznych, przyjmuje {logical} rdzeni po 1 watku",
            message_logger=message_logger,
        )
        return ProcessorArchInfo(num_cores=logical, num_threads_per_core=1)
    return ProcessorArchInfo(
        num_cores=physical, num_threads_per_core=max(logical // physical, 1)
    )
