import datetime
import errno
import multiprocessing
import os
import time
from enum import Enum
from pathlib import Path
from typing import Optional

import psutil
from colorify import C, colorify


class LoggerPolicyPeriod:

    NONE = 1e20
    LAST_1_MINUTE = 60
    LAST_15_MINUTES = LAST_1_MINUTE * 15
    LAST_HOUR = LAST_1_MINUTE * 60
    LAST_24_HOURS = LAST_HOUR * 24


class LogLevelType(Enum):
    debug = 0
    info = 1
    warning = 2
    error = 3


_LEVEL_COLORS = {
    LogLevelType.debug: C.blue,
    LogLevelType.info: C.blue,
    LogLevelType.warning: C.orange,
    LogLevelType.error: C.red,
}

_STOP = "STOP"


class LogReceiver:
    """Zapisuje komunikaty odebrane z potoku do pliku z rotacją w czasie.

    Po upływie `period` sekund tworzony jest nowy plik z sufiksem czasowym,
    najstarsze pliki ponad `files_count` są usuwane, a symlink o nazwie
    bazowej wskazuje na najnowszy plik.
    """

    def __init__(
        self,
        filename,
        clear_file=True,
        period=LoggerPolicyPeriod.NONE,
        files_count=4,
        create_symlinks=True,
    ):
        self.base_filename, self.extension = os.path.splitext(filename)
        self.clear_file = clear_file
        self.period = period
        self.files_count = files_count
        self.create_symlinks = create_symlinks
        self.last_file_change_time = time.time()
        self.files = []

    def _current_filename(self):
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        return f"{self.base_filename}_{timestamp}{self.extension}"

    def _create_new_file(self):
        current_filename = self._current_filename()
        link_name = self.base_filename + self.extension
        Path(current_filename).parent.mkdir(exist_ok=True, parents=True)
        self.files.append(current_filename)
        if self.create_symlinks:
            try:
                os.symlink(os.path.basename(current_filename), link_name)
            except OSError as e:
                if e.errno == errno.EEXIST:
                    os.remove(link_name)  # usuniecie starego symlinku
                    os.symlink(os.path.basename(current_filename), link_name)
                else:
                    raise e
        return current_filename

    def _remove_old_files(self):
        # zostawiamy jeden plik wiecej niz files_count
        while len(self.files) > self.files_count + 1:
            file_to_delete = self.files.pop(0)
            try:
                os.remove(file_to_delete)
            except FileNotFoundError:
                print(f"Plik {file_to_delete} nie został znaleziony.")
            except PermissionError:
                print(f"Brak uprawnień do usunięcia pliku {file_to_delete}.")

    def run(self, pipe_in):
        if self.clear_file:
            current_filename = self._create_new_file()
        else:
            current_filename = f"{self.base_filename}{self.extension}"
            Path(current_filename).parent.mkdir(exist_ok=True, parents=True)
        try:
            while True:
                data = pipe_in.recv()
                if data == _STOP:
                    break

                if time.time() - self.last_file_change_time >= self.period:
                    self.last_file_change_time = time.time()
                    current_filename = self._create_new_file()
                    self._remove_old_files()

                level, message = data
                with open(current_filename, "a") as file:
                    file.write(format_message(message, level, colorize=False) + "\n")
        except (KeyboardInterrupt, EOFError):
            pass


def _run_receiver(pipe_in, filename, clear_file, period, files_count):
    os.nice(10)
    receiver = LogReceiver(
        filename=filename,
        clear_file=clear_file,
        period=period,
        files_count=files_count,
    )
    receiver.run(pipe_in)


class MessageLogger:
    """Logger komunikatów zapisujący do pliku w osobnym procesie.

    Komunikaty wysyłane są potokiem do procesu zapisującego, więc wywołania
    `info()` itp. nie blokują na operacjach dyskowych. Proces zapisujący
    można przypiąć do wskazanego rdzenia (`core`), aby nie konkurował
    z obciążanymi rdzeniami.

    Obiekt nie jest przenośny między procesami; workery uruchamiane jako
    procesy logują na konsolę.
    """

    def __init__(
        self,
        filename,
        clear_file: bool = True,
        period=LoggerPolicyPeriod.NONE,
        files_count: int = 4,
        debug: bool = True,
        core: Optional[int] = None,
    ):
        self.filename = filename
        self.clear_file = clear_file
        self.period = period
        self.files_count = files_count
        self.__debug = debug

        self.pipe_out, pipe_in = multiprocessing.Pipe()
        self.process = multiprocessing.Process(
            target=_run_receiver,
            args=(pipe_in, filename, clear_file, period, files_count),
            daemon=True,
        )
        self.process.start()
        if core is not None:
            psutil.Process(self.process.pid).cpu_affinity([core])

    def _send(self, level: LogLevelType, message) -> None:
        try:
            self.pipe_out.send([level, str(message)])
        except (BrokenPipeError, OSError):
            print(format_message(message, level))

    def error(self, message):
        self._send(LogLevelType.error, message)

    def warning(self, message):
        self._send(LogLevelType.warning, message)

    def info(self, message):
        self._send(LogLevelType.info, message)

    def debug(self, message):
        if self.__debug:
            self._send(LogLevelType.debug, message)

    def set_debug(self, debug: bool):
        self.__debug = debug

    def close(self):
        """Zamyka potok i czeka na zakończenie procesu zapisującego."""
        if self.process.is_alive():
            try:
                self.pipe_out.send(_STOP)
                self.pipe_out.close()
            except BrokenPipeError:
                pass  # Pipe jest już zamknięty
            self.process.join(timeout=2.0)

    def __del__(self):
        try:
            self.close()
        except Exception as e:
            print(f"Wystąpił wyjątek przy zamykaniu: {e}")


def generate_timestamp():
    now = datetime.datetime.now()
    return now.strftime("%Y-%m-%d %H:%M:%S.%f")


def format_message(message: str, level: LogLevelType = LogLevelType.info, colorize: bool = True):
    color = _LEVEL_COLORS.get(level)
    if color is None:
        name, color = "NONE", C.red
    else:
        name = level.name
    return f"{generate_timestamp()} [{colorify(name, color) if colorize else name}] {message}"


def debug(message: str, message_logger: MessageLogger = None, colorize: bool = True):
    if message_logger is not None:
        message_logger.debug(message)
    else:
        print(format_message(message, LogLevelType.debug, colorize))


def info(message: str, message_logger: MessageLogger = None, colorize: bool = True):
    if message_logger is not None:
        message_logger.info(message)
    else:
        print(format_message(message, LogLevelType.info, colorize))


def warning(message: str, message_logger: MessageLogger = None, colorize: bool = True):
    if message_logger is not None:
        message_logger.warning(message)
    else:
        print(format_message(message, LogLevelType.warning, colorize))


def error(message: str, message_logger: MessageLogger = None, colorize: bool = True):
    if message_logger is not None:
        message_logger.error(message)
    else:
        print(format_message(message, LogLevelType.error, colorize))
