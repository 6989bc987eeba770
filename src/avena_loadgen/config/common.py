import os
from configparser import ConfigParser


class Config:
    """Bazowa klasa pliku konfiguracyjnego INI (tryb tylko do odczytu lub zapis)."""

    def __init__(self, config_file, read_only=True):
        self._read_only = read_only
        self._config_file_base, self._config_file_extension = os.path.splitext(
            config_file
        )
        self.config = ConfigParser()

    def __remove_content_up_to_first_blank_line(self):
        # Usuwa sekcje [DEFAULT] dopisywana przez ConfigParser przy zapisie
        with open(self.config_file(), "r") as file:
            lines = file.readlines()
        if not lines or lines[0].strip() != f"[{self.config.default_section}]":
            return
        first_blank_line_index = None
        for i, line in enumerate(lines):
            if line.strip() == "":
                first_blank_line_index = i
                break
        if first_blank_line_index is None:
            return
        with open(self.config_file(), "w") as file:
            file.writelines(lines[first_blank_line_index + 1 :])

    def config_file(self):
        return self._config_file_base + self._config_file_extension

    def exists(self) -> bool:
        return os.path.exists(self.config_file())

    def read_from_file(self):
        self.config.read(self.config_file())
        return self

    def save_to_file(self):
        if self._read_only:
            raise PermissionError(
                f"Konfiguracja {self.config_file()} otwarta tylko do odczytu"
            )
        with open(self.config_file(), "w") as file:
            self.config.write(file)
        self.__remove_content_up_to_first_blank_line()

    def __str__(self) -> str:
        out = ""
        for section in self.config.sections():
            out += f"[{section}]\n"
            for key in self.config[section]:
                out += f"{key} = {self.config[section][key]}\n"
            out += "\n"
        return out
