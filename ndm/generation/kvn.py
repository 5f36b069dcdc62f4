from __future__ import annotations

from typing import Optional

from ndm.generation.generator import Generator
from ndm.schemas import FileFormat
from ndm.units import NOT_APPLICABLE


class KvnGenerator(Generator):
    """``KEY = value [unit]`` lines; sections as ``NAME_START`` / ``NAME_STOP``."""

    syntax = FileFormat.KVN

    def _line(self, text: str) -> None:
        self._write(text.rstrip() + "\n")

    def _key_value(self, name: str, value: str, unit: Optional[str]) -> str:
        line = f"{name.ljust(self.config.padding_width)} = {value}"
        if unit and unit.lower() != NOT_APPLICABLE:
            column = self.config.units_column
            line = line.ljust(column) if len(line) < column else f"{line} "
            line = f"{line}[{unit}]"
        return line

    def _start_message(self, root: str, version_key: str, version: str) -> None:
        self._line(self._key_value(version_key, version, None))

    def _end_message(self, root: str) -> None:
        pass

    def _enter_section(self, name: str) -> None:
        self._line(f"{name}_START")

    def _exit_section(self, name: str) -> None:
        self._line(f"{name}_STOP")

    def _write_entry(self, name: str, value: str, unit: Optional[str]) -> None:
        self._line(self._key_value(name, value, unit))

    def _write_named_entry(self, base: str, key: str, value: str, unit: Optional[str]) -> None:
        self._line(self._key_value(f"{base}_{key}", value, unit))

    def _write_comment(self, comment: str) -> None:
        self._line(f"COMMENT {comment}" if comment else "COMMENT")

    def _write_raw_data(self, line: str, tag: Optional[str]) -> None:
        self._line(line)

    def _write_empty_line(self) -> None:
        self._write("\n")
