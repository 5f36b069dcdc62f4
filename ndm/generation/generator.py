from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional, TextIO

from ndm.errors import GeneratorStateError, MissingKeywordError
from ndm.schemas import FileFormat, GeneratorConfig

logger = logging.getLogger(__name__)


class Generator(ABC):
    """Structural writing contract shared by the KVN and XML generators.

    Everything is written to an internal buffer; the sink only receives the text once
    the root section is closed by ``end_message``, so a failing writer never leaves a
    truncated document behind.
    """

    syntax: FileFormat

    def __init__(self, sink: TextIO, config: Optional[GeneratorConfig] = None):
        self.sink = sink
        self.config = config or GeneratorConfig(syntax=self.syntax)
        self._buffer = io.StringIO()
        self._sections: list[str] = []

    @property
    def file_name(self) -> str:
        return self.config.file_name

    @property
    def units_enabled(self) -> bool:
        return self.config.units_enabled

    @property
    def depth(self) -> int:
        return len(self._sections)

    @property
    def current_section(self) -> Optional[str]:
        return self._sections[-1] if self._sections else None

    def _write(self, text: str) -> None:
        self._buffer.write(text)

    # structure

    def start_message(self, root: str, version_key: str, version: str) -> None:
        if self._sections:
            raise GeneratorStateError(f"cannot start {root} inside {self.current_section}")
        self._start_message(root, version_key, version)
        self._sections.append(root)

    def end_message(self, root: str) -> None:
        if self._sections != [root]:
            raise GeneratorStateError(
                f"cannot end {root}, open sections: {', '.join(self._sections) or 'none'}"
            )
        self._sections.pop()
        self._end_message(root)
        text = self._buffer.getvalue()
        self._buffer = io.StringIO()
        self.sink.write(text)
        logger.debug("Wrote %s %s (%d characters) to %s", self.syntax.value, root, len(text), self.file_name)

    def enter_section(self, name: str) -> None:
        if not self._sections:
            raise GeneratorStateError(f"cannot enter {name} before start_message")
        self._enter_section(name)
        self._sections.append(name)

    def exit_section(self) -> str:
        if len(self._sections) < 2:
            raise GeneratorStateError("exit_section called without an open section")
        name = self._sections.pop()
        self._exit_section(name)
        return name

    # content

    def write_entry(self, name: str, value: Optional[str], unit: Optional[str] = None, mandatory: bool = False) -> None:
        if value is None or value == "":
            if mandatory:
                raise MissingKeywordError(name, self.current_section or "message", file_name=self.file_name)
            return
        self._check_open(name)
        self._write_entry(name, value, unit if self.units_enabled else None)

    def write_named_entry(self, base: str, key: str, value: Optional[str], unit: Optional[str] = None) -> None:
        if value is None or value == "":
            return
        self._check_open(base)
        self._write_named_entry(base, key, value, unit if self.units_enabled else None)

    def write_comments(self, comments: Iterable[str]) -> None:
        for comment in comments:
            self._check_open("COMMENT")
            self._write_comment(comment)

    def write_raw_data(self, line: str, tag: Optional[str] = None) -> None:
        self._check_open(tag or "data line")
        self._write_raw_data(line, tag)

    def write_empty_line(self) -> None:
        self._write_empty_line()

    def _check_open(self, what: str) -> None:
        if not self._sections:
            raise GeneratorStateError(f"cannot write {what} outside of a message")

    @abstractmethod
    def _start_message(self, root: str, version_key: str, version: str) -> None: ...

    @abstractmethod
    def _end_message(self, root: str) -> None: ...

    @abstractmethod
    def _enter_section(self, name: str) -> None: ...

    @abstractmethod
    def _exit_section(self, name: str) -> None: ...

    @abstractmethod
    def _write_entry(self, name: str, value: str, unit: Optional[str]) -> None: ...

    @abstractmethod
    def _write_named_entry(self, base: str, key: str, value: str, unit: Optional[str]) -> None: ...

    @abstractmethod
    def _write_comment(self, comment: str) -> None: ...

    @abstractmethod
    def _write_raw_data(self, line: str, tag: Optional[str]) -> None: ...

    def _write_empty_line(self) -> None:
        pass
