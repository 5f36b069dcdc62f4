from __future__ import annotations

from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from ndm.errors import GeneratorStateError
from ndm.generation.generator import Generator
from ndm.lexical.tokens import COMMENT
from ndm.lexical.xml import PARAMETER_ATTRIBUTE, ROOT_ID_ATTRIBUTE, ROOT_VERSION_ATTRIBUTE, UNITS_ATTRIBUTE
from ndm.schemas import FileFormat
from ndm.settings import settings
from ndm.units import NOT_APPLICABLE

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"


class XmlGenerator(Generator):
    """Indented NDM/XML elements, with optional ``units`` attributes."""

    syntax = FileFormat.XML

    def _line(self, text: str, depth: Optional[int] = None) -> None:
        level = self.depth if depth is None else depth
        self._write(" " * (self.config.indent * level) + text + "\n")

    def _units(self, unit: Optional[str]) -> str:
        if not unit or unit.lower() == NOT_APPLICABLE:
            return ""
        return f" {UNITS_ATTRIBUTE}={quoteattr(unit)}"

    def _start_message(self, root: str, version_key: str, version: str) -> None:
        self._write('<?xml version="1.0" encoding="UTF-8"?>\n')
        self._line(
            f"<{root} xmlns:xsi={quoteattr(XSI_NAMESPACE)}"
            f" xsi:noNamespaceSchemaLocation={quoteattr(settings.xml_schema_location)}"
            f" {ROOT_ID_ATTRIBUTE}={quoteattr(version_key)} {ROOT_VERSION_ATTRIBUTE}={quoteattr(version)}>",
            depth=0,
        )

    def _end_message(self, root: str) -> None:
        self._line(f"</{root}>", depth=0)

    def _enter_section(self, name: str) -> None:
        self._line(f"<{name}>")

    def _exit_section(self, name: str) -> None:
        self._line(f"</{name}>")

    def _write_entry(self, name: str, value: str, unit: Optional[str]) -> None:
        self._line(f"<{name}{self._units(unit)}>{escape(value)}</{name}>")

    def _write_named_entry(self, base: str, key: str, value: str, unit: Optional[str]) -> None:
        self._line(
            f"<{base} {PARAMETER_ATTRIBUTE}={quoteattr(key)}{self._units(unit)}>{escape(value)}</{base}>"
        )

    def _write_comment(self, comment: str) -> None:
        self._line(f"<{COMMENT}>{escape(comment)}</{COMMENT}>")

    def _write_raw_data(self, line: str, tag: Optional[str]) -> None:
        if not tag:
            raise GeneratorStateError("XML data lines need an element name")
        self._line(f"<{tag}>{escape(line)}</{tag}>")
