from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Type, TypeVar

from ndm import units
from ndm.dates import CcsdsDate
from ndm.errors import FieldFormatError

COMMENT = "COMMENT"

E = TypeVar("E", bound=Enum)


class TokenType(str, Enum):
    START = "START"
    STOP = "STOP"
    ENTRY = "ENTRY"


def normalize_value(text: Optional[str]) -> str:
    """Whitespace normalization shared by every lexer for entry values."""
    return " ".join((text or "").split())


def normalize_comment(text: Optional[str]) -> str:
    return (text or "").strip()


def _fortran_to_python(text: str) -> str:
    # Some producers still write Fortran-style exponents (1.0D+03).
    return text.replace("D", "E").replace("d", "e")


@dataclass(frozen=True)
class ParseToken:
    type: TokenType
    name: str
    content: str = ""
    units: Optional[str] = None
    line: int = 0
    file_name: str = "<input>"

    @property
    def is_comment(self) -> bool:
        return self.type is TokenType.ENTRY and self.name == COMMENT

    @property
    def is_raw_line(self) -> bool:
        return self.type is TokenType.ENTRY and not self.name

    def describe(self) -> str:
        if self.type is TokenType.ENTRY:
            return self.name or self.content
        return f"{self.name}_{self.type.value}"

    def _invalid(self, expected: str, keyword: Optional[str] = None) -> FieldFormatError:
        return FieldFormatError(
            keyword or self.name or "data line",
            self.content,
            expected,
            file_name=self.file_name,
            line=self.line,
        )

    def _text(self) -> str:
        # fields without a unit keep a bracketed suffix as part of their value
        if self.units is None:
            return self.content
        if not self.content:
            return f"[{self.units}]"
        return f"{self.content} [{self.units}]"

    def as_text(self) -> str:
        text = self._text()
        if not text:
            raise self._invalid("a non-empty value")
        return text

    def as_int(self) -> int:
        try:
            return int(self.content)
        except ValueError:
            raise self._invalid("an integer") from None

    def parse_float(self, text: str, keyword: Optional[str] = None) -> float:
        try:
            return float(_fortran_to_python(text.strip()))
        except ValueError:
            raise FieldFormatError(keyword or self.name or "data line", text, "a real number",
                                   file_name=self.file_name, line=self.line) from None

    def as_float(self, unit: Optional[str]) -> float:
        return self._convert(self.parse_float(self.content), unit)

    def as_floats(self, unit: Optional[str]) -> list[float]:
        if not self.content:
            raise self._invalid("a list of real numbers")
        return [self._convert(self.parse_float(part), unit) for part in self.content.split()]

    def as_date(self) -> CcsdsDate:
        try:
            return CcsdsDate.parse(self._text())
        except ValueError:
            raise self._invalid("a CCSDS date") from None

    def as_enum(self, enum_cls: Type[E]) -> E:
        raw = self._text().upper()
        for member in enum_cls:
            if member.value.upper() == raw:
                return member
        allowed = "/".join(m.value for m in enum_cls)
        raise self._invalid(f"one of {allowed}")

    def as_list(self) -> list[str]:
        """Comma-separated values, bare (``km,km``) or bracketed (``[km,km]``)."""
        body = self.units if self.units is not None and not self.content else self._text()
        items = [part.strip() for part in body.split(",") if part.strip()]
        if not items:
            raise self._invalid("a comma-separated list")
        return items

    def _convert(self, value: float, unit: Optional[str]) -> float:
        if self.units is None:
            return value
        try:
            return units.convert(value, self.units, unit)
        except ValueError:
            raise FieldFormatError(
                self.name, f"{self.content} [{self.units}]", f"a value in {unit or 'n/a'}",
                file_name=self.file_name, line=self.line,
            ) from None
