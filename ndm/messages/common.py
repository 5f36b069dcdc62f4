"""Pieces shared by several message types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

from ndm.dates import TimeSystem
from ndm.errors import FieldFormatError, FrozenContainerError, MissingKeywordError
from ndm.lexical.tokens import ParseToken
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer
from ndm.sections.fields import Field, IndexMode, choice, real, text
from ndm.settings import settings

STATE_AXES = ("X", "Y", "Z", "X_DOT", "Y_DOT", "Z_DOT")


class YesNo(str, Enum):
    YES = "YES"
    NO = "NO"


def format_data(values: Iterable[float]) -> str:
    """Explicit-sign columns for data lines (ephemeris, attitude, OCM lines)."""
    fmt = settings.data_line_format_checked
    return " ".join(fmt % value for value in values)


def parse_data(token: ParseToken, parts: Sequence[str], keyword: Optional[str] = None) -> list[float]:
    return [token.parse_float(part, keyword) for part in parts]


def object_fields() -> tuple[Field, ...]:
    return (
        text("OBJECT_NAME", mandatory=True),
        text("OBJECT_ID", mandatory=True),
        text("CENTER_NAME", mandatory=True),
    )


def time_system() -> Field:
    return choice("TIME_SYSTEM", TimeSystem, mandatory=True)


def _covariance_unit(row: str, column: str) -> str:
    rates = row.endswith("_DOT") + column.endswith("_DOT")
    return ("km**2", "km**2/s", "km**2/s**2")[rates]


def covariance_fields() -> tuple[Field, ...]:
    """The 21 lower-triangular terms of a 6x6 position/velocity covariance."""
    fields = []
    for i, row in enumerate(STATE_AXES):
        for column in STATE_AXES[: i + 1]:
            fields.append(real(f"C{row}_{column}", _covariance_unit(row, column)))
    return tuple(fields)


COVARIANCE_TERMS = covariance_fields()


class SpacecraftParameters(CommentsContainer):
    SECTION = "spacecraftParameters"
    FIELDS = (
        real("MASS", "kg"),
        real("SOLAR_RAD_AREA", "m**2"),
        real("SOLAR_RAD_COEFF"),
        real("DRAG_AREA", "m**2"),
        real("DRAG_COEFF"),
    )


class CovarianceMatrix(CommentsContainer):
    SECTION = "covarianceMatrix"
    FIELDS = (text("COV_REF_FRAME"),) + COVARIANCE_TERMS

    def lower_triangle(self) -> list[list[Optional[float]]]:
        rows = []
        index = 0
        for i in range(len(STATE_AXES)):
            rows.append([getattr(self, f.attr) for f in COVARIANCE_TERMS[index : index + i + 1]])
            index += i + 1
        return rows

    def matrix(self) -> list[list[Optional[float]]]:
        lower = self.lower_triangle()
        size = len(STATE_AXES)
        return [[lower[max(i, j)][min(i, j)] for j in range(size)] for i in range(size)]

    def check(self, file_name: Optional[str] = None) -> None:
        missing = [f.keyword for f in COVARIANCE_TERMS if getattr(self, f.attr) is None]
        if missing and len(missing) != len(COVARIANCE_TERMS):
            raise MissingKeywordError(missing[0], self.section_name(), file_name=file_name)


class UserDefinedParameters(CommentsContainer):
    SECTION = "userDefinedParameters"
    FIELDS = (Field("USER_DEFINED", "parameters", index=IndexMode.NAMED),)


@dataclass(frozen=True)
class DataLine:
    """One line of a line-oriented block: a time tag (kept as text) and values."""

    time: str
    values: tuple[float, ...]

    def text(self) -> str:
        return f"{self.time} {format_data(self.values)}" if self.values else self.time


class LineBlock(CommentsContainer):
    """Block of keyword fields followed by data lines (OCM trajectory, covariance...)."""

    ACCEPTS_RAW_LINES = True

    def __init__(self):
        super().__init__()
        self.lines: list[DataLine] = []

    def add_raw_line(self, token: ParseToken) -> None:
        parts = token.content.split()
        if not parts:
            raise FieldFormatError(self.XML_RAW_LINE or "data line", token.content, "a data line",
                                   file_name=token.file_name, line=token.line)
        self.refuse_further_comments()
        self.lines.append(DataLine(parts[0], tuple(parse_data(token, parts[1:]))))

    def add_line(self, time: str, values: Iterable[float]) -> None:
        if self._frozen:
            raise FrozenContainerError(self.section_name(), "lines")
        self.refuse_further_comments()
        self.lines.append(DataLine(str(time), tuple(float(v) for v in values)))

    def raw_lines(self, syntax: FileFormat) -> Iterator[str]:
        for line in self.lines:
            yield line.text()

    def _freeze_extra(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))

    def _thaw_extra(self) -> None:
        object.__setattr__(self, "lines", list(self.lines))

    def state(self) -> dict:
        out = super().state()
        out["lines"] = tuple((line.time, line.values) for line in self.lines)
        return out
