"""Orbit Ephemeris Message."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

from ndm.dates import CcsdsDate
from ndm.errors import FieldFormatError, MissingKeywordError, StructureError
from ndm.lexical.tokens import ParseToken
from ndm.messages.common import (
    COVARIANCE_TERMS,
    STATE_AXES,
    CovarianceMatrix,
    format_data,
    object_fields,
    parse_data,
    time_system,
)
from ndm.parsing import MessageGrammar, MessageParser
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import choice, date, integer, real, text
from ndm.sections.header import OdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter


class Interpolation(str, Enum):
    HERMITE = "HERMITE"
    LAGRANGE = "LAGRANGE"
    LINEAR = "LINEAR"


class OemMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = object_fields() + (
        text("REF_FRAME", mandatory=True),
        date("REF_FRAME_EPOCH"),
        time_system(),
        date("START_TIME", mandatory=True),
        date("USEABLE_START_TIME"),
        date("USEABLE_STOP_TIME"),
        date("STOP_TIME", mandatory=True),
        choice("INTERPOLATION", Interpolation),
        integer("INTERPOLATION_DEGREE"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if self.stop_time < self.start_time:
            raise StructureError(f"STOP_TIME {self.stop_time} is before START_TIME {self.start_time}",
                                 file_name=file_name)
        if self.interpolation is not None and self.interpolation_degree is None:
            raise MissingKeywordError("INTERPOLATION_DEGREE", self.section_name(), file_name=file_name)


_ACCELERATIONS = ("X_DDOT", "Y_DDOT", "Z_DDOT")


class EphemerisState(CommentsContainer):
    """One ephemeris record: a data line in KVN, a ``stateVector`` element in XML."""

    SECTION = "stateVector"
    ACCEPTS_RAW_LINES = True
    KVN_RAW_ONLY = True
    FIELDS = (
        date("EPOCH", mandatory=True),
        real("X", "km", mandatory=True),
        real("Y", "km", mandatory=True),
        real("Z", "km", mandatory=True),
        real("X_DOT", "km/s", mandatory=True),
        real("Y_DOT", "km/s", mandatory=True),
        real("Z_DOT", "km/s", mandatory=True),
        real("X_DDOT", "km/s**2"),
        real("Y_DDOT", "km/s**2"),
        real("Z_DDOT", "km/s**2"),
    )

    @property
    def values(self) -> list[float]:
        values = [getattr(self, f.attr) for f in self.FIELDS[1:7]]
        if self.x_ddot is not None:
            values.extend(getattr(self, f.attr) for f in self.FIELDS[7:])
        return values

    def add_raw_line(self, token: ParseToken) -> None:
        parts = token.content.split()
        if len(parts) not in (7, 10):
            raise FieldFormatError("ephemeris line", token.content, "an epoch followed by 6 or 9 values",
                                   file_name=token.file_name, line=token.line)
        epoch = self.FIELDS[0].parse(ParseToken(token.type, "EPOCH", parts[0], line=token.line,
                                                file_name=token.file_name))
        self.set_state(epoch, parse_data(token, parts[1:]))

    def set_state(self, epoch: CcsdsDate, values: Sequence[float]) -> None:
        self.store(self.FIELDS[0], epoch)
        for field, value in zip(self.FIELDS[1:], values):
            self.store(field, float(value))

    def entries(self, syntax: FileFormat):
        if syntax is FileFormat.KVN:
            return iter(())
        return super().entries(syntax)

    def raw_lines(self, syntax: FileFormat) -> Iterator[str]:
        if syntax is FileFormat.KVN:
            yield f"{self.epoch} {format_data(self.values)}"

    def check(self, file_name: Optional[str] = None) -> None:
        given = [getattr(self, name.lower()) is not None for name in _ACCELERATIONS]
        if any(given) and not all(given):
            missing = _ACCELERATIONS[given.index(False)]
            raise MissingKeywordError(missing, self.section_name(), file_name=file_name)


class OemCovariance(CovarianceMatrix):
    """Covariance at an epoch: six triangular rows in KVN, named terms in XML."""

    ACCEPTS_RAW_LINES = True
    FIELDS = (date("EPOCH", mandatory=True), text("COV_REF_FRAME")) + COVARIANCE_TERMS

    def _filled_rows(self) -> int:
        index = 0
        for row in range(len(STATE_AXES)):
            if getattr(self, COVARIANCE_TERMS[index].attr) is None:
                return row
            index += row + 1
        return len(STATE_AXES)

    def add_raw_line(self, token: ParseToken) -> None:
        row = self._filled_rows()
        if row == len(STATE_AXES):
            raise StructureError(f"covariance at {self.epoch} already has {row} rows",
                                 file_name=token.file_name, line=token.line)
        parts = token.content.split()
        if len(parts) != row + 1:
            raise FieldFormatError(f"covariance row {row + 1}", token.content, f"{row + 1} values",
                                   file_name=token.file_name, line=token.line)
        start = row * (row + 1) // 2
        for field, value in zip(COVARIANCE_TERMS[start : start + row + 1], parse_data(token, parts)):
            self.store(field, value)

    def entries(self, syntax: FileFormat):
        for field, key, value in super().entries(syntax):
            if syntax is FileFormat.XML or field not in COVARIANCE_TERMS:
                yield field, key, value

    def raw_lines(self, syntax: FileFormat) -> Iterator[str]:
        if syntax is FileFormat.KVN:
            for row in self.lower_triangle():
                yield format_data(row)

    def check(self, file_name: Optional[str] = None) -> None:
        for field in COVARIANCE_TERMS:
            if getattr(self, field.attr) is None:
                raise MissingKeywordError(field.keyword, self.section_name(), file_name=file_name)


class OemData(DataSection):
    DATA_COMMENTS = True
    BLOCKS = (
        Block("states", EphemerisState, "stateVector", repeatable=True),
        Block("covariances", OemCovariance, "covarianceMatrix", kvn_section="COVARIANCE",
              repeatable=True, kvn_wrapper=True, start_keyword="EPOCH"),
    )

    def add_state(
        self,
        epoch: CcsdsDate,
        position: Iterable[float],
        velocity: Iterable[float],
        acceleration: Optional[Iterable[float]] = None,
    ) -> EphemerisState:
        state = self.new_block(self.BLOCKS[0])
        values = list(position) + list(velocity) + (list(acceleration) if acceleration is not None else [])
        state.set_state(epoch, values)
        return state

    def epochs(self) -> Iterator[CcsdsDate]:
        for state in self.states:
            yield state.epoch

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.states:
            raise MissingKeywordError("stateVector", self.section_name(), file_name=file_name)
        previous = None
        for state in self.states:
            if previous is not None and state.epoch < previous:
                raise StructureError(f"ephemeris epoch {state.epoch} is before {previous}", file_name=file_name)
            previous = state.epoch


class Oem(Message):
    MESSAGE_TYPE = "OEM"
    ROOT = "oem"
    VERSION_KEY = "CCSDS_OEM_VERS"


GRAMMAR = MessageGrammar(Oem, OdmHeader, OemMetadata, OemData)
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
