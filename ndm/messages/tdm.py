"""Tracking Data Message."""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Iterator, Optional

from ndm.dates import CcsdsDate
from ndm.errors import MissingKeywordError, StructureError
from ndm.lexical.tokens import ParseToken
from ndm.messages.common import YesNo, time_system
from ndm.parsing import MessageGrammar, MessageParser
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer, Key
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import Field, IndexMode, choice, date, integer, real, text, text_list
from ndm.sections.header import AdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter


class TrackingMode(str, Enum):
    SEQUENTIAL = "SEQUENTIAL"
    SINGLE_DIFF = "SINGLE_DIFF"


class TimetagReference(str, Enum):
    TRANSMIT = "TRANSMIT"
    RECEIVE = "RECEIVE"


class IntegrationReference(str, Enum):
    START = "START"
    MIDDLE = "MIDDLE"
    END = "END"


class RangeMode(str, Enum):
    COHERENT = "COHERENT"
    CONSTANT = "CONSTANT"
    ONE_WAY = "ONE_WAY"


class RangeUnits(str, Enum):
    KM = "km"
    S = "s"
    RU = "RU"


class AngleType(str, Enum):
    AZEL = "AZEL"
    RADEC = "RADEC"
    XEYN = "XEYN"
    XSYE = "XSYE"


class DataQuality(str, Enum):
    RAW = "RAW"
    VALIDATED = "VALIDATED"
    DEGRADED = "DEGRADED"


class TdmMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = (
        text("TRACK_ID"),
        text_list("DATA_TYPES"),
        time_system(),
        date("START_TIME"),
        date("STOP_TIME"),
        Field("PARTICIPANT", "participants", mandatory=True, index=IndexMode.SEQUENCE),
        choice("MODE", TrackingMode),
        text("PATH"),
        text("PATH_1"),
        text("PATH_2"),
        text("EPHEMERIS_NAME"),
        text("TRANSMIT_BAND"),
        text("RECEIVE_BAND"),
        integer("TURNAROUND_NUMERATOR"),
        integer("TURNAROUND_DENOMINATOR"),
        choice("TIMETAG_REF", TimetagReference),
        real("INTEGRATION_INTERVAL", "s"),
        choice("INTEGRATION_REF", IntegrationReference),
        real("FREQ_OFFSET", "Hz"),
        choice("RANGE_MODE", RangeMode),
        real("RANGE_MODULUS"),
        choice("RANGE_UNITS", RangeUnits),
        choice("ANGLE_TYPE", AngleType),
        text("REFERENCE_FRAME"),
        real("TRANSMIT_DELAY", "s", attr="transmit_delays", index=IndexMode.KEYED),
        real("RECEIVE_DELAY", "s", attr="receive_delays", index=IndexMode.KEYED),
        choice("DATA_QUALITY", DataQuality),
        real("CORRECTION_ANGLE_1", "deg"),
        real("CORRECTION_ANGLE_2", "deg"),
        real("CORRECTION_DOPPLER", "km/s"),
        real("CORRECTION_MAG"),
        real("CORRECTION_RANGE"),
        real("CORRECTION_RCS", "m**2"),
        real("CORRECTION_RECEIVE"),
        real("CORRECTION_TRANSMIT"),
        real("CORRECTION_ABERRATION_YEARLY", "deg"),
        real("CORRECTION_ABERRATION_DIURNAL", "deg"),
        choice("CORRECTIONS_APPLIED", YesNo),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if self.mode is TrackingMode.SEQUENTIAL and self.path is None:
            raise MissingKeywordError("PATH", self.section_name(), file_name=file_name)
        if self.mode is TrackingMode.SINGLE_DIFF and (self.path_1 is None or self.path_2 is None):
            raise MissingKeywordError("PATH_1" if self.path_1 is None else "PATH_2", self.section_name(),
                                      file_name=file_name)
        participants = len(self.participants)
        for delays, keyword in ((self.transmit_delays, "TRANSMIT_DELAY"), (self.receive_delays, "RECEIVE_DELAY")):
            for index in delays:
                if not 1 <= index <= participants:
                    raise StructureError(f"{keyword}_{index} refers to an undeclared participant",
                                         file_name=file_name)


def _observation_fields() -> tuple[Field, ...]:
    names = [
        "ANGLE_1", "ANGLE_2", "CARRIER_POWER", "CLOCK_BIAS", "CLOCK_DRIFT", "DOPPLER_COUNT",
        "DOPPLER_INSTANTANEOUS", "DOPPLER_INTEGRATED", "DOR", "MAG", "PC_N0", "PR_N0", "PRESSURE",
        "RANGE", "RCS", "RECEIVE_FREQ", "RHUMIDITY", "STEC", "TEMPERATURE", "TROPO_DRY", "TROPO_WET",
        "VLBI_DELAY",
    ]
    for i in range(1, 6):
        names.extend([f"RECEIVE_FREQ_{i}", f"RECEIVE_PHASE_CT_{i}", f"TRANSMIT_FREQ_{i}",
                      f"TRANSMIT_FREQ_RATE_{i}", f"TRANSMIT_PHASE_CT_{i}"])
    return tuple(real(name) for name in names)


OBSERVATION_FIELDS = _observation_fields()


class Observation(CommentsContainer):
    """One tracking observation.

    KVN writes it as ``KEYWORD = epoch value``; XML as an ``observation`` element
    holding ``EPOCH`` and the measurement element.
    """

    SECTION = "observation"
    FIELDS = (date("EPOCH", mandatory=True),) + OBSERVATION_FIELDS

    def accept(self, token: ParseToken) -> bool:
        found = self.lookup_keyword(token.name)
        if found is None:
            return False
        field, key = found
        parts = token.content.split()
        if field is not self.FIELDS[0] and len(parts) == 2:
            self.store(self.FIELDS[0], self.FIELDS[0].parse(dataclasses.replace(token, name="EPOCH",
                                                                                    content=parts[0])))
            self.store(field, field.parse(dataclasses.replace(token, content=parts[1])), key, token)
            return True
        self.store(field, field.parse(token), key, token)
        return True

    @property
    def measurement(self) -> Optional[tuple[str, float]]:
        for field in OBSERVATION_FIELDS:
            value = getattr(self, field.attr)
            if value is not None:
                return field.keyword, value
        return None

    def set_observation(self, epoch: CcsdsDate, keyword: str, value: float) -> None:
        self.store(self.FIELDS[0], epoch)
        self.store(self.field(keyword), float(value))

    def entries(self, syntax: FileFormat) -> Iterator[tuple[Field, Key, Any]]:
        for field, key, value in super().entries(syntax):
            if syntax is FileFormat.XML or field is not self.FIELDS[0]:
                yield field, key, value

    def format_entry(self, field: Field, key: Key, value: Any, syntax: FileFormat) -> str:
        if syntax is FileFormat.KVN and field is not self.FIELDS[0]:
            return f"{self.epoch} {field.format(value)}"
        return field.format(value)

    def check(self, file_name: Optional[str] = None) -> None:
        given = [f.keyword for f in OBSERVATION_FIELDS if getattr(self, f.attr) is not None]
        if not given:
            raise MissingKeywordError("observation value", self.section_name(), file_name=file_name)
        if len(given) > 1:
            raise StructureError(f"observation at {self.epoch} holds several values: {', '.join(given)}",
                                 file_name=file_name)


class TdmData(DataSection):
    DATA_COMMENTS = True
    BLOCKS = (Block("observations", Observation, "observation", repeatable=True, single_entry=True),)

    def add_observation(self, epoch: CcsdsDate, keyword: str, value: float) -> Observation:
        observation = self.new_block(self.BLOCKS[0])
        observation.set_observation(epoch, keyword, value)
        return observation

    def epochs(self) -> Iterator[CcsdsDate]:
        for observation in self.observations:
            yield observation.epoch

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.observations:
            raise MissingKeywordError("observation", self.section_name(), file_name=file_name)


class Tdm(Message):
    MESSAGE_TYPE = "TDM"
    ROOT = "tdm"
    VERSION_KEY = "CCSDS_TDM_VERS"


GRAMMAR = MessageGrammar(Tdm, AdmHeader, TdmMetadata, TdmData, kvn_data="DATA")
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
