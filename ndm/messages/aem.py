"""Attitude Ephemeris Message."""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Iterator, Optional

from ndm.dates import CcsdsDate
from ndm.errors import FieldFormatError, MissingKeywordError, StructureError
from ndm.lexical.tokens import ParseToken
from ndm.messages.common import format_data, parse_data, time_system
from ndm.parsing import MessageGrammar, MessageParser
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import choice, date, integer, real, text
from ndm.sections.header import AdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter

ROTATION_SEQUENCE_RE = re.compile(r"^[123]{3}$")


class AttitudeDirection(str, Enum):
    A2B = "A2B"
    B2A = "B2A"


class AttitudeType(str, Enum):
    QUATERNION = "QUATERNION"
    QUATERNION_DERIVATIVE = "QUATERNION/DERIVATIVE"
    QUATERNION_RATE = "QUATERNION/RATE"
    EULER_ANGLE = "EULER_ANGLE"
    EULER_ANGLE_RATE = "EULER_ANGLE/RATE"
    SPIN = "SPIN"
    SPIN_NUTATION = "SPIN/NUTATION"


class QuaternionType(str, Enum):
    FIRST = "FIRST"
    LAST = "LAST"


class RateFrame(str, Enum):
    REF_FRAME_A = "REF_FRAME_A"
    REF_FRAME_B = "REF_FRAME_B"


_QUATERNION_TYPES = (AttitudeType.QUATERNION, AttitudeType.QUATERNION_DERIVATIVE, AttitudeType.QUATERNION_RATE)
_EULER_TYPES = (AttitudeType.EULER_ANGLE, AttitudeType.EULER_ANGLE_RATE)
_RATE_TYPES = (AttitudeType.QUATERNION_RATE, AttitudeType.EULER_ANGLE_RATE)


class AemMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = (
        text("OBJECT_NAME", mandatory=True),
        text("OBJECT_ID", mandatory=True),
        text("CENTER_NAME"),
        text("REF_FRAME_A", mandatory=True),
        text("REF_FRAME_B", mandatory=True),
        choice("ATTITUDE_DIR", AttitudeDirection, mandatory=True),
        time_system(),
        date("START_TIME", mandatory=True),
        date("USEABLE_START_TIME"),
        date("USEABLE_STOP_TIME"),
        date("STOP_TIME", mandatory=True),
        choice("ATTITUDE_TYPE", AttitudeType, mandatory=True),
        choice("QUATERNION_TYPE", QuaternionType),
        text("EULER_ROT_SEQ"),
        choice("RATE_FRAME", RateFrame),
        text("INTERPOLATION_METHOD"),
        integer("INTERPOLATION_DEGREE"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if self.stop_time < self.start_time:
            raise StructureError(f"STOP_TIME {self.stop_time} is before START_TIME {self.start_time}",
                                 file_name=file_name)
        if self.attitude_type in _QUATERNION_TYPES and self.quaternion_type is None:
            raise MissingKeywordError("QUATERNION_TYPE", self.section_name(), file_name=file_name)
        if self.attitude_type in _EULER_TYPES:
            if self.euler_rot_seq is None:
                raise MissingKeywordError("EULER_ROT_SEQ", self.section_name(), file_name=file_name)
            if not ROTATION_SEQUENCE_RE.match(self.euler_rot_seq):
                raise FieldFormatError("EULER_ROT_SEQ", self.euler_rot_seq, "three axes among 1, 2 and 3",
                                       file_name=file_name)
        if self.attitude_type in _RATE_TYPES and self.rate_frame is None:
            raise MissingKeywordError("RATE_FRAME", self.section_name(), file_name=file_name)


_QUATERNION = ("Q1", "Q2", "Q3")
_QUATERNION_DOT = ("Q1_DOT", "Q2_DOT", "Q3_DOT")
_SPIN = ("SPIN_ALPHA", "SPIN_DELTA", "SPIN_ANGLE", "SPIN_ANGLE_VEL")


def attitude_columns(attitude_type: AttitudeType, quaternion_type: Optional[QuaternionType] = None) -> tuple[str, ...]:
    """Keywords of the values following the epoch on an attitude data line."""
    first = quaternion_type is QuaternionType.FIRST
    quaternion = ("QC",) + _QUATERNION if first else _QUATERNION + ("QC",)
    derivative = ("QC_DOT",) + _QUATERNION_DOT if first else _QUATERNION_DOT + ("QC_DOT",)
    return {
        AttitudeType.QUATERNION: quaternion,
        AttitudeType.QUATERNION_DERIVATIVE: quaternion + derivative,
        AttitudeType.QUATERNION_RATE: quaternion + ("X_RATE", "Y_RATE", "Z_RATE"),
        AttitudeType.EULER_ANGLE: ("ANGLE_1", "ANGLE_2", "ANGLE_3"),
        AttitudeType.EULER_ANGLE_RATE: ("ANGLE_1", "ANGLE_2", "ANGLE_3", "RATE_1", "RATE_2", "RATE_3"),
        AttitudeType.SPIN: _SPIN,
        AttitudeType.SPIN_NUTATION: _SPIN + ("NUTATION", "NUTATION_PER", "NUTATION_PHASE"),
    }[AttitudeType(attitude_type)]


class AttitudeState(CommentsContainer):
    """One attitude record; its columns depend on the segment ATTITUDE_TYPE."""

    SECTION = "attitudeState"
    ACCEPTS_RAW_LINES = True
    KVN_RAW_ONLY = True
    FIELDS = (
        date("EPOCH", mandatory=True),
        real("Q1"),
        real("Q2"),
        real("Q3"),
        real("QC"),
        real("Q1_DOT", "1/s"),
        real("Q2_DOT", "1/s"),
        real("Q3_DOT", "1/s"),
        real("QC_DOT", "1/s"),
        real("X_RATE", "deg/s"),
        real("Y_RATE", "deg/s"),
        real("Z_RATE", "deg/s"),
        real("ANGLE_1", "deg"),
        real("ANGLE_2", "deg"),
        real("ANGLE_3", "deg"),
        real("RATE_1", "deg/s"),
        real("RATE_2", "deg/s"),
        real("RATE_3", "deg/s"),
        real("SPIN_ALPHA", "deg"),
        real("SPIN_DELTA", "deg"),
        real("SPIN_ANGLE", "deg"),
        real("SPIN_ANGLE_VEL", "deg/s"),
        real("NUTATION", "deg"),
        real("NUTATION_PER", "s"),
        real("NUTATION_PHASE", "deg"),
    )

    def __init__(self, metadata: Optional[AemMetadata] = None):
        super().__init__()
        self.metadata = metadata

    @classmethod
    def create(cls, metadata=None) -> AttitudeState:
        return cls(metadata)

    def columns(self) -> tuple[str, ...]:
        if self.metadata is None or self.metadata.attitude_type is None:
            raise StructureError("attitude records need ATTITUDE_TYPE in the segment metadata")
        return attitude_columns(self.metadata.attitude_type, self.metadata.quaternion_type)

    @property
    def values(self) -> list[Optional[float]]:
        return [getattr(self, name.lower()) for name in self.columns()]

    def add_raw_line(self, token: ParseToken) -> None:
        columns = self.columns()
        parts = token.content.split()
        if len(parts) != len(columns) + 1:
            raise FieldFormatError(
                "attitude line", token.content,
                f"an epoch followed by {len(columns)} values for {self.metadata.attitude_type.value}",
                file_name=token.file_name, line=token.line,
            )
        epoch = self.FIELDS[0].parse(ParseToken(token.type, "EPOCH", parts[0], line=token.line,
                                                file_name=token.file_name))
        self.set_attitude(epoch, parse_data(token, parts[1:]))

    def set_attitude(self, epoch: CcsdsDate, values: Iterable[float]) -> None:
        columns = self.columns()
        values = [float(v) for v in values]
        if len(values) != len(columns):
            raise FieldFormatError("attitude values", " ".join(map(str, values)), f"{len(columns)} values")
        self.store(self.FIELDS[0], epoch)
        for name, value in zip(columns, values):
            self.store(self.field(name), value)

    def entries(self, syntax: FileFormat):
        if syntax is FileFormat.KVN:
            return iter(())
        return super().entries(syntax)

    def raw_lines(self, syntax: FileFormat) -> Iterator[str]:
        if syntax is FileFormat.KVN:
            yield f"{self.epoch} {format_data(self.values)}"

    def check(self, file_name: Optional[str] = None) -> None:
        columns = set(self.columns())
        for field in self.FIELDS[1:]:
            value = getattr(self, field.attr)
            if field.keyword in columns and value is None:
                raise MissingKeywordError(field.keyword, self.section_name(), file_name=file_name)
            if field.keyword not in columns and value is not None:
                raise StructureError(
                    f"{field.keyword} does not belong to {self.metadata.attitude_type.value} records",
                    file_name=file_name,
                )


class AemData(DataSection):
    DATA_COMMENTS = True
    BLOCKS = (Block("attitudes", AttitudeState, "attitudeState", repeatable=True),)

    def add_attitude(self, epoch: CcsdsDate, values: Iterable[float]) -> AttitudeState:
        state = self.new_block(self.BLOCKS[0])
        state.set_attitude(epoch, values)
        return state

    def epochs(self) -> Iterator[CcsdsDate]:
        for state in self.attitudes:
            yield state.epoch

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.attitudes:
            raise MissingKeywordError("attitudeState", self.section_name(), file_name=file_name)


class Aem(Message):
    MESSAGE_TYPE = "AEM"
    ROOT = "aem"
    VERSION_KEY = "CCSDS_AEM_VERS"


GRAMMAR = MessageGrammar(Aem, AdmHeader, AemMetadata, AemData, kvn_data="DATA")
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
