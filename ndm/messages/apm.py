"""Attitude Parameter Message."""

from __future__ import annotations

from typing import Optional

from ndm.errors import FieldFormatError, MissingKeywordError
from ndm.messages.aem import ROTATION_SEQUENCE_RE, AttitudeDirection, RateFrame
from ndm.messages.common import UserDefinedParameters, time_system
from ndm.parsing import MessageGrammar, MessageParser
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import choice, date, real, text
from ndm.sections.header import AdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter


def _all_or_none(container: CommentsContainer, keywords, file_name: Optional[str]) -> None:
    given = [getattr(container, kw.lower()) is not None for kw in keywords]
    if any(given) and not all(given):
        raise MissingKeywordError(keywords[given.index(False)], container.section_name(), file_name=file_name)


class ApmMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = (
        text("OBJECT_NAME", mandatory=True),
        text("OBJECT_ID", mandatory=True),
        text("CENTER_NAME"),
        time_system(),
    )


class QuaternionState(CommentsContainer):
    SECTION = "quaternionState"
    FIELDS = (
        date("EPOCH", mandatory=True),
        text("Q_FRAME_A", mandatory=True),
        text("Q_FRAME_B", mandatory=True),
        choice("Q_DIR", AttitudeDirection, mandatory=True),
        real("Q1", mandatory=True, group="quaternion"),
        real("Q2", mandatory=True, group="quaternion"),
        real("Q3", mandatory=True, group="quaternion"),
        real("QC", mandatory=True, group="quaternion"),
        real("Q1_DOT", "1/s", group="quaternionDot"),
        real("Q2_DOT", "1/s", group="quaternionDot"),
        real("Q3_DOT", "1/s", group="quaternionDot"),
        real("QC_DOT", "1/s", group="quaternionDot"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        _all_or_none(self, ("Q1_DOT", "Q2_DOT", "Q3_DOT", "QC_DOT"), file_name)


class EulerAngles(CommentsContainer):
    SECTION = "eulerElementsThree"
    FIELDS = (
        text("EULER_FRAME_A", mandatory=True),
        text("EULER_FRAME_B", mandatory=True),
        choice("EULER_DIR", AttitudeDirection, mandatory=True),
        text("EULER_ROT_SEQ", mandatory=True),
        choice("RATE_FRAME", RateFrame),
        real("X_ANGLE", "deg", mandatory=True, group="rotationAngles"),
        real("Y_ANGLE", "deg", mandatory=True, group="rotationAngles"),
        real("Z_ANGLE", "deg", mandatory=True, group="rotationAngles"),
        real("X_RATE", "deg/s", group="rotationRates"),
        real("Y_RATE", "deg/s", group="rotationRates"),
        real("Z_RATE", "deg/s", group="rotationRates"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if not ROTATION_SEQUENCE_RE.match(self.euler_rot_seq):
            raise FieldFormatError("EULER_ROT_SEQ", self.euler_rot_seq, "three axes among 1, 2 and 3",
                                   file_name=file_name)
        _all_or_none(self, ("X_RATE", "Y_RATE", "Z_RATE"), file_name)
        if self.x_rate is not None and self.rate_frame is None:
            raise MissingKeywordError("RATE_FRAME", self.section_name(), file_name=file_name)


class SpinStabilized(CommentsContainer):
    SECTION = "eulerElementsSpin"
    FIELDS = (
        text("SPIN_FRAME_A", mandatory=True),
        text("SPIN_FRAME_B", mandatory=True),
        choice("SPIN_DIR", AttitudeDirection, mandatory=True),
        real("SPIN_ALPHA", "deg", mandatory=True),
        real("SPIN_DELTA", "deg", mandatory=True),
        real("SPIN_ANGLE", "deg", mandatory=True),
        real("SPIN_ANGLE_VEL", "deg/s", mandatory=True),
        real("NUTATION", "deg"),
        real("NUTATION_PER", "s"),
        real("NUTATION_PHASE", "deg"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        _all_or_none(self, ("NUTATION", "NUTATION_PER", "NUTATION_PHASE"), file_name)


class Inertia(CommentsContainer):
    SECTION = "spacecraftParameters"
    FIELDS = (
        text("INERTIA_REF_FRAME"),
        real("I11", "kg*m**2", mandatory=True),
        real("I22", "kg*m**2", mandatory=True),
        real("I33", "kg*m**2", mandatory=True),
        real("I12", "kg*m**2", mandatory=True),
        real("I13", "kg*m**2", mandatory=True),
        real("I23", "kg*m**2", mandatory=True),
    )


class AttitudeManeuver(CommentsContainer):
    SECTION = "maneuverParameters"
    FIELDS = (
        date("MAN_EPOCH_START", mandatory=True),
        real("MAN_DURATION", "s", mandatory=True),
        text("MAN_REF_FRAME", mandatory=True),
        real("MAN_TOR_1", "N*m", mandatory=True),
        real("MAN_TOR_2", "N*m", mandatory=True),
        real("MAN_TOR_3", "N*m", mandatory=True),
    )


class ApmData(DataSection):
    BLOCKS = (
        Block("quaternion_state", QuaternionState, "quaternionState", mandatory=True),
        Block("euler_angles", EulerAngles, "eulerElementsThree"),
        Block("spin", SpinStabilized, "eulerElementsSpin"),
        Block("inertia", Inertia, "spacecraftParameters"),
        Block("maneuvers", AttitudeManeuver, "maneuverParameters", repeatable=True),
        Block("user_defined", UserDefinedParameters, "userDefinedParameters"),
    )


class Apm(Message):
    MESSAGE_TYPE = "APM"
    ROOT = "apm"
    VERSION_KEY = "CCSDS_APM_VERS"


GRAMMAR = MessageGrammar(Apm, AdmHeader, ApmMetadata, ApmData, kvn_metadata=None, single_segment=True)
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
