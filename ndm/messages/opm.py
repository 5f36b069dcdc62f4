"""Orbit Parameter Message."""

from __future__ import annotations

from typing import Optional

from ndm.errors import MissingKeywordError, StructureError
from ndm.messages.common import (
    CovarianceMatrix,
    SpacecraftParameters,
    UserDefinedParameters,
    object_fields,
    time_system,
)
from ndm.parsing import MessageGrammar, MessageParser
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import date, real, text
from ndm.sections.header import OdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter


class OpmMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = object_fields() + (
        text("REF_FRAME", mandatory=True),
        date("REF_FRAME_EPOCH"),
        time_system(),
    )


class StateVector(CommentsContainer):
    SECTION = "stateVector"
    FIELDS = (
        date("EPOCH", mandatory=True),
        real("X", "km", mandatory=True),
        real("Y", "km", mandatory=True),
        real("Z", "km", mandatory=True),
        real("X_DOT", "km/s", mandatory=True),
        real("Y_DOT", "km/s", mandatory=True),
        real("Z_DOT", "km/s", mandatory=True),
    )

    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def velocity(self) -> tuple[float, float, float]:
        return (self.x_dot, self.y_dot, self.z_dot)


class KeplerianElements(CommentsContainer):
    SECTION = "keplerianElements"
    FIELDS = (
        real("SEMI_MAJOR_AXIS", "km", mandatory=True),
        real("ECCENTRICITY", mandatory=True),
        real("INCLINATION", "deg", mandatory=True),
        real("RA_OF_ASC_NODE", "deg", mandatory=True),
        real("ARG_OF_PERICENTER", "deg", mandatory=True),
        real("TRUE_ANOMALY", "deg"),
        real("MEAN_ANOMALY", "deg"),
        real("GM", "km**3/s**2", mandatory=True),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if self.true_anomaly is None and self.mean_anomaly is None:
            raise MissingKeywordError("TRUE_ANOMALY", self.section_name(), file_name=file_name)
        if self.true_anomaly is not None and self.mean_anomaly is not None:
            raise StructureError("TRUE_ANOMALY and MEAN_ANOMALY are mutually exclusive", file_name=file_name)


class Maneuver(CommentsContainer):
    SECTION = "maneuverParameters"
    FIELDS = (
        date("MAN_EPOCH_IGNITION", mandatory=True),
        real("MAN_DURATION", "s", mandatory=True),
        real("MAN_DELTA_MASS", "kg", mandatory=True),
        text("MAN_REF_FRAME", mandatory=True),
        real("MAN_DV_1", "km/s", mandatory=True),
        real("MAN_DV_2", "km/s", mandatory=True),
        real("MAN_DV_3", "km/s", mandatory=True),
    )


class OpmData(DataSection):
    BLOCKS = (
        Block("state_vector", StateVector, "stateVector", mandatory=True),
        Block("keplerian_elements", KeplerianElements, "keplerianElements"),
        Block("spacecraft_parameters", SpacecraftParameters, "spacecraftParameters"),
        Block("covariance", CovarianceMatrix, "covarianceMatrix"),
        Block("maneuvers", Maneuver, "maneuverParameters", repeatable=True),
        Block("user_defined", UserDefinedParameters, "userDefinedParameters"),
    )


class Opm(Message):
    MESSAGE_TYPE = "OPM"
    ROOT = "opm"
    VERSION_KEY = "CCSDS_OPM_VERS"


GRAMMAR = MessageGrammar(Opm, OdmHeader, OpmMetadata, OpmData, kvn_metadata=None, single_segment=True)
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
