"""Orbit Mean-elements Message."""

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
from ndm.sections.fields import date, integer, real, text
from ndm.sections.header import OdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter


class OmmMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = object_fields() + (
        text("REF_FRAME", mandatory=True),
        date("REF_FRAME_EPOCH"),
        time_system(),
        text("MEAN_ELEMENT_THEORY", mandatory=True),
    )


class MeanElements(CommentsContainer):
    SECTION = "meanElements"
    FIELDS = (
        date("EPOCH", mandatory=True),
        real("SEMI_MAJOR_AXIS", "km"),
        real("MEAN_MOTION", "rev/day"),
        real("ECCENTRICITY", mandatory=True),
        real("INCLINATION", "deg", mandatory=True),
        real("RA_OF_ASC_NODE", "deg", mandatory=True),
        real("ARG_OF_PERICENTER", "deg", mandatory=True),
        real("MEAN_ANOMALY", "deg", mandatory=True),
        real("GM", "km**3/s**2"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if self.semi_major_axis is None and self.mean_motion is None:
            raise MissingKeywordError("MEAN_MOTION", self.section_name(), file_name=file_name)
        if self.semi_major_axis is not None and self.mean_motion is not None:
            raise StructureError("SEMI_MAJOR_AXIS and MEAN_MOTION are mutually exclusive", file_name=file_name)


class TleParameters(CommentsContainer):
    SECTION = "tleParameters"
    FIELDS = (
        integer("EPHEMERIS_TYPE"),
        text("CLASSIFICATION_TYPE"),
        integer("NORAD_CAT_ID"),
        integer("ELEMENT_SET_NO"),
        integer("REV_AT_EPOCH"),
        real("BSTAR", "1/ER"),
        real("MEAN_MOTION_DOT", "rev/day**2", mandatory=True),
        real("MEAN_MOTION_DDOT", "rev/day**3", mandatory=True),
    )


class OmmData(DataSection):
    BLOCKS = (
        Block("mean_elements", MeanElements, "meanElements", mandatory=True),
        Block("spacecraft_parameters", SpacecraftParameters, "spacecraftParameters"),
        Block("tle_parameters", TleParameters, "tleParameters"),
        Block("covariance", CovarianceMatrix, "covarianceMatrix"),
        Block("user_defined", UserDefinedParameters, "userDefinedParameters"),
    )


class Omm(Message):
    MESSAGE_TYPE = "OMM"
    ROOT = "omm"
    VERSION_KEY = "CCSDS_OMM_VERS"


GRAMMAR = MessageGrammar(Omm, OdmHeader, OmmMetadata, OmmData, kvn_metadata=None, single_segment=True)
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
