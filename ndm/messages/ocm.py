"""Orbit Comprehensive Message."""

from __future__ import annotations

import logging
from typing import Optional

from ndm.dates import TimeSystem
from ndm.errors import FieldFormatError, MissingKeywordError, StructureError
from ndm.messages.common import LineBlock, UserDefinedParameters
from ndm.parsing import MessageGrammar, MessageParser
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.fields import Field, IndexMode, choice, date, integer, real, reals, text, text_list
from ndm.sections.header import OdmHeader
from ndm.sections.segment import Message
from ndm.writing import MessageWriter

logger = logging.getLogger(__name__)

# number of values after the time tag, per element set
ELEMENT_SET_SIZES = {
    "CARTP": 3,
    "CARTPV": 6,
    "CARTPVA": 9,
    "GEODETIC": 3,
    "KEPLERIAN": 6,
    "EQUINOCTIAL": 6,
    "ADBARV": 6,
    "LDBARV": 6,
}

COVARIANCE_ORDERINGS = ("LTM", "UTM", "FULL", "LTMWCC", "UTMWCC")


class OcmMetadata(CommentsContainer):
    SECTION = "metadata"
    FIELDS = (
        text("OBJECT_NAME"),
        text("INTERNATIONAL_DESIGNATOR"),
        text("CATALOG_NAME"),
        text("OBJECT_DESIGNATOR"),
        text_list("ALTERNATE_NAMES"),
        text("ORIGINATOR_POC"),
        text("ORIGINATOR_POSITION"),
        text("ORIGINATOR_PHONE"),
        text("ORIGINATOR_EMAIL"),
        text("ORIGINATOR_ADDRESS"),
        text("TECH_ORG"),
        text("TECH_POC"),
        text("TECH_POSITION"),
        text("TECH_PHONE"),
        text("TECH_EMAIL"),
        text("TECH_ADDRESS"),
        text("PREVIOUS_MESSAGE_ID"),
        text("NEXT_MESSAGE_ID"),
        text("ADM_MSG_LINK"),
        text("CDM_MSG_LINK"),
        text("PRM_MSG_LINK"),
        text("RDM_MSG_LINK"),
        text_list("TDM_MSG_LINK"),
        text("OPERATOR"),
        text("OWNER"),
        text("COUNTRY"),
        text("CONSTELLATION"),
        text("OBJECT_TYPE"),
        choice("TIME_SYSTEM", TimeSystem, mandatory=True),
        date("EPOCH_TZERO", mandatory=True),
        text("OPS_STATUS"),
        text("ORBIT_CATEGORY"),
        text_list("OCM_DATA_ELEMENTS"),
        real("SCLK_OFFSET_AT_EPOCH", "s"),
        real("SCLK_SEC_PER_SI_SEC", "s"),
        date("PREVIOUS_MESSAGE_EPOCH"),
        date("NEXT_MESSAGE_EPOCH"),
        date("START_TIME"),
        date("STOP_TIME"),
        real("TIME_SPAN", "d"),
        real("TAIMUTC_AT_TZERO", "s"),
        date("NEXT_LEAP_EPOCH"),
        real("NEXT_LEAP_TAIMUTC", "s"),
        real("UT1MUTC_AT_TZERO", "s"),
        text("EOP_SOURCE"),
        text("INTERP_METHOD_EOP"),
        text("CELESTIAL_SOURCE"),
    )


class Trajectory(LineBlock):
    SECTION = "traj"
    XML_RAW_LINE = "trajLine"
    FIELDS = (
        text("TRAJ_ID"),
        text("TRAJ_PREV_ID"),
        text("TRAJ_NEXT_ID"),
        text("TRAJ_BASIS"),
        text("TRAJ_BASIS_ID"),
        text("INTERPOLATION"),
        integer("INTERPOLATION_DEGREE"),
        text("PROPAGATOR"),
        text("CENTER_NAME", mandatory=True),
        text("TRAJ_REF_FRAME", mandatory=True),
        date("TRAJ_FRAME_EPOCH"),
        date("USEABLE_START_TIME"),
        date("USEABLE_STOP_TIME"),
        integer("ORB_REVNUM"),
        integer("ORB_REVNUM_BASIS"),
        text("TRAJ_TYPE", mandatory=True),
        text("ORB_AVERAGING"),
        text_list("TRAJ_UNITS"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.lines:
            raise MissingKeywordError(self.XML_RAW_LINE, self.section_name(), file_name=file_name)
        size = ELEMENT_SET_SIZES.get(self.traj_type.upper())
        if size is None:
            logger.debug("No line width known for TRAJ_TYPE %s", self.traj_type)
            return
        _check_widths(self.lines, size, f"{self.traj_type} trajectory line", file_name)


class PhysicalProperties(CommentsContainer):
    SECTION = "phys"
    FIELDS = (
        text("MANUFACTURER"),
        text("BUS_MODEL"),
        text_list("DOCKED_WITH"),
        real("DRAG_CONST_AREA", "m**2"),
        real("DRAG_COEFF_NOM"),
        real("DRAG_UNCERTAINTY", "%"),
        real("INITIAL_WET_MASS", "kg"),
        real("WET_MASS", "kg"),
        real("DRY_MASS", "kg"),
        text("OEB_PARENT_FRAME"),
        date("OEB_PARENT_FRAME_EPOCH"),
        real("OEB_Q1"),
        real("OEB_Q2"),
        real("OEB_Q3"),
        real("OEB_QC"),
        real("OEB_MAX", "m"),
        real("OEB_INT", "m"),
        real("OEB_MIN", "m"),
        real("AREA_ALONG_OEB_MAX", "m**2"),
        real("AREA_ALONG_OEB_INT", "m**2"),
        real("AREA_ALONG_OEB_MIN", "m**2"),
        real("AREA_MIN_FOR_PC", "m**2"),
        real("AREA_MAX_FOR_PC", "m**2"),
        real("AREA_TYP_FOR_PC", "m**2"),
        real("RCS", "m**2"),
        real("RCS_MIN", "m**2"),
        real("RCS_MAX", "m**2"),
        real("SRP_CONST_AREA", "m**2"),
        real("SOLAR_RAD_COEFF"),
        real("SOLAR_RAD_UNCERTAINTY", "%"),
        real("VM_ABSOLUTE"),
        real("VM_APPARENT_MIN"),
        real("VM_APPARENT"),
        real("VM_APPARENT_MAX"),
        real("REFLECTANCE"),
        text("ATT_CONTROL_MODE"),
        text("ATT_ACTUATOR_TYPE"),
        real("ATT_KNOWLEDGE", "deg"),
        real("ATT_CONTROL", "deg"),
        real("ATT_POINTING", "deg"),
        real("AVG_MANEUVER_FREQ"),
        real("MAX_THRUST", "N"),
        real("DV_BOL", "km/s"),
        real("DV_REMAINING", "km/s"),
        real("IXX", "kg*m**2"),
        real("IYY", "kg*m**2"),
        real("IZZ", "kg*m**2"),
        real("IXY", "kg*m**2"),
        real("IXZ", "kg*m**2"),
        real("IYZ", "kg*m**2"),
    )


class OcmCovariance(LineBlock):
    SECTION = "cov"
    XML_RAW_LINE = "covLine"
    FIELDS = (
        text("COV_ID"),
        text("COV_PREV_ID"),
        text("COV_NEXT_ID"),
        text("COV_BASIS"),
        text("COV_BASIS_ID"),
        text("COV_REF_FRAME", mandatory=True),
        date("COV_FRAME_EPOCH"),
        real("COV_SCALE_MIN"),
        real("COV_SCALE_MAX"),
        real("COV_CONFIDENCE", "%"),
        text("COV_TYPE", mandatory=True),
        text("COV_ORDERING"),
        text_list("COV_UNITS"),
    )

    def width(self) -> Optional[int]:
        size = ELEMENT_SET_SIZES.get(self.cov_type.upper())
        if size is None:
            return None
        ordering = (self.cov_ordering or "LTM").upper()
        if ordering not in COVARIANCE_ORDERINGS:
            raise FieldFormatError("COV_ORDERING", self.cov_ordering, "/".join(COVARIANCE_ORDERINGS))
        return size * size if ordering == "FULL" else size * (size + 1) // 2

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.lines:
            raise MissingKeywordError(self.XML_RAW_LINE, self.section_name(), file_name=file_name)
        width = self.width()
        if width is not None:
            _check_widths(self.lines, width, f"{self.cov_type} covariance line", file_name)


class OcmManeuver(LineBlock):
    SECTION = "man"
    XML_RAW_LINE = "manLine"
    FIELDS = (
        text("MAN_ID", mandatory=True),
        text("MAN_PREV_ID"),
        text("MAN_NEXT_ID"),
        text("MAN_BASIS"),
        text("MAN_BASIS_ID"),
        text("MAN_DEVICE_ID", mandatory=True),
        date("MAN_PREV_EPOCH"),
        date("MAN_NEXT_EPOCH"),
        text_list("MAN_PURPOSE"),
        text("MAN_PRED_SOURCE"),
        text("MAN_REF_FRAME", mandatory=True),
        date("MAN_FRAME_EPOCH"),
        text("GRAV_ASSIST_NAME"),
        text("DC_TYPE", mandatory=True),
        date("DC_WIN_OPEN"),
        date("DC_WIN_CLOSE"),
        integer("DC_MIN_CYCLES"),
        integer("DC_MAX_CYCLES"),
        date("DC_EXEC_START"),
        date("DC_EXEC_STOP"),
        date("DC_REF_TIME"),
        real("DC_TIME_PULSE_DURATION", "s"),
        real("DC_TIME_PULSE_PERIOD", "s"),
        reals("DC_REF_DIR"),
        text("DC_BODY_FRAME"),
        reals("DC_BODY_TRIGGER"),
        real("DC_PA_START_ANGLE", "deg"),
        real("DC_PA_STOP_ANGLE", "deg"),
        text_list("MAN_COMPOSITION", mandatory=True),
        text_list("MAN_UNITS"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        if not self.lines:
            raise MissingKeywordError(self.XML_RAW_LINE, self.section_name(), file_name=file_name)
        # the first MAN_COMPOSITION item names the time tag column
        _check_widths(self.lines, len(self.man_composition) - 1, "maneuver line", file_name)


class Perturbations(CommentsContainer):
    SECTION = "pert"
    FIELDS = (
        text("ATMOSPHERIC_MODEL"),
        text("GRAVITY_MODEL"),
        real("EQUATORIAL_RADIUS", "km"),
        real("GM", "km**3/s**2"),
        text_list("N_BODY_PERTURBATIONS"),
        real("CENTRAL_BODY_ROTATION", "deg/s"),
        real("OBLATE_FLATTENING"),
        text("OCEAN_TIDES_MODEL"),
        text("SOLID_TIDES_MODEL"),
        text("REDUCTION_THEORY"),
        text("ALBEDO_MODEL"),
        integer("ALBEDO_GRID_SIZE"),
        text("SHADOW_MODEL"),
        text_list("SHADOW_BODIES"),
        text("SRP_MODEL"),
        text("SW_DATA_SOURCE"),
        date("SW_DATA_EPOCH"),
        text("SW_INTERP_METHOD"),
        real("FIXED_GEOMAG_KP"),
        real("FIXED_GEOMAG_AP"),
        real("FIXED_GEOMAG_DST"),
        real("FIXED_F10P7"),
        real("FIXED_F10P7_MEAN"),
        real("FIXED_M10P7"),
        real("FIXED_M10P7_MEAN"),
        real("FIXED_S10P7"),
        real("FIXED_S10P7_MEAN"),
        real("FIXED_Y10P7"),
        real("FIXED_Y10P7_MEAN"),
    )


class OrbitDetermination(CommentsContainer):
    SECTION = "od"
    FIELDS = (
        text("OD_ID", mandatory=True),
        text("OD_PREV_ID"),
        text("OD_METHOD", mandatory=True),
        date("OD_EPOCH", mandatory=True),
        real("DAYS_SINCE_FIRST_OBS", "d"),
        real("DAYS_SINCE_LAST_OBS", "d"),
        real("RECOMMENDED_OD_SPAN", "d"),
        real("ACTUAL_OD_SPAN", "d"),
        integer("OBS_AVAILABLE"),
        integer("OBS_USED"),
        integer("TRACKS_AVAILABLE"),
        integer("TRACKS_USED"),
        real("MAXIMUM_OBS_GAP", "d"),
        real("OD_EPOCH_EIGMAJ", "m"),
        real("OD_EPOCH_EIGINT", "m"),
        real("OD_EPOCH_EIGMIN", "m"),
        real("OD_MAX_PRED_EIGMAJ", "m"),
        real("OD_MIN_PRED_EIGMIN", "m"),
        real("OD_CONFIDENCE", "%"),
        real("GDOP"),
        integer("SOLVE_N"),
        text_list("SOLVE_STATES"),
        integer("CONSIDER_N"),
        text_list("CONSIDER_PARAMS"),
        real("SEDR", "W/kg"),
        integer("NUMBER_SENSORS_USED", counts="sensors_used"),
        Field("SENSORS_USED", "sensors_used", index=IndexMode.SEQUENCE),
        integer("NUMBER_SENSOR_NOISE_COVARIANCE", index=IndexMode.KEYED, counts="sensor_noise_stddev"),
        reals("SENSOR_NOISE_STDDEV", index=IndexMode.KEYED),
        real("WEIGHTED_RMS"),
        text_list("DATA_TYPES"),
    )

    def check(self, file_name: Optional[str] = None) -> None:
        sensors = len(self.sensors_used)
        for index in self.sensor_noise_stddev:
            if sensors and not 1 <= index <= sensors:
                raise StructureError(f"SENSOR_NOISE_STDDEV_{index} refers to an undeclared sensor",
                                     file_name=file_name)


class OcmData(DataSection):
    BLOCKS = (
        Block("trajectories", Trajectory, "traj", kvn_section="TRAJ", repeatable=True),
        Block("physical_properties", PhysicalProperties, "phys", kvn_section="PHYS"),
        Block("covariances", OcmCovariance, "cov", kvn_section="COV", repeatable=True),
        Block("maneuvers", OcmManeuver, "man", kvn_section="MAN", repeatable=True),
        Block("perturbations", Perturbations, "pert", kvn_section="PERT"),
        Block("orbit_determination", OrbitDetermination, "od", kvn_section="OD"),
        Block("user_defined", UserDefinedParameters, "user", kvn_section="USER"),
    )


def _check_widths(lines, width: int, what: str, file_name: Optional[str]) -> None:
    for line in lines:
        if len(line.values) != width:
            raise FieldFormatError(what, line.text(), f"a time tag followed by {width} values",
                                   file_name=file_name)


class Ocm(Message):
    MESSAGE_TYPE = "OCM"
    ROOT = "ocm"
    VERSION_KEY = "CCSDS_OCM_VERS"


GRAMMAR = MessageGrammar(Ocm, OdmHeader, OcmMetadata, OcmData, single_segment=True)
WRITER = MessageWriter(GRAMMAR)


def parser() -> MessageParser:
    return MessageParser(GRAMMAR)
