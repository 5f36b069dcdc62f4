import pytest
from samples import AEM_KVN, APM_KVN, OCM_KVN, OEM_KVN, OMM_KVN, OPM_KVN, OPM_XML, TDM_KVN

from ndm.errors import FieldFormatError, LexicalError, MissingKeywordError, StructureError
from ndm.io import detect_message_type, detect_syntax, dumps, lexer_for, parse_message, parser_for
from ndm.lexical.kvn import KvnLexer
from ndm.lexical.xml import XmlLexer
from ndm.messages.aem import AttitudeType, QuaternionType, attitude_columns
from ndm.messages.opm import Opm
from ndm.messages.tdm import TrackingMode
from ndm.schemas import FileFormat
from ndm.sections.compare import differences
from ndm.sections.header import AdmHeader


def _without(text: str, prefix: str) -> str:
    return "\n".join(line for line in text.splitlines() if not line.startswith(prefix)) + "\n"


def _after(text: str, prefix: str, extra: str) -> str:
    out = []
    for line in text.splitlines():
        out.append(line)
        if line.startswith(prefix):
            out.append(extra)
    return "\n".join(out) + "\n"


# OPM


def test_opm_blocks():
    message = parse_message(OPM_KVN, "osprey.opm")
    assert isinstance(message, Opm)
    assert message.header.format_version == "3.0"
    assert message.header.comments == ("Generated by GSOC",)
    assert message.metadata.comments == ("GEOCENTRIC, CARTESIAN, EARTH FIXED",)
    assert message.data.state_vector.comments == ("State Vector",)
    assert message.data.state_vector.position() == (6503.514, 1239.647, -717.49)
    assert message.data.covariance.cx_x == pytest.approx(1.25e-4)
    assert len(message.data.maneuvers) == 2
    assert message.data.maneuvers[0].comments == ("First maneuver",)
    assert message.data.user_defined.parameters["EARTH_MODEL"] == "WGS-84"


def test_opm_empty_mandatory_value_fails_at_parse():
    with pytest.raises(FieldFormatError) as excinfo:
        parse_message(OPM_KVN.replace("ORIGINATOR = GSOC", "ORIGINATOR ="), "empty.opm")
    assert excinfo.value.line == 4
    assert excinfo.value.file_name == "empty.opm"


def test_opm_text_with_brackets_round_trips():
    message = parse_message(OPM_KVN.replace("OBJECT_NAME = OSPREY 5", "OBJECT_NAME = OSPREY [5]"))
    assert message.metadata.object_name == "OSPREY [5]"
    assert parse_message(dumps(message)).metadata.object_name == "OSPREY [5]"


def test_opm_anomalies_are_exclusive():
    text = _after(OPM_KVN, "TRUE_ANOMALY", "MEAN_ANOMALY = 10.0 [deg]")
    with pytest.raises(StructureError):
        parse_message(text)


def test_opm_needs_an_anomaly():
    with pytest.raises(MissingKeywordError) as excinfo:
        parse_message(_without(OPM_KVN, "TRUE_ANOMALY"))
    assert excinfo.value.keyword == "TRUE_ANOMALY"


def test_opm_from_hand_written_xml():
    message = parse_message(OPM_XML, "osprey.xml")
    assert message.header.comments == ("Hand written for the XML reader",)
    assert message.metadata.comments == ("GEOCENTRIC, CARTESIAN, EARTH FIXED",)
    assert message.metadata.object_name == "OSPREY 5"
    state = message.data.state_vector
    assert state.comments == ("State Vector",)
    assert state.x == pytest.approx(6503.514)
    assert state.y_dot == pytest.approx(8.74042)
    assert message.data.maneuvers[0].comments == ("First maneuver",)
    assert message.data.user_defined.parameters == {"EARTH_MODEL": "WGS-84"}
    assert differences(message, parse_message(dumps(message))) == []


def test_hand_written_xml_tokens_carry_lines():
    tokens = {t.name: t for t in XmlLexer(OPM_XML, "osprey.xml").tokens() if t.name}
    assert tokens["CCSDS_OPM_VERS"].line == 2
    assert tokens["ORIGINATOR"].line == 6
    assert tokens["USER_DEFINED_EARTH_MODEL"].line == 41


def test_hand_written_xml_errors_name_the_line():
    with pytest.raises(FieldFormatError) as excinfo:
        parse_message(OPM_XML.replace("<Z>-717.49</Z>", "<Z>abc</Z>"), "osprey.xml")
    assert (excinfo.value.file_name, excinfo.value.line) == ("osprey.xml", 24)
    assert "line 24" in str(excinfo.value)

    with pytest.raises(LexicalError) as excinfo:
        parse_message(OPM_XML.replace("</MAN_DV_3>", "</MAN_DV_4>"), "osprey.xml")
    assert excinfo.value.line == 37


# OMM


def test_omm_mean_motion_or_semi_major_axis():
    text = _after(OMM_KVN, "MEAN_MOTION =", "SEMI_MAJOR_AXIS = 42164.0 [km]")
    with pytest.raises(StructureError):
        parse_message(text)
    with pytest.raises(MissingKeywordError):
        parse_message(_without(OMM_KVN, "MEAN_MOTION ="))


def test_omm_ordinal_dates():
    message = parse_message(OMM_KVN)
    assert str(message.header.creation_date) == "2007-03-06T16:00:00"
    assert message.data.tle_parameters.bstar == 0.0001


# OEM


def test_oem_segments_and_covariance():
    message = parse_message(OEM_KVN, "mgs.oem")
    first, second = message.segments
    assert len(first.data.states) == 3
    assert first.data.comments == ("Produced by the navigation team",)
    assert first.data.states[0].x_ddot is None
    assert second.data.states[0].z_ddot == 0.003
    covariance = first.data.covariances[0]
    assert covariance.cov_ref_frame == "EME2000"
    assert covariance.matrix()[0][1] == covariance.matrix()[1][0] == pytest.approx(4.6189273e-04)


def test_oem_data_line_width():
    text = OEM_KVN.replace("-1.04195\n", "-1.04195 0.1\n")
    with pytest.raises(FieldFormatError) as excinfo:
        parse_message(text, "bad.oem")
    assert excinfo.value.line == 21


def test_oem_epochs_must_not_go_back():
    text = OEM_KVN.replace("1996-12-18T12:02:00.331 2776", "1996-12-18T11:59:00.331 2776")
    with pytest.raises(StructureError):
        parse_message(text)


def test_oem_stop_before_start():
    text = OEM_KVN.replace("STOP_TIME = 1996-12-28T21:28:00.331", "STOP_TIME = 1996-12-01T00:00:00")
    with pytest.raises(StructureError):
        parse_message(text)


# AEM


def test_aem_columns_follow_metadata():
    assert attitude_columns(AttitudeType.QUATERNION, QuaternionType.FIRST) == ("QC", "Q1", "Q2", "Q3")
    assert attitude_columns("EULER_ANGLE") == ("ANGLE_1", "ANGLE_2", "ANGLE_3")

    message = parse_message(AEM_KVN)
    first = message.data.attitudes[0]
    assert first.values == [0.56748, 0.03146, 0.45689, 0.68427]
    assert message.data.comments == ("Attitude from star trackers",)


def test_aem_line_width():
    text = AEM_KVN.replace(" 0.45652\n", "\n")
    with pytest.raises(FieldFormatError):
        parse_message(text)


def test_aem_quaternion_type_required():
    with pytest.raises(MissingKeywordError):
        parse_message(_without(AEM_KVN, "QUATERNION_TYPE"))


# APM


def test_apm_rotation_sequence():
    with pytest.raises(FieldFormatError):
        parse_message(APM_KVN.replace("EULER_ROT_SEQ = 312", "EULER_ROT_SEQ = 412"))


def test_apm_rates_need_rate_frame():
    with pytest.raises(MissingKeywordError) as excinfo:
        parse_message(_without(APM_KVN, "RATE_FRAME"))
    assert excinfo.value.keyword == "RATE_FRAME"


def test_apm_blocks():
    message = parse_message(APM_KVN)
    assert message.data.quaternion_state.qc == 0.40949
    assert message.data.euler_angles.euler_rot_seq == "312"
    assert message.data.inertia.i11 == 152.0
    assert message.data.spin is None


# TDM


def test_tdm_observations_split_epoch_and_value():
    message = parse_message(TDM_KVN)
    metadata = message.metadata
    assert metadata.participants == ("DSS-25", "2005-001A")
    assert metadata.mode is TrackingMode.SEQUENTIAL
    assert metadata.transmit_delays[1] == 7.7e-5

    observations = message.data.observations
    assert len(observations) == 4
    assert observations[0].measurement == ("TRANSMIT_FREQ_1", 7180064367.3536)
    assert str(observations[3].epoch) == "2005-06-08T17:41:01"
    assert message.data.comments == ("Two-way ranging",)
    assert isinstance(message.header, AdmHeader)
    assert message.header.originator is not None


def test_tdm_sequential_mode_needs_path():
    with pytest.raises(MissingKeywordError):
        parse_message(_without(TDM_KVN, "PATH"))


def test_tdm_delay_for_unknown_participant():
    text = _after(TDM_KVN, "RECEIVE_DELAY_1", "RECEIVE_DELAY_3 = 1.0e-5")
    with pytest.raises(StructureError):
        parse_message(text)


# OCM


def test_ocm_blocks():
    message = parse_message(OCM_KVN, "godzilla.ocm")
    assert message.metadata.alternate_names == ("GODZILLA", "GZ5")
    trajectory = message.data.trajectories[0]
    assert trajectory.comments == ("Geocentric Cartesian trajectory",)
    assert trajectory.lines[1].time == "60.0"
    assert len(trajectory.lines[1].values) == 6
    assert message.data.covariances[0].width() == 6
    assert message.data.maneuvers[0].lines[0].time == "2022-11-06T10:00:00"
    assert message.data.orbit_determination.sensors_used == ("DSS-25", "DSS-34")
    assert message.data.user_defined.parameters["CONSOLE_POC"] == "MAXWELL RAFERTY"


def test_ocm_bracketed_unit_lists():
    text = OCM_KVN.replace("TRAJ_UNITS = km,km,km,km/s,km/s,km/s", "TRAJ_UNITS = [km,km,km,km/s,km/s,km/s]")
    trajectory = parse_message(text).data.trajectories[0]
    assert trajectory.traj_units == ("km", "km", "km", "km/s", "km/s", "km/s")
    assert parse_message(OCM_KVN).data.trajectories[0].traj_units == trajectory.traj_units


def test_ocm_trajectory_line_width():
    text = OCM_KVN.replace("60.0 2783.4 -308.1 -1877.1 5.19 -2.42 -2.00", "60.0 2783.4 -308.1 -1877.1 5.19 -2.42")
    with pytest.raises(FieldFormatError):
        parse_message(text)


def test_ocm_maneuver_line_width():
    text = OCM_KVN.replace("2022-11-06T10:01:00 0.1 0.2 0.3", "2022-11-06T10:01:00 0.1 0.2")
    with pytest.raises(FieldFormatError):
        parse_message(text)


def test_ocm_full_covariance_width():
    text = OCM_KVN.replace("COV_ORDERING = LTM", "COV_ORDERING = FULL")
    with pytest.raises(FieldFormatError):
        parse_message(text)


# detection


def test_detect_syntax_and_type():
    assert detect_syntax("  \n<?xml version='1.0'?>") is FileFormat.XML
    assert detect_syntax("CCSDS_OPM_VERS = 3.0") is FileFormat.KVN
    assert detect_message_type("<?xml version='1.0'?>\n<!-- x -->\n<tdm>", FileFormat.XML) == "TDM"
    assert detect_message_type("COMMENT x\nCCSDS_OCM_VERS = 3.0", FileFormat.KVN) == "OCM"


@pytest.mark.parametrize(
    "head, syntax",
    [
        ("CCSDS_CDM_VERS = 1.0", FileFormat.KVN),
        ("<cdm id='CCSDS_CDM_VERS'>", FileFormat.XML),
        ("OBJECT_NAME = X", FileFormat.KVN),
    ],
)
def test_unsupported_or_unknown_messages(head, syntax):
    with pytest.raises(StructureError):
        detect_message_type(head, syntax, "unknown.txt")


def test_parser_for_unknown_type():
    with pytest.raises(StructureError):
        parser_for("CDM")
    assert parser_for("oem").grammar.message_type == "OEM"


def test_lexer_for_picks_syntax():
    assert isinstance(lexer_for(OMM_KVN.encode("utf-8")), KvnLexer)
    assert isinstance(lexer_for("\n  <?xml version='1.0'?><omm/>"), XmlLexer)
