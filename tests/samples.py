"""Sample messages shared by the tests, close to the CCSDS blue book examples."""

from ndm.messages.common import COVARIANCE_TERMS

OPM_KVN = "\n".join(
    [
        "CCSDS_OPM_VERS = 3.0",
        "COMMENT Generated by GSOC",
        "CREATION_DATE = 2022-11-06T09:23:57",
        "ORIGINATOR = GSOC",
        "MESSAGE_ID = OPM 201113719185",
        "COMMENT GEOCENTRIC, CARTESIAN, EARTH FIXED",
        "OBJECT_NAME = OSPREY 5",
        "OBJECT_ID = 1998-999A",
        "CENTER_NAME = EARTH",
        "REF_FRAME = ITRF2000",
        "TIME_SYSTEM = UTC",
        "COMMENT State Vector",
        "EPOCH = 2022-12-18T14:28:15.1172",
        "X = 6503.514000 [km]",
        "Y = 1239.647000 [km]",
        "Z = -717.490000 [km]",
        "X_DOT = -0.873160 [km/s]",
        "Y_DOT = 8.740420 [km/s]",
        "Z_DOT = -4.191076 [km/s]",
        "SEMI_MAJOR_AXIS = 41399.5123 [km]",
        "ECCENTRICITY = 0.020842611",
        "INCLINATION = 0.117746 [deg]",
        "RA_OF_ASC_NODE = 17.604721 [deg]",
        "ARG_OF_PERICENTER = 218.242943 [deg]",
        "TRUE_ANOMALY = 41.922339 [deg]",
        "GM = 398600.4415 [km**3/s**2]",
        "MASS = 3000.000000 [kg]",
        "SOLAR_RAD_AREA = 18.770000 [m**2]",
        "SOLAR_RAD_COEFF = 1.000000",
        "DRAG_AREA = 18.770000 [m**2]",
        "DRAG_COEFF = 2.500000",
        "COV_REF_FRAME = RTN",
        *[f"{field.keyword} = {index + 1}.25e-04" for index, field in enumerate(COVARIANCE_TERMS)],
        "COMMENT First maneuver",
        "MAN_EPOCH_IGNITION = 2022-12-19T09:00:34.1",
        "MAN_DURATION = 132.60 [s]",
        "MAN_DELTA_MASS = -18.418 [kg]",
        "MAN_REF_FRAME = EME2000",
        "MAN_DV_1 = -0.02325700 [km/s]",
        "MAN_DV_2 = 0.01683160 [km/s]",
        "MAN_DV_3 = -0.00893444 [km/s]",
        "MAN_EPOCH_IGNITION = 2022-12-20T09:00:34.1",
        "MAN_DURATION = 100.00 [s]",
        "MAN_DELTA_MASS = -10.000 [kg]",
        "MAN_REF_FRAME = RTN",
        "MAN_DV_1 = 0.01000000 [km/s]",
        "MAN_DV_2 = 0.00000000 [km/s]",
        "MAN_DV_3 = 0.00000000 [km/s]",
        "USER_DEFINED_EARTH_MODEL = WGS-84",
        "",
    ]
)

OMM_KVN = "\n".join(
    [
        "CCSDS_OMM_VERS = 3.0",
        "CREATION_DATE = 2007-065T16:00:00",
        "ORIGINATOR = NOAA/USA",
        "OBJECT_NAME = GOES 9",
        "OBJECT_ID = 1995-025A",
        "CENTER_NAME = EARTH",
        "REF_FRAME = TEME",
        "TIME_SYSTEM = UTC",
        "MEAN_ELEMENT_THEORY = SGP/SGP4",
        "COMMENT Mean elements",
        "EPOCH = 2007-064T10:34:41.4264",
        "MEAN_MOTION = 1.00273272 [rev/day]",
        "ECCENTRICITY = 0.0005013",
        "INCLINATION = 3.0539 [deg]",
        "RA_OF_ASC_NODE = 81.7939 [deg]",
        "ARG_OF_PERICENTER = 249.2363 [deg]",
        "MEAN_ANOMALY = 150.1602 [deg]",
        "GM = 398600.8 [km**3/s**2]",
        "EPHEMERIS_TYPE = 0",
        "CLASSIFICATION_TYPE = U",
        "NORAD_CAT_ID = 23581",
        "ELEMENT_SET_NO = 0925",
        "REV_AT_EPOCH = 4316",
        "BSTAR = 0.0001 [1/ER]",
        "MEAN_MOTION_DOT = -0.00000113 [rev/day**2]",
        "MEAN_MOTION_DDOT = 0.0 [rev/day**3]",
        "",
    ]
)

OEM_KVN = "\n".join(
    [
        "CCSDS_OEM_VERS = 3.0",
        "COMMENT OEM example",
        "CREATION_DATE = 1996-11-04T17:22:31",
        "ORIGINATOR = NASA/JPL",
        "",
        "META_START",
        "OBJECT_NAME = MARS GLOBAL SURVEYOR",
        "OBJECT_ID = 1996-062A",
        "CENTER_NAME = MARS BARYCENTER",
        "REF_FRAME = EME2000",
        "TIME_SYSTEM = UTC",
        "START_TIME = 1996-12-18T12:00:00.331",
        "USEABLE_START_TIME = 1996-12-18T12:10:00.331",
        "USEABLE_STOP_TIME = 1996-12-28T21:23:00.331",
        "STOP_TIME = 1996-12-28T21:28:00.331",
        "INTERPOLATION = HERMITE",
        "INTERPOLATION_DEGREE = 7",
        "META_STOP",
        "",
        "COMMENT Produced by the navigation team",
        "1996-12-18T12:00:00.331 2789.619 -280.045 -1746.755 4.73372 -2.49586 -1.04195",
        "1996-12-18T12:01:00.331 2783.419 -308.143 -1877.071 5.18604 -2.42124 -1.99608",
        "1996-12-18T12:02:00.331 2776.033 -336.859 -2008.682 5.63678 -2.33951 -1.94687",
        "",
        "COVARIANCE_START",
        "EPOCH = 1996-12-28T21:29:07.267",
        "COV_REF_FRAME = EME2000",
        "3.3313494e-04",
        "4.6189273e-04 6.7824216e-04",
        "-3.0700078e-04 -4.2212341e-04 3.2319319e-04",
        "-3.3493650e-07 -4.6860842e-07 2.4849495e-07 4.2960228e-10",
        "-2.2118325e-07 -2.8641868e-07 1.7980986e-07 2.6088992e-10 1.7675147e-10",
        "-3.0413460e-07 -4.9894969e-07 3.5403109e-07 1.8692631e-10 1.0088625e-10 6.2244443e-10",
        "COVARIANCE_STOP",
        "",
        "META_START",
        "OBJECT_NAME = MARS GLOBAL SURVEYOR",
        "OBJECT_ID = 1996-062A",
        "CENTER_NAME = MARS BARYCENTER",
        "REF_FRAME = EME2000",
        "TIME_SYSTEM = UTC",
        "START_TIME = 1996-12-28T21:29:07.267",
        "STOP_TIME = 1996-12-30T01:28:02.267",
        "META_STOP",
        "",
        "1996-12-28T21:29:07.267 -2432.166 -063.042 1742.754 7.33702 -3.495867 -1.041945 0.001 0.002 0.003",
        "1996-12-28T21:59:02.267 -2445.234 -878.141 1873.073 1.86043 -3.421256 -0.996366 0.001 0.002 0.003",
        "",
    ]
)

AEM_KVN = "\n".join(
    [
        "CCSDS_AEM_VERS = 1.0",
        "CREATION_DATE = 2002-11-04T17:22:31",
        "ORIGINATOR = NASA/JPL",
        "",
        "META_START",
        "OBJECT_NAME = MARS GLOBAL SURVEYOR",
        "OBJECT_ID = 1996-062A",
        "CENTER_NAME = MARS BARYCENTER",
        "REF_FRAME_A = EME2000",
        "REF_FRAME_B = SC_BODY_1",
        "ATTITUDE_DIR = A2B",
        "TIME_SYSTEM = UTC",
        "START_TIME = 1996-11-28T21:29:07.2555",
        "USEABLE_START_TIME = 1996-11-28T22:08:02.5555",
        "USEABLE_STOP_TIME = 1996-11-30T01:18:02.5555",
        "STOP_TIME = 1996-11-30T01:28:02.5555",
        "ATTITUDE_TYPE = QUATERNION",
        "QUATERNION_TYPE = LAST",
        "INTERPOLATION_METHOD = HERMITE",
        "INTERPOLATION_DEGREE = 7",
        "META_STOP",
        "",
        "DATA_START",
        "COMMENT Attitude from star trackers",
        "1996-11-28T21:29:07.2555 0.56748 0.03146 0.45689 0.68427",
        "1996-11-28T22:08:03.5555 0.42319 -0.45697 0.23784 0.74533",
        "1996-11-28T22:08:04.5555 -0.84532 0.26974 -0.06532 0.45652",
        "DATA_STOP",
        "",
    ]
)

APM_KVN = "\n".join(
    [
        "CCSDS_APM_VERS = 1.0",
        "CREATION_DATE = 2003-09-30T19:23:57",
        "ORIGINATOR = GSFC",
        "OBJECT_NAME = TRMM",
        "OBJECT_ID = 1997-009A",
        "CENTER_NAME = EARTH",
        "TIME_SYSTEM = UTC",
        "COMMENT Spacecraft attitude",
        "EPOCH = 2003-09-30T14:28:15.1172",
        "Q_FRAME_A = ICRF",
        "Q_FRAME_B = SC_BODY_1",
        "Q_DIR = A2B",
        "Q1 = 0.25678",
        "Q2 = 0.00005",
        "Q3 = 0.87543",
        "QC = 0.40949",
        "EULER_FRAME_A = ICRF",
        "EULER_FRAME_B = SC_BODY_1",
        "EULER_DIR = A2B",
        "EULER_ROT_SEQ = 312",
        "RATE_FRAME = REF_FRAME_B",
        "X_ANGLE = -53.3688 [deg]",
        "Y_ANGLE = 139.7527 [deg]",
        "Z_ANGLE = 25.0658 [deg]",
        "X_RATE = 0.02156 [deg/s]",
        "Y_RATE = 0.1045 [deg/s]",
        "Z_RATE = 0.03214 [deg/s]",
        "I11 = 152.0 [kg*m**2]",
        "I22 = 143.0 [kg*m**2]",
        "I33 = 84.0 [kg*m**2]",
        "I12 = 0.0 [kg*m**2]",
        "I13 = 0.0 [kg*m**2]",
        "I23 = 0.0 [kg*m**2]",
        "",
    ]
)

TDM_KVN = "\n".join(
    [
        "CCSDS_TDM_VERS = 2.0",
        "CREATION_DATE = 2005-160T20:15:00",
        "ORIGINATOR = NASA/JPL",
        "META_START",
        "TIME_SYSTEM = UTC",
        "PARTICIPANT_1 = DSS-25",
        "PARTICIPANT_2 = 2005-001A",
        "MODE = SEQUENTIAL",
        "PATH = 1,2,1",
        "INTEGRATION_INTERVAL = 1.0",
        "INTEGRATION_REF = MIDDLE",
        "RANGE_MODE = COHERENT",
        "RANGE_MODULUS = 2.0e+26",
        "RANGE_UNITS = RU",
        "TRANSMIT_DELAY_1 = 7.7e-5",
        "RECEIVE_DELAY_1 = 7.7e-5",
        "META_STOP",
        "DATA_START",
        "COMMENT Two-way ranging",
        "TRANSMIT_FREQ_1 = 2005-159T17:41:00 7180064367.3536",
        "RECEIVE_FREQ_2 = 2005-159T17:41:00 8415731835.3612",
        "RANGE = 2005-159T17:41:00 4.00165248e+07",
        "RANGE = 2005-159T17:41:01 4.00165312e+07",
        "DATA_STOP",
        "",
    ]
)

OCM_KVN = "\n".join(
    [
        "CCSDS_OCM_VERS = 3.0",
        "CREATION_DATE = 2022-11-06T09:23:57",
        "ORIGINATOR = JAXA",
        "META_START",
        "OBJECT_NAME = GODZILLA 5",
        "INTERNATIONAL_DESIGNATOR = 2020-999A",
        "ALTERNATE_NAMES = GODZILLA,GZ5",
        "TIME_SYSTEM = UTC",
        "EPOCH_TZERO = 2022-11-06T09:23:57",
        "META_STOP",
        "TRAJ_START",
        "COMMENT Geocentric Cartesian trajectory",
        "CENTER_NAME = EARTH",
        "TRAJ_REF_FRAME = GCRF",
        "TRAJ_TYPE = CARTPV",
        "TRAJ_UNITS = km,km,km,km/s,km/s,km/s",
        "0.0 2789.6 -280.0 -1746.8 4.73 -2.50 -1.04",
        "60.0 2783.4 -308.1 -1877.1 5.19 -2.42 -2.00",
        "TRAJ_STOP",
        "PHYS_START",
        "WET_MASS = 100.0 [kg]",
        "OEB_Q1 = 0.03123",
        "OEB_Q2 = 0.78543",
        "OEB_Q3 = 0.39158",
        "OEB_QC = 0.47832",
        "OEB_MAX = 2.0 [m]",
        "OEB_INT = 1.0 [m]",
        "OEB_MIN = 0.5 [m]",
        "PHYS_STOP",
        "COV_START",
        "COV_REF_FRAME = TNW",
        "COV_TYPE = CARTP",
        "COV_ORDERING = LTM",
        "0.0 1.0e-3 2.0e-4 3.0e-3 1.0e-5 2.0e-5 4.0e-3",
        "COV_STOP",
        "MAN_START",
        "MAN_ID = DH2022110601",
        "MAN_DEVICE_ID = THR_01",
        "MAN_REF_FRAME = RSW_ROTATING",
        "DC_TYPE = CONTINUOUS",
        "MAN_COMPOSITION = TIME_ABSOLUTE,ACC_X,ACC_Y,ACC_Z",
        "2022-11-06T10:00:00 0.1 0.2 0.3",
        "2022-11-06T10:01:00 0.1 0.2 0.3",
        "MAN_STOP",
        "PERT_START",
        "GRAVITY_MODEL = EGM-96",
        "GM = 398600.4415 [km**3/s**2]",
        "N_BODY_PERTURBATIONS = MOON,SUN",
        "PERT_STOP",
        "OD_START",
        "OD_ID = OD_1",
        "OD_METHOD = BWLS",
        "OD_EPOCH = 2022-11-06T09:23:57",
        "NUMBER_SENSORS_USED = 2",
        "SENSORS_USED_1 = DSS-25",
        "SENSORS_USED_2 = DSS-34",
        "NUMBER_SENSOR_NOISE_COVARIANCE_1 = 1",
        "SENSOR_NOISE_STDDEV_1 = 0.5",
        "OD_STOP",
        "USER_START",
        "USER_DEFINED_CONSOLE_POC = MAXWELL RAFERTY",
        "USER_STOP",
        "",
    ]
)


# Hand-written XML, laid out as producers do it rather than as the generator does.
OPM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<opm xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" id="CCSDS_OPM_VERS" version="3.0">
  <header>
    <COMMENT>Hand written for the XML reader</COMMENT>
    <CREATION_DATE>2022-11-06T09:23:57</CREATION_DATE>
    <ORIGINATOR>GSOC</ORIGINATOR>
  </header>
  <body>
    <segment>
      <metadata>
        <COMMENT>GEOCENTRIC, CARTESIAN, EARTH FIXED</COMMENT>
        <OBJECT_NAME>  OSPREY   5 </OBJECT_NAME>
        <OBJECT_ID>1998-999A</OBJECT_ID>
        <CENTER_NAME>EARTH</CENTER_NAME>
        <REF_FRAME>ITRF2000</REF_FRAME>
        <TIME_SYSTEM>UTC</TIME_SYSTEM>
      </metadata>
      <data>
        <stateVector>
          <COMMENT>State Vector</COMMENT>
          <EPOCH>2022-12-18T14:28:15.1172</EPOCH>
          <X units="m">6503514.0</X>
          <Y units="km">1239.647</Y>
          <Z>-717.49</Z>
          <X_DOT units="km/s">-0.87316</X_DOT>
          <Y_DOT units="m/s">8740.42</Y_DOT>
          <Z_DOT units="km/s">-4.191076</Z_DOT>
        </stateVector>
        <maneuverParameters>
          <COMMENT>First maneuver</COMMENT>
          <MAN_EPOCH_IGNITION>2022-12-19T09:00:34.1</MAN_EPOCH_IGNITION>
          <MAN_DURATION units="s">132.6</MAN_DURATION>
          <MAN_DELTA_MASS units="kg">-18.418</MAN_DELTA_MASS>
          <MAN_REF_FRAME>EME2000</MAN_REF_FRAME>
          <MAN_DV_1 units="km/s">-0.023257</MAN_DV_1>
          <MAN_DV_2 units="km/s">0.0168316</MAN_DV_2>
          <MAN_DV_3 units="km/s">-0.00893444</MAN_DV_3>
        </maneuverParameters>
        <userDefinedParameters>
          <USER_DEFINED parameter="EARTH_MODEL">WGS-84</USER_DEFINED>
        </userDefinedParameters>
      </data>
    </segment>
  </body>
</opm>
"""


ALL_KVN = {
    "OPM": OPM_KVN,
    "OMM": OMM_KVN,
    "OEM": OEM_KVN,
    "AEM": AEM_KVN,
    "APM": APM_KVN,
    "TDM": TDM_KVN,
    "OCM": OCM_KVN,
}
