"""CCSDS unit strings on top of astropy.units.

Values are stored in the unit declared for their keyword. A unit given in the file
(``[m]`` in KVN, ``units="m"`` in XML) is only used to convert the raw value into
the declared unit.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional

import astropy.units as u

logger = logging.getLogger(__name__)

# Units used by CCSDS tables that astropy does not define. astropy already owns
# the name ER (exa-Rayleigh), so the CCSDS Earth radius lives under its own name
# and the ER token is rewritten before parsing.
REVOLUTION = u.def_unit("rev", 360.0 * u.deg)
EARTH_RADIUS = u.def_unit(["earthRad_ccsds"], 6378.137 * u.km)
u.add_enabled_units([REVOLUTION, EARTH_RADIUS])

_EARTH_RADIUS_RE = re.compile(r"\bER\b", re.IGNORECASE)

NOT_APPLICABLE = "n/a"


def _canonical(text: str) -> str:
    return "".join((text or "").split())


def _astropy_spelling(raw: str) -> str:
    return _EARTH_RADIUS_RE.sub(EARTH_RADIUS.name, raw)


@lru_cache(maxsize=512)
def parse_unit(text: str) -> u.UnitBase:
    """Parse a CCSDS unit string (``km**2/s``, ``rev/day``, ``1/ER``, ``%``...)."""
    raw = _canonical(text)
    if not raw or raw.lower() == NOT_APPLICABLE:
        return u.dimensionless_unscaled
    if raw == "%":
        return u.percent
    try:
        return u.Unit(_astropy_spelling(raw), format="generic", parse_strict="raise")
    except ValueError:
        pass
    # Files often spell units in upper case (KM, KM/S, DEG).
    lowered = raw.lower()
    try:
        unit = u.Unit(_astropy_spelling(lowered), format="generic", parse_strict="raise")
    except ValueError as exc:
        raise ValueError(f"Unsupported unit: {text!r}") from exc
    logger.warning("Unit %r interpreted as %r", text, lowered)
    return unit


def same_unit(a: Optional[str], b: Optional[str]) -> bool:
    return _canonical(a or "").lower() == _canonical(b or "").lower()


def convert(value: float, from_unit: Optional[str], to_unit: Optional[str]) -> float:
    """Convert ``value`` from ``from_unit`` to ``to_unit``.

    Raises ValueError for unknown or dimensionally incompatible units.
    """
    if from_unit is None or same_unit(from_unit, to_unit):
        return float(value)
    if _canonical(from_unit).lower() == NOT_APPLICABLE and to_unit is None:
        return float(value)
    source = parse_unit(from_unit)
    target = parse_unit(to_unit or "")
    try:
        return float((value * source).to_value(target))
    except u.UnitConversionError as exc:
        raise ValueError(f"Unit {from_unit!r} is not compatible with {to_unit or 'a dimensionless value'!r}") from exc


def as_quantity(value: float, unit: Optional[str]) -> u.Quantity:
    return value * parse_unit(unit or "")
