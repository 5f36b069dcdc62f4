from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum

import astropy.units as u
from astropy.time import Time


class TimeSystem(str, Enum):
    GMST = "GMST"
    GPS = "GPS"
    MET = "MET"
    MRT = "MRT"
    SCLK = "SCLK"
    TAI = "TAI"
    TCB = "TCB"
    TDB = "TDB"
    TCG = "TCG"
    TT = "TT"
    UT1 = "UT1"
    UTC = "UTC"


# Time systems astropy can represent directly.
_ASTROPY_SCALES = {
    TimeSystem.TAI: "tai",
    TimeSystem.TCB: "tcb",
    TimeSystem.TDB: "tdb",
    TimeSystem.TCG: "tcg",
    TimeSystem.TT: "tt",
    TimeSystem.UT1: "ut1",
    TimeSystem.UTC: "utc",
}

GPS_MINUS_TAI_SECONDS = -19.0

_CALENDAR_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}(?:\.\d*)?))?Z?$"
)
_ORDINAL_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<doy>\d{3})"
    r"(?:T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}(?:\.\d*)?))?Z?$"
)


@dataclass(frozen=True, order=True)
class CcsdsDate:
    """Calendar date and time in the message time system.

    The time system itself is not part of the value: it comes from the metadata
    (``TIME_SYSTEM``). Seconds are kept as a Decimal so the textual precision of
    the file survives a round trip, leap seconds (second >= 60) included.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: Decimal = Decimal(0)

    def __post_init__(self):
        date(self.year, self.month, self.day)
        if not (0 <= self.hour < 24 and 0 <= self.minute < 60):
            raise ValueError(f"Invalid time of day {self.hour:02d}:{self.minute:02d}")
        if not isinstance(self.second, Decimal):
            object.__setattr__(self, "second", Decimal(str(self.second)))
        if not (Decimal(0) <= self.second < Decimal(61)):
            raise ValueError(f"Invalid seconds {self.second}")

    @classmethod
    def parse(cls, text: str) -> CcsdsDate:
        raw = (text or "").strip()
        match = _CALENDAR_RE.match(raw)
        if match:
            year, month, day = int(match.group("year")), int(match.group("month")), int(match.group("day"))
        else:
            match = _ORDINAL_RE.match(raw)
            if not match:
                raise ValueError(f"Invalid CCSDS date: {text!r}")
            year, doy = int(match.group("year")), int(match.group("doy"))
            if not 1 <= doy <= (366 if _is_leap(year) else 365):
                raise ValueError(f"Invalid day of year in {text!r}")
            first = date(year, 1, 1) + timedelta(days=doy - 1)
            month, day = first.month, first.day
        if match.group("hour") is None:
            return cls(year, month, day)
        try:
            second = Decimal(match.group("second"))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid seconds in {text!r}") from exc
        return cls(year, month, day, int(match.group("hour")), int(match.group("minute")), second)

    @classmethod
    def from_datetime(cls, dt: datetime) -> CcsdsDate:
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        second = Decimal(dt.second)
        if dt.microsecond:
            second = Decimal(f"{dt.second}.{dt.microsecond:06d}")
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, second)

    def to_datetime(self) -> datetime:
        """Naive datetime; a leap second is folded into the following minute."""
        whole = int(self.second)
        micro = int(((self.second - whole) * 1_000_000).to_integral_value())
        base = datetime(self.year, self.month, self.day, self.hour, self.minute)
        return base + timedelta(seconds=whole, microseconds=micro)

    def to_time(self, time_system: TimeSystem) -> Time:
        """Convert to an astropy Time, given the time system the date is expressed in."""
        system = TimeSystem(time_system)
        if system is TimeSystem.GPS:
            return Time(self.isot(), format="isot", scale="tai") - GPS_MINUS_TAI_SECONDS * u.s
        scale = _ASTROPY_SCALES.get(system)
        if scale is None:
            raise ValueError(f"Time system {system.value} has no absolute time scale")
        return Time(self.isot(), format="isot", scale=scale)

    def isot(self) -> str:
        return str(self)

    def __str__(self) -> str:
        sec = format(self.second, "f")
        whole, _, frac = sec.partition(".")
        sec = whole.zfill(2) + (f".{frac}" if frac else "")
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}T{self.hour:02d}:{self.minute:02d}:{sec}"


def _is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
