"""Field-by-field equivalence of two documents.

Strings, enumerations, dates and structure must match exactly; reals may differ by a
few units in the last place (``settings.equivalence_ulps``) since the text form of a
value is a decimal.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from functools import singledispatch
from typing import Any, Optional

from ndm.dates import CcsdsDate
from ndm.sections.container import CommentsContainer
from ndm.sections.segment import Message, Segment
from ndm.settings import settings


def equivalent(original: Any, rebuilt: Any, ulps: Optional[int] = None) -> bool:
    return not differences(original, rebuilt, ulps=ulps)


def differences(original: Any, rebuilt: Any, path: str = "", ulps: Optional[int] = None) -> list[str]:
    """List of human-readable differences, empty when both sides are equivalent."""
    if ulps is None:
        ulps = settings.equivalence_ulps
    if original is None or rebuilt is None:
        if original is rebuilt:
            return []
        return [f"{path or '<root>'}: {original!r} != {rebuilt!r}"]
    if type(original) is not type(rebuilt) and not _same_kind(original, rebuilt):
        return [f"{path or '<root>'}: {type(original).__name__} != {type(rebuilt).__name__}"]
    return _compare(original, rebuilt, path or type(original).__name__, ulps)


def _same_kind(a: Any, b: Any) -> bool:
    # frozen and working copies hold tuples and read-only mappings in place of lists and dicts
    for kind in ((list, tuple), Mapping):
        if isinstance(a, kind) and isinstance(b, kind):
            return True
    return all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (a, b))


@singledispatch
def _compare(original: Any, rebuilt: Any, path: str, ulps: int) -> list[str]:
    if original != rebuilt:
        return [f"{path}: {original!r} != {rebuilt!r}"]
    return []


@_compare.register
def _(original: float, rebuilt: float, path: str, ulps: int) -> list[str]:
    a, b = float(original), float(rebuilt)
    if a == b or (math.isnan(a) and math.isnan(b)):
        return []
    tolerance = ulps * math.ulp(max(abs(a), abs(b)))
    if abs(a - b) <= tolerance:
        return []
    return [f"{path}: {a!r} != {b!r}"]


@_compare.register
def _(original: int, rebuilt: Any, path: str, ulps: int) -> list[str]:
    if isinstance(rebuilt, float):
        return _compare(float(original), rebuilt, path, ulps)
    return [] if original == rebuilt else [f"{path}: {original!r} != {rebuilt!r}"]


@_compare.register
def _(original: Enum, rebuilt: Enum, path: str, ulps: int) -> list[str]:
    return [] if original is rebuilt else [f"{path}: {original.value} != {rebuilt.value}"]


@_compare.register
def _(original: CcsdsDate, rebuilt: CcsdsDate, path: str, ulps: int) -> list[str]:
    return [] if original == rebuilt else [f"{path}: {original} != {rebuilt}"]


@_compare.register(tuple)
@_compare.register(list)
def _(original, rebuilt, path: str, ulps: int) -> list[str]:
    if len(original) != len(rebuilt):
        return [f"{path}: {len(original)} items != {len(rebuilt)} items"]
    out: list[str] = []
    for i, (a, b) in enumerate(zip(original, rebuilt)):
        out.extend(differences(a, b, f"{path}[{i}]", ulps))
    return out


@_compare.register(Mapping)
def _(original, rebuilt, path: str, ulps: int) -> list[str]:
    if set(original) != set(rebuilt):
        return [f"{path}: keys {sorted(map(str, original))} != {sorted(map(str, rebuilt))}"]
    out: list[str] = []
    for key in original:
        out.extend(differences(original[key], rebuilt[key], f"{path}.{key}", ulps))
    return out


@_compare.register
def _(original: CommentsContainer, rebuilt: CommentsContainer, path: str, ulps: int) -> list[str]:
    return _compare(original.state(), rebuilt.state(), path, ulps)


@_compare.register
def _(original: Segment, rebuilt: Segment, path: str, ulps: int) -> list[str]:
    return differences(original.metadata, rebuilt.metadata, f"{path}.metadata", ulps) + differences(
        original.data, rebuilt.data, f"{path}.data", ulps
    )


@_compare.register
def _(original: Message, rebuilt: Message, path: str, ulps: int) -> list[str]:
    out = differences(original.header, rebuilt.header, f"{path}.header", ulps)
    out.extend(differences(original.segments, rebuilt.segments, f"{path}.segments", ulps))
    return out
