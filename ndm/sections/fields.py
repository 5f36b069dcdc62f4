"""Keyword declarations shared by every field container."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from ndm.dates import CcsdsDate
from ndm.lexical.tokens import ParseToken


class FieldKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    REALS = "reals"
    DATE = "date"
    ENUM = "enum"
    TEXT_LIST = "text list"


class IndexMode(Enum):
    NONE = "none"
    SEQUENCE = "sequence"  # KEY_1, KEY_2, ... stored as a list
    KEYED = "keyed"  # KEY_n stored as {n: value}
    NAMED = "named"  # KEY_name stored as {name: value}


@dataclass(frozen=True)
class Field:
    keyword: str
    attr: str
    kind: FieldKind = FieldKind.TEXT
    unit: Optional[str] = None
    mandatory: bool = False
    enum: Optional[type] = None
    group: Optional[str] = None
    index: IndexMode = IndexMode.NONE
    counts: Optional[str] = None

    def empty(self) -> Any:
        if self.index is IndexMode.SEQUENCE:
            return []
        if self.index in (IndexMode.KEYED, IndexMode.NAMED):
            return {}
        return None

    def is_set(self, value: Any) -> bool:
        if self.index is IndexMode.NONE:
            return value is not None
        return bool(value)

    def freeze(self, value: Any) -> Any:
        if self.index is IndexMode.SEQUENCE:
            return tuple(self._item(v, tuple) for v in value)
        if self.index in (IndexMode.KEYED, IndexMode.NAMED):
            return MappingProxyType({k: self._item(v, tuple) for k, v in value.items()})
        return self._item(value, tuple)

    def thaw(self, value: Any) -> Any:
        if self.index is IndexMode.SEQUENCE:
            return [self._item(v, list) for v in value]
        if self.index in (IndexMode.KEYED, IndexMode.NAMED):
            return {k: self._item(v, list) for k, v in value.items()}
        return self._item(value, list)

    def _item(self, value: Any, container: type) -> Any:
        if self.kind in (FieldKind.REALS, FieldKind.TEXT_LIST) and value is not None:
            return container(value)
        return value

    def parse(self, token: ParseToken) -> Any:
        if self.kind is FieldKind.TEXT:
            return token.as_text()
        if self.kind is FieldKind.INTEGER:
            return token.as_int()
        if self.kind is FieldKind.REAL:
            return token.as_float(self.unit)
        if self.kind is FieldKind.REALS:
            return token.as_floats(self.unit)
        if self.kind is FieldKind.DATE:
            return token.as_date()
        if self.kind is FieldKind.ENUM:
            return token.as_enum(self.enum)
        return token.as_list()

    def format(self, value: Any) -> str:
        if self.kind is FieldKind.REAL:
            return format_real(value)
        if self.kind is FieldKind.REALS:
            return " ".join(format_real(v) for v in value)
        if self.kind is FieldKind.INTEGER:
            return str(int(value))
        if self.kind is FieldKind.ENUM:
            return value.value if isinstance(value, Enum) else str(value)
        if self.kind is FieldKind.TEXT_LIST:
            return ",".join(str(v) for v in value)
        if isinstance(value, CcsdsDate):
            return str(value)
        return str(value)


def format_real(value: float) -> str:
    # repr is the shortest decimal string that reads back to the same double
    return repr(float(value))


def text(keyword: str, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.TEXT, **kwargs)


def integer(keyword: str, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.INTEGER, **kwargs)


def real(keyword: str, unit: Optional[str] = None, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.REAL, unit=unit, **kwargs)


def reals(keyword: str, unit: Optional[str] = None, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.REALS, unit=unit, **kwargs)


def date(keyword: str, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.DATE, **kwargs)


def choice(keyword: str, enum: type, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.ENUM, enum=enum, **kwargs)


def text_list(keyword: str, attr: Optional[str] = None, **kwargs) -> Field:
    return Field(keyword, attr or keyword.lower(), FieldKind.TEXT_LIST, **kwargs)
