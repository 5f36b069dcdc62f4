from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Union

from ndm import units
from ndm.errors import (
    CommentLockedError,
    CountMismatchError,
    FrozenContainerError,
    InvalidIndexError,
    MissingKeywordError,
    StructureError,
)
from ndm.lexical.tokens import ParseToken
from ndm.schemas import FileFormat
from ndm.sections.fields import Field, IndexMode

logger = logging.getLogger(__name__)

_INDEXED_RE = re.compile(r"^(?P<base>[A-Z0-9_]+?)_(?P<index>\d+)$")

Key = Union[int, str, None]


class Phase(Enum):
    COMMENTS = "comments"
    DATA = "data"


@dataclass(frozen=True)
class KeywordTable:
    exact: Mapping[str, Field]
    indexed: Mapping[str, Field]
    named: tuple[Field, ...]

    def lookup(self, name: str) -> Optional[tuple[Field, Key]]:
        field = self.exact.get(name)
        if field is not None:
            return field, None
        match = _INDEXED_RE.match(name)
        if match:
            field = self.indexed.get(match.group("base"))
            if field is not None:
                return field, int(match.group("index"))
        for field in self.named:
            prefix = f"{field.keyword}_"
            if name.startswith(prefix) and len(name) > len(prefix):
                return field, name[len(prefix):]
        return None

    def keywords(self) -> tuple[str, ...]:
        return (
            tuple(self.exact)
            + tuple(f"{kw}_n" for kw in self.indexed)
            + tuple(f"{f.keyword}_*" for f in self.named)
        )


@lru_cache(maxsize=None)
def keyword_table(cls: type) -> KeywordTable:
    """Keyword dispatch table of a container class, built once and shared."""
    exact: dict[str, Field] = {}
    indexed: dict[str, Field] = {}
    named: list[Field] = []
    for field in cls.FIELDS:
        if field.index is IndexMode.NONE:
            exact[field.keyword] = field
        elif field.index is IndexMode.NAMED:
            named.append(field)
        else:
            indexed[field.keyword] = field
    return KeywordTable(MappingProxyType(exact), MappingProxyType(indexed), tuple(named))


@lru_cache(maxsize=None)
def field_attrs(cls: type) -> frozenset:
    return frozenset(field.attr for field in cls.FIELDS)


class CommentsContainer:
    """Comments followed by keyword fields.

    Comments are accepted only until the first field is set; after that the
    container is locked for comments and ``add_comment`` raises.
    """

    FIELDS: tuple[Field, ...] = ()
    SECTION: str = ""
    ACCEPTS_RAW_LINES = False
    # KVN carries the block as data lines only, its keywords are XML elements
    KVN_RAW_ONLY = False
    XML_RAW_LINE: Optional[str] = None

    def __init__(self):
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_phase", Phase.COMMENTS)
        object.__setattr__(self, "_comments", [])
        for field in self.FIELDS:
            object.__setattr__(self, field.attr, field.empty())

    @classmethod
    def create(cls, metadata=None) -> CommentsContainer:
        return cls()

    @classmethod
    def section_name(cls) -> str:
        return cls.SECTION or cls.__name__

    @classmethod
    def keywords(cls) -> tuple[str, ...]:
        return keyword_table(cls).keywords()

    @classmethod
    def field(cls, attr: str) -> Field:
        for field in cls.FIELDS:
            if field.attr == attr or field.keyword == attr:
                return field
        raise KeyError(attr)

    @classmethod
    def xml_groups(cls) -> frozenset:
        return frozenset(f.group for f in cls.FIELDS if f.group)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise FrozenContainerError(self.section_name(), name)
        if name in field_attrs(type(self)):
            object.__setattr__(self, "_phase", Phase.DATA)
        object.__setattr__(self, name, value)

    # comments

    @property
    def comments(self) -> tuple[str, ...]:
        return tuple(self._comments)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def accepts_comments(self) -> bool:
        return self._phase is Phase.COMMENTS and not self._frozen

    def add_comment(self, comment: str, token: Optional[ParseToken] = None) -> None:
        if self._frozen:
            raise FrozenContainerError(self.section_name(), "comments")
        if self._phase is not Phase.COMMENTS:
            raise CommentLockedError(
                self.section_name(),
                file_name=token.file_name if token else None,
                line=token.line if token else None,
            )
        self._comments.append(comment)

    def refuse_further_comments(self) -> None:
        object.__setattr__(self, "_phase", Phase.DATA)

    # fields

    @classmethod
    def lookup_keyword(cls, name: str) -> Optional[tuple[Field, Key]]:
        return keyword_table(cls).lookup(name)

    def accept(self, token: ParseToken) -> bool:
        found = self.lookup_keyword(token.name)
        if found is None:
            return False
        field, key = found
        self.store(field, field.parse(token), key, token)
        return True

    def add_raw_line(self, token: ParseToken) -> None:
        raise StructureError(
            f"data line {token.content!r} not allowed in {self.section_name()}",
            file_name=token.file_name, line=token.line,
        )

    def store(self, field: Field, value: Any, key: Key = None, token: Optional[ParseToken] = None) -> None:
        if self._frozen:
            raise FrozenContainerError(self.section_name(), field.attr)
        self.refuse_further_comments()
        current = getattr(self, field.attr)
        if field.index is IndexMode.NONE:
            if current is not None:
                logger.debug("%s: %s overwritten (%r -> %r)", self.section_name(), field.keyword, current, value)
            object.__setattr__(self, field.attr, value)
        elif field.index is IndexMode.SEQUENCE:
            expected = len(current) + 1
            if key is None or key != expected:
                raise InvalidIndexError(
                    field.keyword, key if key is not None else 0, expected,
                    file_name=token.file_name if token else None,
                    line=token.line if token else None,
                )
            current.append(value)
        else:
            if key in current:
                raise InvalidIndexError(
                    field.keyword, key,
                    file_name=token.file_name if token else None,
                    line=token.line if token else None,
                )
            current[key] = value

    def entries(self, syntax: FileFormat) -> Iterator[tuple[Field, Key, Any]]:
        """Set fields in declaration order, as (field, index or name, value)."""
        for field in self.FIELDS:
            value = getattr(self, field.attr)
            if field.index is IndexMode.NONE:
                if value is not None:
                    yield field, None, value
            elif field.index is IndexMode.SEQUENCE:
                for i, item in enumerate(value, start=1):
                    yield field, i, item
            elif field.index is IndexMode.KEYED:
                for key in sorted(value):
                    yield field, key, value[key]
            else:
                for key, item in value.items():
                    yield field, key, item

    def format_entry(self, field: Field, key: Key, value: Any, syntax: FileFormat) -> str:
        return field.format(value)

    def raw_lines(self, syntax: FileFormat) -> Iterator[str]:
        return iter(())

    def quantity(self, attr: str):
        field = self.field(attr)
        value = getattr(self, field.attr)
        if value is None:
            return None
        return units.as_quantity(value, field.unit)

    # validation

    def validate(self, file_name: Optional[str] = None) -> None:
        for field in self.FIELDS:
            if field.mandatory and not field.is_set(getattr(self, field.attr)):
                raise MissingKeywordError(field.keyword, self.section_name(), file_name=file_name)
        for field in self.FIELDS:
            if field.counts:
                self._check_count(field, file_name)
        self.check(file_name)

    def check(self, file_name: Optional[str] = None) -> None:
        """Cross-field rules of a specific container."""

    def _check_count(self, counter: Field, file_name: Optional[str]) -> None:
        target = self.field(counter.counts)
        declared = getattr(self, counter.attr)
        observed = getattr(self, target.attr)
        if counter.index is IndexMode.NONE:
            if declared is None:
                return
            count = len(observed) if observed is not None else 0
            if declared != count:
                raise CountMismatchError(counter.keyword, declared, count, file_name=file_name)
            return
        for key in sorted(set(declared) | set(observed)):
            if key not in declared:
                raise MissingKeywordError(f"{counter.keyword}_{key}", self.section_name(), file_name=file_name)
            values = observed.get(key)
            count = len(values) if values is not None else 0
            if declared[key] != count:
                raise CountMismatchError(f"{counter.keyword}_{key}", declared[key], count, file_name=file_name)

    # lifecycle

    def freeze(self) -> None:
        for field in self.FIELDS:
            object.__setattr__(self, field.attr, field.freeze(getattr(self, field.attr)))
        object.__setattr__(self, "_comments", tuple(self._comments))
        self._freeze_extra()
        object.__setattr__(self, "_frozen", True)

    def _freeze_extra(self) -> None:
        pass

    def copy(self):
        """Mutable working copy, comments and phase included."""
        clone = copy.copy(self)
        object.__setattr__(clone, "_frozen", False)
        object.__setattr__(clone, "_comments", list(self._comments))
        for field in self.FIELDS:
            object.__setattr__(clone, field.attr, field.thaw(getattr(self, field.attr)))
        clone._thaw_extra()
        return clone

    def _thaw_extra(self) -> None:
        pass

    def state(self) -> dict[str, Any]:
        """Comparable content: comments and every declared field."""
        out: dict[str, Any] = {"comments": tuple(self._comments)}
        for field in self.FIELDS:
            out[field.attr] = getattr(self, field.attr)
        return out

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{f.attr}={getattr(self, f.attr)!r}" for f in self.FIELDS if f.is_set(getattr(self, f.attr))
        )
        return f"{type(self).__name__}({shown})"
