"""Data sections made of ordered blocks (state vector, covariance, maneuvers...)."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from ndm.dates import CcsdsDate
from ndm.errors import MissingKeywordError
from ndm.lexical.tokens import ParseToken
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer


@dataclass(frozen=True)
class Block:
    attr: str
    container: type
    xml_tag: str
    # KVN marker (``COVARIANCE`` for COVARIANCE_START/STOP); None means the block
    # is found from its keywords.
    kvn_section: Optional[str] = None
    repeatable: bool = False
    mandatory: bool = False
    # the KVN marker encloses every repetition instead of a single one
    kvn_wrapper: bool = False
    start_keyword: Optional[str] = None
    # every KVN entry is a repetition of its own (TDM observations)
    single_entry: bool = False

    def restarts_on(self, keyword: str) -> bool:
        if not self.repeatable:
            return False
        if self.single_entry:
            return True
        first = self.start_keyword or self.container.FIELDS[0].keyword
        return keyword == first

    def section(self, syntax: FileFormat) -> Optional[str]:
        return self.xml_tag if syntax is FileFormat.XML else self.kvn_section


class DataSection(CommentsContainer):
    """Ordered blocks; each block is a field container of its own."""

    SECTION = "data"
    BLOCKS: tuple[Block, ...] = ()
    # comments directly at the start of the data section (OEM, AEM, TDM)
    DATA_COMMENTS = False

    def __init__(self, metadata=None):
        super().__init__()
        self.metadata = metadata
        for block in self.BLOCKS:
            setattr(self, block.attr, [] if block.repeatable else None)

    @classmethod
    def create(cls, metadata=None) -> DataSection:
        return cls(metadata)

    @classmethod
    def block_for_section(cls, name: str, syntax: FileFormat) -> Optional[Block]:
        return _sections(cls, syntax).get(name)

    @classmethod
    def implicit_block_for(cls, token: ParseToken) -> Optional[Block]:
        for block in cls.BLOCKS:
            if block.kvn_section is not None:
                continue
            if token.is_raw_line:
                if block.container.ACCEPTS_RAW_LINES:
                    return block
            elif not block.container.KVN_RAW_ONLY and block.container.lookup_keyword(token.name) is not None:
                return block
        return None

    def new_block(self, block: Block) -> CommentsContainer:
        instance = block.container.create(self.metadata)
        if block.repeatable:
            getattr(self, block.attr).append(instance)
        else:
            setattr(self, block.attr, instance)
        self.refuse_further_comments()
        return instance

    def attach(self, metadata) -> None:
        """Bind the section, and blocks that depend on it, to other metadata."""
        self.metadata = metadata
        for block in self.BLOCKS:
            for instance in self.instances(block):
                if hasattr(instance, "metadata"):
                    instance.metadata = metadata

    def instances(self, block: Block) -> list:
        value = getattr(self, block.attr)
        if block.repeatable:
            return list(value)
        return [] if value is None else [value]

    def epochs(self) -> Iterator[CcsdsDate]:
        """Record epochs in file order, for sections made of time-tagged records."""
        return iter(())

    def validate(self, file_name: Optional[str] = None) -> None:
        for block in self.BLOCKS:
            found = self.instances(block)
            if block.mandatory and not found:
                raise MissingKeywordError(block.xml_tag, self.section_name(), file_name=file_name)
            for instance in found:
                instance.validate(file_name)
        super().validate(file_name)

    def _freeze_extra(self) -> None:
        for block in self.BLOCKS:
            for instance in self.instances(block):
                instance.freeze()
            if block.repeatable:
                object.__setattr__(self, block.attr, tuple(getattr(self, block.attr)))

    def _thaw_extra(self) -> None:
        for block in self.BLOCKS:
            copies = [instance.copy() for instance in self.instances(block)]
            if block.repeatable:
                object.__setattr__(self, block.attr, copies)
            else:
                object.__setattr__(self, block.attr, copies[0] if copies else None)

    def state(self) -> dict:
        out = super().state()
        for block in self.BLOCKS:
            out[block.attr] = getattr(self, block.attr)
        return out


@lru_cache(maxsize=None)
def _sections(cls: type, syntax: FileFormat) -> Mapping[str, Block]:
    found = {}
    for block in cls.BLOCKS:
        name = block.section(syntax)
        if name is not None:
            found[name] = block
    return MappingProxyType(found)
