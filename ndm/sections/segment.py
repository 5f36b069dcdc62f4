from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from ndm.sections.container import CommentsContainer
from ndm.sections.data import DataSection
from ndm.sections.header import Header


@dataclass(frozen=True)
class Segment:
    metadata: CommentsContainer
    data: DataSection

    def validate(self, file_name: Optional[str] = None) -> None:
        self.metadata.validate(file_name)
        self.data.validate(file_name)

    def freeze(self) -> None:
        self.metadata.freeze()
        self.data.freeze()


@dataclass(frozen=True)
class Message:
    """Header plus segments, as returned by a parser's ``build()``."""

    MESSAGE_TYPE: ClassVar[str] = ""
    ROOT: ClassVar[str] = ""
    VERSION_KEY: ClassVar[str] = ""

    header: Header
    segments: tuple[Segment, ...]

    @property
    def segment(self) -> Segment:
        return self.segments[0]

    @property
    def metadata(self) -> CommentsContainer:
        return self.segments[0].metadata

    @property
    def data(self) -> DataSection:
        return self.segments[0].data

    @property
    def format_version(self) -> Optional[str]:
        return self.header.format_version

    def validate(self, file_name: Optional[str] = None) -> None:
        self.header.validate(file_name)
        for segment in self.segments:
            segment.validate(file_name)

    def freeze(self) -> None:
        self.header.freeze()
        for segment in self.segments:
            segment.freeze()
