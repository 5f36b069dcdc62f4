"""Message writers: walk a Message and drive a Generator in CCSDS field order."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional

from ndm.dates import CcsdsDate
from ndm.errors import IncompleteMessageError, StructureError
from ndm.generation.generator import Generator
from ndm.parsing import XML_BODY, XML_DATA, XML_HEADER, XML_METADATA, XML_SEGMENT, MessageGrammar
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer
from ndm.sections.data import DataSection
from ndm.sections.fields import IndexMode
from ndm.sections.header import Header
from ndm.sections.segment import Message, Segment
from ndm.settings import settings

logger = logging.getLogger(__name__)


def write_container(generator: Generator, container: CommentsContainer) -> None:
    """Comments, then fields (wrapped in their XML groups), then data lines."""
    xml = generator.syntax is FileFormat.XML
    generator.write_comments(container.comments)
    group: Optional[str] = None
    for field, key, value in container.entries(generator.syntax):
        if xml and field.group != group:
            if group is not None:
                generator.exit_section()
            if field.group is not None:
                generator.enter_section(field.group)
            group = field.group
        text = container.format_entry(field, key, value, generator.syntax)
        if field.index is IndexMode.NAMED:
            generator.write_named_entry(field.keyword, key, text, field.unit)
        else:
            name = field.keyword if key is None else f"{field.keyword}_{key}"
            generator.write_entry(name, text, field.unit, field.mandatory)
    if group is not None:
        generator.exit_section()
    for line in container.raw_lines(generator.syntax):
        generator.write_raw_data(line, container.XML_RAW_LINE)


class MessageWriter:
    """Writer for one message type, the mirror image of its MessageParser."""

    def __init__(self, grammar: MessageGrammar):
        self.grammar = grammar

    @property
    def message_type(self) -> str:
        return self.grammar.message_type

    def complete_header(self, header: Header) -> Header:
        """The header to write: an unset ORIGINATOR takes the configured default."""
        if header.originator is not None:
            return header
        completed = header.copy()
        completed.originator = settings.default_originator
        logger.debug("%s: ORIGINATOR defaulted to %r", self.message_type, completed.originator)
        return completed

    def write(self, generator: Generator, message: Message) -> None:
        header = self.complete_header(message.header)
        if header is not message.header:
            message = dataclasses.replace(message, header=header)
        message.validate(generator.file_name)
        self.start(generator, message.header)
        for segment in message.segments:
            self.write_segment(generator, segment)
        self.finish(generator)
        logger.debug("Wrote %s with %d segment(s)", self.message_type, len(message.segments))

    def start(self, generator: Generator, header: Header) -> None:
        generator.start_message(self.grammar.root, self.grammar.version_key, header.format_version)
        self.write_header(generator, header)
        if generator.syntax is FileFormat.XML:
            generator.enter_section(XML_BODY)

    def finish(self, generator: Generator) -> None:
        if generator.syntax is FileFormat.XML:
            generator.exit_section()
        generator.end_message(self.grammar.root)

    def write_header(self, generator: Generator, header: Header) -> None:
        if generator.syntax is FileFormat.XML:
            generator.enter_section(XML_HEADER)
            write_container(generator, header)
            generator.exit_section()
        else:
            write_container(generator, header)

    def write_segment(self, generator: Generator, segment: Segment) -> None:
        if generator.syntax is FileFormat.XML:
            generator.enter_section(XML_SEGMENT)
            generator.enter_section(XML_METADATA)
            write_container(generator, segment.metadata)
            generator.exit_section()
            generator.enter_section(XML_DATA)
            self.write_data(generator, segment.data)
            generator.exit_section()
            generator.exit_section()
            return

        if self.grammar.kvn_metadata is not None:
            generator.write_empty_line()
            generator.enter_section(self.grammar.kvn_metadata)
            write_container(generator, segment.metadata)
            generator.exit_section()
        else:
            write_container(generator, segment.metadata)
        generator.write_empty_line()
        if self.grammar.kvn_data is not None:
            generator.enter_section(self.grammar.kvn_data)
            self.write_data(generator, segment.data)
            generator.exit_section()
        else:
            self.write_data(generator, segment.data)

    def write_data(self, generator: Generator, data: DataSection) -> None:
        generator.write_comments(data.comments)
        for block in data.BLOCKS:
            instances = data.instances(block)
            if not instances:
                continue
            section = block.section(generator.syntax)
            if generator.syntax is FileFormat.KVN and block.kvn_wrapper:
                generator.enter_section(section)
                for instance in instances:
                    write_container(generator, instance)
                generator.exit_section()
                continue
            for instance in instances:
                if section is not None:
                    generator.enter_section(section)
                write_container(generator, instance)
                if section is not None:
                    generator.exit_section()


class EphemerisStream:
    """Segment-by-segment writer for ephemeris messages (OEM, AEM).

    Every segment is written with a working copy of the template metadata, so
    per-segment overrides such as ``start_time`` / ``stop_time`` never leak into the
    template or into the next segment. Segments and their records must come in time
    order.
    """

    def __init__(self, generator: Generator, writer: MessageWriter, header: Header, template: CommentsContainer):
        self.generator = generator
        self.writer = writer
        self.header = header
        self.template = template
        self.cursor: Optional[CcsdsDate] = None
        self.segments_written = 0
        self._started = False

    def __enter__(self) -> EphemerisStream:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()

    def start(self) -> None:
        if self._started:
            return
        self.header = self.writer.complete_header(self.header)
        self.header.validate(self.generator.file_name)
        self.writer.start(self.generator, self.header)
        self._started = True

    def metadata_for(self, **overrides: Any) -> CommentsContainer:
        metadata = self.template.copy()
        for attr, value in overrides.items():
            try:
                field = metadata.field(attr)
            except KeyError:
                raise AttributeError(f"{type(metadata).__name__} has no field {attr!r}") from None
            setattr(metadata, field.attr, value)
        return metadata

    def write_segment(self, data: DataSection, **overrides: Any) -> Segment:
        """Write one segment; ``data`` records must not go back in time.

        A frozen ``data`` section (taken from a parsed message) is written from a copy.
        """
        self.start()
        metadata = self.metadata_for(**overrides)
        if data.frozen:
            data = data.copy()
        data.attach(metadata)
        cursor = self.cursor
        for epoch in data.epochs():
            if cursor is not None and epoch < cursor:
                raise StructureError(
                    f"record at {epoch} is earlier than {cursor} in {self.writer.message_type} stream",
                    file_name=self.generator.file_name,
                )
            cursor = epoch
        segment = Segment(metadata, data)
        segment.validate(self.generator.file_name)
        self.writer.write_segment(self.generator, segment)
        self.cursor = cursor
        self.segments_written += 1
        return segment

    def close(self) -> None:
        if not self._started or not self.segments_written:
            raise IncompleteMessageError(
                f"{self.writer.message_type} stream closed without any segment", file_name=self.generator.file_name
            )
        self.writer.finish(self.generator)
