"""Message parser: a state machine turning a token stream into a Message.

One ``MessageParser`` is bound to one document at a time; ``reset`` makes it reusable.
The grammar of a message type (``MessageGrammar``) is immutable and shared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ndm.errors import CommentLockedError, IncompleteMessageError, StructureError, UnknownKeywordError
from ndm.lexical.tokens import ParseToken, TokenType
from ndm.schemas import FileFormat
from ndm.sections.container import CommentsContainer
from ndm.sections.data import Block, DataSection
from ndm.sections.header import Header
from ndm.sections.segment import Message, Segment
from ndm.sections.stack import SectionStack

logger = logging.getLogger(__name__)

XML_HEADER = "header"
XML_BODY = "body"
XML_SEGMENT = "segment"
XML_METADATA = "metadata"
XML_DATA = "data"


class ParseState(Enum):
    AWAITING_HEADER = "awaiting header"
    IN_HEADER = "in header"
    AWAITING_SEGMENT = "awaiting segment"
    IN_METADATA = "in metadata"
    IN_DATA = "in data"
    DONE = "done"


@dataclass(frozen=True)
class MessageGrammar:
    message: type
    header: type
    metadata: type
    data: type
    # KVN markers; None means the section boundary is found from the keywords
    kvn_metadata: Optional[str] = "META"
    kvn_data: Optional[str] = None
    single_segment: bool = False

    @property
    def message_type(self) -> str:
        return self.message.MESSAGE_TYPE

    @property
    def root(self) -> str:
        return self.message.ROOT

    @property
    def version_key(self) -> str:
        return self.message.VERSION_KEY


class BlockCursor:
    """Routes data-section tokens to the block they belong to."""

    def __init__(self, data: DataSection, syntax: FileFormat, stack: SectionStack):
        self.data = data
        self.syntax = syntax
        self.stack = stack
        self.block: Optional[Block] = None
        self.instance: Optional[CommentsContainer] = None
        self.position = -1
        self.section: Optional[str] = None
        self.wrapper: Optional[Block] = None
        self.groups = 0
        self.pending: list[ParseToken] = []

    def process(self, token: ParseToken) -> bool:
        """Consume ``token`` if it belongs to the data blocks, return False otherwise."""
        if token.type is TokenType.START:
            return self._start(token)
        if token.type is TokenType.STOP:
            return self._stop(token)
        if token.is_comment:
            self._comment(token)
            return True
        if self.section is not None or self.wrapper is not None:
            self._explicit_entry(token)
            return True
        if self.syntax is FileFormat.XML:
            return False
        block = self.data.implicit_block_for(token)
        if block is None:
            return False
        self._implicit_entry(block, token)
        return True

    def close(self, token: Optional[ParseToken] = None) -> None:
        if self.section is not None or self.wrapper is not None or self.groups:
            name = self.section or (self.wrapper.kvn_section if self.wrapper else None) or self.stack.top
            raise StructureError(
                f"{name} is still open at the end of the data section",
                file_name=token.file_name if token else None,
                line=token.line if token else None,
            )
        if self.pending:
            first = self.pending[0]
            raise StructureError(
                f"comment {first.content!r} is not followed by any data",
                file_name=first.file_name, line=first.line,
            )

    def _start(self, token: ParseToken) -> bool:
        if self.section is not None:
            if self.syntax is FileFormat.XML and token.name in self.instance.xml_groups():
                self.stack.push(token.name)
                self.groups += 1
                return True
            raise StructureError(f"unexpected {token.describe()} inside {self.section}",
                                 file_name=token.file_name, line=token.line)
        block = self.data.block_for_section(token.name, self.syntax)
        if block is None:
            return False
        self.stack.push(token.name)
        if self.syntax is FileFormat.KVN and block.kvn_wrapper:
            self._check_order(block, token)
            self.block = block
            self.position = self.data.BLOCKS.index(block)
            self.wrapper = block
            self.instance = None
            return True
        self._open(block, token)
        self.section = token.name
        return True

    def _stop(self, token: ParseToken) -> bool:
        if self.groups:
            self.stack.pop(token.name, token)
            self.groups -= 1
            return True
        if self.section is not None and token.name == self.section:
            self.stack.pop(token.name, token)
            self.section = None
            self._leave(token)
            return True
        if self.wrapper is not None and token.name == self.wrapper.kvn_section:
            self.stack.pop(token.name, token)
            self.wrapper = None
            self._leave(token)
            return True
        return False

    def _leave(self, token: ParseToken) -> None:
        if self.pending:
            first = self.pending[0]
            raise StructureError(f"comment {first.content!r} is not followed by any data",
                                 file_name=first.file_name, line=first.line)
        self.instance = None

    def _comment(self, token: ParseToken) -> None:
        if self.instance is not None and self.instance.accepts_comments:
            self.instance.add_comment(token.content, token)
        elif self.instance is None and not self.pending and self.data.DATA_COMMENTS and self.data.accepts_comments:
            self.data.add_comment(token.content, token)
        else:
            self.pending.append(token)

    def _check_order(self, block: Block, token: ParseToken) -> None:
        index = self.data.BLOCKS.index(block)
        if index < self.position or (index == self.position and not block.repeatable):
            raise StructureError(
                f"{block.xml_tag} not allowed after {self.data.BLOCKS[self.position].xml_tag}",
                file_name=token.file_name, line=token.line,
            )

    def _open(self, block: Block, token: ParseToken) -> CommentsContainer:
        if block is not self.wrapper:
            self._check_order(block, token)
        instance = self.data.new_block(block)
        self.block = block
        self.position = self.data.BLOCKS.index(block)
        self.instance = instance
        for comment in self.pending:
            instance.add_comment(comment.content, comment)
        self.pending.clear()
        return instance

    def _feed(self, instance: CommentsContainer, token: ParseToken) -> None:
        if self.pending:
            first = self.pending[0]
            raise CommentLockedError(instance.section_name(), file_name=first.file_name, line=first.line)
        if token.is_raw_line or (instance.XML_RAW_LINE is not None and token.name == instance.XML_RAW_LINE):
            instance.add_raw_line(token)
            return
        if not instance.accept(token):
            raise UnknownKeywordError(token.name, file_name=token.file_name, line=token.line,
                                      expected=instance.keywords())

    def _explicit_entry(self, token: ParseToken) -> None:
        if self.section is None:
            # inside a KVN wrapper: each repetition starts on its first keyword
            if self.instance is None or (not token.is_raw_line and self.wrapper.restarts_on(token.name)):
                self._open(self.wrapper, token)
        self._feed(self.instance, token)

    def _implicit_entry(self, block: Block, token: ParseToken) -> None:
        continuing = (
            self.block is block
            and self.instance is not None
            and not token.is_raw_line
            and not block.restarts_on(token.name)
        )
        if not continuing:
            self._open(block, token)
        self._feed(self.instance, token)


class MessageParser:
    """State machine for one message type, fed with tokens by a lexer."""

    def __init__(self, grammar: MessageGrammar):
        self.grammar = grammar
        self.reset(FileFormat.KVN)

    def reset(self, syntax: FileFormat, file_name: str = "<input>") -> None:
        self.syntax = FileFormat(syntax)
        self.file_name = file_name
        self.state = ParseState.AWAITING_HEADER
        self.stack = SectionStack()
        self.header: Header = self.grammar.header()
        self.segments: list[Segment] = []
        self.metadata: Optional[CommentsContainer] = None
        self.data: Optional[DataSection] = None
        self.cursor: Optional[BlockCursor] = None

    @property
    def message_type(self) -> str:
        return self.grammar.message_type

    # dispatch

    def process(self, token: ParseToken) -> None:
        handler = {
            ParseState.AWAITING_HEADER: self._awaiting_header,
            ParseState.IN_HEADER: self._in_header,
            ParseState.AWAITING_SEGMENT: self._awaiting_segment,
            ParseState.IN_METADATA: self._in_metadata,
            ParseState.IN_DATA: self._in_data,
            ParseState.DONE: self._done,
        }[self.state]
        handler(token)

    def build(self) -> Message:
        if self.syntax is FileFormat.KVN and self.grammar.kvn_data is None:
            if self.state is ParseState.IN_METADATA and self.grammar.kvn_metadata is None:
                self._start_data()
            if self.state is ParseState.IN_DATA and self.data is not None:
                self._end_segment()
        if self.syntax is FileFormat.KVN:
            if self.state is ParseState.AWAITING_SEGMENT and self.segments and not self.stack:
                self.state = ParseState.DONE
        if self.state is not ParseState.DONE:
            raise IncompleteMessageError(
                f"{self.message_type} message ended while {self.state.value}"
                + (f" ({self.stack.top} still open)" if self.stack else ""),
                file_name=self.file_name,
            )
        message = self.grammar.message(self.header, tuple(self.segments))
        message.validate(self.file_name)
        message.freeze()
        logger.debug("Parsed %s from %s: %d segment(s)", self.message_type, self.file_name, len(self.segments))
        return message

    # helpers

    def _unexpected(self, token: ParseToken) -> StructureError:
        return StructureError(
            f"unexpected {token.describe()} in {self.message_type} ({self.state.value})",
            file_name=token.file_name, line=token.line,
        )

    def _unknown(self, token: ParseToken, *containers) -> UnknownKeywordError:
        expected: list[str] = []
        for container in containers:
            if container is not None:
                expected.extend(container.keywords())
        return UnknownKeywordError(token.name, file_name=token.file_name, line=token.line, expected=expected)

    def _set_version(self, token: ParseToken) -> None:
        if not token.content:
            raise self._unexpected(token)
        self.header.format_version = token.content

    def _start_segment(self, token: ParseToken) -> None:
        if self.grammar.single_segment and self.segments:
            raise StructureError(
                f"{self.message_type} messages have a single segment",
                file_name=token.file_name, line=token.line,
            )
        self.metadata = self.grammar.metadata()
        self.data = None
        self.cursor = None
        self.state = ParseState.IN_METADATA

    def _start_data(self) -> None:
        self.data = self.grammar.data.create(self.metadata)
        self.cursor = BlockCursor(self.data, self.syntax, self.stack)
        self.state = ParseState.IN_DATA

    def _end_segment(self, token: Optional[ParseToken] = None) -> None:
        self.cursor.close(token)
        self.segments.append(Segment(self.metadata, self.data))
        self.metadata = None
        self.data = None
        self.cursor = None
        self.state = ParseState.AWAITING_SEGMENT

    # states

    def _awaiting_header(self, token: ParseToken) -> None:
        if self.syntax is FileFormat.XML:
            if token.type is TokenType.START and token.name == self.grammar.root and not self.stack:
                self.stack.push(token.name)
                return
            if token.type is TokenType.ENTRY and token.name == self.grammar.version_key and self.stack:
                self._set_version(token)
                return
            if token.type is TokenType.START and token.name == XML_HEADER and self.stack:
                self.stack.push(token.name)
                self.state = ParseState.IN_HEADER
                return
            raise self._unexpected(token)
        if token.type is TokenType.ENTRY and token.name == self.grammar.version_key:
            self._set_version(token)
            self.state = ParseState.IN_HEADER
            return
        raise self._unexpected(token)

    def _in_header(self, token: ParseToken) -> None:
        if self.syntax is FileFormat.XML:
            if token.type is TokenType.STOP and token.name == XML_HEADER:
                self.stack.pop(XML_HEADER, token)
                self.state = ParseState.AWAITING_SEGMENT
                return
            if token.type is not TokenType.ENTRY:
                raise self._unexpected(token)
            if token.is_comment:
                self.header.add_comment(token.content, token)
            elif not self.header.accept(token):
                raise self._unknown(token, self.header)
            return

        implicit = self.grammar.kvn_metadata is None
        if token.type is TokenType.START and token.name == self.grammar.kvn_metadata:
            self.stack.push(token.name)
            self._start_segment(token)
            return
        if token.type is not TokenType.ENTRY:
            raise self._unexpected(token)
        if token.is_comment:
            if self.header.accepts_comments or not implicit:
                self.header.add_comment(token.content, token)
                return
        elif self.header.accept(token):
            return
        elif not implicit:
            raise self._unknown(token, self.header)
        self._start_segment(token)
        self._in_metadata(token)

    def _awaiting_segment(self, token: ParseToken) -> None:
        if self.syntax is FileFormat.XML:
            if token.type is TokenType.START and token.name in (XML_BODY, XML_SEGMENT):
                self.stack.push(token.name)
                return
            if token.type is TokenType.START and token.name == XML_METADATA and self.stack.top == XML_SEGMENT:
                self.stack.push(token.name)
                self._start_segment(token)
                return
            if token.type is TokenType.STOP and token.name in (XML_BODY, XML_SEGMENT):
                self.stack.pop(token.name, token)
                return
            if token.type is TokenType.STOP and token.name == self.grammar.root:
                self.stack.pop(token.name, token)
                if not self.segments:
                    raise IncompleteMessageError(f"{self.message_type} message has no segment",
                                                 file_name=token.file_name, line=token.line)
                self.state = ParseState.DONE
                return
            raise self._unexpected(token)
        if token.type is TokenType.START and token.name == self.grammar.kvn_metadata:
            self.stack.push(token.name)
            self._start_segment(token)
            return
        raise self._unexpected(token)

    def _in_metadata(self, token: ParseToken) -> None:
        closing = XML_METADATA if self.syntax is FileFormat.XML else self.grammar.kvn_metadata
        if token.type is TokenType.STOP and closing is not None and token.name == closing:
            self.stack.pop(closing, token)
            if self.syntax is FileFormat.XML or self.grammar.kvn_data is not None:
                self.state = ParseState.IN_DATA
            else:
                self._start_data()
            return

        implicit = self.syntax is FileFormat.KVN and self.grammar.kvn_metadata is None
        if token.type is TokenType.ENTRY:
            if token.is_comment:
                if self.metadata.accepts_comments or not implicit:
                    self.metadata.add_comment(token.content, token)
                    return
            elif self.metadata.accept(token):
                return
            elif not implicit:
                raise self._unknown(token, self.metadata)
        elif not implicit:
            raise self._unexpected(token)

        # metadata without end marker: the first foreign token opens the data section
        self._start_data()
        if not self.cursor.process(token):
            if token.type is TokenType.ENTRY:
                raise self._unknown(token, self.metadata, *self._block_containers())
            raise self._unexpected(token)

    def _block_containers(self):
        return [block.container for block in self.grammar.data.BLOCKS]

    def _in_data(self, token: ParseToken) -> None:
        xml = self.syntax is FileFormat.XML
        opening = XML_DATA if xml else self.grammar.kvn_data
        if self.data is None:
            if token.type is TokenType.START and token.name == opening:
                self.stack.push(token.name)
                self._start_data()
                return
            raise self._unexpected(token)

        if self.cursor.process(token):
            return

        if token.type is TokenType.STOP and opening is not None and token.name == opening:
            self._end_segment(token)
            self.stack.pop(opening, token)
            return
        if (
            not xml
            and opening is None
            and token.type is TokenType.START
            and token.name == self.grammar.kvn_metadata
        ):
            self._end_segment(token)
            self.stack.push(token.name)
            self._start_segment(token)
            return
        if token.type is TokenType.ENTRY:
            raise self._unknown(token, *self._block_containers())
        raise self._unexpected(token)

    def _done(self, token: ParseToken) -> None:
        raise self._unexpected(token)
