"""Entry points: read any supported message, write a message in either syntax."""

from __future__ import annotations

import io
import logging
import re
from typing import Optional, TextIO, Union

from ndm.errors import LexicalError, StructureError
from ndm.generation.generator import Generator
from ndm.generation.kvn import KvnGenerator
from ndm.generation.xml import XmlGenerator
from ndm.lexical.kvn import KvnLexer
from ndm.lexical.xml import XmlLexer
from ndm.messages import aem, apm, ocm, oem, omm, opm, tdm
from ndm.parsing import MessageGrammar, MessageParser
from ndm.schemas import FileFormat, GeneratorConfig
from ndm.sections.segment import Message
from ndm.settings import settings
from ndm.writing import MessageWriter

logger = logging.getLogger(__name__)

GRAMMARS: dict[str, MessageGrammar] = {
    module.GRAMMAR.message_type: module.GRAMMAR for module in (opm, omm, oem, ocm, aem, apm, tdm)
}
WRITERS: dict[str, MessageWriter] = {
    module.WRITER.message_type: module.WRITER for module in (opm, omm, oem, ocm, aem, apm, tdm)
}

_KVN_VERSION_RE = re.compile(r"^\s*(?P<key>CCSDS_[A-Z]+_VERS)\s*=", re.MULTILINE)
_XML_ROOT_RE = re.compile(r"<(?P<root>[A-Za-z_][\w.\-]*)")
_BOM = "\ufeff"

Source = Union[str, bytes, TextIO, io.BufferedIOBase]


def _decode(raw: bytes, name: str) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise LexicalError(repr(raw[exc.start : exc.end]), file_name=name, reason="not UTF-8 text") from None


def _as_text(source: Source, name: str) -> Union[str, TextIO]:
    if isinstance(source, bytes):
        return _decode(source, name)
    if isinstance(source, str):
        return source[1:] if source.startswith(_BOM) else source
    if isinstance(source, io.TextIOBase):
        return _skip_bom(source)
    # binary file objects
    return _decode(source.read(), name)


def _skip_bom(stream: TextIO) -> Union[str, TextIO]:
    if not stream.seekable():
        text = stream.read()
        return text[1:] if text.startswith(_BOM) else text
    position = stream.tell()
    if stream.read(1) != _BOM:
        stream.seek(position)
    return stream


def _head(source: Union[str, TextIO]) -> tuple[str, Union[str, TextIO]]:
    """First chunk of the input, and the input rewound (or rebuilt) for lexing."""
    if isinstance(source, str):
        return source[: settings.lexer_chunk_size], source
    if source.seekable():
        position = source.tell()
        head = source.read(settings.lexer_chunk_size)
        source.seek(position)
        return head, source
    text = source.read()
    return text[: settings.lexer_chunk_size], text


def detect_syntax(head: str) -> FileFormat:
    stripped = head.lstrip()
    return FileFormat.XML if stripped.startswith("<") else FileFormat.KVN


def detect_message_type(head: str, syntax: FileFormat, name: str = "<input>") -> str:
    if syntax is FileFormat.XML:
        for match in _XML_ROOT_RE.finditer(head):
            root = match.group("root")
            for grammar in GRAMMARS.values():
                if grammar.root == root:
                    return grammar.message_type
            raise StructureError(f"unsupported message root <{root}>", file_name=name)
    else:
        match = _KVN_VERSION_RE.search(head)
        if match:
            for grammar in GRAMMARS.values():
                if grammar.version_key == match.group("key"):
                    return grammar.message_type
            raise StructureError(f"unsupported message version key {match.group('key')}", file_name=name)
    raise StructureError("no message version key found", file_name=name, line=1)


def parser_for(message_type: str) -> MessageParser:
    try:
        grammar = GRAMMARS[message_type.upper()]
    except KeyError:
        raise StructureError(f"unsupported message type {message_type!r}") from None
    return MessageParser(grammar)


def lexer_for(source: Source, name: str = "<input>") -> Union[KvnLexer, XmlLexer]:
    text = _as_text(source, name)
    head, text = _head(text)
    if detect_syntax(head) is FileFormat.XML:
        return XmlLexer(text, name)
    return KvnLexer(text, name)


def parse_message(source: Source, name: str = "<input>", parser: Optional[MessageParser] = None) -> Message:
    """Parse a KVN or XML message.

    The syntax is told by the first non-blank character; without ``parser`` the message
    type comes from the version key (KVN) or the root element (XML).
    """
    text = _as_text(source, name)
    head, text = _head(text)
    syntax = detect_syntax(head)
    if parser is None:
        parser = parser_for(detect_message_type(head, syntax, name))
    lexer = XmlLexer(text, name) if syntax is FileFormat.XML else KvnLexer(text, name)
    message = lexer.accept(parser)
    logger.debug("Read %s %s from %s", syntax.value, message.MESSAGE_TYPE, name)
    return message


def make_generator(sink: TextIO, config: Optional[GeneratorConfig] = None) -> Generator:
    config = config or GeneratorConfig()
    if config.syntax is FileFormat.XML:
        return XmlGenerator(sink, config)
    return KvnGenerator(sink, config)


def writer_for(message: Message) -> MessageWriter:
    try:
        return WRITERS[message.MESSAGE_TYPE]
    except KeyError:
        raise StructureError(f"unsupported message type {message.MESSAGE_TYPE!r}") from None


def write_message(sink: TextIO, message: Message, config: Optional[GeneratorConfig] = None) -> None:
    generator = make_generator(sink, config)
    writer_for(message).write(generator, message)


def dumps(message: Message, config: Optional[GeneratorConfig] = None) -> str:
    out = io.StringIO()
    write_message(out, message, config)
    return out.getvalue()
