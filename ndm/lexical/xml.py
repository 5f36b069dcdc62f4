from __future__ import annotations

import io
import xml.sax
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional, TextIO, Union
from xml.sax.handler import ContentHandler, feature_external_ges, feature_external_pes
from xml.sax.expatreader import ExpatLocator

from ndm.errors import LexicalError
from ndm.lexical.tokens import COMMENT, ParseToken, TokenType, normalize_comment, normalize_value
from ndm.schemas import FileFormat
from ndm.settings import settings

if TYPE_CHECKING:
    from ndm.parsing import MessageParser

ROOT_ID_ATTRIBUTE = "id"
ROOT_VERSION_ATTRIBUTE = "version"
UNITS_ATTRIBUTE = "units"
PARAMETER_ATTRIBUTE = "parameter"


@dataclass
class _Frame:
    name: str
    line: int
    units: Optional[str] = None
    parameter: Optional[str] = None
    started: bool = False
    text: list[str] = field(default_factory=list)


class _TokenHandler(ContentHandler):
    def __init__(self, file_name: str, out: deque):
        super().__init__()
        self.file_name = file_name
        self.out = out
        self.stack: list[_Frame] = []
        self.root_attributes: dict[str, str] = {}
        self._locator = None

    def setDocumentLocator(self, locator):
        self._locator = locator

    def _line(self) -> int:
        return self._locator.getLineNumber() if self._locator is not None else 0

    def _open(self, frame: _Frame) -> None:
        # An element becomes a section as soon as a child element shows up.
        if "".join(frame.text).strip():
            raise LexicalError(
                "".join(frame.text).strip(), file_name=self.file_name, line=frame.line,
                reason=f"text mixed with child elements in <{frame.name}>",
            )
        frame.started = True
        self.out.append(ParseToken(TokenType.START, frame.name, line=frame.line, file_name=self.file_name))
        if len(self.stack) == 1 and ROOT_ID_ATTRIBUTE in self.root_attributes:
            self.out.append(
                ParseToken(
                    TokenType.ENTRY,
                    self.root_attributes[ROOT_ID_ATTRIBUTE].strip().upper(),
                    normalize_value(self.root_attributes.get(ROOT_VERSION_ATTRIBUTE)),
                    line=frame.line,
                    file_name=self.file_name,
                )
            )

    def startElement(self, name, attrs):
        if self.stack and not self.stack[-1].started:
            self._open(self.stack[-1])
        if not self.stack:
            self.root_attributes = {key: attrs.getValue(key) for key in attrs.getNames()}
        frame = _Frame(name=name, line=self._line())
        if UNITS_ATTRIBUTE in attrs.getNames():
            frame.units = "".join(attrs.getValue(UNITS_ATTRIBUTE).split()) or None
        if PARAMETER_ATTRIBUTE in attrs.getNames():
            frame.parameter = attrs.getValue(PARAMETER_ATTRIBUTE).strip()
        self.stack.append(frame)

    def characters(self, content):
        if self.stack:
            self.stack[-1].text.append(content)

    def endElement(self, name):
        frame = self.stack.pop()
        if frame.started:
            if "".join(frame.text).strip():
                raise LexicalError(
                    "".join(frame.text).strip(), file_name=self.file_name, line=frame.line,
                    reason=f"text mixed with child elements in <{frame.name}>",
                )
            self.out.append(ParseToken(TokenType.STOP, name, line=self._line(), file_name=self.file_name))
            return
        if not self.stack:
            # root element without children: still a (empty) section
            self._open_root_without_children(frame)
            return
        text = "".join(frame.text)
        if name == COMMENT:
            token = ParseToken(TokenType.ENTRY, COMMENT, normalize_comment(text), line=frame.line, file_name=self.file_name)
        else:
            entry_name = f"{name}_{frame.parameter}" if frame.parameter else name
            token = ParseToken(TokenType.ENTRY, entry_name, normalize_value(text), frame.units,
                               line=frame.line, file_name=self.file_name)
        self.out.append(token)

    def _open_root_without_children(self, frame: _Frame) -> None:
        self.stack.append(frame)
        self._open(frame)
        self.stack.pop()
        self.out.append(ParseToken(TokenType.STOP, frame.name, line=self._line(), file_name=self.file_name))


class XmlLexer:
    """Element walker turning CCSDS NDM/XML into parse tokens."""

    syntax = FileFormat.XML

    def __init__(self, source: Union[str, TextIO], file_name: str = "<input>"):
        self.source = source
        self.file_name = file_name

    def _chunks(self) -> Iterator[str]:
        stream = io.StringIO(self.source) if isinstance(self.source, str) else self.source
        while True:
            chunk = stream.read(settings.lexer_chunk_size)
            if not chunk:
                return
            yield chunk

    def tokens(self) -> Iterator[ParseToken]:
        out: deque = deque()
        handler = _TokenHandler(self.file_name, out)
        reader = xml.sax.make_parser()
        reader.setFeature(feature_external_ges, False)
        reader.setFeature(feature_external_pes, False)
        reader.setContentHandler(handler)
        # feed() never hands the handler a locator, only parse() does
        handler.setDocumentLocator(ExpatLocator(reader))
        try:
            for chunk in self._chunks():
                reader.feed(chunk)
                while out:
                    yield out.popleft()
            reader.close()
        except xml.sax.SAXParseException as exc:
            raise LexicalError(
                exc.getMessage(), file_name=self.file_name, line=exc.getLineNumber(), reason="malformed XML"
            ) from None
        while out:
            yield out.popleft()

    def accept(self, parser: MessageParser):
        parser.reset(self.syntax, self.file_name)
        for token in self.tokens():
            parser.process(token)
        return parser.build()
