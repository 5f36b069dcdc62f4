from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING, Iterator, Optional, TextIO, Union

from ndm.errors import LexicalError
from ndm.lexical.tokens import COMMENT, ParseToken, TokenType, normalize_comment, normalize_value
from ndm.schemas import FileFormat

if TYPE_CHECKING:
    from ndm.parsing import MessageParser


_KVN_RE = re.compile(r"^\s*(?P<key>[A-Za-z0-9_]+)\s*=\s*(?P<value>.*?)\s*$")
_UNIT_RE = re.compile(r"^(?P<value>.*?)(?:\s*\[(?P<unit>[^\]]*)\])?$")
_COMMENT_RE = re.compile(r"^\s*COMMENT(?:\s+(?P<text>.*?))?\s*$")
_SECTION_RE = re.compile(r"^\s*(?P<name>[A-Za-z0-9_]+?)_(?P<kind>START|STOP)\s*$")
_DATA_ITEM = r"[+\-]?\.?\d[\w:.+\-]*"
_DATA_LINE_RE = re.compile(rf"^\s*{_DATA_ITEM}(?:\s+{_DATA_ITEM})*\s*$")


class KvnLexer:
    """Line splitter for the Keyword = Value Notation."""

    syntax = FileFormat.KVN

    def __init__(self, source: Union[str, TextIO], file_name: str = "<input>"):
        self.source = source
        self.file_name = file_name

    def _lines(self) -> Iterator[str]:
        if isinstance(self.source, str):
            return iter(io.StringIO(self.source))
        return iter(self.source)

    def tokens(self) -> Iterator[ParseToken]:
        for line_no, line in enumerate(self._lines(), start=1):
            stripped = line.strip()
            if not stripped:
                continue
            yield self._tokenize(stripped, line_no)

    def _tokenize(self, line: str, line_no: int) -> ParseToken:
        match = _COMMENT_RE.match(line)
        if match:
            return ParseToken(TokenType.ENTRY, COMMENT, normalize_comment(match.group("text")),
                              line=line_no, file_name=self.file_name)

        match = _SECTION_RE.match(line)
        if match:
            kind = TokenType.START if match.group("kind") == "START" else TokenType.STOP
            return ParseToken(kind, match.group("name").upper(), line=line_no, file_name=self.file_name)

        match = _KVN_RE.match(line)
        if match:
            key = match.group("key").strip().upper()
            value, unit = _split_value_and_unit(match.group("value") or "")
            return ParseToken(TokenType.ENTRY, key, value, unit, line=line_no, file_name=self.file_name)

        if _DATA_LINE_RE.match(line):
            return ParseToken(TokenType.ENTRY, "", normalize_value(line), line=line_no, file_name=self.file_name)

        raise LexicalError(line, file_name=self.file_name, line=line_no)

    def accept(self, parser: MessageParser):
        parser.reset(self.syntax, self.file_name)
        for token in self.tokens():
            parser.process(token)
        return parser.build()


def _split_value_and_unit(raw: str) -> tuple[str, Optional[str]]:
    match = _UNIT_RE.match(raw.strip())
    if not match:
        return normalize_value(raw), None
    value = normalize_value(match.group("value"))
    unit = match.group("unit")
    unit = normalize_value(unit) if unit is not None else None
    return value, unit or None
