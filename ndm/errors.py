from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Union


class ErrorKind(str, Enum):
    UNPARSABLE_LINE = "UNPARSABLE_LINE"
    UNEXPECTED_KEYWORD = "UNEXPECTED_KEYWORD"
    UNKNOWN_KEYWORD = "UNKNOWN_KEYWORD"
    INVALID_VALUE = "INVALID_VALUE"
    MISSING_KEYWORD = "MISSING_KEYWORD"
    COUNT_MISMATCH = "COUNT_MISMATCH"
    INVALID_INDEX = "INVALID_INDEX"
    COMMENTS_LOCKED = "COMMENTS_LOCKED"
    FROZEN = "FROZEN"
    INCOMPLETE_MESSAGE = "INCOMPLETE_MESSAGE"


class NdmError(ValueError):
    kind: ErrorKind = ErrorKind.INVALID_VALUE

    def __init__(self, detail: str, *, file_name: Optional[str] = None, line: Optional[int] = None):
        self.detail = detail
        self.file_name = file_name
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.file_name is None:
            return f"{self.kind.value}: {self.detail}"
        if self.line is None:
            return f"{self.kind.value}: {self.detail} ({self.file_name})"
        return f"{self.kind.value}: {self.detail} (line {self.line} of {self.file_name})"


class LexicalError(NdmError):
    kind = ErrorKind.UNPARSABLE_LINE

    def __init__(self, raw_text: str, *, file_name: Optional[str] = None, line: Optional[int] = None, reason: str = ""):
        self.raw_text = raw_text
        detail = f"unable to parse {raw_text!r}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail, file_name=file_name, line=line)


class StructureError(NdmError):
    kind = ErrorKind.UNEXPECTED_KEYWORD


class IncompleteMessageError(StructureError):
    kind = ErrorKind.INCOMPLETE_MESSAGE


class UnknownKeywordError(NdmError):
    kind = ErrorKind.UNKNOWN_KEYWORD

    def __init__(
        self,
        keyword: str,
        *,
        file_name: Optional[str] = None,
        line: Optional[int] = None,
        expected: Iterable[str] = (),
    ):
        self.keyword = keyword
        self.expected = tuple(expected)
        detail = f"unexpected keyword {keyword!r}"
        if self.expected:
            shown = ", ".join(self.expected[:12])
            if len(self.expected) > 12:
                shown += ", ..."
            detail = f"{detail}, accepted keywords: {shown}"
        super().__init__(detail, file_name=file_name, line=line)


class FieldFormatError(NdmError):
    kind = ErrorKind.INVALID_VALUE

    def __init__(
        self,
        keyword: str,
        raw_text: str,
        expected: str,
        *,
        file_name: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.keyword = keyword
        self.raw_text = raw_text
        self.expected = expected
        super().__init__(f"invalid value {raw_text!r} for {keyword}, expected {expected}", file_name=file_name, line=line)


class MissingKeywordError(NdmError):
    kind = ErrorKind.MISSING_KEYWORD

    def __init__(self, keyword: str, container: str, *, file_name: Optional[str] = None):
        self.keyword = keyword
        self.container = container
        super().__init__(f"missing mandatory keyword {keyword} in {container}", file_name=file_name)


class CountMismatchError(NdmError):
    kind = ErrorKind.COUNT_MISMATCH

    def __init__(self, keyword: str, declared: int, observed: int, *, file_name: Optional[str] = None):
        self.keyword = keyword
        self.declared = declared
        self.observed = observed
        super().__init__(f"{keyword} declares {declared} entries but {observed} were found", file_name=file_name)


class InvalidIndexError(NdmError):
    kind = ErrorKind.INVALID_INDEX

    def __init__(self, keyword: str, index: Union[int, str], expected: Optional[int] = None, *,
                 file_name: Optional[str] = None, line: Optional[int] = None):
        self.keyword = keyword
        self.index = index
        if expected is None:
            message = f"{keyword} has index {index} more than once"
        else:
            message = f"{keyword} has index {index}, expected index {expected}"
        super().__init__(message, file_name=file_name, line=line)


class CommentLockedError(NdmError):
    kind = ErrorKind.COMMENTS_LOCKED

    def __init__(self, container: str, *, file_name: Optional[str] = None, line: Optional[int] = None):
        self.container = container
        super().__init__(f"comments are not allowed in {container} once data has been set", file_name=file_name, line=line)


class FrozenContainerError(NdmError):
    kind = ErrorKind.FROZEN

    def __init__(self, container: str, attr: str):
        self.container = container
        super().__init__(f"cannot modify {attr} of built {container}")


class GeneratorStateError(RuntimeError):
    """Generator used out of order (programming error, not a data problem)."""
