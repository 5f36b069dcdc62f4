from __future__ import annotations

from typing import Optional

from ndm.errors import MissingKeywordError
from ndm.sections.container import CommentsContainer
from ndm.sections.fields import date, text


class Header(CommentsContainer):
    """Message header; the format version travels with the version keyword."""

    SECTION = "header"

    def __init__(self):
        super().__init__()
        self.format_version: Optional[str] = None

    def validate(self, file_name: Optional[str] = None) -> None:
        if not self.format_version:
            raise MissingKeywordError("version", self.section_name(), file_name=file_name)
        super().validate(file_name)

    def state(self) -> dict:
        out = super().state()
        out["format_version"] = self.format_version
        return out


class OdmHeader(Header):
    FIELDS = (
        text("CLASSIFICATION"),
        date("CREATION_DATE", mandatory=True),
        text("ORIGINATOR", mandatory=True),
        text("MESSAGE_ID"),
    )


class AdmHeader(Header):
    # TDM carries the same header
    FIELDS = (
        date("CREATION_DATE", mandatory=True),
        text("ORIGINATOR", mandatory=True),
        text("MESSAGE_ID"),
    )
