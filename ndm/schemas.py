from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ndm.settings import settings


class FileFormat(str, Enum):
    KVN = "KVN"
    XML = "XML"


class GeneratorConfig(BaseModel):
    syntax: FileFormat = FileFormat.KVN
    units_column: int = Field(default_factory=lambda: settings.kvn_units_column, ge=0)
    indent: int = Field(default_factory=lambda: settings.xml_indent, ge=0)
    padding_width: int = Field(default_factory=lambda: settings.kvn_padding_width, ge=0)
    file_name: str = Field(default_factory=lambda: settings.default_file_name)

    @field_validator("syntax", mode="before")
    @classmethod
    def _normalize_syntax(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def units_enabled(self) -> bool:
        return self.units_column > 0
