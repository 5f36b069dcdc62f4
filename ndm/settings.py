from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NDM_", env_file=".env", env_file_encoding="utf-8")

    default_originator: str = "NDM"
    default_file_name: str = "<output>"

    kvn_padding_width: int = 20
    kvn_units_column: int = 60
    xml_indent: int = 2
    xml_schema_location: str = "https://sanaregistry.org/r/ndmxml_unqualified/ndmxml-3.0.0-master-3.0.xsd"

    # printf-style format for raw ephemeris / attitude / line-oriented data columns
    data_line_format: str = "%+.16e"

    lexer_chunk_size: int = 65536
    equivalence_ulps: int = 3

    @property
    def units_enabled(self) -> bool:
        return self.kvn_units_column > 0

    @property
    def data_line_format_checked(self) -> str:
        fmt = (self.data_line_format or "").strip()
        try:
            fmt % 1.0
        except (TypeError, ValueError):
            return "%+.16e"
        return fmt


settings = Settings()
