import pytest

from ndm.dates import TimeSystem
from ndm.errors import FieldFormatError, LexicalError
from ndm.lexical.kvn import KvnLexer
from ndm.lexical.tokens import COMMENT, ParseToken, TokenType
from ndm.lexical.xml import XmlLexer


def test_kvn_lexer_token_kinds():
    kvn = "\n".join(
        [
            "CCSDS_OEM_VERS = 3.0",
            "",
            "COMMENT  some   text  ",
            "META_START",
            "OBJECT_name =   SAT   ONE ",
            "X = 1.5 [ km ]",
            "META_STOP",
            "2020-01-01T00:00:00 1.0 2.0 3.0 4.0 5.0 6.0",
        ]
    )
    tokens = list(KvnLexer(kvn, "sample.oem").tokens())

    assert [t.type for t in tokens] == [
        TokenType.ENTRY,
        TokenType.ENTRY,
        TokenType.START,
        TokenType.ENTRY,
        TokenType.ENTRY,
        TokenType.STOP,
        TokenType.ENTRY,
    ]
    assert tokens[0].name == "CCSDS_OEM_VERS" and tokens[0].content == "3.0"
    assert tokens[1].is_comment and tokens[1].content == "some   text"
    assert tokens[2].name == "META"
    assert tokens[3].name == "OBJECT_NAME" and tokens[3].content == "SAT ONE"
    assert tokens[4].units == "km" and tokens[4].content == "1.5"
    assert tokens[6].is_raw_line
    assert tokens[6].content.startswith("2020-01-01T00:00:00 1.0")
    # blank line skipped, line numbers follow the file
    assert tokens[1].line == 3
    assert tokens[6].line == 8
    assert all(t.file_name == "sample.oem" for t in tokens)


def test_kvn_lexer_rejects_garbage_with_location():
    with pytest.raises(LexicalError) as excinfo:
        list(KvnLexer("CCSDS_OPM_VERS = 3.0\nthis is not kvn\n", "bad.opm").tokens())
    assert excinfo.value.line == 2
    assert excinfo.value.file_name == "bad.opm"
    assert excinfo.value.raw_text == "this is not kvn"


def test_kvn_lexer_splits_on_first_equal_sign():
    token = next(KvnLexer("MESSAGE_ID = A=B\n").tokens())
    assert token.name == "MESSAGE_ID"
    assert token.content == "A=B"


def test_fortran_exponent_accepted():
    token = ParseToken(TokenType.ENTRY, "BSTAR", "1.5D-04")
    assert token.as_float(None) == 1.5e-04


def test_unit_conversion_on_read():
    token = ParseToken(TokenType.ENTRY, "X", "1500", units="m")
    assert token.as_float("km") == pytest.approx(1.5)


def test_xml_lexer_token_kinds():
    xml = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<opm id="CCSDS_OPM_VERS" version="3.0">',
            "  <header>",
            "    <COMMENT>  hello   world </COMMENT>",
            "    <ORIGINATOR>  ME  </ORIGINATOR>",
            "  </header>",
            "  <body>",
            '    <X units="m">1500</X>',
            '    <USER_DEFINED parameter="FOO">bar</USER_DEFINED>',
            "  </body>",
            "</opm>",
        ]
    )
    tokens = list(XmlLexer(xml, "sample.xml").tokens())
    described = [(t.type, t.name) for t in tokens]

    assert described == [
        (TokenType.START, "opm"),
        (TokenType.ENTRY, "CCSDS_OPM_VERS"),
        (TokenType.START, "header"),
        (TokenType.ENTRY, COMMENT),
        (TokenType.ENTRY, "ORIGINATOR"),
        (TokenType.STOP, "header"),
        (TokenType.START, "body"),
        (TokenType.ENTRY, "X"),
        (TokenType.ENTRY, "USER_DEFINED_FOO"),
        (TokenType.STOP, "body"),
        (TokenType.STOP, "opm"),
    ]
    assert tokens[1].content == "3.0"
    assert tokens[3].content == "hello   world"
    assert tokens[4].content == "ME"
    assert tokens[7].units == "m"
    assert tokens[4].line == 5


def test_xml_lexer_rejects_mixed_content():
    xml = "<opm><header>text<ORIGINATOR>ME</ORIGINATOR></header></opm>"
    with pytest.raises(LexicalError):
        list(XmlLexer(xml).tokens())


def test_xml_lexer_rejects_malformed_document():
    with pytest.raises(LexicalError) as excinfo:
        list(XmlLexer("<opm>\n<header>\n</opm>\n", "broken.xml").tokens())
    assert excinfo.value.file_name == "broken.xml"
    assert excinfo.value.line is not None


def test_both_lexers_normalize_values_the_same_way():
    kvn = next(KvnLexer("OBJECT_NAME =   A    B  \n").tokens())
    xml = [t for t in XmlLexer("<r><OBJECT_NAME>  A \n   B </OBJECT_NAME></r>").tokens() if t.name == "OBJECT_NAME"][0]
    assert kvn.content == xml.content == "A B"


def test_bracketed_list_is_the_value_of_a_list_field():
    token = next(KvnLexer("TRAJ_UNITS = [km, km, km, km/s, km/s, km/s]\n").tokens())
    assert token.content == ""
    assert token.as_list() == ["km", "km", "km", "km/s", "km/s", "km/s"]
    bare = next(KvnLexer("TRAJ_UNITS = km,km,km,km/s,km/s,km/s\n").tokens())
    assert bare.as_list() == token.as_list()


def test_text_keeps_trailing_brackets():
    token = next(KvnLexer("OBJECT_NAME = OSPREY  [5 B]\n").tokens())
    assert token.as_text() == "OSPREY [5 B]"
    with pytest.raises(FieldFormatError):
        ParseToken(TokenType.ENTRY, "TIME_SYSTEM", "UTC", units="s").as_enum(TimeSystem)


@pytest.mark.parametrize("kind", ["as_text", "as_list", "as_date", "as_int"])
def test_empty_value_is_refused(kind):
    token = next(KvnLexer("ORIGINATOR =\n", "empty.opm").tokens())
    assert token.content == ""
    with pytest.raises(FieldFormatError) as excinfo:
        getattr(token, kind)()
    assert excinfo.value.line == 1
