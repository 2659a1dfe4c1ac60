import pytest

from asn1der.optional import OptTaggedParser
from asn1der.strings import Utf8String
from asn1der.tlv import (
    Any,
    Class,
    IncompleteError,
    InvalidLengthError,
    Tag,
    UnexpectedClassError,
)

EXPLICIT_INT = bytes([0xA0, 0x03, 0x02, 0x01, 0x02])
IMPLICIT_INT = bytes([0xA0, 0x01, 0x02])
APPLICATION_INT = bytes([0x60, 0x03, 0x02, 0x01, 0x02])


def raw_content(header, data):
    return b"", data


def test_explicit_context_specific():
    rest, value = OptTaggedParser.tagged(0).parse_der(
        EXPLICIT_INT, lambda _h, data: Any.from_der(data)
    )
    assert rest == b""
    assert value.tag == Tag.INTEGER
    assert value.data == b"\x02"


def test_implicit_context_specific():
    rest, value = OptTaggedParser.tagged(0).parse_der(IMPLICIT_INT, raw_content)
    assert rest == b""
    assert value == b"\x02"


def test_application_explicit():
    parser = OptTaggedParser(Class.APPLICATION, Tag(0))
    rest, value = parser.parse_der(APPLICATION_INT, lambda _h, data: Any.from_der(data))
    assert rest == b""
    assert value.data == b"\x02"


def test_explicit_string_content_ber():
    inner = Utf8String("abcd").to_der()
    data = bytes([0xA1, len(inner)]) + inner + b"\x05\x00"
    rest, value = OptTaggedParser.tagged(1).parse_ber(
        data, lambda _h, content: Utf8String.from_ber(content)
    )
    assert rest == b"\x05\x00"
    assert value == Utf8String("abcd")


def test_empty_input_gives_none():
    assert OptTaggedParser.tagged(0).parse_ber(b"", raw_content) == (b"", None)
    assert OptTaggedParser.tagged(0).parse_der(b"", raw_content) == (b"", None)


def test_other_tag_gives_none_and_keeps_input():
    rest, value = OptTaggedParser.tagged(1).parse_ber(EXPLICIT_INT, raw_content)
    assert value is None
    assert rest == EXPLICIT_INT


def test_same_tag_other_class_raises():
    with pytest.raises(UnexpectedClassError) as info:
        OptTaggedParser.application(0).parse_der(EXPLICIT_INT, raw_content)
    assert info.value.expected == Class.APPLICATION
    assert info.value.actual == Class.CONTEXT_SPECIFIC


def test_header_is_passed_to_content_parser():
    seen = []

    def record(header, data):
        seen.append(header)
        return b"", data

    rest, value = OptTaggedParser.tagged(0).parse_der(EXPLICIT_INT, record)
    assert rest == b""
    assert value == b"\x02\x01\x02"
    assert len(seen) == 1
    assert seen[0].tag == 0
    assert seen[0].class_ == Class.CONTEXT_SPECIFIC
    assert seen[0].constructed is True


def test_content_parser_errors_propagate():
    with pytest.raises(IncompleteError):
        OptTaggedParser.tagged(0).parse_der(
            IMPLICIT_INT, lambda _h, data: Any.from_der(data)
        )


def test_ber_accepts_indefinite_length_der_rejects_it():
    data = bytes([0xA0, 0x80, 0x02, 0x01, 0x02, 0x00, 0x00])
    rest, value = OptTaggedParser.tagged(0).parse_ber(data, raw_content)
    assert rest == b""
    assert value == b"\x02\x01\x02"
    with pytest.raises(InvalidLengthError):
        OptTaggedParser.tagged(0).parse_der(data, raw_content)


@pytest.mark.parametrize(
    "factory, expected",
    [
        (OptTaggedParser.universal, Class.UNIVERSAL),
        (OptTaggedParser.tagged, Class.CONTEXT_SPECIFIC),
        (OptTaggedParser.application, Class.APPLICATION),
        (OptTaggedParser.private, Class.PRIVATE),
    ],
)
def test_constructors(factory, expected):
    parser = factory(5)
    assert parser.class_ == expected
    assert parser.tag == 5
    assert parser == OptTaggedParser(expected, Tag(5))


def test_private_class_parse():
    data = bytes([0xE0, 0x01, 0x02])
    rest, value = OptTaggedParser.private(0).parse_ber(data, raw_content)
    assert rest == b""
    assert value == b"\x02"