import pytest

from asn1der.real import Real
from asn1der.sequence import Sequence
from asn1der.strings import PrintableString, Utf8String
from asn1der.tagged import (
    TaggedParser,
    TaggedParserBuilder,
    tagged_value_from_any,
    tagged_value_from_ber,
    tagged_value_from_der,
    tagged_value_to_der,
)
from asn1der.tlv import (
    Any,
    Class,
    ConstructExpectedError,
    ConstructUnexpectedError,
    InvalidLengthError,
    StringInvalidCharsetError,
    Tag,
    TagKind,
    UnexpectedClassError,
    UnexpectedTagError,
    application_explicit,
    der_tlv,
    private_explicit,
    tagged_explicit,
    tagged_implicit,
)

CTX = Class.CONTEXT_SPECIFIC


def _explicit_bytes(class_, tag, inner):
    return der_tlv(class_, True, tag, inner.to_der())


def test_explicit_context_wire_bytes_and_round_trip():
    value = tagged_explicit(Utf8String("ab"), 0)
    encoded = tagged_value_to_der(value)
    assert encoded == b"\xa0\x04\x0c\x02ab"
    rest, decoded = tagged_value_from_ber(encoded, TagKind.EXPLICIT, CTX, 0, Utf8String)
    assert rest == b""
    assert decoded == value


def test_application_explicit_identifier_and_class_check():
    value = application_explicit(Utf8String("ab"), 0)
    encoded = tagged_value_to_der(value)
    assert encoded[0] == 0x60
    _, decoded = tagged_value_from_der(
        encoded, TagKind.EXPLICIT, Class.APPLICATION, 0, Utf8String
    )
    assert decoded == value
    with pytest.raises(UnexpectedClassError):
        tagged_value_from_ber(encoded, TagKind.EXPLICIT, CTX, 0, Utf8String)


def test_private_explicit_identifier():
    encoded = tagged_value_to_der(private_explicit(Utf8String("ab"), 0))
    assert encoded[0] == 0xE0
    _, decoded = tagged_value_from_ber(encoded, TagKind.EXPLICIT, Class.PRIVATE, 0, Utf8String)
    assert decoded.inner == Utf8String("ab")


def test_explicit_wrong_tag_raises():
    encoded = _explicit_bytes(CTX, 0, Utf8String("ab"))
    with pytest.raises(UnexpectedTagError):
        tagged_value_from_ber(encoded, TagKind.EXPLICIT, CTX, 1, Utf8String)


def test_explicit_requires_constructed():
    encoded = der_tlv(CTX, False, 0, Utf8String("ab").to_der())
    _, any_ = Any.from_ber(encoded)
    with pytest.raises(ConstructExpectedError):
        tagged_value_from_any(any_, TagKind.EXPLICIT, CTX, 0, Utf8String)


def test_explicit_real_der_round_trip():
    value = tagged_explicit(Real.INFINITY, 4)
    encoded = tagged_value_to_der(value)
    _, decoded = tagged_value_from_der(encoded, TagKind.EXPLICIT, CTX, 4, Real)
    assert decoded.inner == Real.INFINITY
    assert decoded.tag == 4


def test_implicit_primitive_round_trip():
    value = tagged_implicit(Utf8String("ab"), 1)
    encoded = tagged_value_to_der(value)
    assert encoded == der_tlv(CTX, False, 1, b"ab")
    rest, decoded = tagged_value_from_ber(encoded, TagKind.IMPLICIT, CTX, 1, Utf8String)
    assert rest == b""
    assert decoded == value


def test_implicit_sequence_is_constructed():
    content = Utf8String("x").to_der()
    value = tagged_implicit(Sequence(content), 2)
    encoded = tagged_value_to_der(value)
    assert encoded == der_tlv(CTX, True, 2, content)
    _, decoded = tagged_value_from_der(encoded, TagKind.IMPLICIT, CTX, 2, Sequence)
    assert decoded.inner == Sequence(content)


def test_implicit_invalid_charset_raises():
    encoded = der_tlv(CTX, False, 0, b"*")
    with pytest.raises(StringInvalidCharsetError):
        tagged_value_from_ber(encoded, TagKind.IMPLICIT, CTX, 0, PrintableString)


def test_implicit_wrong_class_raises():
    encoded = der_tlv(Class.APPLICATION, False, 0, b"ab")
    with pytest.raises(UnexpectedClassError):
        tagged_value_from_der(encoded, TagKind.IMPLICIT, CTX, 0, Utf8String)


def test_indefinite_length_allowed_in_ber_only():
    data = b"\xa0\x80" + Utf8String("ab").to_der() + b"\x00\x00"
    _, decoded = tagged_value_from_ber(data, TagKind.EXPLICIT, CTX, 0, Utf8String)
    assert decoded.inner == Utf8String("ab")
    with pytest.raises(InvalidLengthError):
        tagged_value_from_der(data, TagKind.EXPLICIT, CTX, 0, Utf8String)


def test_tagged_parser_from_ber_explicit_keeps_header():
    encoded = _explicit_bytes(Class.APPLICATION, 7, Utf8String("hi")) + b"\x05\x00"
    rest, parsed = TaggedParser.from_ber(encoded, TagKind.EXPLICIT, Utf8String)
    assert rest == b"\x05\x00"
    assert parsed.class_ == Class.APPLICATION
    assert parsed.tag == 7
    assert parsed.inner == Utf8String("hi")


def test_tagged_parser_parse_checks_class_and_tag():
    encoded = _explicit_bytes(CTX, 3, Utf8String("hi"))
    _, parsed = TaggedParser.parse_der(CTX, Tag(3), encoded, TagKind.EXPLICIT, Utf8String)
    assert parsed.inner == Utf8String("hi")
    with pytest.raises(UnexpectedClassError):
        TaggedParser.parse_ber(Class.PRIVATE, Tag(3), encoded, TagKind.EXPLICIT, Utf8String)
    with pytest.raises(UnexpectedTagError):
        TaggedParser.parse_ber(CTX, Tag(4), encoded, TagKind.EXPLICIT, Utf8String)


def test_tagged_parser_assert_methods():
    _, parsed = TaggedParser.from_der(
        der_tlv(CTX, False, 2, b"ok"), TagKind.IMPLICIT, Utf8String
    )
    assert parsed.inner == Utf8String("ok")
    with pytest.raises(UnexpectedTagError):
        parsed.assert_tag(Tag(9))
    with pytest.raises(UnexpectedClassError):
        parsed.assert_class(Class.UNIVERSAL)


def test_tagged_parser_implicit_der_rejects_constructed_string():
    encoded = der_tlv(CTX, True, 2, b"ok")
    with pytest.raises(ConstructUnexpectedError):
        TaggedParser.from_der(encoded, TagKind.IMPLICIT, Utf8String)


def test_tagged_parser_to_der_round_trips():
    explicit = TaggedParser.new_explicit(CTX, 3, Utf8String("hi"))
    _, parsed = TaggedParser.from_der(explicit.to_der(), TagKind.EXPLICIT, Utf8String)
    assert parsed.inner == Utf8String("hi")
    assert parsed.tag == 3
    assert parsed.header.constructed is True

    implicit = TaggedParser.new_implicit(Class.APPLICATION, False, 5, Utf8String("hi"))
    assert implicit.to_der() == der_tlv(Class.APPLICATION, False, 5, b"hi")


def test_from_and_then_applies_op_to_content():
    encoded = _explicit_bytes(CTX, 0, Utf8String("ab")) + b"\x05\x00"
    rest, value = TaggedParser.from_der_and_then(CTX, 0, encoded, Utf8String.from_der)
    assert rest == b"\x05\x00"
    assert value == Utf8String("ab")
    rest, value = TaggedParser.from_ber_and_then(CTX, 0, encoded, Utf8String.from_ber)
    assert value == Utf8String("ab")
    with pytest.raises(UnexpectedTagError):
        TaggedParser.from_ber_and_then(CTX, 1, encoded, Utf8String.from_ber)


def test_builder_explicit_der_parser():
    parser = (
        TaggedParserBuilder.explicit().with_class(CTX).with_tag(Tag(0)).der_parser(Utf8String)
    )
    rest, tagged = parser(_explicit_bytes(CTX, 0, Utf8String("ab")))
    assert rest == b""
    assert tagged.tag == Tag(0)
    assert tagged.inner == Utf8String("ab")


def test_builder_implicit_ber_parser_and_defaults():
    builder = TaggedParserBuilder.implicit()
    assert builder.class_ == Class.UNIVERSAL
    assert builder.tag == 0
    parser = builder.with_class(Class.APPLICATION).with_tag(5).ber_parser(Utf8String)
    _, tagged = parser(der_tlv(Class.APPLICATION, False, 5, b"ok"))
    assert tagged.inner == Utf8String("ok")
    assert tagged.kind is TagKind.IMPLICIT
    with pytest.raises(UnexpectedClassError):
        parser(der_tlv(CTX, False, 5, b"ok"))