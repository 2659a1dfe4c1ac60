import pytest

from asn1der.sequence import Sequence, iterate_items
from asn1der.strings import PrintableString, Utf8String
from asn1der.tlv import (
    Any,
    ConstructExpectedError,
    IncompleteError,
    InvalidLengthError,
    Tag,
    UnexpectedTagError,
)

INTEGERS = bytes([0x30, 0x06, 0x02, 0x01, 0x01, 0x02, 0x01, 0x02])


def test_iterate_items_over_integer_content():
    items = list(iterate_items(INTEGERS[2:], Any, der=True))
    assert [item.tag for item in items] == [Tag.INTEGER, Tag.INTEGER]
    assert [item.data for item in items] == [b"\x01", b"\x02"]


def test_iterate_items_empty_content():
    assert list(iterate_items(b"", Any, der=False)) == []


def test_iterate_items_stops_on_error():
    it = iterate_items(b"\x02\x01\x01\x02\x05\x01", Any, der=False)
    first = next(it)
    assert first.data == b"\x01"
    with pytest.raises(IncompleteError):
        next(it)
    with pytest.raises(StopIteration):
        next(it)


def test_iterate_items_der_rejects_indefinite_length():
    data = b"\x30\x80\x00\x00"
    ber_items = list(iterate_items(data, Any, der=False))
    assert ber_items[0].header.length is None
    with pytest.raises(InvalidLengthError):
        list(iterate_items(data, Any, der=True))


def test_from_der_parses_content():
    rest, seq = Sequence.from_der(INTEGERS + b"\xff")
    assert rest == b"\xff"
    assert seq.content == INTEGERS[2:]


def test_from_ber_parses_content():
    rest, seq = Sequence.from_ber(INTEGERS)
    assert rest == b""
    assert seq.content == INTEGERS[2:]


def test_from_any_wrong_tag():
    _, any_ = Any.from_ber(b"\x31\x00")
    with pytest.raises(UnexpectedTagError):
        Sequence.from_any(any_)


def test_from_any_requires_constructed():
    _, any_ = Any.from_ber(b"\x10\x00")
    with pytest.raises(ConstructExpectedError):
        Sequence.from_any(any_)


def test_from_iter_to_der_builds_content():
    seq = Sequence.from_iter_to_der([Utf8String("ab"), Utf8String("cd")])
    assert seq.content == b"\x0c\x02ab\x0c\x02cd"
    assert seq.to_der() == b"\x30\x08\x0c\x02ab\x0c\x02cd"


def test_from_iter_to_der_rejects_unencodable():
    with pytest.raises(TypeError):
        Sequence.from_iter_to_der([object()])


def test_der_sequence_of_round_trip():
    values = [Utf8String("one"), Utf8String("two"), Utf8String("three")]
    seq = Sequence.from_iter_to_der(values)
    _, parsed = Sequence.from_der(seq.to_der())
    assert parsed == seq
    assert parsed.der_sequence_of(Utf8String) == values
    assert parsed.ber_sequence_of(Utf8String) == values


def test_der_iter_type_mismatch():
    seq = Sequence(INTEGERS[2:])
    with pytest.raises(UnexpectedTagError):
        seq.der_sequence_of(Utf8String)


def test_ber_iter_yields_items_lazily():
    seq = Sequence.from_iter_to_der([PrintableString("A"), PrintableString("B")])
    it = seq.ber_iter(PrintableString)
    assert next(it) == PrintableString("A")
    assert next(it) == PrintableString("B")
    with pytest.raises(StopIteration):
        next(it)


def _pair(data):
    data, a = Utf8String.from_der(data)
    data, b = Utf8String.from_der(data)
    return data, (a.data, b.data)


def test_from_der_and_then():
    encoded = Sequence.from_iter_to_der([Utf8String("x"), Utf8String("y")]).to_der()
    rest, value = Sequence.from_der_and_then(encoded + b"\x00", _pair)
    assert rest == b"\x00"
    assert value == ("x", "y")


def test_from_ber_and_then_discards_unread_content():
    seq = Sequence.from_iter_to_der([Utf8String("x"), Utf8String("y"), Utf8String("z")])
    rest, value = Sequence.from_ber_and_then(seq.to_der(), _pair)
    assert rest == b""
    assert value == ("x", "y")


def test_and_then_and_parse_see_content():
    seq = Sequence.from_iter_to_der([Utf8String("x"), Utf8String("y")])
    assert seq.and_then(len) == len(seq.content)
    rest, value = seq.parse(_pair)
    assert rest == b""
    assert value == ("x", "y")


def test_long_content_round_trip():
    values = [Utf8String("a" * 50) for _ in range(4)]
    seq = Sequence.from_iter_to_der(values)
    encoded = seq.to_der()
    assert encoded[1] & 0x80
    rest, parsed = Sequence.from_der(encoded)
    assert rest == b""
    assert parsed.der_sequence_of(Utf8String) == values


def test_empty_sequence_encoding():
    assert Sequence().to_der() == b"\x30\x00"
    _, parsed = Sequence.from_der(b"\x30\x00")
    assert parsed.der_sequence_of(Any) == []