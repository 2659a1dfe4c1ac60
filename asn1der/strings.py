"""ASN.1 restricted character string types (X.680 sections 37 and 41)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar

from asn1der.tlv import (
    Any,
    Class,
    StringInvalidCharsetError,
    Tag,
    der_tlv,
)

_PRINTABLE = frozenset(
    b"abcdefghijklmnopqrstuvwxyz"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"0123456789"
    b" '()+,-./:=?"
)
_NUMERIC = frozenset(b"0123456789 ")


def _require(data: bytes, accept: Callable[[int], bool]) -> None:
    if not all(accept(octet) for octet in data):
        raise StringInvalidCharsetError()


def _is_ascii(octet: int) -> bool:
    return octet < 0x80


def _is_visible(octet: int) -> bool:
    return 0x20 <= octet <= 0x7F


def _decode_utf8(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StringInvalidCharsetError() from exc


@dataclass(frozen=True)
class Asn1String:
    """Base of the string types: a text value carried under a universal tag."""

    data: str

    TAG: ClassVar[Tag]

    def __post_init__(self) -> None:
        if not isinstance(self.data, str):
            raise TypeError(f"string value expected, got {type(self.data).__name__}")
        try:
            self.data.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise StringInvalidCharsetError() from exc

    def __str__(self) -> str:
        return self.data

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        """Raise StringInvalidCharsetError if ``data`` is not valid for this type."""
        _decode_utf8(bytes(data))

    @classmethod
    def _decode(cls, data: bytes) -> str:
        cls.test_valid_charset(data)
        return _decode_utf8(data)

    @classmethod
    def from_any(cls, any_: Any) -> Asn1String:
        """Decode the string from a parsed object."""
        any_.header.assert_tag(cls.TAG)
        return cls(cls._decode(any_.data))

    @classmethod
    def check_constraints(cls, any_: Any) -> None:
        """Check DER rules: strings must use the primitive encoding."""
        any_.header.assert_primitive()

    @classmethod
    def from_ber(cls, data: bytes) -> tuple[bytes, Asn1String]:
        rest, any_ = Any.from_ber(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_der(cls, data: bytes) -> tuple[bytes, Asn1String]:
        rest, any_ = Any.from_der(data)
        cls.check_constraints(any_)
        return rest, cls.from_any(any_)

    def der_content(self) -> bytes:
        """Encode the content octets."""
        return self.data.encode("utf-8")

    def to_der(self) -> bytes:
        """Encode the complete object."""
        return der_tlv(Class.UNIVERSAL, False, self.TAG, self.der_content())


class Utf8String(Asn1String):
    """UTF8String: any valid UTF-8 text."""

    TAG = Tag.UTF8_STRING


class NumericString(Asn1String):
    """NumericString: digits and space."""

    TAG = Tag.NUMERIC_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _NUMERIC.__contains__)


class PrintableString(Asn1String):
    """PrintableString: letters, digits, space and ``'()+,-./:=?``."""

    TAG = Tag.PRINTABLE_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _PRINTABLE.__contains__)


class Ia5String(Asn1String):
    """IA5String: 7-bit ASCII."""

    TAG = Tag.IA5_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_ascii)


class GeneralString(Asn1String):
    """GeneralString, restricted to ASCII."""

    TAG = Tag.GENERAL_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_ascii)


class GraphicString(Asn1String):
    """GraphicString, restricted to ASCII."""

    TAG = Tag.GRAPHIC_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_ascii)


class TeletexString(Asn1String):
    """TeletexString, restricted to octets 0x20 to 0x7f."""

    TAG = Tag.TELETEX_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_visible)


class VideotexString(Asn1String):
    """VideotexString, restricted to octets 0x20 to 0x7f."""

    TAG = Tag.VIDEOTEX_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_visible)


class VisibleString(Asn1String):
    """VisibleString: octets 0x20 to 0x7f."""

    TAG = Tag.VISIBLE_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        _require(bytes(data), _is_visible)


class BmpString(Asn1String):
    """BMPString: text stored as big-endian UTF-16."""

    TAG = Tag.BMP_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        data = bytes(data)
        if len(data) % 2:
            raise StringInvalidCharsetError()
        try:
            data.decode("utf-16-be")
        except UnicodeDecodeError as exc:
            raise StringInvalidCharsetError() from exc

    @classmethod
    def _decode(cls, data: bytes) -> str:
        # A trailing odd octet is read as a code unit on its own.
        units = [
            int.from_bytes(data[pos : pos + 2], "big") for pos in range(0, len(data), 2)
        ]
        raw = b"".join(unit.to_bytes(2, "big") for unit in units)
        try:
            return raw.decode("utf-16-be")
        except UnicodeDecodeError as exc:
            raise StringInvalidCharsetError() from exc

    def der_content(self) -> bytes:
        return self.data.encode("utf-16-be")


class UniversalString(Asn1String):
    """UniversalString: text stored as big-endian UCS-4."""

    TAG = Tag.UNIVERSAL_STRING

    @classmethod
    def test_valid_charset(cls, data: bytes) -> None:
        cls._decode(bytes(data))

    @classmethod
    def _decode(cls, data: bytes) -> str:
        if len(data) % 4:
            raise StringInvalidCharsetError()
        chars = []
        for pos in range(0, len(data), 4):
            code = int.from_bytes(data[pos : pos + 4], "big")
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise StringInvalidCharsetError()
            chars.append(chr(code))
        return "".join(chars)

    def der_content(self) -> bytes:
        return b"".join(ord(char).to_bytes(4, "big") for char in self.data)


def str_from_any(any_: Any) -> str:
    """Decode a UTF8String object straight to a Python string."""
    any_.header.assert_tag(Tag.UTF8_STRING)
    return Utf8String.from_any(any_).data


def str_to_der(value: str) -> bytes:
    """Encode a Python string as a DER UTF8String."""
    return Utf8String(value).to_der()