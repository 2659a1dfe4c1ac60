"""Tag-length-value primitives: classes, tags, headers, raw objects and errors."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Any as _AnyType
from typing import ClassVar

_MAX_TAG = 0xFFFF_FFFF


class Class(enum.IntEnum):
    """ASN.1 tag class, as stored in the two high bits of the identifier octet."""

    UNIVERSAL = 0
    APPLICATION = 1
    CONTEXT_SPECIFIC = 2
    PRIVATE = 3


class Tag(int):
    """An ASN.1 tag number (0 to 2**32 - 1)."""

    __slots__ = ()

    END_OF_CONTENT: ClassVar[Tag]
    BOOLEAN: ClassVar[Tag]
    INTEGER: ClassVar[Tag]
    BIT_STRING: ClassVar[Tag]
    OCTET_STRING: ClassVar[Tag]
    NULL: ClassVar[Tag]
    OID: ClassVar[Tag]
    OBJECT_DESCRIPTOR: ClassVar[Tag]
    EXTERNAL: ClassVar[Tag]
    REAL: ClassVar[Tag]
    ENUMERATED: ClassVar[Tag]
    EMBEDDED_PDV: ClassVar[Tag]
    UTF8_STRING: ClassVar[Tag]
    RELATIVE_OID: ClassVar[Tag]
    SEQUENCE: ClassVar[Tag]
    SET: ClassVar[Tag]
    NUMERIC_STRING: ClassVar[Tag]
    PRINTABLE_STRING: ClassVar[Tag]
    TELETEX_STRING: ClassVar[Tag]
    VIDEOTEX_STRING: ClassVar[Tag]
    IA5_STRING: ClassVar[Tag]
    UTC_TIME: ClassVar[Tag]
    GENERALIZED_TIME: ClassVar[Tag]
    GRAPHIC_STRING: ClassVar[Tag]
    VISIBLE_STRING: ClassVar[Tag]
    GENERAL_STRING: ClassVar[Tag]
    UNIVERSAL_STRING: ClassVar[Tag]
    BMP_STRING: ClassVar[Tag]

    def __new__(cls, value: int = 0) -> Tag:
        number = int(value)
        if not 0 <= number <= _MAX_TAG:
            raise ValueError(f"tag number out of range: {number}")
        return super().__new__(cls, number)

    def __repr__(self) -> str:
        name = _TAG_NAMES.get(int(self))
        return f"Tag.{name}" if name else f"Tag({int(self)})"

    __str__ = __repr__


_TAG_NAMES = {
    0: "END_OF_CONTENT",
    1: "BOOLEAN",
    2: "INTEGER",
    3: "BIT_STRING",
    4: "OCTET_STRING",
    5: "NULL",
    6: "OID",
    7: "OBJECT_DESCRIPTOR",
    8: "EXTERNAL",
    9: "REAL",
    10: "ENUMERATED",
    11: "EMBEDDED_PDV",
    12: "UTF8_STRING",
    13: "RELATIVE_OID",
    16: "SEQUENCE",
    17: "SET",
    18: "NUMERIC_STRING",
    19: "PRINTABLE_STRING",
    20: "TELETEX_STRING",
    21: "VIDEOTEX_STRING",
    22: "IA5_STRING",
    23: "UTC_TIME",
    24: "GENERALIZED_TIME",
    25: "GRAPHIC_STRING",
    26: "VISIBLE_STRING",
    27: "GENERAL_STRING",
    28: "UNIVERSAL_STRING",
    30: "BMP_STRING",
}

for _number, _name in _TAG_NAMES.items():
    setattr(Tag, _name, Tag(_number))


class TagKind(enum.Enum):
    """Whether a tagged value wraps its inner encoding or replaces its tag."""

    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


class Asn1Error(ValueError):
    """Base class for all encoding and decoding errors."""


class IncompleteError(Asn1Error):
    """Input ended before a complete object could be read."""

    def __init__(self, needed: int = 1) -> None:
        super().__init__(f"incomplete input: {needed} more byte(s) needed")
        self.needed = needed


class InvalidValueError(Asn1Error):
    """The content of an object is not valid for its type."""

    def __init__(self, tag: Tag | None, message: str) -> None:
        super().__init__(f"invalid value for {tag!r}: {message}" if tag is not None else message)
        self.tag = tag
        self.message = message


class InvalidLengthError(Asn1Error):
    """A length is malformed or not allowed here."""

    def __init__(self, message: str = "invalid length") -> None:
        super().__init__(message)


class UnexpectedTagError(Asn1Error):
    """The object does not carry the expected tag."""

    def __init__(self, expected: Tag | None, actual: Tag) -> None:
        super().__init__(f"unexpected tag: expected {expected!r}, got {actual!r}")
        self.expected = expected
        self.actual = actual


class UnexpectedClassError(Asn1Error):
    """The object does not carry the expected class."""

    def __init__(self, expected: Class | None, actual: Class) -> None:
        shown = expected.name if expected is not None else "?"
        super().__init__(f"unexpected class: expected {shown}, got {actual.name}")
        self.expected = expected
        self.actual = actual


class ConstructExpectedError(Asn1Error):
    """A constructed encoding was required but a primitive one was found."""

    def __init__(self, message: str = "constructed encoding expected") -> None:
        super().__init__(message)


class ConstructUnexpectedError(Asn1Error):
    """A primitive encoding was required but a constructed one was found."""

    def __init__(self, message: str = "primitive encoding expected") -> None:
        super().__init__(message)


class StringInvalidCharsetError(Asn1Error):
    """String content contains characters outside the type's character set."""

    def __init__(self, message: str = "invalid character set for string") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Header:
    """Identifier and length of an encoded object; ``length`` is None when indefinite."""

    class_: Class
    constructed: bool
    tag: Tag
    length: int | None

    def __post_init__(self) -> None:
        object.__setattr__(self, "class_", Class(self.class_))
        object.__setattr__(self, "tag", Tag(self.tag))
        object.__setattr__(self, "constructed", bool(self.constructed))

    def assert_tag(self, tag: int) -> None:
        """Raise UnexpectedTagError unless the header has ``tag``."""
        if self.tag != tag:
            raise UnexpectedTagError(Tag(tag), self.tag)

    def assert_class(self, class_: Class) -> None:
        """Raise UnexpectedClassError unless the header has ``class_``."""
        if self.class_ != class_:
            raise UnexpectedClassError(Class(class_), self.class_)

    def assert_primitive(self) -> None:
        """Raise ConstructUnexpectedError if the encoding is constructed."""
        if self.constructed:
            raise ConstructUnexpectedError()

    def assert_constructed(self) -> None:
        """Raise ConstructExpectedError if the encoding is primitive."""
        if not self.constructed:
            raise ConstructExpectedError()

    def assert_definite(self) -> None:
        """Raise InvalidLengthError if the length is indefinite."""
        if self.length is None:
            raise InvalidLengthError("definite length expected")

    def with_tag(self, tag: int) -> Header:
        """Return a copy of this header carrying another tag."""
        return replace(self, tag=Tag(tag))

    def to_der(self) -> bytes:
        """Encode the identifier and length octets."""
        if self.length is None:
            raise InvalidLengthError("indefinite length cannot be encoded in DER")
        return encode_header(self.class_, self.constructed, self.tag, self.length)


@dataclass(frozen=True)
class Any:
    """An encoded object whose content has not been interpreted."""

    header: Header
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def tag(self) -> Tag:
        return self.header.tag

    @property
    def class_(self) -> Class:
        return self.header.class_

    @classmethod
    def from_ber(cls, data: bytes) -> tuple[bytes, Any]:
        """Parse one BER object; return the remaining input and the object."""
        return _parse_tlv(bytes(data), der=False)

    @classmethod
    def from_der(cls, data: bytes) -> tuple[bytes, Any]:
        """Parse one DER object (definite, minimal lengths and tags)."""
        return _parse_tlv(bytes(data), der=True)

    def to_der(self) -> bytes:
        """Encode the object with a definite length."""
        return der_tlv(self.header.class_, self.header.constructed, self.header.tag, self.data)


def encode_length(length: int) -> bytes:
    """Encode a definite length in its shortest form."""
    if length < 0:
        raise InvalidLengthError("length cannot be negative")
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    if len(body) > 0x7E:
        raise InvalidLengthError("length too large")
    return bytes([0x80 | len(body)]) + body


def encode_header(class_: Class, constructed: bool, tag: int, length: int) -> bytes:
    """Encode identifier and length octets."""
    number = int(Tag(tag))
    first = (int(Class(class_)) << 6) | (0x20 if constructed else 0)
    if number < 0x1F:
        identifier = bytes([first | number])
    else:
        groups = []
        while True:
            groups.append(number & 0x7F)
            number >>= 7
            if not number:
                break
        groups.reverse()
        tail = [g | 0x80 for g in groups[:-1]] + [groups[-1]]
        identifier = bytes([first | 0x1F, *tail])
    return identifier + encode_length(length)


def der_tlv(class_: Class, constructed: bool, tag: int, content: bytes) -> bytes:
    """Encode a complete object from its header fields and content."""
    content = bytes(content)
    return encode_header(class_, constructed, tag, len(content)) + content


def _parse_header(data: bytes, der: bool) -> tuple[Header, int]:
    if not data:
        raise IncompleteError(1)
    first = data[0]
    class_ = Class(first >> 6)
    constructed = bool(first & 0x20)
    number = first & 0x1F
    pos = 1
    if number == 0x1F:
        number = 0
        started = False
        while True:
            if pos >= len(data):
                raise IncompleteError(1)
            octet = data[pos]
            pos += 1
            if der and not started and octet == 0x80:
                raise InvalidValueError(None, "non-minimal tag encoding")
            started = True
            number = (number << 7) | (octet & 0x7F)
            if number > _MAX_TAG:
                raise InvalidValueError(None, "tag number too large")
            if not octet & 0x80:
                break
        if der and number < 0x1F:
            raise InvalidValueError(None, "non-minimal tag encoding")

    if pos >= len(data):
        raise IncompleteError(1)
    octet = data[pos]
    pos += 1
    length: int | None
    if octet < 0x80:
        length = octet
    elif octet == 0x80:
        if der:
            raise InvalidLengthError("indefinite length not allowed in DER")
        if not constructed:
            raise ConstructExpectedError("indefinite length requires constructed encoding")
        length = None
    elif octet == 0xFF:
        raise InvalidLengthError("reserved length octet")
    else:
        count = octet & 0x7F
        if pos + count > len(data):
            raise IncompleteError(pos + count - len(data))
        raw = data[pos : pos + count]
        pos += count
        length = int.from_bytes(raw, "big")
        if der and (raw[0] == 0 or length < 0x80):
            raise InvalidLengthError("non-minimal length encoding")
    return Header(class_, constructed, Tag(number), length), pos


def _scan_indefinite(data: bytes, start: int) -> tuple[bytes, int]:
    pos = start
    while True:
        if data[pos : pos + 2] == b"\x00\x00":
            return data[start:pos], pos + 2
        if pos >= len(data):
            raise IncompleteError(2)
        rest, _ = _parse_tlv(data[pos:], der=False)
        pos = len(data) - len(rest)


def _parse_tlv(data: bytes, der: bool) -> tuple[bytes, Any]:
    header, pos = _parse_header(data, der)
    if header.length is None:
        content, end = _scan_indefinite(data, pos)
        return data[end:], Any(header, content)
    end = pos + header.length
    if end > len(data):
        raise IncompleteError(end - len(data))
    return data[end:], Any(header, data[pos:end])


@dataclass(frozen=True)
class TaggedValue:
    """A value carried under an outer class and tag, explicitly or implicitly."""

    inner: _AnyType
    kind: TagKind
    class_: Class
    tag: Tag

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TagKind(self.kind))
        object.__setattr__(self, "class_", Class(self.class_))
        object.__setattr__(self, "tag", Tag(self.tag))

    @classmethod
    def explicit(cls, inner: _AnyType, class_: Class, tag: int) -> TaggedValue:
        """Build an EXPLICIT tagged value."""
        return cls(inner, TagKind.EXPLICIT, class_, tag)

    @classmethod
    def implicit(cls, inner: _AnyType, class_: Class, tag: int) -> TaggedValue:
        """Build an IMPLICIT tagged value."""
        return cls(inner, TagKind.IMPLICIT, class_, tag)


def tagged_explicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[n] EXPLICIT`` value in the context-specific class."""
    return TaggedValue.explicit(inner, Class.CONTEXT_SPECIFIC, tag)


def tagged_implicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[n] IMPLICIT`` value in the context-specific class."""
    return TaggedValue.implicit(inner, Class.CONTEXT_SPECIFIC, tag)


def application_explicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[APPLICATION n] EXPLICIT`` value."""
    return TaggedValue.explicit(inner, Class.APPLICATION, tag)


def application_implicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[APPLICATION n] IMPLICIT`` value."""
    return TaggedValue.implicit(inner, Class.APPLICATION, tag)


def private_explicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[PRIVATE n] EXPLICIT`` value."""
    return TaggedValue.explicit(inner, Class.PRIVATE, tag)


def private_implicit(inner: _AnyType, tag: int) -> TaggedValue:
    """``[PRIVATE n] IMPLICIT`` value."""
    return TaggedValue.implicit(inner, Class.PRIVATE, tag)