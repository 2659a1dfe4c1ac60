"""Parsing and encoding of tagged values, EXPLICIT or IMPLICIT."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any as _AnyType
from typing import Callable, TypeVar

from asn1der.tlv import (
    Any,
    Class,
    Header,
    Tag,
    TagKind,
    TaggedValue,
    UnexpectedClassError,
    der_tlv,
)

T = TypeVar("T")

_CONSTRUCTED_TAGS = (Tag.SEQUENCE, Tag.SET)


def _assert_class(any_: Any, class_: Class) -> None:
    expected = Class(class_)
    if any_.class_ != expected:
        raise UnexpectedClassError(expected, any_.class_)


def _retag(any_: Any, tag: int) -> Any:
    """The same object, seen under the tag of the type it implicitly carries."""
    return Any(any_.header.with_tag(tag), any_.data)


def _check_der(inner_type: _AnyType, any_: Any) -> None:
    check = getattr(inner_type, "check_constraints", None)
    if check is not None:
        check(any_)


def _implicit_der(inner: _AnyType, class_: Class, tag: int) -> bytes:
    """Encode ``inner`` with its own identifier replaced by ``class_`` and ``tag``."""
    _, parsed = Any.from_der(bytes(inner.to_der()))
    # X.690 8.14.3: constructed if the base encoding is constructed.
    constructed = parsed.tag in _CONSTRUCTED_TAGS
    return der_tlv(class_, constructed, tag, parsed.data)


def _explicit_der(inner: _AnyType, class_: Class, tag: int) -> bytes:
    return der_tlv(class_, True, tag, bytes(inner.to_der()))


def tagged_value_from_any(
    any_: Any, kind: TagKind, class_: Class, tag: int, inner_type: _AnyType
) -> TaggedValue:
    """Decode a tagged value of the given kind, class and tag from a parsed object.

    EXPLICIT content is decoded as a complete BER object of ``inner_type``;
    IMPLICIT content is decoded as ``inner_type`` under its own tag.
    """
    kind = TagKind(kind)
    any_.header.assert_tag(tag)
    if kind is TagKind.EXPLICIT:
        any_.header.assert_constructed()
        _assert_class(any_, class_)
        _, inner = inner_type.from_ber(any_.data)
        return TaggedValue.explicit(inner, class_, tag)
    _assert_class(any_, class_)
    inner = inner_type.from_any(_retag(any_, inner_type.TAG))
    return TaggedValue.implicit(inner, class_, tag)


def tagged_value_from_ber(
    data: bytes, kind: TagKind, class_: Class, tag: int, inner_type: _AnyType
) -> tuple[bytes, TaggedValue]:
    """Parse a BER tagged value; return the remaining input and the value."""
    rest, any_ = Any.from_ber(data)
    return rest, tagged_value_from_any(any_, kind, class_, tag, inner_type)


def tagged_value_from_der(
    data: bytes, kind: TagKind, class_: Class, tag: int, inner_type: _AnyType
) -> tuple[bytes, TaggedValue]:
    """Parse a DER tagged value; return the remaining input and the value."""
    kind = TagKind(kind)
    rest, any_ = Any.from_der(data)
    any_.header.assert_tag(tag)
    if kind is TagKind.EXPLICIT:
        any_.header.assert_constructed()
        _assert_class(any_, class_)
        _, inner = inner_type.from_der(any_.data)
        return rest, TaggedValue.explicit(inner, class_, tag)
    _assert_class(any_, class_)
    inner = inner_type.from_any(_retag(any_, inner_type.TAG))
    return rest, TaggedValue.implicit(inner, class_, tag)


def tagged_value_to_der(value: TaggedValue) -> bytes:
    """Encode a tagged value as DER."""
    if value.kind is TagKind.EXPLICIT:
        return _explicit_der(value.inner, value.class_, value.tag)
    return _implicit_der(value.inner, value.class_, value.tag)


@dataclass(frozen=True)
class TaggedParser:
    """A tagged value together with the outer header it was read with."""

    header: Header
    inner: _AnyType
    kind: TagKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TagKind(self.kind))

    @property
    def class_(self) -> Class:
        return self.header.class_

    @property
    def tag(self) -> Tag:
        return self.header.tag

    @classmethod
    def new_explicit(cls, class_: Class, tag: int, inner: _AnyType) -> TaggedParser:
        """Build an EXPLICIT tagged value to be encoded."""
        return cls(Header(class_, True, Tag(tag), 0), inner, TagKind.EXPLICIT)

    @classmethod
    def new_implicit(
        cls, class_: Class, constructed: bool, tag: int, inner: _AnyType
    ) -> TaggedParser:
        """Build an IMPLICIT tagged value to be encoded."""
        return cls(Header(class_, constructed, Tag(tag), 0), inner, TagKind.IMPLICIT)

    def assert_class(self, class_: Class) -> None:
        """Raise UnexpectedClassError unless the outer class is ``class_``."""
        self.header.assert_class(class_)

    def assert_tag(self, tag: int) -> None:
        """Raise UnexpectedTagError unless the outer tag is ``tag``."""
        self.header.assert_tag(tag)

    @classmethod
    def from_ber(
        cls, data: bytes, kind: TagKind, inner_type: _AnyType
    ) -> tuple[bytes, TaggedParser]:
        """Parse a BER tagged object of any class and tag."""
        kind = TagKind(kind)
        rest, any_ = Any.from_ber(data)
        if kind is TagKind.EXPLICIT:
            _, inner = inner_type.from_ber(any_.data)
        else:
            inner = inner_type.from_any(_retag(any_, inner_type.TAG))
        return rest, cls(any_.header, inner, kind)

    @classmethod
    def from_der(
        cls, data: bytes, kind: TagKind, inner_type: _AnyType
    ) -> tuple[bytes, TaggedParser]:
        """Parse a DER tagged object of any class and tag."""
        kind = TagKind(kind)
        rest, any_ = Any.from_der(data)
        if kind is TagKind.EXPLICIT:
            _, inner = inner_type.from_der(any_.data)
        else:
            retagged = _retag(any_, inner_type.TAG)
            _check_der(inner_type, retagged)
            inner = inner_type.from_any(retagged)
        return rest, cls(any_.header, inner, kind)

    @classmethod
    def parse_ber(
        cls, class_: Class, tag: int, data: bytes, kind: TagKind, inner_type: _AnyType
    ) -> tuple[bytes, TaggedParser]:
        """Parse BER input, requiring the given outer class and tag."""
        rest, parsed = cls.from_ber(data, kind, inner_type)
        parsed.assert_class(class_)
        parsed.assert_tag(tag)
        return rest, parsed

    @classmethod
    def parse_der(
        cls, class_: Class, tag: int, data: bytes, kind: TagKind, inner_type: _AnyType
    ) -> tuple[bytes, TaggedParser]:
        """Parse DER input, requiring the given outer class and tag."""
        rest, parsed = cls.from_der(data, kind, inner_type)
        parsed.assert_class(class_)
        parsed.assert_tag(tag)
        return rest, parsed

    @classmethod
    def from_ber_and_then(
        cls, class_: Class, tag: int, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a BER tagged object and apply ``op`` to its content.

        ``op`` returns ``(remaining, value)``; what it leaves unread is
        discarded, and the input following the object is returned.
        """
        rest, any_ = Any.from_ber(data)
        any_.header.assert_class(class_)
        any_.header.assert_tag(tag)
        _, value = op(any_.data)
        return rest, value

    @classmethod
    def from_der_and_then(
        cls, class_: Class, tag: int, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a DER tagged object and apply ``op`` to its content."""
        rest, any_ = Any.from_der(data)
        any_.header.assert_class(class_)
        any_.header.assert_tag(tag)
        _, value = op(any_.data)
        return rest, value

    def to_der(self) -> bytes:
        """Encode the value under its outer class and tag."""
        if self.kind is TagKind.EXPLICIT:
            return _explicit_der(self.inner, self.class_, self.tag)
        return _implicit_der(self.inner, self.class_, self.tag)


@dataclass(frozen=True)
class TaggedParserBuilder:
    """Builds parsing functions for tagged values with an expected class and tag."""

    kind: TagKind
    class_: Class = Class.UNIVERSAL
    tag: Tag = Tag(0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TagKind(self.kind))
        object.__setattr__(self, "class_", Class(self.class_))
        object.__setattr__(self, "tag", Tag(self.tag))

    @classmethod
    def explicit(cls) -> TaggedParserBuilder:
        """A builder for EXPLICIT tagged values."""
        return cls(TagKind.EXPLICIT)

    @classmethod
    def implicit(cls) -> TaggedParserBuilder:
        """A builder for IMPLICIT tagged values."""
        return cls(TagKind.IMPLICIT)

    def with_class(self, class_: Class) -> TaggedParserBuilder:
        """Set the expected class."""
        return replace(self, class_=Class(class_))

    def with_tag(self, tag: int) -> TaggedParserBuilder:
        """Set the expected tag."""
        return replace(self, tag=Tag(tag))

    def ber_parser(self, inner_type: _AnyType) -> Callable[[bytes], tuple[bytes, TaggedParser]]:
        """Return a function parsing BER input with the builder's parameters."""

        def parse(data: bytes) -> tuple[bytes, TaggedParser]:
            return TaggedParser.parse_ber(self.class_, self.tag, data, self.kind, inner_type)

        return parse

    def der_parser(self, inner_type: _AnyType) -> Callable[[bytes], tuple[bytes, TaggedParser]]:
        """Return a function parsing DER input with the builder's parameters."""

        def parse(data: bytes) -> tuple[bytes, TaggedParser]:
            return TaggedParser.parse_der(self.class_, self.tag, data, self.kind, inner_type)

        return parse