"""Parsing of optional tagged objects (``[n] T OPTIONAL``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar

from asn1der.tlv import Any, Class, Header, Tag, UnexpectedClassError

T = TypeVar("T")

ContentParser = Callable[[Header, bytes], "tuple[bytes, T]"]


@dataclass(frozen=True)
class OptTaggedParser:
    """Parser for an optional object with an expected class and tag.

    The content parsing function receives the outer header and the content
    octets, and returns ``(remaining, value)``. It handles both EXPLICIT
    content (a complete inner object) and IMPLICIT content (bare octets).
    """

    class_: Class
    tag: Tag

    def __post_init__(self) -> None:
        object.__setattr__(self, "class_", Class(self.class_))
        object.__setattr__(self, "tag", Tag(self.tag))

    @classmethod
    def universal(cls, tag: int) -> OptTaggedParser:
        return cls(Class.UNIVERSAL, tag)

    @classmethod
    def tagged(cls, tag: int) -> OptTaggedParser:
        """Parser for a context-specific tag."""
        return cls(Class.CONTEXT_SPECIFIC, tag)

    @classmethod
    def application(cls, tag: int) -> OptTaggedParser:
        return cls(Class.APPLICATION, tag)

    @classmethod
    def private(cls, tag: int) -> OptTaggedParser:
        return cls(Class.PRIVATE, tag)

    def _parse(self, data: bytes, f: ContentParser, der: bool) -> tuple[bytes, T | None]:
        data = bytes(data)
        if not data:
            return data, None
        rest, any_ = Any.from_der(data) if der else Any.from_ber(data)
        if any_.tag != self.tag:
            return data, None
        if any_.class_ != self.class_:
            raise UnexpectedClassError(self.class_, any_.class_)
        _, value = f(any_.header, any_.data)
        return rest, value

    def parse_ber(self, data: bytes, f: ContentParser) -> tuple[bytes, T | None]:
        """Parse BER input; return the remaining input and the value, or None.

        None is returned (with the input untouched) when the input is empty
        or carries another tag. A matching tag with another class raises.
        """
        return self._parse(data, f, der=False)

    def parse_der(self, data: bytes, f: ContentParser) -> tuple[bytes, T | None]:
        """Parse DER input; see :meth:`parse_ber`."""
        return self._parse(data, f, der=True)