"""The ASN.1 SET type: an unordered list of heterogeneous objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any as _AnyType
from typing import Callable, ClassVar, Iterable, Iterator, TypeVar

from asn1der.sequence import iterate_items
from asn1der.tlv import Any, Class, Tag, der_tlv

T = TypeVar("T")


@dataclass(frozen=True)
class Set:
    """An unordered list of heterogeneous objects, kept as its encoded content.

    The content is not parsed until one of the parsing or iteration methods
    is called.
    """

    content: bytes = b""

    TAG: ClassVar[Tag] = Tag.SET

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", bytes(self.content))

    def __bytes__(self) -> bytes:
        return self.content

    @classmethod
    def from_any(cls, any_: Any) -> Set:
        """Build a set from a parsed object with the SET tag."""
        any_.header.assert_tag(cls.TAG)
        any_.header.assert_constructed()
        return cls(any_.data)

    @classmethod
    def from_ber(cls, data: bytes) -> tuple[bytes, Set]:
        rest, any_ = Any.from_ber(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_der(cls, data: bytes) -> tuple[bytes, Set]:
        rest, any_ = Any.from_der(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_ber_and_then(
        cls, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a BER set and apply ``op`` to its content.

        ``op`` returns ``(remaining, value)``; what it leaves unread is
        discarded, and the input following the set is returned.
        """
        rest, parsed = cls.from_ber(data)
        _, value = op(parsed.content)
        return rest, value

    @classmethod
    def from_der_and_then(
        cls, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a DER set and apply ``op`` to its content."""
        rest, parsed = cls.from_der(data)
        _, value = op(parsed.content)
        return rest, value

    def and_then(self, op: Callable[[bytes], T]) -> T:
        """Apply ``op`` to the content and return its result."""
        return op(self.content)

    def parse(self, f: Callable[[bytes], T]) -> T:
        """Apply the parsing function ``f`` to the content."""
        return f(self.content)

    def ber_iter(self, item_type: _AnyType) -> Iterator[_AnyType]:
        """Iterate over the content, decoding each item as BER."""
        return iterate_items(self.content, item_type, der=False)

    def der_iter(self, item_type: _AnyType) -> Iterator[_AnyType]:
        """Iterate over the content, decoding each item as DER."""
        return iterate_items(self.content, item_type, der=True)

    def ber_set_of(self, item_type: _AnyType) -> list[_AnyType]:
        """Decode the content as a SET OF items (BER)."""
        return list(self.ber_iter(item_type))

    def der_set_of(self, item_type: _AnyType) -> list[_AnyType]:
        """Decode the content as a SET OF items (DER)."""
        return list(self.der_iter(item_type))

    @classmethod
    def from_iter_to_der(cls, items: Iterable[_AnyType]) -> Set:
        """Build a set from objects that can encode themselves as DER."""
        parts = []
        for item in items:
            encode = getattr(item, "to_der", None)
            if encode is None:
                raise TypeError(f"cannot encode {type(item).__name__} as DER")
            parts.append(bytes(encode()))
        return cls(b"".join(parts))

    def to_der(self) -> bytes:
        """Encode the complete SET object."""
        return der_tlv(Class.UNIVERSAL, True, self.TAG, self.content)