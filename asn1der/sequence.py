"""The ASN.1 SEQUENCE type and iteration over encoded item lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any as _AnyType
from typing import Callable, ClassVar, Iterable, Iterator, Protocol, TypeVar

from asn1der.tlv import Any, Class, Tag, der_tlv

T = TypeVar("T")


class _Decodable(Protocol):
    def from_ber(self, data: bytes) -> tuple[bytes, _AnyType]: ...

    def from_der(self, data: bytes) -> tuple[bytes, _AnyType]: ...


def iterate_items(data: bytes, item_type: _Decodable, der: bool) -> Iterator[_AnyType]:
    """Decode consecutive objects of ``item_type`` from ``data`` until it is used up.

    ``data`` must be the *content* of a SEQUENCE or SET, not the container
    itself. Each item is decoded with ``item_type.from_der`` when ``der`` is
    true, otherwise with ``item_type.from_ber``. A decoding error is raised
    from the iterator and ends the iteration.
    """
    decode = item_type.from_der if der else item_type.from_ber
    rest = bytes(data)
    while rest:
        rest, item = decode(rest)
        yield item


@dataclass(frozen=True)
class Sequence:
    """An ordered list of heterogeneous objects, kept as its encoded content.

    The content is not parsed until one of the parsing or iteration methods
    is called.
    """

    content: bytes = b""

    TAG: ClassVar[Tag] = Tag.SEQUENCE

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", bytes(self.content))

    def __bytes__(self) -> bytes:
        return self.content

    @classmethod
    def from_any(cls, any_: Any) -> Sequence:
        """Build a sequence from a parsed object with the SEQUENCE tag."""
        any_.header.assert_tag(cls.TAG)
        any_.header.assert_constructed()
        return cls(any_.data)

    @classmethod
    def from_ber(cls, data: bytes) -> tuple[bytes, Sequence]:
        rest, any_ = Any.from_ber(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_der(cls, data: bytes) -> tuple[bytes, Sequence]:
        rest, any_ = Any.from_der(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_ber_and_then(
        cls, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a BER sequence and apply ``op`` to its content.

        ``op`` returns ``(remaining, value)``; what it leaves unread is
        discarded, and the input following the sequence is returned.
        """
        rest, seq = cls.from_ber(data)
        _, value = op(seq.content)
        return rest, value

    @classmethod
    def from_der_and_then(
        cls, data: bytes, op: Callable[[bytes], tuple[bytes, T]]
    ) -> tuple[bytes, T]:
        """Parse a DER sequence and apply ``op`` to its content."""
        rest, seq = cls.from_der(data)
        _, value = op(seq.content)
        return rest, value

    def and_then(self, op: Callable[[bytes], T]) -> T:
        """Apply ``op`` to the content and return its result."""
        return op(self.content)

    def parse(self, f: Callable[[bytes], T]) -> T:
        """Apply the parsing function ``f`` to the content."""
        return f(self.content)

    def ber_iter(self, item_type: _Decodable) -> Iterator[_AnyType]:
        """Iterate over the content, decoding each item as BER."""
        return iterate_items(self.content, item_type, der=False)

    def der_iter(self, item_type: _Decodable) -> Iterator[_AnyType]:
        """Iterate over the content, decoding each item as DER."""
        return iterate_items(self.content, item_type, der=True)

    def ber_sequence_of(self, item_type: _Decodable) -> list[_AnyType]:
        """Decode the content as a SEQUENCE OF items (BER)."""
        return list(self.ber_iter(item_type))

    def der_sequence_of(self, item_type: _Decodable) -> list[_AnyType]:
        """Decode the content as a SEQUENCE OF items (DER)."""
        return list(self.der_iter(item_type))

    @classmethod
    def from_iter_to_der(cls, items: Iterable[_AnyType]) -> Sequence:
        """Build a sequence from objects that can encode themselves as DER."""
        parts = []
        for item in items:
            encode = getattr(item, "to_der", None)
            if encode is None:
                raise TypeError(f"cannot encode {type(item).__name__} as DER")
            parts.append(bytes(encode()))
        return cls(b"".join(parts))

    def to_der(self) -> bytes:
        """Encode the complete SEQUENCE object."""
        return der_tlv(Class.UNIVERSAL, True, self.TAG, self.content)