"""SEQUENCE OF and SET OF: lists and sets of objects of one type."""

from __future__ import annotations

from typing import Any as _AnyType
from typing import ClassVar, Iterable

from asn1der.sequence import iterate_items
from asn1der.tlv import Any, Class, ConstructExpectedError, Tag, der_tlv


def _encode_items(items: Iterable[_AnyType]) -> bytes:
    parts = []
    for item in items:
        encode = getattr(item, "to_der", None)
        if encode is None:
            raise TypeError(f"cannot encode {type(item).__name__} as DER")
        parts.append(bytes(encode()))
    return b"".join(parts)


def _check_items(any_: Any, tag: Tag, item_type: _AnyType) -> None:
    any_.header.assert_tag(tag)
    any_.header.assert_constructed()
    for item in iterate_items(any_.data, Any, der=True):
        item_type.check_constraints(item)


def _items_from_any(any_: Any, tag: Tag, item_type: _AnyType) -> list:
    any_.header.assert_tag(tag)
    if not any_.header.constructed:
        raise ConstructExpectedError()
    return list(iterate_items(any_.data, item_type, der=False))


def _items_from_der(data: bytes, tag: Tag, item_type: _AnyType) -> tuple[bytes, list]:
    rest, any_ = Any.from_der(data)
    any_.header.assert_tag(tag)
    return rest, list(iterate_items(any_.data, item_type, der=True))


class SequenceOf(list):
    """An ordered list of objects of one type (``SEQUENCE OF``)."""

    TAG: ClassVar[Tag] = Tag.SEQUENCE

    def __repr__(self) -> str:
        return f"SequenceOf({list.__repr__(self)})"

    def push(self, item: _AnyType) -> None:
        """Append an item at the end."""
        self.append(item)

    @classmethod
    def from_any(cls, any_: Any, item_type: _AnyType) -> "SequenceOf":
        """Decode the items (as BER) from a parsed constructed object."""
        return cls(_items_from_any(any_, cls.TAG, item_type))

    @classmethod
    def from_der(cls, data: bytes, item_type: _AnyType) -> tuple[bytes, "SequenceOf"]:
        """Parse one DER object and decode its items as DER."""
        rest, items = _items_from_der(data, cls.TAG, item_type)
        return rest, cls(items)

    @classmethod
    def check_constraints(cls, any_: Any, item_type: _AnyType) -> None:
        """Check DER rules for the container and each of its items."""
        _check_items(any_, cls.TAG, item_type)

    def to_der(self) -> bytes:
        """Encode the complete object."""
        return der_tlv(Class.UNIVERSAL, True, self.TAG, _encode_items(self))


class SetOf(list):
    """An unordered collection of objects of one type, kept as a list (``SET OF``)."""

    TAG: ClassVar[Tag] = Tag.SET

    def __repr__(self) -> str:
        return f"SetOf({list.__repr__(self)})"

    def push(self, item: _AnyType) -> None:
        """Append an item at the end."""
        self.append(item)

    @classmethod
    def from_any(cls, any_: Any, item_type: _AnyType) -> "SetOf":
        """Decode the items (as BER) from a parsed constructed object."""
        return cls(_items_from_any(any_, cls.TAG, item_type))

    @classmethod
    def from_der(cls, data: bytes, item_type: _AnyType) -> tuple[bytes, "SetOf"]:
        """Parse one DER object and decode its items as DER."""
        rest, items = _items_from_der(data, cls.TAG, item_type)
        return rest, cls(items)

    @classmethod
    def check_constraints(cls, any_: Any, item_type: _AnyType) -> None:
        """Check DER rules for the container and each of its items."""
        _check_items(any_, cls.TAG, item_type)

    def to_der(self) -> bytes:
        """Encode the complete object."""
        return der_tlv(Class.UNIVERSAL, True, self.TAG, _encode_items(self))


def list_from_any(any_: Any, item_type: _AnyType) -> list:
    """Decode a SEQUENCE object into a plain list (items read as BER)."""
    any_.header.assert_tag(Tag.SEQUENCE)
    any_.header.assert_constructed()
    return list(iterate_items(any_.data, item_type, der=False))


def list_from_der(data: bytes, item_type: _AnyType) -> tuple[bytes, list]:
    """Parse a DER SEQUENCE into a plain list."""
    return _items_from_der(data, Tag.SEQUENCE, item_type)


def set_from_any(any_: Any, item_type: _AnyType) -> set:
    """Decode a SET object into a Python set (items read as BER)."""
    any_.header.assert_tag(Tag.SET)
    any_.header.assert_constructed()
    return set(iterate_items(any_.data, item_type, der=False))


def set_from_der(data: bytes, item_type: _AnyType) -> tuple[bytes, set]:
    """Parse a DER SET into a Python set."""
    rest, any_ = Any.from_der(data)
    any_.header.assert_tag(Tag.SET)
    any_.header.assert_constructed()
    return rest, set(iterate_items(any_.data, item_type, der=True))


def encode_sequence(items: Iterable[_AnyType]) -> bytes:
    """Encode items, in iteration order, as a DER SEQUENCE."""
    return der_tlv(Class.UNIVERSAL, True, Tag.SEQUENCE, _encode_items(items))


def encode_set(items: Iterable[_AnyType]) -> bytes:
    """Encode items, in iteration order, as a DER SET."""
    return der_tlv(Class.UNIVERSAL, True, Tag.SET, _encode_items(items))