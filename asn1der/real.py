"""The ASN.1 REAL type (X.690 section 8.5)."""

from __future__ import annotations

import enum
import math
import re
import struct
import sys
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import ClassVar

from asn1der.tlv import (
    Any,
    Class,
    InvalidLengthError,
    InvalidValueError,
    StringInvalidCharsetError,
    Tag,
    der_tlv,
)

_EPSILON = sys.float_info.epsilon
_NR1 = re.compile(r"\+?[0-9]+")
_NR_FLOAT = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)


class RealKind(enum.Enum):
    BINARY = "binary"
    ZERO = "zero"
    INFINITY = "infinity"
    NEG_INFINITY = "neg_infinity"


@dataclass(frozen=True)
class Real:
    """A REAL value: ``mantissa * base ** exponent`` or a special value.

    When encoding a non-decimal value, only base 2 is supported.
    """

    kind: RealKind
    mantissa: float = 0.0
    base: int = 2
    exponent: int = 0
    enc_base: int = 2

    TAG: ClassVar[Tag] = Tag.REAL
    ZERO: ClassVar[Real]
    INFINITY: ClassVar[Real]
    NEG_INFINITY: ClassVar[Real]

    @classmethod
    def from_float(cls, value: float) -> Real:
        """Build a REAL from a float, kept as a normalised base-10 value."""
        f = float(value)
        if math.isnan(f):
            raise ValueError("NaN cannot be represented as a REAL")
        if math.isinf(f):
            return cls.INFINITY if f > 0 else cls.NEG_INFINITY
        if f == 0.0:
            return cls.ZERO
        exponent = 0
        while math.modf(f)[0] != 0.0:
            f *= 10.0
            exponent -= 1
        while abs(f) > _EPSILON and abs(_rem_euclid(f, 10.0)) < _EPSILON:
            f /= 10.0
            exponent += 1
        return cls(RealKind.BINARY, f, 10, exponent, 10)

    @classmethod
    def binary(cls, mantissa: float, base: int, exponent: int) -> Real:
        """Build a non-special REAL encoded in base 2."""
        return cls(RealKind.BINARY, float(mantissa), base, exponent, 2)

    def with_enc_base(self, enc_base: int) -> Real:
        """Return a copy using another encoding base (2, 8 or 16)."""
        if self.kind is not RealKind.BINARY:
            return self
        return replace(self, enc_base=enc_base)

    def is_infinite(self) -> bool:
        return self.kind in (RealKind.INFINITY, RealKind.NEG_INFINITY)

    def is_finite(self) -> bool:
        return self.kind in (RealKind.ZERO, RealKind.BINARY)

    def to_float(self) -> float:
        """The value as a float, possibly infinite."""
        if self.kind is RealKind.ZERO:
            return 0.0
        if self.kind is RealKind.INFINITY:
            return math.inf
        if self.kind is RealKind.NEG_INFINITY:
            return -math.inf
        try:
            scale = float(self.base) ** self.exponent
        except OverflowError:
            scale = math.inf
        return self.mantissa * scale

    def to_float32(self) -> float:
        """The value rounded to single precision."""
        value = self.to_float()
        try:
            return struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            return math.copysign(math.inf, value)

    def __float__(self) -> float:
        return self.to_float()

    @classmethod
    def from_any(cls, any_: Any) -> Real:
        """Decode a REAL from a parsed object."""
        any_.header.assert_tag(cls.TAG)
        any_.header.assert_primitive()
        data = any_.data
        if not data:
            return cls.ZERO
        first, rem = data[0], data[1:]
        if first & 0x80:
            return cls._decode_binary(first, rem)
        if first & 0x40:
            if any_.header.length != 1:
                raise InvalidLengthError()
            if first == 0x40:
                return cls.INFINITY
            if first == 0x41:
                return cls.NEG_INFINITY
            raise InvalidValueError(cls.TAG, "Invalid float special value")
        return cls._decode_decimal(first, rem)

    @classmethod
    def _decode_binary(cls, first: int, rem: bytes) -> Real:
        n = (first & 0x03) + 1
        if n >= len(rem):
            raise InvalidValueError(cls.TAG, "Invalid float value(exponent)")
        exp_octets, mant_octets = rem[:n], rem[n:]
        if len(exp_octets) > 4:
            raise InvalidValueError(cls.TAG, "Exponent too large (REAL)")
        exponent = int.from_bytes(exp_octets, "big", signed=True)
        base_bits = (first >> 4) & 0x03
        if base_bits == 3:
            raise InvalidValueError(cls.TAG, "Illegal REAL encoding base")
        enc_base = (2, 8, 16)[base_bits]
        exponent *= (1, 3, 4)[base_bits]
        if len(mant_octets) > 8:
            raise InvalidValueError(cls.TAG, "Mantissa too large (REAL)")
        p = int.from_bytes(mant_octets, "big")
        if p >= 1 << 63:
            p -= 1 << 64
        if first & 0x40:
            p = -p
        scale = (first >> 2) & 0x03
        mantissa = float(p) * (2.0**scale) if scale else float(p)
        return cls(RealKind.BINARY, mantissa, 2, exponent, enc_base)

    @classmethod
    def _decode_decimal(cls, first: int, rem: bytes) -> Real:
        try:
            text = rem.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StringInvalidCharsetError() from exc
        form = first & 0x03
        if form == 1:
            if not _NR1.fullmatch(text) or int(text) > 0xFFFF_FFFF:
                raise InvalidValueError(cls.TAG, "Invalid float string encoding")
            return cls.from_float(float(int(text)))
        if form in (2, 3):
            if not _NR_FLOAT.fullmatch(text):
                raise InvalidValueError(cls.TAG, "Invalid float string encoding")
            value = float(text)
            if math.isnan(value):
                raise InvalidValueError(cls.TAG, "Invalid float string encoding")
            return cls.from_float(value)
        raise InvalidValueError(cls.TAG, f"Invalid NR ({form})")

    @classmethod
    def check_constraints(cls, any_: Any) -> None:
        """Check DER rules: primitive encoding with a definite length."""
        any_.header.assert_primitive()
        any_.header.assert_definite()

    @classmethod
    def from_ber(cls, data: bytes) -> tuple[bytes, Real]:
        rest, any_ = Any.from_ber(data)
        return rest, cls.from_any(any_)

    @classmethod
    def from_der(cls, data: bytes) -> tuple[bytes, Real]:
        rest, any_ = Any.from_der(data)
        cls.check_constraints(any_)
        return rest, cls.from_any(any_)

    def der_content(self) -> bytes:
        """Encode the content octets."""
        if self.kind is RealKind.ZERO:
            return b""
        if self.kind is RealKind.INFINITY:
            return b"\x40"
        if self.kind is RealKind.NEG_INFINITY:
            return b"\x41"
        if self.base == 10:
            sign = "+" if self.exponent == 0 else ""
            return f"\x03{_display_float(self.mantissa)}E{sign}{self.exponent}".encode()
        if self.base != 2:
            raise InvalidValueError(self.TAG, "Invalid base for REAL")

        first = 0x80
        negative, m, enc_base, e = _drop_floating_point(self.mantissa, self.enc_base, self.exponent)
        if m == 0:
            raise InvalidValueError(self.TAG, "Serialization of REAL failed")
        if negative:
            first |= 0x40
        if enc_base == 2:
            while not m & 0x1:
                m >>= 1
                e += 1
        elif enc_base == 8:
            while not m & 0x7:
                m >>= 3
                e += 1
            first |= 0x10
        else:
            while not m & 0xF:
                m >>= 4
                e += 1
            first |= 0x20
        scale = 0
        while not m & 0x1 and scale < 4:
            m >>= 1
            scale += 1
        first |= scale << 2

        magnitude = abs(e)
        if magnitude <= 0xFF:
            len_e = 1
        elif magnitude <= 0xFFFF:
            len_e = 2
        elif magnitude <= 0xFF_FFFF:
            len_e = 3
        else:
            len_e = 4
        first |= (len_e - 1) & 0x3

        out = bytearray([first])
        if len_e == 4:
            out.append(len_e & 0xFF)
        out += (e & 0xFFFF_FFFF).to_bytes(4, "big")[4 - len_e :]
        out += m.to_bytes(8, "big").lstrip(b"\x00")
        return bytes(out)

    def to_der(self) -> bytes:
        """Encode the complete object."""
        return der_tlv(Class.UNIVERSAL, False, self.TAG, self.der_content())


Real.ZERO = Real(RealKind.ZERO)
Real.INFINITY = Real(RealKind.INFINITY)
Real.NEG_INFINITY = Real(RealKind.NEG_INFINITY)


def float_from_any(any_: Any) -> float:
    """Decode a REAL object straight to a float."""
    any_.header.assert_tag(Tag.REAL)
    any_.header.assert_primitive()
    return Real.from_any(any_).to_float()


def _rem_euclid(value: float, modulus: float) -> float:
    r = math.fmod(value, modulus)
    return r + abs(modulus) if r < 0.0 else r


def _display_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        if value == 0.0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _to_u64(value: float) -> int:
    if math.isnan(value) or value <= 0.0:
        return 0
    if value >= 2.0**64:
        return (1 << 64) - 1
    return int(value)


def _drop_floating_point(m: float, b: int, e: int) -> tuple[bool, int, int, int]:
    negative = math.copysign(1.0, m) < 0
    sign = 1 if e > 0 else -1
    m = abs(m)
    if b == 8:
        e = (abs(e) // 3) * sign
        m *= 2.0**e
    elif b == 16:
        e = (abs(e) // 4) * sign
        m *= 2.0**e
    while m > _EPSILON:
        if math.modf(m)[0] != 0.0:
            m *= b
            e -= 1
        else:
            break
    return negative, _to_u64(m), b, e