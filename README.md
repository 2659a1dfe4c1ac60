# asn1der

Read and write ASN.1 values in BER and DER (X.690) encoding, with nothing but the
standard library.

## What it covers

- `asn1der.tlv`: the building blocks. `Class`, `Tag` and `TagKind`; `Header` with
  its `assert_*` checks; `Any`, a parsed object whose content is left as bytes
  (`Any.from_ber`, `Any.from_der`, `Any.to_der`); the helpers `encode_length`,
  `encode_header` and `der_tlv`; `TaggedValue` with the shortcuts
  `tagged_explicit`, `tagged_implicit`, `application_explicit`,
  `application_implicit`, `private_explicit` and `private_implicit`; and the
  error classes.
- `asn1der.real`: `Real` values in binary, decimal and special (infinity) forms,
  and `float_from_any`. Binary values are written with base 2 only; base-10 values
  (as made by `Real.from_float`) are written in decimal character form.
- `asn1der.strings`: `Utf8String`, `NumericString`, `PrintableString`,
  `Ia5String`, `GeneralString`, `GraphicString`, `TeletexString`,
  `VideotexString`, `VisibleString`, `BmpString` and `UniversalString`, each with
  `test_valid_charset`; plus `str_from_any` and `str_to_der` for plain `str`
  values carried as UTF8String.
- `asn1der.sequence` and `asn1der.set`: `Sequence` and `Set` keep their encoded
  content and decode it on demand (`ber_iter`, `der_iter`, `der_sequence_of`,
  `der_set_of`, `from_der_and_then`, ...). `iterate_items` walks any item list.
- `asn1der.homogeneous`: `SequenceOf` and `SetOf` (list subclasses holding items
  of one type), plus `list_from_any`, `list_from_der`, `set_from_any`,
  `set_from_der`, `encode_sequence` and `encode_set`.
- `asn1der.optional`: `OptTaggedParser` for `[n] T OPTIONAL` fields.
- `asn1der.tagged`: `TaggedParser`, `TaggedParserBuilder` and the
  `tagged_value_from_any` / `tagged_value_from_ber` / `tagged_value_from_der` /
  `tagged_value_to_der` functions, for `EXPLICIT` and `IMPLICIT` tagging in any
  class.

Item types passed to the decoding functions are classes offering `from_ber` and
`from_der` (and `from_any`, `TAG` or `check_constraints` where the function
needs them), such as `Real`, the string classes or `Any` itself. Values to be
encoded must offer `to_der()`.

## What it does not do

There are no types here for `INTEGER`, `BOOLEAN`, `NULL`, `OCTET STRING`,
`BIT STRING`, `OBJECT IDENTIFIER`, `ENUMERATED` or the time types; such objects can
still be read and written as raw `Any` values. There is no schema compiler and no
command-line tool.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Encoding and decoding a `REAL`:

```python
from asn1der.real import Real

encoded = Real.from_float(1.5).to_der()
rest, value = Real.from_der(encoded)
assert rest == b""
assert value.to_float() == 1.5
```

Checking a character set:

```python
from asn1der.strings import PrintableString, VisibleString
from asn1der.tlv import StringInvalidCharsetError

VisibleString.test_valid_charset(b"abcd*4")
try:
    PrintableString.test_valid_charset(b"abcd*4")
except StringInvalidCharsetError:
    print("'*' is not a printable character")
```

Building a sequence from items and decoding it again:

```python
from asn1der.sequence import Sequence
from asn1der.strings import Utf8String

seq = Sequence.from_iter_to_der([Utf8String("a"), Utf8String("b")])
assert [s.data for s in seq.der_sequence_of(Utf8String)] == ["a", "b"]
```

Reading an optional `[0] EXPLICIT` field:

```python
from asn1der.optional import OptTaggedParser
from asn1der.strings import Utf8String

parser = OptTaggedParser.tagged(0)
rest, value = parser.parse_der(
    bytes([0xA0, 0x03, 0x0C, 0x01, 0x61]),
    lambda header, data: Utf8String.from_der(data),
)
assert value.data == "a"
```

If the input is empty or carries another tag, `parse_der` returns the input
untouched and `None`.

## Errors

Errors are raised as subclasses of `asn1der.tlv.Asn1Error` (itself a
`ValueError`): `IncompleteError` when input ends too early,
`InvalidValueError` and `InvalidLengthError` for malformed content,
`UnexpectedTagError` and `UnexpectedClassError` when a value does not have the
expected identifier, `ConstructExpectedError` and `ConstructUnexpectedError` for
the wrong form, and `StringInvalidCharsetError` when string content breaks its
character set.