"""BER/DER encoding and decoding of ASN.1 REAL, string, SEQUENCE, SET and tagged values."""

__version__ = "0.1.0"

__all__ = ["homogeneous", "optional", "real", "sequence", "set", "strings", "tagged", "tlv"]