"""Serial number generator."""

from __future__ import annotations

from cryptography import x509

SERIAL_BITS = 159


def new_serial() -> int:
    """
    Fresh random serial for one issuance.

    159 random bits keep the DER INTEGER positive (the sign bit of a 20-octet
    encoding is never set). Zero is a legal outcome.
    """
    return x509.random_serial_number()
