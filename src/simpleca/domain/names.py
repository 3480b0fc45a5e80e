"""
Subject name model — distinguished names for requests and certificates.

Attributes are emitted as one RDN each, always in the order CN, ST, O, C,
restricted to the attributes actually supplied. DN comparison is
order-sensitive, so this order is part of the contract: the same four
values in another order form a different name.
"""

from __future__ import annotations

from cryptography import x509
from cryptography.x509.oid import NameOID

from simpleca.railway import ErrorCode, Result

_ATTRIBUTE_ORDER = (
    ("ST", NameOID.STATE_OR_PROVINCE_NAME),
    ("O", NameOID.ORGANIZATION_NAME),
    ("C", NameOID.COUNTRY_NAME),
)


def build_name(
    common_name: str | None,
    state: str | None = None,
    organization: str | None = None,
    country: str | None = None,
) -> Result[x509.Name]:
    """
    Build a distinguished name from caller-supplied fields.

    Returns Result.failure(INVALID_INPUT) when the common name is missing or
    blank, or when the library rejects one of the values. Empty optional
    fields are treated as not supplied.
    """
    if common_name is None or not common_name.strip():
        return Result.failure(ErrorCode.INVALID_INPUT, "common name is required")

    values = dict(zip(("ST", "O", "C"), (state, organization, country)))

    def _build() -> x509.Name:
        attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
        for short_name, oid in _ATTRIBUTE_ORDER:
            value = values[short_name]
            if value:
                attributes.append(x509.NameAttribute(oid, value))
        return x509.Name(attributes)

    return Result.from_computation(
        _build,
        ErrorCode.INVALID_INPUT,
        "Invalid subject name attribute",
    )
