"""
Domain models — immutable value objects passed into and out of the issuer.

Keys, names, requests and certificates themselves are the cryptography
library's types (RSAPrivateKey, x509.Name, x509.CertificateSigningRequest,
x509.Certificate). The types here carry what those do not: the resolved
validity window, the caller's extension intents, and raw extension records
read back from an encoded certificate.

All models are frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, unique


@dataclass(frozen=True, slots=True)
class ValidityWindow:
    """
    Resolved not-before / not-after bounds.

    Either bound may be None, meaning "not specified by the caller"; the
    certificate encoder then writes the issuance instant for that bound.
    No ordering between the two is enforced. A bound that is set must be
    timezone-aware; a naive datetime raises ValueError.
    """

    not_before: datetime | None = None
    not_after: datetime | None = None

    def __post_init__(self) -> None:
        for label, bound in (("not_before", self.not_before), ("not_after", self.not_after)):
            if bound is not None and bound.utcoffset() is None:
                raise ValueError(f"{label} must be timezone-aware, got naive {bound.isoformat()}")


@unique
class Profile(Enum):
    """Legacy Netscape usage profile; one per request, so the two never mix."""

    SERVER = "server"
    CLIENT = "client"


@dataclass(frozen=True, slots=True)
class ExtensionRequest:
    """
    High-level extension intents gathered from a caller.

    A request holds at most one Profile and any number of SAN DNS names,
    independently of the profile.
    """

    profile: Profile | None = None
    san_dns: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.profile is None and not self.san_dns


@dataclass(frozen=True, slots=True)
class ExtensionRecord:
    """
    One extension exactly as encoded in a certificate or request.

    `oid` is the dotted string form, `value` the DER bytes inside extnValue.
    Records keep duplicates and encoding order.
    """

    oid: str
    critical: bool
    value: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class CertificateSummary:
    """Human-oriented view of an issued certificate."""

    subject: str
    issuer: str
    serial_number: int
    not_before: datetime
    not_after: datetime
    extensions: list[ExtensionRecord] = field(default_factory=list)

    @property
    def is_self_issued(self) -> bool:
        return self.subject == self.issuer

    @property
    def extension_oids(self) -> list[str]:
        return [ext.oid for ext in self.extensions]
