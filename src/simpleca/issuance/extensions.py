"""
Extension policy — the extension sets written into CA certificates, requests
and CA-issued certificates.

Recipes are plain functions that append to an ExtensionAccumulator. The
issuer composes them in a fixed sequence, so extension order is
deterministic:

  CA certificate      ca_recipe
  request             profile_recipe(request)
  issued certificate  leaf_recipe → extra recipe (profile/SAN) → request's own extensions

Nothing is de-duplicated. When a request repeats an extension the issuer
already added, both copies are kept and the issuer's copy comes first.

The legacy Netscape markers (nsCertType, nsComment) have no typed class in
cryptography; their values are DER-encoded with asn1crypto and carried as
UnrecognizedExtension.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import structlog
from asn1crypto import core
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from simpleca.adapters.inspection import read_request_extensions
from simpleca.domain.models import ExtensionRecord, ExtensionRequest, Profile

log = structlog.get_logger()

NETSCAPE_CERT_TYPE = x509.ObjectIdentifier("2.16.840.1.113730.1.1")
NETSCAPE_COMMENT = x509.ObjectIdentifier("2.16.840.1.113730.1.13")


class NetscapeCertType(core.BitString):  # type: ignore[misc]
    """ASN.1 NetscapeCertType ::= BIT STRING (named bits, trailing zeros dropped)."""

    _map = {
        0: "ssl_client",
        1: "ssl_server",
        2: "smime",
        3: "object_signing",
        4: "reserved",
        5: "ssl_ca",
        6: "smime_ca",
        7: "object_signing_ca",
    }


# nsCertType bit ("SSL Server" / "SSL Client"), nsComment text
_PROFILE_MARKERS: dict[Profile, tuple[str, str]] = {
    Profile.SERVER: ("ssl_server", "Server Certificate"),
    Profile.CLIENT: ("ssl_client", "Client Certificate"),
}


# ─────────────────────── Accumulator ───────────────────────


class ExtensionAccumulator:
    """
    Ordered, append-only collection of extensions for one request or certificate.

    One accumulator belongs to exactly one build call; recipes receive it and
    append to it, nothing ever removes or reorders entries.
    """

    def __init__(self) -> None:
        self._extensions: list[x509.Extension[x509.ExtensionType]] = []

    def append(self, value: x509.ExtensionType, critical: bool = False) -> None:
        self._extensions.append(x509.Extension(value.oid, critical, value))

    def __iter__(self) -> Iterator[x509.Extension[x509.ExtensionType]]:
        return iter(self._extensions)

    def __len__(self) -> int:
        return len(self._extensions)

    def records(self) -> list[ExtensionRecord]:
        """Encode every accumulated extension to its raw (oid, critical, DER) form."""
        return [
            ExtensionRecord(
                oid=ext.oid.dotted_string,
                critical=ext.critical,
                value=ext.value.public_bytes(),
            )
            for ext in self._extensions
        ]


type ExtensionRecipe = Callable[[ExtensionAccumulator], None]


def compose(*recipes: ExtensionRecipe | None) -> ExtensionRecipe:
    """Run several recipes against the same accumulator, left to right."""

    def _composed(acc: ExtensionAccumulator) -> None:
        for recipe in recipes:
            if recipe is not None:
                recipe(acc)

    return _composed


# ─────────────────────── Recipes ───────────────────────


def ca_recipe(acc: ExtensionAccumulator, public_key: PublicKeyTypes) -> None:
    """BasicConstraints(CA, critical), KeyUsage(keyCertSign, cRLSign, critical), SKI."""
    acc.append(x509.BasicConstraints(ca=True, path_length=None), critical=True)
    acc.append(
        x509.KeyUsage(
            digital_signature=False,
            content_commitment=False,
            key_encipherment=False,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=True,
            crl_sign=True,
            encipher_only=False,
            decipher_only=False,
        ),
        critical=True,
    )
    acc.append(x509.SubjectKeyIdentifier.from_public_key(public_key))


def _issuer_key_identifier(issuer_cert: x509.Certificate) -> bytes:
    """The issuer's own SKI if it carries one, else one derived from its key."""
    try:
        ext = issuer_cert.extensions.get_extension_for_class(x509.SubjectKeyIdentifier)
        return ext.value.digest
    except (x509.ExtensionNotFound, x509.DuplicateExtension, ValueError):
        return x509.SubjectKeyIdentifier.from_public_key(issuer_cert.public_key()).digest


def authority_key_identifier(
    issuer_cert: x509.Certificate,
    keyid: bool = False,
    issuer: bool = False,
) -> x509.AuthorityKeyIdentifier:
    """
    AuthorityKeyIdentifier pointing at `issuer_cert`.

    keyid embeds the issuer's key identifier; issuer embeds the issuer's own
    issuer name and serial. With both disabled the extension is present but
    carries neither.
    """
    key_identifier = _issuer_key_identifier(issuer_cert) if keyid else None
    if issuer:
        return x509.AuthorityKeyIdentifier(
            key_identifier=key_identifier,
            authority_cert_issuer=[x509.DirectoryName(issuer_cert.issuer)],
            authority_cert_serial_number=issuer_cert.serial_number,
        )
    return x509.AuthorityKeyIdentifier(
        key_identifier=key_identifier,
        authority_cert_issuer=None,
        authority_cert_serial_number=None,
    )


def leaf_recipe(
    acc: ExtensionAccumulator,
    subject_public_key: PublicKeyTypes,
    issuer_cert: x509.Certificate,
    *,
    aki_keyid: bool = False,
    aki_issuer: bool = False,
) -> None:
    """
    Extensions the CA mandates on every certificate it signs, whatever the profile.

    BasicConstraints(not CA), KeyUsage(nonRepudiation, digitalSignature,
    keyEncipherment, critical), SKI of the subject key, AKI.
    """
    acc.append(x509.BasicConstraints(ca=False, path_length=None))
    acc.append(
        x509.KeyUsage(
            digital_signature=True,
            content_commitment=True,
            key_encipherment=True,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=False,
            crl_sign=False,
            encipher_only=False,
            decipher_only=False,
        ),
        critical=True,
    )
    acc.append(x509.SubjectKeyIdentifier.from_public_key(subject_public_key))
    acc.append(authority_key_identifier(issuer_cert, keyid=aki_keyid, issuer=aki_issuer))


def netscape_cert_type(bit: str) -> x509.UnrecognizedExtension:
    return x509.UnrecognizedExtension(NETSCAPE_CERT_TYPE, NetscapeCertType({bit}).dump())


def netscape_comment(text: str) -> x509.UnrecognizedExtension:
    return x509.UnrecognizedExtension(NETSCAPE_COMMENT, core.IA5String(text).dump())


def profile_recipe(request: ExtensionRequest) -> ExtensionRecipe:
    """Recipe for the caller's intents: profile markers first, then one SAN with every DNS name."""

    def _recipe(acc: ExtensionAccumulator) -> None:
        if request.profile is not None:
            bit, comment = _PROFILE_MARKERS[request.profile]
            acc.append(netscape_cert_type(bit))
            acc.append(netscape_comment(comment))

        if request.san_dns:
            acc.append(x509.SubjectAlternativeName([x509.DNSName(name) for name in request.san_dns]))

    return _recipe


# ─────────────────────── Request extensions ───────────────────────


def requested_extensions(request: x509.CertificateSigningRequest) -> list[ExtensionRecord]:
    """
    Extensions the request carries, copied verbatim for the merge step.

    An undecodable extension attribute counts as "nothing requested":
    issuance goes ahead with the issuer's extensions only.
    """
    return (
        read_request_extensions(request)
        .peek_failure(
            lambda err: log.warning(
                "extensions.request_undecodable",
                subject=request.subject.rfc4514_string(),
                error=str(err.exception),
            )
        )
        .recover(lambda _: [])
        .value()
    )
