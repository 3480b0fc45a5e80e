"""
Certificate assembly — TBSCertificate encoding and signing.

The issuer builds the to-be-signed structure itself instead of going
through cryptography's CertificateBuilder, which rejects a second extension
with an OID it has already seen. Issued certificates must keep such
duplicates (issuer-mandated extension first, requested copy after), so:

  CertificateTemplate (fields + ExtensionRecords)
    → asn1crypto: TbsCertificate (v3, sha256WithRSAEncryption)
    → cryptography: RSA PKCS#1 v1.5 / SHA-256 signature over the TBS DER
    → asn1crypto: Certificate { tbs, algorithm, signature }
    → cryptography: x509.load_der_x509_certificate()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from asn1crypto import algos, core, keys
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from simpleca.domain.models import ExtensionRecord, ValidityWindow
from simpleca.railway import ErrorCode, Result

# UTCTime covers 1950..2049; later dates must be GeneralizedTime (RFC 5280 4.1.2.5)
_UTC_TIME_LAST_YEAR = 2049


@dataclass(frozen=True, slots=True)
class CertificateTemplate:
    """
    Every field of a certificate except the signature.

    `extensions` are raw records so that verbatim copies from a request and
    repeated OIDs survive encoding unchanged.
    """

    serial_number: int
    issuer: x509.Name
    subject: x509.Name
    public_key: PublicKeyTypes = field(repr=False)
    validity: ValidityWindow
    extensions: tuple[ExtensionRecord, ...] = ()


def _signature_algorithm() -> algos.SignedDigestAlgorithm:
    return algos.SignedDigestAlgorithm({"algorithm": "sha256_rsa", "parameters": core.Null()})


def _encode_time(value: datetime) -> asn1_x509.Time:
    value = value.astimezone(UTC).replace(microsecond=0)
    if value.year <= _UTC_TIME_LAST_YEAR:
        return asn1_x509.Time(name="utc_time", value=value)
    return asn1_x509.Time(name="general_time", value=value)


def _encode_validity(window: ValidityWindow, issued_at: datetime) -> asn1_x509.Validity:
    """A bound the caller left unset is written as the issuance instant."""
    not_before = window.not_before if window.not_before is not None else issued_at
    not_after = window.not_after if window.not_after is not None else issued_at
    return asn1_x509.Validity(
        {
            "not_before": _encode_time(not_before),
            "not_after": _encode_time(not_after),
        }
    )


def _encode_extension(record: ExtensionRecord) -> asn1_x509.Extension:
    fields: dict[str, object] = {
        "extn_id": record.oid,
        "extn_value": core.ParsableOctetString(record.value),
    }
    # DER omits the DEFAULT FALSE value
    if record.critical:
        fields["critical"] = True
    return asn1_x509.Extension(fields)


def _encode_name(name: x509.Name) -> asn1_x509.Name:
    return asn1_x509.Name.load(name.public_bytes())


def encode_tbs(template: CertificateTemplate, issued_at: datetime) -> asn1_x509.TbsCertificate:
    """Encode a template as a version 3 TBSCertificate."""
    spki = template.public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    tbs: dict[str, object] = {
        "version": "v3",
        "serial_number": template.serial_number,
        "signature": _signature_algorithm(),
        "issuer": _encode_name(template.issuer),
        "validity": _encode_validity(template.validity, issued_at),
        "subject": _encode_name(template.subject),
        "subject_public_key_info": keys.PublicKeyInfo.load(spki),
    }
    # Extensions ::= SEQUENCE SIZE (1..MAX), so an empty set is left out entirely
    if template.extensions:
        tbs["extensions"] = [_encode_extension(record) for record in template.extensions]
    return asn1_x509.TbsCertificate(tbs)


def _sign(template: CertificateTemplate, signing_key: rsa.RSAPrivateKey) -> x509.Certificate:
    tbs = encode_tbs(template, issued_at=datetime.now(UTC))
    signature = signing_key.sign(tbs.dump(), padding.PKCS1v15(), hashes.SHA256())
    certificate = asn1_x509.Certificate(
        {
            "tbs_certificate": tbs,
            "signature_algorithm": _signature_algorithm(),
            "signature_value": signature,
        }
    )
    return x509.load_der_x509_certificate(certificate.dump())


def sign_certificate(
    template: CertificateTemplate,
    signing_key: rsa.RSAPrivateKey,
) -> Result[x509.Certificate]:
    """
    Encode and sign `template` with `signing_key` (RSA PKCS#1 v1.5, SHA-256).

    Returns Result.failure(CRYPTO_ERROR) on any encoding or signing failure.
    """
    return Result.from_computation(
        lambda: _sign(template, signing_key),
        ErrorCode.CRYPTO_ERROR,
        "Failed to encode or sign certificate",
    )
