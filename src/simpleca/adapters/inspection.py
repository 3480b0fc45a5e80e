"""
Inspection adapter — read extensions back out of encoded requests and certificates.

cryptography's typed `.extensions` view refuses to load a certificate that
repeats an extension (DuplicateExtension), and issued certificates are
allowed to repeat one when a request duplicates an issuer-mandated
extension. asn1crypto walks the raw Extensions SEQUENCE instead, so the
records here keep every entry in encoded order.
"""

from __future__ import annotations

from asn1crypto import csr as asn1_csr
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from simpleca.domain.models import CertificateSummary, ExtensionRecord
from simpleca.railway import ErrorCode, Result

# PKCS#9 extensionRequest attribute
_EXTENSION_REQUEST_OID = "1.2.840.113549.1.9.14"


def _to_record(extension: asn1_x509.Extension) -> ExtensionRecord:
    return ExtensionRecord(
        oid=extension["extn_id"].dotted,
        critical=bool(extension["critical"].native),
        value=extension["extn_value"].contents,
    )


def read_extensions(cert: x509.Certificate) -> list[ExtensionRecord]:
    """All extensions of `cert` in encoded order, duplicates included."""
    der = cert.public_bytes(serialization.Encoding.DER)
    tbs = asn1_x509.Certificate.load(der)["tbs_certificate"]
    extensions = tbs["extensions"]
    if not extensions:
        return []
    return [_to_record(ext) for ext in extensions]


def _decode_request_extensions(request: x509.CertificateSigningRequest) -> list[ExtensionRecord]:
    der = request.public_bytes(serialization.Encoding.DER)
    info = asn1_csr.CertificationRequest.load(der)["certification_request_info"]

    records: list[ExtensionRecord] = []
    for attribute in info["attributes"]:
        if attribute["type"].dotted != _EXTENSION_REQUEST_OID:
            continue
        for extensions in attribute["values"]:
            records.extend(_to_record(ext) for ext in extensions)
    return records


def read_request_extensions(
    request: x509.CertificateSigningRequest,
) -> Result[list[ExtensionRecord]]:
    """
    Extensions carried in the request's extensionRequest attribute, verbatim.

    Returns Result.failure(DECODE_ERROR) if the attribute cannot be decoded.
    A request without the attribute yields an empty list.
    """
    return Result.from_computation(
        lambda: _decode_request_extensions(request),
        ErrorCode.DECODE_ERROR,
        "Failed to decode the request's extension attribute",
    )


def summarize(cert: x509.Certificate) -> CertificateSummary:
    """Subject, issuer, serial, validity and raw extensions of `cert`."""
    return CertificateSummary(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=cert.serial_number,
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        extensions=read_extensions(cert),
    )
