"""
Certificate issuance engine — self-signed CA certificates and CA-signed
certificates derived from a request.

Each call is a pure construction from its inputs to one signed certificate:
no issuance ledger, no certificate store, no shared mutable state. The
stages are connected on the railway and the first failure aborts the
whole call, so a partially built certificate is never returned.

Signed issuance:
  require RSA issuer key
    → collect extensions: leaf_recipe → extra recipe → request's own extensions
      → CertificateTemplate (subject = request subject, issuer = CA subject)
        → sign_certificate (SHA-256)
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from simpleca.adapters.keys import require_rsa_private_key
from simpleca.domain.models import ExtensionRecord, ExtensionRequest, Profile, ValidityWindow
from simpleca.domain.serial import new_serial
from simpleca.issuance.extensions import (
    ExtensionAccumulator,
    ExtensionRecipe,
    ca_recipe,
    compose,
    leaf_recipe,
    profile_recipe,
    requested_extensions,
)
from simpleca.issuance.tbs import CertificateTemplate, sign_certificate
from simpleca.railway import ErrorCode, Result

log = structlog.get_logger()


def _log_issued(event: str, cert: x509.Certificate) -> None:
    log.info(
        event,
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial=hex(cert.serial_number),
    )


# ─────────────────────── Self-signed CA ───────────────────────


def _ca_extensions(ca_key: rsa.RSAPrivateKey) -> list[ExtensionRecord]:
    acc = ExtensionAccumulator()
    ca_recipe(acc, ca_key.public_key())
    return acc.records()


def issue_root_certificate(
    ca_key: rsa.RSAPrivateKey,
    subject: x509.Name,
    validity: ValidityWindow,
) -> Result[x509.Certificate]:
    """
    Issue a self-signed CA certificate.

    issuer = subject, public key = ca_key's public half, extensions = CA
    recipe, signed with ca_key. Returns Result.failure(CRYPTO_ERROR) on any
    key, encoding or signing failure.

    Both bounds must be timezone-aware. A bound left None in `validity` is
    written as the issuance instant, so ValidityWindow() yields a zero-length
    window that is expired on arrival.
    """
    return (
        require_rsa_private_key(ca_key)
        .flat_map(
            lambda key: Result.from_computation(
                lambda: _ca_extensions(key),
                ErrorCode.CRYPTO_ERROR,
                "Failed to build CA certificate extensions",
            )
            .map(
                lambda extensions: CertificateTemplate(
                    serial_number=new_serial(),
                    issuer=subject,
                    subject=subject,
                    public_key=key.public_key(),
                    validity=validity,
                    extensions=tuple(extensions),
                )
            )
            .flat_map(lambda template: sign_certificate(template, key))
        )
        .peek(lambda cert: _log_issued("issuance.root_issued", cert))
    )


# ─────────────────────── CA-signed issuance ───────────────────────


def _issuer_extensions(
    issuer_cert: x509.Certificate,
    subject_public_key: PublicKeyTypes,
    recipe: ExtensionRecipe | None,
    aki_keyid: bool,
    aki_issuer: bool,
) -> list[ExtensionRecord]:
    acc = ExtensionAccumulator()
    compose(
        lambda a: leaf_recipe(
            a, subject_public_key, issuer_cert, aki_keyid=aki_keyid, aki_issuer=aki_issuer
        ),
        recipe,
    )(acc)
    return acc.records()


def issue_from_request(
    issuer_cert: x509.Certificate,
    issuer_key: rsa.RSAPrivateKey,
    subject_public_key: PublicKeyTypes,
    request: x509.CertificateSigningRequest,
    validity: ValidityWindow,
    recipe: ExtensionRecipe | None = None,
    *,
    aki_keyid: bool = False,
    aki_issuer: bool = False,
) -> Result[x509.Certificate]:
    """
    Issue a certificate for `request`, signed by the CA.

    subject = the request's subject (taken as is), issuer = the CA
    certificate's subject. The certified key is `subject_public_key`, which
    need not be the key inside the request.

    Extensions, in order: leaf recipe, whatever `recipe` adds, then the
    request's own extensions verbatim. Duplicates are kept. A request whose
    extension attribute cannot be decoded contributes nothing.

    The AuthorityKeyIdentifier is an empty SEQUENCE unless `aki_keyid` (embed
    the CA key identifier) or `aki_issuer` (embed the CA certificate's issuer
    name and serial) is set.

    Both validity bounds must be timezone-aware; one left None is written as
    the issuance instant, so ValidityWindow() yields a zero-length window.

    Returns Result.failure(CRYPTO_ERROR) if the recipe raises or signing fails.
    """
    return (
        require_rsa_private_key(issuer_key)
        .flat_map(
            lambda key: Result.from_computation(
                lambda: _issuer_extensions(
                    issuer_cert, subject_public_key, recipe, aki_keyid, aki_issuer
                ),
                ErrorCode.CRYPTO_ERROR,
                "Failed to build certificate extensions",
            )
            .map(lambda extensions: extensions + requested_extensions(request))
            .map(
                lambda extensions: CertificateTemplate(
                    serial_number=new_serial(),
                    issuer=issuer_cert.subject,
                    subject=request.subject,
                    public_key=subject_public_key,
                    validity=validity,
                    extensions=tuple(extensions),
                )
            )
            .flat_map(lambda template: sign_certificate(template, key))
        )
        .peek(lambda cert: _log_issued("issuance.certificate_issued", cert))
    )


def issue_server_certificate(
    issuer_cert: x509.Certificate,
    issuer_key: rsa.RSAPrivateKey,
    subject_public_key: PublicKeyTypes,
    request: x509.CertificateSigningRequest,
    validity: ValidityWindow,
    dns_names: Iterable[str] = (),
    *,
    aki_keyid: bool = False,
    aki_issuer: bool = False,
) -> Result[x509.Certificate]:
    """issue_from_request with the server markers and a SAN for `dns_names`."""
    extras = ExtensionRequest(profile=Profile.SERVER, san_dns=tuple(dns_names))
    return issue_from_request(
        issuer_cert, issuer_key, subject_public_key, request, validity, profile_recipe(extras),
        aki_keyid=aki_keyid, aki_issuer=aki_issuer,
    )


def issue_client_certificate(
    issuer_cert: x509.Certificate,
    issuer_key: rsa.RSAPrivateKey,
    subject_public_key: PublicKeyTypes,
    request: x509.CertificateSigningRequest,
    validity: ValidityWindow,
    *,
    aki_keyid: bool = False,
    aki_issuer: bool = False,
) -> Result[x509.Certificate]:
    """issue_from_request with the client markers."""
    extras = ExtensionRequest(profile=Profile.CLIENT)
    return issue_from_request(
        issuer_cert, issuer_key, subject_public_key, request, validity, profile_recipe(extras),
        aki_keyid=aki_keyid, aki_issuer=aki_issuer,
    )
