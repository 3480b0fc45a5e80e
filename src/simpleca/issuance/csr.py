"""
CSR builder — binds a subject name, a public key and requested extensions
into a request self-signed by the requester's own key (SHA-256).
"""

from __future__ import annotations

import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa

from simpleca.adapters.keys import require_rsa_private_key
from simpleca.domain.models import ExtensionRequest
from simpleca.issuance.extensions import ExtensionAccumulator, ExtensionRecipe, compose, profile_recipe
from simpleca.railway import ErrorCode, Result

log = structlog.get_logger()


def _collect(recipe: ExtensionRecipe | None) -> ExtensionAccumulator:
    acc = ExtensionAccumulator()
    compose(recipe)(acc)
    return acc


def _sign(
    key: rsa.RSAPrivateKey,
    subject: x509.Name,
    extensions: ExtensionAccumulator,
) -> x509.CertificateSigningRequest:
    builder = x509.CertificateSigningRequestBuilder().subject_name(subject)
    for ext in extensions:
        builder = builder.add_extension(ext.value, critical=ext.critical)
    return builder.sign(key, hashes.SHA256())


def build_csr(
    requester_key: rsa.RSAPrivateKey,
    subject: x509.Name,
    recipe: ExtensionRecipe | None = None,
) -> Result[x509.CertificateSigningRequest]:
    """
    Build and self-sign a certificate signing request.

    The recipe (if any) fills the request's extension attribute. A recipe
    that raises, a non-RSA key, or a signing failure all give
    Result.failure(CRYPTO_ERROR); no request is returned in that case.
    """
    return (
        require_rsa_private_key(requester_key)
        .flat_map(
            lambda key: Result.from_computation(
                lambda: _collect(recipe),
                ErrorCode.CRYPTO_ERROR,
                "Failed to build request extensions",
            ).flat_map(
                lambda extensions: Result.from_computation(
                    lambda: _sign(key, subject, extensions),
                    ErrorCode.CRYPTO_ERROR,
                    "Failed to sign certificate signing request",
                )
            )
        )
        .peek(
            lambda csr: log.info(
                "csr.built",
                subject=csr.subject.rfc4514_string(),
                extensions=len(csr.extensions),
            )
        )
    )


def build_request(
    requester_key: rsa.RSAPrivateKey,
    subject: x509.Name,
    extension_request: ExtensionRequest,
) -> Result[x509.CertificateSigningRequest]:
    """build_csr with the extension set derived from the caller's intents."""
    return build_csr(requester_key, subject, profile_recipe(extension_request))
