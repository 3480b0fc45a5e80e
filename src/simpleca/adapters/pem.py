"""
PEM codec adapter — load and dump keys, requests and certificates.

This is the boundary between byte streams and the typed objects the issuer
works with. Every loader catches the library's parse exceptions and returns
Result.failure(DECODE_ERROR); every dumper returns Result[bytes].

Private keys are written as unencrypted PKCS#8, public keys as
SubjectPublicKeyInfo.
"""

from __future__ import annotations

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)

from simpleca.railway import ErrorCode, Result

# ─────────────────────── Loaders ───────────────────────


def load_private_key(data: bytes) -> Result[PrivateKeyTypes]:
    return Result.from_computation(
        lambda: serialization.load_pem_private_key(data, password=None),
        ErrorCode.DECODE_ERROR,
        "Malformed private key PEM",
    )


def load_public_key(data: bytes) -> Result[PublicKeyTypes]:
    return Result.from_computation(
        lambda: serialization.load_pem_public_key(data),
        ErrorCode.DECODE_ERROR,
        "Malformed public key PEM",
    )


def load_certificate(data: bytes) -> Result[x509.Certificate]:
    return Result.from_computation(
        lambda: x509.load_pem_x509_certificate(data),
        ErrorCode.DECODE_ERROR,
        "Malformed certificate PEM",
    )


def load_request(data: bytes) -> Result[x509.CertificateSigningRequest]:
    return Result.from_computation(
        lambda: x509.load_pem_x509_csr(data),
        ErrorCode.DECODE_ERROR,
        "Malformed certificate signing request PEM",
    )


# ─────────────────────── Dumpers ───────────────────────


def dump_private_key(key: PrivateKeyTypes) -> Result[bytes]:
    return Result.from_computation(
        lambda: key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        ErrorCode.CRYPTO_ERROR,
        "Failed to serialize private key",
    )


def dump_public_key(key: PublicKeyTypes) -> Result[bytes]:
    return Result.from_computation(
        lambda: key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ),
        ErrorCode.CRYPTO_ERROR,
        "Failed to serialize public key",
    )


def dump_certificate(cert: x509.Certificate) -> Result[bytes]:
    return Result.from_computation(
        lambda: cert.public_bytes(serialization.Encoding.PEM),
        ErrorCode.CRYPTO_ERROR,
        "Failed to serialize certificate",
    )


def dump_request(request: x509.CertificateSigningRequest) -> Result[bytes]:
    return Result.from_computation(
        lambda: request.public_bytes(serialization.Encoding.PEM),
        ErrorCode.CRYPTO_ERROR,
        "Failed to serialize certificate signing request",
    )
