"""
Key adapter — RSA key generation and key-type guards.

Implements the KeyGenerator port. Keys are generated fresh per role (CA,
server, client); the issuer itself only ever receives existing key handles.
"""

from __future__ import annotations

import structlog
from cryptography.hazmat.primitives.asymmetric import rsa

from simpleca.railway import ErrorCode, Result

log = structlog.get_logger()

DEFAULT_KEY_SIZE = 2048
DEFAULT_PUBLIC_EXPONENT = 65537


def generate_private_key(
    key_size: int = DEFAULT_KEY_SIZE,
    public_exponent: int = DEFAULT_PUBLIC_EXPONENT,
) -> Result[rsa.RSAPrivateKey]:
    """Generate an RSA private key; Result.failure(CRYPTO_ERROR) if the library refuses."""
    return Result.from_computation(
        lambda: rsa.generate_private_key(public_exponent=public_exponent, key_size=key_size),
        ErrorCode.CRYPTO_ERROR,
        f"Failed to generate a {key_size}-bit RSA key",
    ).peek(lambda _: log.debug("keys.generated", key_size=key_size))


class RsaKeyGenerator:
    """KeyGenerator bound to one key profile."""

    def __init__(
        self,
        key_size: int = DEFAULT_KEY_SIZE,
        public_exponent: int = DEFAULT_PUBLIC_EXPONENT,
    ) -> None:
        self._key_size = key_size
        self._public_exponent = public_exponent

    def generate(self) -> Result[rsa.RSAPrivateKey]:
        return generate_private_key(self._key_size, self._public_exponent)


def require_rsa_private_key(key: object) -> Result[rsa.RSAPrivateKey]:
    """Only RSA keys can sign requests and certificates here (sha256WithRSAEncryption)."""
    if isinstance(key, rsa.RSAPrivateKey):
        return Result.success(key)
    return Result.failure(
        ErrorCode.CRYPTO_ERROR,
        f"Signing key must be an RSA private key, got {type(key).__name__}",
    )


def public_key_of(private_key: rsa.RSAPrivateKey) -> Result[rsa.RSAPublicKey]:
    return require_rsa_private_key(private_key).map(lambda key: key.public_key())
