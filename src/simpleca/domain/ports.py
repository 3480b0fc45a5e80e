"""
Ports — Protocol-based interfaces for the collaborators around the issuer.

The issuance engine itself only consumes key handles and parsed objects;
where those come from (fresh generation, PEM files) is behind these ports:

  CLI ─→ ArtifactStore (bytes in/out) ─→ PEM codec ─→ issuer
     └─→ KeyGenerator (fresh RSA keys)
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives.asymmetric import rsa

from simpleca.railway import Result


@runtime_checkable
class KeyGenerator(Protocol):
    """Port: produce a fresh RSA private key for one role (CA, server, client)."""

    def generate(self) -> Result[rsa.RSAPrivateKey]: ...


@runtime_checkable
class ArtifactStore(Protocol):
    """
    Port: read and write serialized artifacts (PEM bytes).

    Writes never replace an existing artifact: an issued key or certificate
    is written once.
    """

    def read(self, path: Path) -> Result[bytes]: ...

    def write(self, path: Path, data: bytes) -> Result[int]: ...
