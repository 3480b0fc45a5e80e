"""
Shared test fixtures for the simpleca test suite.

RSA-2048 generation is the slow part of every test here, so keys (and the CA
certificate built on them) are session-scoped. Everything the engine
produces is immutable, which makes sharing them across tests safe.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime

import pytest
import structlog
from asn1crypto import algos, core
from asn1crypto import csr as asn1_csr
from asn1crypto import keys as asn1_keys
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from simpleca.adapters.keys import generate_private_key
from simpleca.domain.models import ExtensionRequest, Profile, ValidityWindow
from simpleca.domain.names import build_name
from simpleca.domain.validity import build_validity
from simpleca.issuance.csr import build_request
from simpleca.issuance.engine import issue_root_certificate

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
EXTENSION_REQUEST_OID = "1.2.840.113549.1.9.14"


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_structlog() so later tests don't log to a closed capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def ca_key() -> rsa.RSAPrivateKey:
    return generate_private_key().value()


@pytest.fixture(scope="session")
def server_key() -> rsa.RSAPrivateKey:
    return generate_private_key().value()


@pytest.fixture(scope="session")
def client_key() -> rsa.RSAPrivateKey:
    return generate_private_key().value()


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    """A key the issuer must refuse to sign with."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ca_name() -> x509.Name:
    return build_name("Test Root CA", "Berlin", "Example Org", "DE").value()


@pytest.fixture(scope="session")
def ten_year_window() -> ValidityWindow:
    return build_validity(0, 3650, now=FIXED_NOW).value()


@pytest.fixture(scope="session")
def ca_cert(
    ca_key: rsa.RSAPrivateKey,
    ca_name: x509.Name,
    ten_year_window: ValidityWindow,
) -> x509.Certificate:
    return issue_root_certificate(ca_key, ca_name, ten_year_window).value()


@pytest.fixture()
def make_request() -> Callable[..., x509.CertificateSigningRequest]:
    """
    Factory for CSRs: make_request(key, "host.example", ExtensionRequest(...)).

    Fails the test immediately if the request cannot be built.
    """

    def _make(
        key: rsa.RSAPrivateKey,
        common_name: str = "leaf.example",
        extension_request: ExtensionRequest | None = None,
    ) -> x509.CertificateSigningRequest:
        name = build_name(common_name).value()
        return build_request(key, name, extension_request or ExtensionRequest()).value()

    return _make


# ASN.1 shapes that accept any element as an attribute value, so a request can
# carry an extensionRequest attribute that is not a valid Extensions SEQUENCE.
class _AnyValues(core.SetOf):
    _child_spec = core.Any


class _LooseAttribute(core.Sequence):
    _fields = [("type", core.ObjectIdentifier), ("values", _AnyValues)]


class _LooseAttributes(core.SetOf):
    _child_spec = _LooseAttribute


class _LooseRequestInfo(core.Sequence):
    _fields = [
        ("version", core.Integer),
        ("subject", asn1_x509.Name),
        ("subject_pk_info", asn1_keys.PublicKeyInfo),
        ("attributes", _LooseAttributes, {"implicit": 0}),
    ]


class _LooseRequest(core.Sequence):
    _fields = [
        ("certification_request_info", _LooseRequestInfo),
        ("signature_algorithm", algos.SignedDigestAlgorithm),
        ("signature", core.OctetBitString),
    ]


@pytest.fixture(scope="session")
def malformed_extension_request(server_key: rsa.RSAPrivateKey) -> x509.CertificateSigningRequest:
    """
    A correctly signed server CSR whose extensionRequest value is INTEGER 7.

    Starts from a normal request (server profile + SAN), swaps the attribute
    value, re-signs the CertificationRequestInfo with the requester key and
    loads the result back through cryptography.
    """
    name = build_name("srv.example").value()
    original = build_request(
        server_key, name, ExtensionRequest(Profile.SERVER, ("srv.example",))
    ).value()
    info = asn1_csr.CertificationRequest.load(
        original.public_bytes(serialization.Encoding.DER)
    )["certification_request_info"]

    loose_info = _LooseRequestInfo(
        {
            "version": 0,
            "subject": info["subject"],
            "subject_pk_info": info["subject_pk_info"],
            "attributes": [{"type": EXTENSION_REQUEST_OID, "values": [core.Integer(7)]}],
        }
    )
    signature = server_key.sign(loose_info.dump(), padding.PKCS1v15(), hashes.SHA256())
    request = _LooseRequest(
        {
            "certification_request_info": loose_info,
            "signature_algorithm": {"algorithm": "sha256_rsa", "parameters": core.Null()},
            "signature": signature,
        }
    )
    return x509.load_der_x509_csr(request.dump())
