"""
Command-line entry point — wires adapters to the issuer.

Composition root: parses arguments into typed values (names, validity
windows, extension requests), loads PEM inputs through the ArtifactStore,
runs the core operation, and writes the PEM output. The core never sees
argv or file paths.

Subcommands:
  key gen OUTPUT                             new RSA private key (PKCS#8 PEM)
  key pub PKEY OUTPUT                        public half of a private key
  ca PKEY OUTPUT -N NAME ...                 self-signed CA certificate
  csr PKEY OUTPUT -N NAME [--ext-server|--ext-client] [--san-dns DNS]...
  sign CA_CERT CA_PKEY PUBLIC_KEY CSR OUTPUT CA-signed certificate from a request
       [--aki-keyid] [--aki-issuer]
  show CERT                                  print a certificate summary

Exit status is 0 on success and 1 on any failure; the failing operation and
the error are printed to stderr.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from simpleca import __version__
from simpleca.adapters.filesystem import FileArtifactStore
from simpleca.adapters.inspection import summarize
from simpleca.adapters.keys import RsaKeyGenerator, public_key_of, require_rsa_private_key
from simpleca.adapters.pem import (
    dump_certificate,
    dump_private_key,
    dump_public_key,
    dump_request,
    load_certificate,
    load_private_key,
    load_public_key,
    load_request,
)
from simpleca.config import AppSettings
from simpleca.domain.models import CertificateSummary, ExtensionRequest, Profile, ValidityWindow
from simpleca.domain.names import build_name
from simpleca.domain.ports import ArtifactStore
from simpleca.domain.validity import build_validity
from simpleca.issuance.csr import build_request
from simpleca.issuance.engine import issue_from_request, issue_root_certificate
from simpleca.issuance.extensions import profile_recipe
from simpleca.railway import LoggingExecutionContext, Result

_EXTENSION_NAMES = {
    "2.5.29.14": "subjectKeyIdentifier",
    "2.5.29.15": "keyUsage",
    "2.5.29.17": "subjectAltName",
    "2.5.29.19": "basicConstraints",
    "2.5.29.35": "authorityKeyIdentifier",
    "2.16.840.1.113730.1.1": "nsCertType",
    "2.16.840.1.113730.1.13": "nsComment",
}


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console logging on stderr.

    stdout is left for command output (`show`).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


# ─────────────────────── Argument parsing ───────────────────────


def _add_name_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-N", "--common-name", dest="common_name", required=True)
    parser.add_argument("-S", "--state", dest="state")
    parser.add_argument("-O", "--organisation", dest="organisation")
    parser.add_argument("-C", "--country", dest="country")


def _add_validity_arguments(parser: argparse.ArgumentParser, settings: AppSettings) -> None:
    # Kept as strings: the validity model owns day-count validation
    parser.add_argument("--before", default=str(settings.validity.before_days),
                        help="not-before offset in days from now (default: %(default)s)")
    parser.add_argument("--after", default=str(settings.validity.after_days),
                        help="not-after offset in days from now (default: %(default)s)")


def _add_extension_arguments(parser: argparse.ArgumentParser) -> None:
    profile = parser.add_mutually_exclusive_group()
    profile.add_argument("--ext-server", action="store_true", help="add the server extensions")
    profile.add_argument("--ext-client", action="store_true", help="add the client extensions")
    parser.add_argument("--san-dns", dest="san_dns", action="append", default=[],
                        metavar="DNS", help="SubjectAltName DNS entry (repeatable)")


def build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="simpleca", description="Simplistic self-signed CA generator")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    key = commands.add_parser("key", help="private/public key operations")
    key_commands = key.add_subparsers(dest="key_command", required=True)
    key_gen = key_commands.add_parser("gen", help="generate a private key in PEM format")
    key_gen.add_argument("output", type=Path)
    key_pub = key_commands.add_parser("pub", help="derive the public key of a private key")
    key_pub.add_argument("pkey", type=Path)
    key_pub.add_argument("output", type=Path)

    ca = commands.add_parser("ca", help="issue a self-signed CA certificate")
    ca.add_argument("pkey", type=Path)
    ca.add_argument("output", type=Path)
    _add_name_arguments(ca)
    _add_validity_arguments(ca, settings)

    csr = commands.add_parser("csr", help="issue a certificate signing request")
    csr.add_argument("pkey", type=Path)
    csr.add_argument("output", type=Path)
    _add_name_arguments(csr)
    _add_extension_arguments(csr)

    sign = commands.add_parser("sign", help="issue a CA-signed certificate from a request")
    sign.add_argument("ca_cert", type=Path)
    sign.add_argument("ca_pkey", type=Path)
    sign.add_argument("public_key", type=Path)
    sign.add_argument("csr", type=Path)
    sign.add_argument("output", type=Path)
    _add_validity_arguments(sign, settings)
    _add_extension_arguments(sign)
    sign.add_argument("--aki-keyid", action="store_true",
                      help="embed the CA key identifier in AuthorityKeyIdentifier")
    sign.add_argument("--aki-issuer", action="store_true",
                      help="embed the CA issuer name and serial in AuthorityKeyIdentifier")

    show = commands.add_parser("show", help="print a certificate summary")
    show.add_argument("cert", type=Path)

    return parser


def extension_request_from(args: argparse.Namespace) -> ExtensionRequest:
    profile = None
    if args.ext_server:
        profile = Profile.SERVER
    elif args.ext_client:
        profile = Profile.CLIENT
    return ExtensionRequest(profile=profile, san_dns=tuple(args.san_dns))


def _name_from(args: argparse.Namespace) -> Result[x509.Name]:
    return build_name(args.common_name, args.state, args.organisation, args.country)


# ─────────────────────── Commands ───────────────────────


def _signing_key(store: ArtifactStore, path: Path) -> Result[rsa.RSAPrivateKey]:
    return store.read(path).flat_map(load_private_key).flat_map(require_rsa_private_key)


def _key_gen(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[int]:
    generator = RsaKeyGenerator(settings.key.size, settings.key.public_exponent)
    return (
        generator.generate()
        .flat_map(dump_private_key)
        .flat_map(lambda pem: store.write(args.output, pem))
    )


def _key_pub(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[int]:
    return (
        store.read(args.pkey)
        .flat_map(load_private_key)
        .flat_map(public_key_of)
        .flat_map(dump_public_key)
        .flat_map(lambda pem: store.write(args.output, pem))
    )


def _ca(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[int]:
    return (
        Result.combine(_name_from(args), build_validity(args.before, args.after), lambda n, w: (n, w))
        .flat_map(
            lambda inputs: _signing_key(store, args.pkey).flat_map(
                lambda key: issue_root_certificate(key, *inputs)
            )
        )
        .flat_map(dump_certificate)
        .flat_map(lambda pem: store.write(args.output, pem))
    )


def _csr(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[int]:
    extension_request = extension_request_from(args)
    return (
        _name_from(args)
        .flat_map(
            lambda name: _signing_key(store, args.pkey).flat_map(
                lambda key: build_request(key, name, extension_request)
            )
        )
        .flat_map(dump_request)
        .flat_map(lambda pem: store.write(args.output, pem))
    )


def _sign(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[int]:
    extras = extension_request_from(args)
    recipe = None if extras.is_empty else profile_recipe(extras)

    def _issue(window: ValidityWindow) -> Result[x509.Certificate]:
        return store.read(args.ca_cert).flat_map(load_certificate).flat_map(
            lambda ca_cert: _signing_key(store, args.ca_pkey).flat_map(
                lambda ca_key: store.read(args.public_key).flat_map(load_public_key).flat_map(
                    lambda public_key: store.read(args.csr).flat_map(load_request).flat_map(
                        lambda request: issue_from_request(
                            ca_cert, ca_key, public_key, request, window, recipe,
                            aki_keyid=args.aki_keyid, aki_issuer=args.aki_issuer,
                        )
                    )
                )
            )
        )

    return (
        build_validity(args.before, args.after)
        .flat_map(_issue)
        .flat_map(dump_certificate)
        .flat_map(lambda pem: store.write(args.output, pem))
    )


def format_summary(summary: CertificateSummary) -> str:
    lines = [
        f"Subject:    {summary.subject}",
        f"Issuer:     {summary.issuer}",
        f"Serial:     {summary.serial_number:#x}",
        f"Not before: {summary.not_before.isoformat()}",
        f"Not after:  {summary.not_after.isoformat()}",
        "Extensions:",
    ]
    for ext in summary.extensions:
        name = _EXTENSION_NAMES.get(ext.oid, ext.oid)
        flag = " (critical)" if ext.critical else ""
        lines.append(f"  {name}{flag}: {ext.value.hex()}")
    return "\n".join(lines)


def _show(args: argparse.Namespace, settings: AppSettings, store: ArtifactStore) -> Result[CertificateSummary]:
    return (
        store.read(args.cert)
        .flat_map(load_certificate)
        .map(summarize)
        .peek(lambda summary: print(format_summary(summary)))  # noqa: T201
    )


type _Command = Callable[[argparse.Namespace, AppSettings, ArtifactStore], Result]

_COMMANDS: dict[str, _Command] = {
    "key gen": _key_gen,
    "key pub": _key_pub,
    "ca": _ca,
    "csr": _csr,
    "sign": _sign,
    "show": _show,
}


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one command, return the process exit status."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        return 1

    configure_structlog(settings.log_level)
    args = build_parser(settings).parse_args(argv)

    operation = args.command if args.command != "key" else f"key {args.key_command}"
    command = _COMMANDS[operation]
    store = FileArtifactStore()

    result = LoggingExecutionContext(operation=operation).execute(
        lambda: command(args, settings, store)
    )

    if result.is_failure():
        error = result.error()
        print(f"simpleca {operation}: {error}", file=sys.stderr)  # noqa: T201
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
