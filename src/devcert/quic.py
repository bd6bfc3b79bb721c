"""WebTransport consumers of the provisioned files.

The server presents ``cert.pem``/``key.pem`` over QUIC using aioquic.
Clients either trust ``cert.pem`` directly or pin the fingerprint from
``cert.sha256``; browsers take the latter as ``serverCertificateHashes``.
"""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Any

from aioquic.h3.connection import H3_ALPN
from aioquic.quic.configuration import QuicConfiguration
from cryptography import x509

from devcert.certs import (
    certificate_fingerprint,
    load_certificate,
    normalize_fingerprint,
    read_certificate_digest,
)
from devcert.error import ProvisionError

logger = logging.getLogger(__name__)

# Browsers refuse pinned certificates valid for longer than this
MAX_PINNED_VALIDITY = datetime.timedelta(days=14)


def check_pinnable(cert: x509.Certificate) -> None:
    """Ensure a certificate is short-lived enough to be pinned by hash.

    Raises:
        ProvisionError: If the validity window exceeds MAX_PINNED_VALIDITY
    """
    validity = cert.not_valid_after_utc - cert.not_valid_before_utc
    if validity > MAX_PINNED_VALIDITY:
        msg = f"certificate validity {validity} exceeds {MAX_PINNED_VALIDITY}"
        raise ProvisionError.toolkit(msg)


def server_configuration(
    cert_path: Path | str,
    key_path: Path | str,
) -> QuicConfiguration:
    """Build the QUIC configuration for a WebTransport server.

    Args:
        cert_path: Path to the PEM certificate
        key_path: Path to the PEM private key

    Returns:
        Server-side configuration with the identity loaded
    """
    configuration = QuicConfiguration(
        is_client=False,
        alpn_protocols=H3_ALPN,
    )
    configuration.load_cert_chain(str(cert_path), str(key_path))
    logger.debug("Loaded server identity from %s", cert_path)
    return configuration


def client_configuration(
    cert_path: Path | str | None = None,
    digest_path: Path | str | None = None,
) -> QuicConfiguration:
    """Build the QUIC configuration for a client of the dev server.

    Args:
        cert_path: Self-signed certificate to trust (default: none)
        digest_path: Fingerprint file the certificate must match; requires cert_path

    Raises:
        ValueError: If digest_path is given without cert_path
        ProvisionError: If the certificate does not match the pinned digest
    """
    configuration = QuicConfiguration(
        is_client=True,
        alpn_protocols=H3_ALPN,
    )

    if cert_path is None:
        if digest_path is not None:
            msg = "digest_path requires cert_path"
            raise ValueError(msg)
        return configuration

    if digest_path is not None:
        expected = read_certificate_digest(digest_path)
        actual = certificate_fingerprint(load_certificate(cert_path))
        if actual != expected:
            msg = f"{cert_path} does not match pinned digest {expected}"
            raise ProvisionError.fingerprint(msg, {"expected": expected, "actual": actual})

    configuration.load_verify_locations(str(cert_path))
    return configuration


def server_certificate_hashes(digest: str) -> list[dict[str, Any]]:
    """Build the browser WebTransport ``serverCertificateHashes`` option.

    Returns:
        A JSON-serializable list with one SHA-256 entry
    """
    value = bytes.fromhex(normalize_fingerprint(digest))
    return [{"algorithm": "sha-256", "value": list(value)}]
