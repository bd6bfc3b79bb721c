"""Certificate utilities for WebTransport development.

This module generates the short-lived EC identity a local WebTransport
server presents, and computes the SHA-256 fingerprint clients pin
instead of trusting a certificate authority.
"""

from __future__ import annotations

import datetime
import re
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from devcert.error import ProvisionError

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey

DEFAULT_COMMON_NAME = "localhost"
DEFAULT_VALIDITY_DAYS = 14

_HEX_DIGEST = re.compile(r"[0-9A-F]{64}")


def generate_identity(
    common_name: str = DEFAULT_COMMON_NAME,
    validity_days: int = DEFAULT_VALIDITY_DAYS,
    now: datetime.datetime | None = None,
) -> tuple[EllipticCurvePrivateKey, x509.Certificate]:
    """Generate a P-256 key and a self-signed certificate bound to it.

    Args:
        common_name: Subject and issuer common name (default: "localhost")
        validity_days: Certificate validity in days (default: 14)
        now: Start of the validity window (default: current UTC time)

    Returns:
        Tuple of (private_key, certificate)

    Raises:
        ProvisionError: If the parameters are rejected or signing fails
    """
    if validity_days < 1:
        msg = f"validity_days must be at least 1, got {validity_days}"
        raise ProvisionError.toolkit(msg)

    not_before = datetime.datetime.now(datetime.UTC) if now is None else now

    try:
        private_key = ec.generate_private_key(ec.SECP256R1())

        # Self-signed: subject and issuer are the same name
        subject = issuer = x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ])

        cert = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(private_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_before + datetime.timedelta(days=validity_days))
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .sign(private_key, hashes.SHA256())
        )
    except (ValueError, TypeError, OverflowError, UnsupportedAlgorithm) as exc:
        msg = f"certificate generation failed: {exc}"
        raise ProvisionError.toolkit(msg) from exc

    return private_key, cert


def private_key_pem(private_key: EllipticCurvePrivateKey) -> bytes:
    """Serialize a private key as unencrypted PKCS#8 PEM."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def certificate_pem(cert: x509.Certificate) -> bytes:
    """Serialize a certificate as PEM."""
    return cert.public_bytes(serialization.Encoding.PEM)


def certificate_fingerprint(cert: x509.Certificate) -> str:
    """Compute the SHA-256 fingerprint of a certificate.

    The digest covers the DER encoding, so it is the same value
    browsers compare against pinned certificate hashes.

    Returns:
        64 uppercase hex characters, no separators
    """
    return cert.fingerprint(hashes.SHA256()).hex().upper()


def format_fingerprint(fingerprint: str, separator: str = ":") -> str:
    """Render a fingerprint as separated byte pairs (AB:CD:...)."""
    digest = normalize_fingerprint(fingerprint)
    return separator.join(digest[i : i + 2] for i in range(0, len(digest), 2))


def normalize_fingerprint(text: str) -> str:
    """Normalize fingerprint text to bare uppercase hex.

    Accepts bare hex, colon-separated pairs, or labelled tool output
    such as ``sha256 Fingerprint=AB:CD:...``.

    Raises:
        ProvisionError: If the result is not a SHA-256 hex digest
    """
    # Label ends at the last '='
    value = text.rsplit("=", 1)[-1]
    value = "".join(value.split()).replace(":", "").upper()

    if not _HEX_DIGEST.fullmatch(value):
        msg = f"not a SHA-256 fingerprint: {text!r}"
        raise ProvisionError.fingerprint(msg)

    return value


def load_certificate(cert_path: Path | str) -> x509.Certificate:
    """Load a certificate from a PEM file.

    Args:
        cert_path: Path to the certificate file

    Returns:
        The loaded certificate

    Raises:
        FileNotFoundError: If the certificate file doesn't exist
        ValueError: If the file is not a valid PEM certificate
    """
    cert_data = Path(cert_path).read_bytes()
    return x509.load_pem_x509_certificate(cert_data)


def load_private_key(key_path: Path | str) -> EllipticCurvePrivateKey:
    """Load an unencrypted P-256 private key from a PEM file.

    Raises:
        FileNotFoundError: If the key file doesn't exist
        ValueError: If the file is not an unencrypted PEM P-256 private key
    """
    key_data = Path(key_path).read_bytes()

    try:
        key = serialization.load_pem_private_key(key_data, password=None)
    except TypeError as exc:
        msg = "Encrypted private keys are not supported"
        raise ValueError(msg) from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        msg = "Only elliptic-curve private keys are supported"
        raise ValueError(msg)
    if not isinstance(key.curve, ec.SECP256R1):
        msg = f"Expected curve secp256r1, got {key.curve.name}"
        raise ValueError(msg)

    return key


def read_certificate_digest(digest_path: Path | str) -> str:
    """Read a persisted fingerprint file, as a pinning client would."""
    return normalize_fingerprint(Path(digest_path).read_text(encoding="ascii"))


def verify_certificate(
    cert: x509.Certificate,
    hostname: str,
    now: datetime.datetime | None = None,
) -> bool:
    """Verify that a certificate is currently valid for a hostname.

    Only the subject common name is considered; these certificates carry
    no Subject Alternative Name.
    """
    now = datetime.datetime.now(datetime.UTC) if now is None else now
    if now < cert.not_valid_before_utc or now > cert.not_valid_after_utc:
        return False

    cn_attrs = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return bool(cn_attrs) and cn_attrs[0].value == hostname


def verify_key_pair(cert: x509.Certificate, private_key: EllipticCurvePrivateKey) -> bool:
    """Check that a certificate is self-signed by the given private key."""
    public_key = private_key.public_key()
    if cert.public_key() != public_key:
        return False

    try:
        public_key.verify(
            cert.signature,
            cert.tbs_certificate_bytes,
            ec.ECDSA(cert.signature_hash_algorithm),
        )
    except InvalidSignature:
        return False

    return True


def verify_digest(cert: x509.Certificate, digest: str) -> bool:
    """Check a stored fingerprint against the certificate it claims to pin."""
    try:
        return normalize_fingerprint(digest) == certificate_fingerprint(cert)
    except ProvisionError:
        return False
