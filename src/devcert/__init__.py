"""Development TLS certificates for WebTransport.

Generates a short-lived self-signed P-256 identity and the SHA-256
fingerprint clients pin instead of trusting a certificate authority.
"""

from devcert.certs import (
    certificate_fingerprint,
    generate_identity,
    load_certificate,
    load_private_key,
    read_certificate_digest,
)
from devcert.error import ErrorCode, ProvisionError
from devcert.provisioner import CertificateProvisioner, ProvisionConfig, ProvisionResult

__version__ = "0.1.0"

__all__ = [
    # Provisioning
    "CertificateProvisioner",
    "ProvisionConfig",
    "ProvisionResult",
    # Certificates
    "generate_identity",
    "certificate_fingerprint",
    "load_certificate",
    "load_private_key",
    "read_certificate_digest",
    # Errors
    "ProvisionError",
    "ErrorCode",
]
