"""Provisioning of the development TLS identity.

Writes three files into an output directory:

- ``key.pem``: unencrypted P-256 private key
- ``cert.pem``: self-signed certificate for ``CN=localhost``
- ``cert.sha256``: the certificate's SHA-256 fingerprint, bare hex

Every run regenerates and overwrites all three.
"""

from __future__ import annotations

import contextlib
import datetime
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from devcert.certs import (
    DEFAULT_COMMON_NAME,
    DEFAULT_VALIDITY_DAYS,
    certificate_fingerprint,
    certificate_pem,
    generate_identity,
    load_certificate,
    private_key_pem,
)
from devcert.error import ProvisionError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Successfully generated certificate files"
DIGEST_LABEL = "Digest: "
KEY_FILE_MODE = 0o600


@dataclass
class ProvisionConfig:
    """Configuration for the certificate provisioner."""

    output_dir: Path
    common_name: str = DEFAULT_COMMON_NAME
    validity_days: int = DEFAULT_VALIDITY_DAYS
    key_filename: str = "key.pem"
    cert_filename: str = "cert.pem"
    digest_filename: str = "cert.sha256"
    atomic: bool = True

    @property
    def key_path(self) -> Path:
        return Path(self.output_dir) / self.key_filename

    @property
    def cert_path(self) -> Path:
        return Path(self.output_dir) / self.cert_filename

    @property
    def digest_path(self) -> Path:
        return Path(self.output_dir) / self.digest_filename


@dataclass(frozen=True)
class ProvisionResult:
    """Paths and fingerprint produced by one provisioning run."""

    key_path: Path
    cert_path: Path
    digest_path: Path
    fingerprint: str
    not_valid_before: datetime.datetime
    not_valid_after: datetime.datetime


class CertificateProvisioner:
    """Generates the key, certificate and fingerprint files.

    Example:
        ```python
        provisioner = CertificateProvisioner(ProvisionConfig(Path("certificates")))
        result = provisioner.provision()
        print(result.fingerprint)
        ```
    """

    def __init__(
        self,
        config: ProvisionConfig,
        echo: Callable[[str], object] = print,
    ) -> None:
        """Initialize the provisioner.

        Args:
            config: Output location and certificate parameters
            echo: Receives the two status lines (default: print to stdout)
        """
        self.config = config
        self.echo = echo

    def provision(self) -> ProvisionResult:
        """Run the provisioning steps in order, stopping at the first failure.

        Returns:
            The written paths and the certificate fingerprint

        Raises:
            ProvisionError: If generation, writing or fingerprinting fails
        """
        config = self.config
        output_dir = Path(config.output_dir)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"cannot create output directory {output_dir}: {exc}"
            raise ProvisionError.filesystem(msg, str(output_dir)) from exc

        private_key, cert = generate_identity(
            common_name=config.common_name,
            validity_days=config.validity_days,
        )

        self._write(config.key_path, private_key_pem(private_key), KEY_FILE_MODE)
        self._write(config.cert_path, certificate_pem(cert))
        self.echo(SUCCESS_MESSAGE)

        # Digest the file on disk, not the in-memory object
        try:
            written = load_certificate(config.cert_path)
        except OSError as exc:
            msg = f"cannot read {config.cert_path}: {exc}"
            raise ProvisionError.filesystem(msg, str(config.cert_path)) from exc
        except ValueError as exc:
            msg = f"{config.cert_path} is not a PEM certificate: {exc}"
            raise ProvisionError.fingerprint(msg, str(config.cert_path)) from exc

        fingerprint = certificate_fingerprint(written)
        self.echo(f"{DIGEST_LABEL}{fingerprint}")

        self._write(config.digest_path, fingerprint.encode("ascii"))

        logger.info(
            "Provisioned %s for CN=%s, expires %s",
            output_dir,
            config.common_name,
            written.not_valid_after_utc.isoformat(),
        )

        return ProvisionResult(
            key_path=config.key_path,
            cert_path=config.cert_path,
            digest_path=config.digest_path,
            fingerprint=fingerprint,
            not_valid_before=written.not_valid_before_utc,
            not_valid_after=written.not_valid_after_utc,
        )

    def _write(self, path: Path, data: bytes, mode: int | None = None) -> None:
        """Write bytes to path, replacing any existing file.

        Args:
            path: Destination file
            data: File contents
            mode: Permission bits (default: 0o666 masked by the umask)
        """
        mode = _public_mode() if mode is None else mode
        try:
            if self.config.atomic:
                _write_atomic(path, data, mode)
            else:
                path.write_bytes(data)
                path.chmod(mode)
        except OSError as exc:
            msg = f"cannot write {path}: {exc}"
            raise ProvisionError.filesystem(msg, str(path)) from exc

        logger.debug("Wrote %d bytes to %s (mode %o)", len(data), path, mode)


def _public_mode() -> int:
    """Return 0o666 masked by the process umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomic(path: Path, data: bytes, mode: int) -> None:
    """Write to a temporary sibling file, then rename it over path."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            # mkstemp always creates 0600
            os.fchmod(f.fileno(), mode)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
