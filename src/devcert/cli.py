"""Command-line entry point for provisioning development certificates.

Run:
    devcert --output-dir certificates
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from devcert.certs import DEFAULT_COMMON_NAME, DEFAULT_VALIDITY_DAYS
from devcert.error import ProvisionError
from devcert.provisioner import CertificateProvisioner, ProvisionConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the devcert command."""
    parser = argparse.ArgumentParser(
        prog="devcert",
        description="Generate a short-lived self-signed certificate for WebTransport development.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="directory for key.pem, cert.pem and cert.sha256 (default: current directory)",
    )
    parser.add_argument(
        "--common-name",
        default=DEFAULT_COMMON_NAME,
        help="certificate subject common name (default: %(default)s)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=DEFAULT_VALIDITY_DAYS,
        help="validity period in days (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log to stderr")
    return parser


def main(argv: list[str] | None = None, default_output_dir: Path | None = None) -> int:
    """Provision certificates and return the process exit code.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        default_output_dir: Used when --output-dir is absent (default: cwd)
    """
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            stream=sys.stderr,
        )

    output_dir = args.output_dir or default_output_dir or Path.cwd()
    config = ProvisionConfig(
        output_dir=output_dir,
        common_name=args.common_name,
        validity_days=args.days,
    )

    try:
        CertificateProvisioner(config).provision()
    except ProvisionError as exc:
        logger.debug("Provisioning failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    return 0
