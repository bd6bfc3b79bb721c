"""Generate a self-signed certificate valid for 14 days, for WebTransport.

The key, certificate and fingerprint are written next to this script.

Run:
    python certificates/generate.py
"""

import sys
from pathlib import Path

from devcert.cli import main

if __name__ == "__main__":
    sys.exit(main(default_output_dir=Path(__file__).parent))
