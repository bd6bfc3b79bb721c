"""Error types for development certificate provisioning."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Provisioning failure classes."""

    TOOLKIT = "toolkit"
    FILESYSTEM = "filesystem"
    FINGERPRINT = "fingerprint"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProvisionError(Exception):
    """Provisioning error with code, message, and optional data."""

    code: ErrorCode
    message: str
    data: Any | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @staticmethod
    def toolkit(message: str, data: Any | None = None) -> ProvisionError:
        """Create a TOOLKIT error."""
        return ProvisionError(ErrorCode.TOOLKIT, message, data)

    @staticmethod
    def filesystem(message: str, data: Any | None = None) -> ProvisionError:
        """Create a FILESYSTEM error."""
        return ProvisionError(ErrorCode.FILESYSTEM, message, data)

    @staticmethod
    def fingerprint(message: str, data: Any | None = None) -> ProvisionError:
        """Create a FINGERPRINT error."""
        return ProvisionError(ErrorCode.FINGERPRINT, message, data)
