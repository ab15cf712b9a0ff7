"""Error taxonomy for deployment and tokenization record building."""
from __future__ import annotations

from typing import Optional


class PoolFansError(Exception):
    """Base class for every error raised by :mod:`poolfans_tokenizer`."""


class ValidationError(PoolFansError, ValueError):
    """An intent violates a protocol invariant.

    Validation errors are detected before any network access and are always
    recoverable by correcting the input.
    """


class InvalidSplit(ValidationError):
    def __init__(self, got: int, reason: Optional[str] = None) -> None:
        self.got = got
        super().__init__(reason or f"Recipient bps must sum to 10000, got {got}")


class TooManyRecipients(ValidationError):
    def __init__(self, got: int, limit: int = 7) -> None:
        self.got = got
        self.limit = limit
        super().__init__(f"Maximum {limit} reward recipients allowed, got {got}")


class InvalidPoolGeometry(ValidationError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid pool geometry: {reason}")


class InvalidVaultConfig(ValidationError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid vault config: {reason}")


class InvalidLaunchBuy(ValidationError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid launch buy: {reason}")


class AddressResolutionError(PoolFansError):
    """The factory answered a vault-address read with an unusable payload."""

    def __init__(self, message: str, *, contract: Optional[str] = None) -> None:
        self.contract = contract
        super().__init__(message)


class EncodingError(PoolFansError, TypeError):
    """A value does not match the record schema it is encoded with."""


class ConfigurationError(PoolFansError):
    """The network configuration cannot serve the requested operation."""


class TokenizationStateError(PoolFansError):
    """A tokenization step was attempted out of order."""


__all__ = [
    "AddressResolutionError",
    "ConfigurationError",
    "EncodingError",
    "InvalidLaunchBuy",
    "InvalidPoolGeometry",
    "InvalidSplit",
    "InvalidVaultConfig",
    "PoolFansError",
    "TokenizationStateError",
    "TooManyRecipients",
    "ValidationError",
]
