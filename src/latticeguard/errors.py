"""
LatticeGuard Unified Error Taxonomy.

This module provides a centralized error hierarchy for all LatticeGuard components.
All errors include:
- Machine-readable error codes
- Structured details (never key material)
- Request ID correlation for tracing

Error Code Naming Convention:
- LG_<COMPONENT>_<SPECIFIC>
- Components: PKE, RNG, CONFIG

Security:
- NEVER include secrets, ring elements, or noise values in error messages
- Errors should be safe to log and return to callers
"""

from typing import Any, Dict, Optional


class LatticeGuardError(Exception):
    """Base exception for all LatticeGuard errors.

    All LatticeGuard errors include:
    - code: Machine-readable error code (e.g., LG_PKE_KEY_ERASED)
    - message: Human-readable description
    - details: Structured metadata (NEVER include sensitive data)
    - request_id: Optional correlation ID for distributed tracing
    """

    def __init__(
        self,
        message: str,
        code: str = "LG_INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.request_id:
            parts.append(f"(request_id: {self.request_id})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "request_id": self.request_id,
        }


# =============================================================================
# Public-Key Encryption Errors (LG_PKE_*)
# =============================================================================


class PKEError(LatticeGuardError):
    """Base class for public-key encryption primitive errors."""

    pass


class UnsupportedRepresentationError(PKEError):
    """Raised when decryption is requested into an output form the scheme does not implement."""

    def __init__(
        self,
        representation: str,
        scheme: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        details = {"representation": representation}
        if scheme:
            details["scheme"] = scheme
        super().__init__(
            message=f"Decryption to {representation} is not supported",
            code="LG_PKE_UNSUPPORTED_REPRESENTATION",
            details=details,
            request_id=request_id,
        )


class KeyErasedError(PKEError):
    """Raised when a private key is used after its secret was erased."""

    def __init__(
        self,
        key_tag: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message="Private key material has been erased",
            code="LG_PKE_KEY_ERASED",
            details={"key_tag": key_tag[:8] + "..."} if key_tag else {},
            request_id=request_id,
        )


class ParameterMismatchError(PKEError):
    """Raised when ring elements, keys or ciphertexts live over different rings."""

    def __init__(
        self,
        expected_hash: str,
        actual_hash: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message="Ring parameter mismatch between operands",
            code="LG_PKE_PARAM_MISMATCH",
            details={
                "expected_hash": expected_hash[:16] + "...",  # Truncate for safety
                "actual_hash": actual_hash[:16] + "...",
            },
            request_id=request_id,
        )


# =============================================================================
# Randomness Errors (LG_RNG_*)
# =============================================================================


class EntropySourceError(LatticeGuardError):
    """Raised when the operating system cannot supply entropy.

    This is fatal: callers must not retry with a weaker source.
    """

    def __init__(
        self,
        reason: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Entropy source unavailable: {reason}",
            code="LG_RNG_ENTROPY_EXHAUSTED",
            details={"severity": "critical"},
            request_id=request_id,
        )


class KeystreamReuseError(LatticeGuardError):
    """Raised when a seeded randomness source is drawn from in a forked process.

    A seeded keystream cannot be rekeyed without losing reproducibility, and
    continuing it would repeat the parent's randomness.
    """

    def __init__(
        self,
        parent_pid: int,
        pid: int,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message="Seeded randomness source used after fork",
            code="LG_RNG_KEYSTREAM_REUSE",
            details={"parent_pid": parent_pid, "pid": pid, "severity": "critical"},
            request_id=request_id,
        )


# =============================================================================
# Configuration Errors (LG_CONFIG_*)
# =============================================================================


class ConfigError(LatticeGuardError):
    """Base class for configuration errors."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when a parameter description is invalid."""

    def __init__(
        self,
        config_key: str,
        reason: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            code="LG_CONFIG_VALIDATION_FAILED",
            details={"config_key": config_key},
            request_id=request_id,
        )


# =============================================================================
# Error Code Registry (for documentation and validation)
# =============================================================================

ERROR_CODES = {
    # PKE errors
    "LG_PKE_UNSUPPORTED_REPRESENTATION": "Decryption output representation not implemented by scheme",
    "LG_PKE_KEY_ERASED": "Private key used after erasure",
    "LG_PKE_PARAM_MISMATCH": "Ring parameter mismatch",
    # Randomness errors
    "LG_RNG_ENTROPY_EXHAUSTED": "Entropy source unavailable (critical)",
    "LG_RNG_KEYSTREAM_REUSE": "Seeded keystream drawn from after fork (critical)",
    # Config errors
    "LG_CONFIG_VALIDATION_FAILED": "Configuration validation failed",
    # Internal
    "LG_INTERNAL_ERROR": "Internal error",
}


def validate_error_code(code: str) -> bool:
    """Validate that an error code is registered."""
    return code in ERROR_CODES


__all__ = [
    # Base
    "LatticeGuardError",
    # PKE
    "PKEError",
    "UnsupportedRepresentationError",
    "KeyErasedError",
    "ParameterMismatchError",
    # Randomness
    "EntropySourceError",
    "KeystreamReuseError",
    # Config
    "ConfigError",
    "ConfigValidationError",
    # Registry
    "ERROR_CODES",
    "validate_error_code",
]
