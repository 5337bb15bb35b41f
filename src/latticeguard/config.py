"""
LatticeGuard Configuration Module

Provides centralized configuration management with:
- Environment variable loading (LG_ prefix)
- Type validation via Pydantic
- Development overrides via .env file

The values here are defaults for parameter construction only. Choosing
secure lattice parameters remains the caller's responsibility.
"""

import math
from typing import List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECRET_KEY_DISTS = ("GAUSSIAN", "UNIFORM_TERNARY", "SPARSE_TERNARY")


class LatticeGuardSettings(BaseSettings):
    """
    LatticeGuard settings.

    Loads from environment variables with LG_ prefix.

    Usage:
        from latticeguard.config import settings

        params = CryptoParams.default_params()  # reads settings.RING_DIM etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="LG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # GENERAL
    # ==========================================================================
    ENVIRONMENT: str = Field(default="development", description="Runtime environment: development, staging, production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # ==========================================================================
    # RING PARAMETERS
    # ==========================================================================
    RING_DIM: int = Field(default=1024, description="Cyclotomic ring dimension n (power of two)")
    MODULUS_BITS: int = Field(default=30, description="Bit size of each RNS prime (at most 30)")
    NUM_MODULI: int = Field(default=2, description="Number of RNS primes in the modulus chain")
    PLAINTEXT_MODULUS: int = Field(default=65537, description="Plaintext modulus t")

    # ==========================================================================
    # SAMPLING
    # ==========================================================================
    STD_DEV: float = Field(default=3.19, description="Discrete Gaussian standard deviation")
    GAUSSIAN_TAIL_CUT: float = Field(default=12.0, description="Gaussian support bound in multiples of STD_DEV")
    SECRET_KEY_DIST: str = Field(default="UNIFORM_TERNARY", description="GAUSSIAN, UNIFORM_TERNARY or SPARSE_TERNARY")
    SPARSE_HAMMING_WEIGHT: int = Field(default=64, description="Nonzero coefficients of a sparse secret")

    @field_validator("SECRET_KEY_DIST")
    @classmethod
    def _check_secret_key_dist(cls, value: str) -> str:
        value = value.upper()
        if value not in _SECRET_KEY_DISTS:
            raise ValueError(f"must be one of {', '.join(_SECRET_KEY_DISTS)}")
        return value

    @field_validator("MODULUS_BITS")
    @classmethod
    def _check_modulus_bits(cls, value: int) -> int:
        if not 10 <= value <= 30:
            raise ValueError("must be between 10 and 30")
        return value

    @field_validator("STD_DEV", "GAUSSIAN_TAIL_CUT")
    @classmethod
    def _check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @model_validator(mode="after")
    def _check_gaussian_support(self) -> "LatticeGuardSettings":
        if math.ceil(self.STD_DEV * self.GAUSSIAN_TAIL_CUT) < 1:
            raise ValueError("LG_STD_DEV * LG_GAUSSIAN_TAIL_CUT must be at least 1")
        return self

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration for production readiness.

        Returns:
            List of configuration warnings
        """
        issues = []

        if self.is_production():
            if self.RING_DIM < 1024:
                issues.append("WARNING: LG_RING_DIM below 1024 in production")
            if self.STD_DEV < 3.19:
                issues.append("WARNING: LG_STD_DEV below 3.19 in production")

        return issues


# Global settings instance
settings = LatticeGuardSettings()

if settings.is_production():
    _issues = settings.validate_production_config()
    if _issues:
        import logging

        _logger = logging.getLogger(__name__)
        for issue in _issues:
            _logger.warning(issue)
