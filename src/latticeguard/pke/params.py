"""
Ring and scheme parameter descriptions.

ElementParams describes the cyclotomic ring R_Q = Z_Q[X]/(X^n + 1) in RNS
form: the composite modulus Q is a product of NTT-friendly primes q_i and
every ring element is stored as one residue row per prime.

CryptoParams bundles the ring with the sampling and plaintext settings the
primitive layer needs. Both are immutable and are referenced, never owned,
by keys and ciphertexts.
"""

import hashlib
import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from ..config import settings
from ..errors import ConfigValidationError
from .ntt import MAX_MODULUS_BITS, find_ntt_primes, is_prime


class SecretKeyDist(Enum):
    """Distribution the secret key s is drawn from."""

    GAUSSIAN = "gaussian"
    UNIFORM_TERNARY = "uniform_ternary"
    SPARSE_TERNARY = "sparse_ternary"


@dataclass(frozen=True)
class ElementParams:
    """
    Immutable description of the RNS polynomial ring.

    Attributes:
        ring_dim: Ring dimension n (power of two)
        moduli: RNS primes q_i, each q_i = 1 (mod 2n) and below 2^31
    """

    ring_dim: int
    moduli: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "moduli", tuple(int(q) for q in self.moduli))

        n = self.ring_dim
        if n < 2 or n & (n - 1) != 0:
            raise ConfigValidationError("ring_dim", f"{n} is not a power of two")
        if not self.moduli:
            raise ConfigValidationError("moduli", "modulus chain is empty")
        if len(set(self.moduli)) != len(self.moduli):
            raise ConfigValidationError("moduli", "RNS primes must be distinct")
        for q in self.moduli:
            if q.bit_length() > MAX_MODULUS_BITS:
                raise ConfigValidationError("moduli", f"{q} exceeds {MAX_MODULUS_BITS} bits")
            if (q - 1) % (2 * n) != 0 or not is_prime(q):
                raise ConfigValidationError("moduli", f"{q} is not an NTT-friendly prime for n={n}")

    @property
    def modulus(self) -> int:
        """Composite modulus Q."""
        return math.prod(self.moduli)

    @property
    def num_towers(self) -> int:
        return len(self.moduli)

    def get_hash(self) -> str:
        """Compute deterministic hash of the ring description."""
        canonical = json.dumps(self.to_dict(), sort_keys=True).encode()
        return f"sha256:{hashlib.sha256(canonical).hexdigest()}"

    def to_dict(self) -> Dict[str, Any]:
        return {"ring_dim": self.ring_dim, "moduli": list(self.moduli)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementParams":
        return cls(ring_dim=data["ring_dim"], moduli=tuple(data["moduli"]))

    @classmethod
    def generate(cls, ring_dim: int, modulus_bits: int = 30, num_moduli: int = 2) -> "ElementParams":
        """Build a ring with the largest `num_moduli` NTT primes below 2^modulus_bits."""
        try:
            moduli = find_ntt_primes(ring_dim, modulus_bits, num_moduli)
        except ValueError as e:
            raise ConfigValidationError("moduli", str(e)) from e
        return cls(ring_dim=ring_dim, moduli=moduli)


@dataclass(frozen=True)
class CryptoParams:
    """
    Parameters consumed by the PKE primitives.

    These parameters are chosen and validated by the caller; this layer only
    checks that they are structurally usable.
    """

    element_params: ElementParams
    plaintext_modulus: int
    std_dev: float = 3.19
    secret_key_dist: SecretKeyDist = SecretKeyDist.UNIFORM_TERNARY
    sparse_hamming_weight: int = 64
    gaussian_tail_cut: float = 12.0

    def __post_init__(self):
        if self.plaintext_modulus < 2:
            raise ConfigValidationError("plaintext_modulus", "must be at least 2")
        if self.plaintext_modulus >= self.element_params.modulus:
            raise ConfigValidationError("plaintext_modulus", "must be smaller than the ciphertext modulus")
        if self.std_dev <= 0:
            raise ConfigValidationError("std_dev", "must be positive")
        if self.gaussian_tail_cut <= 0:
            raise ConfigValidationError("gaussian_tail_cut", "must be positive")
        if math.ceil(self.std_dev * self.gaussian_tail_cut) < 1:
            raise ConfigValidationError("gaussian_tail_cut", "Gaussian support must include nonzero values")
        if self.sparse_hamming_weight < 1:
            raise ConfigValidationError("sparse_hamming_weight", "must be positive")

    @property
    def ring_dim(self) -> int:
        return self.element_params.ring_dim

    def get_hash(self) -> str:
        """Compute deterministic hash of parameters."""
        canonical = json.dumps(self.to_dict(), sort_keys=True).encode()
        return f"sha256:{hashlib.sha256(canonical).hexdigest()}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "element_params": self.element_params.to_dict(),
            "plaintext_modulus": self.plaintext_modulus,
            "std_dev": self.std_dev,
            "secret_key_dist": self.secret_key_dist.value,
            "sparse_hamming_weight": self.sparse_hamming_weight,
            "gaussian_tail_cut": self.gaussian_tail_cut,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CryptoParams":
        """Deserialize from dictionary."""
        return cls(
            element_params=ElementParams.from_dict(data["element_params"]),
            plaintext_modulus=data["plaintext_modulus"],
            std_dev=data.get("std_dev", 3.19),
            secret_key_dist=SecretKeyDist(data.get("secret_key_dist", "uniform_ternary")),
            sparse_hamming_weight=data.get("sparse_hamming_weight", 64),
            gaussian_tail_cut=data.get("gaussian_tail_cut", 12.0),
        )

    @classmethod
    def create(
        cls,
        ring_dim: int,
        plaintext_modulus: int,
        modulus_bits: int = 30,
        num_moduli: int = 2,
        moduli: Optional[Sequence[int]] = None,
        **kwargs: Any,
    ) -> "CryptoParams":
        """Build parameters, searching NTT primes unless `moduli` is given."""
        if moduli is not None:
            element_params = ElementParams(ring_dim=ring_dim, moduli=tuple(moduli))
        else:
            element_params = ElementParams.generate(ring_dim, modulus_bits, num_moduli)
        return cls(element_params=element_params, plaintext_modulus=plaintext_modulus, **kwargs)

    @classmethod
    def default_params(cls) -> "CryptoParams":
        """Parameters taken from LG_* settings."""
        return cls.create(
            ring_dim=settings.RING_DIM,
            plaintext_modulus=settings.PLAINTEXT_MODULUS,
            modulus_bits=settings.MODULUS_BITS,
            num_moduli=settings.NUM_MODULI,
            std_dev=settings.STD_DEV,
            secret_key_dist=SecretKeyDist[settings.SECRET_KEY_DIST],
            sparse_hamming_weight=settings.SPARSE_HAMMING_WEIGHT,
            gaussian_tail_cut=settings.GAUSSIAN_TAIL_CUT,
        )
