"""
LatticeGuard: RLWE Public-Key Encryption Primitives

The scheme-agnostic layer underneath lattice-based homomorphic encryption:
- Key pair generation with ternary, sparse ternary or Gaussian secrets
- Zero-ciphertext generation under private or public keys
- Encryption of ring-encoded plaintexts
- Generalized secret-key inner product for decryption
- Secure erasure of private key material
"""

__version__ = "1.0.0"

from .errors import LatticeGuardError
from .logging import configure_logging, get_logger
from .pke import (
    BFVScheme,
    Ciphertext,
    CryptoParams,
    DecryptResult,
    EncryptResult,
    KeyPair,
    NativePoly,
    PKEBase,
    PKEScheme,
    Poly,
    PrivateKey,
    PublicKey,
    create_scheme,
)

__all__ = [
    "__version__",
    "LatticeGuardError",
    "configure_logging",
    "get_logger",
    "PKEScheme",
    "PKEBase",
    "BFVScheme",
    "create_scheme",
    "CryptoParams",
    "KeyPair",
    "PrivateKey",
    "PublicKey",
    "Ciphertext",
    "NativePoly",
    "Poly",
    "EncryptResult",
    "DecryptResult",
]
