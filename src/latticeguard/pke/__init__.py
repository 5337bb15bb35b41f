"""
LatticeGuard PKE Module.

Scheme-agnostic RLWE public-key encryption primitives shared by every
concrete scheme: key pair generation, zero-ciphertext generation under a
private or public key, encryption of encoded plaintext elements, and the
generalized secret-key inner product used by decryption.

Architecture:
    1. Ring algebra - RNS polynomials with a negacyclic NTT (ring, ntt)
    2. Samplers - ChaCha20-backed uniform, Gaussian and ternary samplers (sampling)
    3. Primitives - PKEScheme interface and PKEBase (base)
    4. Concrete scheme - BFVScheme with coefficient encoding (bfv, encoding)

Example:
    from latticeguard.pke import create_scheme, NativePoly

    scheme = create_scheme()
    with scheme.key_gen() as key_pair:
        ct, _ = scheme.encrypt_values([5], key_pair.public_key)
        out = NativePoly(scheme.params.ring_dim)
        result = scheme.decrypt(ct, key_pair.secret_key, out)
"""

from .base import PKEBase, PKEScheme
from .bfv import BFVScheme, create_scheme
from .ciphertext import Ciphertext
from .encoding import CoefficientEncoder
from .keys import KeyPair, PrivateKey, PublicKey
from .params import CryptoParams, ElementParams, SecretKeyDist
from .results import DecryptResult, EncryptResult
from .ring import DCRTPoly, Format, NativePoly, Poly
from .sampling import (
    DiscreteGaussianGenerator,
    DiscreteUniformGenerator,
    RandomSource,
    TernaryUniformGenerator,
    get_random_source,
)

__all__ = [
    # Primitives
    "PKEScheme",
    "PKEBase",
    # Scheme
    "BFVScheme",
    "CoefficientEncoder",
    "create_scheme",
    # Parameters
    "CryptoParams",
    "ElementParams",
    "SecretKeyDist",
    # Ring
    "DCRTPoly",
    "Format",
    "NativePoly",
    "Poly",
    # Keys and ciphertexts
    "KeyPair",
    "PrivateKey",
    "PublicKey",
    "Ciphertext",
    # Results
    "EncryptResult",
    "DecryptResult",
    # Sampling
    "RandomSource",
    "get_random_source",
    "DiscreteUniformGenerator",
    "DiscreteGaussianGenerator",
    "TernaryUniformGenerator",
]
