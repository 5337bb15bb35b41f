"""
BFV-style concrete scheme built on the shared PKE primitives.

BFVScheme composes a PKEBase: key generation, zero ciphertexts, encryption
of encoded elements and the secret-key inner product are delegated; the
scheme contributes coefficient encoding and decoding into a NativePoly.

Example:
    scheme = create_scheme()
    key_pair = scheme.key_gen()
    ct, _ = scheme.encrypt_values([5], key_pair.public_key)
    assert scheme.decrypt_values(ct, key_pair.secret_key) == [5]
"""

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .base import Key, PKEBase, PKEScheme, ZeroCiphertext
from .ciphertext import Ciphertext
from .encoding import CoefficientEncoder
from .keys import KeyPair, PrivateKey
from .params import CryptoParams, ElementParams, SecretKeyDist
from .results import DecryptResult, EncryptResult
from .ring import DCRTPoly, NativePoly
from .sampling import RandomSource

logger = logging.getLogger(__name__)

MESSAGE_LENGTH = "message_length"


class BFVScheme(PKEScheme):
    """
    BFV encryption with coefficient encoding.

    Implements the NativePoly decryption output only; decrypting into a Poly
    raises UnsupportedRepresentationError.
    """

    def __init__(self, params: Optional[CryptoParams] = None, source: Optional[RandomSource] = None):
        """
        Initialize the scheme.

        Args:
            params: Scheme parameters (default: from LG_* settings)
            source: Optional injected randomness source (default: thread-local)
        """
        self.params = params or CryptoParams.default_params()
        self.encoder = CoefficientEncoder(self.params)
        self._core = PKEBase(source)
        logger.info(
            f"BFV scheme initialized: ring_dim={self.params.ring_dim}, "
            f"towers={self.params.element_params.num_towers}, t={self.params.plaintext_modulus}"
        )

    # ------------------------------------------------------------------
    # Delegated primitives
    # ------------------------------------------------------------------

    def key_gen(self, params: Optional[CryptoParams] = None, make_sparse: bool = False) -> KeyPair:
        return self._core.key_gen(params or self.params, make_sparse)

    def encrypt(self, plaintext: DCRTPoly, key: Key) -> Ciphertext:
        return self._core.encrypt(plaintext, key)

    def encrypt_zero_core(self, key: Key, params: Optional[ElementParams] = None) -> ZeroCiphertext:
        return self._core.encrypt_zero_core(key, params)

    def decrypt_core(self, cv: Sequence[DCRTPoly], private_key: PrivateKey) -> DCRTPoly:
        return self._core.decrypt_core(cv, private_key)

    # ------------------------------------------------------------------
    # Message level
    # ------------------------------------------------------------------

    def encrypt_values(self, values: Sequence[int], key: Key) -> Tuple[Ciphertext, EncryptResult]:
        """
        Encode and encrypt a vector of integers mod t.

        Returns:
            (ciphertext, EncryptResult) where num_bytes_encrypted counts the
            plaintext bytes covered by the encoding
        """
        element = self.encoder.encode(values)
        ct = self.encrypt(element, key)
        ct = replace(ct, metadata={MESSAGE_LENGTH: len(values)})
        bytes_per_value = ((self.params.plaintext_modulus - 1).bit_length() + 7) // 8
        return ct, EncryptResult.success(len(values) * bytes_per_value)

    def decrypt_native(
        self, ciphertext: Ciphertext, private_key: PrivateKey, plaintext: NativePoly
    ) -> DecryptResult:
        """Decode into `plaintext`; invalid result if the key or buffer does not match."""
        if ciphertext.key_tag != private_key.key_tag:
            logger.warning(
                "Private key does not match the key used for encryption",
                extra={"ciphertext_key_tag": ciphertext.key_tag[:8], "key_tag": private_key.key_tag[:8]},
            )
            return DecryptResult()
        if len(plaintext) != self.params.ring_dim:
            logger.warning(
                f"Output buffer holds {len(plaintext)} coefficients, expected {self.params.ring_dim}"
            )
            return DecryptResult()

        raw = self.decrypt_core(ciphertext.elements, private_key)
        try:
            plaintext.set_values(self.encoder.decode(raw), self.params.plaintext_modulus)
        finally:
            raw.erase()
        return DecryptResult.success(ciphertext.metadata.get(MESSAGE_LENGTH, self.params.ring_dim))

    def decrypt_values(self, ciphertext: Ciphertext, private_key: PrivateKey) -> Optional[List[int]]:
        """Decrypt to a list of integers, or None if decryption was not valid."""
        out = NativePoly(self.params.ring_dim)
        result = self.decrypt(ciphertext, private_key, out)
        if not result.is_valid:
            return None
        return [int(v) for v in out.values[: result.message_length]]


def create_scheme(profile: str = "default", source: Optional[RandomSource] = None) -> BFVScheme:
    """
    Factory function to create a BFV scheme.

    Args:
        profile: Parameter profile ("default", "sparse", "gaussian")
        source: Optional injected randomness source

    Returns:
        Configured BFVScheme
    """
    params = CryptoParams.default_params()
    if profile == "sparse":
        params = replace(params, secret_key_dist=SecretKeyDist.SPARSE_TERNARY)
    elif profile == "gaussian":
        params = replace(params, secret_key_dist=SecretKeyDist.GAUSSIAN)
    elif profile != "default":
        raise ValueError(f"Unknown profile: {profile}")
    return BFVScheme(params, source)

