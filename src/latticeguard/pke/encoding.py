"""
Coefficient encoding for the BFV scheme.

A message m = (m_0, ..., m_{k-1}) with k <= n integers is placed in the low
coefficients of a polynomial, reduced mod t and scaled by
Delta = floor(Q / t). Decoding rounds t * x / Q for the centered lift x of
every coefficient and reduces mod t.
"""

from typing import Sequence

import numpy as np

from .params import CryptoParams
from .ring import DCRTPoly, Format


class CoefficientEncoder:
    """Encode integer vectors mod t into scaled ring elements and back."""

    def __init__(self, params: CryptoParams):
        self.params = params
        self.modulus = params.element_params.modulus
        self.plaintext_modulus = params.plaintext_modulus
        self.delta = self.modulus // self.plaintext_modulus

    def encode(self, values: Sequence[int]) -> DCRTPoly:
        """Delta * (values mod t) as an EVALUATION-format element."""
        values = [int(v) for v in values]
        if len(values) > self.params.ring_dim:
            raise ValueError(f"Message length {len(values)} exceeds ring dimension {self.params.ring_dim}")
        t = self.plaintext_modulus
        scaled = np.array([(v % t) * self.delta for v in values], dtype=object)
        return DCRTPoly.from_integers(self.params.element_params, scaled, Format.EVALUATION)

    def decode(self, raw: DCRTPoly) -> np.ndarray:
        """Recover all n coefficients mod t from a raw decryption."""
        big_q = self.modulus
        t = self.plaintext_modulus
        centered = raw.centered_coefficients()
        # round(t * x / Q) with integer arithmetic
        rounded = (centered * t * 2 + big_q) // (2 * big_q)
        return np.array([int(v) % t for v in rounded], dtype=np.int64)
