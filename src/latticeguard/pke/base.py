"""
Scheme-agnostic RLWE public-key encryption primitives.

PKEBase implements the operations every concrete scheme shares:

    key_gen            s <- secret distribution, a <- uniform, e <- Gaussian,
                       pk = (-(a*s) + e, a), sk = s
    encrypt_zero_core  a fresh encryption of zero under a private key
                       (c0 = -(c1*s) + e) or a public key
                       (c0 = b*u + e0, c1 = a*u + e1)
    encrypt            zero ciphertext + already encoded plaintext in c0
    decrypt_core       c0 + c1*s + c2*s^2 + ... (pure, deterministic)

Concrete schemes implement the PKEScheme interface and delegate to a PKEBase
instance instead of subclassing it; they supply plaintext encoding and the
decoding half of decrypt by overriding decrypt_native and/or
decrypt_multiprecision.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple, Union

from ..errors import ParameterMismatchError, UnsupportedRepresentationError
from .ciphertext import Ciphertext
from .keys import KeyPair, PrivateKey, PublicKey, new_key_tag
from .params import CryptoParams, ElementParams, SecretKeyDist
from .results import DecryptResult
from .ring import DCRTPoly, Format, NativePoly, Poly
from .sampling import (
    DiscreteGaussianGenerator,
    DiscreteUniformGenerator,
    RandomSource,
    TernaryUniformGenerator,
)

logger = logging.getLogger(__name__)

Key = Union[PrivateKey, PublicKey]
ZeroCiphertext = Tuple[DCRTPoly, ...]


class PKEScheme(ABC):
    """
    Interface of a public-key encryption scheme over RLWE.

    decrypt() dispatches on the caller-owned output buffer. A scheme must
    implement at least one of decrypt_native / decrypt_multiprecision; the
    other keeps raising UnsupportedRepresentationError.
    """

    @abstractmethod
    def key_gen(self, params: CryptoParams, make_sparse: bool = False) -> KeyPair:
        """Generate a bound (public key, private key) pair."""

    @abstractmethod
    def encrypt(self, plaintext: DCRTPoly, key: Key) -> Ciphertext:
        """Encrypt an already ring-encoded plaintext under either key kind."""

    @abstractmethod
    def encrypt_zero_core(self, key: Key, params: Optional[ElementParams] = None) -> ZeroCiphertext:
        """Fresh (c0, c1) that decrypts to zero under the matching secret."""

    @abstractmethod
    def decrypt_core(self, cv: Sequence[DCRTPoly], private_key: PrivateKey) -> DCRTPoly:
        """Raw noisy plaintext c0 + c1*s + c2*s^2 + ..."""

    def decrypt(
        self,
        ciphertext: Ciphertext,
        private_key: PrivateKey,
        plaintext: Union[NativePoly, Poly],
    ) -> DecryptResult:
        """
        Decrypt into a caller-owned output buffer.

        Args:
            ciphertext: Ciphertext to decrypt
            private_key: Private key used for decryption
            plaintext: NativePoly or Poly, mutated in place

        Returns:
            DecryptResult describing the decoded message

        Raises:
            UnsupportedRepresentationError: If the scheme cannot decode into
                this kind of buffer
        """
        if isinstance(plaintext, NativePoly):
            return self.decrypt_native(ciphertext, private_key, plaintext)
        if isinstance(plaintext, Poly):
            return self.decrypt_multiprecision(ciphertext, private_key, plaintext)
        raise UnsupportedRepresentationError(type(plaintext).__name__, scheme=type(self).__name__)

    def decrypt_native(
        self, ciphertext: Ciphertext, private_key: PrivateKey, plaintext: NativePoly
    ) -> DecryptResult:
        raise UnsupportedRepresentationError("NativePoly", scheme=type(self).__name__)

    def decrypt_multiprecision(
        self, ciphertext: Ciphertext, private_key: PrivateKey, plaintext: Poly
    ) -> DecryptResult:
        raise UnsupportedRepresentationError("Poly", scheme=type(self).__name__)


class PKEBase(PKEScheme):
    """
    Shared RLWE primitives.

    Randomness comes from the calling thread's default RandomSource unless a
    source is injected; an injected source is then used by every call made
    through this instance.
    """

    def __init__(self, source: Optional[RandomSource] = None):
        self._source = source
        self._dug = DiscreteUniformGenerator()

    # ------------------------------------------------------------------
    # Samplers
    # ------------------------------------------------------------------

    @staticmethod
    def _dgg(params: CryptoParams) -> DiscreteGaussianGenerator:
        return DiscreteGaussianGenerator(params.std_dev, params.gaussian_tail_cut)

    def _uniform(self, element_params: ElementParams) -> DCRTPoly:
        return DCRTPoly.sample(self._dug, element_params, Format.EVALUATION, self._source)

    def _error(self, params: CryptoParams, element_params: ElementParams) -> DCRTPoly:
        return DCRTPoly.sample(self._dgg(params), element_params, Format.EVALUATION, self._source)

    def _secret(self, params: CryptoParams, make_sparse: bool) -> DCRTPoly:
        dist = params.secret_key_dist
        if make_sparse or dist == SecretKeyDist.SPARSE_TERNARY:
            generator = TernaryUniformGenerator(hamming_weight=params.sparse_hamming_weight)
        elif dist == SecretKeyDist.GAUSSIAN:
            generator = self._dgg(params)
        else:
            generator = TernaryUniformGenerator()
        return DCRTPoly.sample(generator, params.element_params, Format.EVALUATION, self._source)

    def _blinding(self, params: CryptoParams, element_params: ElementParams) -> DCRTPoly:
        if params.secret_key_dist == SecretKeyDist.GAUSSIAN:
            generator = self._dgg(params)
        else:
            generator = TernaryUniformGenerator()
        return DCRTPoly.sample(generator, element_params, Format.EVALUATION, self._source)

    # ------------------------------------------------------------------
    # Key generation
    # ------------------------------------------------------------------

    def key_gen(self, params: CryptoParams, make_sparse: bool = False) -> KeyPair:
        """
        Generate a key pair.

        Args:
            params: Scheme parameters
            make_sparse: Draw s with exactly params.sparse_hamming_weight
                nonzero ternary coefficients

        Returns:
            KeyPair whose keys share one key tag
        """
        element_params = params.element_params
        s = self._secret(params, make_sparse)
        a = self._uniform(element_params)
        e = self._error(params, element_params)

        a_s = a * s
        b = e - a_s
        a_s.erase()
        e.erase()

        key_tag = new_key_tag()
        key_pair = KeyPair(
            public_key=PublicKey(params=params, elements=(b, a), key_tag=key_tag),
            secret_key=PrivateKey(params=params, element=s, key_tag=key_tag),
        )
        logger.debug(
            "Generated RLWE key pair",
            extra={"params_hash": params.get_hash()[:23], "key_tag": key_tag[:8], "sparse": make_sparse},
        )
        return key_pair

    # ------------------------------------------------------------------
    # Zero ciphertexts
    # ------------------------------------------------------------------

    def encrypt_zero_core(self, key: Key, params: Optional[ElementParams] = None) -> ZeroCiphertext:
        """
        Produce (c0, c1) that decrypts to zero under the secret matching `key`.

        The returned tuple and its elements are frozen and can be shared by
        several ciphertexts without copying.

        Args:
            key: PrivateKey or PublicKey
            params: Ring to encrypt over (default: the key's ring)

        Raises:
            ParameterMismatchError: If params differ from the key's ring
            TypeError: If key is neither a PrivateKey nor a PublicKey
        """
        if not isinstance(key, (PrivateKey, PublicKey)):
            raise TypeError(f"Expected PrivateKey or PublicKey, got {type(key).__name__}")

        crypto_params = key.params
        element_params = params or crypto_params.element_params
        if element_params != crypto_params.element_params:
            raise ParameterMismatchError(crypto_params.element_params.get_hash(), element_params.get_hash())

        if isinstance(key, PrivateKey):
            s = key.element
            c1 = self._uniform(element_params)
            e = self._error(crypto_params, element_params)
            c1_s = c1 * s
            c0 = e - c1_s
            c1_s.erase()
            e.erase()
        else:
            u = self._blinding(crypto_params, element_params)
            e0 = self._error(crypto_params, element_params)
            e1 = self._error(crypto_params, element_params)
            b_u = key.b * u
            a_u = key.a * u
            c0 = b_u + e0
            c1 = a_u + e1
            for temp in (u, e0, e1, b_u, a_u):
                temp.erase()

        return (c0.freeze(), c1.freeze())

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: DCRTPoly, key: Key) -> Ciphertext:
        """
        Encrypt an encoded plaintext element.

        Always performs full encryption: c = (c0 + plaintext, c1) for a fresh
        zero ciphertext (c0, c1) under `key`.
        """
        c0, c1 = self.encrypt_zero_core(key, plaintext.params)
        ciphertext = Ciphertext(elements=(c0 + plaintext, c1), params=key.params, key_tag=key.key_tag)
        logger.debug(
            "Encrypted element",
            extra={"key_kind": type(key).__name__, "key_tag": key.key_tag[:8]},
        )
        return ciphertext

    # ------------------------------------------------------------------
    # Decryption
    # ------------------------------------------------------------------

    def decrypt_core(self, cv: Sequence[DCRTPoly], private_key: PrivateKey) -> DCRTPoly:
        """
        Compute c0 + c1*s + c2*s^2 + ... in EVALUATION format.

        Pure: no randomness, no mutation of the inputs. Works for any number
        of ciphertext elements.
        """
        if len(cv) == 0:
            raise ValueError("Cannot decrypt an empty ciphertext vector")

        s = private_key.element
        result = cv[0].to_format(Format.EVALUATION)
        if len(cv) == 1:
            return result.copy()

        s_power = s
        for i, ci in enumerate(cv[1:], start=1):
            if i > 1:
                next_power = s_power * s
                if s_power is not s:
                    s_power.erase()
                s_power = next_power
            term = ci * s_power
            partial = result + term
            term.erase()
            if result is not cv[0]:
                result.erase()
            result = partial
        if s_power is not s:
            s_power.erase()
        return result
