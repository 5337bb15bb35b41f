"""
RLWE key material.

Key Types:
    - PrivateKey: the secret ring element s. Erased in place on erase(),
      on context-manager exit, and when the object is garbage collected.
    - PublicKey: the pair (b, a) with b = -(a*s) + e, an RLWE sample of zero.
    - KeyPair: one PublicKey and one PrivateKey from a single generation call.

Keys generated together share a random key tag. Ciphertexts carry the tag of
the key that produced them, which lets schemes detect a cross-paired key
before decoding garbage.
"""

import hashlib
import secrets
import weakref
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..errors import KeyErasedError
from .params import CryptoParams
from .ring import DCRTPoly, Format


def new_key_tag() -> str:
    """Random identifier binding keys and ciphertexts of one generation call."""
    return secrets.token_hex(16)


@dataclass(frozen=True, eq=False)
class PublicKey:
    """
    RLWE public key (b, a).

    Safe to distribute to any party that needs to encrypt data.
    """

    params: CryptoParams
    elements: Tuple[DCRTPoly, DCRTPoly]
    key_tag: str

    def __post_init__(self):
        if len(self.elements) != 2:
            raise ValueError("A public key holds exactly two ring elements (b, a)")
        for element in self.elements:
            element.freeze()

    @property
    def b(self) -> DCRTPoly:
        return self.elements[0]

    @property
    def a(self) -> DCRTPoly:
        return self.elements[1]

    def get_fingerprint(self) -> str:
        """Get key fingerprint for identification."""
        digest = hashlib.sha256()
        for element in self.elements:
            digest.update(element.to_format(Format.EVALUATION).values.tobytes())
        return f"sha256:{digest.hexdigest()[:16]}"


class PrivateKey:
    """
    RLWE private key s.

    MUST be kept secret by the data owner. Use it as a context manager, or
    call erase(), to overwrite s as soon as it is no longer needed:

        with key_pair.secret_key as sk:
            scheme.decrypt(ct, sk, out)
    """

    def __init__(self, params: CryptoParams, element: DCRTPoly, key_tag: str):
        self.params = params
        self.key_tag = key_tag
        # takes ownership of element; a coefficient-form input is wiped after conversion
        self._element: Optional[DCRTPoly] = element.to_format(Format.EVALUATION)
        if self._element is not element:
            element.erase()
        elif element.frozen:
            # a frozen buffer cannot be erased, so own a writable copy
            self._element = element.copy()
        # runs on erase(), on garbage collection, or at interpreter exit
        self._finalizer = weakref.finalize(self, self._element.erase)

    @property
    def element(self) -> DCRTPoly:
        if self._element is None:
            raise KeyErasedError(self.key_tag)
        return self._element

    @property
    def is_erased(self) -> bool:
        return self._element is None

    def erase(self) -> None:
        """Overwrite s with zeros. Idempotent."""
        self._finalizer()
        self._element = None

    def __enter__(self) -> "PrivateKey":
        return self

    def __exit__(self, *args: Any) -> None:
        self.erase()

    def __repr__(self) -> str:
        state = "erased" if self.is_erased else "live"
        return f"PrivateKey(key_tag={self.key_tag[:8]}..., {state})"


@dataclass
class KeyPair:
    """
    Public and private key produced by one key generation call.

    Typically split after generation:
        - secret_key -> data owner only
        - public_key -> any party that encrypts
    """

    public_key: Optional[PublicKey]
    secret_key: Optional[PrivateKey]

    def good(self) -> bool:
        """True when both keys are present and the secret is still live."""
        return (
            self.public_key is not None
            and self.secret_key is not None
            and not self.secret_key.is_erased
        )

    def __enter__(self) -> "KeyPair":
        return self

    def __exit__(self, *args: Any) -> None:
        if self.secret_key is not None:
            self.secret_key.erase()
