"""
RLWE ciphertext container.

A ciphertext is an ordered sequence of ring elements (c0, c1, ..., ck) that
decrypts as c0 + c1*s + ... + ck*s^k. Fresh ciphertexts have two elements;
longer ones come from products that were not relinearized.

The scheme metadata (scale, level, noise scale degree, free-form entries) is
carried for the scheme layers and never interpreted here.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from .params import CryptoParams, ElementParams
from .ring import DCRTPoly


@dataclass(frozen=True, eq=False)
class Ciphertext:
    """Immutable RLWE ciphertext. Elements are frozen on construction; compared and hashed by identity."""

    elements: Tuple[DCRTPoly, ...]
    params: CryptoParams
    key_tag: str

    # Metadata
    scale: float = 1.0
    level: int = 0
    noise_scale_deg: int = 1
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))
        if len(self.elements) < 2:
            raise ValueError("A ciphertext holds at least two ring elements")
        for element in self.elements:
            element.freeze()

    def __len__(self) -> int:
        return len(self.elements)

    @property
    def element_params(self) -> ElementParams:
        return self.elements[0].params
