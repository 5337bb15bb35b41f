"""
RNS polynomial ring elements.

DCRTPoly stores an element of Z_Q[X]/(X^n + 1) as an int64 matrix with one
row of residues per RNS prime. An element is either in COEFFICIENT format
(residues of the polynomial coefficients) or in EVALUATION format (negacyclic
NTT of each row). Addition works in either format; multiplication and
exponentiation are pointwise in EVALUATION format.

All arithmetic returns new elements. freeze() makes the buffer read-only so
an element can be shared between ciphertexts without copying; erase()
overwrites the buffer in place and is used for secret material.

NativePoly and Poly are the caller-owned decryption output buffers.
"""

from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import ParameterMismatchError
from .ntt import make_ntt_plan
from .params import ElementParams
from .sampling import RandomSource


class Format(Enum):
    """Representation of a ring element."""

    COEFFICIENT = "coefficient"
    EVALUATION = "evaluation"


class DCRTPoly:
    """Double-CRT ring element over an ElementParams."""

    __slots__ = ("params", "format", "_values", "__weakref__")

    def __init__(self, params: ElementParams, values: np.ndarray, fmt: Format = Format.EVALUATION):
        values = np.asarray(values, dtype=np.int64)
        if values.shape != (params.num_towers, params.ring_dim):
            raise ValueError(
                f"Residue matrix shape {values.shape} does not match "
                f"({params.num_towers}, {params.ring_dim})"
            )
        self.params = params
        self.format = fmt
        self._values = values

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def zero(cls, params: ElementParams, fmt: Format = Format.EVALUATION) -> "DCRTPoly":
        return cls(params, np.zeros((params.num_towers, params.ring_dim), dtype=np.int64), fmt)

    @classmethod
    def from_integers(
        cls,
        params: ElementParams,
        coefficients: Union[Sequence[int], np.ndarray],
        fmt: Format = Format.EVALUATION,
    ) -> "DCRTPoly":
        """
        Element with the given (possibly negative or multiprecision) coefficients.

        Shorter inputs are zero-padded to the ring dimension.
        """
        coeffs = np.asarray(coefficients)
        if coeffs.ndim != 1 or coeffs.shape[0] > params.ring_dim:
            raise ValueError(f"Expected at most {params.ring_dim} coefficients")
        if coeffs.dtype != object:
            coeffs = coeffs.astype(np.int64)
        padded = np.zeros(params.ring_dim, dtype=coeffs.dtype)
        padded[: coeffs.shape[0]] = coeffs
        residues = np.stack([(padded % q).astype(np.int64) for q in params.moduli])
        return cls(params, residues, Format.COEFFICIENT).to_format(fmt)

    @classmethod
    def sample(
        cls,
        generator,
        params: ElementParams,
        fmt: Format = Format.EVALUATION,
        source: Optional[RandomSource] = None,
    ) -> "DCRTPoly":
        """Draw an element from one of the samplers in latticeguard.pke.sampling."""
        residues = generator.sample_residues(params.ring_dim, params.moduli, source)
        if generator.format_agnostic:
            return cls(params, residues, fmt)
        coeff = cls(params, residues, Format.COEFFICIENT)
        element = coeff.to_format(fmt)
        if element is not coeff:
            coeff.erase()
        return element

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the residue matrix."""
        view = self._values.view()
        view.setflags(write=False)
        return view

    @property
    def ring_dim(self) -> int:
        return self.params.ring_dim

    def to_format(self, fmt: Format) -> "DCRTPoly":
        """Return this element in the requested format (self if already there)."""
        if fmt == self.format:
            return self
        rows = []
        for q, row in zip(self.params.moduli, self._values):
            plan = make_ntt_plan(self.params.ring_dim, q)
            rows.append(plan.forward(row) if fmt == Format.EVALUATION else plan.inverse(row))
        return DCRTPoly(self.params, np.stack(rows), fmt)

    def copy(self) -> "DCRTPoly":
        return DCRTPoly(self.params, self._values.copy(), self.format)

    def freeze(self) -> "DCRTPoly":
        """Make the residue buffer read-only; returns self."""
        self._values.setflags(write=False)
        return self

    @property
    def frozen(self) -> bool:
        return not self._values.flags.writeable

    def erase(self) -> None:
        """Overwrite the residue buffer with zeros in place. Frozen (shared) elements are left intact."""
        if self._values.flags.writeable:
            self._values.fill(0)

    def crt_reconstruct(self) -> np.ndarray:
        """Coefficients in [0, Q) as Python integers (object array)."""
        coeff = self.to_format(Format.COEFFICIENT)
        big_q = self.params.modulus
        acc = np.zeros(self.params.ring_dim, dtype=object)
        for q, row in zip(self.params.moduli, coeff._values):
            q_hat = big_q // q
            q_hat_inv = pow(q_hat % q, -1, q)
            acc = acc + ((row * q_hat_inv) % q).astype(object) * q_hat
        return acc % big_q

    def centered_coefficients(self) -> np.ndarray:
        """Coefficients lifted to (-Q/2, Q/2] as Python integers."""
        big_q = self.params.modulus
        coeffs = self.crt_reconstruct()
        return np.where(coeffs > big_q // 2, coeffs - big_q, coeffs)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _moduli_column(self) -> np.ndarray:
        return np.array(self.params.moduli, dtype=np.int64)[:, None]

    def _check(self, other: "DCRTPoly") -> None:
        if not isinstance(other, DCRTPoly):
            raise TypeError(f"Expected DCRTPoly, got {type(other).__name__}")
        if other.params != self.params:
            raise ParameterMismatchError(self.params.get_hash(), other.params.get_hash())

    def __add__(self, other: "DCRTPoly") -> "DCRTPoly":
        self._check(other)
        rhs = other.to_format(self.format)
        return DCRTPoly(self.params, (self._values + rhs._values) % self._moduli_column(), self.format)

    def __sub__(self, other: "DCRTPoly") -> "DCRTPoly":
        self._check(other)
        rhs = other.to_format(self.format)
        return DCRTPoly(self.params, (self._values - rhs._values) % self._moduli_column(), self.format)

    def __neg__(self) -> "DCRTPoly":
        return DCRTPoly(self.params, (-self._values) % self._moduli_column(), self.format)

    def __mul__(self, other: Union["DCRTPoly", int]) -> "DCRTPoly":
        moduli = self._moduli_column()
        if isinstance(other, (int, np.integer)):
            scalars = np.array([int(other) % q for q in self.params.moduli], dtype=np.int64)[:, None]
            return DCRTPoly(self.params, (self._values * scalars) % moduli, self.format)
        self._check(other)
        lhs = self.to_format(Format.EVALUATION)
        rhs = other.to_format(Format.EVALUATION)
        return DCRTPoly(self.params, (lhs._values * rhs._values) % moduli, Format.EVALUATION)

    __rmul__ = __mul__

    def __pow__(self, exponent: int) -> "DCRTPoly":
        if exponent < 0:
            raise ValueError("Negative powers are not supported")
        moduli = self._moduli_column()
        base = self.to_format(Format.EVALUATION)._values.copy()
        result = np.ones_like(base)
        e = int(exponent)
        while e:
            if e & 1:
                result = (result * base) % moduli
            e >>= 1
            if e:
                base = (base * base) % moduli
        base.fill(0)
        return DCRTPoly(self.params, result, Format.EVALUATION)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DCRTPoly) or other.params != self.params:
            return NotImplemented
        return bool(np.array_equal(self._values, other.to_format(self.format)._values))

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"DCRTPoly(ring_dim={self.params.ring_dim}, towers={self.params.num_towers}, "
            f"format={self.format.value})"
        )


class NativePoly:
    """
    Decryption output with word-sized coefficients over a single modulus.

    Caller-owned; schemes write into it with set_values().
    """

    def __init__(self, length: int, modulus: int = 0):
        self.modulus = modulus
        self._values = np.zeros(length, dtype=np.int64)

    def __len__(self) -> int:
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        return self._values

    def set_values(self, values: np.ndarray, modulus: int) -> None:
        values = np.asarray(values, dtype=np.int64)
        if values.shape != self._values.shape:
            raise ValueError(f"Expected {len(self)} coefficients, got {values.shape}")
        self._values[:] = values
        self.modulus = modulus


class Poly:
    """Decryption output with multiprecision (Python int) coefficients."""

    def __init__(self, length: int, modulus: int = 0):
        self.modulus = modulus
        self._values = np.zeros(length, dtype=object)

    def __len__(self) -> int:
        return self._values.shape[0]

    @property
    def values(self) -> np.ndarray:
        return self._values

    def set_values(self, values: Sequence[int], modulus: int) -> None:
        values = np.asarray(values, dtype=object)
        if values.shape != self._values.shape:
            raise ValueError(f"Expected {len(self)} coefficients, got {values.shape}")
        self._values[:] = values
        self.modulus = modulus
