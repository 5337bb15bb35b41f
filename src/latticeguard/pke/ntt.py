"""
Number-theoretic helpers for the cyclotomic ring Z_q[X]/(X^n + 1).

Provides NTT-friendly prime search and a vectorized negacyclic NTT plan.
A negacyclic transform needs a primitive 2n-th root of unity psi in Z_q, so
every modulus must satisfy q = 1 (mod 2n). Inputs are twisted by powers of
psi, then a cyclic Cooley-Tukey transform runs with one NumPy pass per stage.

All moduli are kept below 2^31 so that residue products fit in int64.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple

import numpy as np

MAX_MODULUS_BITS = 31

_MILLER_RABIN_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)


def is_prime(q: int) -> bool:
    """Deterministic Miller-Rabin for q < 3.3 * 10^24."""
    if q < 2:
        return False
    for p in _MILLER_RABIN_BASES:
        if q % p == 0:
            return q == p
    d = q - 1
    r = 0
    while d % 2 == 0:
        d //= 2
        r += 1
    for a in _MILLER_RABIN_BASES:
        x = pow(a, d, q)
        if x in (1, q - 1):
            continue
        for _ in range(r - 1):
            x = pow(x, 2, q)
            if x == q - 1:
                break
        else:
            return False
    return True


def _factorize(n: int) -> List[int]:
    """Distinct prime factors of n."""
    factors = []
    x = n
    p = 2
    while p * p <= x:
        if x % p == 0:
            factors.append(p)
            while x % p == 0:
                x //= p
        p += 1 if p == 2 else 2
    if x > 1:
        factors.append(x)
    return factors


def _find_generator(q: int) -> int:
    """Smallest generator of the multiplicative group of Z_q (q prime)."""
    phi = q - 1
    primes = _factorize(phi)
    for g in range(2, q):
        if all(pow(g, phi // p, q) != 1 for p in primes):
            return g
    raise ValueError(f"No generator found for q={q}")


@lru_cache(maxsize=None)
def find_ntt_primes(ring_dim: int, bits: int, count: int) -> Tuple[int, ...]:
    """
    Find `count` distinct primes q < 2^bits with q = 1 (mod 2 * ring_dim).

    Primes are returned in descending order, starting from the largest
    candidate below 2^bits.
    """
    if bits > MAX_MODULUS_BITS:
        raise ValueError(f"Moduli above {MAX_MODULUS_BITS} bits overflow int64 residue products")
    step = 2 * ring_dim
    candidate = ((1 << bits) - 1) // step * step + 1
    if candidate >= 1 << bits:
        candidate -= step
    primes: List[int] = []
    while len(primes) < count:
        if candidate <= step:
            raise ValueError(f"Not enough {bits}-bit NTT primes for ring dimension {ring_dim}")
        if is_prime(candidate):
            primes.append(candidate)
        candidate -= step
    return tuple(primes)


def _bit_reverse_indices(n: int) -> np.ndarray:
    logn = n.bit_length() - 1
    rev = np.zeros(n, dtype=np.int64)
    for i in range(n):
        x = i
        r = 0
        for _ in range(logn):
            r = (r << 1) | (x & 1)
            x >>= 1
        rev[i] = r
    return rev


def _powers(base: int, count: int, q: int) -> np.ndarray:
    out = np.empty(count, dtype=np.int64)
    w = 1
    for i in range(count):
        out[i] = w
        w = (w * base) % q
    return out


@dataclass(frozen=True, eq=False)
class NTTPlan:
    """Precomputed tables for the negacyclic NTT over one prime modulus."""

    n: int
    q: int
    psi_pows: np.ndarray
    # psi^-i * n^-1, folds the final scaling into the untwist
    psi_inv_pows_scaled: np.ndarray
    rev: np.ndarray
    stage_roots: Tuple[np.ndarray, ...]
    stage_roots_inv: Tuple[np.ndarray, ...]

    def _butterflies(self, a: np.ndarray, roots: Tuple[np.ndarray, ...]) -> np.ndarray:
        q = self.q
        a = a[self.rev]
        for stage_roots in roots:
            half = stage_roots.shape[0]
            blocks = a.reshape(-1, 2 * half)
            u = blocks[:, :half].copy()
            t = (blocks[:, half:] * stage_roots) % q
            blocks[:, :half] = (u + t) % q
            blocks[:, half:] = (u - t) % q
        return a

    def forward(self, coeffs: np.ndarray) -> np.ndarray:
        """Coefficient -> evaluation representation. Returns a new array."""
        return self._butterflies((coeffs * self.psi_pows) % self.q, self.stage_roots)

    def inverse(self, evals: np.ndarray) -> np.ndarray:
        """Evaluation -> coefficient representation. Returns a new array."""
        a = self._butterflies(evals, self.stage_roots_inv)
        return (a * self.psi_inv_pows_scaled) % self.q


@lru_cache(maxsize=64)
def make_ntt_plan(n: int, q: int) -> NTTPlan:
    """
    Build (and cache) a negacyclic NTT plan for Z_q[X]/(X^n + 1).

    Requirements:
    - n is a power of two
    - q is prime and q = 1 (mod 2n)
    """
    if n < 2 or n & (n - 1) != 0:
        raise ValueError("NTT requires n to be a power of two.")
    if (q - 1) % (2 * n) != 0:
        raise ValueError(f"Negacyclic NTT needs 2n | (q-1); q-1={q - 1}, 2n={2 * n}.")

    g = _find_generator(q)
    psi = pow(g, (q - 1) // (2 * n), q)
    psi_inv = pow(psi, q - 2, q)
    omega = (psi * psi) % q
    omega_inv = pow(omega, q - 2, q)
    n_inv = pow(n, q - 2, q)

    stage_roots = []
    stage_roots_inv = []
    m = 2
    while m <= n:
        half = m // 2
        stage_roots.append(_powers(pow(omega, n // m, q), half, q))
        stage_roots_inv.append(_powers(pow(omega_inv, n // m, q), half, q))
        m *= 2

    return NTTPlan(
        n=n,
        q=q,
        psi_pows=_powers(psi, n, q),
        psi_inv_pows_scaled=(_powers(psi_inv, n, q) * n_inv) % q,
        rev=_bit_reverse_indices(n),
        stage_roots=tuple(stage_roots),
        stage_roots_inv=tuple(stage_roots_inv),
    )
