"""
Randomness source and lattice samplers.

RandomSource expands 32 bytes of OS entropy into a ChaCha20 keystream and
turns it into the integer vectors the samplers need. The default source is
thread-local and is rekeyed after a fork, so no keystream is ever shared by
concurrent callers. A seeded source exists only for reproducible test
vectors and must be constructed explicitly.

Samplers:
    - DiscreteUniformGenerator: uniform residues modulo every RNS prime
    - DiscreteGaussianGenerator: centered discrete Gaussian via a cumulative table
    - TernaryUniformGenerator: {-1, 0, 1} coefficients, optionally with a
      fixed number of nonzero entries
"""

import hashlib
import logging
import math
import os
import secrets
import threading
from functools import lru_cache
from typing import Optional, Sequence

import numpy as np
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

from ..errors import EntropySourceError, KeystreamReuseError

logger = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 16

_local = threading.local()


def _os_entropy(num_bytes: int) -> bytes:
    try:
        return secrets.token_bytes(num_bytes)
    except (OSError, NotImplementedError) as e:
        raise EntropySourceError(str(e)) from e


class RandomSource:
    """
    ChaCha20 keystream used as a cryptographic PRNG.

    An instance serializes its own draws; independent instances never share
    keystream. Do not pass one instance to several threads unless you accept
    the lock contention; use get_random_source() instead.

    After a fork an unseeded source rekeys from OS entropy on its next draw;
    a seeded source raises KeystreamReuseError instead.
    """

    def __init__(self, seed: Optional[bytes] = None):
        self.seeded = seed is not None
        self._lock = threading.Lock()
        if seed is None:
            self._rekey()
        else:
            key = hashlib.sha256(b"latticeguard-seed:" + bytes(seed)).digest()
            self._stream = Cipher(algorithms.ChaCha20(key, bytes(NONCE_SIZE)), mode=None).encryptor()
            self.pid = os.getpid()
            logger.warning("Seeded RandomSource in use; output is reproducible and not secret")

    def _rekey(self) -> None:
        key = _os_entropy(KEY_SIZE)
        nonce = _os_entropy(NONCE_SIZE)
        self._stream = Cipher(algorithms.ChaCha20(key, nonce), mode=None).encryptor()
        self.pid = os.getpid()

    def random_bytes(self, num_bytes: int) -> bytes:
        with self._lock:
            # a forked child inherits the keystream state
            if os.getpid() != self.pid:
                if self.seeded:
                    raise KeystreamReuseError(self.pid, os.getpid())
                self._rekey()
                logger.debug("RandomSource rekeyed after fork", extra={"pid": self.pid})
            return self._stream.update(bytes(num_bytes))

    def random_uint64(self, count: int) -> np.ndarray:
        return np.frombuffer(self.random_bytes(8 * count), dtype="<u8").astype(np.uint64)

    def uniform_below(self, bound: int, count: int) -> np.ndarray:
        """`count` independent uniform integers in [0, bound), by rejection sampling."""
        if bound < 1:
            raise ValueError("bound must be positive")
        if bound == 1:
            return np.zeros(count, dtype=np.int64)
        mask = np.uint64((1 << (bound - 1).bit_length()) - 1)
        out = np.empty(count, dtype=np.int64)
        filled = 0
        while filled < count:
            need = count - filled
            draw = self.random_uint64(need + need // 2 + 8) & mask
            accepted = draw[draw < np.uint64(bound)][:need]
            out[filled : filled + accepted.size] = accepted.astype(np.int64)
            filled += accepted.size
        return out


def get_random_source() -> RandomSource:
    """Per-thread default source, rekeyed from OS entropy after a fork."""
    source = getattr(_local, "source", None)
    if source is None or source.pid != os.getpid():
        source = RandomSource()
        _local.source = source
    return source


class DiscreteUniformGenerator:
    """Uniform ring elements: each residue row is uniform modulo its prime."""

    # Uniform in coefficient form is uniform in evaluation form
    format_agnostic = True

    def sample_residues(
        self, ring_dim: int, moduli: Sequence[int], source: Optional[RandomSource] = None
    ) -> np.ndarray:
        source = source or get_random_source()
        return np.stack([source.uniform_below(q, ring_dim) for q in moduli])


@lru_cache(maxsize=16)
def _cumulative_table(std_dev: float, tail_cut: float) -> np.ndarray:
    bound = int(math.ceil(std_dev * tail_cut))
    weights = [math.exp(-(x * x) / (2.0 * std_dev * std_dev)) for x in range(-bound, bound + 1)]
    total = math.fsum(weights)
    table = []
    acc = 0.0
    for w in weights:
        acc += w
        table.append(min(int(round(acc / total * 2**63)), 2**63))
    table[-1] = 2**63
    return np.array(table, dtype=np.uint64)


def _to_residues(values: np.ndarray, moduli: Sequence[int], wipe: bool = False) -> np.ndarray:
    residues = np.stack([values % q for q in moduli]).astype(np.int64)
    if wipe:
        values.fill(0)
    return residues


class DiscreteGaussianGenerator:
    """Centered discrete Gaussian over [-ceil(std_dev * tail_cut), ceil(std_dev * tail_cut)]."""

    format_agnostic = False

    def __init__(self, std_dev: float, tail_cut: float = 12.0):
        self.std_dev = std_dev
        self.tail_cut = tail_cut
        self.bound = int(math.ceil(std_dev * tail_cut))
        self._table = _cumulative_table(std_dev, tail_cut)

    def generate_vector(self, size: int, source: Optional[RandomSource] = None) -> np.ndarray:
        source = source or get_random_source()
        u = source.random_uint64(size) >> np.uint64(1)
        idx = np.searchsorted(self._table, u, side="right")
        return idx.astype(np.int64) - self.bound

    def sample_residues(
        self, ring_dim: int, moduli: Sequence[int], source: Optional[RandomSource] = None
    ) -> np.ndarray:
        return _to_residues(self.generate_vector(ring_dim, source), moduli, wipe=True)


class TernaryUniformGenerator:
    """
    Ternary coefficients in {-1, 0, 1}.

    With hamming_weight > 0 exactly that many coefficients are nonzero
    (capped at the ring dimension), each +1 or -1 with equal probability.
    """

    format_agnostic = False

    def __init__(self, hamming_weight: int = 0):
        self.hamming_weight = hamming_weight

    def generate_vector(self, size: int, source: Optional[RandomSource] = None) -> np.ndarray:
        source = source or get_random_source()
        if self.hamming_weight <= 0:
            return source.uniform_below(3, size) - 1

        h = min(self.hamming_weight, size)
        # partial Fisher-Yates picks h distinct positions
        positions = np.arange(size, dtype=np.int64)
        for i in range(h):
            j = i + int(source.uniform_below(size - i, 1)[0])
            positions[i], positions[j] = positions[j], positions[i]
        signs = source.uniform_below(2, h)
        out = np.zeros(size, dtype=np.int64)
        out[positions[:h]] = signs * 2 - 1
        positions.fill(0)
        signs.fill(0)
        return out

    def sample_residues(
        self, ring_dim: int, moduli: Sequence[int], source: Optional[RandomSource] = None
    ) -> np.ndarray:
        return _to_residues(self.generate_vector(ring_dim, source), moduli, wipe=True)
