"""
Tests for the negacyclic NTT and NTT-friendly prime search.
"""

import numpy as np
import pytest

from latticeguard.pke.ntt import find_ntt_primes, is_prime, make_ntt_plan


def negacyclic_mul(a, b, q):
    """Schoolbook product in Z_q[X]/(X^n + 1)."""
    n = len(a)
    out = [0] * n
    for i in range(n):
        for j in range(n):
            k = i + j
            if k < n:
                out[k] += int(a[i]) * int(b[j])
            else:
                out[k - n] -= int(a[i]) * int(b[j])
    return [x % q for x in out]


class TestPrimes:
    """Tests for primality and prime search."""

    def test_is_prime_known_values(self):
        """Test primality on known primes and composites."""
        assert is_prime(2)
        assert is_prime(65537)
        assert is_prime(2**31 - 1)
        assert not is_prime(1)
        assert not is_prime(65535)
        assert not is_prime(561)  # Carmichael number

    def test_find_ntt_primes(self):
        """Test that found primes are distinct, descending and NTT-friendly."""
        primes = find_ntt_primes(64, 30, 3)
        assert len(primes) == 3
        assert list(primes) == sorted(set(primes), reverse=True)
        for q in primes:
            assert is_prime(q)
            assert (q - 1) % 128 == 0
            assert q < 2**30

    def test_find_ntt_primes_rejects_wide_moduli(self):
        """Test that moduli wider than 31 bits are refused."""
        with pytest.raises(ValueError):
            find_ntt_primes(64, 40, 1)


class TestNTTPlan:
    """Tests for the NTT plan."""

    @pytest.fixture
    def plan(self):
        """Plan for n=16 over the largest 30-bit NTT prime."""
        q = find_ntt_primes(16, 30, 1)[0]
        return make_ntt_plan(16, q)

    def test_forward_inverse_roundtrip(self, plan):
        """Test that inverse(forward(a)) == a."""
        rng = np.random.default_rng(0)
        a = rng.integers(0, plan.q, plan.n, dtype=np.int64)
        assert np.array_equal(plan.inverse(plan.forward(a)), a)

    def test_forward_does_not_mutate_input(self, plan):
        """Test that transforms return new arrays."""
        a = np.arange(plan.n, dtype=np.int64)
        original = a.copy()
        plan.forward(a)
        assert np.array_equal(a, original)

    def test_pointwise_product_is_negacyclic(self, plan):
        """Test pointwise products against schoolbook negacyclic multiplication."""
        rng = np.random.default_rng(1)
        a = rng.integers(0, plan.q, plan.n, dtype=np.int64)
        b = rng.integers(0, plan.q, plan.n, dtype=np.int64)
        product = plan.inverse((plan.forward(a) * plan.forward(b)) % plan.q)
        assert [int(x) for x in product] == negacyclic_mul(a, b, plan.q)

    def test_x_to_the_n_is_minus_one(self, plan):
        """Test that X * X^(n-1) = -1."""
        x = np.zeros(plan.n, dtype=np.int64)
        x[1] = 1
        x_last = np.zeros(plan.n, dtype=np.int64)
        x_last[plan.n - 1] = 1
        product = plan.inverse((plan.forward(x) * plan.forward(x_last)) % plan.q)
        assert int(product[0]) == plan.q - 1
        assert not product[1:].any()

    def test_plan_is_cached(self, plan):
        """Test that plans are built once per (n, q)."""
        assert make_ntt_plan(plan.n, plan.q) is plan

    def test_invalid_dimension(self):
        """Test that non power-of-two dimensions are rejected."""
        with pytest.raises(ValueError):
            make_ntt_plan(12, 97)

    def test_modulus_without_root(self):
        """Test that q must be 1 mod 2n."""
        with pytest.raises(ValueError):
            make_ntt_plan(16, 101)
