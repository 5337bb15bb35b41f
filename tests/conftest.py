"""
Pytest configuration and fixtures.

This file ensures proper path setup for imports and provides small ring
parameters so the suite stays fast.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from latticeguard.pke import CryptoParams, PKEBase  # noqa: E402


@pytest.fixture
def small_params():
    """n=64 ring with two 30-bit primes and t=257."""
    return CryptoParams.create(ring_dim=64, plaintext_modulus=257)


@pytest.fixture
def element_params(small_params):
    """Ring description of small_params."""
    return small_params.element_params


@pytest.fixture
def pke():
    """Shared primitives drawing from the thread-local source."""
    return PKEBase()


@pytest.fixture
def key_pair(pke, small_params):
    """Fresh key pair over small_params."""
    return pke.key_gen(small_params)
