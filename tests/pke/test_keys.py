"""
Tests for RLWE key material and private key erasure.
"""

import gc

import numpy as np
import pytest

from latticeguard.errors import KeyErasedError
from latticeguard.pke.keys import KeyPair, PrivateKey, PublicKey
from latticeguard.pke.ring import DCRTPoly, Format


class TestKeyPair:
    """Tests for generated key pairs."""

    def test_keys_share_tag(self, key_pair):
        """Test that both keys carry the same tag."""
        assert key_pair.public_key.key_tag == key_pair.secret_key.key_tag
        assert len(key_pair.public_key.key_tag) == 32

    def test_tags_are_unique(self, pke, small_params):
        """Test that separate generations are distinguishable."""
        assert pke.key_gen(small_params).public_key.key_tag != pke.key_gen(small_params).public_key.key_tag

    def test_good(self, key_pair):
        """Test the validity check."""
        assert key_pair.good()
        key_pair.secret_key.erase()
        assert not key_pair.good()

    def test_empty_pair_is_not_good(self):
        """Test that a default pair is not usable."""
        assert not KeyPair(public_key=None, secret_key=None).good()

    def test_context_manager_erases_secret(self, key_pair):
        """Test that leaving the with block erases the secret."""
        with key_pair as kp:
            assert kp.good()
        assert key_pair.secret_key.is_erased
        assert key_pair.public_key is not None


class TestPublicKey:
    """Tests for the public key."""

    def test_elements_frozen(self, key_pair):
        """Test that public key elements are shared read-only."""
        pk = key_pair.public_key
        assert pk.b.frozen
        assert pk.a.frozen
        assert pk.elements == (pk.b, pk.a)

    def test_fingerprint(self, key_pair):
        """Test fingerprint format and stability."""
        fingerprint = key_pair.public_key.get_fingerprint()
        assert fingerprint.startswith("sha256:")
        assert len(fingerprint) == len("sha256:") + 16
        assert fingerprint == key_pair.public_key.get_fingerprint()

    def test_requires_two_elements(self, key_pair):
        """Test that a public key is exactly (b, a)."""
        pk = key_pair.public_key
        with pytest.raises(ValueError):
            PublicKey(params=pk.params, elements=(pk.b,), key_tag=pk.key_tag)

    def test_hashable(self, key_pair, pke, small_params):
        """Test that public keys can index a key directory."""
        other = pke.key_gen(small_params).public_key
        directory = {key_pair.public_key: "alice", other: "bob"}
        assert directory[key_pair.public_key] == "alice"
        assert directory[other] == "bob"


class TestPrivateKey:
    """Tests for private key lifetime."""

    def test_element_in_evaluation_format(self, key_pair):
        """Test that the secret is held in evaluation form."""
        assert key_pair.secret_key.element.format == Format.EVALUATION
        assert not key_pair.secret_key.element.frozen

    def test_erase_zeroes_secret(self, key_pair):
        """Test that erase overwrites the secret in place."""
        sk = key_pair.secret_key
        element = sk.element
        assert element.values.any()
        sk.erase()
        assert sk.is_erased
        assert not element.values.any()

    def test_use_after_erase(self, key_pair):
        """Test that an erased key cannot be used."""
        sk = key_pair.secret_key
        sk.erase()
        with pytest.raises(KeyErasedError) as exc_info:
            _ = sk.element
        assert exc_info.value.code == "LG_PKE_KEY_ERASED"
        assert sk.key_tag not in str(exc_info.value.details)

    def test_erase_idempotent(self, key_pair):
        """Test that erase can be called repeatedly."""
        key_pair.secret_key.erase()
        key_pair.secret_key.erase()
        assert key_pair.secret_key.is_erased

    def test_context_manager(self, key_pair):
        """Test with-block erasure."""
        with key_pair.secret_key as sk:
            element = sk.element
        assert sk.is_erased
        assert not element.values.any()

    def test_erased_on_collection(self, element_params, small_params):
        """Test that dropping the last reference erases the secret."""
        key = PrivateKey(small_params, DCRTPoly.from_integers(element_params, [1, -1, 1]), "a" * 32)
        element = key.element
        del key
        gc.collect()
        assert not element.values.any()

    def test_coefficient_input_is_wiped(self, element_params, small_params):
        """Test that a coefficient-form input is consumed."""
        coeff = DCRTPoly.from_integers(element_params, [1, 0, -1], Format.COEFFICIENT)
        key = PrivateKey(small_params, coeff, "b" * 32)
        assert not coeff.values.any()
        assert np.any(key.element.values)
        assert [int(x) for x in key.element.centered_coefficients()[:3]] == [1, 0, -1]

    def test_frozen_input_is_copied(self, element_params, small_params):
        """Test that a shared read-only element is still erasable once owned by a key."""
        shared = DCRTPoly.from_integers(element_params, [1, -1, 1]).freeze()
        key = PrivateKey(small_params, shared, "c" * 32)
        element = key.element
        assert element is not shared
        assert not element.frozen
        assert element == shared
        key.erase()
        assert not element.values.any()
        assert [int(x) for x in shared.centered_coefficients()[:3]] == [1, -1, 1]

    def test_repr_hides_secret(self, key_pair):
        """Test that repr shows only the tag prefix and state."""
        sk = key_pair.secret_key
        assert "live" in repr(sk)
        assert sk.key_tag not in repr(sk)
        sk.erase()
        assert "erased" in repr(sk)
