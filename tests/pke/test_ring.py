"""
Tests for RNS ring elements and decryption output buffers.
"""

import numpy as np
import pytest

from latticeguard.errors import ParameterMismatchError
from latticeguard.pke.params import ElementParams
from latticeguard.pke.ring import DCRTPoly, Format, NativePoly, Poly
from latticeguard.pke.sampling import DiscreteUniformGenerator, RandomSource


def centered(element):
    return [int(x) for x in element.centered_coefficients()]


class TestDCRTPolyConstruction:
    """Tests for building ring elements."""

    def test_zero(self, element_params):
        """Test the zero element."""
        zero = DCRTPoly.zero(element_params)
        assert zero.values.shape == (2, 64)
        assert not zero.values.any()
        assert zero.format == Format.EVALUATION

    def test_from_integers_roundtrip(self, element_params):
        """Test that small signed coefficients survive CRT reconstruction."""
        coeffs = [3, -1, 0, 7, -42]
        element = DCRTPoly.from_integers(element_params, coeffs)
        assert centered(element) == coeffs + [0] * 59

    def test_from_integers_multiprecision(self, element_params):
        """Test coefficients wider than one RNS prime."""
        big = element_params.modulus // 3
        element = DCRTPoly.from_integers(element_params, np.array([big, 1], dtype=object))
        assert int(element.crt_reconstruct()[0]) == big

    def test_from_integers_too_long(self, element_params):
        """Test that inputs longer than n are rejected."""
        with pytest.raises(ValueError):
            DCRTPoly.from_integers(element_params, [1] * 65)

    def test_shape_validation(self, element_params):
        """Test that the residue matrix must match the ring."""
        with pytest.raises(ValueError):
            DCRTPoly(element_params, np.zeros((1, 64), dtype=np.int64))

    def test_sample_uniform(self, element_params):
        """Test sampling through a generator."""
        element = DCRTPoly.sample(DiscreteUniformGenerator(), element_params, source=RandomSource(b"ring"))
        assert element.format == Format.EVALUATION
        assert element.values.any()


class TestDCRTPolyFormats:
    """Tests for coefficient/evaluation conversion."""

    def test_roundtrip(self, element_params):
        """Test that converting back and forth is the identity."""
        element = DCRTPoly.from_integers(element_params, [1, 2, 3], Format.COEFFICIENT)
        evaluated = element.to_format(Format.EVALUATION)
        assert evaluated.format == Format.EVALUATION
        assert np.array_equal(evaluated.to_format(Format.COEFFICIENT).values, element.values)

    def test_same_format_returns_self(self, element_params):
        """Test that a no-op conversion does not copy."""
        element = DCRTPoly.zero(element_params)
        assert element.to_format(Format.EVALUATION) is element

    def test_equality_across_formats(self, element_params):
        """Test that equal elements compare equal in either format."""
        coeff = DCRTPoly.from_integers(element_params, [5, -5], Format.COEFFICIENT)
        evaluated = DCRTPoly.from_integers(element_params, [5, -5], Format.EVALUATION)
        assert coeff == evaluated
        assert evaluated == coeff


class TestDCRTPolyArithmetic:
    """Tests for ring arithmetic."""

    def test_add_sub(self, element_params):
        """Test addition and subtraction."""
        a = DCRTPoly.from_integers(element_params, [1, 2, 3])
        b = DCRTPoly.from_integers(element_params, [10, -20])
        assert centered(a + b)[:3] == [11, -18, 3]
        assert centered(a - b)[:3] == [-9, 22, 3]
        assert centered(-a)[:3] == [-1, -2, -3]

    def test_add_mixed_formats(self, element_params):
        """Test that the right operand follows the left operand's format."""
        a = DCRTPoly.from_integers(element_params, [1], Format.COEFFICIENT)
        b = DCRTPoly.from_integers(element_params, [2], Format.EVALUATION)
        result = a + b
        assert result.format == Format.COEFFICIENT
        assert centered(result)[0] == 3

    def test_mul_negacyclic(self, element_params):
        """Test that X * X^(n-1) = -1."""
        x = DCRTPoly.from_integers(element_params, [0, 1])
        x_last = DCRTPoly.from_integers(element_params, [0] * 63 + [1])
        assert centered(x * x_last) == [-1] + [0] * 63

    def test_mul_small_polynomials(self, element_params):
        """Test (1 + X)(1 - X) = 1 - X^2."""
        a = DCRTPoly.from_integers(element_params, [1, 1])
        b = DCRTPoly.from_integers(element_params, [1, -1])
        assert centered(a * b)[:3] == [1, 0, -1]

    def test_scalar_mul(self, element_params):
        """Test multiplication by an integer from either side."""
        a = DCRTPoly.from_integers(element_params, [1, -2])
        assert centered(a * 3)[:2] == [3, -6]
        assert (3 * a) == (a * 3)

    def test_pow(self, element_params):
        """Test exponentiation against repeated multiplication."""
        a = DCRTPoly.from_integers(element_params, [1, 1, -1])
        assert a**3 == a * a * a
        assert a**1 == a
        assert a**0 == DCRTPoly.from_integers(element_params, [1])

    def test_negative_pow(self, element_params):
        """Test that negative exponents are refused."""
        with pytest.raises(ValueError):
            DCRTPoly.zero(element_params) ** -1

    def test_operands_are_not_mutated(self, element_params):
        """Test that arithmetic returns new elements."""
        a = DCRTPoly.from_integers(element_params, [4, 5])
        b = DCRTPoly.from_integers(element_params, [6])
        before = a.values.copy()
        _ = a + b
        _ = a * b
        _ = a**2
        assert np.array_equal(a.values, before)

    def test_param_mismatch(self, element_params):
        """Test that elements of different rings cannot be combined."""
        other = DCRTPoly.zero(ElementParams.generate(128))
        with pytest.raises(ParameterMismatchError):
            DCRTPoly.zero(element_params) + other

    def test_type_mismatch(self, element_params):
        """Test that only ring elements can be added."""
        with pytest.raises(TypeError):
            DCRTPoly.zero(element_params) + 1

    def test_unhashable(self, element_params):
        """Test that mutable elements are not hashable."""
        with pytest.raises(TypeError):
            hash(DCRTPoly.zero(element_params))


class TestDCRTPolyMemory:
    """Tests for freezing and erasure."""

    def test_values_view_is_read_only(self, element_params):
        """Test that callers cannot write through values."""
        element = DCRTPoly.from_integers(element_params, [1])
        with pytest.raises(ValueError):
            element.values[0, 0] = 5

    def test_erase(self, element_params):
        """Test that erase zeroes the buffer in place."""
        element = DCRTPoly.from_integers(element_params, [1, 2, 3])
        element.erase()
        assert not element.values.any()

    def test_frozen_element_survives_erase(self, element_params):
        """Test that shared frozen elements are not wiped."""
        element = DCRTPoly.from_integers(element_params, [1, 2, 3]).freeze()
        assert element.frozen
        element.erase()
        assert centered(element)[:3] == [1, 2, 3]

    def test_copy_is_writable(self, element_params):
        """Test that copies own a fresh buffer."""
        element = DCRTPoly.from_integers(element_params, [1]).freeze()
        clone = element.copy()
        assert not clone.frozen
        assert clone == element

    def test_repr_hides_values(self, element_params):
        """Test that repr never prints residues."""
        element = DCRTPoly.from_integers(element_params, [123456])
        text = repr(element)
        assert "ring_dim=64" in text
        assert "123456" not in text


class TestOutputBuffers:
    """Tests for NativePoly and Poly."""

    def test_native_poly(self):
        """Test writing into a word-sized buffer."""
        out = NativePoly(4)
        out.set_values(np.array([1, 2, 3, 4]), 17)
        assert len(out) == 4
        assert out.modulus == 17
        assert out.values.tolist() == [1, 2, 3, 4]

    def test_native_poly_length_mismatch(self):
        """Test that the buffer length is fixed."""
        with pytest.raises(ValueError):
            NativePoly(4).set_values(np.array([1, 2]), 17)

    def test_poly_multiprecision(self):
        """Test that Poly keeps arbitrarily large coefficients."""
        out = Poly(2)
        out.set_values([2**100, 1], 2**101)
        assert int(out.values[0]) == 2**100
