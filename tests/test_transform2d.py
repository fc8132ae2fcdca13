"""Tests for the separable 2D autocorrelation shell wavelet transform."""

from __future__ import annotations

import numpy as np
import pytest
from conftest import get_test_image_shapes

from acshell import ac2d, fwt_ac, iac2d
from acshell.exceptions import InvalidLengthError, InvalidLevelError, ShapeMismatchError


@pytest.mark.round_trip
@pytest.mark.parametrize(("shape", "L_row", "L_col"), get_test_image_shapes())
def test_round_trip(shape, L_row, L_col, rng, filters):
    """Test that the inverse recovers the image, including non-square ones."""
    P, Q = filters
    image = rng.normal(size=shape)
    coeffs = ac2d(image, L_row, L_col, P, Q)
    assert coeffs.shape == (*shape, L_row + 1, L_col + 1)
    np.testing.assert_allclose(iac2d(coeffs), image, rtol=1e-12, atol=1e-12)


@pytest.mark.round_trip
def test_round_trip_256(rng, filters):
    """A 256 x 256 image at 4 levels per axis has 5 x 5 level pairs."""
    P, Q = filters
    image = rng.normal(size=(256, 256))
    coeffs = ac2d(image, 4, 4, P, Q)
    assert coeffs.shape == (256, 256, 5, 5)
    np.testing.assert_allclose(iac2d(coeffs), image, rtol=1e-12, atol=1e-12)


def test_matches_separable_1d(rng, filters):
    """
    Test against explicit 1D transforms.

    Every column is transformed with ``L_col`` levels, then every row of each
    column-level slice with ``L_row`` levels.
    """
    P, Q = filters
    n_row, n_col, L_row, L_col = 8, 16, 3, 2
    image = rng.normal(size=(n_row, n_col))

    columns = np.stack(
        [fwt_ac(image[:, j], L_col, P, Q) for j in range(n_col)], axis=1
    )
    expected = np.empty((n_row, n_col, L_row + 1, L_col + 1))
    for k in range(L_col + 1):
        for i in range(n_row):
            expected[i, :, :, k] = fwt_ac(columns[i, :, k], L_row, P, Q)

    np.testing.assert_allclose(ac2d(image, L_row, L_col, P, Q), expected, atol=1e-13)


def test_level_zero(rng, filters):
    """With no level on either axis the tensor holds the image."""
    P, Q = filters
    image = rng.normal(size=(16, 8))
    coeffs = ac2d(image, 0, 0, P, Q)
    assert coeffs.shape == (16, 8, 1, 1)
    np.testing.assert_array_equal(coeffs[:, :, 0, 0], image)


def test_transpose(rng, filters):
    """
    Transposing the image swaps the roles of the two axes.

    The transform of the transposed image is the transform of the image with
    the levels exchanged and both the spatial and the level axes swapped, and
    inverting the permuted coefficients gives back the transposed image.
    """
    P, Q = filters
    image = rng.normal(size=(16, 32))
    coeffs = ac2d(image, 2, 3, P, Q)
    coeffs_t = ac2d(image.T, 3, 2, P, Q)
    np.testing.assert_allclose(coeffs_t, coeffs.transpose(1, 0, 3, 2), atol=1e-12)
    np.testing.assert_allclose(iac2d(coeffs.transpose(1, 0, 3, 2)), image.T, atol=1e-12)


def test_shift_invariance(rng, filters):
    """A circular shift of the image shifts every band."""
    P, Q = filters
    image = rng.normal(size=(16, 16))
    shifted = np.roll(image, (3, -5), axis=(0, 1))
    np.testing.assert_allclose(
        ac2d(shifted, 2, 2, P, Q),
        np.roll(ac2d(image, 2, 2, P, Q), (3, -5), axis=(0, 1)),
        atol=1e-12,
    )


def test_inverse_does_not_modify_input(rng, filters):
    """Test that the inverse leaves the coefficients untouched."""
    P, Q = filters
    coeffs = ac2d(rng.normal(size=(16, 16)), 2, 2, P, Q)
    before = coeffs.copy()
    iac2d(coeffs)
    np.testing.assert_array_equal(coeffs, before)


class TestErrors:
    """Tests for invalid arguments."""

    def test_not_two_dimensional(self, filters):
        """Test that only images are accepted."""
        P, Q = filters
        with pytest.raises(ShapeMismatchError, match="two-dimensional"):
            ac2d(np.zeros((4, 4, 4)), 1, 1, P, Q)

    def test_not_dyadic(self, filters):
        """Test that both sides must be powers of two."""
        P, Q = filters
        with pytest.raises(InvalidLengthError, match="48"):
            ac2d(np.zeros((64, 48)), 1, 1, P, Q)

    @pytest.mark.parametrize(
        ("L_row", "L_col", "match"),
        [(4, 1, "L_row=4"), (1, 6, "L_col=6"), (-1, 0, "L_row=-1")],
    )
    def test_invalid_levels(self, filters, L_row, L_col, match):
        """L_row is bounded by log2(n_col) and L_col by log2(n_row)."""
        P, Q = filters
        with pytest.raises(InvalidLevelError, match=match):
            ac2d(np.zeros((32, 8)), L_row, L_col, P, Q)

    def test_inverse_not_four_dimensional(self):
        """Test that the inverse needs a 4D tensor."""
        with pytest.raises(ShapeMismatchError, match="four-dimensional"):
            iac2d(np.zeros((16, 16, 3)))

    def test_inverse_too_many_levels(self):
        """A side of 8 supports at most 4 level columns."""
        with pytest.raises(ShapeMismatchError):
            iac2d(np.zeros((8, 8, 5, 2)))
