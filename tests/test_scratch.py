"""
tests/test_scratch.py
=====================
Tests for the scratch buffer contract (_scratch.py) and the input
validators it shares with the host layer (_utils.py).
"""

import numpy as np
import pytest

from basinfinder._scratch import (
    scratch_shapes,
    scratch_sizes,
    allocate_scratch,
    validate_scratch,
)
from basinfinder._utils import validate_dims, check_finite, as_float_array, is_array


class TestScratchSizes:
    def test_shapes(self):
        assert scratch_shapes(2, 5, 3) == ((2, 5, 3), (2, 6, 3))

    def test_sizes(self):
        assert scratch_sizes(2, 5, 3) == (30, 36)

    def test_single_row(self):
        assert scratch_sizes(1, 1, 1) == (1, 2)

    @pytest.mark.parametrize("dims", [(1, 7, 1), (4, 3, 2), (3, 10, 5)])
    def test_z_has_one_extra_slot_per_row(self, dims):
        v_size, z_size = scratch_sizes(*dims)
        assert z_size - v_size == dims[0] * dims[2]


class TestAllocateScratch:
    def test_default_dtypes(self):
        z, v = allocate_scratch(2, 4, 3)
        assert z.dtype == np.float64
        assert v.dtype == np.int32
        assert z.shape == (30,)
        assert v.shape == (24,)

    def test_zero_filled(self):
        z, v = allocate_scratch(2, 4, 3)
        assert not z.any()
        assert not v.any()

    def test_custom_dtypes(self):
        z, v = allocate_scratch(1, 4, 1, z_dtype=np.float32, v_dtype=np.int64)
        assert z.dtype == np.float32
        assert v.dtype == np.int64

    def test_allocated_scratch_validates(self):
        z, v = allocate_scratch(3, 6, 2)
        validate_scratch(3, 6, 2, z, v)


class TestValidateScratch:
    def test_oversized_buffers_accepted(self):
        validate_scratch(1, 4, 1, np.zeros(100), np.zeros(100, dtype=np.int32))

    def test_z_too_small(self):
        with pytest.raises(ValueError, match="z_scratch too small.*need 5"):
            validate_scratch(1, 4, 1, np.zeros(4), np.zeros(4, dtype=np.int32))

    def test_v_too_small(self):
        with pytest.raises(ValueError, match="v_scratch too small.*need 4"):
            validate_scratch(1, 4, 1, np.zeros(5), np.zeros(3, dtype=np.int32))

    def test_integer_z_rejected(self):
        with pytest.raises(TypeError, match="z_scratch must be floating point"):
            validate_scratch(1, 4, 1, np.zeros(5, dtype=np.int32), np.zeros(4, dtype=np.int32))

    def test_float_v_rejected(self):
        with pytest.raises(TypeError, match="v_scratch must be integer"):
            validate_scratch(1, 4, 1, np.zeros(5), np.zeros(4))

    def test_shaped_buffer_rejected(self):
        with pytest.raises(ValueError, match="flat 1-D"):
            validate_scratch(1, 4, 1, np.zeros((5, 1)), np.zeros(4, dtype=np.int32))

    def test_narrow_v_dtype_rejected(self):
        with pytest.raises(TypeError, match="cannot hold sample index 199"):
            validate_scratch(1, 200, 1, np.zeros(201), np.zeros(200, dtype=np.int8))

    def test_narrow_unsigned_v_rejected(self):
        with pytest.raises(TypeError, match="v_scratch dtype uint8 cannot hold sample index 299"):
            validate_scratch(1, 300, 1, np.zeros(301), np.zeros(300, dtype=np.uint8))

    def test_unsigned_v_wide_enough_accepted(self):
        validate_scratch(1, 256, 1, np.zeros(257), np.zeros(256, dtype=np.uint8))

    def test_float16_z_rejected(self):
        with pytest.raises(TypeError, match="z_scratch must be float32 or float64"):
            validate_scratch(1, 4, 1, np.zeros(5, dtype=np.float16), np.zeros(4, dtype=np.int32))


class TestValidators:
    def test_validate_dims_returns_ints(self):
        assert validate_dims(np.int64(2), 3, 1) == (2, 3, 1)

    def test_bool_dim_rejected(self):
        with pytest.raises(TypeError, match="dim0 must be an integer"):
            validate_dims(True, 3, 1)

    def test_check_finite_passes(self):
        check_finite(np.array([0.0, -1e300, 1e300]))

    def test_check_finite_counts(self):
        with pytest.raises(ValueError, match="3 non-finite"):
            check_finite(np.array([np.nan, np.inf, -np.inf, 0.0]))

    def test_as_float_array_promotes_integers(self):
        assert as_float_array([1, 2, 3]).dtype == np.float64

    def test_as_float_array_keeps_float32(self):
        arr = np.zeros(3, dtype=np.float32)
        assert as_float_array(arr) is arr

    def test_is_array(self):
        assert is_array(np.zeros(3))
        assert not is_array([0.0, 1.0])

    @pytest.mark.parametrize("dtype", [np.float16, np.longdouble, np.int8, np.bool_])
    def test_as_float_array_promotes_unsupported_widths(self, dtype):
        assert as_float_array(np.zeros(3, dtype=dtype)).dtype == np.float64
