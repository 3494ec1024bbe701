"""
_scratch.py
===========
Scratch buffer contract for the envelope kernels.

Every row needs private space for its vertex list V (dim1 entries) and its
boundary list Z (dim1 + 1 entries).  The kernels take both as caller-owned
flat buffers laid out like the input:

  v_scratch : (dim0, dim1,     dim2) row-major, integer
  z_scratch : (dim0, dim1 + 1, dim2) row-major, floating point

Because the row slices are interleaved with stride dim2, concurrent rows
never share a scratch element.  Kernels zero a row's prefix before building
its envelope, so buffers may be reused across calls without clearing.
"""

from typing import Tuple

import numpy as np

from basinfinder._utils import is_array, check_float_dtype, check_index_dtype


def scratch_shapes(dim0: int, dim1: int, dim2: int) -> Tuple[tuple, tuple]:
    """
    Logical shapes of the scratch buffers.

    Returns
    -------
    tuple
        ((dim0, dim1, dim2), (dim0, dim1 + 1, dim2)) for (v, z).
    """
    return (dim0, dim1, dim2), (dim0, dim1 + 1, dim2)


def scratch_sizes(dim0: int, dim1: int, dim2: int) -> Tuple[int, int]:
    """
    Element counts of the flat scratch buffers.

    >>> scratch_sizes(2, 5, 3)
    (30, 36)
    """
    return dim0 * dim1 * dim2, dim0 * (dim1 + 1) * dim2


def allocate_scratch(
    dim0: int,
    dim1: int,
    dim2: int,
    z_dtype=np.float64,
    v_dtype=np.int32,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Allocate zero-filled flat scratch buffers.

    Parameters
    ----------
    dim0, dim1, dim2 : int
        Logical input shape; dim1 is the transform axis.
    z_dtype : numpy dtype, default float64
        Boundary dtype.  float64 keeps stored breakpoints exact for any
        input precision.
    v_dtype : numpy dtype, default int32
        Vertex index dtype.

    Returns
    -------
    (z_scratch, v_scratch) : tuple[np.ndarray, np.ndarray]
        Flat arrays of length dim0*(dim1+1)*dim2 and dim0*dim1*dim2.
    """
    v_size, z_size = scratch_sizes(dim0, dim1, dim2)
    return np.zeros(z_size, dtype=z_dtype), np.zeros(v_size, dtype=v_dtype)


def validate_scratch(dim0, dim1, dim2, z_scratch, v_scratch) -> None:
    """
    Check that caller-supplied scratch buffers satisfy the contract.

    Raises
    ------
    TypeError
        If z_scratch is not float32/float64, or v_scratch is not an integer
        dtype able to hold sample index dim1 - 1.
    ValueError
        If a buffer is not 1-D or is shorter than required.
    """
    v_size, z_size = scratch_sizes(dim0, dim1, dim2)

    for name, buf, size in (
        ("z_scratch", z_scratch, z_size),
        ("v_scratch", v_scratch, v_size),
    ):
        if not is_array(buf):
            raise TypeError(f"{name} must be an array, got {type(buf).__name__}")
        if name == "z_scratch":
            check_float_dtype(name, buf)
        else:
            check_index_dtype(name, buf, dim1)
        if buf.ndim != 1:
            raise ValueError(f"{name} must be a flat 1-D buffer, got shape {buf.shape}")
        if buf.size < size:
            raise ValueError(
                f"{name} too small for shape ({dim0}, {dim1}, {dim2}): "
                f"need {size} elements, got {buf.size}"
            )
