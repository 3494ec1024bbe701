"""
_utils.py
=========
Input validation for the basinfinder host layer.

The kernels assume validated shapes and finite input; these checks run
before dispatch so a bad call fails with a descriptive error instead of an
out-of-bounds write or a silently corrupted envelope.
"""

import numbers
from typing import Tuple

import numpy as np

# Float widths the compiled kernels are built for (no float16/longdouble).
KERNEL_FLOAT_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def is_array(buf) -> bool:
    """True for numpy arrays and array-likes exposing dtype/shape (e.g. CUDA device arrays)."""
    return all(hasattr(buf, attr) for attr in ("dtype", "shape", "ndim", "size"))


def check_float_dtype(name, buf) -> None:
    """Raise TypeError unless buf is float32 or float64."""
    if buf.dtype.kind != "f":
        raise TypeError(f"{name} must be floating point, got dtype {buf.dtype}")
    if buf.dtype not in KERNEL_FLOAT_DTYPES:
        raise TypeError(f"{name} must be float32 or float64, got dtype {buf.dtype}")


def check_index_dtype(name, buf, dim1) -> None:
    """
    Raise TypeError unless buf is an integer dtype wide enough for index dim1 - 1.

    >>> check_index_dtype("basins", np.zeros(3, dtype=np.uint8), 300)
    Traceback (most recent call last):
    ...
    TypeError: basins dtype uint8 cannot hold sample index 299
    """
    if buf.dtype.kind not in "iu":
        raise TypeError(f"{name} must be integer, got dtype {buf.dtype}")
    if np.iinfo(buf.dtype).max < dim1 - 1:
        raise TypeError(f"{name} dtype {buf.dtype} cannot hold sample index {dim1 - 1}")


def validate_dims(dim0, dim1, dim2) -> Tuple[int, int, int]:
    """
    Validate the logical shape (dim0, dim1, dim2).

    Returns
    -------
    tuple[int, int, int]
        The dimensions as plain ints.

    Raises
    ------
    TypeError
        If any dimension is not an integer.
    ValueError
        If any dimension is < 1.

    Examples
    --------
    >>> validate_dims(2, 5, 1)
    (2, 5, 1)

    >>> validate_dims(2, 0, 1)
    Traceback (most recent call last):
    ...
    ValueError: dim1 must be >= 1, got 0
    """
    dims = []
    for name, value in (("dim0", dim0), ("dim1", dim1), ("dim2", dim2)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")
        dims.append(int(value))
    return tuple(dims)


def validate_buffers(dim0, dim1, dim2, f, out, basins) -> None:
    """
    Check the input and output buffers of a compute_basins call.

    f and out must be flat float32/float64 arrays and basins a flat integer
    array wide enough for index dim1 - 1, each holding at least
    dim0*dim1*dim2 elements.

    Raises
    ------
    TypeError
        On a non-array argument or an unsupported dtype.
    ValueError
        On a non-flat or undersized buffer.
    """
    size = dim0 * dim1 * dim2

    for name, buf in (("f", f), ("out", out), ("basins", basins)):
        if not is_array(buf):
            raise TypeError(f"{name} must be an array, got {type(buf).__name__}")
        if name == "basins":
            check_index_dtype(name, buf, dim1)
        else:
            check_float_dtype(name, buf)
        if buf.ndim != 1:
            raise ValueError(f"{name} must be a flat 1-D buffer, got shape {buf.shape}")
        if buf.size < size:
            raise ValueError(
                f"{name} too small for shape ({dim0}, {dim1}, {dim2}): "
                f"need {size} elements, got {buf.size}"
            )

    if out is f:
        raise ValueError("out must not alias f: the envelope scan re-reads f")


def check_finite(f: np.ndarray) -> None:
    """
    Reject NaN or infinite input values.

    Non-finite heights make the intersection formula produce NaN
    boundaries, which silently corrupt the envelope of that row.

    Raises
    ------
    ValueError
        If f contains any NaN or +/-inf entries.
    """
    finite = np.isfinite(f)
    if not finite.all():
        n_bad = int(finite.size - np.count_nonzero(finite))
        raise ValueError(
            f"input contains {n_bad} non-finite value(s) (NaN or inf); "
            "the lower envelope is only defined for finite heights"
        )


def as_float_array(f) -> np.ndarray:
    """
    Return f as a float32 or float64 ndarray.

    float32 and float64 pass through unchanged; every other dtype (integers,
    bools, float16, longdouble) is converted to float64.

    >>> as_float_array(np.array([1, 2], dtype=np.float16)).dtype
    dtype('float64')
    """
    arr = np.asarray(f)
    if arr.dtype not in KERNEL_FLOAT_DTYPES:
        arr = arr.astype(np.float64)
    return arr
