"""
_basins.py
==========
Batch dispatch of the lower envelope of parabolas (generalized distance
transform) over independent rows of a 3-D array.

Public API
----------
  compute_basins(dim0, dim1, dim2, f, out, z_scratch, v_scratch, basins)
      Core entry point over flat row-major buffers.  For each of the
      dim0*dim2 rows along axis 1, writes

          out[i0, q, i2]    = min_p (q - p)**2 + f[i0, p, i2]
          basins[i0, q, i2] = the p achieving that minimum

  lower_envelope(f, axis=-1) -> (out, basins)
      Array-level wrapper: validates, allocates outputs and scratch, and
      transforms a 1-, 2- or 3-D array along one axis.

  squared_distance_transform(f) -> ndarray
      Separable transform along every axis (Felzenszwalb & Huttenlocher).

  seeds_to_cost(mask) -> ndarray
      Boolean seed mask → cost array for squared_distance_transform.

Logging
-------
One logger, ``logging.getLogger('basinfinder._basins')``, a child of the
package logger 'basinfinder':

  INFO level:    System capabilities (CPU, memory, numba version),
                 optimization status (LLVM, CUDA, threading), available
                 backends, per-call shape and backend, first-call JIT
                 compilation, CUDA transfer sizes and grid geometry.
  WARNING level: Backend fallbacks, numba performance warnings.

    import logging
    logging.getLogger('basinfinder').setLevel(logging.WARNING)

Backends
--------
  'python'        pure-Python reference, rows processed sequentially
  'cpu-parallel'  numba.njit(parallel=True), prange over rows
  'cuda'          numba.cuda.jit, one thread per row
  'best'          the most optimized of the above that is available

All backends produce bit-identical results.  CPU thread count follows
numba.set_num_threads(n).
"""

import logging
import math

import numpy as np

from basinfinder._logging import (
    log_optimization_status,
    install_numba_warning_filter,
    log_backend_availability,
    log_dispatch,
    log_device_transfer,
    log_cuda_launch,
)
from basinfinder._backend import (
    check_numba_available,
    check_cuda_available,
    get_available_backends,
    get_best_backend,
    resolve_backend,
    import_cpu_kernels,
    import_cuda_kernels,
)
from basinfinder._context import get_backend_override
from basinfinder._envelope import compute_basins_python
from basinfinder._scratch import allocate_scratch, validate_scratch
from basinfinder._utils import (
    validate_dims,
    validate_buffers,
    check_finite as _check_finite,
    as_float_array,
)


logger = logging.getLogger(__name__)


_NUMBA_AVAILABLE = check_numba_available()
_cpu_import_ok, _compute_basins_njit = import_cpu_kernels()

_, _CUDA_AVAILABLE = check_cuda_available()
_BACKENDS_AVAILABLE = get_available_backends()

if _CUDA_AVAILABLE:
    _cuda_import_ok, _compute_basins_cuda, _compute_cuda_grid = import_cuda_kernels()
    if _cuda_import_ok:
        from numba import cuda
    else:
        _CUDA_AVAILABLE = False


# Track first calls to kernels for compilation logging
_kernel_first_call = {}


log_optimization_status(_NUMBA_AVAILABLE)
log_backend_availability(_BACKENDS_AVAILABLE, _NUMBA_AVAILABLE)
install_numba_warning_filter(_NUMBA_AVAILABLE)


def _log_first_call(backend, dtype):
    kernel_key = f"{backend}-{dtype}"
    if _kernel_first_call.get(kernel_key, True):
        logger.info(f"  Compiling {kernel_key} kernel (cached for future calls)")
        _kernel_first_call[kernel_key] = False


def _on_device(*buffers):
    return _CUDA_AVAILABLE and any(cuda.is_cuda_array(b) for b in buffers)


# ======================================================================== #
# Core entry point                                                          #
# ======================================================================== #


def compute_basins(
    dim0,
    dim1,
    dim2,
    f,
    out,
    z_scratch,
    v_scratch,
    basins,
    backend: str = "best",
    threads_per_block: int = 128,
) -> None:
    """
    Lower envelope of parabolas for every row of a (dim0, dim1, dim2) array.

    Parameters
    ----------
    dim0, dim1, dim2 : int
        Logical shape, each >= 1.  Axis 1 is the transform axis; each
        (i0, i2) pair selects one independent row of length dim1.
    f : float ndarray, flat, dim0*dim1*dim2
        Input heights in row-major order.  Must be finite.
    out : float ndarray, flat, dim0*dim1*dim2
        Receives the envelope value at every position.  Must not alias f.
    z_scratch : float ndarray, flat, dim0*(dim1+1)*dim2
        Boundary scratch.  Left in an unspecified state.
    v_scratch : int ndarray, flat, dim0*dim1*dim2
        Vertex scratch.  Left in an unspecified state.
    basins : int ndarray, flat, dim0*dim1*dim2
        Receives the index of the winning parabola at every position.
    backend : str, default 'best'
        'best', 'python', 'cpu-parallel' or 'cuda'.  An active
        use_backend() context takes precedence.  An unavailable backend
        falls back to the best available one with a warning.
    threads_per_block : int, default 128
        CUDA block size; ignored by the CPU backends.

    Raises
    ------
    TypeError, ValueError
        On malformed shapes or buffers (checked before any kernel runs).

    Notes
    -----
    If every buffer is already a CUDA device array and the resolved backend
    is 'cuda', the kernel runs on them in place with no host transfer.
    Returns only after every row has finished.
    """
    dim0, dim1, dim2 = validate_dims(dim0, dim1, dim2)
    validate_buffers(dim0, dim1, dim2, f, out, basins)
    validate_scratch(dim0, dim1, dim2, z_scratch, v_scratch)

    backend_override = get_backend_override()
    if backend_override is not None:
        backend = backend_override

    try:
        resolved_backend = resolve_backend(backend)
    except ValueError as e:
        logger.warning(str(e))
        resolved_backend = get_best_backend()

    buffers = (f, out, z_scratch, v_scratch, basins)
    on_device = _on_device(*buffers)
    if on_device and resolved_backend != "cuda":
        raise TypeError(
            f"CUDA device arrays require backend='cuda', got {resolved_backend!r}"
        )

    log_dispatch(dim0, dim1, dim2, f.dtype, resolved_backend)

    if resolved_backend == "cuda":
        _log_first_call(resolved_backend, f.dtype)
        n_rows = dim0 * dim2
        blocks_per_grid, threads_per_block = _compute_cuda_grid(
            n_rows, threads_per_block
        )

        if on_device:
            log_cuda_launch(blocks_per_grid, threads_per_block, n_rows)
            _compute_basins_cuda[blocks_per_grid, threads_per_block](
                dim0, dim1, dim2, f, out, z_scratch, v_scratch, basins
            )
            cuda.synchronize()
            return

        log_device_transfer(
            "H→D",
            [
                ("f", f),
                ("z_scratch", z_scratch),
                ("v_scratch", v_scratch),
            ],
        )
        d_f = cuda.to_device(f)
        d_z = cuda.to_device(z_scratch)
        d_v = cuda.to_device(v_scratch)
        d_out = cuda.device_array_like(out)
        d_basins = cuda.device_array_like(basins)

        log_cuda_launch(blocks_per_grid, threads_per_block, n_rows)
        _compute_basins_cuda[blocks_per_grid, threads_per_block](
            dim0, dim1, dim2, d_f, d_out, d_z, d_v, d_basins
        )

        log_device_transfer("D→H", [("out", out), ("basins", basins)])
        d_out.copy_to_host(out)
        d_basins.copy_to_host(basins)

    elif resolved_backend == "cpu-parallel":
        _log_first_call(resolved_backend, f.dtype)
        _compute_basins_njit(dim0, dim1, dim2, f, out, z_scratch, v_scratch, basins)

    elif resolved_backend == "python":
        compute_basins_python(dim0, dim1, dim2, f, out, z_scratch, v_scratch, basins)

    else:
        raise RuntimeError(f"Internal error: unhandled backend {resolved_backend!r}")


# ======================================================================== #
# Array-level wrappers                                                      #
# ======================================================================== #


def _as_transform_input(f):
    arr = as_float_array(f)
    if arr.ndim not in (1, 2, 3):
        raise ValueError(
            f"expected a 1-, 2- or 3-D array, got {arr.ndim}-D with shape {arr.shape}"
        )
    if arr.size == 0:
        raise ValueError(f"cannot transform an empty array (shape {arr.shape})")
    return arr


def lower_envelope(f, axis: int = -1, backend: str = "best", check_finite: bool = True):
    """
    Lower envelope of parabolas along one axis of an array.

    For every 1-D line along ``axis``::

        out[..., q, ...]    = min_p (q - p)**2 + f[..., p, ...]
        basins[..., q, ...] = argmin_p of the above

    Parameters
    ----------
    f : array_like, 1-D to 3-D
        Heights.  float32 and float64 are kept; anything else becomes float64.
    axis : int, default -1
        Transform axis.
    backend : str, default 'best'
        See compute_basins().
    check_finite : bool, default True
        Reject NaN/inf input before dispatch.  Disable only when the input
        is known to be finite.

    Returns
    -------
    out : ndarray, same shape as f, float32 or float64
    basins : int32 ndarray, same shape as f

    Examples
    --------
    >>> out, basins = lower_envelope([5.0, 0.0, 5.0])
    >>> out
    array([1., 0., 1.])
    >>> basins
    array([1, 1, 1], dtype=int32)
    """
    arr = _as_transform_input(f)
    ndim = arr.ndim
    if not -ndim <= axis < ndim:
        raise ValueError(f"axis {axis} is out of bounds for array of dimension {ndim}")
    axis = axis % ndim

    shape = arr.shape
    dim0 = math.prod(shape[:axis])
    dim1 = shape[axis]
    dim2 = math.prod(shape[axis + 1:])

    flat = np.ascontiguousarray(arr).ravel()
    if check_finite:
        _check_finite(flat)

    out = np.empty_like(flat)
    basins = np.empty(flat.size, dtype=np.int32)
    z_scratch, v_scratch = allocate_scratch(dim0, dim1, dim2)

    compute_basins(dim0, dim1, dim2, flat, out, z_scratch, v_scratch, basins, backend=backend)

    return out.reshape(shape), basins.reshape(shape)


def squared_distance_transform(f, backend: str = "best", check_finite: bool = True):
    """
    Separable squared-Euclidean generalized distance transform.

    Computes ``D(x) = min_y |x - y|**2 + f(y)`` over a 1-, 2- or 3-D grid by
    running lower_envelope() along each axis in turn.

    Parameters
    ----------
    f : array_like, 1-D to 3-D
        Cost at each grid point.  Use seeds_to_cost() to turn a seed mask
        into a cost array.
    backend : str, default 'best'
        See compute_basins().
    check_finite : bool, default True
        Reject NaN/inf input before dispatch.

    Returns
    -------
    ndarray
        Transformed values, same shape and float dtype as f.
    """
    result = _as_transform_input(f)
    if check_finite:
        _check_finite(result)
    for axis in range(result.ndim):
        result, _ = lower_envelope(result, axis=axis, backend=backend, check_finite=False)
    return result


def seeds_to_cost(mask, big=None):
    """
    Cost array for the squared distance to the nearest seed.

    Parameters
    ----------
    mask : array_like of bool, 1-D to 3-D
        True at seed positions.
    big : float, optional
        Cost of non-seed positions.  Defaults to one more than the sum of
        the squared extents, which exceeds every squared distance inside
        the grid while staying finite.

    Returns
    -------
    float64 ndarray
        0.0 at seeds, ``big`` elsewhere.  Where the mask has no seed at
        all, the transform returns ``big`` everywhere.

    Examples
    --------
    >>> squared_distance_transform(seeds_to_cost([False, True, False, False]))
    array([1., 0., 1., 4.])
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim not in (1, 2, 3):
        raise ValueError(f"expected a 1-, 2- or 3-D mask, got {mask.ndim}-D")
    if big is None:
        big = float(sum(extent * extent for extent in mask.shape)) + 1.0
    elif not np.isfinite(big) or big <= 0:
        raise ValueError(f"big must be a positive finite number, got {big}")
    return np.where(mask, 0.0, float(big))
