"""
_cuda_kernels.py
================
CUDA-accelerated lower-envelope kernels using Numba CUDA.

This module contains ONLY numba.cuda code and should not import other project
modules to avoid import-time complications.

Exported Functions
------------------
_build_envelope_cuda : cuda.jit device function
    Monotone-stack sweep for one row (device-only).

_evaluate_envelope_cuda : cuda.jit device function
    Envelope scan for one row (device-only).

_compute_basins_cuda : cuda.jit kernel
    GPU-parallel batch kernel, one thread per row.

_compute_cuda_grid : function
    Helper to compute CUDA grid dimensions.

Notes
-----
- 1D thread grid: thread ``row`` handles the (row // dim2, row % dim2) row
- Threads past the last row return before touching memory
- No atomics: every row writes a disjoint strided region
"""

import math

try:
    from numba import cuda
    _CUDA_AVAILABLE = True
except ImportError:
    _CUDA_AVAILABLE = False


if _CUDA_AVAILABLE:
    # ======================================================================== #
    # CUDA Kernels                                                              #
    # ======================================================================== #

    @cuda.jit(device=True)
    def _build_envelope_cuda(f, f_base, z_base, stride, n, z, v):
        """
        Device function building one row's envelope in global scratch.

        Same arithmetic and comparison operators as the CPU kernel, so the
        two backends agree bit for bit.
        """
        for i1 in range(n):
            v[f_base + i1 * stride] = 0
            z[z_base + i1 * stride] = 0.0
        z[z_base + n * stride] = 0.0

        k = 0
        z[z_base] = -math.inf
        z[z_base + stride] = math.inf

        for q in range(1, n):
            fq = float(f[f_base + q * stride])
            p = int(v[f_base + k * stride])
            fp = float(f[f_base + p * stride])
            s = ((fq + q * q) - (fp + p * p)) / (2.0 * q - 2.0 * p)

            while s <= z[z_base + k * stride]:
                k -= 1
                p = int(v[f_base + k * stride])
                fp = float(f[f_base + p * stride])
                s = ((fq + q * q) - (fp + p * p)) / (2.0 * q - 2.0 * p)

            k += 1
            v[f_base + k * stride] = q
            z[z_base + k * stride] = s
            z[z_base + (k + 1) * stride] = math.inf

        return k

    @cuda.jit(device=True)
    def _evaluate_envelope_cuda(f, f_base, z_base, stride, n, z, v, out, basins):
        """Device function scanning one row's envelope into out / basins."""
        k = 0
        for q in range(n):
            while z[z_base + (k + 1) * stride] < q:
                k += 1
            p = int(v[f_base + k * stride])
            basins[f_base + q * stride] = p
            out[f_base + q * stride] = (q - p) * (q - p) + float(f[f_base + p * stride])

    @cuda.jit
    def _compute_basins_cuda(dim0, dim1, dim2, f, out, z, v, basins):
        """
        CUDA kernel: one thread per (i0, i2) row.

        Parameters
        ----------
        dim0, dim1, dim2 : int
            Logical shape of the input; dim1 is the transform axis.
        f, out : device float arrays, length dim0*dim1*dim2
        z : device float array, length dim0*(dim1+1)*dim2
        v, basins : device int arrays, length dim0*dim1*dim2
        """
        row = cuda.grid(1)
        if row >= dim0 * dim2:
            return

        i0 = row // dim2
        i2 = row % dim2
        f_base = i0 * dim1 * dim2 + i2
        z_base = i0 * (dim1 + 1) * dim2 + i2
        _build_envelope_cuda(f, f_base, z_base, dim2, dim1, z, v)
        _evaluate_envelope_cuda(f, f_base, z_base, dim2, dim1, z, v, out, basins)


def _compute_cuda_grid(n_rows, threads_per_block=128):
    """
    Compute CUDA grid dimensions for the 1D row thread space.

    Parameters
    ----------
    n_rows : int
        Number of independent rows (dim0 * dim2).
    threads_per_block : int, default 128
        Threads per block.

    Returns
    -------
    blocks_per_grid : int
        Number of blocks needed to cover every row.
    threads_per_block : int
        Block size (echoed back).

    Examples
    --------
    >>> _compute_cuda_grid(1000, 128)
    (8, 128)

    8 * 128 = 1024 threads, the last 24 of which are idle.
    """
    if threads_per_block < 1:
        raise ValueError(f"threads_per_block must be >= 1, got {threads_per_block}")
    blocks = (n_rows + threads_per_block - 1) // threads_per_block
    return max(blocks, 1), threads_per_block
