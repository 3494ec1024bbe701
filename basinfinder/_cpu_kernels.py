"""
_cpu_kernels.py
===============
CPU-accelerated lower-envelope kernels using Numba.

This module contains ONLY numba-accelerated code and should not import other
project modules to avoid import-time complications.

Exported Functions
------------------
_build_envelope_nb : njit function
    Monotone-stack sweep building one row's envelope (V, Z).

_evaluate_envelope_nb : njit function
    Envelope scan writing one row's values and basins.

_compute_basins_njit : njit function
    Parallel batch kernel; one prange iteration per row.

Notes
-----
- The row helpers are inlined into the batch kernel by the JIT.
- Intersections are computed in float64 whatever the input dtype.
- cache=True persists compiled binary to disk for faster subsequent runs
- The uncompiled Python of each function stays reachable through
  ``.py_func`` for debugging.
"""

import numpy as np
from numba import njit, prange


@njit(cache=True)
def _build_envelope_nb(f, f_base, z_base, stride, n, z, v):
    """
    Build the lower envelope of one row in the scratch buffers.

    Parameters
    ----------
    f      : float[:]
        Flat input buffer.
    f_base : int
        Offset of the row in f / v.
    z_base : int
        Offset of the row in z.
    stride : int
        Element stride along the transform axis (dim2).
    n      : int
        Row length (dim1).
    z      : float[:]
        Boundary scratch.
    v      : int[:]
        Vertex scratch.

    Returns
    -------
    int
        Index k of the last envelope vertex.
    """
    for i1 in range(n):
        v[f_base + i1 * stride] = 0
        z[z_base + i1 * stride] = 0.0
    z[z_base + n * stride] = 0.0

    k = 0
    z[z_base] = -np.inf
    z[z_base + stride] = np.inf

    for q in range(1, n):
        fq = np.float64(f[f_base + q * stride])
        p = np.int64(v[f_base + k * stride])
        fp = np.float64(f[f_base + p * stride])
        s = ((fq + q * q) - (fp + p * p)) / (2.0 * q - 2.0 * p)

        while s <= z[z_base + k * stride]:
            k -= 1
            p = np.int64(v[f_base + k * stride])
            fp = np.float64(f[f_base + p * stride])
            s = ((fq + q * q) - (fp + p * p)) / (2.0 * q - 2.0 * p)

        k += 1
        v[f_base + k * stride] = q
        z[z_base + k * stride] = s
        z[z_base + (k + 1) * stride] = np.inf

    return k


@njit(cache=True)
def _evaluate_envelope_nb(f, f_base, z_base, stride, n, z, v, out, basins):
    """
    Scan a finished envelope, writing out[q] and basins[q] for the row.

    The cursor only moves right, so the scan is O(n).
    """
    k = 0
    for q in range(n):
        while z[z_base + (k + 1) * stride] < q:
            k += 1
        p = np.int64(v[f_base + k * stride])
        basins[f_base + q * stride] = p
        out[f_base + q * stride] = (q - p) * (q - p) + np.float64(f[f_base + p * stride])


@njit(parallel=True, cache=True)
def _compute_basins_njit(dim0, dim1, dim2, f, out, z, v, basins):
    """
    Numba-compiled batch kernel.

    The loop over rows runs in parallel via prange.  No atomics or locks are
    needed: each row owns disjoint strided slices of out, basins, z and v.

    Parameters
    ----------
    dim0, dim1, dim2 : int
        Logical shape of the input; dim1 is the transform axis.
    f : float[dim0*dim1*dim2]
        Input heights, row-major.
    out : float[dim0*dim1*dim2]
        Output lower-envelope values.
    z : float[dim0*(dim1+1)*dim2]
        Boundary scratch.
    v : int[dim0*dim1*dim2]
        Vertex scratch.
    basins : int[dim0*dim1*dim2]
        Output basin indices.
    """
    for row in prange(dim0 * dim2):
        i0 = row // dim2
        i2 = row % dim2
        f_base = i0 * dim1 * dim2 + i2
        z_base = i0 * (dim1 + 1) * dim2 + i2
        _build_envelope_nb(f, f_base, z_base, dim2, dim1, z, v)
        _evaluate_envelope_nb(f, f_base, z_base, dim2, dim1, z, v, out, basins)
