"""
_envelope.py
============
Pure-Python reference implementation of the lower envelope of parabolas.

This is the 'python' backend and the correctness baseline that the numba and
CUDA kernels are checked against.  The functions mirror the compiled kernels
line for line: they read and write flat row-major buffers through a
(base, stride) pair instead of slicing, so a disagreement between backends
points at arithmetic, never at indexing.

Row addressing
--------------
For a logical input of shape (dim0, dim1, dim2), the row selected by
(i0, i2) starts at

    f_base = i0 * dim1 * dim2 + i2          (f, out, basins, v)
    z_base = i0 * (dim1 + 1) * dim2 + i2    (z)

and successive elements along the transform axis are ``dim2`` apart.
"""

import numpy as np


INF = float("inf")


def _intersect(q, p, fq, fp):
    """Abscissa where the parabolas rooted at q and p cross (p < q)."""
    return ((fq + q * q) - (fp + p * p)) / (2.0 * q - 2.0 * p)


def build_envelope(f, f_base, z_base, stride, n, z, v):
    """
    Build the lower envelope of the parabolas rooted at one row.

    Parameters
    ----------
    f : float ndarray (flat)
        Input heights.
    f_base, z_base : int
        Offsets of the row's first element in ``f``/``v`` and ``z``.
    stride : int
        Distance between successive row elements (dim2).
    n : int
        Row length (dim1).
    z : float ndarray (flat)
        Boundary scratch, at least ``z_base + n*stride + 1`` long.
    v : int ndarray (flat)
        Vertex scratch, at least ``f_base + (n-1)*stride + 1`` long.

    Returns
    -------
    int
        Index ``k`` of the last vertex on the envelope.
    """
    for i1 in range(n):
        v[f_base + i1 * stride] = 0
        z[z_base + i1 * stride] = 0.0
    z[z_base + n * stride] = 0.0

    k = 0
    z[z_base] = -INF
    z[z_base + stride] = INF

    for q in range(1, n):
        fq = float(f[f_base + q * stride])
        p = int(v[f_base + k * stride])
        s = _intersect(q, p, fq, float(f[f_base + p * stride]))

        while s <= z[z_base + k * stride]:
            k -= 1
            p = int(v[f_base + k * stride])
            s = _intersect(q, p, fq, float(f[f_base + p * stride]))

        k += 1
        v[f_base + k * stride] = q
        z[z_base + k * stride] = s
        z[z_base + (k + 1) * stride] = INF

    return k


def evaluate_envelope(f, f_base, z_base, stride, n, z, v, out, basins):
    """
    Scan a finished envelope and write the row's values and basins.

    Arguments are as for :func:`build_envelope`, plus the ``out`` and
    ``basins`` flat output buffers, addressed like ``f``.
    """
    k = 0
    for q in range(n):
        while z[z_base + (k + 1) * stride] < q:
            k += 1
        p = int(v[f_base + k * stride])
        basins[f_base + q * stride] = p
        out[f_base + q * stride] = (q - p) * (q - p) + float(f[f_base + p * stride])


def compute_basins_python(dim0, dim1, dim2, f, out, z, v, basins):
    """
    Reference batch kernel: every (i0, i2) row, one after another.

    Same contract as the compiled kernels; outputs are filled in place.
    """
    for row in range(dim0 * dim2):
        i0 = row // dim2
        i2 = row % dim2
        f_base = i0 * dim1 * dim2 + i2
        z_base = i0 * (dim1 + 1) * dim2 + i2
        build_envelope(f, f_base, z_base, dim2, dim1, z, v)
        evaluate_envelope(f, f_base, z_base, dim2, dim1, z, v, out, basins)


def envelope_of_row(row):
    """
    Return the envelope of a single 1-D row as ``(vertices, boundaries)``.

    ``vertices`` holds the surviving parabola roots V[0..k] and
    ``boundaries`` the breakpoints Z[0..k+1], including the two infinite
    sentinels.

    >>> envelope_of_row([5.0, 0.0, 5.0])
    (array([0, 1, 2], dtype=int32), array([-inf,  -2.,   4.,  inf]))
    """
    f = np.ascontiguousarray(row, dtype=np.float64).ravel()
    n = f.size
    if n == 0:
        raise ValueError("row must contain at least one sample")
    z = np.zeros(n + 1, dtype=np.float64)
    v = np.zeros(n, dtype=np.int32)
    k = build_envelope(f, 0, 0, 1, n, z, v)
    return v[: k + 1].copy(), z[: k + 2].copy()
