"""
basinfinder
===========

Lower envelope of parabolas (the generalized distance transform of
Felzenszwalb & Huttenlocher) over batches of independent 1-D rows, with
basin assignment.

For each row f[0..n-1] and every position q the transform returns

    out[q]    = min_p (q - p)**2 + f[p]
    basins[q] = the p that achieves the minimum

in O(n) per row, with rows executed in parallel on CPU cores (numba) or
GPU threads (numba.cuda).

Main Functions
--------------
compute_basins : Core entry point over flat (dim0, dim1, dim2) buffers
lower_envelope : Transform an array along one axis, returning (out, basins)
squared_distance_transform : Separable transform along every axis
seeds_to_cost : Boolean seed mask → cost array

Scratch Buffers
---------------
scratch_shapes, scratch_sizes : Sizes of the V / Z scratch buffers
allocate_scratch : Allocate scratch for compute_basins
validate_scratch : Check caller-supplied scratch

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific computational backend
silent_benchmark : Combine quiet + backend selection + warning suppression

Backend Information
-------------------
get_available_backends : Query available computational backends
get_backend_info : Get comprehensive backend status
check_numba_available : Check if numba is available
check_cuda_available : Check if CUDA GPU is available

Examples
--------
>>> from basinfinder import lower_envelope
>>> out, basins = lower_envelope([5.0, 0.0, 5.0])
>>> out
array([1., 0., 1.])
>>> basins
array([1, 1, 1], dtype=int32)

Squared distance to the nearest seed:

>>> from basinfinder import squared_distance_transform, seeds_to_cost
>>> squared_distance_transform(seeds_to_cost([[True, False, False]]))
array([[0., 1., 4.]])

With context managers:

>>> from basinfinder import quiet, use_backend
>>> image = [[4.0, 0.0], [0.0, 9.0], [4.0, 9.0]]
>>> with quiet(), use_backend('cpu-parallel'):
...     out, basins = lower_envelope(image, axis=0)
>>> out
array([[1., 0.],
       [0., 1.],
       [1., 4.]])
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from ._basins import (
    compute_basins,
    lower_envelope,
    squared_distance_transform,
    seeds_to_cost,
)

from ._envelope import envelope_of_row

from ._scratch import (
    scratch_shapes,
    scratch_sizes,
    allocate_scratch,
    validate_scratch,
)

from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
    silent_benchmark,
)

from ._utils import (
    validate_dims,
    validate_buffers,
    check_finite,
)

from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
    check_cuda_available,
)

__all__ = [
    # Transforms
    "compute_basins",
    "lower_envelope",
    "squared_distance_transform",
    "seeds_to_cost",
    "envelope_of_row",
    # Scratch buffers
    "scratch_shapes",
    "scratch_sizes",
    "allocate_scratch",
    "validate_scratch",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    "silent_benchmark",
    # Validation
    "validate_dims",
    "validate_buffers",
    "check_finite",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    "check_cuda_available",
    # Version info
    "__version__",
]
