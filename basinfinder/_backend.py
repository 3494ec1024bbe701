"""
_backend.py
===========
Which of the three envelope backends can run in this process.

  python        always; the reference loops in _envelope.py
  cpu-parallel  numba importable; prange over rows (_cpu_kernels.py)
  cuda          numba.cuda reports a usable device (_cuda_kernels.py)

These helpers only probe and report.  compute_basins() owns the logging
and the fallback when a requested backend is missing.
"""

from typing import List, Tuple, Optional


def check_numba_available() -> bool:
    """True when numba imports, i.e. the cpu-parallel row kernel can compile."""
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def check_cuda_available() -> Tuple[bool, bool]:
    """
    Probe for a GPU that can run one envelope thread per row.

    Returns
    -------
    (numba_ok, device_ok) : tuple[bool, bool]
        device_ok is False whenever the driver probe raises, even if numba
        itself imported.
    """
    try:
        from numba import cuda

        return (True, cuda.is_available())
    except ImportError:
        return (False, False)
    except Exception:
        # numba present, driver or toolkit missing
        return (True, False)


def get_available_backends() -> List[str]:
    """
    Backends usable for compute_basins(), slowest first.

    >>> get_available_backends()[0]
    'python'
    """
    backends = ["python"]
    if check_numba_available():
        backends.append("cpu-parallel")
        if check_cuda_available()[1]:
            backends.append("cuda")
    return backends


def get_best_backend() -> str:
    """The backend 'best' resolves to: cuda, else cpu-parallel, else python."""
    return get_available_backends()[-1]


def resolve_backend(backend: str) -> str:
    """
    Map a ``backend=`` argument to a runnable backend name.

    Raises
    ------
    ValueError
        If ``backend`` names something not in get_available_backends().
        The message lists what is available; compute_basins() catches it
        and falls back to the best backend.
    """
    if backend == "best":
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )
    return backend


def import_cpu_kernels() -> Tuple[bool, Optional[object]]:
    """(ok, _compute_basins_njit) or (False, None) without numba."""
    try:
        from basinfinder._cpu_kernels import _compute_basins_njit

        return (True, _compute_basins_njit)
    except ImportError:
        return (False, None)


def import_cuda_kernels() -> Tuple[bool, Optional[object], Optional[object]]:
    """(ok, _compute_basins_cuda, _compute_cuda_grid); the last two are None when ok is False."""
    try:
        from basinfinder._cuda_kernels import _compute_basins_cuda, _compute_cuda_grid

        return (True, _compute_basins_cuda, _compute_cuda_grid)
    except ImportError:
        return (False, None, None)


def get_backend_info() -> dict:
    """
    Snapshot of backend support, for bug reports and notebooks.

    Keys: numba_available, cuda_available, backends, best_backend,
    cpu_kernels_available, cuda_kernels_available.
    """
    backends = get_available_backends()
    return {
        "numba_available": check_numba_available(),
        "cuda_available": check_cuda_available()[1],
        "backends": backends,
        "best_backend": backends[-1],
        "cpu_kernels_available": import_cpu_kernels()[0],
        "cuda_kernels_available": import_cuda_kernels()[0],
    }
