"""
_logging.py
===========
Logging functions for basinfinder.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
"""

import logging
from typing import List, Sequence, Tuple, Any


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_optimization_status(numba_available: bool) -> None:
    """
    Log system capabilities and optimization library availability at INFO level.

    Called once at module import time. Reports CPU count, memory, numba version
    (if available), LLVM/CUDA info, and threading configuration.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import os
    import platform

    cpu_count = os.cpu_count() or 1
    logger.info(
        f"System: {platform.machine()} ({platform.system()}), "
        f"{cpu_count} CPU cores, Python {platform.python_version()}"
    )

    # Memory info (optional psutil)
    try:
        import psutil

        mem = psutil.virtual_memory()
        logger.info(
            f"Memory: {mem.total / (1024**3):.1f} GB total, "
            f"{mem.available / (1024**3):.1f} GB available"
        )
    except ImportError:
        pass  # psutil not required

    if numba_available:
        import numba

        logger.info(f"Numba {numba.__version__} loaded successfully")

        try:
            import llvmlite

            logger.info(f"LLVM backend: llvmlite {llvmlite.__version__}")
        except (ImportError, AttributeError):
            pass  # LLVM version unavailable

        # threading_layer() raises until a parallel kernel has run
        try:
            num_threads = numba.get_num_threads()
            threading_layer = numba.threading_layer()
            logger.info(
                f"Numba threading: {threading_layer} layer, "
                f"{num_threads} threads active"
            )
        except Exception:
            logger.info(f"Numba threading: {numba.get_num_threads()} threads")

        try:
            from numba import cuda

            if cuda.is_available():
                gpus = cuda.gpus
                logger.info(f"CUDA available: {len(gpus)} GPU(s) detected")
                for i, gpu in enumerate(gpus):
                    name = gpu.name
                    if isinstance(name, bytes):
                        name = name.decode()
                    logger.info(f"  GPU {i}: {name}")
            else:
                logger.info("CUDA not available (no compatible GPU)")
        except Exception:
            logger.info("CUDA backend unavailable")

    else:
        logger.info("Numba not installed — envelope kernels will run as pure Python")
        logger.info("Install numba for ~100x speedup: pip install numba")


def install_numba_warning_filter(numba_available: bool) -> None:
    """
    Capture NumbaPerformanceWarning and route it through our logger.

    numba issues performance warnings (e.g., GPU under-utilisation on small
    grids) via Python's warnings module. This filter intercepts them and logs
    them at WARNING level so they appear in the same stream as other
    basinfinder diagnostics.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import warnings

    if not numba_available:
        return

    try:
        from numba.core.errors import NumbaPerformanceWarning
    except ImportError:
        return  # NumbaPerformanceWarning not available in this numba version

    original_showwarning = warnings.showwarning

    def custom_showwarning(message, category, filename, lineno, file=None, line=None):
        if issubclass(category, NumbaPerformanceWarning):
            logger.warning(f"Numba performance issue: {message}")
            logger.warning(f"  at {filename}:{lineno}")
            return
        original_showwarning(message, category, filename, lineno, file, line)

    warnings.showwarning = custom_showwarning


def log_backend_availability(
    backends_available: List[str], numba_available: bool
) -> None:
    """
    Log which execution backends are available for the envelope kernels.

    Parameters
    ----------
    backends_available : List[str]
        List of available backends (e.g., ['python', 'cpu-parallel', 'cuda'])
    numba_available : bool
        Whether numba was successfully imported.
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")

    if "cpu-parallel" in backends_available:
        logger.info("  cpu-parallel: LLVM-compiled parallel code (numba.njit + prange)")

    if "cuda" in backends_available:
        logger.info("  cuda: GPU acceleration via CUDA, one thread per row")
    elif numba_available:
        logger.info("  cuda: unavailable (no compatible GPU detected)")

    if "python" in backends_available:
        logger.info("  python: unoptimized reference implementation")

    best = backends_available[-1]
    logger.info(f"Default backend='best' will use: {best}")


# ============================================================================ #
# Dispatch Logging (called once per compute_basins call)
# ============================================================================ #


def format_nbytes(nbytes: int) -> str:
    """
    Human-readable size: KB below one megabyte, MB with two decimals above.

    >>> format_nbytes(2048)
    '2.0 KB'
    >>> format_nbytes(3 * 1024**2)
    '3.00 MB'
    """
    if nbytes < 1024**2:
        return f"{nbytes / 1024:.1f} KB"
    return f"{nbytes / (1024**2):.2f} MB"


def compute_buffer_footprint(arrays: Sequence[Tuple[str, Any]]) -> int:
    """
    Total size in bytes of a list of (name, array) pairs.

    Parameters
    ----------
    arrays : Sequence[Tuple[str, Any]]
        Named arrays; anything exposing ``nbytes``.

    Returns
    -------
    int
        Sum of ``nbytes``.
    """
    return sum(int(arr.nbytes) for _, arr in arrays)


def log_dispatch(dim0: int, dim1: int, dim2: int, dtype: Any, backend: str) -> None:
    """Log the logical shape, row count and resolved backend of one call."""
    logger.info(
        f"compute_basins(shape=({dim0}, {dim1}, {dim2}), dtype={dtype}, "
        f"backend={backend!r}): {dim0 * dim2:,} rows of length {dim1:,}"
    )


def log_device_transfer(direction: str, arrays: Sequence[Tuple[str, Any]]) -> None:
    """
    Log a host/device transfer.

    Parameters
    ----------
    direction : str
        'H→D' or 'D→H'.
    arrays : Sequence[Tuple[str, Any]]
        Named arrays being moved.
    """
    if direction == "H→D":
        logger.info("  Transferring data to GPU device:")
    else:
        logger.info("  Transferring results from GPU device:")
    for name, arr in arrays:
        logger.info(
            f"    {name}: {arr.shape} {arr.dtype}, {format_nbytes(arr.nbytes)}"
        )
    total = compute_buffer_footprint(arrays)
    logger.info(f"    Total {direction} transfer: {format_nbytes(total)}")


def log_cuda_launch(blocks_per_grid: int, threads_per_block: int, n_rows: int) -> None:
    """Log grid geometry and the active/idle thread split of a kernel launch."""
    total_threads = blocks_per_grid * threads_per_block
    logger.info("  Launching CUDA kernel:")
    logger.info(
        f"    Grid: {blocks_per_grid} blocks, {threads_per_block} threads/block"
    )
    logger.info(
        f"    Total threads: {total_threads:,} "
        f"(active: {n_rows:,}, idle: {total_threads - n_rows:,})"
    )
