"""
_context.py
===========
Context managers for basinfinder.

Provides clean, Pythonic context managers for temporarily changing state:
- Logging control (suppress/change levels)
- Warning control (suppress specific warnings)
- Backend selection (force specific backend)

All context managers properly restore state on exit, even if exceptions occur.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Optional, Type


# Module-level state for backend override
_backend_override = None

# Parent of every module logger in the package
PACKAGE_LOGGER = "basinfinder"


# ============================================================================ #
# Logging Context Managers
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Parameters
    ----------
    logger_name : str
        Name of the logger to suppress (e.g., 'basinfinder._basins')
    level : int, default logging.CRITICAL
        Temporary logging level.

    Yields
    ------
    None
        Control is yielded back to the with-block.

    Examples
    --------
    >>> with suppress_logger('basinfinder._basins', logging.WARNING):
    ...     out, basins = lower_envelope(f)

    Notes
    -----
    - Exception-safe: Logger level restored even if exception raised
    - Nesting-safe: Can nest multiple suppress_logger contexts
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily suppress all basinfinder logging.

    Every module logger lives under the 'basinfinder' parent, so raising the
    parent's level silences the whole package.

    Parameters
    ----------
    level : int, default logging.CRITICAL
        Temporary logging level for the package logger.

    Examples
    --------
    >>> with quiet():
    ...     out, basins = lower_envelope(f)

    >>> # Show only warnings (e.g. backend fallbacks)
    >>> with quiet(logging.WARNING):
    ...     out, basins = lower_envelope(f, backend='cuda')
    """
    with suppress_logger(PACKAGE_LOGGER, level):
        yield


# ============================================================================ #
# Warning Context Managers
# ============================================================================ #


@contextmanager
def suppress_warnings(category: Optional[Type[Warning]] = None):
    """
    Temporarily suppress warnings.

    Parameters
    ----------
    category : Type[Warning] or None, default None
        Warning category to suppress. If None, suppresses all warnings.

    Examples
    --------
    >>> from numba.core.errors import NumbaPerformanceWarning
    >>> with suppress_warnings(NumbaPerformanceWarning):
    ...     out, basins = lower_envelope(f, backend='cuda')
    """
    with warnings.catch_warnings():
        if category is None:
            warnings.simplefilter("ignore")
        else:
            warnings.filterwarnings("ignore", category=category)
        yield


# ============================================================================ #
# Backend Context Managers
# ============================================================================ #


@contextmanager
def use_backend(backend: str):
    """
    Temporarily force a specific backend for envelope computations.

    Parameters
    ----------
    backend : str
        Backend to use. Valid options:
        - 'python': Pure Python (slow, always available)
        - 'cpu-parallel': Numba parallel (requires numba)
        - 'cuda': GPU acceleration (requires numba + CUDA)
        - 'best': Use best available (default behavior)

    Raises
    ------
    ValueError
        If requested backend is not available.

    Examples
    --------
    >>> with use_backend('python'):
    ...     out, basins = lower_envelope(f)

    Notes
    -----
    **Not thread-safe**: uses module-level state.  Pass ``backend=`` to
    compute_basins() / lower_envelope() directly when several threads
    dispatch concurrently.
    """
    global _backend_override

    from ._backend import get_available_backends

    available = get_available_backends()

    if backend != "best" and backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    original_override = _backend_override

    try:
        _backend_override = backend
        yield
    finally:
        _backend_override = original_override


def get_backend_override() -> Optional[str]:
    """
    Get the current backend override, if any.

    Returns
    -------
    str or None
        Current backend override, or None if no override active.

    Examples
    --------
    >>> get_backend_override()
    None

    >>> with use_backend('cpu-parallel'):
    ...     print(get_backend_override())
    cpu-parallel
    """
    return _backend_override


# ============================================================================ #
# Combined Context Managers
# ============================================================================ #


@contextmanager
def silent_benchmark(backend: str = "best"):
    """
    Suppress logging and warnings while forcing a specific backend.

    Examples
    --------
    >>> for backend in ['python', 'cpu-parallel', 'cuda']:
    ...     try:
    ...         with silent_benchmark(backend):
    ...             start = time.time()
    ...             out, basins = lower_envelope(f)
    ...             print(f"{backend}: {time.time() - start:.3f}s")
    ...     except ValueError:
    ...         print(f"{backend}: not available")
    """
    with quiet():
        with use_backend(backend):
            with suppress_warnings():
                yield
