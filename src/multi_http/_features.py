"""Runtime feature detection for optional extras.

Checks availability of optional dependencies to determine which
transport capabilities can be used.
"""
from __future__ import annotations


def _check_import(module_name: str) -> bool:
    """Check if a module is importable."""
    try:
        __import__(module_name)
        return True
    except ImportError:
        return False


# Capability feature flags
HAS_HTTP2: bool = _check_import("h2")


def require_extra(extra_name: str, module_name: str) -> None:
    """Raise ImportError with installation hint if extra is not available.

    Args:
        extra_name: Name of the pip extra (e.g., 'http2')
        module_name: Name of the required module (e.g., 'h2')

    Raises:
        ImportError: With installation instructions when module is not available.
    """
    if _check_import(module_name):
        return
    raise ImportError(
        f"The '{extra_name}' extra is required for this feature. "
        f"Install it with: pip install multi-http-python[{extra_name}]"
    )
