"""Local dtype policy for boundax contracts."""

import jax.numpy as jnp
import numpy as np

from .errors import TypeConstraintError

# Unsigned integer of the same width for every supported float type.
_UNSIGNED_FOR_FLOAT = {
    np.dtype(jnp.float16): np.uint16,
    np.dtype(jnp.bfloat16): np.uint16,
    np.dtype(jnp.float32): np.uint32,
    np.dtype(jnp.float64): np.uint64,
}


def is_floating(dtype) -> bool:
    """Return whether ``dtype`` is a real floating-point dtype."""
    return bool(jnp.issubdtype(dtype, jnp.floating))


def is_integer(dtype) -> bool:
    """Return whether ``dtype`` is a signed or unsigned integer dtype."""
    return bool(jnp.issubdtype(dtype, jnp.integer))


def unsigned_dtype_for_float(dtype):
    """Return the unsigned integer dtype with the same width as ``dtype``."""
    try:
        return _UNSIGNED_FOR_FLOAT[np.dtype(dtype)]
    except (KeyError, TypeError):
        raise TypeConstraintError(
            f"no same-width unsigned integer for dtype {dtype}"
        ) from None


__all__ = ["is_floating", "is_integer", "unsigned_dtype_for_float"]
