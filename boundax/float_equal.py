"""ULP-tolerant floating-point equality.

Two floats are compared by counting how many representable values lie
between them. The IEEE-754 bit pattern is sign-magnitude, so it is first
reinterpreted as an unsigned integer of the same width and then mapped to a
biased form in which integer order matches float order and ``+0``/``-0``
coincide. The ULP distance is then a plain unsigned subtraction.
"""

from __future__ import annotations

import jax.numpy as jnp
import numpy as np
from beartype import beartype
from jax import lax
from jaxtyping import Array, ArrayLike, jaxtyped

from .dtypes import is_floating, unsigned_dtype_for_float
from .errors import TypeConstraintError

# Same default tolerance as googletest's floating-point matchers.
DEFAULT_MAX_ULP = 4


def _coerce_pair(a, b) -> tuple[Array, Array]:
    # A bare Python float adopts the dtype of the other operand.
    if type(a) is float and type(b) is not float:
        b = jnp.asarray(b)
        a = jnp.asarray(a, dtype=b.dtype)
    elif type(b) is float and type(a) is not float:
        a = jnp.asarray(a)
        b = jnp.asarray(b, dtype=a.dtype)
    else:
        a = jnp.asarray(a)
        b = jnp.asarray(b)
    if not (is_floating(a.dtype) and is_floating(b.dtype)):
        raise TypeConstraintError(
            f"float_equal needs floating-point operands, got {a.dtype} and {b.dtype}"
        )
    if a.dtype != b.dtype:
        raise TypeConstraintError(
            f"float_equal operands must share a dtype, got {a.dtype} and {b.dtype}"
        )
    return a, b


def to_biased(bits: Array) -> Array:
    """Map sign-magnitude bit patterns to a monotonic unsigned encoding."""

    dtype = np.dtype(bits.dtype)
    sign_mask = jnp.asarray(np.array(1 << (8 * dtype.itemsize - 1), dtype=dtype))
    negative = (bits & sign_mask) != 0
    return jnp.where(negative, jnp.invert(bits) + dtype.type(1), bits | sign_mask)


@jaxtyped(typechecker=beartype)
def ulp_distance(a: ArrayLike, b: ArrayLike) -> Array:
    """Return the elementwise number of representable steps from ``a`` to ``b``.

    The result is meaningless where either operand is NaN.
    """

    a, b = _coerce_pair(a, b)
    unsigned = unsigned_dtype_for_float(a.dtype)
    biased_a = to_biased(lax.bitcast_convert_type(a, unsigned))
    biased_b = to_biased(lax.bitcast_convert_type(b, unsigned))
    return jnp.where(biased_a >= biased_b, biased_a - biased_b, biased_b - biased_a)


@jaxtyped(typechecker=beartype)
def float_equal(a: ArrayLike, b: ArrayLike, max_ulp: int = DEFAULT_MAX_ULP) -> Array:
    """Return whether ``a`` and ``b`` are within ``max_ulp`` ULPs, elementwise.

    NaN never compares equal, not even to itself.
    """

    if max_ulp < 0:
        raise ValueError(f"max_ulp must be non-negative, got {max_ulp}")
    a, b = _coerce_pair(a, b)
    unsigned = unsigned_dtype_for_float(a.dtype)
    tolerance = jnp.asarray(min(max_ulp, int(np.iinfo(unsigned).max)), dtype=unsigned)
    either_nan = jnp.isnan(a) | jnp.isnan(b)
    return jnp.logical_and(~either_nan, ulp_distance(a, b) <= tolerance)


__all__ = ["DEFAULT_MAX_ULP", "float_equal", "to_biased", "ulp_distance"]
