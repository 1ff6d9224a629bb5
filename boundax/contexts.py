"""Concrete execution contexts and the context registry.

Two backends satisfy :class:`~boundax.protocols.ExecutionContext`:

* :class:`JaxExecutionContext` jit-compiles every stage and relies on JAX
  asynchronous dispatch, so calls return as soon as work is enqueued on the
  device. Callers synchronize through :meth:`JaxExecutionContext.synchronize`.
* :class:`NumpyExecutionContext` runs the same kernels eagerly on the host
  with NumPy vectorized ufuncs.

Backends are chosen per call, by registry name or by passing an instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache, partial
from typing import Callable, Optional, Union

import jax
import jax.numpy as jnp
import numpy as np

from .protocols import ExecutionContext, ReduceOp

logger = logging.getLogger(__name__)

_REDUCE_OPS: tuple[str, ...] = ("min", "max")


def _require_reduce_op(op: str) -> None:
    if op not in _REDUCE_OPS:
        raise ValueError(f"Unknown reduction op: {op}")


@lru_cache(maxsize=None)
def _jitted_kernel(fn: Callable, static_argnames: tuple[str, ...]) -> Callable:
    return jax.jit(partial(fn, jnp), static_argnames=static_argnames)


@partial(jax.jit, static_argnames=("num_segments", "op"))
def _segment_reduce(values, segment_ids, *, num_segments, op):
    reducer = jax.ops.segment_min if op == "min" else jax.ops.segment_max
    return reducer(
        values,
        segment_ids,
        num_segments=num_segments,
        indices_are_sorted=True,
    )


@dataclass(frozen=True)
class JaxExecutionContext:
    """Issue work to a JAX device (the default device when ``device`` is None)."""

    device: Optional[jax.Device] = None
    name: str = "jax"

    @classmethod
    def for_platform(cls, platform: str) -> "JaxExecutionContext":
        """Pin work to the first device of ``platform`` (``"cpu"``, ``"gpu"``...)."""

        device = jax.devices(platform)[0]
        return cls(device=device, name=f"jax:{platform}")

    def put(self, value, dtype=None):
        array = jnp.asarray(value, dtype=dtype)
        if self.device is not None:
            array = jax.device_put(array, self.device)
        return array

    def elementwise_map(self, fn, *operands, **static):
        kernel = _jitted_kernel(fn, tuple(sorted(static)))
        return kernel(*operands, **static)

    def segmented_reduce(self, values, segment_ids, num_segments, *, op: ReduceOp):
        _require_reduce_op(op)
        return _segment_reduce(
            values,
            segment_ids,
            num_segments=int(num_segments),
            op=op,
        )

    def synchronize(self, value):
        return jax.block_until_ready(value)


_NUMPY_REDUCERS = {"min": np.minimum, "max": np.maximum}
_NUMPY_IDENTITIES = {"min": np.inf, "max": -np.inf}


@dataclass(frozen=True)
class NumpyExecutionContext:
    """Run kernels eagerly on the host with NumPy."""

    name: str = "numpy"

    def put(self, value, dtype=None):
        return np.asarray(value, dtype=dtype)

    def elementwise_map(self, fn, *operands, **static):
        return fn(np, *(np.asarray(operand) for operand in operands), **static)

    def segmented_reduce(self, values, segment_ids, num_segments, *, op: ReduceOp):
        _require_reduce_op(op)
        values = np.asarray(values)
        segment_ids = np.asarray(segment_ids)
        if segment_ids.size and (
            segment_ids.min() < 0 or segment_ids.max() >= num_segments
        ):
            raise ValueError(
                f"segment ids must lie in [0, {int(num_segments)}), got range "
                f"[{int(segment_ids.min())}, {int(segment_ids.max())}]"
            )
        out = np.full(
            (int(num_segments),) + values.shape[1:],
            _NUMPY_IDENTITIES[op],
            dtype=values.dtype,
        )
        _NUMPY_REDUCERS[op].at(out, segment_ids, values)
        return out

    def synchronize(self, value):
        return value


ContextFactory = Callable[[], ExecutionContext]

DEFAULT_CONTEXT = "jax"

_CONTEXT_FACTORIES: dict[str, ContextFactory] = {
    "jax": JaxExecutionContext,
    "numpy": NumpyExecutionContext,
}


def available_execution_contexts() -> tuple[str, ...]:
    """Return registered execution-context names."""

    return tuple(sorted(_CONTEXT_FACTORIES.keys()))


def register_execution_context(
    name: str, factory: ContextFactory, *, overwrite: bool = False
) -> None:
    """Register a factory so ``get_execution_context(name)`` can build it."""

    normalized = name.strip()
    if not normalized:
        raise ValueError("context name must be a non-empty string")
    if (normalized in _CONTEXT_FACTORIES) and (not overwrite):
        raise ValueError(
            f"execution context '{normalized}' is already registered; "
            "pass overwrite=True to replace it"
        )
    _CONTEXT_FACTORIES[normalized] = factory


def get_execution_context(
    context: Union[ExecutionContext, str, None] = None,
) -> ExecutionContext:
    """Resolve a context instance, a registered name, or the default."""

    if context is None:
        context = DEFAULT_CONTEXT
    if isinstance(context, str):
        factory = _CONTEXT_FACTORIES.get(context.strip())
        if factory is None:
            supported = ", ".join(f"'{name}'" for name in sorted(_CONTEXT_FACTORIES))
            raise ValueError(
                f"Unknown execution context '{context}'. Supported: {supported}"
            )
        resolved = factory()
        logger.debug("Resolved execution context '%s'", resolved.name)
        return resolved
    if not isinstance(context, ExecutionContext):
        raise TypeError(
            f"context must be an ExecutionContext or a registered name, "
            f"got {type(context).__name__}"
        )
    return context


__all__ = [
    "DEFAULT_CONTEXT",
    "ContextFactory",
    "JaxExecutionContext",
    "NumpyExecutionContext",
    "available_execution_contexts",
    "get_execution_context",
    "register_execution_context",
]
