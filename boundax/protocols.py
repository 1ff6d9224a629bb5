"""Structural protocols for execution capabilities."""

from __future__ import annotations

from typing import Any, Callable, Literal, Optional, Protocol, runtime_checkable

ReduceOp = Literal["min", "max"]


@runtime_checkable
class ExecutionContext(Protocol):
    """Where and how the array work of one call is issued.

    Kernels handed to ``elementwise_map`` take the context's array namespace
    (``jax.numpy`` or ``numpy``) as their first argument, followed by the
    array operands. Keyword arguments are compile-time constants.
    """

    name: str

    def put(self, value: Any, dtype: Optional[Any] = None) -> Any:
        """Move ``value`` onto the context, optionally casting it."""
        ...

    def elementwise_map(self, fn: Callable[..., Any], *operands: Any, **static: Any) -> Any:
        """Apply an array-namespace kernel to ``operands``."""
        ...

    def segmented_reduce(
        self,
        values: Any,
        segment_ids: Any,
        num_segments: int,
        *,
        op: ReduceOp,
    ) -> Any:
        """Reduce rows of ``values`` that share a sorted segment id."""
        ...

    def synchronize(self, value: Any) -> Any:
        """Block until ``value`` has been computed and return it."""
        ...


__all__ = ["ExecutionContext", "ReduceOp"]
