"""Error taxonomy for boundax."""


class BoundaxError(Exception):
    """Base class for errors raised by boundax."""


class InvalidGeometryError(BoundaxError, ValueError):
    """Offset arrays or vertex buffers are mutually inconsistent."""


class TypeConstraintError(BoundaxError, TypeError):
    """A coordinate, radius or offset array has an unsupported dtype."""


__all__ = ["BoundaxError", "InvalidGeometryError", "TypeConstraintError"]
