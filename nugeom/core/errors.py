"""
Exceptions raised by the geometry engine.
"""


class GeometryError(RuntimeError):
    """Base class for geometry engine failures."""


class ConfigurationError(GeometryError):
    """The geometry or a request against it is not usable as configured."""


class MissingMaterialError(ConfigurationError):
    """A resolved volume carries no material information."""

    def __init__(self, volume_name: str):
        super().__init__(f"Volume '{volume_name}' has no material assigned")
        self.volume_name = volume_name


class DegenerateDirectionError(ConfigurationError, ValueError):
    """A ray direction cannot be normalised."""


class MarchLimitExceeded(GeometryError):
    """An unbounded traversal crossed more boundaries than the safety cap."""

    def __init__(self, limit: int, point):
        super().__init__(
            f"Ray march exceeded {limit} boundary crossings (last point {point}); "
            "the geometry is probably malformed"
        )
        self.limit = limit
        self.point = point
