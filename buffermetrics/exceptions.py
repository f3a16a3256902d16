# -*- coding: utf-8 -*-
"""Exceptions raised by buffermetrics.

Hierarchy::

    BufferMetricsError
    ├── LandscapeError              raster is not a usable categorical grid
    │   ├── StackAlignmentError     layers differ in shape, transform or CRS
    │   ├── SiteOutsideRasterError  buffer falls outside the raster extent
    │   └── EmptyWindowError        buffer sampled no valid cells
    ├── SiteGeometryError           sites are not point geometries
    ├── CRSMismatchError            sites and rasters cannot be aligned
    └── UnknownMetricError          metric identifier is not supported

Most of them also derive from ``ValueError`` so callers that only expect the
built-in type keep working.
"""


class BufferMetricsError(Exception):
    """Base exception for buffermetrics."""


class LandscapeError(BufferMetricsError, ValueError):
    """Raised when a raster cannot be treated as a categorical landscape."""


class StackAlignmentError(LandscapeError):
    """Raised when the layers of a stack do not share the same grid."""


class SiteOutsideRasterError(LandscapeError):
    """Raised when a site buffer does not overlap the raster (or, with the
    ``"fail"`` edge policy, is not fully inside it)."""

    def __init__(self, plot_id, radius, message=None):
        self.plot_id = plot_id
        self.radius = radius
        if message is None:
            message = f"Buffer of radius {radius} around site {plot_id} lies outside the raster extent"
        super().__init__(message)

    def __reduce__(self):
        # keep the error picklable for worker processes
        return self.__class__, (self.plot_id, self.radius, self.args[0])


class EmptyWindowError(LandscapeError):
    """Raised when a buffer contains no valid raster cells."""

    def __init__(self, plot_id, radius):
        self.plot_id = plot_id
        self.radius = radius
        super().__init__(f"Buffer of radius {radius} around site {plot_id} contains no valid cells")

    def __reduce__(self):
        return self.__class__, (self.plot_id, self.radius)


class SiteGeometryError(BufferMetricsError, ValueError):
    """Raised when the site collection contains non-point geometries."""


class CRSMismatchError(BufferMetricsError, ValueError):
    """Raised when sites and rasters have missing or incompatible CRS."""


class UnknownMetricError(BufferMetricsError, KeyError):
    """Raised for metric identifiers that are not implemented."""

    def __init__(self, metric, available):
        self.metric = metric
        self.available = sorted(available)
        super().__init__(f"Unknown metric '{metric}'. Available: {', '.join(self.available)}")

    def __str__(self):
        return self.args[0]

    def __reduce__(self):
        return self.__class__, (self.metric, self.available)
