# -*- coding: utf-8 -*-
"""Configuration for multi-scale extraction runs."""

from dataclasses import dataclass, fields

from ..stats.landscape import EDGE_POLICIES, resolve_metric

DEFAULT_RADII = (150, 180)
DEFAULT_METRICS = ("lsm_c_pland", "lsm_c_np")


@dataclass(frozen=True)
class ExtractionConfig:
    """Settings shared by every extraction strategy.

    Attributes:
    -----------
    radii : tuple of float
        Buffer radii, in the linear units of the raster CRS.
    metrics : tuple of str
        Class-level metric identifiers, e.g. ``"lsm_c_pland"`` or ``"np"``.
    edge_policy : str
        ``"clip"`` computes metrics on the part of the buffer covered by the
        raster, ``"fail"`` raises when a buffer crosses the raster edge.
    neighborhood_rule : str
        Patch adjacency rule passed to pylandstats, ``"8"`` or ``"4"``.
    workers : int, optional
        Worker processes for the parallel strategy. ``None`` uses one less
        than the available CPUs.
    """

    radii: tuple = DEFAULT_RADII
    metrics: tuple = DEFAULT_METRICS
    edge_policy: str = "clip"
    neighborhood_rule: str = "8"
    workers: int = None

    def __post_init__(self):
        # normalise list input so the config stays hashable
        object.__setattr__(self, "radii", tuple(self.radii))
        object.__setattr__(self, "metrics", tuple(self.metrics))
        object.__setattr__(self, "neighborhood_rule", str(self.neighborhood_rule))

        if not self.radii:
            raise ValueError("At least one buffer radius is required")
        for radius in self.radii:
            if radius is None or radius <= 0:
                raise ValueError(f"Buffer radius must be positive, got {radius}")
        if not self.metrics:
            raise ValueError("At least one metric is required")
        for metric in self.metrics:
            resolve_metric(metric)
        if self.edge_policy not in EDGE_POLICIES:
            raise ValueError(f"edge_policy must be one of {EDGE_POLICIES}, got '{self.edge_policy}'")
        if self.neighborhood_rule not in ("8", "4"):
            raise ValueError(f"neighborhood_rule must be '8' or '4', got '{self.neighborhood_rule}'")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    @classmethod
    def from_dict(cls, values):
        """Build a config from a plain dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})

    def replace(self, **changes):
        """Return a copy with some settings changed."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        return ExtractionConfig(**values)
