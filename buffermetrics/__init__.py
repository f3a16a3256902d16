# -*- coding: utf-8 -*-
# buffermetrics/__init__.py

"""
buffermetrics: class-level landscape metrics around sample sites at several buffer radii
=========================================================================================

buffermetrics loads yearly landcover rasters and a set of point sites, aligns their
coordinate systems and extracts class-level landscape metrics inside circular buffers
of several radii, giving one long table per run.

Key features:
- Landcover stacks with year labels
- Site loading, numbering and reprojection
- Landscape validity checks
- Buffered class metrics (proportion of landscape, number of patches, ...) via pylandstats
- Sequential, mapped and multi-process extraction over radii
- Static and interactive maps
"""

__version__ = "0.1.0"

from .core.config import ExtractionConfig
from .core.extractor import (
    canonical_sort,
    extract_loop,
    extract_map,
    extract_metrics,
    extract_parallel,
    extract_radius,
)
from .core.layer import LandcoverLayer, RasterStack
from .core.sites import prepare_sites, read_sites, reproject_sites, select_sites, site_keys

from .exceptions import (
    BufferMetricsError,
    CRSMismatchError,
    EmptyWindowError,
    LandscapeError,
    SiteGeometryError,
    SiteOutsideRasterError,
    StackAlignmentError,
    UnknownMetricError,
)

from .io.raster import layer_to_raster, read_landcover, read_landcover_stack, read_raster, write_raster
from .io.vector import read_vector, write_results, write_vector

from .stats.landscape import METRICS, check_landscape, class_table, list_classes, resolve_metric, sample_metrics
from .stats.summary import class_richness, metric_table, pland_closure, summarise_results

from .utils.helpers import SAMPLE_CLASS_LABELS, create_sample_data
from .viz.charts import plot_metric_by_buffer, plot_metric_histogram

from .viz.maps import plot_buffers_interactive, plot_landcover_interactive, plot_stack
