# -*- coding: utf-8 -*-
"""Landscape validation and buffered class-level metrics for landcover stacks.

Metric values are computed by pylandstats on the raster cells whose centres fall inside a circular
buffer around each site. Identifiers follow the landscapemetrics naming (``lsm_c_pland``) and the
short form (``pland``) is accepted as well.
"""

import logging

import numpy as np
import pandas as pd
import pylandstats as pls
from pyproj import CRS
from rasterio.features import geometry_mask
from rasterio.windows import Window
from rasterio.windows import transform as window_transform
from shapely.geometry import box

from ..exceptions import (
    CRSMismatchError,
    EmptyWindowError,
    LandscapeError,
    SiteOutsideRasterError,
    UnknownMetricError,
)

logger = logging.getLogger(__name__)

# short name -> pylandstats class-level method
METRICS = {
    "pland": "proportion_of_landscape",
    "np": "number_of_patches",
    "ca": "total_area",
    "pd": "patch_density",
    "lpi": "largest_patch_index",
    "te": "total_edge",
    "ed": "edge_density",
}

EDGE_POLICIES = ("clip", "fail")

RESULT_COLUMNS = ["layer", "level", "class", "metric", "value", "plot_id", "percentage_inside"]


def resolve_metric(metric):
    """Return the short class-level name for a metric identifier.

    Parameters:
    -----------
    metric : str
        ``"lsm_c_pland"``, ``"pland"`` and so on

    Returns:
    --------
    name : str
        Short metric name, a key of ``METRICS``
    """
    name = str(metric).strip().lower()
    if name.startswith("lsm_"):
        if not name.startswith("lsm_c_"):
            raise UnknownMetricError(metric, [f"lsm_c_{m}" for m in METRICS])
        name = name[len("lsm_c_") :]
    if name not in METRICS:
        raise UnknownMetricError(metric, METRICS)
    return name


def _as_layers(stack_or_layer):
    if hasattr(stack_or_layer, "layers"):
        return list(stack_or_layer.layers)
    return [stack_or_layer]


def _is_integral(layer):
    if np.issubdtype(layer.raster.dtype, np.integer):
        return True
    if not np.issubdtype(layer.raster.dtype, np.floating):
        return False
    values = layer.raster[layer.valid_mask()]
    return bool(np.all(np.mod(values, 1) == 0))


def _fits_int64(nodata, dtype):
    if nodata is None or not np.issubdtype(dtype, np.integer):
        return False
    info = np.iinfo(np.int64)
    return float(nodata).is_integer() and info.min <= int(nodata) <= info.max


def _crs_info(crs):
    if crs is None:
        return "NA", "NA"
    crs = CRS.from_user_input(crs)
    if crs.is_projected:
        unit = crs.axis_info[0].unit_name if crs.axis_info else "unknown"
        return "projected", "m" if unit in ("metre", "meter", "m") else unit
    if crs.is_geographic:
        return "geographic", "degrees"
    return "NA", "NA"


def check_landscape(stack_or_layer):
    """Check whether layers can be used for landscape metrics.

    Parameters:
    -----------
    stack_or_layer : RasterStack or LandcoverLayer
        Layers to check

    Returns:
    --------
    report : pandas.DataFrame
        One row per layer with ``layer``, ``name``, ``crs``, ``units``, ``class``,
        ``n_classes`` and ``OK`` columns. ``OK`` is True for projected rasters in metres
        holding integer class codes.
    """
    rows = []
    for index, layer in enumerate(_as_layers(stack_or_layer), start=1):
        crs_kind, units = _crs_info(layer.crs)
        integral = _is_integral(layer)
        rows.append(
            {
                "layer": index,
                "name": layer.name,
                "crs": crs_kind,
                "units": units,
                "class": "integer" if integral else "non-integer",
                "n_classes": len(layer.classes()),
                "OK": crs_kind == "projected" and units == "m" and integral,
            }
        )
    for row in rows:
        if not row["OK"]:
            logger.warning(
                "Layer %s (%s) failed the landscape check: crs=%s units=%s class=%s",
                row["layer"],
                row["name"],
                row["crs"],
                row["units"],
                row["class"],
            )
    return pd.DataFrame(rows)


def list_classes(layer):
    """List the class codes present in a layer, nodata excluded."""
    return layer.classes()


def class_table(stack):
    """Tabulate classes per layer.

    Parameters:
    -----------
    stack : RasterStack
        Stack to tabulate

    Returns:
    --------
    table : pandas.DataFrame
        Columns ``layer``, ``year``, ``class``, ``label`` and ``cells``
    """
    rows = []
    for index, layer in enumerate(stack.layers, start=1):
        values, counts = np.unique(layer.raster[layer.valid_mask()], return_counts=True)
        for value, count in zip(values, counts, strict=True):
            value = value.item()
            rows.append(
                {
                    "layer": index,
                    "year": layer.name,
                    "class": value,
                    "label": layer.label(value),
                    "cells": int(count),
                }
            )
    return pd.DataFrame(rows, columns=["layer", "year", "class", "label", "cells"])


def _check_site_crs(sites, stack):
    if sites.crs is None and stack.crs is None:
        return
    if sites.crs is None or stack.crs is None:
        raise CRSMismatchError("Sites and rasters must both have a coordinate reference system")
    if CRS.from_user_input(sites.crs) != CRS.from_user_input(stack.crs):
        raise CRSMismatchError(f"Sites are in {sites.crs} but rasters are in {stack.crs}; reproject the sites first")


def _buffer_window(stack, point, radius, plot_id, edge_policy):
    """Locate the raster window and cell mask for one circular buffer."""
    circle = point.buffer(radius)
    height, width = stack.shape

    if edge_policy == "fail" and not box(*stack.bounds).contains(circle):
        raise SiteOutsideRasterError(
            plot_id,
            radius,
            f"Buffer of radius {radius} around site {plot_id} crosses the raster edge",
        )

    if not box(*stack.bounds).intersects(circle):
        raise SiteOutsideRasterError(plot_id, radius)

    minx, miny, maxx, maxy = circle.bounds
    inverse = ~stack.transform
    cols, rows = zip(*(inverse * (x, y) for x in (minx, maxx) for y in (miny, maxy)), strict=True)
    col_off = max(int(np.floor(min(cols))), 0)
    row_off = max(int(np.floor(min(rows))), 0)
    col_end = min(int(np.ceil(max(cols))), width)
    row_end = min(int(np.ceil(max(rows))), height)
    if col_off >= col_end or row_off >= row_end:
        raise SiteOutsideRasterError(plot_id, radius)

    window = Window(col_off, row_off, col_end - col_off, row_end - row_off)
    win_transform = window_transform(window, stack.transform)
    inside = geometry_mask(
        [circle],
        out_shape=(row_end - row_off, col_end - col_off),
        transform=win_transform,
        invert=True,
    )
    slices = (slice(row_off, row_end), slice(col_off, col_end))
    return circle, slices, win_transform, inside


def _sample_layer(layer, slices, win_transform, inside, metric_names, neighborhood_rule, plot_id, radius):
    values = layer.raster[slices]
    valid = inside & layer.valid_mask()[slices]
    if not valid.any():
        raise EmptyWindowError(plot_id, radius)

    sampled = values[valid].astype(np.int64)
    # the nodata handed to pylandstats must be an int64 code no sampled cell carries
    if _fits_int64(layer.nodata, layer.raster.dtype) and not (sampled == int(layer.nodata)).any():
        nodata = int(layer.nodata)
    else:
        nodata = int(sampled.max()) + 1
    arr = np.full(values.shape, nodata, dtype=np.int64)
    arr[valid] = sampled

    landscape = pls.Landscape(
        arr,
        res=layer.res,
        nodata=nodata,
        transform=win_transform,
        neighborhood_rule=neighborhood_rule,
    )
    frame = landscape.compute_class_metrics_df(metrics=[METRICS[name] for name in metric_names])
    return frame, int(valid.sum())


def sample_metrics(stack, sites, radius, metrics, edge_policy="clip", neighborhood_rule="8"):
    """Compute class-level metrics inside a circular buffer around every site, for every layer.

    Parameters:
    -----------
    stack : RasterStack
        Landcover layers, one per year
    sites : geopandas.GeoDataFrame
        Point sites in the stack CRS. A ``plot_id`` column is used when present,
        otherwise sites are numbered from 1 by row position.
    radius : float
        Buffer radius in the linear units of the stack CRS
    metrics : list of str
        Metric identifiers, see ``METRICS``
    edge_policy : str
        ``"clip"`` samples the part of the buffer covered by the raster,
        ``"fail"`` raises when a buffer crosses the raster edge
    neighborhood_rule : str
        ``"8"`` or ``"4"`` patch adjacency

    Returns:
    --------
    results : pandas.DataFrame
        Long table with ``layer``, ``level``, ``class``, ``metric``, ``value``,
        ``plot_id`` and ``percentage_inside`` columns
    """
    if radius is None or radius <= 0:
        raise ValueError(f"Buffer radius must be positive, got {radius}")
    if edge_policy not in EDGE_POLICIES:
        raise ValueError(f"edge_policy must be one of {EDGE_POLICIES}, got '{edge_policy}'")
    metric_names = [resolve_metric(metric) for metric in metrics]
    if not metric_names:
        raise ValueError("At least one metric is required")

    for index, layer in enumerate(stack.layers, start=1):
        if not _is_integral(layer):
            raise LandscapeError(f"Layer {index} ('{layer.name}') does not hold integer class codes")
    _check_site_crs(sites, stack)

    if "plot_id" in sites.columns:
        plot_ids = sites["plot_id"].tolist()
    else:
        plot_ids = list(range(1, len(sites) + 1))

    windows = []
    for plot_id, point in zip(plot_ids, sites.geometry, strict=True):
        windows.append((plot_id, _buffer_window(stack, point, radius, plot_id, edge_policy)))

    rows = []
    for index, layer in enumerate(stack.layers, start=1):
        for plot_id, (circle, slices, win_transform, inside) in windows:
            frame, n_cells = _sample_layer(
                layer, slices, win_transform, inside, metric_names, neighborhood_rule, plot_id, radius
            )
            percentage_inside = n_cells * layer.res[0] * layer.res[1] / circle.area * 100
            logger.debug("Layer %s site %s radius %s: %d cells (%.1f%% inside)", index, plot_id, radius, n_cells, percentage_inside)
            for class_value, values in frame.iterrows():
                for name in metric_names:
                    rows.append(
                        {
                            "layer": index,
                            "level": "class",
                            "class": int(class_value),
                            "metric": name,
                            "value": float(values[METRICS[name]]),
                            "plot_id": plot_id,
                            "percentage_inside": percentage_inside,
                        }
                    )

    logger.info("Sampled %d layers x %d sites at radius %s", len(stack), len(windows), radius)
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)
