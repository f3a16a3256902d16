# -*- coding: utf-8 -*-
"""Multi-scale extraction of class-level landscape metrics around sample sites.

For every buffer radius the metrics are sampled on each (layer, site) pair, trimmed to the core columns
and annotated with the site key, the buffer radius and the year of the layer. The per-radius tables are
concatenated into one long table.

Radii are independent of each other, so the same per-radius function can be driven by a plain loop,
by ``map`` or by a process pool. All three produce the same table.
"""

import logging
from functools import partial
from multiprocessing import Pool, cpu_count

import pandas as pd

from ..stats.landscape import sample_metrics
from .config import ExtractionConfig
from .sites import site_keys

logger = logging.getLogger(__name__)

CORE_COLUMNS = ["plot_id", "layer", "level", "class", "metric", "value"]
OUTPUT_COLUMNS = CORE_COLUMNS + ["site_key", "buffer", "year"]
SORT_KEY = ["plot_id", "layer", "buffer", "class", "metric"]

STRATEGIES = ("loop", "map", "parallel")


def extract_radius(radius, stack, sites, config=None):
    """Extract metrics for a single buffer radius.

    Parameters:
    -----------
    radius : float
        Buffer radius in the linear units of the stack CRS
    stack : RasterStack
        Landcover layers, one per year
    sites : geopandas.GeoDataFrame
        Prepared sites in the stack CRS
    config : ExtractionConfig, optional
        Metrics and sampling settings

    Returns:
    --------
    records : pandas.DataFrame
        Columns ``plot_id``, ``layer``, ``level``, ``class``, ``metric``, ``value``,
        ``site_key``, ``buffer`` and ``year``
    """
    config = config or ExtractionConfig()
    sampled = sample_metrics(
        stack,
        sites,
        radius,
        config.metrics,
        edge_policy=config.edge_policy,
        neighborhood_rule=config.neighborhood_rule,
    )

    records = sampled[CORE_COLUMNS].copy()
    records["site_key"] = records["plot_id"].map(site_keys(sites))
    records["buffer"] = radius
    records["year"] = records["layer"].map(stack.year_mapping())
    return records[OUTPUT_COLUMNS]


def _concat(frames):
    if not frames:
        return pd.DataFrame(columns=OUTPUT_COLUMNS)
    return pd.concat(frames, ignore_index=True)


def extract_loop(stack, sites, config=None):
    """Extract metrics for every radius with an explicit loop."""
    config = config or ExtractionConfig()
    frames = []
    for radius in config.radii:
        logger.info("Extracting metrics at radius %s", radius)
        frames.append(extract_radius(radius, stack, sites, config))
    return _concat(frames)


def extract_map(stack, sites, config=None):
    """Extract metrics for every radius by mapping the per-radius function over the radii."""
    config = config or ExtractionConfig()
    extract = partial(extract_radius, stack=stack, sites=sites, config=config)
    return _concat(list(map(extract, config.radii)))


def default_workers():
    """One less than the available processors, never below one."""
    return max(cpu_count() - 1, 1)


def extract_parallel(stack, sites, config=None, workers=None):
    """Extract metrics for every radius in a pool of worker processes.

    Each worker receives its own copy of the stack and the sites. ``Pool.map`` returns the
    per-radius tables in the order of ``config.radii``, so the result matches ``extract_loop``.

    Parameters:
    -----------
    stack : RasterStack
        Landcover layers, one per year
    sites : geopandas.GeoDataFrame
        Prepared sites in the stack CRS
    config : ExtractionConfig, optional
        Metrics and sampling settings
    workers : int, optional
        Number of processes. Defaults to ``config.workers`` and then to ``default_workers()``.

    Returns:
    --------
    records : pandas.DataFrame
        Same table as ``extract_loop``
    """
    config = config or ExtractionConfig()
    workers = workers or config.workers or default_workers()
    workers = min(workers, len(config.radii))
    logger.info("Extracting %d radii with %d workers", len(config.radii), workers)

    extract = partial(extract_radius, stack=stack, sites=sites, config=config)
    with Pool(processes=workers) as pool:
        frames = pool.map(extract, config.radii)
    return _concat(frames)


def extract_metrics(stack, sites, config=None, strategy="loop"):
    """Extract metrics at every radius of ``config`` with the chosen strategy.

    Parameters:
    -----------
    stack : RasterStack
        Landcover layers, one per year
    sites : geopandas.GeoDataFrame
        Prepared sites in the stack CRS
    config : ExtractionConfig, optional
        Radii, metrics and sampling settings
    strategy : str
        ``"loop"``, ``"map"`` or ``"parallel"``

    Returns:
    --------
    records : pandas.DataFrame
        Extraction records for all radii
    """
    if strategy == "loop":
        return extract_loop(stack, sites, config)
    if strategy == "map":
        return extract_map(stack, sites, config)
    if strategy == "parallel":
        return extract_parallel(stack, sites, config)
    raise ValueError(f"Unknown strategy '{strategy}', expected one of {STRATEGIES}")


def canonical_sort(records):
    """Sort records by site, layer, buffer, class and metric."""
    return records.sort_values(SORT_KEY, kind="mergesort").reset_index(drop=True)
