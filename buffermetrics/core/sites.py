# -*- coding: utf-8 -*-
"""Sample sites: point locations with a stable ``plot_id`` and a readable ``site_key``.

Sites are numbered by row position when they are loaded, starting at 1. The numbering never changes
afterwards, so subsets and reprojected copies keep the ids of the original collection.
"""

import logging

from ..exceptions import CRSMismatchError, SiteGeometryError
from ..io.vector import read_vector

logger = logging.getLogger(__name__)


def _default_keys(plot_ids):
    width = len(str(max(plot_ids))) if len(plot_ids) else 1
    return [f"site_{plot_id:0{width}d}" for plot_id in plot_ids]


def prepare_sites(gdf, key_column=None):
    """Number the sites and attach their keys.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        Point locations
    key_column : str, optional
        Attribute holding a human-readable name for each site. When omitted, keys are
        built from the plot id (``site_01``, ``site_02``, ...).

    Returns:
    --------
    sites : geopandas.GeoDataFrame
        Copy of ``gdf`` with ``plot_id`` and ``site_key`` columns
    """
    if len(gdf) and not (gdf.geometry.geom_type == "Point").all():
        bad = sorted(set(gdf.geometry.geom_type[gdf.geometry.geom_type != "Point"].astype(str)))
        raise SiteGeometryError(f"Sites must be points, found {', '.join(bad)}")
    if gdf.geometry.is_empty.any():
        raise SiteGeometryError("Sites contain empty geometries")

    sites = gdf.copy().reset_index(drop=True)
    sites["plot_id"] = list(range(1, len(sites) + 1))

    if key_column is not None:
        if key_column not in sites.columns:
            raise ValueError(f"Column '{key_column}' not found in sites")
        keys = sites[key_column].astype(str)
        if keys.duplicated().any():
            raise ValueError(f"Column '{key_column}' does not hold unique site keys")
        sites["site_key"] = keys.tolist()
    else:
        sites["site_key"] = _default_keys(sites["plot_id"].tolist())

    return sites


def read_sites(vector_path, key_column=None):
    """Read a point vector file (e.g. a shapefile) as a site collection.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file
    key_column : str, optional
        Attribute holding the site names

    Returns:
    --------
    sites : geopandas.GeoDataFrame
        Sites with ``plot_id`` and ``site_key`` columns
    """
    sites = prepare_sites(read_vector(vector_path), key_column=key_column)
    logger.info("Read %d sites from %s (crs: %s)", len(sites), vector_path, sites.crs)
    return sites


def reproject_sites(sites, crs):
    """Return a copy of the sites in another coordinate reference system.

    Parameters:
    -----------
    sites : geopandas.GeoDataFrame
        Sites with a defined CRS
    crs : rasterio.crs.CRS, pyproj.CRS or str
        Target CRS, usually ``stack.crs``

    Returns:
    --------
    sites : geopandas.GeoDataFrame
        Reprojected copy
    """
    if sites.crs is None:
        raise CRSMismatchError("Sites have no coordinate reference system; set one before reprojecting")
    if crs is None:
        raise CRSMismatchError("Target coordinate reference system is undefined")
    return sites.to_crs(crs)


def site_keys(sites):
    """Map plot ids to site keys.

    Parameters:
    -----------
    sites : geopandas.GeoDataFrame
        Prepared sites

    Returns:
    --------
    keys : dict
        ``plot_id -> site_key``
    """
    if "site_key" in sites.columns:
        keys = sites["site_key"].tolist()
    else:
        keys = _default_keys(sites["plot_id"].tolist())
    return dict(zip(sites["plot_id"].tolist(), keys, strict=True))


def select_sites(sites, plot_ids):
    """Restrict a site collection to some plot ids, keeping the original ids."""
    plot_ids = list(plot_ids)
    missing = set(plot_ids) - set(sites["plot_id"])
    if missing:
        raise ValueError(f"Unknown plot ids: {sorted(missing)}")
    return sites[sites["plot_id"].isin(plot_ids)].copy()
