# -*- coding: utf-8 -*-
"""Helpers , Aren't they useful ?"""

import geopandas as gpd
import numpy as np
from rasterio.transform import from_origin
from shapely.geometry import Point

from ..core.layer import LandcoverLayer, RasterStack
from ..core.sites import prepare_sites

SAMPLE_CLASS_LABELS = {
    1: "forest",
    2: "grassland",
    3: "cropland",
    4: "urban",
    5: "water",
}


def create_sample_data(
    n_sites=24,
    years=("2014", "2015"),
    shape=(200, 200),
    resolution=30.0,
    origin=(500000.0, 4600000.0),
    crs="EPSG:32618",
    sites_crs="EPSG:4326",
    block_size=8,
    change_rate=0.05,
    margin=300.0,
    seed=42,
):
    """Create a synthetic landcover stack and a set of sample sites.

    The first year is a blocky random mosaic of the classes in ``SAMPLE_CLASS_LABELS``; each
    following year reassigns a fraction of the blocks. Sites are drawn at random at least
    ``margin`` map units away from the raster edge and returned in ``sites_crs``, so that they
    need reprojecting before extraction just like field data would.

    Returns:
    --------
    stack : RasterStack
        One layer per year
    sites : geopandas.GeoDataFrame
        Prepared sites with ``plot_id`` and ``site_key``
    """
    rng = np.random.default_rng(seed)
    height, width = shape
    classes = np.array(sorted(SAMPLE_CLASS_LABELS))
    transform = from_origin(origin[0], origin[1], resolution, resolution)

    coarse_shape = (-(-height // block_size), -(-width // block_size))
    coarse = rng.choice(classes, size=coarse_shape)

    layers = []
    for year in years:
        raster = np.kron(coarse, np.ones((block_size, block_size), dtype=coarse.dtype))[:height, :width]
        layers.append(
            LandcoverLayer(
                raster.astype(np.int32),
                transform,
                crs,
                name=year,
                nodata=0,
                class_labels=SAMPLE_CLASS_LABELS,
            )
        )
        changed = rng.random(coarse_shape) < change_rate
        coarse = np.where(changed, rng.choice(classes, size=coarse_shape), coarse)

    stack = RasterStack(layers)

    west, south, east, north = stack.bounds
    xs = rng.uniform(west + margin, east - margin, n_sites)
    ys = rng.uniform(south + margin, north - margin, n_sites)
    points = gpd.GeoDataFrame(
        {"name": [f"plot {i + 1}" for i in range(n_sites)]},
        geometry=[Point(x, y) for x, y in zip(xs, ys, strict=True)],
        crs=crs,
    )
    if sites_crs is not None:
        points = points.to_crs(sites_crs)

    return stack, prepare_sites(points)
