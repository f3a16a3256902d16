# -*- coding: utf-8 -*-
"""Shared fixtures: a small hand-made landcover stack and sites in UTM coordinates."""

import geopandas as gpd
import matplotlib
import numpy as np
import pytest
from rasterio.transform import from_origin
from shapely.geometry import Point

from buffermetrics import LandcoverLayer, RasterStack, prepare_sites

matplotlib.use("Agg")

CRS = "EPSG:32618"
WEST, NORTH = 500000.0, 4600400.0
RES = 10.0
SIZE = 40


def _landcover(square):
    """Left half class 1, right half class 2, top-left square of class 3."""
    raster = np.ones((SIZE, SIZE), dtype=np.int32)
    raster[:, SIZE // 2 :] = 2
    raster[:square, :square] = 3
    return raster


@pytest.fixture
def transform():
    return from_origin(WEST, NORTH, RES, RES)


@pytest.fixture
def stack(transform):
    """Two years on a 40 x 40 grid of 10 m cells; the class 3 square grows in 2015."""
    labels = {1: "forest", 2: "grassland", 3: "urban"}
    return RasterStack(
        [
            LandcoverLayer(_landcover(10), transform, CRS, name="2014", nodata=0, class_labels=labels),
            LandcoverLayer(_landcover(15), transform, CRS, name="2015", nodata=0, class_labels=labels),
        ]
    )


@pytest.fixture
def sites():
    """Three sites: inside class 1, on the 1/2 border and near the class 3 square."""
    points = gpd.GeoDataFrame(
        {"name": ["forest", "border", "corner"]},
        geometry=[
            Point(WEST + 100, NORTH - 200),
            Point(WEST + 200, NORTH - 200),
            Point(WEST + 110, NORTH - 110),
        ],
        crs=CRS,
    )
    return prepare_sites(points)
