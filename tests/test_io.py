# -*- coding: utf-8 -*-
"""Tests for raster, site and table I/O."""

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
from rasterio.crs import CRS
from rasterio.transform import from_origin

from buffermetrics import (
    CRSMismatchError,
    LandcoverLayer,
    RasterStack,
    SiteGeometryError,
    StackAlignmentError,
    layer_to_raster,
    prepare_sites,
    read_landcover,
    read_landcover_stack,
    read_raster,
    read_sites,
    reproject_sites,
    site_keys,
    write_raster,
    write_results,
    write_vector,
)


def test_landcover_rasters_round_trip(tmp_path, stack):
    paths = []
    for layer in stack:
        path = tmp_path / "rasters" / f"landcover_{layer.name}.tif"
        layer_to_raster(layer, str(path))
        paths.append(str(path))

    loaded = read_landcover_stack(paths, names=["2014", "2015"])
    assert loaded.years == ["2014", "2015"]
    assert loaded.year_of(2) == "2015"
    assert loaded.layer(1).nodata == 0
    for original, copy in zip(stack, loaded, strict=True):
        np.testing.assert_array_equal(original.raster, copy.raster)


def test_layer_names_default_to_file_stem(tmp_path, stack):
    path = tmp_path / "lc_2014.tif"
    write_raster(str(path), np.array(stack.layer(1).raster), stack.transform, stack.crs)
    assert read_landcover(str(path)).name == "lc_2014"

    image_data, transform, crs = read_raster(str(path))
    assert image_data.shape == (1, 40, 40)
    assert crs.to_epsg() == 32618

    with pytest.raises(ValueError):
        read_landcover(str(path), band=2)
    with pytest.raises(ValueError):
        read_landcover_stack([str(path)], names=["2014", "2015"])


def test_stack_rejects_misaligned_layers(stack):
    first = stack.layer(1)
    shifted = LandcoverLayer(first.raster, from_origin(500010.0, 4600400.0, 10.0, 10.0), first.crs, name="2015")
    with pytest.raises(StackAlignmentError):
        RasterStack([first, shifted])

    cropped = LandcoverLayer(first.raster[:20], first.transform, first.crs, name="2015")
    with pytest.raises(StackAlignmentError):
        RasterStack([first, cropped])

    with pytest.raises(StackAlignmentError):
        RasterStack([first, first.copy()])

    with pytest.raises(StackAlignmentError):
        RasterStack([])


def test_layers_are_read_only(stack):
    layer = stack.layer("2014")
    with pytest.raises(ValueError):
        layer.raster[0, 0] = 5
    copy = layer.copy()
    assert copy.raster is not layer.raster
    with pytest.raises(IndexError):
        stack.layer(3)
    with pytest.raises(KeyError):
        stack.layer("2016")


def test_sites_from_shapefile(tmp_path, sites):
    path = tmp_path / "sites" / "sites.shp"
    write_vector(sites[["name", "geometry"]], str(path))

    loaded = read_sites(str(path))
    assert loaded["plot_id"].tolist() == [1, 2, 3]
    assert loaded["site_key"].tolist() == ["site_1", "site_2", "site_3"]

    named = read_sites(str(path), key_column="name")
    assert site_keys(named) == {1: "forest", 2: "border", 3: "corner"}


def test_site_keys_are_zero_padded(sites):
    many = prepare_sites(pd.concat([sites] * 4, ignore_index=True))
    assert many["plot_id"].tolist() == list(range(1, 13))
    assert many["site_key"].iloc[0] == "site_01"
    assert many["site_key"].iloc[-1] == "site_12"


def test_prepare_sites_rejects_polygons(sites):
    with pytest.raises(SiteGeometryError):
        prepare_sites(sites.assign(geometry=sites.geometry.buffer(10)))
    with pytest.raises(ValueError):
        prepare_sites(sites, key_column="missing")


def test_reproject_requires_a_crs(sites):
    unreferenced = gpd.GeoDataFrame(sites.drop(columns="geometry"), geometry=list(sites.geometry))
    with pytest.raises(CRSMismatchError):
        reproject_sites(unreferenced, "EPSG:4326")

    wgs84 = reproject_sites(sites, "EPSG:4326")
    assert wgs84.crs.to_epsg() == 4326
    assert sites.crs.to_epsg() == 32618
    assert wgs84["plot_id"].tolist() == sites["plot_id"].tolist()


def test_write_results(tmp_path):
    results = pd.DataFrame({"plot_id": [1], "metric": ["pland"], "value": [100.0]})
    path = tmp_path / "out" / "metrics.csv"
    write_results(results, str(path))
    pd.testing.assert_frame_equal(pd.read_csv(path), results)

    with pytest.raises(ValueError):
        write_results(results, str(tmp_path / "metrics.xlsx"))
    with pytest.raises(ValueError):
        write_vector(pd.DataFrame(), str(tmp_path / "sites.kml"))


def test_stack_compares_crs_by_meaning(stack):
    first = stack.layer(1)
    second = LandcoverLayer(first.raster, first.transform, CRS.from_epsg(32618), name="2015")
    assert len(RasterStack([first, second])) == 2

    other = LandcoverLayer(first.raster, first.transform, CRS.from_epsg(32617), name="2015")
    with pytest.raises(StackAlignmentError):
        RasterStack([first, other])


def test_layer_holds_only_its_grid_and_metadata(stack):
    layer = stack.layer(1)
    assert set(vars(layer)) == {"raster", "transform", "crs", "name", "nodata", "class_labels"}
