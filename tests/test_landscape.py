# -*- coding: utf-8 -*-
"""Tests for landscape checks and buffered class-level metrics."""

import numpy as np
import pytest

from buffermetrics import (
    CRSMismatchError,
    EmptyWindowError,
    LandcoverLayer,
    LandscapeError,
    RasterStack,
    SiteOutsideRasterError,
    UnknownMetricError,
    check_landscape,
    class_table,
    list_classes,
    prepare_sites,
    reproject_sites,
    resolve_metric,
    sample_metrics,
)


def _values(results, plot_id, layer, metric):
    subset = results[(results["plot_id"] == plot_id) & (results["layer"] == layer) & (results["metric"] == metric)]
    return dict(zip(subset["class"], subset["value"], strict=True))


def test_resolve_metric_accepts_both_spellings():
    assert resolve_metric("lsm_c_pland") == "pland"
    assert resolve_metric("NP") == "np"
    with pytest.raises(UnknownMetricError):
        resolve_metric("lsm_l_shdi")
    with pytest.raises(UnknownMetricError):
        resolve_metric("contagion")


def test_check_landscape_reports_projected_integer_layers(stack):
    report = check_landscape(stack)
    assert report["layer"].tolist() == [1, 2]
    assert report["crs"].tolist() == ["projected", "projected"]
    assert report["units"].tolist() == ["m", "m"]
    assert report["class"].tolist() == ["integer", "integer"]
    assert report["n_classes"].tolist() == [3, 3]
    assert report["OK"].all()


def test_check_landscape_flags_geographic_and_float_layers(transform):
    float_layer = LandcoverLayer(np.full((5, 5), 1.5), transform, "EPSG:32618", name="float")
    geo_layer = LandcoverLayer(np.ones((5, 5), dtype=np.int32), transform, "EPSG:4326", name="geo")

    float_report = check_landscape(float_layer).iloc[0]
    assert float_report["class"] == "non-integer"
    assert not float_report["OK"]

    geo_report = check_landscape(geo_layer).iloc[0]
    assert geo_report["crs"] == "geographic"
    assert not geo_report["OK"]


def test_class_listing(stack):
    assert list_classes(stack.layer(1)) == [1, 2, 3]
    table = class_table(stack)
    first = table[table["year"] == "2014"].set_index("class")
    assert first.loc[3, "cells"] == 100
    assert first.loc[3, "label"] == "urban"
    assert table.groupby("year")["cells"].sum().tolist() == [1600, 1600]


def test_single_class_buffer(stack, sites):
    results = sample_metrics(stack, sites, 50, ["lsm_c_pland", "lsm_c_np"])
    assert _values(results, 1, 1, "pland") == {1: pytest.approx(100.0)}
    assert _values(results, 1, 1, "np") == {1: 1.0}
    assert (results["level"] == "class").all()


def test_border_buffer_splits_evenly(stack, sites):
    results = sample_metrics(stack, sites, 50, ["pland"])
    pland = _values(results, 2, 1, "pland")
    assert pland == {1: pytest.approx(50.0), 2: pytest.approx(50.0)}


def test_pland_sums_to_100_for_every_site_and_layer(stack, sites):
    results = sample_metrics(stack, sites, 80, ["pland", "np"])
    totals = results[results["metric"] == "pland"].groupby(["plot_id", "layer"])["value"].sum()
    assert len(totals) == len(sites) * len(stack)
    assert np.allclose(totals.values, 100.0)


def test_percentage_inside_reflects_clipping(stack, sites):
    inside = sample_metrics(stack, sites, 50, ["pland"])
    assert inside["percentage_inside"].between(85, 115).all()

    corner = prepare_sites(sites.iloc[[0]].assign(geometry=sites.geometry.iloc[[0]].translate(-100, 200)))
    clipped = sample_metrics(stack, corner, 50, ["pland"])
    assert clipped["percentage_inside"].iloc[0] < 40
    assert clipped.groupby("layer")["value"].sum().tolist() == pytest.approx([100.0, 100.0])


def test_fail_edge_policy_rejects_buffers_crossing_the_edge(stack, sites):
    corner = prepare_sites(sites.iloc[[0]].assign(geometry=sites.geometry.iloc[[0]].translate(-100, 200)))
    with pytest.raises(SiteOutsideRasterError):
        sample_metrics(stack, corner, 50, ["pland"], edge_policy="fail")
    # fully inside buffers are fine under the strict policy
    results = sample_metrics(stack, sites, 50, ["pland"], edge_policy="fail")
    assert not results.empty


def test_site_outside_raster(stack, sites):
    far = prepare_sites(sites.assign(geometry=sites.geometry.translate(10000, 10000)))
    with pytest.raises(SiteOutsideRasterError) as excinfo:
        sample_metrics(stack, far, 50, ["pland"])
    assert excinfo.value.plot_id == 1


def test_buffer_without_valid_cells(transform, sites):
    raster = np.ones((40, 40), dtype=np.int32)
    raster[15:25, 5:15] = 0
    layer = LandcoverLayer(raster, transform, "EPSG:32618", name="2014", nodata=0)
    with pytest.raises(EmptyWindowError):
        sample_metrics(RasterStack([layer]), sites.iloc[[0]], 20, ["pland"])


def test_invalid_inputs(stack, sites, transform):
    with pytest.raises(ValueError):
        sample_metrics(stack, sites, 0, ["pland"])
    with pytest.raises(ValueError):
        sample_metrics(stack, sites, -10, ["pland"])
    with pytest.raises(ValueError):
        sample_metrics(stack, sites, 50, ["pland"], edge_policy="shrink")
    with pytest.raises(UnknownMetricError):
        sample_metrics(stack, sites, 50, ["lsm_c_contag"])

    float_stack = RasterStack([LandcoverLayer(np.full((40, 40), 1.5), transform, "EPSG:32618")])
    with pytest.raises(LandscapeError):
        sample_metrics(float_stack, sites, 50, ["pland"])


def test_sites_must_match_raster_crs(stack, sites):
    with pytest.raises(CRSMismatchError):
        sample_metrics(stack, reproject_sites(sites, "EPSG:4326"), 50, ["pland"])

    aligned = reproject_sites(reproject_sites(sites, "EPSG:4326"), stack.crs)
    results = sample_metrics(stack, aligned, 50, ["pland"])
    assert set(results["plot_id"]) == {1, 2, 3}


def test_float_rasters_with_integral_codes_are_accepted(transform, sites):
    raster = np.ones((40, 40), dtype=np.float32)
    raster[:, 20:] = 2.0
    layer = LandcoverLayer(raster, transform, "EPSG:32618", name="2014")
    results = sample_metrics(RasterStack([layer]), sites, 50, ["pland"])
    assert set(results["class"]) == {1, 2}


def test_float_rasters_with_float32_nodata(transform, sites):
    nodata = np.finfo(np.float32).min
    raster = np.ones((40, 40), dtype=np.float32)
    raster[:, 20:] = 2.0
    raster[:, :8] = nodata
    layer = LandcoverLayer(raster, transform, "EPSG:32618", name="2014", nodata=nodata)
    results = sample_metrics(RasterStack([layer]), sites.iloc[[0]], 150, ["pland"])
    assert set(results["class"]) <= {1, 2}
    assert np.isclose(results["value"].sum(), 100.0)


def test_buffer_beyond_raster_corner(stack, sites):
    # the bounding box of the circle overlaps the raster, the circle does not
    corner = prepare_sites(sites.iloc[[0]].assign(geometry=sites.geometry.iloc[[0]].translate(-150, 250)))
    for edge_policy in ("clip", "fail"):
        with pytest.raises(SiteOutsideRasterError):
            sample_metrics(stack, corner, 60, ["pland"], edge_policy=edge_policy)
