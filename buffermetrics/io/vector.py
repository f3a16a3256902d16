# -*- coding: utf-8 -*-
"""Manages vector and table I/O: site shapefiles in, GeoJSON/GeoPackage and result tables out."""

import os

import geopandas as gpd


def _ensure_parent(output_path):
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def read_vector(vector_path):
    """Read a vector file into a GeoDataFrame.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame with vector data
    """
    return gpd.read_file(vector_path)


def write_vector(gdf, output_path):
    """Write a GeoDataFrame to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame to write
    output_path : str
        Path to the output vector file (``.shp``, ``.geojson`` or ``.gpkg``)
    """
    file_extension = os.path.splitext(output_path)[1].lower()

    if file_extension == ".shp":
        _ensure_parent(output_path)
        gdf.to_file(output_path)
    elif file_extension == ".geojson":
        _ensure_parent(output_path)
        gdf.to_file(output_path, driver="GeoJSON")
    elif file_extension == ".gpkg":
        _ensure_parent(output_path)
        gdf.to_file(output_path, driver="GPKG")
    else:
        raise ValueError(f"Unsupported vector format: {file_extension}")


def write_results(results, output_path):
    """Write an extraction table to disk.

    Parameters:
    -----------
    results : pandas.DataFrame
        Table returned by the extractor
    output_path : str
        Path ending in ``.csv`` or ``.parquet``
    """
    file_extension = os.path.splitext(output_path)[1].lower()

    if file_extension == ".csv":
        _ensure_parent(output_path)
        results.to_csv(output_path, index=False)
    elif file_extension == ".parquet":
        _ensure_parent(output_path)
        results.to_parquet(output_path, index=False)
    else:
        raise ValueError(f"Unsupported table format: {file_extension}")
