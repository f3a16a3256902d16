# -*- coding: utf-8 -*-
"""Handles raster input and output operations for categorical landcover maps.

Each landcover file becomes a LandcoverLayer; a list of files for successive years becomes a RasterStack.
"""

import logging
import os

import rasterio

from ..core.layer import LandcoverLayer, RasterStack

logger = logging.getLogger(__name__)


def read_raster(raster_path):
    """Read a raster file and return its data, transform, and CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file

    Returns:
    --------
    image_data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    """
    with rasterio.open(raster_path) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs

    return image_data, transform, crs


def read_landcover(raster_path, name=None, band=1, class_labels=None):
    """Read one band of a landcover raster.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file
    name : str, optional
        Layer name. Defaults to the file name without extension.
    band : int
        1-based band to read
    class_labels : dict, optional
        Mapping of class code to label

    Returns:
    --------
    layer : LandcoverLayer
        The loaded layer
    """
    if name is None:
        name = os.path.splitext(os.path.basename(raster_path))[0]

    with rasterio.open(raster_path) as src:
        if not 1 <= band <= src.count:
            raise ValueError(f"Band {band} not found in {raster_path} ({src.count} bands)")
        data = src.read(band)
        layer = LandcoverLayer(
            data,
            src.transform,
            src.crs,
            name=name,
            nodata=src.nodata,
            class_labels=class_labels,
        )

    logger.info("Read %s", layer)
    return layer


def read_landcover_stack(raster_paths, names=None, class_labels=None):
    """Read several landcover rasters into one stack.

    Parameters:
    -----------
    raster_paths : list of str
        Raster files in year order
    names : list of str, optional
        Layer names, usually years. Defaults to the file names.
    class_labels : dict, optional
        Mapping of class code to label, shared by all layers

    Returns:
    --------
    stack : RasterStack
        Stack of aligned layers
    """
    raster_paths = list(raster_paths)
    if names is None:
        names = [None] * len(raster_paths)
    names = list(names)
    if len(names) != len(raster_paths):
        raise ValueError(f"Got {len(names)} names for {len(raster_paths)} rasters")

    layers = [
        read_landcover(path, name=name, class_labels=class_labels) for path, name in zip(raster_paths, names, strict=True)
    ]
    return RasterStack(layers)


def write_raster(output_path, data, transform, crs, nodata=None):
    """Write raster data to a file.

    Parameters:
    -----------
    output_path : str
        Path to the output raster file
    data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    nodata : int or float, optional
        No data value
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if len(data.shape) == 2:
        data = data.reshape(1, *data.shape)

    height, width = data.shape[-2], data.shape[-1]
    count = data.shape[0]

    with rasterio.open(
        output_path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)


def layer_to_raster(layer, output_path):
    """Save a landcover layer to a GeoTIFF.

    Parameters:
    -----------
    layer : LandcoverLayer
        Layer to save
    output_path : str
        Path to the output raster file
    """
    write_raster(output_path, layer.raster, layer.transform, layer.crs, layer.nodata)
