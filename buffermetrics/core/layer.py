# -*- coding: utf-8 -*-
"""Defines the LandcoverLayer and RasterStack classes that hold categorical rasters in memory.

A layer is one year's landcover map: a 2-D grid of integer class codes together with the affine
transform, coordinate reference system and nodata value it was read with. A stack is an ordered
collection of layers sharing the same grid, so that a single extraction call covers every year.
Layers in a stack are addressed with 1-based indices, the first layer being the first year.
"""

import numpy as np
from pyproj import CRS
from rasterio.transform import array_bounds

from ..exceptions import LandscapeError, StackAlignmentError


class LandcoverLayer:
    """A single categorical raster with its georeferencing.

    Layers are treated as read-only once created; ``copy`` returns an independent layer.
    """

    def __init__(self, raster, transform, crs, name=None, nodata=None, class_labels=None):
        """Initialize a LandcoverLayer.

        Parameters:
        -----------
        raster : numpy.ndarray
            2-D array of landcover class codes. A single-band 3-D array is squeezed.
        transform : affine.Affine
            Affine transformation for the raster
        crs : rasterio.crs.CRS or str
            Coordinate reference system
        name : str, optional
            Layer name, usually the year the map represents
        nodata : int, optional
            Value marking cells without a class
        class_labels : dict, optional
            Mapping of class code to a human-readable label
        """
        raster = np.array(raster)
        if raster.ndim == 3 and raster.shape[0] == 1:
            raster = raster[0]
        if raster.ndim != 2:
            raise LandscapeError(f"Landcover raster must be 2-D, got shape {raster.shape}")

        self.raster = raster
        self.raster.setflags(write=False)
        self.transform = transform
        self.crs = crs
        self.name = str(name) if name is not None else "layer"
        self.nodata = nodata
        self.class_labels = dict(class_labels) if class_labels else {}

    @property
    def shape(self):
        return self.raster.shape

    @property
    def res(self):
        """Cell size as ``(x, y)``."""
        return abs(self.transform.a), abs(self.transform.e)

    @property
    def bounds(self):
        """Raster bounds as ``(left, bottom, right, top)``."""
        height, width = self.shape
        west, south, east, north = array_bounds(height, width, self.transform)
        return west, south, east, north

    def valid_mask(self):
        """Boolean mask of cells that carry a class."""
        if np.issubdtype(self.raster.dtype, np.floating):
            mask = ~np.isnan(self.raster)
        else:
            mask = np.ones(self.shape, dtype=bool)
        if self.nodata is not None:
            mask &= self.raster != self.nodata
        return mask

    def classes(self):
        """Sorted class codes present in the layer, nodata excluded."""
        values = np.unique(self.raster[self.valid_mask()])
        return [v.item() for v in values]

    def label(self, class_value):
        """Label for a class code, falling back to the code itself."""
        return self.class_labels.get(class_value, str(class_value))

    def copy(self):
        """Create a copy of this layer.

        Returns:
        --------
        layer_copy : LandcoverLayer
            Copy of this layer with its own raster array
        """
        return LandcoverLayer(
            self.raster.copy(),
            self.transform,
            self.crs,
            name=self.name,
            nodata=self.nodata,
            class_labels=self.class_labels,
        )

    def __str__(self):
        """String representation of the layer."""
        height, width = self.shape
        return f"LandcoverLayer '{self.name}' ({height}x{width}, res: {self.res}, classes: {len(self.classes())})"


def _same_crs(left, right):
    if left is None or right is None:
        return left is None and right is None
    return CRS.from_user_input(left) == CRS.from_user_input(right)


class RasterStack:
    """An ordered collection of aligned landcover layers."""

    def __init__(self, layers):
        """Initialize the stack.

        Parameters:
        -----------
        layers : list of LandcoverLayer
            Layers in year order. All layers must share shape, transform and CRS.
        """
        layers = list(layers)
        if not layers:
            raise StackAlignmentError("A raster stack needs at least one layer")

        first = layers[0]
        for layer in layers[1:]:
            if layer.shape != first.shape:
                raise StackAlignmentError(f"Layer '{layer.name}' has shape {layer.shape}, expected {first.shape}")
            if not layer.transform.almost_equals(first.transform):
                raise StackAlignmentError(f"Layer '{layer.name}' is not aligned with layer '{first.name}'")
            if not _same_crs(layer.crs, first.crs):
                raise StackAlignmentError(f"Layer '{layer.name}' has CRS {layer.crs}, expected {first.crs}")

        names = [layer.name for layer in layers]
        if len(set(names)) != len(names):
            raise StackAlignmentError(f"Layer names must be unique, got {names}")

        self.layers = layers

    @property
    def crs(self):
        return self.layers[0].crs

    @property
    def transform(self):
        return self.layers[0].transform

    @property
    def shape(self):
        return self.layers[0].shape

    @property
    def res(self):
        return self.layers[0].res

    @property
    def bounds(self):
        return self.layers[0].bounds

    @property
    def years(self):
        """Layer names in stack order."""
        return [layer.name for layer in self.layers]

    def layer(self, index):
        """Get a layer by its 1-based index or by name.

        Parameters:
        -----------
        index : int or str
            1-based position in the stack, or the layer name

        Returns:
        --------
        layer : LandcoverLayer
            The requested layer
        """
        if isinstance(index, str):
            for layer in self.layers:
                if layer.name == index:
                    return layer
            raise KeyError(f"Layer '{index}' not found")

        if not 1 <= index <= len(self.layers):
            raise IndexError(f"Layer index {index} out of range 1..{len(self.layers)}")
        return self.layers[index - 1]

    def year_of(self, index):
        """Year label for a 1-based layer index."""
        return self.layer(int(index)).name

    def year_mapping(self):
        """Dictionary of 1-based layer index to year label."""
        return {i: layer.name for i, layer in enumerate(self.layers, start=1)}

    def classes(self):
        """Sorted union of class codes over all layers."""
        values = set()
        for layer in self.layers:
            values.update(layer.classes())
        return sorted(values)

    def class_labels(self):
        """Merged class labels of all layers."""
        labels = {}
        for layer in self.layers:
            labels.update(layer.class_labels)
        return labels

    def __len__(self):
        return len(self.layers)

    def __iter__(self):
        return iter(self.layers)

    def __str__(self):
        """String representation of the stack."""
        height, width = self.shape
        return f"RasterStack ({len(self)} layers: {', '.join(self.years)}; {height}x{width}; crs: {self.crs})"
