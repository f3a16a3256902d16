# -*- coding: utf-8 -*-
"""Functions to map landcover layers and sample sites."""

import folium
import ipywidgets as widgets
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np
from folium.plugins import DualMap
from folium.raster_layers import ImageOverlay
from IPython.display import display
from matplotlib.colors import ListedColormap
from pyproj import CRS, Transformer

from ..core.sites import reproject_sites


def _class_colors(classes, class_color=None):
    """Assign a hex colour to every class, reusing the ones given."""
    class_color = dict(class_color) if class_color else {}
    base_colors = plt.cm.tab20(np.linspace(0, 1, max(len(classes), 1)))
    for idx, class_value in enumerate(classes):
        if class_value not in class_color:
            rgb = base_colors[idx][:3]
            class_color[class_value] = "#{:02x}{:02x}{:02x}".format(int(rgb[0] * 255), int(rgb[1] * 255), int(rgb[2] * 255))
    return class_color


def _class_index(layer, classes):
    """Masked array of positions in ``classes`` for every cell of the layer."""
    valid = layer.valid_mask()
    index = np.searchsorted(classes, np.where(valid, layer.raster, classes[0]))
    return np.ma.masked_array(index, mask=~valid)


def _sites_in(sites, crs):
    if sites is None or sites.crs is None or crs is None:
        return sites
    if CRS.from_user_input(sites.crs) == CRS.from_user_input(crs):
        return sites
    return reproject_sites(sites, crs)


def _draw_layer(ax, layer, classes, cmap, sites=None, radius=None):
    west, south, east, north = layer.bounds
    ax.imshow(
        _class_index(layer, classes),
        cmap=cmap,
        vmin=-0.5,
        vmax=len(classes) - 0.5,
        extent=(west, east, south, north),
        interpolation="nearest",
    )
    if sites is not None and len(sites):
        if radius:
            sites.geometry.buffer(radius).boundary.plot(ax=ax, color="red", linewidth=0.8)
        sites.plot(ax=ax, color="black", markersize=12)


def plot_stack(stack, sites=None, radius=None, figsize=None, title=None, class_color=None, legend=True):
    """Plot every layer of a stack side by side, with sites and optional buffers.

    Parameters:
    -----------
    stack : RasterStack
        Layers to plot, one panel each
    sites : geopandas.GeoDataFrame, optional
        Sites to overlay. They are reprojected to the stack CRS when needed.
    radius : float, optional
        Draw a buffer of this radius around every site
    figsize : tuple, optional
        Figure size
    title : str, optional
        Figure title
    class_color : dict, optional
        Mapping of class code to hex colour
    legend : bool
        Whether to draw a class legend

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    classes = stack.classes()
    class_color = _class_colors(classes, class_color)
    cmap = ListedColormap([class_color[c] for c in classes] or ["#ffffff"])
    sites = _sites_in(sites, stack.crs)

    if figsize is None:
        figsize = (7 * len(stack), 7)
    fig, axes = plt.subplots(1, len(stack), figsize=figsize, squeeze=False)

    if title:
        fig.suptitle(title)

    for ax, layer in zip(axes[0], stack.layers, strict=True):
        _draw_layer(ax, layer, classes, cmap, sites=sites, radius=radius)
        ax.set_title(f"Landcover {layer.name}")
        ax.set_xlabel("X Coordinate")
        ax.set_ylabel("Y Coordinate")

    if legend and classes:
        labels = stack.class_labels()
        patches = [mpatches.Patch(color=class_color[c], label=labels.get(c, str(c))) for c in classes]
        axes[0][-1].legend(handles=patches, loc="upper right", title="class")

    return fig


def _overlay_image(layer, classes, class_color):
    """RGBA image of a layer for a folium overlay, nodata transparent."""
    index = _class_index(layer, classes)
    palette = np.array([[int(class_color[c][i : i + 2], 16) for i in (1, 3, 5)] for c in classes], dtype=np.uint8)
    rgba = np.zeros(layer.shape + (4,), dtype=np.uint8)
    rgba[..., :3] = palette[index.filled(0)]
    rgba[..., 3] = np.where(np.ma.getmaskarray(index), 0, 255)
    return rgba


def _latlon_bounds(layer):
    west, south, east, north = layer.bounds
    transformer = Transformer.from_crs(layer.crs, "EPSG:4326", always_xy=True)
    lon_min, lat_min = transformer.transform(west, south)
    lon_max, lat_max = transformer.transform(east, north)
    return [[lat_min, lon_min], [lat_max, lon_max]]


def _add_sites(fmap, sites):
    for row in sites.itertuples():
        folium.CircleMarker(
            location=[row.geometry.y, row.geometry.x],
            radius=4,
            color="#000000",
            fill=True,
            fill_opacity=1.0,
            tooltip=f"{getattr(row, 'site_key', '')} (plot {row.plot_id})",
        ).add_to(fmap)


def plot_landcover_interactive(stack, sites=None, zoom_start=13, opacity=0.8, class_color=None):
    """Interactive map of the first two layers side by side, with the sites on both.

    Parameters:
    -----------
    stack : RasterStack
        Layers to show. A single-layer stack gives a single map.
    sites : geopandas.GeoDataFrame, optional
        Sites with ``plot_id`` (and ``site_key``) columns
    zoom_start : int
        Initial zoom level
    opacity : float
        Overlay opacity between 0 and 1
    class_color : dict, optional
        Mapping of class code to hex colour

    Returns:
    --------
    fmap : folium.plugins.DualMap or folium.Map
        Map object, rendered inline by Jupyter
    """
    classes = stack.classes()
    class_color = _class_colors(classes, class_color)
    bounds = _latlon_bounds(stack.layers[0])
    center = [(bounds[0][0] + bounds[1][0]) / 2, (bounds[0][1] + bounds[1][1]) / 2]

    if len(stack) > 1:
        fmap = DualMap(location=center, zoom_start=zoom_start)
        panels = [(fmap.m1, stack.layers[0]), (fmap.m2, stack.layers[1])]
    else:
        fmap = folium.Map(location=center, zoom_start=zoom_start)
        panels = [(fmap, stack.layers[0])]

    sites_wgs84 = reproject_sites(sites, "EPSG:4326") if sites is not None else None

    for panel, layer in panels:
        ImageOverlay(
            name=f"Landcover {layer.name}",
            image=_overlay_image(layer, classes, class_color),
            bounds=bounds,
            opacity=opacity,
            interactive=True,
            cross_origin=False,
        ).add_to(panel)
        if sites_wgs84 is not None:
            _add_sites(panel, sites_wgs84)

    folium.LayerControl().add_to(fmap)
    return fmap


def plot_buffers_interactive(stack, sites, radii, figsize=(10, 10), class_color=None):
    """Explore the buffers of each radius on each year with widgets.

    Parameters:
    -----------
    stack : RasterStack
        Layers to choose from
    sites : geopandas.GeoDataFrame
        Sites to draw
    radii : list of float
        Buffer radii to choose from
    figsize : tuple
        Figure size
    class_color : dict, optional
        Mapping of class code to hex colour

    Returns:
    --------
    ui : ipywidgets.VBox
        The selector widgets
    """
    classes = stack.classes()
    class_color = _class_colors(classes, class_color)
    cmap = ListedColormap([class_color[c] for c in classes] or ["#ffffff"])
    sites = _sites_in(sites, stack.crs)

    year_widget = widgets.Dropdown(options=stack.years, value=stack.years[0], description="Year:")
    radius_widget = widgets.SelectionSlider(options=list(radii), value=list(radii)[0], description="Buffer:")

    fig, ax = plt.subplots(figsize=figsize)

    def update_plot(year, radius):
        ax.clear()
        _draw_layer(ax, stack.layer(year), classes, cmap, sites=sites, radius=radius)
        ax.set_title(f"Landcover {year}, buffer {radius}")
        fig.canvas.draw_idle()

    ui = widgets.VBox([year_widget, radius_widget])
    controls = widgets.interactive_output(update_plot, {"year": year_widget, "radius": radius_widget})

    display(ui, controls)
    return ui
