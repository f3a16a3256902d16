# -*- coding: utf-8 -*-
"""Visualization functions for extraction tables: metrics across buffer radii and their distributions."""

import matplotlib.pyplot as plt
import seaborn as sns


def _metric_subset(results, metric):
    if "metric" not in results.columns:
        raise ValueError("Column 'metric' not found in results")
    subset = results[results["metric"] == metric]
    if subset.empty:
        raise ValueError(f"Metric '{metric}' not found in results")
    return subset


def plot_metric_by_buffer(results, metric="pland", figsize=None, class_labels=None):
    """Plot the mean of a metric against buffer radius, one panel per year.

    Parameters:
    -----------
    results : pandas.DataFrame
        Extraction records
    metric : str
        Metric to plot, e.g. ``"pland"`` or ``"np"``
    figsize : tuple, optional
        Figure size
    class_labels : dict, optional
        Mapping of class code to label for the legend

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    data = _metric_subset(results, metric).copy()
    if class_labels:
        data["class"] = data["class"].map(lambda c: class_labels.get(c, str(c)))
    else:
        data["class"] = data["class"].astype(str)

    years = sorted(data["year"].unique())
    if figsize is None:
        figsize = (6 * len(years), 5)
    fig, axes = plt.subplots(1, len(years), figsize=figsize, sharey=True, squeeze=False)

    for ax, year in zip(axes[0], years, strict=True):
        sns.pointplot(
            data=data[data["year"] == year],
            x="buffer",
            y="value",
            hue="class",
            errorbar="sd",
            dodge=0.3,
            ax=ax,
        )
        ax.set_title(f"{metric} by buffer ({year})")
        ax.set_xlabel("Buffer radius")
        ax.set_ylabel(metric)
        ax.grid(alpha=0.3)

    plt.tight_layout()
    return fig


def plot_metric_histogram(results, metric="pland", bins=20, figsize=(10, 6), by="buffer"):
    """Plot a histogram of metric values.

    Parameters:
    -----------
    results : pandas.DataFrame
        Extraction records
    metric : str
        Metric to plot
    bins : int
        Number of bins
    figsize : tuple
        Figure size
    by : str, optional
        Column to group by (``"buffer"``, ``"year"`` or ``"class"``)

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    data = _metric_subset(results, metric)

    fig, ax = plt.subplots(figsize=figsize)

    if by and by in data.columns:
        for group_value, group in data.groupby(by):
            sns.histplot(group["value"], bins=bins, alpha=0.6, label=str(group_value), ax=ax)

        ax.legend(title=by)
    else:
        sns.histplot(data["value"], bins=bins, ax=ax)

    ax.set_title(f"Histogram of {metric}")
    ax.set_xlabel(metric)
    ax.set_ylabel("Count")

    return fig
