# -*- coding: utf-8 -*-
"""Summaries of extraction tables."""

import numpy as np

GROUP_KEY = ["plot_id", "year", "buffer"]


def _require(results, columns):
    missing = [column for column in columns if column not in results.columns]
    if missing:
        raise ValueError(f"Columns {missing} not found in results")


def pland_closure(results):
    """Sum the ``pland`` values of each site, year and buffer.

    Parameters:
    -----------
    results : pandas.DataFrame
        Extraction records

    Returns:
    --------
    closure : pandas.DataFrame
        Columns ``plot_id``, ``year``, ``buffer`` and ``total``. Every ``total`` should be 100.
    """
    _require(results, GROUP_KEY + ["metric", "value"])
    pland = results[results["metric"] == "pland"]
    closure = pland.groupby(GROUP_KEY, sort=True)["value"].sum().rename("total")
    return closure.reset_index()


def class_richness(results):
    """Count the distinct classes observed per site, year and buffer.

    Parameters:
    -----------
    results : pandas.DataFrame
        Extraction records

    Returns:
    --------
    richness : pandas.DataFrame
        Columns ``plot_id``, ``year``, ``buffer`` and ``n_classes``
    """
    _require(results, GROUP_KEY + ["class"])
    richness = results.groupby(GROUP_KEY, sort=True)["class"].nunique().rename("n_classes")
    return richness.reset_index()


def summarise_results(results):
    """Describe an extraction table.

    Parameters:
    -----------
    results : pandas.DataFrame
        Extraction records

    Returns:
    --------
    summary : dict
        Row, site, year and radius counts, rows per metric and the largest deviation
        of the ``pland`` closure from 100
    """
    _require(results, GROUP_KEY + ["metric", "value", "class"])

    summary = {
        "rows": len(results),
        "sites": int(results["plot_id"].nunique()),
        "years": sorted(results["year"].unique().tolist()),
        "buffers": sorted(results["buffer"].unique().tolist()),
        "rows_per_metric": {str(k): int(v) for k, v in results["metric"].value_counts().sort_index().items()},
    }

    closure = pland_closure(results)
    if len(closure):
        summary["max_closure_error"] = float(np.abs(closure["total"] - 100).max())
    else:
        summary["max_closure_error"] = None

    expected = results["plot_id"].nunique() * results["year"].nunique() * results["buffer"].nunique()
    observed = len(results[GROUP_KEY].drop_duplicates())
    summary["missing_combinations"] = int(expected - observed)

    return summary


def metric_table(results, metric):
    """Pivot one metric to a wide table with one column per class."""
    _require(results, GROUP_KEY + ["metric", "value", "class"])
    subset = results[results["metric"] == metric]
    if subset.empty:
        raise ValueError(f"Metric '{metric}' not found in results")
    wide = subset.pivot_table(index=GROUP_KEY, columns="class", values="value", aggfunc="first")
    wide.columns = [f"{metric}_{c}" for c in wide.columns]
    return wide.reset_index()
