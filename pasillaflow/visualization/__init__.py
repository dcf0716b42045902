"""
Visualization module for PasillaFlow

Diagnostic and result charts drawn from a fitted model: dispersion,
PCA, sample distances, top-gene heatmaps, MA and volcano plots.
"""

import matplotlib

matplotlib.use("Agg")

from .diagnostics import pca_coordinates, plot_dispersion, plot_pca  # noqa: E402
from .heatmaps import (  # noqa: E402
    plot_sample_distances,
    plot_top_gene_heatmap,
    plot_zscore_heatmap,
    sample_distances,
    top_gene_matrix,
    zscore_rows,
)
from .plots import CHART_NAMES, render_all  # noqa: E402
from .style import PlotStyle, save_figure  # noqa: E402
from .volcano import plot_ma, plot_volcano  # noqa: E402

__all__ = [
    "PlotStyle",
    "save_figure",
    "plot_dispersion",
    "plot_pca",
    "pca_coordinates",
    "sample_distances",
    "plot_sample_distances",
    "top_gene_matrix",
    "plot_top_gene_heatmap",
    "zscore_rows",
    "plot_zscore_heatmap",
    "plot_ma",
    "plot_volcano",
    "render_all",
    "CHART_NAMES",
]
