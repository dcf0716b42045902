"""
Sample-distance and top-gene heatmaps
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import seaborn as sns
from scipy.cluster.hierarchy import linkage
from scipy.spatial.distance import pdist, squareform

from ..data import SampleDesign
from ..differential.models import FittedModel
from ..exceptions import FitError
from .style import PlotStyle

logger = logging.getLogger(__name__)


def sample_distances(model: FittedModel) -> pd.DataFrame:
    """Euclidean distances between samples over variance-stabilized counts"""
    vst = model.vst_counts
    distances = squareform(pdist(vst.T.to_numpy(), metric="euclidean"))
    return pd.DataFrame(distances, index=vst.columns, columns=vst.columns)


def plot_sample_distances(
    model: FittedModel, design: SampleDesign, style: Optional[PlotStyle] = None
) -> sns.matrix.ClusterGrid:
    """Sample-distance heatmap clustered identically on both axes"""
    style = style or PlotStyle()
    vst = model.vst_counts
    if vst.shape[1] < 2:
        raise FitError("sample distances need at least two samples", stage="heatmap")

    distances = sample_distances(model)
    tree = linkage(pdist(vst.T.to_numpy(), metric="euclidean"), method="complete")

    labels = design.labels().reindex(distances.index)
    distances.index = labels.values
    distances.columns = labels.values

    with style.apply():
        grid = sns.clustermap(
            distances,
            row_linkage=tree,
            col_linkage=tree,
            cmap=style.distance_cmap,
            figsize=(style.figsize[0], style.figsize[0]),
            xticklabels=True,
            yticklabels=True,
        )
        grid.ax_heatmap.set_xticklabels(
            grid.ax_heatmap.get_xticklabels(), rotation=45, ha="right"
        )
        grid.figure.suptitle("Sample-to-sample distances", y=1.02)

    return grid


def zscore_rows(matrix: pd.DataFrame, on_constant: str = "exclude") -> pd.DataFrame:
    """
    Standardise each row: subtract the row mean, divide by the row SD

    Rows with zero (or undefined) standard deviation have no z-score. With
    ``on_constant="exclude"`` they are dropped and a warning names them;
    with ``on_constant="raise"`` a FitError is raised. A FitError is also
    raised when no row is left.
    """
    if on_constant not in ("exclude", "raise"):
        raise ValueError(f"on_constant must be 'exclude' or 'raise', not {on_constant!r}")

    std = matrix.std(axis=1, ddof=1)
    constant = ~(np.isfinite(std) & (std > 0))
    constant_genes = list(matrix.index[constant])

    if constant_genes:
        if on_constant == "raise":
            raise FitError(
                f"zero standard deviation for {constant_genes}", stage="z-score"
            )
        logger.warning(f"Excluding constant rows from z-score heatmap: {constant_genes}")

    kept = matrix.loc[~constant]
    if kept.empty:
        raise FitError("every row has zero standard deviation", stage="z-score")

    return kept.sub(kept.mean(axis=1), axis=0).div(std[~constant], axis=0)


def _gene_heatmap(
    matrix: pd.DataFrame,
    design: SampleDesign,
    style: PlotStyle,
    cmap: str,
    title: str,
    colorbar_label: str,
    **kwargs,
) -> sns.matrix.ClusterGrid:
    height = max(4, 0.45 * len(matrix) + 2)

    with style.apply():
        grid = sns.clustermap(
            matrix,
            row_cluster=False,
            col_cluster=False,
            col_colors=style.annotation_colors(design).reindex(matrix.columns),
            cmap=cmap,
            figsize=(style.figsize[0], height),
            xticklabels=True,
            yticklabels=True,
            dendrogram_ratio=(0.05, 0.05),
            cbar_pos=(0.02, 0.8, 0.03, 0.15),
            **kwargs,
        )
        grid.ax_heatmap.set_xticklabels(
            grid.ax_heatmap.get_xticklabels(), rotation=45, ha="right"
        )
        grid.cax.set_ylabel(colorbar_label)
        grid.figure.suptitle(title, y=1.02)

    return grid


def top_gene_matrix(model: FittedModel, genes: Sequence[str]) -> pd.DataFrame:
    """log2(normalized + 1) rows for ``genes``, in the given order"""
    genes = list(genes)
    missing = [gene for gene in genes if gene not in model.normalized_counts.index]
    if missing:
        raise KeyError(f"Genes not in fitted model: {missing}")
    return model.log_counts.loc[genes]


def plot_top_gene_heatmap(
    model: FittedModel,
    design: SampleDesign,
    genes: List[str],
    style: Optional[PlotStyle] = None,
) -> sns.matrix.ClusterGrid:
    """Expression of the top genes, rows in p-value order, no clustering"""
    style = style or PlotStyle()
    return _gene_heatmap(
        top_gene_matrix(model, genes),
        design,
        style,
        cmap=style.heatmap_cmap,
        title=f"Top {len(genes)} genes by adjusted p-value",
        colorbar_label="log2(normalized count + 1)",
    )


def plot_zscore_heatmap(
    model: FittedModel,
    design: SampleDesign,
    genes: List[str],
    style: Optional[PlotStyle] = None,
) -> sns.matrix.ClusterGrid:
    """Row z-scores of the top genes; constant rows are left out"""
    style = style or PlotStyle()
    zscores = zscore_rows(top_gene_matrix(model, genes))
    limit = float(np.nanmax(np.abs(zscores.to_numpy())))

    return _gene_heatmap(
        zscores,
        design,
        style,
        cmap=style.zscore_cmap,
        title=f"Top {len(zscores)} genes, row z-scores",
        colorbar_label="z-score",
        center=0,
        vmin=-limit,
        vmax=limit,
    )
