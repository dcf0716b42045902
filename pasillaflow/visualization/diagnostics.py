"""
Model diagnostics: dispersion estimates and sample PCA
"""

import logging
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from sklearn.decomposition import PCA

from ..data import SampleDesign
from ..differential.models import FittedModel
from ..exceptions import FitError
from .style import PlotStyle

logger = logging.getLogger(__name__)


def plot_dispersion(
    model: FittedModel, style: Optional[PlotStyle] = None
) -> plt.Figure:
    """
    Dispersion vs mean normalized count

    Gene-wise estimates in black, the fitted trend in red and the final
    shrunken dispersions in blue, both axes on log scale.
    """
    style = style or PlotStyle()
    disp = model.dispersions
    disp = disp[(disp["base_mean"] > 0) & np.isfinite(disp["genewise"])]

    with style.apply():
        fig, ax = plt.subplots(figsize=style.figsize)

        ax.scatter(
            disp["base_mean"], disp["genewise"],
            s=4, c="black", alpha=0.4, edgecolors="none", label="gene-wise",
        )
        ax.scatter(
            disp["base_mean"], disp["final"],
            s=4, c="#1f77b4", alpha=0.4, edgecolors="none", label="final",
        )

        trend = disp.sort_values("base_mean")
        ax.plot(trend["base_mean"], trend["fitted"], c="red", lw=1.5, label="fitted")

        ax.set_xscale("log")
        ax.set_yscale("log")
        ax.set_xlabel("mean of normalized counts")
        ax.set_ylabel("dispersion")
        ax.set_title(f"Dispersion estimates ({len(disp)} genes)")
        ax.legend(loc="best", markerscale=3)

        fig.tight_layout()

    return fig


def pca_coordinates(
    model: FittedModel,
    design: SampleDesign,
    n_top: int = 500,
    random_state: Optional[int] = None,
) -> Tuple[pd.DataFrame, np.ndarray]:
    """
    First two principal components of the most variable VST genes

    Returns:
        (per-sample frame with PC1, PC2, treatment, sequencing;
         explained variance ratio of PC1 and PC2)
    """
    vst = model.vst_counts
    if vst.shape[0] < 2 or vst.shape[1] < 2:
        raise FitError(
            f"PCA needs at least two genes and two samples, got {vst.shape}",
            stage="PCA",
        )

    variances = vst.var(axis=1)
    top = variances.sort_values(ascending=False, kind="mergesort").index[:n_top]
    matrix = vst.loc[top].T

    pca = PCA(n_components=2, random_state=random_state)
    coords = pca.fit_transform(matrix.to_numpy())

    frame = pd.DataFrame(coords, index=matrix.index, columns=["PC1", "PC2"])
    frame["treatment"] = design.treatment.astype(str).reindex(frame.index).values
    frame["sequencing"] = design.sequencing.astype(str).reindex(frame.index).values

    return frame, pca.explained_variance_ratio_


def plot_pca(
    model: FittedModel,
    design: SampleDesign,
    n_top: int = 500,
    style: Optional[PlotStyle] = None,
    random_state: Optional[int] = None,
) -> plt.Figure:
    """PCA of variance-stabilized counts, colour = treatment, marker = sequencing"""
    style = style or PlotStyle()
    frame, ratio = pca_coordinates(
        model, design, n_top=n_top, random_state=random_state
    )

    with style.apply():
        fig, ax = plt.subplots(figsize=style.figsize)

        sns.scatterplot(
            data=frame,
            x="PC1",
            y="PC2",
            hue="treatment",
            style="sequencing",
            hue_order=list(design.treatment.cat.categories),
            style_order=list(design.sequencing.cat.categories),
            palette=style.treatment_palette(design),
            s=120,
            ax=ax,
        )

        ax.set_xlabel(f"PC1: {ratio[0] * 100:.0f}% variance")
        ax.set_ylabel(f"PC2: {ratio[1] * 100:.0f}% variance")
        ax.set_title(f"PCA of VST counts (top {min(n_top, len(model.vst_counts))} genes)")
        sns.move_legend(ax, "best", framealpha=0.95)

        fig.tight_layout()

    return fig
