"""
MA and volcano plots of shrunken fold changes
"""

import logging
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from adjustText import adjust_text

from ..differential.results import (
    DIRECTION_DOWN,
    DIRECTION_NONE,
    DIRECTION_UP,
    label_direction,
)
from .style import PlotStyle

logger = logging.getLogger(__name__)

DIRECTION_ORDER = [DIRECTION_NONE, DIRECTION_DOWN, DIRECTION_UP]


def _ensure_direction(
    shrunken: pd.DataFrame, padj_threshold: float, lfc_threshold: float
) -> pd.DataFrame:
    if "direction" in shrunken.columns:
        return shrunken
    return label_direction(shrunken, padj_threshold, lfc_threshold)


def plot_ma(
    shrunken: pd.DataFrame,
    style: Optional[PlotStyle] = None,
    padj_threshold: float = 0.05,
    lfc_threshold: float = 1.0,
) -> plt.Figure:
    """Shrunken log2 fold change against mean normalized count (log x axis)"""
    style = style or PlotStyle()
    data = _ensure_direction(shrunken, padj_threshold, lfc_threshold)
    data = data[data["baseMean"] > 0]

    with style.apply():
        fig, ax = plt.subplots(figsize=style.figsize)

        for direction in DIRECTION_ORDER:
            subset = data[data["direction"] == direction]
            if subset.empty:
                continue
            ax.scatter(
                subset["baseMean"],
                subset["log2FoldChange"],
                s=6 if direction == DIRECTION_NONE else 12,
                c=style.direction_colors[direction],
                alpha=0.5 if direction == DIRECTION_NONE else 0.8,
                edgecolors="none",
                label=f"{direction} ({len(subset)})",
            )

        ax.axhline(0, color="black", linewidth=0.8)
        ax.set_xscale("log")
        ax.set_xlabel("mean of normalized counts")
        ax.set_ylabel("shrunken log2 fold change")
        ax.set_title("MA plot")
        ax.legend(loc="best", markerscale=2)

        fig.tight_layout()

    return fig


def plot_volcano(
    shrunken: pd.DataFrame,
    style: Optional[PlotStyle] = None,
    padj_threshold: float = 0.05,
    lfc_threshold: float = 1.0,
    label_top: int = 10,
) -> plt.Figure:
    """
    Volcano plot: shrunken log2 fold change vs -log10 adjusted p-value

    Genes without an adjusted p-value sit on the x axis. The ``label_top``
    UP/DOWN genes with the smallest adjusted p-value are labelled, with
    labels repelled from each other by adjustText.
    """
    style = style or PlotStyle()
    data = _ensure_direction(shrunken, padj_threshold, lfc_threshold).copy()
    data["neg_log10_padj"] = -np.log10(data["padj"].fillna(1).clip(lower=1e-300))

    with style.apply():
        fig, ax = plt.subplots(figsize=style.figsize)

        for direction in DIRECTION_ORDER:
            subset = data[data["direction"] == direction]
            if subset.empty:
                continue
            ax.scatter(
                subset["log2FoldChange"],
                subset["neg_log10_padj"],
                s=8 if direction == DIRECTION_NONE else 16,
                c=style.direction_colors[direction],
                alpha=0.5 if direction == DIRECTION_NONE else 0.8,
                edgecolors="none",
                label=f"{direction} ({len(subset)})",
            )

        ax.axhline(-np.log10(padj_threshold), color="grey", linestyle="--", linewidth=1)
        ax.axvline(lfc_threshold, color="grey", linestyle="--", linewidth=1)
        ax.axvline(-lfc_threshold, color="grey", linestyle="--", linewidth=1)

        labelled = data[data["direction"] != DIRECTION_NONE].sort_values(
            "padj", kind="mergesort"
        )
        texts = [
            ax.text(row.log2FoldChange, row.neg_log10_padj, str(gene), fontsize=8)
            for gene, row in labelled.head(label_top).iterrows()
        ]
        if texts:
            adjust_text(
                texts, ax=ax, arrowprops=dict(arrowstyle="-", color="black", lw=0.5)
            )

        ax.set_xlabel("shrunken log2 fold change")
        ax.set_ylabel("-log10 adjusted p-value")
        ax.set_title(
            f"Volcano plot (padj < {padj_threshold}, |log2FC| > {lfc_threshold})"
        )
        ax.legend(loc="upper left", markerscale=2)

        fig.tight_layout()

    return fig
