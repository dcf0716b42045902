"""
Render every chart of a differential expression run to disk
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from joblib import Parallel, delayed

from ..data import SampleDesign
from ..utils import create_output_directory, log_execution_time
from .diagnostics import plot_dispersion, plot_pca
from .heatmaps import plot_sample_distances, plot_top_gene_heatmap, plot_zscore_heatmap
from .style import PlotStyle, save_figure
from .volcano import plot_ma, plot_volcano

if TYPE_CHECKING:
    from ..differential import DifferentialResult

logger = logging.getLogger(__name__)

CHART_NAMES = [
    "dispersion",
    "pca",
    "sample_distances",
    "top_genes_heatmap",
    "zscore_heatmap",
    "ma",
    "volcano",
]


def _draw(
    name: str,
    result: "DifferentialResult",
    design: SampleDesign,
    style: PlotStyle,
    pca_top_genes: int,
    volcano: Dict,
    random_state: Optional[int] = None,
):
    model = result.model
    if name == "dispersion":
        return plot_dispersion(model, style)
    if name == "pca":
        return plot_pca(
            model, design, n_top=pca_top_genes, style=style, random_state=random_state
        )
    if name == "sample_distances":
        return plot_sample_distances(model, design, style)
    if name == "top_genes_heatmap":
        return plot_top_gene_heatmap(model, design, result.top_genes, style)
    if name == "zscore_heatmap":
        return plot_zscore_heatmap(model, design, result.top_genes, style)
    if name == "ma":
        return plot_ma(
            result.shrunken,
            style,
            padj_threshold=volcano["padj_threshold"],
            lfc_threshold=volcano["logfc_threshold"],
        )
    if name == "volcano":
        return plot_volcano(
            result.shrunken,
            style,
            padj_threshold=volcano["padj_threshold"],
            lfc_threshold=volcano["logfc_threshold"],
            label_top=volcano["label_top"],
        )
    raise ValueError(f"Unknown chart: {name}")


def _render_chart(
    name: str,
    result: "DifferentialResult",
    design: SampleDesign,
    style: PlotStyle,
    output_dir: Path,
    pca_top_genes: int,
    volcano: Dict,
    random_state: Optional[int] = None,
) -> List[Path]:
    fig = _draw(name, result, design, style, pca_top_genes, volcano, random_state)
    return save_figure(fig, output_dir / name, style)


@log_execution_time
def render_all(
    result: "DifferentialResult",
    design: SampleDesign,
    output_dir: Union[str, Path],
    style: Optional[PlotStyle] = None,
    n_jobs: int = 1,
    charts: Optional[List[str]] = None,
    pca_top_genes: int = 500,
    volcano: Optional[Dict] = None,
    random_state: Optional[int] = None,
) -> Dict[str, List[Path]]:
    """
    Draw and save the requested charts

    Charts only read the fitted model, so they are independent of each
    other and can be rendered by joblib workers when ``n_jobs != 1``.

    Args:
        result: DifferentialResult of a completed run
        design: Sample design the model was fitted with
        output_dir: Directory receiving one file per chart and format
        style: Display settings; defaults to PlotStyle()
        n_jobs: joblib worker count
        charts: Subset of CHART_NAMES; all charts by default
        pca_top_genes: Number of most variable genes used for PCA
        volcano: padj_threshold, logfc_threshold and label_top for MA/volcano
        random_state: Seed passed to the PCA solver

    Returns:
        Mapping of chart name to the files written for it
    """
    style = style or PlotStyle()
    charts = list(charts or CHART_NAMES)
    unknown = sorted(set(charts) - set(CHART_NAMES))
    if unknown:
        raise ValueError(f"Unknown charts: {unknown}")

    volcano = {
        "padj_threshold": result.fdr_threshold,
        "logfc_threshold": result.logfc_threshold,
        "label_top": 10,
        **(volcano or {}),
    }
    output_dir = create_output_directory(output_dir)

    logger.info(f"Rendering {len(charts)} charts to {output_dir} (n_jobs={n_jobs})")

    if n_jobs == 1:
        paths = [
            _render_chart(
                name, result, design, style, output_dir,
                pca_top_genes, volcano, random_state,
            )
            for name in charts
        ]
    else:
        paths = Parallel(n_jobs=n_jobs)(
            delayed(_render_chart)(
                name, result, design, style, output_dir,
                pca_top_genes, volcano, random_state,
            )
            for name in charts
        )

    return dict(zip(charts, paths))
