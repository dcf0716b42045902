"""
Display configuration shared by every chart

Charts never touch matplotlib's global rcParams directly; the style is
passed in explicitly and applied inside a context manager.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from ..data import SampleDesign
from ..utils import safe_file_operation

logger = logging.getLogger(__name__)


@dataclass
class PlotStyle:
    """Figure appearance and output settings"""

    dpi: int = 300
    save_formats: Sequence[str] = ("png",)
    style: str = "seaborn-v0_8-whitegrid"
    context: str = "notebook"
    figsize: Tuple[float, float] = (8, 6)
    heatmap_cmap: str = "viridis"
    zscore_cmap: str = "RdBu_r"
    distance_cmap: str = "Blues_r"
    treatment_colors: Tuple[str, str] = ("#4C72B0", "#DD8452")
    sequencing_colors: Tuple[str, str] = ("#55A868", "#8172B3")
    direction_colors: Dict[str, str] = field(
        default_factory=lambda: {"UP": "#E74C3C", "DOWN": "#3498DB", "NO": "#AAAAAA"}
    )

    @classmethod
    def from_config(cls, config) -> "PlotStyle":
        vis = config.visualization
        return cls(
            dpi=vis["dpi"],
            save_formats=tuple(vis["save_formats"]),
            style=vis["style"],
            context=vis["context"],
            figsize=tuple(vis["figsize"]),
            heatmap_cmap=vis["heatmap_cmap"],
            zscore_cmap=vis["zscore_cmap"],
            distance_cmap=vis["distance_cmap"],
        )

    @contextmanager
    def apply(self):
        with plt.style.context(self.style), sns.plotting_context(self.context):
            yield

    def treatment_palette(self, design: SampleDesign) -> Dict[str, str]:
        """Reference level gets the first colour, treated level the second"""
        return dict(zip(design.treatment.cat.categories, self.treatment_colors))

    def sequencing_palette(self, design: SampleDesign) -> Dict[str, str]:
        return dict(zip(design.sequencing.cat.categories, self.sequencing_colors))

    def annotation_colors(self, design: SampleDesign) -> pd.DataFrame:
        """Per-sample colour bars (treatment, sequencing) for heatmap columns"""
        return pd.DataFrame(
            {
                "treatment": design.treatment.astype(str).map(
                    self.treatment_palette(design)
                ),
                "sequencing": design.sequencing.astype(str).map(
                    self.sequencing_palette(design)
                ),
            },
            index=design.table.index,
        )


def save_figure(
    fig, path: Union[str, Path], style: PlotStyle, close: bool = True
) -> List[Path]:
    """
    Save a Figure or seaborn grid once per configured format

    Args:
        fig: matplotlib Figure or seaborn ClusterGrid
        path: output path; its suffix is replaced by each format
        style: PlotStyle holding dpi and formats

    Returns:
        Written paths
    """
    figure = fig if isinstance(fig, Figure) else fig.figure
    path = Path(path)

    written = []
    for fmt in style.save_formats:
        out_path = path.with_suffix(f".{fmt}")
        with safe_file_operation(out_path):
            figure.savefig(out_path, dpi=style.dpi, bbox_inches="tight")
        written.append(out_path)
        logger.info(f"Figure saved: {out_path}")

    if close:
        plt.close(figure)

    return written
