"""
Binding counts and sample design into a pyDESeq2 dataset
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from ..data import SampleDesign
from ..exceptions import FitError, SchemaError

logger = logging.getLogger(__name__)

DEFAULT_FACTORS = ("sequencing", "treatment")


def build_design_formula(
    design: SampleDesign, factors: Sequence[str] = DEFAULT_FACTORS
) -> str:
    """
    Additive design formula over the factors that actually vary

    A factor observed at a single level would make the design matrix
    rank-deficient, so it is left out with a warning. Treatment always stays.
    """
    if design.treatment.nunique() < 2:
        raise SchemaError(
            "Design needs samples from both treatment levels, found only "
            f"{sorted(design.treatment.astype(str).unique())}"
        )

    terms = []
    for factor in factors:
        if factor not in design.table.columns:
            raise SchemaError(f"Unknown design factor: {factor}")
        if factor != "treatment" and design.table[factor].nunique() < 2:
            logger.warning(
                f"Dropping {factor!r} from the design: only level "
                f"{design.table[factor].iloc[0]!r} is present"
            )
            continue
        terms.append(factor)

    if "treatment" not in terms:
        terms.append("treatment")

    return "~" + " + ".join(terms)


def build_dataset(
    counts: pd.DataFrame,
    design: SampleDesign,
    formula: Optional[str] = None,
    refit_cooks: bool = True,
    inference=None,
    quiet: bool = True,
):
    """
    Create a pyDESeq2 DeseqDataSet from a genes x samples count matrix

    The metadata keeps the categorical columns of ``design`` so the first
    treatment category (the reference level) is the model baseline.
    """
    from pydeseq2.dds import DeseqDataSet

    if list(counts.columns) != design.samples:
        raise SchemaError("Count matrix columns are not in design order")

    if formula is None:
        formula = build_design_formula(design)

    metadata = design.table.copy()
    metadata["treatment"] = pd.Categorical(
        metadata["treatment"].astype(str),
        categories=[design.reference_level, design.treated_level],
    )

    logger.info(
        f"Building dataset: {counts.shape[0]} genes x {counts.shape[1]} samples, "
        f"design {formula}, reference level {design.reference_level!r}"
    )

    try:
        return DeseqDataSet(
            counts=counts.T,
            metadata=metadata,
            design=formula,
            refit_cooks=refit_cooks,
            inference=inference,
            quiet=quiet,
        )
    except (ValueError, KeyError) as e:
        raise FitError(str(e), stage="dataset construction") from e


def treatment_coefficient(dds, design: SampleDesign) -> str:
    """
    Name of the design-matrix column holding the treated vs untreated effect

    Raises:
        FitError: if the baseline is not the reference level, which would
            flip the sign of every reported fold change
    """
    columns = list(dds.obsm["design_matrix"].columns)
    expected = f"treatment[T.{design.treated_level}]"

    if expected in columns:
        return expected

    raise FitError(
        f"No {expected!r} column in design matrix {columns}; the treatment "
        f"baseline is not {design.reference_level!r}",
        stage="model construction",
    )
