"""
Loading and validation of the count matrix and sample design table

Both inputs are flat delimited files with a header row whose first column is
the row key (gene id for the count matrix, sample id for the design table).
The design table's row order is the canonical sample order for everything
downstream.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import SchemaError

logger = logging.getLogger(__name__)

SEQUENCING_LEVELS = ("single", "paired")

# Spellings used by the Pasilla annotation sheets
SEQUENCING_ALIASES = {
    "single": "single",
    "single-read": "single",
    "single-end": "single",
    "single_end": "single",
    "se": "single",
    "paired": "paired",
    "paired-end": "paired",
    "paired_end": "paired",
    "pe": "paired",
}


@dataclass
class SampleDesign:
    """Sample metadata with categorical ``sequencing`` and ``treatment`` columns"""

    table: pd.DataFrame
    reference_level: str = "untreated"
    treated_level: str = "treated"

    @property
    def samples(self) -> List[str]:
        return list(self.table.index)

    @property
    def treatment(self) -> pd.Series:
        return self.table["treatment"]

    @property
    def sequencing(self) -> pd.Series:
        return self.table["sequencing"]

    def group_sizes(self) -> pd.Series:
        """Number of samples per treatment level, in category order"""
        return self.treatment.value_counts(sort=False).reindex(
            self.treatment.cat.categories, fill_value=0
        )

    def min_group_size(self) -> int:
        return int(self.group_sizes().min())

    def labels(self) -> pd.Series:
        """``treatment-sequencing`` label per sample, used on chart axes"""
        return self.treatment.astype(str) + "-" + self.sequencing.astype(str)

    def __len__(self) -> int:
        return len(self.table)


def _read_table(path: Union[str, Path], sep: str, what: str) -> pd.DataFrame:
    path = Path(path)
    if not path.is_file():
        raise SchemaError(f"{what} not found: {path}")

    try:
        table = pd.read_csv(path, sep=sep, index_col=0)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise SchemaError(f"Cannot parse {what} {path}: {e}") from e

    if table.empty or table.shape[1] == 0:
        raise SchemaError(f"{what} {path} has no data columns")

    table.index = table.index.map(lambda key: str(key).strip())
    table.columns = [str(col).strip() for col in table.columns]

    duplicated = table.index[table.index.duplicated()].unique().tolist()
    if duplicated:
        raise SchemaError(f"Duplicate row keys in {what}: {duplicated[:5]}")

    return table


def validate_counts(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce a raw count table to a non-negative integer matrix

    Raises:
        SchemaError: on non-numeric, missing, fractional or negative cells
    """
    numeric = raw.apply(pd.to_numeric, errors="coerce")

    invalid = numeric.isna().to_numpy()
    if invalid.any():
        row, col = np.argwhere(invalid)[0]
        gene, sample = numeric.index[row], numeric.columns[col]
        raise SchemaError(
            f"Non-numeric count for gene {gene!r} in sample {sample!r}: "
            f"{raw.iat[row, col]!r}"
        )

    values = numeric.to_numpy(dtype=float)
    if (values < 0).any():
        row, col = np.argwhere(values < 0)[0]
        raise SchemaError(
            f"Negative count for gene {numeric.index[row]!r} in sample "
            f"{numeric.columns[col]!r}: {values[row, col]}"
        )

    if not np.array_equal(values, np.round(values)):
        row, col = np.argwhere(values != np.round(values))[0]
        raise SchemaError(
            f"Fractional count for gene {numeric.index[row]!r} in sample "
            f"{numeric.columns[col]!r}: {values[row, col]}"
        )

    counts = numeric.astype(np.int64)
    counts.index.name = "gene_id"
    counts.columns.name = None
    return counts


def load_counts(path: Union[str, Path], sep: str = ",") -> pd.DataFrame:
    """Read a genes x samples count matrix"""
    counts = validate_counts(_read_table(path, sep, "count matrix"))
    logger.info(f"Loaded count matrix {path}: {counts.shape[0]} genes x {counts.shape[1]} samples")
    return counts


def _find_column(table: pd.DataFrame, name: str) -> str:
    matches = [col for col in table.columns if col.lower() == name.lower()]
    if not matches:
        raise SchemaError(
            f"Design table has no {name!r} column (columns: {list(table.columns)})"
        )
    return matches[0]


def _coerce_levels(
    values: pd.Series, mapping: Dict[str, str], levels: Tuple[str, ...], column: str
) -> pd.Categorical:
    normalised = values.astype(str).str.strip().str.lower()
    mapped = normalised.map(mapping)

    unknown = sorted(values[mapped.isna()].astype(str).unique())
    if unknown:
        raise SchemaError(
            f"Unrecognized {column} values {unknown}; expected one of {list(levels)}"
        )

    return pd.Categorical(mapped, categories=list(levels))


def build_design(
    table: pd.DataFrame,
    treatment_column: str = "Treatment",
    sequencing_column: str = "Sequencing",
    reference_level: str = "untreated",
    treated_level: str = "treated",
) -> SampleDesign:
    """Turn a raw design table into a SampleDesign with fixed categories"""
    treatment_col = _find_column(table, treatment_column)
    sequencing_col = _find_column(table, sequencing_column)

    treatment_levels = (reference_level.lower(), treated_level.lower())
    design = pd.DataFrame(
        {
            "sequencing": _coerce_levels(
                table[sequencing_col], SEQUENCING_ALIASES, SEQUENCING_LEVELS, sequencing_col
            ),
            "treatment": _coerce_levels(
                table[treatment_col],
                {level: level for level in treatment_levels},
                treatment_levels,
                treatment_col,
            ),
        },
        index=pd.Index(table.index, name="sample_id"),
    )

    return SampleDesign(
        table=design,
        reference_level=treatment_levels[0],
        treated_level=treatment_levels[1],
    )


def load_design(
    path: Union[str, Path],
    sep: str = ",",
    treatment_column: str = "Treatment",
    sequencing_column: str = "Sequencing",
    reference_level: str = "untreated",
    treated_level: str = "treated",
) -> SampleDesign:
    """Read the sample design table"""
    design = build_design(
        _read_table(path, sep, "design table"),
        treatment_column=treatment_column,
        sequencing_column=sequencing_column,
        reference_level=reference_level,
        treated_level=treated_level,
    )

    sizes = design.group_sizes()
    logger.info(
        f"Loaded design {path}: {len(design)} samples "
        + ", ".join(f"{level}={n}" for level, n in sizes.items())
    )
    return design


def align_samples(counts: pd.DataFrame, design: SampleDesign) -> pd.DataFrame:
    """
    Reorder count columns into design order

    Every design sample must be present in the count matrix. Count columns the
    design does not mention are dropped with a warning.
    """
    missing = [sample for sample in design.samples if sample not in counts.columns]
    if missing:
        raise SchemaError(f"Samples in design table but not in count matrix: {missing}")

    extra = [sample for sample in counts.columns if sample not in design.table.index]
    if extra:
        logger.warning(f"Dropping count columns absent from the design table: {extra}")

    return counts.loc[:, design.samples]


def load_inputs(
    counts_path: Union[str, Path],
    design_path: Union[str, Path],
    sep: str = ",",
    **design_kwargs,
) -> Tuple[pd.DataFrame, SampleDesign]:
    """Load and align the count matrix and design table"""
    design = load_design(design_path, sep=sep, **design_kwargs)
    counts = load_counts(counts_path, sep=sep)
    return align_samples(counts, design), design
